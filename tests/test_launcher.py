import os
import subprocess
import sys

import psutil
import pytest

from apptray.config import Timings
from apptray.launch_log import MemoryLog
from apptray.launcher import args_to_string, launch_app, split_args
from apptray.models import AppLaunchSpec, StartStyle
from apptray.processes import image_name, is_alive

from fakes import DecliningBackend, FakeBackend

SLEEPER = '-c "import time; time.sleep(5)"'


@pytest.fixture
def reap():
    pids = []
    yield pids
    for pid in pids:
        try:
            p = psutil.Process(pid)
            p.kill()
            p.wait(timeout=5)
        except psutil.Error:
            pass


def test_split_args():
    assert split_args("") == []
    assert split_args("   ") == []
    assert split_args('--name "two words" -v') == ["--name", "two words", "-v"]
    assert split_args(["--a", "b c"]) == ["--a", "b c"]


@pytest.mark.skipif(os.name != "nt", reason="Windows keeps backslashes literal")
def test_split_args_keeps_windows_paths():
    assert split_args(r'--dir C:\Tools\bin "C:\Program Files\x"') == ["--dir", r"C:\Tools\bin", r"C:\Program Files\x"]


def test_args_to_string():
    assert args_to_string("--a b") == "--a b"
    assert args_to_string(["--a", "b c"]) == subprocess.list2cmdline(["--a", "b c"])
    assert args_to_string(None) == ""


def test_missing_executable_is_logged_and_skipped(tmp_path):
    log = MemoryLog()
    spec = AppLaunchSpec(path=str(tmp_path / "missing.exe"), name="Ghost")
    assert launch_app(spec, FakeBackend(), log) is None
    assert any("[ERROR] [Ghost] launch failed: executable not found" in line for line in log.lines)


@pytest.mark.parametrize("args", ['-c "print(1)', ["-c", "x\x00y"]])
def test_unusable_args_are_a_launch_failure(args):
    log = MemoryLog()
    spec = AppLaunchSpec(path=sys.executable, name="BadArgs", args=args)
    assert launch_app(spec, FakeBackend(), log) is None
    assert any("[ERROR] [BadArgs] launch failed: spawn failed" in line for line in log.lines)


def test_launches_real_process_and_keeps_only_the_pid(reap):
    log = MemoryLog()
    spec = AppLaunchSpec(path=sys.executable, name="Sleeper", args=SLEEPER)
    launched = launch_app(spec, FakeBackend(), log)
    assert launched is not None
    reap.append(launched.pid)

    assert launched.spec is spec
    assert launched.attributed_by == "direct"
    assert launched.image_name == image_name(os.path.realpath(sys.executable))
    assert is_alive(launched.pid)
    assert any(f"launched pid={launched.pid}" in line for line in log.lines)


def test_already_elevated_session_spawns_directly(reap):
    backend = FakeBackend(elevated=True)
    spec = AppLaunchSpec(path=sys.executable, args=SLEEPER, run_as_admin=True)
    launched = launch_app(spec, backend, MemoryLog())
    assert launched is not None
    reap.append(launched.pid)
    assert backend.elevated_requests == []
    assert launched.attributed_by == "direct"


def test_declined_elevation_is_a_launch_failure():
    log = MemoryLog()
    spec = AppLaunchSpec(path=sys.executable, name="Admin", run_as_admin=True, redirect_output=False)
    assert launch_app(spec, DecliningBackend(), log) is None
    assert any("declined" in line and "[ERROR]" in line for line in log.lines)


def test_elevated_process_not_found_within_ceiling():
    log = MemoryLog()
    backend = FakeBackend()
    spec = AppLaunchSpec(path=sys.executable, name="Admin", args="-V", run_as_admin=True)
    timings = Timings(elevation_timeout_s=0.3, elevation_poll_ms=50)

    assert launch_app(spec, backend, log, timings) is None
    assert len(backend.elevated_requests) == 1
    path, args, style = backend.elevated_requests[0]
    assert path == os.path.realpath(sys.executable)
    assert args == "-V"
    assert style is StartStyle.NORMAL
    # redirection cannot pass through the consent prompt
    assert any("[WARN]" in line and "redirection" in line for line in log.lines)
    assert any("did not appear" in line for line in log.lines)


class SpawningBackend(FakeBackend):
    """Pretends the consent prompt was accepted by starting the process itself."""

    def __init__(self):
        super().__init__()
        self.spawned = []

    def run_elevated(self, path, args, style, cwd=None):
        super().run_elevated(path, args, style, cwd)
        proc = subprocess.Popen([path, *split_args(args)], stdin=subprocess.DEVNULL,
                                stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        self.spawned.append(proc.pid)


def test_elevated_process_is_attributed_by_polling(reap):
    backend = SpawningBackend()
    spec = AppLaunchSpec(path=sys.executable, args=SLEEPER, run_as_admin=True, redirect_output=False)
    timings = Timings(elevation_timeout_s=5, elevation_poll_ms=50)

    launched = launch_app(spec, backend, MemoryLog(), timings)
    reap.extend(backend.spawned)
    assert launched is not None
    assert launched.pid == backend.spawned[0]
    assert launched.attributed_by in ("parent", "name")
