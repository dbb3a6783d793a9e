import sys
import time

import psutil

from apptray.config import Timings
from apptray.launch_log import MemoryLog
from apptray.models import AppLaunchSpec, StartAction
from apptray.orchestrator import manage_app, start_apps_to_tray
from apptray.windows import NullBackend

from fakes import FakeBackend, FakeLauncher, FakeProcesses, FakeWindow

FAST = Timings(grace_ms=50, discovery_poll_ms=10, settle_poll_ms=10, minimize_check_ms=30, global_timeout_s=10)


def spec(path, **kw):
    kw.setdefault("timeout_ms", 500)
    kw.setdefault("wait_ms", 500)
    return AppLaunchSpec(path=path, **kw)


def test_none_action_never_discovers_or_acts():
    backend = FakeBackend([FakeWindow(hwnd=1, pid=10)])
    report = start_apps_to_tray(
        [spec("a.exe", start_action=StartAction.NONE)],
        backend=backend, log=MemoryLog(), timings=FAST,
        launcher=FakeLauncher({"a.exe": 10}), alive=FakeProcesses({10}),
    )
    assert report.ok
    assert report.outcomes[0].message == "left as launched"
    assert backend.enum_count == 0
    assert backend.calls == []


def test_missing_executable_does_not_stop_the_batch():
    backend = FakeBackend([
        FakeWindow(hwnd=1, pid=10, process_name="a.exe"),
        FakeWindow(hwnd=3, pid=30, process_name="c.exe"),
    ])
    launcher = FakeLauncher({"a.exe": 10, "c.exe": 30})
    log = MemoryLog()
    report = start_apps_to_tray(
        [spec("a.exe"), spec("missing.exe"), spec("c.exe")],
        backend=backend, log=log, timings=FAST, launcher=launcher, alive=FakeProcesses({10, 30}),
    )

    assert launcher.launched == ["a.exe", "c.exe"]
    a, missing, c = report.outcomes
    assert missing.name == "missing" and not missing.launched
    assert a.succeeded and a.action == "Hide"
    assert c.succeeded and c.action == "Hide"
    assert not report.ok
    assert report.with_issues == ["missing"]
    assert backend.calls_for(1) == ["hide"]
    assert backend.calls_for(3) == ["hide"]


def test_bad_args_on_one_app_do_not_stop_the_next():
    log = MemoryLog()
    report = start_apps_to_tray(
        [
            AppLaunchSpec(path=sys.executable, name="Bad", args='-c "print(1)'),
            AppLaunchSpec(path=sys.executable, name="Nul", args=["-c", "x\x00y"]),
            AppLaunchSpec(path=sys.executable, name="Good", args="-V", timeout_ms=100),
        ],
        backend=NullBackend(), log=log, timings=FAST,
    )
    bad, nul, good = report.outcomes
    assert not bad.launched and bad.message == "launch failed"
    assert not nul.launched
    assert good.launched and good.succeeded
    assert report.with_issues == ["Bad", "Nul"]


def test_launcher_exception_is_contained_to_its_app():
    def launcher(spec, backend, log, timings):
        if spec.path == "boom.exe":
            raise RuntimeError("kaboom")
        return FakeLauncher({"a.exe": 10})(spec, backend, log, timings)

    backend = FakeBackend([FakeWindow(hwnd=1, pid=10, process_name="a.exe")])
    log = MemoryLog()
    report = start_apps_to_tray(
        [spec("boom.exe"), spec("a.exe")],
        backend=backend, log=log, timings=FAST, launcher=launcher, alive=FakeProcesses({10}),
    )
    boom, a = report.outcomes
    assert not boom.launched
    assert a.succeeded
    assert any("[ERROR] [boom] launch failed: kaboom" in line for line in log.lines)


def test_process_exiting_without_window_is_a_success():
    report = start_apps_to_tray(
        [spec("a.exe", timeout_ms=150)],
        backend=FakeBackend(), log=MemoryLog(), timings=FAST,
        launcher=FakeLauncher({"a.exe": 10}), alive=FakeProcesses(),
    )
    outcome = report.outcomes[0]
    assert outcome.succeeded
    assert outcome.hwnd is None
    assert "no window" in outcome.message
    assert report.ok


def test_resisted_hide_is_reported_with_a_warning():
    backend = FakeBackend([FakeWindow(hwnd=1, pid=10, ignores={"hide"})])
    log = MemoryLog()
    report = start_apps_to_tray(
        [spec("a.exe", start_action=StartAction.HIDE, wait_ms=200)],
        backend=backend, log=log, timings=FAST,
        launcher=FakeLauncher({"a.exe": 10}), alive=FakeProcesses({10}),
    )
    outcome = report.outcomes[0]
    assert not outcome.succeeded
    assert outcome.state == "Visible"
    assert any("[WARN] [a] could not hide within 200 ms" in line for line in log.lines)


def test_slow_window_does_not_hold_up_a_fast_one():
    slow_at = time.monotonic() + 0.1
    backend = FakeBackend([
        FakeWindow(hwnd=1, pid=10, process_name="slow.exe", appear_at=slow_at),
        FakeWindow(hwnd=2, pid=20, process_name="fast.exe"),
    ])
    report = start_apps_to_tray(
        [spec("slow.exe", timeout_ms=2000), spec("fast.exe", timeout_ms=2000)],
        backend=backend, log=MemoryLog(), timings=FAST,
        launcher=FakeLauncher({"slow.exe": 10, "fast.exe": 20}), alive=FakeProcesses({10, 20}),
    )
    assert report.ok
    assert report.by_name("slow").hwnd == 1
    assert report.by_name("fast").hwnd == 2

    hide_at = {hwnd: ts for name, hwnd, ts in backend.calls if name == "hide"}
    assert hide_at[2] < slow_at
    assert hide_at[1] >= slow_at


def test_global_ceiling_marks_unfinished_units():
    timings = Timings(grace_ms=50, discovery_poll_ms=10, settle_poll_ms=10, global_timeout_s=0.2)
    log = MemoryLog()
    start = time.monotonic()
    report = start_apps_to_tray(
        [spec("a.exe", timeout_ms=1500)],
        backend=FakeBackend(), log=log, timings=timings,
        launcher=FakeLauncher({"a.exe": 10}), alive=FakeProcesses({10}),
    )
    assert time.monotonic() - start < 1.0
    outcome = report.outcomes[0]
    assert outcome.launched and outcome.timed_out
    assert "completed with issues" in outcome.message
    assert not report.ok


class ExplodingBackend(FakeBackend):
    def enum_windows(self, include_hidden=False):
        raise RuntimeError("window station unavailable")


def test_worker_error_is_contained_to_its_app():
    report = start_apps_to_tray(
        [spec("a.exe")],
        backend=ExplodingBackend(), log=MemoryLog(), timings=FAST,
        launcher=FakeLauncher({"a.exe": 10}), alive=FakeProcesses({10}),
    )
    outcome = report.outcomes[0]
    assert outcome.launched and not outcome.succeeded
    assert "window station unavailable" in outcome.message


def test_nothing_launched():
    log = MemoryLog()
    report = start_apps_to_tray([spec("gone.exe")], backend=FakeBackend(), log=log, timings=FAST,
                                launcher=FakeLauncher({}))
    assert not report.ok
    assert any("nothing was launched" in line for line in log.lines)


def test_manage_app_reports_window_details():
    from apptray.models import LaunchedProcess
    backend = FakeBackend([FakeWindow(hwnd=4, pid=10, title="Editor")])
    proc = LaunchedProcess(spec=spec("a.exe", start_action=StartAction.MINIMIZE), pid=10, image_name="a.exe")
    outcome = manage_app(proc, backend, MemoryLog(), FAST, FakeProcesses({10}))
    assert outcome.succeeded
    assert outcome.window_title == "Editor"
    assert outcome.action == "Minimize"


def test_real_launch_with_headless_backend(tmp_path):
    log = MemoryLog(tmp_path / "apps.log")
    report = start_apps_to_tray(
        [
            AppLaunchSpec(path=str(tmp_path / "missing.exe"), name="Missing"),
            AppLaunchSpec(path=sys.executable, name="Sleeper", args='-c "import time; time.sleep(3)"', timeout_ms=200),
        ],
        backend=NullBackend(), log=log, timings=FAST,
    )
    try:
        missing, sleeper = report.outcomes
        assert not missing.launched
        assert sleeper.launched and sleeper.succeeded
        assert "no window" in sleeper.message
        text = (tmp_path / "apps.log").read_text(encoding="utf-8")
        assert "[ERROR] [Missing]" in text
        assert "[INFO] [Sleeper] launched pid=" in text
    finally:
        for o in report.outcomes:
            if o.pid:
                try:
                    psutil.Process(o.pid).kill()
                except psutil.Error:
                    pass
