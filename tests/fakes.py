"""Scripted stand-ins for the window API and the launcher."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from apptray.models import LaunchedProcess, StartStyle, WindowInfo
from apptray.processes import image_name
from apptray.windows import ElevationError, WindowBackend


@dataclass
class FakeWindow:
    hwnd: int
    pid: int
    title: str = "Main"
    class_name: str = "AppWindow"
    process_name: str = "app.exe"
    visible: bool = True
    minimized: bool = False
    destroyed: bool = False
    appear_at: float = 0.0               # time.monotonic() after which it is enumerable
    ignores: Set[str] = field(default_factory=set)   # backend calls with no effect
    replaced_by_pid: Optional[int] = None            # handle re-owned after any action

    def snapshot(self) -> WindowInfo:
        return WindowInfo(
            hwnd=self.hwnd,
            pid=self.pid,
            title=self.title,
            class_name=self.class_name,
            process_name=self.process_name,
            visible=self.visible,
            minimized=self.minimized,
        )


class FakeBackend(WindowBackend):
    def __init__(self, windows: Optional[List[FakeWindow]] = None, elevated: bool = False):
        self.windows: Dict[int, FakeWindow] = {w.hwnd: w for w in (windows or [])}
        self.elevated = elevated
        self.calls: List[Tuple[str, int, float]] = []
        self.enum_count = 0
        self.elevated_requests: List[Tuple[str, str, StartStyle]] = []
        self._lock = threading.Lock()

    def add(self, window: FakeWindow) -> FakeWindow:
        with self._lock:
            self.windows[window.hwnd] = window
        return window

    def calls_for(self, hwnd: int) -> List[str]:
        return [name for name, h, _ in self.calls if h == hwnd]

    def enum_windows(self, include_hidden: bool = False) -> List[WindowInfo]:
        now = time.monotonic()
        with self._lock:
            self.enum_count += 1
            return [
                w.snapshot() for w in self.windows.values()
                if not w.destroyed and w.appear_at <= now and (include_hidden or w.visible)
            ]

    def get_window(self, hwnd: int) -> Optional[WindowInfo]:
        with self._lock:
            w = self.windows.get(hwnd)
            if w is None or w.destroyed:
                return None
            return w.snapshot()

    def _act(self, name: str, hwnd: int) -> Optional[FakeWindow]:
        with self._lock:
            self.calls.append((name, hwnd, time.monotonic()))
            w = self.windows.get(hwnd)
            if w is None or w.destroyed or name in w.ignores:
                return None
            if w.replaced_by_pid is not None:
                w.pid = w.replaced_by_pid
                return None
            return w

    def show(self, hwnd: int) -> bool:
        w = self._act("show", hwnd)
        if w:
            w.visible = True
        return True

    def hide(self, hwnd: int) -> bool:
        w = self._act("hide", hwnd)
        if w:
            w.visible = False
        return True

    def restore(self, hwnd: int) -> bool:
        w = self._act("restore", hwnd)
        if w:
            w.visible = True
            w.minimized = False
        return True

    def _minimize(self, name: str, hwnd: int) -> bool:
        w = self._act(name, hwnd)
        if w:
            w.minimized = True
        return True

    def minimize(self, hwnd: int) -> bool:
        return self._minimize("minimize", hwnd)

    def syscommand_minimize(self, hwnd: int) -> bool:
        return self._minimize("syscommand_minimize", hwnd)

    def force_minimize(self, hwnd: int) -> bool:
        return self._minimize("force_minimize", hwnd)

    def close(self, hwnd: int) -> bool:
        w = self._act("close", hwnd)
        if w:
            w.destroyed = True
        return True

    def is_elevated(self) -> bool:
        return self.elevated

    def run_elevated(self, path: str, args: str, style: StartStyle, cwd: Optional[str] = None) -> None:
        self.elevated_requests.append((path, args, style))


class DecliningBackend(FakeBackend):
    def run_elevated(self, path: str, args: str, style: StartStyle, cwd: Optional[str] = None) -> None:
        raise ElevationError("elevation declined by the user")


class FakeLauncher:
    """Hands out pids from a name -> pid table; unknown paths fail to launch."""

    def __init__(self, pids: Dict[str, int]):
        self.pids = pids
        self.launched: List[str] = []

    def __call__(self, spec, backend, log, timings) -> Optional[LaunchedProcess]:
        pid = self.pids.get(spec.path)
        if pid is None:
            log.error(f"launch failed: executable not found: {spec.path}", app=spec.display_name)
            return None
        self.launched.append(spec.path)
        return LaunchedProcess(spec=spec, pid=pid, image_name=image_name(spec.path))


class FakeProcesses:
    """Liveness table used as the `alive` callable."""

    def __init__(self, alive_pids=()):
        self.alive_pids = set(alive_pids)

    def __call__(self, pid) -> bool:
        return pid in self.alive_pids
