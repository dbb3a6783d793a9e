#===============================================================================
#  Apps_To_Tray | win_utils.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-10
#  Last Update : 2026-02-11
#
#  Summary
#  -------
#  Win32 implementation of the window backend (pywin32 + psutil):
#  top-level window enumeration, show-state changes, close requests and
#  elevated launches through the UAC consent prompt.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

from typing import Dict, List, Optional

import pywintypes
import win32api
import win32con
import win32gui
import win32process
from win32com.shell import shell

from .models import StartStyle, WindowInfo
from .processes import process_name
from .windows import ElevationError, WindowBackend

ERROR_CANCELLED = 1223   # user said "No" on the UAC prompt

SHOW_COMMANDS = {
    StartStyle.NORMAL: win32con.SW_SHOWNORMAL,
    StartStyle.MINIMIZED: win32con.SW_SHOWMINNOACTIVE,
    StartStyle.HIDDEN: win32con.SW_HIDE,
}


def _window_pid(hwnd: int) -> Optional[int]:
    try:
        _, pid = win32process.GetWindowThreadProcessId(hwnd)
        return pid or None
    except pywintypes.error:
        return None


def _snapshot(hwnd: int, names: Optional[Dict[int, str]] = None) -> Optional[WindowInfo]:
    try:
        if not win32gui.IsWindow(hwnd):
            return None
        title = win32gui.GetWindowText(hwnd) or ""
        cls = win32gui.GetClassName(hwnd) or ""
        visible = bool(win32gui.IsWindowVisible(hwnd))
        minimized = bool(win32gui.IsIconic(hwnd))
    except pywintypes.error:
        return None

    pid = _window_pid(hwnd)
    if names is not None and pid in names:
        proc = names[pid]
    else:
        proc = process_name(pid)
        if names is not None and pid:
            names[pid] = proc

    return WindowInfo(
        hwnd=hwnd,
        pid=pid,
        title=title,
        class_name=cls,
        process_name=proc,
        visible=visible,
        minimized=minimized,
    )


class Win32Backend(WindowBackend):

    def enum_windows(self, include_hidden: bool = False) -> List[WindowInfo]:
        handles: List[int] = []

        def _cb(hwnd, _):
            handles.append(hwnd)
            return True

        try:
            win32gui.EnumWindows(_cb, None)
        except pywintypes.error:
            # EnumWindows reports an error if a callback stops early; keep what we have
            pass

        names: Dict[int, str] = {}
        windows: List[WindowInfo] = []
        for hwnd in handles:
            info = _snapshot(hwnd, names)
            if info is None:
                continue
            if include_hidden or info.visible:
                windows.append(info)
        return windows

    def get_window(self, hwnd: int) -> Optional[WindowInfo]:
        return _snapshot(hwnd)

    def _show_window(self, hwnd: int, cmd: int) -> bool:
        try:
            win32gui.ShowWindow(hwnd, cmd)
            return True
        except pywintypes.error:
            return False

    def _post(self, hwnd: int, msg: int, wparam: int = 0, lparam: int = 0) -> bool:
        try:
            win32gui.PostMessage(hwnd, msg, wparam, lparam)
            return True
        except pywintypes.error:
            return False

    def show(self, hwnd: int) -> bool:
        return self._show_window(hwnd, win32con.SW_SHOW)

    def hide(self, hwnd: int) -> bool:
        return self._show_window(hwnd, win32con.SW_HIDE)

    def restore(self, hwnd: int) -> bool:
        return self._show_window(hwnd, win32con.SW_RESTORE)

    def minimize(self, hwnd: int) -> bool:
        return self._show_window(hwnd, win32con.SW_MINIMIZE)

    def syscommand_minimize(self, hwnd: int) -> bool:
        return self._post(hwnd, win32con.WM_SYSCOMMAND, win32con.SC_MINIMIZE, 0)

    def force_minimize(self, hwnd: int) -> bool:
        # Works even when the owning thread is not responding
        return self._show_window(hwnd, win32con.SW_FORCEMINIMIZE)

    def close(self, hwnd: int) -> bool:
        return self._post(hwnd, win32con.WM_CLOSE)

    def is_elevated(self) -> bool:
        try:
            return bool(shell.IsUserAnAdmin())
        except pywintypes.error:
            return False

    def run_elevated(self, path: str, args: str, style: StartStyle, cwd: Optional[str] = None) -> None:
        try:
            win32api.ShellExecute(0, "runas", path, args or None, cwd, SHOW_COMMANDS[style])
        except pywintypes.error as e:
            if e.winerror == ERROR_CANCELLED:
                raise ElevationError("elevation declined by the user") from e
            raise ElevationError(f"elevated launch failed: {e.strerror}") from e
