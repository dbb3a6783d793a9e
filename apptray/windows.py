#===============================================================================
#  Apps_To_Tray | windows.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-10
#  Last Update : 2026-02-11
#
#  Summary
#  -------
#  The window backend seam. The orchestrator only talks to WindowBackend;
#  Win32Backend (win_utils.py) does the real work on Windows, NullBackend
#  stands in everywhere else.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import os
import sys
from typing import List, Optional

from .models import StartStyle, WindowInfo


class ElevationError(RuntimeError):
    """Elevation was declined, failed, or is not available on this platform."""


class WindowBackend:
    """Everything the orchestrator needs from the OS windowing API.

    Action methods return True when the request was issued without an API
    error. That is not proof the window obeyed; callers settle-check.
    """

    def enum_windows(self, include_hidden: bool = False) -> List[WindowInfo]:
        raise NotImplementedError

    def get_window(self, hwnd: int) -> Optional[WindowInfo]:
        """Fresh snapshot of `hwnd`, or None once the handle is gone."""
        raise NotImplementedError

    def is_window(self, hwnd: int) -> bool:
        return self.get_window(hwnd) is not None

    def show(self, hwnd: int) -> bool:
        raise NotImplementedError

    def hide(self, hwnd: int) -> bool:
        raise NotImplementedError

    def restore(self, hwnd: int) -> bool:
        raise NotImplementedError

    def minimize(self, hwnd: int) -> bool:
        raise NotImplementedError

    def syscommand_minimize(self, hwnd: int) -> bool:
        raise NotImplementedError

    def force_minimize(self, hwnd: int) -> bool:
        raise NotImplementedError

    def close(self, hwnd: int) -> bool:
        raise NotImplementedError

    def is_elevated(self) -> bool:
        raise NotImplementedError

    def run_elevated(self, path: str, args: str, style: StartStyle, cwd: Optional[str] = None) -> None:
        """Start `path` through the consent prompt. Raises ElevationError."""
        raise NotImplementedError


class NullBackend(WindowBackend):
    """No windowing API: every app ends in the 'no window' state."""

    def enum_windows(self, include_hidden: bool = False) -> List[WindowInfo]:
        return []

    def get_window(self, hwnd: int) -> Optional[WindowInfo]:
        return None

    def show(self, hwnd: int) -> bool:
        return False

    hide = restore = minimize = syscommand_minimize = force_minimize = close = show

    def is_elevated(self) -> bool:
        geteuid = getattr(os, "geteuid", None)
        return bool(geteuid and geteuid() == 0)

    def run_elevated(self, path: str, args: str, style: StartStyle, cwd: Optional[str] = None) -> None:
        raise ElevationError(f"elevated launch is not supported on {sys.platform}")


def get_backend() -> WindowBackend:
    if sys.platform == "win32":
        from .win_utils import Win32Backend
        return Win32Backend()
    return NullBackend()
