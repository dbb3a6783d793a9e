#===============================================================================
#  Apps_To_Tray | discovery.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-10
#  Last Update : 2026-02-11
#
#  Summary
#  -------
#  Window discovery: find the top-level window a launched app ended up with.
#
#  Notes
#  -----
#  - Many apps start a short-lived launcher that exits after spawning the
#    real UI process, so matching only the original pid is not enough.
#    After a grace period we widen to the same image name and to the
#    optional ProcessNameRegex / WindowTitleRegex matchers.
#  - "No window" is a valid answer (tray agents, services, CLI tools).
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import re
import time
from typing import Callable, List, Optional

from .config import Timings
from .constants import SKIP_WINDOW_CLASSES
from .models import LaunchedProcess, StartStyle, WindowInfo
from .processes import is_alive, same_image
from .windows import WindowBackend


def _now_ms() -> int:
    return int(time.monotonic() * 1000)


def _pick(windows: List[WindowInfo]) -> Optional[WindowInfo]:
    """Prefer a window with a title; fall back to the first untitled one."""
    for w in windows:
        if w.title.strip():
            return w
    return windows[0] if windows else None


def candidate_windows(backend: WindowBackend, include_hidden: bool = False) -> List[WindowInfo]:
    return [
        w for w in backend.enum_windows(include_hidden=include_hidden)
        if w.class_name not in SKIP_WINDOW_CLASSES
    ]


def _direct_match(windows: List[WindowInfo], proc: LaunchedProcess) -> Optional[WindowInfo]:
    """Visible windows of the launched pid first.

    An app started with StartStyle=Hidden never shows a window, so for those
    a titled hidden window of the same pid is accepted too. Other apps keep
    hidden helper windows around before their main window appears.
    """
    own = [w for w in windows if w.pid == proc.pid]
    hit = _pick([w for w in own if w.visible])
    if hit or proc.spec.start_style is not StartStyle.HIDDEN:
        return hit
    for w in own:
        if w.title.strip():
            return w
    return None


def widened_matches(windows: List[WindowInfo], proc: LaunchedProcess) -> List[WindowInfo]:
    spec = proc.spec
    name_rx = re.compile(spec.process_name_regex) if spec.process_name_regex else None
    title_rx = re.compile(spec.window_title_regex) if spec.window_title_regex else None

    out: List[WindowInfo] = []
    for w in windows:
        if w.pid == proc.pid:
            continue
        if w.process_name and same_image(w.process_name, proc.image_name):
            out.append(w)
        elif name_rx and w.process_name and name_rx.search(w.process_name):
            out.append(w)
        elif title_rx and w.title and title_rx.search(w.title):
            out.append(w)
    return out


def find_window(
    proc: LaunchedProcess,
    backend: WindowBackend,
    timings: Optional[Timings] = None,
    alive: Callable[[Optional[int]], bool] = is_alive,
) -> Optional[WindowInfo]:
    """Poll until a window for `proc` shows up or its TimeoutMs runs out."""
    timings = timings or Timings()
    start = _now_ms()
    deadline = start + proc.spec.timeout_ms
    poll_s = max(0.01, timings.discovery_poll_ms / 1000.0)

    while True:
        windows = candidate_windows(backend, include_hidden=True)

        hit = _direct_match(windows, proc)
        if hit:
            return hit

        # A launcher that already exited will never own the window
        if _now_ms() - start >= timings.grace_ms or not alive(proc.pid):
            hit = _pick(widened_matches([w for w in windows if w.visible], proc))
            if hit:
                return hit

        remaining = deadline - _now_ms()
        if remaining <= 0:
            return None
        time.sleep(min(poll_s, remaining / 1000.0))
