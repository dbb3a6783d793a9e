#===============================================================================
#  Apps_To_Tray | visibility.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-10
#  Last Update : 2026-02-11
#
#  Summary
#  -------
#  Window visibility state machine. A StartAction maps to an ordered plan of
#  primitive actions; each primitive is issued and then settle-checked until
#  the window is hidden/minimized, closed, or its process is gone.
#
#  Notes
#  -----
#  - Apps honour different minimize mechanisms, so MINIMIZE walks a list of
#    them and stops at the first one that sticks.
#  - Some apps only accept a minimize after being shown (SHOW_THEN_MINIMIZE).
#  - If the handle no longer resolves for the same pid after an action, the
#    app replaced its window (splash -> main) or exited: that is success.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from .config import Timings
from .models import StartAction, WindowInfo
from .processes import is_alive
from .windows import WindowBackend


class WindowState(str, Enum):
    VISIBLE = "Visible"
    HIDDEN = "Hidden"       # not visible, or minimized
    CLOSED = "Closed"       # handle gone / no longer owned by that pid
    GONE = "Gone"           # process exited


class Primitive(str, Enum):
    HIDE = "Hide"
    MINIMIZE = "Minimize"
    CLOSE = "Close"
    SHOW_THEN_MINIMIZE = "ShowThenMinimize"
    SHOW = "Show"
    RESTORE = "Restore"

    @classmethod
    def parse(cls, value: str) -> "Primitive":
        key = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        raise ValueError(f"Unknown window action {value!r}")


DOWN_STATES = (WindowState.HIDDEN, WindowState.CLOSED, WindowState.GONE)
UP_STATES = (WindowState.VISIBLE,)

# Hide is the catch-all at the end of every explicit plan
ACTION_PLANS: Dict[StartAction, Tuple[Primitive, ...]] = {
    StartAction.AUTO: (Primitive.HIDE, Primitive.MINIMIZE, Primitive.CLOSE),
    StartAction.HIDE: (Primitive.HIDE,),
    StartAction.MINIMIZE: (Primitive.MINIMIZE, Primitive.HIDE),
    StartAction.CLOSE: (Primitive.CLOSE, Primitive.HIDE),
    StartAction.SHOW_THEN_MINIMIZE: (Primitive.SHOW_THEN_MINIMIZE, Primitive.HIDE),
    StartAction.NONE: (),
}

# Backend calls per primitive, in the order they are tried
MECHANISMS: Dict[Primitive, Tuple[str, ...]] = {
    Primitive.HIDE: ("hide",),
    Primitive.MINIMIZE: ("minimize", "syscommand_minimize", "force_minimize"),
    Primitive.CLOSE: ("close",),
    Primitive.SHOW_THEN_MINIMIZE: ("show", "minimize", "syscommand_minimize"),
    Primitive.SHOW: ("show",),
    Primitive.RESTORE: ("restore",),
}

# Mechanisms after which a short success check is made before trying the next one
_CHECKED = {"minimize", "syscommand_minimize", "force_minimize"}


@dataclass(frozen=True)
class ActionResult:
    succeeded: bool
    action: Optional[str]
    state: WindowState


def _now_ms() -> int:
    return int(time.monotonic() * 1000)


def classify(
    window: WindowInfo,
    backend: WindowBackend,
    alive: Callable[[Optional[int]], bool] = is_alive,
) -> WindowState:
    if not alive(window.pid):
        return WindowState.GONE
    current = backend.get_window(window.hwnd)
    if current is None or current.pid != window.pid:
        return WindowState.CLOSED
    if not current.visible or current.minimized:
        return WindowState.HIDDEN
    return WindowState.VISIBLE


def settle(
    window: WindowInfo,
    backend: WindowBackend,
    want: Tuple[WindowState, ...],
    timeout_ms: int,
    poll_ms: int,
    alive: Callable[[Optional[int]], bool] = is_alive,
) -> WindowState:
    """Poll until the window reaches one of `want` or `timeout_ms` passes.

    Always checks at least once. Returns the last observed state.
    """
    deadline = _now_ms() + max(0, timeout_ms)
    poll_s = max(0.01, poll_ms / 1000.0)
    while True:
        state = classify(window, backend, alive)
        remaining = deadline - _now_ms()
        if state in want or remaining <= 0:
            return state
        time.sleep(min(poll_s, remaining / 1000.0))


def apply_primitive(
    window: WindowInfo,
    primitive: Primitive,
    backend: WindowBackend,
    want: Tuple[WindowState, ...],
    budget_ms: int,
    timings: Timings,
    alive: Callable[[Optional[int]], bool] = is_alive,
) -> None:
    """Issue the backend calls of one primitive.

    Checked mechanisms (the minimize family) get a short look at the result
    and stop the walk early once the window is down.
    """
    mechanisms = MECHANISMS[primitive]
    checked = [m for m in mechanisms if m in _CHECKED]
    check_ms = min(timings.minimize_check_ms, budget_ms // max(1, len(checked) + 1))

    for mech in mechanisms:
        getattr(backend, mech)(window.hwnd)
        if mech in _CHECKED and mech != mechanisms[-1]:
            if settle(window, backend, want, check_ms, timings.settle_poll_ms, alive) in want:
                return


def apply_plan(
    window: WindowInfo,
    action: StartAction,
    backend: WindowBackend,
    wait_ms: int,
    timings: Optional[Timings] = None,
    alive: Callable[[Optional[int]], bool] = is_alive,
) -> ActionResult:
    """Walk the plan for `action` until the window is down.

    The whole plan shares one `wait_ms` deadline: each remaining primitive
    gets an even share of what is left, so the walk never runs past it.
    """
    timings = timings or Timings()
    plan = ACTION_PLANS[action]

    state = classify(window, backend, alive)
    if not plan:
        return ActionResult(True, None, state)
    if state in (WindowState.CLOSED, WindowState.GONE):
        return ActionResult(True, None, state)

    deadline = _now_ms() + max(0, wait_ms)
    for i, primitive in enumerate(plan):
        remaining = deadline - _now_ms()
        if i > 0 and remaining <= 0:
            break
        last = i == len(plan) - 1
        share = max(0, remaining) // (len(plan) - i)
        slice_end = deadline if last else _now_ms() + share
        apply_primitive(window, primitive, backend, DOWN_STATES, share, timings, alive)
        state = settle(window, backend, DOWN_STATES, slice_end - _now_ms(), timings.settle_poll_ms, alive)
        if state in DOWN_STATES:
            return ActionResult(True, primitive.value, state)

    return ActionResult(False, None, state)


def set_window_state(
    window: WindowInfo,
    primitive: Primitive,
    backend: WindowBackend,
    wait_ms: int,
    timings: Optional[Timings] = None,
    alive: Callable[[Optional[int]], bool] = is_alive,
) -> ActionResult:
    """Apply one primitive to an existing window (no fallback plan)."""
    timings = timings or Timings()
    want = UP_STATES if primitive in (Primitive.SHOW, Primitive.RESTORE) else DOWN_STATES
    apply_primitive(window, primitive, backend, want, wait_ms, timings, alive)
    state = settle(window, backend, want, wait_ms, timings.settle_poll_ms, alive)
    return ActionResult(state in want, primitive.value, state)
