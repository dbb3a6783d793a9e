#===============================================================================
#  Apps_To_Tray | processes.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-10
#  Last Update : 2026-02-11
#
#  Summary
#  -------
#  Process-table helpers (psutil): liveness, name lookups, and attribution of
#  a process started out-of-band (elevated) back to our launch.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import time
from pathlib import PureWindowsPath
from typing import FrozenSet, List, Optional, Set, Tuple

import psutil


def _now_ms() -> int:
    return int(time.monotonic() * 1000)


def image_name(path: str) -> str:
    """'C:\\Tools\\App.EXE' -> 'app.exe'"""
    return PureWindowsPath(path).name.lower()


def same_image(name: str, target: str) -> bool:
    name = (name or "").lower()
    target = (target or "").lower()
    if name == target:
        return True
    # POSIX image names carry no .exe suffix
    return bool(name) and target.endswith(".exe") and name == target[: -len(".exe")]


def is_alive(pid: Optional[int]) -> bool:
    if not pid:
        return False
    try:
        p = psutil.Process(pid)
        return p.is_running() and p.status() != psutil.STATUS_ZOMBIE
    except psutil.Error:
        return False


def process_name(pid: Optional[int]) -> str:
    if not pid:
        return ""
    try:
        return psutil.Process(pid).name() or ""
    except psutil.Error:
        return ""


def pids_with_name(name: str) -> Set[int]:
    target = (name or "").lower()
    found: Set[int] = set()
    for p in psutil.process_iter(attrs=["pid", "name"]):
        if same_image(p.info.get("name") or "", target):
            found.add(p.info["pid"])
    return found


def snapshot_pids(name: str) -> FrozenSet[int]:
    """Baseline of existing instances, taken right before a launch."""
    return frozenset(pids_with_name(name))


def descendants(pid: int) -> List[psutil.Process]:
    try:
        return psutil.Process(pid).children(recursive=True)
    except psutil.Error:
        return []


def find_spawned_process(
    name: str,
    before: FrozenSet[int],
    parent_pid: int,
    timeout_s: float = 30.0,
    poll_ms: int = 300,
    cross_check_every: int = 3,
) -> Optional[Tuple[int, str]]:
    """Locate a process that appeared after an out-of-band launch.

    Two independent heuristics:
      - "name":   a new instance of the same image that was not in `before`
      - "parent": a descendant of `parent_pid` with the same image name,
                  looked up every `cross_check_every` polls

    A pid both heuristics agree on wins. Otherwise the first candidate seen
    is returned with the heuristic that produced it. None after the timeout.
    """
    target = (name or "").lower()
    deadline = _now_ms() + int(max(0.0, timeout_s) * 1000)
    polls = 0

    while True:
        new_by_name = sorted(pids_with_name(target) - set(before))

        by_parent: List[int] = []
        if polls % max(1, cross_check_every) == 0:
            for child in descendants(parent_pid):
                try:
                    if same_image(child.name(), target):
                        by_parent.append(child.pid)
                except psutil.Error:
                    continue

        agreed = [pid for pid in by_parent if pid in new_by_name]
        if agreed:
            return agreed[0], "parent"
        if by_parent:
            return by_parent[0], "parent"
        if new_by_name:
            return new_by_name[0], "name"

        if _now_ms() >= deadline:
            return None
        polls += 1
        time.sleep(max(0.02, poll_ms / 1000.0))
