#===============================================================================
#  Apps_To_Tray | launcher.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-10
#  Last Update : 2026-02-11
#
#  Summary
#  -------
#  Launch phase: start one configured application with the requested
#  initial show-state, output redirection and elevation, and hand back
#  its pid. Failures are logged per app and never abort the batch.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Optional

from .config import Timings, resolve_executable
from .launch_log import LaunchLog
from .models import AppLaunchSpec, LaunchedProcess, StartStyle, split_args
from .processes import find_spawned_process, image_name, snapshot_pids
from .windows import ElevationError, WindowBackend

# STARTUPINFO.wShowWindow values
_SW_HIDE = 0
_SW_SHOWMINNOACTIVE = 7


class LaunchError(RuntimeError):
    pass


def args_to_string(args) -> str:
    if isinstance(args, list):
        return subprocess.list2cmdline([str(a) for a in args])
    return str(args or "")


def _startupinfo(style: StartStyle):
    if os.name != "nt" or style is StartStyle.NORMAL:
        return None
    si = subprocess.STARTUPINFO()
    si.dwFlags |= subprocess.STARTF_USESHOWWINDOW
    si.wShowWindow = _SW_HIDE if style is StartStyle.HIDDEN else _SW_SHOWMINNOACTIVE
    return si


def _spawn(spec: AppLaunchSpec, exe: str) -> int:
    out = subprocess.DEVNULL if spec.redirect_output else None
    try:
        proc = subprocess.Popen(
            [exe, *split_args(spec.args)],
            cwd=str(Path(exe).parent),
            stdin=subprocess.DEVNULL,
            stdout=out,
            stderr=out,
            startupinfo=_startupinfo(spec.start_style),
        )
    except (OSError, ValueError) as e:
        # ValueError: unbalanced quotes in Args or a NUL byte in argv
        raise LaunchError(f"spawn failed: {e}") from e
    # Only the pid is kept. On Windows dropping the Popen closes its process
    # handle; on POSIX Popen.__del__ parks a still-running child in
    # subprocess._active so a later Popen can reap it.
    pid = proc.pid
    del proc
    return pid


def _spawn_elevated(
    spec: AppLaunchSpec,
    exe: str,
    backend: WindowBackend,
    log: LaunchLog,
    timings: Timings,
) -> LaunchedProcess:
    name = spec.display_name
    image = image_name(exe)
    if spec.redirect_output:
        log.warn("output redirection is not available through the elevation prompt; ignored", app=name)

    before = snapshot_pids(image)
    try:
        backend.run_elevated(exe, args_to_string(spec.args), spec.start_style, cwd=str(Path(exe).parent))
    except ElevationError as e:
        raise LaunchError(str(e)) from e

    log.info(f"elevation requested, waiting up to {timings.elevation_timeout_s:g}s for {image}", app=name)
    found = find_spawned_process(
        image,
        before,
        parent_pid=os.getpid(),
        timeout_s=timings.elevation_timeout_s,
        poll_ms=timings.elevation_poll_ms,
    )
    if not found:
        raise LaunchError(f"elevated process {image} did not appear within {timings.elevation_timeout_s:g}s")
    pid, how = found
    return LaunchedProcess(spec=spec, pid=pid, image_name=image, attributed_by=how)


def launch_app(
    spec: AppLaunchSpec,
    backend: WindowBackend,
    log: LaunchLog,
    timings: Optional[Timings] = None,
) -> Optional[LaunchedProcess]:
    """Start one app. Returns None (after logging) when it could not be started."""
    timings = timings or Timings()
    name = spec.display_name
    try:
        exe = resolve_executable(spec.path)
        if not exe:
            raise LaunchError(f"executable not found: {spec.path}")

        if spec.run_as_admin and not backend.is_elevated():
            launched = _spawn_elevated(spec, exe, backend, log, timings)
        else:
            launched = LaunchedProcess(spec=spec, pid=_spawn(spec, exe), image_name=image_name(exe))
    except LaunchError as e:
        log.error(f"launch failed: {e}", app=name)
        return None

    log.info(
        f"launched pid={launched.pid} ({launched.image_name}, style={spec.start_style.value}, "
        f"pid via {launched.attributed_by})",
        app=name,
    )
    return launched
