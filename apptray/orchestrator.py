#===============================================================================
#  Apps_To_Tray | orchestrator.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-10
#  Last Update : 2026-02-11
#
#  Summary
#  -------
#  Start-AppsToTray: launch every configured app one after the other, then
#  manage each app's window in its own worker thread (discovery -> plan ->
#  settle) under one global ceiling.
#
#  Notes
#  -----
#  - Launches are sequential so elevation prompts never stack up.
#  - Workers share nothing mutable; each gets its own LaunchedProcess.
#  - A worker still running at the ceiling is reported "completed with
#    issues". The app process itself is never stopped.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, List, Optional, Tuple

from .config import Timings
from .discovery import find_window
from .launch_log import LaunchLog
from .launcher import launch_app
from .models import AppLaunchSpec, AppOutcome, BatchReport, LaunchedProcess, StartAction
from .processes import is_alive
from .visibility import apply_plan
from .windows import WindowBackend, get_backend

Launcher = Callable[[AppLaunchSpec, WindowBackend, LaunchLog, Timings], Optional[LaunchedProcess]]


def manage_app(
    proc: LaunchedProcess,
    backend: WindowBackend,
    log: LaunchLog,
    timings: Timings,
    alive: Callable[[Optional[int]], bool] = is_alive,
) -> AppOutcome:
    """One unit of work: find the app's window and push it into the background."""
    spec = proc.spec
    name = spec.display_name
    outcome = AppOutcome(name=name, pid=proc.pid, launched=True)

    if spec.start_action is StartAction.NONE:
        outcome.succeeded = True
        outcome.message = "left as launched"
        return outcome

    window = find_window(proc, backend, timings, alive)
    if window is None:
        outcome.succeeded = True
        outcome.message = f"no window within {spec.timeout_ms} ms"
        log.info(outcome.message, app=name)
        return outcome

    outcome.hwnd = window.hwnd
    outcome.window_title = window.title
    log.info(f"window found hwnd={window.hwnd} pid={window.pid} title={window.title!r}", app=name)

    result = apply_plan(window, spec.start_action, backend, spec.wait_ms, timings, alive)
    outcome.state = result.state.value
    outcome.action = result.action
    outcome.succeeded = result.succeeded
    if result.succeeded:
        how = f"via {result.action}" if result.action else "without action"
        outcome.message = f"{result.state.value.lower()} {how}"
        log.info(outcome.message, app=name)
    else:
        outcome.message = f"could not hide within {spec.wait_ms} ms (state {result.state.value})"
        log.warn(outcome.message, app=name)
    return outcome


def start_apps_to_tray(
    specs: List[AppLaunchSpec],
    backend: Optional[WindowBackend] = None,
    log: Optional[LaunchLog] = None,
    timings: Optional[Timings] = None,
    launcher: Launcher = launch_app,
    alive: Callable[[Optional[int]], bool] = is_alive,
) -> BatchReport:
    backend = backend or get_backend()
    log = log or LaunchLog()
    timings = timings or Timings()
    report = BatchReport()

    # Phase 1: sequential launches
    launched: List[Tuple[int, LaunchedProcess]] = []   # (slot in report, process)
    for spec in specs:
        try:
            proc = launcher(spec, backend, log, timings)
        except Exception as e:
            # One app's launch must never stop the rest of the batch
            log.error(f"launch failed: {e}", app=spec.display_name)
            proc = None
        if proc is None:
            report.outcomes.append(AppOutcome(name=spec.display_name, message="launch failed"))
            continue
        launched.append((len(report.outcomes), proc))
        report.outcomes.append(AppOutcome(name=spec.display_name, pid=proc.pid, launched=True))

    if not launched:
        log.warn("nothing was launched")
        return report

    # Phase 2: one worker per launched app
    pool = ThreadPoolExecutor(max_workers=len(launched), thread_name_prefix="apptray")
    futures = {
        pool.submit(manage_app, proc, backend, log, timings, alive): (slot, proc)
        for slot, proc in launched
    }
    try:
        _, not_done = wait(futures, timeout=timings.global_timeout_s)
        for fut, (slot, proc) in futures.items():
            name = proc.spec.display_name
            if fut in not_done:
                report.outcomes[slot].timed_out = True
                report.outcomes[slot].message = f"completed with issues: still running after {timings.global_timeout_s:g}s"
                log.warn(report.outcomes[slot].message, app=name)
                continue
            try:
                report.outcomes[slot] = fut.result()
            except Exception as e:
                report.outcomes[slot].message = f"completed with issues: {e}"
                log.error(report.outcomes[slot].message, app=name)
    finally:
        # Stragglers finish their bounded poll loops on their own
        pool.shutdown(wait=False, cancel_futures=True)

    summary = "all apps handled" if report.ok else f"completed with issues: {', '.join(report.with_issues)}"
    log.info(summary)
    return report
