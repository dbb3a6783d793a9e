#===============================================================================
#  Apps_To_Tray | cli.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-10
#  Last Update : 2026-02-11
#
#  Summary
#  -------
#  Command-line front end:
#    run        launch a batch (apps.json and/or --app) and push it to the tray
#    set-state  hide/minimize/close/show windows of already running processes
#    windows    list top-level windows (diagnostics for the regex matchers)
#    init       write a sample apps.json
#    tray       system-tray front end (PySide6)
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .config import ConfigError, Timings, load_specs, sample_specs, save_specs, specs_from_paths
from .constants import APP_TITLE, CONFIG_FILE_NAME, DEFAULT_WAIT_MS, GLOBAL_TIMEOUT_S, SKIP_WINDOW_CLASSES
from .launch_log import LaunchLog
from .models import AppLaunchSpec, BatchReport, WindowInfo
from .orchestrator import start_apps_to_tray
from .processes import same_image
from .visibility import Primitive, set_window_state
from .windows import WindowBackend, get_backend


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="apps-to-tray", description=f"{APP_TITLE}: launch apps and send their windows to the background.")
    sub = p.add_subparsers(dest="command")

    run = sub.add_parser("run", help="launch apps and hide/minimize their windows")
    run.add_argument("-c", "--config", type=Path, help=f"JSON launch list (e.g. {CONFIG_FILE_NAME})")
    run.add_argument("--app", action="append", default=[], metavar="PATH", help="inline app to launch (repeatable)")
    run.add_argument("--args", default="", help="argument string for the inline --app entries")
    run.add_argument("--action", help="StartAction for inline entries (Auto, Hide, Minimize, Close, ShowThenMinimize, None)")
    run.add_argument("--style", help="StartStyle for inline entries (Normal, Minimized, Hidden)")
    run.add_argument("--log", type=Path, help="append-only log file")
    run.add_argument("--timeout-s", type=float, default=GLOBAL_TIMEOUT_S, help="global ceiling for window management")
    run.add_argument("-q", "--quiet", action="store_true", help="do not echo log lines")

    ss = sub.add_parser("set-state", help="apply a window action to running processes")
    ss.add_argument("action", help="Hide, Minimize, Close, ShowThenMinimize, Show or Restore")
    ss.add_argument("--pid", type=int, action="append", default=[], help="target process id (repeatable)")
    ss.add_argument("--name", action="append", default=[], help="target image name, e.g. notepad.exe (repeatable)")
    ss.add_argument("--wait-ms", type=int, default=DEFAULT_WAIT_MS)

    win = sub.add_parser("windows", help="list top-level windows")
    win.add_argument("--name", help="only windows of this image name")
    win.add_argument("--all", action="store_true", help="include hidden windows")

    init = sub.add_parser("init", help="write a sample launch list")
    init.add_argument("path", nargs="?", type=Path, default=Path(CONFIG_FILE_NAME))
    init.add_argument("--force", action="store_true", help="overwrite an existing file")

    tray = sub.add_parser("tray", help="run from the system tray")
    tray.add_argument("-c", "--config", type=Path, default=Path(CONFIG_FILE_NAME))
    tray.add_argument("--log", type=Path, help="append-only log file (default: ./.apptray/logs)")
    tray.add_argument("--autostart", action="store_true", help="start the batch right away")
    return p


def collect_specs(args: argparse.Namespace) -> List[AppLaunchSpec]:
    specs: List[AppLaunchSpec] = []
    if args.config:
        specs.extend(load_specs(args.config))
    if args.app:
        try:
            specs.extend(specs_from_paths(args.app, start_action=args.action, start_style=args.style, args=args.args))
        except ValueError as e:
            raise ConfigError(str(e)) from e
    if not specs:
        raise ConfigError("nothing to launch: pass --config and/or --app")
    return specs


def format_report(report: BatchReport) -> List[str]:
    lines = []
    for o in report.outcomes:
        status = "OK" if o.launched and o.succeeded and not o.timed_out else "ISSUE"
        pid = str(o.pid) if o.pid else "-"
        lines.append(f"{status:<6}{o.name:<24} pid={pid:<8}{o.message}")
    return lines


def cmd_run(args: argparse.Namespace, backend: WindowBackend) -> int:
    try:
        specs = collect_specs(args)
    except ConfigError as e:
        print(f"config error: {e}", file=sys.stderr)
        return 2

    echo = None if args.quiet else (lambda line: print(line, file=sys.stderr))
    log = LaunchLog(args.log, echo=echo)
    report = start_apps_to_tray(specs, backend=backend, log=log, timings=Timings(global_timeout_s=args.timeout_s))
    for line in format_report(report):
        print(line)
    return 0 if report.ok else 1


def _matches_target(w: WindowInfo, pids: List[int], names: List[str]) -> bool:
    if w.pid in pids:
        return True
    return any(same_image(w.process_name, n) or same_image(n, w.process_name) for n in names)


def cmd_set_state(args: argparse.Namespace, backend: WindowBackend) -> int:
    try:
        primitive = Primitive.parse(args.action)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 2
    if not args.pid and not args.name:
        print("pass --pid and/or --name", file=sys.stderr)
        return 2

    bringing_up = primitive in (Primitive.SHOW, Primitive.RESTORE)
    targets = [
        w for w in backend.enum_windows(include_hidden=bringing_up)
        if _matches_target(w, args.pid, args.name)
        and w.class_name not in SKIP_WINDOW_CLASSES
        and (w.visible or w.title.strip())
    ]
    if not targets:
        print("no matching windows", file=sys.stderr)
        return 1

    failures = 0
    for w in targets:
        result = set_window_state(w, primitive, backend, args.wait_ms)
        ok = result.succeeded
        failures += 0 if ok else 1
        print(f"{'OK' if ok else 'ISSUE':<6}hwnd={w.hwnd:<10} pid={w.pid or '-':<8}{result.state.value:<8}{w.title}")
    return 0 if failures == 0 else 1


def cmd_windows(args: argparse.Namespace, backend: WindowBackend) -> int:
    windows = backend.enum_windows(include_hidden=args.all)
    if args.name:
        windows = [w for w in windows if same_image(w.process_name, args.name) or same_image(args.name, w.process_name)]
    for w in sorted(windows, key=lambda w: ((w.process_name or "").lower(), w.pid or 0, w.hwnd)):
        vis = "min" if w.minimized else ("vis" if w.visible else "hid")
        print(f"{w.pid or '-':>7}  {w.process_name:<28}{vis:<5}{w.hwnd:<10}{w.title}")
    return 0


def cmd_init(args: argparse.Namespace) -> int:
    if args.path.exists() and not args.force:
        print(f"{args.path} already exists (use --force to overwrite)", file=sys.stderr)
        return 1
    save_specs(args.path, sample_specs())
    print(f"wrote {args.path}")
    return 0


def main(argv: Optional[List[str]] = None, backend: Optional[WindowBackend] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 2
    if args.command == "init":
        return cmd_init(args)
    if args.command == "tray":
        from .tray import run_tray
        return run_tray(args.config, args.log, autostart=args.autostart)

    backend = backend or get_backend()
    if args.command == "run":
        return cmd_run(args, backend)
    if args.command == "set-state":
        return cmd_set_state(args, backend)
    return cmd_windows(args, backend)


if __name__ == "__main__":
    raise SystemExit(main())
