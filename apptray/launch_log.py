#===============================================================================
#  Apps_To_Tray | launch_log.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-10
#  Last Update : 2026-02-11
#
#  Summary
#  -------
#  Append-only, timestamped launch log shared by all workers of a batch.
#  Lines go to an optional file and to an optional echo callback (console
#  in the CLI, status text in the tray).
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

INFO = "INFO"
WARN = "WARN"
ERROR = "ERROR"


class LaunchLog:
    def __init__(self, path: Optional[Path] = None, echo: Optional[Callable[[str], None]] = None):
        self.path = Path(path) if path else None
        self.echo = echo
        self._lock = threading.Lock()
        if self.path:
            self.path.parent.mkdir(parents=True, exist_ok=True)

    def write(self, level: str, message: str, app: str = "") -> str:
        ts = datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        line = f"{ts} [{level}] [{app}] {message}" if app else f"{ts} [{level}] {message}"
        with self._lock:
            if self.path:
                with open(self.path, "a", encoding="utf-8", errors="ignore") as f:
                    f.write(line + "\n")
            if self.echo:
                self.echo(line)
        return line

    def info(self, message: str, app: str = "") -> str:
        return self.write(INFO, message, app)

    def warn(self, message: str, app: str = "") -> str:
        return self.write(WARN, message, app)

    def error(self, message: str, app: str = "") -> str:
        return self.write(ERROR, message, app)


class MemoryLog(LaunchLog):
    """Keeps lines in memory as well; handy for the tray tooltip and tests."""

    def __init__(self, path: Optional[Path] = None, echo: Optional[Callable[[str], None]] = None):
        super().__init__(path, echo)
        self.lines: List[str] = []

    def write(self, level: str, message: str, app: str = "") -> str:
        line = super().write(level, message, app)
        with self._lock:
            self.lines.append(line)
        return line
