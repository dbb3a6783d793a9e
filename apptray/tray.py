#===============================================================================
#  Apps_To_Tray | tray.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-10
#  Last Update : 2026-02-11
#
#  Summary
#  -------
#  System-tray front end. The batch runs in a worker thread; log lines and
#  the final report come back to the UI thread through Qt signals.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

from PySide6.QtCore import QObject, QThread, QTimer, QUrl, Signal
from PySide6.QtGui import QAction, QDesktopServices
from PySide6.QtWidgets import QApplication, QMenu, QMessageBox, QStyle, QSystemTrayIcon

from .config import ConfigError, load_specs
from .constants import APP_TITLE, LOG_DIR_NAME, LOG_FILE_NAME
from .launch_log import LaunchLog
from .models import AppLaunchSpec, BatchReport
from .orchestrator import start_apps_to_tray
from .windows import WindowBackend


def default_log_path(base_dir: Path) -> Path:
    return base_dir / LOG_DIR_NAME / "logs" / LOG_FILE_NAME


def summarize(report: BatchReport) -> str:
    if not report.outcomes:
        return "Nothing to launch."
    if report.ok:
        return f"{len(report.outcomes)} app(s) started in the background."
    return f"Completed with issues: {', '.join(report.with_issues)}"


class BatchWorker(QObject):
    """Runs one batch. Call run() directly or move the worker to a QThread."""

    status = Signal(str)
    finished = Signal(object)

    def __init__(self, specs: List[AppLaunchSpec], log_path: Optional[Path] = None,
                 backend: Optional[WindowBackend] = None):
        super().__init__()
        self.specs = specs
        self.log_path = log_path
        self.backend = backend

    def run(self) -> None:
        log = LaunchLog(self.log_path, echo=self.status.emit)
        report = BatchReport()
        try:
            report = start_apps_to_tray(self.specs, backend=self.backend, log=log)
        except Exception as e:
            self.status.emit(f"batch failed: {e}")
        # The controller re-enables "Start apps" only on finished
        self.finished.emit(report)


class TrayController(QObject):
    def __init__(self, config_path: Path, log_path: Path, parent=None):
        super().__init__(parent)
        self.config_path = Path(config_path)
        self.log_path = Path(log_path)
        self._thread: Optional[QThread] = None
        self._worker: Optional[BatchWorker] = None

        style = QApplication.style()
        self.tray = QSystemTrayIcon(style.standardIcon(QStyle.SP_ComputerIcon), self)
        self.tray.setToolTip(APP_TITLE)

        menu = QMenu()
        self.act_start = QAction("Start apps", menu)
        self.act_start.triggered.connect(self.start_batch)
        menu.addAction(self.act_start)

        act_log = QAction("Open log", menu)
        act_log.triggered.connect(self.open_log)
        menu.addAction(act_log)

        menu.addSeparator()
        act_quit = QAction("Quit", menu)
        act_quit.triggered.connect(QApplication.quit)
        menu.addAction(act_quit)

        self.menu = menu
        self.tray.setContextMenu(menu)
        self.tray.show()

    def start_batch(self) -> None:
        if self._thread is not None:
            return
        try:
            specs = load_specs(self.config_path)
        except ConfigError as e:
            QMessageBox.warning(None, APP_TITLE, str(e))
            return

        self.act_start.setEnabled(False)
        self.tray.setToolTip(f"{APP_TITLE}: starting {len(specs)} app(s)...")

        self._thread = QThread()
        self._worker = BatchWorker(specs, self.log_path)
        self._worker.moveToThread(self._thread)
        self._thread.started.connect(self._worker.run)
        self._worker.status.connect(self.on_status)
        self._worker.finished.connect(self.on_finished)
        self._worker.finished.connect(self._thread.quit)
        self._thread.finished.connect(self._cleanup)
        self._thread.start()

    def on_status(self, line: str) -> None:
        # Tooltips are short; keep the tail of the latest line
        self.tray.setToolTip(f"{APP_TITLE}\n{line[-120:]}")

    def on_finished(self, report: BatchReport) -> None:
        icon = QSystemTrayIcon.Information if report.ok else QSystemTrayIcon.Warning
        self.tray.showMessage(APP_TITLE, summarize(report), icon, 5000)
        self.tray.setToolTip(APP_TITLE)
        self.act_start.setEnabled(True)

    def _cleanup(self) -> None:
        if self._worker:
            self._worker.deleteLater()
        if self._thread:
            self._thread.deleteLater()
        self._worker = None
        self._thread = None

    def open_log(self) -> None:
        if not self.log_path.exists():
            QMessageBox.information(None, APP_TITLE, "No log written yet.")
            return
        QDesktopServices.openUrl(QUrl.fromLocalFile(str(self.log_path)))


def run_tray(config_path: Path, log_path: Optional[Path] = None, autostart: bool = False) -> int:
    app = QApplication.instance() or QApplication(sys.argv)
    app.setQuitOnLastWindowClosed(False)

    if not QSystemTrayIcon.isSystemTrayAvailable():
        QMessageBox.critical(None, APP_TITLE, "No system tray available on this desktop.")
        return 1

    base_dir = Path(config_path).resolve().parent
    controller = TrayController(config_path, log_path or default_log_path(base_dir))
    if autostart:
        QTimer.singleShot(0, controller.start_batch)
    return app.exec()
