#===============================================================================
#  Apps_To_Tray | constants.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-10
#  Last Update : 2026-02-11
#
#  Summary
#  -------
#  Central place for default timings, file naming conventions and the
#  Win32 window classes we never treat as an application's main window.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

APP_TITLE = "Apps To Tray"
CONFIG_FILE_NAME = "apps.json"
LOG_DIR_NAME = ".apptray"
LOG_FILE_NAME = "apps_to_tray.log"

# --- Per-app defaults (JSON config) ---
DEFAULT_START_ACTION = "Auto"
DEFAULT_START_STYLE = "Normal"
DEFAULT_WAIT_MS = 5000       # settle budget after an action is applied
DEFAULT_TIMEOUT_MS = 8000    # window-appearance budget
DEFAULT_REDIRECT_OUTPUT = True
DEFAULT_RUN_AS_ADMIN = False

# --- Orchestrator timings ---
DISCOVERY_GRACE_MS = 3000    # before widening the search beyond the spawned pid
DISCOVERY_POLL_MS = 250
SETTLE_POLL_MS = 250
MINIMIZE_CHECK_MS = 300      # per minimize mechanism
ELEVATION_LOOKUP_TIMEOUT_S = 30.0
ELEVATION_POLL_MS = 300
GLOBAL_TIMEOUT_S = 120.0

# Helper windows some processes own alongside their real UI
SKIP_WINDOW_CLASSES = {
    "IME",
    "MSCTFIME UI",
    "Default IME",
    "tooltips_class32",
}
