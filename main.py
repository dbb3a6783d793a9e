#===============================================================================
#  Apps_To_Tray  |  Application Launcher / Window Background Orchestrator
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-10
#  Last Update : 2026-02-11
#
#  Summary
#  -------
#  Launches a list of applications (apps.json or --app on the command line)
#  and pushes each one's window into the background: hide, minimize, close,
#  or show-then-minimize, with per-app fallbacks and timeouts.
#  Supports:
#    - Environment-expanded executable paths and opaque argument strings
#    - Normal / minimized / hidden initial window style
#    - Elevated launches through the UAC consent prompt
#    - Launcher-stub apps (window owned by a different process)
#    - Optional append-only launch log and a system-tray front end
#
#  Config Conventions
#  ------------------
#    ./apps.json
#      {"Apps": [{"Name": ..., "Path": ..., "Args": ..., "StartAction": ...}]}
#
#  Copyright & License Notes
#  -------------------------
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#
#  This source code is provided "AS IS", without warranty of any kind, express
#  or implied, including but not limited to the warranties of merchantability,
#  fitness for a particular purpose, and noninfringement.
#
#  Permission Notice (Personal/Internal Use)
#  -----------------------------------------
#  You may use, copy, and modify this software for personal or internal use.
#  Redistribution or public release should include this header and credit the
#  author. If you plan to open-source this project, consider replacing this
#  section with an OSI-approved license (e.g., MIT) for clarity.
#
#  Third-Party Components
#  ----------------------
#  This project uses third-party libraries (psutil, pywin32, PySide6) which
#  are licensed separately by their respective authors. Ensure compliance with
#  their license terms when distributing this software.
#===============================================================================

from apptray.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
