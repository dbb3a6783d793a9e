#===============================================================================
#  Apps_To_Tray | config.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-10
#  Last Update : 2026-02-11
#
#  Summary
#  -------
#  Load/save of the apps.json launch list, inline spec construction and
#  executable path resolution. Also holds the non per-app timings.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import json
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .constants import (
    DISCOVERY_GRACE_MS,
    DISCOVERY_POLL_MS,
    ELEVATION_LOOKUP_TIMEOUT_S,
    ELEVATION_POLL_MS,
    GLOBAL_TIMEOUT_S,
    MINIMIZE_CHECK_MS,
    SETTLE_POLL_MS,
)
from .models import AppLaunchSpec, StartAction, StartStyle


class ConfigError(ValueError):
    pass


@dataclass
class Timings:
    """Batch-wide timings (per-app budgets live on AppLaunchSpec)."""
    grace_ms: int = DISCOVERY_GRACE_MS
    discovery_poll_ms: int = DISCOVERY_POLL_MS
    settle_poll_ms: int = SETTLE_POLL_MS
    minimize_check_ms: int = MINIMIZE_CHECK_MS
    elevation_timeout_s: float = ELEVATION_LOOKUP_TIMEOUT_S
    elevation_poll_ms: int = ELEVATION_POLL_MS
    global_timeout_s: float = GLOBAL_TIMEOUT_S


def expand_path(path: str) -> str:
    """Expand %VAR% / $VAR / ~ the way the shell would."""
    expanded = os.path.expandvars(os.path.expanduser(path.strip().strip('"')))
    # os.path.expandvars only knows %VAR% on Windows
    if "%" in expanded:
        for key, value in os.environ.items():
            expanded = expanded.replace(f"%{key}%", value)
    return expanded


def resolve_executable(path: str) -> Optional[str]:
    """Return an absolute executable path, or None if it cannot be found.

    Resolution order:
      1) the expanded path as given, if it is an existing file
      2) PATH lookup (bare names such as "notepad.exe")
    """
    candidate = expand_path(path)
    if not candidate:
        return None
    p = Path(candidate)
    if p.is_file():
        return str(p.resolve())
    found = shutil.which(candidate)
    return str(Path(found).resolve()) if found else None


def parse_specs(data: Any) -> List[AppLaunchSpec]:
    """Accept a list of app objects, a single app object, or {"Apps": [...]}."""
    if isinstance(data, dict):
        apps = next((v for k, v in data.items() if str(k).lower() == "apps"), None)
        entries = apps if apps is not None else [data]
    elif isinstance(data, list):
        entries = data
    else:
        raise ConfigError("config must be a JSON list or object")

    if not isinstance(entries, list):
        raise ConfigError("'Apps' must be a list")

    specs: List[AppLaunchSpec] = []
    for i, entry in enumerate(entries):
        try:
            specs.append(AppLaunchSpec.from_dict(entry))
        except ValueError as e:
            raise ConfigError(f"app #{i + 1}: {e}") from e
    return specs


def load_specs(path: Path) -> List[AppLaunchSpec]:
    """Load the launch list from disk."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8-sig"))
    except FileNotFoundError:
        raise ConfigError(f"config file not found: {path}") from None
    except json.JSONDecodeError as e:
        raise ConfigError(f"{path}: invalid JSON ({e})") from e
    return parse_specs(data)


def save_specs(path: Path, specs: Iterable[AppLaunchSpec]) -> None:
    """Persist the launch list to disk."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload: Dict[str, Any] = {"Apps": [s.to_dict() for s in specs]}
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


def specs_from_paths(
    paths: Iterable[str],
    start_action: Optional[str] = None,
    start_style: Optional[str] = None,
    args: str = "",
) -> List[AppLaunchSpec]:
    """Inline specs for bare executable paths (e.g. --app on the command line)."""
    specs: List[AppLaunchSpec] = []
    for p in paths:
        spec = AppLaunchSpec(path=p, args=args)
        if start_action:
            spec.start_action = StartAction.parse(start_action)
        if start_style:
            spec.start_style = StartStyle.parse(start_style)
        specs.append(spec)
    return specs


def sample_specs() -> List[AppLaunchSpec]:
    return [
        AppLaunchSpec(path=r"%WINDIR%\System32\notepad.exe", name="Notepad", start_action=StartAction.MINIMIZE),
        AppLaunchSpec(
            path=r"%LOCALAPPDATA%\Discord\Update.exe",
            name="Discord",
            args="--processStart Discord.exe",
            process_name_regex=r"(?i)^discord\.exe$",
            timeout_ms=15000,
        ),
        AppLaunchSpec(path=r"C:\Tools\agent.exe", name="Agent", start_action=StartAction.NONE, start_style=StartStyle.HIDDEN),
    ]
