#===============================================================================
#  Apps_To_Tray | models.py
#===============================================================================
#  Author      : Edwin A. Rodriguez
#  Role/Team   : SAP COE / SAP SRE (GRM-Testing-Automation & Governance)
#  Created     : 2026-02-10
#  Last Update : 2026-02-11
#
#  Summary
#  -------
#  Shared data models: what to launch (AppLaunchSpec), what got launched
#  (LaunchedProcess), window snapshots (WindowInfo) and per-app results.
#
#  Copyright (c) 2026 Edwin A. Rodriguez. All rights reserved.
#  Provided "AS IS", without warranty of any kind.
#===============================================================================

from __future__ import annotations

import os
import re
import shlex
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PureWindowsPath
from typing import Any, Dict, List, Optional, Union

from .constants import (
    DEFAULT_REDIRECT_OUTPUT,
    DEFAULT_RUN_AS_ADMIN,
    DEFAULT_START_ACTION,
    DEFAULT_START_STYLE,
    DEFAULT_TIMEOUT_MS,
    DEFAULT_WAIT_MS,
)


class StartAction(str, Enum):
    AUTO = "Auto"
    HIDE = "Hide"
    MINIMIZE = "Minimize"
    CLOSE = "Close"
    SHOW_THEN_MINIMIZE = "ShowThenMinimize"
    NONE = "None"

    @classmethod
    def parse(cls, value: Union[str, "StartAction"]) -> "StartAction":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        raise ValueError(f"Unknown StartAction {value!r}")


class StartStyle(str, Enum):
    NORMAL = "Normal"
    MINIMIZED = "Minimized"
    HIDDEN = "Hidden"

    @classmethod
    def parse(cls, value: Union[str, "StartStyle"]) -> "StartStyle":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        # Long forms, e.g. "MinimizedProcess"
        if key.endswith("process"):
            key = key[: -len("process")]
        for member in cls:
            if member.value.lower() == key:
                return member
        raise ValueError(f"Unknown StartStyle {value!r}")


# JSON key -> attribute name
FIELD_KEYS = {
    "Name": "name",
    "Path": "path",
    "Args": "args",
    "StartAction": "start_action",
    "StartStyle": "start_style",
    "RunAsAdmin": "run_as_admin",
    "RedirectOutput": "redirect_output",
    "WaitMs": "wait_ms",
    "TimeoutMs": "timeout_ms",
    "WindowTitleRegex": "window_title_regex",
    "ProcessNameRegex": "process_name_regex",
}


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false", "1", "0", "yes", "no"):
        return value.strip().lower() in ("true", "1", "yes")
    if isinstance(value, int):
        return bool(value)
    raise ValueError(f"{key} must be a boolean, got {value!r}")


def _as_ms(value: Any, key: str) -> int:
    try:
        ms = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{key} must be an integer number of milliseconds, got {value!r}") from None
    if ms < 0:
        raise ValueError(f"{key} must not be negative")
    return ms


def _as_regex(value: Any, key: str) -> Optional[str]:
    if value is None or value == "":
        return None
    try:
        re.compile(value)
    except (re.error, TypeError) as e:
        raise ValueError(f"{key} is not a valid regular expression: {e}") from None
    return str(value)


def split_args(args) -> List[str]:
    """Turn the configured Args into an argv tail.

    Lists pass through untouched. Strings are split on whitespace with
    quote grouping; on Windows backslashes stay literal so paths survive.
    """
    if isinstance(args, list):
        return [str(a) for a in args]
    if not args or not str(args).strip():
        return []
    lex = shlex.shlex(str(args), posix=True)
    lex.whitespace_split = True
    lex.commenters = ""
    if os.name == "nt":
        lex.escape = ""
    return list(lex)


def _as_args(value: Any) -> Union[str, List[str]]:
    if value is None:
        return ""
    if isinstance(value, list):
        value = [str(a) for a in value]
    elif not isinstance(value, str):
        raise ValueError("Args must be a string or a list of strings")
    try:
        argv = split_args(value)
    except ValueError as e:
        raise ValueError(f"Args cannot be split: {e}") from None
    if any("\x00" in a for a in argv):
        raise ValueError("Args must not contain NUL characters")
    return value


@dataclass
class AppLaunchSpec:
    """One application to launch and push into the background."""
    path: str
    name: Optional[str] = None
    args: Union[str, List[str]] = ""
    start_action: StartAction = StartAction(DEFAULT_START_ACTION)
    start_style: StartStyle = StartStyle(DEFAULT_START_STYLE)
    run_as_admin: bool = DEFAULT_RUN_AS_ADMIN
    redirect_output: bool = DEFAULT_REDIRECT_OUTPUT
    wait_ms: int = DEFAULT_WAIT_MS
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    window_title_regex: Optional[str] = None
    process_name_regex: Optional[str] = None

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        # PureWindowsPath splits on both separators
        return PureWindowsPath(self.path).stem or self.path

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Name": self.name,
            "Path": self.path,
            "Args": list(self.args) if isinstance(self.args, list) else self.args,
            "StartAction": self.start_action.value,
            "StartStyle": self.start_style.value,
            "RunAsAdmin": self.run_as_admin,
            "RedirectOutput": self.redirect_output,
            "WaitMs": self.wait_ms,
            "TimeoutMs": self.timeout_ms,
            "WindowTitleRegex": self.window_title_regex,
            "ProcessNameRegex": self.process_name_regex,
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "AppLaunchSpec":
        """Build a spec from a JSON object; defaults only fill absent keys."""
        if not isinstance(d, dict):
            raise ValueError(f"app entry must be an object, got {type(d).__name__}")

        # Keys are matched case-insensitively ("path" == "Path")
        by_lower = {str(k).lower(): v for k, v in d.items()}
        unknown = [k for k in d if str(k).lower() not in {j.lower() for j in FIELD_KEYS}]
        if unknown:
            raise ValueError(f"unknown field(s): {', '.join(sorted(map(str, unknown)))}")

        def get(key: str, default: Any = None) -> Any:
            return by_lower.get(key.lower(), default)

        path = get("Path")
        if not path or not isinstance(path, str):
            raise ValueError("Path is required")

        name = get("Name")
        return AppLaunchSpec(
            path=path,
            name=str(name) if name is not None else None,
            args=_as_args(get("Args", "")),
            start_action=StartAction.parse(get("StartAction", DEFAULT_START_ACTION)),
            start_style=StartStyle.parse(get("StartStyle", DEFAULT_START_STYLE)),
            run_as_admin=_as_bool(get("RunAsAdmin", DEFAULT_RUN_AS_ADMIN), "RunAsAdmin"),
            redirect_output=_as_bool(get("RedirectOutput", DEFAULT_REDIRECT_OUTPUT), "RedirectOutput"),
            wait_ms=_as_ms(get("WaitMs", DEFAULT_WAIT_MS), "WaitMs"),
            timeout_ms=_as_ms(get("TimeoutMs", DEFAULT_TIMEOUT_MS), "TimeoutMs"),
            window_title_regex=_as_regex(get("WindowTitleRegex"), "WindowTitleRegex"),
            process_name_regex=_as_regex(get("ProcessNameRegex"), "ProcessNameRegex"),
        )


@dataclass(frozen=True)
class LaunchedProcess:
    """A spec paired with the pid it produced. No OS handle is kept."""
    spec: AppLaunchSpec
    pid: int
    image_name: str     # lower-cased executable file name, e.g. "notepad.exe"
    attributed_by: str = "direct"   # "direct" | "name" | "parent"


@dataclass(frozen=True)
class WindowInfo:
    hwnd: int
    pid: Optional[int]
    title: str = ""
    class_name: str = ""
    process_name: str = ""
    visible: bool = True
    minimized: bool = False


@dataclass
class AppOutcome:
    name: str
    pid: Optional[int] = None
    launched: bool = False
    hwnd: Optional[int] = None
    window_title: str = ""
    action: Optional[str] = None    # primitive that brought the window down
    state: Optional[str] = None     # final window state
    succeeded: bool = False
    timed_out: bool = False
    message: str = ""


@dataclass
class BatchReport:
    outcomes: List[AppOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(o.launched and o.succeeded and not o.timed_out for o in self.outcomes)

    @property
    def with_issues(self) -> List[str]:
        return [o.name for o in self.outcomes if not (o.launched and o.succeeded) or o.timed_out]

    def by_name(self, name: str) -> Optional[AppOutcome]:
        for o in self.outcomes:
            if o.name == name:
                return o
        return None
