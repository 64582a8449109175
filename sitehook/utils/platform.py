"""Platform detection and path utilities."""

from __future__ import annotations

import os
import shutil
import sys
from pathlib import Path


def get_platform() -> str:
    if sys.platform == "win32":
        return "windows"
    if sys.platform == "darwin":
        return "macos"
    return "linux"


def get_config_dir() -> Path:
    env = os.environ.get("SITEHOOK_CONFIG_DIR")
    if env:
        return Path(env)

    platform = get_platform()
    if platform == "windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "sitehook"
    if platform == "macos":
        return Path.home() / "Library" / "Application Support" / "sitehook"
    # Linux / XDG
    xdg = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    return Path(xdg) / "sitehook"


def get_default_shell() -> str:
    if get_platform() == "windows":
        return "powershell"
    # Deploy scripts are POSIX sh; a login shell like fish would misparse them.
    return shutil.which("bash") or "/bin/sh"


def shell_args(command: str) -> list[str]:
    """Argument vector running ``command`` through the platform shell."""
    shell = get_default_shell()
    if get_platform() == "windows":
        return [shell, "-NoProfile", "-Command", command]
    return [shell, "-c", command]


def normalize_path(path: str | Path) -> Path:
    return Path(path).expanduser().resolve()
