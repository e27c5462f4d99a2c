#!/usr/bin/env python3
"""
Core application metadata and settings management.

This module centralizes:
- Static app metadata (APP_ID, APP_TITLE)
- Settings directory/file paths
- Settings load/save (with defaults and atomic writes)
- Initial repository path detection
"""

from __future__ import annotations

import json
import logging
import os
from typing import Dict, Mapping, MutableMapping, Optional

logger = logging.getLogger("gitdash.app_meta")

# -------------------------------------------------------------------
# App metadata
# -------------------------------------------------------------------
APP_ID: str = "io.github.git-dashboard"
APP_TITLE: str = "git-dashboard"

# -------------------------------------------------------------------
# Settings storage
# -------------------------------------------------------------------
CONFIG_DIR_ENV: str = "GITDASH_CONFIG_DIR"
SETTINGS_FILENAME: str = "settings.json"

# Defaults for persisted settings. Unknown keys in the file are ignored on load.
DEFAULT_SETTINGS: Dict[str, object] = {
    "repo_path": "",
    "branch": "master",
    "commit_limit": 10,
    "tag_limit": 0,  # 0 = all tags
    "release_limit": 0,  # 0 = all releases
    "git_executable": "git",
    "git_timeout": None,  # Seconds; None waits for git indefinitely
    "log_level": "INFO",
}


def get_settings_dir() -> str:
    """
    Returns the directory path where settings are stored.

    GITDASH_CONFIG_DIR overrides the default ~/.config/git-dashboard.
    """
    override = os.environ.get(CONFIG_DIR_ENV, "").strip()
    if override:
        return override
    return os.path.join(os.path.expanduser("~"), ".config", APP_TITLE)


def get_settings_path() -> str:
    """
    Returns the file path where settings are stored.
    """
    return os.path.join(get_settings_dir(), SETTINGS_FILENAME)


def load_settings(path: Optional[str] = None) -> Dict[str, object]:
    """
    Load persisted settings from disk, merging with defaults.

    Behavior:
    - If the file does not exist, returns a copy of DEFAULT_SETTINGS.
    - Unknown keys from disk are ignored.
    - Any error while reading/parsing falls back to defaults.

    Args:
        path: Settings file; defaults to get_settings_path().

    Returns:
        A new dict of merged settings.
    """
    path = path or get_settings_path()
    data: Dict[str, object] = dict(DEFAULT_SETTINGS)
    try:
        if os.path.isfile(path):
            with open(path, "r", encoding="utf-8") as f:
                loaded = json.load(f)
            if isinstance(loaded, Mapping):
                data.update({k: v for k, v in loaded.items() if k in DEFAULT_SETTINGS})
    except (OSError, ValueError) as exc:
        # Corrupt or unreadable settings: return defaults
        logger.warning("Ignoring unreadable settings %s: %s", path, exc)
        data = dict(DEFAULT_SETTINGS)
    return data


def save_settings(data: Mapping[str, object], path: Optional[str] = None) -> bool:
    """
    Persist settings atomically (write to temp then replace).

    Args:
        data: Mapping of settings to persist. Only keys present in DEFAULT_SETTINGS
              are written; others are ignored.
        path: Settings file; defaults to get_settings_path().

    Returns:
        True if the file was written.
    """
    path = path or get_settings_path()
    try:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        # Only persist known keys to keep the file tidy
        serializable = {k: data.get(k, DEFAULT_SETTINGS[k]) for k in DEFAULT_SETTINGS}
        tmp = path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(serializable, f, indent=2, ensure_ascii=False)
        os.replace(tmp, path)
    except (OSError, TypeError, ValueError) as exc:
        # Best-effort: settings persistence is non-critical
        logger.warning("Could not save settings to %s: %s", path, exc)
        return False
    return True


def is_git_work_tree(path: str) -> bool:
    """
    True if `path` is (inside) a directory containing a .git entry.
    """
    current = os.path.abspath(path)
    while True:
        if os.path.exists(os.path.join(current, ".git")):
            return True
        parent = os.path.dirname(current)
        if parent == current:
            return False
        current = parent


def detect_initial_repo_path(
    settings: MutableMapping[str, object], cwd: Optional[str] = None
) -> str:
    """
    Determine the initial repository path.

    Precedence:
    1) Use 'repo_path' from provided settings if it exists and is a directory.
    2) Fallback to the current working directory if it is inside a git work tree.
    3) Otherwise, return empty string.

    Side effects:
    - If the fallback is used, the provided settings are updated (not saved).
    """
    p = str(settings.get("repo_path") or "").strip()
    if p and os.path.isdir(p):
        return p

    fallback = cwd or os.getcwd()
    if is_git_work_tree(fallback):
        settings["repo_path"] = fallback
        return fallback

    return ""


def get_int_setting(settings: Mapping[str, object], key: str) -> int:
    """
    Read a non-negative integer setting with fallback to its default.

    Args:
        settings: Settings mapping.
        key: One of the integer keys of DEFAULT_SETTINGS.

    Returns:
        The stored value, or the default on invalid or negative values.
    """
    default = int(DEFAULT_SETTINGS[key])  # type: ignore[arg-type]
    try:
        v = int(settings.get(key, default))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return v if v >= 0 else default


def get_git_timeout(settings: Mapping[str, object]) -> Optional[float]:
    """
    Positive git timeout in seconds, or None for no timeout.
    """
    raw = settings.get("git_timeout")
    if raw is None:
        return None
    try:
        v = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return v if v > 0 else None


__all__ = [
    "APP_ID",
    "APP_TITLE",
    "CONFIG_DIR_ENV",
    "SETTINGS_FILENAME",
    "DEFAULT_SETTINGS",
    "get_settings_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "is_git_work_tree",
    "detect_initial_repo_path",
    "get_int_setting",
    "get_git_timeout",
]
