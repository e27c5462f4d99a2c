"""
Core package for git-dashboard.

This package centralizes non-UI logic such as:
- Application metadata and settings management (gitdash.app_meta)
- Git metadata extraction (gitdash.git_utils)
- Metadata records and JSON encoding (gitdash.models)
- Whole-repository dashboard snapshots (gitdash.snapshot)

It also re-exports commonly used symbols for convenience, so callers can do:
    from gitdash import get_build_number, get_commits_detailed, dumps
"""

from .app_meta import (
    APP_ID,
    APP_TITLE,
    DEFAULT_SETTINGS,
    detect_initial_repo_path,
    get_settings_path,
    load_settings,
    save_settings,
)
from .git_utils import (
    get_build_number,
    get_commit_info,
    get_commits_detailed,
    get_releases_detailed,
    get_tags_detailed,
    is_release_name,
    list_releases,
    list_tags,
    resolve_branch,
    run_git,
)
from .models import (
    UNKNOWN,
    CommitInfo,
    CommitRecord,
    ReleaseRecord,
    ResultSet,
    TagRecord,
    dumps,
)
from .snapshot import RepoSnapshot, collect_snapshot, group_commits_by_date

__version__ = "0.1.0"

__all__ = [
    # app_meta
    "APP_ID",
    "APP_TITLE",
    "DEFAULT_SETTINGS",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "detect_initial_repo_path",
    # git_utils
    "run_git",
    "resolve_branch",
    "get_build_number",
    "get_commit_info",
    "is_release_name",
    "list_tags",
    "list_releases",
    "get_commits_detailed",
    "get_tags_detailed",
    "get_releases_detailed",
    # models
    "UNKNOWN",
    "CommitInfo",
    "CommitRecord",
    "TagRecord",
    "ReleaseRecord",
    "ResultSet",
    "dumps",
    # snapshot
    "RepoSnapshot",
    "collect_snapshot",
    "group_commits_by_date",
]
