#!/usr/bin/env python3
"""
Dashboard snapshot: everything the dashboard shows for one repository.

collect_snapshot() runs the extractor helpers one after another and bundles
the results; group_commits_by_date() buckets commits per calendar day for
the history view.
"""

from __future__ import annotations

import json
import logging
import os
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from .git_utils import (
    DEFAULT_BRANCH,
    DEFAULT_COMMIT_LIMIT,
    Runner,
    get_build_number,
    get_commit_info,
    get_commits_detailed,
    get_releases_detailed,
    get_tags_detailed,
)
from .models import (
    DEFAULT_BUILD_NUMBER,
    CommitInfo,
    CommitRecord,
    ReleaseRecord,
    ResultSet,
    TagRecord,
    dumps,
)

logger = logging.getLogger("gitdash.snapshot")


@dataclass
class RepoSnapshot:
    """
    Metadata of one repository at a point in time.

    Attributes:
        name (str): Directory name of the repository.
        path (str): Repository path as given.
        branch (str): Branch that was requested (may have fallen back to HEAD).
        build_number (str): Commit count, "1" if unknown.
        commit_info (CommitInfo): Latest commit summary.
        commits / tags / releases (ResultSet): Detailed records.
    """

    name: str
    path: str
    branch: str = DEFAULT_BRANCH
    build_number: str = DEFAULT_BUILD_NUMBER
    commit_info: CommitInfo = field(default_factory=CommitInfo)
    commits: ResultSet[CommitRecord] = field(default_factory=ResultSet)
    tags: ResultSet[TagRecord] = field(default_factory=ResultSet)
    releases: ResultSet[ReleaseRecord] = field(default_factory=ResultSet)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "path": self.path,
            "branch": self.branch,
            "buildNumber": self.build_number,
            "commitInfo": self.commit_info.to_dict(),
            "commits": self.commits.to_dict(),
            "tags": self.tags.to_dict(),
            "releases": self.releases.to_dict(),
        }


def repo_display_name(repo_path: str) -> str:
    return os.path.basename(os.path.normpath(repo_path)) or repo_path


def collect_snapshot(
    repo_path: str,
    branch: str = DEFAULT_BRANCH,
    commit_limit: int = DEFAULT_COMMIT_LIMIT,
    tag_limit: int = 0,
    release_limit: int = 0,
    runner: Optional[Runner] = None,
) -> RepoSnapshot:
    """
    Gather all dashboard metadata for `repo_path`, sequentially.

    Never raises; every part falls back to its own default value.
    """
    logger.info("Collecting snapshot of %s (%s)", repo_path, branch)
    return RepoSnapshot(
        name=repo_display_name(repo_path),
        path=repo_path,
        branch=branch,
        build_number=get_build_number(repo_path, branch, runner=runner),
        commit_info=get_commit_info(repo_path, branch, runner=runner),
        commits=get_commits_detailed(repo_path, branch, commit_limit, runner=runner),
        tags=get_tags_detailed(repo_path, tag_limit, runner=runner),
        releases=get_releases_detailed(repo_path, release_limit, runner=runner),
    )


def parse_iso_date(value: str) -> Optional[datetime]:
    """
    Parse git's ISO-8601 dates ("2024-05-01T10:00:00+02:00" or
    "2024-05-01 10:00:00 +0200"). Returns None if unparseable.
    """
    value = (value or "").strip()
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.strptime(value, "%Y-%m-%d %H:%M:%S %z")
    except ValueError:
        return None


def group_commits_by_date(
    commits: List[CommitRecord],
) -> "OrderedDict[date, List[CommitRecord]]":
    """
    Bucket commits by the calendar day of their (committer-local) date.

    Input order is kept inside each bucket; commits with unparseable dates
    are skipped.
    """
    groups: "OrderedDict[date, List[CommitRecord]]" = OrderedDict()
    for commit in commits:
        when = parse_iso_date(commit.date)
        if when is None:
            logger.debug("Skipping commit %s with bad date %r", commit.hash, commit.date)
            continue
        groups.setdefault(when.date(), []).append(commit)
    return groups


def save_snapshot(snapshot: RepoSnapshot, path: str) -> bool:
    """
    Write the snapshot as JSON atomically (write to temp then replace).

    Returns:
        True if the file was written.
    """
    try:
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
        tmp = path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(dumps(snapshot))
            f.write("\n")
        os.replace(tmp, path)
    except OSError as exc:
        logger.warning("Could not write snapshot to %s: %s", path, exc)
        return False
    return True


def load_snapshot(path: str) -> Optional[Dict[str, Any]]:
    """
    Read a snapshot written by save_snapshot().

    Returns:
        The decoded JSON object, or None if missing or corrupt.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable snapshot %s: %s", path, exc)
        return None
    return data if isinstance(data, dict) else None


__all__ = [
    "RepoSnapshot",
    "repo_display_name",
    "collect_snapshot",
    "parse_iso_date",
    "group_commits_by_date",
    "save_snapshot",
    "load_snapshot",
]
