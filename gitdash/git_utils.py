#!/usr/bin/env python3
"""
Git metadata extraction for git-dashboard.

This module provides read-only helpers that shell out to git and parse its
output into records:
  - get_build_number
  - get_commit_info
  - list_tags / list_releases
  - get_commits_detailed
  - get_tags_detailed / get_releases_detailed

None of them raise. Every failure (not a repository, git missing, non-zero
exit, empty or malformed output) collapses into a default value: "1" for the
build number, "Unknown" for commit info fields, empty lists and empty record
fields otherwise.

Each helper takes an optional `runner` so tests can substitute canned output:

    runner(args, cwd) -> (returncode, stdout, stderr)
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

from procutils.process import run_command

from .models import (
    DEFAULT_BUILD_NUMBER,
    TAG_ANNOTATED,
    TAG_LIGHTWEIGHT,
    UNKNOWN,
    CommitInfo,
    CommitRecord,
    ReleaseRecord,
    ResultSet,
    TagRecord,
)

logger = logging.getLogger("gitdash.git_utils")

Runner = Callable[[List[str], str], Tuple[int, str, str]]

HEAD: str = "HEAD"
DEFAULT_BRANCH: str = "master"
DEFAULT_COMMIT_LIMIT: int = 10

# Field separator for --format strings; must not occur in names or subjects
FIELD_SEP: str = "|~|"
# Commit bodies span lines, so records end with ASCII RS instead of "\n"
RECORD_SEP: str = "\x1e"

COMMIT_FORMAT: str = FIELD_SEP.join(["%H", "%an", "%cI", "%s", "%b"]) + "%x1e"
TAG_OBJECT_FORMAT: str = FIELD_SEP.join(
    ["%(taggername)", "%(taggerdate:iso-strict)", "%(contents:subject)"]
)
TAG_COMMIT_FORMAT: str = FIELD_SEP.join(["%an", "%cI"])


def run_git(
    args: List[str],
    cwd: str,
    executable: str = "git",
    timeout: Optional[float] = None,
) -> Tuple[int, str, str]:
    """
    Run a git command and capture stdout/stderr.

    Args:
        args: Arguments after 'git'.
        cwd: Working directory (repository root).
        executable: git binary to invoke.
        timeout: Seconds before process is killed; None waits forever.

    Returns:
        (returncode, stdout, stderr)
    """
    return run_command([executable] + list(args), cwd, timeout=timeout)


def _call(runner: Optional[Runner], args: List[str], cwd: str) -> Tuple[int, str]:
    """
    Invoke the runner, folding any exception into a failed result.

    Returns:
        (returncode, stdout)
    """
    run = runner or run_git
    try:
        rc, out, err = run(list(args), cwd)
    except Exception as exc:
        logger.warning("git %s raised in %s: %s", " ".join(args[:2]), cwd, exc)
        return 1, ""
    if rc != 0:
        logger.debug(
            "git %s exited %s in %s: %s",
            " ".join(args[:2]),
            rc,
            cwd,
            (err or "").strip(),
        )
    return rc, out or ""


def _output(runner: Optional[Runner], args: List[str], cwd: str) -> Optional[str]:
    """
    Stripped stdout of a successful invocation, or None on failure/empty.
    """
    rc, out = _call(runner, args, cwd)
    out = out.strip()
    if rc != 0 or not out:
        return None
    return out


def _truncate(items: List, limit: int) -> List:
    return items[:limit] if limit > 0 else items


# -------------------------------------------------------------------
# Branch resolution
# -------------------------------------------------------------------
def resolve_branch(
    repo_path: str, branch: str = DEFAULT_BRANCH, runner: Optional[Runner] = None
) -> str:
    """
    Return "refs/heads/<branch>" if the local branch exists, else "HEAD".

    Any failure of the check (git missing, non-zero exit, runner error)
    falls back to HEAD without telling the caller.
    """
    if not branch or branch == HEAD:
        return HEAD
    rc, _ = _call(
        runner, ["show-ref", "--verify", "--quiet", f"refs/heads/{branch}"], repo_path
    )
    if rc != 0:
        logger.info("Branch '%s' not found, falling back to HEAD", branch)
        return HEAD
    return f"refs/heads/{branch}"


# -------------------------------------------------------------------
# Build number / latest commit
# -------------------------------------------------------------------
def get_build_number(
    repo_path: str, branch: str = DEFAULT_BRANCH, runner: Optional[Runner] = None
) -> str:
    """
    Count commits reachable from `branch` (or HEAD).

    Returns:
        str: The commit count, or "1" if git fails or prints nothing.
    """
    ref = resolve_branch(repo_path, branch, runner)
    out = _output(runner, ["rev-list", "--count", ref, "--"], repo_path)
    if out is None:
        logger.warning("Could not get build number for %s, using default", repo_path)
        return DEFAULT_BUILD_NUMBER
    logger.debug("Got build number %s for %s@%s", out, repo_path, ref)
    return out


def get_commit_info(
    repo_path: str, branch: str = DEFAULT_BRANCH, runner: Optional[Runner] = None
) -> CommitInfo:
    """
    Abbreviated hash, committer timestamp and subject of the latest commit.

    Each field is fetched separately and falls back to "Unknown" on its own,
    so a partial result is possible.
    """
    ref = resolve_branch(repo_path, branch, runner)
    values = []
    for fmt in ("%h", "%ci", "%s"):
        out = _output(runner, ["log", "-1", f"--format={fmt}", ref, "--"], repo_path)
        values.append(out if out is not None else UNKNOWN)
    info = CommitInfo(*values)
    if not info.is_known:
        logger.warning("Incomplete commit info for %s: %s", repo_path, info)
    return info


# -------------------------------------------------------------------
# Tags / releases
# -------------------------------------------------------------------
def is_release_name(name: str) -> bool:
    """
    True for tag names that look like versions: "v1.2", "2.0.1".

    Whitespace-only and empty names never qualify.
    """
    if not name or not name.strip():
        return False
    if name[0].isdecimal():
        return True
    return name.startswith("v") and len(name) > 1 and name[1].isdecimal()


def list_tags(
    repo_path: str, limit: int = 0, runner: Optional[Runner] = None
) -> List[str]:
    """
    Tag names, newest first by creation date.

    Args:
        limit: Keep at most this many names; 0 keeps all.

    Returns:
        List[str]: Empty on any failure.
    """
    rc, out = _call(runner, ["tag", "--sort=-creatordate"], repo_path)
    if rc != 0:
        return []
    names = [ln.strip() for ln in out.splitlines() if ln.strip()]
    return _truncate(names, limit)


def list_releases(
    repo_path: str, limit: int = 0, runner: Optional[Runner] = None
) -> List[str]:
    """
    Release tag names (see is_release_name), newest first.
    """
    names = [n for n in list_tags(repo_path, 0, runner) if is_release_name(n)]
    return _truncate(names, limit)


def _resolve_tag(name: str, repo_path: str, runner: Optional[Runner]) -> TagRecord:
    """
    Build a TagRecord with up to four git calls.

    1. cat-file -t         -> annotated ("tag") or lightweight ("commit")
    2. for-each-ref        -> tagger, tag date, subject (annotated only)
    3. rev-list -n 1       -> pointed-to commit hash
    4. show -s             -> commit author and date

    A failed step only leaves its own fields empty.
    """
    tag_type = ""
    tagger = date = message = ""
    commit_hash = commit_author = commit_date = ""

    ref = f"refs/tags/{name}"
    obj_type = _output(runner, ["cat-file", "-t", ref], repo_path)
    if obj_type == "tag":
        tag_type = TAG_ANNOTATED
    elif obj_type is not None:
        tag_type = TAG_LIGHTWEIGHT

    if tag_type == TAG_ANNOTATED:
        out = _output(
            runner,
            ["for-each-ref", ref, f"--format={TAG_OBJECT_FORMAT}"],
            repo_path,
        )
        if out is not None:
            parts = out.splitlines()[0].split(FIELD_SEP)
            parts += [""] * (3 - len(parts))
            tagger, date, message = (p.strip() for p in parts[:3])

    out = _output(runner, ["rev-list", "-n", "1", ref, "--"], repo_path)
    if out is not None:
        commit_hash = out.splitlines()[0].strip()

    if commit_hash:
        out = _output(
            runner,
            ["show", "-s", f"--format={TAG_COMMIT_FORMAT}", commit_hash, "--"],
            repo_path,
        )
        if out is not None:
            parts = out.splitlines()[0].split(FIELD_SEP)
            commit_author = parts[0].strip()
            if len(parts) > 1:
                commit_date = parts[1].strip()

    return TagRecord(
        name=name,
        date=date or commit_date,
        hash=commit_hash,
        message=message,
        commit_author=commit_author,
        tagger=tagger or commit_author,
        type=tag_type,
    )


def get_tags_detailed(
    repo_path: str, limit: int = 0, runner: Optional[Runner] = None
) -> ResultSet[TagRecord]:
    """
    Detailed records for the newest `limit` tags (0 = all).
    """
    names = list_tags(repo_path, limit, runner)
    return ResultSet(limit, [_resolve_tag(n, repo_path, runner) for n in names])


def get_releases_detailed(
    repo_path: str, limit: int = 0, runner: Optional[Runner] = None
) -> ResultSet[ReleaseRecord]:
    """
    Detailed records for the newest `limit` release tags (0 = all).
    """
    names = list_releases(repo_path, limit, runner)
    return ResultSet(
        limit,
        [ReleaseRecord.from_tag(_resolve_tag(n, repo_path, runner)) for n in names],
    )


# -------------------------------------------------------------------
# Commits
# -------------------------------------------------------------------
def parse_commit_log(output: str) -> List[CommitRecord]:
    """
    Parse `git log --format=COMMIT_FORMAT` output.

    Records with fewer than four fields (hash, author, date, subject) are
    dropped; the body is optional.
    """
    commits: List[CommitRecord] = []
    for chunk in output.split(RECORD_SEP):
        chunk = chunk.strip("\r\n")
        if not chunk.strip():
            continue
        parts = chunk.split(FIELD_SEP, 4)
        if len(parts) < 4:
            logger.debug("Skipping malformed log record: %r", chunk[:80])
            continue
        commit_hash, author, date, title = (p.strip() for p in parts[:4])
        body = parts[4].strip() if len(parts) > 4 else ""
        commits.append(
            CommitRecord(
                hash=commit_hash, author=author, date=date, title=title, body=body
            )
        )
    return commits


def get_commits_detailed(
    repo_path: str,
    branch: str = DEFAULT_BRANCH,
    limit: int = DEFAULT_COMMIT_LIMIT,
    runner: Optional[Runner] = None,
) -> ResultSet[CommitRecord]:
    """
    The `limit` most recent commits of `branch` (or HEAD), newest first.

    The result's `limit` echoes the request even when fewer commits exist
    or git fails. A limit of 0 or less lists every commit.
    """
    ref = resolve_branch(repo_path, branch, runner)
    args: List[str] = ["log"]
    if limit > 0:
        args += ["-n", str(limit)]
    args += [f"--format={COMMIT_FORMAT}", ref, "--"]
    rc, out = _call(runner, args, repo_path)
    if rc != 0:
        return ResultSet(limit, [])
    return ResultSet(limit, _truncate(parse_commit_log(out), limit))


__all__ = [
    "Runner",
    "HEAD",
    "DEFAULT_BRANCH",
    "DEFAULT_COMMIT_LIMIT",
    "FIELD_SEP",
    "RECORD_SEP",
    "COMMIT_FORMAT",
    "run_git",
    "resolve_branch",
    "get_build_number",
    "get_commit_info",
    "is_release_name",
    "list_tags",
    "list_releases",
    "get_tags_detailed",
    "get_releases_detailed",
    "parse_commit_log",
    "get_commits_detailed",
]
