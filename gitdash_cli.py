#!/usr/bin/env python3
"""
Command-line front end for git-dashboard.

Prints the JSON payloads the dashboard renders:

    gitdash --repo ~/src/project build-number
    gitdash --repo ~/src/project commits --limit 20
    gitdash snapshot --by-date --output snapshot.json

Options not given on the command line come from the settings file
(see gitdash.app_meta).
"""

from __future__ import annotations

import argparse
import functools
import logging
import sys
from typing import Any, Callable, Dict, List, Optional

from gitdash import git_utils
from gitdash.app_meta import (
    APP_TITLE,
    detect_initial_repo_path,
    get_git_timeout,
    get_int_setting,
    load_settings,
    save_settings,
)
from gitdash.models import dumps
from gitdash.snapshot import collect_snapshot, group_commits_by_date, save_snapshot
from procutils import which

logger = logging.getLogger("gitdash")

LIMIT_KEYS = {
    "tags": "tag_limit",
    "releases": "release_limit",
    "commits": "commit_limit",
    "tags-detailed": "tag_limit",
    "releases-detailed": "release_limit",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitdash", description="Show git repository metadata as JSON."
    )
    parser.add_argument("--repo", "-r", help="Repository path (default: settings or cwd)")
    parser.add_argument("--branch", "-b", help="Branch name (falls back to HEAD)")
    parser.add_argument("--git", dest="git_executable", help="git executable to run")
    parser.add_argument("--settings", help="Settings file to use")
    parser.add_argument(
        "--save-settings",
        action="store_true",
        help="Persist the effective repo path and branch",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("build-number", help="Commit count of the branch")
    sub.add_parser("commit-info", help="Latest commit hash, timestamp and subject")
    for name, what in (
        ("tags", "Tag names, newest first"),
        ("releases", "Release tag names, newest first"),
        ("commits", "Recent commits in detail"),
        ("tags-detailed", "Tags in detail"),
        ("releases-detailed", "Releases in detail"),
    ):
        p = sub.add_parser(name, help=what)
        p.add_argument("--limit", "-n", type=int, help="Maximum entries (0 = all)")

    snap = sub.add_parser("snapshot", help="Everything above in one document")
    snap.add_argument("--output", "-o", help="Also write the snapshot to this file")
    snap.add_argument(
        "--by-date", action="store_true", help="Print commit titles grouped by day"
    )
    return parser


def _runner(settings: Dict[str, object]) -> git_utils.Runner:
    return functools.partial(
        git_utils.run_git,
        executable=str(settings.get("git_executable") or "git"),
        timeout=get_git_timeout(settings),
    )


def _limit(args: argparse.Namespace, settings: Dict[str, object]) -> int:
    if getattr(args, "limit", None) is not None:
        return max(args.limit, 0)
    return get_int_setting(settings, LIMIT_KEYS[args.command])


def _run_command(
    args: argparse.Namespace, settings: Dict[str, object], repo: str, branch: str
) -> Any:
    runner = _runner(settings)
    commands: Dict[str, Callable[[], Any]] = {
        "build-number": lambda: git_utils.get_build_number(repo, branch, runner=runner),
        "commit-info": lambda: git_utils.get_commit_info(repo, branch, runner=runner),
        "tags": lambda: git_utils.list_tags(repo, _limit(args, settings), runner=runner),
        "releases": lambda: git_utils.list_releases(
            repo, _limit(args, settings), runner=runner
        ),
        "commits": lambda: git_utils.get_commits_detailed(
            repo, branch, _limit(args, settings), runner=runner
        ),
        "tags-detailed": lambda: git_utils.get_tags_detailed(
            repo, _limit(args, settings), runner=runner
        ),
        "releases-detailed": lambda: git_utils.get_releases_detailed(
            repo, _limit(args, settings), runner=runner
        ),
    }
    if args.command in commands:
        return commands[args.command]()

    snapshot = collect_snapshot(
        repo,
        branch,
        commit_limit=get_int_setting(settings, "commit_limit"),
        tag_limit=get_int_setting(settings, "tag_limit"),
        release_limit=get_int_setting(settings, "release_limit"),
        runner=runner,
    )
    if args.output and not save_snapshot(snapshot, args.output):
        logger.error("Snapshot not written to %s", args.output)
    if args.by_date:
        return {
            day.isoformat(): [c.title for c in commits]
            for day, commits in group_commits_by_date(snapshot.commits.items).items()
        }
    return snapshot


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point. Returns the process exit code.
    """
    args = build_parser().parse_args(argv)
    settings = load_settings(args.settings)

    level = "DEBUG" if args.verbose else str(settings.get("log_level") or "INFO")
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.git_executable:
        settings["git_executable"] = args.git_executable
    if args.repo:
        settings["repo_path"] = args.repo
        repo = args.repo
    else:
        repo = detect_initial_repo_path(settings) or "."
    branch = args.branch or str(settings.get("branch") or git_utils.DEFAULT_BRANCH)
    settings["branch"] = branch

    git_executable = str(settings.get("git_executable") or "git")
    if which(git_executable) is None:
        logger.warning("git executable %r not found; results will be defaults", git_executable)

    if args.save_settings:
        save_settings(settings, args.settings)

    logger.debug("%s: %s on %s@%s", APP_TITLE, args.command, repo, branch)
    print(dumps(_run_command(args, settings, repo, branch)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
