#!/usr/bin/env python3
"""
Process spawning helpers for git-dashboard.

This module centralizes:
- Environment utilities for plain, non-interactive subprocesses
- A capturing command runner that never raises
- A small executable lookup shim
"""

from __future__ import annotations

import logging
import os
import subprocess
from typing import Dict, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger("gitdash.process")


# -------------------------------------------------------------------
# Environment helpers
# -------------------------------------------------------------------
def build_git_env(base: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """
    Build an environment suitable for parsing git output.

    Args:
        base: Optional base environment to copy; defaults to os.environ.

    Returns:
        A new environment dictionary safe to pass to subprocess calls.
    """
    env: Dict[str, str] = dict(base if base is not None else os.environ)
    env.update(
        {
            "GIT_TERMINAL_PROMPT": "0",
            "GIT_PAGER": "cat",
            "LC_ALL": "C",
            "NO_COLOR": "1",
        }
    )
    # Parsers expect uncoloured output
    for key in ("FORCE_COLOR", "CLICOLOR_FORCE"):
        env.pop(key, None)
    return env


# -------------------------------------------------------------------
# Capturing runner
# -------------------------------------------------------------------
def run_command(
    cmd: Sequence[str],
    cwd: Optional[str],
    env: Optional[Mapping[str, str]] = None,
    timeout: Optional[float] = None,
) -> Tuple[int, str, str]:
    """
    Run a command to completion and capture stdout/stderr as text.

    Args:
        cmd: Command vector (argv).
        cwd: Working directory or None.
        env: Optional environment mapping; if None, build_git_env() is used.
        timeout: Seconds before the process is killed; None waits forever.

    Returns:
        (returncode, stdout, stderr)

    Resilience:
        - Spawn failures (missing executable, bad cwd) return (1, "", message).
        - A timeout returns (1, "", message) after the child is killed.
    """
    try:
        cp = subprocess.run(
            list(cmd),
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            stdin=subprocess.DEVNULL,
            encoding="utf-8",
            errors="replace",
            env=dict(env) if env is not None else build_git_env(),
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as ex:
        logger.warning("%s timed out after %ss", cmd[0], ex.timeout)
        return 1, "", f"timed out after {ex.timeout}s"
    except (OSError, ValueError, subprocess.SubprocessError) as ex:
        logger.warning("failed to spawn %s: %s", cmd[0] if cmd else "<empty>", ex)
        return 1, "", str(ex)
    return cp.returncode, cp.stdout or "", cp.stderr or ""


def which(prog: str) -> Optional[str]:
    """
    Small shim for shutil.which to avoid importing the whole module at top-level.
    """
    import shutil

    return shutil.which(prog)


__all__ = [
    "build_git_env",
    "run_command",
    "which",
]
