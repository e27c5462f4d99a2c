#!/usr/bin/env python3
"""
Utilities package for git-dashboard.

This package centralizes subprocess helpers.
It re-exports commonly used helpers from procutils.process for convenience:

    from procutils import run_command, build_git_env
"""

from __future__ import annotations

from typing import TYPE_CHECKING

__all__ = [
    "build_git_env",
    "run_command",
    "which",
]

if TYPE_CHECKING:
    # Type-checking only imports (no runtime cost)
    from .process import build_git_env as _build_git_env
    from .process import run_command as _run_command
    from .process import which as _which


def __getattr__(name: str):
    """
    Lazily expose helpers from procutils.process to avoid importing
    the module unless a symbol is actually used.
    """
    if name in __all__:
        from . import process as _process  # Local import to keep it lazy

        mapping = {
            "build_git_env": _process.build_git_env,
            "run_command": _process.run_command,
            "which": _process.which,
        }
        return mapping[name]
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
