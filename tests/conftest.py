"""
Shared fixtures: a scripted git runner and throw-away repositories.
"""

import os
import shutil
import subprocess
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

import pytest

GIT = shutil.which("git")


class FakeRunner:
    """
    Returns canned (rc, stdout, stderr) by the longest matching argument prefix.

    Unmatched commands fail with rc=128 like git outside a repository.
    """

    def __init__(self, responses: Optional[Dict[Tuple[str, ...], Tuple[int, str]]] = None):
        self.responses = dict(responses or {})
        self.calls: List[List[str]] = []

    def add(self, args, rc: int = 0, out: str = ""):
        self.responses[tuple(args)] = (rc, out)
        return self

    def __call__(self, args, cwd):
        self.calls.append(list(args))
        best = None
        for prefix, result in self.responses.items():
            if tuple(args[: len(prefix)]) == prefix:
                if best is None or len(prefix) > len(best[0]):
                    best = (prefix, result)
        if best is None:
            return 128, "", "fatal: not a git repository"
        rc, out = best[1]
        return rc, out, ""


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def not_a_repo(tmp_path, monkeypatch):
    """An empty directory git will not discover a parent repository from."""
    path = tmp_path / "plain"
    path.mkdir()
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    return str(path)


class RepoBuilder:
    """Creates commits and tags with fixed identities and dates."""

    def __init__(self, path):
        self.path = str(path)
        self.home = os.path.join(self.path, "..", "home")
        os.makedirs(self.home, exist_ok=True)
        self._tick = 0
        self.git("init", "-q")
        self.git("symbolic-ref", "HEAD", "refs/heads/main")

    def _env(self, author: str, date: str) -> Dict[str, str]:
        env = dict(os.environ)
        env.update(
            {
                "HOME": self.home,
                "GIT_CONFIG_NOSYSTEM": "1",
                "GIT_AUTHOR_NAME": author,
                "GIT_AUTHOR_EMAIL": f"{author.lower()}@example.com",
                "GIT_COMMITTER_NAME": author,
                "GIT_COMMITTER_EMAIL": f"{author.lower()}@example.com",
                "GIT_AUTHOR_DATE": date,
                "GIT_COMMITTER_DATE": date,
            }
        )
        return env

    def _next_date(self) -> str:
        self._tick += 1
        when = datetime(2024, 1, 1, 12, tzinfo=timezone.utc) + timedelta(hours=self._tick)
        return when.isoformat()

    def git(self, *args, author: str = "Builder", date: Optional[str] = None) -> str:
        cp = subprocess.run(
            [GIT, "-c", "commit.gpgsign=false", "-c", "tag.gpgsign=false", *args],
            cwd=self.path,
            env=self._env(author, date or self._next_date()),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            check=True,
        )
        return cp.stdout.strip()

    def add_file(self, relpath: str, content: str = "x\n"):
        full = os.path.join(self.path, relpath)
        os.makedirs(os.path.dirname(full), exist_ok=True)
        with open(full, "w", encoding="utf-8") as f:
            f.write(content)
        self.git("add", "--", relpath)

    def commit(self, title: str, body: str = "", author: str = "Builder") -> str:
        message = title if not body else f"{title}\n\n{body}"
        self.git("commit", "-q", "--allow-empty", "-m", message, author=author)
        return self.git("rev-parse", "HEAD")

    def tag(self, name: str, message: Optional[str] = None, tagger: str = "Tagger"):
        if message is None:
            self.git("tag", name, author=tagger)
        else:
            self.git("tag", "-a", name, "-m", message, author=tagger)


@pytest.fixture
def repo(tmp_path, monkeypatch):
    if GIT is None:
        pytest.skip("git executable not available")
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    path = tmp_path / "repo"
    path.mkdir()
    return RepoBuilder(path)
