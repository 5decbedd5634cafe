"""
Shared pytest fixtures for git-calver tests.

Provides throwaway git repositories whose commits carry fixed author and
committer dates, so calendar versions are predictable.
"""

import os
import subprocess
from pathlib import Path
from typing import Dict, Optional

import pytest


def _isolated_git_env(home: Path) -> Dict[str, str]:
    """Environment that ignores the developer's global and system git config."""
    env = os.environ.copy()
    env["HOME"] = str(home)
    env["GIT_CONFIG_NOSYSTEM"] = "1"
    env["GIT_CONFIG_GLOBAL"] = os.devnull
    for key in list(env):
        if key.startswith("GIT_CONFIG_KEY_") or key.startswith("GIT_CONFIG_VALUE_"):
            del env[key]
    env.pop("GIT_CONFIG_COUNT", None)
    env["GIT_MERGE_AUTOEDIT"] = "no"
    return env


class RepoBuilder:
    """Builds a git repository commit by commit with explicit dates."""

    def __init__(self, path: Path, env: Dict[str, str]):
        self.path = path
        self.env = env
        path.mkdir(parents=True, exist_ok=True)
        self.git("init", "-q")
        self.git("symbolic-ref", "HEAD", "refs/heads/main")
        self.git("config", "user.email", "test@example.com")
        self.git("config", "user.name", "Test User")
        self.git("config", "commit.gpgsign", "false")
        self.git("config", "tag.gpgsign", "false")

    def git(self, *args: str, env: Optional[Dict[str, str]] = None) -> str:
        result = subprocess.run(
            ["git", *args],
            cwd=self.path,
            check=True,
            capture_output=True,
            text=True,
            env=env or self.env,
        )
        return result.stdout.strip()

    def _dated_env(self, when: str) -> Dict[str, str]:
        env = dict(self.env)
        env["GIT_AUTHOR_DATE"] = when
        env["GIT_COMMITTER_DATE"] = when
        return env

    def commit(self, when: str, message: Optional[str] = None) -> str:
        """Create an empty commit dated ``when`` ("YYYY-MM-DD HH:MM:SS +ZZZZ")."""
        self.git(
            "commit",
            "-q",
            "--allow-empty",
            "-m",
            message or f"commit at {when}",
            env=self._dated_env(when),
        )
        return self.head()

    def merge(self, branch: str, when: str, unrelated: bool = False) -> str:
        """Merge ``branch`` into the current branch with a merge commit."""
        args = ["merge", "-q", "--no-ff", "-m", f"merge {branch}"]
        if unrelated:
            args.append("--allow-unrelated-histories")
        args.append(branch)
        self.git(*args, env=self._dated_env(when))
        return self.head()

    def checkout(self, *args: str) -> None:
        self.git("checkout", "-q", *args)

    def head(self) -> str:
        return self.git("rev-parse", "HEAD")


@pytest.fixture
def git_env(tmp_path, monkeypatch) -> Dict[str, str]:
    """Isolate git from the user's configuration for the whole test."""
    home = tmp_path / "home"
    home.mkdir()
    env = _isolated_git_env(home)
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", os.devnull)
    for key in list(os.environ):
        if key.startswith("GIT_CONFIG_KEY_") or key.startswith("GIT_CONFIG_VALUE_"):
            monkeypatch.delenv(key)
    monkeypatch.delenv("GIT_CONFIG_COUNT", raising=False)
    return env


@pytest.fixture
def make_repo(tmp_path, git_env):
    """Factory for RepoBuilder instances rooted under tmp_path."""
    counter = {"n": 0}

    def _make(name: Optional[str] = None) -> RepoBuilder:
        counter["n"] += 1
        return RepoBuilder(tmp_path / (name or f"repo{counter['n']}"), git_env)

    return _make


@pytest.fixture
def same_day_repo(make_repo) -> RepoBuilder:
    """Root at 2020-01-05 10:00 UTC and a second commit at 15:00 the same day."""
    repo = make_repo("same-day")
    repo.first = repo.commit("2020-01-05 10:00:00 +0000", "root")
    repo.second = repo.commit("2020-01-05 15:00:00 +0000", "second")
    return repo


@pytest.fixture
def single_commit_repo(make_repo) -> RepoBuilder:
    """One commit at 2021-03-10 00:00 UTC."""
    repo = make_repo("single")
    repo.only = repo.commit("2021-03-10 00:00:00 +0000", "only")
    return repo


@pytest.fixture
def merge_repo(make_repo) -> RepoBuilder:
    """Four commits on 2020-01-05 with a feature branch merged into main.

    main:    A(09:00) --- C(11:00) --- M(12:00)
                \\                     /
    feature:     B(10:00) -----------
    """
    repo = make_repo("merge")
    repo.a = repo.commit("2020-01-05 09:00:00 +0000", "A")
    repo.checkout("-b", "feature")
    repo.b = repo.commit("2020-01-05 10:00:00 +0000", "B")
    repo.checkout("main")
    repo.c = repo.commit("2020-01-05 11:00:00 +0000", "C")
    repo.m = repo.merge("feature", "2020-01-05 12:00:00 +0000")
    return repo
