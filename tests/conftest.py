"""Shared pytest fixtures for dotfailes tests."""

import subprocess
from pathlib import Path
from typing import Dict

import pytest


def run_git(*args, cwd=None) -> str:
    """Run git and return stripped stdout, raising on failure."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout.strip()


@pytest.fixture(autouse=True)
def home(tmp_path, monkeypatch) -> Path:
    """Isolate HOME, git config and the dotfiles directory per test.

    Commits made by test helpers get an identity through the environment;
    ``git config user.name`` stays empty unless a test sets it.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USER", "testuser")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(home / ".gitconfig"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("DOTFILES_DIR", str(home / ".dotfailes"))
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test User")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@test.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test User")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@test.com")
    return home


@pytest.fixture
def git():
    return run_git


@pytest.fixture
def make_remote(tmp_path):
    """Factory for a bare "remote" repository with branches.

    ``branches`` maps branch name to ``{filename: content}``. ``main`` is
    committed first; every other branch forks from it and writes its own
    files on top.
    """

    def _make(branches: Dict[str, Dict[str, str]], name: str = "remote.git") -> Path:
        remote = tmp_path / name
        run_git("init", "--bare", str(remote))
        run_git("--git-dir", str(remote), "symbolic-ref", "HEAD", "refs/heads/main")

        work = tmp_path / f"{name}-work"
        work.mkdir()
        run_git("init", cwd=work)
        run_git("symbolic-ref", "HEAD", "refs/heads/main", cwd=work)

        def commit_files(files: Dict[str, str], message: str):
            for filename, content in files.items():
                path = work / filename
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(content)
            run_git("add", "-A", cwd=work)
            run_git("commit", "--allow-empty", "-m", message, cwd=work)

        commit_files(branches.get("main", {}), "main: initial")
        for branch, files in branches.items():
            if branch == "main":
                continue
            run_git("checkout", "-b", branch, "main", cwd=work)
            commit_files(files, f"{branch}: changes")
            run_git("checkout", "main", cwd=work)

        run_git("remote", "add", "origin", str(remote), cwd=work)
        run_git("push", "origin", "--all", cwd=work)
        return remote

    return _make


@pytest.fixture
def remote_work(tmp_path):
    """Path of the scratch clone ``make_remote`` used for a remote."""

    def _work(name: str = "remote.git") -> Path:
        return tmp_path / f"{name}-work"

    return _work
