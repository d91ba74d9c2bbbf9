"""Unit tests for DotfilesManager with a mocked git repo."""

import logging
from pathlib import Path
from unittest.mock import MagicMock, call

import pytest

from dotfailes.config import Config
from dotfailes.dotfiles import BareGitRepo, DotfilesManager
from dotfailes.errors import (
    GitCommandFailure,
    MergeConflict,
    MissingGitIdentity,
    RemoteNotConfigured,
)
from dotfailes.setups import ResolvedSetup
from dotfailes.system import OS


def _ok(stdout: str = "") -> MagicMock:
    return MagicMock(returncode=0, stdout=stdout, stderr="")


def _fail(stderr: str = "boom", stdout: str = "") -> MagicMock:
    return MagicMock(returncode=1, stdout=stdout, stderr=stderr)


@pytest.fixture
def resolved(tmp_path) -> ResolvedSetup:
    return ResolvedSetup(
        name="laptop-setup",
        os=OS.LINUX,
        repo=tmp_path / ".dotfiles",
        work_tree=tmp_path / "home",
        branch="laptop-setup",
    )


@pytest.fixture
def git() -> MagicMock:
    git = MagicMock(spec=BareGitRepo)
    git.remote_url.return_value = "git@example.com:me/dots.git"
    git.fetch.return_value = True
    git.run.return_value = _ok()
    return git


@pytest.fixture
def manager(resolved, git, tmp_path) -> DotfilesManager:
    return DotfilesManager(resolved, Config(tmp_path / "cfg"), git=git)


class TestRemoteBranchForFetch:
    """Tests for the remote branch fallback."""

    def test_branch_on_remote(self, manager, git):
        git.remote_has_branch.return_value = True

        assert manager.remote_branch_for_fetch("origin") == "origin/laptop-setup"
        git.fetch.assert_called_once_with("origin", "laptop-setup")

    def test_falls_back_to_main_with_warning(self, manager, git, caplog):
        git.remote_has_branch.return_value = False

        with caplog.at_level(logging.WARNING):
            ref = manager.remote_branch_for_fetch("origin")

        assert ref == "origin/main"
        git.fetch.assert_called_once_with("origin", "main")
        assert "laptop-setup" in caplog.text
        assert "origin/main" in caplog.text

    def test_fetch_failure_only_warns(self, manager, git, caplog):
        git.remote_has_branch.return_value = True
        git.fetch.return_value = False

        with caplog.at_level(logging.WARNING):
            ref = manager.remote_branch_for_fetch("origin")

        assert ref == "origin/laptop-setup"
        assert "Fetch failed" in caplog.text

    def test_fallback_branch_from_settings(self, resolved, git, tmp_path):
        cfg_dir = tmp_path / "cfg"
        cfg_dir.mkdir()
        (cfg_dir / "settings.yaml").write_text("fallback_branch: trunk\n")
        manager = DotfilesManager(resolved, Config(cfg_dir), git=git)
        git.remote_has_branch.return_value = False

        assert manager.remote_branch_for_fetch("upstream") == "upstream/trunk"

    def test_default_remote(self, manager, git):
        git.remote_has_branch.return_value = True

        assert manager.remote_branch_for_fetch() == "origin/laptop-setup"

    def test_unknown_remote(self, manager, git):
        git.remote_url.return_value = None

        with pytest.raises(RemoteNotConfigured):
            manager.remote_branch_for_fetch("typo")

        git.fetch.assert_not_called()
        git.remote_has_branch.assert_not_called()


class TestEnsureBranchPushed:
    """Tests for ensure_branch_pushed."""

    def test_creates_branch_and_empty_commit(self, manager, git):
        git.local_branch_exists.return_value = False
        git.has_commits.return_value = False
        git.get_config_value.side_effect = lambda key: {
            "user.name": "Test", "user.email": "t@example.com",
        }[key]

        manager.ensure_branch_pushed("origin")

        assert git.run.call_args_list == [
            call("checkout", "-b", "laptop-setup", check=False),
            call(
                "commit", "--allow-empty", "-m",
                "Initialize setup branch laptop-setup", check=False,
            ),
            call("push", "-u", "origin", "laptop-setup", check=False),
        ]

    def test_existing_branch_with_commits(self, manager, git):
        git.local_branch_exists.return_value = True
        git.has_commits.return_value = True

        manager.ensure_branch_pushed("origin")

        assert git.run.call_args_list == [
            call("checkout", "laptop-setup", check=False),
            call("push", "-u", "origin", "laptop-setup", check=False),
        ]

    def test_missing_identity(self, manager, git):
        git.local_branch_exists.return_value = False
        git.has_commits.return_value = False
        git.get_config_value.return_value = None

        with pytest.raises(MissingGitIdentity):
            manager.ensure_branch_pushed("origin")

        pushed = [c for c in git.run.call_args_list if c.args[0] == "push"]
        assert pushed == []

    def test_checkout_failure_is_fatal(self, manager, git):
        git.local_branch_exists.return_value = False
        git.run.return_value = _fail("fatal: not a git repository")

        with pytest.raises(GitCommandFailure) as exc_info:
            manager.ensure_branch_pushed("origin")
        assert "not a git repository" in str(exc_info.value)

    def test_push_failure_is_fatal(self, manager, git):
        git.local_branch_exists.return_value = True
        git.has_commits.return_value = True
        git.run.side_effect = [_ok(), _fail("rejected")]

        with pytest.raises(GitCommandFailure):
            manager.ensure_branch_pushed("origin")

    def test_unknown_remote(self, manager, git):
        git.remote_url.return_value = None

        with pytest.raises(RemoteNotConfigured):
            manager.ensure_branch_pushed("backup")


class TestEnsureRemoteBranch:
    """Tests for ensure_remote_branch."""

    def test_noop_when_remote_has_branch(self, manager, git):
        git.remote_has_branch.return_value = True

        assert manager.ensure_remote_branch("origin") is False
        git.run.assert_not_called()

    def test_pushes_when_missing(self, manager, git):
        git.remote_has_branch.return_value = False
        git.local_branch_exists.return_value = True
        git.has_commits.return_value = True

        assert manager.ensure_remote_branch("origin") is True
        git.run.assert_any_call("push", "-u", "origin", "laptop-setup", check=False)


class TestSync:
    """Tests for sync, where everything after resolution only warns."""

    def test_pull_and_push(self, manager, git):
        git.remote_has_branch.return_value = True
        git.ref_exists.return_value = True

        result = manager.sync("origin")

        assert result.ref == "origin/laptop-setup"
        assert result.pulled and result.pushed
        git.run.assert_any_call("merge", "--no-edit", "origin/laptop-setup", check=False)
        git.run.assert_any_call("push", "origin", "laptop-setup", check=False)

    def test_failures_are_warnings(self, manager, git, caplog):
        git.remote_has_branch.return_value = True
        git.ref_exists.return_value = True
        git.run.return_value = _fail("no luck")

        with caplog.at_level(logging.WARNING):
            result = manager.sync("origin")

        assert not result.pulled
        assert not result.pushed
        assert "Pull failed" in caplog.text
        assert "Push failed" in caplog.text

    def test_branch_override_skips_fallback(self, manager, git):
        git.ref_exists.return_value = True

        result = manager.sync("origin", "main")

        assert result.ref == "origin/main"
        git.remote_has_branch.assert_not_called()
        git.run.assert_any_call("push", "origin", "main", check=False)

    def test_requires_remote(self, manager, git):
        git.remote_url.return_value = None

        with pytest.raises(RemoteNotConfigured):
            manager.sync("origin")


class TestMergeIntoTarget:
    """Tests for merge_into_target."""

    def test_clean_merge_pushes_target_only(self, manager, git):
        git.local_branch_exists.return_value = True
        git.ref_exists.return_value = True
        git.rev_parse.side_effect = ["aaa", "bbb"]

        result = manager.merge_into_target()

        assert result.source == "origin/laptop-setup"
        assert result.target == "main"
        assert result.changed is True
        assert git.run.call_args_list == [
            call("checkout", "-f", "-B", "main", "origin/main", check=False),
            call(
                "merge", "--allow-unrelated-histories", "--no-edit",
                "origin/laptop-setup", check=False,
            ),
            call("push", "origin", "main", check=False),
        ]

    def test_target_only_on_remote(self, manager, git):
        git.local_branch_exists.return_value = False
        git.ref_exists.return_value = True
        git.rev_parse.return_value = "aaa"

        manager.merge_into_target(target="main")

        git.run.assert_any_call(
            "checkout", "-f", "-B", "main", "origin/main", check=False
        )

    def test_target_only_local(self, manager, git):
        git.local_branch_exists.return_value = True
        git.ref_exists.side_effect = lambda ref: ref != "refs/remotes/origin/main"
        git.rev_parse.return_value = "aaa"

        manager.merge_into_target(target="main")

        assert git.run.call_args_list[0] == call("checkout", "-f", "main", check=False)

    def test_target_missing_everywhere(self, manager, git):
        git.local_branch_exists.return_value = False
        git.ref_exists.return_value = False

        with pytest.raises(GitCommandFailure):
            manager.merge_into_target()

    def test_conflict_stops_before_push(self, manager, git):
        git.local_branch_exists.return_value = True
        git.ref_exists.return_value = True
        git.rev_parse.return_value = "aaa"
        git.run.side_effect = [_ok(), _fail(stdout="CONFLICT (content)")]
        git.conflicted_files.return_value = [".bashrc"]

        with pytest.raises(MergeConflict) as exc_info:
            manager.merge_into_target()

        assert exc_info.value.files == [".bashrc"]
        assert exc_info.value.target == "main"
        assert git.run.call_count == 2

    def test_other_merge_failure_is_fatal(self, manager, git):
        git.local_branch_exists.return_value = True
        git.ref_exists.return_value = True
        git.rev_parse.return_value = "aaa"
        git.run.side_effect = [_ok(), _fail("refusing to merge")]
        git.conflicted_files.return_value = []

        with pytest.raises(GitCommandFailure):
            manager.merge_into_target()

    def test_fetch_failure_only_warns(self, manager, git, caplog):
        git.fetch.return_value = False
        git.local_branch_exists.return_value = True
        git.ref_exists.return_value = True
        git.rev_parse.return_value = "aaa"

        with caplog.at_level(logging.WARNING):
            manager.merge_into_target()

        assert "Fetch failed" in caplog.text

    def test_explicit_source_and_target(self, manager, git):
        git.local_branch_exists.return_value = True
        git.ref_exists.return_value = True
        git.rev_parse.return_value = "aaa"

        result = manager.merge_into_target("desktop-Linux", "stable", "backup")

        assert result.source == "backup/desktop-Linux"
        git.run.assert_any_call("push", "backup", "stable", check=False)


class TestBashFiles:
    """Tests for bash file helpers."""

    def test_reload_snippet_quotes_path(self, git, tmp_path):
        resolved = ResolvedSetup(
            name="x", os=OS.LINUX, repo=tmp_path / "r",
            work_tree=Path("/home/me/with space"), branch="x",
        )
        manager = DotfilesManager(resolved, Config(tmp_path / "cfg"), git=git)

        assert manager.reload_snippet() == "source '/home/me/with space/.bashrc'"

    def test_init_requires_tracked_files(self, manager, git):
        git.remote_has_branch.return_value = True
        git.list_tree.return_value = [".vimrc"]

        with pytest.raises(GitCommandFailure):
            manager.init_bash_files("origin")

    def test_init_checks_out_only_tracked(self, manager, git, resolved):
        resolved.work_tree.mkdir(parents=True, exist_ok=True)
        git.remote_has_branch.return_value = True
        git.list_tree.return_value = [".bashrc", ".vimrc", ".bash_aliases"]

        result = manager.init_bash_files("origin")

        assert result.files == [".bashrc", ".bash_aliases"]
        assert result.backup_dir is None
        git.run.assert_called_with(
            "checkout", "origin/laptop-setup", "--", ".bashrc", ".bash_aliases",
            check=False,
        )

    def test_init_backs_up_existing(self, manager, git, resolved):
        resolved.work_tree.mkdir(parents=True, exist_ok=True)
        (resolved.work_tree / ".bashrc").write_text("old")
        (resolved.work_tree / ".bashrc.d").mkdir()
        (resolved.work_tree / ".bashrc.d" / "10-path.sh").write_text("PATH")
        git.remote_has_branch.return_value = True
        git.list_tree.return_value = [".bashrc"]

        result = manager.init_bash_files("origin")

        assert result.backup_dir is not None
        assert result.backup_dir.name.startswith("bash-init-")
        assert (result.backup_dir / ".bashrc").read_text() == "old"
        assert (result.backup_dir / ".bashrc.d" / "10-path.sh").read_text() == "PATH"

    def test_list_bash_files(self, manager, git, resolved):
        resolved.work_tree.mkdir(parents=True, exist_ok=True)
        (resolved.work_tree / ".bashrc").write_text("x")
        git.ref_exists.return_value = True
        git.list_tree.return_value = [".bashrc", ".bash_profile"]

        statuses = {s.name: s for s in manager.list_bash_files("origin")}

        assert statuses[".bashrc"].tracked and statuses[".bashrc"].present
        assert statuses[".bash_profile"].tracked
        assert not statuses[".bash_profile"].present
        assert not statuses[".bash_aliases"].tracked
