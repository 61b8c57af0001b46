"""Tests for the clone-based strategy with the git CLI replaced by a fake."""

import subprocess
from pathlib import Path

import pytest

import git_sync
from conftest import FakeSession, snapshot
from errors import SyncFailed
from git_sync import GitSyncManager
from loader import OneShot, StatusPublisher, WebLoader
from models import SyncResult

REPO_URL = "https://example.test/owner/repo.git"


class FakeGit:
    def __init__(self, heads=("c1", "c1"), fail=None, missing=False):
        self.heads = list(heads)
        self.fail = fail
        self.missing = missing
        self.commands = []

    def __call__(self, cmd, cwd=None, **kwargs):
        if self.missing:
            raise FileNotFoundError("git")
        self.commands.append((cmd[1:], cwd))
        sub = cmd[1]
        if sub == self.fail:
            return subprocess.CompletedProcess(
                cmd, 128, "", "fatal: Not possible to fast-forward, aborting.")
        if sub == "clone":
            dest = Path(cmd[-1])
            (dest / ".git").mkdir()
            (dest / "index.html").write_text("<h1>cloned</h1>", encoding="utf-8")
        if sub == "rev-parse":
            return subprocess.CompletedProcess(cmd, 0, self.heads.pop(0) + "\n", "")
        return subprocess.CompletedProcess(cmd, 0, "", "")


@pytest.fixture
def git_manager(app_dir, bundled_dir):
    return GitSyncManager(repo_url=REPO_URL, branch="main", app_dir=app_dir,
                          bundled_dir=bundled_dir, session=FakeSession())


@pytest.fixture
def fake_git(monkeypatch):
    def install(**kwargs):
        fake = FakeGit(**kwargs)
        monkeypatch.setattr(git_sync.subprocess, "run", fake)
        return fake

    return install


class TestClone:
    def test_first_update_clones_over_bundled_copy(self, git_manager, fake_git):
        fake = fake_git()
        git_manager.ensure_local_content_exists()

        assert git_manager.update() is SyncResult.UPDATED

        args, _ = fake.commands[0]
        assert args[:6] == ["clone", "--depth", "1", "--branch", "main", REPO_URL]
        assert git_manager.has_working_copy()
        assert snapshot(git_manager.local_root) == {"index.html": b"<h1>cloned</h1>"}
        assert list(git_manager.app_dir.glob(git_manager.staging_prefix + "*")) == []

    def test_failed_clone_keeps_bundled_copy(self, git_manager, fake_git, bundled_dir):
        fake_git(fail="clone")
        git_manager.ensure_local_content_exists()

        with pytest.raises(SyncFailed, match="fast-forward"):
            git_manager.update()

        assert snapshot(git_manager.local_root) == snapshot(bundled_dir)
        assert list(git_manager.app_dir.glob(git_manager.staging_prefix + "*")) == []

    def test_missing_git_binary(self, git_manager, fake_git):
        fake_git(missing=True)
        with pytest.raises(SyncFailed):
            git_manager.update()

    def test_staging_failure_is_sync_failed(self, git_manager, fake_git, monkeypatch):
        fake = fake_git()

        def read_only():
            raise PermissionError("read-only file system")

        monkeypatch.setattr(git_manager, "new_staging_dir", read_only)
        with pytest.raises(SyncFailed, match="read-only"):
            git_manager.update()
        assert fake.commands == []


class TestPull:
    @pytest.fixture
    def working_copy(self, git_manager):
        (git_manager.local_root / ".git").mkdir(parents=True)
        (git_manager.local_root / "index.html").write_text("<h1>v1</h1>", encoding="utf-8")
        return git_manager.local_root

    def test_unchanged_head_is_up_to_date(self, git_manager, fake_git, working_copy):
        fake = fake_git(heads=("c1", "c1"))
        assert git_manager.update() is SyncResult.UP_TO_DATE
        assert (["pull", "--ff-only"], working_copy) in fake.commands

    def test_new_head_is_updated(self, git_manager, fake_git, working_copy):
        fake_git(heads=("c1", "c2"))
        assert git_manager.update() is SyncResult.UPDATED

    def test_non_fast_forward_fails_without_touching_copy(self, git_manager, fake_git,
                                                         working_copy):
        fake_git(fail="pull")
        before = snapshot(working_copy)
        with pytest.raises(SyncFailed):
            git_manager.update()
        assert snapshot(working_copy) == before

    def test_load_sequence_reports_failed_pull(self, git_manager, fake_git, working_copy):
        fake_git(fail="pull")
        loader = WebLoader(git_manager, publisher=StatusPublisher(), guard=OneShot())
        state = loader.run()
        assert state.status.startswith("Update failed. Using local version.")
        assert state.entry_document == working_copy / "index.html"
