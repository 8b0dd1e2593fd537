"""Tests for the git publisher."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from forge.git.publisher import DEFAULT_MESSAGE, PublishError, Publisher


def _repo(tmp_path: Path) -> Path:
    repo = tmp_path / "repo"
    (repo / ".git").mkdir(parents=True)
    (repo / "public").mkdir()
    return repo


def _runner(calls, *, branch="main", status="", staged=" M public/registry.json\n", fail=None):
    def runner(args, cwd, env=None, capture_output=False):  # type: ignore[no-untyped-def]
        args = list(args)
        calls.append((args, Path(cwd), env, capture_output))
        if fail is not None and args[:2] == fail:
            raise subprocess.CalledProcessError(1, args)
        if args[:2] == ["git", "rev-parse"]:
            return f"{branch}\n"
        if args == ["git", "status", "--porcelain"]:
            return status
        if args[:3] == ["git", "status", "--porcelain"]:
            return staged
        return ""

    return runner


def test_publish_commits_and_pushes_output(tmp_path: Path) -> None:
    repo = _repo(tmp_path)
    calls = []

    result = Publisher(runner=_runner(calls)).publish(repo, repo / "public", message="Release 1.1")

    assert result is True
    commands = [call[0] for call in calls]
    assert commands == [
        ["git", "rev-parse", "--abbrev-ref", "HEAD"],
        ["git", "status", "--porcelain"],
        ["git", "add", "public"],
        ["git", "status", "--porcelain", "--", "public"],
        ["git", "commit", "-m", "Release 1.1"],
        ["git", "push", "origin", "HEAD"],
    ]
    assert all(call[1] == repo for call in calls)
    commit_env = calls[4][2]
    assert commit_env["GIT_AUTHOR_NAME"]
    assert commit_env["GIT_COMMITTER_EMAIL"]


def test_publish_without_push_uses_default_message(tmp_path: Path) -> None:
    repo = _repo(tmp_path)
    calls = []

    result = Publisher(runner=_runner(calls, branch="master")).publish(repo, "public", push=False)

    assert result is True
    commands = [call[0] for call in calls]
    assert ["git", "commit", "-m", DEFAULT_MESSAGE] in commands
    assert not any(command[:2] == ["git", "push"] for command in commands)


def test_publish_returns_false_when_nothing_changed(tmp_path: Path) -> None:
    repo = _repo(tmp_path)
    calls = []

    result = Publisher(runner=_runner(calls, staged="")).publish(repo, repo / "public")

    assert result is False
    assert not any(call[0][:2] == ["git", "commit"] for call in calls)


def test_publish_requires_git_repository(tmp_path: Path) -> None:
    calls = []

    with pytest.raises(PublishError, match="not a git repository"):
        Publisher(runner=_runner(calls)).publish(tmp_path, tmp_path / "public")

    assert not calls


def test_publish_requires_main_or_master(tmp_path: Path) -> None:
    repo = _repo(tmp_path)

    with pytest.raises(PublishError, match="feature/x"):
        Publisher(runner=_runner([], branch="feature/x")).publish(repo, repo / "public")


def test_publish_refuses_dirty_tree_outside_output(tmp_path: Path) -> None:
    repo = _repo(tmp_path)
    status = " M public/registry.json\n?? public/docs/new.html\n M src/components/button/button.tsx\n"

    with pytest.raises(PublishError, match="src/components/button/button.tsx") as excinfo:
        Publisher(runner=_runner([], status=status)).publish(repo, repo / "public")

    assert "public/registry.json" not in str(excinfo.value)


def test_dirty_paths_handles_renames(tmp_path: Path) -> None:
    repo = _repo(tmp_path)
    status = "R  old.txt -> new.txt\n M public/index.json\n"

    dirty = Publisher(runner=_runner([], status=status)).dirty_paths(repo, ignore="public")

    assert dirty == ["new.txt"]


def test_publish_wraps_git_failures(tmp_path: Path) -> None:
    repo = _repo(tmp_path)

    with pytest.raises(PublishError, match="git push"):
        Publisher(runner=_runner([], fail=["git", "push"])).publish(repo, repo / "public")


def test_init_repository_reports_failure(tmp_path: Path) -> None:
    calls = []
    assert Publisher(runner=_runner(calls)).init_repository(tmp_path) is True
    assert calls[0][0] == ["git", "init"]
    assert calls[0][3] is True

    assert Publisher(runner=_runner([], fail=["git", "init"])).init_repository(tmp_path) is False
