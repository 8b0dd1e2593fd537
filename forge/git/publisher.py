"""Git publishing utilities."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path, PurePosixPath
from typing import Callable, Iterable, List

from ..logging import get_logger

PUBLISH_BRANCHES = ("main", "master")
DEFAULT_MESSAGE = "Update component library"


class PublishError(RuntimeError):
    """Raised when the repository is not in a state that allows publishing."""


class Publisher:
    """Commits and pushes generated registry output."""

    def __init__(self, runner: Callable[..., str] | None = None) -> None:
        self._runner = runner or self._default_runner
        self.logger = get_logger("git.publisher")

    def init_repository(self, repo_path: Path | str) -> bool:
        """Run ``git init``; returns False when git is unavailable or fails."""
        repo = Path(repo_path)
        try:
            self._run(["git", "init"], cwd=repo, capture_output=True)
        except (subprocess.CalledProcessError, OSError) as exc:
            self.logger.warning("git init failed: %s", exc)
            return False
        return True

    def current_branch(self, repo_path: Path | str) -> str:
        output = self._run(
            ["git", "rev-parse", "--abbrev-ref", "HEAD"],
            cwd=Path(repo_path),
            capture_output=True,
        )
        return output.strip()

    def dirty_paths(self, repo_path: Path | str, *, ignore: Path | str | None = None) -> List[str]:
        """Paths with uncommitted changes, skipping anything under ``ignore``."""
        repo = Path(repo_path)
        status = self._run(["git", "status", "--porcelain"], cwd=repo, capture_output=True)
        ignored = self._to_relative(repo, Path(ignore)) if ignore is not None else None
        dirty: List[str] = []
        for line in status.splitlines():
            if not line.strip():
                continue
            path = line[3:].split(" -> ")[-1].strip().strip('"')
            if ignored and _is_within(path, ignored):
                continue
            dirty.append(path)
        return dirty

    def publish(
        self,
        repo_path: Path | str,
        output_dir: Path | str,
        *,
        message: str | None = None,
        push: bool = True,
    ) -> bool:
        """Commit ``output_dir`` and push it to ``origin``.

        Returns False when the output had nothing new to commit. Raises
        ``PublishError`` when the branch or working tree rules out publishing,
        or when a git command fails.
        """
        repo = Path(repo_path)
        if not (repo / ".git").exists():
            raise PublishError(f"{repo} is not a git repository")

        try:
            branch = self.current_branch(repo)
            if branch not in PUBLISH_BRANCHES:
                raise PublishError(f"Not on main/master branch (current: {branch})")

            dirty = self.dirty_paths(repo, ignore=output_dir)
            if dirty:
                raise PublishError(
                    "You have uncommitted changes; commit or stash them before publishing: "
                    + ", ".join(dirty)
                )

            relative_output = self._to_relative(repo, Path(output_dir))
            self._run(["git", "add", relative_output], cwd=repo)
            staged = self._run(
                ["git", "status", "--porcelain", "--", relative_output],
                cwd=repo,
                capture_output=True,
            )
            if not staged.strip():
                self.logger.info("No registry changes to publish")
                return False

            env = os.environ.copy()
            env.setdefault("GIT_AUTHOR_NAME", "forge")
            env.setdefault("GIT_AUTHOR_EMAIL", "forge@example.com")
            env.setdefault("GIT_COMMITTER_NAME", env["GIT_AUTHOR_NAME"])
            env.setdefault("GIT_COMMITTER_EMAIL", env["GIT_AUTHOR_EMAIL"])
            self._run(["git", "commit", "-m", message or DEFAULT_MESSAGE], cwd=repo, env=env)
            self.logger.info("Committed %s on %s", relative_output, branch)

            if push:
                self._run(["git", "push", "origin", "HEAD"], cwd=repo)
                self.logger.info("Pushed %s to origin", branch)
        except subprocess.CalledProcessError as exc:
            raise PublishError(f"git command failed: {' '.join(exc.cmd)}") from exc
        return True

    # ------------------------------------------------------------------
    # Helpers

    @staticmethod
    def _to_relative(repo: Path, file_path: Path) -> str:
        if not file_path.is_absolute():
            return file_path.as_posix()
        try:
            return file_path.resolve().relative_to(repo.resolve()).as_posix()
        except ValueError:
            return file_path.as_posix()

    def _run(
        self,
        args: Iterable[str],
        *,
        cwd: Path,
        env: dict[str, str] | None = None,
        capture_output: bool = False,
    ) -> str:
        return self._runner(args, cwd=cwd, env=env, capture_output=capture_output)

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        env: dict[str, str] | None = None,
        capture_output: bool = False,
    ) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            env=env,
            check=True,
            text=True,
            capture_output=capture_output,
        )
        if capture_output:
            return completed.stdout
        return ""


def _is_within(path: str, directory: str) -> bool:
    candidate = PurePosixPath(path.rstrip("/"))
    parent = PurePosixPath(directory.rstrip("/"))
    return candidate == parent or parent in candidate.parents


__all__ = ["DEFAULT_MESSAGE", "PUBLISH_BRANCHES", "PublishError", "Publisher"]
