"""Pytest configuration and shared fixtures."""

import shutil
import subprocess
from pathlib import Path

import pytest

from pinlock.core.repo_root import RepoRootResolver
from pinlock.core.workspace import Workspace
from pinlock.domain.entities import VcsKind

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")

# ============================================================================
# Git Repository Helpers
# ============================================================================


def init_git_repo(
    path: Path,
    user_name: str = "Test User",
    user_email: str = "test@example.com",
) -> None:
    """Initialize a git repository with user configuration.

    Args:
        path: Directory to initialize as a git repository.
        user_name: Git user.name configuration value.
        user_email: Git user.email configuration value.

    Raises:
        subprocess.CalledProcessError: If git commands fail.
    """
    for args in (
        ["git", "init", "--quiet"],
        ["git", "config", "user.name", user_name],
        ["git", "config", "user.email", user_email],
        ["git", "config", "commit.gpgsign", "false"],
    ):
        subprocess.run(args, cwd=path, check=True, capture_output=True, timeout=10)


def git_add_and_commit(path: Path, message: str = "Initial commit") -> str:
    """Stage everything, commit, and return the new HEAD revision."""
    subprocess.run(["git", "add", "."], cwd=path, check=True, capture_output=True, timeout=10)
    subprocess.run(
        ["git", "commit", "--quiet", "-m", message],
        cwd=path,
        check=True,
        capture_output=True,
        timeout=10,
    )
    return git_head(path)


def git_head(path: Path) -> str:
    result = subprocess.run(
        ["git", "rev-parse", "HEAD"],
        cwd=path,
        check=True,
        capture_output=True,
        text=True,
        timeout=10,
    )
    return result.stdout.strip()


def create_test_files(path: Path, files: dict[str, str]) -> None:
    """Create multiple files in a directory.

    Args:
        path: Base directory for file creation.
        files: Mapping of relative file paths to file contents.
               Parent directories are created automatically.
    """
    for file_path, content in files.items():
        full_path = path / file_path
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_text(content)


def create_git_repo(
    path: Path,
    files: dict[str, str] | None = None,
    commit_message: str = "Initial commit",
) -> Path:
    """Create a git repository with optional files and one commit."""
    path.mkdir(parents=True, exist_ok=True)
    init_git_repo(path)
    create_test_files(path, files or {"README": "readme\n"})
    git_add_and_commit(path, commit_message)
    return path


# ============================================================================
# Workspace Fixtures
# ============================================================================


def make_checkout(workspace: Workspace, import_path: str, kind: VcsKind = VcsKind.GIT) -> Path:
    """Create a fake checkout (directory plus metadata dir) in the workspace."""
    directory = workspace.src_dirs()[0] / import_path
    (directory / kind.metadata_dir).mkdir(parents=True, exist_ok=True)
    return directory


@pytest.fixture
def gopath(tmp_path: Path) -> Path:
    """A single workspace root with an empty src directory."""
    root = tmp_path / "gopath"
    (root / "src").mkdir(parents=True)
    return root


@pytest.fixture
def workspace(gopath: Path) -> Workspace:
    return Workspace([gopath])


@pytest.fixture
def resolver(workspace: Workspace) -> RepoRootResolver:
    return RepoRootResolver(workspace)
