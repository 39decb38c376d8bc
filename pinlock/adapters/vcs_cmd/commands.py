"""VCS adapter implementing the VCS protocol with external commands.

pinlock has no VCS engine of its own. Each supported VCS is described by a
small table of argument templates, and CommandVcs runs them with subprocess in
the repository directory.
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from pinlock.core.revision import parse_head
from pinlock.domain.entities import VcsKind
from pinlock.domain.exceptions import VcsCommandFailedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VcsCommand:
    """Argument templates for one VCS.

    Templates are formatted with ``revision`` where it appears.

    Attributes:
        kind: The VCS described.
        cmd: Executable name.
        head: Prints the checked-out revision.
        download: Fetches new history without moving off the current revision
            more than the VCS requires.
        checkout: Moves the working copy to ``{revision}``.
    """

    kind: VcsKind
    cmd: str
    head: tuple[str, ...]
    download: tuple[str, ...]
    checkout: tuple[str, ...]


VCS_COMMANDS: dict[VcsKind, VcsCommand] = {
    VcsKind.GIT: VcsCommand(
        kind=VcsKind.GIT,
        cmd="git",
        head=("rev-parse", "HEAD"),
        download=("fetch", "--quiet"),
        checkout=("checkout", "--quiet", "{revision}"),
    ),
    VcsKind.MERCURIAL: VcsCommand(
        kind=VcsKind.MERCURIAL,
        cmd="hg",
        head=("id",),
        download=("pull",),
        checkout=("update", "-r", "{revision}"),
    ),
    VcsKind.BAZAAR: VcsCommand(
        kind=VcsKind.BAZAAR,
        cmd="bzr",
        head=("log", "-r-1", "--line"),
        download=("pull", "--overwrite"),
        checkout=("update", "-r", "{revision}"),
    ),
    VcsKind.SUBVERSION: VcsCommand(
        kind=VcsKind.SUBVERSION,
        cmd="svn",
        head=("info", "--show-item", "revision"),
        download=("update",),
        checkout=("update", "-r", "{revision}"),
    ),
}


class CommandVcs:
    """VCS adapter running the templates of one VcsCommand."""

    def __init__(self, command: VcsCommand) -> None:
        self._command = command

    @property
    def kind(self) -> VcsKind:
        return self._command.kind

    def _run(self, repo_dir: Path, template: tuple[str, ...], **values: str) -> bytes:
        """Run one template in repo_dir and return its stdout.

        Raises:
            VcsCommandFailedError: On non-zero exit or a missing executable.
        """
        args = [self._command.cmd] + [part.format(**values) for part in template]
        logger.debug("Running %s in %s", " ".join(args), repo_dir)
        try:
            result = subprocess.run(args, cwd=repo_dir, capture_output=True, check=True)
        except FileNotFoundError as e:
            raise VcsCommandFailedError(args, -1, f"{self._command.cmd} not found: {e}") from e
        except subprocess.CalledProcessError as e:
            stderr = e.stderr.decode("utf-8", errors="replace").strip() if e.stderr else ""
            raise VcsCommandFailedError(args, e.returncode, stderr) from e
        return result.stdout

    def head(self, repo_dir: Path) -> str:
        return parse_head(self._run(repo_dir, self._command.head))

    def download(self, repo_dir: Path) -> None:
        self._run(repo_dir, self._command.download)

    def checkout(self, repo_dir: Path, revision: str) -> None:
        self._run(repo_dir, self._command.checkout, revision=revision)


def vcs_for(kind: VcsKind) -> CommandVcs:
    """Look up the adapter for a VCS kind in the dispatch table."""
    return CommandVcs(VCS_COMMANDS[kind])
