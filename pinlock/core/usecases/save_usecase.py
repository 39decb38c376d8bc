"""Save use case: compute a project's pins and write its lock file."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from pinlock.core.closure import ClosureCalculator
from pinlock.core.lockfile import LockFile
from pinlock.core.repo_root import RepoRootResolver
from pinlock.core.workspace import Workspace
from pinlock.domain.entities import CommandEntry, LockEntry, RepoRoot
from pinlock.domain.exceptions import RepoNotFoundError
from pinlock.ports.vcs import VcsProvider

logger = logging.getLogger(__name__)


@dataclass
class SaveRequest:
    """Request to save a project's lock file.

    Attributes:
        import_path: Import path of the project.
        write: Write the lock file to the project directory. When False the
            result is only returned.
    """

    import_path: str
    write: bool = True


@dataclass
class SaveResponse:
    """Result of a save.

    Attributes:
        lockfile: The computed lock file.
        lockfile_path: Where the lock file lives (written only if requested).
        written: Whether the file was written.
    """

    lockfile: LockFile
    lockfile_path: Path
    written: bool


class SaveUseCase:
    """Use case for pinning every external repository a project uses.

    Declared commands already in the lock file are kept. Their repositories
    are pinned alongside the project's dependencies, and the project's own
    repository never is.
    """

    def __init__(
        self,
        workspace: Workspace,
        resolver: RepoRootResolver,
        calculator: ClosureCalculator,
        vcs_provider: VcsProvider,
    ) -> None:
        self._workspace = workspace
        self._resolver = resolver
        self._calculator = calculator
        self._vcs_provider = vcs_provider

    def execute(
        self, request: SaveRequest, progress: Callable[[str], None] | None = None
    ) -> SaveResponse:
        """Compute the lock file and optionally write it.

        Args:
            request: Save request.
            progress: Receives a short description of each stage.

        Returns:
            SaveResponse with the lock file.

        Raises:
            PackageLoadError: If the project cannot be loaded.
            UnresolvedPackagesError: If dependencies cannot be fetched.
            RepoNotFoundError: If a dependency has no resolvable repository.
            LockFileError: If the existing lock file is malformed or the new
                one cannot be written.
        """
        notify = progress or (lambda message: None)
        lockfile_path = self._workspace.lockfile_path(request.import_path)

        commands: list[str] = []
        if lockfile_path.exists():
            commands = sorted(set(LockFile.read(lockfile_path).command_paths()))
            logger.debug("Keeping %d declared command(s)", len(commands))

        notify(f"Calculating dependencies of {request.import_path}")
        closure = self._calculator.calculate(request.import_path, commands)
        logger.info("Found %d external package(s)", len(closure))

        own_root = self._own_root(request.import_path)
        repos: dict[str, RepoRoot] = {}
        for import_path in [*closure, *commands]:
            repo = self._resolver.resolve(import_path)
            if repo.root == own_root:
                continue
            repos.setdefault(repo.root, repo)

        notify(f"Reading revisions of {len(repos)} repositories")
        dependencies = []
        for root in sorted(repos):
            repo = repos[root]
            revision = self._vcs_provider(repo.vcs).head(repo.local_path)
            dependencies.append(LockEntry(root, revision))

        lockfile = LockFile(
            commands=[CommandEntry(path) for path in commands],
            dependencies=dependencies,
        )
        if request.write:
            lockfile.write(lockfile_path)
        return SaveResponse(lockfile=lockfile, lockfile_path=lockfile_path, written=request.write)

    def _own_root(self, import_path: str) -> str | None:
        try:
            return self._resolver.resolve(import_path).root
        except RepoNotFoundError:
            logger.debug("%s is not under version control", import_path)
            return None
