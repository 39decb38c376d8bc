"""Sync service for reconciling a workspace with a lock file.

Every pinned repository goes through the same steps:

    need_repo -> (fetched | found) -> revision_known
              -> (up_to_date | needs_checkout) -> (done | failed)

Repositories are reconciled concurrently on a bounded thread pool. Each worker
returns its status line instead of printing it, and the coordinator reports
lines in lock-file order, so output is the same however the workers are
scheduled. A failure in any worker stops the run: queued work is cancelled and
the error propagates to the caller.

Fetches of absent repositories run one at a time, since a fetch may also
write dependencies into other parts of the workspace. Declared commands are
rebuilt afterwards, one at a time.
"""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait

from pinlock.core.lockfile import LockFile
from pinlock.core.presentation.status import StatusStyle
from pinlock.core.repo_root import RepoRootResolver
from pinlock.core.revision import revisions_match
from pinlock.domain.config import DEFAULT_MAX_CONCURRENT
from pinlock.domain.entities import (
    CommandResult,
    CommandStatus,
    LockEntry,
    SyncOutcome,
    SyncReport,
    SyncState,
)
from pinlock.domain.exceptions import (
    DependencySyncError,
    PinlockError,
    RepoNotFoundError,
    SyncFailedError,
    ToolchainCommandError,
)
from pinlock.ports.packages import Toolchain
from pinlock.ports.vcs import VcsProvider

logger = logging.getLogger(__name__)

StatusReporter = Callable[[str], None]


def _discard(line: str) -> None:
    pass


class SyncService:
    """Service for reconciling a workspace with a lock file.

    The service holds no UI of its own: status lines are handed to a
    reporter callback supplied by the caller.
    """

    def __init__(
        self,
        resolver: RepoRootResolver,
        vcs_provider: VcsProvider,
        toolchain: Toolchain,
        style: StatusStyle | None = None,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT,
    ) -> None:
        """Initialize the sync service.

        Args:
            resolver: Finds the checkout holding each pinned repository.
            vcs_provider: Returns the VCS adapter for a repository's kind.
            toolchain: Fetches absent repositories and rebuilds commands.
            style: Status line formatting.
            max_concurrent: Maximum number of repositories reconciled at once.
        """
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be positive, got {max_concurrent}")
        self._resolver = resolver
        self._vcs_provider = vcs_provider
        self._toolchain = toolchain
        self._style = style or StatusStyle()
        self._max_concurrent = max_concurrent
        # go get writes dependencies anywhere in the shared workspace.
        self._fetch_lock = threading.Lock()

    def run(self, lockfile: LockFile, report: StatusReporter | None = None) -> SyncReport:
        """Reconcile the workspace with a lock file.

        Args:
            lockfile: Pins and commands to reconcile.
            report: Receives each status line, in lock-file order.

        Returns:
            SyncReport with one outcome per pin and one result per command.

        Raises:
            DependencySyncError: If any pinned repository cannot be reconciled.
            SyncFailedError: If a declared command fails to build.
        """
        report = report or _discard
        result = SyncReport()
        result.outcomes = self._sync_dependencies(lockfile.dependencies, report)
        result.commands = self._build_commands(sorted(set(lockfile.command_paths())), report)
        return result

    def _sync_dependencies(
        self, entries: list[LockEntry], report: StatusReporter
    ) -> list[SyncOutcome]:
        outcomes: list[SyncOutcome] = []
        if not entries:
            return outcomes

        executor = ThreadPoolExecutor(
            max_workers=self._max_concurrent, thread_name_prefix="pinlock-sync"
        )
        futures = [executor.submit(self.sync_entry, entry) for entry in entries]
        pending: set[Future[SyncOutcome]] = set(futures)
        try:
            for future in futures:
                # Wait on every pending worker so a failure anywhere is seen
                # without first waiting for the ones ahead of it.
                while not future.done():
                    done, pending = wait(pending, return_when=FIRST_COMPLETED)
                    for finished in done:
                        error = finished.exception()
                        if error is not None:
                            raise error
                outcome = future.result()
                report(outcome.status_text)
                outcomes.append(outcome)
        except BaseException:
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        executor.shutdown(wait=True)
        return outcomes

    def sync_entry(self, entry: LockEntry) -> SyncOutcome:
        """Reconcile one pinned repository.

        Raises:
            DependencySyncError: On any resolution, VCS or fetch failure.
        """
        state = SyncState.NEED_REPO
        fetched = False
        try:
            try:
                repo = self._resolver.resolve(entry.import_path)
                state = SyncState.FOUND
            except RepoNotFoundError:
                logger.debug("%s is not in the workspace, fetching", entry.import_path)
                with self._fetch_lock:
                    self._toolchain.fetch([entry.import_path])
                fetched = True
                state = SyncState.FETCHED
                repo = self._resolver.resolve(entry.import_path)

            vcs = self._vcs_provider(repo.vcs)
            actual = vcs.head(repo.local_path)
            state = SyncState.REVISION_KNOWN
            prefix = self._style.dependency_prefix(entry.import_path, actual)

            if revisions_match(entry.revision, actual):
                return SyncOutcome(
                    import_path=entry.import_path,
                    state=SyncState.UP_TO_DATE,
                    fetched=fetched,
                    actual_revision=actual,
                    status_text=prefix + self._style.dependency_ok(fetched),
                )

            state = SyncState.NEEDS_CHECKOUT
            if not fetched:
                vcs.download(repo.local_path)
            vcs.checkout(repo.local_path, entry.revision)
            logger.debug("Checked out %s at %s", entry.import_path, entry.revision)
            return SyncOutcome(
                import_path=entry.import_path,
                state=SyncState.DONE,
                fetched=fetched,
                actual_revision=actual,
                status_text=prefix + self._style.dependency_checkout(fetched, entry.revision),
            )
        except (PinlockError, OSError) as e:
            raise DependencySyncError(entry.import_path, state, e) from e

    def _build_commands(
        self, import_paths: list[str], report: StatusReporter
    ) -> list[CommandResult]:
        results: list[CommandResult] = []
        for import_path in import_paths:
            try:
                output = self._toolchain.install(import_path)
            except ToolchainCommandError as e:
                results.append(CommandResult(import_path, CommandStatus.ERROR, e.output))
                report(self._style.command_line(import_path, self._style.error(f"[error {e.output}]")))
                continue

            if output:
                results.append(CommandResult(import_path, CommandStatus.BUILT, output))
                report(self._style.command_line(import_path, self._style.change("[built]")))
            else:
                results.append(CommandResult(import_path, CommandStatus.OK))
                report(self._style.command_line(import_path, self._style.success("[OK]")))

        failed = [r.import_path for r in results if r.status == CommandStatus.ERROR]
        if failed:
            raise SyncFailedError(f"failed to build command(s): {', '.join(failed)}")
        return results
