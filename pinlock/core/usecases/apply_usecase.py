"""Apply use case: replay lock-file changes pulled from upstream.

The input is the log diff of the lock file across a pull. Each change in the
compiled plan is applied on its own; a failure is recorded and the remaining
changes still run.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from pinlock.core.diffplan import parse_diff
from pinlock.core.presentation.status import StatusStyle
from pinlock.core.repo_root import RepoRootResolver
from pinlock.domain.entities import ActionKind, CommandAction, LibraryAction
from pinlock.domain.exceptions import PinlockError, RepoNotFoundError
from pinlock.ports.packages import Toolchain
from pinlock.ports.vcs import VcsProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionResult:
    """Outcome of applying one action.

    Attributes:
        action: The library or command action applied.
        message: Human-readable result.
        error: Failure description, or None on success.
    """

    action: LibraryAction | CommandAction
    message: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ApplyReport:
    """Results of an apply run, in plan order."""

    results: list[ActionResult] = field(default_factory=list)

    @property
    def failed(self) -> list[ActionResult]:
        return [result for result in self.results if not result.ok]

    @property
    def success(self) -> bool:
        return not self.failed


class ApplyUseCase:
    """Use case for applying a lock-file diff to the workspace."""

    def __init__(
        self,
        resolver: RepoRootResolver,
        vcs_provider: VcsProvider,
        toolchain: Toolchain,
        style: StatusStyle | None = None,
    ) -> None:
        self._resolver = resolver
        self._vcs_provider = vcs_provider
        self._toolchain = toolchain
        self._style = style or StatusStyle()

    def execute(
        self, diff: Iterable[str], report: Callable[[str], None] | None = None
    ) -> ApplyReport:
        """Compile the diff and apply every action.

        Args:
            diff: Lines of ``git log -p`` output for the lock file, oldest
                commit first.
            report: Receives one line per applied action.

        Returns:
            ApplyReport listing each action's outcome.

        Raises:
            MalformedDiffError: If the diff pairs two same-direction changes.
        """
        report = report or (lambda line: None)
        plan = parse_diff(diff)
        result = ApplyReport()

        for action in plan.libraries:
            outcome = self._apply_library(action)
            result.results.append(outcome)
            report(outcome.message)

        for action in plan.commands:
            outcome = self._apply_command(action)
            result.results.append(outcome)
            report(outcome.message)

        return result

    def _apply_library(self, action: LibraryAction) -> ActionResult:
        if action.kind == ActionKind.REMOVE:
            return ActionResult(action, f"{action.import_path} is no longer in use.")

        try:
            fetched = False
            try:
                repo = self._resolver.resolve(action.import_path)
            except RepoNotFoundError:
                self._toolchain.fetch([action.import_path])
                fetched = True
                repo = self._resolver.resolve(action.import_path)

            vcs = self._vcs_provider(repo.vcs)
            if not fetched:
                vcs.download(repo.local_path)
            vcs.checkout(repo.local_path, action.revision)
        except PinlockError as e:
            logger.debug("Applying %s failed", action.import_path, exc_info=True)
            return ActionResult(
                action,
                self._style.error(f"error applying {action.import_path}: {e.message}"),
                error=e.message,
            )

        tag = self._style.dependency_checkout(fetched, action.revision)
        return ActionResult(action, f"{action.kind.value} {action.import_path}\t{tag}")

    def _apply_command(self, action: CommandAction) -> ActionResult:
        if action.kind == ActionKind.REMOVE:
            return ActionResult(action, f"cmd {action.import_path} is no longer in use.")

        try:
            output = self._toolchain.install(action.import_path)
        except PinlockError as e:
            return ActionResult(
                action,
                self._style.command_line(action.import_path, self._style.error("[error]")),
                error=e.message,
            )
        tag = self._style.change("[built]") if output else self._style.success("[OK]")
        return ActionResult(action, self._style.command_line(action.import_path, tag))
