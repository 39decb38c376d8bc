"""Domain exceptions for pinlock.

These exceptions represent failures of the lock, sync and apply workflows.
They should be caught at the application boundary (CLI) and converted to
user-facing error messages.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pinlock.domain.entities import SyncState


class PinlockError(Exception):
    """Base exception for all domain errors.

    Attributes:
        message: User-facing error message.
        hint: Optional actionable suggestion.
    """

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint


class InvalidRevisionError(PinlockError):
    """Raised when a VCS head command prints something that is not a revision."""

    def __init__(self, raw_output: str) -> None:
        super().__init__(f"could not parse revision from output:\n{raw_output}")
        self.raw_output = raw_output


class RepoNotFoundError(PinlockError):
    """Raised when no repository can be resolved for an import path."""

    def __init__(self, import_path: str, reason: str | None = None) -> None:
        message = f"no version control directory found for {import_path!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message, hint=f"Fetch it first, e.g. 'go get -d {import_path}'")
        self.import_path = import_path


class MalformedDiffError(PinlockError):
    """Raised when adjacent diff lines for one import path share a polarity.

    A replace pair always removes one pin and adds another; two additions (or
    two removals) back to back indicate corrupted or hand-edited history.
    """

    def __init__(self, import_path: str, line_number: int) -> None:
        super().__init__(
            f"malformed lock-file diff: consecutive lines {line_number} and "
            f"{line_number + 1} change {import_path!r} in the same direction"
        )
        self.import_path = import_path
        self.line_number = line_number


class ExternalCommandError(PinlockError):
    """Raised when an external program exits with a non-zero status.

    Attributes:
        command: The argument vector that was executed.
        returncode: Exit status (-1 if the program could not be started).
        output: Captured stderr (or combined output) for diagnosis.
    """

    def __init__(self, command: Sequence[str], returncode: int, output: str = "") -> None:
        rendered = " ".join(command)
        message = f"{rendered!r} failed (exit code {returncode})"
        if output:
            message += f":\n{output}"
        super().__init__(message)
        self.command = list(command)
        self.returncode = returncode
        self.output = output


class VcsCommandFailedError(ExternalCommandError):
    """Raised when a git/hg/bzr/svn invocation fails."""


class ToolchainCommandError(ExternalCommandError):
    """Raised when a build toolchain invocation (fetch, install) fails."""


class PackageLoadError(PinlockError):
    """Raised when the package loader cannot load a package.

    Attributes:
        import_path: The package that failed to load.
        missing: True when the package is simply absent from the workspace,
            which a remote fetch may repair.
    """

    def __init__(self, import_path: str, reason: str, missing: bool = False) -> None:
        super().__init__(f"failed to load package {import_path!r}: {reason}")
        self.import_path = import_path
        self.reason = reason
        self.missing = missing


class UnresolvedPackagesError(PinlockError):
    """Raised when packages are still missing after the fetch budget is spent."""

    def __init__(self, import_paths: Sequence[str], attempts: int) -> None:
        listed = "\n".join(f"  {path}" for path in import_paths)
        super().__init__(
            f"packages still missing after {attempts} fetch attempt(s):\n{listed}",
            hint="Check that the import paths exist and are reachable",
        )
        self.import_paths = list(import_paths)


class DependencySyncError(PinlockError):
    """Raised when one lock entry cannot be reconciled.

    Attributes:
        import_path: The lock entry that failed.
        state: The state the entry was in when it failed.
    """

    def __init__(self, import_path: str, state: SyncState, cause: Exception) -> None:
        detail = cause.message if isinstance(cause, PinlockError) else str(cause)
        hint = cause.hint if isinstance(cause, PinlockError) else None
        super().__init__(f"failed to sync {import_path} ({state.value}): {detail}", hint=hint)
        self.import_path = import_path
        self.state = state


class SyncFailedError(PinlockError):
    """Raised when a command rebuild fails at the end of a sync."""


class LockFileError(PinlockError):
    """Raised when a lock file cannot be read or parsed."""


class WorkspaceError(PinlockError):
    """Raised when the workspace roots are not configured."""


class HookInstallError(PinlockError):
    """Raised when repository hooks cannot be installed."""
