"""Domain entities and value objects.

Core domain models representing the business concepts of pinlock: repositories,
pins, lock-file diff lines, change plans and sync outcomes. These are pure
Python dataclasses with no dependencies on infrastructure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class VcsKind(str, Enum):
    """Version control systems pinlock knows how to drive."""

    GIT = "git"
    MERCURIAL = "hg"
    BAZAAR = "bzr"
    SUBVERSION = "svn"

    @property
    def metadata_dir(self) -> str:
        """Name of the metadata directory found at a checkout's root."""
        return f".{self.value}"

    @classmethod
    def from_metadata_dir(cls, name: str) -> VcsKind:
        """Look up a kind by its metadata directory name (e.g. ``.hg``).

        Raises:
            ValueError: If the directory does not belong to a known VCS.
        """
        return cls(name.removeprefix("."))


# Probe order used when walking directories for VCS metadata.
METADATA_PROBE_ORDER: tuple[VcsKind, ...] = (
    VcsKind.GIT,
    VcsKind.MERCURIAL,
    VcsKind.BAZAAR,
    VcsKind.SUBVERSION,
)


def is_under(import_path: str, prefix: str) -> bool:
    """Check whether import_path equals prefix or lives beneath it.

    Comparison is segment-aware: ``github.com/a/bc`` is not under
    ``github.com/a/b``.
    """
    prefix = prefix.rstrip("/")
    return import_path == prefix or import_path.startswith(prefix + "/")


@dataclass(frozen=True)
class RepoRoot:
    """The repository physically containing one or more packages.

    Attributes:
        root: Import-path prefix identifying the repository.
        vcs: Version control system managing the checkout.
        local_path: Directory of the checkout within the workspace.
    """

    root: str
    vcs: VcsKind
    local_path: Path

    def contains(self, import_path: str) -> bool:
        """Check whether an import path belongs to this repository."""
        return is_under(import_path, self.root)


@dataclass(frozen=True)
class LockEntry:
    """One persisted pin: a repository root at an exact revision."""

    import_path: str
    revision: str


@dataclass(frozen=True)
class CommandEntry:
    """A buildable program tracked alongside library pins."""

    import_path: str


class Polarity(str, Enum):
    """Direction of a changed line in a unified diff."""

    ADDED = "added"
    REMOVED = "removed"

    @classmethod
    def from_marker(cls, marker: str) -> Polarity:
        """Map a diff marker character (``+`` or ``-``) to a polarity."""
        return cls.ADDED if marker == "+" else cls.REMOVED


@dataclass(frozen=True)
class DependencyLine:
    """A changed ``<import-path> <revision>`` line."""

    import_path: str
    revision: str
    polarity: Polarity


@dataclass(frozen=True)
class CommandLine:
    """A changed ``cmd <import-path>`` line."""

    import_path: str
    polarity: Polarity


@dataclass(frozen=True)
class EmptyLine:
    """Placeholder for a diff line that is neither a pin nor a command.

    Keeps positional adjacency intact so that a removal in one commit and an
    addition in the next are never mistaken for a replace pair.
    """


EMPTY_LINE = EmptyLine()

DiffLine = DependencyLine | CommandLine | EmptyLine


class ActionKind(str, Enum):
    """Kinds of change a plan can request."""

    ADD = "add"
    UPDATE = "update"
    REMOVE = "remove"


@dataclass(frozen=True)
class LibraryAction:
    """A change to one pinned repository."""

    kind: ActionKind
    import_path: str
    revision: str


@dataclass(frozen=True)
class CommandAction:
    """A change to the set of built commands (add or remove only)."""

    kind: ActionKind
    import_path: str


@dataclass
class Plan:
    """Ordered library and command actions compiled from a lock-file diff."""

    libraries: list[LibraryAction] = field(default_factory=list)
    commands: list[CommandAction] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.libraries and not self.commands


@dataclass(frozen=True)
class FileInclusion:
    """Rules deciding which source files count toward a package's imports.

    Attributes:
        name: Short label used in log messages.
        all_files: Include files normally excluded by platform or tag
            constraints.
    """

    name: str
    all_files: bool = False


STRICT = FileInclusion(name="strict", all_files=False)
PERMISSIVE = FileInclusion(name="permissive", all_files=True)


@dataclass(frozen=True)
class PackageInfo:
    """Imports declared by one package, as reported by a package loader.

    Attributes:
        import_path: The package's import path.
        name: Declared package name (``main`` for commands).
        dir: Directory holding the package sources.
        imports: Imports of the non-test files.
        test_imports: Imports of in-package test files.
        xtest_imports: Imports of external (``_test`` package) test files.
    """

    import_path: str
    name: str = ""
    dir: Path | None = None
    imports: tuple[str, ...] = ()
    test_imports: tuple[str, ...] = ()
    xtest_imports: tuple[str, ...] = ()


class SyncState(str, Enum):
    """Stages a lock entry passes through while being reconciled."""

    NEED_REPO = "need_repo"
    FETCHED = "fetched"
    FOUND = "found"
    REVISION_KNOWN = "revision_known"
    UP_TO_DATE = "up_to_date"
    NEEDS_CHECKOUT = "needs_checkout"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class SyncOutcome:
    """Result of reconciling one lock entry.

    Attributes:
        import_path: The pinned repository root.
        state: Terminal state, UP_TO_DATE or DONE (checked out).
        fetched: Whether the repository had to be fetched from its remote.
        actual_revision: Revision found in the workspace before any checkout.
        status_text: Human-readable status, emitted in lock-file order.
    """

    import_path: str
    state: SyncState
    fetched: bool
    actual_revision: str
    status_text: str


class CommandStatus(str, Enum):
    """Outcome of rebuilding a declared command."""

    OK = "ok"
    BUILT = "built"
    ERROR = "error"


@dataclass(frozen=True)
class CommandResult:
    """Result of building one declared command."""

    import_path: str
    status: CommandStatus
    output: str = ""


@dataclass
class SyncReport:
    """Everything a sync run did, in lock-file order."""

    outcomes: list[SyncOutcome] = field(default_factory=list)
    commands: list[CommandResult] = field(default_factory=list)

    @property
    def checked_out(self) -> list[str]:
        return [o.import_path for o in self.outcomes if o.state == SyncState.DONE]
