"""Version Control System (VCS) port interface.

Defines the abstract interface pinlock uses to query and move a checkout,
independent of which VCS manages it.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from pinlock.domain.entities import VcsKind


class VCS(Protocol):
    """Protocol for the three operations sync and apply need from a VCS."""

    @property
    def kind(self) -> VcsKind:
        """The VCS this adapter drives."""
        ...

    def head(self, repo_dir: Path) -> str:
        """Get the currently checked-out revision.

        Args:
            repo_dir: Root directory of the checkout.

        Returns:
            Normalized, untruncated revision identifier.

        Raises:
            VcsCommandFailedError: If the head command fails.
            InvalidRevisionError: If its output cannot be parsed.
        """
        ...

    def download(self, repo_dir: Path) -> None:
        """Fetch new history from the remote without changing the pinned revision.

        Raises:
            VcsCommandFailedError: If the download command fails.
        """
        ...

    def checkout(self, repo_dir: Path, revision: str) -> None:
        """Move the checkout to exactly the given revision.

        Raises:
            VcsCommandFailedError: If the checkout command fails.
        """
        ...


VcsProvider = Callable[[VcsKind], VCS]
"""Callable returning the VCS adapter for a kind (the dispatch table lookup)."""
