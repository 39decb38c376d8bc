"""Workspace layout.

A workspace is an ordered list of root directories, each containing a ``src``
directory under which repositories live at their import path:

    <root>/src/github.com/owner/repo/...

The project's lock file sits at ``<root>/src/<import-path>/GLOCKFILE``.
"""

import os
from collections.abc import Mapping, Sequence
from pathlib import Path

from pinlock.domain.exceptions import WorkspaceError

LOCKFILE_NAME = "GLOCKFILE"


class Workspace:
    """Maps import paths to directories across the workspace roots."""

    def __init__(self, roots: Sequence[Path]) -> None:
        """Initialize with the workspace roots, highest priority first.

        Raises:
            WorkspaceError: If no roots are given.
        """
        if not roots:
            raise WorkspaceError(
                "no workspace roots configured",
                hint="Set GOPATH (or the variable named by workspace.path_var)",
            )
        self.roots = [Path(root) for root in roots]

    @classmethod
    def from_environment(
        cls, path_var: str = "GOPATH", environ: Mapping[str, str] | None = None
    ) -> "Workspace":
        """Build a workspace from a delimiter-separated path list variable.

        Raises:
            WorkspaceError: If the variable is unset or empty.
        """
        environ = os.environ if environ is None else environ
        value = environ.get(path_var, "")
        roots = [Path(part) for part in value.split(os.pathsep) if part]
        if not roots:
            raise WorkspaceError(
                f"{path_var} is not set",
                hint=f"Export {path_var} with at least one workspace root",
            )
        return cls(roots)

    @property
    def path_list(self) -> str:
        """The roots joined back into a path-list string."""
        return os.pathsep.join(str(root) for root in self.roots)

    def src_dirs(self) -> list[Path]:
        return [root / "src" for root in self.roots]

    def find_dir(self, import_path: str) -> Path | None:
        """Return the first existing directory for an import path, or None."""
        for src in self.src_dirs():
            candidate = src / import_path
            if candidate.is_dir():
                return candidate
        return None

    def dir_for(self, import_path: str) -> Path:
        """Return the existing directory for an import path, or where it would go."""
        found = self.find_dir(import_path)
        if found is not None:
            return found
        return self.src_dirs()[0] / import_path

    def import_path_for(self, directory: Path) -> str | None:
        """Map a directory back to its import path, if it lies under a root."""
        directory = Path(directory)
        for src in self.src_dirs():
            try:
                relative = directory.relative_to(src)
            except ValueError:
                continue
            if relative.parts:
                return relative.as_posix()
        return None

    def lockfile_path(self, import_path: str) -> Path:
        return self.dir_for(import_path) / LOCKFILE_NAME
