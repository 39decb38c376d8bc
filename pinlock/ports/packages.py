"""Package loader and toolchain ports.

The closure calculator does not parse source files itself. It asks a package
loader which imports a package declares under a given file-inclusion
configuration, and asks a toolchain to fetch packages that are missing and to
build declared commands.
"""

from collections.abc import Sequence
from typing import Protocol

from pinlock.domain.entities import FileInclusion, PackageInfo


class PackageLoader(Protocol):
    """Protocol for listing packages and their declared imports."""

    def load(self, import_path: str, inclusion: FileInclusion) -> PackageInfo:
        """Load one package under a file-inclusion configuration.

        Args:
            import_path: Package to load.
            inclusion: Which source files count toward the package.

        Returns:
            PackageInfo with the package's imports and test imports.

        Raises:
            PackageLoadError: If the package cannot be loaded. ``missing`` is
                set when it is absent from the workspace.
        """
        ...

    def list_packages(self, import_path: str) -> list[str]:
        """List a package and all packages beneath it.

        Args:
            import_path: Root of the package tree.

        Returns:
            Import paths of the package and its subpackages.

        Raises:
            PackageLoadError: If the tree cannot be listed.
        """
        ...


class Toolchain(Protocol):
    """Protocol for toolchain operations that touch the network or build."""

    def fetch(self, import_paths: Sequence[str]) -> str:
        """Download packages (and their repositories) into the workspace.

        Returns:
            Combined output of the fetch.

        Raises:
            ToolchainCommandError: If the fetch fails.
        """
        ...

    def install(self, import_path: str) -> str:
        """Build and install a command.

        Returns:
            Output of the build; empty when nothing needed rebuilding.

        Raises:
            ToolchainCommandError: If the build fails.
        """
        ...
