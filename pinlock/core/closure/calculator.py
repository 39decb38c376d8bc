"""Dependency closure calculator.

Determines which external packages a project needs pinned. The project is its
root set: the target package, every package beneath it, and the declared
commands. Imports are followed depth-first from the root set twice, once with
the default build constraints and once with every source file included, so
that a dependency used only on another platform is still pinned. The two
reachable sets are unioned.

Test imports are followed for root-set packages only. A dependency's own
tests never pull further dependencies into the closure.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from pinlock.domain.entities import PERMISSIVE, STRICT, FileInclusion, is_under
from pinlock.domain.exceptions import (
    PackageLoadError,
    ToolchainCommandError,
    UnresolvedPackagesError,
)
from pinlock.ports.packages import PackageLoader, Toolchain

logger = logging.getLogger(__name__)


def is_standard_library(import_path: str) -> bool:
    """Check whether an import path belongs to the standard library.

    Standard library paths have no dot in their first segment
    (``net/http``), while remote paths start with a host (``github.com/...``).
    """
    return "." not in import_path.split("/", 1)[0]


@dataclass
class _Missing:
    """Packages absent from the workspace, by the pass that noticed them."""

    strict: set[str] = field(default_factory=set)
    permissive: set[str] = field(default_factory=set)

    def add(self, import_path: str, inclusion: FileInclusion) -> None:
        target = self.permissive if inclusion.all_files else self.strict
        target.add(import_path)

    @property
    def all(self) -> set[str]:
        return self.strict | self.permissive


class ClosureCalculator:
    """Computes the external packages reachable from a project."""

    def __init__(
        self,
        loader: PackageLoader,
        toolchain: Toolchain,
        max_fetch_attempts: int = 3,
    ) -> None:
        """Initialize the calculator.

        Args:
            loader: Reports each package's imports.
            toolchain: Fetches packages missing from the workspace.
            max_fetch_attempts: Fetch-and-retry rounds before giving up on
                missing packages.
        """
        self._loader = loader
        self._toolchain = toolchain
        self._max_fetch_attempts = max_fetch_attempts

    def calculate(self, target: str, commands: Sequence[str] = ()) -> list[str]:
        """Compute the closure of external packages for a project.

        Missing packages are fetched through the toolchain and the calculation
        repeated, up to max_fetch_attempts times.

        Args:
            target: Import path of the project.
            commands: Import paths of commands declared by the project.

        Returns:
            Sorted external import paths. Standard library packages and
            anything under the target or a command are excluded.

        Raises:
            PackageLoadError: If a root-set package fails to load with the
                default build constraints for a reason other than being
                absent from the workspace.
            UnresolvedPackagesError: If packages are still missing once the
                fetch budget is spent.
        """
        for attempt in range(self._max_fetch_attempts + 1):
            closure, missing = self._calculate_once(target, commands)
            if not missing.all:
                return closure
            if attempt == self._max_fetch_attempts:
                break

            to_fetch = sorted(missing.all)
            logger.info(
                "Fetching %d missing package(s) (attempt %d of %d)",
                len(to_fetch),
                attempt + 1,
                self._max_fetch_attempts,
            )
            try:
                self._toolchain.fetch(to_fetch)
            except ToolchainCommandError as e:
                logger.warning("Fetch of missing packages failed: %s", e.message)

        if missing.strict:
            raise UnresolvedPackagesError(sorted(missing.strict), self._max_fetch_attempts)

        for import_path in sorted(missing.permissive):
            logger.warning("Package %s is still missing; it is only used by excluded files", import_path)
        return closure

    def _calculate_once(self, target: str, commands: Sequence[str]) -> tuple[list[str], _Missing]:
        roots = list(dict.fromkeys([*self._loader.list_packages(target), *commands]))
        own_prefixes = [target, *commands]
        missing = _Missing()

        reached: set[str] = set()
        for inclusion in (STRICT, PERMISSIVE):
            reached |= self._traverse(roots, inclusion, missing)

        closure = sorted(
            path
            for path in reached
            if path not in missing.all
            and not is_standard_library(path)
            and not any(is_under(path, prefix) for prefix in own_prefixes)
        )
        return closure, missing

    def _traverse(
        self, roots: list[str], inclusion: FileInclusion, missing: _Missing
    ) -> set[str]:
        """Depth-first expansion of imports from the root set.

        Returns:
            Every non-standard package reached, roots included.
        """
        root_set = set(roots)
        visited: set[str] = set()
        stack = list(reversed(roots))

        while stack:
            import_path = stack.pop()
            if import_path in visited or is_standard_library(import_path):
                continue
            visited.add(import_path)

            try:
                package = self._loader.load(import_path, inclusion)
            except PackageLoadError as e:
                if e.missing:
                    missing.add(import_path, inclusion)
                    logger.debug("%s is missing (%s pass)", import_path, inclusion.name)
                    continue
                if inclusion.all_files:
                    logger.debug("Skipping %s (%s pass): %s", import_path, inclusion.name, e.reason)
                    continue
                if import_path in root_set:
                    raise
                logger.warning("Skipping %s: %s", import_path, e.reason)
                continue

            edges = list(package.imports)
            if import_path in root_set:
                edges += [*package.test_imports, *package.xtest_imports]
            for dependency in reversed(edges):
                if dependency not in visited:
                    stack.append(dependency)

        return visited
