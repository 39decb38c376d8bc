"""Go toolchain adapter.

Implements the PackageLoader and Toolchain ports by shelling out to the go
command in GOPATH mode:

- ``go list -e -json`` reports a package's imports under the default build
  constraints. For the permissive inclusion, the files go list ignored
  because of platform or tag constraints are scanned for import
  declarations as well.
- ``go get -d -v`` fetches missing packages.
- ``go install -v`` builds declared commands.
"""

import json
import logging
import os
import re
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from pinlock.core.workspace import Workspace
from pinlock.domain.entities import FileInclusion, PackageInfo
from pinlock.domain.exceptions import PackageLoadError, ToolchainCommandError

logger = logging.getLogger(__name__)

_MISSING_MARKERS = ("cannot find package", "is not in GOROOT")

_IMPORT_DECL = re.compile(r"^import\s*(?:\((?P<block>.*?)\)|(?P<single>[^\n]*))", re.M | re.S)
_IMPORT_PATH = re.compile(r'"(?P<path>[^"]+)"')


def scan_imports(source: str) -> list[str]:
    """Extract the import paths declared in a Go source file.

    Args:
        source: File contents.

    Returns:
        Imported paths in declaration order.
    """
    imports: list[str] = []
    for decl in _IMPORT_DECL.finditer(source):
        body = decl.group("block") if decl.group("block") is not None else decl.group("single")
        imports.extend(m.group("path") for m in _IMPORT_PATH.finditer(body))
    return imports


def iter_json_objects(output: str):
    """Yield each object from a stream of concatenated JSON documents."""
    decoder = json.JSONDecoder()
    index = 0
    length = len(output)
    while index < length:
        while index < length and output[index].isspace():
            index += 1
        if index >= length:
            break
        obj, index = decoder.raw_decode(output, index)
        yield obj


class GoToolchain:
    """Package loader and toolchain backed by the go command."""

    def __init__(self, workspace: Workspace, go: str = "go") -> None:
        """Initialize the adapter.

        Args:
            workspace: Workspace whose roots become GOPATH.
            go: Name or path of the go executable.
        """
        self._workspace = workspace
        self._go = go

    def _env(self) -> dict[str, str]:
        env = dict(os.environ)
        env["GOPATH"] = self._workspace.path_list
        env["GO111MODULE"] = "off"
        return env

    def _run(self, args: list[str], check: bool = True) -> subprocess.CompletedProcess[bytes]:
        """Run the go command.

        Raises:
            ToolchainCommandError: If go is missing, or exits non-zero with check=True.
        """
        cmd = [self._go] + args
        logger.debug("Running %s", " ".join(cmd))
        try:
            return subprocess.run(cmd, capture_output=True, check=check, env=self._env())
        except FileNotFoundError as e:
            raise ToolchainCommandError(cmd, -1, f"{self._go} not found: {e}") from e
        except subprocess.CalledProcessError as e:
            output = (e.stdout or b"") + (e.stderr or b"")
            raise ToolchainCommandError(
                cmd, e.returncode, output.decode("utf-8", errors="replace").strip()
            ) from e

    def load(self, import_path: str, inclusion: FileInclusion) -> PackageInfo:
        try:
            result = self._run(["list", "-e", "-json", import_path])
        except ToolchainCommandError as e:
            raise PackageLoadError(import_path, e.output or e.message) from e

        stdout = result.stdout.decode("utf-8", errors="replace")
        try:
            data = next(iter_json_objects(stdout))
        except (StopIteration, ValueError) as e:
            raise PackageLoadError(import_path, f"unexpected go list output: {e}") from e

        error = (data.get("Error") or {}).get("Err")
        if error:
            missing = any(marker in error for marker in _MISSING_MARKERS)
            # A package built only for other platforms still has its ignored
            # files to scan.
            if inclusion.all_files and not missing and data.get("Dir") and data.get("IgnoredGoFiles"):
                logger.debug("Scanning ignored files of %s despite: %s", import_path, error)
                return self._to_package_info(data, inclusion)
            raise PackageLoadError(import_path, error, missing=missing)

        return self._to_package_info(data, inclusion)

    def _to_package_info(self, data: dict[str, Any], inclusion: FileInclusion) -> PackageInfo:
        imports = list(data.get("Imports") or [])
        test_imports = list(data.get("TestImports") or [])
        xtest_imports = list(data.get("XTestImports") or [])
        directory = Path(data["Dir"]) if data.get("Dir") else None

        if inclusion.all_files and directory is not None:
            for name in data.get("IgnoredGoFiles") or []:
                try:
                    source = (directory / name).read_text(encoding="utf-8", errors="replace")
                except OSError as e:
                    logger.debug("Skipping unreadable ignored file %s: %s", name, e)
                    continue
                target = test_imports if name.endswith("_test.go") else imports
                target.extend(scan_imports(source))

        return PackageInfo(
            import_path=data.get("ImportPath", ""),
            name=data.get("Name", ""),
            dir=directory,
            imports=tuple(dict.fromkeys(imports)),
            test_imports=tuple(dict.fromkeys(test_imports)),
            xtest_imports=tuple(dict.fromkeys(xtest_imports)),
        )

    def list_packages(self, import_path: str) -> list[str]:
        try:
            result = self._run(["list", "-e", f"{import_path}/..."])
        except ToolchainCommandError as e:
            raise PackageLoadError(import_path, e.output or e.message) from e
        listed = result.stdout.decode("utf-8", errors="replace").split()
        return list(dict.fromkeys([import_path, *listed]))

    def fetch(self, import_paths: Sequence[str]) -> str:
        result = self._run(["get", "-d", "-v", *import_paths])
        return (result.stdout + result.stderr).decode("utf-8", errors="replace")

    def install(self, import_path: str) -> str:
        result = self._run(["install", "-v", import_path])
        return (result.stdout + result.stderr).decode("utf-8", errors="replace").strip()
