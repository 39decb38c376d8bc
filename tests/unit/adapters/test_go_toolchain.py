"""Unit tests for the Go toolchain adapter."""

import json
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from pinlock.adapters.go_cmd import GoToolchain, scan_imports
from pinlock.adapters.go_cmd.toolchain import iter_json_objects
from pinlock.core.workspace import Workspace
from pinlock.domain.entities import PERMISSIVE, STRICT
from pinlock.domain.exceptions import PackageLoadError, ToolchainCommandError


def completed(stdout: str = "", stderr: str = "") -> MagicMock:
    result = MagicMock()
    result.stdout = stdout.encode()
    result.stderr = stderr.encode()
    return result


@pytest.fixture
def toolchain(tmp_path: Path) -> GoToolchain:
    return GoToolchain(Workspace([tmp_path]))


class TestScanImports:
    def test_single_and_grouped(self):
        source = """package foo

import "github.com/a/one"

import (
\t"fmt"
\talias "github.com/a/two"
\t_ "github.com/a/three"
)

func main() { s := "import \\"not/real\\"" }
"""
        assert scan_imports(source) == [
            "github.com/a/one",
            "fmt",
            "github.com/a/two",
            "github.com/a/three",
        ]

    def test_no_imports(self):
        assert scan_imports("package foo\n") == []


class TestIterJsonObjects:
    def test_concatenated_documents(self):
        text = '{"a": 1}\n{"b": 2}\n'
        assert list(iter_json_objects(text)) == [{"a": 1}, {"b": 2}]


class TestLoad:
    def test_maps_go_list_fields(self, toolchain):
        payload = {
            "ImportPath": "github.com/x/y",
            "Name": "y",
            "Dir": "/gopath/src/github.com/x/y",
            "Imports": ["fmt", "github.com/x/z"],
            "TestImports": ["testing"],
            "XTestImports": ["github.com/x/y", "github.com/x/assert"],
        }
        with patch("subprocess.run", return_value=completed(json.dumps(payload))) as run:
            info = toolchain.load("github.com/x/y", STRICT)

        assert run.call_args.args[0] == ["go", "list", "-e", "-json", "github.com/x/y"]
        env = run.call_args.kwargs["env"]
        assert env["GO111MODULE"] == "off"
        assert env["GOPATH"] == toolchain._workspace.path_list
        assert info.name == "y"
        assert info.imports == ("fmt", "github.com/x/z")
        assert info.xtest_imports == ("github.com/x/y", "github.com/x/assert")

    def test_missing_package(self, toolchain):
        payload = {
            "ImportPath": "github.com/x/gone",
            "Error": {"Err": 'cannot find package "github.com/x/gone" in any of:'},
        }
        with patch("subprocess.run", return_value=completed(json.dumps(payload))):
            with pytest.raises(PackageLoadError) as exc_info:
                toolchain.load("github.com/x/gone", STRICT)

        assert exc_info.value.missing

    def test_other_error_is_not_missing(self, toolchain):
        payload = {
            "ImportPath": "github.com/x/y",
            "Error": {"Err": "build constraints exclude all Go files in /x"},
        }
        with patch("subprocess.run", return_value=completed(json.dumps(payload))):
            with pytest.raises(PackageLoadError) as exc_info:
                toolchain.load("github.com/x/y", STRICT)

        assert not exc_info.value.missing

    def test_permissive_scans_ignored_files(self, toolchain, tmp_path):
        pkg_dir = tmp_path / "src" / "github.com/x/y"
        pkg_dir.mkdir(parents=True)
        (pkg_dir / "y_windows.go").write_text('package y\n\nimport "github.com/x/winapi"\n')
        (pkg_dir / "y_windows_test.go").write_text('package y\n\nimport "github.com/x/wintest"\n')
        payload = {
            "ImportPath": "github.com/x/y",
            "Name": "y",
            "Dir": str(pkg_dir),
            "Imports": ["fmt"],
            "IgnoredGoFiles": ["y_windows.go", "y_windows_test.go"],
        }

        with patch("subprocess.run", return_value=completed(json.dumps(payload))):
            strict = toolchain.load("github.com/x/y", STRICT)
            permissive = toolchain.load("github.com/x/y", PERMISSIVE)

        assert strict.imports == ("fmt",)
        assert permissive.imports == ("fmt", "github.com/x/winapi")
        assert permissive.test_imports == ("github.com/x/wintest",)

    def test_platform_only_package_is_scanned_when_all_files_included(self, toolchain, tmp_path):
        pkg_dir = tmp_path / "src" / "github.com/x/win"
        pkg_dir.mkdir(parents=True)
        (pkg_dir / "w_windows.go").write_text('package win\n\nimport "github.com/x/winapi"\n')
        payload = {
            "ImportPath": "github.com/x/win",
            "Name": "win",
            "Dir": str(pkg_dir),
            "IgnoredGoFiles": ["w_windows.go"],
            "Error": {"Err": f"build constraints exclude all Go files in {pkg_dir}"},
        }

        with patch("subprocess.run", return_value=completed(json.dumps(payload))):
            with pytest.raises(PackageLoadError) as exc_info:
                toolchain.load("github.com/x/win", STRICT)
            permissive = toolchain.load("github.com/x/win", PERMISSIVE)

        assert not exc_info.value.missing
        assert permissive.import_path == "github.com/x/win"
        assert permissive.imports == ("github.com/x/winapi",)

    def test_missing_package_is_not_scanned_when_all_files_included(self, toolchain):
        payload = {
            "ImportPath": "github.com/x/gone",
            "Dir": "/gopath/src/github.com/x/gone",
            "IgnoredGoFiles": ["gone_windows.go"],
            "Error": {"Err": 'cannot find package "github.com/x/gone"'},
        }
        with patch("subprocess.run", return_value=completed(json.dumps(payload))):
            with pytest.raises(PackageLoadError) as exc_info:
                toolchain.load("github.com/x/gone", PERMISSIVE)

        assert exc_info.value.missing

    def test_go_not_installed(self, toolchain):
        with patch("subprocess.run", side_effect=FileNotFoundError("go")):
            with pytest.raises(PackageLoadError):
                toolchain.load("github.com/x/y", STRICT)


class TestListPackages:
    def test_includes_root_first(self, toolchain):
        output = "github.com/x/y\ngithub.com/x/y/a\ngithub.com/x/y/b\n"
        with patch("subprocess.run", return_value=completed(output)) as run:
            packages = toolchain.list_packages("github.com/x/y")

        assert run.call_args.args[0] == ["go", "list", "-e", "github.com/x/y/..."]
        assert packages == ["github.com/x/y", "github.com/x/y/a", "github.com/x/y/b"]


class TestFetchAndInstall:
    def test_fetch_command(self, toolchain):
        with patch("subprocess.run", return_value=completed()) as run:
            toolchain.fetch(["github.com/x/a", "github.com/x/b"])

        assert run.call_args.args[0] == ["go", "get", "-d", "-v", "github.com/x/a", "github.com/x/b"]

    def test_install_returns_output(self, toolchain):
        with patch("subprocess.run", return_value=completed(stderr="github.com/t/tool\n")):
            assert toolchain.install("github.com/t/tool") == "github.com/t/tool"

    def test_install_up_to_date_is_empty(self, toolchain):
        with patch("subprocess.run", return_value=completed()):
            assert toolchain.install("github.com/t/tool") == ""

    def test_install_failure(self, toolchain):
        error = subprocess.CalledProcessError(2, ["go"], output=b"", stderr=b"undefined: x\n")
        with patch("subprocess.run", side_effect=error):
            with pytest.raises(ToolchainCommandError) as exc_info:
                toolchain.install("github.com/t/tool")

        assert exc_info.value.output == "undefined: x"

    def test_custom_go_executable(self, tmp_path):
        toolchain = GoToolchain(Workspace([tmp_path]), go="/opt/go/bin/go")
        with patch("subprocess.run", return_value=completed()) as run:
            toolchain.install("github.com/t/tool")

        assert run.call_args.args[0][0] == "/opt/go/bin/go"
