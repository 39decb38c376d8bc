"""Tests for the dependency closure calculator."""

import pytest

from pinlock.core.closure import ClosureCalculator, is_standard_library
from pinlock.domain.entities import PackageInfo
from pinlock.domain.exceptions import PackageLoadError, UnresolvedPackagesError
from tests.helpers.fakes import FakePackageLoader, FakeToolchain

TARGET = "github.com/me/project"


@pytest.fixture
def loader() -> FakePackageLoader:
    return FakePackageLoader()


@pytest.fixture
def toolchain(loader: FakePackageLoader) -> FakeToolchain:
    return FakeToolchain(loader=loader)


@pytest.fixture
def calculator(loader: FakePackageLoader, toolchain: FakeToolchain) -> ClosureCalculator:
    return ClosureCalculator(loader, toolchain)


class TestStandardLibrary:
    @pytest.mark.parametrize("path", ["fmt", "net/http", "C", "encoding/json"])
    def test_no_dot_in_first_segment(self, path: str) -> None:
        assert is_standard_library(path)

    @pytest.mark.parametrize("path", ["github.com/a/b", "gopkg.in/yaml.v2", "example.org/x"])
    def test_host_prefixed(self, path: str) -> None:
        assert not is_standard_library(path)


class TestClosure:
    """Closure scenarios over a fake package graph."""

    def test_standard_library_only(self, loader, calculator) -> None:
        loader.add(TARGET, imports=["fmt", "net/http"])

        assert calculator.calculate(TARGET) == []

    def test_single_dependency(self, loader, calculator) -> None:
        loader.add(TARGET, imports=["fmt", "github.com/x/d1"])
        loader.add("github.com/x/d1", imports=["strings"])

        assert calculator.calculate(TARGET) == ["github.com/x/d1"]

    def test_transitive_dependencies(self, loader, calculator) -> None:
        loader.add(TARGET, imports=["github.com/x/d1"])
        loader.add("github.com/x/d1", imports=["github.com/x/d2"])
        loader.add("github.com/x/d2", imports=["os"])

        assert calculator.calculate(TARGET) == ["github.com/x/d1", "github.com/x/d2"]

    def test_dependency_of_subpackage(self, loader, calculator) -> None:
        loader.add(TARGET, imports=[f"{TARGET}/a", f"{TARGET}/b"])
        loader.add(f"{TARGET}/a", imports=["github.com/x/d"])
        loader.add(f"{TARGET}/b")
        loader.add("github.com/x/d")

        closure = calculator.calculate(TARGET)

        assert closure == ["github.com/x/d"]

    def test_subpackage_not_imported_by_target_is_still_a_root(self, loader, calculator) -> None:
        loader.add(TARGET)
        loader.add(f"{TARGET}/tools", imports=["github.com/x/only-tools"])
        loader.add("github.com/x/only-tools")

        assert calculator.calculate(TARGET) == ["github.com/x/only-tools"]

    def test_own_packages_are_excluded(self, loader, calculator) -> None:
        loader.add(TARGET, imports=[f"{TARGET}/sub"])
        loader.add(f"{TARGET}/sub", imports=[TARGET + "/sub/deeper"])
        loader.add(f"{TARGET}/sub/deeper")

        assert calculator.calculate(TARGET) == []

    def test_sibling_with_shared_prefix_is_not_excluded(self, loader, calculator) -> None:
        loader.add(TARGET, imports=["github.com/me/project-utils"])
        loader.add("github.com/me/project-utils")

        assert calculator.calculate(TARGET) == ["github.com/me/project-utils"]

    def test_cycles_terminate(self, loader, calculator) -> None:
        loader.add(TARGET, imports=["github.com/x/a"])
        loader.add("github.com/x/a", imports=["github.com/x/b"])
        loader.add("github.com/x/b", imports=["github.com/x/a"])

        assert calculator.calculate(TARGET) == ["github.com/x/a", "github.com/x/b"]

    def test_result_is_sorted(self, loader, calculator) -> None:
        loader.add(TARGET, imports=["golang.org/x/net", "github.com/z/z", "github.com/a/a"])
        for path in ("golang.org/x/net", "github.com/z/z", "github.com/a/a"):
            loader.add(path)

        assert calculator.calculate(TARGET) == ["github.com/a/a", "github.com/z/z", "golang.org/x/net"]


class TestTestImports:
    """Only the project's own test imports are followed."""

    def test_in_package_test_imports_of_target(self, loader, calculator) -> None:
        loader.add(TARGET, test_imports=["github.com/x/assert"])
        loader.add("github.com/x/assert")

        assert calculator.calculate(TARGET) == ["github.com/x/assert"]

    def test_external_test_imports_of_subpackage(self, loader, calculator) -> None:
        loader.add(TARGET)
        loader.add(f"{TARGET}/sub", xtest_imports=["github.com/x/mock"])
        loader.add("github.com/x/mock")

        assert calculator.calculate(TARGET) == ["github.com/x/mock"]

    def test_test_imports_of_dependencies_are_not_followed(self, loader, calculator) -> None:
        loader.add(TARGET, imports=["github.com/x/d1"])
        loader.add(
            "github.com/x/d1",
            test_imports=["github.com/x/d1-test-only"],
            xtest_imports=["github.com/x/d1-xtest-only"],
        )

        assert calculator.calculate(TARGET) == ["github.com/x/d1"]

    def test_transitive_imports_of_test_dependency_are_followed(self, loader, calculator) -> None:
        loader.add(TARGET, test_imports=["github.com/x/assert"])
        loader.add("github.com/x/assert", imports=["github.com/x/diff"])
        loader.add("github.com/x/diff")

        assert calculator.calculate(TARGET) == ["github.com/x/assert", "github.com/x/diff"]


class TestCommands:
    def test_command_dependencies_included_and_command_excluded(self, loader, calculator) -> None:
        cmd = "github.com/tools/lint/cmd/lint"
        loader.add(TARGET)
        loader.add(cmd, imports=["github.com/tools/lint", "github.com/x/flags"], name="main")
        loader.add("github.com/tools/lint")
        loader.add("github.com/x/flags")

        closure = calculator.calculate(TARGET, [cmd])

        assert closure == ["github.com/tools/lint", "github.com/x/flags"]


class TestInclusionPasses:
    """Strict and permissive passes are unioned."""

    def test_platform_only_dependency_is_included(self, loader, calculator) -> None:
        loader.add(TARGET, imports=["github.com/x/common"])
        loader.add("github.com/x/common")
        loader.add("github.com/x/windows-only")
        loader.permissive[TARGET] = PackageInfo(
            TARGET, imports=("github.com/x/common", "github.com/x/windows-only")
        )

        assert calculator.calculate(TARGET) == ["github.com/x/common", "github.com/x/windows-only"]

    def test_both_passes_load_each_reached_package(self, loader, calculator) -> None:
        loader.add(TARGET, imports=["github.com/x/d"])
        loader.add("github.com/x/d")

        calculator.calculate(TARGET)

        assert ("github.com/x/d", "strict") in loader.loads
        assert ("github.com/x/d", "permissive") in loader.loads


class TestFailurePolicy:
    def test_strict_failure_on_root_is_fatal(self, loader, calculator) -> None:
        loader.broken.add(TARGET)

        with pytest.raises(PackageLoadError):
            calculator.calculate(TARGET)

    def test_strict_failure_on_dependency_is_skipped(self, loader, calculator) -> None:
        loader.add(TARGET, imports=["github.com/x/cgo-only"])
        loader.broken.add("github.com/x/cgo-only")

        assert calculator.calculate(TARGET) == ["github.com/x/cgo-only"]

    def test_permissive_failure_on_root_is_not_fatal(self, loader, calculator) -> None:
        loader.add(TARGET, imports=["github.com/x/d"])
        loader.add("github.com/x/d")
        loader.broken_permissive.add(TARGET)

        assert calculator.calculate(TARGET) == ["github.com/x/d"]


class TestMissingPackageRetry:
    """Missing packages are fetched and the calculation retried."""

    def test_missing_dependency_is_fetched_then_included(self, loader, toolchain, calculator) -> None:
        loader.add(TARGET, imports=["github.com/x/new"])
        loader.add("github.com/x/new")
        loader.missing.add("github.com/x/new")

        closure = calculator.calculate(TARGET)

        assert closure == ["github.com/x/new"]
        assert toolchain.fetched == [["github.com/x/new"]]

    def test_missing_declared_command_is_fetched_then_followed(
        self, loader, toolchain, calculator
    ) -> None:
        cmd = "github.com/t/tool/cmd/t"
        loader.add(TARGET)
        loader.add(cmd, imports=["github.com/x/flags"], name="main")
        loader.add("github.com/x/flags")
        loader.missing.add(cmd)

        closure = calculator.calculate(TARGET, [cmd])

        assert toolchain.fetched == [[cmd]]
        assert closure == ["github.com/x/flags"]

    def test_missing_declared_command_gives_up_after_budget(self, loader) -> None:
        cmd = "github.com/t/tool/cmd/t"
        toolchain = FakeToolchain(failing_fetches={cmd})
        calculator = ClosureCalculator(loader, toolchain, max_fetch_attempts=1)
        loader.add(TARGET)

        with pytest.raises(UnresolvedPackagesError) as exc_info:
            calculator.calculate(TARGET, [cmd])

        assert exc_info.value.import_paths == [cmd]

    def test_nothing_fetched_when_all_present(self, loader, toolchain, calculator) -> None:
        loader.add(TARGET, imports=["github.com/x/d"])
        loader.add("github.com/x/d")

        calculator.calculate(TARGET)

        assert toolchain.fetched == []

    def test_gives_up_after_budget(self, loader) -> None:
        toolchain = FakeToolchain(failing_fetches={"github.com/x/gone"})
        calculator = ClosureCalculator(loader, toolchain, max_fetch_attempts=2)
        loader.add(TARGET, imports=["github.com/x/gone"])

        with pytest.raises(UnresolvedPackagesError) as exc_info:
            calculator.calculate(TARGET)

        assert exc_info.value.import_paths == ["github.com/x/gone"]
        assert len(toolchain.fetched) == 2

    def test_permissive_only_missing_is_not_fatal(self, loader) -> None:
        toolchain = FakeToolchain(failing_fetches={"github.com/x/plan9-only"})
        calculator = ClosureCalculator(loader, toolchain, max_fetch_attempts=1)
        loader.add(TARGET, imports=["github.com/x/d"])
        loader.add("github.com/x/d")
        loader.permissive[TARGET] = PackageInfo(
            TARGET, imports=("github.com/x/d", "github.com/x/plan9-only")
        )

        assert calculator.calculate(TARGET) == ["github.com/x/d"]
