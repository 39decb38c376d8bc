"""Config domain models for pinlock.

Configuration is stored in ~/.config/pinlock/config.toml and represents user
preferences for workspace discovery, sync concurrency, output and the build
toolchain. This module defines the domain models that represent validated
configuration state.
"""

from dataclasses import dataclass
from typing import Any

# Running too many syncs at once can exhaust file descriptor limits.
# Empirically, ~90 concurrent syncs hit the macOS default limit of 256.
DEFAULT_MAX_CONCURRENT = 25


@dataclass(frozen=True)
class WorkspaceConfig:
    """Configuration for locating workspace roots.

    Attributes:
        path_var: Environment variable holding the os.pathsep-separated list
            of workspace roots.
    """

    path_var: str = "GOPATH"

    def __post_init__(self) -> None:
        if not self.path_var:
            raise ValueError("path_var must not be empty")


@dataclass(frozen=True)
class SyncConfig:
    """Configuration for sync behavior.

    Attributes:
        max_concurrent: Maximum number of dependencies reconciled at once.
        color: Colorize status output.

    Raises:
        ValueError: If max_concurrent is not positive.
    """

    max_concurrent: int = DEFAULT_MAX_CONCURRENT
    color: bool = True

    def __post_init__(self) -> None:
        if self.max_concurrent <= 0:
            raise ValueError(f"max_concurrent must be positive, got {self.max_concurrent}")


@dataclass(frozen=True)
class SaveConfig:
    """Configuration for lock-file generation.

    Attributes:
        fetch_attempts: How many times missing packages are fetched and the
            closure recomputed before giving up.
    """

    fetch_attempts: int = 3

    def __post_init__(self) -> None:
        if self.fetch_attempts < 1:
            raise ValueError(f"fetch_attempts must be at least 1, got {self.fetch_attempts}")


@dataclass(frozen=True)
class ToolchainConfig:
    """Configuration for the Go toolchain adapter.

    Attributes:
        go: Name or path of the go executable.
    """

    go: str = "go"

    def __post_init__(self) -> None:
        if not self.go:
            raise ValueError("go executable must not be empty")


@dataclass(frozen=True)
class PinlockConfig:
    """Complete pinlock configuration."""

    workspace: WorkspaceConfig
    sync: SyncConfig
    save: SaveConfig
    toolchain: ToolchainConfig

    @staticmethod
    def default() -> "PinlockConfig":
        """Create config with all default values."""
        return PinlockConfig(
            workspace=WorkspaceConfig(),
            sync=SyncConfig(),
            save=SaveConfig(),
            toolchain=ToolchainConfig(),
        )

    @staticmethod
    def from_partial(base: "PinlockConfig", partial: dict[str, Any]) -> "PinlockConfig":
        """Create a new config by merging partial data over a base config.

        Only sections and keys present in partial are overridden; everything
        else is taken from base. Validation runs in each section's
        __post_init__.

        Args:
            base: Config providing the default values.
            partial: Raw TOML data, e.g. {"sync": {"max_concurrent": 10}}.

        Returns:
            New PinlockConfig with merged values.

        Raises:
            ValueError: If merged values fail validation.
        """

        def merge(section_cls, current, key):
            overrides = partial.get(key, {})
            if not isinstance(overrides, dict):
                raise ValueError(f"[{key}] must be a table")
            known = set(section_cls.__dataclass_fields__)
            unknown = set(overrides) - known
            if unknown:
                raise ValueError(f"unknown keys in [{key}]: {', '.join(sorted(unknown))}")
            values = {name: getattr(current, name) for name in known}
            for name, value in overrides.items():
                expected = type(values[name])
                # bool is an int subclass; reject it where a number is expected
                if not isinstance(value, expected) or (
                    expected is int and isinstance(value, bool)
                ):
                    raise ValueError(
                        f"{key}.{name} must be {expected.__name__}, got {value!r}"
                    )
                values[name] = value
            return section_cls(**values)

        return PinlockConfig(
            workspace=merge(WorkspaceConfig, base.workspace, "workspace"),
            sync=merge(SyncConfig, base.sync, "sync"),
            save=merge(SaveConfig, base.save, "save"),
            toolchain=merge(ToolchainConfig, base.toolchain, "toolchain"),
        )
