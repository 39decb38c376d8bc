"""Factory for wiring use cases to their adapters.

Keeps the CLI free of direct adapter construction. Everything is built from
one PinlockConfig and the workspace it points at.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from pinlock.core.presentation.status import StatusStyle
from pinlock.core.repo_root import RepoRootResolver
from pinlock.core.workspace import Workspace

if TYPE_CHECKING:
    from pinlock.adapters.go_cmd import GoToolchain
    from pinlock.core.sync import SyncService
    from pinlock.core.usecases import (
        ApplyUseCase,
        CommandUseCase,
        InstallHookUseCase,
        SaveUseCase,
    )
    from pinlock.domain.config import PinlockConfig
    from pinlock.ports.config import ConfigProvider


class ConfigFactory:
    """Factory for creating configuration-related instances."""

    def create_config_provider(self) -> ConfigProvider:
        from pinlock.adapters.config.toml_config_provider import TomlConfigProvider

        return TomlConfigProvider()


class UseCaseFactory:
    """Creates use cases sharing one workspace and toolchain.

    Args:
        config: Effective configuration.
        color: Colorize status output (overrides config.sync.color).
        environ: Environment holding the workspace path list; os.environ
            when None.
    """

    def __init__(
        self,
        config: PinlockConfig,
        color: bool | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._config = config
        self._workspace = Workspace.from_environment(config.workspace.path_var, environ)
        self._style = StatusStyle(color=config.sync.color if color is None else color)
        self._toolchain: GoToolchain | None = None

    @property
    def workspace(self) -> Workspace:
        return self._workspace

    def resolver(self) -> RepoRootResolver:
        return RepoRootResolver(self._workspace)

    def toolchain(self) -> GoToolchain:
        from pinlock.adapters.go_cmd import GoToolchain

        if self._toolchain is None:
            self._toolchain = GoToolchain(self._workspace, go=self._config.toolchain.go)
        return self._toolchain

    def create_save_usecase(self) -> SaveUseCase:
        from pinlock.adapters.vcs_cmd import vcs_for
        from pinlock.core.closure import ClosureCalculator
        from pinlock.core.usecases import SaveUseCase

        toolchain = self.toolchain()
        calculator = ClosureCalculator(
            toolchain, toolchain, max_fetch_attempts=self._config.save.fetch_attempts
        )
        return SaveUseCase(self._workspace, self.resolver(), calculator, vcs_for)

    def create_sync_service(self) -> SyncService:
        from pinlock.adapters.vcs_cmd import vcs_for
        from pinlock.core.sync import SyncService

        return SyncService(
            self.resolver(),
            vcs_for,
            self.toolchain(),
            style=self._style,
            max_concurrent=self._config.sync.max_concurrent,
        )

    def create_apply_usecase(self) -> ApplyUseCase:
        from pinlock.adapters.vcs_cmd import vcs_for
        from pinlock.core.usecases import ApplyUseCase

        return ApplyUseCase(self.resolver(), vcs_for, self.toolchain(), style=self._style)

    def create_command_usecase(self) -> CommandUseCase:
        from pinlock.core.usecases import CommandUseCase

        toolchain = self.toolchain()
        return CommandUseCase(self._workspace, toolchain, toolchain)

    def create_install_hook_usecase(self) -> InstallHookUseCase:
        from pinlock.core.usecases import InstallHookUseCase

        return InstallHookUseCase(self.resolver())
