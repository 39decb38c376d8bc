"""Use cases behind the CLI commands."""

from pinlock.core.usecases.apply_usecase import ActionResult, ApplyReport, ApplyUseCase
from pinlock.core.usecases.command_usecase import (
    CommandRequest,
    CommandResponse,
    CommandUseCase,
)
from pinlock.core.usecases.install_hook_usecase import InstallHookResponse, InstallHookUseCase
from pinlock.core.usecases.save_usecase import SaveRequest, SaveResponse, SaveUseCase

__all__ = [
    "ActionResult",
    "ApplyReport",
    "ApplyUseCase",
    "CommandRequest",
    "CommandResponse",
    "CommandUseCase",
    "InstallHookResponse",
    "InstallHookUseCase",
    "SaveRequest",
    "SaveResponse",
    "SaveUseCase",
]
