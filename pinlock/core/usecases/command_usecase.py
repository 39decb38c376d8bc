"""Cmd use case: declare a command in a project's lock file."""

import logging
from dataclasses import dataclass
from pathlib import Path

from pinlock.core.lockfile import LockFile
from pinlock.core.workspace import Workspace
from pinlock.domain.entities import STRICT, CommandEntry
from pinlock.domain.exceptions import PinlockError
from pinlock.ports.packages import PackageLoader, Toolchain

logger = logging.getLogger(__name__)


@dataclass
class CommandRequest:
    """Request to declare a command.

    Attributes:
        project: Import path of the project owning the lock file.
        command: Import path of the command (a main package).
        write: Write the updated lock file; when False it is only returned.
    """

    project: str
    command: str
    write: bool = True


@dataclass
class CommandResponse:
    lockfile: LockFile
    lockfile_path: Path
    build_output: str


class CommandUseCase:
    """Use case for recording a tool a project depends on.

    The command must be a main package and must build. It is then added to
    the lock file's command lines; pins are left as they are.
    """

    def __init__(self, workspace: Workspace, loader: PackageLoader, toolchain: Toolchain) -> None:
        self._workspace = workspace
        self._loader = loader
        self._toolchain = toolchain

    def execute(self, request: CommandRequest) -> CommandResponse:
        """Verify, build and declare the command.

        Raises:
            PackageLoadError: If the command cannot be loaded.
            PinlockError: If the command is not a main package.
            ToolchainCommandError: If the command does not build.
            LockFileError: If the lock file cannot be read or written.
        """
        package = self._loader.load(request.command, STRICT)
        if package.name != "main":
            raise PinlockError(
                f"found package {package.name!r} at {request.command}, expected main",
                hint="Only main packages can be declared as commands",
            )

        output = self._toolchain.install(request.command)
        logger.debug("Built %s", request.command)

        lockfile_path = self._workspace.lockfile_path(request.project)
        lockfile = LockFile.read(lockfile_path) if lockfile_path.exists() else LockFile()
        if request.command not in lockfile.command_paths():
            lockfile.commands.append(CommandEntry(request.command))

        if request.write:
            lockfile.write(lockfile_path)
        return CommandResponse(lockfile=lockfile, lockfile_path=lockfile_path, build_output=output)
