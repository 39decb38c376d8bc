"""Lock file codec.

A lock file lists declared commands first, then one pinned repository per
line:

    cmd github.com/project/tool
    github.com/owner/dep 2bebebd91805dbb931317f7a4057e4e8de9d9781
    golang.org/x/net 4d38db76854b199960801a1734443fd02870d7e1

Commands are sorted and deduplicated; pins are sorted by import path and keep
their full revision.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from pinlock.domain.entities import CommandEntry, LockEntry
from pinlock.domain.exceptions import LockFileError

logger = logging.getLogger(__name__)

_COMMAND_KEYWORD = "cmd"


@dataclass
class LockFile:
    """Parsed contents of a lock file."""

    commands: list[CommandEntry] = field(default_factory=list)
    dependencies: list[LockEntry] = field(default_factory=list)

    @classmethod
    def parse(cls, lines: Iterable[str]) -> "LockFile":
        """Parse lock file lines.

        Blank lines are ignored. Entries are kept in file order.

        Raises:
            LockFileError: On a line that is neither a command nor a pin.
        """
        lockfile = cls()
        for number, raw in enumerate(lines, start=1):
            fields = raw.split()
            if not fields:
                continue
            if len(fields) == 2 and fields[0] == _COMMAND_KEYWORD:
                lockfile.commands.append(CommandEntry(fields[1]))
            elif len(fields) == 2:
                lockfile.dependencies.append(LockEntry(fields[0], fields[1]))
            else:
                raise LockFileError(
                    f"malformed lock file line {number}: {raw.strip()!r}",
                    hint="Expected '<import-path> <revision>' or 'cmd <import-path>'",
                )
        return lockfile

    @classmethod
    def read(cls, path: Path) -> "LockFile":
        """Read and parse a lock file.

        Raises:
            LockFileError: If the file cannot be read or parsed.
        """
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise LockFileError(
                f"cannot read lock file {path}: {e.strerror or e}",
                hint="Run 'pinlock save <import-path>' to create one",
            ) from e
        return cls.parse(text.splitlines())

    def command_paths(self) -> list[str]:
        return [command.import_path for command in self.commands]

    def to_text(self) -> str:
        """Render in canonical order: sorted unique commands, then sorted pins."""
        lines = [
            f"{_COMMAND_KEYWORD} {path}" for path in sorted(set(self.command_paths()))
        ]
        for entry in sorted(self.dependencies, key=lambda e: e.import_path):
            lines.append(f"{entry.import_path} {entry.revision}")
        return "".join(line + "\n" for line in lines)

    def write(self, path: Path) -> None:
        """Write the lock file in canonical order.

        Raises:
            LockFileError: If the file cannot be written.
        """
        try:
            path.write_text(self.to_text(), encoding="utf-8")
        except OSError as e:
            raise LockFileError(f"cannot write lock file {path}: {e.strerror or e}") from e
        logger.debug("Wrote %s", path)
