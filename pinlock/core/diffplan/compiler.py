"""Diff-to-plan compiler.

Turns the output of

    git log -U0 --oneline -p HEAD@{1}..HEAD GLOCKFILE

into the set of library and command changes needed to bring a workspace from
the state before the oldest commit to the state after the newest one.

Lines of interest start with a single ``+`` or ``-`` followed directly by a
pin (``<import-path> <revision>``) or a command (``cmd <import-path>``). All
other lines (commit headers, hunk markers, file names) carry no change but
still occupy a position: a removal and an addition are only paired into an
update when they are adjacent.
"""

import logging
import re
from collections.abc import Iterable
from typing import TextIO

from pinlock.domain.entities import (
    EMPTY_LINE,
    ActionKind,
    CommandAction,
    CommandLine,
    DependencyLine,
    DiffLine,
    EmptyLine,
    LibraryAction,
    Plan,
    Polarity,
)
from pinlock.domain.exceptions import MalformedDiffError

logger = logging.getLogger(__name__)

_IMPORT_PATH = r"[\w.]+\.\w+/[\w/.-]+"
_DEPENDENCY_LINE = re.compile(rf"^(?P<marker>[+-])(?P<path>{_IMPORT_PATH}) (?P<revision>\w+)\s*$")
_COMMAND_LINE = re.compile(rf"^(?P<marker>[+-])cmd (?P<path>{_IMPORT_PATH})\s*$")


def classify_line(line: str) -> DiffLine:
    """Classify one diff line.

    Args:
        line: A line of log output, with or without its trailing newline.

    Returns:
        DependencyLine, CommandLine, or EMPTY_LINE for anything else.
    """
    line = line.rstrip("\r\n")

    match = _COMMAND_LINE.match(line)
    if match:
        return CommandLine(
            import_path=match.group("path"),
            polarity=Polarity.from_marker(match.group("marker")),
        )

    match = _DEPENDENCY_LINE.match(line)
    if match:
        return DependencyLine(
            import_path=match.group("path"),
            revision=match.group("revision"),
            polarity=Polarity.from_marker(match.group("marker")),
        )

    return EMPTY_LINE


def read_diff_lines(lines: Iterable[str]) -> list[DiffLine]:
    """Classify every line of a diff, keeping positions."""
    return [classify_line(line) for line in lines]


def compile_plan(diff_lines: list[DiffLine]) -> Plan:
    """Compile classified diff lines into a plan.

    The input is expected oldest commit first. For each library path only the
    earliest change survives; combined with that ordering, the earliest
    replace pair carries the revision a workspace must move to.

    Args:
        diff_lines: Output of read_diff_lines.

    Returns:
        Plan with library actions (add, update, remove) in first-seen order
        and command actions (add, remove) in input order.

    Raises:
        MalformedDiffError: If two adjacent lines change the same library in
            the same direction.
    """
    plan = Plan()
    seen: set[str] = set()

    i = 0
    while i < len(diff_lines):
        line = diff_lines[i]

        if isinstance(line, EmptyLine):
            i += 1
            continue

        if isinstance(line, CommandLine):
            kind = ActionKind.ADD if line.polarity == Polarity.ADDED else ActionKind.REMOVE
            plan.commands.append(CommandAction(kind=kind, import_path=line.import_path))
            i += 1
            continue

        if line.import_path in seen:
            logger.debug("Skipping later change to %s", line.import_path)
            i += 1
            continue
        seen.add(line.import_path)

        following = diff_lines[i + 1] if i + 1 < len(diff_lines) else EMPTY_LINE
        if isinstance(following, DependencyLine) and following.import_path == line.import_path:
            if following.polarity == line.polarity:
                raise MalformedDiffError(line.import_path, i + 1)
            added = line if line.polarity == Polarity.ADDED else following
            plan.libraries.append(
                LibraryAction(ActionKind.UPDATE, line.import_path, added.revision)
            )
            i += 2
            continue

        kind = ActionKind.ADD if line.polarity == Polarity.ADDED else ActionKind.REMOVE
        plan.libraries.append(LibraryAction(kind, line.import_path, line.revision))
        i += 1

    return plan


def parse_diff(stream: TextIO | Iterable[str]) -> Plan:
    """Read a diff from a stream and compile it into a plan."""
    return compile_plan(read_diff_lines(stream))
