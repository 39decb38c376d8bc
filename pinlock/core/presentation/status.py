"""Status line rendering for sync and apply.

Whether status output is colored is decided once, when the CLI starts, and the
resulting StatusStyle is handed to every component that prints status.
"""

from dataclasses import dataclass

import click

from pinlock.core.revision import truncate

SUCCESS_FG = "green"
CHANGE_FG = "yellow"
ERROR_FG = "red"


@dataclass(frozen=True)
class StatusStyle:
    """Formats status lines, optionally with ANSI color.

    Attributes:
        color: Wrap status tags in ANSI color codes.
    """

    color: bool = True

    def _paint(self, text: str, fg: str) -> str:
        return click.style(text, fg=fg) if self.color else text

    def success(self, text: str) -> str:
        return self._paint(text, SUCCESS_FG)

    def change(self, text: str) -> str:
        return self._paint(text, CHANGE_FG)

    def error(self, text: str) -> str:
        return self._paint(text, ERROR_FG)

    def dependency_prefix(self, import_path: str, revision: str) -> str:
        """Left-hand columns of a dependency line: path and short revision."""
        return "%-50.49s %-12.12s\t" % (import_path, truncate(revision))

    def dependency_ok(self, fetched: bool) -> str:
        return self.success("[get OK]" if fetched else "[OK]")

    def dependency_checkout(self, fetched: bool, revision: str) -> str:
        tag = f"checkout {truncate(revision)}"
        if fetched:
            tag = f"get {tag}"
        return self.change(f"[{tag}]")

    def command_line(self, import_path: str, tag: str) -> str:
        """Full status line for a declared command."""
        return "cmd %-59.58s\t%s" % (import_path, tag)
