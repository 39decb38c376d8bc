"""Progress reporting utilities for CLI commands.

Provides a Rich spinner for long-running steps such as computing a project's
dependency closure. The spinner renders on stderr so that stdout stays clean
for lock-file output.
"""

from collections.abc import Generator
from contextlib import contextmanager

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn


class SpinnerCallback:
    """Updates the description of a running spinner."""

    def __init__(self, progress: Progress, task_id) -> None:
        self.progress = progress
        self.task_id = task_id

    def __call__(self, description: str) -> None:
        self.progress.update(self.task_id, description=description)


@contextmanager
def spinner_context(
    description: str, quiet_mode: bool = False
) -> Generator[SpinnerCallback | None, None, None]:
    """Context manager showing a transient spinner.

    Args:
        description: Initial text shown beside the spinner.
        quiet_mode: If True, yields None and shows nothing.

    Yields:
        SpinnerCallback accepting new descriptions, or None when quiet.
    """
    if quiet_mode:
        yield None
        return

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=Console(stderr=True),
        transient=True,
    ) as progress:
        task_id = progress.add_task(description, total=None)
        yield SpinnerCallback(progress, task_id)
