"""pinlock CLI entrypoint.

Command-line interface for pinning and syncing workspace dependencies.
"""

from __future__ import annotations

import functools
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

from pinlock.core.errors import PinlockCliError
from pinlock.domain.exceptions import PinlockError
from pinlock.version import __version__

if TYPE_CHECKING:
    from pinlock.adapters.factory import UseCaseFactory
    from pinlock.domain.config import PinlockConfig

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def handle_cli_errors(command_name: str):
    """Decorator to handle common CLI errors.

    Domain errors become PinlockCliError, keeping their hint. Anything
    unexpected is reported with the command name, and its traceback is
    printed in verbose mode.

    Args:
        command_name: Name of the command for error messages.

    Returns:
        Decorated function with error handling.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except (PinlockCliError, click.exceptions.Exit, click.UsageError):
                raise
            except PinlockError as e:
                raise PinlockCliError(e.message, hint=e.hint) from e
            except Exception as e:
                ctx = click.get_current_context()
                if ctx.obj.get("verbose", False):
                    import traceback

                    traceback.print_exc()
                raise PinlockCliError(
                    f"Unexpected error in {command_name}: {e}",
                    hint="Run with --verbose for more details",
                ) from e

        return wrapper

    return decorator


def _configure_logging(verbose: bool, quiet: bool) -> None:
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)


def _load_config(ctx: click.Context) -> PinlockConfig:
    """Load the effective configuration once per invocation."""
    from pinlock.adapters.factory import ConfigFactory

    if "config" not in ctx.obj:
        provider = ConfigFactory().create_config_provider()
        ctx.obj["config"] = provider.load(ctx.obj.get("config_path"))
    return ctx.obj["config"]


def _factory(ctx: click.Context) -> UseCaseFactory:
    from pinlock.adapters.factory import UseCaseFactory

    return UseCaseFactory(_load_config(ctx), color=ctx.obj.get("color"))


@click.group()
@click.version_option(version=__version__, prog_name="pinlock")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Read configuration from this file instead of the global one.",
)
@click.option(
    "--color/--no-color",
    default=None,
    help="Colorize status output (default from config).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    config_path: Path | None,
    color: bool | None,
) -> None:
    """pinlock - Pin workspace dependencies to exact revisions.

    Records the revision of every repository a project imports in a
    GLOCKFILE, and checks the workspace out at those revisions on demand.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = config_path
    ctx.obj["color"] = color
    _configure_logging(verbose, quiet)


@cli.command()
@click.argument("import_path")
@click.option("-n", "print_only", is_flag=True, help="Print to stdout instead of writing the file.")
@click.pass_context
@handle_cli_errors("save")
def save(ctx: click.Context, import_path: str, print_only: bool) -> None:
    """Compute and write the GLOCKFILE for IMPORT_PATH.

    Every external repository the project imports, including through its
    tests and declared commands, is pinned at its current revision.
    """
    from pinlock.core.progress import spinner_context
    from pinlock.core.usecases import SaveRequest

    usecase = _factory(ctx).create_save_usecase()
    quiet = ctx.obj.get("quiet", False)

    with spinner_context(f"Saving {import_path}", quiet_mode=quiet) as progress:
        response = usecase.execute(SaveRequest(import_path, write=not print_only), progress=progress)

    if print_only:
        click.echo(response.lockfile.to_text(), nl=False)
    elif not quiet:
        click.echo(
            f"Saved {len(response.lockfile.dependencies)} pin(s) to {response.lockfile_path}"
        )


@cli.command()
@click.argument("import_path", required=False)
@click.option("-n", "from_stdin", is_flag=True, help="Read the GLOCKFILE from stdin.")
@click.pass_context
@handle_cli_errors("sync")
def sync(ctx: click.Context, import_path: str | None, from_stdin: bool) -> None:
    """Check out every pinned repository at its GLOCKFILE revision.

    Reads the GLOCKFILE of IMPORT_PATH, or stdin with -n. Declared commands
    are rebuilt afterwards.
    """
    from pinlock.core.lockfile import LockFile

    if not from_stdin and not import_path:
        raise click.UsageError("IMPORT_PATH is required unless -n is given")

    factory = _factory(ctx)
    if from_stdin:
        lockfile = LockFile.parse(click.get_text_stream("stdin"))
    else:
        lockfile = LockFile.read(factory.workspace.lockfile_path(import_path))

    factory.create_sync_service().run(lockfile, report=click.echo)


@cli.command()
@click.pass_context
@handle_cli_errors("apply")
def apply(ctx: click.Context) -> None:
    """Apply a GLOCKFILE log diff read from stdin.

    Expects the output of 'git log -U0 --oneline -p HEAD@{1}..HEAD GLOCKFILE'.
    Every change is attempted; the exit status is non-zero if any failed.
    """
    usecase = _factory(ctx).create_apply_usecase()
    report = usecase.execute(click.get_text_stream("stdin"), report=click.echo)

    if not report.success:
        raise PinlockCliError(
            f"{len(report.failed)} change(s) could not be applied",
            hint="Run 'pinlock sync <import-path>' to retry from the GLOCKFILE",
        )


@cli.command(name="cmd")
@click.argument("project")
@click.argument("command")
@click.option("-n", "print_only", is_flag=True, help="Print to stdout instead of writing the file.")
@click.pass_context
@handle_cli_errors("cmd")
def cmd(ctx: click.Context, project: str, command: str, print_only: bool) -> None:
    """Declare COMMAND as a tool PROJECT depends on.

    COMMAND must be a main package. It is built now, recorded at the top of
    PROJECT's GLOCKFILE, and rebuilt by every sync.
    """
    from pinlock.core.usecases import CommandRequest

    usecase = _factory(ctx).create_command_usecase()
    response = usecase.execute(CommandRequest(project, command, write=not print_only))

    if print_only:
        click.echo(response.lockfile.to_text(), nl=False)
    elif not ctx.obj.get("quiet", False):
        click.echo(f"Added cmd {command} to {response.lockfile_path}")


@cli.command()
@click.argument("import_path")
@click.pass_context
@handle_cli_errors("install")
def install(ctx: click.Context, import_path: str) -> None:
    """Install git hooks that apply GLOCKFILE changes after each pull."""
    response = _factory(ctx).create_install_hook_usecase().execute(import_path)
    for hook in response.installed:
        click.echo(f"Installed {hook}")


@cli.group()
def config() -> None:
    """Manage pinlock configuration.

    Settings are read from the global config file
    (~/.config/pinlock/config.toml). Missing values use built-in defaults.
    """
    pass


@config.command(name="show")
@click.pass_context
@handle_cli_errors("config show")
def config_show(ctx: click.Context) -> None:
    """Print the effective configuration as TOML."""
    from pinlock.shared.config_io import dump_config

    click.echo(dump_config(_load_config(ctx)), nl=False)


@config.command(name="path")
@click.pass_context
@handle_cli_errors("config path")
def config_path(ctx: click.Context) -> None:
    """Print the config file path for use in scripts."""
    from pinlock.shared.config_io import get_global_config_path

    click.echo(ctx.obj.get("config_path") or get_global_config_path())


@config.command(name="init")
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing config file.")
@click.pass_context
@handle_cli_errors("config init")
def config_init(ctx: click.Context, force: bool) -> None:
    """Write a config file holding the default settings."""
    from pinlock.domain.config import PinlockConfig
    from pinlock.shared.config_io import get_global_config_path, save_config

    path = ctx.obj.get("config_path") or get_global_config_path()
    if path.exists() and not force:
        raise PinlockCliError(
            f"Config file {path} already exists",
            hint="Use --force to overwrite it",
        )
    save_config(PinlockConfig.default(), path)
    click.echo(f"Created config at {path}")


def main() -> int:
    """Main entrypoint for the CLI."""
    try:
        cli(obj={})
        return 0
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
