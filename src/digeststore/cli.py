# src/digeststore/cli.py
"""digeststore Command Line Interface.

Entry point for the digeststore CLI tool.

The store is opened from a settings file (--settings) or directly from a
root directory (--root), given before the subcommand:

    digeststore --root /var/lib/digeststore store /etc/motd
    digeststore -s settings.yaml fetch <id> -o motd.copy
"""

from pathlib import Path
from typing import Any

import click
import typer
from pydantic import ValidationError

from digeststore import __version__
from digeststore.contracts.errors import ConfigurationError, StoreIOError
from digeststore.core.config import StoreSettings, load_settings
from digeststore.core.logging import configure_logging
from digeststore.core.store import DigestStore

app = typer.Typer(
    name="digeststore",
    help="digeststore: content-addressed storage of files.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"digeststore version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    settings: str | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    root: str | None = typer.Option(
        None,
        "--root",
        "-r",
        help="Store root directory (instead of --settings).",
    ),
    levels: str | None = typer.Option(
        None,
        "--levels",
        help="Bucket widths per directory level, e.g. '8,256' (with --root).",
    ),
    algorithm: str | None = typer.Option(
        None,
        "--algorithm",
        "-a",
        help="Digest algorithm, e.g. sha512 (with --root).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log store activity to stderr.",
    ),
) -> None:
    """digeststore: content-addressed storage of files."""
    ctx.obj = {
        "settings": settings,
        "root": root,
        "levels": levels,
        "algorithm": algorithm,
        "verbose": verbose,
    }


def _echo_validation_errors(e: ValidationError) -> None:
    typer.echo("Configuration errors:", err=True)
    for error in e.errors():
        loc = ".".join(str(x) for x in error["loc"])
        typer.echo(f"  - {loc}: {error['msg']}", err=True)


def _open_store(ctx: typer.Context) -> DigestStore:
    """Build the store from the global options, exiting 1 on config errors."""
    options: dict[str, Any] = ctx.obj

    if options["settings"] is not None and options["root"] is not None:
        typer.echo("Error: use either --settings or --root, not both.", err=True)
        raise typer.Exit(1)

    if options["settings"] is not None:
        try:
            config = load_settings(Path(options["settings"]))
        except FileNotFoundError:
            typer.echo(f"Error: Settings file not found: {options['settings']}", err=True)
            raise typer.Exit(1) from None
        except ValidationError as e:
            _echo_validation_errors(e)
            raise typer.Exit(1) from None
        store_settings = config.store
        level = "DEBUG" if options["verbose"] else config.logging.level
        configure_logging(level, json_output=config.logging.json_output)
    elif options["root"] is not None:
        raw: dict[str, Any] = {"root": options["root"]}
        if options["levels"] is not None:
            raw["levels"] = options["levels"]
        if options["algorithm"] is not None:
            raw["algorithm"] = options["algorithm"]
        try:
            store_settings = StoreSettings(**raw)
        except ValidationError as e:
            _echo_validation_errors(e)
            raise typer.Exit(1) from None
        configure_logging("DEBUG" if options["verbose"] else "WARNING")
    else:
        typer.echo("Error: either --settings or --root is required.", err=True)
        raise typer.Exit(1)

    try:
        return DigestStore(store_settings)
    except (ConfigurationError, StoreIOError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


@app.command()
def store(
    ctx: typer.Context,
    files: list[str] = typer.Argument(
        ...,
        help="Files to store ('-' reads standard input).",
    ),
) -> None:
    """Store files and print '<id><TAB><length>' for each."""
    digest_store = _open_store(ctx)

    for name in files:
        try:
            if name == "-":
                result = digest_store.store_from_source(click.get_binary_stream("stdin"))
            else:
                result = digest_store.store_from_source(name)
        except StoreIOError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1) from None
        typer.echo(f"{result.digest}\t{result.length}")


@app.command()
def fetch(
    ctx: typer.Context,
    digest: str = typer.Argument(..., help="ID returned by 'store'."),
    output: str | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write content to this file instead of standard output.",
    ),
) -> None:
    """Write the content stored under an ID."""
    digest_store = _open_store(ctx)

    data = digest_store.fetch_bytes(digest)
    if data is None:
        typer.echo(f"Error: ID not found: {digest}", err=True)
        raise typer.Exit(1)

    if output is None:
        typer.echo(data, nl=False)
    else:
        Path(output).write_bytes(data)


@app.command()
def path(
    ctx: typer.Context,
    digest: str = typer.Argument(..., help="ID returned by 'store'."),
) -> None:
    """Print the path of the stored copy of an ID."""
    digest_store = _open_store(ctx)

    stored_path = digest_store.fetch_path(digest)
    if stored_path is None:
        typer.echo(f"Error: ID not found: {digest}", err=True)
        raise typer.Exit(1)
    typer.echo(str(stored_path))


@app.command()
def exists(
    ctx: typer.Context,
    digest: str = typer.Argument(..., help="ID returned by 'store'."),
) -> None:
    """Exit 0 if an ID is stored, 1 otherwise."""
    digest_store = _open_store(ctx)

    if digest_store.exists(digest):
        typer.echo("yes")
        return
    typer.echo("no")
    raise typer.Exit(1)


@app.command()
def validate(
    settings: str = typer.Option(
        ...,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
) -> None:
    """Validate a settings file without touching the store."""
    settings_path = Path(settings)

    try:
        config = load_settings(settings_path)
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        _echo_validation_errors(e)
        raise typer.Exit(1) from None

    typer.echo(f"Configuration valid: {settings_path.name}")
    typer.echo(f"  Root: {config.store.root}")
    typer.echo(f"  Levels: {','.join(str(w) for w in config.store.levels)}")
    typer.echo(f"  Algorithm: {config.store.algorithm}")
    typer.echo(f"  Masks: dir {oct(config.store.dir_mask)}, file {oct(config.store.file_mask)}")


if __name__ == "__main__":
    app()
