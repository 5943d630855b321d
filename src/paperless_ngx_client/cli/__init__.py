"""CLI module for paperless-ngx-client."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

import typer

from paperless_ngx_client import __version__
from paperless_ngx_client.api import PaperlessClient, PaperlessError, TaskState, TaskStatus
from paperless_ngx_client.config import ConfigurationError, Settings, load_settings
from paperless_ngx_client.observability import (
    LogLevel,
    bind_context,
    configure_logging,
    get_logger,
)


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


app = typer.Typer(
    name="paperless-client",
    help="Command-line access to the Paperless-ngx REST API.",
    no_args_is_help=True,
)

logger = get_logger(__name__)


@dataclass
class CLIState:
    """Options shared by all commands."""

    config_file: str | None = None
    dry_run: bool = False
    log_level: LogLevel | None = None


def version_callback(value: bool) -> None:  # noqa: FBT001
    """Print version and exit."""
    if value:
        typer.echo(f"paperless-client version {__version__}")
        raise typer.Exit


@app.callback()
def main(  # noqa: PLR0913
    ctx: typer.Context,
    version: bool = typer.Option(  # noqa: FBT001
        False,  # noqa: FBT003
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(  # noqa: FBT001
        False,  # noqa: FBT003
        "--verbose",
        "-V",
        help="Enable verbose (debug) logging.",
    ),
    quiet: bool = typer.Option(  # noqa: FBT001
        False,  # noqa: FBT003
        "--quiet",
        "-q",
        help="Only show warnings and errors.",
    ),
    config_file: str | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file.",
    ),
    dry_run: bool = typer.Option(  # noqa: FBT001
        False,  # noqa: FBT003
        "--dry-run",
        help="Build uploads, edits and deletes without sending them.",
    ),
) -> None:
    """paperless-ngx-client CLI."""
    del version  # Handled by callback

    if verbose and quiet:
        typer.echo("Error: --verbose and --quiet are mutually exclusive.", err=True)
        raise typer.Exit(1)

    # Flags override the configured level
    level: LogLevel | None = None
    if verbose:
        level = LogLevel.DEBUG
    elif quiet:
        level = LogLevel.WARNING

    configure_logging(level=level or LogLevel.INFO)
    ctx.obj = CLIState(config_file=config_file, dry_run=dry_run, log_level=level)


def _load(state: CLIState) -> Settings:
    settings = load_settings(state.config_file)
    if state.dry_run:
        settings.paperless.dry_run = True
    configure_logging(
        level=state.log_level or settings.logging.level,
        log_format=settings.logging.format,
    )
    return settings


def _run(
    ctx: typer.Context,
    command: Callable[[PaperlessClient], Awaitable[Any]],
) -> Any:  # noqa: ANN401
    """Load settings, open a client, run ``command`` and map errors to exit codes."""
    state: CLIState = ctx.obj
    bind_context(command=ctx.command.name)

    async def runner() -> Any:  # noqa: ANN401
        settings = _load(state)
        async with PaperlessClient.from_settings(settings.paperless) as client:
            return await command(client)

    try:
        return asyncio.run(runner())
    except (PaperlessError, ConfigurationError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc


def _echo_status(status: TaskStatus) -> None:
    typer.echo(f"status: {status.status}")
    if status.file_name:
        typer.echo(f"file: {status.file_name}")
    if status.related_document:
        typer.echo(f"document: {status.related_document}")
    if status.result:
        typer.echo(f"result: {status.result}")


@app.command()
def upload(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="Document file to upload."),  # noqa: B008
    wait: bool = typer.Option(  # noqa: FBT001
        False,  # noqa: FBT003
        "--wait",
        "-w",
        help="Poll the ingestion task until it finishes.",
    ),
    poll_interval: float = typer.Option(2.0, help="Seconds between status checks."),
    timeout: float = typer.Option(300.0, help="Give up waiting after this many seconds."),
) -> None:
    """Upload a document and print its task ID.

    With --wait, exits 1 if the task ends in any state but SUCCESS and 2 if
    it does not finish in time.
    """

    async def command(client: PaperlessClient) -> None:
        ingestion = await client.upload(file)
        typer.echo(ingestion.id)
        if not wait or ingestion.is_dry_run:
            return

        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while True:
            status = await ingestion.status()
            if status.is_finished:
                _echo_status(status)
                if status.status is not TaskState.SUCCESS:
                    raise typer.Exit(1)
                return
            if loop.time() >= deadline:
                msg = f"Task {ingestion.id} did not finish within {timeout}s"
                typer.echo(f"Error: {msg}", err=True)
                raise typer.Exit(2)
            logger.debug("task_pending", task_id=ingestion.id, status=str(status.status))
            await asyncio.sleep(poll_interval)

    _run(ctx, command)


@app.command()
def task(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task ID returned by an upload."),
) -> None:
    """Show the current status of an ingestion task."""

    async def command(client: PaperlessClient) -> None:
        _echo_status(await client.task(task_id).status())

    _run(ctx, command)


@app.command()
def documents(
    ctx: typer.Context,
    correspondent: str | None = typer.Option(
        None,
        "--correspondent",
        help="Only documents from this correspondent (by name).",
    ),
) -> None:
    """List documents as ID and title."""

    async def command(client: PaperlessClient) -> None:
        correspondent_id = None
        if correspondent:
            correspondent_id = (await client.correspondent_for_name(correspondent)).id
        for doc in await client.documents(correspondent=correspondent_id):
            typer.echo(f"{doc.id}\t{doc.title}")

    _run(ctx, command)


@app.command()
def correspondents(
    ctx: typer.Context,
    name: str | None = typer.Option(None, "--name", help="Filter by name substring."),
) -> None:
    """List correspondents as ID, name and document count."""

    async def command(client: PaperlessClient) -> None:
        for item in await client.correspondents(name_contains=name):
            typer.echo(f"{item.id}\t{item.name}\t{item.document_count}")

    _run(ctx, command)


@app.command(name="set-correspondent")
def set_correspondent(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Correspondent name (case-insensitive)."),
    document_ids: list[int] = typer.Argument(..., help="Documents to update."),  # noqa: B008
) -> None:
    """Assign a correspondent to documents in one bulk edit."""

    async def command(client: PaperlessClient) -> None:
        target = await client.correspondent_for_name(name)
        await client.documents_bulk_set_correspondent(document_ids, target)
        prefix = "[dry-run] " if client.dry_run else ""
        typer.echo(f"{prefix}Set correspondent {target.name!r} on {len(document_ids)} document(s)")

    _run(ctx, command)


@app.command(name="delete-correspondent")
def delete_correspondent(
    ctx: typer.Context,
    correspondent_id: int = typer.Argument(..., help="Correspondent ID."),
) -> None:
    """Delete a correspondent."""

    async def command(client: PaperlessClient) -> None:
        await client.delete_correspondent(correspondent_id)
        prefix = "[dry-run] " if client.dry_run else ""
        typer.echo(f"{prefix}Deleted correspondent {correspondent_id}")

    _run(ctx, command)


__all__ = ["app"]
