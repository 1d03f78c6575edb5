"""Command-line interface for the Zoteroid project."""

from __future__ import annotations

import asyncio
from typing import Optional

import httpx
import structlog
import typer
from rich.console import Console
from rich.table import Table

from zoteroid.errors import InvalidIdentifier, ZoteroidError
from zoteroid.services import (
    CrossrefClient,
    ImportOutcome,
    ImportPipeline,
    ImportStatus,
    LocalVault,
    NotePreview,
    OverviewGenerator,
    OverviewStatus,
)
from zoteroid.settings import Settings, configure_logging, get_settings
from zoteroid.utils import extract_doi, normalize_path

console = Console()
app = typer.Typer(help="Zoteroid – DOI to literature note importer")
logger = structlog.get_logger(__name__)

STATUS_STYLES = {
    ImportStatus.SUCCESS: "green",
    ImportStatus.ALREADY_EXISTS: "yellow",
    ImportStatus.REJECTED: "red",
    ImportStatus.FAILED: "red",
}


def _load_settings() -> Settings:
    settings = get_settings()
    configure_logging(settings.log_level)
    return settings


def _vault(settings: Settings, open_notes: bool) -> LocalVault:
    return LocalVault(settings.vault_dir, opener=typer.launch if open_notes else None)


async def _handle_add(identifiers: list[str], open_notes: bool) -> list[ImportOutcome]:
    settings = _load_settings()
    store = _vault(settings, open_notes)
    async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
        registry = CrossrefClient(client=client, settings=settings)
        pipeline = ImportPipeline(registry=registry, store=store, settings=settings)
        return await pipeline.import_many(identifiers)


async def _handle_preview(doi: str) -> NotePreview:
    settings = _load_settings()
    async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
        registry = CrossrefClient(client=client, settings=settings)
        pipeline = ImportPipeline(registry=registry, store=_vault(settings, False), settings=settings)
        return await pipeline.preview(doi)


def _print_outcome(outcome: ImportOutcome) -> None:
    style = STATUS_STYLES[outcome.status]
    line = f"[{style}]{outcome.message}[/{style}]"
    if outcome.path:
        line += f": {outcome.path}"
    elif outcome.status is ImportStatus.REJECTED:
        line += f": {outcome.identifier}"
    console.print(line)


def _print_settings(settings: Settings) -> None:
    table = Table(title="Zoteroid Settings")
    table.add_column("Key")
    table.add_column("Value", overflow="fold")
    for key, value in settings.model_dump().items():
        table.add_row(key, str(value) if value is not None else "—")
    console.print(table)


@app.command()
def init() -> None:
    """Create the vault and the literature root folder."""
    settings = _load_settings()
    root = settings.vault_dir / normalize_path(settings.literature_root)
    root.mkdir(parents=True, exist_ok=True)
    console.print(f"[green]Literature root ready:[/green] {root}")


@app.command()
def config(
    root: Optional[str] = typer.Option(None, "--root", help="Literature root inside the vault"),
    overview: Optional[str] = typer.Option(
        None, "--overview", help="Full path and file name for the overview page"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output settings as JSON"),
) -> None:
    """Display the resolved settings, saving any edits first."""
    settings = _load_settings()
    if root is not None or overview is not None:
        settings = settings.update(literature_root=root, overview_path=overview)
        if not json_output:
            console.print(f"[green]Saved settings to {settings.settings_path}")
    if json_output:
        typer.echo(settings.model_dump_json(indent=2))
        return
    _print_settings(settings)


@app.command()
def add(
    identifiers: list[str] = typer.Argument(..., help="DOI or DOI URL (repeatable)"),
    open_notes: bool = typer.Option(False, "--open", help="Open notes after import"),
) -> None:
    """Import literature by DOI."""
    outcomes = asyncio.run(_handle_add(identifiers, open_notes))
    for outcome in outcomes:
        _print_outcome(outcome)
    if not all(outcome.ok for outcome in outcomes):
        raise typer.Exit(code=1)


@app.command()
def preview(identifier: str = typer.Argument(..., help="DOI or DOI URL")) -> None:
    """Show the note that would be created, without writing anything."""
    doi = extract_doi(identifier)
    if doi is None:
        console.print(f"[red]{InvalidIdentifier.user_message}[/red]")
        raise typer.Exit(code=1)
    try:
        result = asyncio.run(_handle_preview(doi))
    except ZoteroidError as exc:
        console.print(f"[red]{exc.user_message}[/red]")
        raise typer.Exit(code=1) from exc

    table = Table(title="Note Preview")
    table.add_column("Field")
    table.add_column("Value", overflow="fold")
    table.add_row("DOI", result.doi)
    table.add_row("Type", result.record.publication_type or "—")
    table.add_row("Path", result.path)
    table.add_row("Authors", result.record.author_line or "—")
    console.print(table)
    console.print(result.body, markup=False, highlight=False)


@app.command()
def overview(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
    open_note: bool = typer.Option(False, "--open", help="Open the page afterwards"),
) -> None:
    """Generate (overwrite) the literature overview page."""
    if not yes:
        typer.confirm("Generate (overwrite) literature overview?", abort=True)
    settings = _load_settings()
    generator = OverviewGenerator(store=_vault(settings, open_note), settings=settings)
    outcome = asyncio.run(generator.regenerate())
    if outcome.status is OverviewStatus.FAILED:
        console.print(f"[red]{outcome.message}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]{outcome.message}[/green]: {outcome.path}")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Port to bind"),
    reload: bool = typer.Option(False, help="Enable auto-reload"),
) -> None:
    """Launch the HTTP API."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover
        console.print("[red]uvicorn is not installed.[/red]")
        raise typer.Exit(code=1) from exc

    uvicorn.run(
        "zoteroid.web.app:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


if __name__ == "__main__":
    app()
