"""CLI interface for mindmark."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from mindmark.capture.models import Tab
from mindmark.config import MindmarkConfig, load_config, merge_cli_overrides
from mindmark.service import (
    CAPTURE_CURRENT_TAB,
    DELETE_SNAPSHOT,
    EXPORT_MARKDOWN,
    GET_SNAPSHOTS,
    UPDATE_SNAPSHOT_INTENT,
    SnapshotService,
)

app = typer.Typer(
    name="mindmark",
    help="Capture pages as summarized, intent-tagged snapshots.",
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from mindmark import __version__

        console.print(f"mindmark {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .mindmark.toml file."),
    ] = None,
    store_path: Annotated[
        Optional[Path],
        typer.Option("--store", help="Snapshot store file (overrides config)."),
    ] = None,
    offline: Annotated[
        bool,
        typer.Option("--offline", help="Never call the AI backend."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable debug logging."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """MindMark - remember why you opened a page."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = load_config(config_path)
    ctx.obj = merge_cli_overrides(config, store_path=store_path, offline=offline)


def _run(ctx: typer.Context, message: dict[str, Any], tab: Tab | None = None) -> Any:
    """Send one protocol message; exit non-zero on a failed response."""
    config: MindmarkConfig = ctx.obj or MindmarkConfig()

    async def _active_tab() -> Tab | None:
        return tab

    service = SnapshotService.from_config(config, tab_provider=_active_tab)
    response = asyncio.run(service.handle(message))
    if not response.get("success"):
        console.print(f"[red]Error:[/red] {response.get('error', 'unknown error')}")
        raise typer.Exit(1)
    return response.get("data")


def _saved(value: str) -> str:
    return datetime.fromisoformat(value).astimezone().strftime("%Y-%m-%d %H:%M")


def _print_snapshot(data: dict[str, Any]) -> None:
    console.print(f"[bold]{data['title']}[/bold]  [dim]{data['id']}[/dim]")
    console.print(f"  URL: {data['url']}")
    console.print(f"  Intent: [cyan]{data['intent']}[/cyan]")
    console.print(f"  Tags: {', '.join(data['tags']) or 'N/A'}")
    console.print(f"  Next action: {data['next_action']}")
    console.print(f"  Saved: {_saved(data['created_at'])}  online={data['online']}")
    console.print("  Summary:")
    for line in data["summary"] or ["(No summary)"]:
        console.print(f"    - {line}")


@app.command()
def capture(
    ctx: typer.Context,
    url: Annotated[str, typer.Argument(help="Address of the page to capture.")],
    title: Annotated[
        Optional[str],
        typer.Option("--title", "-t", help="Title to use if the page has none."),
    ] = None,
) -> None:
    """Capture a page into the snapshot store."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        progress.add_task(f"Capturing {url}...", total=None)
        data = _run(ctx, {"action": CAPTURE_CURRENT_TAB}, tab=Tab(url=url, title=title or ""))

    console.print("[bold green]Captured![/bold green]")
    _print_snapshot(data)


@app.command("list")
def list_cmd(
    ctx: typer.Context,
    search: Annotated[
        Optional[str],
        typer.Option("--search", "-s", help="Filter by title, intent, url, or summary."),
    ] = None,
) -> None:
    """List snapshots, most recent first."""
    message: dict[str, Any] = {"action": GET_SNAPSHOTS}
    if search:
        message["query"] = search
    snapshots = _run(ctx, message)

    if not snapshots:
        console.print("[yellow]No matches found.[/yellow]" if search else "No snapshots yet.")
        raise typer.Exit(0)

    table = Table(title=f"{len(snapshots)} snapshot(s)")
    table.add_column("ID", style="dim")
    table.add_column("Title")
    table.add_column("Intent", style="cyan")
    table.add_column("Tags")
    table.add_column("Saved")
    for s in snapshots:
        table.add_row(s["id"], s["title"], s["intent"], ", ".join(s["tags"]), _saved(s["created_at"]))
    console.print(table)


@app.command()
def show(
    ctx: typer.Context,
    snapshot_id: Annotated[str, typer.Argument(help="Snapshot ID.")],
) -> None:
    """Show one snapshot in full."""
    snapshots = _run(ctx, {"action": GET_SNAPSHOTS})
    for s in snapshots:
        if s["id"] == snapshot_id:
            _print_snapshot(s)
            return
    console.print(f"[red]Error:[/red] No snapshot with ID {snapshot_id}")
    raise typer.Exit(1)


@app.command()
def delete(
    ctx: typer.Context,
    snapshot_id: Annotated[str, typer.Argument(help="Snapshot ID.")],
) -> None:
    """Delete a snapshot."""
    remaining = _run(ctx, {"action": DELETE_SNAPSHOT, "id": snapshot_id})
    console.print(f"Deleted {snapshot_id}. {len(remaining)} snapshot(s) remain.")


@app.command("edit-intent")
def edit_intent(
    ctx: typer.Context,
    snapshot_id: Annotated[str, typer.Argument(help="Snapshot ID.")],
    intent: Annotated[str, typer.Argument(help="New intent text.")],
) -> None:
    """Replace the intent of a snapshot."""
    _run(ctx, {"action": UPDATE_SNAPSHOT_INTENT, "id": snapshot_id, "new_intent": intent})
    console.print(f"Updated intent of {snapshot_id}: [cyan]{intent.strip()}[/cyan]")


@app.command()
def export(
    ctx: typer.Context,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write markdown here instead of stdout."),
    ] = None,
) -> None:
    """Export all snapshots as a markdown document."""
    markdown = _run(ctx, {"action": EXPORT_MARKDOWN})
    if output is None:
        typer.echo(markdown)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(markdown, encoding="utf-8")
    console.print(f"[green]Exported to {output}[/green]")
