"""
CLI Entry Point for Matchup Helper.

Provides commands for:
- Creating, browsing and editing matchup notes
- Browsing version history
- Managing imported match history
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .config import get_data_dir, get_log_level
from .models import Match, MatchUpdate, Matchup, MatchupFilter, MatchupVersion, NewMatchup
from .session import EditSession
from .storage import MatchupStore, StorageError
from .versioning import VersionOutOfRangeError, active_version, join_build_list, select_version

# Setup rich console
console = Console()

# Setup logging
logging.basicConfig(
    level=get_log_level(),
    format="%(message)s",
    handlers=[RichHandler(console=console, rich_tracebacks=True)],
)
logger = logging.getLogger(__name__)

# Create Typer app
app = typer.Typer(
    name="matchup-helper",
    help="Champion matchup notes with version history",
    add_completion=False,
)


def get_store() -> MatchupStore:
    """Open the store in the configured data directory."""
    return MatchupStore(get_data_dir())


def fail(message: str) -> None:
    """Print an error and exit with status 1."""
    console.print(f"[red]Error: {message}[/]")
    raise typer.Exit(1)


def format_date(value: datetime) -> str:
    """Short timestamp for tables and panels."""
    return value.strftime("%Y-%m-%d %H:%M")


def render_version(matchup: Matchup, version: MatchupVersion) -> None:
    """Print one version of a matchup."""
    marker = " (current)" if version.version == matchup.current_version else ""
    header = (
        f"[bold]{matchup.my_champion}[/] vs [bold]{matchup.enemy_champion}[/] "
        f"[dim]{matchup.role.value}[/]\n"
        f"Version {version.version}/{len(matchup.versions)}{marker} - {format_date(version.date)}"
    )
    console.print(Panel(header, title=matchup.id))

    if version.tags:
        console.print("Tags: " + " ".join(f"[cyan]#{t}[/]" for t in version.tags))

    table = Table(show_header=False, box=None)
    table.add_column("Field", style="yellow")
    table.add_column("Value")
    table.add_row("Runes", join_build_list(version.runes) or "-")
    table.add_row("Summoners", join_build_list(version.summoner_spells) or "-")
    table.add_row("Items", join_build_list(version.items) or "-")
    console.print(table)

    console.print()
    console.print(version.notes or "[dim]No notes yet.[/]")


# =============================================================================
# MATCHUP COMMANDS
# =============================================================================

@app.command("list")
def list_matchups(
    me: Optional[str] = typer.Option(None, "--me", help="Your champion"),
    enemy: Optional[str] = typer.Option(None, "--enemy", "-e", help="Enemy champion"),
    role: Optional[str] = typer.Option(None, "--role", "-r", help="Role"),
    tags: Optional[list[str]] = typer.Option(None, "--tag", "-t", help="Required tag (repeatable)"),
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Text in names or notes"),
):
    """List matchups, optionally filtered."""
    matchup_filter = MatchupFilter(
        my_champion=me,
        enemy_champion=enemy,
        role=role,
        tags=tags or None,
        search=search,
    )

    try:
        matchups = get_store().list_matchups(matchup_filter)
    except StorageError as e:
        fail(str(e))

    if not matchups:
        console.print("[yellow]No matchups found.[/]")
        return

    table = Table(title="Matchups")
    table.add_column("ID", style="dim")
    table.add_column("Me", style="green")
    table.add_column("Enemy", style="red")
    table.add_column("Role", style="cyan")
    table.add_column("Tags")
    table.add_column("Ver", justify="right")

    for matchup in matchups:
        current = active_version(matchup)
        table.add_row(
            matchup.id,
            matchup.my_champion,
            matchup.enemy_champion,
            matchup.role.value,
            ", ".join(current.tags),
            f"{matchup.current_version}/{len(matchup.versions)}",
        )

    console.print(table)


@app.command()
def new(
    my_champion: str = typer.Argument(..., help="Your champion"),
    enemy_champion: str = typer.Argument(..., help="Enemy champion"),
    role: str = typer.Option(..., "--role", "-r", help="top, jungle, mid, bottom or support"),
):
    """Create a matchup."""
    try:
        matchup = get_store().create(
            NewMatchup(my_champion=my_champion, enemy_champion=enemy_champion, role=role)
        )
    except StorageError as e:
        fail(str(e))

    console.print(f"[green]Created matchup {matchup.id}[/]")


@app.command()
def show(
    matchup_id: str = typer.Argument(..., help="Matchup ID"),
    version: Optional[int] = typer.Option(None, "--version", "-v", help="Show an older version"),
):
    """Show a matchup. Browsing a version does not make it current."""
    try:
        matchup = get_store().get(matchup_id)
        shown = active_version(matchup) if version is None else select_version(matchup, version)
    except (StorageError, VersionOutOfRangeError) as e:
        fail(str(e))

    render_version(matchup, shown)


@app.command()
def history(matchup_id: str = typer.Argument(..., help="Matchup ID")):
    """List every version of a matchup."""
    try:
        matchup = get_store().get(matchup_id)
    except StorageError as e:
        fail(str(e))

    table = Table(title=f"{matchup.my_champion} vs {matchup.enemy_champion}")
    table.add_column("Ver", justify="right")
    table.add_column("Date")
    table.add_column("Tags")
    table.add_column("Notes")

    for version in matchup.versions:
        label = str(version.version)
        if version.version == matchup.current_version:
            label = f"[bold green]*{label}[/]"
        preview = version.notes[:50] + "..." if len(version.notes) > 50 else version.notes
        table.add_row(label, format_date(version.date), ", ".join(version.tags), preview)

    console.print(table)


@app.command()
def edit(
    matchup_id: str = typer.Argument(..., help="Matchup ID"),
    notes: Optional[str] = typer.Option(None, "--notes", "-n", help="Replace notes"),
    add_tags: Optional[list[str]] = typer.Option(None, "--add-tag", help="Add a tag (repeatable)"),
    remove_tags: Optional[list[str]] = typer.Option(None, "--remove-tag", help="Remove a tag (repeatable)"),
    runes: Optional[str] = typer.Option(None, "--runes", help="Comma-separated runes"),
    spells: Optional[str] = typer.Option(None, "--spells", help="Comma-separated summoner spells"),
    items: Optional[str] = typer.Option(None, "--items", help="Comma-separated items"),
    base: Optional[int] = typer.Option(None, "--from", help="Start from an older version"),
):
    """Edit a matchup. A new version is saved only if something changed."""
    try:
        session = EditSession(get_store(), matchup_id)
        if base is not None:
            session.browse(base)

        if notes is not None:
            session.set_notes(notes)
        for tag in add_tags or []:
            session.add_tag(tag)
        for tag in remove_tags or []:
            session.remove_tag(tag)
        if runes is not None:
            session.set_runes(runes)
        if spells is not None:
            session.set_summoner_spells(spells)
        if items is not None:
            session.set_items(items)

        result = session.save()
    except (StorageError, VersionOutOfRangeError) as e:
        fail(str(e))

    if result.version_created:
        console.print(f"[green]Saved version {result.matchup.current_version}[/]")
    else:
        console.print("[yellow]No changes; nothing saved.[/]")


@app.command("use-version")
def use_version(
    matchup_id: str = typer.Argument(..., help="Matchup ID"),
    version: int = typer.Argument(..., help="Version number"),
):
    """Make an existing version the current one."""
    try:
        get_store().set_current_version(matchup_id, version)
    except (StorageError, VersionOutOfRangeError) as e:
        fail(str(e))

    console.print(f"[green]Matchup {matchup_id} now uses version {version}[/]")


@app.command()
def delete(
    matchup_id: str = typer.Argument(..., help="Matchup ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete a matchup and its history."""
    if not yes:
        typer.confirm(f"Delete matchup {matchup_id} and all its versions?", abort=True)

    try:
        get_store().delete(matchup_id)
    except StorageError as e:
        fail(str(e))

    console.print(f"[green]Deleted matchup {matchup_id}[/]")


# =============================================================================
# MATCH HISTORY COMMANDS
# =============================================================================

@app.command()
def matches(limit: int = typer.Option(20, "--limit", "-n", help="Max matches")):
    """List recorded matches, newest first."""
    try:
        recorded = get_store().list_matches()[:limit]
    except StorageError as e:
        fail(str(e))

    if not recorded:
        console.print("[yellow]No matches recorded. Use 'import-matches' first.[/]")
        return

    table = Table(title="Match History")
    table.add_column("ID", style="dim")
    table.add_column("Date")
    table.add_column("Me", style="green")
    table.add_column("Enemy", style="red")
    table.add_column("Role")
    table.add_column("Result")
    table.add_column("Matchup", style="dim")

    for match in recorded:
        result_style = "green" if match.result.value == "win" else "red"
        table.add_row(
            match.id,
            format_date(match.date),
            match.my_champion,
            match.enemy_champion,
            match.role,
            f"[{result_style}]{match.result.value}[/]",
            match.linked_matchup or "",
        )

    console.print(table)


@app.command("link-match")
def link_match(
    match_id: str = typer.Argument(..., help="Match ID"),
    matchup_id: str = typer.Argument("", help="Matchup ID (omit to unlink)"),
):
    """Link a match to a matchup, or remove the link."""
    try:
        get_store().update_match(match_id, MatchUpdate(linked_matchup=matchup_id))
    except StorageError as e:
        fail(str(e))

    if matchup_id:
        console.print(f"[green]Linked match {match_id} to {matchup_id}[/]")
    else:
        console.print(f"[green]Unlinked match {match_id}[/]")


@app.command("match-notes")
def match_notes(
    match_id: str = typer.Argument(..., help="Match ID"),
    notes: str = typer.Argument(..., help="Notes text"),
):
    """Replace a match's notes."""
    try:
        get_store().update_match(match_id, MatchUpdate(notes=notes))
    except StorageError as e:
        fail(str(e))

    console.print(f"[green]Updated notes for match {match_id}[/]")


@app.command("import-matches")
def import_matches(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="YAML or JSON file of matches"),
):
    """Import match records exported from the game client."""
    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix == ".json":
                raw = json.load(f)
            else:
                raw = yaml.safe_load(f)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        logger.error(f"Parse error in {path}:\n{e}")
        fail(f"Cannot parse {path}")

    if isinstance(raw, dict):
        raw = raw.get("matches", [])
    if raw is None:
        raw = []
    if not isinstance(raw, list):
        fail(f"Expected a list of matches in {path}")

    try:
        records = [Match.model_validate(entry) for entry in raw]
    except ValidationError as e:
        logger.error(f"Validation error in {path}:\n{e}")
        fail(f"Invalid match data in {path}")

    try:
        imported = get_store().import_matches(records)
    except StorageError as e:
        fail(str(e))

    skipped = len(records) - len(imported)
    console.print(f"[green]Imported {len(imported)} matches[/] ({skipped} already known)")


@app.command("mcp-serve")
def mcp_serve():
    """
    Start the MCP server.

    Exposes matchups and match history as MCP tools so an MCP client can
    read and edit notes. Configure the client with:

    {
      "mcpServers": {
        "matchup-helper": {
          "command": "matchup-helper",
          "args": ["mcp-serve"]
        }
      }
    }
    """
    from .mcp_server import run_mcp_server
    run_mcp_server()


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
