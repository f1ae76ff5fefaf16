"""
MCP Server for Matchup Helper.

Exposes matchup notes and match history as MCP tools, so an
MCP-compatible client can look up and edit notes during champion select.

Usage:
    matchup-helper mcp-serve

IMPORTANT: MCP uses stdio for JSON-RPC communication.
- NEVER print() or write to stdout - it corrupts the protocol
- All logging must go to stderr
"""

import logging
import sys

from mcp.server.fastmcp import FastMCP

from .config import get_data_dir
from .models import Matchup, MatchupFilter, MatchupUpdate, MatchUpdate, NewMatchup
from .storage import MatchNotFoundError, MatchupNotFoundError, MatchupStore, MatchupValidationError
from .versioning import VersionOutOfRangeError, active_version, normalize_tags, select_version

# Configure logging to stderr only (stdout is reserved for MCP protocol)
# Use WARNING level to minimize noise during MCP operation
logging.basicConfig(
    level=logging.WARNING,
    format="%(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
    force=True,  # Override any existing config
)

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("matchup-helper")

# Store (initialized lazily)
_store: MatchupStore | None = None


def get_store() -> MatchupStore:
    """Get or create the store (lazy initialization)."""
    global _store
    if _store is None:
        _store = MatchupStore(get_data_dir())
    return _store


def matchup_summary(matchup: Matchup) -> dict:
    """Compact matchup entry for list results."""
    current = active_version(matchup)
    return {
        "id": matchup.id,
        "my_champion": matchup.my_champion,
        "enemy_champion": matchup.enemy_champion,
        "role": matchup.role.value,
        "tags": current.tags,
        "current_version": matchup.current_version,
        "version_count": len(matchup.versions),
    }


def matchup_to_dict(matchup: Matchup, version: int | None = None) -> dict:
    """
    Full matchup with one version's notes and build.

    Args:
        matchup: The matchup.
        version: Version to include. Defaults to the active one.
    """
    shown = active_version(matchup) if version is None else select_version(matchup, version)
    result = matchup_summary(matchup)
    result["version"] = shown.model_dump(mode="json")
    return result


# =============================================================================
# MATCHUP TOOLS
# =============================================================================

@mcp.tool()
def get_matchups(
    my_champion: str | None = None,
    enemy_champion: str | None = None,
    role: str | None = None,
    tags: list[str] | None = None,
    search: str | None = None,
) -> list[dict]:
    """
    List matchups, optionally filtered.

    All criteria are optional and combined with AND. Champion and role
    comparisons ignore case. A matchup matches `tags` only if its current
    version has every listed tag. `search` looks in champion names and notes.
    """
    matchup_filter = MatchupFilter(
        my_champion=my_champion,
        enemy_champion=enemy_champion,
        role=role,
        tags=tags,
        search=search,
    )
    return [matchup_summary(m) for m in get_store().list_matchups(matchup_filter)]


@mcp.tool()
def search_matchups(query: str) -> list[dict]:
    """Find matchups whose champion names or notes contain the query."""
    return [matchup_summary(m) for m in get_store().search(query)]


@mcp.tool()
def get_matchup(matchup_id: str, version: int | None = None) -> dict | str:
    """
    Get a matchup's notes, tags and build.

    Args:
        matchup_id: The matchup ID.
        version: Optional 1-based version to read instead of the current one.
                 Reading an older version does not make it current.
    """
    try:
        return matchup_to_dict(get_store().get(matchup_id), version)
    except (MatchupNotFoundError, VersionOutOfRangeError) as e:
        return str(e)


@mcp.tool()
def create_matchup(my_champion: str, enemy_champion: str, role: str) -> dict | str:
    """
    Create a matchup with an empty first version.

    Args:
        my_champion: Your champion.
        enemy_champion: The opposing champion.
        role: top, jungle, mid, bottom or support.
    """
    try:
        matchup = get_store().create(
            NewMatchup(my_champion=my_champion, enemy_champion=enemy_champion, role=role)
        )
    except MatchupValidationError as e:
        return str(e)
    return matchup_to_dict(matchup)


@mcp.tool()
def update_matchup(
    matchup_id: str,
    notes: str,
    tags: list[str] | None = None,
    runes: list[str] | None = None,
    summoner_spells: list[str] | None = None,
    items: list[str] | None = None,
) -> dict | str:
    """
    Save edited notes, tags and build for a matchup.

    Send the full edited field values. Tags are normalized the same way
    as tags typed in the CLI. If they equal the current version,
    nothing is saved and `version_created` is false. Otherwise a new
    version is appended and becomes current.
    """
    update = MatchupUpdate(
        notes=notes,
        tags=normalize_tags(tags or []),
        runes=runes or [],
        summoner_spells=summoner_spells or [],
        items=items or [],
    )
    try:
        result = get_store().update(matchup_id, update)
    except MatchupNotFoundError as e:
        return str(e)

    payload = matchup_to_dict(result.matchup)
    payload["version_created"] = result.version_created
    return payload


@mcp.tool()
def delete_matchup(matchup_id: str) -> str:
    """Delete a matchup and its whole version history."""
    try:
        get_store().delete(matchup_id)
    except MatchupNotFoundError as e:
        return str(e)
    return f"Deleted matchup {matchup_id}"


# =============================================================================
# MATCH HISTORY TOOLS
# =============================================================================

@mcp.tool()
def get_matches(limit: int = 20) -> list[dict]:
    """List recorded matches, newest first."""
    return [m.model_dump(mode="json") for m in get_store().list_matches()[:limit]]


@mcp.tool()
def update_match(
    match_id: str,
    notes: str | None = None,
    linked_matchup: str | None = None,
) -> dict | str:
    """
    Update a match's notes or matchup link.

    Omitted fields are left unchanged. Pass an empty `linked_matchup` to unlink.
    """
    try:
        match = get_store().update_match(match_id, MatchUpdate(notes=notes, linked_matchup=linked_matchup))
    except MatchNotFoundError as e:
        return str(e)
    return match.model_dump(mode="json")


# =============================================================================
# SERVER ENTRY POINT
# =============================================================================

def run_mcp_server():
    """Run the MCP server with stdio transport."""
    # Note: No logging here - stdout is reserved for MCP protocol
    mcp.run(transport="stdio")


if __name__ == "__main__":
    run_mcp_server()
