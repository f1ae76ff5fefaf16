"""
Matchup version engine.

Decides whether an edit to a matchup is a no-op or a new version, and
handles the tag and build-list editing rules applied before a save.

Every function here is pure: inputs are never mutated, and no I/O happens.
Persisting the result is the caller's job (see storage.MatchupStore).
"""

import logging
import re
from functools import reduce
from typing import NamedTuple

from .models import Matchup, MatchupUpdate, MatchupVersion, utc_now

logger = logging.getLogger(__name__)

# Fields compared on commit, in the order they are reported
VERSIONED_FIELDS = ("notes", "tags", "runes", "summoner_spells", "items")

_WHITESPACE_RUN = re.compile(r"\s+")


class VersionOutOfRangeError(IndexError):
    """A version index outside 1..len(versions) was requested."""

    def __init__(self, index: int, count: int):
        super().__init__(f"Version {index} out of range (matchup has {count} versions)")
        self.index = index
        self.count = count


class CommitResult(NamedTuple):
    """Outcome of commit_edit."""

    matchup: Matchup
    version_created: bool


# =============================================================================
# TAGS
# =============================================================================


def normalize_tag(raw: str) -> str:
    """Lower-case a tag and replace whitespace runs with a single hyphen."""
    return _WHITESPACE_RUN.sub("-", raw.strip().lower())


def add_tag(tags: list[str], raw: str) -> list[str]:
    """
    Add a user-entered tag to a tag list.

    Args:
        tags: Current tags, in display order.
        raw: Text as typed by the user.

    Returns:
        A new list. Unchanged if the input is blank or the normalized
        tag is already present.
    """
    tag = normalize_tag(raw)
    if not tag or tag in tags:
        return list(tags)
    return [*tags, tag]


def remove_tag(tags: list[str], tag: str) -> list[str]:
    """Remove every occurrence of an exact tag, keeping the others in order."""
    return [t for t in tags if t != tag]


def normalize_tags(raw_tags: list[str]) -> list[str]:
    """Add each raw tag in turn, so the result is normalized and free of repeats."""
    return reduce(add_tag, raw_tags, [])


# =============================================================================
# BUILD LISTS
# =============================================================================


def parse_build_list(raw: str | None) -> list[str]:
    """
    Parse a comma-separated list of runes, spells or items.

    Pieces are trimmed and empty pieces dropped, so "a,, b ," gives ["a", "b"].
    """
    if not raw or not raw.strip():
        return []
    return [piece.strip() for piece in raw.split(",") if piece.strip()]


def join_build_list(entries: list[str]) -> str:
    """Render a build list for display; inverse of parse_build_list."""
    return ", ".join(e for e in entries if e)


# =============================================================================
# VERSIONS
# =============================================================================


def active_index(matchup: Matchup) -> int:
    """1-based index of the active version, or 1 if the pointer is stale."""
    if 1 <= matchup.current_version <= len(matchup.versions):
        return matchup.current_version
    return 1


def active_version(matchup: Matchup) -> MatchupVersion:
    """Get the active version, falling back to version 1 if the pointer is stale."""
    return matchup.current()


def changed_fields(version: MatchupVersion, edited: MatchupUpdate) -> list[str]:
    """List the versioned fields whose edited value differs from the version's."""
    return [
        name for name in VERSIONED_FIELDS
        if getattr(edited, name) != getattr(version, name)
    ]


def commit_edit(matchup: Matchup, edited: MatchupUpdate) -> CommitResult:
    """
    Commit edited fields against the active version.

    If nothing differs, the matchup comes back untouched. Otherwise a new
    version holding the edited values is appended and made current. Tags
    are stored as given; they were normalized when added.

    Args:
        matchup: The matchup being edited.
        edited: The edited notes, tags and build lists.

    Returns:
        CommitResult with the resulting matchup and whether a version was created.
    """
    base = active_version(matchup)
    changes = changed_fields(base, edited)

    if not changes:
        logger.debug(f"No changes for matchup {matchup.id}; keeping version {matchup.current_version}")
        return CommitResult(matchup, False)

    number = len(matchup.versions) + 1
    new_version = MatchupVersion(
        version=number,
        date=utc_now(),
        notes=edited.notes,
        tags=list(edited.tags),
        runes=list(edited.runes),
        summoner_spells=list(edited.summoner_spells),
        items=list(edited.items),
    )
    updated = matchup.model_copy(
        update={
            "versions": [*matchup.versions, new_version],
            "current_version": number,
        }
    )

    logger.debug(f"Matchup {matchup.id}: version {number} created (changed: {', '.join(changes)})")
    return CommitResult(updated, True)


def _check_index(matchup: Matchup, index: int) -> None:
    if not 1 <= index <= len(matchup.versions):
        raise VersionOutOfRangeError(index, len(matchup.versions))


def select_version(matchup: Matchup, index: int) -> MatchupVersion:
    """
    Read a version by its 1-based index.

    Browsing history does not change `current_version`; use
    set_current_version for that.

    Raises:
        VersionOutOfRangeError: If index is outside 1..len(versions).
    """
    _check_index(matchup, index)
    return matchup.versions[index - 1]


def set_current_version(matchup: Matchup, index: int) -> Matchup:
    """
    Make an existing version the active one.

    Raises:
        VersionOutOfRangeError: If index is outside 1..len(versions).
    """
    _check_index(matchup, index)
    return matchup.model_copy(update={"current_version": index})
