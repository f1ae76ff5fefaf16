"""
Pydantic models for matchup notes and match history.

A matchup pairs the user's champion with an enemy champion in a role.
Its notes, tags and build live in an append-only list of versions.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field

# =============================================================================
# ENUMS
# =============================================================================


class Role(str, Enum):
    """Lane roles."""

    TOP = "top"
    JUNGLE = "jungle"
    MID = "mid"
    BOTTOM = "bottom"  # Also called "ADC" or "bot"
    SUPPORT = "support"


class MatchResult(str, Enum):
    """Outcome of a played match."""

    WIN = "win"
    LOSS = "loss"


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Generate an opaque record id."""
    return str(uuid.uuid4())


# =============================================================================
# MATCHUP MODELS
# =============================================================================


class MatchupVersion(BaseModel):
    """One snapshot of a matchup's notes and build."""

    version: int = Field(ge=1)
    date: datetime = Field(default_factory=utc_now)
    notes: str = ""
    tags: list[str] = Field(default_factory=list)  # Normalized, e.g. "early-game"
    runes: list[str] = Field(default_factory=list)
    summoner_spells: list[str] = Field(default_factory=list)
    items: list[str] = Field(default_factory=list)


class Matchup(BaseModel):
    """
    A matchup between two champions in one role.

    `current_version` is 1-based. `versions` is never reordered or trimmed;
    edits append a new version instead.
    """

    id: str = Field(default_factory=new_id)
    my_champion: str
    enemy_champion: str
    role: Role
    versions: list[MatchupVersion] = Field(min_length=1)
    current_version: int = 1

    @classmethod
    def new(cls, my_champion: str, enemy_champion: str, role: Role | str) -> "Matchup":
        """Create a matchup seeded with an empty first version."""
        return cls(
            my_champion=my_champion,
            enemy_champion=enemy_champion,
            role=Role(role),
            versions=[MatchupVersion(version=1)],
            current_version=1,
        )

    def current(self) -> MatchupVersion:
        """
        Get the active version.

        Falls back to the first version when `current_version` does not
        point into the stored history.
        """
        if 1 <= self.current_version <= len(self.versions):
            return self.versions[self.current_version - 1]
        return self.versions[0]

    def matches_filter(self, matchup_filter: "MatchupFilter") -> bool:
        """Check whether this matchup satisfies every set field of the filter."""
        if matchup_filter.my_champion and (
            self.my_champion.casefold() != matchup_filter.my_champion.casefold()
        ):
            return False

        if matchup_filter.enemy_champion and (
            self.enemy_champion.casefold() != matchup_filter.enemy_champion.casefold()
        ):
            return False

        if matchup_filter.role and self.role.value != matchup_filter.role.casefold():
            return False

        current = self.current()

        # Must carry all requested tags
        if matchup_filter.tags:
            own_tags = {t.casefold() for t in current.tags}
            if not all(tag.casefold() in own_tags for tag in matchup_filter.tags):
                return False

        if matchup_filter.search:
            needle = matchup_filter.search.casefold()
            haystacks = (self.my_champion, self.enemy_champion, current.notes)
            if not any(needle in text.casefold() for text in haystacks):
                return False

        return True


class NewMatchup(BaseModel):
    """Fields required to create a matchup."""

    my_champion: str
    enemy_champion: str
    role: str


class MatchupUpdate(BaseModel):
    """Edited fields of the active version, as submitted on save."""

    notes: str = ""
    tags: list[str] = Field(default_factory=list)
    runes: list[str] = Field(default_factory=list)
    summoner_spells: list[str] = Field(default_factory=list)
    items: list[str] = Field(default_factory=list)

    @classmethod
    def from_version(cls, version: MatchupVersion) -> "MatchupUpdate":
        """Start an edit from an existing version's values."""
        return cls(
            notes=version.notes,
            tags=list(version.tags),
            runes=list(version.runes),
            summoner_spells=list(version.summoner_spells),
            items=list(version.items),
        )


class MatchupFilter(BaseModel):
    """Optional conjunction of matchup criteria."""

    my_champion: str | None = None
    enemy_champion: str | None = None
    role: str | None = None
    tags: list[str] | None = None
    search: str | None = None  # Substring of champion names or notes


# =============================================================================
# MATCH HISTORY MODELS
# =============================================================================


class Match(BaseModel):
    """A played game, usually imported from the game client's history."""

    id: str = Field(default_factory=new_id)
    game_id: str | None = None  # External id, used to skip re-imports
    date: datetime = Field(default_factory=utc_now)
    my_champion: str
    enemy_champion: str
    role: str  # Imported games may not know their role
    result: MatchResult
    notes: str = ""
    linked_matchup: str | None = None


class MatchUpdate(BaseModel):
    """
    Partial update for a match.

    Unset fields are left alone. An empty `linked_matchup` clears the link.
    """

    notes: str | None = None
    linked_matchup: str | None = None
