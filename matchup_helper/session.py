"""
Edit session for one open matchup.

Holds the pending edits while a matchup is open: tags added or removed,
build lists typed as text, and which historical version is on screen.
Nothing reaches the store until save() is called.
"""

import logging

from .models import Matchup, MatchupUpdate, MatchupVersion
from .storage import MatchupStore
from .versioning import (
    CommitResult,
    active_index,
    active_version,
    add_tag,
    join_build_list,
    parse_build_list,
    remove_tag,
    select_version,
)

logger = logging.getLogger(__name__)


class EditSession:
    """
    Draft edits for a single matchup.

    The draft starts as a copy of the active version. Browsing to another
    version replaces the draft with that version's values but leaves the
    stored active version alone.
    """

    def __init__(self, store: MatchupStore, matchup_id: str):
        self.store = store
        self.matchup: Matchup = store.get(matchup_id)
        self.displayed_version = active_index(self.matchup)
        self.draft = MatchupUpdate.from_version(active_version(self.matchup))

    @property
    def version_count(self) -> int:
        return len(self.matchup.versions)

    def displayed(self) -> MatchupVersion:
        """The stored version currently shown."""
        return select_version(self.matchup, self.displayed_version)

    def browse(self, index: int) -> MatchupVersion:
        """
        Show a historical version.

        Raises:
            VersionOutOfRangeError: If index is not a stored version.
        """
        version = select_version(self.matchup, index)
        logger.debug(f"Matchup {self.matchup.id}: showing version {index} of {self.version_count}")
        self.displayed_version = index
        self.draft = MatchupUpdate.from_version(version)
        return version

    # Tags

    def add_tag(self, raw: str) -> list[str]:
        self.draft.tags = add_tag(self.draft.tags, raw)
        return self.draft.tags

    def remove_tag(self, tag: str) -> list[str]:
        self.draft.tags = remove_tag(self.draft.tags, tag)
        return self.draft.tags

    # Text fields

    def set_notes(self, notes: str) -> None:
        self.draft.notes = notes

    def set_runes(self, text: str) -> None:
        self.draft.runes = parse_build_list(text)

    def set_summoner_spells(self, text: str) -> None:
        self.draft.summoner_spells = parse_build_list(text)

    def set_items(self, text: str) -> None:
        self.draft.items = parse_build_list(text)

    def build_text(self) -> dict[str, str]:
        """Build lists as they appear in the edit fields."""
        return {
            "runes": join_build_list(self.draft.runes),
            "summoner_spells": join_build_list(self.draft.summoner_spells),
            "items": join_build_list(self.draft.items),
        }

    def save(self) -> CommitResult:
        """
        Commit the draft.

        A new version is stored only if the draft differs from the
        active version. The session then shows the resulting active version.
        """
        result = self.store.update(self.matchup.id, self.draft)
        self.matchup = result.matchup
        self.displayed_version = active_index(self.matchup)
        self.draft = MatchupUpdate.from_version(active_version(self.matchup))
        return result
