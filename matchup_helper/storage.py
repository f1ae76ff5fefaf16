"""
YAML storage for matchups and match history.

All data lives in one human-editable file, `data.yaml`, in the data
directory. Every operation loads the file, applies its change and writes
the whole file back.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

import yaml
from pydantic import BaseModel, Field, ValidationError

from .models import (
    Match,
    MatchUpdate,
    Matchup,
    MatchupFilter,
    MatchupUpdate,
    NewMatchup,
    Role,
)
from .versioning import CommitResult, commit_edit, set_current_version

logger = logging.getLogger(__name__)

DATA_FILE_NAME = "data.yaml"
DATA_FORMAT_VERSION = "1.0"


# =============================================================================
# ERRORS
# =============================================================================


class StorageError(Exception):
    """Base class for storage failures."""


class DataFileError(StorageError):
    """The data file exists but cannot be parsed or validated."""


class MatchupNotFoundError(StorageError, KeyError):
    """No matchup with the given id."""

    def __str__(self) -> str:
        return f"Matchup not found: {self.args[0]}"


class MatchNotFoundError(StorageError, KeyError):
    """No match with the given id."""

    def __str__(self) -> str:
        return f"Match not found: {self.args[0]}"


class MatchupValidationError(StorageError, ValueError):
    """A new matchup was submitted with missing or invalid fields."""


# =============================================================================
# FILE CONTENTS
# =============================================================================


class Metadata(BaseModel):
    """Bookkeeping stored alongside the data."""

    last_updated: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    version: str = DATA_FORMAT_VERSION


class AppData(BaseModel):
    """Everything stored in the data file."""

    matchups: dict[str, Matchup] = Field(default_factory=dict)
    matches: dict[str, Match] = Field(default_factory=dict)
    metadata: Metadata = Field(default_factory=Metadata)


# =============================================================================
# STORE
# =============================================================================


class MatchupStore:
    """
    Reads and writes matchups and matches in a YAML data file.

    The store seeds new matchups and persists committed edits. Whether an
    edit is a new version is decided by the versioning engine.
    """

    def __init__(self, data_dir: str | Path):
        """
        Initialize the store.

        Args:
            data_dir: Directory holding the data file. Created if missing.
        """
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.data_path = self.data_dir / DATA_FILE_NAME

    def load(self) -> AppData:
        """
        Load the data file.

        Returns:
            Parsed data, or empty data if the file does not exist yet.

        Raises:
            DataFileError: If the file is not valid YAML or fails validation.
        """
        if not self.data_path.exists():
            logger.debug(f"No data file at {self.data_path}; starting empty")
            return AppData()

        try:
            with open(self.data_path, encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
            return AppData.model_validate(raw)
        except yaml.YAMLError as e:
            logger.error(f"YAML parse error in {self.data_path}:\n{e}")
            raise DataFileError(f"Cannot parse {self.data_path}: {e}") from e
        except ValidationError as e:
            logger.error(f"Validation error in {self.data_path}:\n{e}")
            raise DataFileError(f"Invalid data in {self.data_path}") from e

    def save(self, data: AppData) -> None:
        """Write the data file, stamping the update time."""
        data.metadata.last_updated = datetime.now(timezone.utc)
        contents = data.model_dump(mode="json")
        with open(self.data_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(contents, f, sort_keys=False, allow_unicode=True)
        logger.debug(f"Saved {len(data.matchups)} matchups, {len(data.matches)} matches")

    # =========================================================================
    # MATCHUPS
    # =========================================================================

    def list_matchups(self, matchup_filter: MatchupFilter | None = None) -> list[Matchup]:
        """
        List matchups, optionally filtered.

        Args:
            matchup_filter: Criteria every returned matchup must satisfy.

        Returns:
            Matchups sorted by champion names then role.
        """
        matchups = list(self.load().matchups.values())
        if matchup_filter is not None:
            matchups = [m for m in matchups if m.matches_filter(matchup_filter)]
        return sorted(matchups, key=lambda m: (m.my_champion, m.enemy_champion, m.role.value))

    def search(self, query: str) -> list[Matchup]:
        """Find matchups whose champion names or notes contain the query."""
        return self.list_matchups(MatchupFilter(search=query))

    def get(self, matchup_id: str) -> Matchup:
        """
        Get a matchup by id.

        Raises:
            MatchupNotFoundError: If no matchup has this id.
        """
        matchup = self.load().matchups.get(matchup_id)
        if matchup is None:
            raise MatchupNotFoundError(matchup_id)
        return matchup

    def create(self, fields: NewMatchup) -> Matchup:
        """
        Create a matchup with one empty version.

        Raises:
            MatchupValidationError: If a champion is missing or the role is unknown.
        """
        my_champion = fields.my_champion.strip()
        enemy_champion = fields.enemy_champion.strip()
        if not my_champion or not enemy_champion:
            raise MatchupValidationError("Select both champions")

        try:
            role = Role(fields.role.strip().lower())
        except ValueError as e:
            valid = ", ".join(r.value for r in Role)
            raise MatchupValidationError(f"Unknown role '{fields.role}' (expected one of: {valid})") from e

        data = self.load()
        matchup = Matchup.new(my_champion, enemy_champion, role)
        data.matchups[matchup.id] = matchup
        self.save(data)

        logger.info(f"Created matchup {matchup.id}: {my_champion} vs {enemy_champion} ({role.value})")
        return matchup

    def update(self, matchup_id: str, fields: MatchupUpdate) -> CommitResult:
        """
        Commit edited fields to a matchup.

        Only writes when the edit produced a new version.

        Raises:
            MatchupNotFoundError: If no matchup has this id.
        """
        data = self.load()
        matchup = data.matchups.get(matchup_id)
        if matchup is None:
            raise MatchupNotFoundError(matchup_id)

        result = commit_edit(matchup, fields)
        if not result.version_created:
            logger.info(f"No changes to matchup {matchup_id}; nothing saved")
            return result

        data.matchups[matchup_id] = result.matchup
        self.save(data)
        logger.info(f"Saved version {result.matchup.current_version} of matchup {matchup_id}")
        return result

    def set_current_version(self, matchup_id: str, index: int) -> Matchup:
        """
        Persist a different active version.

        Raises:
            MatchupNotFoundError: If no matchup has this id.
            VersionOutOfRangeError: If the index is not a stored version.
        """
        data = self.load()
        matchup = data.matchups.get(matchup_id)
        if matchup is None:
            raise MatchupNotFoundError(matchup_id)

        updated = set_current_version(matchup, index)
        data.matchups[matchup_id] = updated
        self.save(data)
        logger.info(f"Matchup {matchup_id} now uses version {index}")
        return updated

    def delete(self, matchup_id: str) -> None:
        """
        Delete a matchup.

        Matches linked to it keep their (now dangling) link.

        Raises:
            MatchupNotFoundError: If no matchup has this id.
        """
        data = self.load()
        if data.matchups.pop(matchup_id, None) is None:
            raise MatchupNotFoundError(matchup_id)
        self.save(data)
        logger.info(f"Deleted matchup {matchup_id}")

    # =========================================================================
    # MATCHES
    # =========================================================================

    def list_matches(self) -> list[Match]:
        """List matches, newest first."""
        return sorted(self.load().matches.values(), key=lambda m: m.date, reverse=True)

    def get_match(self, match_id: str) -> Match:
        """
        Get a match by id.

        Raises:
            MatchNotFoundError: If no match has this id.
        """
        match = self.load().matches.get(match_id)
        if match is None:
            raise MatchNotFoundError(match_id)
        return match

    def add_match(self, match: Match) -> Match:
        """Store a single match."""
        data = self.load()
        data.matches[match.id] = match
        self.save(data)
        return match

    def import_matches(self, matches: Iterable[Match]) -> list[Match]:
        """
        Store imported matches, skipping games that were already imported.

        Args:
            matches: Match records, typically from the game client's history.

        Returns:
            The matches that were actually added.
        """
        data = self.load()
        known_games = {m.game_id for m in data.matches.values() if m.game_id is not None}

        imported = []
        skipped = 0
        for match in matches:
            if match.game_id is not None and match.game_id in known_games:
                skipped += 1
                continue
            data.matches[match.id] = match
            if match.game_id is not None:
                known_games.add(match.game_id)
            imported.append(match)

        self.save(data)
        logger.info(f"Imported {len(imported)} matches ({skipped} already known)")
        return imported

    def update_match(self, match_id: str, fields: MatchUpdate) -> Match:
        """
        Update a match's notes and/or matchup link.

        Raises:
            MatchNotFoundError: If no match has this id.
        """
        data = self.load()
        match = data.matches.get(match_id)
        if match is None:
            raise MatchNotFoundError(match_id)

        changes = {}
        if fields.notes is not None:
            changes["notes"] = fields.notes
        if fields.linked_matchup is not None:
            changes["linked_matchup"] = fields.linked_matchup or None

        updated = match.model_copy(update=changes)
        data.matches[match_id] = updated
        self.save(data)
        return updated
