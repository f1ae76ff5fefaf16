"""Unit tests for the YAML matchup store."""

from datetime import datetime, timedelta, timezone

import pytest

from matchup_helper.models import (
    Match,
    MatchResult,
    MatchUpdate,
    MatchupFilter,
    MatchupUpdate,
    NewMatchup,
)
from matchup_helper.storage import (
    DataFileError,
    MatchNotFoundError,
    MatchupNotFoundError,
    MatchupStore,
    MatchupValidationError,
)
from matchup_helper.versioning import VersionOutOfRangeError


def _match(game_id: str | None, days_ago: int = 0, **fields) -> Match:
    return Match(
        game_id=game_id,
        date=datetime(2026, 10, 1, tzinfo=timezone.utc) - timedelta(days=days_ago),
        my_champion=fields.get("my_champion", "Darius"),
        enemy_champion=fields.get("enemy_champion", "Garen"),
        role="top",
        result=MatchResult.WIN,
    )


class TestMatchups:
    """Tests for matchup CRUD."""

    def test_empty_store(self, store):
        assert store.list_matchups() == []
        assert not store.data_path.exists()

    def test_create_and_reload(self, store, seeded):
        reopened = MatchupStore(store.data_dir)
        loaded = reopened.get(seeded.id)

        assert loaded.my_champion == "Darius"
        assert loaded.enemy_champion == "Garen"
        assert loaded.role.value == "top"
        assert len(loaded.versions) == 1
        assert loaded.current_version == 1

    def test_create_normalizes_role(self, store):
        matchup = store.create(NewMatchup(my_champion="Ahri", enemy_champion="Zed", role=" MID "))
        assert matchup.role.value == "mid"

    @pytest.mark.parametrize("mine, enemy", [("", "Garen"), ("Darius", "  ")])
    def test_create_requires_both_champions(self, store, mine, enemy):
        with pytest.raises(MatchupValidationError, match="both champions"):
            store.create(NewMatchup(my_champion=mine, enemy_champion=enemy, role="top"))

    def test_create_rejects_unknown_role(self, store):
        with pytest.raises(MatchupValidationError):
            store.create(NewMatchup(my_champion="Darius", enemy_champion="Garen", role="carry"))

    def test_get_missing(self, store):
        with pytest.raises(MatchupNotFoundError):
            store.get("nope")

    def test_update_creates_and_persists_version(self, store, seeded):
        result = store.update(seeded.id, MatchupUpdate(notes="Short trades", runes=["Conqueror"]))

        assert result.version_created is True
        loaded = store.get(seeded.id)
        assert len(loaded.versions) == 2
        assert loaded.current_version == 2
        assert loaded.versions[1].runes == ["Conqueror"]
        assert loaded.versions[0].notes == ""

    def test_noop_update_does_not_write(self, store, seeded):
        before = store.data_path.read_text(encoding="utf-8")

        result = store.update(seeded.id, MatchupUpdate())

        assert result.version_created is False
        assert store.data_path.read_text(encoding="utf-8") == before
        assert len(store.get(seeded.id).versions) == 1

    def test_update_missing(self, store):
        with pytest.raises(MatchupNotFoundError):
            store.update("nope", MatchupUpdate(notes="x"))

    def test_set_current_version(self, store, seeded):
        store.update(seeded.id, MatchupUpdate(notes="v2"))

        store.set_current_version(seeded.id, 1)

        loaded = store.get(seeded.id)
        assert loaded.current_version == 1
        assert len(loaded.versions) == 2

    def test_set_current_version_out_of_range(self, store, seeded):
        with pytest.raises(VersionOutOfRangeError):
            store.set_current_version(seeded.id, 2)

    def test_delete(self, store, seeded):
        store.delete(seeded.id)
        with pytest.raises(MatchupNotFoundError):
            store.get(seeded.id)

    def test_delete_missing(self, store):
        with pytest.raises(MatchupNotFoundError):
            store.delete("nope")

    def test_list_filter_and_search(self, store, seeded):
        other = store.create(NewMatchup(my_champion="Ahri", enemy_champion="Zed", role="mid"))
        store.update(other.id, MatchupUpdate(notes="Dodge the shadow", tags=["assassin"]))

        assert [m.id for m in store.list_matchups(MatchupFilter(role="mid"))] == [other.id]
        assert [m.id for m in store.list_matchups(MatchupFilter(tags=["assassin"]))] == [other.id]
        assert [m.id for m in store.search("shadow")] == [other.id]
        assert [m.id for m in store.search("darius")] == [seeded.id]
        assert len(store.list_matchups()) == 2

    def test_metadata_is_stamped(self, store, seeded):
        assert store.load().metadata.version == "1.0"
        assert store.load().metadata.last_updated is not None


class TestDataFile:
    """Tests for loading malformed data files."""

    def test_invalid_yaml(self, store):
        store.data_path.write_text("matchups: [unclosed", encoding="utf-8")
        with pytest.raises(DataFileError):
            store.load()

    def test_invalid_model(self, store):
        store.data_path.write_text("matchups:\n  x:\n    role: top\n", encoding="utf-8")
        with pytest.raises(DataFileError):
            store.load()

    def test_empty_file_is_empty_data(self, store):
        store.data_path.write_text("", encoding="utf-8")
        assert store.load().matchups == {}


class TestMatches:
    """Tests for match history."""

    def test_list_newest_first(self, store):
        old = store.add_match(_match("1", days_ago=5))
        new = store.add_match(_match("2", days_ago=1))

        assert [m.id for m in store.list_matches()] == [new.id, old.id]

    def test_import_skips_known_games(self, store):
        store.import_matches([_match("100"), _match("101")])

        imported = store.import_matches([_match("101"), _match("102"), _match("102")])

        assert [m.game_id for m in imported] == ["102"]
        assert len(store.list_matches()) == 3

    def test_import_keeps_matches_without_game_id(self, store):
        imported = store.import_matches([_match(None), _match(None)])
        assert len(imported) == 2

    def test_update_match_notes_and_link(self, store, seeded):
        match = store.add_match(_match("1"))

        updated = store.update_match(match.id, MatchUpdate(notes="Lost lane", linked_matchup=seeded.id))

        assert updated.notes == "Lost lane"
        assert updated.linked_matchup == seeded.id
        assert store.get_match(match.id).linked_matchup == seeded.id

    def test_update_match_leaves_unset_fields(self, store, seeded):
        match = store.add_match(_match("1"))
        store.update_match(match.id, MatchUpdate(linked_matchup=seeded.id))

        updated = store.update_match(match.id, MatchUpdate(notes="ok"))

        assert updated.linked_matchup == seeded.id

    def test_empty_link_clears(self, store, seeded):
        match = store.add_match(_match("1"))
        store.update_match(match.id, MatchUpdate(linked_matchup=seeded.id))

        updated = store.update_match(match.id, MatchUpdate(linked_matchup=""))

        assert updated.linked_matchup is None

    def test_update_missing_match(self, store):
        with pytest.raises(MatchNotFoundError):
            store.update_match("nope", MatchUpdate(notes="x"))
