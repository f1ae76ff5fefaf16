"""Unit tests for EditSession."""

import pytest

from matchup_helper.models import MatchupUpdate
from matchup_helper.session import EditSession
from matchup_helper.versioning import VersionOutOfRangeError


def test_draft_starts_from_active_version(store, seeded):
    store.update(seeded.id, MatchupUpdate(notes="v2", tags=["poke"]))

    session = EditSession(store, seeded.id)

    assert session.displayed_version == 2
    assert session.draft.notes == "v2"
    assert session.draft.tags == ["poke"]


def test_save_without_edits_is_noop(store, seeded):
    session = EditSession(store, seeded.id)

    result = session.save()

    assert result.version_created is False
    assert len(store.get(seeded.id).versions) == 1


def test_tag_edits_stay_in_draft_until_save(store, seeded):
    session = EditSession(store, seeded.id)

    session.add_tag("  Early  Game ")
    session.add_tag("early-game")

    assert session.draft.tags == ["early-game"]
    assert store.get(seeded.id).versions[0].tags == []
    assert session.displayed().tags == []

    result = session.save()

    assert result.version_created is True
    assert store.get(seeded.id).versions[1].tags == ["early-game"]


def test_add_then_remove_tag_is_noop_save(store, seeded):
    session = EditSession(store, seeded.id)
    session.add_tag("poke")
    session.remove_tag("poke")

    assert session.save().version_created is False


def test_build_fields_parse_text(store, seeded):
    session = EditSession(store, seeded.id)
    session.set_runes("Conqueror, Legend: Alacrity,")
    session.set_summoner_spells("Flash,Ghost")
    session.set_items("")

    assert session.build_text() == {
        "runes": "Conqueror, Legend: Alacrity",
        "summoner_spells": "Flash, Ghost",
        "items": "",
    }

    session.save()
    saved = store.get(seeded.id).versions[-1]
    assert saved.runes == ["Conqueror", "Legend: Alacrity"]
    assert saved.summoner_spells == ["Flash", "Ghost"]


def test_unchanged_build_text_round_trips(store, seeded):
    store.update(seeded.id, MatchupUpdate(runes=["Conqueror", "Legend: Alacrity"]))
    session = EditSession(store, seeded.id)

    session.set_runes(session.build_text()["runes"])

    assert session.save().version_created is False


def test_browse_does_not_change_stored_pointer(store, seeded):
    store.update(seeded.id, MatchupUpdate(notes="v2"))
    session = EditSession(store, seeded.id)

    version = session.browse(1)

    assert version.notes == ""
    assert session.draft.notes == ""
    assert store.get(seeded.id).current_version == 2


def test_saving_browsed_version_appends_copy(store, seeded):
    store.update(seeded.id, MatchupUpdate(notes="v2"))
    session = EditSession(store, seeded.id)
    session.browse(1)

    result = session.save()

    assert result.version_created is True
    loaded = store.get(seeded.id)
    assert [v.notes for v in loaded.versions] == ["", "v2", ""]
    assert loaded.current_version == 3
    assert session.displayed_version == 3


def test_browse_out_of_range(store, seeded):
    session = EditSession(store, seeded.id)
    with pytest.raises(VersionOutOfRangeError):
        session.browse(2)
    assert session.displayed_version == 1


def test_sessions_are_independent(store, seeded):
    first = EditSession(store, seeded.id)
    second = EditSession(store, seeded.id)

    first.add_tag("poke")

    assert second.draft.tags == []


def _make_pointer_stale(store, matchup_id, pointer):
    data = store.load()
    data.matchups[matchup_id] = data.matchups[matchup_id].model_copy(update={"current_version": pointer})
    store.save(data)


def test_stale_pointer_shows_first_version(store, seeded):
    _make_pointer_stale(store, seeded.id, 5)

    session = EditSession(store, seeded.id)

    assert session.displayed_version == 1
    assert session.displayed() == store.get(seeded.id).versions[0]
    assert session.save().version_created is False


def test_stale_pointer_save_moves_to_new_version(store, seeded):
    _make_pointer_stale(store, seeded.id, 5)
    session = EditSession(store, seeded.id)
    session.set_notes("fresh")

    result = session.save()

    assert result.matchup.current_version == 2
    assert session.displayed_version == 2
    assert session.displayed().notes == "fresh"
