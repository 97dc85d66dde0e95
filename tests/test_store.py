import json

import pytest

from conftest import play
from tourney_api.match_state import start_match
from tourney_api.models import TournamentSettings, TournamentState
from tourney_api.store import TournamentService, TournamentStore
from tourney_api.tournament import create_tournament, update_match

KEY = "cricket_tournament_data"


@pytest.fixture
def store(tmp_path):
    return TournamentStore(tmp_path / "data" / "tournament.json", KEY)


@pytest.fixture
def state():
    state = create_tournament(TournamentSettings(name="Cup", overs_per_match=5), ["Lions", "Tigers", "Eagles"])
    m = state.matches[0]
    live = play(start_match(m, m.team_a_id), ["4", "W", "WD+W", "NB+W+1", "NB+5"])
    return update_match(state, live)


def test_missing_file_is_uninitialized(store):
    assert store.load() == TournamentState()


def test_save_then_load(store, state):
    store.save(state)
    assert store.load() == state

    raw = json.loads(store.path.read_text())
    inn = raw[KEY]["matches"][0]["innings"][state.matches[0].team_a_id]
    assert inn["history"] == ["4", "W", "WD+W", "NB+W+1", "NB+5"]


def test_load_replays_history_over_stored_figures(store, state):
    store.save(state)
    raw = json.loads(store.path.read_text())
    team_a = state.matches[0].team_a_id
    raw[KEY]["matches"][0]["innings"][team_a]["runs"] = 999
    store.path.write_text(json.dumps(raw))

    loaded = store.load()
    assert loaded.matches[0].innings[team_a].runs == state.matches[0].innings[team_a].runs


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "[1, 2, 3]",
        json.dumps({KEY: {"teams": "nope"}}),
        json.dumps({KEY: {"matches": [{"id": "m", "team_a_id": "a", "team_b_id": "b",
                                       "total_overs": 5, "innings": {}}]}}),
    ],
)
def test_corrupted_data_falls_back(store, content):
    store.path.parent.mkdir(parents=True)
    store.path.write_text(content)
    assert store.load() == TournamentState()


def test_bad_event_in_history_falls_back(store, state):
    store.save(state)
    raw = json.loads(store.path.read_text())
    team_a = state.matches[0].team_a_id
    raw[KEY]["matches"][0]["innings"][team_a]["history"].append("NB+Q")
    store.path.write_text(json.dumps(raw))

    assert not store.load().initialized


def test_other_keys_are_kept(store, state):
    store.path.parent.mkdir(parents=True)
    store.path.write_text(json.dumps({"theme": "dark"}))

    store.save(state)
    store.clear()

    assert json.loads(store.path.read_text()) == {"theme": "dark"}
    assert not store.load().initialized


def test_empty_key_rejected(tmp_path):
    with pytest.raises(ValueError):
        TournamentStore(tmp_path / "x.json", " ")


def test_service_lifecycle(store, state):
    service = TournamentService(store)
    assert not service.load().initialized

    service.save(state)
    assert TournamentService(store).load() == state

    same = service.apply(lambda s: s)
    assert same is state

    service.reset()
    assert not service.state.initialized
    assert not store.load().initialized


def _doc_with_match(**overrides):
    match = {
        "id": "m1",
        "team_a_id": "a",
        "team_b_id": "b",
        "status": "completed",
        "total_overs": 5,
        "innings": {
            "a": {"team_id": "a", "history": ["4"]},
            "b": {"team_id": "b", "history": ["1"]},
        },
        "winner_id": "a",
    }
    match.update(overrides)
    return {
        "settings": {"name": "Cup", "overs_per_match": 5},
        "teams": [{"id": "a", "name": "Lions"}, {"id": "b", "name": "Tigers"}],
        "matches": [match],
        "initialized": True,
    }


def _write(store, doc):
    store.path.parent.mkdir(parents=True, exist_ok=True)
    store.path.write_text(json.dumps({KEY: doc}))


def test_consistent_match_document_loads(store):
    _write(store, _doc_with_match())
    loaded = store.load()
    assert loaded.initialized
    assert loaded.matches[0].winner_id == "a"


@pytest.mark.parametrize(
    "overrides",
    [
        {"winner_id": "zz"},
        {"last_batting_team_id": "zz"},
        {"team_b_id": "a"},
        {"innings": {"a": {"team_id": "x"}, "b": {"team_id": "b"}}},
        {"status": "live", "winner_id": None},
        {"status": "live", "winner_id": None, "batting_team_id": "a", "bowling_team_id": None},
        {"status": "live", "winner_id": None, "batting_team_id": "a", "bowling_team_id": "a"},
        {"status": "completed", "batting_team_id": "a", "bowling_team_id": "b"},
        {"status": "upcoming", "winner_id": None, "batting_team_id": "a"},
    ],
)
def test_inconsistent_match_document_falls_back(store, overrides):
    _write(store, _doc_with_match(**overrides))
    assert store.load() == TournamentState()


def test_failed_write_keeps_previous_snapshot(store, state, monkeypatch):
    service = TournamentService(store)

    def broken_save(_state):
        raise OSError("disk full")

    monkeypatch.setattr(store, "save", broken_save)
    with pytest.raises(OSError):
        service.save(state)
    assert service.state == TournamentState()
