import itertools

import pytest

from tourney_api.fixtures import generate_fixtures, generate_id
from tourney_api.models import Team


def _teams(n):
    return [Team(f"t{i}", f"Team {i}") for i in range(n)]


@pytest.mark.parametrize("n", [2, 3, 4, 7])
def test_one_match_per_pair(n):
    teams = _teams(n)
    fixtures = generate_fixtures(teams, 5)

    assert len(fixtures) == n * (n - 1) // 2
    pairs = [frozenset(m.team_ids) for m in fixtures]
    assert set(pairs) == {frozenset((a.id, b.id)) for a, b in itertools.combinations(teams, 2)}
    assert len(set(pairs)) == len(pairs)


def test_pairs_follow_team_order():
    fixtures = generate_fixtures(_teams(3), 5)
    assert [m.team_ids for m in fixtures] == [("t0", "t1"), ("t0", "t2"), ("t1", "t2")]


def test_matches_start_upcoming_and_empty():
    for m in generate_fixtures(_teams(3), 10):
        assert m.status == "upcoming"
        assert m.total_overs == 10
        assert m.batting_team_id is None and m.bowling_team_id is None
        assert m.winner_id is None and m.result is None
        assert set(m.innings) == set(m.team_ids)
        for tid, inn in m.innings.items():
            assert inn.team_id == tid
            assert (inn.runs, inn.wickets, inn.legal_balls, inn.history) == (0, 0, 0, ())


def test_match_ids_unique_and_avoid_taken():
    fixtures = generate_fixtures(_teams(6), 5, taken_ids={"t0"})
    ids = [m.id for m in fixtures]
    assert len(set(ids)) == len(ids)
    assert "t0" not in ids


def test_fewer_than_two_teams_gives_no_matches():
    assert generate_fixtures(_teams(1), 5) == []


def test_overs_must_be_positive():
    with pytest.raises(ValueError):
        generate_fixtures(_teams(2), 0)


def test_generate_id_records_taken():
    taken = set()
    new_id = generate_id(taken)
    assert new_id in taken
    assert len(new_id) == 9
