import pytest

from conftest import first_innings, play
from tourney_api.ball_events import parse_event
from tourney_api.fixtures import generate_fixtures
from tourney_api.match_state import conclude_match, start_match
from tourney_api.models import Innings, Match, Team
from tourney_api.points_table import compute_sorted_table, compute_standings, standings_frame
from tourney_api.scoring import innings_from_history


def _finish(match, bat_first, first_events, second_events, names):
    m = first_innings(match, bat_first, first_events)
    m = play(m, second_events)
    return conclude_match(m, names)


def _innings(team_id, events):
    return innings_from_history(Innings(team_id=team_id), [parse_event(e) for e in events])


def _completed(match_id, a, b, winner, overs=5, a_events=(), b_events=()):
    return Match(
        id=match_id,
        team_a_id=a,
        team_b_id=b,
        total_overs=overs,
        innings={a: _innings(a, a_events), b: _innings(b, b_events)},
        status="completed",
        winner_id=winner,
    )


@pytest.fixture
def season(teams, names):
    """a narrowly beats b and c; b thrashes c."""
    ab, ac, bc = generate_fixtures(teams, 5)
    ten = ["1"] * 10 + ["0"] * 20
    nine = ["1"] * 9 + ["0"] * 21
    ab = _finish(ab, "a", ten, nine, names)
    ac = _finish(ac, "a", ten, nine, names)
    bc = _finish(bc, "b", ["6"] * 30, ["0"] * 30, names)
    return [ab, ac, bc]


def test_points_beat_nrr(teams, season):
    assert [m.winner_id for m in season] == ["a", "a", "b"]

    table = compute_standings(teams, season)
    top, second, third = table

    assert top.team.id == "a"
    assert (top.played, top.won, top.lost, top.points) == (2, 2, 0, 4)
    assert second.team.id == "b"
    assert second.points == 2
    assert second.nrr > top.nrr
    assert third.team.id == "c"
    assert third.points == 0


def test_nrr_values(teams, season):
    rows = {r.team.id: r for r in compute_standings(teams, season)}

    a = rows["a"]
    assert (a.runs_scored, a.balls_faced, a.runs_conceded, a.balls_bowled) == (20, 60, 18, 60)
    assert a.nrr == pytest.approx(0.2)

    b = rows["b"]
    assert (b.runs_scored, b.balls_faced, b.runs_conceded, b.balls_bowled) == (189, 60, 10, 60)
    assert b.nrr == pytest.approx(17.9)


def test_only_completed_matches_count(teams, names):
    ab, ac, bc = generate_fixtures(teams, 5)
    live = play(start_match(ac, "a"), ["6", "6"])
    table = compute_standings(teams, [ab, live, bc])
    assert all(r.played == 0 and r.points == 0 and r.nrr == 0.0 for r in table)
    assert [r.team.id for r in table] == ["a", "b", "c"]


def test_all_out_charged_full_quota():
    teams = [Team("x", "X"), Team("y", "Y")]
    # X: 150 all out in 18 overs of 20
    x_events = ["6"] * 25 + ["0"] * 73 + ["W"] * 10
    # Y: 151/2 in 100 balls
    y_events = ["6"] * 25 + ["1"] + ["W"] * 2 + ["0"] * 72
    m = _completed("m1", "x", "y", "y", overs=20, a_events=x_events, b_events=y_events)
    assert m.innings["x"].legal_balls == 108

    rows = {r.team.id: r for r in compute_standings(teams, [m])}
    assert rows["x"].balls_faced == 120
    assert rows["y"].balls_bowled == 120
    assert rows["y"].balls_faced == 100
    assert rows["x"].nrr == pytest.approx(150 / 20 - 151 / (100 / 6))


def test_tie_gives_a_point_each():
    teams = [Team("x", "X"), Team("y", "Y")]
    m = _completed("m1", "x", "y", None, a_events=["4"], b_events=["4"])
    rows = compute_standings(teams, [m])
    for r in rows:
        assert (r.played, r.tied, r.points, r.won, r.lost) == (1, 1, 1, 0, 0)


def test_wins_break_level_points_and_nrr_then_input_order():
    teams = [Team("y", "Y"), Team("z", "Z"), Team("w", "W"), Team("x", "X")]
    matches = [
        _completed("m1", "w", "x", "w"),
        _completed("m2", "y", "z", None),
        _completed("m3", "y", "x", None),
    ]
    table = compute_standings(teams, matches)
    assert [r.team.id for r in table] == ["w", "y", "z", "x"]
    assert [r.points for r in table] == [2, 2, 1, 1]


def test_zero_balls_rate_is_zero():
    teams = [Team("x", "X"), Team("y", "Y")]
    m = _completed("m1", "x", "y", "x", a_events=["WD"])
    rows = {r.team.id: r for r in compute_standings(teams, [m])}
    assert rows["x"].runs_scored == 1
    assert rows["x"].nrr == 0.0
    assert rows["y"].nrr == 0.0


def test_sorted_table_rows(teams, season):
    rows = compute_sorted_table(compute_standings(teams, season))
    assert [r["pos"] for r in rows] == [1, 2, 3]
    assert rows[0]["team"] == "Lions"
    assert rows[1]["nrr"] == 17.9


def test_standings_frame(teams, season):
    frame = standings_frame(compute_standings(teams, season))
    assert list(frame["team_id"]) == ["a", "b", "c"]
    assert list(frame["points"]) == [4, 2, 0]
    assert frame.columns[0] == "pos"
