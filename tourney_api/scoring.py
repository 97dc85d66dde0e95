# tourney_api/scoring.py
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Sequence

from tourney_api.ball_events import BallEvent, as_event
from tourney_api.models import BALLS_PER_OVER, Innings


@dataclass(frozen=True)
class Score:
    runs: int = 0
    wickets: int = 0
    legal_balls: int = 0


def derive_score(history: Iterable["BallEvent | str"]) -> Score:
    """
    Replays the full event log into a score.

    This is the only place a score is computed: callers never add to a stored
    total, they replay the whole (possibly shortened) history again.
    String events are parsed on the way and raise BallEventError if malformed.
    """
    runs = 0
    wickets = 0
    legal_balls = 0

    for raw in history:
        event = as_event(raw)
        runs += event.total_runs
        if event.wicket:
            wickets += 1
        if event.is_legal:
            legal_balls += 1

    return Score(runs=runs, wickets=wickets, legal_balls=legal_balls)


def innings_from_history(innings: Innings, history: Sequence[BallEvent]) -> Innings:
    """New Innings with history replaced and the cached figures recomputed."""
    history = tuple(history)
    score = derive_score(history)
    return replace(
        innings,
        history=history,
        runs=score.runs,
        wickets=score.wickets,
        legal_balls=score.legal_balls,
    )


def format_overs(balls: int) -> str:
    """
    Cricket overs notation: 20 balls -> "3.2".
    """
    if balls < 0:
        raise ValueError("Balls cannot be negative")
    return f"{balls // BALLS_PER_OVER}.{balls % BALLS_PER_OVER}"
