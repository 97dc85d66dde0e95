# tourney_api/nrr_math.py
from __future__ import annotations

from dataclasses import dataclass

from tourney_api.models import BALLS_PER_OVER, MAX_WICKETS


@dataclass
class TeamAggregate:
    """
    Aggregate stats needed for NRR.
    All overs are stored as BALLS (not float overs) to avoid mistakes.
    """
    team: str
    runs_for: int = 0
    balls_for: int = 0
    runs_against: int = 0
    balls_against: int = 0


def balls_to_overs_float(balls: int) -> float:
    if balls <= 0:
        return 0.0
    return balls / float(BALLS_PER_OVER)


def run_rate(runs: int, balls: int) -> float:
    overs = balls_to_overs_float(balls)
    if overs == 0.0:
        return 0.0
    return runs / overs


def nrr(agg: TeamAggregate) -> float:
    """
    Net Run Rate = (runs_for / overs_for) - (runs_against / overs_against)
    A side with no overs contributes a rate of 0.
    """
    rr_for = run_rate(agg.runs_for, agg.balls_for)
    rr_against = run_rate(agg.runs_against, agg.balls_against)
    return rr_for - rr_against


def effective_innings_balls(legal_balls: int, wickets: int, max_balls: int) -> int:
    """
    NRR rule: an all-out innings is charged the full quota of balls.
    Otherwise, use actual legal balls faced.

    Example: bowled out after 108 of 120 balls -> 120.
    """
    if legal_balls < 0:
        raise ValueError("Balls cannot be negative")
    if max_balls <= 0:
        raise ValueError("max_balls must be positive")
    return max_balls if wickets >= MAX_WICKETS else legal_balls


def apply_innings_pair(
    agg_team: TeamAggregate,
    agg_opp: TeamAggregate,
    *,
    team_runs: int,
    team_balls: int,
    opp_runs: int,
    opp_balls: int,
) -> None:
    """
    Updates both aggregates for one completed match.
    Balls must already be normalized via effective_innings_balls().
    """
    agg_team.runs_for += int(team_runs)
    agg_team.balls_for += int(team_balls)
    agg_team.runs_against += int(opp_runs)
    agg_team.balls_against += int(opp_balls)

    agg_opp.runs_for += int(opp_runs)
    agg_opp.balls_for += int(opp_balls)
    agg_opp.runs_against += int(team_runs)
    agg_opp.balls_against += int(team_balls)
