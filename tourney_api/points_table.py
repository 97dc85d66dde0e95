# tourney_api/points_table.py
from __future__ import annotations

from typing import Dict, List, Optional, Sequence

import pandas as pd

from tourney_api.models import Match, Team, TeamStats
from tourney_api.nrr_math import TeamAggregate, apply_innings_pair, effective_innings_balls, nrr

WIN_POINTS = 2
TIE_POINTS = 1

TABLE_COLUMNS = [
    "pos", "team_id", "team", "played", "won", "lost", "tied", "points", "nrr",
    "runs_scored", "balls_faced", "runs_conceded", "balls_bowled",
]


def apply_result(row_a: TeamStats, row_b: TeamStats, *, winner: Optional[str]) -> None:
    """
    Updates played/won/lost/tied/points ONLY.

    Rules:
    - winner is None : tie / no winner, 1 point each
    - otherwise      : winner must be row_a or row_b, 2 points to winner
    """
    row_a.played += 1
    row_b.played += 1

    if winner is None:
        row_a.tied += 1
        row_b.tied += 1
        row_a.points += TIE_POINTS
        row_b.points += TIE_POINTS
        return

    if winner == row_a.team.id:
        row_a.won += 1
        row_a.points += WIN_POINTS
        row_b.lost += 1
    elif winner == row_b.team.id:
        row_b.won += 1
        row_b.points += WIN_POINTS
        row_a.lost += 1
    else:
        raise ValueError("winner must be either team A or team B")


def compute_standings(teams: Sequence[Team], matches: Sequence[Match]) -> List[TeamStats]:
    """
    Aggregates completed matches into ranked team stats.

    Sorted by:
    1) Points (desc)
    2) NRR (desc)
    3) Wins (desc)
    Remaining ties keep team order.
    """
    rows: Dict[str, TeamStats] = {t.id: TeamStats(team=t) for t in teams}
    aggs: Dict[str, TeamAggregate] = {t.id: TeamAggregate(team=t.id) for t in teams}

    for m in matches:
        if m.status != "completed":
            continue
        if m.team_a_id not in rows or m.team_b_id not in rows:
            continue

        inn_a = m.innings[m.team_a_id]
        inn_b = m.innings[m.team_b_id]

        apply_result(rows[m.team_a_id], rows[m.team_b_id], winner=m.winner_id)

        apply_innings_pair(
            aggs[m.team_a_id],
            aggs[m.team_b_id],
            team_runs=inn_a.runs,
            team_balls=effective_innings_balls(inn_a.legal_balls, inn_a.wickets, m.max_balls),
            opp_runs=inn_b.runs,
            opp_balls=effective_innings_balls(inn_b.legal_balls, inn_b.wickets, m.max_balls),
        )

    for team_id, row in rows.items():
        agg = aggs[team_id]
        row.runs_scored = agg.runs_for
        row.balls_faced = agg.balls_for
        row.runs_conceded = agg.runs_against
        row.balls_bowled = agg.balls_against
        row.nrr = nrr(agg)

    # sorted() is stable with reverse=True, so equal keys keep input order
    return sorted(rows.values(), key=lambda r: (r.points, r.nrr, r.won), reverse=True)


def compute_sorted_table(standings: Sequence[TeamStats]) -> List[dict]:
    """Points-table rows with position, NRR rounded to 3 places."""
    out: List[dict] = []
    for idx, r in enumerate(standings, start=1):
        out.append({
            "pos": idx,
            "team_id": r.team.id,
            "team": r.team.name,
            "played": r.played,
            "won": r.won,
            "lost": r.lost,
            "tied": r.tied,
            "points": r.points,
            "nrr": round(r.nrr, 3),
            "runs_scored": r.runs_scored,
            "balls_faced": r.balls_faced,
            "runs_conceded": r.runs_conceded,
            "balls_bowled": r.balls_bowled,
        })
    return out


def standings_frame(standings: Sequence[TeamStats]) -> pd.DataFrame:
    """Points table as a DataFrame (used for CSV export)."""
    return pd.DataFrame(compute_sorted_table(standings), columns=TABLE_COLUMNS)
