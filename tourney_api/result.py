# tourney_api/result.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Mapping, Optional

ResultType = Literal["WIN", "TIE"]
MarginUnit = Literal["wickets", "runs"]

WICKETS_IN_HAND = 10


@dataclass(frozen=True)
class MatchResult:
    result: ResultType
    winner_id: Optional[str] = None
    margin: int = 0
    margin_unit: Optional[MarginUnit] = None

    def describe(self, team_names: Mapping[str, str]) -> str:
        """Human-readable result, e.g. "Lions won by 7 wickets"."""
        if self.result == "TIE" or self.winner_id is None:
            return "Match Tied"

        name = team_names.get(self.winner_id, self.winner_id)
        unit = self.margin_unit or "runs"
        if self.margin == 1:
            unit = unit[:-1]
        return f"{name} won by {self.margin} {unit}"


def resolve_result(
    *,
    target: int,
    runs: int,
    wickets: int,
    batting_team_id: str,
    bowling_team_id: str,
) -> MatchResult:
    """
    Decide the match once the chase has concluded.

    Rules:
    - runs >= target          : chasing side wins by (10 - wickets) wickets
    - runs == target - 1      : tie (innings over, scores level)
    - otherwise               : defending side wins by (target - 1 - runs) runs

    The caller is responsible for only calling this once the chase is over.
    """
    if target <= 0:
        raise ValueError("target must be positive")

    if runs >= target:
        return MatchResult(
            result="WIN",
            winner_id=batting_team_id,
            margin=WICKETS_IN_HAND - wickets,
            margin_unit="wickets",
        )

    if runs == target - 1:
        return MatchResult(result="TIE")

    return MatchResult(
        result="WIN",
        winner_id=bowling_team_id,
        margin=target - 1 - runs,
        margin_unit="runs",
    )
