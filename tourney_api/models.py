from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal, Optional, Tuple

from tourney_api.ball_events import BallEvent

# -----------------------------
# Match lifecycle
# -----------------------------
MatchStatus = Literal["upcoming", "live", "completed"]

BALLS_PER_OVER = 6
MAX_WICKETS = 10


@dataclass(frozen=True)
class Team:
    id: str
    name: str


# -----------------------------
# Innings
# -----------------------------
@dataclass(frozen=True)
class Innings:
    """
    runs / wickets / legal_balls are cached projections of history.
    Build new innings through scoring.innings_from_history(); never set them directly.
    """
    team_id: str
    runs: int = 0
    wickets: int = 0
    legal_balls: int = 0
    history: Tuple[BallEvent, ...] = ()

    @property
    def has_progress(self) -> bool:
        return self.runs > 0 or self.legal_balls > 0 or len(self.history) > 0


# -----------------------------
# Match
# -----------------------------
@dataclass(frozen=True)
class Match:
    id: str
    team_a_id: str
    team_b_id: str
    total_overs: int
    innings: Dict[str, Innings]

    status: MatchStatus = "upcoming"

    # None while not decided, and for a tie / no result
    winner_id: Optional[str] = None

    # Set only while live
    batting_team_id: Optional[str] = None
    bowling_team_id: Optional[str] = None

    result: Optional[str] = None

    # Who was batting when the match was completed (lets undo re-open it)
    last_batting_team_id: Optional[str] = None

    @property
    def team_ids(self) -> Tuple[str, str]:
        return (self.team_a_id, self.team_b_id)

    @property
    def max_balls(self) -> int:
        return self.total_overs * BALLS_PER_OVER

    def opponent_of(self, team_id: str) -> str:
        if team_id == self.team_a_id:
            return self.team_b_id
        if team_id == self.team_b_id:
            return self.team_a_id
        raise ValueError(f"Team {team_id} is not playing match {self.id}")


# -----------------------------
# Tournament
# -----------------------------
@dataclass(frozen=True)
class TournamentSettings:
    name: str
    overs_per_match: int
    team_count: int = 0
    players_per_team: int = 11


@dataclass(frozen=True)
class TournamentState:
    settings: Optional[TournamentSettings] = None
    teams: Tuple[Team, ...] = ()
    matches: Tuple[Match, ...] = ()
    initialized: bool = False


# -----------------------------
# Standings row (derived, never persisted)
# -----------------------------
@dataclass
class TeamStats:
    team: Team

    played: int = 0
    won: int = 0
    lost: int = 0
    tied: int = 0
    points: int = 0

    runs_scored: int = 0
    balls_faced: int = 0
    runs_conceded: int = 0
    balls_bowled: int = 0

    nrr: float = 0.0
