# tourney_api/tournament.py
from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Set

from tourney_api.fixtures import generate_fixtures, generate_id
from tourney_api.models import Match, Team, TournamentSettings, TournamentState

MIN_TEAMS = 2


def create_tournament(settings: TournamentSettings, team_names: Iterable[str]) -> TournamentState:
    """
    New tournament: teams get fresh ids, fixtures are a single round-robin.
    Blank team names are dropped.
    """
    name = (settings.name or "").strip()
    if not name:
        raise ValueError("Tournament name is required")
    if settings.overs_per_match <= 0:
        raise ValueError("overs_per_match must be positive")

    names: List[str] = [str(n).strip() for n in team_names if n is not None and str(n).strip()]
    if len(names) < MIN_TEAMS:
        raise ValueError(f"At least {MIN_TEAMS} teams are required")

    taken: Set[str] = set()
    teams = tuple(Team(id=generate_id(taken), name=n) for n in names)
    fixtures = generate_fixtures(teams, settings.overs_per_match, taken_ids=taken)

    return TournamentState(
        settings=replace(settings, name=name, team_count=len(teams)),
        teams=teams,
        matches=tuple(fixtures),
        initialized=True,
    )


def reset_tournament() -> TournamentState:
    return TournamentState()


def find_match(state: TournamentState, match_id: str) -> Optional[Match]:
    for m in state.matches:
        if m.id == match_id:
            return m
    return None


def find_team(state: TournamentState, team_id: str) -> Optional[Team]:
    for t in state.teams:
        if t.id == team_id:
            return t
    return None


def team_names(state: TournamentState) -> Dict[str, str]:
    return {t.id: t.name for t in state.teams}


def update_match(state: TournamentState, match: Match) -> TournamentState:
    """Replace the match with the same id; unknown id leaves the state unchanged."""
    if find_match(state, match.id) is None:
        return state
    return replace(
        state,
        matches=tuple(match if m.id == match.id else m for m in state.matches),
    )


def matches_by_status(state: TournamentState) -> Dict[str, List[Match]]:
    grouped: Dict[str, List[Match]] = {"upcoming": [], "live": [], "completed": []}
    for m in state.matches:
        grouped[m.status].append(m)
    return grouped
