# tourney_api/store.py
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError

from tourney_api.ball_events import encode_event, parse_event
from tourney_api.models import Innings, Match, Team, TournamentSettings, TournamentState
from tourney_api.scoring import innings_from_history

logger = logging.getLogger(__name__)


# -----------------------------
# Persisted document schema
# -----------------------------
class TeamDoc(BaseModel):
    id: str
    name: str


class InningsDoc(BaseModel):
    team_id: str
    runs: int = Field(0, ge=0)
    wickets: int = Field(0, ge=0)
    legal_balls: int = Field(0, ge=0)
    history: List[str] = Field(default_factory=list)


class MatchDoc(BaseModel):
    id: str
    team_a_id: str
    team_b_id: str
    status: Literal["upcoming", "live", "completed"] = "upcoming"
    total_overs: int = Field(..., gt=0)
    innings: Dict[str, InningsDoc]
    winner_id: Optional[str] = None
    batting_team_id: Optional[str] = None
    bowling_team_id: Optional[str] = None
    result: Optional[str] = None
    last_batting_team_id: Optional[str] = None


class SettingsDoc(BaseModel):
    name: str
    overs_per_match: int = Field(..., gt=0)
    team_count: int = Field(0, ge=0)
    players_per_team: int = Field(11, ge=1)


class TournamentDoc(BaseModel):
    settings: Optional[SettingsDoc] = None
    teams: List[TeamDoc] = Field(default_factory=list)
    matches: List[MatchDoc] = Field(default_factory=list)
    initialized: bool = False


# -----------------------------
# State <-> document
# -----------------------------
def _innings_to_doc(inn: Innings) -> InningsDoc:
    return InningsDoc(
        team_id=inn.team_id,
        runs=inn.runs,
        wickets=inn.wickets,
        legal_balls=inn.legal_balls,
        history=[encode_event(e) for e in inn.history],
    )


def match_to_doc(m: Match) -> MatchDoc:
    return MatchDoc(
        id=m.id,
        team_a_id=m.team_a_id,
        team_b_id=m.team_b_id,
        status=m.status,
        total_overs=m.total_overs,
        innings={tid: _innings_to_doc(inn) for tid, inn in m.innings.items()},
        winner_id=m.winner_id,
        batting_team_id=m.batting_team_id,
        bowling_team_id=m.bowling_team_id,
        result=m.result,
        last_batting_team_id=m.last_batting_team_id,
    )


def state_to_doc(state: TournamentState) -> TournamentDoc:
    settings = None
    if state.settings is not None:
        s = state.settings
        settings = SettingsDoc(
            name=s.name,
            overs_per_match=s.overs_per_match,
            team_count=s.team_count,
            players_per_team=s.players_per_team,
        )
    return TournamentDoc(
        settings=settings,
        teams=[TeamDoc(id=t.id, name=t.name) for t in state.teams],
        matches=[match_to_doc(m) for m in state.matches],
        initialized=state.initialized,
    )


def _innings_from_doc(doc: InningsDoc) -> Innings:
    # Stored figures are ignored: the history is replayed
    history = [parse_event(raw) for raw in doc.history]
    return innings_from_history(Innings(team_id=doc.team_id), history)


def _check_match_doc(doc: MatchDoc) -> None:
    """Raises ValueError for a match document no transition could recover from."""
    teams = {doc.team_a_id, doc.team_b_id}
    if doc.team_a_id == doc.team_b_id:
        raise ValueError(f"Match {doc.id} has the same team on both sides")

    if set(doc.innings.keys()) != teams:
        raise ValueError(f"Match {doc.id} innings do not match its teams")
    for tid, inn in doc.innings.items():
        if inn.team_id != tid:
            raise ValueError(f"Match {doc.id} innings {tid} belongs to {inn.team_id}")

    if doc.winner_id is not None and doc.winner_id not in teams:
        raise ValueError(f"Match {doc.id} winner {doc.winner_id} is not playing")
    if doc.last_batting_team_id is not None and doc.last_batting_team_id not in teams:
        raise ValueError(f"Match {doc.id} last batting team {doc.last_batting_team_id} is not playing")

    sides = (doc.batting_team_id, doc.bowling_team_id)
    if doc.status == "live":
        if set(sides) != teams:
            raise ValueError(f"Live match {doc.id} must have both teams batting/bowling")
    elif sides != (None, None):
        raise ValueError(f"Match {doc.id} is {doc.status} but has a batting/bowling team")


def _match_from_doc(doc: MatchDoc) -> Match:
    _check_match_doc(doc)

    return Match(
        id=doc.id,
        team_a_id=doc.team_a_id,
        team_b_id=doc.team_b_id,
        total_overs=doc.total_overs,
        innings={tid: _innings_from_doc(inn) for tid, inn in doc.innings.items()},
        status=doc.status,
        winner_id=doc.winner_id,
        batting_team_id=doc.batting_team_id,
        bowling_team_id=doc.bowling_team_id,
        result=doc.result,
        last_batting_team_id=doc.last_batting_team_id,
    )


def state_from_doc(doc: TournamentDoc) -> TournamentState:
    settings = None
    if doc.settings is not None:
        settings = TournamentSettings(
            name=doc.settings.name,
            overs_per_match=doc.settings.overs_per_match,
            team_count=doc.settings.team_count,
            players_per_team=doc.settings.players_per_team,
        )
    return TournamentState(
        settings=settings,
        teams=tuple(Team(id=t.id, name=t.name) for t in doc.teams),
        matches=tuple(_match_from_doc(m) for m in doc.matches),
        initialized=doc.initialized,
    )


# -----------------------------
# Key-value JSON file
# -----------------------------
class TournamentStore:
    """
    Single JSON file holding {key: document}; the tournament lives under one fixed key.
    """

    def __init__(self, path: "str | Path", key: str) -> None:
        key = key.strip()
        if not key:
            raise ValueError("Store key must be non-empty")
        self.path = Path(path)
        self.key = key

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("Store file must contain a JSON object")
        return data

    def _write_all(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
        os.replace(tmp, self.path)

    def load(self) -> TournamentState:
        """
        Missing or corrupted data -> fresh, uninitialized state.
        """
        try:
            raw = self._read_all().get(self.key)
            if raw is None:
                return TournamentState()
            return state_from_doc(TournamentDoc.model_validate(raw))
        except (OSError, ValidationError, ValueError) as e:
            logger.warning("Ignoring unreadable tournament data in %s: %s", self.path, e)
            return TournamentState()

    def save(self, state: TournamentState) -> None:
        try:
            data = self._read_all()
        except (OSError, ValueError):
            data = {}
        data[self.key] = state_to_doc(state).model_dump(mode="json")
        self._write_all(data)
        logger.debug("Saved tournament state to %s", self.path)

    def clear(self) -> None:
        try:
            data = self._read_all()
        except (OSError, ValueError):
            data = {}
        if data.pop(self.key, None) is not None:
            self._write_all(data)


# -----------------------------
# Service: owns the single current snapshot
# -----------------------------
class TournamentService:
    def __init__(self, store: TournamentStore) -> None:
        self.store = store
        self.state = TournamentState()

    def load(self) -> TournamentState:
        self.state = self.store.load()
        return self.state

    def save(self, state: TournamentState) -> TournamentState:
        """Persist, then replace the snapshot (a failed write leaves the old snapshot)."""
        self.store.save(state)
        self.state = state
        return state

    def apply(self, fn: Callable[[TournamentState], TournamentState]) -> TournamentState:
        new_state = fn(self.state)
        if new_state is self.state:
            return new_state
        return self.save(new_state)

    def reset(self) -> TournamentState:
        self.state = TournamentState()
        self.store.clear()
        return self.state
