# main.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Literal

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel, Field

from tourney_api.ball_events import SCORING_PAD, BallEventError, manual_event, parse_event
from tourney_api.config import (
    validate_config,
    TOURNEY_STATE_PATH,
    TOURNEY_STATE_KEY,
    TOURNEY_AUTO_SWITCH_INNINGS,
    TOURNEY_AUTO_COMPLETE_MATCH,
    TOURNEY_DEFAULT_OVERS,
    TOURNEY_LOG_LEVEL,
)
from tourney_api.match_state import (
    MatchNotStartedError,
    MatchRules,
    complete_match,
    conclude_match,
    live_summary,
    record_ball,
    scoring_notices,
    start_match,
    switch_innings,
    undo,
)
from tourney_api.models import Match, TournamentSettings
from tourney_api.points_table import compute_sorted_table, compute_standings, standings_frame
from tourney_api.store import TournamentService, TournamentStore, match_to_doc, state_to_doc
from tourney_api.tournament import (
    create_tournament,
    find_match,
    matches_by_status,
    team_names,
    update_match,
)

logger = logging.getLogger(__name__)

RULES = MatchRules(
    auto_switch_innings=TOURNEY_AUTO_SWITCH_INNINGS,
    auto_complete_match=TOURNEY_AUTO_COMPLETE_MATCH,
)

service = TournamentService(TournamentStore(TOURNEY_STATE_PATH, TOURNEY_STATE_KEY))

# -----------------------
# App
# -----------------------
app = FastAPI(
    title="Cricket Tournament Scoring API",
    version="0.1.0",
    description="Round-robin fixtures, ball-by-ball scoring, match results and points table with NRR",
)


@app.on_event("startup")
def on_startup():
    validate_config()
    logging.basicConfig(
        level=TOURNEY_LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    service.load()
    logger.info(
        "Loaded tournament from %s (initialized=%s)",
        TOURNEY_STATE_PATH,
        service.state.initialized,
    )


@app.get("/health")
def health_check():
    return {"status": "ok", "time": datetime.utcnow().isoformat() + "Z"}


# -----------------------
# Helpers
# -----------------------
def _get_match_or_404(match_id: str) -> Match:
    match = find_match(service.state, match_id)
    if match is None:
        raise HTTPException(status_code=404, detail=f"Unknown match: {match_id}")
    return match


def _match_out(match: Match) -> Dict[str, Any]:
    out = match_to_doc(match).model_dump(mode="json")
    out["live"] = live_summary(match)
    return out


def _save_match(match: Match) -> None:
    service.save(update_match(service.state, match))


def _transition(match_id: str, fn: Callable[[Match], Match]) -> Dict[str, Any]:
    match = _get_match_or_404(match_id)
    updated = fn(match)
    changed = updated is not match
    if changed:
        _save_match(updated)
    return {"changed": changed, "match": _match_out(updated)}


# -----------------------
# Tournament
# -----------------------
class CreateTournamentRequest(BaseModel):
    name: str = Field(..., description="e.g. Corporate Cup 2024")
    teams: list[str] = Field(..., description="Team names, at least 2")
    overs_per_match: int | None = Field(None, gt=0)
    players_per_team: int = Field(11, ge=1)


@app.get("/api/tournament")
def get_tournament():
    return state_to_doc(service.state).model_dump(mode="json")


@app.post("/api/tournament")
def post_tournament(req: CreateTournamentRequest):
    settings = TournamentSettings(
        name=req.name,
        overs_per_match=req.overs_per_match or TOURNEY_DEFAULT_OVERS,
        players_per_team=req.players_per_team,
    )
    try:
        state = create_tournament(settings, req.teams)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    service.save(state)
    logger.info("Created tournament %r with %d teams", settings.name, len(state.teams))
    return state_to_doc(state).model_dump(mode="json")


@app.delete("/api/tournament")
def delete_tournament():
    service.reset()
    return {"initialized": False}


@app.get("/api/fixtures")
def get_fixtures():
    grouped = matches_by_status(service.state)
    return {
        status: [_match_out(m) for m in matches]
        for status, matches in grouped.items()
    }


# -----------------------
# Match scoring
# -----------------------
class StartMatchRequest(BaseModel):
    batting_team_id: str


class BallRequest(BaseModel):
    event: str = Field(..., description="e.g. 4, W, W+1, WD, WD+2, WD+W, NB+4, NB+W+1")


class ManualRunsRequest(BaseModel):
    runs: str = Field(..., description="Run value as typed by the operator")
    extra: Literal["none", "wd", "nb"] = "none"


class CompleteMatchRequest(BaseModel):
    winner_id: str | None = Field(None, description="None for a tie / no result")
    result: str


@app.get("/api/matches/{match_id}")
def get_match(match_id: str):
    out = _match_out(_get_match_or_404(match_id))
    out["scoring_pad"] = list(SCORING_PAD)
    return out


@app.post("/api/matches/{match_id}/start")
def post_start(match_id: str, req: StartMatchRequest):
    return _transition(match_id, lambda m: start_match(m, req.batting_team_id))


def _score(match_id: str, event) -> Dict[str, Any]:
    match = _get_match_or_404(match_id)
    updated = record_ball(match, event, rules=RULES, team_names=team_names(service.state))
    changed = updated is not match
    if changed:
        _save_match(updated)
    return {
        "changed": changed,
        "notices": scoring_notices(match, updated),
        "match": _match_out(updated),
    }


@app.post("/api/matches/{match_id}/balls")
def post_ball(match_id: str, req: BallRequest):
    try:
        event = parse_event(req.event)
    except BallEventError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _score(match_id, event)


@app.post("/api/matches/{match_id}/manual")
def post_manual(match_id: str, req: ManualRunsRequest):
    event = manual_event(req.runs, req.extra)
    if event is None:
        # Unparsable run value: nothing recorded
        return {"changed": False, "notices": [], "match": _match_out(_get_match_or_404(match_id))}
    return _score(match_id, event)


@app.post("/api/matches/{match_id}/undo")
def post_undo(match_id: str):
    return _transition(match_id, undo)


@app.post("/api/matches/{match_id}/switch")
def post_switch(match_id: str):
    return _transition(match_id, switch_innings)


@app.post("/api/matches/{match_id}/complete")
def post_complete(match_id: str, req: CompleteMatchRequest):
    try:
        return _transition(match_id, lambda m: complete_match(m, req.winner_id, req.result))
    except MatchNotStartedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/api/matches/{match_id}/conclude")
def post_conclude(match_id: str):
    names = team_names(service.state)
    return _transition(match_id, lambda m: conclude_match(m, names))


# -----------------------
# Points table
# -----------------------
@app.get("/api/standings")
def get_standings():
    state = service.state
    return {"table": compute_sorted_table(compute_standings(state.teams, state.matches))}


@app.get("/api/standings.csv")
def get_standings_csv():
    state = service.state
    frame = standings_frame(compute_standings(state.teams, state.matches))
    return Response(content=frame.to_csv(index=False), media_type="text/csv")
