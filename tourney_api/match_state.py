# tourney_api/match_state.py
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Mapping, Optional

from tourney_api.ball_events import BallEvent, as_event
from tourney_api.models import BALLS_PER_OVER, MAX_WICKETS, Innings, Match
from tourney_api.result import resolve_result
from tourney_api.scoring import format_overs, innings_from_history

logger = logging.getLogger(__name__)


class MatchError(Exception):
    """Raised when a match transition is refused for a domain reason."""
    pass


class MatchNotStartedError(MatchError):
    """Raised when completing a match in which neither side has scored a ball."""
    pass


@dataclass(frozen=True)
class MatchRules:
    """
    auto_switch_innings : swap sides as soon as the first innings is complete
    auto_complete_match : resolve + complete as soon as the chase has concluded
    Both off = operator confirms each step.
    """
    auto_switch_innings: bool = False
    auto_complete_match: bool = False


MANUAL_RULES = MatchRules()


# -----------------------------
# Derived reads (never stored)
# -----------------------------
def batting_innings(match: Match) -> Optional[Innings]:
    if match.batting_team_id is None:
        return None
    return match.innings.get(match.batting_team_id)


def bowling_innings(match: Match) -> Optional[Innings]:
    if match.bowling_team_id is None:
        return None
    return match.innings.get(match.bowling_team_id)


def get_target(match: Match) -> Optional[int]:
    """
    First-innings runs + 1, once the side now bowling has batted.
    """
    bowl = bowling_innings(match)
    if bowl is None or not bowl.has_progress:
        return None
    return bowl.runs + 1


def innings_complete(innings: Innings, total_overs: int) -> bool:
    return innings.wickets >= MAX_WICKETS or innings.legal_balls >= total_overs * BALLS_PER_OVER


def first_innings_complete(match: Match) -> bool:
    bat = batting_innings(match)
    if bat is None:
        return False
    return get_target(match) is None and innings_complete(bat, match.total_overs)


def match_concluded(match: Match) -> bool:
    bat = batting_innings(match)
    target = get_target(match)
    if bat is None or target is None:
        return False
    return bat.runs >= target or innings_complete(bat, match.total_overs)


def scoring_disabled(match: Match) -> bool:
    return first_innings_complete(match) or match_concluded(match)


def has_play(match: Match) -> bool:
    """True if either side has any runs, wickets or legal balls recorded."""
    return any(
        inn.runs > 0 or inn.wickets > 0 or inn.legal_balls > 0
        for inn in match.innings.values()
    )


# -----------------------------
# Transitions (match in, new match out)
# -----------------------------
def start_match(match: Match, batting_team_id: str) -> Match:
    if match.status != "upcoming":
        logger.debug("start_match ignored: match %s is %s", match.id, match.status)
        return match
    if batting_team_id not in match.team_ids:
        logger.debug("start_match ignored: team %s not in match %s", batting_team_id, match.id)
        return match

    return replace(
        match,
        status="live",
        batting_team_id=batting_team_id,
        bowling_team_id=match.opponent_of(batting_team_id),
    )


def _with_innings(match: Match, innings: Innings) -> Match:
    innings_map = dict(match.innings)
    innings_map[innings.team_id] = innings
    return replace(match, innings=innings_map)


def record_ball(
    match: Match,
    event: "BallEvent | str",
    *,
    rules: MatchRules = MANUAL_RULES,
    team_names: Optional[Mapping[str, str]] = None,
) -> Match:
    """
    Append one event to the batting side's log and replay its score.

    Reaching the end of an innings does not change the status, unless one of
    the automatic rules is switched on.
    """
    event = as_event(event)

    if match.status != "live" or scoring_disabled(match):
        logger.debug("record_ball ignored for match %s", match.id)
        return match

    bat = batting_innings(match)
    if bat is None:
        return match

    updated = _with_innings(match, innings_from_history(bat, bat.history + (event,)))

    if rules.auto_switch_innings and first_innings_complete(updated):
        logger.info("Match %s: first innings complete, switching sides", match.id)
        updated = switch_innings(updated)

    if rules.auto_complete_match and match_concluded(updated):
        logger.info("Match %s: chase concluded, completing match", match.id)
        updated = conclude_match(updated, team_names or {})

    return updated


def switch_innings(match: Match) -> Match:
    if match.status != "live" or match.batting_team_id is None or match.bowling_team_id is None:
        return match
    if get_target(match) is not None:
        logger.debug("switch_innings ignored: match %s is already in the chase", match.id)
        return match

    return replace(
        match,
        batting_team_id=match.bowling_team_id,
        bowling_team_id=match.batting_team_id,
    )


def undo(match: Match) -> Match:
    """
    Drop the last event of the side batting (or batting at the finish) and replay.

    Undo on a completed match always re-opens it, even when the dropped ball
    did not decide the result.
    """
    if match.status == "live":
        batting_id = match.batting_team_id
    elif match.status == "completed":
        batting_id = match.last_batting_team_id
    else:
        return match

    if batting_id is None or batting_id not in match.innings:
        return match

    inn = match.innings[batting_id]
    if not inn.history:
        return match

    updated = _with_innings(match, innings_from_history(inn, inn.history[:-1]))

    if match.status == "completed":
        updated = replace(
            updated,
            status="live",
            winner_id=None,
            result=None,
            batting_team_id=batting_id,
            bowling_team_id=match.opponent_of(batting_id),
            last_batting_team_id=None,
        )

    return updated


def complete_match(match: Match, winner_id: Optional[str], result_text: str) -> Match:
    """
    Finalize a live match.

    Raises MatchNotStartedError if neither side has scored a ball.
    """
    if match.status != "live":
        logger.debug("complete_match ignored: match %s is %s", match.id, match.status)
        return match

    if winner_id is not None and winner_id not in match.team_ids:
        raise ValueError("winner must be either team A or team B")

    if not has_play(match):
        logger.info("Refused to complete match %s: no play recorded", match.id)
        raise MatchNotStartedError("Cannot complete a match before any ball has been scored.")

    return replace(
        match,
        status="completed",
        winner_id=winner_id,
        result=result_text,
        batting_team_id=None,
        bowling_team_id=None,
        last_batting_team_id=match.batting_team_id,
    )


def conclude_match(match: Match, team_names: Mapping[str, str]) -> Match:
    """
    Confirmation path: resolve the result from the final figures and complete.
    No-op unless the chase has concluded.
    """
    if match.status != "live" or not match_concluded(match):
        return match

    bat = batting_innings(match)
    target = get_target(match)
    if bat is None or target is None:
        return match

    outcome = resolve_result(
        target=target,
        runs=bat.runs,
        wickets=bat.wickets,
        batting_team_id=match.batting_team_id,
        bowling_team_id=match.bowling_team_id,
    )
    return complete_match(match, outcome.winner_id, outcome.describe(team_names))


# -----------------------------
# Read model for the scoring screen
# -----------------------------
def scoring_notices(before: Match, after: Match) -> List[str]:
    """
    Operator notices after a ball: innings end / pending result, and over completed.
    """
    notices: List[str] = []

    bat_before = batting_innings(before)
    bat_after = after.innings.get(before.batting_team_id) if before.batting_team_id else None
    if bat_before is None or bat_after is None or bat_after.history == bat_before.history:
        return notices

    if innings_complete(bat_after, before.total_overs):
        target = get_target(before)
        if target is None:
            notices.append("Innings completed (pending switch)")
        elif bat_after.runs >= target:
            notices.append("Target chased (pending confirmation)")
        elif bat_after.runs == target - 1:
            notices.append("Match tied (pending confirmation)")
        else:
            notices.append("Defending team won (pending confirmation)")
    elif get_target(before) is not None and bat_after.runs >= get_target(before):
        notices.append("Target chased (pending confirmation)")

    balls = bat_after.legal_balls
    if balls > 0 and balls % BALLS_PER_OVER == 0 and balls != bat_before.legal_balls:
        notices.append(f"Over {balls // BALLS_PER_OVER} completed")

    return notices


def live_summary(match: Match) -> Dict[str, Any]:
    bat = batting_innings(match)
    target = get_target(match)
    balls = bat.legal_balls if bat else 0

    return {
        "target": target,
        "runs_needed": (target - bat.runs) if (target is not None and bat) else None,
        "balls_remaining": match.max_balls - balls if bat else None,
        "overs": format_overs(balls),
        "first_innings_complete": first_innings_complete(match),
        "match_concluded": match_concluded(match),
        "scoring_disabled": scoring_disabled(match),
    }
