# tourney_api/ball_events.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal, Optional

EventKind = Literal["RUNS", "WICKET", "WIDE", "NO_BALL"]
ExtraType = Literal["none", "wd", "nb"]

# Penalty run awarded for every wide / no-ball
EXTRA_PENALTY = 1


class BallEventError(ValueError):
    """Raised when a ball event string does not match the event grammar."""
    pass


@dataclass(frozen=True)
class BallEvent:
    """
    One atomic scoring action.

    kind:
      - "RUNS"   : runs off a legal delivery ("0".."6", or any manual value)
      - "WICKET" : wicket on a legal delivery, optionally with runs completed first ("W", "W+1")
      - "WIDE"   : wide, plus optional running runs ("WD", "WD+2") or a wicket ("WD+W")
      - "NO_BALL": no-ball, plus optional bat runs ("NB+4") or a run-out ("NB+W", "NB+W+1")

    runs never includes the one-run penalty for wides/no-balls.
    """
    kind: EventKind
    runs: int = 0
    wicket: bool = False

    def __post_init__(self) -> None:
        if self.runs < 0:
            raise BallEventError(f"runs cannot be negative: {self.runs}")
        if self.kind == "RUNS" and self.wicket:
            raise BallEventError("RUNS event cannot carry a wicket")
        if self.kind == "WICKET" and not self.wicket:
            raise BallEventError("WICKET event must carry a wicket")
        if self.kind == "WIDE" and self.wicket and self.runs:
            raise BallEventError("WD+W cannot carry running runs")

    @property
    def is_legal(self) -> bool:
        """
        Legal = consumes one of the innings' legal deliveries.
        A run-out on a no-ball still completes a delivery for over counting;
        a wicket on a wide does not.
        """
        if self.kind in ("RUNS", "WICKET"):
            return True
        if self.kind == "NO_BALL":
            return self.wicket
        return False

    @property
    def total_runs(self) -> int:
        if self.kind in ("WIDE", "NO_BALL"):
            return EXTRA_PENALTY + self.runs
        return self.runs

    def __str__(self) -> str:
        return encode_event(self)


# Order matters: NB+W must be tried before NB+n
_RUNS_RE = re.compile(r"^(\d+)$")
_WICKET_RE = re.compile(r"^W(?:\+(\d+))?$")
_WIDE_RE = re.compile(r"^WD(?:\+(\d+))?$")
_WIDE_WICKET_RE = re.compile(r"^WD\+W$")
_NO_BALL_WICKET_RE = re.compile(r"^NB\+W(?:\+(\d+))?$")
_NO_BALL_RE = re.compile(r"^NB(?:\+(\d+))?$")


def _opt_int(group: Optional[str]) -> int:
    return int(group) if group else 0


def parse_event(raw: str) -> BallEvent:
    """
    Parse the tagged string form ("4", "W+1", "WD+W", "NB+W+1", ...) into a BallEvent.

    Input is case-insensitive and may carry surrounding whitespace.
    Anything outside the grammar raises BallEventError instead of being miscounted.
    """
    if raw is None:
        raise BallEventError("Ball event cannot be None")

    s = str(raw).strip().upper().replace(" ", "")
    if not s:
        raise BallEventError("Ball event cannot be empty")

    m = _RUNS_RE.fullmatch(s)
    if m:
        return BallEvent("RUNS", runs=int(m.group(1)))

    m = _WICKET_RE.fullmatch(s)
    if m:
        return BallEvent("WICKET", runs=_opt_int(m.group(1)), wicket=True)

    if _WIDE_WICKET_RE.fullmatch(s):
        return BallEvent("WIDE", wicket=True)

    m = _WIDE_RE.fullmatch(s)
    if m:
        return BallEvent("WIDE", runs=_opt_int(m.group(1)))

    m = _NO_BALL_WICKET_RE.fullmatch(s)
    if m:
        return BallEvent("NO_BALL", runs=_opt_int(m.group(1)), wicket=True)

    m = _NO_BALL_RE.fullmatch(s)
    if m:
        return BallEvent("NO_BALL", runs=_opt_int(m.group(1)))

    raise BallEventError(f"Unrecognized ball event: {raw!r}")


def encode_event(event: BallEvent) -> str:
    """Canonical string form; parse_event(encode_event(e)) == e."""
    suffix = f"+{event.runs}" if event.runs else ""

    if event.kind == "RUNS":
        return str(event.runs)
    if event.kind == "WICKET":
        return f"W{suffix}"
    if event.kind == "WIDE":
        return "WD+W" if event.wicket else f"WD{suffix}"
    if event.kind == "NO_BALL":
        return f"NB+W{suffix}" if event.wicket else f"NB{suffix}"

    raise BallEventError(f"Unknown event kind: {event.kind}")


def as_event(value: "BallEvent | str") -> BallEvent:
    if isinstance(value, BallEvent):
        return value
    return parse_event(value)


def manual_event(runs_text: str, extra: ExtraType = "none") -> Optional[BallEvent]:
    """
    Operator-entered correction: a free-form run value with an optional extra type.

    Returns None when runs_text is not a non-negative integer (caller treats it as a no-op).
    """
    try:
        runs = int(str(runs_text).strip())
    except (TypeError, ValueError):
        return None
    if runs < 0:
        return None

    if extra == "wd":
        return BallEvent("WIDE", runs=runs)
    if extra == "nb":
        return BallEvent("NO_BALL", runs=runs)
    if extra == "none":
        return BallEvent("RUNS", runs=runs)

    raise BallEventError(f"Invalid extra type: {extra}")


# Quick-entry pad offered by the scoring screen
SCORING_PAD = (
    "0", "1", "2", "3", "4", "6",
    "W", "W+1", "W+2",
    "WD", "WD+1", "WD+2", "WD+3", "WD+4", "WD+W",
    "NB", "NB+1", "NB+2", "NB+3", "NB+4", "NB+6", "NB+W", "NB+W+1",
)
