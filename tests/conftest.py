"""
Pytest fixtures for the tournament scoring tests.
Provides teams, fresh fixtures and helpers to play a sequence of balls.
"""

import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from tourney_api.fixtures import generate_fixtures
from tourney_api.match_state import record_ball, start_match, switch_innings
from tourney_api.models import Team


@pytest.fixture
def teams():
    return [Team("a", "Lions"), Team("b", "Tigers"), Team("c", "Eagles")]


@pytest.fixture
def names(teams):
    return {t.id: t.name for t in teams}


@pytest.fixture
def match(teams):
    """Upcoming 5-over match A vs B."""
    return generate_fixtures(teams[:2], 5)[0]


def play(match, events, **kwargs):
    for e in events:
        match = record_ball(match, e, **kwargs)
    return match


def first_innings(match, batting_id, events):
    """Start the match with batting_id, play events, then switch innings."""
    m = start_match(match, batting_id)
    m = play(m, events)
    return switch_innings(m)

