# tourney_api/fixtures.py
from __future__ import annotations

import uuid
from typing import Iterable, List, Optional, Sequence, Set

from tourney_api.models import Innings, Match, Team

ID_LENGTH = 9


def generate_id(taken: Optional[Set[str]] = None) -> str:
    """Short random id, unique among `taken` when given."""
    while True:
        new_id = uuid.uuid4().hex[:ID_LENGTH]
        if taken is None or new_id not in taken:
            if taken is not None:
                taken.add(new_id)
            return new_id


def empty_innings(team_id: str) -> Innings:
    return Innings(team_id=team_id)


def generate_fixtures(
    teams: Sequence[Team],
    total_overs: int,
    *,
    taken_ids: Optional[Iterable[str]] = None,
) -> List[Match]:
    """
    Single round-robin: one upcoming match per unordered pair (teams[i], teams[j]), i < j.
    n teams -> n*(n-1)/2 matches, team A is always the earlier team in list order.
    """
    if total_overs <= 0:
        raise ValueError("total_overs must be positive")

    taken: Set[str] = set(taken_ids or ())
    fixtures: List[Match] = []

    for i in range(len(teams)):
        for j in range(i + 1, len(teams)):
            team_a = teams[i]
            team_b = teams[j]
            fixtures.append(Match(
                id=generate_id(taken),
                team_a_id=team_a.id,
                team_b_id=team_b.id,
                total_overs=total_overs,
                innings={
                    team_a.id: empty_innings(team_a.id),
                    team_b.id: empty_innings(team_b.id),
                },
            ))

    return fixtures
