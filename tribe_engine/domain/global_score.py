"""Global Score domain function.

Single ranking number combining Level, Grit, XP and Reputation. Every view
that shows a ranking number (profile page, tribe member list, leaderboard)
goes through global_score() so the numbers always agree.

Pure functions -- no I/O, no side effects, fully deterministic.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from tribe_engine.domain.rounding import round_half_up

MIN_GRIT_FACTOR = 0.1


def global_score(
    level: int,
    grit: int | None,
    current_xp: int,
    reputation_score: float,
    *,
    min_grit_factor: float = MIN_GRIT_FACTOR,
) -> int:
    """Compute the Global Score.

    Args:
        level: User level (>= 1)
        grit: Grit percentage 0-100, None when never computed
        current_xp: XP counter used for ranking
        reputation_score: Average peer rating (may be fractional)
        min_grit_factor: Lower bound of the grit factor

    Returns:
        round(level * grit_factor * xp_factor * rep_factor), halves rounded up

    Rules:
        - grit_factor = max(grit / 100, min_grit_factor); a missing grit counts as 0
        - xp_factor = max(current_xp, 1)
        - rep_factor = max(reputation_score, 1)

    The grit floor applies to every grit below min_grit_factor * 100, not
    only to zero, so the score never drops as grit rises from 0 to 10.

    Flooring every factor keeps a user with zero XP or zero reputation
    distinguishable from one who never registered.
    """
    grit_factor = max((grit or 0) / 100, min_grit_factor)
    xp_factor = max(current_xp, 1)
    rep_factor = max(reputation_score, 1)
    return round_half_up(level * grit_factor * xp_factor * rep_factor)


@dataclass(frozen=True)
class ScoreInputs:
    """Ranking inputs for one user."""

    user_id: str
    level: int
    grit: int | None
    current_xp: int
    reputation_score: float


@dataclass(frozen=True)
class RankedEntry:
    """A leaderboard row. position is 1-based."""

    user_id: str
    score: int
    position: int


def rank_by_global_score(
    entries: Iterable[ScoreInputs],
    top_n: int | None = None,
    *,
    min_grit_factor: float = MIN_GRIT_FACTOR,
) -> list[RankedEntry]:
    """Build the leaderboard.

    Sorted by Global Score descending. The sort is stable, so users with the
    same score keep their input order. top_n=None returns every entry.
    """
    scored = [
        (
            entry.user_id,
            global_score(
                entry.level,
                entry.grit,
                entry.current_xp,
                entry.reputation_score,
                min_grit_factor=min_grit_factor,
            ),
        )
        for entry in entries
    ]
    scored.sort(key=lambda pair: pair[1], reverse=True)
    if top_n is not None:
        scored = scored[:max(top_n, 0)]

    return [
        RankedEntry(user_id=user_id, score=score, position=index)
        for index, (user_id, score) in enumerate(scored, start=1)
    ]
