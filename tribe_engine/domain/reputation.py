"""Reputation rules.

Pure domain functions for badge-based reputation, profile completeness,
tribe entry requirements and peer review aggregation.
No DB access, fully deterministic (time is injectable).
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum

from tribe_engine.domain.rounding import round_half_up

VERIFIED_BADGE_MULTIPLIER = 1.5
MIN_RECENCY_MULTIPLIER = 0.5
DAYS_PER_MONTH = 30
MAX_COMPLETENESS_BONUS = 10

# Attendance badges by sessions attended, lowest first
SESSION_BADGES = ((25, "Bronze Star"), (50, "Silver Star"), (75, "Gold Star"))
IRON_MAN_RITUALS = 12
INVESTOR_SPONSORSHIP = 500
ROI_KING_THRESHOLD = 1.2

REVIEW_CRITERIA = (
    "reliability",
    "active_presence",
    "constructive_candor",
    "generosity",
    "energy_catalyst",
    "responsiveness",
    "coachability",
    "knowledge_transparency",
    "emotional_regulation",
    "preparation",
)


class ReputationTier(StrEnum):
    NEWCOMER = "Newcomer"
    CONTRIBUTOR = "Contributor"
    ESTABLISHED = "Established"
    VETERAN = "Veteran"
    LEGEND = "Legend"


@dataclass(frozen=True)
class EarnedBadge:
    """A badge held by a user."""

    reputation_value: float
    is_verified: bool
    earned_at: datetime


def reputation_tier(score: float) -> ReputationTier:
    """Map a reputation score to its tier.

    Thresholds:
        < 100      Newcomer
        100-299    Contributor
        300-599    Established
        600-999    Veteran
        >= 1000    Legend
    """
    if score >= 1000:
        return ReputationTier.LEGEND
    if score >= 600:
        return ReputationTier.VETERAN
    if score >= 300:
        return ReputationTier.ESTABLISHED
    if score >= 100:
        return ReputationTier.CONTRIBUTOR
    return ReputationTier.NEWCOMER


def _filled(value: str | None) -> bool:
    return bool(value and value.strip())


def profile_completeness(
    name: str | None = None,
    bio: str | None = None,
    avatar_url: str | None = None,
    life_vision: str | None = None,
    skill_matrix: str | None = None,
    goal_count: int = 0,
    badge_count: int = 0,
) -> int:
    """Compute profile completeness (0-100).

    Points: name 10, bio 15, avatar 10, life vision 15, skills 20,
    at least one goal 15, at least one badge 15. Blank strings do not count.
    """
    completeness = 0
    if _filled(name):
        completeness += 10
    if _filled(bio):
        completeness += 15
    if _filled(avatar_url):
        completeness += 10
    if _filled(life_vision):
        completeness += 15
    if _filled(skill_matrix):
        completeness += 20
    if goal_count > 0:
        completeness += 15
    if badge_count > 0:
        completeness += 15
    return min(100, completeness)


def badge_reputation_score(
    badges: Iterable[EarnedBadge],
    completeness: int,
    now: datetime | None = None,
) -> int:
    """Compute a reputation score from earned badges.

    Pure function -- no side effects, no DB access.

    Args:
        badges: Badges the user holds
        completeness: Profile completeness percentage (0-100)
        now: Current time (injectable for testing, defaults to datetime.now(timezone.utc))

    Returns:
        Rounded score (0-1000+)

    Rules:
        - Verified badges count 1.5x
        - Recency multiplier: max(0.5, 1 - months_old / 12), 30-day months
        - Profile completeness adds up to 10 points
    """
    if now is None:
        now = datetime.now(timezone.utc)

    score = 0.0
    for badge in badges:
        value = badge.reputation_value
        if badge.is_verified:
            value *= VERIFIED_BADGE_MULTIPLIER
        months_old = (now - badge.earned_at).total_seconds() / (86400 * DAYS_PER_MONTH)
        recency = max(MIN_RECENCY_MULTIPLIER, 1 - months_old / 12)
        score += value * recency

    score += (completeness / 100) * MAX_COMPLETENESS_BONUS
    return round_half_up(score)


def meets_reputation_requirements(
    reputation_score: float,
    badge_count: int,
    min_reputation_score: float | None,
    min_badge_count: int | None,
) -> bool:
    """Check a user against a tribe's entry requirements. None means no requirement."""
    if min_reputation_score is not None and reputation_score < min_reputation_score:
        return False
    if min_badge_count is not None and badge_count < min_badge_count:
        return False
    return True


def average_stars(stars: Sequence[int]) -> float:
    """Reputation score after a peer review: mean star rating, 0.0 without reviews."""
    if not stars:
        return 0.0
    return sum(stars) / len(stars)


def review_breakdown(reviews: Sequence[Mapping[str, float | None]]) -> dict[str, float]:
    """Average each peer-review criterion across reviews, to one decimal.

    Missing or null ratings count as 0. Returns an empty dict when there
    are no reviews.
    """
    if not reviews:
        return {}

    breakdown: dict[str, float] = {}
    for criterion in REVIEW_CRITERIA:
        total = sum(review.get(criterion) or 0 for review in reviews)
        breakdown[criterion] = round_half_up(total / len(reviews) * 10) / 10
    return breakdown


def badges_earned(
    sessions_attended: int = 0,
    recent_rituals: Sequence[bool] = (),
    total_sponsorship: float = 0,
    project_roi: float | None = None,
) -> set[str]:
    """Names of the catalog badges a user qualifies for.

    Args:
        sessions_attended: Sessions attended in total
        recent_rituals: Attendance of the user's latest rituals, most recent first
        total_sponsorship: Sponsorship given in total
        project_roi: Admin-verified project ROI, None when not assessed

    Returns the full qualifying set; the caller awards the ones the user
    does not hold yet.
    """
    earned = {name for threshold, name in SESSION_BADGES if sessions_attended >= threshold}

    # Iron Man: every one of the last twelve rituals attended
    latest = recent_rituals[:IRON_MAN_RITUALS]
    if len(latest) == IRON_MAN_RITUALS and all(latest):
        earned.add("Iron Man")

    if total_sponsorship >= INVESTOR_SPONSORSHIP:
        earned.add("The Investor")
    if project_roi is not None and project_roi >= ROI_KING_THRESHOLD:
        earned.add("The ROI King")
    return earned
