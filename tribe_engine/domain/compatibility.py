"""Compatibility scoring between matchmaking profiles.

Pure domain functions comparing a user's profile with a tribe's (or a
peer's) across eleven criteria. No I/O, no side effects, fully deterministic.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any

from tribe_engine.domain.rounding import round_half_up


class CriterionKind(StrEnum):
    SINGLE = "single"
    MULTI = "multi"


class Criterion(StrEnum):
    """Matchmaking criteria, in scoring order."""

    AGE_RANGE = "age_range"
    LIFE_FOCUS = "life_focus"
    PROFESSIONAL = "professional"
    WEALTH = "wealth"
    EXECUTION = "execution"
    PERSONALITY = "personality"
    HEALTH = "health"
    SKILLS = "skills"
    VALUES = "values"
    SOCIAL = "social"
    INTENT = "intent"

    @property
    def kind(self) -> CriterionKind:
        return _CRITERION_KINDS[self]


_CRITERION_KINDS = {
    Criterion.AGE_RANGE: CriterionKind.SINGLE,
    Criterion.LIFE_FOCUS: CriterionKind.MULTI,
    Criterion.PROFESSIONAL: CriterionKind.SINGLE,
    Criterion.WEALTH: CriterionKind.SINGLE,
    Criterion.EXECUTION: CriterionKind.MULTI,
    Criterion.PERSONALITY: CriterionKind.MULTI,
    Criterion.HEALTH: CriterionKind.SINGLE,
    Criterion.SKILLS: CriterionKind.MULTI,
    Criterion.VALUES: CriterionKind.SINGLE,
    Criterion.SOCIAL: CriterionKind.SINGLE,
    Criterion.INTENT: CriterionKind.SINGLE,
}


@dataclass(frozen=True)
class CriterionWeights:
    """Read-only weight per criterion. Criteria not listed weigh 1.0."""

    weights: Mapping[Criterion, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "weights", MappingProxyType(dict(self.weights)))

    def weight_of(self, criterion: Criterion) -> float:
        return self.weights.get(criterion, 1.0)


DEFAULT_CRITERION_WEIGHTS = CriterionWeights(
    weights={
        Criterion.LIFE_FOCUS: 1.5,
        Criterion.EXECUTION: 1.5,
        Criterion.PERSONALITY: 1.5,
        Criterion.SKILLS: 1.5,
        Criterion.VALUES: 2.0,
        Criterion.INTENT: 2.0,
    },
)


@dataclass(frozen=True)
class CriteriaProfile:
    """Matchmaking answers of a user or a tribe.

    Every criterion is optional. Single-valued criteria hold a string,
    multi-valued ones a frozenset. Empty strings and empty sets mean absent.
    """

    age_range: str | None = None
    life_focus: frozenset[str] = frozenset()
    professional: str | None = None
    wealth: str | None = None
    execution: frozenset[str] = frozenset()
    personality: frozenset[str] = frozenset()
    health: str | None = None
    skills: frozenset[str] = frozenset()
    values: str | None = None
    social: str | None = None
    intent: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CriteriaProfile":
        """Build a profile from a loosely typed record.

        Multi-valued criteria accept any iterable of strings, or a bare
        string for a single answer. Unknown keys are ignored.
        """
        values: dict[str, Any] = {}
        for criterion in Criterion:
            raw = data.get(criterion.value)
            if raw is None:
                continue
            if criterion.kind is CriterionKind.MULTI:
                if isinstance(raw, str):
                    raw = [raw]
                values[criterion.value] = frozenset(item for item in raw if item)
            else:
                values[criterion.value] = raw or None
        return cls(**values)

    def value_of(self, criterion: Criterion) -> str | frozenset[str] | None:
        value = getattr(self, criterion.value)
        return value or None


@dataclass(frozen=True)
class CriterionScore:
    """Contribution of one compared criterion."""

    criterion: Criterion
    raw_score: float
    weight: float


@dataclass(frozen=True)
class CompatibilityResult:
    score: int
    breakdown: tuple[CriterionScore, ...]


@dataclass(frozen=True)
class MatchResult:
    candidate_id: str
    score: int


def exact_match_score(a: str, b: str) -> float:
    """100 for equal values (case-sensitive), else 0."""
    return 100.0 if a == b else 0.0


def overlap_score(a: frozenset[str], b: frozenset[str]) -> float:
    """Overlap of two answer sets over the larger set's size.

    Dividing by the larger set rather than the union keeps a small, precise
    answer set from being penalized the way Jaccard would.
    """
    if not a or not b:
        return 0.0
    return 100.0 * len(a & b) / max(len(a), len(b))


def explain_compatibility(
    user: CriteriaProfile,
    target: CriteriaProfile,
    weights: CriterionWeights = DEFAULT_CRITERION_WEIGHTS,
) -> CompatibilityResult:
    """Score two profiles and report each compared criterion.

    Pure function -- no side effects, no DB access.

    Args:
        user: Profile of the user looking for a match
        target: Profile of the tribe or peer being considered
        weights: Weight table for the criteria

    Returns:
        CompatibilityResult with the 0-100 score and the per-criterion breakdown

    Rules:
        - Criteria absent on either side are skipped entirely
        - Score is the weighted mean of compared criteria, halves rounded up
        - No comparable criterion at all scores 0 (missing data never counts as a match)
    """
    breakdown: list[CriterionScore] = []
    total_score = 0.0
    total_weight = 0.0

    for criterion in Criterion:
        mine = user.value_of(criterion)
        theirs = target.value_of(criterion)
        if mine is None or theirs is None:
            continue

        if criterion.kind is CriterionKind.MULTI:
            raw = overlap_score(mine, theirs)
        else:
            raw = exact_match_score(mine, theirs)

        weight = weights.weight_of(criterion)
        total_score += raw * weight
        total_weight += weight
        breakdown.append(CriterionScore(criterion=criterion, raw_score=raw, weight=weight))

    if total_weight <= 0:
        return CompatibilityResult(score=0, breakdown=tuple(breakdown))

    score = round_half_up(total_score / total_weight)
    return CompatibilityResult(score=max(0, min(100, score)), breakdown=tuple(breakdown))


def score_compatibility(
    user: CriteriaProfile,
    target: CriteriaProfile,
    weights: CriterionWeights = DEFAULT_CRITERION_WEIGHTS,
) -> int:
    """Compatibility score (0-100) between two profiles."""
    return explain_compatibility(user, target, weights).score


def rank_candidates(
    user: CriteriaProfile,
    candidates: Iterable[tuple[str, CriteriaProfile]],
    weights: CriterionWeights = DEFAULT_CRITERION_WEIGHTS,
) -> list[MatchResult]:
    """Score every candidate once and sort best match first.

    Ties keep the candidates' input order (stable sort).
    """
    results = [
        MatchResult(candidate_id=candidate_id, score=score_compatibility(user, profile, weights))
        for candidate_id, profile in candidates
    ]
    results.sort(key=lambda result: result.score, reverse=True)
    return results
