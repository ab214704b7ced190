"""Scoring tables loaded once at process start.

The XP points table and the criterion weight table are static configuration.
They are built from Settings on first use, validated, frozen, and then
passed into every domain call; nothing mutates them at runtime.
"""

from dataclasses import dataclass
from functools import lru_cache

import structlog

from tribe_engine.core.config import Settings, get_settings
from tribe_engine.core.exceptions import ConfigurationError
from tribe_engine.domain.compatibility import DEFAULT_CRITERION_WEIGHTS, Criterion, CriterionWeights
from tribe_engine.domain.global_score import MIN_GRIT_FACTOR
from tribe_engine.domain.ledger import DEFAULT_XP_TABLE, XPAction, XPTable

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ScoringConfig:
    """Immutable bundle of every table the scoring engine reads."""

    xp_table: XPTable = DEFAULT_XP_TABLE
    criterion_weights: CriterionWeights = DEFAULT_CRITERION_WEIGHTS
    min_grit_factor: float = MIN_GRIT_FACTOR
    leaderboard_size: int = 5


def _build_xp_table(settings: Settings) -> XPTable:
    points = dict(DEFAULT_XP_TABLE.points)
    for key, value in settings.xp_point_overrides.items():
        try:
            action = XPAction(key)
        except ValueError:
            raise ConfigurationError(f"Unknown XP action in overrides: {key!r}") from None
        points[action] = value

    if settings.xp_per_level <= 0:
        raise ConfigurationError(f"xp_per_level must be positive, got {settings.xp_per_level}")
    return XPTable(points=points, xp_per_level=settings.xp_per_level)


def _build_criterion_weights(settings: Settings) -> CriterionWeights:
    weights = dict(DEFAULT_CRITERION_WEIGHTS.weights)
    for key, value in settings.criterion_weight_overrides.items():
        try:
            criterion = Criterion(key)
        except ValueError:
            raise ConfigurationError(f"Unknown matchmaking criterion in overrides: {key!r}") from None
        if value <= 0:
            raise ConfigurationError(f"Weight for {key!r} must be positive, got {value}")
        weights[criterion] = value
    return CriterionWeights(weights=weights)


def build_scoring_config(settings: Settings) -> ScoringConfig:
    """Build and validate the scoring tables from settings.

    Raises:
        ConfigurationError: an override names an unknown key or holds an invalid value
    """
    if not 0 < settings.min_grit_factor <= 1:
        raise ConfigurationError(f"min_grit_factor must be in (0, 1], got {settings.min_grit_factor}")
    if settings.leaderboard_size < 1:
        raise ConfigurationError(f"leaderboard_size must be at least 1, got {settings.leaderboard_size}")

    config = ScoringConfig(
        xp_table=_build_xp_table(settings),
        criterion_weights=_build_criterion_weights(settings),
        min_grit_factor=settings.min_grit_factor,
        leaderboard_size=settings.leaderboard_size,
    )
    logger.info(
        "scoring_config_loaded",
        xp_overrides=sorted(settings.xp_point_overrides),
        weight_overrides=sorted(settings.criterion_weight_overrides),
        xp_per_level=settings.xp_per_level,
    )
    return config


@lru_cache
def get_scoring_config() -> ScoringConfig:
    return build_scoring_config(get_settings())
