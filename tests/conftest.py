"""Shared test fixtures for all test groups."""

import pytest

from tribe_engine.core.scoring_config import ScoringConfig
from tribe_engine.services.scoring_service import ScoringService


@pytest.fixture
def scoring_config():
    """Default scoring tables, built without reading the environment."""
    return ScoringConfig()


@pytest.fixture
def scoring_service(scoring_config):
    return ScoringService(config=scoring_config)


@pytest.fixture
def fresh_ledger():
    """Stored ledger record of a freshly registered user."""
    return {
        "cumulative_positive_xp": 0,
        "cumulative_negative_xp": 0,
        "current_xp_in_level": 0,
        "level": 1,
        "grit": 100,
    }
