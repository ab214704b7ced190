from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TRIBE_ENGINE_",
        extra="ignore",
    )

    # App
    app_name: str = "Tribe Scoring Engine"
    debug: bool = False

    # Logging
    log_level: str = "INFO"
    json_logs: bool = True
    # Domain modules log anomalies only (unknown stored values, owner mismatches)
    domain_log_level: str = "WARNING"

    # Ledger
    xp_per_level: int = 1000
    # JSON object in env, e.g. TRIBE_ENGINE_XP_POINT_OVERRIDES='{"referral_opened": 25}'
    xp_point_overrides: dict[str, int] = {}

    # Global score
    min_grit_factor: float = 0.1
    leaderboard_size: int = 5

    # Matchmaking
    criterion_weight_overrides: dict[str, float] = {}


@lru_cache
def get_settings() -> Settings:
    return Settings()
