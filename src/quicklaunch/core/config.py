"""
Central configuration management for QuickLaunch.

Loads settings from environment variables and provides typed access.
"""
from pathlib import Path
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RankingSettings(BaseSettings):
    """Ranking engine tuning.

    k and mu shape the sigmoid recency weight, beta divides it. The
    learning rate drives the click/impression reinforcement update.
    """
    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    use_bloom: bool = Field(default=False, alias="QUICKLAUNCH_USE_BLOOM")
    bloom_capacity: int = Field(default=10000, gt=0, alias="QUICKLAUNCH_BLOOM_CAPACITY")
    bloom_error_rate: float = Field(default=0.01, gt=0.0, lt=1.0, alias="QUICKLAUNCH_BLOOM_ERROR_RATE")
    beta: float = Field(default=1.0, gt=0.0, alias="QUICKLAUNCH_BETA")
    k: float = Field(default=0.5, alias="QUICKLAUNCH_K")
    mu: float = Field(default=30.0, alias="QUICKLAUNCH_MU")
    rl_learning_rate: float = Field(default=0.1, gt=0.0, le=1.0, alias="QUICKLAUNCH_RL_LEARNING_RATE")
    session_timeout: float = Field(
        default=30 * 60,
        ge=0.0,
        alias="QUICKLAUNCH_SESSION_TIMEOUT",
        description="Seconds a visit still counts as part of the current browsing session"
    )
    max_fuzzy_scan: int | None = Field(
        default=None,
        gt=0,
        alias="QUICKLAUNCH_MAX_FUZZY_SCAN",
        description="Cap on pages examined by the fuzzy fallback (None scans all)"
    )


class LauncherSettings(BaseSettings):
    """Quick launcher facade configuration."""
    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    cache_ttl: float = Field(default=60.0, ge=0.0, alias="QUICKLAUNCH_CACHE_TTL")
    max_results: int = Field(default=10, gt=0, alias="QUICKLAUNCH_MAX_RESULTS")


class LoggingSettings(BaseSettings):
    """Query log configuration."""
    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    query_log_path: Path = Field(default=Path("data/query_log.db"), alias="QUICKLAUNCH_QUERY_LOG_PATH")
    level: str = Field(default="INFO", alias="QUICKLAUNCH_LOG_LEVEL")


class Settings(BaseSettings):
    """Main settings aggregator."""
    ranking: RankingSettings = Field(default_factory=RankingSettings)
    launcher: LauncherSettings = Field(default_factory=LauncherSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def load_dotenv_if_exists():
    """Load the project .env file into the process environment if present."""
    from dotenv import load_dotenv
    env_path = Path(__file__).parent.parent.parent.parent / ".env"
    if env_path.exists():
        load_dotenv(env_path)
