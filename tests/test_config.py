"""
Tests for environment-driven settings.
"""
import pytest
from pydantic import ValidationError

from quicklaunch.core.config import (
    LauncherSettings,
    LoggingSettings,
    RankingSettings,
    Settings,
    get_settings,
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """No stray .env file or QUICKLAUNCH_* variables."""
    monkeypatch.chdir(tmp_path)
    for name in ["QUICKLAUNCH_USE_BLOOM", "QUICKLAUNCH_K", "QUICKLAUNCH_CACHE_TTL",
                 "QUICKLAUNCH_MAX_FUZZY_SCAN", "QUICKLAUNCH_LOG_LEVEL"]:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_ranking_defaults():
    config = RankingSettings()
    assert config.use_bloom is False
    assert config.bloom_capacity == 10000
    assert config.bloom_error_rate == 0.01
    assert config.beta == 1.0
    assert config.k == 0.5
    assert config.mu == 30.0
    assert config.rl_learning_rate == 0.1
    assert config.session_timeout == 1800
    assert config.max_fuzzy_scan is None


def test_launcher_and_logging_defaults():
    assert LauncherSettings().cache_ttl == 60.0
    assert LauncherSettings().max_results == 10
    assert LoggingSettings().level == "INFO"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("QUICKLAUNCH_USE_BLOOM", "true")
    monkeypatch.setenv("QUICKLAUNCH_K", "0.25")
    monkeypatch.setenv("QUICKLAUNCH_MAX_FUZZY_SCAN", "500")

    config = RankingSettings()
    assert config.use_bloom is True
    assert config.k == 0.25
    assert config.max_fuzzy_scan == 500


def test_populate_by_field_name():
    config = RankingSettings(k=2.0, use_bloom=True)
    assert config.k == 2.0
    assert config.use_bloom is True


@pytest.mark.parametrize("field, value", [
    ("rl_learning_rate", 0.0),
    ("rl_learning_rate", 1.5),
    ("beta", 0.0),
    ("bloom_capacity", 0),
    ("bloom_error_rate", 1.0),
])
def test_invalid_values_rejected(field, value):
    with pytest.raises(ValidationError):
        RankingSettings(**{field: value})


def test_get_settings_is_cached(monkeypatch):
    monkeypatch.setenv("QUICKLAUNCH_CACHE_TTL", "5")
    settings = get_settings()
    assert isinstance(settings, Settings)
    assert settings.launcher.cache_ttl == 5.0
    assert get_settings() is settings
