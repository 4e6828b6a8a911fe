import pytest
from pydantic import ValidationError

from golquery.config import GolQueryConfig, get_golquery_config, reset_golquery_config


def test_defaults():
    config = GolQueryConfig()
    assert config.engine == "geodesk"
    assert config.gol_path is None
    assert config.sample_limit == 10
    assert config.debug_mode is False


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("GOLQUERY_ENGINE", "Memory")
    monkeypatch.setenv("GOLQUERY_GOL_PATH", "/data/planet-latest.osm.gol")
    monkeypatch.setenv("GOLQUERY_SAMPLE_LIMIT", "25")
    monkeypatch.setenv("GOLQUERY_DEBUG_MODE", "true")
    config = GolQueryConfig()
    assert config.engine == "memory"
    assert config.gol_path == "/data/planet-latest.osm.gol"
    assert config.sample_limit == 25
    assert config.debug_mode is True


def test_unknown_engine_rejected(monkeypatch):
    monkeypatch.setenv("GOLQUERY_ENGINE", "postgis")
    with pytest.raises(ValidationError):
        GolQueryConfig()


def test_sample_limit_bounds():
    with pytest.raises(ValidationError):
        GolQueryConfig(sample_limit=0)


def test_singleton_and_reset(monkeypatch):
    first = get_golquery_config()
    assert get_golquery_config() is first

    monkeypatch.setenv("GOLQUERY_SAMPLE_LIMIT", "3")
    assert get_golquery_config().sample_limit == 10

    reset_golquery_config()
    assert get_golquery_config().sample_limit == 3
