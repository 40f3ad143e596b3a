import pytest
import yaml
from pydantic import ValidationError

from channel_lineup.config.settings import Settings, get_settings


def test_defaults():
    """Defaults match the engine's scheduling constants."""
    settings = Settings()

    assert settings.iteration_cap == 40_000
    assert settings.slack_ms == 9999
    assert settings.default_pad_ms == 1
    assert settings.default_seed is None
    assert settings.log_level == "INFO"
    assert settings.log_file is None
    assert settings.default_time_zone_offset_minutes == 0


def test_yaml_config_loading(tmp_path):
    """Settings are loaded from config.yaml in the working directory."""
    config_data = {"iteration_cap": 500, "default_seed": 7, "unknown_key": "ignored"}
    (tmp_path / "config.yaml").write_text(yaml.dump(config_data))

    settings = Settings()

    assert settings.iteration_cap == 500
    assert settings.default_seed == 7


def test_yaml_config_override_env(tmp_path, monkeypatch):
    """Env vars override config.yaml."""
    (tmp_path / "config.yaml").write_text(yaml.dump({"iteration_cap": 500}))
    monkeypatch.setenv("LINEUP_ITERATION_CAP", "900")

    settings = Settings()

    assert settings.iteration_cap == 900


def test_broken_yaml_is_ignored(tmp_path):
    """An unparsable config.yaml falls back to defaults."""
    (tmp_path / "config.yaml").write_text("iteration_cap: [unclosed")

    settings = Settings()

    assert settings.iteration_cap == 40_000


def test_log_level_normalized(monkeypatch):
    monkeypatch.setenv("LINEUP_LOG_LEVEL", "debug")
    assert Settings().log_level == "DEBUG"


def test_log_file_expands_user(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    settings = Settings(log_file="~/logs/lineup.log")

    assert settings.log_file == tmp_path / "logs" / "lineup.log"
    settings.ensure_directories()
    assert (tmp_path / "logs").is_dir()


def test_invalid_iteration_cap():
    with pytest.raises(ValidationError):
        Settings(iteration_cap=0)


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
