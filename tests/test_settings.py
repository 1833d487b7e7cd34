from __future__ import annotations

import json
from pathlib import Path

import pytest

from attainment.config.aliases import DEFAULT_ALIAS_TABLE, ConfigurationError
from attainment.config.settings import AppSettings, build_engine_config, load_settings
from attainment.logging.setup import feed_context_filter
from attainment.models.enums import SourceFeed


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path: Path) -> None:
    # Keep a developer's .env out of these tests
    monkeypatch.chdir(tmp_path)
    for name in ("LOG_LEVEL", "PASS_BAR", "ATTENTION_THRESHOLD", "ALIAS_TABLE_PATH"):
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    settings = load_settings()
    assert settings.log_level == "INFO"
    assert settings.pass_bar == 80.0

    config = build_engine_config(settings)
    assert config.alias_table == DEFAULT_ALIAS_TABLE
    assert config.pass_bar == 80.0
    assert config.attention_threshold == 60.0


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("PASS_BAR", "75")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.log_level == "DEBUG"
    assert build_engine_config(settings).pass_bar == 75.0


def test_invalid_log_level_falls_back_to_info(monkeypatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "LOUD")
    assert load_settings().log_level == "INFO"


def test_invalid_settings_exit(monkeypatch) -> None:
    monkeypatch.setenv("PASS_BAR", "-5")
    with pytest.raises(SystemExit):
        load_settings()


def test_alias_table_path(tmp_path: Path) -> None:
    path = tmp_path / "aliases.json"
    path.write_text(
        json.dumps({"teams": {"VENDAS": {"OKR": ["COMERCIAL"]}}}), encoding="utf-8"
    )

    config = build_engine_config(AppSettings(alias_table_path=path))

    assert list(config.alias_table.teams) == ["VENDAS"]
    assert config.alias_table.teams["VENDAS"][SourceFeed.OKR] == ["COMERCIAL"]


def test_missing_alias_table_is_a_configuration_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        build_engine_config(AppSettings(alias_table_path=tmp_path / "nope.json"))


def test_feed_context_filter() -> None:
    record = {"extra": {}}
    assert feed_context_filter(record)
    assert record["extra"]["feed"] == "-"

    record = {"extra": {"feed": SourceFeed.OKR}}
    feed_context_filter(record)
    assert record["extra"]["feed"] == "OKR"
