"""Functional tests for settings defaults, merging, env overrides and the settings file.

Tests exercise real SettingsStore and load_config(), no mocks.
"""

import json

import pytest
from pydantic import ValidationError

from model_presets.config import MODULE_KEY, Settings, SettingsStore, load_config, merge_defaults


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in ("MODEL_PRESETS_ENABLED", "MODEL_PRESETS_FALLBACK", "MODEL_PRESETS_THRESHOLD"):
        monkeypatch.delenv(var, raising=False)


FULL = {
    "enabled": False,
    "fallbackPreset": "Neutral",
    "matchThreshold": 0.25,
    "lastMappings": {"gpt-4o": "Assistant"},
}


def test_defaults():
    settings = Settings()
    assert settings.to_json_dict() == {
        "enabled": True,
        "fallbackPreset": "Default",
        "matchThreshold": 0.5,
        "lastMappings": {},
    }


def test_merge_keeps_complete_settings_unchanged():
    assert merge_defaults(FULL).to_json_dict() == FULL


def test_merge_is_idempotent():
    once = merge_defaults({"matchThreshold": 0.3}).to_json_dict()
    assert merge_defaults(once).to_json_dict() == once


@pytest.mark.parametrize("missing", ["enabled", "fallbackPreset", "matchThreshold", "lastMappings"])
def test_merge_fills_only_missing_keys(missing):
    partial = {k: v for k, v in FULL.items() if k != missing}
    merged = merge_defaults(partial).to_json_dict()
    defaults = Settings().to_json_dict()
    assert merged[missing] == defaults[missing]
    for key, value in partial.items():
        assert merged[key] == value


def test_merge_does_not_mutate_input():
    raw = {"enabled": False}
    merge_defaults(raw)
    assert raw == {"enabled": False}


def test_invalid_value_falls_back_per_key():
    merged = merge_defaults({"matchThreshold": 2.5, "fallbackPreset": "Neutral"})
    assert merged.match_threshold == 0.5
    assert merged.fallback_preset == "Neutral"


def test_snake_case_names_accepted():
    settings = Settings(fallback_preset="Neutral", match_threshold=0.1)
    assert settings.fallback_preset == "Neutral"
    assert settings.to_json_dict()["matchThreshold"] == 0.1


def test_env_overrides_file_values(monkeypatch):
    monkeypatch.setenv("MODEL_PRESETS_FALLBACK", "FromEnv")
    monkeypatch.setenv("MODEL_PRESETS_ENABLED", "false")
    settings = merge_defaults(FULL)
    assert settings.fallback_preset == "FromEnv"
    assert settings.enabled is False
    assert settings.match_threshold == 0.25


def test_invalid_env_threshold_raises(monkeypatch):
    monkeypatch.setenv("MODEL_PRESETS_THRESHOLD", "7")
    with pytest.raises(ValidationError):
        merge_defaults({})


# --- SettingsStore ---


def test_store_missing_file_gives_defaults(tmp_path):
    settings = SettingsStore(tmp_path / "settings.json").load()
    assert settings == Settings()


def test_store_reads_module_section(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({MODULE_KEY: {"fallbackPreset": "Neutral"}, "other": 1}))
    settings = SettingsStore(path).load()
    assert settings.fallback_preset == "Neutral"
    assert settings.enabled is True


def test_store_save_preserves_host_keys(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"theme": "dark", MODULE_KEY: {"enabled": True}}))
    store = SettingsStore(path)
    settings = store.load()
    settings.last_mappings["claude-sonnet-4-5"] = "Claude"
    store.save(settings)

    blob = json.loads(path.read_text())
    assert blob["theme"] == "dark"
    assert blob[MODULE_KEY]["lastMappings"] == {"claude-sonnet-4-5": "Claude"}
    assert set(blob[MODULE_KEY]) == {"enabled", "fallbackPreset", "matchThreshold", "lastMappings"}


def test_store_creates_parent_dirs(tmp_path):
    path = tmp_path / "nested" / "dir" / "settings.json"
    SettingsStore(path).save(Settings())
    assert path.exists()


def test_malformed_settings_file_uses_defaults(tmp_path, capsys):
    path = tmp_path / "settings.json"
    path.write_text("not json{{{")
    settings = SettingsStore(path).load()
    assert settings == Settings()
    assert "Error loading settings.json" in capsys.readouterr().out


def test_non_object_section_uses_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({MODULE_KEY: ["enabled"]}))
    assert SettingsStore(path).load() == Settings()


def test_load_config_uses_module_path(tmp_path, monkeypatch):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({MODULE_KEY: {"matchThreshold": 0.9}}))
    monkeypatch.setattr("model_presets.config.SETTINGS_FILE", path)
    assert load_config().match_threshold == 0.9
