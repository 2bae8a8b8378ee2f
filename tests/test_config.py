"""Tests for the global settings file."""

import logging

from portus.config import CONFIG_ENV, default_config_path, host_locale, read_global_settings


def test_missing_file_is_empty(tmp_path):
    assert read_global_settings(tmp_path / "nope.yaml") == {}


def test_reads_mapping_and_coerces(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("date-format: DD/MM\nmove-tags: 'yes'\nmetadata-keys: owner\n")
    settings = read_global_settings(path)
    assert settings == {"date-format": "DD/MM", "move-tags": True, "metadata-keys": ["owner"]}


def test_invalid_yaml_is_logged_and_ignored(tmp_path, caplog):
    path = tmp_path / "settings.yaml"
    path.write_text("date-format: [unclosed\n")
    with caplog.at_level(logging.WARNING, logger="portus.config"):
        assert read_global_settings(path) == {}
    assert "ignoring" in caplog.text


def test_non_mapping_is_ignored(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("- a\n- b\n")
    assert read_global_settings(path) == {}


def test_env_var_sets_default_path(tmp_path, monkeypatch):
    monkeypatch.setenv(CONFIG_ENV, str(tmp_path / "x.yaml"))
    assert default_config_path() == tmp_path / "x.yaml"


def test_host_locale_from_settings():
    host = host_locale({"daily-note-format": "DD.MM.YYYY", "time-12h": True})
    assert host.daily_note_format == "DD.MM.YYYY"
    assert host.uses_12_hour is True


def test_host_locale_defaults():
    host = host_locale({"time-12h": False})
    assert host.daily_note_format is None
    assert host.uses_12_hour is False
