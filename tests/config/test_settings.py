"""Tests for the settings registry and value lookup."""

import pytest

from shellstate.config.configuration import get_setting, get_settings_registry, register_setting
from shellstate.config.settings import get_settings_path, get_value, load_settings


@pytest.fixture
def settings_file(tmp_path, monkeypatch):
    path = tmp_path / "settings.yaml"
    monkeypatch.setenv("SHELLSTATE_SETTINGS_FILE", str(path))
    return path


class TestRegistry:
    """Tests for register_setting."""

    def test_builtin_settings_registered(self):
        """Logging settings are registered on import."""
        names = {s.env_var for s in get_settings_registry()}
        assert {"SHELLSTATE_LOG_LEVEL", "SHELLSTATE_LOG_FORMAT", "SHELLSTATE_LOG_DATEFMT"} <= names

    def test_register_replaces_existing(self):
        """Registering the same variable twice keeps one entry."""
        register_setting("tests", "SHELLSTATE_TEST_SETTING", "Tests", "first", default="1")
        register_setting("tests", "SHELLSTATE_TEST_SETTING", "Tests", "second", default="2")
        matching = [s for s in get_settings_registry() if s.env_var == "SHELLSTATE_TEST_SETTING"]
        assert len(matching) == 1
        assert get_setting("SHELLSTATE_TEST_SETTING").description == "second"

    def test_unknown_setting(self):
        assert get_setting("SHELLSTATE_DOES_NOT_EXIST") is None


class TestGetValue:
    """Tests for get_value precedence."""

    def test_environment_wins(self, settings_file, monkeypatch):
        settings_file.write_text("SHELLSTATE_LOG_LEVEL: ERROR\n")
        monkeypatch.setenv("SHELLSTATE_LOG_LEVEL", "DEBUG")
        assert get_value("SHELLSTATE_LOG_LEVEL") == "DEBUG"

    def test_settings_file_over_default(self, settings_file, monkeypatch):
        settings_file.write_text("SHELLSTATE_LOG_LEVEL: ERROR\n")
        monkeypatch.delenv("SHELLSTATE_LOG_LEVEL", raising=False)
        assert get_value("SHELLSTATE_LOG_LEVEL") == "ERROR"

    def test_registered_default(self, settings_file, monkeypatch):
        monkeypatch.delenv("SHELLSTATE_LOG_LEVEL", raising=False)
        assert get_value("SHELLSTATE_LOG_LEVEL") == "INFO"

    def test_explicit_default(self, settings_file):
        assert get_value("SHELLSTATE_DOES_NOT_EXIST", default="fallback") == "fallback"

    def test_missing_raises(self, settings_file):
        with pytest.raises(KeyError, match="SHELLSTATE_DOES_NOT_EXIST"):
            get_value("SHELLSTATE_DOES_NOT_EXIST")

    def test_settings_passed_explicitly(self, monkeypatch):
        monkeypatch.delenv("SHELLSTATE_LOG_FORMAT", raising=False)
        assert get_value("SHELLSTATE_LOG_FORMAT", settings={"SHELLSTATE_LOG_FORMAT": "%(message)s"}) == "%(message)s"


class TestLoadSettings:
    """Tests for reading the YAML settings file."""

    def test_missing_file(self, settings_file):
        assert get_settings_path() == settings_file
        assert load_settings() == {}

    def test_empty_file(self, settings_file):
        settings_file.write_text("")
        assert load_settings() == {}

    def test_non_mapping_rejected(self, settings_file):
        settings_file.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            load_settings()
