"""Tests pour le chargement et la sauvegarde des paramètres."""

import json

import pytest

from src.config import DEFAULT_PERIOD_MONTHS, STATS_API_BASE
from src.ui.settings import AppSettings, get_settings_path, load_settings, save_settings


@pytest.fixture
def settings_file(tmp_path, monkeypatch):
    path = tmp_path / "conf" / "app_settings.json"
    monkeypatch.setenv("QWMATCHUP_SETTINGS_PATH", str(path))
    return path


class TestLoadSettings:
    """Tests pour load_settings."""

    def test_path_override(self, settings_file):
        assert get_settings_path() == str(settings_file)

    def test_missing_file(self, settings_file):
        assert load_settings() == AppSettings()

    def test_invalid_json(self, settings_file):
        settings_file.parent.mkdir(parents=True)
        settings_file.write_text("{pas du json", encoding="utf-8")
        assert load_settings() == AppSettings()

    def test_invalid_values_fall_back(self, settings_file):
        settings_file.parent.mkdir(parents=True)
        settings_file.write_text(
            json.dumps(
                {
                    "default_period_months": 5,
                    "h2h_limit": "beaucoup",
                    "form_limit": 0,
                    "list_cache_ttl_seconds": -10,
                    "request_timeout_seconds": True,
                    "stats_api_base": "ftp://stats.example",
                }
            ),
            encoding="utf-8",
        )
        s = load_settings()
        assert s.default_period_months == DEFAULT_PERIOD_MONTHS
        assert s.h2h_limit == AppSettings().h2h_limit
        assert s.form_limit == 1
        assert s.list_cache_ttl_seconds == 0
        assert s.request_timeout_seconds == AppSettings().request_timeout_seconds
        assert s.stats_api_base == STATS_API_BASE

    def test_valid_values(self, settings_file):
        settings_file.parent.mkdir(parents=True)
        settings_file.write_text(
            json.dumps({"default_period_months": 12, "stats_api_base": "https://stats.example/"}),
            encoding="utf-8",
        )
        s = load_settings()
        assert s.default_period_months == 12
        assert s.stats_api_base == "https://stats.example"


class TestSaveSettings:
    """Tests pour save_settings."""

    def test_round_trip(self, settings_file):
        s = AppSettings(default_period_months=6, form_limit=20, teams_path="/data/teams.json")
        ok, err = save_settings(s)
        assert ok, err
        assert settings_file.exists()
        assert load_settings() == s

    def test_write_error(self, tmp_path, monkeypatch):
        blocker = tmp_path / "fichier"
        blocker.write_text("x", encoding="utf-8")
        monkeypatch.setenv("QWMATCHUP_SETTINGS_PATH", str(blocker / "app_settings.json"))
        ok, err = save_settings(AppSettings())
        assert not ok
        assert "Impossible" in err
