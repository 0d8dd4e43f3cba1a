"""
Tests for service and security settings loading.
"""

import json

import pytest

from convertcore.security import (
    DEFAULT_SECURITY_SETTINGS,
    SECURITY_CONFIG_ENV,
    MonitoringPolicy,
    SecuritySettings,
    load_security_settings,
    save_security_settings,
)
from convertcore.settings import ConverterSettings


class TestSecuritySettings:

    def test_defaults(self):
        settings = SecuritySettings()
        policy = settings.policy_for("spreadsheet")
        assert policy.max_file_size == 50 * 1024 * 1024
        assert policy.max_uploads_per_window == 5
        assert settings.monitoring.alert_threshold == 3
        assert settings.monitoring.cooldown_seconds == 3600.0
        assert settings.pathway_for_format("XLSX") == "spreadsheet"
        assert settings.pathway_for_format("png") is None

    def test_from_dict_merges_over_defaults(self):
        settings = SecuritySettings.from_dict({
            "pathways": {"spreadsheet": {"max_uploads_per_window": 10}},
            "monitoring": {"alert_threshold": 5},
        })
        policy = settings.policy_for("spreadsheet")
        assert policy.max_uploads_per_window == 10
        assert policy.formats == ("xls", "xlsx")
        assert settings.monitoring.alert_threshold == 5
        assert settings.monitoring.cooldown_seconds == 3600.0

    def test_from_dict_adds_pathway(self):
        settings = SecuritySettings.from_dict({
            "pathways": {"document": {"formats": ["DOC", "docx"], "max_file_size": 1024}},
        })
        assert settings.pathway_for_format("doc") == "document"
        assert settings.policy_for("spreadsheet") is not None

    def test_empty_dict_is_defaults(self):
        assert SecuritySettings.from_dict({}) is DEFAULT_SECURITY_SETTINGS

    @pytest.mark.parametrize("monitoring", [
        {"alert_threshold": 0},
        {"incident_capacity": 0},
        {"cooldown_seconds": 0},
    ])
    def test_invalid_monitoring_rejected(self, monitoring):
        with pytest.raises(ValueError):
            SecuritySettings.from_dict({"monitoring": monitoring})

    def test_invalid_upload_limit_rejected(self):
        with pytest.raises(ValueError, match="max_uploads_per_window"):
            SecuritySettings.from_dict({"pathways": {"spreadsheet": {"max_uploads_per_window": 0}}})

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "security.json"
        original = SecuritySettings(monitoring=MonitoringPolicy(alert_threshold=7))
        save_security_settings(original, str(path))
        loaded = load_security_settings(str(path))
        assert loaded.monitoring.alert_threshold == 7
        assert loaded.to_dict() == original.to_dict()

    def test_load_from_env(self, tmp_path, monkeypatch):
        path = tmp_path / "security.json"
        path.write_text(json.dumps({"monitoring": {"enabled": False}}))
        monkeypatch.setenv(SECURITY_CONFIG_ENV, str(path))
        assert load_security_settings().monitoring.enabled is False

    def test_no_config_is_defaults(self, monkeypatch):
        monkeypatch.delenv(SECURITY_CONFIG_ENV, raising=False)
        assert load_security_settings() is DEFAULT_SECURITY_SETTINGS

    def test_missing_file_is_defaults(self, tmp_path, caplog):
        with caplog.at_level("WARNING"):
            settings = load_security_settings(str(tmp_path / "absent.json"))
        assert settings is DEFAULT_SECURITY_SETTINGS
        assert "not found" in caplog.text

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "security.json"
        path.write_text("{not json")
        with pytest.raises(ValueError, match="Invalid security config"):
            load_security_settings(str(path))


class TestConverterSettings:

    def test_defaults(self):
        settings = ConverterSettings()
        assert settings.retention_seconds == 86400
        assert settings.round_trip_tolerance == 0.02
        assert settings.resolved_db_path.endswith("convertcore.db")

    def test_explicit_db_path(self):
        assert ConverterSettings(db_path="/var/lib/cc.db").resolved_db_path == "/var/lib/cc.db"

    def test_from_env(self, tmp_path):
        settings = ConverterSettings.from_env({
            "CONVERTCORE_WORK_DIR": str(tmp_path),
            "CONVERTCORE_RETENTION_SECONDS": "60",
            "CONVERTCORE_ROUND_TRIP_TOLERANCE": "0.1",
        })
        assert settings.work_dir == str(tmp_path)
        assert settings.retention_seconds == 60
        assert settings.round_trip_tolerance == 0.1
        assert settings.resolved_db_path == str(tmp_path / "convertcore.db")

    def test_from_env_bad_number(self):
        with pytest.raises(ValueError):
            ConverterSettings.from_env({"CONVERTCORE_RETENTION_SECONDS": "a day"})

    @pytest.mark.parametrize("kwargs", [
        {"retention_seconds": 0},
        {"round_trip_tolerance": -0.1},
        {"round_trip_tolerance": 1.0},
    ])
    def test_validation(self, kwargs):
        with pytest.raises(ValueError):
            ConverterSettings(**kwargs)

    def test_dict_round_trip(self):
        settings = ConverterSettings(work_dir="/data", retention_seconds=120)
        assert ConverterSettings.from_dict(settings.to_dict()) == settings
