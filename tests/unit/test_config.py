"""Unit tests for configuration loading."""

import json
from pathlib import Path

import pytest

from batchmove.config import (
    ConnectionType,
    SendWhen,
    Settings,
    load_settings,
    resolve_env_reference,
)
from batchmove.errors import ConfigurationError


class TestResolveEnvReference:
    """Tests for resolve_env_reference."""

    def test_plain_value_unchanged(self) -> None:
        assert resolve_env_reference("smtp.contoso.com", {}) == "smtp.contoso.com"

    def test_reference_resolved(self) -> None:
        assert resolve_env_reference("ENV:SMTP_PASSWORD", {"SMTP_PASSWORD": "s3cret"}) == "s3cret"

    def test_missing_variable(self) -> None:
        with pytest.raises(ConfigurationError, match="'SMTP_PASSWORD' is not set"):
            resolve_env_reference("ENV:SMTP_PASSWORD", {})

    def test_empty_reference(self) -> None:
        with pytest.raises(ConfigurationError, match="Empty environment variable reference"):
            resolve_env_reference("ENV:", {})

    def test_reads_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SAMPLE_VALUE", "from-env")
        assert resolve_env_reference("ENV:SAMPLE_VALUE") == "from-env"


class TestSettings:
    """Tests for the Settings model."""

    def test_camel_case_document(self, settings: Settings, tmp_path: Path) -> None:
        assert settings.source.folder == tmp_path / "in"
        assert settings.destination.file_name_prefix == "AnalysesJour"
        assert settings.settings.script_name == "Move analyses"
        assert settings.settings.save_log_files.where.file_extensions == ["json", "csv"]
        assert settings.settings.save_log_files.what.only_action_errors is True
        assert settings.settings.send_mail.when == SendWhen.ON_ERROR
        assert settings.settings.send_mail.from_address == "batch@contoso.com"

    def test_defaults(self, tmp_path: Path) -> None:
        settings = Settings(
            source={"folder": str(tmp_path), "matchPattern": ".*"},
            destination={"folder": str(tmp_path)},
        )
        assert settings.destination.year_subfolder is True
        assert settings.destination.file_extension is None
        assert settings.settings.save_log_files.delete_logs_after_days == 30
        assert settings.settings.save_in_event_log.save is False
        assert settings.settings.send_mail.smtp.connection_type == ConnectionType.START_TLS_WHEN_AVAILABLE

    def test_invalid_regex_rejected(self, config_data: dict) -> None:
        config_data["source"]["matchPattern"] = "Analyse_("
        with pytest.raises(ValueError, match="Invalid regex"):
            Settings(**config_data)

    def test_unknown_log_format_rejected(self, config_data: dict) -> None:
        config_data["settings"]["saveLogFiles"]["where"]["fileExtensions"] = [".html"]
        with pytest.raises(ValueError, match="Unsupported log file extension"):
            Settings(**config_data)

    def test_log_folder_required_with_formats(self, config_data: dict) -> None:
        del config_data["settings"]["saveLogFiles"]["where"]["folder"]
        with pytest.raises(ValueError, match="folder is required"):
            Settings(**config_data)

    def test_unknown_send_mode_rejected(self, config_data: dict) -> None:
        config_data["settings"]["sendMail"]["when"] = "Sometimes"
        with pytest.raises(ValueError):
            Settings(**config_data)

    def test_unknown_key_rejected(self, config_data: dict) -> None:
        config_data["destination"]["overwrite"] = True
        with pytest.raises(ValueError):
            Settings(**config_data)

    def test_single_recipient_listified(self, config_data: dict) -> None:
        config_data["settings"]["sendMail"]["to"] = "ops@contoso.com"
        settings = Settings(**config_data)
        assert settings.settings.send_mail.to == ["ops@contoso.com"]

    def test_smtp_password_from_environment(
        self, config_data: dict, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SAMPLE_SMTP_SECRET", "s3cret")
        config_data["settings"]["sendMail"]["smtp"]["userName"] = "batch"
        config_data["settings"]["sendMail"]["smtp"]["password"] = "ENV:SAMPLE_SMTP_SECRET"

        smtp = Settings(**config_data).settings.send_mail.smtp
        assert smtp.password == "s3cret"
        assert "s3cret" not in repr(smtp)

    def test_assembly_path_ignored(self, config_data: dict) -> None:
        config_data["settings"]["sendMail"]["assemblyPath"] = {"MailKit": "C:\\lib\\MailKit.dll"}
        Settings(**config_data)


class TestLoadSettings:
    """Tests for load_settings."""

    def test_loads_json_file(self, config_data: dict, tmp_path: Path) -> None:
        path = tmp_path / "batchmove.json"
        path.write_text(json.dumps(config_data), encoding="utf-8")

        settings = load_settings(path)
        assert settings.destination.folder == tmp_path / "out"

    def test_accepts_byte_order_mark(self, config_data: dict, tmp_path: Path) -> None:
        path = tmp_path / "batchmove.json"
        path.write_text(json.dumps(config_data), encoding="utf-8-sig")

        assert load_settings(path).source.match_pattern == r"^Analyse_\d{8}\.xlsx$"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            load_settings(tmp_path / "missing.json")

    def test_malformed_json(self, tmp_path: Path) -> None:
        path = tmp_path / "batchmove.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            load_settings(path)

    def test_non_object_root(self, tmp_path: Path) -> None:
        path = tmp_path / "batchmove.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="must be an object"):
            load_settings(path)

    def test_validation_error_wrapped(self, config_data: dict, tmp_path: Path) -> None:
        del config_data["source"]
        path = tmp_path / "batchmove.json"
        path.write_text(json.dumps(config_data), encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_settings(path)

    def test_unset_env_reference_wrapped(self, config_data: dict, tmp_path: Path) -> None:
        config_data["settings"]["sendMail"]["smtp"]["password"] = "ENV:SAMPLE_UNSET_VARIABLE"
        path = tmp_path / "batchmove.json"
        path.write_text(json.dumps(config_data), encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_settings(path)
