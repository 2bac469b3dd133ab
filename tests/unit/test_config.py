import json
from pathlib import Path

import pytest

from selected_image_export.config import ConfigManager, ConfigurationError, ExportSettings


def _write_config(tmp_path: Path, payload: dict) -> Path:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_config_load_defaults() -> None:
    config = ConfigManager()
    assert config.get("export.source_folder") == "media"
    assert config.get("export.manifest_file_name") == "selected.json"
    assert config.get("export.mets_file_name") == "mets.xml"
    assert config.get("export.page_number_type") == "physPageNumber"
    assert config.get("export.use_scp") is False
    assert config.get("scp.port") == 22
    assert config.get("json_format.true_token") == "ja"
    assert config.get("manifest.collection_id") == 0


def test_config_validation() -> None:
    config = ConfigManager()
    errors = config.validate_config()
    assert "export.property_name: must be a non-empty string" in errors
    assert "export.target_folder: must be a non-empty string" in errors

    config.set("export.property_name", "selected")
    config.set("export.target_folder", "/export")
    assert config.validate_config() == []

    config.set("scp.port", 70000)
    config.set("manifest.creation_date_source", "camera")
    errors = config.validate_config()
    assert any(error.startswith("scp.port") for error in errors)
    assert any(error.startswith("manifest.creation_date_source") for error in errors)


def test_scp_credentials_checked_only_when_enabled() -> None:
    config = ConfigManager()
    config.set("export.property_name", "selected")
    config.set("export.target_folder", "/export")
    assert config.validate_config() == []

    config.set("export.use_scp", True)
    errors = config.validate_config()
    assert "scp.login: should not be blank" in errors
    assert "scp.password: should not be blank" in errors
    assert "scp.hostname: should not be blank" in errors


def test_project_override(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path,
        {
            "export": {"property_name": "selected", "target_folder": "/export"},
            "projects": {
                "*": {"export": {"export_json": True}},
                "Archive": {
                    "export": {"target_folder": "/archive/{processtitle}", "export_mets": True},
                    "json_format": {"idName": "Kennung"},
                },
            },
        },
    )
    config = ConfigManager(path)

    archive = config.for_project("Archive")
    assert archive["export"]["target_folder"] == "/archive/{processtitle}"
    assert archive["export"]["property_name"] == "selected"
    assert archive["export"]["export_mets"] is True
    assert archive["export"]["export_json"] is False
    assert archive["json_format"]["idName"] == "Kennung"
    assert archive["json_format"]["true_token"] == "ja"
    assert "projects" not in archive

    fallback = config.for_project("Unknown")
    assert fallback["export"]["export_json"] is True
    assert fallback["export"]["target_folder"] == "/export"


def test_export_settings_from_config() -> None:
    config = ConfigManager()
    config.set("export.property_name", "selected")
    config.set("export.target_folder", "/export/{processid}/")
    config.set("export.create_subfolders", True)

    settings = ExportSettings.from_config(
        config.for_project("*"),
        lambda value: value.replace("{processid}", "42"),
    )

    assert settings.target_folder == "/export/42/"
    assert settings.target_folder_path == "/export/42/media"
    assert settings.scp is None


def test_export_settings_scp(tmp_path: Path) -> None:
    config = ConfigManager()
    config.set("export.property_name", "selected")
    config.set("export.target_folder", "/remote")
    config.set("export.use_scp", True)
    config.set("scp.hostname", "archive.example.org")
    config.set("scp.login", "export")
    config.set("scp.password", "secret")

    settings = ExportSettings.from_config(config.for_project(None))

    assert settings.scp.hostname == "archive.example.org"
    assert settings.scp.port == 22
    assert settings.scp.known_hosts.endswith("known_hosts")


def test_export_settings_invalid() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        ExportSettings.from_config(ConfigManager().for_project("*"))
    assert "export.property_name: must be a non-empty string" in excinfo.value.errors


def test_save_user_config(tmp_path: Path) -> None:
    config = ConfigManager()
    config.set("export.property_name", "selected")
    path = tmp_path / "saved" / "config.json"
    config.save_user_config(path)

    reloaded = ConfigManager(path)
    assert reloaded.get("export.property_name") == "selected"
