"""設定檔驗證邏輯。"""

from __future__ import annotations

from typing import Any, Iterable

from ..models.error_record import ExportError

JSON_NAME_KEYS = (
    "images",
    "herisId",
    "idName",
    "title",
    "altText",
    "symbolImage",
    "mediaType",
    "creationDate",
    "copyRightBDA",
    "fileInformation",
    "publishable",
    "migratedInformation",
)
TOKEN_FIELD_KEYS = ("symbolImage", "copyRightBDA", "publishable")
CREATION_DATE_SOURCES = ("file", "exif")


class ConfigurationError(ExportError):
    """Required settings are missing or invalid."""

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "invalid configuration")


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def validate_config(config: dict[str, Any]) -> list[str]:
    errors: list[str] = []

    def add_error(path: str, message: str) -> None:
        errors.append(f"{path}: {message}")

    export = config.get("export", {})
    for key in ("property_name", "source_folder", "target_folder"):
        if _is_blank(export.get(key)):
            add_error(f"export.{key}", "must be a non-empty string")
    for key in ("manifest_file_name", "mets_file_name", "page_number_type"):
        value = export.get(key)
        if _is_blank(value):
            add_error(f"export.{key}", "must be a non-empty string")
        elif key.endswith("_file_name") and ("/" in value or "\\" in value):
            add_error(f"export.{key}", "must be a bare file name")
    for key in ("create_subfolders", "export_json", "export_mets", "use_scp"):
        if not isinstance(export.get(key, False), bool):
            add_error(f"export.{key}", "must be a boolean")

    scp = config.get("scp", {})
    if export.get("use_scp") is True:
        for key in ("login", "password", "hostname"):
            if _is_blank(scp.get(key)):
                add_error(f"scp.{key}", "should not be blank")
    port = scp.get("port", 22)
    if not isinstance(port, int) or isinstance(port, bool) or not (0 < port < 65536):
        add_error("scp.port", "must be an integer between 1 and 65535")
    timeout_sec = scp.get("timeout_sec", 30.0)
    if not isinstance(timeout_sec, (int, float)) or timeout_sec <= 0:
        add_error("scp.timeout_sec", "must be a positive number")
    chunk_size_kb = scp.get("chunk_size_kb", 16)
    if not isinstance(chunk_size_kb, int) or chunk_size_kb <= 0:
        add_error("scp.chunk_size_kb", "must be a positive integer")
    known_hosts = scp.get("known_hosts", "")
    if known_hosts is not None and not isinstance(known_hosts, str):
        add_error("scp.known_hosts", "must be a string")

    json_format = config.get("json_format", {})
    for key in JSON_NAME_KEYS:
        value = json_format.get(key, "")
        if value is not None and not isinstance(value, str):
            add_error(f"json_format.{key}", "must be a string")
    for key in ("true_token", "false_token"):
        if _is_blank(json_format.get(key, "x")):
            add_error(f"json_format.{key}", "must be a non-empty string")
    token_fields = json_format.get("token_fields", [])
    if not isinstance(token_fields, list) or any(item not in TOKEN_FIELD_KEYS for item in token_fields):
        add_error("json_format.token_fields", f"must be a list drawn from {', '.join(TOKEN_FIELD_KEYS)}")

    manifest = config.get("manifest", {})
    collection_id = manifest.get("collection_id", 0)
    if not isinstance(collection_id, int) or isinstance(collection_id, bool):
        add_error("manifest.collection_id", "must be an integer")
    if manifest.get("creation_date_source", "file") not in CREATION_DATE_SOURCES:
        add_error("manifest.creation_date_source", "must be file or exif")
    for key in ("symbol_image", "copyright_flag", "publishable"):
        if not isinstance(manifest.get(key, True), bool):
            add_error(f"manifest.{key}", "must be a boolean")

    return errors
