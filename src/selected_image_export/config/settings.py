"""Typed views over a project's merged configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

from .schema import ConfigurationError, validate_config


def default_known_hosts() -> str:
    return str(Path.home() / ".ssh" / "known_hosts")


@dataclass(frozen=True)
class ScpSettings:
    hostname: str
    login: str
    password: str
    known_hosts: str
    port: int = 22
    timeout_sec: float = 30.0
    chunk_size_kb: int = 16

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "ScpSettings":
        scp = config.get("scp", {})
        known_hosts = (scp.get("known_hosts") or "").strip() or default_known_hosts()
        return cls(
            hostname=str(scp.get("hostname", "")).strip(),
            login=str(scp.get("login", "")),
            password=str(scp.get("password", "")),
            known_hosts=known_hosts,
            port=int(scp.get("port", 22)),
            timeout_sec=float(scp.get("timeout_sec", 30.0)),
            chunk_size_kb=int(scp.get("chunk_size_kb", 16)),
        )


@dataclass(frozen=True)
class ExportSettings:
    property_name: str
    source_folder: str
    target_folder: str
    create_subfolders: bool = False
    export_json: bool = False
    export_mets: bool = False
    use_scp: bool = False
    page_number_type: str = "physPageNumber"
    manifest_file_name: str = "selected.json"
    mets_file_name: str = "mets.xml"
    scp: Optional[ScpSettings] = None
    json_format: dict[str, Any] = field(default_factory=dict)
    manifest: dict[str, Any] = field(default_factory=dict)

    @property
    def target_folder_path(self) -> str:
        if self.create_subfolders:
            return self.target_folder.rstrip("/") + "/" + self.source_folder
        return self.target_folder

    @classmethod
    def from_config(
        cls,
        config: dict[str, Any],
        replace: Optional[Callable[[str], str]] = None,
    ) -> "ExportSettings":
        """Validate a merged project configuration and freeze it.

        ``replace`` resolves process variables in the property name and the
        target folder before validation.
        """
        replace = replace or (lambda value: value)
        export = dict(config.get("export", {}))
        for key in ("property_name", "target_folder"):
            value = export.get(key)
            if isinstance(value, str):
                export[key] = replace(value.strip())
        resolved = dict(config)
        resolved["export"] = export

        errors = validate_config(resolved)
        if errors:
            raise ConfigurationError(errors)

        use_scp = bool(export.get("use_scp", False))
        return cls(
            property_name=export["property_name"].strip(),
            source_folder=export["source_folder"].strip(),
            target_folder=export["target_folder"].strip(),
            create_subfolders=bool(export.get("create_subfolders", False)),
            export_json=bool(export.get("export_json", False)),
            export_mets=bool(export.get("export_mets", False)),
            use_scp=use_scp,
            page_number_type=export.get("page_number_type", "physPageNumber"),
            manifest_file_name=export.get("manifest_file_name", "selected.json"),
            mets_file_name=export.get("mets_file_name", "mets.xml"),
            scp=ScpSettings.from_config(resolved) if use_scp else None,
            json_format=dict(resolved.get("json_format", {})),
            manifest=dict(resolved.get("manifest", {})),
        )
