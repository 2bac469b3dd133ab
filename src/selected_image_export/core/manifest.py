"""Manifest builder and writer."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from ..models import ImageRecord, Manifest, ResolvedImage
from ..models.error_record import ExportError
from ..utils import file_ops, image_utils, time_utils
from ..utils.logger import get_logger

# Configuration key -> (record attribute, default JSON field name).
DEFAULT_FIELD_NAMES: dict[str, tuple[str, str]] = {
    "idName": ("id", "Id"),
    "title": ("title", "Titel"),
    "altText": ("alt_text", "alt_text"),
    "symbolImage": ("is_symbol", "SymbolBild"),
    "mediaType": ("media_type", "media_type"),
    "creationDate": ("creation_date", "Aufnahmedatum"),
    "copyRightBDA": ("is_copyright_flag", "Copyright BDA"),
    "fileInformation": ("file_info", "Dateiinformation"),
    "publishable": ("is_publishable", "publikationsfähig"),
    "migratedInformation": ("migrated_info", "Migrierte Information"),
}
DEFAULT_IMAGES_FIELD = "Bilder"
DEFAULT_COLLECTION_ID_FIELD = "HERIS-ID"


class ManifestWriteError(ExportError):
    """The manifest file could not be produced."""


def _name_or_default(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


@dataclass(frozen=True)
class ManifestFormat:
    """Output field names and flag rendering, fixed for one run."""

    images_field: str = DEFAULT_IMAGES_FIELD
    collection_id_field: str = DEFAULT_COLLECTION_ID_FIELD
    field_names: Mapping[str, str] = field(
        default_factory=lambda: {key: name for key, (_, name) in DEFAULT_FIELD_NAMES.items()}
    )
    token_fields: frozenset = frozenset({"copyRightBDA", "publishable"})
    true_token: str = "ja"
    false_token: str = "nein"

    @classmethod
    def from_config(cls, json_format: Optional[Mapping[str, Any]] = None) -> "ManifestFormat":
        json_format = json_format or {}
        field_names = {
            key: _name_or_default(json_format.get(key), default)
            for key, (_, default) in DEFAULT_FIELD_NAMES.items()
        }
        token_fields = json_format.get("token_fields")
        return cls(
            images_field=_name_or_default(json_format.get("images"), DEFAULT_IMAGES_FIELD),
            collection_id_field=_name_or_default(json_format.get("herisId"), DEFAULT_COLLECTION_ID_FIELD),
            field_names=field_names,
            token_fields=frozenset(token_fields if token_fields is not None else cls.token_fields),
            true_token=_name_or_default(json_format.get("true_token"), "ja"),
            false_token=_name_or_default(json_format.get("false_token"), "nein"),
        )

    def render_value(self, key: str, value: Any) -> Any:
        if isinstance(value, bool) and key in self.token_fields:
            return self.true_token if value else self.false_token
        return value


@dataclass(frozen=True)
class RecordDefaults:
    is_symbol: bool = True
    is_copyright_flag: bool = True
    is_publishable: bool = True
    creation_date_source: str = "file"

    @classmethod
    def from_config(cls, manifest: Optional[Mapping[str, Any]] = None) -> "RecordDefaults":
        manifest = manifest or {}
        return cls(
            is_symbol=bool(manifest.get("symbol_image", True)),
            is_copyright_flag=bool(manifest.get("copyright_flag", True)),
            is_publishable=bool(manifest.get("publishable", True)),
            creation_date_source=str(manifest.get("creation_date_source", "file")),
        )


class ManifestBuilder:
    def __init__(
        self,
        manifest_format: Optional[ManifestFormat] = None,
        defaults: Optional[RecordDefaults] = None,
        logger=None,
    ) -> None:
        self.format = manifest_format or ManifestFormat()
        self.defaults = defaults or RecordDefaults()
        self.logger = logger or get_logger(self.__class__.__name__)

    def build_record(self, image: ResolvedImage) -> ImageRecord:
        return ImageRecord(
            id=image.stem,
            title=image.name,
            alt_text=image.name,
            is_symbol=self.defaults.is_symbol,
            media_type=image_utils.detect_media_type(image.source_path, self.logger),
            creation_date=self._creation_date(image.source_path),
            is_copyright_flag=self.defaults.is_copyright_flag,
            file_info=image.name,
            is_publishable=self.defaults.is_publishable,
            migrated_info=None,
        )

    def build(self, images: Iterable[ResolvedImage], collection_id: int = 0) -> Manifest:
        """Place each record at ``order - 1``; slots nobody claims stay empty."""
        images = list(images)
        size = max((image.order for image in images), default=0)
        manifest = Manifest(collection_id=collection_id, images=[None] * size)
        for image in sorted(images, key=lambda item: (item.order, item.discovery_index)):
            index = image.order - 1
            if manifest.images[index] is not None:
                self.logger.warning(f"順序 {image.order} 已被佔用，略過影像: {image.name}")
                continue
            manifest.images[index] = self.build_record(image)

        if manifest.holes:
            self.logger.warning(f"manifest 有 {len(manifest.holes)} 個空位: {manifest.holes}")
        return manifest

    def record_to_dict(self, record: ImageRecord) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        for key, (attribute, _) in DEFAULT_FIELD_NAMES.items():
            payload[self.format.field_names[key]] = self.format.render_value(key, getattr(record, attribute))
        return payload

    def to_dict(self, manifest: Manifest) -> dict[str, Any]:
        return {
            self.format.images_field: [
                self.record_to_dict(record) if record is not None else None for record in manifest.images
            ],
            self.format.collection_id_field: manifest.collection_id,
        }

    def render(self, manifest: Manifest) -> str:
        return json.dumps(self.to_dict(manifest), ensure_ascii=False, indent=2) + "\n"

    def write(self, manifest: Manifest, path: Path) -> Path:
        result = file_ops.safe_write_text(path, self.render(manifest), logger=self.logger)
        if not result.success:
            raise ManifestWriteError(f"Failed to generate a JSON file at {path}: {result.error_message}")
        self.logger.info(f"manifest 已寫入: {path}")
        return path

    def _creation_date(self, path: Path) -> str:
        if self.defaults.creation_date_source == "exif":
            exif_date = image_utils.exif_capture_date(path, self.logger)
            if exif_date:
                return exif_date
        return time_utils.file_creation_date(path)
