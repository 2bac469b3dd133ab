"""影像資訊讀取工具。"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import piexif
from PIL import Image

from . import time_utils

_EXTENSION_MEDIA_TYPES = {
    ".jpg": "jpeg",
    ".jpeg": "jpeg",
    ".jpe": "jpeg",
    ".tif": "tiff",
    ".tiff": "tiff",
    ".jp2": "jpeg2000",
    ".j2k": "jpeg2000",
}


def media_type_from_extension(path: Path) -> str:
    ext = path.suffix.lower()
    if ext in _EXTENSION_MEDIA_TYPES:
        return _EXTENSION_MEDIA_TYPES[ext]
    return ext.lstrip(".") or "unknown"


def detect_media_type(path: Path, logger=None) -> str:
    """以 Pillow 判斷影像格式（小寫，例如 ``jpeg``），無法辨識時改用副檔名。"""
    try:
        with Image.open(path) as image:
            if image.format:
                return image.format.lower()
    except Exception as exc:
        if logger is not None:
            logger.warning(f"無法辨識影像格式: {path} ({exc})")
    return media_type_from_extension(path)


# 依序嘗試的 EXIF 日期標籤：拍攝、數位化、最後修改。
_EXIF_DATE_TAGS = (
    ("Exif", piexif.ExifIFD.DateTimeOriginal),
    ("Exif", piexif.ExifIFD.DateTimeDigitized),
    ("0th", piexif.ImageIFD.DateTime),
)


def exif_capture_date(path: Path, logger=None) -> Optional[str]:
    """EXIF 中最早可用的日期（``YYYY-MM-DD``）；沒有 EXIF 或格式不符時回傳 None。"""
    try:
        with Image.open(path) as image:
            raw_exif = image.info.get("exif")
        if not raw_exif:
            return None
        exif = piexif.load(raw_exif)
    except Exception as exc:
        if logger is not None:
            logger.warning(f"無法讀取 EXIF: {path} ({exc})")
        return None

    for ifd_name, tag in _EXIF_DATE_TAGS:
        value = exif.get(ifd_name, {}).get(tag)
        if isinstance(value, bytes):
            value = value.decode("ascii", errors="ignore")
        formatted = time_utils.format_exif_date(value) if value else None
        if formatted:
            return formatted
    return None
