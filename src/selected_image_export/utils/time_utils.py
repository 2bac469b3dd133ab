"""時間戳處理工具。"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


def format_exif_date(value: str) -> Optional[str]:
    try:
        parsed = datetime.strptime(value.strip().rstrip("\x00"), "%Y:%m:%d %H:%M:%S")
        return parsed.strftime("%Y-%m-%d")
    except ValueError:
        return None


def file_creation_timestamp(path: Path) -> float:
    """建立時間；檔案系統沒有提供時退回最後修改時間。"""
    stat = os.stat(path)
    birth_time = getattr(stat, "st_birthtime", None)
    if birth_time:
        return float(birth_time)
    return float(stat.st_mtime)


def file_creation_time(path: Path) -> str:
    """ISO-8601 UTC，例如 ``2022-11-01T09:19:56Z``。"""
    dt = datetime.fromtimestamp(file_creation_timestamp(path), tz=timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%SZ")


def file_creation_date(path: Path) -> str:
    creation_time = file_creation_time(path)
    return creation_time[: creation_time.index("T")]
