"""Manifest 記錄模型。"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class ImageRecord:
    id: str
    title: str
    alt_text: str
    is_symbol: bool
    media_type: str
    creation_date: str
    is_copyright_flag: bool
    file_info: str
    is_publishable: bool
    migrated_info: Optional[str] = None


@dataclass
class Manifest:
    collection_id: int
    images: List[Optional[ImageRecord]] = field(default_factory=list)

    @property
    def holes(self) -> List[int]:
        return [index for index, record in enumerate(self.images) if record is None]
