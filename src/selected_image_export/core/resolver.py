"""Cross-reference a selection against the source folder listing."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Mapping, Optional

from ..models import ResolvedImage
from ..utils.logger import get_logger


@dataclass
class ResolutionResult:
    images: List[ResolvedImage] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)

    @property
    def nothing_selected(self) -> bool:
        return not self.images

    def in_selection_order(self) -> List[ResolvedImage]:
        return sorted(self.images, key=lambda image: (image.order, image.discovery_index))


class ImageResolver:
    def __init__(self, logger=None) -> None:
        self.logger = logger or get_logger(self.__class__.__name__)

    def list_folder(self, folder: Path) -> list[str]:
        names = []
        with os.scandir(folder) as entries:
            for entry in entries:
                if entry.is_file():
                    names.append(entry.name)
        return sorted(names)

    def resolve(self, selection: Mapping[str, int], folder: Path) -> Optional[ResolutionResult]:
        """回傳 None 表示沒有可處理的內容（未選取或來源資料夾不存在）。"""
        if not selection:
            self.logger.info("沒有選取任何影像")
            return None
        if not folder.is_dir():
            self.logger.info(f"來源資料夾不存在: {folder}")
            return None
        return self.resolve_listing(selection, folder, self.list_folder(folder))

    def resolve_listing(
        self,
        selection: Mapping[str, int],
        folder: Path,
        names: Iterable[str],
    ) -> ResolutionResult:
        result = ResolutionResult()
        found: set[str] = set()
        for name in names:
            if name not in selection:
                continue
            result.images.append(
                ResolvedImage(
                    name=name,
                    source_path=folder / name,
                    discovery_index=len(result.images),
                    order=selection[name],
                )
            )
            found.add(name)

        result.missing = [name for name in selection if name not in found]
        for name in result.missing:
            self.logger.warning(f"選取的影像不在來源資料夾中: {name}")
        self.logger.info(f"解析完成：{len(result.images)}/{len(selection)} 個選取影像")
        return result
