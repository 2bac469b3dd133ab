"""Prune a structural document down to the selected images."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping

from ..models import ContentFile, PhysicalNode, StructuralDocument
from ..models.error_record import ExportError
from ..utils.logger import get_logger


class StructuralInconsistencyError(ExportError):
    """A physical node lacks its single page-order metadata value."""


@dataclass
class PruneResult:
    kept_pages: List[PhysicalNode] = field(default_factory=list)
    removed_pages: List[PhysicalNode] = field(default_factory=list)
    removed_references: int = 0
    removed_files: List[ContentFile] = field(default_factory=list)


class StructurePruner:
    """Drops unselected pages and everything that only pointed at them.

    Removal decisions are collected before the document is touched, so a
    document missing page-order metadata is rejected without being half
    rewritten.
    """

    def __init__(self, page_number_type: str = "physPageNumber", logger=None) -> None:
        self.page_number_type = page_number_type
        self.logger = logger or get_logger(self.__class__.__name__)

    def prune(self, document: StructuralDocument, selection: Mapping[str, int]) -> PruneResult:
        result = PruneResult()
        for page in document.pages:
            if page.image_name in selection:
                result.kept_pages.append(page)
            else:
                result.removed_pages.append(page)

        for page in result.kept_pages:
            values = page.get_metadata(self.page_number_type)
            if len(values) != 1:
                raise StructuralInconsistencyError(
                    f"page {page.id} ({page.image_name}) has {len(values)} "
                    f"'{self.page_number_type}' values, expected exactly one"
                )

        for page in result.removed_pages:
            for reference in list(page.from_references):
                reference.source.remove_reference_to(page)
                page.remove_reference_from(reference.source)
                result.removed_references += 1

        for page in result.kept_pages:
            page.metadata[self.page_number_type] = [str(selection[page.image_name])]

        removed_ids = {id(page) for page in result.removed_pages}
        document.physical_root.children = [
            page for page in document.physical_root.children if id(page) not in removed_ids
        ]

        retained_files: list[ContentFile] = []
        for content_file in document.files:
            if content_file.referenced and all(
                node.image_name not in selection for node in content_file.referenced
            ):
                result.removed_files.append(content_file)
                continue
            content_file.referenced = [
                node for node in content_file.referenced if id(node) not in removed_ids
            ]
            retained_files.append(content_file)
        document.files = retained_files

        self.logger.info(
            f"結構文件修剪完成：保留 {len(result.kept_pages)} 頁，移除 {len(result.removed_pages)} 頁、"
            f"{result.removed_references} 個參照、{len(result.removed_files)} 個檔案"
        )
        return result
