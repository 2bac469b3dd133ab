"""Access to the workflow process that owns the images being exported."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..models import ProcessError, StructuralDocument
from ..utils.logger import get_logger
from . import mets


class ProcessContext(ABC):
    """The narrow slice of a workflow process an export run needs."""

    process_id: int
    title: str
    project_name: str

    @abstractmethod
    def get_property(self, name: str) -> Optional[str]:
        ...

    @abstractmethod
    def get_image_folder(self, alias: str) -> Optional[Path]:
        ...

    @property
    @abstractmethod
    def data_directory(self) -> Path:
        ...

    @abstractmethod
    def read_structure(self, page_number_type: str = "physPageNumber") -> StructuralDocument:
        ...

    @abstractmethod
    def write_structure(
        self, document: StructuralDocument, path: Path, page_number_type: str = "physPageNumber"
    ) -> Path:
        ...

    def replace_variables(self, text: str) -> str:
        replacements = {
            "{processid}": str(self.process_id),
            "{processtitle}": self.title,
            "{projectname}": self.project_name,
        }
        for placeholder, value in replacements.items():
            text = text.replace(placeholder, value)
        return text

    def add_journal_entry(self, error: ProcessError) -> None:
        pass


class DirectoryProcess(ProcessContext):
    """Process stored as a folder.

    Layout::

        <root>/meta.xml                 METS document
        <root>/properties.json          {"name": "value"}
        <root>/images/<title>_<alias>/  image folders (or images/<alias>/)
        <root>/journal.jsonl            appended journal records
    """

    METADATA_FILE = "meta.xml"
    PROPERTIES_FILE = "properties.json"
    JOURNAL_FILE = "journal.jsonl"

    def __init__(
        self,
        root: Path,
        *,
        process_id: int,
        title: str,
        project_name: str = "*",
        properties: Optional[dict[str, str]] = None,
        logger=None,
    ) -> None:
        self.root = root
        self.process_id = process_id
        self.title = title
        self.project_name = project_name
        self.logger = logger or get_logger(self.__class__.__name__)
        self._properties = properties

    @property
    def properties(self) -> dict[str, str]:
        if self._properties is None:
            path = self.root / self.PROPERTIES_FILE
            if path.exists():
                with path.open("r", encoding="utf-8") as handle:
                    self._properties = {str(key): str(value) for key, value in json.load(handle).items()}
            else:
                self._properties = {}
        return self._properties

    def get_property(self, name: str) -> Optional[str]:
        return self.properties.get(name)

    def get_image_folder(self, alias: str) -> Optional[Path]:
        images = self.root / "images"
        for candidate in (images / f"{self.title}_{alias}", images / alias):
            if candidate.is_dir():
                return candidate
        return None

    @property
    def data_directory(self) -> Path:
        return self.root

    def read_structure(self, page_number_type: str = "physPageNumber") -> StructuralDocument:
        return mets.read_mets(self.root / self.METADATA_FILE, page_number_type, logger=self.logger)

    def write_structure(
        self, document: StructuralDocument, path: Path, page_number_type: str = "physPageNumber"
    ) -> Path:
        return mets.write_mets(document, path, page_number_type)

    def add_journal_entry(self, error: ProcessError) -> None:
        payload = error.to_dict()
        payload["process_id"] = self.process_id
        payload["created_at"] = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        try:
            with (self.root / self.JOURNAL_FILE).open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(payload, ensure_ascii=False) + "\n")
        except OSError as exc:
            self.logger.warning(f"無法寫入流程日誌: {self.root / self.JOURNAL_FILE} ({exc})")

    def read_journal(self) -> list[dict[str, object]]:
        path = self.root / self.JOURNAL_FILE
        if not path.exists():
            return []
        with path.open("r", encoding="utf-8") as handle:
            return [json.loads(line) for line in handle if line.strip()]
