"""File delivery to the export target."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List

from ..models import ResolvedImage
from ..models.error_record import ExportError
from ..utils import file_ops
from ..utils.error_handler import ErrorHandler
from ..utils.logger import get_logger


class TransferError(ExportError):
    """A single file or folder could not be delivered."""


@dataclass
class DeliveryResult:
    delivered: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    target_ready: bool = True

    @property
    def success(self) -> bool:
        return not self.failed


class Transport(ABC):
    """Delivery strategy; one instance serves one export run.

    Used as a context manager so that connection-backed transports can hold
    one session for the whole run.
    """

    name = "transport"

    def __init__(self, logger=None) -> None:
        self.logger = logger or get_logger(self.__class__.__name__)

    def __enter__(self) -> "Transport":
        self.open()
        return self

    def __exit__(self, exc_type, exc, traceback) -> None:
        self.close()

    def open(self) -> None:
        pass

    def close(self) -> None:
        pass

    @abstractmethod
    def target_path(self, folder: str, name: str) -> str:
        ...

    @abstractmethod
    def make_dirs(self, folder: str) -> None:
        ...

    @abstractmethod
    def send_file(self, source: Path, target: str) -> None:
        ...

    def deliver(
        self,
        images: Iterable[ResolvedImage],
        folder: str,
        reporter: ErrorHandler,
    ) -> DeliveryResult:
        """Send every image once; a failed file does not stop the others."""
        images = list(images)
        result = DeliveryResult()
        try:
            self.make_dirs(folder)
        except TransferError as exc:
            reporter.add_fatal("E-TARGET-DIR", f"Failed to create the target folder {folder}: {exc}", folder)
            result.target_ready = False
            result.failed = [image.name for image in images]
            return result

        for image in images:
            target = self.target_path(folder, image.name)
            try:
                self.send_file(image.source_path, target)
            except TransferError as exc:
                reporter.add_fatal(
                    "E-TRANSFER",
                    f"Failed to export image '{image.name}' via {self.name}: {exc}",
                    str(image.source_path),
                )
                result.failed.append(image.name)
                continue
            result.delivered.append(image.name)

        self.logger.info(f"傳送完成：成功 {len(result.delivered)}，失敗 {len(result.failed)}")
        return result


class LocalTransport(Transport):
    name = "local copy"

    def target_path(self, folder: str, name: str) -> str:
        return str(Path(folder) / name)

    def make_dirs(self, folder: str) -> None:
        result = file_ops.safe_makedirs(Path(folder), logger=self.logger)
        if not result.success:
            raise TransferError(result.error_message)

    def send_file(self, source: Path, target: str) -> None:
        result = file_ops.safe_copy2(Path(source), Path(target), logger=self.logger)
        if not result.success:
            raise TransferError(result.error_message)
        self.logger.info(f"COPIED: {source} -> {target}")
