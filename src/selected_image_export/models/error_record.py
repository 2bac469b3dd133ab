"""匯出過程中的錯誤記錄。"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ExportError(Exception):
    """Base class of every error raised by an export run."""


class ErrorLevel(str, Enum):
    INFO = "I"
    RECOVERABLE = "W"
    FATAL = "E"

    @property
    def log_level(self) -> int:
        return {
            ErrorLevel.INFO: logging.INFO,
            ErrorLevel.RECOVERABLE: logging.WARNING,
            ErrorLevel.FATAL: logging.ERROR,
        }[self]

    @property
    def journal_type(self) -> str:
        return {
            ErrorLevel.INFO: "info",
            ErrorLevel.RECOVERABLE: "warn",
            ErrorLevel.FATAL: "error",
        }[self]


@dataclass(frozen=True)
class ProcessError:
    """一筆給操作人員看的訊息；同時寫入 log 與流程日誌。"""

    code: str
    level: ErrorLevel
    message: str
    file_path: Optional[str] = None

    @property
    def is_fatal(self) -> bool:
        return self.level == ErrorLevel.FATAL

    def to_dict(self) -> dict[str, object]:
        return {
            "code": self.code,
            "level": self.level.value,
            "type": self.level.journal_type,
            "message": self.message,
            "file_path": self.file_path,
        }
