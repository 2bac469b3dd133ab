"""錯誤收集與報告工具。

每一筆訊息同時寫入 logger 與流程日誌（journal），再累積成執行結果的問題清單。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from ..models.error_record import ErrorLevel, ProcessError
from .logger import get_logger

MESSAGE_PREFIX = "Selected Images Export: "


@dataclass
class ErrorHandler:
    """集中管理錯誤與警告。"""

    errors: List[ProcessError] = field(default_factory=list)
    logger: Optional[logging.Logger] = None
    journal: Optional[Callable[[ProcessError], None]] = None

    def __post_init__(self) -> None:
        if self.logger is None:
            self.logger = get_logger("ErrorHandler")

    def add(self, error: ProcessError) -> None:
        self.errors.append(error)
        self.logger.log(error.level.log_level, MESSAGE_PREFIX + error.message)
        if self.journal is not None:
            self.journal(error)

    def add_info(self, code: str, message: str, file_path: Optional[str] = None) -> None:
        self.add(ProcessError(code=code, level=ErrorLevel.INFO, message=message, file_path=file_path))

    def add_warning(self, code: str, message: str, file_path: Optional[str] = None) -> None:
        self.add(ProcessError(code=code, level=ErrorLevel.RECOVERABLE, message=message, file_path=file_path))

    def add_fatal(self, code: str, message: str, file_path: Optional[str] = None) -> None:
        self.add(ProcessError(code=code, level=ErrorLevel.FATAL, message=message, file_path=file_path))

    def get_by_level(self, level: ErrorLevel) -> List[ProcessError]:
        return [error for error in self.errors if error.level == level]

    @property
    def problems(self) -> List[str]:
        return [error.message for error in self.errors]

    @property
    def has_fatal(self) -> bool:
        return any(error.is_fatal for error in self.errors)
