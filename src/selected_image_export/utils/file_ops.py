"""安全檔案操作（copy/makedirs）。

操作失敗不會重試：例外被轉成 ``OperationResult`` 交給呼叫端決定如何回報。
"""

from __future__ import annotations

import shutil
import time
from dataclasses import dataclass
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Optional

from .logger import get_logger


@dataclass
class OperationResult:
    success: bool
    error_message: Optional[str] = None
    elapsed_time: float = 0.0
    value: Any = None


def safe_op(
    *,
    exceptions: Optional[tuple[type[BaseException], ...]] = None,
    logger=None,
) -> Callable:
    """包裝檔案操作，將指定例外轉為失敗的 OperationResult。"""

    resolved_exceptions = exceptions if exceptions is not None else (OSError,)
    op_logger = logger or get_logger("FileOps")

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs) -> OperationResult:
            start_time = time.time()
            try:
                value = func(*args, **kwargs)
            except resolved_exceptions as exc:
                op_logger.error("檔案操作失敗：%s", exc)
                return OperationResult(
                    success=False,
                    error_message=str(exc) or exc.__class__.__name__,
                    elapsed_time=time.time() - start_time,
                )
            return OperationResult(
                success=True,
                elapsed_time=time.time() - start_time,
                value=value,
            )

        return wrapper

    return decorator


def safe_copy2(
    src_path: Path,
    dst_path: Path,
    *,
    exceptions: Optional[tuple[type[BaseException], ...]] = None,
    logger=None,
) -> OperationResult:
    """複製檔案並保留 metadata，已存在的目標會被覆寫。"""

    @safe_op(exceptions=exceptions, logger=logger)
    def _copy() -> Path:
        shutil.copy2(src_path, dst_path)
        return dst_path

    return _copy()


def safe_makedirs(
    path: Path,
    *,
    exceptions: Optional[tuple[type[BaseException], ...]] = None,
    logger=None,
) -> OperationResult:
    """遞迴建立資料夾；資料夾已存在視為成功。"""

    @safe_op(exceptions=exceptions, logger=logger)
    def _makedirs() -> Path:
        path.mkdir(parents=True, exist_ok=True)
        return path

    return _makedirs()


def safe_write_text(
    path: Path,
    text: str,
    *,
    exceptions: Optional[tuple[type[BaseException], ...]] = None,
    logger=None,
) -> OperationResult:
    @safe_op(exceptions=exceptions, logger=logger)
    def _write() -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = path.with_name(path.name + ".tmp")
        temp_path.write_text(text, encoding="utf-8")
        temp_path.replace(path)
        return path

    return _write()
