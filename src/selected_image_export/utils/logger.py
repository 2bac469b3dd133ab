"""日誌工具。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = "selected_image_export"


def get_logger(name: str, log_file: Optional[Path] = None) -> logging.Logger:
    """取得元件 logger；handler 只掛在套件根 logger 上一次。"""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        root.setLevel(logging.INFO)

        log_path = log_file or (Path.cwd() / "error.log")
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

        file_handler = logging.FileHandler(log_path, encoding="utf-8", delay=True)
        file_handler.setLevel(logging.WARNING)
        file_handler.setFormatter(formatter)

        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(logging.INFO)
        stream_handler.setFormatter(formatter)

        root.addHandler(file_handler)
        root.addHandler(stream_handler)

    if name == ROOT_LOGGER_NAME:
        return root
    return root.getChild(name)
