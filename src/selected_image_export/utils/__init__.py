"""工具模組。"""

from . import file_ops, image_utils, time_utils
from .error_handler import ErrorHandler

__all__ = ["ErrorHandler", "file_ops", "image_utils", "time_utils"]
