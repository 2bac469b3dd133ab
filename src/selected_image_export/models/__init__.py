"""資料模型模組。"""

from .error_record import ErrorLevel, ExportError, ProcessError
from .image_record import ImageRecord, Manifest
from .selection import ResolvedImage
from .structure import ContentFile, LogicalNode, PhysicalNode, Reference, StructuralDocument

__all__ = [
    "ContentFile",
    "ErrorLevel",
    "ExportError",
    "ImageRecord",
    "LogicalNode",
    "Manifest",
    "PhysicalNode",
    "ProcessError",
    "Reference",
    "ResolvedImage",
    "StructuralDocument",
]
