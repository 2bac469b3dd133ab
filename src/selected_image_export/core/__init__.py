"""核心匯出模組。"""

from .exporter import ExportOrchestrator, ExportResult, build_transport
from .manifest import ManifestBuilder, ManifestFormat, ManifestWriteError, RecordDefaults
from .mets import MetsError, read_mets, write_mets
from .process import DirectoryProcess, ProcessContext
from .pruner import PruneResult, StructuralInconsistencyError, StructurePruner
from .resolver import ImageResolver, ResolutionResult
from .scp_transport import ScpProtocolError, ScpSession, ScpTransport, check_ack, read_ack
from .selection import DecodeError, decode_selection, encode_selection
from .transport import DeliveryResult, LocalTransport, TransferError, Transport

__all__ = [
    "DecodeError",
    "DeliveryResult",
    "DirectoryProcess",
    "ExportOrchestrator",
    "ExportResult",
    "ImageResolver",
    "LocalTransport",
    "ManifestBuilder",
    "ManifestFormat",
    "ManifestWriteError",
    "MetsError",
    "ProcessContext",
    "PruneResult",
    "RecordDefaults",
    "ResolutionResult",
    "ScpProtocolError",
    "ScpSession",
    "ScpTransport",
    "StructuralInconsistencyError",
    "StructurePruner",
    "TransferError",
    "Transport",
    "build_transport",
    "check_ack",
    "decode_selection",
    "encode_selection",
    "read_ack",
    "read_mets",
    "write_mets",
]
