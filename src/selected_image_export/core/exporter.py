"""Export run coordinator."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Mapping, Optional

from ..config import ConfigManager, ConfigurationError, ExportSettings
from ..models.error_record import ExportError
from ..utils.error_handler import ErrorHandler
from ..utils.logger import get_logger
from .manifest import ManifestBuilder, ManifestFormat, ManifestWriteError, RecordDefaults
from .process import ProcessContext
from .pruner import StructurePruner
from .resolver import ImageResolver, ResolutionResult
from .scp_transport import ScpTransport
from .selection import DecodeError, decode_selection
from .transport import LocalTransport, TransferError, Transport

TEMP_STRUCTURE_FILE_NAME = "temp.xml"


@dataclass
class ExportResult:
    success: bool
    problems: List[str] = field(default_factory=list)
    delivered: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    manifest_path: Optional[str] = None
    structure_path: Optional[str] = None


def build_transport(settings: ExportSettings, logger=None) -> Transport:
    if settings.use_scp:
        return ScpTransport(settings.scp, logger=logger)
    return LocalTransport(logger=logger)


class ExportOrchestrator:
    """Runs one export: resolve, deliver images, then the optional artifacts.

    Images, manifest and structural document are attempted independently;
    the run succeeds only when every attempted artifact succeeded.
    """

    def __init__(
        self,
        config: ConfigManager,
        logger=None,
        transport_factory: Optional[Callable[[ExportSettings], Transport]] = None,
    ) -> None:
        self.config = config
        self.logger = logger or get_logger(self.__class__.__name__)
        self.transport_factory = transport_factory or (lambda settings: build_transport(settings, self.logger))
        self.resolver = ImageResolver(self.logger)

    def run(self, process: ProcessContext) -> ExportResult:
        self.logger.info(f"開始匯出選取影像：流程 {process.process_id}")
        reporter = ErrorHandler(logger=self.logger, journal=process.add_journal_entry)
        result = ExportResult(success=False)

        try:
            settings = ExportSettings.from_config(
                self.config.for_project(process.project_name),
                process.replace_variables,
            )
        except ConfigurationError as exc:
            for message in exc.errors:
                reporter.add_fatal("E-CONFIG", message)
            return self._finish(process, reporter, result)
        self._log_settings(settings)

        selection = self._load_selection(process, settings, reporter)
        if selection is None:
            return self._finish(process, reporter, result)

        resolution = self._resolve(process, settings, selection, reporter)
        if resolution is None:
            return self._finish(process, reporter, result)

        target_folder = settings.target_folder_path
        success = True
        try:
            with self.transport_factory(settings) as transport:
                delivery = transport.deliver(resolution.images, target_folder, reporter)
                result.delivered = delivery.delivered
                result.failed = delivery.failed
                success = delivery.success
                if not delivery.target_ready:
                    self.logger.error(f"目標資料夾無法建立，略過 manifest 與 METS: {target_folder}")

                if settings.export_json and delivery.target_ready:
                    result.manifest_path = self._export_manifest(
                        process, settings, transport, target_folder, resolution, reporter
                    )
                    success = success and result.manifest_path is not None

                if settings.export_mets and delivery.target_ready:
                    result.structure_path = self._export_structure(
                        process, settings, transport, target_folder, selection, reporter
                    )
                    success = success and result.structure_path is not None
        except TransferError as exc:
            reporter.add_fatal("E-SESSION", str(exc))
            success = False

        result.success = success
        return self._finish(process, reporter, result)

    def _load_selection(
        self,
        process: ProcessContext,
        settings: ExportSettings,
        reporter: ErrorHandler,
    ) -> Optional[dict[str, int]]:
        raw_value = process.get_property(settings.property_name)
        if raw_value is None:
            reporter.add_info(
                "I-NO-PROPERTY",
                "Can not find a proper process property. Please recheck your configuration.",
            )
        else:
            self.logger.debug(f"propertyValue = {raw_value}")

        try:
            selection = decode_selection(raw_value)
        except DecodeError as exc:
            reporter.add_fatal("E-DECODE", f"The selection stored in '{settings.property_name}' is malformed: {exc}")
            return None

        if not selection:
            reporter.add_info("I-NOTHING-SELECTED", "No image is selected, aborting.")
            return None
        return selection

    def _resolve(
        self,
        process: ProcessContext,
        settings: ExportSettings,
        selection: Mapping[str, int],
        reporter: ErrorHandler,
    ) -> Optional[ResolutionResult]:
        folder = process.get_image_folder(settings.source_folder)
        resolution = self.resolver.resolve(selection, folder) if folder is not None else None
        if resolution is None:
            reporter.add_info(
                "I-NO-SOURCE-FOLDER",
                f"The folder configured as '{settings.source_folder}' does not exist yet. Aborting.",
            )
            return None

        for name in resolution.missing:
            reporter.add_warning("W-MISSING-IMAGE", f"Selected image '{name}' was not found in {folder}", name)
        if resolution.nothing_selected:
            reporter.add_info("I-NOTHING-SELECTED", f"None of the selected images exist in {folder}. Aborting.")
            return None
        return resolution

    def _export_manifest(
        self,
        process: ProcessContext,
        settings: ExportSettings,
        transport: Transport,
        target_folder: str,
        resolution: ResolutionResult,
        reporter: ErrorHandler,
    ) -> Optional[str]:
        builder = ManifestBuilder(
            ManifestFormat.from_config(settings.json_format),
            RecordDefaults.from_config(settings.manifest),
            logger=self.logger,
        )
        local_path = process.data_directory / settings.manifest_file_name
        try:
            manifest = builder.build(
                resolution.in_selection_order(),
                collection_id=int(settings.manifest.get("collection_id", 0)),
            )
            builder.write(manifest, local_path)
        except ManifestWriteError as exc:
            reporter.add_fatal("E-MANIFEST", str(exc), str(local_path))
            return None
        except Exception as exc:
            reporter.add_fatal("E-MANIFEST", f"Failed to generate a JSON file: {exc}", str(local_path))
            return None

        return self._send_artifact(transport, local_path, target_folder, settings.manifest_file_name, reporter)

    def _export_structure(
        self,
        process: ProcessContext,
        settings: ExportSettings,
        transport: Transport,
        target_folder: str,
        selection: Mapping[str, int],
        reporter: ErrorHandler,
    ) -> Optional[str]:
        local_path = process.data_directory / TEMP_STRUCTURE_FILE_NAME
        pruner = StructurePruner(settings.page_number_type, logger=self.logger)
        try:
            document = process.read_structure(settings.page_number_type)
            pruner.prune(document, selection)
            process.write_structure(document, local_path, settings.page_number_type)
        except ExportError as exc:
            reporter.add_fatal("E-STRUCTURE", f"Errors happened trying to generate the METS file: {exc}")
            return None

        return self._send_artifact(transport, local_path, target_folder, settings.mets_file_name, reporter)

    def _send_artifact(
        self,
        transport: Transport,
        local_path: Path,
        target_folder: str,
        file_name: str,
        reporter: ErrorHandler,
    ) -> Optional[str]:
        target = transport.target_path(target_folder, file_name)
        try:
            transport.send_file(local_path, target)
        except TransferError as exc:
            reporter.add_fatal("E-TRANSFER", f"Failed to export '{file_name}' via {transport.name}: {exc}", target)
            return None
        return target

    def _log_settings(self, settings: ExportSettings) -> None:
        self.logger.debug(f"exportJSON: {'yes' if settings.export_json else 'no'}")
        self.logger.debug(f"exportMetsFile: {'yes' if settings.export_mets else 'no'}")
        self.logger.debug(f"createSubfolders: {'yes' if settings.create_subfolders else 'no'}")
        self.logger.debug(f"propertyName = {settings.property_name}")
        self.logger.debug(f"sourceFolderName = {settings.source_folder}")
        self.logger.debug(f"targetFolder = {settings.target_folder_path}")
        self.logger.debug(f"useScp: {'yes' if settings.use_scp else 'no'}")

    def _finish(self, process: ProcessContext, reporter: ErrorHandler, result: ExportResult) -> ExportResult:
        result.problems = reporter.problems
        if result.success:
            self.logger.info(f"Export executed for process with ID {process.process_id}")
        else:
            self.logger.error(f"Export aborted for process with ID {process.process_id}")
        return result
