from __future__ import annotations

import argparse
import sys
from pathlib import Path

from . import __version__
from .config import ConfigManager
from .core import DirectoryProcess, ExportOrchestrator


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    print(f"selected-image-export v{__version__}")
    config = ConfigManager(Path(args.config) if args.config else None)
    if args.command == "export":
        return _run_export(args, config)
    if args.command == "validate":
        return _run_validate(config)
    parser.print_help()
    return 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="selected_image_export")
    parser.add_argument("--config", help="Path to config file", default=None)

    subparsers = parser.add_subparsers(dest="command")

    export = subparsers.add_parser("export", help="Export the selected images of one process")
    export.add_argument("--process-dir", required=True, help="Process folder")
    export.add_argument("--process-id", required=True, type=int, help="Process id")
    export.add_argument("--title", required=True, help="Process title")
    export.add_argument("--project", default="*", help="Project name")

    subparsers.add_parser("validate", help="Validate the config file")
    return parser


def _run_export(args: argparse.Namespace, config: ConfigManager) -> int:
    process = DirectoryProcess(
        Path(args.process_dir),
        process_id=args.process_id,
        title=args.title,
        project_name=args.project,
    )
    result = ExportOrchestrator(config).run(process)
    for problem in result.problems:
        print(problem)
    print(
        "Export done. "
        f"Delivered: {len(result.delivered)}, "
        f"Failed: {len(result.failed)}, "
        f"Manifest: {result.manifest_path or '-'}, "
        f"METS: {result.structure_path or '-'}"
    )
    return 0 if result.success else 1


def _run_validate(config: ConfigManager) -> int:
    errors = config.validate_config()
    for error in errors:
        print(error)
    if not errors:
        print("Config OK")
    return 1 if errors else 0


if __name__ == "__main__":
    sys.exit(main())
