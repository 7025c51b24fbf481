#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Perevod - Excel translation to Russian

Entry point:
    python app.py translate report.xlsx --api-key KEY [--output-dir DIR]
    python app.py relay [--host 127.0.0.1] [--port 3000]
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

# Add project root to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

API_KEY_ENV = "PEREVOD_API_KEY"


def setup_logging(log_dir: Optional[Path] = None):
    """Configure logging to console and file.

    Log file location: ~/.perevod/logs/perevod.log (append mode, UTF-8)

    Returns:
        tuple: (console_handler, file_handler) to keep references alive
    """
    logs_dir = log_dir or (Path.home() / ".perevod" / "logs")
    log_file_path = logs_dir / "perevod.log"

    # Console handler first (always works)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    ))

    file_handler = None
    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file_path, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
    except OSError as e:
        # Fall back to console-only logging
        print(f"[WARNING] Failed to create log file {log_file_path}: {e}", file=sys.stderr)
        file_handler = None

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.addHandler(console_handler)
    if file_handler:
        root_logger.addHandler(file_handler)

    # Suppress verbose logging from third-party libraries
    for name in ['uvicorn', 'uvicorn.error', 'uvicorn.access',
                 'starlette', 'httpcore', 'httpx', 'asyncio', 'concurrent']:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    if file_handler:
        logger.debug("Log file: %s", log_file_path)

    return console_handler, file_handler


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--settings", type=Path, default=None,
        help="Settings path (directory holding settings.template.json)",
    )

    parser = argparse.ArgumentParser(
        prog="perevod",
        description="Translate Armenian/English Excel cells into Russian.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    translate = subparsers.add_parser(
        "translate", parents=[common], help="Translate the first sheet of a workbook"
    )
    translate.add_argument("file", type=Path, help="Input .xlsx file")
    translate.add_argument(
        "--api-key", default=None,
        help=f"Yandex Cloud API key (default: ${API_KEY_ENV})",
    )
    translate.add_argument(
        "--output-dir", type=Path, default=None,
        help="Output directory (default: next to the input file)",
    )

    relay = subparsers.add_parser("relay", parents=[common], help="Serve the translation relay")
    relay.add_argument("--host", default=None)
    relay.add_argument("--port", type=int, default=None)

    return parser


def run_translate(args, settings) -> int:
    from perevod.services.translation_service import TranslationService

    logger = logging.getLogger(__name__)

    def print_progress(progress) -> None:
        if progress is not None:
            logger.info("%s (%.0f%%)", progress.message, progress.percentage * 100)

    api_key = args.api_key or os.environ.get(API_KEY_ENV, "")
    output_dir = args.output_dir or settings.get_output_directory(args.file)

    service = TranslationService(settings=settings, on_progress=print_progress)
    try:
        result = service.translate_file(args.file, api_key, output_dir=output_dir)
    finally:
        service.shutdown()

    print(result.message)
    if not result.succeeded:
        return 1
    if result.output_path:
        print(result.output_path)
    return 0


def run_relay(args, settings) -> int:
    import uvicorn

    from perevod.relay.app import create_app

    host = args.host or settings.relay_host
    port = args.port or settings.relay_port
    logging.getLogger(__name__).info("Relay listening on http://%s:%d/api/translate", host, port)
    uvicorn.run(create_app(settings), host=host, port=port, log_level="warning")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point"""
    from perevod.config.settings import AppSettings, get_default_settings_path

    args = build_parser().parse_args(argv)
    setup_logging()

    settings = AppSettings.load(args.settings or get_default_settings_path())

    if args.command == "translate":
        return run_translate(args, settings)
    return run_relay(args, settings)


if __name__ == '__main__':
    sys.exit(main())
