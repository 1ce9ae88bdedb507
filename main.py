#!/usr/bin/env python3
"""
Main entry point for the scan-to-PDF pipeline
Scans a batch of sheets, drops blank separator pages, merges the rest into one PDF and uploads it
"""

from __future__ import annotations

import argparse
import logging
import sys
import textwrap
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables (SCANPDF_*) from .env file
load_dotenv()


def setup_logging(level: str = "INFO", log_file: str | Path | None = None) -> Path:
    """Setup logging configuration with timestamped log files.

    Returns:
        Path of the log file
    """
    from scanpdf.misc import tz_now  # noqa: PLC0415 - lazy import for startup performance

    if log_file is None:
        logs_dir = Path(".logs")
        logs_dir.mkdir(exist_ok=True)
        timestamp = tz_now().strftime("%Y-%m-%d_%H-%M-%S")
        log_file = logs_dir / f"{timestamp}_scanpdf.log"
    log_file = Path(log_file)

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout), logging.FileHandler(log_file, encoding="utf-8")],
    )
    return log_file


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = _build_argument_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level, args.log_file)
    logger = logging.getLogger(__name__)

    return _execute_command(args, logger)


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="scanpdf - Scan a stack of sheets to one PDF and upload it",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent(
            """
            Examples:
              # Defaults: 200 dpi, 3 convert workers, no prefix
              python main.py

              # Higher resolution, documents named invoices<timestamp>.pdf
              python main.py --dpi 300 --prefix invoices

              # Alternative settings file
              python main.py --config /etc/scanpdf/config.yaml

            Exit codes:
              0  success
              1  system error
              2  network error (destination unreachable or upload failed)
              3  no scanner found
              4  zero pages scanned
            """
        ),
    )

    scan_group = parser.add_argument_group("Scan Options")
    scan_group.add_argument(
        "--dpi",
        type=int,
        default=None,
        help="Scan resolution, clamped to 72-600 (default: 200)",
    )
    scan_group.add_argument(
        "--cores",
        type=int,
        default=None,
        help="Number of convert workers, clamped to 1-32 (default: 3)",
    )
    scan_group.add_argument(
        "--prefix",
        type=str,
        default=None,
        help="Document name prefix, also prepended to the remote directory ('/' is removed)",
    )

    config_group = parser.add_argument_group("Configuration")
    config_group.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML settings file (default: settings/config.yaml)",
    )
    config_group.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )
    config_group.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Log file (default: .logs/<timestamp>_scanpdf.log)",
    )

    return parser


def _execute_command(args: argparse.Namespace, logger: logging.Logger) -> int:
    # Lazy import: only load the pipeline when actually scanning
    from scanpdf import ScanConfig, ScanPipeline  # noqa: PLC0415
    from scanpdf.constants import DEFAULT_LED_PATH, DEFAULT_NOTIFY_SOCKET  # noqa: PLC0415
    from scanpdf.exceptions import ScanPipelineError, UploadError  # noqa: PLC0415
    from scanpdf.lifecycle import exit_signals_raise  # noqa: PLC0415
    from scanpdf.misc import set_default_timezone  # noqa: PLC0415
    from scanpdf.status import StatusReporter, clean_exit  # noqa: PLC0415
    from scanpdf.types import ExitCode  # noqa: PLC0415

    try:
        config = ScanConfig.load(args)
    except ScanPipelineError as exc:
        # No usable settings, so signal through the built-in LED and socket
        fallback = StatusReporter(Path(DEFAULT_LED_PATH), Path(DEFAULT_NOTIFY_SOCKET))
        return clean_exit(str(exc), exc.exit_code, reporter=fallback)

    if config.timezone is not None:
        set_default_timezone(config.timezone)
    reporter = StatusReporter(config.led_path, config.notify_socket)
    pipeline = ScanPipeline(config)

    def finish(message: str, code: ExitCode, preserve: list[Path] | None = None) -> int:
        return clean_exit(message, code, pipeline.workspace, config.ramdisk, reporter, preserve or [])

    try:
        with exit_signals_raise():
            pipeline.run()
    except UploadError as exc:
        return finish(str(exc), exc.exit_code, [exc.document] if exc.document else None)
    except ScanPipelineError as exc:
        return finish(str(exc), exc.exit_code)
    except Exception as exc:  # noqa: BLE001 - retain broad logging for CLI
        logger.error("Unexpected error: %s", exc, exc_info=True)
        return finish(f"Unexpected error: {exc}", ExitCode.SYSTEM_ERROR)

    return finish("Done", ExitCode.SUCCESS)


if __name__ == "__main__":
    sys.exit(main())
