from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from excel_read.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from excel_read.excel.errors import SheetReadError
from excel_read.excel.reader import read_excel_file
from excel_read.logging.init import log_summary, setup_logging
from excel_read.services.orchestrator import ProcessingError, process_all, scan_excel_files
from excel_read.services.record_writer import RecordWriter
from excel_read.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env (EXCEL_READ_CONFIG may point at the config file)
- Load config (YAML, schema validated)
- Extract every .xlsx in source_directory, write records (JSON Lines) if
  ``output`` is configured
- Print SUMMARY line, exit with 0 / 2 (some files failed) / 1 (fatal)
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

CONFIG_ENV_VAR = "EXCEL_READ_CONFIG"


def _load_env_file(path: Path) -> None:
    """Load .env into the process environment (existing variables win)."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=False)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="excel-read", description="Extract records from .xlsx files")
    p.add_argument("--config", type=Path, default=None, help=f"Config file (default: {DEFAULT_CONFIG_PATH})")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print sheet headers & first rows then exit")
    return p.parse_args(argv)


def _resolve_config_path(args: argparse.Namespace) -> Path:
    if args.config is not None:
        return args.config
    env_path = os.getenv(CONFIG_ENV_VAR)
    return Path(env_path) if env_path else DEFAULT_CONFIG_PATH


def _inspect_data(cfg) -> int:
    files = scan_excel_files(Path(cfg.source_directory))
    if not files:
        print("inspect: no .xlsx files")
        return EXIT_SUCCESS_ALL
    for f in files:
        print(f"FILE: {f.name}")
        try:
            table = read_excel_file(f, header_row=cfg.header_row)
        except SheetReadError as e:
            print(f"  read_error: {e.error_type} {e}")
            continue
        print(f"  SHEET: {table.sheet_name} cols={list(table.headers)}")
        print(table.to_dataframe().head(3).to_string(index=False))
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    # NOTE: [] を渡された場合に sys.argv を読まないよう None のときのみ参照
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    logger.debug("debug mode enabled")

    _load_env_file(Path(".env"))
    try:
        cfg = load_config(_resolve_config_path(args))
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    directory = Path(cfg.source_directory)
    if not directory.exists():
        logger.error(f"directory not found: {directory}")
        return EXIT_FATAL

    if args.inspect_data:
        try:
            return _inspect_data(cfg)
        except ProcessingError as e:
            logger.error(f"processing: {e}")
            return EXIT_FATAL

    logger.info("Excel Read Started.")
    logger.info(f"Processing files from: {directory}")
    try:
        if cfg.output:
            with RecordWriter(Path(cfg.output)) as writer:
                result = process_all(cfg, writer=writer)
            logger.info(f"records written: {writer.path} ({writer.written})")
        else:
            result = process_all(cfg)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL
    logger.info("Excel Read Completed.")

    # log_summary が "SUMMARY " を付与するため先頭を除去
    log_summary(render_summary_line(result).removeprefix("SUMMARY "))

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
