from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, AppConfig, ConfigError, default_config, load_config
from ..ingest.reader import IngestError, normalize_rows, read_table
from ..logging.init import log_summary, setup_logging
from ..services.export import export_filename, export_formulas
from ..services.orchestrator import ProcessingError, ingest_files, resolve_source_paths
from ..services.render import render_materials, render_page, summary_metrics
from ..services.view import SORT_KEYS, ViewState

"""CLI entrypoint.

Flow:
- Load .env, then the YAML config (optional unless --config is given)
- Resolve input files (arguments > config source_files > source_directory)
- Ingest and group, print one page of the formula table, optionally the
  selected formula's materials, optionally export, then the SUMMARY line
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2

CONFIG_ENV_VAR = "FORMULARY_CONFIG"
INSPECT_SAMPLE_ROWS = 3


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env via python-dotenv (existing environment wins by default)."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="formulary",
        description="Group flat formula/material tables into formulas with total costs",
    )
    p.add_argument("paths", nargs="*", help="Input .csv/.xlsx files (default: from config)")
    p.add_argument("--config", help=f"Config file (default: ${CONFIG_ENV_VAR} or {DEFAULT_CONFIG_PATH})")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print file headers & first rows then exit")
    p.add_argument("--search", default="", help="Case-insensitive text filter on name/category/notes")
    p.add_argument("--category", help="Show only this category")
    p.add_argument("--sort", choices=sorted(SORT_KEYS), help="Sort column")
    p.add_argument("--desc", action="store_true", help="Sort descending")
    p.add_argument("--page", type=int, default=1, help="Page number (1-based)")
    p.add_argument("--page-size", type=int, help="Rows per page (default: config page_size)")
    p.add_argument("--select", metavar="FORMULA_ID", help="Print materials of one formula")
    p.add_argument("--export", metavar="PATH", help="Write grouped formulas back out as flat CSV")
    return p.parse_args(argv)


def _resolve_config(explicit: str | None) -> AppConfig:
    """Explicit --config must exist; the env/default location is optional."""
    if explicit:
        return load_config(Path(explicit))
    path = Path(os.getenv(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)
    if path.exists():
        return load_config(path)
    return default_config()


def _inspect_data(paths: list[Path], cfg: AppConfig) -> int:
    for f in paths:
        print(f"FILE: {f.name}")
        try:
            df = read_table(f)
            table = normalize_rows(df, f.name, null_sentinels=cfg.null_sentinels)
        except IngestError as e:
            print(f"  error={e}")
            continue
        except Exception as e:  # unreadable file: missing, corrupt, parser error
            print(f"  error={type(e).__name__}: {e}")
            continue
        print(f"  cols={table.columns} rows={len(table.rows)} rejected={len(table.rejected)}")
        sample = [row.to_record() for row in table.rows[:INSPECT_SAMPLE_ROWS]]
        print("  sample_rows=", sample)
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None -> read sys.argv; an explicit [] must not pick up the runner's args
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    if args.debug:
        for h in logger.handlers:
            h.setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
        logger.debug("debug mode enabled")

    try:
        cfg = _resolve_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    try:
        paths = resolve_source_paths(cfg, args.paths)
    except ProcessingError as e:
        logger.error(f"input: {e}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(paths, cfg)

    logger.info(f"Reading {len(paths)} file(s)")
    result = ingest_files(paths, cfg)

    page_size = args.page_size if args.page_size is not None else cfg.page_size
    try:
        state = (
            ViewState(page_size=page_size)
            .with_formulas(result.formulas)
            .with_search(args.search)
            .with_category(args.category)
            .with_sort(args.sort, descending=args.desc)
            .select(args.select)
        )
        page = state.page(args.page)
    except ValueError as e:
        logger.error(f"view: {e}")
        return EXIT_FATAL

    if result.formulas:
        print(render_page(page))
    else:
        print("No formulas loaded.")

    selected = None
    if args.select:
        selected = state.selected()
        if selected is None:
            logger.error(f"formula not found: {args.select}")
            return EXIT_FATAL
        print(render_materials(selected))

    export_path = args.export or cfg.export_path
    if export_path:
        target = Path(export_path)
        if selected is not None:
            # directory target -> <name>_materials.csv
            if target.is_dir():
                target = target / export_filename(selected)
            exported = [selected]
        else:
            exported = state.visible()
        written = export_formulas(exported, target)
        logger.info(f"exported {len(exported)} formulas to {written}")

    if result.error_log_path:
        logger.info(f"error log: {result.error_log_path}")

    log_summary(summary_metrics(result))

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL
