from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from partslist_merge.config.loader import ConfigError, load_config
from partslist_merge.excel.writer import DEFAULT_OUTPUT_DIR, LocalWorkbookSink
from partslist_merge.logging.init import log_summary, setup_logging
from partslist_merge.services.errors import InputSelectionError
from partslist_merge.services.orchestrator import combine_parts_lists
from partslist_merge.services.selection import list_selectable_folders
from partslist_merge.services.summary import render_summary_line
from partslist_merge.store.local import LocalDocumentStore

"""CLI entrypoint.

Flow:
- Load .env (PARTSLIST_ROOT_DIR / PARTSLIST_OUTPUT_DIR overrides)
- Load config (YAML or key/value settings workbook)
- Select the project folder (--folder NAME under ROOT_FOLDER_ID, or --root DIR)
- Merge, write the output workbook, print one SUMMARY line
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1

DEFAULT_CONFIG_PATH = Path("config/merge.yml")


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv; values in .env win over the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Merge per-project parts lists into one deduplicated list")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config or settings workbook")
    source = p.add_mutually_exclusive_group()
    source.add_argument("--folder", help="Project folder name under ROOT_FOLDER_ID")
    source.add_argument("--root", type=Path, help="Project folder path (bypasses folder selection)")
    p.add_argument("--list-folders", action="store_true", help="List selectable project folders and exit")
    p.add_argument("--output", type=Path, help="Output directory (overrides OUTPUT_FOLDER_ID)")
    p.add_argument("--dry-run", action="store_true", help="Merge and report without writing the output")
    p.add_argument("--json", action="store_true", help="Print the run result as JSON")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    # None のときのみ sys.argv を読む (テストから [] を渡すケース)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    store = LocalDocumentStore()

    if args.list_folders:
        try:
            folders = list_selectable_folders(store, cfg.root_folder_id, cfg)
        except InputSelectionError as e:
            logger.error(f"selection: {e}")
            return EXIT_FATAL
        for folder in folders:
            print(folder.name)
        return EXIT_SUCCESS

    sink = None
    if not args.dry_run:
        output_dir = args.output or (Path(cfg.output_folder_id) if cfg.output_folder_id else DEFAULT_OUTPUT_DIR)
        template = Path(cfg.template_spreadsheet_id) if cfg.template_spreadsheet_id else None
        sink = LocalWorkbookSink(output_dir=output_dir, template_path=template)

    result = combine_parts_lists(
        cfg,
        store,
        sink,
        root_id=args.root,
        folder_name=args.folder,
    )

    if args.json:
        print(json.dumps(result.to_dict(), ensure_ascii=False))
    if not result.success:
        return EXIT_FATAL

    # log_summary が "SUMMARY " を付けるので本文のみ渡す
    log_summary(render_summary_line(result)[len("SUMMARY "):])
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
