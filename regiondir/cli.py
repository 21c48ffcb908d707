"""
Command line entry point.

  python -m regiondir build [--csv rows.csv] [--artifact data/directory.json] [--dry-run]
  python -m regiondir pages [--artifact data/directory.json] [--out pages.json]
  python -m regiondir serve-edge [--host 0.0.0.0] [--port 8000]

`build` exits 0 on success (row warnings included) and 1 on any fatal error;
the previous artifact is never replaced by a failed run.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .build import run_build
from .config import DirectoryConfig, EdgeConfig
from .errors import RegionDirError
from .pages import load_pages
from .regions import load_region_names
from .sources import CsvRowSource

logger = logging.getLogger("regiondir")

EXIT_OK = 0
EXIT_FATAL = 1


def _setup_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s.%(msecs)03d %(levelname)s %(name)s %(message)s",
        datefmt="%H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="regiondir", description="Region directory build + edge router")
    p.add_argument("--debug", action="store_true")
    sub = p.add_subparsers(dest="command", required=True)

    b = sub.add_parser("build", help="Fetch rows and write the canonical artifact")
    b.add_argument("--csv", type=Path, default=None, help="Read rows from a local CSV export instead of Sheets")
    b.add_argument("--artifact", type=Path, default=None, help="Artifact path (default: DIRECTORY_ARTIFACT_PATH)")
    b.add_argument("--regions", type=Path, default=None, help="Region reference YAML (slug: Display Name)")
    b.add_argument("--dry-run", action="store_true", help="Run everything except the artifact write")

    pg = sub.add_parser("pages", help="Print one page descriptor per region as JSON")
    pg.add_argument("--artifact", type=Path, default=None)
    pg.add_argument("--out", type=Path, default=None, help="Write JSON here instead of stdout")

    e = sub.add_parser("serve-edge", help="Run the subdomain edge router")
    e.add_argument("--host", default="0.0.0.0")
    e.add_argument("--port", type=int, default=8000)
    return p


def cmd_build(args, config: DirectoryConfig) -> int:
    source = CsvRowSource(args.csv) if args.csv else None
    region_names = load_region_names(args.regions) if args.regions else None
    summary = run_build(
        config,
        source=source,
        region_names=region_names,
        artifact_path=args.artifact,
        dry_run=args.dry_run,
    )
    for w in summary.warnings:
        logger.warning("Skipped row %s (%s) %s", w.row_index, w.reason, w.company_name)
    logger.info(
        "Build done: rows=%s listings=%s skipped=%s duplicates=%s regions=%s written=%s",
        summary.rows_fetched,
        summary.listings_accepted,
        summary.rows_skipped,
        summary.duplicates_collapsed,
        summary.regions,
        summary.artifact_written,
    )
    return EXIT_OK


def cmd_pages(args, config: DirectoryConfig) -> int:
    pages = load_pages(args.artifact or config.artifact_path)
    text = json.dumps([p.to_dict() for p in pages], sort_keys=True, indent=2, ensure_ascii=False) + "\n"
    if args.out:
        args.out.write_text(text, encoding="utf-8")
        logger.info("Wrote %s page descriptors to %s", len(pages), args.out)
    else:
        sys.stdout.write(text)
    return EXIT_OK


def cmd_serve_edge(args) -> int:
    import uvicorn

    from .edge import create_app

    uvicorn.run(create_app(EdgeConfig.from_env()), host=args.host, port=args.port)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    _setup_logging(args.debug)

    try:
        if args.command == "serve-edge":
            return cmd_serve_edge(args)
        config = DirectoryConfig.from_env()
        if args.command == "build":
            return cmd_build(args, config)
        return cmd_pages(args, config)
    except RegionDirError as e:
        logger.error("%s failed: %s: %s", args.command, type(e).__name__, e)
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
