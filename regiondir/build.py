"""
Core build orchestration for the region directory.

Prefect-free on purpose; the Prefect wrapper lives in flows/build_directory_flow.py.

One run:
  source.fetch() -> ingest_rows() -> synthesize() -> write_artifact()

Failure policy:
- row problems are warnings and never fail the run
- FetchError (source) and WriteError (artifact) always fail the run
- nothing is written unless every step before the write succeeded
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Mapping, Optional

from .artifact import write_artifact
from .config import DirectoryConfig
from .ingest import ingest_rows
from .models import BuildSummary
from .regions import load_region_names
from .sources import RowSource, SheetsRowSource
from .synthesize import dataset_stats, synthesize

logger = logging.getLogger(__name__)


def _event(name: str, **fields) -> str:
    return json.dumps({"event": name, **fields}, sort_keys=True, default=str)


def run_build(
    config: DirectoryConfig,
    *,
    source: Optional[RowSource] = None,
    region_names: Optional[Mapping[str, str]] = None,
    artifact_path: Optional[Path] = None,
    dry_run: bool = False,
) -> BuildSummary:
    """
    Run one build pass and return its summary.

    `source` defaults to the Sheets source described by `config`;
    `region_names` defaults to the YAML reference at config.regions_file.
    Raises FetchError / WriteError / ConfigError; warnings land in the summary.
    """
    if source is None:
        config.require_sheet()
        source = SheetsRowSource(config)
    if region_names is None:
        region_names = load_region_names(config.regions_file)
    target = Path(artifact_path or config.artifact_path)

    logger.info(_event("directory_build_started", source=source.describe(), artifact=target, dry_run=dry_run))

    records = source.fetch()
    logger.info(_event("directory_build_rows_fetched", rows=len(records)))

    ingested = ingest_rows(records)
    synthesized = synthesize(ingested.listings, region_names)
    stats = dataset_stats(synthesized.dataset)

    summary = BuildSummary(
        rows_fetched=len(records),
        listings_accepted=len(ingested.listings),
        rows_skipped=len(ingested.warnings),
        duplicates_collapsed=synthesized.duplicates,
        regions=stats["regions"],
        categories=stats["categories"],
        placements=stats["placements"],
        artifact_path=target,
        warnings=list(ingested.warnings),
    )

    if dry_run:
        logger.info("Dry run: artifact not written.")
    else:
        write_artifact(synthesized.dataset, target)
        summary.artifact_written = True

    payload = summary.to_dict()
    payload.pop("warnings")
    payload["warnings"] = len(summary.warnings)
    logger.info(_event("directory_build_complete", **payload))
    return summary
