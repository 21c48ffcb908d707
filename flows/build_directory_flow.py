from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from prefect import flow, get_run_logger
from prefect.runtime import flow_run  # type: ignore

from regiondir.build import run_build
from regiondir.config import DirectoryConfig
from regiondir.models import BuildSummary
from regiondir.sources import CsvRowSource


def _classify_build(summary: BuildSummary) -> str:
    """
    Mutually exclusive, ordered classification:
      1) BUILD_EMPTY           no region made it into the artifact
      2) BUILD_WITH_WARNINGS   artifact built, some rows skipped
      3) BUILD_SUCCESS
    """
    if summary.regions == 0:
        return "BUILD_EMPTY"
    if summary.warnings:
        return "BUILD_WITH_WARNINGS"
    return "BUILD_SUCCESS"


@flow(name="region-directory-build", persist_result=False)
def build_directory(csv_path: Optional[str] = None, dry_run: bool = False) -> Dict[str, Any]:
    """
    Prefect flow wrapper for the directory build.

    Delegates to `run_build()`; fetch/write failures propagate so the flow run
    is marked failed and the previous artifact stays in place.
    """
    load_dotenv()
    logger = get_run_logger()
    logger.info("Region directory build started.")

    config = DirectoryConfig.from_env()
    source = CsvRowSource(Path(csv_path)) if csv_path else None
    summary = run_build(config, source=source, dry_run=dry_run)

    for w in summary.warnings:
        logger.warning(json.dumps({"event": "directory_row_skipped", **w.to_dict()}, sort_keys=True))

    classification = _classify_build(summary)
    run_id = getattr(flow_run, "id", None)

    logger.info(
        f"rows={summary.rows_fetched} listings={summary.listings_accepted} "
        f"skipped={summary.rows_skipped} duplicates={summary.duplicates_collapsed} regions={summary.regions}"
    )

    result = summary.to_dict()
    result["warnings"] = len(summary.warnings)
    result.update({"run_id": str(run_id) if run_id else None, "build_classification": classification})
    logger.info(json.dumps({"event": "directory_build_run_complete", **result}, sort_keys=True))
    return result


if __name__ == "__main__":
    build_directory()
