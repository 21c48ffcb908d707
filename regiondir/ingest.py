from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from .models import ROW_INDEX_KEY, Listing, RawRow, ValidationWarning
from .regions import parse_regions

logger = logging.getLogger(__name__)

_TRUTHY = ("1", "true", "yes", "y", "on", "x")

REASON_MISSING_COMPANY = "missing company name"
REASON_MISSING_CATEGORY = "missing category"
REASON_MISSING_REGIONS = "missing regions"
REASON_NO_VALID_REGIONS = "no valid region slugs"


@dataclass
class IngestResult:
    listings: List[Listing] = field(default_factory=list)
    warnings: List[ValidationWarning] = field(default_factory=list)
    rows_seen: int = 0


def parse_featured(value: Any) -> bool:
    """Sheets checkboxes come back as bools or 'TRUE'/'FALSE'; CSV gives strings."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUTHY


def validate_row(row: RawRow) -> Tuple[Optional[Listing], Optional[ValidationWarning]]:
    """
    Turn one RawRow into a Listing, or explain why it was dropped.
    Exactly one side of the returned pair is set.
    """
    def reject(reason: str) -> Tuple[None, ValidationWarning]:
        return None, ValidationWarning(row_index=row.row_index, reason=reason, company_name=row.company_name)

    if not row.company_name:
        return reject(REASON_MISSING_COMPANY)
    if not row.category:
        return reject(REASON_MISSING_CATEGORY)
    if not row.regions:
        return reject(REASON_MISSING_REGIONS)

    slugs = parse_regions(row.regions)
    if not slugs:
        return reject(REASON_NO_VALID_REGIONS)

    return (
        Listing(
            name=row.company_name,
            category=row.category,
            description=row.description,
            featured=parse_featured(row.featured),
            email=row.email,
            phone=row.phone,
            website=row.website,
            regions=slugs,
            row_index=row.row_index,
        ),
        None,
    )


def ingest_rows(records: Iterable[Mapping[str, Any]]) -> IngestResult:
    """
    Validate source records in order.

    Records stamped by a source keep their source row index; unstamped records
    (fixtures, ad hoc lists) are numbered by position. Either way the caller hands
    over rows already merged in source order. Bad rows become warnings; nothing here raises.
    """
    result = IngestResult()
    for idx, record in enumerate(records):
        result.rows_seen += 1
        listing, warning = validate_row(RawRow.from_record(record, record.get(ROW_INDEX_KEY, idx)))
        if warning is not None:
            logger.warning("Row %s skipped (%s) company=%r", warning.row_index, warning.reason, warning.company_name)
            result.warnings.append(warning)
            continue
        result.listings.append(listing)

    logger.info(
        "Ingested %s rows: %s listings, %s skipped",
        result.rows_seen,
        len(result.listings),
        len(result.warnings),
    )
    return result
