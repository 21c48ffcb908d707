from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

# Column headers as they appear in the listings sheet.
COL_COMPANY = "Company Name"
COL_CATEGORY = "Category"
COL_DESCRIPTION = "Description"
COL_FEATURED = "Featured"
COL_EMAIL = "Email"
COL_PHONE = "Phone"
COL_WEBSITE = "Website"
COL_REGIONS = "Regions"

COLUMNS: Tuple[str, ...] = (
    COL_COMPANY,
    COL_CATEGORY,
    COL_DESCRIPTION,
    COL_FEATURED,
    COL_EMAIL,
    COL_PHONE,
    COL_WEBSITE,
    COL_REGIONS,
)

# Sources stamp each record with its 0-based data-row position (blank rows included),
# so warnings point at the row an editor sees: sheet row = index + 2.
ROW_INDEX_KEY = "_row_index"


def _norm_header(h: Any) -> str:
    return str(h or "").strip().casefold()


def _cell(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


@dataclass
class RawRow:
    """
    One spreadsheet record, exactly as read. Discarded after validation.

    `featured` keeps the raw cell value (Sheets may hand back a bool or "TRUE").
    """
    row_index: int
    company_name: str
    category: str
    description: str
    featured: Any
    email: str
    phone: str
    website: str
    regions: str

    @classmethod
    def from_record(cls, record: Mapping[str, Any], row_index: int) -> "RawRow":
        by_header = {_norm_header(k): v for k, v in record.items()}

        def get(col: str) -> str:
            return _cell(by_header.get(_norm_header(col)))

        return cls(
            row_index=row_index,
            company_name=get(COL_COMPANY),
            category=get(COL_CATEGORY),
            description=get(COL_DESCRIPTION),
            featured=by_header.get(_norm_header(COL_FEATURED)),
            email=get(COL_EMAIL),
            phone=get(COL_PHONE),
            website=get(COL_WEBSITE),
            regions=get(COL_REGIONS),
        )


@dataclass(frozen=True)
class Listing:
    """
    Validated listing. Identity within a bucket is (name, category, region).
    """
    name: str
    category: str
    description: str
    featured: bool
    email: str
    phone: str
    website: str
    regions: Tuple[str, ...]
    row_index: int

    def identity(self, region: str) -> Tuple[str, str, str]:
        return (self.name, self.category, region)

    def to_entry(self) -> Dict[str, Any]:
        """Artifact shape for one listing (region/category are implied by position)."""
        return {
            "name": self.name,
            "description": self.description,
            "featured": self.featured,
            "email": self.email,
            "phone": self.phone,
            "website": self.website,
        }


@dataclass(frozen=True)
class ValidationWarning:
    row_index: int
    reason: str
    company_name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"row": self.row_index, "reason": self.reason, "company": self.company_name}


@dataclass
class RegionDirectory:
    slug: str
    display_name: str
    categories: Dict[str, List[Listing]] = field(default_factory=dict)

    def placement_count(self) -> int:
        return sum(len(bucket) for bucket in self.categories.values())


# slug -> RegionDirectory
DirectoryDataset = Dict[str, RegionDirectory]


@dataclass(frozen=True)
class PageDescriptor:
    """What the page-generation layer needs to emit one region page."""
    slug: str
    display_name: str
    path: str
    categories: Dict[str, List[Dict[str, Any]]]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slug": self.slug,
            "displayName": self.display_name,
            "path": self.path,
            "categories": self.categories,
        }


@dataclass
class BuildSummary:
    rows_fetched: int = 0
    listings_accepted: int = 0
    rows_skipped: int = 0
    duplicates_collapsed: int = 0
    regions: int = 0
    categories: int = 0
    placements: int = 0
    artifact_path: Optional[Path] = None
    artifact_written: bool = False
    warnings: List[ValidationWarning] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rows_fetched": self.rows_fetched,
            "listings_accepted": self.listings_accepted,
            "rows_skipped": self.rows_skipped,
            "duplicates_collapsed": self.duplicates_collapsed,
            "regions": self.regions,
            "categories": self.categories,
            "placements": self.placements,
            "artifact_path": str(self.artifact_path) if self.artifact_path else None,
            "artifact_written": self.artifact_written,
            "warnings": [w.to_dict() for w in self.warnings],
        }
