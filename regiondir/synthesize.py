"""
Directory synthesis: validated listings -> region -> category -> ordered bucket.

Rules:
- a listing lands in one bucket per region slug it carries, under its exact category
- (name, category, region) is unique per bucket; the first row wins
- buckets sort featured-first, then name (case-insensitive), then source row order
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Set, Tuple

from .models import DirectoryDataset, Listing, RegionDirectory
from .regions import display_name_for

logger = logging.getLogger(__name__)


@dataclass
class SynthesisResult:
    dataset: DirectoryDataset
    duplicates: int = 0


def bucket_sort_key(listing: Listing) -> Tuple[int, str, int]:
    return (0 if listing.featured else 1, listing.name.casefold(), listing.row_index)


def synthesize(
    listings: Iterable[Listing],
    region_names: Optional[Mapping[str, str]] = None,
) -> SynthesisResult:
    # Arrival order decides which duplicate survives, so walk rows in source order.
    ordered = sorted(listings, key=lambda l: l.row_index)

    dataset: DirectoryDataset = {}
    seen: Set[Tuple[str, str, str]] = set()
    duplicates = 0

    for listing in ordered:
        for slug in listing.regions:
            key = listing.identity(slug)
            if key in seen:
                duplicates += 1
                logger.debug("Duplicate collapsed: %r (row %s)", key, listing.row_index)
                continue
            seen.add(key)

            region = dataset.get(slug)
            if region is None:
                region = RegionDirectory(slug=slug, display_name=display_name_for(slug, region_names))
                dataset[slug] = region
            region.categories.setdefault(listing.category, []).append(listing)

    for region in dataset.values():
        for bucket in region.categories.values():
            bucket.sort(key=bucket_sort_key)

    logger.info("Synthesized %s regions (%s duplicates collapsed)", len(dataset), duplicates)
    return SynthesisResult(dataset=dataset, duplicates=duplicates)


def dataset_stats(dataset: DirectoryDataset) -> Dict[str, int]:
    categories = set()
    placements = 0
    for region in dataset.values():
        categories.update(region.categories.keys())
        placements += region.placement_count()
    return {"regions": len(dataset), "categories": len(categories), "placements": placements}

