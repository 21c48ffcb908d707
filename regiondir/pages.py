from __future__ import annotations

from pathlib import Path
from typing import List

from .artifact import read_artifact
from .models import DirectoryDataset, PageDescriptor

# Generated pages live at this path on the origin; the edge router rewrites to it.
REGION_PAGE_PREFIX = "/region/"


def page_path(slug: str) -> str:
    return f"{REGION_PAGE_PREFIX}{slug}/"


def enumerate_pages(dataset: DirectoryDataset) -> List[PageDescriptor]:
    """One descriptor per region, slug order. Pure."""
    pages = []
    for slug in sorted(dataset):
        region = dataset[slug]
        pages.append(
            PageDescriptor(
                slug=slug,
                display_name=region.display_name,
                path=page_path(slug),
                categories={
                    category: [l.to_entry() for l in region.categories[category]]
                    for category in sorted(region.categories)
                },
            )
        )
    return pages


def load_pages(artifact_path: Path) -> List[PageDescriptor]:
    return enumerate_pages(read_artifact(artifact_path))
