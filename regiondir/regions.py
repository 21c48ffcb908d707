"""
Region slugs: parsing the multiselect Regions cell and naming regions.

The Regions column is a single comma-joined string ("reeves-county-texas, loving-county-texas").
Everything that splits or normalizes it goes through parse_regions().
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

REGION_DELIMITER = ","

_SLUG_RX = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
_FOLD_RX = re.compile(r"[\s_]+")


def normalize_slug(raw: str) -> Optional[str]:
    """
    Trim, lowercase, fold whitespace/underscore runs to one hyphen.
    Returns None when the result is not a valid slug.
    """
    s = (raw or "").strip().lower()
    s = _FOLD_RX.sub("-", s)
    if not s or not _SLUG_RX.match(s):
        return None
    return s


def is_valid_slug(slug: str) -> bool:
    return bool(slug) and bool(_SLUG_RX.match(slug))


def parse_regions(raw: str) -> Tuple[str, ...]:
    """
    Split a Regions cell into distinct slugs, first-seen order.

      "Reeves-County-Texas, ,loving-county-texas" -> ("reeves-county-texas", "loving-county-texas")

    Empty and invalid segments are dropped silently.
    """
    out = []
    seen = set()
    for part in (raw or "").split(REGION_DELIMITER):
        slug = normalize_slug(part)
        if slug is None or slug in seen:
            continue
        seen.add(slug)
        out.append(slug)
    return tuple(out)


def display_name_from_slug(slug: str) -> str:
    # "reeves-county-texas" -> "Reeves County Texas"
    return " ".join(w.capitalize() for w in slug.split("-") if w)


def display_name_for(slug: str, region_names: Optional[Mapping[str, str]] = None) -> str:
    name = ((region_names or {}).get(slug) or "").strip()
    return name or display_name_from_slug(slug)


def load_region_names(path: Optional[Path]) -> Dict[str, str]:
    """
    Load the optional slug -> display name reference.

    A missing file is not an error (every name falls back to the slug).
    Keys are normalized like Regions cells; entries with bad keys are skipped.
    """
    if path is None or not Path(path).is_file():
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read region reference {path}: {e}") from e

    if not isinstance(data, dict):
        logger.warning("Region reference %s is not a mapping; ignoring it.", path)
        return {}

    names: Dict[str, str] = {}
    for key, value in data.items():
        slug = normalize_slug(str(key))
        if slug is None or value is None:
            logger.warning("Region reference %s: skipping entry %r", path, key)
            continue
        names[slug] = str(value).strip()
    return names
