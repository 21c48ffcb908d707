"""
Canonical artifact I/O.

The artifact is one JSON document:

  {
    "<region-slug>": {
      "displayName": "...",
      "categories": {
        "<category>": [{"name", "description", "featured", "email", "phone", "website"}, ...]
      }
    }
  }

Keys are sorted at every level and listing order is kept, so unchanged data
serializes to identical bytes. Writes go to a temp file beside the target and
are swapped in with os.replace(); readers never see a partial file.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List

from .errors import ArtifactError, WriteError
from .models import DirectoryDataset, Listing, RegionDirectory

logger = logging.getLogger(__name__)


def dataset_to_payload(dataset: DirectoryDataset) -> Dict[str, Any]:
    return {
        slug: {
            "displayName": region.display_name,
            "categories": {
                category: [l.to_entry() for l in bucket]
                for category, bucket in region.categories.items()
            },
        }
        for slug, region in dataset.items()
    }


def payload_to_dataset(payload: Dict[str, Any]) -> DirectoryDataset:
    """
    Rebuild a dataset from a loaded artifact.

    Region membership and row order are implied by position, so listings are
    re-created with their own slug and their index within the bucket.
    """
    if not isinstance(payload, dict):
        raise ArtifactError("Artifact root must be an object keyed by region slug.")

    dataset: DirectoryDataset = {}
    for slug, body in payload.items():
        try:
            categories: Dict[str, List[Listing]] = {}
            for category, entries in (body.get("categories") or {}).items():
                categories[category] = [
                    Listing(
                        name=e["name"],
                        category=category,
                        description=e.get("description", ""),
                        featured=bool(e.get("featured", False)),
                        email=e.get("email", ""),
                        phone=e.get("phone", ""),
                        website=e.get("website", ""),
                        regions=(slug,),
                        row_index=i,
                    )
                    for i, e in enumerate(entries)
                ]
            dataset[slug] = RegionDirectory(slug=slug, display_name=body["displayName"], categories=categories)
        except (AttributeError, KeyError, TypeError) as e:
            raise ArtifactError(f"Malformed artifact entry for region {slug!r}: {e}") from e
    return dataset


def dumps_dataset(dataset: DirectoryDataset) -> str:
    return json.dumps(dataset_to_payload(dataset), sort_keys=True, indent=2, ensure_ascii=False) + "\n"


def loads_dataset(text: str) -> DirectoryDataset:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ArtifactError(f"Artifact is not valid JSON: {e}") from e
    return payload_to_dataset(payload)


def write_artifact(dataset: DirectoryDataset, path: Path) -> Path:
    """
    Atomically replace `path` with the serialized dataset.

    Raises WriteError on any I/O failure; the previous artifact (if any) is untouched.
    """
    path = Path(path)
    data = dumps_dataset(dataset).encode("utf-8")
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        # mkstemp creates 0600; readers need 0644
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as e:
        raise WriteError(f"Cannot write artifact {path}: {e}") from e
    finally:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except OSError:
                logger.warning("Could not remove temp artifact %s", tmp_name)

    logger.info("Artifact written: %s (%s bytes, %s regions)", path, len(data), len(dataset))
    return path


def read_artifact(path: Path) -> DirectoryDataset:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ArtifactError(f"Cannot read artifact {path}: {e}") from e
    return loads_dataset(text)
