from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Any, Dict, List

from ..errors import FetchError
from ..models import ROW_INDEX_KEY

logger = logging.getLogger(__name__)


class CsvRowSource:
    """
    Row source for a local export of the listings sheet (row 1 = headers).
    Used for offline builds and fixtures.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def describe(self) -> str:
        return f"csv:{self.path}"

    def fetch(self) -> List[Dict[str, Any]]:
        if not self.path.is_file():
            raise FetchError(f"CSV file not found: {self.path}")
        try:
            with open(self.path, "r", encoding="utf-8-sig", newline="") as f:
                reader = csv.reader(f)
                header = [h.strip() for h in next(reader, [])]
                rows = []
                # Blank lines still count, so row indexes line up with the sheet.
                for idx, values in enumerate(reader):
                    if not any(v.strip() for v in values):
                        continue
                    record: Dict[str, Any] = dict(zip(header, values + [""] * (len(header) - len(values))))
                    record[ROW_INDEX_KEY] = idx
                    rows.append(record)
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise FetchError(f"Cannot read {self.path}: {e}") from e
        logger.info("Read %s rows from %s", len(rows), self.path)
        return rows
