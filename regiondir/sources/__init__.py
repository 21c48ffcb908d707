from __future__ import annotations

from typing import Any, Dict, List, Protocol

from .csv_file import CsvRowSource
from .sheets import SheetsRowSource


class RowSource(Protocol):
    """Anything that returns the full listing table, rows in source order."""

    def describe(self) -> str: ...

    def fetch(self) -> List[Dict[str, Any]]: ...


__all__ = ["RowSource", "CsvRowSource", "SheetsRowSource"]
