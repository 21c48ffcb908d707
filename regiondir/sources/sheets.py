"""
Google Sheets row source.

Reads the listings tab in fixed-size row pages. Pages may be fetched
concurrently, but they are stitched back together in sheet order before
anything downstream sees them, and one failed page fails the whole fetch.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Tuple

import gspread
from gspread.exceptions import APIError, GSpreadException
from gspread.utils import rowcol_to_a1
from google.auth.exceptions import GoogleAuthError
from requests.exceptions import RequestException

from ..config import DirectoryConfig
from ..errors import FetchError
from ..models import ROW_INDEX_KEY

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets.readonly"]

# Only quota/server errors are worth another try; auth and not-found are final.
_RETRYABLE_STATUS = {429, 500, 502, 503, 504}


def _status_of(err: APIError) -> Optional[int]:
    resp = getattr(err, "response", None)
    return getattr(resp, "status_code", None)


def _with_backoff(fn: Callable[[], Any], *, retries: int = 3, base: float = 1.5, label: str = "op") -> Any:
    for attempt in range(retries):
        try:
            return fn()
        except APIError as e:
            if _status_of(e) not in _RETRYABLE_STATUS or attempt + 1 >= retries:
                raise
            wait = base ** attempt
            logger.warning("Sheets %s failed (%s/%s): %s. Retrying in %.1fs", label, attempt + 1, retries, e, wait)
            time.sleep(wait)


def page_ranges(header_len: int, last_row: int, page_size: int) -> List[Tuple[int, int, str]]:
    """
    A1 ranges covering data rows 2..last_row in page_size chunks.

      page_ranges(8, 1001, 500) -> [(2, 501, "A2:H501"), (502, 1001, "A502:H1001")]
    """
    out = []
    start = 2
    while start <= last_row:
        end = min(last_row, start + page_size - 1)
        out.append((start, end, f"A{start}:{rowcol_to_a1(end, header_len)}"))
        start = end + 1
    return out


def _rows_to_records(header: List[str], rows: List[List[Any]], first_index: int = 0) -> List[Dict[str, Any]]:
    records = []
    for offset, row in enumerate(rows):
        if not any(str(v).strip() for v in row):
            continue
        padded = list(row) + [""] * (len(header) - len(row))
        record = dict(zip(header, padded))
        record[ROW_INDEX_KEY] = first_index + offset
        records.append(record)
    return records


class SheetsRowSource:
    """
    Row source backed by one worksheet of a spreadsheet.

    `client` is a gspread Client; when omitted one is authorized from the
    service-account file in the config.
    """

    def __init__(self, config: DirectoryConfig, client: Optional[gspread.Client] = None):
        self.config = config
        self._gc = client

    def describe(self) -> str:
        return f"sheet:{self.config.sheet_id}/{self.config.worksheet}"

    def _client(self) -> gspread.Client:
        if self._gc is None:
            self._gc = gspread.service_account(filename=self.config.credentials_path, scopes=SCOPES)
        return self._gc

    def _worksheet(self):
        book = self._client().open_by_key(self.config.sheet_id)
        return book.worksheet(self.config.worksheet)

    def fetch(self) -> List[Dict[str, Any]]:
        try:
            return self._fetch()
        except FetchError:
            raise
        except (GSpreadException, GoogleAuthError, RequestException, OSError, ValueError) as e:
            raise FetchError(f"Cannot read {self.describe()}: {e}") from e

    def _fetch(self) -> List[Dict[str, Any]]:
        ws = self._worksheet()
        header = [str(h).strip() for h in (_with_backoff(lambda: ws.row_values(1), label="header") or [])]
        if not header:
            raise FetchError(f"{self.describe()} has no header row.")

        ranges = page_ranges(len(header), int(ws.row_count), self.config.page_size)
        workers = max(1, min(self.config.fetch_workers, len(ranges) or 1))
        logger.info("Fetching %s in %s page(s) with %s worker(s)", self.describe(), len(ranges), workers)

        def fetch_page(rng: Tuple[int, int, str]) -> List[Dict[str, Any]]:
            start, _, a1 = rng
            rows = list(_with_backoff(lambda: ws.get(a1), label=f"get {a1}") or [])
            # Sheet row 2 is data row 0; pages may come back short, so index from the range start.
            return _rows_to_records(header, rows, first_index=start - 2)

        # map() yields in submission order, so pages come back in sheet order
        # no matter which finishes first.
        with ThreadPoolExecutor(max_workers=workers) as pool:
            pages = list(pool.map(fetch_page, ranges))

        records: List[Dict[str, Any]] = []
        for page in pages:
            records.extend(page)
        return records
