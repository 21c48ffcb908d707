"""
Configuration for the directory build and the edge router.

Both configs are frozen values built once at an entry point (CLI, Prefect flow,
edge app factory) and passed down. Nothing under regiondir reads the process
environment after that point.

Env knobs:
  DIRECTORY_SHEET_ID        spreadsheet key (required for the Sheets source)
  GOOGLE_SHEETS_CRED        service-account JSON path (required for the Sheets source)
  DIRECTORY_WORKSHEET       tab holding the listings (default: Listings)
  DIRECTORY_PAGE_SIZE       rows per fetched page (default: 500)
  DIRECTORY_FETCH_WORKERS   concurrent page fetches (default: 4)
  DIRECTORY_ARTIFACT_PATH   canonical artifact (default: data/directory.json)
  DIRECTORY_REGIONS_FILE    slug -> display name YAML (default: config/regions.yaml)

  EDGE_ORIGIN_URL           origin serving the generated pages
  EDGE_BASE_DOMAIN          apex domain, e.g. example.com (optional)
  EDGE_RESERVED_LABELS      comma list of labels never rewritten (default: www,directory)
  EDGE_UPSTREAM_TIMEOUT_S   timeout passed to the origin fetch (default: 10)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Mapping, Optional

from .errors import ConfigError

DEFAULT_WORKSHEET = "Listings"
DEFAULT_PAGE_SIZE = 500
DEFAULT_FETCH_WORKERS = 4
DEFAULT_ARTIFACT_PATH = Path("data/directory.json")
DEFAULT_REGIONS_FILE = Path("config/regions.yaml")

DEFAULT_RESERVED_LABELS: FrozenSet[str] = frozenset({"www", "directory"})
DEFAULT_UPSTREAM_TIMEOUT_S = 10.0


# -----------------------------
# Env helpers
# -----------------------------
def _env_str(env: Mapping[str, str], name: str, default: str = "") -> str:
    return (env.get(name) or default).strip()


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


def parse_label_list(raw: str) -> FrozenSet[str]:
    return frozenset(p.strip().lower() for p in (raw or "").split(",") if p.strip())


@dataclass(frozen=True)
class DirectoryConfig:
    sheet_id: str = ""
    credentials_path: str = ""
    worksheet: str = DEFAULT_WORKSHEET
    page_size: int = DEFAULT_PAGE_SIZE
    fetch_workers: int = DEFAULT_FETCH_WORKERS
    artifact_path: Path = DEFAULT_ARTIFACT_PATH
    regions_file: Optional[Path] = DEFAULT_REGIONS_FILE

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "DirectoryConfig":
        env = os.environ if env is None else env
        # Set-but-empty DIRECTORY_REGIONS_FILE disables the reference file.
        regions_raw = env.get("DIRECTORY_REGIONS_FILE")
        if regions_raw is None:
            regions_file: Optional[Path] = DEFAULT_REGIONS_FILE
        else:
            regions_file = Path(regions_raw.strip()) if regions_raw.strip() else None
        return cls(
            sheet_id=_env_str(env, "DIRECTORY_SHEET_ID"),
            credentials_path=_env_str(env, "GOOGLE_SHEETS_CRED"),
            worksheet=_env_str(env, "DIRECTORY_WORKSHEET", DEFAULT_WORKSHEET),
            page_size=max(1, _env_int(env, "DIRECTORY_PAGE_SIZE", DEFAULT_PAGE_SIZE)),
            fetch_workers=max(1, _env_int(env, "DIRECTORY_FETCH_WORKERS", DEFAULT_FETCH_WORKERS)),
            artifact_path=Path(_env_str(env, "DIRECTORY_ARTIFACT_PATH", str(DEFAULT_ARTIFACT_PATH))),
            regions_file=regions_file,
        )

    def require_sheet(self) -> None:
        """
        Guardrail for the Sheets source: fail at the entry point, not mid-run.
        """
        if not self.sheet_id:
            raise ConfigError("DIRECTORY_SHEET_ID is not set.")
        if not self.credentials_path:
            raise ConfigError("GOOGLE_SHEETS_CRED is not set.")
        if not os.path.isfile(self.credentials_path):
            raise ConfigError(f"Service account JSON not found: {self.credentials_path}")


@dataclass(frozen=True)
class EdgeConfig:
    origin_url: str = ""
    base_domain: str = ""
    reserved_labels: FrozenSet[str] = field(default_factory=lambda: DEFAULT_RESERVED_LABELS)
    upstream_timeout_s: float = DEFAULT_UPSTREAM_TIMEOUT_S

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "EdgeConfig":
        env = os.environ if env is None else env
        reserved_raw = env.get("EDGE_RESERVED_LABELS")
        reserved = DEFAULT_RESERVED_LABELS if reserved_raw is None else parse_label_list(reserved_raw)
        cfg = cls(
            origin_url=_env_str(env, "EDGE_ORIGIN_URL").rstrip("/"),
            base_domain=_env_str(env, "EDGE_BASE_DOMAIN").lower().strip("."),
            reserved_labels=reserved,
            upstream_timeout_s=_env_float(env, "EDGE_UPSTREAM_TIMEOUT_S", DEFAULT_UPSTREAM_TIMEOUT_S),
        )
        if not cfg.origin_url:
            raise ConfigError("EDGE_ORIGIN_URL is not set.")
        if cfg.upstream_timeout_s <= 0:
            raise ConfigError("EDGE_UPSTREAM_TIMEOUT_S must be positive.")
        return cfg
