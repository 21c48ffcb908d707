"""
Pytest configuration and fixtures for region directory tests.

Provides sample listing rows shaped like the Sheets export and a CSV writer.
"""

import csv
import sys
from pathlib import Path

import pytest

# Ensure the repo root is on sys.path for local test runs without installation
_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from regiondir.models import COLUMNS  # noqa: E402


def make_record(**overrides) -> dict:
    """One sheet row with every column present; keyword names map onto headers."""
    record = {
        "Company Name": "Acme Services",
        "Category": "Mineral Buyers",
        "Description": "",
        "Featured": "FALSE",
        "Email": "",
        "Phone": "",
        "Website": "",
        "Regions": "reeves-county-texas",
    }
    keys = {
        "name": "Company Name",
        "category": "Category",
        "description": "Description",
        "featured": "Featured",
        "email": "Email",
        "phone": "Phone",
        "website": "Website",
        "regions": "Regions",
    }
    for k, v in overrides.items():
        record[keys[k]] = v
    return record


@pytest.fixture
def record():
    return make_record


@pytest.fixture
def scenario_a_records():
    return [
        make_record(
            name="Accruit",
            category="1031 Exchange Services",
            regions="reeves-county-texas, loving-county-texas",
            featured=True,
            email="info@accruit.example",
            website="https://accruit.example",
        ),
        make_record(
            name="Zeta Co",
            category="1031 Exchange Services",
            regions="reeves-county-texas",
            featured=False,
            phone="432-555-0100",
        ),
    ]


@pytest.fixture
def write_csv(tmp_path):
    def _write(records, name="listings.csv") -> Path:
        path = tmp_path / name
        with open(path, "w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=list(COLUMNS))
            writer.writeheader()
            for r in records:
                writer.writerow({k: ("TRUE" if v is True else "FALSE" if v is False else v) for k, v in r.items()})
        return path

    return _write
