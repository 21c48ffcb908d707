"""
Unit tests for page descriptor enumeration.
"""

import pytest

from regiondir.artifact import write_artifact
from regiondir.errors import ArtifactError
from regiondir.ingest import ingest_rows
from regiondir.pages import enumerate_pages, load_pages, page_path
from regiondir.synthesize import synthesize


def test_page_path():
    assert page_path("reeves-county-texas") == "/region/reeves-county-texas/"


def test_one_descriptor_per_region_in_slug_order(scenario_a_records):
    dataset = synthesize(ingest_rows(scenario_a_records).listings).dataset

    pages = enumerate_pages(dataset)

    assert [p.slug for p in pages] == ["loving-county-texas", "reeves-county-texas"]
    reeves = pages[1]
    assert reeves.display_name == "Reeves County Texas"
    assert reeves.path == "/region/reeves-county-texas/"
    assert [e["name"] for e in reeves.categories["1031 Exchange Services"]] == ["Accruit", "Zeta Co"]


def test_descriptor_dict_shape(scenario_a_records):
    dataset = synthesize(ingest_rows(scenario_a_records).listings).dataset

    d = enumerate_pages(dataset)[0].to_dict()

    assert set(d) == {"slug", "displayName", "path", "categories"}


def test_empty_dataset_has_no_pages():
    assert enumerate_pages({}) == []


def test_load_pages_reads_artifact(scenario_a_records, tmp_path):
    dataset = synthesize(ingest_rows(scenario_a_records).listings).dataset
    path = write_artifact(dataset, tmp_path / "directory.json")

    assert load_pages(path) == enumerate_pages(dataset)


def test_load_pages_missing_artifact(tmp_path):
    with pytest.raises(ArtifactError):
        load_pages(tmp_path / "directory.json")
