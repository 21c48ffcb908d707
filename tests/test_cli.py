"""
Tests for the command line entry point and its exit codes.
"""

import json

import pytest

from regiondir.cli import EXIT_FATAL, EXIT_OK, main


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    for name in ("DIRECTORY_SHEET_ID", "GOOGLE_SHEETS_CRED", "DIRECTORY_ARTIFACT_PATH", "DIRECTORY_REGIONS_FILE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("regiondir.cli.load_dotenv", lambda: None)
    monkeypatch.chdir(tmp_path)


def test_build_from_csv_exits_zero(write_csv, scenario_a_records, tmp_path):
    csv_path = write_csv(scenario_a_records)
    artifact = tmp_path / "out.json"

    code = main(["build", "--csv", str(csv_path), "--artifact", str(artifact)])

    assert code == EXIT_OK
    assert "reeves-county-texas" in json.loads(artifact.read_text(encoding="utf-8"))


def test_build_with_row_warnings_still_exits_zero(write_csv, record, tmp_path):
    csv_path = write_csv([record(name=""), record(name="Good Co")])

    code = main(["build", "--csv", str(csv_path), "--artifact", str(tmp_path / "out.json")])

    assert code == EXIT_OK


def test_build_fetch_failure_exits_nonzero(tmp_path):
    artifact = tmp_path / "out.json"
    artifact.write_text("{}\n", encoding="utf-8")

    code = main(["build", "--csv", str(tmp_path / "missing.csv"), "--artifact", str(artifact)])

    assert code == EXIT_FATAL
    assert artifact.read_text(encoding="utf-8") == "{}\n"


def test_build_without_sheet_config_exits_nonzero():
    assert main(["build"]) == EXIT_FATAL


def test_pages_prints_descriptors(write_csv, scenario_a_records, tmp_path, capsys):
    artifact = tmp_path / "out.json"
    main(["build", "--csv", str(write_csv(scenario_a_records)), "--artifact", str(artifact)])
    capsys.readouterr()

    code = main(["pages", "--artifact", str(artifact)])

    pages = json.loads(capsys.readouterr().out)
    assert code == EXIT_OK
    assert [p["path"] for p in pages] == ["/region/loving-county-texas/", "/region/reeves-county-texas/"]


def test_pages_to_file(write_csv, scenario_a_records, tmp_path):
    artifact = tmp_path / "out.json"
    out = tmp_path / "pages.json"
    main(["build", "--csv", str(write_csv(scenario_a_records)), "--artifact", str(artifact)])

    assert main(["pages", "--artifact", str(artifact), "--out", str(out)]) == EXIT_OK
    assert len(json.loads(out.read_text(encoding="utf-8"))) == 2


def test_pages_missing_artifact_exits_nonzero(tmp_path):
    assert main(["pages", "--artifact", str(tmp_path / "nope.json")]) == EXIT_FATAL
