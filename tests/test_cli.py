"""Tests for the tripbatch command line."""

import json
import subprocess
import sys

import yaml

from tripbatch import __version__


def run_cli(*args, cwd):
    return subprocess.run(
        [sys.executable, "-m", "tripbatch.cli", *args],
        capture_output=True,
        text=True,
        cwd=cwd,
    )


def test_version_module():
    """Test that version is accessible from module."""
    parts = __version__.split(".")
    assert len(parts) >= 2


def test_template_then_validate(tmp_path):
    result = run_cli("template", "t.zip", cwd=tmp_path)
    assert result.returncode == 0
    assert (tmp_path / "t.zip").exists()

    result = run_cli("validate", "t.zip", cwd=tmp_path)
    assert result.returncode == 0
    assert "OK: 1 trip(s)" in result.stdout


def test_validate_reports_all_violations(tmp_path, make_zip):
    archive = tmp_path / "bad.zip"
    archive.write_bytes(make_zip({"viaggi.json": {"recommended_seasons": ["Estate"], "stages": []}}))

    result = run_cli("--json", "validate", "bad.zip", cwd=tmp_path)

    assert result.returncode == 1
    data = json.loads(result.stdout)
    assert data["valid"] is False
    fields = {v.split(":")[0] for v in data["violations"]}
    assert {"title", "summary", "destination", "theme", "stages"} <= fields


def test_validate_missing_manifest(tmp_path, make_zip):
    archive = tmp_path / "empty.zip"
    archive.write_bytes(make_zip({"media/a.jpg": b"a"}))

    result = run_cli("validate", "empty.zip", cwd=tmp_path)

    assert result.returncode == 1
    assert "viaggi.json" in result.stderr


def test_validate_rejects_non_zip_name(tmp_path):
    (tmp_path / "trip.tar").write_bytes(b"x")
    result = run_cli("validate", "trip.tar", cwd=tmp_path)
    assert result.returncode == 1
    assert ".zip" in result.stderr


def test_size_limit(tmp_path, make_zip, make_trip):
    (tmp_path / "tripbatch.toml").write_text("[limits]\nmax_archive_mb = 0\n")
    (tmp_path / "t.zip").write_bytes(make_zip({"viaggi.json": make_trip()}))
    result = run_cli("validate", "t.zip", cwd=tmp_path)
    assert result.returncode == 1
    assert "too large" in result.stderr


def test_plan_yaml(tmp_path, make_zip, make_trip):
    (tmp_path / "t.zip").write_bytes(make_zip({
        "viaggi.json": make_trip(),
        "media/hero.jpg": b"h",
        "tappe/01-bolzano-ortisei/tappa.gpx": "<gpx/>",
    }))

    result = run_cli("plan", "t.zip", cwd=tmp_path)

    assert result.returncode == 0
    plan = yaml.safe_load(result.stdout)
    assert plan["trip_count"] == 1
    trip = plan["trips"][0]
    assert trip["hero"] == "hero.jpg"
    assert trip["stages"][0]["gpx"] == "tappa.gpx"
    assert trip["stages"][0]["order_index"] == 0


def test_apply_requires_confirm(tmp_path, make_zip, make_trip):
    (tmp_path / "t.zip").write_bytes(make_zip({"viaggi.json": make_trip()}))
    result = run_cli("apply", "t.zip", cwd=tmp_path)
    assert result.returncode == 1
    assert "--confirm" in result.stderr
    assert not (tmp_path / "tripbatch.sqlite").exists()


def test_apply_and_ls(tmp_path, make_zip, make_trip):
    (tmp_path / "t.zip").write_bytes(make_zip({
        "viaggi.json": make_trip(),
        "media/hero.jpg": b"h",
        "tappe/01-bolzano-ortisei/tappa.gpx": "<gpx/>",
    }))
    common = ["--storage", "store", "--db", "trips.sqlite"]

    result = run_cli(*common, "--json", "apply", "t.zip", "--confirm", "--user", "u1", cwd=tmp_path)

    assert result.returncode == 0, result.stderr
    job = json.loads(result.stdout)
    assert job["status"] == "completed"
    assert job["isComplete"] is True
    assert len(job["createdTripIds"]) == 1
    assert len(list((tmp_path / "store").iterdir())) == 2

    result = run_cli(*common, "--json", "ls", cwd=tmp_path)
    trips = json.loads(result.stdout)
    assert [t["slug"] for t in trips] == ["giro-delle-dolomiti"]
    assert trips[0]["stage_count"] == 1
    assert trips[0]["user_id"] == "u1"


def test_apply_duplicate_fails(tmp_path, make_zip, make_trip):
    (tmp_path / "t.zip").write_bytes(make_zip({"viaggi.json": make_trip()}))
    assert run_cli("apply", "t.zip", "--confirm", cwd=tmp_path).returncode == 0

    result = run_cli("apply", "t.zip", "--confirm", cwd=tmp_path)

    assert result.returncode == 1
    assert "already exists" in result.stdout
