"""Tests for configuration loading."""

import os
from pathlib import Path

from tripbatch.config import load_config


def test_load_config_defaults(tmp_path, monkeypatch):
    """Test loading config with defaults when no file exists."""
    monkeypatch.chdir(tmp_path)
    config = load_config()

    assert config.storage.root == Path("uploads")
    assert config.storage.base_url == "/uploads"
    assert config.database.path == Path("tripbatch.sqlite")
    assert config.limits.max_archive_mb == 100
    assert config.limits.max_archive_bytes == 100 * 1024 * 1024
    assert config.id.bytes == 6
    assert config.logging.level == "INFO"
    assert config.logging.structured is False
    assert config.logging.file is None


def test_load_config_from_file(tmp_path):
    """Test loading config from a file."""
    config_path = tmp_path / "custom.toml"
    config_path.write_text("""
[storage]
root = "assets"
base_url = "https://cdn.example/trips"

[database]
path = "data/trips.db"

[limits]
max_archive_mb = 5

[id]
bytes = 8

[logging]
level = "debug"
structured = true
file = "tripbatch.log"
""")

    config = load_config(config_path=config_path)

    assert config.storage.root == Path("assets")
    assert config.storage.base_url == "https://cdn.example/trips"
    assert config.database.path == Path("data/trips.db")
    assert config.limits.max_archive_bytes == 5 * 1024 * 1024
    assert config.id.bytes == 8
    assert config.logging.level == "DEBUG"
    assert config.logging.structured is True
    assert config.logging.file == "tripbatch.log"


def test_load_config_search_cwd(tmp_path):
    """Test config search in current working directory."""
    orig_cwd = os.getcwd()
    try:
        os.chdir(tmp_path)
        (tmp_path / "tripbatch.toml").write_text("""
[id]
bytes = 10
""")

        config = load_config()
        assert config.id.bytes == 10
        assert config.limits.max_archive_mb == 100
    finally:
        os.chdir(orig_cwd)


def test_explicit_path_wins_over_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "tripbatch.toml").write_text("[id]\nbytes = 10\n")
    other = tmp_path / "other.toml"
    other.write_text("[id]\nbytes = 4\n")

    assert load_config(config_path=other).id.bytes == 4


def test_missing_explicit_path_falls_back(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "tripbatch.toml").write_text("[limits]\nmax_archive_mb = 1\n")
    config = load_config(config_path=tmp_path / "nope.toml")
    assert config.limits.max_archive_mb == 1
