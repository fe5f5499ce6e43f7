"""Shared fixtures: in-memory archives and fake collaborators."""

import io
import json
import zipfile

import pytest

from tripbatch.core.errors import PersistenceError, StorageError


def build_zip(files: dict[str, bytes | str | dict]) -> bytes:
    """ZIP with entries in the given order; dict values are written as JSON."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, content in files.items():
            if isinstance(content, dict):
                content = json.dumps(content)
            zf.writestr(name, content)
    return buf.getvalue()


def trip_data(**overrides) -> dict:
    """A valid single-trip manifest."""
    data = {
        "title": "Giro delle Dolomiti",
        "summary": "Un giro ad anello tra i passi dolomitici.",
        "destination": "Dolomiti",
        "theme": "Montagna",
        "characteristics": ["Curve strette", "Bel paesaggio"],
        "recommended_seasons": ["Estate"],
        "tags": ["dolomiti"],
        "stages": [{"title": "Bolzano - Ortisei"}],
    }
    data.update(overrides)
    return data


@pytest.fixture
def make_zip():
    return build_zip


@pytest.fixture
def make_trip():
    return trip_data


class FakeStorage:
    """Records uploads; fails for names containing any of fail_on."""

    def __init__(self, fail_on: tuple[str, ...] = ()):
        self.fail_on = fail_on
        self.puts: list[tuple[str, bytes]] = []

    def put(self, data: bytes, filename: str) -> str:
        if any(marker in filename for marker in self.fail_on):
            raise StorageError(f"upload refused for {filename}")
        self.puts.append((filename, data))
        return f"https://cdn.test/{filename}"


class FakeRepository:
    """Keeps created records in memory; fails for titles in fail_titles."""

    def __init__(self, fail_titles: tuple[str, ...] = ()):
        self.fail_titles = fail_titles
        self.records = {}

    def create_with_stages(self, record) -> str:
        if record.title in self.fail_titles:
            raise PersistenceError(f"cannot create {record.title}")
        trip_id = f"trip_{len(self.records) + 1}"
        self.records[trip_id] = record
        return trip_id


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def repository():
    return FakeRepository()


@pytest.fixture
def make_storage():
    return FakeStorage


@pytest.fixture
def make_repository():
    return FakeRepository
