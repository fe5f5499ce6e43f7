"""Error taxonomy for batch trip ingestion."""

from __future__ import annotations

from dataclasses import dataclass

MISSING_MANIFEST_MESSAGE = "missing viaggi.json manifest, add the file at the archive root"
JOB_EXPIRED_MESSAGE = "job expired, retry the upload"


class BatchError(Exception):
    """Base class for every error raised by the ingestion pipeline."""


class MalformedArchive(BatchError):
    """The uploaded bytes are not a readable ZIP archive."""


class MissingManifest(BatchError):
    """The archive has no viaggi.json manifest."""

    def __init__(self, errors: list[str] | None = None):
        self.errors = list(errors or [MISSING_MANIFEST_MESSAGE])
        super().__init__("; ".join(self.errors))


class InvalidManifestJson(BatchError):
    """viaggi.json is present but is not valid JSON."""


@dataclass(frozen=True)
class FieldViolation:
    path: str  # dotted location, e.g. "viaggi.0.title"
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message


class ManifestSchemaError(BatchError):
    """viaggi.json parses but violates the manifest schema.

    Carries every violation found in a single validation pass.
    """

    def __init__(self, violations: list[FieldViolation]):
        self.violations = list(violations)
        lines = "\n".join(f"  - {v}" for v in self.violations)
        super().__init__(f"viaggi.json has {len(self.violations)} schema error(s):\n{lines}")

    @property
    def fields(self) -> list[str]:
        return [v.path for v in self.violations]


class StorageError(BatchError):
    """A binary asset could not be stored."""


class PersistenceError(BatchError):
    """A trip record could not be written to the data store."""


class DuplicateTrip(PersistenceError):
    """A trip with the same slug already exists."""

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"trip already exists, change its title (slug '{slug}')")
