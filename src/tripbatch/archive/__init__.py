"""Archive reading, validation and extraction."""

from .manifest import parse_manifest
from .media import classify_media
from .reader import ArchiveHandle
from .template import build_template_archive
from .validate import validate_zip_structure
from .walker import parse

__all__ = [
    "ArchiveHandle",
    "validate_zip_structure",
    "parse_manifest",
    "parse",
    "classify_media",
    "build_template_archive",
]
