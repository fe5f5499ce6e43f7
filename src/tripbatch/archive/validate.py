"""Structure checks run before any parsing."""

from ..core.errors import MISSING_MANIFEST_MESSAGE
from .reader import ArchiveHandle

MANIFEST_NAME = "viaggi.json"


def find_manifest_path(handle: ArchiveHandle) -> str | None:
    """
    Locate viaggi.json.

    The archive root wins. Otherwise a manifest inside exactly one wrapping
    top-level folder is accepted (what zipping a whole folder produces).
    Archiver metadata folders such as __MACOSX/ do not count as a second
    top-level folder.
    """
    if handle.exists(MANIFEST_NAME):
        return MANIFEST_NAME
    top = [name for name in handle.child_folders("") if not _is_metadata_folder(name)]
    if len(top) == 1:
        nested = f"{top[0]}/{MANIFEST_NAME}"
        if handle.exists(nested):
            return nested
    return None


def _is_metadata_folder(name: str) -> bool:
    # __MACOSX/ and dot folders are added by archivers, never user content
    return name == "__MACOSX" or name.startswith(".")


def archive_base(handle: ArchiveHandle) -> str:
    """Prefix every trip path is resolved against ("" or "<dir>/")."""
    path = find_manifest_path(handle)
    if path is None:
        return ""
    return path[: -len(MANIFEST_NAME)]


def validate_zip_structure(handle: ArchiveHandle) -> list[str]:
    """Return structure errors; an empty list means parsing may proceed.

    Archive size is not checked here, the upload boundary owns that limit.
    """
    errors: list[str] = []
    if find_manifest_path(handle) is None:
        errors.append(MISSING_MANIFEST_MESSAGE)
    return errors
