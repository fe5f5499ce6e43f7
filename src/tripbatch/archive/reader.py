"""Read-only access to an uploaded ZIP archive."""

from __future__ import annotations

import io
import logging
import zipfile
import zlib
from collections.abc import Iterator

from ..core.errors import MalformedArchive
from ..core.model import RawArchiveEntry

logger = logging.getLogger(__name__)


def normalize_path(name: str) -> str:
    """Forward slashes, no leading slash. Case is preserved."""
    return name.replace("\\", "/").lstrip("/")


class ArchiveHandle:
    """
    In-memory view of a ZIP archive.

    Entries are kept in archive listing order. Directory entries keep their
    trailing slash and have no content.
    """

    def __init__(self, entries: dict[str, bytes | None]):
        self._entries = entries

    @classmethod
    def load(cls, buffer: bytes) -> "ArchiveHandle":
        """Open a ZIP byte buffer; raise MalformedArchive if it is not one."""
        try:
            with zipfile.ZipFile(io.BytesIO(buffer)) as zf:
                entries: dict[str, bytes | None] = {}
                for info in zf.infolist():
                    path = normalize_path(info.filename)
                    if not path:
                        continue
                    entries[path] = None if info.is_dir() else zf.read(info)
        except (zipfile.BadZipFile, zipfile.LargeZipFile, zlib.error) as e:
            raise MalformedArchive(f"not a valid ZIP archive: {e}") from e
        except (EOFError, OSError, NotImplementedError) as e:
            raise MalformedArchive(f"could not read ZIP archive: {e}") from e

        logger.debug("Loaded archive with %d entries", len(entries))
        return cls(entries)

    def list_paths(self) -> list[str]:
        return list(self._entries)

    def read_bytes(self, path: str) -> bytes | None:
        return self._entries.get(normalize_path(path))

    def read_text(self, path: str) -> str | None:
        data = self.read_bytes(path)
        if data is None:
            return None
        return data.decode("utf-8-sig")

    def exists(self, path: str) -> bool:
        return self.read_bytes(path) is not None

    def has_path_with_prefix(self, prefix: str) -> bool:
        prefix = normalize_path(prefix)
        return any(p.startswith(prefix) for p in self._entries)

    def iter_entries(self) -> Iterator[RawArchiveEntry]:
        """Yield file entries (directories skipped) in listing order."""
        for path, data in self._entries.items():
            if data is not None:
                yield RawArchiveEntry(path=path, data=data)

    def direct_files(self, folder: str) -> list[str]:
        """File paths directly inside folder (not in sub-folders), listing order."""
        folder = _as_folder(folder)
        out = []
        for path, data in self._entries.items():
            if data is None or not path.startswith(folder):
                continue
            if "/" not in path[len(folder):]:
                out.append(path)
        return out

    def child_folders(self, folder: str) -> list[str]:
        """
        Names of the immediate sub-folders of folder, in order of first
        appearance. Folders implied by file paths count even when the archive
        has no explicit directory entry for them.
        """
        folder = _as_folder(folder)
        seen: dict[str, None] = {}
        for path in self._entries:
            if not path.startswith(folder):
                continue
            rest = path[len(folder):]
            name, sep, _ = rest.partition("/")
            if sep and name:
                seen.setdefault(name, None)
        return list(seen)


def _as_folder(folder: str) -> str:
    folder = normalize_path(folder)
    if folder and not folder.endswith("/"):
        folder += "/"
    return folder
