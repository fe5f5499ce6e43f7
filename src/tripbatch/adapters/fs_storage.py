import re
import secrets
from pathlib import Path, PurePosixPath

from ..core.errors import StorageError
from ..core.ports import StorageProvider

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


class LocalStorage(StorageProvider):
    """Writes assets below root; URLs are base_url + stored name."""

    def __init__(self, root: Path, base_url: str = "/uploads"):
        self.root = root
        self.base_url = base_url.rstrip("/")

    def _name(self, filename: str) -> str:
        safe = _UNSAFE.sub("-", PurePosixPath(filename).name).strip("-.") or "file"
        return f"{secrets.token_hex(4)}-{safe}"

    def path_for(self, url: str) -> Path:
        return self.root / url.rsplit("/", 1)[-1]

    def put(self, data: bytes, filename: str) -> str:
        name = self._name(filename)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            tmp = self.root / f".{name}.tmp"
            tmp.write_bytes(data)
            tmp.replace(self.root / name)
        except OSError as e:
            raise StorageError(f"could not store {filename}: {e}") from e
        return f"{self.base_url}/{name}"
