"""Configuration loader for tripbatch.toml."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

CONFIG_NAME = "tripbatch.toml"


@dataclass
class StorageConfig:
    """Local asset storage."""
    root: Path = Path("uploads")
    base_url: str = "/uploads"


@dataclass
class DatabaseConfig:
    """Trip repository location."""
    path: Path = Path("tripbatch.sqlite")


@dataclass
class LimitsConfig:
    """Limits enforced at the upload boundary."""
    max_archive_mb: int = 100

    @property
    def max_archive_bytes(self) -> int:
        return self.max_archive_mb * 1024 * 1024


@dataclass
class IdConfig:
    """ID generation configuration."""
    bytes: int = 6


@dataclass
class LoggingConfig:
    """Logging output."""
    level: str = "INFO"
    structured: bool = False
    file: str | None = None


@dataclass
class TripBatchConfig:
    """Complete tripbatch configuration."""
    storage: StorageConfig
    database: DatabaseConfig
    limits: LimitsConfig
    id: IdConfig
    logging: LoggingConfig


def load_config(config_path: Path | None = None) -> TripBatchConfig:
    """
    Load configuration from tripbatch.toml.

    Search order:
    1. config_path (if provided)
    2. cwd/tripbatch.toml

    Missing files and keys fall back to defaults.
    """
    toml_data: dict[str, Any] = {}

    search_paths = []
    if config_path:
        search_paths.append(config_path)
    search_paths.append(Path.cwd() / CONFIG_NAME)

    for path in search_paths:
        if path.exists():
            with open(path, "rb") as f:
                toml_data = tomllib.load(f)
            break

    storage_data = toml_data.get("storage", {})
    storage_config = StorageConfig(
        root=Path(storage_data.get("root", "uploads")),
        base_url=storage_data.get("base_url", "/uploads"),
    )

    db_data = toml_data.get("database", {})
    database_config = DatabaseConfig(
        path=Path(db_data.get("path", "tripbatch.sqlite")),
    )

    limits_data = toml_data.get("limits", {})
    limits_config = LimitsConfig(
        max_archive_mb=int(limits_data.get("max_archive_mb", 100)),
    )

    id_data = toml_data.get("id", {})
    id_config = IdConfig(
        bytes=id_data.get("bytes", 6)
    )

    log_data = toml_data.get("logging", {})
    logging_config = LoggingConfig(
        level=str(log_data.get("level", "INFO")).upper(),
        structured=bool(log_data.get("structured", False)),
        file=log_data.get("file") or None,
    )

    return TripBatchConfig(
        storage=storage_config,
        database=database_config,
        limits=limits_config,
        id=id_config,
        logging=logging_config,
    )
