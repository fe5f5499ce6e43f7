"""Runtime wiring helper for CLI applications."""

from dataclasses import dataclass
from pathlib import Path

from .adapters.fs_storage import LocalStorage
from .adapters.idgen import HexId
from .adapters.sqlite_repo import SQLiteTripRepository
from .batch.jobs import BatchRunner, JobTracker
from .config import TripBatchConfig, load_config


@dataclass
class Runtime:
    """Container for all wired components."""
    storage: LocalStorage
    repository: SQLiteTripRepository
    tracker: JobTracker
    runner: BatchRunner
    config: TripBatchConfig


def build_runtime(
    storage_path: Path | None = None,
    db_path: Path | None = None,
    config_path: Path | None = None,
    background: bool = True,
) -> Runtime:
    """Build and wire all components."""
    config = load_config(config_path=config_path)

    # CLI arguments win over the config file
    if storage_path is None:
        storage_path = config.storage.root
    if db_path is None:
        db_path = config.database.path

    storage = LocalStorage(storage_path, base_url=config.storage.base_url)
    repository = SQLiteTripRepository(db_path=db_path, idgen=HexId(nbytes=config.id.bytes))
    tracker = JobTracker()
    runner = BatchRunner(storage, repository, tracker=tracker, background=background)

    return Runtime(
        storage=storage,
        repository=repository,
        tracker=tracker,
        runner=runner,
        config=config,
    )
