from typing import Protocol

from .model import TripRecord


class StorageProvider(Protocol):
    """
    Binary asset store. The pipeline only needs put(); retries, CDNs and
    provider selection live behind this seam.
    """

    def put(self, data: bytes, filename: str) -> str:
        """Store data under a name derived from filename; return its public URL.

        Raises StorageError on failure.
        """
        pass


class TripRepository(Protocol):
    """
    Relational store for trips. create_with_stages MUST be all-or-nothing:
    once the trip is visible, all of its stages are.
    """

    def create_with_stages(self, record: TripRecord) -> str:
        """Persist trip and stages; return the new trip id.

        Raises PersistenceError on failure.
        """
        pass


class IdGenerator(Protocol):
    def new_id(self) -> str:
        pass
