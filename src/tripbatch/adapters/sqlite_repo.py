"""SQLite-backed trip repository."""

import json
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..core.errors import DuplicateTrip, PersistenceError
from ..core.model import TripRecord
from ..core.ports import IdGenerator, TripRepository
from .idgen import HexId


@dataclass
class SQLiteTripRepository(TripRepository):
    """
    Trips and their stages in two tables.

    A trip and all of its stages are inserted in a single transaction, so a
    reader never sees a trip with only part of its stages.
    """

    db_path: Path
    idgen: IdGenerator = field(default_factory=HexId)

    def __post_init__(self) -> None:
        self._init_schema()

    def _conn(self) -> sqlite3.Connection:
        """Get a connection to the SQLite database."""
        conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        conn.execute("PRAGMA foreign_keys=ON")
        conn.execute("PRAGMA journal_mode=WAL")
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        """Create tables if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._conn()
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS trips (
                    id TEXT PRIMARY KEY,
                    slug TEXT NOT NULL UNIQUE,
                    title TEXT NOT NULL,
                    summary TEXT NOT NULL,
                    destination TEXT NOT NULL,
                    theme TEXT NOT NULL,
                    characteristics TEXT NOT NULL,
                    recommended_seasons TEXT NOT NULL,
                    tags TEXT NOT NULL,
                    travel_date TEXT,
                    duration_days INTEGER NOT NULL,
                    duration_nights INTEGER NOT NULL,
                    media TEXT NOT NULL,
                    gpx_file TEXT,
                    user_id TEXT,
                    created_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS stages (
                    id TEXT PRIMARY KEY,
                    trip_id TEXT NOT NULL,
                    order_index INTEGER NOT NULL,
                    title TEXT NOT NULL,
                    description TEXT,
                    route_type TEXT,
                    duration TEXT,
                    media TEXT NOT NULL,
                    gpx_file TEXT,
                    UNIQUE (trip_id, order_index),
                    FOREIGN KEY (trip_id) REFERENCES trips(id) ON DELETE CASCADE
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS stages_trip_idx ON stages(trip_id)")
            conn.commit()
        finally:
            conn.close()

    def create_with_stages(self, record: TripRecord) -> str:
        trip_id = self.idgen.new_id()
        conn = self._conn()
        try:
            with conn:  # commit on success, rollback on any exception
                conn.execute(
                    """
                    INSERT INTO trips (
                        id, slug, title, summary, destination, theme,
                        characteristics, recommended_seasons, tags, travel_date,
                        duration_days, duration_nights, media, gpx_file, user_id, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        trip_id,
                        record.slug,
                        record.title,
                        record.summary,
                        record.destination,
                        record.theme,
                        json.dumps(record.characteristics, ensure_ascii=False),
                        json.dumps(record.recommended_seasons, ensure_ascii=False),
                        json.dumps(record.tags, ensure_ascii=False),
                        record.travel_date.isoformat() if record.travel_date else None,
                        record.duration_days,
                        record.duration_nights,
                        json.dumps([m.to_dict() for m in record.media]),
                        json.dumps(record.gpx_file.to_dict()) if record.gpx_file else None,
                        record.user_id,
                        datetime.now(timezone.utc).isoformat(),
                    ),
                )
                for stage in record.stages:
                    conn.execute(
                        """
                        INSERT INTO stages (
                            id, trip_id, order_index, title, description,
                            route_type, duration, media, gpx_file
                        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                        """,
                        (
                            self.idgen.new_id(),
                            trip_id,
                            stage.order_index,
                            stage.title,
                            stage.description,
                            stage.route_type,
                            stage.duration,
                            json.dumps([m.to_dict() for m in stage.media]),
                            json.dumps(stage.gpx_file.to_dict()) if stage.gpx_file else None,
                        ),
                    )
        except sqlite3.IntegrityError as e:
            if "trips.slug" in str(e):
                raise DuplicateTrip(record.slug) from e
            raise PersistenceError(f"could not create trip '{record.title}': {e}") from e
        except sqlite3.Error as e:
            raise PersistenceError(f"could not create trip '{record.title}': {e}") from e
        finally:
            conn.close()
        return trip_id

    def get_trip(self, trip_id: str) -> dict[str, Any] | None:
        """Trip row with decoded JSON columns and its ordered stages."""
        conn = self._conn()
        try:
            row = conn.execute("SELECT * FROM trips WHERE id = ?", (trip_id,)).fetchone()
            if row is None:
                return None
            trip = _decode(dict(row), ("characteristics", "recommended_seasons", "tags", "media", "gpx_file"))
            stages = conn.execute(
                "SELECT * FROM stages WHERE trip_id = ? ORDER BY order_index", (trip_id,)
            ).fetchall()
            trip["stages"] = [_decode(dict(s), ("media", "gpx_file")) for s in stages]
            return trip
        finally:
            conn.close()

    def list_trips(self) -> list[dict[str, Any]]:
        """Summary rows (id, slug, title, stage count) in creation order."""
        conn = self._conn()
        try:
            rows = conn.execute("""
                SELECT t.id, t.slug, t.title, t.user_id, t.created_at,
                       COUNT(s.id) AS stage_count
                FROM trips t LEFT JOIN stages s ON s.trip_id = t.id
                GROUP BY t.id
                ORDER BY t.created_at, t.rowid
            """).fetchall()
            return [dict(r) for r in rows]
        finally:
            conn.close()


def _decode(row: dict[str, Any], columns: tuple[str, ...]) -> dict[str, Any]:
    for col in columns:
        if row.get(col) is not None:
            row[col] = json.loads(row[col])
    return row
