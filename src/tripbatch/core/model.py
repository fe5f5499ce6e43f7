from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Literal

JobStatus = Literal["pending", "processing", "completed", "failed"]


@dataclass(frozen=True)
class RawArchiveEntry:
    path: str  # posix, no leading slash
    data: bytes


@dataclass
class ParsedMediaAsset:
    filename: str
    mime_type: str
    data: bytes
    is_hero: bool = False


@dataclass
class ParsedGpxAsset:
    filename: str
    data: bytes  # not checked for well-formedness here


@dataclass
class ParsedStage:
    order_index: int
    title: str
    folder_name: str
    description: str | None = None
    route_type: str | None = None
    duration: str | None = None
    media: list[ParsedMediaAsset] = field(default_factory=list)
    gpx_file: ParsedGpxAsset | None = None


@dataclass
class ParsedTrip:
    title: str
    summary: str
    destination: str
    theme: str
    characteristics: list[str] = field(default_factory=list)
    recommended_seasons: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    travel_date: date | None = None
    stages: list[ParsedStage] = field(default_factory=list)
    media: list[ParsedMediaAsset] = field(default_factory=list)
    gpx_file: ParsedGpxAsset | None = None
    folder_name: str = ""  # "" for single-trip batches

    @property
    def hero(self) -> ParsedMediaAsset | None:
        return next((m for m in self.media if m.is_hero), None)


@dataclass
class ParsedBatch:
    metadata: dict[str, Any]  # manifest as decoded, before normalization
    trips: list[ParsedTrip] = field(default_factory=list)

    @property
    def is_multi(self) -> bool:
        return isinstance(self.metadata.get("viaggi"), list)


# Records handed to the TripRepository once assets are uploaded.


@dataclass(frozen=True)
class MediaItem:
    type: Literal["image", "video"]
    url: str
    filename: str
    is_hero: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "url": self.url, "filename": self.filename, "isHero": self.is_hero}


@dataclass(frozen=True)
class GpxRef:
    url: str
    filename: str

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url, "filename": self.filename}


@dataclass
class StageRecord:
    order_index: int
    title: str
    description: str | None = None
    route_type: str | None = None
    duration: str | None = None
    media: list[MediaItem] = field(default_factory=list)
    gpx_file: GpxRef | None = None


@dataclass
class TripRecord:
    title: str
    slug: str
    summary: str
    destination: str
    theme: str
    characteristics: list[str] = field(default_factory=list)
    recommended_seasons: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    travel_date: date | None = None
    duration_days: int = 1
    duration_nights: int = 0
    media: list[MediaItem] = field(default_factory=list)
    gpx_file: GpxRef | None = None
    stages: list[StageRecord] = field(default_factory=list)
    user_id: str | None = None


@dataclass(frozen=True)
class TripError:
    trip_index: int | None
    message: str

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"message": self.message}
        if self.trip_index is not None:
            out["tripIndex"] = self.trip_index
        return out


@dataclass
class BatchProcessingResult:
    """Aggregate outcome of applying a ParsedBatch.

    processed_trips + len(errors) == total_trips once the applier returns.
    """

    total_trips: int
    processed_trips: int = 0
    created_trip_ids: list[str] = field(default_factory=list)
    errors: list[TripError] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalTrips": self.total_trips,
            "processedTrips": self.processed_trips,
            "createdTripIds": list(self.created_trip_ids),
            "errors": [e.to_dict() for e in self.errors],
        }


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class BatchJob:
    id: str
    status: JobStatus = "pending"
    user_id: str | None = None
    total_trips: int = 0
    processed_trips: int = 0
    failed_trips: int = 0
    result: BatchProcessingResult | None = None
    error: str | None = None  # fatal failure outside the per-trip loop
    started_at: datetime = field(default_factory=_utcnow)
    completed_at: datetime | None = None

    @property
    def is_complete(self) -> bool:
        return self.status in ("completed", "failed")

    @property
    def has_errors(self) -> bool:
        return self.error is not None or bool(self.result and self.result.errors)

    def progress(self) -> dict[str, int]:
        total = self.total_trips
        done = self.processed_trips
        return {
            "percentage": round(done / total * 100) if total > 0 else 0,
            "completed": done,
            "total": total,
            "remaining": total - done,
        }

    def to_dict(self) -> dict[str, Any]:
        end = self.completed_at or _utcnow()
        errors = [e.to_dict() for e in self.result.errors] if self.result else []
        if self.error:
            errors.append({"message": self.error})
        return {
            "jobId": self.id,
            "status": self.status,
            "totalTrips": self.total_trips,
            "processedTrips": self.processed_trips,
            "createdTripIds": list(self.result.created_trip_ids) if self.result else [],
            "errors": errors,
            "startedAt": self.started_at.isoformat(),
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
            "progress": self.progress(),
            "hasErrors": self.has_errors,
            "isComplete": self.is_complete,
            "durationMs": int((end - self.started_at).total_seconds() * 1000),
        }
