"""Apply phase: upload assets and create trip records."""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..archive.media import media_kind
from ..core.model import (
    BatchProcessingResult,
    GpxRef,
    MediaItem,
    ParsedBatch,
    ParsedGpxAsset,
    ParsedMediaAsset,
    ParsedTrip,
    StageRecord,
    TripError,
    TripRecord,
)
from ..core.ports import StorageProvider, TripRepository
from ..core.utils import slugify

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[BatchProcessingResult], None]


def upload_media(
    assets: list[ParsedMediaAsset],
    prefix: str,
    storage: StorageProvider,
) -> list[MediaItem]:
    """Upload media, hero first, keeping the listing order otherwise."""
    ordered = sorted(assets, key=lambda a: not a.is_hero)
    items = []
    for i, asset in enumerate(ordered):
        url = storage.put(asset.data, f"{prefix}-{i}-{asset.filename}")
        items.append(MediaItem(
            type=media_kind(asset.mime_type),
            url=url,
            filename=asset.filename,
            is_hero=asset.is_hero,
        ))
    return items


def upload_gpx(
    asset: ParsedGpxAsset | None,
    prefix: str,
    storage: StorageProvider,
) -> GpxRef | None:
    if asset is None:
        return None
    url = storage.put(asset.data, f"{prefix}-{asset.filename}")
    logger.debug("Stored GPX %s at %s", asset.filename, url)
    return GpxRef(url=url, filename=asset.filename)


def build_trip_record(
    trip: ParsedTrip,
    trip_index: int,
    storage: StorageProvider,
    user_id: str | None = None,
) -> TripRecord:
    """
    Upload every asset of a trip and return the record to persist.

    Raises whatever the storage raises; nothing is written to the
    repository here.
    """
    prefix = f"trip-{trip_index}"
    media = upload_media(trip.media, prefix, storage)
    gpx = upload_gpx(trip.gpx_file, prefix, storage)

    stages = []
    for stage in trip.stages:
        stage_prefix = f"{prefix}-stage-{stage.order_index}"
        stages.append(StageRecord(
            order_index=stage.order_index,
            title=stage.title,
            description=stage.description or None,
            route_type=stage.route_type or None,
            duration=stage.duration or None,
            media=upload_media(stage.media, stage_prefix, storage),
            gpx_file=upload_gpx(stage.gpx_file, stage_prefix, storage),
        ))

    return TripRecord(
        title=trip.title,
        slug=slugify(trip.title),
        summary=trip.summary,
        destination=trip.destination,
        theme=trip.theme,
        characteristics=list(trip.characteristics),
        recommended_seasons=list(trip.recommended_seasons),
        tags=list(trip.tags),
        travel_date=trip.travel_date,
        duration_days=max(1, len(trip.stages)),
        duration_nights=0,
        media=media,
        gpx_file=gpx,
        stages=stages,
        user_id=user_id,
    )


def apply_batch(
    batch: ParsedBatch,
    storage: StorageProvider,
    repository: TripRepository,
    user_id: str | None = None,
    on_progress: ProgressCallback | None = None,
) -> BatchProcessingResult:
    """
    Persist every trip of a parsed batch, sequentially and in manifest order.

    A failing trip is recorded in result.errors and the loop moves on to the
    next one. on_progress is called after each trip with the running result.
    """
    result = BatchProcessingResult(total_trips=len(batch.trips))

    for index, trip in enumerate(batch.trips):
        logger.info("Processing trip %d/%d: %r", index + 1, result.total_trips, trip.title)
        try:
            record = build_trip_record(trip, index, storage, user_id=user_id)
            trip_id = repository.create_with_stages(record)
        except Exception as e:
            logger.error("Trip %d (%r) failed: %s", index + 1, trip.title, e, exc_info=True)
            result.errors.append(TripError(trip_index=index, message=str(e) or type(e).__name__))
        else:
            result.created_trip_ids.append(trip_id)
            result.processed_trips += 1
            logger.info(
                "Trip %d created with id %s (%d stage(s))", index + 1, trip_id, len(trip.stages)
            )

        if on_progress is not None:
            on_progress(result)

    logger.info(
        "Batch applied: %d created, %d failed",
        result.processed_trips, len(result.errors),
    )
    return result
