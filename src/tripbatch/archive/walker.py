"""Walk the archive tree and extract trips, stages and their assets."""

from __future__ import annotations

import logging
from pathlib import PurePosixPath

from ..core.model import ParsedBatch, ParsedGpxAsset, ParsedMediaAsset, ParsedStage, ParsedTrip
from ..core.utils import folder_number, title_from_folder
from .manifest import (
    MultiTripManifest,
    StageManifest,
    TripManifest,
    manifest_trips,
    read_manifest_json,
    validate_manifest,
)
from .media import classify_media, media_kind
from .reader import ArchiveHandle
from .validate import archive_base

logger = logging.getLogger(__name__)

MEDIA_DIR = "media"
STAGES_DIR = "tappe"
TRIP_GPX = "main.gpx"
STAGE_GPX = "tappa.gpx"


def parse(handle: ArchiveHandle) -> ParsedBatch:
    """
    Decode, validate and extract a whole batch.

    Callers are expected to have run validate_zip_structure() first.
    Raises InvalidManifestJson or ManifestSchemaError; a missing trip or
    stage folder is not an error and yields empty assets.
    """
    metadata = read_manifest_json(handle)
    manifest = validate_manifest(metadata)
    base = archive_base(handle)
    trip_manifests = manifest_trips(manifest)

    if isinstance(manifest, MultiTripManifest):
        folders = numbered_folders(handle, base)
    else:
        folders = [""]

    trips = []
    for i, trip_manifest in enumerate(trip_manifests):
        folder = folders[i] if i < len(folders) else None
        if folder is None:
            logger.warning("No numbered folder for trip %d (%r)", i + 1, trip_manifest.title)
        trips.append(extract_trip(handle, base, trip_manifest, folder))

    logger.info("Parsed batch with %d trip(s)", len(trips))
    return ParsedBatch(metadata=metadata, trips=trips)


def numbered_folders(handle: ArchiveHandle, parent: str) -> list[str]:
    """Direct `NN-name` sub-folders of parent, sorted by their number."""
    names = [n for n in handle.child_folders(parent) if folder_number(n) is not None]
    return sorted(names, key=lambda n: (folder_number(n), n))


def extract_trip(
    handle: ArchiveHandle,
    base: str,
    manifest: TripManifest,
    folder: str | None,
) -> ParsedTrip:
    """Build a ParsedTrip; folder is "" for the archive root, None if absent."""
    trip = ParsedTrip(
        title=manifest.title,
        summary=manifest.summary,
        destination=manifest.destination,
        theme=manifest.theme,
        characteristics=[c.value for c in manifest.characteristics],
        recommended_seasons=[s.value for s in manifest.recommended_seasons],
        tags=list(manifest.tags),
        travel_date=manifest.travel_date,
        folder_name=folder or "",
    )
    if folder is None:
        return trip

    root = _join(base, folder)
    trip.media = extract_media(handle, _join(root, MEDIA_DIR), allow_hero=True)
    trip.gpx_file = extract_gpx(handle, _join(root, TRIP_GPX))
    trip.stages = extract_stages(handle, _join(root, STAGES_DIR), manifest.stages)
    return trip


def extract_stages(
    handle: ArchiveHandle,
    stages_dir: str,
    stage_manifests: list[StageManifest],
) -> list[ParsedStage]:
    """
    One stage per numbered folder. Gaps in the numbering are compacted, so
    order_index is the position after sorting, not the folder number.
    Manifest entries are matched to folders by position.
    """
    folders = numbered_folders(handle, stages_dir)
    if len(stage_manifests) > len(folders):
        logger.warning(
            "%s: %d stage(s) in manifest but %d numbered folder(s)",
            stages_dir or "<root>", len(stage_manifests), len(folders),
        )

    stages = []
    for index, folder in enumerate(folders):
        meta = stage_manifests[index] if index < len(stage_manifests) else StageManifest()
        stage_root = _join(stages_dir, folder)
        title = meta.title or title_from_folder(folder) or f"Tappa {index + 1}"
        stages.append(ParsedStage(
            order_index=index,
            title=title,
            folder_name=folder,
            description=meta.description,
            route_type=meta.route_type,
            duration=meta.duration,
            media=extract_media(handle, _join(stage_root, MEDIA_DIR), allow_hero=False),
            gpx_file=extract_gpx(handle, _join(stage_root, STAGE_GPX)),
        ))
    return stages


def extract_media(handle: ArchiveHandle, media_dir: str, allow_hero: bool) -> list[ParsedMediaAsset]:
    """
    Supported images/videos directly inside media_dir, in listing order.

    With allow_hero the first image becomes the hero. Unsupported files are
    skipped.
    """
    assets = []
    hero_taken = not allow_hero
    for path in handle.direct_files(media_dir):
        filename = PurePosixPath(path).name
        mime_type = classify_media(filename)
        if mime_type is None:
            logger.debug("Skipping unsupported media file %s", path)
            continue
        hero = not hero_taken and media_kind(mime_type) == "image"
        if hero:
            hero_taken = True
        assets.append(ParsedMediaAsset(
            filename=filename,
            mime_type=mime_type,
            data=handle.read_bytes(path) or b"",
            is_hero=hero,
        ))
    return assets


def extract_gpx(handle: ArchiveHandle, path: str) -> ParsedGpxAsset | None:
    data = handle.read_bytes(path)
    if data is None:
        return None
    return ParsedGpxAsset(filename=PurePosixPath(path).name, data=data)


def _join(prefix: str, name: str) -> str:
    if not prefix:
        return name
    return f"{prefix.rstrip('/')}/{name}"
