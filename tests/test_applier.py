"""Tests for the apply phase."""

from datetime import date

from tripbatch.batch.applier import apply_batch, build_trip_record
from tripbatch.core.model import (
    ParsedBatch,
    ParsedGpxAsset,
    ParsedMediaAsset,
    ParsedStage,
    ParsedTrip,
)


def _trip(title: str, **kwargs) -> ParsedTrip:
    kwargs.setdefault("media", [ParsedMediaAsset("cover.jpg", "image/jpeg", b"img", is_hero=True)])
    return ParsedTrip(
        title=title,
        summary="Un viaggio di prova.",
        destination="Dolomiti",
        theme="Montagna",
        recommended_seasons=["Estate"],
        **kwargs,
    )


def _batch(*trips: ParsedTrip) -> ParsedBatch:
    return ParsedBatch(metadata={"viaggi": [{} for _ in trips]}, trips=list(trips))


def test_per_trip_isolation(make_storage, repository):
    """A failing trip is recorded and the others are still created."""
    storage = make_storage(fail_on=("trip-1-",))
    batch = _batch(_trip("Primo"), _trip("Secondo"), _trip("Terzo"))

    result = apply_batch(batch, storage, repository)

    assert result.total_trips == 3
    assert result.processed_trips == 2
    assert len(result.created_trip_ids) == 2
    assert len(result.errors) == 1
    assert result.errors[0].trip_index == 1
    assert "trip-1-" in result.errors[0].message
    assert [r.title for r in repository.records.values()] == ["Primo", "Terzo"]


def test_persistence_failure_is_per_trip(storage, make_repository):
    repository = make_repository(fail_titles=("Primo",))
    result = apply_batch(_batch(_trip("Primo"), _trip("Secondo")), storage, repository)

    assert result.processed_trips == 1
    assert result.created_trip_ids == ["trip_1"]
    assert result.errors[0].trip_index == 0
    assert result.errors[0].message == "cannot create Primo"
    assert result.to_dict()["errors"] == [{"message": "cannot create Primo", "tripIndex": 0}]


def test_counts_always_add_up(make_storage, make_repository):
    storage = make_storage(fail_on=("trip-0-",))
    repository = make_repository(fail_titles=("Terzo",))
    result = apply_batch(_batch(_trip("Primo"), _trip("Secondo"), _trip("Terzo")), storage, repository)
    assert result.processed_trips + len(result.errors) == result.total_trips
    assert [e.trip_index for e in result.errors] == [0, 2]


def test_progress_after_each_trip(storage, repository):
    seen = []
    apply_batch(
        _batch(_trip("Primo"), _trip("Secondo")),
        storage,
        repository,
        on_progress=lambda r: seen.append((r.processed_trips, len(r.errors))),
    )
    assert seen == [(1, 0), (2, 0)]


def test_empty_batch(storage, repository):
    result = apply_batch(_batch(), storage, repository)
    assert result.total_trips == 0
    assert result.created_trip_ids == []
    assert not result.has_errors


def test_hero_uploaded_first(storage):
    trip = _trip("Giro", media=[
        ParsedMediaAsset("clip.mp4", "video/mp4", b"v"),
        ParsedMediaAsset("hero.jpg", "image/jpeg", b"h", is_hero=True),
        ParsedMediaAsset("other.png", "image/png", b"o"),
    ])

    record = build_trip_record(trip, 0, storage)

    assert [m.filename for m in record.media] == ["hero.jpg", "clip.mp4", "other.png"]
    assert [m.is_hero for m in record.media] == [True, False, False]
    assert [m.type for m in record.media] == ["image", "video", "image"]
    assert [name for name, _ in storage.puts] == [
        "trip-0-0-hero.jpg",
        "trip-0-1-clip.mp4",
        "trip-0-2-other.png",
    ]
    assert record.media[0].url == "https://cdn.test/trip-0-0-hero.jpg"


def test_record_fields(storage):
    """Stages, GPX and derived fields land in the record."""
    trip = _trip(
        "Giro delle Dolomiti",
        tags=["dolomiti"],
        travel_date=date(2024, 7, 15),
        gpx_file=ParsedGpxAsset("main.gpx", b"<gpx/>"),
        stages=[
            ParsedStage(0, "Bolzano - Ortisei", "01-bolzano-ortisei",
                        description="Prima tappa", route_type="Strada statale",
                        gpx_file=ParsedGpxAsset("tappa.gpx", b"<gpx/>"),
                        media=[ParsedMediaAsset("s.jpg", "image/jpeg", b"s")]),
            ParsedStage(1, "Ortisei - Cortina", "02-ortisei-cortina"),
        ],
    )

    record = build_trip_record(trip, 2, storage, user_id="user-1")

    assert record.slug == "giro-delle-dolomiti"
    assert record.user_id == "user-1"
    assert record.travel_date == date(2024, 7, 15)
    assert record.duration_days == 2
    assert record.duration_nights == 0
    assert record.gpx_file.url == "https://cdn.test/trip-2-main.gpx"
    assert record.gpx_file.to_dict() == {"url": "https://cdn.test/trip-2-main.gpx", "filename": "main.gpx"}

    first, second = record.stages
    assert first.order_index == 0
    assert first.title == "Bolzano - Ortisei"
    assert first.description == "Prima tappa"
    assert first.route_type == "Strada statale"
    assert first.gpx_file.url == "https://cdn.test/trip-2-stage-0-tappa.gpx"
    assert first.media[0].url == "https://cdn.test/trip-2-stage-0-0-s.jpg"
    assert not first.media[0].is_hero
    assert second.description is None
    assert second.media == []
    assert second.gpx_file is None


def test_trip_without_stages_lasts_one_day(storage):
    record = build_trip_record(_trip("Giro", media=[]), 0, storage)
    assert record.duration_days == 1
    assert record.media == []
    assert storage.puts == []
