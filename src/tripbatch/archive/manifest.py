"""viaggi.json decoding and schema validation."""

from __future__ import annotations

import json
from datetime import date, datetime
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..core.errors import FieldViolation, InvalidManifestJson, ManifestSchemaError, MissingManifest
from .reader import ArchiveHandle
from .validate import find_manifest_path

MAX_TRIPS = 10
MAX_STAGES = 20


class Season(str, Enum):
    PRIMAVERA = "Primavera"
    ESTATE = "Estate"
    AUTUNNO = "Autunno"
    INVERNO = "Inverno"


class Characteristic(str, Enum):
    STRADE_STERRATE = "Strade sterrate"
    CURVE_STRETTE = "Curve strette"
    PRESENZA_PEDAGGI = "Presenza pedaggi"
    PRESENZA_TRAGHETTI = "Presenza traghetti"
    AUTOSTRADA = "Autostrada"
    BEL_PAESAGGIO = "Bel paesaggio"
    VISITA_PROLUNGATA = "Visita prolungata"
    INTERESSE_GASTRONOMICO = "Interesse gastronomico"
    INTERESSE_STORICO_CULTURALE = "Interesse storico-culturale"


class StageManifest(BaseModel):
    """One entry of a trip's `stages` list. Every field is optional."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    title: str | None = Field(default=None, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    route_type: str | None = Field(default=None, alias="routeType", max_length=100)
    duration: str | None = Field(default=None, max_length=50)


class TripManifest(BaseModel):
    """Metadata of a single trip, as written in viaggi.json."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    title: str = Field(..., min_length=3, max_length=100)
    summary: str = Field(..., min_length=10, max_length=6000)
    destination: str = Field(..., min_length=1, max_length=100)
    theme: str = Field(..., min_length=1, max_length=100)
    characteristics: list[Characteristic] = Field(default_factory=list)
    recommended_seasons: list[Season] = Field(..., min_length=1)
    tags: list[Annotated[str, Field(min_length=1)]] = Field(default_factory=list)
    travel_date: date | None = Field(default=None, alias="travelDate")
    stages: list[StageManifest] = Field(..., min_length=1, max_length=MAX_STAGES)

    @field_validator("travel_date", mode="before")
    @classmethod
    def parse_travel_date(cls, v: Any) -> Any:
        # Accept plain dates and full ISO datetimes; keep only the day.
        if not isinstance(v, str):
            return v
        try:
            return date.fromisoformat(v)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(v.replace("Z", "+00:00")).date()
        except ValueError:
            raise ValueError("must be an ISO-8601 date or datetime") from None


class MultiTripManifest(BaseModel):
    """`{"viaggi": [...]}` form holding several trips."""

    model_config = ConfigDict(extra="ignore")

    viaggi: list[TripManifest] = Field(..., min_length=1, max_length=MAX_TRIPS)


Manifest = TripManifest | MultiTripManifest


def is_multi_trip(data: Any) -> bool:
    """Multi-trip iff the object carries a `viaggi` key holding a list."""
    return isinstance(data, dict) and isinstance(data.get("viaggi"), list)


def manifest_trips(manifest: Manifest) -> list[TripManifest]:
    if isinstance(manifest, MultiTripManifest):
        return list(manifest.viaggi)
    return [manifest]


def read_manifest_json(handle: ArchiveHandle) -> Any:
    """Decode viaggi.json without validating its shape."""
    path = find_manifest_path(handle)
    if path is None:
        raise MissingManifest()
    try:
        text = handle.read_text(path)
    except UnicodeDecodeError as e:
        raise InvalidManifestJson(f"{path} is not UTF-8 text: {e}") from e
    try:
        return json.loads(text or "")
    except json.JSONDecodeError as e:
        raise InvalidManifestJson(
            f"{path} is not valid JSON (line {e.lineno}, column {e.colno}): {e.msg}"
        ) from e


def validate_manifest(data: Any) -> Manifest:
    """
    Validate decoded JSON against the manifest schema.

    All violations are collected in one pass and raised together as a
    ManifestSchemaError.
    """
    if not isinstance(data, dict):
        raise ManifestSchemaError([FieldViolation("", "manifest must be a JSON object")])

    model: type[BaseModel] = MultiTripManifest if is_multi_trip(data) else TripManifest
    try:
        return model.model_validate(data)  # type: ignore[return-value]
    except ValidationError as e:
        raise ManifestSchemaError(_violations(e)) from e


def parse_manifest(handle: ArchiveHandle) -> Manifest:
    return validate_manifest(read_manifest_json(handle))


def _violations(error: ValidationError) -> list[FieldViolation]:
    out = []
    for item in error.errors():
        path = ".".join(str(part) for part in item["loc"])
        out.append(FieldViolation(path=path, message=item["msg"]))
    return out
