import math
import re
import uuid
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple, Union

from models.models import Coordinates, Problem

# EWKT/WKT point, e.g. "POINT(77.59 12.97)" or "SRID=4326;POINT (77.59 12.97)"
WKT_POINT_RE = re.compile(
    r"^\s*(?:SRID=\d+\s*;\s*)?POINT\s*\(\s*(\S+)\s+(\S+)\s*\)\s*$", re.IGNORECASE
)

NULL_COORDINATES = Coordinates(latitude=None, longitude=None)


@dataclass(frozen=True)
class GeoJsonPoint:
    longitude: Any
    latitude: Any


@dataclass(frozen=True)
class WktPoint:
    longitude: Any
    latitude: Any


LocationEncoding = Union[GeoJsonPoint, WktPoint, None]


def to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        out = float(value)
    except (TypeError, ValueError):
        return None
    return out if math.isfinite(out) else None


def classify_location(location: Any) -> LocationEncoding:
    """Resolve a polymorphic `location` value to one of the known encodings.

    Structural (GeoJSON-like mapping) is tried before textual (WKT). Anything
    else resolves to None.
    """
    if isinstance(location, Mapping):
        coords = location.get("coordinates")
        if isinstance(coords, (list, tuple)) and len(coords) >= 2:
            return GeoJsonPoint(longitude=coords[0], latitude=coords[1])
        return None
    if isinstance(location, str):
        match = WKT_POINT_RE.match(location)
        if match:
            return WktPoint(longitude=match.group(1), latitude=match.group(2))
    return None


def _explicit_pair(raw: Mapping[str, Any]) -> Optional[Tuple[float, float]]:
    lat = to_float(raw.get("latitude"))
    lng = to_float(raw.get("longitude"))
    if lat is None or lng is None:
        return None
    return lat, lng


def normalize_location(raw: Optional[Mapping[str, Any]]) -> Coordinates:
    """Return canonical coordinates for a raw row. Never raises."""
    if not isinstance(raw, Mapping):
        return NULL_COORDINATES

    explicit = _explicit_pair(raw)
    if explicit:
        return Coordinates(latitude=explicit[0], longitude=explicit[1])

    encoded = classify_location(raw.get("location"))
    if encoded is None:
        return NULL_COORDINATES

    lat = to_float(encoded.latitude)
    lng = to_float(encoded.longitude)
    if lat is None or lng is None:
        return NULL_COORDINATES
    return Coordinates(latitude=lat, longitude=lng)


def _to_int(value: Any) -> int:
    number = to_float(value)
    return int(number) if number is not None else 0


def normalize_problem(raw: Mapping[str, Any]) -> Problem:
    """Build a Problem from a raw backend row, dropping the `location` column."""
    coords = normalize_location(raw)
    fields = {
        k: str(raw[k])
        for k in ("title", "description", "category", "status", "created_at")
        if raw.get(k) is not None
    }
    pincode = raw.get("pincode")
    return Problem(
        id=str(raw.get("id") or f"problem-{uuid.uuid4().hex}"),
        votes_count=_to_int(raw.get("votes_count")),
        comments_count=_to_int(raw.get("comments_count")),
        latitude=coords.latitude,
        longitude=coords.longitude,
        pincode=str(pincode) if pincode is not None else None,
        **fields,
    )
