# tracklens/models.py
"""
Value types shared by the metrics and map projection engines.

Everything here is a frozen dataclass (or an enum). Point sources build
LocationPoints; the engines hand back TrackMetrics, MapMarkers and Viewports.
Nothing in this module is mutated after construction.
"""

from __future__ import annotations

import datetime as dt
import enum
import math
from dataclasses import dataclass, field
from typing import Optional


def as_utc(t: Optional[dt.datetime]) -> Optional[dt.datetime]:
    """Treat a naive datetime as UTC; aware ones pass through unchanged."""
    if t is not None and t.tzinfo is None:
        return t.replace(tzinfo=dt.timezone.utc)
    return t


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class LocationPoint:
    """
    A single recorded fix.

    Out-of-range coordinates are accepted at construction time; use
    `is_usable` to decide whether a point can take part in distance or
    viewport math.
    """

    latitude: float
    longitude: float
    altitude: Optional[float] = 0.0
    timestamp: Optional[dt.datetime] = None
    comment: Optional[str] = None
    image_reference: Optional[str] = None

    def __post_init__(self) -> None:
        # Missing or non-finite altitude is treated as sea level.
        if self.altitude is None or not math.isfinite(self.altitude):
            object.__setattr__(self, "altitude", 0.0)
        object.__setattr__(self, "timestamp", as_utc(self.timestamp))

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)

    @property
    def is_usable(self) -> bool:
        lat, lon = self.latitude, self.longitude
        if not (math.isfinite(lat) and math.isfinite(lon)):
            return False
        return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


@dataclass(frozen=True)
class TrackMetrics:
    """Aggregate statistics for an ordered point list."""

    total_distance_meters: float = 0.0
    total_duration_seconds: float = 0.0
    average_speed_meters_per_second: float = 0.0
    total_ascent_meters: float = 0.0
    total_descent_meters: float = 0.0
    min_altitude_meters: Optional[float] = None
    max_altitude_meters: Optional[float] = None
    point_count: int = 0
    max_speed_meters_per_second: float = 0.0


class MarkerRole(str, enum.Enum):
    START = "start"
    END = "end"
    INTERMEDIATE = "intermediate"
    SINGLE = "single"


@dataclass(frozen=True)
class MapMarker:
    coordinate: Coordinate
    role: MarkerRole
    image_reference: Optional[str] = None

    @property
    def is_intermediate(self) -> bool:
        return self.role is MarkerRole.INTERMEDIATE


@dataclass(frozen=True)
class Span:
    latitude_delta: float
    longitude_delta: float


@dataclass(frozen=True)
class Viewport:
    """Map center plus visible angular span, in degrees."""

    center: Coordinate
    span: Span

    def contains(self, coordinate: Coordinate, *, tolerance: float = 1e-9) -> bool:
        half_lat = self.span.latitude_delta / 2.0
        half_lon = self.span.longitude_delta / 2.0
        return (
            abs(coordinate.latitude - self.center.latitude) <= half_lat + tolerance
            and abs(coordinate.longitude - self.center.longitude) <= half_lon + tolerance
        )


class SessionType(str, enum.Enum):
    WALK = "walk"
    RUN = "run"
    TRAIN = "train"
    BUS = "bus"
    BICYCLE = "bicycle"
    FLIGHT = "flight"
    CAR = "car"
    UNKNOWN = "unknown"

    @classmethod
    def safe_from(cls, value: Optional[str]) -> "SessionType":
        """Map a stored activity string to a SessionType, never raising."""
        if not value:
            return cls.UNKNOWN
        key = value.strip().lower()
        if key in _SESSION_TYPE_ALIASES:
            return _SESSION_TYPE_ALIASES[key]
        try:
            return cls(key)
        except ValueError:
            return cls.UNKNOWN


# Spellings stored by earlier app builds.
_SESSION_TYPE_ALIASES = {
    "gehen": SessionType.WALK,
    "laufen": SessionType.RUN,
    "bahn": SessionType.TRAIN,
    "fahrad": SessionType.BICYCLE,
    "fahrrad": SessionType.BICYCLE,
    "fliegen": SessionType.FLIGHT,
    "auto": SessionType.CAR,
}


@dataclass(frozen=True)
class Session:
    """A bounded interval of points recorded as one trip."""

    name: Optional[str] = None
    session_type: SessionType = SessionType.UNKNOWN
    start_time: Optional[dt.datetime] = None
    end_time: Optional[dt.datetime] = None
    points: tuple[LocationPoint, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "start_time", as_utc(self.start_time))
        object.__setattr__(self, "end_time", as_utc(self.end_time))
