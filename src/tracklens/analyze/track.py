# tracklens/analyze/track.py
"""
Track metrics for tracklens

Pure functions: an ordered list of LocationPoints in, TrackMetrics out.
No state survives between calls, so the same input always yields the same
result and callers may compute from several threads at once.
"""

from __future__ import annotations

import datetime as dt
import functools
from typing import Iterable, Optional, Sequence

from haversine import haversine, Unit

from tracklens.config import DurationStart, MetricsConfig
from tracklens.models import LocationPoint, Session, TrackMetrics, as_utc


def segment_distance_m(p0: LocationPoint, p1: LocationPoint) -> float:
    return haversine((p0.latitude, p0.longitude), (p1.latitude, p1.longitude), unit=Unit.METERS)


def order_points(points: Iterable[LocationPoint], *, sort: bool = True) -> list[LocationPoint]:
    """
    Drop unusable points and put the rest in timestamp order.

    Sorting only happens when every point carries a timestamp; otherwise the
    caller's order is kept as-is. The sort is stable, so equal timestamps
    keep their relative order.
    """
    usable = [p for p in points if p.is_usable]
    if sort and all(p.timestamp is not None for p in usable):
        usable.sort(key=lambda p: p.timestamp)
    return usable


def compute_step_metrics(points: Sequence[LocationPoint]):
    """Return per-segment dt (s), distance (m), speed (m/s)."""
    dts = []
    ds = []
    vs = []

    for p0, p1 in zip(points, points[1:]):
        if p0.timestamp is None or p1.timestamp is None:
            continue
        dt_s = (p1.timestamp - p0.timestamp).total_seconds()
        if dt_s <= 0:
            continue

        d_m = segment_distance_m(p0, p1)

        dts.append(dt_s)
        ds.append(d_m)
        vs.append(d_m / dt_s)

    return dts, ds, vs


def total_distance_m(points: Sequence[LocationPoint]) -> float:
    return sum(segment_distance_m(p0, p1) for p0, p1 in zip(points, points[1:]))


def altitude_profile(points: Sequence[LocationPoint]) -> tuple[float, float, Optional[float], Optional[float]]:
    """
    Return (ascent, descent, min_alt, max_alt).

    min/max are seeded from the first point, so a flat or single-point track
    reports its real altitude. Flat steps count toward neither total.
    """
    if not points:
        return 0.0, 0.0, None, None

    ascent = 0.0
    descent = 0.0
    min_alt = max_alt = points[0].altitude

    for p0, p1 in zip(points, points[1:]):
        delta = p1.altitude - p0.altitude
        if delta > 0:
            ascent += delta
        elif delta < 0:
            descent += -delta
        min_alt = min(min_alt, p1.altitude)
        max_alt = max(max_alt, p1.altitude)

    return ascent, descent, min_alt, max_alt


def _resolve_start(
    ordered: Sequence[LocationPoint],
    session_start: Optional[dt.datetime],
    config: MetricsConfig,
) -> Optional[dt.datetime]:
    if config.duration_start is DurationStart.SESSION_START and session_start is not None:
        return session_start
    return ordered[0].timestamp


def compute_metrics(
    points: Iterable[LocationPoint],
    *,
    session_start: Optional[dt.datetime] = None,
    session_end: Optional[dt.datetime] = None,
    config: MetricsConfig = MetricsConfig(),
) -> TrackMetrics:
    """
    Compute aggregate statistics for a track.

    Fewer than two points, or no resolvable start time, gives the trivial
    result: zero distance, duration and speed. Altitude figures are still
    filled from whatever points exist.

    Duration runs from the start time (first fix, or `session_start` when
    configured for it) to `session_end`, falling back to the last fix and
    then to the start itself.
    """
    # Points normalize their own timestamps; naive session bounds are read as UTC too.
    session_start = as_utc(session_start)
    session_end = as_utc(session_end)
    ordered = order_points(points, sort=config.sort_points)
    ascent, descent, min_alt, max_alt = altitude_profile(ordered)

    start = _resolve_start(ordered, session_start, config) if ordered else None
    if len(ordered) < 2 or start is None:
        return TrackMetrics(
            total_ascent_meters=ascent,
            total_descent_meters=descent,
            min_altitude_meters=min_alt,
            max_altitude_meters=max_alt,
            point_count=len(ordered),
        )

    distance = total_distance_m(ordered)

    end = session_end or ordered[-1].timestamp or start
    duration = max(0.0, (end - start).total_seconds())
    avg_speed = distance / duration if duration > 0 else 0.0

    _dts, _ds, vs = compute_step_metrics(ordered)

    return TrackMetrics(
        total_distance_meters=distance,
        total_duration_seconds=duration,
        average_speed_meters_per_second=avg_speed,
        total_ascent_meters=ascent,
        total_descent_meters=descent,
        min_altitude_meters=min_alt,
        max_altitude_meters=max_alt,
        point_count=len(ordered),
        max_speed_meters_per_second=max(vs) if vs else 0.0,
    )


def compute_session_metrics(session: Session, config: MetricsConfig = MetricsConfig()) -> TrackMetrics:
    return compute_metrics(
        session.points,
        session_start=session.start_time,
        session_end=session.end_time,
        config=config,
    )


@functools.lru_cache(maxsize=128)
def compute_metrics_cached(
    points: tuple[LocationPoint, ...],
    session_start: Optional[dt.datetime] = None,
    session_end: Optional[dt.datetime] = None,
    config: MetricsConfig = MetricsConfig(),
) -> TrackMetrics:
    # Keyed on the tuple's content: LocationPoint is frozen and hashes by value.
    return compute_metrics(
        points, session_start=session_start, session_end=session_end, config=config
    )
