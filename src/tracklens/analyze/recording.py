# tracklens/analyze/recording.py
"""
Recording gate: decide whether a new fix is far enough from the last
recorded one to be worth keeping.
"""

from __future__ import annotations

from typing import Iterable, Optional

from tracklens.analyze.track import segment_distance_m
from tracklens.config import RecordingConfig
from tracklens.models import LocationPoint


def should_record_point(
    previous: Optional[LocationPoint],
    candidate: LocationPoint,
    min_displacement_meters: float = RecordingConfig.min_displacement_meters,
) -> bool:
    if not candidate.is_usable:
        return False
    if previous is None or not previous.is_usable:
        return True
    return segment_distance_m(previous, candidate) >= min_displacement_meters


def thin_points(
    points: Iterable[LocationPoint],
    min_displacement_meters: float = RecordingConfig.min_displacement_meters,
) -> list[LocationPoint]:
    """Apply should_record_point across a sequence, always keeping the first usable fix."""
    kept: list[LocationPoint] = []
    for p in points:
        if should_record_point(kept[-1] if kept else None, p, min_displacement_meters):
            kept.append(p)
    return kept
