# tracklens/mapping/markers.py
"""
Marker classification and route polyline for map rendering.
"""

from __future__ import annotations

from typing import Sequence

from tracklens.models import Coordinate, LocationPoint, MapMarker, MarkerRole


def marker_role(index: int, count: int) -> MarkerRole:
    if count == 1:
        return MarkerRole.SINGLE
    if index == 0:
        return MarkerRole.START
    if index == count - 1:
        return MarkerRole.END
    return MarkerRole.INTERMEDIATE


def classify_markers(points: Sequence[LocationPoint]) -> list[MapMarker]:
    """
    One marker per point, in input order.

    Role depends only on position; a photo on the point is carried along as
    image_reference and does not change it.
    """
    count = len(points)
    return [
        MapMarker(
            coordinate=p.coordinate,
            role=marker_role(i, count),
            image_reference=p.image_reference,
        )
        for i, p in enumerate(points)
    ]


def route_coordinates(points: Sequence[LocationPoint]) -> list[Coordinate]:
    return [p.coordinate for p in points]


def should_show_route(points: Sequence[LocationPoint]) -> bool:
    return len(points) > 1
