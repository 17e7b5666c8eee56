# tracklens/mapping/viewport.py
"""
Fit a map viewport around a set of points.

The center is the middle of the bounding box (not the centroid and not the
midpoint of first/last fix), so every point stays on screen however unevenly
the route is sampled. Each axis is padded independently and floored at
min_span_degrees so a lone point or a tight cluster still opens at street
level.
"""

from __future__ import annotations

from typing import Iterable, Optional

from tracklens.config import ViewportConfig
from tracklens.models import Coordinate, LocationPoint, Span, Viewport


def compute_viewport(
    points: Iterable[LocationPoint],
    padding_fraction: float = ViewportConfig.padding_fraction,
    min_span_degrees: float = ViewportConfig.min_span_degrees,
) -> Optional[Viewport]:
    """
    Return the viewport for `points`, or None when there is nothing to show.

    The fallback region for an empty map belongs to the caller.
    """
    usable = [p for p in points if p.is_usable]
    if not usable:
        return None

    # Negative padding or span counts as zero.
    padding_fraction = max(0.0, padding_fraction)
    min_span_degrees = max(0.0, min_span_degrees)

    if len(usable) == 1:
        p = usable[0]
        return Viewport(
            center=Coordinate(p.latitude, p.longitude),
            span=Span(min_span_degrees, min_span_degrees),
        )

    lats = [p.latitude for p in usable]
    lons = [p.longitude for p in usable]
    min_lat, max_lat = min(lats), max(lats)
    min_lon, max_lon = min(lons), max(lons)

    return Viewport(
        center=Coordinate((min_lat + max_lat) / 2.0, (min_lon + max_lon) / 2.0),
        span=Span(
            max((max_lat - min_lat) * (1.0 + padding_fraction), min_span_degrees),
            max((max_lon - min_lon) * (1.0 + padding_fraction), min_span_degrees),
        ),
    )


def viewport_from_config(
    points: Iterable[LocationPoint], config: ViewportConfig
) -> Optional[Viewport]:
    return compute_viewport(
        points,
        padding_fraction=config.padding_fraction,
        min_span_degrees=config.min_span_degrees,
    )
