# tracklens/visualize/plot.py
"""
Plotting routines for tracklens
"""

from typing import Optional, Sequence

import matplotlib.pyplot as plt

from tracklens.models import LocationPoint, MapMarker, MarkerRole, Viewport

ROLE_COLORS = {
    MarkerRole.START: "green",
    MarkerRole.END: "blue",
    MarkerRole.INTERMEDIATE: "red",
    MarkerRole.SINGLE: "purple",
}


def plot_track(
    points: Sequence[LocationPoint],
    *,
    markers: Optional[Sequence[MapMarker]] = None,
    viewport: Optional[Viewport] = None,
    ax=None,
    show: bool = False,
):
    if ax is None:
        _fig, ax = plt.subplots(figsize=(8, 6))

    lats = [p.latitude for p in points]
    lons = [p.longitude for p in points]
    if len(points) > 1:
        ax.plot(lons, lats, color="grey", linewidth=1.5, zorder=1)

    for m in markers or ():
        ax.scatter(
            [m.coordinate.longitude],
            [m.coordinate.latitude],
            c=ROLE_COLORS[m.role],
            s=40 if m.role is not MarkerRole.INTERMEDIATE else 12,
            marker="s" if m.image_reference else "o",
            zorder=2,
        )

    if viewport is not None:
        half_lat = viewport.span.latitude_delta / 2
        half_lon = viewport.span.longitude_delta / 2
        ax.set_xlim(viewport.center.longitude - half_lon, viewport.center.longitude + half_lon)
        ax.set_ylim(viewport.center.latitude - half_lat, viewport.center.latitude + half_lat)

    ax.set_xlabel("Longitude")
    ax.set_ylabel("Latitude")
    ax.set_title("Track")
    if show:
        plt.show()
    return ax
