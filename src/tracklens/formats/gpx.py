# tracklens/formats/gpx.py
"""
GPX helpers for tracklens

This module is intentionally format-focused:
- GPX namespace handling
- reading an ElementTree safely
- turning <trkpt> elements into LocationPoints

It is one possible point source for the engines; they never read files
themselves.
"""

from __future__ import annotations

import datetime as _dt
from pathlib import Path
from typing import Optional
from xml.etree import ElementTree as ET

from tracklens.errors import InvalidGpxError
from tracklens.models import LocationPoint

# GPX 1.1 default namespace
GPX_NS = {"gpx": "http://www.topografix.com/GPX/1/1"}


def _parse_gpx_time(text: str) -> Optional[_dt.datetime]:
    """
    Parse an ISO-8601 timestamp commonly found in GPX <time> nodes.

    Expected examples:
      - "2026-01-02T21:14:44Z"
      - "2026-01-02T21:14:44.123Z"
      - "2026-01-02T21:14:44+00:00"
    """
    if not text:
        return None
    s = text.strip()
    if not s:
        return None

    # ElementTree GPX times commonly use Z for UTC.
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    try:
        dt = _dt.datetime.fromisoformat(s)
    except ValueError:
        return None

    # Ensure tz-aware; if naive, assume UTC (conservative for GPX sources)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=_dt.timezone.utc)

    return dt.astimezone(_dt.timezone.utc)


def _text(el: ET.Element, tag: str) -> Optional[str]:
    t = el.findtext(f"gpx:{tag}", namespaces=GPX_NS)
    if t is None:
        return None
    t = t.strip()
    return t or None


def read_gpx(path: Path) -> ET.ElementTree:
    """
    Read a GPX file into an ElementTree.

    Raises:
      InvalidGpxError (wrapping ET.ParseError / OSError)
    """
    try:
        return ET.parse(path)
    except (ET.ParseError, OSError) as e:
        raise InvalidGpxError(f"Cannot read GPX: {path} ({e})") from e


def extract_points(tree: ET.ElementTree) -> list[LocationPoint]:
    """
    Extract trackpoints, in document order, from a GPX tree.

    Points without <time> are kept with timestamp=None; missing <ele> means
    altitude 0. <cmt> (or <desc>) becomes the point's comment.
    """
    root = tree.getroot()
    pts: list[LocationPoint] = []

    for trkpt in root.findall(".//gpx:trkpt", GPX_NS):
        try:
            lat = float(trkpt.get("lat"))
            lon = float(trkpt.get("lon"))
        except (TypeError, ValueError) as e:
            raise InvalidGpxError(
                f"trkpt with bad coordinates: lat={trkpt.get('lat')!r} lon={trkpt.get('lon')!r}"
            ) from e

        ele_text = _text(trkpt, "ele")
        try:
            ele = float(ele_text) if ele_text else 0.0
        except ValueError as e:
            raise InvalidGpxError(f"trkpt with bad <ele>: {ele_text!r}") from e

        time_text = _text(trkpt, "time")
        pts.append(
            LocationPoint(
                latitude=lat,
                longitude=lon,
                altitude=ele,
                timestamp=_parse_gpx_time(time_text) if time_text else None,
                comment=_text(trkpt, "cmt") or _text(trkpt, "desc"),
            )
        )

    return pts


def load_points(path: Path) -> list[LocationPoint]:
    return extract_points(read_gpx(path))
