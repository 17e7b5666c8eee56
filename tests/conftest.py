import datetime as dt
from pathlib import Path

import matplotlib
import pytest

from tracklens.models import LocationPoint

matplotlib.use("Agg")

T0 = dt.datetime(2025, 5, 25, 9, 0, 0, tzinfo=dt.timezone.utc)

# Berlin Cathedral -> Alexanderplatz -> Museum für Naturkunde
BERLIN = [
    (52.519008, 13.401236),
    (52.521518, 13.413408),
    (52.530982, 13.413408),
]


def make_points(coords, *, step_s=10, altitudes=None, start=T0):
    altitudes = altitudes or [0.0] * len(coords)
    return [
        LocationPoint(
            latitude=lat,
            longitude=lon,
            altitude=alt,
            timestamp=start + dt.timedelta(seconds=i * step_s),
        )
        for i, ((lat, lon), alt) in enumerate(zip(coords, altitudes))
    ]


@pytest.fixture
def berlin_points() -> list[LocationPoint]:
    return make_points(BERLIN)


GPX_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="tests" xmlns="http://www.topografix.com/GPX/1/1">
  <trk>
    <name>Berlin walk</name>
    <trkseg>
      <trkpt lat="52.519008" lon="13.401236"><ele>35.0</ele><time>2025-05-25T09:00:00Z</time><cmt>Dom</cmt></trkpt>
      <trkpt lat="52.521518" lon="13.413408"><ele>40.5</ele><time>2025-05-25T09:00:10Z</time></trkpt>
      <trkpt lat="52.530982" lon="13.413408"><ele>38.0</ele><time>2025-05-25T09:00:20Z</time></trkpt>
    </trkseg>
  </trk>
</gpx>
"""


@pytest.fixture
def sample_gpx_path(tmp_path: Path) -> Path:
    p = tmp_path / "berlin.gpx"
    p.write_text(GPX_TEMPLATE, encoding="utf-8")
    return p


@pytest.fixture
def no_config(tmp_path: Path, monkeypatch):
    """Run from an empty directory with no user config or TRACKLENS_* env."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    for var in (
        "TRACKLENS_WORK_ROOT",
        "TRACKLENS_PADDING_FRACTION",
        "TRACKLENS_MIN_SPAN_DEGREES",
        "TRACKLENS_MIN_DISPLACEMENT_M",
        "TRACKLENS_DURATION_START",
        "TRACKLENS_SORT_POINTS",
    ):
        monkeypatch.delenv(var, raising=False)
    return home
