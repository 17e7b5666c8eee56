import datetime as dt
import random

import pytest
from haversine import haversine, Unit

from conftest import BERLIN, T0, make_points
from tracklens.analyze.track import (
    compute_metrics,
    compute_metrics_cached,
    compute_session_metrics,
    compute_step_metrics,
    order_points,
)
from tracklens.config import DurationStart, MetricsConfig
from tracklens.models import LocationPoint, Session


def test_berlin_distance_and_duration(berlin_points):
    m = compute_metrics(berlin_points)

    expected = (
        haversine(BERLIN[0], BERLIN[1], unit=Unit.METERS)
        + haversine(BERLIN[1], BERLIN[2], unit=Unit.METERS)
    )
    assert m.total_distance_meters == pytest.approx(expected, abs=1.0)
    assert m.total_distance_meters == pytest.approx(1921, rel=0.02)
    assert m.total_duration_seconds == 20
    assert m.average_speed_meters_per_second == pytest.approx(expected / 20)
    assert m.point_count == 3


@pytest.mark.parametrize("count", [0, 1])
def test_degenerate_lists_have_zero_distance_and_speed(count):
    m = compute_metrics(make_points(BERLIN[:count]))
    assert m.total_distance_meters == 0
    assert m.average_speed_meters_per_second == 0
    assert m.total_duration_seconds == 0


def test_empty_list_has_no_altitude_range():
    m = compute_metrics([])
    assert m.min_altitude_meters is None
    assert m.max_altitude_meters is None


def test_single_point_reports_its_altitude():
    m = compute_metrics([LocationPoint(52.5, 13.4, altitude=123.0, timestamp=T0)])
    assert m.min_altitude_meters == 123.0
    assert m.max_altitude_meters == 123.0


def test_all_equal_altitude_not_clamped_to_zero():
    pts = make_points(BERLIN, altitudes=[250.0, 250.0, 250.0])
    m = compute_metrics(pts)
    assert m.min_altitude_meters == 250.0
    assert m.max_altitude_meters == 250.0
    assert m.total_ascent_meters == 0
    assert m.total_descent_meters == 0


def test_first_point_without_timestamp_gives_trivial_result():
    pts = [
        LocationPoint(52.519008, 13.401236),
        LocationPoint(52.521518, 13.413408, timestamp=T0),
    ]
    m = compute_metrics(pts)
    assert m.total_distance_meters == 0
    assert m.total_duration_seconds == 0
    assert m.average_speed_meters_per_second == 0


def test_missing_altitude_defaults_to_zero():
    p = LocationPoint(1.0, 2.0, altitude=None)
    assert p.altitude == 0.0


def test_appending_duplicate_of_last_point_keeps_distance(berlin_points):
    last = berlin_points[-1]
    dup = LocationPoint(last.latitude, last.longitude, last.altitude,
                        last.timestamp + dt.timedelta(seconds=10))
    before = compute_metrics(berlin_points).total_distance_meters
    after = compute_metrics(berlin_points + [dup]).total_distance_meters
    assert after == pytest.approx(before)


def test_reversed_input_is_sorted_back(berlin_points):
    forward = compute_metrics(berlin_points)
    backward = compute_metrics(list(reversed(berlin_points)))
    assert backward == forward


def test_sorting_can_be_disabled(berlin_points):
    m = compute_metrics(list(reversed(berlin_points)), config=MetricsConfig(sort_points=False))
    # last - first is negative; duration clamps to 0 and speed follows
    assert m.total_duration_seconds == 0
    assert m.average_speed_meters_per_second == 0


def test_caller_order_kept_when_a_timestamp_is_missing():
    pts = [
        LocationPoint(0.0, 0.0, timestamp=T0 + dt.timedelta(seconds=5)),
        LocationPoint(0.0, 0.001),
        LocationPoint(0.0, 0.002, timestamp=T0),
    ]
    assert order_points(pts) == pts


def test_unusable_points_are_dropped():
    pts = make_points(BERLIN)
    bad = LocationPoint(123.0, 13.4, timestamp=T0 + dt.timedelta(seconds=5))
    m = compute_metrics(pts[:1] + [bad] + pts[1:])
    assert m == compute_metrics(pts)


@pytest.mark.parametrize("seed", range(5))
def test_ascent_minus_descent_telescopes(seed):
    rng = random.Random(seed)
    n = rng.randint(2, 60)
    coords = [(52.5 + i * 1e-4, 13.4) for i in range(n)]
    alts = [rng.uniform(-50, 3000) for _ in range(n)]
    m = compute_metrics(make_points(coords, altitudes=alts))
    assert m.total_ascent_meters - m.total_descent_meters == pytest.approx(alts[-1] - alts[0], abs=1e-6)
    assert m.min_altitude_meters == min(alts)
    assert m.max_altitude_meters == max(alts)


def test_ascent_descent_split():
    pts = make_points([(0, 0), (0, 0.001), (0, 0.002), (0, 0.003)], altitudes=[10, 15, 15, 12])
    m = compute_metrics(pts)
    assert m.total_ascent_meters == 5
    assert m.total_descent_meters == 3


def test_session_end_extends_duration(berlin_points):
    end = T0 + dt.timedelta(seconds=60)
    m = compute_metrics(berlin_points, session_end=end)
    assert m.total_duration_seconds == 60


def test_session_start_used_only_when_configured(berlin_points):
    start = T0 - dt.timedelta(seconds=30)
    default = compute_metrics(berlin_points, session_start=start)
    assert default.total_duration_seconds == 20

    cfg = MetricsConfig(duration_start=DurationStart.SESSION_START)
    m = compute_metrics(berlin_points, session_start=start, config=cfg)
    assert m.total_duration_seconds == 50


def test_session_start_resolves_untimed_points():
    pts = [LocationPoint(52.519008, 13.401236), LocationPoint(52.521518, 13.413408)]
    cfg = MetricsConfig(duration_start=DurationStart.SESSION_START)
    m = compute_metrics(
        pts, session_start=T0, session_end=T0 + dt.timedelta(seconds=100), config=cfg
    )
    assert m.total_distance_meters > 0
    assert m.total_duration_seconds == 100


def test_compute_session_metrics(berlin_points):
    s = Session(name="walk", start_time=T0, end_time=T0 + dt.timedelta(seconds=40),
                points=tuple(berlin_points))
    m = compute_session_metrics(s)
    assert m.total_duration_seconds == 40


def test_step_metrics_skip_non_positive_dt():
    pts = make_points([(0, 0), (0, 0.001), (0, 0.002)], step_s=10)
    pts[2] = LocationPoint(0, 0.002, timestamp=pts[1].timestamp)
    dts, ds, vs = compute_step_metrics(pts)
    assert dts == [10]
    assert len(ds) == len(vs) == 1


def test_max_speed(berlin_points):
    m = compute_metrics(berlin_points)
    _, ds, _ = compute_step_metrics(berlin_points)
    assert m.max_speed_meters_per_second == pytest.approx(max(ds) / 10)


def test_repeated_calls_are_identical(berlin_points):
    assert compute_metrics(berlin_points) == compute_metrics(berlin_points)


def test_cached_variant_keys_on_content(berlin_points):
    compute_metrics_cached.cache_clear()
    a = compute_metrics_cached(tuple(berlin_points))
    # Equal content built from fresh objects hits the same entry.
    b = compute_metrics_cached(tuple(make_points(BERLIN)))
    assert a == b
    assert compute_metrics_cached.cache_info().hits == 1

    moved = tuple(make_points(BERLIN[:2]))
    assert compute_metrics_cached(moved) != a


def test_naive_session_end_with_aware_points(berlin_points):
    # naive bounds are read as UTC
    end = dt.datetime(2025, 5, 25, 9, 1, 0)
    m = compute_metrics(berlin_points, session_end=end)
    assert m.total_duration_seconds == 60


def test_naive_session_start_with_aware_points(berlin_points):
    cfg = MetricsConfig(duration_start=DurationStart.SESSION_START)
    m = compute_metrics(berlin_points, session_start=dt.datetime(2025, 5, 25, 8, 59, 40), config=cfg)
    assert m.total_duration_seconds == 40


def test_mixed_naive_and_aware_points_are_ordered():
    pts = [
        LocationPoint(52.530982, 13.413408, timestamp=dt.datetime(2025, 5, 25, 9, 0, 20)),
        LocationPoint(52.519008, 13.401236, timestamp=T0),
        LocationPoint(52.521518, 13.413408, timestamp=dt.datetime(2025, 5, 25, 9, 0, 10)),
    ]
    m = compute_metrics(pts)
    assert m == compute_metrics(make_points(BERLIN))
    assert m.total_duration_seconds == 20


def test_session_with_naive_times(berlin_points):
    s = Session(start_time=dt.datetime(2025, 5, 25, 9, 0, 0),
                end_time=dt.datetime(2025, 5, 25, 9, 0, 30),
                points=tuple(berlin_points))
    assert compute_session_metrics(s).total_duration_seconds == 30


def test_non_finite_altitude_keeps_telescoping_identity():
    pts = make_points(BERLIN, altitudes=[10.0, float("nan"), 30.0])
    m = compute_metrics(pts)
    assert pts[1].altitude == 0.0
    assert m.total_ascent_meters - m.total_descent_meters == pytest.approx(20.0)
    assert m.min_altitude_meters == 0.0
    assert m.max_altitude_meters == 30.0
