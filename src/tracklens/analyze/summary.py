# tracklens/analyze/summary.py
"""
Roll-ups over several sessions (the numbers shown above the history chart).
"""

from __future__ import annotations

import datetime as dt
import enum
from dataclasses import dataclass
from typing import Iterable, Optional

from tracklens.analyze.track import compute_session_metrics
from tracklens.config import MetricsConfig
from tracklens.models import Session, as_utc


class Period(str, enum.Enum):
    WEEK = "week"
    MONTH = "month"
    ALL = "all"


@dataclass(frozen=True)
class SessionSummary:
    session_count: int = 0
    total_distance_meters: float = 0.0
    total_duration_seconds: float = 0.0
    average_speed_meters_per_second: float = 0.0


def summarize_sessions(
    sessions: Iterable[Session], config: MetricsConfig = MetricsConfig()
) -> SessionSummary:
    """
    Sum distance and duration over sessions.

    Average speed is total distance over total duration, so long sessions
    weigh more than short ones. It is not the mean of per-session speeds.
    """
    count = 0
    distance = 0.0
    duration = 0.0
    for session in sessions:
        m = compute_session_metrics(session, config)
        count += 1
        distance += m.total_distance_meters
        duration += m.total_duration_seconds

    return SessionSummary(
        session_count=count,
        total_distance_meters=distance,
        total_duration_seconds=duration,
        average_speed_meters_per_second=distance / duration if duration > 0 else 0.0,
    )


def _same_period(a: dt.datetime, b: dt.datetime, period: Period) -> bool:
    # Compare in the calendar of `b` (the viewer's clock); naive values are UTC.
    b = as_utc(b)
    a = as_utc(a).astimezone(b.tzinfo)
    if period is Period.MONTH:
        return (a.year, a.month) == (b.year, b.month)
    # ISO week: (iso_year, week)
    return a.isocalendar()[:2] == b.isocalendar()[:2]


def filter_sessions(
    sessions: Iterable[Session],
    period: Period,
    now: Optional[dt.datetime] = None,
) -> list[Session]:
    """
    Keep sessions that started in the same week/month as `now`.

    Sessions without a start time only survive Period.ALL.
    """
    sessions = list(sessions)
    if period is Period.ALL:
        return sessions
    if now is None:
        now = dt.datetime.now().astimezone()
    return [
        s for s in sessions
        if s.start_time is not None and _same_period(s.start_time, now, period)
    ]
