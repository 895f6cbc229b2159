"""Shared fixtures: daily-record builders and a small period table."""

from datetime import date, timedelta

import pytest

from sparky.schemas import DailyRecord, PeriodDefinition, TeamDaily

TEAMS = ['JGC', 'PWN', 'BEW', 'MPP', 'RMS', 'GDD']


def _as_date(value) -> date:
    return date.fromisoformat(value) if isinstance(value, str) else value


@pytest.fixture
def periods():
    """Two back-to-back 14-day periods, then a break, then a third."""
    return [
        PeriodDefinition(period=1, start=date(2025, 10, 7), end=date(2025, 10, 20)),
        PeriodDefinition(period=2, start=date(2025, 10, 21), end=date(2025, 11, 3)),
        PeriodDefinition(period=3, start=date(2025, 11, 17), end=date(2025, 11, 30)),
    ]


@pytest.fixture
def make_day():
    """Build a DailyRecord from {franchise: day_pts} (and optional {franchise: gp})."""

    def _make(day, pts, period=1, gp=None, scraped_at=None):
        gp = gp or {}
        teams = [
            TeamDaily(franchise=f, name=f, day_pts=p, gp=gp.get(f, 0))
            for f, p in pts.items()
        ]
        return DailyRecord(date=_as_date(day), period=period, teams=teams, scraped_at=scraped_at)

    return _make


@pytest.fixture
def make_days(make_day):
    """Build consecutive DailyRecords starting at `start`, one per pts dict."""

    def _make(rows, start='2025-10-07', period=1, gp=None):
        first = _as_date(start)
        return [
            make_day(first + timedelta(days=i), pts, period=period, gp=gp)
            for i, pts in enumerate(rows)
        ]

    return _make


@pytest.fixture
def ranked_row():
    """Day points that put `franchise` at `rank` (1-based) among the six teams."""

    def _make(franchise, rank, top=20.0, step=2.0):
        others = [f for f in TEAMS if f != franchise]
        order = others[: rank - 1] + [franchise] + others[rank - 1:]
        return {f: top - step * i for i, f in enumerate(order)}

    return _make
