"""Rolling statistics over the daily score store.

All functions take the ascending list of DailyRecords (no-games days
already filtered out) and never mutate it.
"""

from collections import Counter
from typing import Optional

from .config import get_period_definition
from .models import Projection, RankedDay
from .schemas import DailyRecord, PeriodDefinition, TeamDaily
from .utils import round_half_up


def _team_days(days: list[DailyRecord], franchise: str) -> list[TeamDaily]:
    entries = []
    for day in days:
        team = day.team(franchise)
        if team is not None:
            entries.append(team)
    return entries


def _ppg(entries: list[TeamDaily]) -> Optional[float]:
    """Points per game played; per day when no games were counted."""
    if not entries:
        return None
    total_pts = sum(t.day_pts for t in entries)
    total_gp = sum(t.gp for t in entries)
    if total_gp > 0:
        return round(total_pts / total_gp, 2)
    return round(total_pts / len(entries), 2)


def rolling_avg_ppg(days: list[DailyRecord], franchise: str, n: int) -> Optional[float]:
    """
    Compute rolling PPG over the franchise's last n scored days.

    Days the franchise is absent from are skipped, not zero-filled.

    Args:
        days: Daily records, ascending by date
        franchise: Franchise abbreviation
        n: Window size (3 or 7 in the report)

    Returns:
        PPG rounded to 2 decimals, or None if the franchise has no days
    """
    entries = _team_days(days, franchise)
    return _ppg(entries[-n:] if n > 0 else [])


def season_ppg(days: list[DailyRecord], franchise: str) -> Optional[float]:
    """Compute season-long PPG for a franchise (None with no history)."""
    return _ppg(_team_days(days, franchise))


def season_total(days: list[DailyRecord], franchise: str) -> float:
    return sum(t.day_pts for t in _team_days(days, franchise))


def project_period_finish(
    days: list[DailyRecord],
    franchise: str,
    period: Optional[int],
    periods: Optional[list[PeriodDefinition]] = None,
) -> Optional[Projection]:
    """
    Project a franchise's period total from its pace so far.

    Plain linear extrapolation: period points plus the per-day average
    times the days left in the period.

    Args:
        days: Daily records, ascending by date
        franchise: Franchise abbreviation
        period: Period number
        periods: Period table (defaults to league config)

    Returns:
        Projection, or None if the period is unknown or the franchise
        has no days in it
    """
    period_def = get_period_definition(period, periods)
    if period_def is None:
        return None

    entries = _team_days([d for d in days if d.period == period], franchise)
    days_played = len(entries)
    if days_played == 0:
        return None

    period_pts = sum(t.day_pts for t in entries)
    total_days = period_def.total_days
    days_remaining = max(total_days - days_played, 0)
    daily_avg = period_pts / days_played
    projected = round_half_up(period_pts + daily_avg * days_remaining)

    return Projection(
        period_pts=round(period_pts, 1),
        projected=projected,
        days_played=days_played,
        days_remaining=days_remaining,
        total_days=total_days,
    )


def day_rank(day: DailyRecord, franchise: str) -> int:
    """1-based finish by day points (stable). Absent franchises rank last + 1."""
    ordered = sorted(day.teams, key=lambda t: -t.day_pts)
    for idx, team in enumerate(ordered):
        if team.franchise == franchise:
            return idx + 1
    return len(ordered) + 1


def ranked_history(days: list[DailyRecord], franchise: str) -> list[RankedDay]:
    """Build the franchise's day-by-day finish history."""
    history = []
    for day in days:
        team = day.team(franchise)
        history.append(
            RankedDay(
                date=day.date,
                period=day.period,
                rank=day_rank(day, franchise),
                day_pts=team.day_pts if team else 0.0,
                gp=team.gp if team else 0,
                num_teams=len(day.teams),
            )
        )
    return history


def cumulative_totals(days: list[DailyRecord]) -> dict[str, float]:
    """Sum day points per franchise, in first-seen order."""
    totals: dict[str, float] = {}
    for day in days:
        for t in day.teams:
            totals[t.franchise] = totals.get(t.franchise, 0.0) + t.day_pts
    return totals


def standings(days: list[DailyRecord]) -> list[tuple[str, float]]:
    """Cumulative standings over a span of days, best first (stable)."""
    return sorted(cumulative_totals(days).items(), key=lambda item: -item[1])


def standings_rank(days: list[DailyRecord], franchise: str) -> Optional[int]:
    """A franchise's rank in cumulative standings over a span of days."""
    for idx, (f, _total) in enumerate(standings(days)):
        if f == franchise:
            return idx + 1
    return None


def completed_period_totals(
    days: list[DailyRecord], franchise: str, min_days: int = 7
) -> list[tuple[int, float]]:
    """
    Total points for each period this season with enough days to count.

    Returns:
        List of (period, total) in period order
    """
    day_counts = Counter(d.period for d in days if d.period)
    totals: dict[int, float] = {}
    for day in days:
        if not day.period:
            continue
        team = day.team(franchise)
        totals[day.period] = totals.get(day.period, 0.0) + (team.day_pts if team else 0.0)
    return [(p, total) for p, total in sorted(totals.items()) if day_counts[p] >= min_days]
