"""Nightly analysis builder: one date's record in, the ranked report bundle out."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from .config import get_current_season, get_period_for_date
from .franchise import franchise_display_name
from .historical import HistoricalArchive
from .models import NightlyAnalysis, TeamNightlyStats
from .narrative_weights import NARRATIVE_LIMIT
from .narratives import build_narratives
from .rolling import cumulative_totals, project_period_finish, rolling_avg_ppg, season_ppg
from .schemas import DailyRecord, PeriodDefinition, TeamDaily
from .store import DailyScoreStore, canonicalize_record, days_for_period

logger = logging.getLogger('sparky.analysis')


def merge_today(history: list[DailyRecord], today: DailyRecord) -> list[DailyRecord]:
    """
    Add today's record to history unless that date is already stored.

    Re-running the analysis for a stored date must not count it twice.
    A night outside every period still counts toward season totals;
    only nights without games (which add nothing) are left out.
    """
    if not today.has_games:
        return list(history)
    if any(d.date == today.date for d in history):
        return list(history)
    return sorted([*history, today], key=lambda d: d.date)


def build_team_stats(
    team: TeamDaily,
    days: list[DailyRecord],
    period: Optional[int],
    archive: Optional[HistoricalArchive] = None,
    periods: Optional[list[PeriodDefinition]] = None,
    season: Optional[int] = None,
    narrative_limit: int = NARRATIVE_LIMIT,
) -> TeamNightlyStats:
    """Compute one franchise's card (ranks are filled in by the caller)."""
    franchise = team.franchise
    projection = project_period_finish(days, franchise, period, periods) if period else None
    avg3d = rolling_avg_ppg(days, franchise, 3)
    ppg = season_ppg(days, franchise)

    narratives = build_narratives(
        days,
        franchise,
        period,
        team.day_pts,
        projection=projection,
        avg3d=avg3d,
        ppg=ppg,
        archive=archive,
        periods=periods,
        season=season,
        today_gp=team.gp,
        limit=narrative_limit,
    )

    return TeamNightlyStats(
        franchise=franchise,
        name=team.name or franchise_display_name(franchise),
        day_pts=team.day_pts,
        proj_pts=team.proj_pts,
        gp=team.gp,
        ppg=ppg,
        avg3d=avg3d,
        avg7d=rolling_avg_ppg(days, franchise, 7),
        vs_proj=round(team.day_pts - team.proj_pts, 2) if team.proj_pts else None,
        projection=projection,
        narratives=narratives,
    )


def build_nightly_analysis(
    today: DailyRecord,
    history: Optional[list[DailyRecord]] = None,
    store: Optional[DailyScoreStore] = None,
    archive: Optional[HistoricalArchive] = None,
    periods: Optional[list[PeriodDefinition]] = None,
    season: Optional[int] = None,
    narrative_limit: int = NARRATIVE_LIMIT,
    max_workers: int = 1,
) -> NightlyAnalysis:
    """
    Build the full nightly analysis for one date.

    Args:
        today: Tonight's record (franchise names may still be raw)
        history: Stored records; loaded from `store` when omitted
        store: Daily score store (default: configured data/daily)
        archive: Historical archive; None skips archive narratives
        periods: Period table (defaults to league config)
        season: Running season key for archive queries
        narrative_limit: Narrative lines per team
        max_workers: Per-franchise worker threads (1 = sequential)

    Returns:
        NightlyAnalysis with day-ranked and season-ranked team lists
    """
    if history is None:
        history = (store or DailyScoreStore()).load_all()
    if season is None and archive is not None:
        season = get_current_season()

    today = canonicalize_record(today)
    period = today.period if today.period else get_period_for_date(today.date, periods)
    if period != today.period:
        today = today.model_copy(update={'period': period})
    if period is None:
        logger.warning(f'{today.date} is outside every scoring period; projections unavailable')

    days = merge_today(history, today)
    logger.info(f'Analysing {today.date} (P{period}): {len(today.teams)} teams, {len(days)} days of history')

    def compute(team: TeamDaily) -> TeamNightlyStats:
        return build_team_stats(team, days, period, archive, periods, season, narrative_limit)

    if max_workers > 1 and len(today.teams) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            stats = list(pool.map(compute, today.teams))
    else:
        stats = [compute(team) for team in today.teams]

    day_ranked = sorted(stats, key=lambda s: -s.day_pts)
    for rank, s in enumerate(day_ranked, start=1):
        s.day_rank = rank

    totals = cumulative_totals(days)
    for s in stats:
        s.season_pts = round(totals.get(s.franchise, 0.0), 1)
    season_ranked = sorted(day_ranked, key=lambda s: -s.season_pts)
    for rank, s in enumerate(season_ranked, start=1):
        s.season_rank = rank

    return NightlyAnalysis(
        date=today.date,
        period=period,
        scraped_at=today.scraped_at or '',
        teams=day_ranked,
        season_ranked=season_ranked,
        period_days_played=len(days_for_period(days, period)) if period else 0,
        total_season_days=len(days),
    )
