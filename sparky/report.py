"""Render-ready serialization of a NightlyAnalysis."""

import logging
from pathlib import Path
from typing import Any, Optional

from .models import NightlyAnalysis, Projection, TeamNightlyStats
from .utils import save_json

logger = logging.getLogger('sparky.report')


def _projection_dict(projection: Optional[Projection]) -> Optional[dict[str, Any]]:
    if projection is None:
        return None
    return {
        'periodPts': projection.period_pts,
        'projected': projection.projected,
        'daysPlayed': projection.days_played,
        'daysRemaining': projection.days_remaining,
        'totalDays': projection.total_days,
    }


def team_to_dict(team: TeamNightlyStats) -> dict[str, Any]:
    """Serialize one team card (camelCase keys, narratives under 'streaks')."""
    return {
        'franchise': team.franchise,
        'name': team.name,
        'dayPts': team.day_pts,
        'projPts': team.proj_pts,
        'gp': team.gp,
        'ppg': team.ppg,
        'avg3d': team.avg3d,
        'avg7d': team.avg7d,
        'vsProj': team.vs_proj,
        'projection': _projection_dict(team.projection),
        'streaks': list(team.narratives),
        'seasonPts': team.season_pts,
        'dayRank': team.day_rank,
        'seasonRank': team.season_rank,
    }


def analysis_to_dict(analysis: NightlyAnalysis) -> dict[str, Any]:
    """
    Serialize an analysis into the payload the renderer consumes.

    Everything the renderer shows is precomputed here; it never has to
    rank or total anything itself.
    """
    return {
        'date': analysis.date.isoformat(),
        'period': analysis.period,
        'scrapedAt': analysis.scraped_at,
        'teams': [team_to_dict(t) for t in analysis.teams],
        'seasonRanked': [team_to_dict(t) for t in analysis.season_ranked],
        'periodDaysPlayed': analysis.period_days_played,
        'totalSeasonDays': analysis.total_season_days,
    }


def save_analysis(analysis: NightlyAnalysis, path: Path | str) -> Path:
    """Write the analysis payload as JSON and return the path."""
    path = Path(path)
    save_json(path, analysis_to_dict(analysis))
    logger.info(f'Analysis saved: {path}')
    return path


def build_header_text(analysis: NightlyAnalysis) -> str:
    """Slack-style header line, e.g. '🏒 *P7: January 25 — Nightly Recap*'."""
    day = f'{analysis.date.strftime("%B")} {analysis.date.day}'
    if analysis.period:
        return f'🏒 *P{analysis.period}: {day} — Nightly Recap*'
    return f'🏒 *{day} — Nightly Recap*'


def build_footer_text(analysis: NightlyAnalysis) -> str:
    """Season leader line, or an empty string when there are no teams."""
    if not analysis.season_ranked:
        return ''
    leader = analysis.season_ranked[0]
    text = f'👑 Season leader: {leader.name} ({leader.season_pts:g} pts)'
    if len(analysis.season_ranked) > 1:
        gap = round(leader.season_pts - analysis.season_ranked[1].season_pts, 1)
        text += f', {gap:g} ahead of {analysis.season_ranked[1].name}'
    return text
