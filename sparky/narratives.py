"""Narrative engine: picks the 1-2 most interesting lines for each team card.

Every detector looks at one franchise's situation and either abstains
or emits a scored Candidate. Detector order never decides the outcome;
the selection step ranks all candidates by score and keeps the best
ones, at most one per category. A fixed-order fallback cascade fills
empty slots for teams with thin history.

Detectors come in two tiers:
    - local detectors read only the daily score store slice
    - archive detectors also query the HistoricalArchive; if the archive
      is unavailable the whole tier is skipped for that team
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Iterable, Optional

from . import narrative_weights as w
from .config import get_period_definition
from .constants import CAREER_MILESTONES
from .historical import ArchiveUnavailableError, HistoricalArchive
from .models import Candidate, NarrativeCategory, Projection, RankedDay
from .rolling import (
    completed_period_totals,
    ranked_history,
    season_total,
    standings,
    standings_rank,
)
from .schemas import DailyRecord, PeriodDefinition
from .utils import pct_change, round_half_up

logger = logging.getLogger('sparky.narratives')


def trailing_streak(ranked: list[RankedDay], predicate: Callable[[RankedDay], bool]) -> int:
    """Count the most recent consecutive days matching predicate."""
    streak = 0
    for day in reversed(ranked):
        if not predicate(day):
            break
        streak += 1
    return streak


def _fmt(pts: float) -> str:
    return f'{pts:g}'


@dataclass
class NarrativeContext:
    """
    One franchise's situation on the night being reported.

    `days` must be ascending by date with tonight's record last.
    """
    franchise: str
    period: Optional[int]
    days: list[DailyRecord]
    today_pts: float
    projection: Optional[Projection] = None
    avg3d: Optional[float] = None
    ppg: Optional[float] = None
    period_def: Optional[PeriodDefinition] = None
    season: Optional[int] = None
    today_gp: int = 0

    ranked: list[RankedDay] = field(init=False)
    recent: list[RankedDay] = field(init=False)
    period_days: list[DailyRecord] = field(init=False)
    win_streak: int = field(init=False)
    podium_streak: int = field(init=False)
    bottom_streak: int = field(init=False)
    drought: int = field(init=False)

    def __post_init__(self):
        self.ranked = ranked_history(self.days, self.franchise)
        self.recent = self.ranked[-w.RECENT_WINDOW:]
        self.period_days = [d for d in self.days if self.period and d.period == self.period]

        self.win_streak = trailing_streak(self.recent, lambda d: d.rank == 1)
        self.podium_streak = trailing_streak(self.recent, lambda d: d.rank <= w.PODIUM_CUTOFF)
        self.bottom_streak = trailing_streak(self.recent, lambda d: d.rank > d.num_teams // 2)
        self.drought = trailing_streak(self.recent, lambda d: d.rank > w.PODIUM_CUTOFF)

    @property
    def today(self) -> date:
        return self.days[-1].date

    @property
    def num_teams(self) -> int:
        return self.ranked[-1].num_teams if self.ranked else 0

    @property
    def elapsed(self) -> Optional[float]:
        """Fraction of the period's calendar that has elapsed as of today."""
        if self.period_def is None:
            return None
        days_in = (self.today - self.period_def.start).days + 1
        return max(0.0, min(days_in / self.period_def.total_days, 1.0))

    def own_period_pts(self) -> tuple[float, int, int]:
        """(points, games, days) for this franchise in the current period."""
        pts = 0.0
        gp = 0
        count = 0
        for day in self.period_days:
            team = day.team(self.franchise)
            if team is not None:
                pts += team.day_pts
                gp += team.gp
                count += 1
        return pts, gp, count

    def previous_period_totals(self) -> list[tuple[int, float]]:
        """This season's completed periods, excluding the current one."""
        return [
            (p, total)
            for p, total in completed_period_totals(self.days, self.franchise, w.COMPLETE_PERIOD_MIN_DAYS)
            if p != self.period
        ]


# ================================================================
# Local detectors
# ================================================================

def detect_win_streak(ctx: NarrativeContext) -> list[Candidate]:
    streak = ctx.win_streak
    if streak < w.WIN_STREAK.min_streak:
        return []
    return [Candidate(w.WIN_STREAK.score(streak), f'🔥 {streak}-day win streak', source='win_streak')]


def detect_podium_streak(ctx: NarrativeContext) -> list[Candidate]:
    streak = ctx.podium_streak
    # A live win streak already tells this story
    if streak < w.PODIUM_STREAK.min_streak or ctx.win_streak >= w.WIN_STREAK.min_streak:
        return []
    return [Candidate(w.PODIUM_STREAK.score(streak), f'📈 {streak}-day podium streak', source='podium_streak')]


def detect_bottom_half_streak(ctx: NarrativeContext) -> list[Candidate]:
    streak = ctx.bottom_streak
    if streak < w.BOTTOM_HALF_STREAK.min_streak:
        return []
    return [
        Candidate(
            w.BOTTOM_HALF_STREAK.score(streak),
            f'⚠️ {streak}-day bottom-half streak',
            is_bad=True,
            source='bottom_half_streak',
        )
    ]


def detect_best_day(ctx: NarrativeContext) -> list[Candidate]:
    elapsed = ctx.elapsed
    if len(ctx.period_days) <= 1 or ctx.today_pts <= 0 or elapsed is None:
        return []
    if elapsed < w.BEST_DAY_MIN_ELAPSED:
        return []

    best = max(
        (day.team(ctx.franchise).day_pts for day in ctx.period_days if day.team(ctx.franchise)),
        default=0.0,
    )
    if ctx.today_pts < best:
        return []
    score = w.BEST_DAY_BASE + w.BEST_DAY_ELAPSED_BONUS * elapsed
    return [Candidate(score, f'⭐ Best day this period ({_fmt(ctx.today_pts)} pts)', source='best_day')]


def detect_period_rank_change(ctx: NarrativeContext) -> list[Candidate]:
    if len(ctx.period_days) < 2:
        return []
    current = standings_rank(ctx.period_days, ctx.franchise)
    previous = standings_rank(ctx.period_days[:-1], ctx.franchise)
    if current is None or previous is None or current == previous:
        return []

    n = len(standings(ctx.period_days))
    top, bottom = w.RANK_CHANGE_EDGE_SPOTS, n - w.RANK_CHANGE_EDGE_SPOTS + 1
    climbed = current < previous
    if climbed:
        crossed_edge = (current <= top < previous) or (current < bottom <= previous)
    else:
        crossed_edge = (previous <= top < current) or (previous < bottom <= current)

    score = (
        w.RANK_CHANGE_BASE
        + w.RANK_CHANGE_PER_SPOT * abs(previous - current)
        + w.RANK_CHANGE_ELAPSED_BONUS * (ctx.elapsed or 0.0)
        + (w.RANK_CHANGE_EDGE_BONUS if crossed_edge else 0)
    )
    score = min(score, w.RANK_CHANGE_CAP)

    if climbed:
        return [Candidate(score, f'⬆️ Climbed to #{current} in P{ctx.period}', source='period_rank_change')]
    return [
        Candidate(score, f'⬇️ Dropped to #{current} in P{ctx.period}', is_bad=True, source='period_rank_change')
    ]


def detect_day_vs_period_rate(ctx: NarrativeContext) -> list[Candidate]:
    if len(ctx.period_days) < w.DAY_VS_PERIOD_MIN_DAYS or ctx.today_pts <= 0:
        return []
    period_pts, period_gp, period_count = ctx.own_period_pts()
    if period_count == 0:
        return []

    per_game = ctx.today_gp > 0 and period_gp > 0
    if per_game:
        today_rate, period_rate = ctx.today_pts / ctx.today_gp, period_pts / period_gp
    else:
        today_rate, period_rate = ctx.today_pts, period_pts / period_count
    if period_rate <= 0:
        return []

    pct = pct_change(today_rate, period_rate)
    if abs(pct) < w.DAY_VS_PERIOD_MIN_PCT:
        return []

    score = min(w.DAY_VS_PERIOD_BASE + w.DAY_VS_PERIOD_PER_PCT * abs(pct), w.DAY_VS_PERIOD_CAP)
    if per_game:
        detail = f'{today_rate:.2f} PPG today vs {period_rate:.2f} period avg'
    else:
        detail = f'{_fmt(ctx.today_pts)} pts today vs {period_rate:.1f} period avg'
    if pct > 0:
        return [Candidate(score, f'💥 {detail}', source='day_vs_period')]
    return [Candidate(score, f'📉 {detail}', is_bad=True, source='day_vs_period')]


def detect_season_rank_extremes(ctx: NarrativeContext) -> list[Candidate]:
    table = standings(ctx.days)
    if len(table) < 2:
        return []
    rank = next((i + 1 for i, (f, _) in enumerate(table) if f == ctx.franchise), None)
    if rank is None:
        return []
    total = round_half_up(dict(table)[ctx.franchise])
    if rank == 1:
        return [Candidate(w.SEASON_FIRST_SCORE, f'👑 1st overall ({total} pts)', source='season_rank')]
    if rank == len(table):
        return [
            Candidate(w.SEASON_LAST_SCORE, f'📊 Last overall ({total} pts)', is_bad=True, source='season_rank')
        ]
    return []


def detect_three_day_trend(ctx: NarrativeContext) -> list[Candidate]:
    if ctx.avg3d is None or not ctx.ppg or ctx.ppg <= 0:
        return []
    pct = pct_change(ctx.avg3d, ctx.ppg)
    strong = min(w.TREND_STRONG_BASE + (abs(pct) - w.TREND_STRONG_PCT), w.TREND_STRONG_CAP)

    if pct >= w.TREND_STRONG_PCT:
        return [Candidate(strong, f'📈 3D avg {ctx.avg3d:.2f}, surging (+{pct}% vs season)', source='trend')]
    if pct >= w.TREND_MILD_PCT:
        return [
            Candidate(w.TREND_MILD_SCORE, f'📈 3D avg {ctx.avg3d:.2f} (up from {ctx.ppg:.2f} season)', source='trend')
        ]
    if pct <= -w.TREND_STRONG_PCT:
        return [
            Candidate(strong, f'📉 3D avg {ctx.avg3d:.2f}, slumping ({pct}% vs season)', is_bad=True, source='trend')
        ]
    if pct <= -w.TREND_MILD_PCT:
        return [
            Candidate(
                w.TREND_MILD_SCORE,
                f'📉 3D avg {ctx.avg3d:.2f} (down from {ctx.ppg:.2f} season)',
                is_bad=True,
                source='trend',
            )
        ]
    return []


def detect_consistency(ctx: NarrativeContext) -> list[Candidate]:
    if len(ctx.recent) < w.CONSISTENCY_WINDOW:
        return []
    window = ctx.recent[-w.CONSISTENCY_WINDOW:]
    podiums = sum(1 for d in window if d.rank <= w.PODIUM_CUTOFF)
    if podiums >= w.CONSISTENCY_HIGH:
        return [
            Candidate(
                w.CONSISTENCY_HIGH_SCORE,
                f'🎯 Top 3 in {podiums} of last {w.CONSISTENCY_WINDOW} days',
                source='consistency',
            )
        ]
    if podiums <= w.CONSISTENCY_LOW:
        return [
            Candidate(
                w.CONSISTENCY_LOW_SCORE,
                f'🎯 Top 3 only {podiums}x in last {w.CONSISTENCY_WINDOW} days',
                is_bad=True,
                source='consistency',
            )
        ]
    return []


def detect_period_pace(ctx: NarrativeContext) -> list[Candidate]:
    if len(ctx.period_days) < w.PERIOD_PACE_MIN_DAYS or ctx.projection is None:
        return []
    totals = [total for _, total in ctx.previous_period_totals()]
    if not totals:
        return []

    pace = ctx.projection.projected
    best, worst = max(totals), min(totals)
    if pace > best * w.PERIOD_PACE_BEST_MARGIN:
        return [
            Candidate(
                w.PERIOD_PACE_BEST_SCORE,
                f'🚀 On pace for best period ({pace} proj vs {round_half_up(best)} prev best)',
                category=NarrativeCategory.PROJ,
                source='period_pace',
            )
        ]
    if pace < worst * w.PERIOD_PACE_WORST_MARGIN and len(totals) >= w.PERIOD_PACE_WORST_MIN_PERIODS:
        return [
            Candidate(
                w.PERIOD_PACE_WORST_SCORE,
                f'⚠️ On pace for worst period ({pace} proj vs {round_half_up(worst)} prev worst)',
                is_bad=True,
                category=NarrativeCategory.PROJ,
                source='period_pace',
            )
        ]
    return []


def detect_mid_period_swing(ctx: NarrativeContext) -> list[Candidate]:
    if len(ctx.period_days) < w.SWING_MIN_DAYS:
        return []
    midpoint = len(ctx.period_days) // 2
    mid_rank = standings_rank(ctx.period_days[:midpoint], ctx.franchise)
    now_rank = standings_rank(ctx.period_days, ctx.franchise)
    if mid_rank is None or now_rank is None:
        return []

    jump = mid_rank - now_rank  # positive = improved
    text = f'🔄 Was #{mid_rank} mid-period, now #{now_rank}'
    if jump >= w.SWING_MIN_SPOTS:
        return [Candidate(w.SWING_COMEBACK_SCORE, text, source='mid_period_swing')]
    if jump <= -w.SWING_MIN_SPOTS:
        return [Candidate(w.SWING_COLLAPSE_SCORE, text, is_bad=True, source='mid_period_swing')]
    return []


def detect_drought(ctx: NarrativeContext) -> list[Candidate]:
    # The bottom-half streak already reports the same run
    if ctx.drought < w.DROUGHT.min_streak or ctx.bottom_streak >= w.BOTTOM_HALF_STREAK.min_streak:
        return []
    return [
        Candidate(
            w.DROUGHT.score(ctx.drought),
            f'🏜️ {ctx.drought} days since finishing top 3',
            is_bad=True,
            source='drought',
        )
    ]


def detect_personal_best_proximity(ctx: NarrativeContext) -> list[Candidate]:
    projection = ctx.projection
    if projection is None or len(ctx.period_days) < w.PERSONAL_BEST_MIN_DAYS:
        return []
    totals = [total for _, total in ctx.previous_period_totals()]
    best = max(totals, default=0.0)
    if best <= 0 or projection.period_pts <= 0:
        return []

    remaining = best - projection.period_pts
    if 0 < remaining <= projection.days_remaining * w.PERSONAL_BEST_PTS_PER_DAY_LEFT:
        return [
            Candidate(
                w.PERSONAL_BEST_SCORE,
                f'🏆 {round_half_up(remaining)} pts from matching personal best period',
                category=NarrativeCategory.PROJ,
                source='personal_best_proximity',
            )
        ]
    return []


LOCAL_DETECTORS = (
    detect_win_streak,
    detect_podium_streak,
    detect_bottom_half_streak,
    detect_best_day,
    detect_period_rank_change,
    detect_day_vs_period_rate,
    detect_season_rank_extremes,
    detect_three_day_trend,
    detect_consistency,
    detect_period_pace,
    detect_mid_period_swing,
    detect_drought,
    detect_personal_best_proximity,
)


# ================================================================
# Archive detectors
# ================================================================

def detect_career_milestone(ctx: NarrativeContext, archive: HistoricalArchive) -> list[Candidate]:
    archived = archive.get_career_total(ctx.franchise, before_season=ctx.season)
    if archived is None:
        return []
    career = archived + season_total(ctx.days, ctx.franchise)
    before_today = career - ctx.today_pts

    for milestone in CAREER_MILESTONES:
        if before_today < milestone <= career:
            return [
                Candidate(
                    w.MILESTONE_CROSSED_SCORE,
                    f'🎉 Crossed {milestone} career pts',
                    source='career_milestone',
                )
            ]

    upcoming = next((m for m in CAREER_MILESTONES if m > career), None)
    if upcoming is None:
        return []
    remaining = round_half_up(upcoming - career)
    score = next((s for limit, s in w.MILESTONE_BANDS if remaining <= limit), None)
    if score is None:
        return []

    text = f'🎯 {remaining} pts from {upcoming} career pts'
    projection = ctx.projection
    if projection is not None and career + (projection.projected - projection.period_pts) >= upcoming:
        text += f' (on pace to pass it in P{ctx.period})'
    return [Candidate(score, text, source='career_milestone')]


def detect_season_pace_history(ctx: NarrativeContext, archive: HistoricalArchive) -> list[Candidate]:
    if ctx.projection is None or not ctx.period:
        return []
    past = archive.get_season_totals_through_period(ctx.franchise, ctx.period, before_season=ctx.season)
    if len(past) < w.SEASON_PACE_MIN_SEASONS:
        return []

    current = round_half_up(
        season_total(ctx.days, ctx.franchise) - ctx.projection.period_pts + ctx.projection.projected
    )
    best_season, best = max(past.items(), key=lambda item: item[1])
    worst_season, worst = min(past.items(), key=lambda item: item[1])

    if current > best:
        return [
            Candidate(
                w.SEASON_PACE_BEST_SCORE,
                f'📈 Best season pace through P{ctx.period} ever ({current} vs {round_half_up(best)} in {best_season})',
                source='season_pace_history',
            )
        ]
    if current >= best * w.SEASON_PACE_NEAR_BEST:
        return [
            Candidate(
                w.SEASON_PACE_NEAR_BEST_SCORE,
                f'📈 Near-best season pace through P{ctx.period} ({current} vs {round_half_up(best)} in {best_season})',
                source='season_pace_history',
            )
        ]
    if current < worst:
        return [
            Candidate(
                w.SEASON_PACE_WORST_SCORE,
                f'📉 Worst season pace through P{ctx.period} ever ({current} vs {round_half_up(worst)} in {worst_season})',
                is_bad=True,
                source='season_pace_history',
            )
        ]
    return []


def detect_period_dominance(ctx: NarrativeContext, archive: HistoricalArchive) -> list[Candidate]:
    if not ctx.period_days:
        return []
    rank = standings_rank(ctx.period_days, ctx.franchise)
    if rank is None or rank > w.DOMINANCE_MAX_PERIOD_RANK:
        return []

    tries = {e.season for e in archive.get_period_history(ctx.period, before_season=ctx.season)
             if e.franchise == ctx.franchise}
    wins = [e for e in archive.get_period_winners(ctx.period, before_season=ctx.season)
            if e.franchise == ctx.franchise]

    if len(wins) >= w.DOMINANCE_MIN_WINS:
        score = min(w.DOMINANCE_BASE + w.DOMINANCE_PER_WIN * (len(wins) - w.DOMINANCE_MIN_WINS), w.DOMINANCE_CAP)
        last = max(e.season for e in wins)
        return [
            Candidate(score, f'🏅 Has won P{ctx.period} {len(wins)} times (last in {last})', source='period_dominance')
        ]
    if not wins and rank == 1 and len(tries) >= w.DOMINANCE_NEVER_MIN_TRIES:
        return [
            Candidate(
                w.DOMINANCE_NEVER_SCORE,
                f'🆕 Leading P{ctx.period}, never won it in {len(tries)} tries',
                source='period_dominance',
            )
        ]
    return []


def detect_head_to_head(ctx: NarrativeContext, archive: HistoricalArchive) -> list[Candidate]:
    table = standings(ctx.period_days)
    if len(table) < 2:
        return []
    top_two = [f for f, _ in table[:2]]
    if ctx.franchise not in top_two:
        return []
    rival = top_two[1] if top_two[0] == ctx.franchise else top_two[0]

    wins, losses = archive.get_head_to_head(ctx.franchise, rival)
    if wins == 0 and losses >= w.H2H_MIN_MEETINGS:
        return [
            Candidate(
                w.H2H_NEVER_BEATEN_SCORE,
                f'😤 Never beaten {rival} head-to-head (0-{losses})',
                is_bad=True,
                source='head_to_head',
            )
        ]
    if losses == 0 and wins >= w.H2H_MIN_MEETINGS:
        return [
            Candidate(w.H2H_UNBEATEN_SCORE, f'💪 Never lost to {rival} head-to-head ({wins}-0)', source='head_to_head')
        ]
    return []


def detect_matchup_streak(ctx: NarrativeContext, archive: HistoricalArchive) -> list[Candidate]:
    results = [m.winner == ctx.franchise for m in archive.get_matchups(ctx.franchise)]
    if not results:
        return []
    last = results[-1]
    streak = 0
    for won in reversed(results):
        if won != last:
            break
        streak += 1

    weights = w.MATCHUP_STREAK_WIN if last else w.MATCHUP_STREAK_LOSS
    if streak < weights.min_streak:
        return []
    if last:
        return [Candidate(weights.score(streak), f'🏆 Won last {streak} archived matchups', source='matchup_streak')]
    return [
        Candidate(
            weights.score(streak), f'🧊 Lost last {streak} archived matchups', is_bad=True, source='matchup_streak'
        )
    ]


def detect_projected_records(ctx: NarrativeContext, archive: HistoricalArchive) -> list[Candidate]:
    """
    Compare the linear projection to all-time marks for this period number.

    Scores are scaled by projection_confidence(), which is 0 before
    day 2 of the period.
    """
    projection = ctx.projection
    if projection is None or not ctx.period or projection.projected <= 0:
        return []
    confidence = w.projection_confidence(projection.days_played)
    if confidence <= 0:
        return []

    p = ctx.period
    pace = projection.projected
    candidates = []

    history = archive.get_period_history(p, before_season=ctx.season)
    record = archive.get_league_period_record(p, before_season=ctx.season)
    worst = archive.get_league_period_worst(p, before_season=ctx.season)
    if record is not None and pace > record.fpts:
        candidates.append(
            Candidate(
                round(w.PROJ_RECORD_SCORE * confidence, 1),
                f'🚨 Proj {pace}: on pace to break the P{p} record '
                f'({round_half_up(record.fpts)}, {record.franchise} {record.season})',
                category=NarrativeCategory.PROJ,
                source='projected_league_record',
            )
        )
    elif worst is not None and len(history) >= w.PROJ_WORST_MIN_ENTRIES and pace < worst.fpts:
        candidates.append(
            Candidate(
                round(w.PROJ_LEAGUE_WORST_SCORE * confidence, 1),
                f'🧊 Proj {pace}: tracking the worst-ever P{p} '
                f'({round_half_up(worst.fpts)}, {worst.franchise} {worst.season})',
                is_bad=True,
                category=NarrativeCategory.PROJ,
                source='projected_league_worst',
            )
        )

    own = [e for e in history if e.franchise == ctx.franchise]
    best = archive.get_franchise_period_best(p, ctx.franchise, before_season=ctx.season)
    own_worst = archive.get_franchise_period_worst(p, ctx.franchise, before_season=ctx.season)
    if best is not None and pace > best.fpts:
        candidates.append(
            Candidate(
                round(w.PROJ_PERSONAL_BEST_SCORE * confidence, 1),
                f'📈 On pace for personal-best P{p} ({pace} proj vs {round_half_up(best.fpts)} in {best.season})',
                category=NarrativeCategory.PROJ,
                source='projected_personal_best',
            )
        )
    elif own_worst is not None and len(own) >= w.PROJ_WORST_MIN_ENTRIES and pace < own_worst.fpts:
        candidates.append(
            Candidate(
                round(w.PROJ_PERSONAL_WORST_SCORE * confidence, 1),
                f'📉 On pace for personal-worst P{p} ({pace} proj vs {round_half_up(own_worst.fpts)} in {own_worst.season})',
                is_bad=True,
                category=NarrativeCategory.PROJ,
                source='projected_personal_worst',
            )
        )
    return candidates


ARCHIVE_DETECTORS = (
    detect_career_milestone,
    detect_season_pace_history,
    detect_period_dominance,
    detect_head_to_head,
    detect_matchup_streak,
    detect_projected_records,
)


# ================================================================
# Selection
# ================================================================

def collect_candidates(ctx: NarrativeContext, archive: Optional[HistoricalArchive] = None) -> list[Candidate]:
    """Run every detector and gather the candidates they emit."""
    candidates = []
    for detector in LOCAL_DETECTORS:
        candidates.extend(detector(ctx))

    if archive is not None:
        archive_candidates = []
        try:
            for detector in ARCHIVE_DETECTORS:
                archive_candidates.extend(detector(ctx, archive))
        except ArchiveUnavailableError as e:
            logger.warning(f'{ctx.franchise}: skipping archive narratives ({e})')
            archive_candidates = []
        candidates.extend(archive_candidates)

    return candidates


def select_narratives(candidates: Iterable[Candidate], limit: int = w.NARRATIVE_LIMIT) -> list[Candidate]:
    """
    Pick the highest-scoring candidates, at most one per category.

    Ties keep detector order (stable sort).
    """
    picked: list[Candidate] = []
    used_categories = set()
    for candidate in sorted(candidates, key=lambda c: -c.score):
        if len(picked) >= limit:
            break
        if candidate.category is not None and candidate.category in used_categories:
            continue
        if any(p.text == candidate.text for p in picked):
            continue
        picked.append(candidate)
        if candidate.category is not None:
            used_categories.add(candidate.category)
    return picked


def fallback_narratives(ctx: NarrativeContext) -> list[str]:
    """
    Secondary lenses for teams with nothing notable, in fixed order.

    1. Today vs other teams (day rank context)
    2. Today vs own averages (season, last 7 days)
    3. This period vs other teams
    4. This period vs own other periods
    """
    lines = []
    today_pts = ctx.today_pts
    franchise = ctx.franchise

    # Lens 1: today vs other teams
    if ctx.ranked and today_pts > 0:
        ordered = sorted(ctx.days[-1].teams, key=lambda t: -t.day_pts)
        today_rank = ctx.ranked[-1].rank
        if today_rank == 1 and len(ordered) > 1:
            margin = today_pts - ordered[1].day_pts
            if margin > 0:
                lines.append(f'Won the day by {round_half_up(margin)} pts')
        elif ordered and ordered[0].franchise != franchise:
            gap = ordered[0].day_pts - today_pts
            if gap > 0:
                lines.append(f'{round_half_up(gap)} pts behind day leader')

    # Lens 2: today vs own averages
    if today_pts > 0 and ctx.ppg and ctx.ppg > 0:
        pct = pct_change(today_pts, ctx.ppg)
        if pct >= w.FALLBACK_SEASON_PCT:
            lines.append(f'{pct}% above season average today')
        elif pct <= -w.FALLBACK_SEASON_PCT:
            lines.append(f'{abs(pct)}% below season average today')
    if today_pts > 0 and len(ctx.recent) >= 7:
        last7 = [d.day_pts for d in ctx.recent[-7:]]
        avg7 = sum(last7) / len(last7)
        if avg7 > 0:
            pct = pct_change(today_pts, avg7)
            if pct >= w.FALLBACK_WEEK_PCT:
                lines.append(f'Big day, {pct}% above 7-day avg')
            elif pct <= -w.FALLBACK_WEEK_PCT:
                lines.append(f'Quiet day, {abs(pct)}% below 7-day avg')

    # Lens 3: this period vs other teams
    if len(ctx.period_days) >= 2:
        table = standings(ctx.period_days)
        rank = standings_rank(ctx.period_days, franchise)
        if rank:
            my_pts = dict(table).get(franchise, 0.0)
            if rank <= 2 and len(table) > 1:
                lead = my_pts - table[1][1]
                if rank == 1 and lead > 0:
                    lines.append(f'Leading P{ctx.period} by {round_half_up(lead)} pts')
                else:
                    lines.append(f'#{rank} in P{ctx.period} ({round_half_up(my_pts)} pts)')
            elif rank >= ctx.num_teams - 1:
                lines.append(f'#{rank} in P{ctx.period} ({round_half_up(my_pts)} pts)')

    # Lens 4: this period vs own other periods
    previous = ctx.previous_period_totals()
    if previous and len(ctx.period_days) >= 3:
        my_pts, _, _ = ctx.own_period_pts()
        my_rate = my_pts / len(ctx.period_days)
        day_counts = {}
        for day in ctx.days:
            day_counts[day.period] = day_counts.get(day.period, 0) + 1
        rates = [total / day_counts[p] for p, total in previous if day_counts.get(p)]
        rates = [r for r in rates if r > 0]
        if rates:
            avg_rate = sum(rates) / len(rates)
            pct = pct_change(my_rate, avg_rate)
            if pct >= w.FALLBACK_CAREER_PCT:
                lines.append(f'P{ctx.period} pace {pct}% above season norm')
            elif pct <= -w.FALLBACK_CAREER_PCT:
                lines.append(f'P{ctx.period} pace {abs(pct)}% below season norm')

    return lines


def build_narratives(
    days: list[DailyRecord],
    franchise: str,
    period: Optional[int],
    today_pts: float,
    projection: Optional[Projection] = None,
    avg3d: Optional[float] = None,
    ppg: Optional[float] = None,
    archive: Optional[HistoricalArchive] = None,
    periods: Optional[list[PeriodDefinition]] = None,
    season: Optional[int] = None,
    today_gp: int = 0,
    limit: int = w.NARRATIVE_LIMIT,
) -> list[str]:
    """
    Build the narrative lines for one team's card.

    Args:
        days: Daily records ascending by date, tonight's record last
        franchise: Franchise abbreviation
        period: Current period number (None during breaks)
        today_pts: Tonight's day points
        projection: Period projection from project_period_finish()
        avg3d: 3-day rolling PPG
        ppg: Season PPG
        archive: Historical archive; None skips the archive tier
        periods: Period table (defaults to league config)
        season: Running season key, so archive queries skip it
        today_gp: Games played tonight
        limit: Maximum lines to return

    Returns:
        1..limit lines once two days of history exist, otherwise []
    """
    if len(days) < 2:
        return []

    ctx = NarrativeContext(
        franchise=franchise,
        period=period,
        days=days,
        today_pts=today_pts,
        projection=projection,
        avg3d=avg3d,
        ppg=ppg,
        period_def=get_period_definition(period, periods) if period else None,
        season=season,
        today_gp=today_gp,
    )

    candidates = collect_candidates(ctx, archive)
    for c in sorted(candidates, key=lambda c: -c.score):
        logger.debug(f'{franchise} candidate [{c.source}] {c.score:.1f}: {c.text}')
    picked = [c.text for c in select_narratives(candidates, limit)]

    if len(picked) < limit:
        for line in fallback_narratives(ctx):
            if len(picked) >= limit:
                break
            if line not in picked:
                picked.append(line)

    if not picked:
        if projection is not None:
            picked.append(f'Proj finish: {projection.projected} pts')
        else:
            picked.append(f'Season avg: {ppg or 0:.2f} PPG')

    return picked
