"""Tunable scoring constants for the narrative detectors.

Scores live on a 0-100 scale. Values were tuned by eye against real
nights of the league and are kept exactly as tuned; change them here
rather than inside the detectors.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class StreakWeights:
    min_streak: int
    base: float
    per_day: float  # added per day beyond min_streak
    cap: float

    def score(self, streak: int) -> float:
        return min(self.base + self.per_day * (streak - self.min_streak), self.cap)


# ---- Local detectors ----

WIN_STREAK = StreakWeights(min_streak=2, base=40, per_day=15, cap=95)
PODIUM_STREAK = StreakWeights(min_streak=3, base=25, per_day=10, cap=90)
BOTTOM_HALF_STREAK = StreakWeights(min_streak=5, base=30, per_day=7, cap=85)
DROUGHT = StreakWeights(min_streak=8, base=35, per_day=3, cap=60)
PODIUM_CUTOFF = 3  # "top 3" for podium, consistency and drought

# Best day this period: only once the period is at least half done
BEST_DAY_MIN_ELAPSED = 0.5
BEST_DAY_BASE = 30
BEST_DAY_ELAPSED_BONUS = 35

# Period rank change
RANK_CHANGE_BASE = 30
RANK_CHANGE_PER_SPOT = 8
RANK_CHANGE_ELAPSED_BONUS = 15
RANK_CHANGE_EDGE_BONUS = 10  # reaching/leaving the top 2 or bottom 2
RANK_CHANGE_EDGE_SPOTS = 2
RANK_CHANGE_CAP = 80

# Today's per-game rate vs the period-to-date rate
DAY_VS_PERIOD_MIN_DAYS = 3
DAY_VS_PERIOD_MIN_PCT = 30
DAY_VS_PERIOD_BASE = 35
DAY_VS_PERIOD_PER_PCT = 0.5
DAY_VS_PERIOD_CAP = 75

# Season rank extremes (standing context, not news)
SEASON_FIRST_SCORE = 35
SEASON_LAST_SCORE = 30

# 3-day average vs season PPG
TREND_MILD_PCT = 8
TREND_STRONG_PCT = 20
TREND_MILD_SCORE = 30
TREND_STRONG_BASE = 50
TREND_STRONG_CAP = 70

# Top-3 finishes in the last 7 days
CONSISTENCY_WINDOW = 7
CONSISTENCY_HIGH = 6
CONSISTENCY_LOW = 1
CONSISTENCY_HIGH_SCORE = 45
CONSISTENCY_LOW_SCORE = 40

# Current period projection vs this season's completed periods
PERIOD_PACE_MIN_DAYS = 3
PERIOD_PACE_BEST_MARGIN = 1.05
PERIOD_PACE_WORST_MARGIN = 0.95
PERIOD_PACE_WORST_MIN_PERIODS = 3
PERIOD_PACE_BEST_SCORE = 55
PERIOD_PACE_WORST_SCORE = 50
COMPLETE_PERIOD_MIN_DAYS = 7

# Mid-period comeback / collapse
SWING_MIN_DAYS = 5
SWING_MIN_SPOTS = 3
SWING_COMEBACK_SCORE = 55
SWING_COLLAPSE_SCORE = 50

# Closing in on this season's best period
PERSONAL_BEST_MIN_DAYS = 5
PERSONAL_BEST_PTS_PER_DAY_LEFT = 2
PERSONAL_BEST_SCORE = 50

# ---- Archive detectors ----

# Career milestone bands: (max pts away, score), checked in order
MILESTONE_BANDS = ((20, 85), (50, 70), (100, 55))
MILESTONE_CROSSED_SCORE = 90

# Season pace vs the franchise's own past seasons through this period
SEASON_PACE_MIN_SEASONS = 3
SEASON_PACE_NEAR_BEST = 0.97
SEASON_PACE_BEST_SCORE = 65
SEASON_PACE_NEAR_BEST_SCORE = 50
SEASON_PACE_WORST_SCORE = 55

# How often the franchise has won this period number
DOMINANCE_MIN_WINS = 2
DOMINANCE_BASE = 40
DOMINANCE_PER_WIN = 5
DOMINANCE_CAP = 55
DOMINANCE_NEVER_MIN_TRIES = 5
DOMINANCE_NEVER_SCORE = 55
DOMINANCE_MAX_PERIOD_RANK = 2

# Head-to-head with the other top-2 team this period
H2H_MIN_MEETINGS = 2
H2H_NEVER_BEATEN_SCORE = 55
H2H_UNBEATEN_SCORE = 60

# Archive-wide matchup streaks
MATCHUP_STREAK_WIN = StreakWeights(min_streak=3, base=45, per_day=8, cap=80)
MATCHUP_STREAK_LOSS = StreakWeights(min_streak=3, base=40, per_day=8, cap=75)

# Projection vs all-time marks for this period number, scaled by confidence
PROJ_RECORD_SCORE = 80
PROJ_LEAGUE_WORST_SCORE = 70
PROJ_PERSONAL_BEST_SCORE = 60
PROJ_PERSONAL_WORST_SCORE = 55
PROJ_WORST_MIN_ENTRIES = 3
CONFIDENCE_MIN_DAY = 2
CONFIDENCE_FULL_DAY = 10
CONFIDENCE_FLOOR = 0.3


def projection_confidence(days_played: int) -> float:
    """
    Trust in a linear projection after a number of period days.

    0 before day 2, 0.3 at day 2, rising linearly to 1.0 at day 10.
    """
    if days_played < CONFIDENCE_MIN_DAY:
        return 0.0
    if days_played >= CONFIDENCE_FULL_DAY:
        return 1.0
    span = CONFIDENCE_FULL_DAY - CONFIDENCE_MIN_DAY
    return CONFIDENCE_FLOOR + (1.0 - CONFIDENCE_FLOOR) * (days_played - CONFIDENCE_MIN_DAY) / span


# ---- Selection and fallback ----

NARRATIVE_LIMIT = 2
RECENT_WINDOW = 30
FALLBACK_SEASON_PCT = 25
FALLBACK_WEEK_PCT = 40
FALLBACK_CAREER_PCT = 15
