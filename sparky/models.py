"""Data models for the nightly analysis."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional


class NarrativeCategory(str, Enum):
    """De-duplication tag: at most one narrative per category is shown."""
    PROJ = 'proj'


@dataclass(frozen=True)
class Candidate:
    """A scored observation about a team, competing for a narrative slot."""
    score: float
    text: str
    is_bad: bool = False
    category: Optional[NarrativeCategory] = None
    source: str = ''  # Detector that produced it, for debug logging


@dataclass
class Projection:
    """Linear period-finish projection for one franchise."""
    period_pts: float
    projected: int
    days_played: int
    days_remaining: int
    total_days: int


@dataclass(frozen=True)
class RankedDay:
    """A franchise's finish on one scored date."""
    date: date
    period: Optional[int]
    rank: int
    day_pts: float
    gp: int
    num_teams: int


@dataclass(frozen=True)
class ArchiveEntry:
    """One franchise's totals for one (season, period) in the archive."""
    season: int
    period: int
    franchise: str
    fpts: float
    fpg: float = 0.0
    gp: int = 0
    sr: int = 0


@dataclass(frozen=True)
class MatchupOutcome:
    """Result of one archived head-to-head."""
    season: int
    period: int
    winner: str
    loser: str


@dataclass
class TeamNightlyStats:
    """Everything the report shows for one franchise on one night."""
    franchise: str
    name: str
    day_pts: float
    proj_pts: float = 0.0
    gp: int = 0
    ppg: Optional[float] = None
    avg3d: Optional[float] = None
    avg7d: Optional[float] = None
    vs_proj: Optional[float] = None
    projection: Optional[Projection] = None
    narratives: List[str] = field(default_factory=list)
    season_pts: float = 0.0
    day_rank: int = 0
    season_rank: int = 0

    @property
    def period_pts(self) -> float:
        return self.projection.period_pts if self.projection else 0.0


@dataclass
class NightlyAnalysis:
    """Ranked, fully annotated team list for one date."""
    date: date
    period: Optional[int]
    scraped_at: str
    teams: List[TeamNightlyStats]  # sorted by day score
    season_ranked: List[TeamNightlyStats]  # sorted by season total
    period_days_played: int = 0
    total_season_days: int = 0
