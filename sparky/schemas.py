"""Pydantic schemas for persisted daily scores and league configuration."""

from datetime import date, timedelta

from pydantic import BaseModel, Field, field_validator, model_validator


class TeamDaily(BaseModel):
    """One team's line in a daily scoring snapshot."""

    franchise: str = ''
    name: str | None = None
    day_pts: float = Field(default=0.0, alias='dayPts', ge=0)
    proj_pts: float = Field(default=0.0, alias='projPts')
    gp: int = Field(default=0, ge=0)

    @field_validator('day_pts', 'proj_pts', 'gp', mode='before')
    @classmethod
    def missing_numbers_are_zero(cls, v):
        """Scraped cards with no value for a stat are stored as null."""
        return 0 if v is None or v == '' else v

    @model_validator(mode='after')
    def franchise_defaults_to_name(self):
        if not self.franchise and self.name:
            self.franchise = self.name
        return self

    class Config:
        extra = 'ignore'
        populate_by_name = True


class DailyRecord(BaseModel):
    """Complete data/daily/YYYY-MM-DD.json file structure."""

    date: date
    period: int | None = Field(default=None, ge=1)
    teams: list[TeamDaily] = Field(default_factory=list)
    scraped_at: str | None = Field(default=None, alias='scrapedAt')

    @property
    def total_pts(self) -> float:
        return sum(t.day_pts for t in self.teams)

    @property
    def has_games(self) -> bool:
        """False for days where every team scored zero (no games played)."""
        return self.total_pts > 0

    def team(self, franchise: str) -> TeamDaily | None:
        for t in self.teams:
            if t.franchise == franchise:
                return t
        return None

    class Config:
        extra = 'ignore'
        populate_by_name = True


class PeriodDefinition(BaseModel):
    """A scoring period: inclusive [start, end] calendar dates."""

    period: int = Field(..., ge=1)
    start: date
    end: date

    @model_validator(mode='after')
    def end_not_before_start(self):
        if self.end < self.start:
            raise ValueError(f'Period {self.period} ends ({self.end}) before it starts ({self.start})')
        return self

    @property
    def total_days(self) -> int:
        return (self.end - self.start).days + 1

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def dates(self) -> list[date]:
        return [self.start + timedelta(days=i) for i in range(self.total_days)]

    class Config:
        extra = 'forbid'


class HistoricalSettings(BaseModel):
    """Where the multi-season archive is fetched from."""

    database_url: str | None = None
    matchups_url: str | None = None
    timeout_seconds: float = Field(default=15.0, gt=0, le=120)

    class Config:
        extra = 'forbid'


class LeagueConfig(BaseModel):
    """League configuration settings."""

    league_id: str = Field(..., min_length=1)
    season: int = Field(..., ge=2000, le=2100)
    periods: list[PeriodDefinition] = Field(..., min_length=1)
    daily_dir: str = 'data/daily'
    narrative_limit: int = Field(default=2, ge=1, le=5)
    historical: HistoricalSettings = Field(default_factory=HistoricalSettings)

    @field_validator('periods')
    @classmethod
    def validate_period_order(cls, v):
        """Periods must be ordered, uniquely numbered and non-overlapping (gaps allowed)."""
        seen = set()
        for prev, cur in zip(v, v[1:]):
            if cur.start <= prev.end:
                raise ValueError(f'Period {cur.period} overlaps or precedes period {prev.period}')
        for p in v:
            if p.period in seen:
                raise ValueError(f'Duplicate period number: {p.period}')
            seen.add(p.period)
        return v

    class Config:
        extra = 'forbid'
