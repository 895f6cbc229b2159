"""League configuration management."""

from datetime import date, datetime
from functools import lru_cache
from pathlib import Path
from zoneinfo import ZoneInfo

from .constants import CONFIG_PATH, PROJECT_DIR
from .schemas import LeagueConfig, PeriodDefinition
from .utils import load_json

LEAGUE_TIMEZONE = ZoneInfo('America/New_York')


@lru_cache(maxsize=1)
def get_config() -> LeagueConfig:
    """
    Load league configuration from data/league_config.json.

    Configuration is cached after first load for performance.

    Returns:
        LeagueConfig object with validated settings

    Raises:
        FileNotFoundError: If league_config.json doesn't exist
        ValueError: If config file has invalid structure

    Example:
        from sparky.config import get_config
        config = get_config()
        print(f"Current season: {config.season}")
    """
    return load_json(CONFIG_PATH, schema=LeagueConfig)


def get_current_season() -> int:
    """Get the archive season key of the running season."""
    return get_config().season


def get_periods() -> list[PeriodDefinition]:
    """Get the ordered scoring-period table."""
    return get_config().periods


def get_daily_dir() -> Path:
    """Get the directory holding one JSON file per scored date."""
    return PROJECT_DIR / get_config().daily_dir


def get_period_definition(
    period: int | None, periods: list[PeriodDefinition] | None = None
) -> PeriodDefinition | None:
    """Look up a period by number. Returns None for unknown periods."""
    if period is None:
        return None
    for p in periods if periods is not None else get_periods():
        if p.period == period:
            return p
    return None


def get_period_for_date(
    day: date | str, periods: list[PeriodDefinition] | None = None
) -> int | None:
    """
    Get the period number for a date.

    Returns None if the date falls outside all periods (e.g. Olympic break).
    """
    if isinstance(day, str):
        day = date.fromisoformat(day)
    for p in periods if periods is not None else get_periods():
        if p.contains(day):
            return p.period
    return None


def get_current_period(periods: list[PeriodDefinition] | None = None) -> int | None:
    """Get today's period number, using league (Eastern) time."""
    return get_period_for_date(datetime.now(LEAGUE_TIMEZONE).date(), periods)


def get_all_season_dates(periods: list[PeriodDefinition] | None = None) -> list[tuple[date, int]]:
    """Get every (date, period) pair covered by the period table, in order."""
    return [
        (day, p.period)
        for p in (periods if periods is not None else get_periods())
        for day in p.dates()
    ]


def clear_config_cache() -> None:
    """
    Clear the configuration cache.

    Use this if the config file is modified during runtime
    and you need to reload it.
    """
    get_config.cache_clear()
