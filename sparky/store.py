"""Daily score store: one JSON snapshot per scored date."""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional

from .config import get_all_season_dates, get_daily_dir
from .franchise import resolve_franchise
from .schemas import DailyRecord, PeriodDefinition
from .utils import load_json, save_json
from .validators import validate_daily_record

logger = logging.getLogger('sparky.store')


def canonicalize_record(record: DailyRecord) -> DailyRecord:
    """
    Return a copy of a record with franchise fields resolved to abbreviations.

    Names that cannot be resolved are left as-is (and logged) rather than
    attributed to a guessed franchise.
    """
    teams = []
    for t in record.teams:
        resolved = resolve_franchise(t.franchise) or resolve_franchise(t.name)
        if resolved is None:
            logger.warning(f'{record.date}: could not resolve franchise for {t.name or t.franchise!r}')
            teams.append(t)
        else:
            teams.append(t.model_copy(update={'franchise': resolved}))
    return record.model_copy(update={'teams': teams})


class DailyScoreStore:
    """
    Reads and writes data/daily/YYYY-MM-DD.json files.

    Records are written once per date by ingestion and only read after
    that; load_all() is the snapshot every analysis run folds over.
    """

    def __init__(self, daily_dir: Optional[Path | str] = None):
        self.daily_dir = Path(daily_dir) if daily_dir is not None else get_daily_dir()

    def path_for(self, day: date) -> Path:
        return self.daily_dir / f'{day.isoformat()}.json'

    def has(self, day: date) -> bool:
        return self.path_for(day).exists()

    def dates(self) -> list[date]:
        """Get every date with a stored file, ascending."""
        if not self.daily_dir.exists():
            return []
        found = []
        for path in sorted(self.daily_dir.glob('*.json')):
            try:
                found.append(date.fromisoformat(path.stem))
            except ValueError:
                logger.debug(f'Ignoring non-date file: {path.name}')
        return found

    def load(self, day: date) -> Optional[DailyRecord]:
        """Load one date's record, or None if missing or unreadable."""
        path = self.path_for(day)
        if not path.exists():
            return None
        try:
            return load_json(path, schema=DailyRecord)
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning(f'Skipping corrupt daily file {path.name}: {e}')
            return None

    def load_all(self) -> list[DailyRecord]:
        """
        Load every usable daily record, sorted by date ascending.

        Skips corrupt files, days outside any period, empty team lists and
        days where every team scored zero (no games). Franchise names are
        canonicalized.

        Returns:
            List of DailyRecord objects
        """
        days = []
        for day in self.dates():
            record = self.load(day)
            if record is None:
                continue
            if not record.period or not record.teams:
                logger.debug(f'{day}: no period or teams, skipping')
                continue
            if not record.has_games:
                logger.debug(f'{day}: no games (all teams scored 0), skipping')
                continue
            record = canonicalize_record(record)
            for warning in validate_daily_record(record):
                logger.warning(warning)
            days.append(record)

        logger.info(f'Loaded {len(days)} daily records from {self.daily_dir}')
        return days

    def save(self, record: DailyRecord) -> Path:
        """
        Save a daily record, canonicalizing franchise names first.

        Days with no games are persisted too, so backfill doesn't retry them.
        """
        path = self.path_for(record.date)
        save_json(path, canonicalize_record(record))
        logger.info(f'Daily score saved: {path.name}')
        return path

    def missing_dates(self, periods: Optional[list[PeriodDefinition]] = None) -> list[tuple[date, int]]:
        """Get (date, period) pairs in the season calendar with no stored file."""
        stored = set(self.dates())
        return [(day, period) for day, period in get_all_season_dates(periods) if day not in stored]


def days_for_period(days: list[DailyRecord], period: Optional[int]) -> list[DailyRecord]:
    """Get days for a specific period only."""
    return [d for d in days if d.period == period]
