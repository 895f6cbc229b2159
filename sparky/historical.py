"""Read-only client for the multi-season league archive.

The archive is a wide CSV export with one row per (season, period) and
per-owner column groups:

    Season | Period | {Owner}_FPts | {Owner}_FP/G | {Owner}_GP | {Owner}_SR

It is fetched once per client, reshaped into a long polars frame
(season, period, franchise, fpts, fpg, gp, sr) and cached for the
lifetime of the process. Query methods return None or an empty
collection when there is no data; only transport or parse failures
raise, always as ArchiveUnavailableError.
"""

import io
import logging
import threading
from pathlib import Path
from typing import Optional

import polars as pl
import requests

from .constants import OWNER_TO_FRANCHISE
from .franchise import resolve_franchise
from .models import ArchiveEntry, MatchupOutcome
from .schemas import HistoricalSettings

logger = logging.getLogger('sparky.historical')

FRAME_SCHEMA = {
    'season': pl.Int64,
    'period': pl.Int64,
    'franchise': pl.Utf8,
    'fpts': pl.Float64,
    'fpg': pl.Float64,
    'gp': pl.Int64,
    'sr': pl.Int64,
}


class ArchiveUnavailableError(RuntimeError):
    """The archive could not be fetched or parsed."""


def _leading_int(column: str) -> pl.Expr:
    # "2013-14" -> 2013, "P7" is not a period
    return pl.col(column).str.extract(r'^\s*(\d+)', 1).cast(pl.Int64, strict=False)


def _number(column: str, columns: list[str]) -> pl.Expr:
    if column not in columns:
        return pl.lit(0.0)
    return (
        pl.col(column)
        .str.strip_chars()
        .str.replace_all(',', '')
        .cast(pl.Float64, strict=False)
        .fill_null(0.0)
    )


def parse_database_csv(text: str) -> pl.DataFrame:
    """
    Reshape the wide archive CSV into one row per (season, period, franchise).

    Rows where a franchise has neither points nor games are dropped
    (owners who joined later have empty early seasons).

    Raises:
        ValueError: If the Season/Period columns are missing
    """
    raw = pl.read_csv(io.BytesIO(text.encode('utf-8')), infer_schema_length=0)
    raw = raw.rename({c: c.strip() for c in raw.columns})
    if 'Season' not in raw.columns or 'Period' not in raw.columns:
        raise ValueError('Archive CSV has no Season/Period columns')

    frames = []
    for owner, franchise in OWNER_TO_FRANCHISE.items():
        frames.append(
            raw.select(
                _leading_int('Season').alias('season'),
                _leading_int('Period').alias('period'),
                pl.lit(franchise).alias('franchise'),
                _number(f'{owner}_FPts', raw.columns).alias('fpts'),
                _number(f'{owner}_FP/G', raw.columns).alias('fpg'),
                _number(f'{owner}_GP', raw.columns).cast(pl.Int64).alias('gp'),
                _number(f'{owner}_SR', raw.columns).cast(pl.Int64).alias('sr'),
            )
        )

    return (
        pl.concat(frames)
        .filter(
            pl.col('season').is_not_null()
            & pl.col('period').is_not_null()
            & ((pl.col('fpts') > 0) | (pl.col('gp') > 0))
        )
        .sort(['season', 'period'], maintain_order=True)
    )


def _to_franchise(name: str) -> Optional[str]:
    name = (name or '').strip()
    return OWNER_TO_FRANCHISE.get(name) or resolve_franchise(name)


def parse_matchups_csv(text: str) -> list[MatchupOutcome]:
    """Parse a Season, Period, Winner, Loser CSV (owner names or team names)."""
    raw = pl.read_csv(io.BytesIO(text.encode('utf-8')), infer_schema_length=0)
    raw = raw.rename({c: c.strip() for c in raw.columns})
    missing = {'Season', 'Period', 'Winner', 'Loser'} - set(raw.columns)
    if missing:
        raise ValueError(f'Matchups CSV is missing columns: {", ".join(sorted(missing))}')

    frame = raw.select(
        _leading_int('Season').alias('season'),
        _leading_int('Period').alias('period'),
        pl.col('Winner'),
        pl.col('Loser'),
    ).filter(pl.col('season').is_not_null() & pl.col('period').is_not_null())

    outcomes = []
    for row in frame.iter_rows(named=True):
        winner = _to_franchise(row['Winner'])
        loser = _to_franchise(row['Loser'])
        if winner and loser and winner != loser:
            outcomes.append(MatchupOutcome(row['season'], row['period'], winner, loser))
        else:
            logger.debug(f'Skipping unresolved matchup row: {row}')
    return sorted(outcomes, key=lambda m: (m.season, m.period))


def derive_matchups(frame: pl.DataFrame) -> list[MatchupOutcome]:
    """
    Derive one outcome per (season, period): the period-crown race.

    The top scorer is the winner and the runner-up the loser; exact ties
    produce no outcome.
    """
    top_two = (
        frame.sort(['season', 'period', 'fpts'], descending=[False, False, True])
        .group_by(['season', 'period'], maintain_order=True)
        .head(2)
    )
    outcomes = []
    for group in top_two.partition_by(['season', 'period'], maintain_order=True):
        if group.height < 2:
            continue
        first, second = group.row(0, named=True), group.row(1, named=True)
        if first['fpts'] == second['fpts']:
            continue
        outcomes.append(
            MatchupOutcome(first['season'], first['period'], first['franchise'], second['franchise'])
        )
    return outcomes


def _entry(row: dict) -> ArchiveEntry:
    return ArchiveEntry(
        season=row['season'],
        period=row['period'],
        franchise=row['franchise'],
        fpts=row['fpts'],
        fpg=row['fpg'],
        gp=row['gp'],
        sr=row['sr'],
    )


class HistoricalArchive:
    """
    Memoizing accessor over the league archive.

    Construct one per process and pass it to the narrative engine. The
    first query triggers the fetch; concurrent first callers wait on the
    same load instead of issuing duplicate requests. A failed load is
    remembered too, so a run pays the network timeout at most once.
    """

    def __init__(
        self,
        database_url: Optional[str] = None,
        matchups_url: Optional[str] = None,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ):
        self.database_url = database_url
        self.matchups_url = matchups_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self._lock = threading.Lock()
        self._frame: Optional[pl.DataFrame] = None
        self._matchups: Optional[list[MatchupOutcome]] = None
        self._error: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: HistoricalSettings) -> 'HistoricalArchive':
        return cls(
            database_url=settings.database_url,
            matchups_url=settings.matchups_url,
            timeout=settings.timeout_seconds,
        )

    @classmethod
    def from_entries(
        cls,
        entries: list[ArchiveEntry],
        matchups: Optional[list[MatchupOutcome]] = None,
    ) -> 'HistoricalArchive':
        """Build a preloaded archive (no network), e.g. for tests or replays."""
        archive = cls()
        archive._frame = pl.DataFrame(
            {
                'season': [int(e.season) for e in entries],
                'period': [int(e.period) for e in entries],
                'franchise': [e.franchise for e in entries],
                'fpts': [float(e.fpts) for e in entries],
                'fpg': [float(e.fpg) for e in entries],
                'gp': [int(e.gp) for e in entries],
                'sr': [int(e.sr) for e in entries],
            },
            schema=FRAME_SCHEMA,
        ).sort(['season', 'period'], maintain_order=True)
        archive._matchups = matchups if matchups is not None else derive_matchups(archive._frame)
        return archive

    # ---- Loading ----

    def _read_source(self, source: str) -> str:
        if source.startswith(('http://', 'https://')):
            try:
                response = self.session.get(source, timeout=self.timeout)
                response.raise_for_status()
            except requests.RequestException as e:
                raise ArchiveUnavailableError(f'Failed to fetch historical data: {e}') from e
            return response.text

        try:
            return Path(source).read_text(encoding='utf-8')
        except OSError as e:
            raise ArchiveUnavailableError(f'Failed to read historical data from {source}: {e}') from e

    def _load(self) -> None:
        if not self.database_url:
            raise ArchiveUnavailableError('No historical archive configured')

        text = self._read_source(self.database_url)
        try:
            frame = parse_database_csv(text)
        except (ValueError, pl.exceptions.PolarsError) as e:
            raise ArchiveUnavailableError(f'Could not parse historical data: {e}') from e

        if self.matchups_url:
            try:
                matchups = parse_matchups_csv(self._read_source(self.matchups_url))
            except (ValueError, pl.exceptions.PolarsError) as e:
                raise ArchiveUnavailableError(f'Could not parse matchup data: {e}') from e
        else:
            matchups = derive_matchups(frame)

        self._frame = frame
        self._matchups = matchups
        logger.info(f'Loaded {frame.height} historical period records, {len(matchups)} matchups')

    def _ensure_loaded(self) -> None:
        with self._lock:
            if self._frame is not None:
                return
            if self._error is not None:
                raise ArchiveUnavailableError(self._error)
            try:
                self._load()
            except ArchiveUnavailableError as e:
                self._error = str(e)
                logger.warning(f'Historical archive unavailable: {e}')
                raise

    @property
    def frame(self) -> pl.DataFrame:
        """The long-format archive frame (loads on first access)."""
        self._ensure_loaded()
        return self._frame

    def reset(self) -> None:
        """Forget the cached archive (or cached failure) so the next query refetches."""
        with self._lock:
            self._frame = None
            self._matchups = None
            self._error = None

    def _history(self, before_season: Optional[int] = None) -> pl.DataFrame:
        frame = self.frame
        if before_season is not None:
            frame = frame.filter(pl.col('season') < before_season)
        return frame

    # ---- Period queries ----

    def get_period_history(self, period: int, before_season: Optional[int] = None) -> list[ArchiveEntry]:
        """Get every franchise's total for a period number across all seasons."""
        rows = self._history(before_season).filter(pl.col('period') == period)
        return [_entry(r) for r in rows.iter_rows(named=True)]

    def _extreme(self, frame: pl.DataFrame, best: bool) -> Optional[ArchiveEntry]:
        frame = frame.filter(pl.col('fpts') > 0)
        if frame.height == 0:
            return None
        ordered = frame.sort('fpts', descending=best, maintain_order=True)
        return _entry(ordered.row(0, named=True))

    def get_league_period_record(self, period: int, before_season: Optional[int] = None) -> Optional[ArchiveEntry]:
        """Get the all-time league high for a period number."""
        return self._extreme(self._history(before_season).filter(pl.col('period') == period), best=True)

    def get_league_period_worst(self, period: int, before_season: Optional[int] = None) -> Optional[ArchiveEntry]:
        """Get the all-time league low for a period number."""
        return self._extreme(self._history(before_season).filter(pl.col('period') == period), best=False)

    def get_franchise_period_best(
        self, period: int, franchise: str, before_season: Optional[int] = None
    ) -> Optional[ArchiveEntry]:
        """Get a franchise's best total for a period number."""
        frame = self._history(before_season).filter(
            (pl.col('period') == period) & (pl.col('franchise') == franchise)
        )
        return self._extreme(frame, best=True)

    def get_franchise_period_worst(
        self, period: int, franchise: str, before_season: Optional[int] = None
    ) -> Optional[ArchiveEntry]:
        """Get a franchise's worst total for a period number."""
        frame = self._history(before_season).filter(
            (pl.col('period') == period) & (pl.col('franchise') == franchise)
        )
        return self._extreme(frame, best=False)

    def get_franchise_all_time_best(self, franchise: str) -> Optional[ArchiveEntry]:
        """Get a franchise's best period of any number."""
        return self._extreme(self.frame.filter(pl.col('franchise') == franchise), best=True)

    def get_league_all_time_record(self) -> Optional[ArchiveEntry]:
        """Get the best single period anyone has posted."""
        return self._extreme(self.frame, best=True)

    def get_period_winners(self, period: int, before_season: Optional[int] = None) -> list[ArchiveEntry]:
        """Get the top scorer of a period number in each archived season."""
        frame = self._history(before_season).filter(pl.col('period') == period)
        winners = (
            frame.sort(['season', 'fpts'], descending=[False, True], maintain_order=True)
            .group_by('season', maintain_order=True)
            .first()
        )
        return [_entry(r) for r in winners.select(list(FRAME_SCHEMA)).iter_rows(named=True)]

    # ---- Franchise aggregates ----

    def get_franchise_career_stats(self, franchise: str) -> Optional[dict]:
        """
        Get summary stats for a franchise across all archived periods.

        Returns:
            Dict with total_periods, avg_fpts, best/worst fpts and where
            they happened, or None if the franchise has no periods
        """
        frame = self.frame.filter((pl.col('franchise') == franchise) & (pl.col('fpts') > 0))
        if frame.height == 0:
            return None
        best = self._extreme(frame, best=True)
        worst = self._extreme(frame, best=False)
        return {
            'total_periods': frame.height,
            'total_fpts': float(frame['fpts'].sum()),
            'avg_fpts': round(float(frame['fpts'].mean())),
            'best_fpts': best.fpts,
            'best_season': best.season,
            'best_period': best.period,
            'worst_fpts': worst.fpts,
            'worst_season': worst.season,
            'worst_period': worst.period,
        }

    def get_career_total(self, franchise: str, before_season: Optional[int] = None) -> Optional[float]:
        """Get a franchise's archived career points (None if it has no periods)."""
        frame = self._history(before_season).filter(pl.col('franchise') == franchise)
        if frame.height == 0:
            return None
        return float(frame['fpts'].sum())

    def get_season_totals_through_period(
        self, franchise: str, period: int, before_season: Optional[int] = None
    ) -> dict[int, float]:
        """
        Get a franchise's cumulative points through a period number, per season.

        Only seasons in which the franchise has a record for that period
        are included, so every total covers the same stretch of calendar.
        """
        frame = self._history(before_season).filter(
            (pl.col('franchise') == franchise) & (pl.col('period') <= period)
        )
        per_season = (
            frame.group_by('season', maintain_order=True)
            .agg(pl.col('fpts').sum().alias('total'), pl.col('period').max().alias('last_period'))
            .filter(pl.col('last_period') == period)
            .sort('season')
        )
        return {row['season']: row['total'] for row in per_season.iter_rows(named=True)}

    # ---- Matchups ----

    def get_matchups(self, franchise: Optional[str] = None) -> list[MatchupOutcome]:
        """Get archived matchup outcomes in chronological order, optionally for one franchise."""
        self._ensure_loaded()
        if franchise is None:
            return list(self._matchups)
        return [m for m in self._matchups if franchise in (m.winner, m.loser)]

    def get_head_to_head(self, franchise: str, rival: str) -> tuple[int, int]:
        """Get (wins, losses) for franchise against rival."""
        wins = losses = 0
        for m in self.get_matchups(franchise):
            if m.winner == franchise and m.loser == rival:
                wins += 1
            elif m.winner == rival and m.loser == franchise:
                losses += 1
        return wins, losses
