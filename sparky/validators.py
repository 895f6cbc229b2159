"""Validation functions for daily records and nightly analysis output."""

from .constants import FRANCHISE_NAMES, MAX_PLAUSIBLE_DAY_PTS
from .models import NightlyAnalysis
from .schemas import DailyRecord


def validate_daily_record(record: DailyRecord) -> list[str]:
    """
    Check a daily record for data-quality problems.

    Sanity checks:
    - Every franchise resolved to a known abbreviation
    - No franchise listed twice
    - Day totals in a plausible range
    - Team count matches the league

    Args:
        record: DailyRecord with franchise names already canonicalized

    Returns:
        List of warning messages (empty if no issues)
    """
    warnings = []

    seen = set()
    duplicates = set()
    for team in record.teams:
        if team.franchise not in FRANCHISE_NAMES:
            warnings.append(f'{record.date}: unknown franchise {team.franchise!r}')
        if team.franchise in seen:
            duplicates.add(team.franchise)
        seen.add(team.franchise)

        if team.day_pts > MAX_PLAUSIBLE_DAY_PTS:
            warnings.append(
                f'{record.date}: {team.franchise} scored {team.day_pts:.1f} pts (unusually high - check the scrape)'
            )

    if duplicates:
        warnings.append(f'{record.date}: duplicate franchises: {", ".join(sorted(duplicates))}')

    if record.teams and len(record.teams) != len(FRANCHISE_NAMES):
        warnings.append(
            f'{record.date}: {len(record.teams)} teams in record (league has {len(FRANCHISE_NAMES)})'
        )

    return warnings


def _is_permutation(ranks: list[int]) -> bool:
    return sorted(ranks) == list(range(1, len(ranks) + 1))


def validate_analysis(analysis: NightlyAnalysis) -> list[str]:
    """
    Check that a nightly analysis is internally consistent.

    Checks:
    - dayRank and seasonRank are each a permutation of 1..N
    - Both views hold the same franchises
    - Every team has narratives once two days of history exist

    Args:
        analysis: Output of build_nightly_analysis()

    Returns:
        List of error messages (empty if valid)
    """
    errors = []

    if not _is_permutation([t.day_rank for t in analysis.teams]):
        errors.append(f'{analysis.date}: day ranks are not 1..{len(analysis.teams)}')
    if not _is_permutation([t.season_rank for t in analysis.season_ranked]):
        errors.append(f'{analysis.date}: season ranks are not 1..{len(analysis.season_ranked)}')

    day_franchises = sorted(t.franchise for t in analysis.teams)
    season_franchises = sorted(t.franchise for t in analysis.season_ranked)
    if day_franchises != season_franchises:
        errors.append(f'{analysis.date}: day and season views list different franchises')

    if analysis.total_season_days >= 2:
        for team in analysis.teams:
            if not team.narratives:
                errors.append(f'{analysis.date}: {team.franchise} has no narratives')

    return errors
