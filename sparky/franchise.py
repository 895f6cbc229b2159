"""Franchise identity resolution for noisy live-scoring team names."""

import re
import unicodedata
from typing import Optional

from .constants import FRANCHISE_KEYWORDS, FRANCHISE_MAP, FRANCHISE_NAMES


def normalize_team_name(name: str) -> str:
    """
    Normalize a team name for matching.

    Lowercases, folds unicode quote variants to ASCII, drops characters
    that do not survive encoding round-trips and collapses whitespace.

    Args:
        name: Raw team name from the scoring page

    Returns:
        Normalized name for matching
    """
    folded = unicodedata.normalize('NFKC', name)
    folded = folded.replace('’', "'").replace('‘', "'").replace('`', "'")
    folded = ''.join(ch for ch in folded if ch.isprintable() and ch != '�')
    return re.sub(r'\s+', ' ', folded).strip().lower()


def _exact_match(normalized: str) -> Optional[str]:
    return FRANCHISE_MAP.get(normalized)


def _substring_match(normalized: str) -> Optional[str]:
    for key, abbrev in FRANCHISE_MAP.items():
        if key in normalized or normalized in key:
            return abbrev
    return None


def _keyword_match(normalized: str) -> Optional[str]:
    for keyword, abbrev in FRANCHISE_KEYWORDS.items():
        if keyword in normalized:
            return abbrev
    return None


_STRATEGIES = (_exact_match, _substring_match, _keyword_match)


def resolve_franchise(name: Optional[str]) -> Optional[str]:
    """
    Resolve a team name (or an abbreviation) to a franchise abbreviation.

    Tries each strategy in order and returns the first hit: exact
    normalized match, substring match in either direction, then keyword
    fallback. Unknown names return None rather than a guess.

    Args:
        name: Team name such as "Jason's Gaucho Chudpumpers" or "JGC"

    Returns:
        Franchise abbreviation, or None if the name can't be resolved

    Example:
        >>> resolve_franchise("Brian's.Endless.Win ter.S13E01.720p.mp4")
        'BEW'
    """
    if not name:
        return None
    if name.strip().upper() in FRANCHISE_NAMES:
        return name.strip().upper()
    normalized = normalize_team_name(name)
    if len(normalized) < 3:
        # Too short for substring matching to mean anything
        return _exact_match(normalized)
    for strategy in _STRATEGIES:
        abbrev = strategy(normalized)
        if abbrev:
            return abbrev
    return None


def franchise_display_name(franchise: str) -> str:
    """Get a franchise's display name, falling back to the abbreviation."""
    return FRANCHISE_NAMES.get(franchise, franchise)
