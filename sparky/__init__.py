from .models import (
    Candidate,
    NarrativeCategory,
    NightlyAnalysis,
    Projection,
    TeamNightlyStats,
)
from .schemas import DailyRecord, LeagueConfig, PeriodDefinition, TeamDaily
from .config import (
    get_config,
    get_current_period,
    get_current_season,
    get_period_definition,
    get_period_for_date,
)
from .logging_config import get_logger, setup_logging
from .franchise import resolve_franchise, franchise_display_name
from .store import DailyScoreStore
from .rolling import project_period_finish, rolling_avg_ppg, season_ppg
from .historical import ArchiveUnavailableError, HistoricalArchive
from .narratives import build_narratives, select_narratives
from .analysis import build_nightly_analysis
from .validators import validate_analysis, validate_daily_record
from .report import (
    analysis_to_dict,
    build_footer_text,
    build_header_text,
    save_analysis,
)

__all__ = [
    # Models
    'Candidate',
    'NarrativeCategory',
    'NightlyAnalysis',
    'Projection',
    'TeamNightlyStats',
    # Schemas
    'DailyRecord',
    'LeagueConfig',
    'PeriodDefinition',
    'TeamDaily',
    # Config
    'get_config',
    'get_current_period',
    'get_current_season',
    'get_period_definition',
    'get_period_for_date',
    'get_logger',
    'setup_logging',
    # Franchise identity
    'resolve_franchise',
    'franchise_display_name',
    # Daily score store
    'DailyScoreStore',
    # Rolling statistics
    'project_period_finish',
    'rolling_avg_ppg',
    'season_ppg',
    # Historical archive
    'ArchiveUnavailableError',
    'HistoricalArchive',
    # Narratives and analysis
    'build_narratives',
    'select_narratives',
    'build_nightly_analysis',
    # Validation
    'validate_analysis',
    'validate_daily_record',
    # Report
    'analysis_to_dict',
    'build_footer_text',
    'build_header_text',
    'save_analysis',
]
