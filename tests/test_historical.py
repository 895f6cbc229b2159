"""Tests for the historical archive client."""

from unittest.mock import Mock

import pytest
import requests

from sparky.historical import (
    ArchiveUnavailableError,
    HistoricalArchive,
    derive_matchups,
    parse_database_csv,
    parse_matchups_csv,
)

ARCHIVE_CSV = """Season,Period,Jason_FPts,Jason_FP/G,Jason_GP,Jason_SR,Brian_FPts,Brian_FP/G,Brian_GP,Brian_SR
2019-20,1,80,2.0,40,1,,,,
2023-24,1,120.5,3.1,39,1,100,2.5,40,2
2023-24,2,110,2.8,40,2,130,3.2,41,1
2024-25,1,90,2.2,41,2,95,2.4,40,1
"""


@pytest.fixture
def archive():
    archive = HistoricalArchive(database_url='https://example.test/archive.csv')
    response = Mock(text=ARCHIVE_CSV)
    archive.session = Mock()
    archive.session.get.return_value = response
    return archive


class TestParsing:
    """Tests for CSV reshaping."""

    def test_wide_to_long(self):
        """Each owner column group becomes franchise rows; empty groups are dropped."""
        frame = parse_database_csv(ARCHIVE_CSV)
        assert frame.height == 7
        assert set(frame['franchise'].to_list()) == {'JGC', 'BEW'}
        assert frame.filter(frame['season'] == 2019).height == 1

        first = frame.row(0, named=True)
        assert first == {
            'season': 2019, 'period': 1, 'franchise': 'JGC',
            'fpts': 80.0, 'fpg': 2.0, 'gp': 40, 'sr': 1,
        }

    def test_missing_key_columns(self):
        with pytest.raises(ValueError, match='Season/Period'):
            parse_database_csv('Year,Jason_FPts\n2020,10\n')

    def test_matchups_csv(self):
        """Owner names resolve to franchises; unresolvable rows are skipped."""
        outcomes = parse_matchups_csv(
            'Season,Period,Winner,Loser\n2023-24,2,Brian,Jason\n2023-24,1,Jason,Nobody\n'
        )
        assert len(outcomes) == 1
        assert (outcomes[0].winner, outcomes[0].loser) == ('BEW', 'JGC')

    def test_derived_matchups(self):
        """Without a matchups sheet, the top two of each period meet."""
        outcomes = derive_matchups(parse_database_csv(ARCHIVE_CSV))
        assert [(m.season, m.period, m.winner, m.loser) for m in outcomes] == [
            (2023, 1, 'JGC', 'BEW'),
            (2023, 2, 'BEW', 'JGC'),
            (2024, 1, 'BEW', 'JGC'),
        ]


class TestQueries:
    """Tests for archive queries."""

    def test_period_record_and_worst(self, archive):
        record = archive.get_league_period_record(1)
        assert (record.franchise, record.season, record.fpts) == ('JGC', 2023, 120.5)
        worst = archive.get_league_period_worst(1)
        assert (worst.franchise, worst.season, worst.fpts) == ('JGC', 2019, 80.0)

    def test_before_season_excludes_running_season(self, archive):
        assert archive.get_franchise_period_best(1, 'BEW').fpts == 100.0
        assert archive.get_franchise_period_worst(1, 'BEW').fpts == 95.0
        assert archive.get_franchise_period_worst(1, 'BEW', before_season=2024).fpts == 100.0

    def test_no_data_returns_none(self, archive):
        assert archive.get_league_period_record(9) is None
        assert archive.get_franchise_period_best(1, 'GDD') is None
        assert archive.get_career_total('GDD') is None
        assert archive.get_franchise_career_stats('GDD') is None
        assert archive.get_period_history(9) == []

    def test_period_winners(self, archive):
        winners = archive.get_period_winners(1)
        assert [(w.season, w.franchise) for w in winners] == [(2019, 'JGC'), (2023, 'JGC'), (2024, 'BEW')]

    def test_all_time_bests(self, archive):
        assert archive.get_league_all_time_record().fpts == 130.0
        assert archive.get_franchise_all_time_best('JGC').fpts == 120.5

    def test_career(self, archive):
        assert archive.get_career_total('JGC') == pytest.approx(400.5)
        assert archive.get_career_total('JGC', before_season=2024) == pytest.approx(310.5)
        stats = archive.get_franchise_career_stats('JGC')
        assert stats['total_periods'] == 4
        assert stats['best_season'] == 2023

    def test_season_totals_through_period(self, archive):
        """Only seasons that reached the period are compared."""
        assert archive.get_season_totals_through_period('JGC', 2) == {2023: pytest.approx(230.5)}
        assert archive.get_season_totals_through_period('JGC', 1) == {
            2019: 80.0, 2023: 120.5, 2024: 90.0,
        }

    def test_head_to_head(self, archive):
        assert archive.get_head_to_head('JGC', 'BEW') == (1, 2)
        assert archive.get_head_to_head('BEW', 'JGC') == (2, 1)
        assert len(archive.get_matchups()) == 3


class TestLoading:
    """Tests for fetch, memoization and failure handling."""

    def test_fetches_once(self, archive):
        archive.get_league_period_record(1)
        archive.get_career_total('JGC')
        archive.session.get.assert_called_once_with('https://example.test/archive.csv', timeout=15.0)

    def test_failure_is_memoized(self):
        archive = HistoricalArchive(database_url='https://example.test/archive.csv', timeout=2)
        archive.session = Mock()
        archive.session.get.side_effect = requests.ConnectionError('boom')

        with pytest.raises(ArchiveUnavailableError, match='boom'):
            archive.get_career_total('JGC')
        with pytest.raises(ArchiveUnavailableError):
            archive.get_league_period_record(1)
        assert archive.session.get.call_count == 1

        archive.reset()
        with pytest.raises(ArchiveUnavailableError):
            archive.get_career_total('JGC')
        assert archive.session.get.call_count == 2

    def test_http_error_status(self):
        archive = HistoricalArchive(database_url='https://example.test/archive.csv')
        response = Mock()
        response.raise_for_status.side_effect = requests.HTTPError('503 Server Error')
        archive.session = Mock()
        archive.session.get.return_value = response

        with pytest.raises(ArchiveUnavailableError, match='503'):
            archive.get_career_total('JGC')

    def test_unconfigured_archive(self):
        with pytest.raises(ArchiveUnavailableError, match='No historical archive'):
            HistoricalArchive().get_career_total('JGC')

    def test_local_file_source(self, tmp_path):
        path = tmp_path / 'archive.csv'
        path.write_text(ARCHIVE_CSV, encoding='utf-8')
        archive = HistoricalArchive(database_url=str(path))
        assert archive.get_career_total('BEW') == pytest.approx(325.0)

    def test_matchups_sheet_overrides_derivation(self, tmp_path):
        db = tmp_path / 'archive.csv'
        db.write_text(ARCHIVE_CSV, encoding='utf-8')
        sheet = tmp_path / 'matchups.csv'
        sheet.write_text('Season,Period,Winner,Loser\n2023-24,1,Brian,Jason\n', encoding='utf-8')
        archive = HistoricalArchive(database_url=str(db), matchups_url=str(sheet))
        assert archive.get_head_to_head('BEW', 'JGC') == (1, 0)
