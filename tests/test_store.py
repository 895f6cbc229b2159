"""Tests for the daily score store."""

import json
from datetime import date

import pytest

from sparky.schemas import DailyRecord, TeamDaily
from sparky.store import DailyScoreStore, canonicalize_record, days_for_period


@pytest.fixture
def store(tmp_path):
    return DailyScoreStore(tmp_path / 'daily')


def _write(store, name, payload):
    store.daily_dir.mkdir(parents=True, exist_ok=True)
    path = store.daily_dir / name
    if isinstance(payload, str):
        path.write_text(payload, encoding='utf-8')
    else:
        path.write_text(json.dumps(payload), encoding='utf-8')
    return path


def _payload(day, period, pts):
    return {
        'date': day,
        'period': period,
        'scrapedAt': f'{day}T23:59:00-05:00',
        'teams': [{'name': name, 'dayPts': p, 'projPts': 10, 'gp': 3} for name, p in pts.items()],
    }


class TestSaveAndLoad:
    """Tests for writing and reading single records."""

    def test_save_writes_camel_case(self, store, make_day):
        """Saved files use the camelCase layout ingestion produces."""
        record = make_day('2025-10-07', {'JGC': 12.5, 'PWN': 3}, scraped_at='2025-10-07T23:59:00')
        path = store.save(record)

        assert path.name == '2025-10-07.json'
        with open(path) as f:
            data = json.load(f)
        assert data['date'] == '2025-10-07'
        assert data['scrapedAt'] == '2025-10-07T23:59:00'
        assert data['teams'][0]['dayPts'] == 12.5
        assert 'day_pts' not in data['teams'][0]

    def test_round_trip(self, store, make_day):
        record = make_day('2025-10-07', {'JGC': 12.5, 'PWN': 3})
        store.save(record)
        loaded = store.load(date(2025, 10, 7))
        assert loaded.teams[0].franchise == 'JGC'
        assert loaded.teams[0].day_pts == 12.5
        assert store.has(date(2025, 10, 7))

    def test_save_canonicalizes_names(self, store):
        """Raw team names are stored as franchise abbreviations."""
        record = DailyRecord(
            date=date(2025, 10, 7),
            period=1,
            teams=[TeamDaily(name="Richie's Meatspinners", day_pts=9)],
        )
        store.save(record)
        assert store.load(date(2025, 10, 7)).teams[0].franchise == 'RMS'

    def test_missing_file(self, store):
        assert store.load(date(2025, 10, 7)) is None
        assert not store.has(date(2025, 10, 7))

    def test_corrupt_file_is_skipped(self, store):
        """Unreadable JSON returns None instead of raising."""
        _write(store, '2025-10-07.json', '{not json')
        assert store.load(date(2025, 10, 7)) is None

    def test_null_stats_read_as_zero(self, store):
        _write(store, '2025-10-07.json', {'date': '2025-10-07', 'period': 1,
                                          'teams': [{'name': 'PWN', 'dayPts': None, 'gp': None}]})
        team = store.load(date(2025, 10, 7)).teams[0]
        assert team.day_pts == 0
        assert team.gp == 0


class TestLoadAll:
    """Tests for the snapshot every analysis folds over."""

    def test_sorted_and_filtered(self, store):
        """Corrupt, period-less, empty and no-games days are skipped."""
        _write(store, '2025-10-09.json', _payload('2025-10-09', 1, {'PWN': 4, 'Endless Winter': 6}))
        _write(store, '2025-10-07.json', _payload('2025-10-07', 1, {'PWN': 5, 'Endless Winter': 2}))
        _write(store, '2025-10-08.json', _payload('2025-10-08', 1, {'PWN': 0, 'Endless Winter': 0}))
        _write(store, '2025-10-10.json', '{broken')
        _write(store, '2025-10-11.json', _payload('2025-10-11', None, {'PWN': 5}))
        _write(store, '2025-10-12.json', {'date': '2025-10-12', 'period': 1, 'teams': []})
        _write(store, 'notes.json', {})

        days = store.load_all()

        assert [d.date for d in days] == [date(2025, 10, 7), date(2025, 10, 9)]
        assert [t.franchise for t in days[0].teams] == ['PWN', 'BEW']

    def test_empty_directory(self, tmp_path):
        assert DailyScoreStore(tmp_path / 'nowhere').load_all() == []

    def test_dates_ignore_non_date_files(self, store):
        _write(store, '2025-10-07.json', _payload('2025-10-07', 1, {'PWN': 5}))
        _write(store, 'backup.json', {})
        assert store.dates() == [date(2025, 10, 7)]


class TestCalendar:
    """Tests for calendar helpers."""

    def test_missing_dates(self, store, make_day, periods):
        store.save(make_day('2025-10-07', {'JGC': 1}))
        missing = store.missing_dates(periods)
        assert (date(2025, 10, 7), 1) not in missing
        assert missing[0] == (date(2025, 10, 8), 1)
        # 14 + 14 + 14 period days, one stored
        assert len(missing) == 41

    def test_days_for_period(self, make_days):
        days = make_days([{'JGC': 1}] * 2, period=1) + make_days([{'JGC': 1}], start='2025-10-21', period=2)
        assert len(days_for_period(days, 1)) == 2
        assert len(days_for_period(days, 2)) == 1
        assert days_for_period(days, None) == []

    def test_canonicalize_leaves_unknown_names(self, make_day):
        """Unresolvable names are kept rather than mis-attributed."""
        record = make_day('2025-10-07', {'Mystery Squad': 4, "cmack's pwn": 5})
        teams = canonicalize_record(record).teams
        assert [t.franchise for t in teams] == ['Mystery Squad', 'PWN']
