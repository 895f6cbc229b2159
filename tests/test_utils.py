"""Tests for JSON file helpers and rounding."""

import json

import pytest

from sparky.schemas import DailyRecord
from sparky.utils import load_json, pct_change, round_half_up, save_json


class TestJsonFiles:
    """Tests for load_json and save_json."""

    def test_model_written_with_aliases(self, tmp_path, make_day):
        record = make_day('2025-10-07', {'JGC': 10, 'PWN': 12})
        path = save_json(tmp_path / 'daily' / '2025-10-07.json', record)

        raw = json.loads(path.read_text(encoding='utf-8'))
        assert 'teams' in raw
        assert load_json(path, schema=DailyRecord) == record

    def test_no_temp_files_left(self, tmp_path):
        save_json(tmp_path / 'a.json', {'x': 1})
        save_json(tmp_path / 'a.json', {'x': 2})
        assert [p.name for p in tmp_path.iterdir()] == ['a.json']
        assert load_json(tmp_path / 'a.json') == {'x': 2}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_json(tmp_path / 'nope.json')

    def test_malformed_json(self, tmp_path):
        path = tmp_path / 'bad.json'
        path.write_text('{"date": ', encoding='utf-8')
        with pytest.raises(json.JSONDecodeError):
            load_json(path)

    def test_schema_mismatch_is_value_error(self, tmp_path):
        path = save_json(tmp_path / 'odd.json', {'teams': 'not a list'})
        with pytest.raises(ValueError, match='DailyRecord'):
            load_json(path, schema=DailyRecord)

    def test_unserializable_data_leaves_target_alone(self, tmp_path):
        path = save_json(tmp_path / 'a.json', {'x': 1})
        with pytest.raises(TypeError):
            save_json(path, {'x': object()})
        assert load_json(path) == {'x': 1}


class TestRounding:
    """Tests for half-up rounding."""

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(-2.5) == -2
        assert round_half_up(2.49) == 2

    def test_pct_change(self):
        assert pct_change(12.5, 10) == 25
        assert pct_change(6, 10) == -40
