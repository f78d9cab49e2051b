"""
Tests for ScorebookConfig validation and settings-file loading.
"""
import json
from pathlib import Path

import pytest

from scorebook.config import ASSIGNMENTS_KEY, ScorebookConfig


class TestScorebookConfig:

    def test_defaults(self, tmp_path):
        config = ScorebookConfig(data_dir=tmp_path)
        assert config.base_score == 100
        assert config.assignments_key == ASSIGNMENTS_KEY

    def test_data_dir_when_string_then_path(self, tmp_path):
        assert ScorebookConfig(data_dir=str(tmp_path)).data_dir == tmp_path

    @pytest.mark.parametrize("base_score", [0, -5, "100", True])
    def test_base_score_when_invalid_then_value_error(self, tmp_path, base_score):
        with pytest.raises(ValueError):
            ScorebookConfig(data_dir=tmp_path, base_score=base_score)

    def test_keys_when_equal_then_value_error(self, tmp_path):
        with pytest.raises(ValueError, match="differ"):
            ScorebookConfig(data_dir=tmp_path, assignments_key="x", submissions_key="x")

    def test_config_is_frozen(self, tmp_path):
        config = ScorebookConfig(data_dir=tmp_path)
        with pytest.raises(AttributeError):
            config.base_score = 10


class TestConfigFromFile:

    def test_from_file_when_missing_then_defaults_plus_overrides(self, tmp_path):
        config = ScorebookConfig.from_file(tmp_path / "none.json", data_dir=tmp_path)
        assert config.data_dir == tmp_path
        assert config.base_score == 100

    def test_from_file_when_present_then_values_loaded(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"base_score": 20, "theme": "dark"}))
        config = ScorebookConfig.from_file(path, data_dir=tmp_path)
        assert config.base_score == 20

    def test_from_file_when_override_given_then_override_wins(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"base_score": 20}))
        config = ScorebookConfig.from_file(path, data_dir=tmp_path, base_score=10)
        assert config.base_score == 10

    def test_from_file_when_override_none_then_ignored(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"base_score": 20, "data_dir": str(tmp_path)}))
        config = ScorebookConfig.from_file(path, data_dir=None, base_score=None)
        assert config.base_score == 20
        assert config.data_dir == Path(tmp_path)

    @pytest.mark.parametrize("content", ["{not json", "[1, 2]", '{"base_score": -1}'])
    def test_from_file_when_bad_then_defaults_with_warning(self, tmp_path, caplog, content):
        path = tmp_path / "settings.json"
        path.write_text(content)
        config = ScorebookConfig.from_file(path, data_dir=tmp_path)
        assert config.base_score == 100
        assert "settings" in caplog.text.lower()

    def test_from_file_when_not_utf8_then_defaults_with_warning(self, tmp_path, caplog):
        path = tmp_path / "settings.json"
        path.write_bytes(b"\xff\xfe{}")
        config = ScorebookConfig.from_file(path, data_dir=tmp_path)
        assert config.base_score == 100
        assert "Failed to read settings" in caplog.text

    def test_from_file_when_override_invalid_then_value_error(self, tmp_path):
        with pytest.raises(ValueError, match="positive"):
            ScorebookConfig.from_file(tmp_path / "none.json", data_dir=tmp_path, base_score=-5)
