"""
Tests for taskclock configuration system.
"""

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from taskclock.config import (
    ParsingConfig,
    TaskClockConfig,
    deep_merge,
    expand_path,
    get_config,
    load_config,
    load_yaml_config,
    reset_config,
)


class TestExpandPath:
    """Tests for path expansion."""

    def test_expand_home(self):
        result = expand_path("~/test")
        assert result is not None
        assert str(result).startswith(str(Path.home()))
        assert str(result).endswith("test")

    def test_expand_env_var(self, monkeypatch):
        monkeypatch.setenv("TEST_TASKCLOCK_PATH", "/custom/path")
        result = expand_path("$TEST_TASKCLOCK_PATH/subdir")
        assert result is not None
        assert str(result) == "/custom/path/subdir"

    def test_expand_none(self):
        assert expand_path(None) is None


class TestLoadYamlConfig:
    """Tests for YAML loading."""

    def test_load_valid_yaml(self, tmp_path: Path):
        config_file = tmp_path / "test.yaml"
        config_file.write_text(
            "log:\n"
            "  level: DEBUG\n"
            "ranking:\n"
            "  danger_zone_minutes: 15\n"
        )
        result = load_yaml_config(config_file)
        assert result["log"]["level"] == "DEBUG"
        assert result["ranking"]["danger_zone_minutes"] == 15

    def test_load_missing_file(self):
        result = load_yaml_config(Path("/nonexistent/config.yaml"))
        assert result == {}

    def test_load_none(self):
        assert load_yaml_config(None) == {}

    def test_load_empty_file(self, tmp_path: Path):
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        result = load_yaml_config(config_file)
        assert result == {}


class TestDeepMerge:
    """Tests for deep dictionary merging."""

    def test_simple_merge(self):
        base = {"a": 1, "b": 2}
        override = {"b": 3, "c": 4}
        result = deep_merge(base, override)
        assert result == {"a": 1, "b": 3, "c": 4}

    def test_nested_merge(self):
        base = {"outer": {"a": 1, "b": 2}}
        override = {"outer": {"b": 3, "c": 4}}
        result = deep_merge(base, override)
        assert result == {"outer": {"a": 1, "b": 3, "c": 4}}

    def test_override_dict_with_value(self):
        base = {"a": {"nested": True}}
        override = {"a": "simple"}
        result = deep_merge(base, override)
        assert result == {"a": "simple"}

    def test_base_not_mutated(self):
        base = {"outer": {"a": 1}}
        deep_merge(base, {"outer": {"a": 2}})
        assert base == {"outer": {"a": 1}}


class TestParsingConfig:
    """Tests for transcript parsing settings."""

    def test_defaults(self):
        config = ParsingConfig()
        assert config.default_time == "12:00"
        assert config.default_time_of_day == (12, 0)
        assert config.drop_threshold == 3
        assert config.segment_separator == ". "

    def test_custom_default_time(self):
        config = ParsingConfig(default_time="9:30")
        assert config.default_time_of_day == (9, 30)

    @pytest.mark.parametrize("value", ["noon", "25:00", "12:75", "12"])
    def test_invalid_default_time(self, value):
        with pytest.raises(ValidationError):
            ParsingConfig(default_time=value)


class TestTaskClockConfig:
    """Tests for main configuration class."""

    def setup_method(self):
        reset_config()

    def teardown_method(self):
        reset_config()

    def test_defaults(self):
        config = TaskClockConfig()
        assert config.app.name == "taskclock"
        assert config.log.level == "INFO"
        assert config.scoring.refresh_interval == 5.0
        assert config.ranking.danger_zone_minutes == 30.0
        assert config.ranking.overdue_exclusion_hours == 24.0
        assert config.enhancer.enabled is False

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("TASKCLOCK_LOG__LEVEL", "DEBUG")
        config = TaskClockConfig()
        assert config.log.level == "DEBUG"

    def test_nested_env_override(self, monkeypatch):
        monkeypatch.setenv("TASKCLOCK_PARSING__DROP_THRESHOLD", "5")
        config = TaskClockConfig()
        assert config.parsing.drop_threshold == 5

    def test_section_from_dict(self):
        config = TaskClockConfig(ranking={"danger_zone_minutes": 10})
        assert config.ranking.danger_zone_minutes == 10
        assert config.ranking.overdue_exclusion_hours == 24.0

    def test_log_file_expanded(self):
        config = TaskClockConfig(log={"file": "~/taskclock.log"})
        assert config.log.file == Path.home() / "taskclock.log"

    def test_load_config_overrides(self):
        config = load_config(overrides={"enhancer": {"enabled": True, "timeout": 2.5}})
        assert config.enhancer.enabled is True
        assert config.enhancer.timeout == 2.5

    def test_get_config_is_cached(self):
        assert get_config() is get_config()

    def test_reset_config(self):
        first = get_config()
        reset_config()
        assert get_config() is not first
