"""
Tests for filter engine configuration.
"""

import json
import logging

import pytest

from apistyle.filter import (
    DEFAULT_EXPRESSION_LIMITS,
    FilterConfig,
    LimitExceededError,
    compile_filter,
    load_filter_config,
    parse_filter_config,
)
from apistyle.filter.config import ENV_VAR_FILTER_CONFIG


class TestFilterConfig:
    """Tests for the FilterConfig model."""

    def test_defaults_match_default_limits(self):
        assert FilterConfig().to_limits() == DEFAULT_EXPRESSION_LIMITS

    def test_accepts_camel_case(self):
        config = parse_filter_config({"maxDepth": 4, "maxAstNodes": 10})
        assert config.max_depth == 4
        assert config.max_ast_nodes == 10

    def test_accepts_snake_case(self):
        config = parse_filter_config({"max_expression_length": 64})
        assert config.to_limits().max_expression_length == 64

    def test_rejects_non_positive_limits(self):
        with pytest.raises(ValueError):
            parse_filter_config({"maxDepth": 0})

    @pytest.mark.parametrize("key,value", [("maxDepth", 65), ("maxAstNodes", 1025)])
    def test_rejects_limits_above_recursion_safe_bounds(self, key, value):
        with pytest.raises(ValueError):
            parse_filter_config({key: value})

    def test_accepts_limits_at_upper_bounds(self):
        config = parse_filter_config({"maxDepth": 64, "maxAstNodes": 1024})
        limits = config.to_limits()
        assert (limits.max_depth, limits.max_ast_nodes) == (64, 1024)

    def test_rejects_non_mapping(self):
        with pytest.raises(ValueError):
            parse_filter_config(["maxDepth", 3])  # type: ignore[arg-type]

    def test_warns_on_unknown_fields(self, caplog):
        with caplog.at_level(logging.WARNING, logger="apistyle.filter.config"):
            parse_filter_config({"maxDepth": 3, "maxPageSize": 100})
        records = [
            r for r in caplog.records if r.getMessage() == "unknown_filter_config_field"
        ]
        assert len(records) == 1
        assert records[0].field == "maxPageSize"

    def test_limits_flow_into_compile(self):
        limits = parse_filter_config({"maxDepth": 1}).to_limits()
        compile_filter("(a eq 1)", limits)
        with pytest.raises(LimitExceededError):
            compile_filter("((a eq 1))", limits)


class TestLoadFilterConfig:
    """Tests for loading configuration files."""

    def test_loads_yaml(self, tmp_path):
        path = tmp_path / "filter.yaml"
        path.write_text("maxDepth: 5\nmaxStringLength: 80\n")
        config = load_filter_config(path)
        assert config.max_depth == 5
        assert config.max_string_length == 80

    def test_loads_json(self, tmp_path):
        path = tmp_path / "filter.json"
        path.write_text(json.dumps({"maxPathSegments": 3}))
        assert load_filter_config(str(path)).max_path_segments == 3

    def test_empty_yaml_gives_defaults(self, tmp_path):
        path = tmp_path / "filter.yml"
        path.write_text("")
        assert load_filter_config(path) == FilterConfig()

    def test_uses_environment_variable(self, tmp_path, monkeypatch):
        path = tmp_path / "filter.yaml"
        path.write_text("maxAstNodes: 9\n")
        monkeypatch.setenv(ENV_VAR_FILTER_CONFIG, str(path))
        assert load_filter_config().max_ast_nodes == 9

    def test_defaults_without_path_or_environment(self, monkeypatch):
        monkeypatch.delenv(ENV_VAR_FILTER_CONFIG, raising=False)
        assert load_filter_config() == FilterConfig()

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ValueError):
            load_filter_config(tmp_path / "missing.yaml")

    def test_malformed_file_raises(self, tmp_path):
        path = tmp_path / "filter.json"
        path.write_text("{not json")
        with pytest.raises(ValueError):
            load_filter_config(path)
