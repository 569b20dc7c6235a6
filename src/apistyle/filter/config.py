"""
Configuration for the filter engine.

Limits can be supplied as a dict, a FilterConfig model, or a YAML/JSON
file. Keys are accepted in snake_case or camelCase.

Environment variables:
    APISTYLE_FILTER_CONFIG - Path to a YAML or JSON config file
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .limits import DEFAULT_EXPRESSION_LIMITS, ExpressionLimits

logger = logging.getLogger(__name__)

ENV_VAR_FILTER_CONFIG = "APISTYLE_FILTER_CONFIG"

# Upper bounds that keep parsing and evaluation well inside the interpreter's
# recursion limit
MAX_CONFIGURABLE_DEPTH = 64
MAX_CONFIGURABLE_AST_NODES = 1024


class FilterConfig(BaseModel):
    """Filter engine configuration."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    max_expression_length: int = Field(
        default=DEFAULT_EXPRESSION_LIMITS.max_expression_length,
        alias="maxExpressionLength",
        gt=0,
    )

    max_string_length: int = Field(
        default=DEFAULT_EXPRESSION_LIMITS.max_string_length,
        alias="maxStringLength",
        gt=0,
    )

    # Nesting of parentheses and `not`
    max_depth: int = Field(
        default=DEFAULT_EXPRESSION_LIMITS.max_depth,
        alias="maxDepth",
        gt=0,
        le=MAX_CONFIGURABLE_DEPTH,
    )

    max_ast_nodes: int = Field(
        default=DEFAULT_EXPRESSION_LIMITS.max_ast_nodes,
        alias="maxAstNodes",
        gt=0,
        le=MAX_CONFIGURABLE_AST_NODES,
    )

    max_path_segments: int = Field(
        default=DEFAULT_EXPRESSION_LIMITS.max_path_segments,
        alias="maxPathSegments",
        gt=0,
    )

    def to_limits(self) -> ExpressionLimits:
        return ExpressionLimits(
            max_expression_length=self.max_expression_length,
            max_string_length=self.max_string_length,
            max_depth=self.max_depth,
            max_ast_nodes=self.max_ast_nodes,
            max_path_segments=self.max_path_segments,
        )


def parse_filter_config(data: Optional[dict[str, Any]]) -> FilterConfig:
    """Validates a raw config mapping, warning about unknown keys."""
    if data is None:
        return FilterConfig()

    if not isinstance(data, dict):
        raise ValueError("Filter configuration must be a mapping")

    try:
        config = FilterConfig.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid filter configuration: {e}") from e

    if config.model_extra:
        for key in config.model_extra.keys():
            logger.warning("unknown_filter_config_field", extra={"field": key})

    return config


def load_filter_config(path: Optional[str | Path] = None) -> FilterConfig:
    """
    Loads filter configuration from a YAML or JSON file.

    Falls back to the APISTYLE_FILTER_CONFIG environment variable when
    no path is given, and to defaults when neither is set.

    Raises:
        ValueError: If the file cannot be read or is invalid
    """
    if path is None:
        path = os.getenv(ENV_VAR_FILTER_CONFIG)
    if not path:
        return FilterConfig()

    file_path = Path(path)
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ValueError(f"Cannot read filter configuration {file_path}: {e}") from e

    try:
        if file_path.suffix.lower() == ".json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ValueError(f"Malformed filter configuration {file_path}: {e}") from e

    config = parse_filter_config(data)
    logger.info("filter_config_loaded", extra={"path": str(file_path)})
    return config
