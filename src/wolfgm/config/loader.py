"""Configuration loading and merging."""

from __future__ import annotations

import copy
import logging
from typing import Any

import yaml
from pydantic import ValidationError

from wolfgm.config.schema import ActionSubmission, GameConfig

logger = logging.getLogger(__name__)


def load_config(path: str | None = None) -> GameConfig:
    """Load a game configuration from a YAML file.

    Parameters
    ----------
    path:
        Path to a YAML configuration file.  If *None* or the file does
        not exist, a default :class:`GameConfig` is returned.

    Returns
    -------
    GameConfig
        Parsed and validated configuration.
    """
    if path is None:
        logger.debug("No config path provided, using defaults")
        return GameConfig()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        logger.warning("Config file not found: %s -- using defaults", path)
        return GameConfig()
    except yaml.YAMLError as exc:
        logger.error("Failed to parse YAML config %s: %s", path, exc)
        return GameConfig()

    if not isinstance(data, dict):
        logger.warning("Config file %s did not produce a dict, using defaults", path)
        return GameConfig()

    try:
        return GameConfig.model_validate(data)
    except ValidationError as exc:
        logger.error("Config validation failed for %s: %s", path, exc)
        return GameConfig()


def merge_configs(base: GameConfig, overrides: dict[str, Any]) -> GameConfig:
    """Deep-merge an override dict into a base config.

    Returns the base unchanged when the merged result fails validation.
    """
    merged = _deep_merge(base.model_dump(), overrides)

    try:
        return GameConfig.model_validate(merged)
    except ValidationError as exc:
        logger.error("Merged config validation failed: %s", exc)
        return base


def load_night_script(path: str) -> list[ActionSubmission]:
    """Read a YAML list of action submissions.

    The file may hold a bare list or a mapping with an ``actions`` key.
    Unlike :func:`load_config` there is no sensible default, so I/O,
    YAML and validation errors propagate to the caller.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or []

    if isinstance(data, dict):
        data = data.get("actions", [])
    if not isinstance(data, list):
        raise ValueError(f"Night script {path} must contain a list of actions")

    submissions = [ActionSubmission.model_validate(item) for item in data]
    logger.debug("Loaded %d action(s) from %s", len(submissions), path)
    return submissions


def _deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge *overrides* into a copy of *base*."""
    result = copy.deepcopy(base)
    for key, value in overrides.items():
        if (
            key in result
            and isinstance(result[key], dict)
            and isinstance(value, dict)
        ):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result
