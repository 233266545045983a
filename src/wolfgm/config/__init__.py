"""Configuration loading and validation."""

from wolfgm.config.schema import (
    ActionSubmission,
    GameConfig,
    PlayerConfig,
    RegulationConfig,
)
from wolfgm.config.loader import load_config, load_night_script, merge_configs

__all__ = [
    "ActionSubmission",
    "GameConfig",
    "PlayerConfig",
    "RegulationConfig",
    "load_config",
    "load_night_script",
    "merge_configs",
]
