"""Pydantic models for all configuration."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class RegulationConfig(BaseModel):
    """Game-wide rule flags consulted during night resolution."""

    allow_consecutive_guard: bool = True
    # "random_white": every night-1 divination reads white.
    first_night_fortune: Literal["free", "random_white"] = "free"


class PlayerConfig(BaseModel):
    """Configuration for a single player slot."""

    player_id: int
    name: str
    role: str = "villager"


class ActionSubmission(BaseModel):
    """One scripted night action, as read from a YAML night script."""

    model_config = ConfigDict(populate_by_name=True)

    action_type: str = Field(alias="type")
    actor: int
    target: int
    night: int = 1
    priority: int | None = None


class GameConfig(BaseModel):
    """Top-level game configuration."""

    game_name: str = "classic_night"
    players: list[PlayerConfig] = Field(
        default_factory=lambda: [
            PlayerConfig(player_id=1, name="Alice", role="seer"),
            PlayerConfig(player_id=2, name="Bob", role="knight"),
            PlayerConfig(player_id=3, name="Carol", role="werewolf"),
            PlayerConfig(player_id=4, name="Dave", role="villager"),
            PlayerConfig(player_id=5, name="Eve", role="fox"),
            PlayerConfig(player_id=6, name="Frank", role="werewolf"),
            PlayerConfig(player_id=7, name="Grace", role="medium"),
        ]
    )
    regulations: RegulationConfig = Field(default_factory=RegulationConfig)
