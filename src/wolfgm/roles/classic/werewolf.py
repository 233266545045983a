"""Werewolf role -- the core antagonist role."""

from __future__ import annotations

from wolfgm.roles.base import AbilityDefinition, Reading, RoleBase, Team
from wolfgm.roles.registry import RoleRegistry


@RoleRegistry.register
class Werewolf(RoleBase):
    """Werewolf that attacks villagers at night."""

    @property
    def name(self) -> str:
        return "werewolf"

    @property
    def team(self) -> str:
        return Team.WEREWOLF

    @property
    def description(self) -> str:
        return (
            "You are a werewolf. Each night the pack votes on one victim; "
            "the target with the most votes is attacked."
        )

    @property
    def abilities(self) -> list[AbilityDefinition]:
        return [
            AbilityDefinition(
                action_type="attack",
                description="Vote for a player to attack tonight",
            ),
        ]

    @property
    def fortune_result(self) -> str:
        return Reading.BLACK
