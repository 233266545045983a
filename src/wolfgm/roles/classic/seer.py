"""Seer role -- the village investigator."""

from __future__ import annotations

from wolfgm.roles.base import AbilityDefinition, RoleBase, Team
from wolfgm.roles.registry import RoleRegistry


@RoleRegistry.register
class Seer(RoleBase):
    """Village seer who divines one player each night."""

    @property
    def name(self) -> str:
        return "seer"

    @property
    def team(self) -> str:
        return Team.VILLAGE

    @property
    def description(self) -> str:
        return (
            "You are the seer. Each night you may divine one player to learn "
            "whether they are a werewolf."
        )

    @property
    def abilities(self) -> list[AbilityDefinition]:
        return [
            AbilityDefinition(
                action_type="fortune",
                description="Divine a player's reading",
            ),
        ]
