"""Knight role -- the village protector."""

from __future__ import annotations

from wolfgm.roles.base import AbilityDefinition, RoleBase, Team
from wolfgm.roles.registry import RoleRegistry


@RoleRegistry.register
class Knight(RoleBase):
    """Village knight who can guard one player from attack each night."""

    @property
    def name(self) -> str:
        return "knight"

    @property
    def team(self) -> str:
        return Team.VILLAGE

    @property
    def description(self) -> str:
        return (
            "You are the knight. Each night you may guard one player; a "
            "werewolf attack on that player fails. Some regulations forbid "
            "guarding the same player two nights in a row."
        )

    @property
    def abilities(self) -> list[AbilityDefinition]:
        return [
            AbilityDefinition(
                action_type="guard",
                description="Protect a player from attack tonight",
            ),
        ]
