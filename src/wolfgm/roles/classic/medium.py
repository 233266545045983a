"""Medium role -- reads the dead."""

from __future__ import annotations

from wolfgm.roles.base import AbilityDefinition, RoleBase, Team
from wolfgm.roles.registry import RoleRegistry


@RoleRegistry.register
class Medium(RoleBase):
    """Village medium who learns whether a dead player was a werewolf."""

    @property
    def name(self) -> str:
        return "medium"

    @property
    def team(self) -> str:
        return Team.VILLAGE

    @property
    def description(self) -> str:
        return (
            "You are the medium. Each night you may consult one dead player "
            "and learn whether they were a werewolf."
        )

    @property
    def abilities(self) -> list[AbilityDefinition]:
        return [
            AbilityDefinition(
                action_type="medium",
                description="Read a dead player's reading",
            ),
        ]
