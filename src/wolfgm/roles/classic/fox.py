"""Fox role -- a third party that survives attacks but not divination."""

from __future__ import annotations

from wolfgm.roles.base import RoleBase, Team
from wolfgm.roles.registry import RoleRegistry


@RoleRegistry.register
class Fox(RoleBase):
    """Fox spirit: immune to werewolf attacks, killed when divined."""

    @property
    def name(self) -> str:
        return "fox"

    @property
    def team(self) -> str:
        return Team.FOX

    @property
    def description(self) -> str:
        return (
            "You are the fox. Werewolf attacks cannot kill you, but if the "
            "seer divines you, you die of the curse."
        )

    @property
    def attack_immune(self) -> bool:
        return True

    @property
    def cursed_by_fortune(self) -> bool:
        return True
