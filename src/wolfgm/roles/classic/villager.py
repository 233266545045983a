"""Villager role -- the basic village-team role with no abilities."""

from __future__ import annotations

from wolfgm.roles.base import RoleBase, Team
from wolfgm.roles.registry import RoleRegistry


@RoleRegistry.register
class Villager(RoleBase):
    """Plain villager with no special powers."""

    @property
    def name(self) -> str:
        return "villager"

    @property
    def team(self) -> str:
        return Team.VILLAGE

    @property
    def description(self) -> str:
        return (
            "A regular villager. You have no night action but take part in "
            "discussion and voting."
        )
