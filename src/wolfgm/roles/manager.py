"""Per-game role lookups and action capability checks."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from wolfgm.roles.registry import RoleRegistry

if TYPE_CHECKING:
    from wolfgm.engine.state import PlayerRegistry
    from wolfgm.roles.base import RoleBase

logger = logging.getLogger(__name__)


class RoleManager:
    """Answers role questions for the players of one game.

    Role instances are created once per name and cached; role objects
    carry no per-player state.
    """

    def __init__(
        self, players: PlayerRegistry, registry: type[RoleRegistry] = RoleRegistry
    ) -> None:
        self.players = players
        self.registry = registry
        self._cache: dict[str, RoleBase] = {}

    def get_role(self, role_name: str) -> RoleBase | None:
        """Return the role called *role_name*, or None if it is unknown."""
        role = self._cache.get(role_name)
        if role is None:
            try:
                role = self.registry.get(role_name)
            except KeyError:
                return None
            self._cache[role_name] = role
        return role

    def get_player_role(self, player_id: int) -> RoleBase | None:
        player = self.players.get_player(player_id)
        if player is None:
            return None
        return self.get_role(player.role)

    def can_use_action(self, player_id: int, action_type: str) -> bool:
        """True if the player's role grants *action_type*."""
        role = self.get_player_role(player_id)
        if role is None:
            logger.debug("No role found for player %s", player_id)
            return False
        return role.can_use(action_type)
