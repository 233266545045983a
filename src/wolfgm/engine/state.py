"""Player bookkeeping and the per-game collaborator context."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from wolfgm.config.schema import RegulationConfig
from wolfgm.engine.events import EventName

if TYPE_CHECKING:
    from wolfgm.engine.errors import ErrorHandler
    from wolfgm.engine.events import EventBus
    from wolfgm.roles.manager import RoleManager

logger = logging.getLogger(__name__)


@dataclass
class PlayerRecord:
    """Mutable record for one player in the game."""

    player_id: int
    name: str
    role: str
    is_alive: bool = True
    death_cause: str | None = None
    protected_night: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def is_protected(self, night: int) -> bool:
        """True if the player was guarded on *night*."""
        return self.protected_night == night


class PlayerRegistry:
    """Lookup and liveness tracking for every player in a game."""

    def __init__(
        self,
        players: list[PlayerRecord] | None = None,
        events: EventBus | None = None,
    ) -> None:
        self._players: dict[int, PlayerRecord] = {}
        self.events = events
        for player in players or []:
            self.add(player)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add(self, player: PlayerRecord) -> PlayerRecord:
        if player.player_id in self._players:
            raise ValueError(f"Duplicate player id: {player.player_id}")
        self._players[player.player_id] = player
        return player

    def add_player(self, player_id: int, name: str, role: str) -> PlayerRecord:
        return self.add(PlayerRecord(player_id=player_id, name=name, role=role))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_player(self, player_id: Any) -> PlayerRecord | None:
        """Return the player with the given id, or None."""
        return self._players.get(player_id)

    def get_all_players(self) -> list[PlayerRecord]:
        return list(self._players.values())

    def get_alive_players(self) -> list[PlayerRecord]:
        """Return all living players."""
        return [p for p in self._players.values() if p.is_alive]

    def __len__(self) -> int:
        return len(self._players)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def kill_player(
        self, player_id: int, cause: str, night: int | None = None
    ) -> bool:
        """Mark a living player dead.  Returns False if nothing changed."""
        player = self._players.get(player_id)
        if player is None or not player.is_alive:
            return False

        player.is_alive = False
        player.death_cause = cause
        logger.info("Player %s (%s) died: %s", player.name, player_id, cause)
        if self.events is not None:
            self.events.emit(
                EventName.PLAYER_DEATH,
                {"player_id": player_id, "cause": cause, "night": night},
            )
        return True

    def protect(self, player_id: int, night: int) -> None:
        """Mark *player_id* as guarded for *night*."""
        player = self._players.get(player_id)
        if player is not None:
            player.protected_night = night


@dataclass
class GameContext:
    """Collaborators borrowed by actions and the action manager.

    The context is shared, never owned: the game that builds it keeps the
    references and may swap regulations between nights.
    """

    players: PlayerRegistry
    roles: RoleManager
    events: EventBus
    errors: ErrorHandler
    regulations: RegulationConfig = field(default_factory=RegulationConfig)
    last_guarded_target: int | None = None
    is_abnormal_end: bool = False
