"""Top-level Game class that wires the night-resolution collaborators."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from wolfgm.engine.action_manager import ActionManager
from wolfgm.engine.errors import ErrorHandler
from wolfgm.engine.events import WILDCARD, EventBus, EventName
from wolfgm.engine.phase import Phase
from wolfgm.engine.state import GameContext, PlayerRecord, PlayerRegistry
from wolfgm.roles.manager import RoleManager
from wolfgm.roles.registry import RoleRegistry

if TYPE_CHECKING:
    from wolfgm.config.schema import ActionSubmission, GameConfig
    from wolfgm.engine.actions import Action

logger = logging.getLogger(__name__)


class Game:
    """Holds one game's players, roles and actions.

    The game does not sequence phases itself; a caller registers the
    night's actions and then calls :meth:`resolve_night`.

    Parameters
    ----------
    config:
        Players and regulations.  Every player's role must be registered
        with :class:`RoleRegistry`.
    event_listeners:
        Callables invoked for every emitted event.
    """

    def __init__(
        self,
        config: GameConfig,
        event_listeners: list[Any] | None = None,
    ) -> None:
        self.config = config
        self.events = EventBus()
        for listener in event_listeners or []:
            self.events.on(WILDCARD, listener)

        self.players = PlayerRegistry(events=self.events)
        for pc in config.players:
            if not RoleRegistry.has(pc.role):
                raise KeyError(f"Unknown role: {pc.role!r}")
            self.players.add(
                PlayerRecord(player_id=pc.player_id, name=pc.name, role=pc.role)
            )

        self.roles = RoleManager(self.players)
        self.errors = ErrorHandler()
        self.context = GameContext(
            players=self.players,
            roles=self.roles,
            events=self.events,
            errors=self.errors,
            regulations=config.regulations,
        )
        self.actions = ActionManager(self.context)
        logger.debug(
            "Game %s set up with %d player(s)", config.game_name, len(self.players)
        )

    # ------------------------------------------------------------------
    # Night
    # ------------------------------------------------------------------

    def submit(self, submission: ActionSubmission) -> Action:
        """Register a scripted submission.  Rejections propagate."""
        return self.actions.register_action(
            submission.action_type,
            submission.actor,
            submission.target,
            night=submission.night,
            priority=submission.priority,
        )

    def resolve_night(self, turn: int) -> int:
        return self.actions.execute_actions(Phase.NIGHT, turn)

    def abort(self, reason: str = "") -> None:
        """Flag the game as abnormally ended; pending actions will be cancelled."""
        logger.warning("Game %s aborted: %s", self.config.game_name, reason or "no reason")
        self.context.is_abnormal_end = True

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    def deaths_on(self, turn: int) -> list[PlayerRecord]:
        """Players whose death was recorded during night *turn*."""
        deaths: list[PlayerRecord] = []
        for event in self.events.events_named(EventName.PLAYER_DEATH):
            if event.payload.get("night") != turn:
                continue
            player = self.players.get_player(event.payload["player_id"])
            if player is not None:
                deaths.append(player)
        return deaths
