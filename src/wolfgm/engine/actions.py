"""The night ``Action`` entity and its lifecycle."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from wolfgm.engine.action_types import ActionKind, ActionTypeInfo, ActionTypeRegistry
from wolfgm.engine.errors import (
    ActionConstructionError,
    ActionRejectedError,
    ActionStateError,
    Rejection,
    RejectionKind,
)
from wolfgm.engine.events import EventName

if TYPE_CHECKING:
    from wolfgm.engine.state import GameContext

logger = logging.getLogger(__name__)


def is_strict_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(eq=False)
class Action:
    """One covert act submitted for a night.

    Lifecycle: pending -> executed | cancelled.  Both terminal states are
    permanent; a terminal action can neither be executed again nor moved
    to the other terminal state.

    ``priority`` defaults from the action type table when left as None.
    """

    action_type: str
    actor_id: int
    target_id: int
    night: int = 1
    priority: int | None = None
    id: str = ""
    executed: bool = field(default=False, init=False)
    cancelled: bool = field(default=False, init=False)
    result: dict[str, Any] | None = field(default=None, init=False)
    game: GameContext | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.action_type:
            raise ActionConstructionError("action_type is required")
        if self.actor_id is None:
            raise ActionConstructionError("actor_id is required")
        if self.target_id is None:
            raise ActionConstructionError("target_id is required")
        if not is_strict_int(self.actor_id):
            raise ActionConstructionError(
                f"actor_id must be an integer, got {self.actor_id!r}"
            )
        if not is_strict_int(self.target_id):
            raise ActionConstructionError(
                f"target_id must be an integer, got {self.target_id!r}"
            )
        if not ActionTypeRegistry.is_known(self.action_type):
            raise ActionConstructionError(f"Unknown action type: {self.action_type!r}")

        if self.night is None:
            self.night = 1
        if not is_strict_int(self.night):
            raise ActionConstructionError(f"night must be an integer, got {self.night!r}")

        if not self.id:
            self.id = f"action-{uuid.uuid4().hex}"
        if self.priority is None:
            self.priority = self.type_info.priority
        if not is_strict_int(self.priority):
            raise ActionConstructionError(
                f"priority must be an integer, got {self.priority!r}"
            )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def type_info(self) -> ActionTypeInfo:
        """Static metadata for this action's type."""
        return ActionTypeRegistry.get_info(self.action_type)

    def is_executable(self) -> bool:
        return not self.executed and not self.cancelled

    def set_game(self, game: GameContext) -> Action:
        """Attach the collaborator context; returns self for chaining."""
        self.game = game
        return self

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def execute(
        self,
        *,
        game: GameContext | None = None,
        custom_result: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Resolve the action and return its result.

        With *custom_result* the payload is stored verbatim and the role,
        regulation and resolver steps are skipped.
        """
        if self.executed:
            raise ActionStateError("already executed", {"action_id": self.id})
        if self.cancelled:
            raise ActionStateError("cancelled", {"action_id": self.id})

        if game is not None and self.game is None:
            self.game = game

        if custom_result is not None:
            self.result = custom_result
            self.executed = True
            self.emit_execute_event()
            return self.result

        if self.game is None:
            raise ActionStateError("no game context attached", {"action_id": self.id})

        self.check_role_permission()
        self.check_regulations()

        resolver = ActionTypeRegistry.get_resolver(self.action_type)
        self.result = resolver(self, self.game)
        self.executed = True
        logger.debug("Executed %s: %s", self, self.result)

        self.emit_execute_event()
        return self.result

    def check_role_permission(self) -> None:
        """Raise ``ActionRejectedError`` if the actor's role lacks this action."""
        game = self._require_game()
        if not game.roles.can_use_action(self.actor_id, self.action_type):
            raise ActionRejectedError(
                Rejection(
                    RejectionKind.UNAUTHORIZED,
                    f"Player {self.actor_id} is not authorized to perform "
                    f"{self.action_type!r}",
                ),
                {"action_id": self.id},
            )

    def check_regulations(self) -> None:
        """Raise ``ActionRejectedError`` on a consecutive guard when banned."""
        game = self._require_game()
        regulations = game.regulations
        if (
            self.action_type == ActionKind.GUARD.value
            and not regulations.allow_consecutive_guard
            and game.last_guarded_target == self.target_id
        ):
            raise ActionRejectedError(
                Rejection(
                    RejectionKind.CONSECUTIVE_GUARD,
                    "Consecutive protection of the same target is forbidden",
                ),
                {"action_id": self.id, "target_id": self.target_id},
            )

    def emit_execute_event(self) -> None:
        if self.game is None:
            return

        payload = self._payload()
        payload["result"] = self.result
        self.game.events.emit(EventName.ACTION_EXECUTE, payload)
        self.game.events.emit(EventName.execute_of(self.action_type), dict(payload))

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    def cancel(self) -> dict[str, bool]:
        if self.executed:
            raise ActionStateError(
                "already executed; an executed action cannot be cancelled",
                {"action_id": self.id},
            )
        if self.cancelled:
            raise ActionStateError("already cancelled", {"action_id": self.id})

        self.cancelled = True
        if self.game is not None:
            self.game.events.emit(EventName.ACTION_CANCEL, self._payload())

        return {"success": True, "cancelled": True}

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_game(self) -> GameContext:
        if self.game is None:
            raise ActionStateError("no game context attached", {"action_id": self.id})
        return self.game

    def _payload(self) -> dict[str, Any]:
        return {
            "action_id": self.id,
            "action_type": self.action_type,
            "actor_id": self.actor_id,
            "target_id": self.target_id,
            "night": self.night,
        }

    def __str__(self) -> str:
        return (
            f"{self.action_type}({self.actor_id}->{self.target_id}, "
            f"night={self.night}, id={self.id})"
        )
