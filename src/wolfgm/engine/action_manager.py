"""Registration, scheduling and resolution of night actions."""

from __future__ import annotations

import logging
from collections import Counter
from typing import TYPE_CHECKING, Any

from wolfgm.engine.action_types import ActionKind, ActionTypeRegistry
from wolfgm.engine.actions import Action, is_strict_int
from wolfgm.engine.errors import (
    ActionConstructionError,
    ActionRejectedError,
    ErrorCode,
    GameError,
    Rejection,
    RejectionKind,
)
from wolfgm.engine.events import EventName
from wolfgm.engine.phase import Phase

if TYPE_CHECKING:
    from wolfgm.engine.state import GameContext

logger = logging.getLogger(__name__)

UNKNOWN_PLAYER_NAME = "unknown"


class ActionManager:
    """Owns every action of one game and resolves them night by night.

    Actions are kept in a dense list in registration order; the id,
    actor, night and ``(actor, night, type)`` indices point into it.  The
    registration order is the tie-break for both scheduling and attack
    vote aggregation.

    Parameters
    ----------
    context:
        Borrowed collaborators (players, roles, events, errors,
        regulations).  The manager never replaces them.
    """

    def __init__(self, context: GameContext) -> None:
        ActionTypeRegistry.check_complete()
        self.context = context
        self._actions: list[Action] = []
        self._by_id: dict[str, Action] = {}
        self._by_actor: dict[int, list[Action]] = {}
        self._by_night: dict[int, list[Action]] = {}
        self._by_key: dict[tuple[int, int, str], list[Action]] = {}

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def actions(self) -> list[Action]:
        """All actions in registration order (a copy)."""
        return list(self._actions)

    @property
    def last_guarded_target(self) -> int | None:
        return self.context.last_guarded_target

    @last_guarded_target.setter
    def last_guarded_target(self, player_id: int | None) -> None:
        self.context.last_guarded_target = player_id

    def __len__(self) -> int:
        return len(self._actions)

    def reset(self) -> None:
        """Forget every registered action."""
        self._actions.clear()
        self._by_id.clear()
        self._by_actor.clear()
        self._by_night.clear()
        self._by_key.clear()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def validate_action(
        self, action_type: Any, actor_id: Any, target_id: Any
    ) -> Rejection | None:
        """Return the first rule the submission breaks, or None if legal.

        Rules are checked in order: actor exists, target exists, actor
        alive, known type, role capability, consecutive-guard regulation.
        """
        players = self.context.players

        actor = players.get_player(actor_id) if is_strict_int(actor_id) else None
        if actor is None:
            return Rejection(
                RejectionKind.ACTOR_NOT_FOUND, f"Player {actor_id!r} does not exist"
            )

        if not is_strict_int(target_id) or players.get_player(target_id) is None:
            return Rejection(
                RejectionKind.TARGET_NOT_FOUND,
                f"Target player {target_id!r} does not exist",
            )

        if not actor.is_alive:
            return Rejection(
                RejectionKind.ACTOR_DEAD,
                f"Player {actor.name} is dead; dead players cannot act",
            )

        if not ActionTypeRegistry.is_known(action_type):
            return Rejection(
                RejectionKind.UNKNOWN_ACTION_TYPE,
                f"Unknown action type: {action_type!r}",
            )

        if not self.context.roles.can_use_action(actor.player_id, action_type):
            return Rejection(
                RejectionKind.UNAUTHORIZED,
                f"Player {actor.name} is not authorized to perform {action_type!r}",
            )

        if (
            action_type == ActionKind.GUARD.value
            and not self.context.regulations.allow_consecutive_guard
            and self.last_guarded_target == target_id
        ):
            return Rejection(
                RejectionKind.CONSECUTIVE_GUARD,
                "Consecutive protection of the same target is forbidden",
            )

        return None

    def register_action(
        self,
        action_type: str,
        actor_id: int,
        target_id: int,
        night: int = 1,
        priority: int | None = None,
        action_id: str | None = None,
    ) -> Action:
        """Validate and record a submission.

        Raises
        ------
        ActionRejectedError
            The submission breaks a game rule; ``error.rejection`` says which.
        ActionConstructionError
            The fields are malformed or *action_id* is already taken.
        """
        rejection = self.validate_action(action_type, actor_id, target_id)
        if rejection is not None:
            logger.debug(
                "Rejected %s %s->%s: %s",
                action_type,
                actor_id,
                target_id,
                rejection.message,
            )
            raise ActionRejectedError(
                rejection,
                {"action_type": action_type, "actor_id": actor_id, "target_id": target_id},
            )

        if action_id is not None and action_id in self._by_id:
            raise ActionConstructionError(f"Duplicate action id: {action_id!r}")

        action = Action(
            action_type=action_type,
            actor_id=actor_id,
            target_id=target_id,
            night=night,
            priority=priority,
            id=action_id or "",
        ).set_game(self.context)
        self._index(action)

        self.context.events.emit(
            EventName.ACTION_REGISTER,
            {
                "action_id": action.id,
                "action_type": action.action_type,
                "actor_id": action.actor_id,
                "target_id": action.target_id,
                "night": action.night,
            },
        )
        logger.debug("Registered %s", action)
        return action

    def _index(self, action: Action) -> None:
        self._actions.append(action)
        self._by_id[action.id] = action
        self._by_actor.setdefault(action.actor_id, []).append(action)
        self._by_night.setdefault(action.night, []).append(action)
        key = (action.actor_id, action.night, action.action_type)
        self._by_key.setdefault(key, []).append(action)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def execute_actions(self, phase: Phase | str, turn: int) -> int:
        """Resolve every pending action of night *turn*.

        Returns the number of actions that executed.  A failing action is
        reported, logged and skipped; it never stops the batch.
        """
        phase_name = phase.value if isinstance(phase, Phase) else phase
        events = self.context.events

        if self.context.is_abnormal_end:
            cancelled = 0
            for action in self._by_night.get(turn, []):
                if action.is_executable():
                    action.cancel()
                    cancelled += 1

            logger.warning(
                "Game ended abnormally; cancelled %d action(s) for night %d",
                cancelled,
                turn,
            )
            events.emit(
                EventName.ABNORMAL_END,
                {"phase": phase_name, "turn": turn, "cancelled_count": cancelled},
            )
            events.emit(
                EventName.ACTION_COMPLETE,
                {"phase": phase_name, "turn": turn, "executed_count": 0, "aborted": True},
            )
            return 0

        self.process_werewolf_attacks(turn)

        # sorted() is stable, so equal priorities keep registration order.
        scheduled = sorted(
            (a for a in self._by_night.get(turn, []) if a.is_executable()),
            key=lambda a: -a.priority,
        )

        executed_count = 0
        for action in scheduled:
            if not action.is_executable():
                continue
            try:
                action.execute()
            except Exception as exc:
                self._report_failure(action, exc)
                continue
            executed_count += 1

        logger.info(
            "Resolved night %d: %d of %d action(s) executed",
            turn,
            executed_count,
            len(scheduled),
        )
        events.emit(
            EventName.ACTION_COMPLETE,
            {"phase": phase_name, "turn": turn, "executed_count": executed_count},
        )
        return executed_count

    def process_werewolf_attacks(self, turn: int) -> int | None:
        """Reduce the night's attack votes to a single target.

        The target with the most votes wins; among tied targets the one
        whose first vote was registered earliest wins.  Attacks on every
        other target are cancelled.  Returns the chosen target, or None
        when there are no pending attacks.
        """
        attacks = [
            a
            for a in self._by_night.get(turn, [])
            if a.action_type == ActionKind.ATTACK.value and a.is_executable()
        ]
        if not attacks:
            return None

        # Counter keeps first-insertion order, i.e. registration order.
        tally = Counter(a.target_id for a in attacks)
        top = max(tally.values())
        chosen = next(target for target, count in tally.items() if count == top)

        for action in attacks:
            if action.target_id != chosen:
                action.cancel()

        logger.debug("Attack votes for night %d: %s -> %s", turn, dict(tally), chosen)
        self.context.events.emit(
            EventName.ATTACK_TARGET,
            {
                "target_id": chosen,
                "night": turn,
                "votes": {str(target): count for target, count in tally.items()},
            },
        )
        return chosen

    def _report_failure(self, action: Action, exc: Exception) -> None:
        errors = self.context.errors
        if isinstance(exc, GameError):
            error = exc
        else:
            error = errors.create_error(
                ErrorCode.ACTION_EXECUTION_ERROR,
                f"Action {action.id} ({action.action_type}) failed: {exc}",
                {"action_id": action.id, "night": action.night},
            )
            error.__cause__ = exc
        errors.handle_error(error)
        logger.exception("Action execution error for %s", action)

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    def cancel_action(self, action_id: str) -> bool:
        """Cancel a pending action.  Never raises."""
        action = self._by_id.get(action_id)
        if action is None:
            return False

        try:
            action.cancel()
        except Exception as exc:
            self.context.errors.handle_error(exc)
            return False
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_action(self, action_id: str) -> Action | None:
        return self._by_id.get(action_id)

    def get_action_results(self, player_id: int) -> list[dict[str, Any]]:
        """Results of the player's executed actions."""
        return [
            {"action_type": a.action_type, "night": a.night, "result": a.result}
            for a in self._by_actor.get(player_id, [])
            if a.executed
        ]

    def get_registered_actions(
        self, phase: Phase | str | None = None, turn: int | None = None
    ) -> list[Action]:
        """Actions of night *turn*, or all actions when *turn* is None.

        *phase* is reserved and does not filter.
        """
        if turn is None:
            return list(self._actions)
        return list(self._by_night.get(turn, []))

    def get_actions_by_turn(self, turn: int) -> list[Action]:
        return list(self._by_night.get(turn, []))

    def get_actions_for_player(self, player_id: int) -> list[Action]:
        return list(self._by_actor.get(player_id, []))

    def find_actions(self, actor_id: int, night: int, action_type: str) -> list[Action]:
        """Actions one player submitted of one type on one night."""
        return list(self._by_key.get((actor_id, night, action_type), []))

    def is_action_allowed(self, player_id: int, action_type: str) -> bool:
        """True if the player exists, is alive and may use *action_type*."""
        try:
            player = self.context.players.get_player(player_id)
            if player is None or not player.is_alive:
                return False
            return bool(self.context.roles.can_use_action(player_id, action_type))
        except Exception:
            logger.debug(
                "Capability check failed for %s/%s", player_id, action_type, exc_info=True
            )
            return False

    def get_fortune_history(self, player_id: int) -> list[dict[str, Any]]:
        return self._history(player_id, ActionKind.FORTUNE.value, "reading")

    def get_guard_history(self, player_id: int) -> list[dict[str, Any]]:
        return self._history(player_id, ActionKind.GUARD.value, "guarded")

    def get_medium_history(self, player_id: int) -> list[dict[str, Any]]:
        return self._history(player_id, ActionKind.MEDIUM.value, "reading")

    def _history(
        self, player_id: int, action_type: str, result_key: str
    ) -> list[dict[str, Any]]:
        history: list[dict[str, Any]] = []
        for action in self._by_actor.get(player_id, []):
            if action.action_type != action_type or not action.executed:
                continue
            target = self.context.players.get_player(action.target_id)
            history.append(
                {
                    "night": action.night,
                    "target_id": action.target_id,
                    "target_name": target.name if target else UNKNOWN_PLAYER_NAME,
                    "result": (action.result or {}).get(result_key),
                }
            )
        return history
