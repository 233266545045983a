"""Per-type effect resolvers for night actions.

Each resolver receives the action being executed and the game context,
applies its side effects (deaths, protection, events) and returns the
result payload stored on the action.  Resolvers never look at other
actions: cross-action effects come purely from execution order, e.g. a
guard (priority 80) marks its target before an attack (priority 60)
checks for protection.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from wolfgm.engine.action_types import ActionKind, ActionTypeInfo, ActionTypeRegistry
from wolfgm.engine.events import EventName
from wolfgm.roles.base import Reading

if TYPE_CHECKING:
    from wolfgm.engine.actions import Action
    from wolfgm.engine.state import GameContext, PlayerRecord


class Reason:
    """Failure / no-effect reasons reported in result payloads."""

    TARGET_NOT_FOUND = "TARGET_NOT_FOUND"
    TARGET_DEAD = "TARGET_DEAD"
    TARGET_ALIVE = "TARGET_ALIVE"
    ROLE_NOT_FOUND = "ROLE_NOT_FOUND"
    ALREADY_DEAD = "ALREADY_DEAD"
    GUARDED = "GUARDED"
    RESISTANT = "RESISTANT"


def _target_fields(target: PlayerRecord) -> dict[str, Any]:
    return {"target_id": target.player_id, "target_name": target.name}


# ------------------------------------------------------------------
# Divination
# ------------------------------------------------------------------


@ActionTypeRegistry.register(
    ActionTypeInfo(name=ActionKind.FORTUNE.value, display_name="Divination", priority=100)
)
def resolve_fortune(action: Action, context: GameContext) -> dict[str, Any]:
    target = context.players.get_player(action.target_id)
    if target is None:
        return {"success": False, "reason": Reason.TARGET_NOT_FOUND}
    if not target.is_alive:
        return {"success": False, "reason": Reason.TARGET_DEAD}

    role = context.roles.get_role(target.role)
    if action.night == 1 and context.regulations.first_night_fortune == "random_white":
        reading = Reading.WHITE
    elif role is None:
        return {"success": False, "reason": Reason.ROLE_NOT_FOUND, **_target_fields(target)}
    else:
        reading = role.fortune_result

    # The curse kills the target but leaves the reading untouched.
    if role is not None and role.cursed_by_fortune:
        context.players.kill_player(target.player_id, "curse", action.night)
        context.events.emit(
            EventName.FORTUNE_CURSE,
            {
                "target_id": target.player_id,
                "seer_id": action.actor_id,
                "night": action.night,
            },
        )

    return {"success": True, "reading": reading, **_target_fields(target)}


# ------------------------------------------------------------------
# Protection
# ------------------------------------------------------------------


@ActionTypeRegistry.register(
    ActionTypeInfo(name=ActionKind.GUARD.value, display_name="Guard", priority=80)
)
def resolve_guard(action: Action, context: GameContext) -> dict[str, Any]:
    target = context.players.get_player(action.target_id)
    if target is None:
        return {"success": False, "reason": Reason.TARGET_NOT_FOUND}
    if not target.is_alive:
        return {"success": False, "reason": Reason.TARGET_DEAD}

    context.players.protect(target.player_id, action.night)
    context.events.emit(
        EventName.PLAYER_GUARDED,
        {
            "guardian_id": action.actor_id,
            "target_id": target.player_id,
            "night": action.night,
        },
    )
    context.last_guarded_target = target.player_id

    return {"success": True, "guarded": True, **_target_fields(target)}


# ------------------------------------------------------------------
# Elimination
# ------------------------------------------------------------------


@ActionTypeRegistry.register(
    ActionTypeInfo(name=ActionKind.ATTACK.value, display_name="Attack", priority=60)
)
def resolve_attack(action: Action, context: GameContext) -> dict[str, Any]:
    target = context.players.get_player(action.target_id)
    if target is None:
        return {"success": False, "reason": Reason.TARGET_NOT_FOUND}

    # Attacking a corpse is a successful no-op, not a failure.
    if not target.is_alive:
        return {
            "success": True,
            "killed": False,
            "reason": Reason.ALREADY_DEAD,
            **_target_fields(target),
        }

    if target.is_protected(action.night):
        return {
            "success": True,
            "killed": False,
            "reason": Reason.GUARDED,
            **_target_fields(target),
        }

    role = context.roles.get_role(target.role)
    if role is not None and role.attack_immune:
        return {
            "success": True,
            "killed": False,
            "reason": Reason.RESISTANT,
            **_target_fields(target),
        }

    context.players.kill_player(target.player_id, "attack", action.night)
    return {"success": True, "killed": True, **_target_fields(target)}


# ------------------------------------------------------------------
# Mediumship
# ------------------------------------------------------------------


@ActionTypeRegistry.register(
    ActionTypeInfo(name=ActionKind.MEDIUM.value, display_name="Mediumship", priority=90)
)
def resolve_medium(action: Action, context: GameContext) -> dict[str, Any]:
    target = context.players.get_player(action.target_id)
    if target is None:
        return {"success": False, "reason": Reason.TARGET_NOT_FOUND}
    if target.is_alive:
        return {"success": False, "reason": Reason.TARGET_ALIVE, **_target_fields(target)}

    role = context.roles.get_role(target.role)
    if role is None:
        return {"success": False, "reason": Reason.ROLE_NOT_FOUND, **_target_fields(target)}

    return {"success": True, "reading": role.medium_result, **_target_fields(target)}
