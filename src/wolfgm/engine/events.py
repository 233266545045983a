"""Game event catalogue and the in-process pub/sub bus."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

Listener = Callable[["GameEvent"], None]

WILDCARD = "*"


class EventName:
    """Event name constants."""

    ACTION_REGISTER = "action.register"
    ACTION_EXECUTE = "action.execute"
    ACTION_CANCEL = "action.cancel"
    ACTION_COMPLETE = "action.execute.complete"
    PLAYER_GUARDED = "player.guarded"
    PLAYER_DEATH = "player.death"
    FORTUNE_CURSE = "fortune.curse"
    ATTACK_TARGET = "werewolf.attack.target"
    ABNORMAL_END = "game.abnormal_end"

    @staticmethod
    def execute_of(action_type: str) -> str:
        """Type-qualified execution event name, e.g. ``action.execute.guard``."""
        return f"{EventName.ACTION_EXECUTE}.{action_type}"


@dataclass(frozen=True)
class GameEvent:
    """A single emitted event."""

    name: str
    payload: dict[str, Any] = field(default_factory=dict)


class EventBus:
    """Synchronous publish/subscribe bus.

    Listeners subscribe to an exact event name or to ``"*"`` for every
    event.  A listener that raises is logged and skipped; emission never
    fails.  Every emitted event is appended to :attr:`history`.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}
        self.history: list[GameEvent] = []

    def on(self, name: str, listener: Listener) -> None:
        """Subscribe *listener* to events called *name*."""
        self._listeners.setdefault(name, []).append(listener)

    def off(self, name: str, listener: Listener) -> None:
        """Remove a subscription; unknown listeners are ignored."""
        listeners = self._listeners.get(name, [])
        if listener in listeners:
            listeners.remove(listener)

    def emit(self, name: str, payload: dict[str, Any] | None = None) -> None:
        """Record and dispatch an event."""
        event = GameEvent(name=name, payload=dict(payload or {}))
        self.history.append(event)
        logger.debug("Event %s %s", name, event.payload)

        for listener in self._listeners.get(name, []) + self._listeners.get(WILDCARD, []):
            try:
                listener(event)
            except Exception:
                logger.exception("Event listener raised an exception for %s", name)

    def events_named(self, name: str) -> list[GameEvent]:
        """Return recorded events with the given name, oldest first."""
        return [e for e in self.history if e.name == name]

    def clear_history(self) -> None:
        self.history.clear()
