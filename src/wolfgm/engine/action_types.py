"""Action kinds, their static metadata, and the resolver table."""

from __future__ import annotations

import importlib
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from wolfgm.engine.phase import Phase

if TYPE_CHECKING:
    from wolfgm.engine.actions import Action
    from wolfgm.engine.state import GameContext

Resolver = Callable[["Action", "GameContext"], dict[str, Any]]

CUSTOM_PREFIX = "custom_"


class ActionKind(str, Enum):
    """Built-in action kinds.  Every member must have a resolver."""

    FORTUNE = "fortune"
    GUARD = "guard"
    ATTACK = "attack"
    MEDIUM = "medium"


@dataclass(frozen=True)
class ActionTypeInfo:
    """Static per-type metadata.  Higher priority resolves first."""

    name: str
    display_name: str
    priority: int
    phase: Phase = Phase.NIGHT


class ActionTypeRegistry:
    """Central table of registered action kinds and their resolvers.

    Only the built-in :class:`ActionKind` names and names starting with
    ``custom_`` may be registered.
    """

    _types: dict[str, tuple[ActionTypeInfo, Resolver]] = {}

    @classmethod
    def register(cls, info: ActionTypeInfo) -> Callable[[Resolver], Resolver]:
        """Decorator that registers *info* with the decorated resolver.

        Usage::

            @ActionTypeRegistry.register(ActionTypeInfo("custom_bless", "Bless", 70))
            def resolve_bless(action, context):
                ...
        """
        builtin = {kind.value for kind in ActionKind}
        if info.name not in builtin and not info.name.startswith(CUSTOM_PREFIX):
            raise ValueError(
                f"Action type {info.name!r} is not built in and lacks the "
                f"{CUSTOM_PREFIX!r} prefix"
            )
        if info.name in builtin and info.name in cls._types:
            raise ValueError(f"Built-in action type {info.name!r} is already registered")

        def decorator(resolver: Resolver) -> Resolver:
            cls._types[info.name] = (info, resolver)
            return resolver

        return decorator

    @classmethod
    def unregister(cls, name: str) -> None:
        if name in {kind.value for kind in ActionKind}:
            raise ValueError(f"Built-in action type {name!r} cannot be removed")
        cls._types.pop(name, None)

    @classmethod
    def is_known(cls, name: Any) -> bool:
        return isinstance(name, str) and name in cls._types

    @classmethod
    def get_info(cls, name: str) -> ActionTypeInfo:
        if name not in cls._types:
            raise KeyError(f"Unknown action type: {name!r}")
        return cls._types[name][0]

    @classmethod
    def get_resolver(cls, name: str) -> Resolver:
        if name not in cls._types:
            raise KeyError(f"Unknown action type: {name!r}")
        return cls._types[name][1]

    @classmethod
    def names(cls) -> list[str]:
        """Registered names, highest priority first."""
        return sorted(cls._types, key=lambda n: -cls._types[n][0].priority)

    @classmethod
    def check_complete(cls) -> None:
        """Raise if any built-in kind has no resolver."""
        missing = [kind.value for kind in ActionKind if kind.value not in cls._types]
        if missing:
            raise RuntimeError(f"No resolver registered for: {', '.join(missing)}")

    @classmethod
    def load_builtin(cls) -> None:
        importlib.import_module("wolfgm.engine.resolver")


ActionTypeRegistry.load_builtin()
