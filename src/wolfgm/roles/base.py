"""Base role definitions and ability framework."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from wolfgm.engine.phase import Phase


@dataclass(frozen=True)
class AbilityDefinition:
    """Defines a role's usable ability."""

    action_type: str  # key into the action type registry
    phase: Phase = Phase.NIGHT
    description: str = ""


class Team:
    """Team constants."""

    VILLAGE = "village"
    WEREWOLF = "werewolf"
    FOX = "fox"


class Reading:
    """Divination / mediumship reading values."""

    WHITE = "white"  # human
    BLACK = "black"  # werewolf


class RoleBase(ABC):
    """Abstract base for all game roles.

    Besides identity, a role describes how night actions see it: the
    reading a seer or medium gets, and whether it survives attacks or is
    cursed by divination.
    """

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def team(self) -> str: ...

    @property
    @abstractmethod
    def description(self) -> str: ...

    @property
    def display_name(self) -> str:
        return self.name.capitalize()

    @property
    def abilities(self) -> list[AbilityDefinition]:
        """Return the list of abilities this role has."""
        return []

    @property
    def action_types(self) -> frozenset[str]:
        return frozenset(a.action_type for a in self.abilities)

    @property
    def fortune_result(self) -> str:
        return Reading.WHITE

    @property
    def medium_result(self) -> str:
        return self.fortune_result

    @property
    def attack_immune(self) -> bool:
        return False

    @property
    def cursed_by_fortune(self) -> bool:
        return False

    def can_use(self, action_type: str) -> bool:
        return action_type in self.action_types
