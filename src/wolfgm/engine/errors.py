"""Error codes, exception hierarchy, and the error-reporting collaborator."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Stable error codes carried by every :class:`GameError`."""

    INVALID_ACTION_TYPE = "E3001_INVALID_ACTION_TYPE"
    INVALID_PLAYER = "E3002_INVALID_PLAYER"
    UNAUTHORIZED_ACTION = "E3003_UNAUTHORIZED_ACTION"
    ACTION_EXECUTION_ERROR = "E3004_ACTION_EXECUTION_ERROR"
    CONSECUTIVE_GUARD_PROHIBITED = "E3005_CONSECUTIVE_GUARD_PROHIBITED"
    INVALID_ACTION_STATE = "E3006_INVALID_ACTION_STATE"


class RejectionKind(str, Enum):
    """Why a submission was refused at registration (or execution) time."""

    ACTOR_NOT_FOUND = "actor_not_found"
    TARGET_NOT_FOUND = "target_not_found"
    ACTOR_DEAD = "actor_dead"
    UNKNOWN_ACTION_TYPE = "unknown_action_type"
    UNAUTHORIZED = "unauthorized"
    CONSECUTIVE_GUARD = "consecutive_guard"


_REJECTION_CODES: dict[RejectionKind, ErrorCode] = {
    RejectionKind.ACTOR_NOT_FOUND: ErrorCode.INVALID_PLAYER,
    RejectionKind.TARGET_NOT_FOUND: ErrorCode.INVALID_PLAYER,
    RejectionKind.ACTOR_DEAD: ErrorCode.UNAUTHORIZED_ACTION,
    RejectionKind.UNKNOWN_ACTION_TYPE: ErrorCode.INVALID_ACTION_TYPE,
    RejectionKind.UNAUTHORIZED: ErrorCode.UNAUTHORIZED_ACTION,
    RejectionKind.CONSECUTIVE_GUARD: ErrorCode.CONSECUTIVE_GUARD_PROHIBITED,
}


@dataclass(frozen=True)
class Rejection:
    """A typed, user-facing refusal of an action submission."""

    kind: RejectionKind
    message: str

    @property
    def code(self) -> ErrorCode:
        return _REJECTION_CODES[self.kind]


# ----------------------------------------------------------------------
# Exceptions
# ----------------------------------------------------------------------


class ActionConstructionError(ValueError):
    """An ``Action`` was built with missing or malformed fields."""


class GameError(Exception):
    """Domain error carrying a stable :class:`ErrorCode`."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.context: dict[str, Any] = context or {}

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"


class ActionRejectedError(GameError):
    """Raised when a submission violates a game rule."""

    def __init__(
        self, rejection: Rejection, context: dict[str, Any] | None = None
    ) -> None:
        super().__init__(rejection.code, rejection.message, context)
        self.rejection = rejection

    @property
    def kind(self) -> RejectionKind:
        return self.rejection.kind


class ActionStateError(GameError):
    """Illegal lifecycle transition on an ``Action``."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.INVALID_ACTION_STATE, message, context)


# ----------------------------------------------------------------------
# Error reporting collaborator
# ----------------------------------------------------------------------


class ErrorHandler:
    """Creates structured errors and records reported ones.

    ``handle_error`` only logs and records; it never raises, so callers
    can report from inside their own ``except`` blocks.
    """

    def __init__(self) -> None:
        self.errors: list[BaseException] = []

    def create_error(
        self,
        code: ErrorCode,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> GameError:
        return GameError(code, message, context)

    def handle_error(self, error: BaseException) -> None:
        self.errors.append(error)
        if isinstance(error, GameError):
            logger.error("%s context=%s", error, error.context)
        else:
            logger.error("Unstructured error reported: %r", error)

    def clear(self) -> None:
        self.errors.clear()
