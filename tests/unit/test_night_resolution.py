"""Tests for night resolution -- scheduling, attack votes, fault isolation."""

from __future__ import annotations

import logging

import pytest

from wolfgm.config.schema import RegulationConfig
from wolfgm.engine.action_manager import ActionManager
from wolfgm.engine.action_types import ActionTypeInfo, ActionTypeRegistry
from wolfgm.engine.errors import (
    ActionRejectedError,
    ErrorCode,
    ErrorHandler,
    GameError,
    RejectionKind,
)
from wolfgm.engine.events import EventBus, GameEvent
from wolfgm.engine.phase import Phase
from wolfgm.engine.state import GameContext, PlayerRecord, PlayerRegistry
from wolfgm.roles.base import AbilityDefinition, RoleBase, Team
from wolfgm.roles.manager import RoleManager
from wolfgm.roles.registry import RoleRegistry


# ======================================================================
# Fixtures
# ======================================================================


@pytest.fixture
def context() -> GameContext:
    """Seer 1, knight 2, werewolves 3/6/7, villager 4, fox 5, medium 8."""
    events = EventBus()
    players = PlayerRegistry(
        [
            PlayerRecord(player_id=1, name="Seer", role="seer"),
            PlayerRecord(player_id=2, name="Knight", role="knight"),
            PlayerRecord(player_id=3, name="Wolf A", role="werewolf"),
            PlayerRecord(player_id=4, name="Villager", role="villager"),
            PlayerRecord(player_id=5, name="Fox", role="fox"),
            PlayerRecord(player_id=6, name="Wolf B", role="werewolf"),
            PlayerRecord(player_id=7, name="Wolf C", role="werewolf"),
            PlayerRecord(player_id=8, name="Medium", role="medium"),
        ],
        events=events,
    )
    return GameContext(
        players=players,
        roles=RoleManager(players),
        events=events,
        errors=ErrorHandler(),
    )


@pytest.fixture
def manager(context: GameContext) -> ActionManager:
    return ActionManager(context)


@pytest.fixture
def bomber_role():
    """Register a ``custom_boom`` type whose resolver always raises."""

    @ActionTypeRegistry.register(
        ActionTypeInfo(name="custom_boom", display_name="Boom", priority=70)
    )
    def resolve_boom(action, context):
        raise RuntimeError("kaboom")

    @RoleRegistry.register
    class Bomber(RoleBase):
        @property
        def name(self) -> str:
            return "bomber"

        @property
        def team(self) -> str:
            return Team.WEREWOLF

        @property
        def description(self) -> str:
            return "Test role whose only ability blows up."

        @property
        def abilities(self) -> list[AbilityDefinition]:
            return [AbilityDefinition(action_type="custom_boom")]

    yield "bomber"

    ActionTypeRegistry.unregister("custom_boom")
    RoleRegistry.unregister("bomber")


def _executed_types(context: GameContext) -> list[str]:
    return [e.payload["action_type"] for e in context.events.events_named("action.execute")]


# ======================================================================
# Scheduling
# ======================================================================


class TestScheduling:
    """Priority order and per-night selection."""

    def test_priority_order(self, manager: ActionManager, context: GameContext) -> None:
        context.players.kill_player(4, "execution", 0)
        manager.register_action("attack", 3, 1)
        manager.register_action("guard", 2, 8)
        manager.register_action("medium", 8, 4)
        manager.register_action("fortune", 1, 3)

        executed = manager.execute_actions(Phase.NIGHT, 1)

        assert executed == 4
        assert _executed_types(context) == ["fortune", "medium", "guard", "attack"]

    def test_equal_priority_keeps_registration_order(
        self, manager: ActionManager, context: GameContext
    ) -> None:
        first = manager.register_action("attack", 3, 4, priority=50)
        second = manager.register_action("guard", 2, 1, priority=50)
        manager.execute_actions(Phase.NIGHT, 1)
        ids = [e.payload["action_id"] for e in context.events.events_named("action.execute")]
        assert ids == [first.id, second.id]

    def test_explicit_priority_reorders(
        self, manager: ActionManager, context: GameContext
    ) -> None:
        manager.register_action("guard", 2, 4)
        manager.register_action("attack", 3, 4, priority=120)
        manager.execute_actions(Phase.NIGHT, 1)
        assert _executed_types(context) == ["attack", "guard"]
        assert context.players.get_player(4).is_alive is False

    def test_only_requested_night_runs(self, manager: ActionManager) -> None:
        tonight = manager.register_action("fortune", 1, 3, night=1)
        later = manager.register_action("fortune", 1, 4, night=2)
        assert manager.execute_actions(Phase.NIGHT, 1) == 1
        assert tonight.executed is True
        assert later.is_executable() is True

    def test_rerun_of_resolved_night_executes_nothing(self, manager: ActionManager) -> None:
        manager.register_action("fortune", 1, 3)
        manager.execute_actions(Phase.NIGHT, 1)
        assert manager.execute_actions(Phase.NIGHT, 1) == 0

    def test_empty_night(self, manager: ActionManager, context: GameContext) -> None:
        assert manager.execute_actions(Phase.NIGHT, 3) == 0
        complete = context.events.events_named("action.execute.complete")
        assert complete[0].payload == {"phase": "night", "turn": 3, "executed_count": 0}

    def test_complete_event(self, manager: ActionManager, context: GameContext) -> None:
        manager.register_action("fortune", 1, 3)
        manager.register_action("guard", 2, 4)
        manager.execute_actions("night", 1)
        complete = context.events.events_named("action.execute.complete")
        assert len(complete) == 1
        assert complete[0].payload == {"phase": "night", "turn": 1, "executed_count": 2}
        assert context.events.history[-1].name == "action.execute.complete"

    def test_cancelled_action_is_skipped(self, manager: ActionManager) -> None:
        attack = manager.register_action("attack", 3, 4)
        fortune = manager.register_action("fortune", 1, 3)
        manager.cancel_action(attack.id)
        assert manager.execute_actions(Phase.NIGHT, 1) == 1
        assert attack.executed is False
        assert fortune.executed is True


# ======================================================================
# Attack votes
# ======================================================================


class TestWerewolfAttacks:
    """process_werewolf_attacks() aggregation."""

    def test_plurality_target(self, manager: ActionManager, context: GameContext) -> None:
        a = manager.register_action("attack", 3, 4)
        b = manager.register_action("attack", 6, 4)
        c = manager.register_action("attack", 7, 1)

        assert manager.process_werewolf_attacks(1) == 4

        assert c.cancelled is True
        assert a.is_executable() and b.is_executable()
        votes = context.events.events_named("werewolf.attack.target")
        assert len(votes) == 1
        assert votes[0].payload == {"target_id": 4, "night": 1, "votes": {"1": 1, "4": 2}}

    def test_tie_goes_to_first_registered_target(self, manager: ActionManager) -> None:
        to_four = manager.register_action("attack", 3, 4)
        to_one = manager.register_action("attack", 6, 1)
        assert manager.process_werewolf_attacks(1) == 4
        assert to_four.is_executable()
        assert to_one.cancelled is True

    def test_majority_beats_earlier_registration(self, manager: ActionManager) -> None:
        manager.register_action("attack", 3, 1)
        manager.register_action("attack", 6, 4)
        manager.register_action("attack", 7, 4)
        assert manager.process_werewolf_attacks(1) == 4

    def test_no_attacks(self, manager: ActionManager, context: GameContext) -> None:
        manager.register_action("fortune", 1, 3)
        assert manager.process_werewolf_attacks(1) is None
        assert context.events.events_named("werewolf.attack.target") == []

    def test_other_nights_not_counted(self, manager: ActionManager) -> None:
        tonight = manager.register_action("attack", 3, 4, night=1)
        other = manager.register_action("attack", 6, 1, night=2)
        assert manager.process_werewolf_attacks(1) == 4
        assert tonight.is_executable()
        assert other.is_executable()

    def test_full_night_kills_only_chosen_target(
        self, manager: ActionManager, context: GameContext
    ) -> None:
        manager.register_action("attack", 3, 4)
        manager.register_action("attack", 6, 4)
        manager.register_action("attack", 7, 1)

        executed = manager.execute_actions(Phase.NIGHT, 1)

        assert executed == 2
        assert context.players.get_player(4).is_alive is False
        assert context.players.get_player(1).is_alive is True
        deaths = context.events.events_named("player.death")
        assert [d.payload["player_id"] for d in deaths] == [4]

    def test_tally_precedes_execution(
        self, manager: ActionManager, context: GameContext
    ) -> None:
        manager.register_action("attack", 3, 4)
        manager.register_action("fortune", 1, 3)
        manager.execute_actions(Phase.NIGHT, 1)
        names = [e.name for e in context.events.history]
        assert names.index("werewolf.attack.target") < names.index("action.execute")


# ======================================================================
# Cross-action effects
# ======================================================================


class TestGuardAgainstAttack:
    """Guard resolves before the attack it blocks."""

    def test_guarded_target_survives(
        self, manager: ActionManager, context: GameContext
    ) -> None:
        guard = manager.register_action("guard", 2, 4)
        attack = manager.register_action("attack", 3, 4)

        manager.execute_actions(Phase.NIGHT, 1)

        assert guard.result["guarded"] is True
        assert attack.result["killed"] is False
        assert attack.result["reason"] == "GUARDED"
        assert context.players.get_player(4).is_alive is True

    def test_guard_registered_after_attack_still_protects(
        self, manager: ActionManager, context: GameContext
    ) -> None:
        manager.register_action("attack", 3, 4)
        manager.register_action("guard", 2, 4)
        manager.execute_actions(Phase.NIGHT, 1)
        assert context.players.get_player(4).is_alive is True

    def test_guard_does_not_carry_to_next_night(
        self, manager: ActionManager, context: GameContext
    ) -> None:
        manager.register_action("guard", 2, 4, night=1)
        manager.execute_actions(Phase.NIGHT, 1)
        manager.register_action("attack", 3, 4, night=2)
        manager.execute_actions(Phase.NIGHT, 2)
        assert context.players.get_player(4).is_alive is False

    def test_seer_dead_before_resolution_still_reads(
        self, manager: ActionManager, context: GameContext
    ) -> None:
        # Fortune outranks attack, so the seer reads before being killed.
        fortune = manager.register_action("fortune", 1, 3)
        manager.register_action("attack", 3, 1)
        manager.execute_actions(Phase.NIGHT, 1)
        assert fortune.result["reading"] == "black"
        assert context.players.get_player(1).is_alive is False

    def test_curse_and_attack_same_night(
        self, manager: ActionManager, context: GameContext
    ) -> None:
        manager.register_action("fortune", 1, 5)
        attack = manager.register_action("attack", 3, 5)
        manager.execute_actions(Phase.NIGHT, 1)
        assert context.players.get_player(5).death_cause == "curse"
        assert attack.result["reason"] == "ALREADY_DEAD"


# ======================================================================
# Consecutive guard regulation
# ======================================================================


class TestConsecutiveGuard:
    """The consecutive-guard ban across nights."""

    def test_registration_rejected_on_second_night(
        self, manager: ActionManager, context: GameContext
    ) -> None:
        context.regulations = RegulationConfig(allow_consecutive_guard=False)
        manager.register_action("guard", 2, 4, night=1)
        manager.execute_actions(Phase.NIGHT, 1)

        with pytest.raises(ActionRejectedError) as exc_info:
            manager.register_action("guard", 2, 4, night=2)
        assert exc_info.value.kind is RejectionKind.CONSECUTIVE_GUARD

        assert manager.register_action("guard", 2, 1, night=2).is_executable()

    def test_allowed_when_regulation_permits(
        self, manager: ActionManager, context: GameContext
    ) -> None:
        manager.register_action("guard", 2, 4, night=1)
        manager.execute_actions(Phase.NIGHT, 1)
        second = manager.register_action("guard", 2, 4, night=2)
        manager.execute_actions(Phase.NIGHT, 2)
        assert second.result["guarded"] is True

    def test_preregistered_second_guard_fails_at_execution(
        self, manager: ActionManager, context: GameContext
    ) -> None:
        context.regulations = RegulationConfig(allow_consecutive_guard=False)
        manager.register_action("guard", 2, 4, night=1)
        second = manager.register_action("guard", 2, 4, night=2)
        manager.execute_actions(Phase.NIGHT, 1)

        assert manager.execute_actions(Phase.NIGHT, 2) == 0
        assert second.executed is False
        assert len(context.errors.errors) == 1
        error = context.errors.errors[0]
        assert isinstance(error, ActionRejectedError)
        assert error.kind is RejectionKind.CONSECUTIVE_GUARD


# ======================================================================
# Fault isolation
# ======================================================================


class TestFaultIsolation:
    """One failing action never stops the batch."""

    def test_failing_resolver_is_reported_and_skipped(
        self,
        manager: ActionManager,
        context: GameContext,
        bomber_role: str,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        context.players.add_player(9, "Bomber", bomber_role)
        fortune = manager.register_action("fortune", 1, 3)
        boom = manager.register_action("custom_boom", 9, 4)
        attack = manager.register_action("attack", 3, 4)

        with caplog.at_level(logging.ERROR, logger="wolfgm.engine.action_manager"):
            executed = manager.execute_actions(Phase.NIGHT, 1)

        assert executed == 2
        assert fortune.executed is True
        assert attack.executed is True
        assert boom.executed is False
        assert boom.cancelled is False
        assert "Action execution error" in caplog.text

        assert len(context.errors.errors) == 1
        error = context.errors.errors[0]
        assert isinstance(error, GameError)
        assert error.code is ErrorCode.ACTION_EXECUTION_ERROR
        assert isinstance(error.__cause__, RuntimeError)
        assert error.context["action_id"] == boom.id

    def test_custom_type_runs_in_priority_slot(
        self, manager: ActionManager, context: GameContext, bomber_role: str
    ) -> None:
        context.players.add_player(9, "Bomber", bomber_role)
        manager.register_action("attack", 3, 4)
        manager.register_action("custom_boom", 9, 4)
        manager.register_action("guard", 2, 1)
        order: list[str] = []
        context.events.on("action.execute", lambda e: order.append(e.payload["action_type"]))

        manager.execute_actions(Phase.NIGHT, 1)

        # custom_boom (70) sits between guard (80) and attack (60) but never executes.
        assert order == ["guard", "attack"]

    def test_failing_listener_does_not_stop_resolution(
        self, manager: ActionManager, context: GameContext
    ) -> None:
        def broken(event: GameEvent) -> None:
            raise RuntimeError("listener bug")

        context.events.on("action.execute", broken)
        manager.register_action("fortune", 1, 3)
        manager.register_action("attack", 3, 4)
        assert manager.execute_actions(Phase.NIGHT, 1) == 2


# ======================================================================
# Abnormal end
# ======================================================================


class TestAbnormalEnd:
    """Pending actions are cancelled when the game ended abnormally."""

    def test_cancels_instead_of_executing(
        self, manager: ActionManager, context: GameContext
    ) -> None:
        attack = manager.register_action("attack", 3, 4)
        fortune = manager.register_action("fortune", 1, 3)
        context.is_abnormal_end = True

        assert manager.execute_actions(Phase.NIGHT, 1) == 0

        assert attack.cancelled is True
        assert fortune.cancelled is True
        assert context.players.get_player(4).is_alive is True
        assert context.events.events_named("action.execute") == []
        assert len(context.events.events_named("action.cancel")) == 2

    def test_abnormal_end_events(self, manager: ActionManager, context: GameContext) -> None:
        manager.register_action("attack", 3, 4)
        context.is_abnormal_end = True
        manager.execute_actions(Phase.NIGHT, 1)

        ended = context.events.events_named("game.abnormal_end")
        assert ended[0].payload == {"phase": "night", "turn": 1, "cancelled_count": 1}
        complete = context.events.events_named("action.execute.complete")
        assert complete[0].payload == {
            "phase": "night",
            "turn": 1,
            "executed_count": 0,
            "aborted": True,
        }
        assert context.events.events_named("werewolf.attack.target") == []

    def test_other_nights_untouched(self, manager: ActionManager, context: GameContext) -> None:
        later = manager.register_action("fortune", 1, 3, night=2)
        context.is_abnormal_end = True
        manager.execute_actions(Phase.NIGHT, 1)
        assert later.is_executable() is True
