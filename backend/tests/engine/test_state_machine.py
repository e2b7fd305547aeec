"""
状态机引擎测试
"""
import pytest

from core.engine import StateMachine, StateMachineConfig, StateTransition, TransitionError


def _door_machine(locked_ok=True):
    return StateMachine(StateMachineConfig(
        name="Door",
        states=["closed", "open", "locked"],
        transitions=[
            StateTransition("closed", "open", "open"),
            StateTransition("open", "closed", "close"),
            StateTransition("closed", "locked", "lock",
                            condition=lambda ctx: ctx.get("has_key", False)),
        ],
        initial_state="closed",
    ))


class TestStateMachineConfig:
    def test_creation(self):
        """测试状态机配置创建"""
        config = StateMachineConfig(
            name="Test",
            states=["s1", "s2"],
            initial_state="s1",
        )
        assert config.name == "Test"
        assert config.transitions == []
        assert config.initial_state == "s1"

    def test_unknown_state_rejected(self):
        """转换引用未声明的状态时报错"""
        with pytest.raises(ValueError):
            StateMachine(StateMachineConfig(
                name="Broken",
                states=["a"],
                transitions=[StateTransition("a", "b", "go")],
            ))


class TestStateTransition:
    def test_no_condition_always_allowed(self):
        transition = StateTransition(from_state="s1", to_state="s2", trigger="t1")
        assert transition.is_allowed({}) is True

    def test_condition(self):
        transition = StateTransition("s1", "s2", "t1", condition=lambda ctx: ctx.get("ok"))
        assert transition.is_allowed({"ok": True}) is True
        assert transition.is_allowed({}) is False


class TestStateMachine:
    def test_fire_returns_target_state(self):
        machine = _door_machine()
        assert machine.fire("closed", "open") == "open"
        assert machine.fire("open", "close") == "closed"

    def test_fire_unknown_trigger_raises(self):
        machine = _door_machine()
        with pytest.raises(TransitionError) as exc_info:
            machine.fire("open", "lock")
        assert exc_info.value.machine == "Door"
        assert exc_info.value.from_state == "open"
        assert exc_info.value.trigger == "lock"

    def test_guard_blocks_transition(self):
        machine = _door_machine()
        assert machine.can_fire("closed", "lock") is False
        assert machine.can_fire("closed", "lock", {"has_key": True}) is True
        with pytest.raises(TransitionError):
            machine.fire("closed", "lock", {"has_key": False})
        assert machine.fire("closed", "lock", {"has_key": True}) == "locked"

    def test_accepts_enum_states(self):
        """传入枚举时按 value 匹配"""
        from app.models.ontology import AccountState
        from app.services.owner_access_service import OWNER_ACCESS_MACHINE

        assert OWNER_ACCESS_MACHINE.fire(AccountState.GUEST, "request") == AccountState.PENDING_OWNER.value

    def test_allowed_triggers(self):
        machine = _door_machine()
        assert machine.allowed_triggers("closed") == ["open"]
        assert sorted(machine.allowed_triggers("closed", {"has_key": True})) == ["lock", "open"]
        assert machine.allowed_triggers("locked") == []

    def test_get_transition(self):
        machine = _door_machine()
        assert machine.get_transition("open", "close").to_state == "closed"
        assert machine.get_transition("locked", "open") is None
