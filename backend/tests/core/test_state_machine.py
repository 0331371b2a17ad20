"""
测试 guesthouse_core.engine.state_machine 状态机引擎
"""
import pytest
from guesthouse_core.engine.state_machine import (
    StateMachine, StateMachineConfig, StateTransition
)


def _config(condition=None):
    return StateMachineConfig(
        name="Door",
        states=["closed", "open", "locked", "broken"],
        transitions=[
            StateTransition("closed", "open", "open", condition=condition),
            StateTransition("open", "closed", "close"),
            StateTransition("closed", "locked", "lock"),
            StateTransition("closed", "broken", "smash"),
        ],
        initial_state="closed",
        final_states=["broken"],
    )


def test_initial_state():
    """测试初始状态"""
    machine = StateMachine(_config())
    assert machine.current_state == "closed"


def test_fire_valid_transition():
    """测试合法转换"""
    machine = StateMachine(_config())
    assert machine.fire("open") is True
    assert machine.current_state == "open"
    assert machine.fire("close") is True
    assert machine.current_state == "closed"


def test_fire_missing_transition():
    """测试当前状态不存在的转换"""
    machine = StateMachine(_config(), current_state="locked")
    assert machine.get_transition("open") is None
    assert machine.fire("open") is False
    assert machine.current_state == "locked"


def test_condition_blocks_transition():
    """测试条件不满足"""
    machine = StateMachine(_config(condition=lambda ctx: ctx.get("has_key", False)))
    assert machine.get_transition("open") is not None
    assert machine.can_fire("open", {"has_key": False}) is False
    assert machine.fire("open", {}) is False
    assert machine.fire("open", {"has_key": True}) is True


def test_condition_error_means_not_allowed():
    """测试条件抛异常时视为不允许"""
    def broken(ctx):
        raise KeyError("actor")

    machine = StateMachine(_config(condition=broken))
    assert machine.can_fire("open") is False


def test_final_state_has_no_transitions():
    """测试终态"""
    machine = StateMachine(_config())
    machine.fire("smash")
    for trigger in ("open", "close", "lock", "smash"):
        assert machine.get_transition(trigger) is None


def test_unknown_state_in_config():
    """测试配置中使用未知状态"""
    with pytest.raises(ValueError):
        StateMachineConfig(
            name="Bad", states=["a"],
            transitions=[StateTransition("a", "b", "go")],
            initial_state="a",
        )


def test_final_state_with_transition():
    """测试终态存在出边"""
    with pytest.raises(ValueError):
        StateMachineConfig(
            name="Bad", states=["a", "b"],
            transitions=[StateTransition("b", "a", "back")],
            initial_state="a", final_states=["b"],
        )


def test_unknown_current_state():
    """测试未知当前状态"""
    with pytest.raises(ValueError):
        StateMachine(_config(), current_state="ajar")


def test_booking_state_machine_edges():
    """测试预订状态机的转换表"""
    from guesthouse.services.booking_service import BOOKING_STATE_MACHINE

    edges = {(t.from_state, t.trigger): t.to_state for t in BOOKING_STATE_MACHINE.transitions}
    assert edges[("pending", "approve")] == "confirmed"
    assert edges[("pending", "deny")] == "denied"
    assert edges[("pending", "cancel")] == "canceled"
    assert edges[("confirmed", "cancel")] == "canceled"
    assert edges[("confirmed", "complete")] == "completed"
    assert ("confirmed", "deny") not in edges
    assert not any(t.from_state in BOOKING_STATE_MACHINE.final_states
                   for t in BOOKING_STATE_MACHINE.transitions)
