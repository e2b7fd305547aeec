"""
core/engine - 核心引擎模块

- state_machine: 状态机引擎（守卫条件 + 状态转换）

使用方式:
    >>> from core.engine import StateMachine, StateMachineConfig, StateTransition
"""

from core.engine.state_machine import (
    TransitionError,
    StateTransition,
    StateMachineConfig,
    StateMachine,
)

__all__ = [
    "TransitionError",
    "StateTransition",
    "StateMachineConfig",
    "StateMachine",
]
