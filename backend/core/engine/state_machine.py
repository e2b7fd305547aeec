"""
core/engine/state_machine.py

状态机引擎 - 守卫条件驱动的状态转换

状态本身保存在实体上（例如 User.account_state），状态机只负责回答
"在当前状态下，某个触发动作能否执行、会转到哪个状态"。
"""
from typing import Dict, List, Any, Optional, Callable
from dataclasses import dataclass, field
import logging

logger = logging.getLogger(__name__)


class TransitionError(Exception):
    """
    非法状态转换

    Attributes:
        machine: 状态机名称
        from_state: 当前状态
        trigger: 触发动作
    """

    def __init__(self, machine: str, from_state: str, trigger: str):
        self.machine = machine
        self.from_state = from_state
        self.trigger = trigger
        super().__init__(f"{machine}: '{trigger}' not allowed from state '{from_state}'")


@dataclass
class StateTransition:
    """
    状态转换定义

    Attributes:
        from_state: 源状态
        to_state: 目标状态
        trigger: 触发动作
        condition: 可选的转换条件（接收上下文字典）
    """

    from_state: str
    to_state: str
    trigger: str
    condition: Optional[Callable[[Dict[str, Any]], bool]] = None

    def is_allowed(self, context: Dict[str, Any]) -> bool:
        """检查转换是否被允许"""
        if self.condition is None:
            return True
        return bool(self.condition(context))


@dataclass
class StateMachineConfig:
    """
    状态机配置

    Attributes:
        name: 状态机名称
        states: 所有状态的列表
        transitions: 转换列表
        initial_state: 初始状态
    """

    name: str
    states: List[str]
    transitions: List[StateTransition] = field(default_factory=list)
    initial_state: Optional[str] = None


class StateMachine:
    """
    状态机引擎

    Example:
        >>> machine = StateMachine(StateMachineConfig(
        ...     name="OwnerAccess",
        ...     states=["guest", "pending_owner"],
        ...     transitions=[StateTransition("guest", "pending_owner", "request")],
        ...     initial_state="guest",
        ... ))
        >>> machine.fire("guest", "request")
        'pending_owner'
    """

    def __init__(self, config: StateMachineConfig):
        self._config = config
        self._transition_map: Dict[str, Dict[str, StateTransition]] = {}

        # 构建转换映射: (from_state, trigger) -> transition
        for t in config.transitions:
            if t.from_state not in config.states or t.to_state not in config.states:
                raise ValueError(f"{config.name}: unknown state in transition {t.from_state} -> {t.to_state}")
            self._transition_map.setdefault(t.from_state, {})[t.trigger] = t

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def config(self) -> StateMachineConfig:
        """获取状态机配置"""
        return self._config

    def _state_key(self, state: Any) -> str:
        return state.value if hasattr(state, "value") else str(state)

    def get_transition(self, state: Any, trigger: str) -> Optional[StateTransition]:
        """获取 (状态, 触发动作) 对应的转换定义"""
        return self._transition_map.get(self._state_key(state), {}).get(trigger)

    def can_fire(self, state: Any, trigger: str, context: Optional[Dict[str, Any]] = None) -> bool:
        """
        检查在当前状态下触发动作是否允许

        Args:
            state: 当前状态
            trigger: 触发动作
            context: 可选的上下文数据

        Returns:
            True 如果存在转换且守卫条件通过
        """
        transition = self.get_transition(state, trigger)
        if transition is None:
            return False
        return transition.is_allowed(context or {})

    def fire(self, state: Any, trigger: str, context: Optional[Dict[str, Any]] = None) -> str:
        """
        执行状态转换，返回目标状态

        Raises:
            TransitionError: 转换不存在或守卫条件未通过
        """
        from_state = self._state_key(state)
        if not self.can_fire(from_state, trigger, context):
            logger.warning(
                f"Invalid transition: {self.name} {from_state} (trigger: {trigger})"
            )
            raise TransitionError(self.name, from_state, trigger)

        to_state = self._transition_map[from_state][trigger].to_state
        logger.info(f"State transition: {self.name} {from_state} -> {to_state} (trigger: {trigger})")
        return to_state

    def allowed_triggers(self, state: Any, context: Optional[Dict[str, Any]] = None) -> List[str]:
        """列出当前状态下可用的触发动作"""
        transitions = self._transition_map.get(self._state_key(state), {})
        return [trigger for trigger, t in transitions.items() if t.is_allowed(context or {})]


__all__ = [
    "TransitionError",
    "StateTransition",
    "StateMachineConfig",
    "StateMachine",
]
