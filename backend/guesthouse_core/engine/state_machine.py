"""
guesthouse_core/engine/state_machine.py

状态机引擎 - 支持带条件的状态转换

转换条件接收上下文字典（例如操作人、所有者），
调用方据此区分"当前状态不允许该动作"与"操作人无权执行该动作"。
"""
from typing import Dict, List, Any, Optional, Callable
from dataclasses import dataclass, field
import logging

logger = logging.getLogger(__name__)


@dataclass
class StateTransition:
    """
    状态转换定义

    Attributes:
        from_state: 源状态
        to_state: 目标状态
        trigger: 触发动作
        condition: 可选的转换条件（通常用于权限判断）
    """

    from_state: str
    to_state: str
    trigger: str
    condition: Optional[Callable[[Dict[str, Any]], bool]] = None

    def is_allowed(self, context: Dict[str, Any]) -> bool:
        """检查转换条件是否满足"""
        if self.condition is None:
            return True
        try:
            return bool(self.condition(context))
        except Exception as e:
            logger.error(f"Error checking transition condition: {e}")
            return False


@dataclass
class StateMachineConfig:
    """
    状态机配置

    Attributes:
        name: 状态机名称
        states: 所有状态的列表
        transitions: 转换列表
        initial_state: 初始状态
        final_states: 终态列表（终态不存在任何出边）
    """

    name: str
    states: List[str]
    transitions: List[StateTransition]
    initial_state: str
    final_states: List[str] = field(default_factory=list)

    def __post_init__(self):
        for t in self.transitions:
            if t.from_state not in self.states or t.to_state not in self.states:
                raise ValueError(
                    f"{self.name}: transition {t.from_state} -> {t.to_state} uses unknown state"
                )
            if t.from_state in self.final_states:
                raise ValueError(f"{self.name}: final state {t.from_state} cannot have transitions")


class StateMachine:
    """
    状态机

    Example:
        >>> machine = StateMachine(config, current_state="pending")
        >>> transition = machine.get_transition("approve")
        >>> if transition and transition.is_allowed({"actor": actor}):
        ...     machine.fire("approve", {"actor": actor})
    """

    def __init__(self, config: StateMachineConfig, current_state: Optional[str] = None):
        self._config = config
        self._current_state = current_state if current_state is not None else config.initial_state
        if self._current_state not in config.states:
            raise ValueError(f"{config.name}: unknown state '{self._current_state}'")
        self._transition_map: Dict[str, Dict[str, StateTransition]] = {}

        # 构建转换映射: from_state -> trigger -> transition
        for t in config.transitions:
            self._transition_map.setdefault(t.from_state, {})[t.trigger] = t

    @property
    def current_state(self) -> str:
        """获取当前状态"""
        return self._current_state

    @property
    def config(self) -> StateMachineConfig:
        """获取状态机配置"""
        return self._config

    def get_transition(self, trigger: str) -> Optional[StateTransition]:
        """获取当前状态下指定动作对应的转换，不存在时返回 None"""
        return self._transition_map.get(self._current_state, {}).get(trigger)

    def can_fire(self, trigger: str, context: Optional[Dict[str, Any]] = None) -> bool:
        """
        检查是否可以执行触发动作

        Args:
            trigger: 触发动作
            context: 可选的上下文数据

        Returns:
            True 如果转换存在且条件满足
        """
        transition = self.get_transition(trigger)
        if transition is None:
            return False
        return transition.is_allowed(context or {})

    def fire(self, trigger: str, context: Optional[Dict[str, Any]] = None) -> bool:
        """
        执行状态转换

        Args:
            trigger: 触发动作
            context: 可选的上下文数据

        Returns:
            True 如果转换成功
        """
        if not self.can_fire(trigger, context):
            logger.warning(
                f"Invalid transition on {self._config.name}: "
                f"{self._current_state} (trigger: {trigger})"
            )
            return False

        previous_state = self._current_state
        self._current_state = self.get_transition(trigger).to_state
        logger.info(
            f"{self._config.name} transition: {previous_state} -> {self._current_state} "
            f"(trigger: {trigger})"
        )
        return True


# 导出
__all__ = [
    "StateTransition",
    "StateMachineConfig",
    "StateMachine",
]
