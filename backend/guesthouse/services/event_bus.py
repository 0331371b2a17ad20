"""
事件总线 - 内存级发布/订阅
预订引擎只负责发布，通知等协作方订阅；处理器异常不会回传给发布方
"""
from typing import Callable, Dict, List, Optional
from dataclasses import dataclass, field
from datetime import datetime
from collections import deque
import logging
import threading
import uuid

from guesthouse.models.events import BaseEventData, EventType

logger = logging.getLogger(__name__)


@dataclass
class Event:
    """事件"""
    event_type: str
    timestamp: datetime
    data: Dict
    source: str  # 触发来源（服务名）
    event_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @classmethod
    def of(cls, event_type: EventType, data: BaseEventData, source: str) -> "Event":
        """由事件类型和事件数据构建"""
        return cls(
            event_type=event_type.value,
            timestamp=datetime.now(),
            data=data.to_dict(),
            source=source,
        )


class EventBus:
    """
    内存级事件总线（线程安全）

    使用方式：
    1. 订阅事件：event_bus.subscribe("booking.created", handler_func)
    2. 发布事件：event_bus.publish(Event(...))
    3. 取消订阅：event_bus.unsubscribe("booking.created", handler_func)
    """

    def __init__(self, history_size: int = 100):
        self._subscribers: Dict[str, List[Callable]] = {}
        self._event_history: deque = deque(maxlen=history_size)
        self._lock = threading.Lock()

    def subscribe(self, event_type: str, handler: Callable) -> None:
        """
        订阅事件

        Args:
            event_type: 事件类型（如 "booking.created"）
            handler: 处理函数，接收 Event 对象作为参数
        """
        with self._lock:
            handlers = self._subscribers.setdefault(event_type, [])
            if handler not in handlers:
                handlers.append(handler)
                logger.info(f"Handler {getattr(handler, '__name__', handler)} subscribed to {event_type}")

    def unsubscribe(self, event_type: str, handler: Callable) -> None:
        """取消订阅"""
        with self._lock:
            handlers = self._subscribers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)
                logger.info(f"Handler {getattr(handler, '__name__', handler)} unsubscribed from {event_type}")

    def publish(self, event: Event) -> int:
        """
        发布事件（同步执行所有处理器）

        处理器异常只记录日志，不影响其他处理器，也不影响发布方

        Returns:
            执行失败的处理器数量
        """
        with self._lock:
            self._event_history.append(event)
            handlers = list(self._subscribers.get(event.event_type, []))

        failures = 0
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                failures += 1
                logger.warning(
                    f"Event handler {getattr(handler, '__name__', handler)} error for {event.event_type}: {e}",
                    exc_info=True
                )
        return failures

    def get_history(self, event_type: Optional[str] = None, limit: int = 50) -> List[Event]:
        """
        获取事件历史（最新的在前）

        Args:
            event_type: 可选，筛选特定类型的事件
            limit: 返回数量限制
        """
        with self._lock:
            history = list(self._event_history)
        if event_type:
            history = [e for e in history if e.event_type == event_type]
        return list(reversed(history))[:limit]

    def get_subscribers(self) -> Dict[str, List[str]]:
        """获取订阅者信息（用于调试）"""
        with self._lock:
            return {
                et: [getattr(h, "__name__", repr(h)) for h in handlers]
                for et, handlers in self._subscribers.items()
            }

    def clear_subscribers(self) -> None:
        """清空所有订阅（用于测试）"""
        with self._lock:
            self._subscribers.clear()

    def clear_history(self) -> None:
        """清空事件历史"""
        with self._lock:
            self._event_history.clear()


# 全局事件总线实例
event_bus = EventBus()
