"""
通知渠道接口 - 域无关的通知抽象

guesthouse 层通过实现 INotificationChannel 来对接具体通知渠道（邮件等）。
通知是尽力而为的：渠道失败只返回 False，不向业务操作抛出异常。
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


class INotificationChannel(ABC):
    """通知渠道接口"""

    @abstractmethod
    def send(
        self,
        recipient: str,
        subject: str,
        content: str,
        extra: Optional[Dict] = None,
    ) -> bool:
        """发送通知

        Args:
            recipient: 接收方标识（邮箱地址等，由渠道实现决定）
            subject: 通知标题
            content: 通知内容
            extra: 扩展参数（如 content_type、cc）

        Returns:
            是否发送成功
        """

    @abstractmethod
    def get_channel_type(self) -> str:
        """返回渠道类型标识，如 'email'"""


class NotificationChannelRegistry:
    """通知渠道注册表 - 单例模式

    应用在 lifespan 中注册实现：
        registry = NotificationChannelRegistry()
        registry.register(EmailChannel(...))
    """

    _instance: Optional["NotificationChannelRegistry"] = None

    def __new__(cls) -> "NotificationChannelRegistry":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._channels: Dict[str, INotificationChannel] = {}
        return cls._instance

    def register(self, channel: INotificationChannel) -> None:
        """注册通知渠道（同类型覆盖）"""
        self._channels[channel.get_channel_type()] = channel

    def unregister(self, channel_type: str) -> None:
        """移除通知渠道"""
        self._channels.pop(channel_type, None)

    def get_channel(self, channel_type: str) -> Optional[INotificationChannel]:
        """获取指定类型的渠道"""
        return self._channels.get(channel_type)

    def get_all_channels(self) -> List[INotificationChannel]:
        """获取所有已注册渠道"""
        return list(self._channels.values())

    def send(
        self,
        channel_type: str,
        recipient: str,
        subject: str,
        content: str,
        extra: Optional[Dict] = None,
    ) -> bool:
        """通过指定渠道发送通知，渠道未注册时返回 False"""
        channel = self.get_channel(channel_type)
        if channel is None:
            logger.debug(f"Notification channel '{channel_type}' not registered, skipped: {subject}")
            return False
        return channel.send(recipient, subject, content, extra)

    def clear(self) -> None:
        """清除所有渠道（用于测试）"""
        self._channels.clear()
