"""
通知渠道抽象层 - 仅定义接口，guesthouse 层实现具体渠道
"""
from guesthouse_core.notification.channel import INotificationChannel, NotificationChannelRegistry

__all__ = ["INotificationChannel", "NotificationChannelRegistry"]
