"""
通知渠道实现
"""
from guesthouse.notification.email_channel import EmailChannel

__all__ = ["EmailChannel"]
