"""
预订通知 - 订阅预订事件并发送邮件
- 新预订：通知管理员
- 确认 / 拒绝 / 取消：通知访客

通知失败只记录日志，不影响已提交的预订
"""
from typing import Dict, Optional
import logging

from guesthouse.models.events import EventType
from guesthouse.services.event_bus import Event, EventBus, event_bus
from guesthouse_core.notification.channel import NotificationChannelRegistry

logger = logging.getLogger(__name__)

CHANNEL = "email"


def _guest_subject_and_body(event_type: str, data: Dict) -> Optional[tuple]:
    name = data.get("guest_name") or "Guest"
    stay = f"{data.get('check_in_date')} to {data.get('check_out_date')}"
    bed = data.get("bed_number")

    if event_type == EventType.BOOKING_CONFIRMED.value:
        return (
            "Your booking has been confirmed",
            f"Dear {name},\n\nYour booking #{data.get('booking_id')} for bed {bed} "
            f"from {stay} has been confirmed.\nTotal price: {data.get('total_price')}\n",
        )
    if event_type == EventType.BOOKING_DENIED.value:
        reason = data.get("reason") or "No reason given"
        return (
            "Your booking request was denied",
            f"Dear {name},\n\nYour booking #{data.get('booking_id')} for bed {bed} "
            f"from {stay} was denied.\nReason: {reason}\n",
        )
    if event_type == EventType.BOOKING_CANCELED.value:
        reason = data.get("reason") or "No reason given"
        return (
            "Your booking has been canceled",
            f"Dear {name},\n\nYour booking #{data.get('booking_id')} for bed {bed} "
            f"from {stay} has been canceled.\nReason: {reason}\n",
        )
    return None


class BookingNotificationHandlers:
    """预订事件 -> 邮件通知"""

    def __init__(self, registry: NotificationChannelRegistry = None,
                 admin_email: str = ""):
        self.registry = registry or NotificationChannelRegistry()
        self.admin_email = admin_email
        self._registered = False

    def handle_booking_created(self, event: Event) -> None:
        """新预订通知管理员"""
        if not self.admin_email:
            return
        data = event.data
        sent = self.registry.send(
            CHANNEL,
            self.admin_email,
            f"New booking request #{data.get('booking_id')}",
            (
                f"{data.get('guest_name')} requested bed {data.get('bed_number')} "
                f"from {data.get('check_in_date')} to {data.get('check_out_date')}.\n"
                f"Total price: {data.get('total_price')}\n"
            ),
        )
        if not sent:
            logger.warning(f"Admin notification not sent for booking {data.get('booking_id')}")

    def handle_guest_status_change(self, event: Event) -> None:
        """状态变更通知访客"""
        data = event.data
        recipient = data.get("email")
        if not recipient:
            logger.debug(f"No guest email for booking {data.get('booking_id')}, skipped")
            return
        message = _guest_subject_and_body(event.event_type, data)
        if message is None:
            return
        subject, body = message
        if not self.registry.send(CHANNEL, recipient, subject, body):
            logger.warning(
                f"Guest notification {event.event_type} not sent for booking {data.get('booking_id')}"
            )

    def register(self, bus: EventBus = None) -> None:
        """注册事件处理器"""
        if self._registered:
            return
        bus = bus or event_bus
        bus.subscribe(EventType.BOOKING_CREATED.value, self.handle_booking_created)
        for event_type in (EventType.BOOKING_CONFIRMED, EventType.BOOKING_DENIED,
                           EventType.BOOKING_CANCELED):
            bus.subscribe(event_type.value, self.handle_guest_status_change)
        self._registered = True
        logger.info("Booking notification handlers registered")

    def unregister(self, bus: EventBus = None) -> None:
        """取消注册（用于测试和关闭）"""
        bus = bus or event_bus
        bus.unsubscribe(EventType.BOOKING_CREATED.value, self.handle_booking_created)
        for event_type in (EventType.BOOKING_CONFIRMED, EventType.BOOKING_DENIED,
                           EventType.BOOKING_CANCELED):
            bus.unsubscribe(event_type.value, self.handle_guest_status_change)
        self._registered = False


__all__ = ["BookingNotificationHandlers"]
