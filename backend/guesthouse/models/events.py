"""
领域事件定义 (Domain Events)
预订变更后发布到事件总线，由通知等外部协作方订阅
"""
from enum import Enum
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Optional, Dict, Any


class EventType(str, Enum):
    """事件类型枚举"""
    # 预订相关
    BOOKING_CREATED = "booking.created"
    BOOKING_UPDATED = "booking.updated"
    BOOKING_CONFIRMED = "booking.confirmed"
    BOOKING_DENIED = "booking.denied"
    BOOKING_CANCELED = "booking.canceled"
    BOOKING_COMPLETED = "booking.completed"
    BOOKING_DELETED = "booking.deleted"

    # 床位相关
    BED_AVAILABILITY_CHANGED = "bed.availability_changed"


@dataclass
class BaseEventData:
    """事件数据基类"""
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        result = asdict(self)
        for key, value in result.items():
            if isinstance(value, datetime):
                result[key] = value.isoformat()
        return result


@dataclass
class BookingEventData(BaseEventData):
    """预订事件数据"""
    booking_id: int = 0
    bed_id: int = 0
    bed_number: str = ""
    user_id: Optional[int] = None
    guest_name: str = ""
    email: Optional[str] = None
    check_in_date: str = ""   # date as string
    check_out_date: str = ""  # date as string
    total_price: str = "0"    # Decimal as string
    old_status: Optional[str] = None
    new_status: str = ""
    reason: str = ""
    operator: str = ""


@dataclass
class BedAvailabilityChangedData(BaseEventData):
    """床位可用性变更事件数据"""
    bed_id: int = 0
    bed_number: str = ""
    is_available_for_booking: bool = True
    source: str = ""  # booking_service / availability_sweep
