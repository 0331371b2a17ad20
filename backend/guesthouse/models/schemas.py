"""
Pydantic 模式定义
用于 API 请求/响应验证
"""
from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List, Dict
from pydantic import BaseModel, Field, ConfigDict
from guesthouse.models.entities import BookingStatus


# ============== 预订 Schemas ==============

class GuestContact(BaseModel):
    first_name: Optional[str] = Field(None, max_length=50)
    last_name: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=100)
    phone_number: Optional[str] = Field(None, max_length=20)
    gender: Optional[str] = Field(None, max_length=10)
    address: Optional[str] = None


class BookingCreate(GuestContact):
    """创建预订：价格由床位单价计算，不接受调用方传入"""
    bed_id: int
    user_id: Optional[int] = None     # 仅管理员可代他人预订
    check_in_date: date
    check_out_date: date
    purpose: Optional[str] = None


class BookingUpdate(GuestContact):
    """修改预订（仅待审批状态）"""
    check_in_date: Optional[date] = None
    check_out_date: Optional[date] = None
    purpose: Optional[str] = None


class BookingCancel(BaseModel):
    reason: Optional[str] = None


class BookingDeny(BaseModel):
    reason: Optional[str] = None


class BookingResponse(BaseModel):
    id: int
    bed_id: int
    bed_number: str
    room_id: int
    room_number: str
    guest_house_id: int
    guest_house_name: str
    user_id: Optional[int]
    user_name: str
    first_name: Optional[str]
    last_name: Optional[str]
    email: Optional[str]
    phone_number: Optional[str]
    gender: Optional[str]
    address: Optional[str]
    check_in_date: date
    check_out_date: date
    nights: int
    total_price: Decimal
    status: BookingStatus
    purpose: Optional[str]
    rejection_reason: Optional[str]
    cancellation_reason: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    created_by: Optional[str]
    last_modified_by: Optional[str]
    model_config = ConfigDict(from_attributes=True)


# ============== 床位 Schemas ==============

class BedResponse(BaseModel):
    id: int
    room_id: int
    bed_number: str
    price_per_night: Optional[Decimal]
    is_available: bool
    is_available_for_booking: bool
    model_config = ConfigDict(from_attributes=True)


class BedAvailability(BaseModel):
    bed_id: int
    is_available: bool
    is_available_for_booking: bool
    actually_available: bool
    active_booking_ids: List[int]


class SweepResult(BaseModel):
    checked: int
    changed: int
    inconsistent_bed_ids: List[int]


# ============== 报表 Schemas ==============

class DashboardStats(BaseModel):
    total_guest_houses: int
    total_rooms: int
    total_beds: int
    occupied_beds: int
    available_beds: int
    total_users: int
    total_bookings: int
    pending_bookings: int
    confirmed_bookings: int
    completed_bookings: int
    canceled_bookings: int
    denied_bookings: int
    active_bookings: int
    total_revenue: Decimal


class BookingSummary(BaseModel):
    status_counts: Dict[str, int]
    total_bookings: int
    total_value: Decimal
    approved_revenue: Decimal


class PeriodReport(BaseModel):
    start_date: date
    end_date: date
    total_bookings: int
    total_revenue: Decimal
    total_guest_visits: int
    total_check_ins: int
    total_nights_completed: int
    average_stay_duration: int
    average_booking_value: Decimal
