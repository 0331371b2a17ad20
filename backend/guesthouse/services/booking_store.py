"""
预订存储
按床位、用户、状态、日期窗口查询预订，以及计数与汇总
"""
from typing import Any, Dict, Iterable, List, Optional
from datetime import date
from decimal import Decimal
import json

from sqlalchemy import func
from sqlalchemy.orm import Session

from guesthouse.models.entities import (
    Booking, BookingStatus, ACTIVE_BOOKING_STATUSES
)


class BookingStore:
    """预订存储"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, booking_id: int) -> Optional[Booking]:
        return self.db.query(Booking).filter(Booking.id == booking_id).first()

    def add(self, booking: Booking) -> Booking:
        self.db.add(booking)
        self.db.flush()
        return booking

    def delete(self, booking: Booking) -> None:
        self.db.delete(booking)
        self.db.flush()

    def list(self, status: Optional[BookingStatus] = None,
             user_id: Optional[int] = None,
             bed_id: Optional[int] = None,
             active_only: bool = False,
             today: Optional[date] = None) -> List[Booking]:
        """
        查询预订列表

        active_only: 状态为待审批/已确认/已完成，且离店日期不早于 today
        """
        query = self.db.query(Booking)
        if status:
            query = query.filter(Booking.status == status)
        if user_id is not None:
            query = query.filter(Booking.user_id == user_id)
        if bed_id is not None:
            query = query.filter(Booking.bed_id == bed_id)
        if active_only:
            query = query.filter(
                Booking.status.in_(ACTIVE_BOOKING_STATUSES),
                Booking.check_out_date >= (today or date.today())
            )
        return query.order_by(Booking.check_in_date.desc(), Booking.id.desc()).all()

    def for_bed(self, bed_id: int, statuses: Iterable[BookingStatus] = ACTIVE_BOOKING_STATUSES,
                check_out_after: Optional[date] = None,
                check_out_from: Optional[date] = None) -> List[Booking]:
        """床位上指定状态的预订，可按离店日期过滤（after 为严格大于，from 为大于等于）"""
        query = self.db.query(Booking).filter(
            Booking.bed_id == bed_id,
            Booking.status.in_(tuple(statuses))
        )
        if check_out_after is not None:
            query = query.filter(Booking.check_out_date > check_out_after)
        if check_out_from is not None:
            query = query.filter(Booking.check_out_date >= check_out_from)
        return query.order_by(Booking.check_in_date).all()

    def in_window(self, start: date, end: date) -> List[Booking]:
        """入住日期落在 [start, end] 内的预订"""
        return self.db.query(Booking).filter(
            Booking.check_in_date >= start,
            Booking.check_in_date <= end
        ).all()

    def count_by_status(self) -> Dict[BookingStatus, int]:
        """各状态预订数（无预订的状态计 0）"""
        counts = {status: 0 for status in BookingStatus}
        rows = self.db.query(Booking.status, func.count(Booking.id)).group_by(Booking.status).all()
        for status, n in rows:
            counts[BookingStatus(status)] = n
        return counts

    def sum_total_price(self, statuses: Iterable[BookingStatus]) -> Decimal:
        total = self.db.query(func.sum(Booking.total_price)).filter(
            Booking.status.in_(tuple(statuses))
        ).scalar()
        return Decimal(str(total)) if total is not None else Decimal("0")


# ── 序列化 ──

def booking_snapshot(booking: Booking) -> Dict[str, Any]:
    """预订快照（审计旧值/新值）"""
    return {
        "id": booking.id,
        "bed_id": booking.bed_id,
        "user_id": booking.user_id,
        "first_name": booking.first_name,
        "last_name": booking.last_name,
        "email": booking.email,
        "phone_number": booking.phone_number,
        "check_in_date": booking.check_in_date.isoformat() if booking.check_in_date else None,
        "check_out_date": booking.check_out_date.isoformat() if booking.check_out_date else None,
        "total_price": str(booking.total_price) if booking.total_price is not None else None,
        "status": booking.status.value if booking.status else None,
        "purpose": booking.purpose,
        "rejection_reason": booking.rejection_reason,
        "cancellation_reason": booking.cancellation_reason,
    }


def snapshot_json(booking: Optional[Booking]) -> Optional[str]:
    if booking is None:
        return None
    return json.dumps(booking_snapshot(booking), ensure_ascii=False)


def booking_detail(booking: Booking) -> Dict[str, Any]:
    """预订详情（含床位/房间/宾馆/用户信息，用于 API 响应）"""
    bed = booking.bed
    room = bed.room if bed else None
    guest_house = room.guest_house if room else None
    return {
        "id": booking.id,
        "bed_id": booking.bed_id,
        "bed_number": bed.bed_number if bed else "",
        "room_id": room.id if room else 0,
        "room_number": room.room_number if room else "",
        "guest_house_id": guest_house.id if guest_house else 0,
        "guest_house_name": guest_house.name if guest_house else "",
        "user_id": booking.user_id,
        "user_name": booking.guest_name,
        "first_name": booking.first_name,
        "last_name": booking.last_name,
        "email": booking.email,
        "phone_number": booking.phone_number,
        "gender": booking.gender,
        "address": booking.address,
        "check_in_date": booking.check_in_date,
        "check_out_date": booking.check_out_date,
        "nights": booking.nights,
        "total_price": booking.total_price,
        "status": booking.status,
        "purpose": booking.purpose,
        "rejection_reason": booking.rejection_reason,
        "cancellation_reason": booking.cancellation_reason,
        "created_at": booking.created_at,
        "updated_at": booking.updated_at,
        "created_by": booking.created_by,
        "last_modified_by": booking.last_modified_by,
    }


__all__ = ["BookingStore", "booking_snapshot", "snapshot_json", "booking_detail"]
