"""
重叠检测
同一床位上，已存在预订与新区间满足
    existing.check_out > new.check_in AND existing.check_in < new.check_out
即视为冲突。退房当天允许新入住；已拒绝/已取消的预订不参与判断。

必须与其保护的插入/更新处于同一床位互斥范围和同一事务内。
"""
from typing import List, Optional
from datetime import date

from sqlalchemy.orm import Session

from guesthouse.models.entities import Booking, ACTIVE_BOOKING_STATUSES


class OverlapChecker:
    """重叠检测"""

    def __init__(self, db: Session):
        self.db = db

    def find_conflicts(self, bed_id: int, check_in: date, check_out: date,
                       exclude_booking_id: Optional[int] = None) -> List[Booking]:
        """返回与 [check_in, check_out) 重叠的有效预订"""
        query = self.db.query(Booking).filter(
            Booking.bed_id == bed_id,
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
            Booking.check_out_date > check_in,
            Booking.check_in_date < check_out,
        )
        if exclude_booking_id is not None:
            query = query.filter(Booking.id != exclude_booking_id)
        return query.order_by(Booking.check_in_date).all()

    def has_conflict(self, bed_id: int, check_in: date, check_out: date,
                     exclude_booking_id: Optional[int] = None) -> bool:
        return len(self.find_conflicts(bed_id, check_in, check_out, exclude_booking_id)) > 0


__all__ = ["OverlapChecker"]
