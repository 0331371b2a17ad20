"""
报表服务
仪表盘统计、预订汇总、期间报表（只读）
"""
from typing import Callable, Optional
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from sqlalchemy.orm import Session
from guesthouse.models.entities import (
    Booking, BookingStatus, REVENUE_BOOKING_STATUSES
)
from guesthouse.models.schemas import DashboardStats, BookingSummary, PeriodReport
from guesthouse.services.availability import AvailabilityProjector
from guesthouse.services.bed_store import BedStore
from guesthouse.services.booking_store import BookingStore
from guesthouse.services.errors import InvalidRangeError


class ReportService:
    """报表服务"""

    def __init__(self, db: Session, clock: Callable[[], date] = date.today):
        self.db = db
        self.beds = BedStore(db)
        self.bookings = BookingStore(db)
        self.projector = AvailabilityProjector(db, clock=clock)

    def get_overall_statistics(self) -> DashboardStats:
        """获取仪表盘统计数据"""
        counts = self.bookings.count_by_status()
        return DashboardStats(
            total_guest_houses=self.beds.count_guest_houses(),
            total_rooms=self.beds.count_rooms(),
            total_beds=self.beds.count_beds(),
            occupied_beds=self.beds.count_occupied_beds(),
            available_beds=self.projector.count_actually_available_beds(),
            total_users=self.beds.count_users(),
            total_bookings=sum(counts.values()),
            pending_bookings=counts[BookingStatus.PENDING],
            confirmed_bookings=counts[BookingStatus.CONFIRMED],
            completed_bookings=counts[BookingStatus.COMPLETED],
            canceled_bookings=counts[BookingStatus.CANCELED],
            denied_bookings=counts[BookingStatus.DENIED],
            # 进行中 = 已确认
            active_bookings=counts[BookingStatus.CONFIRMED],
            total_revenue=self.bookings.sum_total_price(REVENUE_BOOKING_STATUSES),
        )

    def get_booking_summary(self, status: Optional[BookingStatus] = None,
                            start_date: Optional[date] = None,
                            end_date: Optional[date] = None) -> BookingSummary:
        """
        预订汇总

        Args:
            status: 可选，只统计该状态
            start_date / end_date: 可选，按入住日期过滤（闭区间）
        """
        if start_date and end_date and end_date < start_date:
            raise InvalidRangeError("End date must not be before start date")

        query = self.db.query(Booking)
        if status:
            query = query.filter(Booking.status == status)
        if start_date:
            query = query.filter(Booking.check_in_date >= start_date)
        if end_date:
            query = query.filter(Booking.check_in_date <= end_date)
        bookings = query.all()

        status_counts = {s.value: 0 for s in BookingStatus}
        total_value = Decimal("0")
        approved_revenue = Decimal("0")
        for b in bookings:
            status_counts[b.status.value] += 1
            total_value += Decimal(str(b.total_price))
            if b.status in REVENUE_BOOKING_STATUSES:
                approved_revenue += Decimal(str(b.total_price))

        return BookingSummary(
            status_counts=status_counts,
            total_bookings=len(bookings),
            total_value=total_value,
            approved_revenue=approved_revenue,
        )

    def get_period_report(self, start_date: date, end_date: date) -> PeriodReport:
        """
        期间报表：入住日期落在 [start_date, end_date] 内的预订

        - 营收 / 入住次数：已确认 + 已完成
        - 访客人次：有已批准预订的不同访客
        - 平均停留：已完成晚数 // 期间预订数
        - 平均预订金额：营收 / 期间预订数，保留两位小数
        """
        if end_date < start_date:
            raise InvalidRangeError("End date must not be before start date")

        bookings = self.bookings.in_window(start_date, end_date)
        approved = [b for b in bookings if b.status in REVENUE_BOOKING_STATUSES]
        completed = [b for b in bookings if b.status == BookingStatus.COMPLETED]

        total_revenue = sum((Decimal(str(b.total_price)) for b in approved), Decimal("0"))
        guests = {_guest_key(b) for b in approved}
        nights_completed = sum(b.nights for b in completed)

        total = len(bookings)
        if total:
            average_stay = nights_completed // total
            average_value = (total_revenue / total).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        else:
            average_stay = 0
            average_value = Decimal("0.00")

        return PeriodReport(
            start_date=start_date,
            end_date=end_date,
            total_bookings=total,
            total_revenue=total_revenue,
            total_guest_visits=len(guests),
            total_check_ins=len(approved),
            total_nights_completed=nights_completed,
            average_stay_duration=average_stay,
            average_booking_value=average_value,
        )


def _guest_key(booking: Booking):
    """访客标识：注册用户ID，否则邮箱，否则姓名"""
    if booking.user_id is not None:
        return ("user", booking.user_id)
    if booking.email:
        return ("email", booking.email.lower())
    return ("name", f"{booking.first_name or ''} {booking.last_name or ''}".strip().lower())
