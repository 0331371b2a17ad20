"""
Tests for guesthouse/services/report_service.py
Covers: get_overall_statistics, get_booking_summary, get_period_report
"""
import pytest
from datetime import date
from decimal import Decimal

from guesthouse.models.entities import Booking, BookingStatus, GuestHouse, Room, Bed
from guesthouse.services.errors import InvalidRangeError
from guesthouse.services.report_service import ReportService


# ── helpers ──────────────────────────────────────────────────────────

def _insert(db, bed, check_in, check_out, status, price=None, user_id=None,
            email=None, first_name="T", last_name="T"):
    nights = (check_out - check_in).days
    b = Booking(
        bed_id=bed.id, user_id=user_id, email=email,
        first_name=first_name, last_name=last_name,
        check_in_date=check_in, check_out_date=check_out,
        total_price=price if price is not None else Decimal("100") * nights,
        status=status,
    )
    db.add(b)
    db.commit()
    return b


@pytest.fixture
def service(db_session, clock):
    return ReportService(db_session, clock=clock)


# ── overall statistics ───────────────────────────────────────────────

class TestOverallStatistics:

    def test_empty_database_is_all_zeros(self, service):
        stats = service.get_overall_statistics()
        assert stats.total_guest_houses == 0
        assert stats.total_rooms == 0
        assert stats.total_beds == 0
        assert stats.total_bookings == 0
        assert stats.available_beds == 0
        assert stats.active_bookings == 0
        assert stats.total_revenue == Decimal("0")

    def test_counts_and_revenue(self, service, db_session, make_bed, regular_user, admin_user):
        bed1, bed2, bed3 = make_bed(), make_bed(), make_bed()
        bed2.is_available_for_booking = False
        db_session.commit()

        _insert(db_session, bed1, date(2025, 1, 1), date(2025, 1, 3), BookingStatus.PENDING)
        _insert(db_session, bed2, date(2024, 12, 5), date(2024, 12, 8), BookingStatus.CONFIRMED)
        _insert(db_session, bed1, date(2024, 11, 1), date(2024, 11, 4), BookingStatus.COMPLETED)
        _insert(db_session, bed3, date(2025, 2, 1), date(2025, 2, 2), BookingStatus.CANCELED)
        _insert(db_session, bed3, date(2025, 3, 1), date(2025, 3, 2), BookingStatus.DENIED)

        stats = service.get_overall_statistics()
        assert stats.total_guest_houses == 1
        assert stats.total_rooms == 1
        assert stats.total_beds == 3
        assert stats.total_users == 2
        assert stats.total_bookings == 5
        assert stats.pending_bookings == 1
        assert stats.confirmed_bookings == 1
        assert stats.completed_bookings == 1
        assert stats.canceled_bookings == 1
        assert stats.denied_bookings == 1
        assert stats.active_bookings == 1
        assert stats.occupied_beds == 1
        # bed1 有待审批预订，bed2 标记已占用，只有 bed3 实际可用
        assert stats.available_beds == 1
        assert stats.total_revenue == Decimal("600")


# ── booking summary ──────────────────────────────────────────────────

class TestBookingSummary:

    def test_empty(self, service):
        summary = service.get_booking_summary()
        assert summary.total_bookings == 0
        assert summary.total_value == Decimal("0")
        assert summary.status_counts["pending"] == 0

    def test_filters(self, service, db_session, sample_bed):
        _insert(db_session, sample_bed, date(2025, 1, 1), date(2025, 1, 3), BookingStatus.CONFIRMED)
        _insert(db_session, sample_bed, date(2025, 1, 5), date(2025, 1, 6), BookingStatus.PENDING)
        _insert(db_session, sample_bed, date(2025, 2, 1), date(2025, 2, 4), BookingStatus.COMPLETED)

        summary = service.get_booking_summary()
        assert summary.total_bookings == 3
        assert summary.total_value == Decimal("600")
        assert summary.approved_revenue == Decimal("500")
        assert summary.status_counts == {
            "pending": 1, "confirmed": 1, "denied": 0, "canceled": 0, "completed": 1
        }

        january = service.get_booking_summary(start_date=date(2025, 1, 1), end_date=date(2025, 1, 31))
        assert january.total_bookings == 2
        assert january.approved_revenue == Decimal("200")

        pending = service.get_booking_summary(status=BookingStatus.PENDING)
        assert pending.total_bookings == 1
        assert pending.approved_revenue == Decimal("0")

    def test_invalid_range(self, service):
        with pytest.raises(InvalidRangeError):
            service.get_booking_summary(start_date=date(2025, 2, 1), end_date=date(2025, 1, 1))


# ── period report ────────────────────────────────────────────────────

class TestPeriodReport:

    def test_no_bookings_yields_zeros(self, service):
        report = service.get_period_report(date(2025, 1, 1), date(2025, 1, 31))
        assert report.total_bookings == 0
        assert report.total_revenue == Decimal("0")
        assert report.total_guest_visits == 0
        assert report.total_check_ins == 0
        assert report.total_nights_completed == 0
        assert report.average_stay_duration == 0
        assert report.average_booking_value == Decimal("0.00")

    def test_end_before_start(self, service):
        with pytest.raises(InvalidRangeError):
            service.get_period_report(date(2025, 2, 1), date(2025, 1, 1))

    def test_single_day_window(self, service, db_session, sample_bed):
        _insert(db_session, sample_bed, date(2025, 1, 1), date(2025, 1, 3), BookingStatus.CONFIRMED)
        report = service.get_period_report(date(2025, 1, 1), date(2025, 1, 1))
        assert report.total_bookings == 1
        assert report.total_check_ins == 1

    def test_aggregates(self, service, db_session, make_bed, regular_user):
        bed1, bed2 = make_bed(), make_bed()
        # 已完成 3 晚，注册用户
        _insert(db_session, bed1, date(2025, 1, 2), date(2025, 1, 5), BookingStatus.COMPLETED,
                user_id=regular_user.id)
        # 已确认 2 晚，同一注册用户
        _insert(db_session, bed1, date(2025, 1, 10), date(2025, 1, 12), BookingStatus.CONFIRMED,
                user_id=regular_user.id)
        # 已完成 4 晚，匿名访客（按邮箱区分）
        _insert(db_session, bed2, date(2025, 1, 3), date(2025, 1, 7), BookingStatus.COMPLETED,
                email="Guest@Example.com")
        # 待审批、已取消：计入期间预订数，不计营收
        _insert(db_session, bed2, date(2025, 1, 20), date(2025, 1, 21), BookingStatus.PENDING)
        _insert(db_session, bed2, date(2025, 1, 25), date(2025, 1, 27), BookingStatus.CANCELED)
        # 窗口外
        _insert(db_session, bed2, date(2025, 2, 1), date(2025, 2, 3), BookingStatus.COMPLETED)

        report = service.get_period_report(date(2025, 1, 1), date(2025, 1, 31))

        assert report.total_bookings == 5
        assert report.total_revenue == Decimal("900")
        assert report.total_check_ins == 3
        assert report.total_guest_visits == 2
        assert report.total_nights_completed == 7
        assert report.average_stay_duration == 1          # 7 // 5
        assert report.average_booking_value == Decimal("180.00")

    def test_average_value_rounds_half_up(self, service, db_session, sample_bed):
        _insert(db_session, sample_bed, date(2025, 1, 1), date(2025, 1, 2), BookingStatus.CONFIRMED,
                price=Decimal("100.01"))
        _insert(db_session, sample_bed, date(2025, 1, 3), date(2025, 1, 4), BookingStatus.CONFIRMED,
                price=Decimal("100.00"))
        report = service.get_period_report(date(2025, 1, 1), date(2025, 1, 31))
        # 200.01 / 2 = 100.005 -> 100.01
        assert report.average_booking_value == Decimal("100.01")
