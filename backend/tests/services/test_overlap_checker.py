"""
Tests for guesthouse/services/overlap_checker.py
半开区间：退房当天允许新入住
"""
import pytest
from datetime import date
from decimal import Decimal

from guesthouse.models.entities import Booking, BookingStatus
from guesthouse.services.overlap_checker import OverlapChecker


def _insert(db, bed, check_in, check_out, status=BookingStatus.PENDING):
    b = Booking(
        bed_id=bed.id, first_name="T", last_name="T",
        check_in_date=check_in, check_out_date=check_out,
        total_price=Decimal("0"), status=status,
    )
    db.add(b)
    db.commit()
    return b


@pytest.fixture
def existing(db_session, sample_bed):
    """已有预订 1/10 - 1/15"""
    return _insert(db_session, sample_bed, date(2025, 1, 10), date(2025, 1, 15))


@pytest.mark.parametrize("check_in,check_out,expected", [
    (date(2025, 1, 5), date(2025, 1, 10), False),    # 在入住当天离店
    (date(2025, 1, 15), date(2025, 1, 20), False),   # 在离店当天入住
    (date(2025, 1, 9), date(2025, 1, 11), True),
    (date(2025, 1, 14), date(2025, 1, 16), True),
    (date(2025, 1, 11), date(2025, 1, 12), True),    # 被包含
    (date(2025, 1, 1), date(2025, 1, 31), True),     # 包含
    (date(2025, 1, 10), date(2025, 1, 15), True),    # 完全相同
    (date(2025, 2, 1), date(2025, 2, 2), False),
])
def test_half_open_rule(db_session, sample_bed, existing, check_in, check_out, expected):
    checker = OverlapChecker(db_session)
    assert checker.has_conflict(sample_bed.id, check_in, check_out) is expected


@pytest.mark.parametrize("status,expected", [
    (BookingStatus.PENDING, True),
    (BookingStatus.CONFIRMED, True),
    (BookingStatus.COMPLETED, True),
    (BookingStatus.DENIED, False),
    (BookingStatus.CANCELED, False),
])
def test_only_active_statuses_conflict(db_session, sample_bed, status, expected):
    _insert(db_session, sample_bed, date(2025, 1, 10), date(2025, 1, 15), status=status)
    checker = OverlapChecker(db_session)
    assert checker.has_conflict(sample_bed.id, date(2025, 1, 12), date(2025, 1, 13)) is expected


def test_exclude_booking(db_session, sample_bed, existing):
    checker = OverlapChecker(db_session)
    assert checker.has_conflict(
        sample_bed.id, date(2025, 1, 11), date(2025, 1, 14), exclude_booking_id=existing.id
    ) is False


def test_other_bed_never_conflicts(db_session, sample_bed, make_bed, existing):
    other_bed = make_bed()
    checker = OverlapChecker(db_session)
    assert checker.has_conflict(other_bed.id, date(2025, 1, 10), date(2025, 1, 15)) is False


def test_find_conflicts_lists_bookings(db_session, sample_bed, existing):
    second = _insert(db_session, sample_bed, date(2025, 1, 20), date(2025, 1, 25))
    checker = OverlapChecker(db_session)
    found = checker.find_conflicts(sample_bed.id, date(2025, 1, 1), date(2025, 2, 1))
    assert [b.id for b in found] == [existing.id, second.id]
