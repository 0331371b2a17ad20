"""
床位可用性投影
is_available_for_booking 是由预订推导出的缓存：
床位上存在离店日期晚于今天的有效预订（待审批/已确认/已完成）时为 False，否则为 True。
员工维护的 is_available 不由此处写入。
"""
from typing import Callable, List
from datetime import date
import logging

from sqlalchemy import and_
from sqlalchemy.orm import Session

from guesthouse.models.entities import Bed, Booking, ACTIVE_BOOKING_STATUSES
from guesthouse.models.events import EventType, BedAvailabilityChangedData
from guesthouse.models.schemas import BedAvailability, SweepResult
from guesthouse.services.bed_store import BedStore, bed_lock
from guesthouse.services.booking_store import BookingStore
from guesthouse.services.errors import (
    NotFoundError, InvalidRangeError, InconsistentStateError
)
from guesthouse.services.event_bus import event_bus, Event
from guesthouse.services.overlap_checker import OverlapChecker

logger = logging.getLogger(__name__)


class AvailabilityProjector:
    """床位可用性投影"""

    def __init__(self, db: Session, clock: Callable[[], date] = date.today,
                 event_publisher: Callable[[Event], None] = None):
        self.db = db
        self.clock = clock
        self.beds = BedStore(db)
        self.bookings = BookingStore(db)
        self.overlaps = OverlapChecker(db)
        self._publish_event = event_publisher or event_bus.publish

    # ============== 重算 ==============

    def verify_bed(self, bed_id: int) -> None:
        """
        校验床位上的有效预订两两不重叠

        Raises:
            InconsistentStateError: 存在相互重叠的有效预订
        """
        active = self.bookings.for_bed(bed_id, check_out_from=self.clock())
        for i, first in enumerate(active):
            for second in active[i + 1:]:
                if first.overlaps(second.check_in_date, second.check_out_date):
                    raise InconsistentStateError(
                        f"Bed {bed_id} has overlapping active bookings {first.id} and {second.id}",
                        bed_id=bed_id,
                        booking_ids=[first.id, second.id],
                    )

    def reconcile(self, bed: Bed, actor_label: str) -> bool:
        """
        在调用方的事务内重算床位的可预订标记（不提交）

        Returns:
            True 如果标记发生变化
        """
        self.db.flush()
        self.verify_bed(bed.id)
        occupied = len(self.bookings.for_bed(bed.id, check_out_after=self.clock())) > 0
        return self.beds.set_available_for_booking(bed, not occupied, actor_label)

    def publish_change(self, bed: Bed, source: str) -> None:
        """提交后发布可用性变更事件"""
        try:
            self._publish_event(Event.of(
                EventType.BED_AVAILABILITY_CHANGED,
                BedAvailabilityChangedData(
                    bed_id=bed.id,
                    bed_number=bed.bed_number,
                    is_available_for_booking=bool(bed.is_available_for_booking),
                    source=source,
                ),
                source=source,
            ))
        except Exception as e:
            logger.warning(f"Failed to publish availability change for bed {bed.id}: {e}")

    def sweep(self, actor_label: str = "availability_sweep") -> SweepResult:
        """
        巡检全部床位：每个床位在各自的互斥范围和事务内重算

        不一致的床位回滚并记录，巡检继续
        """
        checked = 0
        changed = 0
        inconsistent: List[int] = []

        for bed_id in self.beds.all_ids():
            with bed_lock(bed_id):
                try:
                    bed = self.beds.get_for_update(bed_id)
                    if bed is None:
                        self.db.rollback()
                        continue
                    checked += 1
                    did_change = self.reconcile(bed, actor_label)
                    self.db.commit()
                except InconsistentStateError as e:
                    self.db.rollback()
                    inconsistent.append(bed_id)
                    logger.error(f"Availability sweep: {e.message} (bookings {e.booking_ids})")
                    continue
                except Exception:
                    self.db.rollback()
                    raise
            if did_change:
                changed += 1
                logger.info(
                    f"Availability sweep: bed {bed.bed_number} "
                    f"is_available_for_booking={bed.is_available_for_booking}"
                )
                self.publish_change(bed, actor_label)

        return SweepResult(checked=checked, changed=changed, inconsistent_bed_ids=inconsistent)

    # ============== 查询 ==============

    def _actually_available_beds(self):
        """实时可用：两个标记均为 True，且不在离店日期不早于今天的有效预订子查询中"""
        occupied = self.db.query(Booking.bed_id).filter(
            and_(
                Booking.status.in_(ACTIVE_BOOKING_STATUSES),
                Booking.check_out_date >= self.clock(),
            )
        )
        return self.db.query(Bed).filter(
            Bed.is_available == True,
            Bed.is_available_for_booking == True,
            ~Bed.id.in_(occupied),
        )

    def _get_bed(self, bed_id: int) -> Bed:
        bed = self.beds.get(bed_id)
        if bed is None:
            raise NotFoundError(f"Bed {bed_id} not found")
        return bed

    def is_bed_available(self, bed_id: int) -> bool:
        self._get_bed(bed_id)
        return self._actually_available_beds().filter(Bed.id == bed_id).first() is not None

    def get_bed_availability(self, bed_id: int) -> BedAvailability:
        bed = self._get_bed(bed_id)
        return BedAvailability(
            bed_id=bed.id,
            is_available=bool(bed.is_available),
            is_available_for_booking=bool(bed.is_available_for_booking),
            actually_available=self.is_bed_available(bed_id),
            active_booking_ids=[
                b.id for b in self.bookings.for_bed(bed_id, check_out_from=self.clock())
            ],
        )

    def count_actually_available_beds(self) -> int:
        return self._actually_available_beds().count()

    def get_available_beds(self, room_id: int, check_in: date, check_out: date) -> List[Bed]:
        """房间内在 [check_in, check_out) 期间可预订的床位"""
        if check_out <= check_in:
            raise InvalidRangeError("Check-out date must be after check-in date")
        if self.beds.get_room(room_id) is None:
            raise NotFoundError(f"Room {room_id} not found")
        return [
            bed for bed in self.beds.list_by_room(room_id, available_only=True)
            if not self.overlaps.has_conflict(bed.id, check_in, check_out)
        ]


__all__ = ["AvailabilityProjector"]
