"""
预订服务 - 预订生命周期
创建、修改、审批、拒绝、取消、完成、删除

每次变更：
1. 进入床位互斥范围并对床位加行锁
2. 校验状态转换与操作人权限
3. 冲突检查 + 写入 + 可用性重算 + 提交（失败整体回滚）
4. 提交后记录审计、发布领域事件（尽力而为）
"""
from typing import Any, Callable, Dict, List, Optional
from datetime import date
from decimal import Decimal
import logging

from sqlalchemy.orm import Session

from guesthouse.models.entities import Bed, Booking, BookingStatus, User
from guesthouse.models.events import EventType, BookingEventData
from guesthouse.models.schemas import BookingCreate, BookingUpdate
from guesthouse.services.audit_service import AuditService
from guesthouse.services.availability import AvailabilityProjector
from guesthouse.services.bed_store import BedStore, bed_lock
from guesthouse.services.booking_store import BookingStore, snapshot_json
from guesthouse.services.errors import (
    NotFoundError, InvalidRangeError, InvalidRequestError, ConflictError,
    IllegalTransitionError, PriceUnsetError, ForbiddenError
)
from guesthouse.services.event_bus import event_bus, Event
from guesthouse.services.overlap_checker import OverlapChecker
from guesthouse_core.engine.state_machine import (
    StateMachine, StateMachineConfig, StateTransition
)
from guesthouse_core.security.actor import Actor

logger = logging.getLogger(__name__)


# ============== 状态机 ==============

def _is_admin(context: Dict[str, Any]) -> bool:
    return context["actor"].is_admin()


def _is_owner_or_admin(context: Dict[str, Any]) -> bool:
    actor = context["actor"]
    return actor.is_admin() or actor.owns(context.get("owner_id"))


BOOKING_STATE_MACHINE = StateMachineConfig(
    name="Booking",
    states=[s.value for s in BookingStatus],
    transitions=[
        StateTransition("pending", "pending", "update", condition=_is_owner_or_admin),
        StateTransition("pending", "confirmed", "approve", condition=_is_admin),
        StateTransition("pending", "denied", "deny", condition=_is_admin),
        StateTransition("pending", "canceled", "cancel", condition=_is_owner_or_admin),
        StateTransition("confirmed", "canceled", "cancel", condition=_is_admin),
        StateTransition("confirmed", "completed", "complete", condition=_is_admin),
    ],
    initial_state=BookingStatus.PENDING.value,
    final_states=[
        BookingStatus.DENIED.value,
        BookingStatus.CANCELED.value,
        BookingStatus.COMPLETED.value,
    ],
)

# 状态变更对应的领域事件
_TRIGGER_EVENTS = {
    "update": EventType.BOOKING_UPDATED,
    "approve": EventType.BOOKING_CONFIRMED,
    "deny": EventType.BOOKING_DENIED,
    "cancel": EventType.BOOKING_CANCELED,
    "complete": EventType.BOOKING_COMPLETED,
}


def calculate_total_price(bed: Bed, check_in: date, check_out: date) -> Decimal:
    """总价 = 入住晚数 × 床位单价"""
    if bed.price_per_night is None:
        raise PriceUnsetError(f"Bed price per night is not set for bed {bed.id}")
    nights = (check_out - check_in).days
    return (Decimal(str(bed.price_per_night)) * nights).quantize(Decimal("0.01"))


def _validate_range(check_in: date, check_out: date) -> None:
    if check_out <= check_in:
        raise InvalidRangeError("Check-out date must be after check-in date")


class BookingService:
    """预订服务"""

    def __init__(self, db: Session, clock: Callable[[], date] = date.today,
                 event_publisher: Callable[[Event], None] = None,
                 audit_service: AuditService = None):
        self.db = db
        self.clock = clock
        self.beds = BedStore(db)
        self.bookings = BookingStore(db)
        self.overlaps = OverlapChecker(db)
        # 支持依赖注入事件发布器，便于测试
        self._publish_event = event_publisher or event_bus.publish
        self.projector = AvailabilityProjector(db, clock=clock, event_publisher=self._publish_event)
        self.audit = audit_service or AuditService()

    # ============== 查询 ==============

    def get_booking(self, booking_id: int, actor: Actor) -> Booking:
        """获取单个预订（所有者或管理员）"""
        booking = self.bookings.get(booking_id)
        if not booking:
            raise NotFoundError(f"Booking {booking_id} not found")
        if not (actor.is_admin() or actor.owns(booking.user_id)):
            raise ForbiddenError("Not allowed to view this booking")
        return booking

    def list_bookings(self, actor: Actor, status: Optional[BookingStatus] = None,
                      user_id: Optional[int] = None, bed_id: Optional[int] = None,
                      active_only: bool = False) -> List[Booking]:
        """获取预订列表，非管理员只能看到自己的预订"""
        if not actor.is_admin():
            if not actor.is_authenticated():
                raise ForbiddenError("Login required to list bookings")
            if user_id is not None and user_id != actor.user_id:
                raise ForbiddenError("Not allowed to list other users' bookings")
            user_id = actor.user_id
        return self.bookings.list(
            status=status, user_id=user_id, bed_id=bed_id,
            active_only=active_only, today=self.clock()
        )

    # ============== 创建 ==============

    def create_booking(self, data: BookingCreate, actor: Actor) -> Booking:
        """创建预订（待审批）"""
        _validate_range(data.check_in_date, data.check_out_date)

        owner = self._resolve_owner(data.user_id, actor)
        first_name = data.first_name or (owner.first_name if owner else None)
        last_name = data.last_name or (owner.last_name if owner else None)
        if owner is None and not (first_name and last_name):
            raise InvalidRequestError("First and last name are required for guest bookings")

        with bed_lock(data.bed_id):
            try:
                bed = self.beds.get_for_update(data.bed_id)
                if not bed:
                    raise NotFoundError(f"Bed {data.bed_id} not found")
                total_price = calculate_total_price(bed, data.check_in_date, data.check_out_date)
                if not bed.is_available:
                    raise ConflictError(f"Bed {bed.bed_number} is out of service")
                if self.overlaps.has_conflict(bed.id, data.check_in_date, data.check_out_date):
                    raise ConflictError("Bed is not available for the selected dates")

                booking = Booking(
                    bed_id=bed.id,
                    user_id=owner.id if owner else None,
                    first_name=first_name,
                    last_name=last_name,
                    email=data.email or (owner.email if owner else None),
                    phone_number=data.phone_number,
                    gender=data.gender,
                    address=data.address,
                    check_in_date=data.check_in_date,
                    check_out_date=data.check_out_date,
                    total_price=total_price,
                    status=BookingStatus.PENDING,
                    purpose=data.purpose,
                    created_by=actor.label,
                    last_modified_by=actor.label,
                )
                self.bookings.add(booking)
                bed_changed = self.projector.reconcile(bed, actor.label)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

        self.db.refresh(booking)
        logger.info(
            f"Booking {booking.id} created on bed {bed.bed_number} "
            f"{booking.check_in_date}..{booking.check_out_date} by {actor.label}"
        )
        self.audit.record("Booking", booking.id, "CREATE", actor.label,
                          new_value=snapshot_json(booking), note="Booking created")
        self._publish(EventType.BOOKING_CREATED, booking, None, actor)
        if bed_changed:
            self.projector.publish_change(bed, "booking_service")
        return booking

    def _resolve_owner(self, user_id: Optional[int], actor: Actor) -> Optional[User]:
        """预订所属用户：管理员可代他人预订，其他人只能为自己预订"""
        if user_id is not None and user_id != actor.user_id and not actor.is_admin():
            raise ForbiddenError("Only administrators can book on behalf of another user")
        owner_id = user_id if user_id is not None else (
            actor.user_id if actor.is_authenticated() else None
        )
        if owner_id is None:
            return None
        owner = self.db.query(User).filter(User.id == owner_id).first()
        if not owner:
            raise NotFoundError(f"User {owner_id} not found")
        return owner

    # ============== 修改 ==============

    def update_booking(self, booking_id: int, data: BookingUpdate, actor: Actor) -> Booking:
        """修改待审批预订；日期变化时重新检测冲突并重算总价"""
        changes = data.model_dump(exclude_unset=True)

        def apply(booking: Booking, bed: Bed) -> None:
            check_in = changes.get("check_in_date") or booking.check_in_date
            check_out = changes.get("check_out_date") or booking.check_out_date
            _validate_range(check_in, check_out)
            if (check_in, check_out) != (booking.check_in_date, booking.check_out_date):
                if self.overlaps.has_conflict(bed.id, check_in, check_out,
                                              exclude_booking_id=booking.id):
                    raise ConflictError("Bed is not available for the selected dates")
                booking.total_price = calculate_total_price(bed, check_in, check_out)
                booking.check_in_date = check_in
                booking.check_out_date = check_out
            for field_name in ("first_name", "last_name", "email", "phone_number",
                               "gender", "address", "purpose"):
                if field_name in changes:
                    setattr(booking, field_name, changes[field_name])
            if booking.user_id is None and not (booking.first_name and booking.last_name):
                raise InvalidRequestError("First and last name are required for guest bookings")

        return self._transition(booking_id, "update", actor, apply, note="Booking updated")

    # ============== 状态变更 ==============

    def approve_booking(self, booking_id: int, actor: Actor) -> Booking:
        """审批通过"""
        return self._transition(booking_id, "approve", actor, note="Booking approved")

    def deny_booking(self, booking_id: int, actor: Actor, reason: Optional[str] = None) -> Booking:
        """拒绝预订"""
        def apply(booking: Booking, bed: Bed) -> None:
            booking.rejection_reason = reason

        return self._transition(booking_id, "deny", actor, apply,
                                note="Booking denied", reason=reason)

    def cancel_booking(self, booking_id: int, actor: Actor, reason: Optional[str] = None) -> Booking:
        """取消预订"""
        def apply(booking: Booking, bed: Bed) -> None:
            booking.cancellation_reason = reason

        return self._transition(booking_id, "cancel", actor, apply,
                                note="Booking canceled", reason=reason)

    def complete_booking(self, booking_id: int, actor: Actor) -> Booking:
        """完成预订（离店日期过后由巡检释放床位）"""
        return self._transition(booking_id, "complete", actor, note="Booking completed")

    def _transition(self, booking_id: int, trigger: str, actor: Actor,
                    apply: Callable[[Booking, Bed], None] = None,
                    note: str = "", reason: Optional[str] = None) -> Booking:
        bed_id = self._bed_id_of(booking_id)

        with bed_lock(bed_id):
            try:
                bed = self.beds.get_for_update(bed_id)
                booking = self.bookings.get(booking_id)
                if not booking or not bed:
                    raise NotFoundError(f"Booking {booking_id} not found")
                self.db.refresh(booking)
                old_value = snapshot_json(booking)
                old_status = booking.status

                machine = StateMachine(BOOKING_STATE_MACHINE, current_state=booking.status.value)
                context = {"actor": actor, "owner_id": booking.user_id}
                self._authorize(machine, trigger, context, booking)
                machine.fire(trigger, context)

                if apply is not None:
                    apply(booking, bed)
                booking.status = BookingStatus(machine.current_state)
                booking.last_modified_by = actor.label
                bed_changed = self.projector.reconcile(bed, actor.label)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

        self.db.refresh(booking)
        if old_status != booking.status:
            logger.info(
                f"Booking {booking.id} {old_status.value} -> {booking.status.value} by {actor.label}"
            )
        self.audit.record("Booking", booking.id, "UPDATE", actor.label,
                          old_value=old_value, new_value=snapshot_json(booking), note=note)
        self._publish(_TRIGGER_EVENTS[trigger], booking, old_status, actor, reason or "")
        if bed_changed:
            self.projector.publish_change(bed, "booking_service")
        return booking

    @staticmethod
    def _authorize(machine: StateMachine, trigger: str, context: Dict[str, Any],
                   booking: Booking) -> None:
        transition = machine.get_transition(trigger)
        if transition is None:
            raise IllegalTransitionError(
                f"Cannot {trigger} booking {booking.id} in status {machine.current_state}"
            )
        if not transition.is_allowed(context):
            raise ForbiddenError(f"Not allowed to {trigger} booking {booking.id}")

    # ============== 删除 ==============

    def delete_booking(self, booking_id: int, actor: Actor) -> None:
        """删除预订（仅管理员，任意状态）"""
        if not actor.is_admin():
            raise ForbiddenError("Only administrators can delete bookings")
        bed_id = self._bed_id_of(booking_id)

        with bed_lock(bed_id):
            try:
                bed = self.beds.get_for_update(bed_id)
                booking = self.bookings.get(booking_id)
                if not booking or not bed:
                    raise NotFoundError(f"Booking {booking_id} not found")
                old_value = snapshot_json(booking)
                event_data = self._event_data(booking, booking.status, actor)
                self.bookings.delete(booking)
                bed_changed = self.projector.reconcile(bed, actor.label)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

        logger.info(f"Booking {booking_id} deleted by {actor.label}")
        self.audit.record("Booking", booking_id, "DELETE", actor.label,
                          old_value=old_value, note="Booking deleted")
        self._emit(EventType.BOOKING_DELETED, event_data)
        if bed_changed:
            self.projector.publish_change(bed, "booking_service")

    # ── helpers ──

    def _bed_id_of(self, booking_id: int) -> int:
        booking = self.bookings.get(booking_id)
        if not booking:
            raise NotFoundError(f"Booking {booking_id} not found")
        return booking.bed_id

    def _event_data(self, booking: Booking, old_status: Optional[BookingStatus],
                    actor: Actor, reason: str = "") -> BookingEventData:
        return BookingEventData(
            booking_id=booking.id,
            bed_id=booking.bed_id,
            bed_number=booking.bed.bed_number if booking.bed else "",
            user_id=booking.user_id,
            guest_name=booking.guest_name,
            email=booking.contact_email,
            check_in_date=booking.check_in_date.isoformat(),
            check_out_date=booking.check_out_date.isoformat(),
            total_price=str(booking.total_price),
            old_status=old_status.value if old_status else None,
            new_status=booking.status.value,
            reason=reason,
            operator=actor.label,
        )

    def _publish(self, event_type: EventType, booking: Booking,
                 old_status: Optional[BookingStatus], actor: Actor, reason: str = "") -> None:
        self._emit(event_type, self._event_data(booking, old_status, actor, reason))

    def _emit(self, event_type: EventType, data: BookingEventData) -> None:
        try:
            self._publish_event(Event.of(event_type, data, source="booking_service"))
        except Exception as e:
            logger.warning(f"Failed to publish {event_type.value} for booking {data.booking_id}: {e}")


__all__ = ["BookingService", "BOOKING_STATE_MACHINE", "calculate_total_price"]
