"""
预订路由
"""
from datetime import date
from typing import Callable, List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from guesthouse.database import get_db
from guesthouse.models.entities import BookingStatus
from guesthouse.models.schemas import (
    BookingCreate, BookingUpdate, BookingCancel, BookingDeny, BookingResponse
)
from guesthouse.routers.deps import http_error, get_clock
from guesthouse.security.auth import get_current_actor, get_optional_actor
from guesthouse.services.booking_service import BookingService
from guesthouse.services.booking_store import booking_detail
from guesthouse.services.errors import BookingError
from guesthouse_core.security.actor import Actor

router = APIRouter(prefix="/bookings", tags=["预订管理"])


def _service(db: Session, clock: Callable[[], date]) -> BookingService:
    return BookingService(db, clock=clock)


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
    clock: Callable[[], date] = Depends(get_clock),
    actor: Actor = Depends(get_optional_actor)
):
    """创建预订（允许匿名访客）"""
    try:
        booking = _service(db, clock).create_booking(data, actor)
    except BookingError as e:
        raise http_error(e)
    return BookingResponse(**booking_detail(booking))


@router.get("", response_model=List[BookingResponse])
def list_bookings(
    status: Optional[BookingStatus] = None,
    user_id: Optional[int] = None,
    bed_id: Optional[int] = None,
    active_only: bool = False,
    db: Session = Depends(get_db),
    clock: Callable[[], date] = Depends(get_clock),
    actor: Actor = Depends(get_current_actor)
):
    """获取预订列表"""
    try:
        bookings = _service(db, clock).list_bookings(
            actor, status=status, user_id=user_id, bed_id=bed_id, active_only=active_only
        )
    except BookingError as e:
        raise http_error(e)
    return [BookingResponse(**booking_detail(b)) for b in bookings]


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    clock: Callable[[], date] = Depends(get_clock),
    actor: Actor = Depends(get_current_actor)
):
    """获取预订详情"""
    try:
        booking = _service(db, clock).get_booking(booking_id, actor)
    except BookingError as e:
        raise http_error(e)
    return BookingResponse(**booking_detail(booking))


@router.put("/{booking_id}", response_model=BookingResponse)
def update_booking(
    booking_id: int,
    data: BookingUpdate,
    db: Session = Depends(get_db),
    clock: Callable[[], date] = Depends(get_clock),
    actor: Actor = Depends(get_current_actor)
):
    """修改预订（仅待审批）"""
    try:
        booking = _service(db, clock).update_booking(booking_id, data, actor)
    except BookingError as e:
        raise http_error(e)
    return BookingResponse(**booking_detail(booking))


@router.put("/{booking_id}/approve", response_model=BookingResponse)
def approve_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    clock: Callable[[], date] = Depends(get_clock),
    actor: Actor = Depends(get_current_actor)
):
    """审批通过"""
    try:
        booking = _service(db, clock).approve_booking(booking_id, actor)
    except BookingError as e:
        raise http_error(e)
    return BookingResponse(**booking_detail(booking))


@router.put("/{booking_id}/deny", response_model=BookingResponse)
def deny_booking(
    booking_id: int,
    data: Optional[BookingDeny] = None,
    db: Session = Depends(get_db),
    clock: Callable[[], date] = Depends(get_clock),
    actor: Actor = Depends(get_current_actor)
):
    """拒绝预订"""
    try:
        booking = _service(db, clock).deny_booking(
            booking_id, actor, reason=data.reason if data else None
        )
    except BookingError as e:
        raise http_error(e)
    return BookingResponse(**booking_detail(booking))


@router.put("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    booking_id: int,
    data: Optional[BookingCancel] = None,
    db: Session = Depends(get_db),
    clock: Callable[[], date] = Depends(get_clock),
    actor: Actor = Depends(get_current_actor)
):
    """取消预订"""
    try:
        booking = _service(db, clock).cancel_booking(
            booking_id, actor, reason=data.reason if data else None
        )
    except BookingError as e:
        raise http_error(e)
    return BookingResponse(**booking_detail(booking))


@router.put("/{booking_id}/complete", response_model=BookingResponse)
def complete_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    clock: Callable[[], date] = Depends(get_clock),
    actor: Actor = Depends(get_current_actor)
):
    """完成预订"""
    try:
        booking = _service(db, clock).complete_booking(booking_id, actor)
    except BookingError as e:
        raise http_error(e)
    return BookingResponse(**booking_detail(booking))


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    clock: Callable[[], date] = Depends(get_clock),
    actor: Actor = Depends(get_current_actor)
):
    """删除预订（仅管理员）"""
    try:
        _service(db, clock).delete_booking(booking_id, actor)
    except BookingError as e:
        raise http_error(e)
