"""
床位可用性路由
"""
from datetime import date
from typing import Callable, List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from guesthouse.database import get_db
from guesthouse.models.schemas import BedResponse, BedAvailability, SweepResult
from guesthouse.routers.deps import http_error, get_clock
from guesthouse.security.auth import require_admin
from guesthouse.services.availability import AvailabilityProjector
from guesthouse.services.errors import BookingError
from guesthouse_core.security.actor import Actor

router = APIRouter(prefix="/beds", tags=["床位可用性"])


@router.get("/available", response_model=List[BedResponse])
def get_available_beds(
    room_id: int,
    check_in_date: date,
    check_out_date: date,
    db: Session = Depends(get_db),
    clock: Callable[[], date] = Depends(get_clock)
):
    """房间内指定日期可预订的床位（公开）"""
    try:
        return AvailabilityProjector(db, clock=clock).get_available_beds(
            room_id, check_in_date, check_out_date
        )
    except BookingError as e:
        raise http_error(e)


@router.get("/{bed_id}/availability", response_model=BedAvailability)
def get_bed_availability(
    bed_id: int,
    db: Session = Depends(get_db),
    clock: Callable[[], date] = Depends(get_clock)
):
    """床位实时可用性"""
    try:
        return AvailabilityProjector(db, clock=clock).get_bed_availability(bed_id)
    except BookingError as e:
        raise http_error(e)


@router.post("/reconcile", response_model=SweepResult)
def run_availability_sweep(
    db: Session = Depends(get_db),
    clock: Callable[[], date] = Depends(get_clock),
    actor: Actor = Depends(require_admin)
):
    """立即巡检全部床位（仅管理员）"""
    return AvailabilityProjector(db, clock=clock).sweep(actor_label=actor.label)
