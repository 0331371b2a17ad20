"""
报表路由（仅管理员）
"""
from datetime import date, timedelta
from typing import Callable, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from guesthouse.database import get_db
from guesthouse.models.entities import BookingStatus
from guesthouse.models.schemas import DashboardStats, BookingSummary, PeriodReport
from guesthouse.routers.deps import http_error, get_clock
from guesthouse.security.auth import require_admin
from guesthouse.services.errors import BookingError
from guesthouse.services.report_service import ReportService
from guesthouse_core.security.actor import Actor

router = APIRouter(prefix="/reports", tags=["统计报表"])


@router.get("/dashboard", response_model=DashboardStats)
def get_dashboard(
    db: Session = Depends(get_db),
    clock: Callable[[], date] = Depends(get_clock),
    actor: Actor = Depends(require_admin)
):
    """获取仪表盘数据"""
    return ReportService(db, clock=clock).get_overall_statistics()


@router.get("/bookings", response_model=BookingSummary)
def get_booking_summary(
    status: Optional[BookingStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    clock: Callable[[], date] = Depends(get_clock),
    actor: Actor = Depends(require_admin)
):
    """预订汇总"""
    try:
        return ReportService(db, clock=clock).get_booking_summary(status, start_date, end_date)
    except BookingError as e:
        raise http_error(e)


@router.get("/period", response_model=PeriodReport)
def get_period_report(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    clock: Callable[[], date] = Depends(get_clock),
    actor: Actor = Depends(require_admin)
):
    """期间报表（默认截至今天的最近 30 天）"""
    end_date = end_date or clock()
    start_date = start_date or end_date - timedelta(days=30)
    try:
        return ReportService(db, clock=clock).get_period_report(start_date, end_date)
    except BookingError as e:
        raise http_error(e)
