"""
可用性巡检任务
定时重算全部床位的 is_available_for_booking（例如离店日期已过的预订释放床位）
"""
import logging
from typing import Callable

from sqlalchemy.orm import Session

from guesthouse.models.schemas import SweepResult
from guesthouse.services.availability import AvailabilityProjector
from guesthouse_core.scheduler import ISchedulerBackend

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "availability_sweep"


def run_availability_sweep(session_factory: Callable[[], Session]) -> SweepResult:
    """使用独立会话执行一次巡检"""
    db = session_factory()
    try:
        result = AvailabilityProjector(db).sweep(actor_label=SWEEP_JOB_ID)
    finally:
        db.close()

    if result.inconsistent_bed_ids:
        logger.error(
            f"Availability sweep found inconsistent beds: {result.inconsistent_bed_ids}"
        )
    logger.info(
        f"Availability sweep finished: checked={result.checked} changed={result.changed}"
    )
    return result


def schedule_availability_sweep(backend: ISchedulerBackend,
                                session_factory: Callable[[], Session],
                                cron_expression: str) -> None:
    """注册定时巡检任务"""
    backend.add_job(
        SWEEP_JOB_ID,
        run_availability_sweep,
        "cron",
        cron_expression=cron_expression,
        args=[session_factory],
    )


__all__ = ["SWEEP_JOB_ID", "run_availability_sweep", "schedule_availability_sweep"]
