"""
APScheduler 调度后端 - 实现 guesthouse_core 的 ISchedulerBackend 接口
"""
import logging
from typing import Callable, Dict, List, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from guesthouse_core.scheduler import ISchedulerBackend

logger = logging.getLogger(__name__)


class APSchedulerBackend(ISchedulerBackend):
    """基于 APScheduler 的后台调度"""

    def __init__(self, scheduler: Optional[BackgroundScheduler] = None):
        self._scheduler = scheduler or BackgroundScheduler()

    @property
    def scheduler(self) -> BackgroundScheduler:
        return self._scheduler

    def start(self) -> None:
        if not self._scheduler.running:
            self._scheduler.start()
            logger.info("APScheduler started")

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("APScheduler shut down")

    def add_job(self, job_id: str, func: Callable, trigger: str, **trigger_args) -> None:
        """
        添加定时任务（同一任务不并发执行，错过的执行合并为一次）

        trigger="cron" 时可传 cron_expression（crontab 格式）
        """
        if trigger == "cron" and "cron_expression" in trigger_args:
            trigger = CronTrigger.from_crontab(trigger_args.pop("cron_expression"))
        self._scheduler.add_job(
            func,
            trigger=trigger,
            id=job_id,
            name=job_id,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            **trigger_args,
        )
        logger.info(f"Job added: {job_id}")

    def remove_job(self, job_id: str) -> None:
        try:
            self._scheduler.remove_job(job_id)
            logger.info(f"Job removed: {job_id}")
        except JobLookupError:
            logger.warning(f"Job not found for removal: {job_id}")

    def get_jobs(self) -> List[Dict]:
        return [
            {
                "id": job.id,
                "name": job.name or job.id,
                "trigger": str(job.trigger),
                "next_run_time": job.next_run_time.isoformat()
                if getattr(job, "next_run_time", None) else None,
            }
            for job in self._scheduler.get_jobs()
        ]

    def trigger_job(self, job_id: str) -> None:
        """立即在当前线程执行一次"""
        job = self._scheduler.get_job(job_id)
        if job is None:
            raise KeyError(f"Job not found: {job_id}")
        job.func(*job.args, **job.kwargs)
