"""APScheduler wrapper driving the recurring import job."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from ..config import ScheduleConfig, ScheduleType
from ..errors import ImportAlreadyRunning, ImportPipelineError
from ..logging_conf import configure_logging

# A firing later than this is dropped rather than run on recovery
MISFIRE_GRACE_SECONDS = 1


class ImportScheduler:
    """Manage the APScheduler job that triggers imports."""

    def __init__(self, scheduler: BackgroundScheduler | None = None) -> None:
        self.scheduler = scheduler or BackgroundScheduler()
        self.logger = configure_logging().bind(component="scheduler")
        self.started = False

    @staticmethod
    def job_id(pipeline_name: str) -> str:
        return f"import::{pipeline_name}"

    def start(self) -> None:
        if not self.started:
            self.scheduler.start()
            self.started = True
            self.logger.info("apscheduler_started")

    def shutdown(self, wait: bool = False) -> None:
        if self.started:
            self.scheduler.shutdown(wait=wait)
            self.started = False
            self.logger.info("apscheduler_stopped")

    def schedule_import(
        self,
        pipeline_name: str,
        schedule: ScheduleConfig,
        run: Callable[[], object],
    ) -> str:
        job_id = self.job_id(pipeline_name)
        self.scheduler.add_job(
            self._guarded(pipeline_name, run),
            trigger=self._build_trigger(schedule),
            id=job_id,
            name=f"{pipeline_name} import",
            replace_existing=True,
            coalesce=True,
            max_instances=1,
            misfire_grace_time=MISFIRE_GRACE_SECONDS,
        )
        self.logger.info("job_scheduled", pipeline=pipeline_name, schedule=schedule.model_dump(mode="json"))
        return job_id

    def trigger_now(self, pipeline_name: str) -> bool:
        """Make the import job fire immediately; False when it is not registered."""

        job = self.scheduler.get_job(self.job_id(pipeline_name))
        if job is None:
            return False
        job.modify(next_run_time=datetime.now(job.trigger.timezone))
        self.logger.info("job_triggered", pipeline=pipeline_name)
        return True

    def _guarded(self, pipeline_name: str, run: Callable[[], object]) -> Callable[[], None]:
        logger = self.logger.bind(pipeline=pipeline_name)

        def _job() -> None:
            try:
                run()
            except ImportAlreadyRunning:
                logger.warning("scheduled_import_skipped_running")
            except ImportPipelineError as exc:
                # failure already logged by the orchestrator; next tick retries
                logger.warning("scheduled_import_failed", stage=exc.stage)

        _job.__name__ = f"run_import_{pipeline_name}"
        return _job

    def _build_trigger(self, schedule: ScheduleConfig):
        if schedule.type is ScheduleType.CRON:
            return CronTrigger.from_crontab(str(schedule.value))
        if schedule.type is ScheduleType.INTERVAL:
            if isinstance(schedule.value, (int, float)):
                return IntervalTrigger(seconds=float(schedule.value))
            if isinstance(schedule.value, dict):
                return IntervalTrigger(**schedule.value)
            raise ValueError("Interval schedule requires seconds or kwargs dict")
        raise ValueError(f"Unknown schedule type: {schedule.type}")

    def list_jobs(self) -> list[dict]:
        jobs = []
        for job in self.scheduler.get_jobs():
            next_run = getattr(job, "next_run_time", None)
            if next_run is None and hasattr(job.trigger, "get_next_fire_time"):
                # pending jobs (scheduler not started) have no next_run_time yet
                next_run = job.trigger.get_next_fire_time(None, datetime.now(job.trigger.timezone))
            jobs.append(
                {
                    "id": job.id,
                    "next_run_time": next_run,
                    "trigger": str(job.trigger),
                }
            )
        return jobs


__all__ = ["ImportScheduler", "MISFIRE_GRACE_SECONDS"]
