import logging
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from app.config import settings
from app.database import open_session
from app.services.verification import VerificationService
from app.services.verification_report import bulk_report, summary_line

logger = logging.getLogger(__name__)


class SchedulerService:
    _instance = None
    _scheduler = None

    # TASK REGISTRY
    # To add a new task, add an entry here plus its settings fields in config.py
    _TASK_REGISTRY = {
        "audit": {
            "func": "run_audit_job",
            "interval_setting": "audit_interval",
            "hour_setting": "audit_hour",
            "description": "Recently Added Audit"
        },
    }

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(SchedulerService, cls).__new__(cls)
            cls._scheduler = BackgroundScheduler()
        return cls._instance

    def start(self):
        """Start the scheduler if not already running."""
        if not self._scheduler.running:
            self._scheduler.start()
            logger.info("Scheduler started.")
            self.reschedule_jobs()

    def stop(self):
        """Shutdown the scheduler."""
        if self._scheduler.running:
            self._scheduler.shutdown()
            logger.info("Scheduler stopped.")

    def reschedule_jobs(self):
        """Configure jobs from the registry and the current settings."""
        self._scheduler.remove_all_jobs()

        for job_id, config in self._TASK_REGISTRY.items():
            interval = getattr(settings, config["interval_setting"])
            hour = getattr(settings, config["hour_setting"])

            if interval == "disabled":
                logger.info(f"{config['description']} is disabled")
                continue

            self._scheduler.add_job(
                getattr(self, config["func"]),
                trigger=self._get_trigger_for_interval(interval, hour=hour),
                id=job_id,
                replace_existing=True
            )
            logger.info(f"Scheduled {config['description']}: {interval} (at {hour}:00)")

    @staticmethod
    def _get_trigger_for_interval(interval: str, hour: int) -> CronTrigger:
        """
        Map simple string settings to CronTriggers.
        """
        if interval == "daily":
            return CronTrigger(hour=hour, minute=0)
        elif interval == "weekly":
            return CronTrigger(day_of_week='mon', hour=hour, minute=0)
        else:
            # Default fallback (Daily)
            return CronTrigger(hour=hour, minute=0)

    # --- JOB WRAPPERS ---
    # Jobs run on the scheduler thread and open their own session

    @staticmethod
    def run_audit_job():
        """Verify media added within the audit window and log the outcome."""
        window = settings.audit_window_hours
        logger.info(f"Running scheduled audit of media added in the last {window}h...")

        try:
            session = open_session()
        except Exception as e:
            logger.error(f"Audit skipped, database unavailable: {e}")
            return None

        try:
            report = bulk_report(VerificationService(session).verify_recent(window))
            if report["issues"]:
                logger.warning(f"Audit complete: {summary_line(report)}")
            else:
                logger.info(f"Audit complete: {summary_line(report)}")
            return report
        except Exception as e:
            logger.error(f"Audit failed: {e}", exc_info=True)
            return None
        finally:
            session.close()


# Singleton accessor
scheduler_service = SchedulerService()
