"""Runs every BOOKING_EXPIRY_INTERVAL_MINUTES: warn about, then expire, unpaid accepted bookings."""
from datetime import datetime

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.util import undefined

from app.core.config import BOOKING_EXPIRY_INTERVAL_MINUTES
from app.core.logging_config import get_logger
from app.db.session import SessionLocal
from app.services.booking_expiry import run_booking_expiry_check

logger = get_logger("expiry")

BOOKING_EXPIRY_JOB_ID = "booking_expiry_check"


def run_booking_expiry_job(session_factory=SessionLocal) -> dict | None:
    db = session_factory()
    try:
        return run_booking_expiry_check(db)
    except Exception as e:
        logger.exception(f"Booking expiry tick failed: {e}")
        return None
    finally:
        db.close()


class BookingExpiryScheduler:
    """Owns the background scheduler for expiry checks; started and stopped by the app lifespan."""

    def __init__(self, interval_minutes: int = BOOKING_EXPIRY_INTERVAL_MINUTES, session_factory=SessionLocal, scheduler=None):
        self.interval_minutes = interval_minutes
        self.session_factory = session_factory
        self._scheduler = scheduler or BackgroundScheduler()

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def run_once(self) -> dict | None:
        return run_booking_expiry_job(self.session_factory)

    def start(self, run_immediately: bool = True):
        if self.running:
            return

        # One instance at a time: a slow tick delays the next instead of overlapping it.
        # The first tick runs on the scheduler's worker thread, never the caller's.
        self._scheduler.add_job(
            self.run_once,
            "interval",
            minutes=self.interval_minutes,
            next_run_time=datetime.now() if run_immediately else undefined,
            id=BOOKING_EXPIRY_JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self._scheduler.start()

        logger.info(f"Booking expiry scheduler started (runs every {self.interval_minutes} minutes)")

    def stop(self):
        if not self.running:
            return

        self._scheduler.shutdown(wait=False)
        logger.info("Booking expiry scheduler stopped")
