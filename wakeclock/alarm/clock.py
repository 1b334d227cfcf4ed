import datetime
import logging
from threading import Thread, Event

import schedule

logger = logging.getLogger(__name__)


class ClockTicker:
    """
    Samples the wall clock on a fixed cadence and hands each sample to the alarm scheduler.

    Uses a private schedule.Scheduler so the job does not leak into the module-level
    default scheduler, and runs it on a daemon thread.
    """
    def __init__(self, alarm_scheduler, interval_seconds: int = 1, now_func=datetime.datetime.now, poll_seconds: float = 0.2):
        self.alarm_scheduler = alarm_scheduler
        self.interval_seconds = interval_seconds
        self._now = now_func
        self._poll_seconds = poll_seconds
        self._jobs = schedule.Scheduler()
        self._job = None
        self._scheduler_thread = None
        self._stop_scheduler_event = Event()

    @property
    def is_running(self) -> bool:
        return bool(self._scheduler_thread and self._scheduler_thread.is_alive())

    def tick_once(self) -> bool:
        """Samples the clock once and forwards it. Returns True if the alarm fired."""
        now = self._now()
        try:
            return self.alarm_scheduler.tick(now)
        except Exception as e:
            # A failing tick must not kill the clock thread; the next sample retries.
            logger.error(f"Error processing clock tick at {now}: {e}", exc_info=True)
            return False

    def start(self):
        if self.is_running:
            logger.info("Clock ticker is already running.")
            return

        self._jobs.clear()
        self._job = self._jobs.every(self.interval_seconds).seconds.do(self.tick_once)
        self._stop_scheduler_event.clear()
        self._scheduler_thread = Thread(target=self._run_scheduler_loop, name="clock-ticker", daemon=True)
        self._scheduler_thread.start()
        logger.info(f"Clock ticker started (every {self.interval_seconds}s).")

    def _run_scheduler_loop(self):
        logger.info("Clock ticker thread started.")
        self.tick_once() # Don't wait a full interval for the first sample
        while not self._stop_scheduler_event.is_set():
            self._jobs.run_pending()
            self._stop_scheduler_event.wait(self._poll_seconds)
        logger.info("Clock ticker thread stopped.")

    def stop(self):
        logger.info("Stopping clock ticker...")
        self._stop_scheduler_event.set()
        if self._scheduler_thread and self._scheduler_thread.is_alive():
            self._scheduler_thread.join(timeout=5)
            if self._scheduler_thread.is_alive():
                logger.warning("Clock ticker thread did not stop in time.")
        self._jobs.clear()
        self._job = None
