import logging
from typing import Optional

from fastapi import FastAPI, Form, HTTPException

from .alarm.timeutil import InvalidTimeFormat
from .config import SNOOZE_MINUTES

logger = logging.getLogger(__name__)


def create_app(alarm_scheduler, snooze_minutes: int = SNOOZE_MINUTES) -> FastAPI:
    """
    Builds the HTTP API for the alarm. Every route answers with the scheduler snapshot
    ({"phase", "alarm_time", "armed", "ringing"}) so a display can refresh from any response.
    """
    app = FastAPI(title="wakeclock")

    @app.get("/alarm")
    async def route_get_alarm():
        """Current alarm state."""
        return alarm_scheduler.snapshot()

    @app.post("/alarm")
    def route_arm_alarm(alarm_time: str = Form(...)):
        """Sets the alarm time and arms it."""
        try:
            alarm_scheduler.arm(alarm_time)
        except InvalidTimeFormat as e:
            logger.info(f"API: Rejected alarm time {alarm_time!r}: {e}")
            raise HTTPException(status_code=400, detail="Invalid time format. Use HH:MM.")
        return alarm_scheduler.snapshot()

    @app.post("/alarm/time")
    def route_set_alarm_time(alarm_time: str = Form(...)):
        """Changes the alarm time without arming or disarming."""
        try:
            alarm_scheduler.set_alarm_time(alarm_time)
        except InvalidTimeFormat as e:
            logger.info(f"API: Rejected alarm time {alarm_time!r}: {e}")
            raise HTTPException(status_code=400, detail="Invalid time format. Use HH:MM.")
        return alarm_scheduler.snapshot()

    @app.post("/alarm/toggle")
    def route_toggle_alarm():
        alarm_scheduler.toggle_armed()
        return alarm_scheduler.snapshot()

    @app.post("/alarm/disarm")
    def route_disarm_alarm():
        alarm_scheduler.disarm()
        return alarm_scheduler.snapshot()

    @app.post("/alarm/stop")
    def route_stop_alarm():
        """Silences and disarms the alarm."""
        logger.info("API: Received request to stop the alarm.")
        alarm_scheduler.stop()
        return alarm_scheduler.snapshot()

    @app.post("/alarm/snooze")
    def route_snooze_alarm(minutes: Optional[int] = Form(None)):
        """Snoozes a ringing alarm by `minutes` (defaults to the configured snooze)."""
        delta = minutes if minutes is not None else snooze_minutes
        if delta <= 0:
            raise HTTPException(status_code=400, detail="Snooze minutes must be positive.")
        if alarm_scheduler.snooze(delta) is None:
            raise HTTPException(status_code=409, detail="Alarm is not ringing.")
        return alarm_scheduler.snapshot()

    return app
