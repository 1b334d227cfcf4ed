import logging
import sys

import uvicorn

from .alarm.clock import ClockTicker
from .alarm.scheduler import AlarmScheduler
from .api import create_app
from .hardware.buttons import ButtonManager
from .hardware.siren import AlertSignalGenerator
from .config import (
    LOG_LEVEL,
    LOG_FORMAT,
    LOG_DATE_FORMAT,
    ALARM_DEFAULT_TIME,
    SNOOZE_MINUTES,
    TICK_INTERVAL_SECONDS,
    WEB_UI_HOST,
    WEB_UI_PORT,
)

logger = logging.getLogger(__name__)


def setup_logging():
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


def main():
    setup_logging()
    logger.info("Starting wakeclock...")

    alarm_scheduler = AlarmScheduler(AlertSignalGenerator(), alarm_time=ALARM_DEFAULT_TIME)
    ticker = ClockTicker(alarm_scheduler, interval_seconds=TICK_INTERVAL_SECONDS)
    button_manager = ButtonManager(alarm_scheduler)
    app = create_app(alarm_scheduler, snooze_minutes=SNOOZE_MINUTES)

    button_manager.setup_gpio()
    ticker.start()

    try:
        logger.info(f"Serving alarm API on {WEB_UI_HOST}:{WEB_UI_PORT}. Press Ctrl+C to exit.")
        uvicorn.run(app, host=WEB_UI_HOST, port=WEB_UI_PORT, log_level=LOG_LEVEL.lower())
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received. Shutting down...")
    finally:
        logger.info("Initiating shutdown sequence.")
        ticker.stop()
        button_manager.cleanup_gpio()
        alarm_scheduler.stop() # Silences any ringing alarm
        logger.info("wakeclock shut down gracefully.")


if __name__ == "__main__":
    main()
