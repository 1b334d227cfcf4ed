import logging
import time

from gpiozero import Button

from ..config import BUTTON_STOP_ALARM_PIN, BUTTON_SNOOZE_PIN, SNOOZE_MINUTES

logger = logging.getLogger(__name__)

DEBOUNCE_TIME = 0.3


class ButtonManager:
    """Physical stop/snooze push buttons forwarding presses to the alarm scheduler."""
    def __init__(self, alarm_scheduler, stop_pin: int = BUTTON_STOP_ALARM_PIN,
                 snooze_pin: int = BUTTON_SNOOZE_PIN, snooze_minutes: int = SNOOZE_MINUTES):
        self.alarm_scheduler = alarm_scheduler
        self.stop_pin = stop_pin
        self.snooze_pin = snooze_pin
        self.snooze_minutes = snooze_minutes
        self._buttons = {} # name -> gpiozero.Button
        logger.info("ButtonManager initialized.")

    def handle_stop_button(self):
        time.sleep(0.05)
        logger.info("Button Pressed: Stop Alarm detected.")
        self.alarm_scheduler.stop()

    def handle_snooze_button(self):
        time.sleep(0.05)
        logger.info("Button Pressed: Snooze detected.")
        if self.alarm_scheduler.snooze(self.snooze_minutes) is None:
            logger.info("Snooze button ignored: the alarm is not ringing.")

    def _setup_button(self, name: str, pin: int, handler):
        if pin <= 0:
            logger.info(f"ButtonManager: {name} button pin not configured (is {pin}). Skipping setup.")
            return
        try:
            button = Button(pin, pull_up=False, bounce_time=DEBOUNCE_TIME)
        except Exception as e:
            logger.error(f"ButtonManager: Error setting up {name} button on pin {pin}: {e}", exc_info=True)
            return
        button.when_pressed = handler
        self._buttons[name] = button
        logger.info(f"ButtonManager: Setup {name} button on pin {pin}.")

    def setup_gpio(self):
        self._setup_button("stop", self.stop_pin, self.handle_stop_button)
        self._setup_button("snooze", self.snooze_pin, self.handle_snooze_button)

    @property
    def configured_buttons(self) -> list:
        return sorted(self._buttons)

    def cleanup_gpio(self):
        logger.info("ButtonManager: Cleaning up buttons...")
        for name, button in self._buttons.items():
            try:
                button.close()
                logger.info(f"Closed {name} button.")
            except Exception as e:
                logger.error(f"Error closing {name} button: {e}", exc_info=True)
        self._buttons.clear()
        logger.info("ButtonManager: Button cleanup finished.")
