import datetime
import enum
import logging
import threading

from .timeutil import add_minutes, format_alarm_time, minute_key, parse_alarm_time

logger = logging.getLogger(__name__)

DEFAULT_SNOOZE_MINUTES = 5


class AlarmPhase(enum.Enum):
    IDLE = "idle"
    ARMED = "armed"
    RINGING = "ringing"


class AlarmConfig:
    """The configured alarm time and whether it is armed."""
    def __init__(self, alarm_time: datetime.time, armed: bool = False):
        self.alarm_time = alarm_time # datetime.time, minute resolution
        self.armed = armed


class AlarmScheduler:
    """
    Tick-driven alarm state machine.

    The scheduler is fed a clock sample roughly once per second through tick().
    When the sampled minute equals the configured alarm time it enters the
    ringing phase and starts the alert generator. The minute that fired is kept
    as a fingerprint so later ticks in the same minute do not fire again; the
    fingerprint is dropped as soon as a tick lands on any other minute, which
    lets the alarm recur the next day.

    The generator is only ever asked to start() or stop(); the scheduler never
    touches the audio stream itself.
    """
    def __init__(self, alert_generator, alarm_time="07:00", armed: bool = False):
        """
        Args:
            alert_generator: Object with start() and stop() methods (normally an AlertSignalGenerator).
            alarm_time: Initial alarm time as "HH:MM" or datetime.time.
            armed (bool, optional): Whether the alarm starts armed. Defaults to False.
        """
        self._generator = alert_generator
        self._config = AlarmConfig(parse_alarm_time(alarm_time), armed)
        self._ringing = False
        self._fingerprint = None # (hour, minute) of the last firing, or None
        # Ticks come from the clock thread, intents from API workers and button callbacks.
        self._lock = threading.RLock()

    @property
    def phase(self) -> AlarmPhase:
        with self._lock:
            if self._ringing:
                return AlarmPhase.RINGING
            if self._config.armed:
                return AlarmPhase.ARMED
            return AlarmPhase.IDLE

    @property
    def alarm_time(self) -> datetime.time:
        return self._config.alarm_time

    @property
    def armed(self) -> bool:
        return self._config.armed

    @property
    def is_ringing(self) -> bool:
        return self._ringing

    @property
    def trigger_fingerprint(self):
        return self._fingerprint

    def snapshot(self) -> dict:
        """Current state for display."""
        with self._lock:
            return {
                "phase": self.phase.value,
                "alarm_time": format_alarm_time(self._config.alarm_time),
                "armed": self._config.armed,
                "ringing": self._ringing,
            }

    def arm(self, alarm_time) -> datetime.time:
        """
        Sets the alarm time and arms the alarm.

        Raises:
            InvalidTimeFormat: If alarm_time is not a valid hour/minute pair. The
                               previous configuration is kept.
        """
        new_time = parse_alarm_time(alarm_time)
        with self._lock:
            self._config.alarm_time = new_time
            self._config.armed = True
            if self._ringing:
                logger.info(f"Alarm re-armed for {format_alarm_time(new_time)} while ringing; still ringing.")
            else:
                logger.info(f"Alarm armed for {format_alarm_time(new_time)}.")
        return new_time

    def disarm(self):
        with self._lock:
            if not self._config.armed:
                logger.debug("Disarm requested, but the alarm is not armed.")
                return
            self._config.armed = False
            if self._ringing:
                # Ringing continues until stop() or snooze().
                logger.info("Alarm disarmed while ringing; use stop to silence it.")
            else:
                logger.info("Alarm disarmed.")

    def set_alarm_time(self, alarm_time) -> datetime.time:
        """Changes the alarm time without arming or disarming it."""
        new_time = parse_alarm_time(alarm_time)
        with self._lock:
            self._config.alarm_time = new_time
            logger.info(f"Alarm time set to {format_alarm_time(new_time)} ({'armed' if self._config.armed else 'disarmed'}).")
        return new_time

    def toggle_armed(self) -> bool:
        with self._lock:
            if self._config.armed:
                self.disarm()
            else:
                self._config.armed = True
                logger.info(f"Alarm armed for {format_alarm_time(self._config.alarm_time)}.")
            return self._config.armed

    def tick(self, now) -> bool:
        """
        Processes one clock sample. Returns True if this tick started the alarm.

        Only acts while armed and not ringing. Safe to call repeatedly with the same instant.
        """
        with self._lock:
            if self.phase is not AlarmPhase.ARMED:
                return False

            now_key = minute_key(now)
            alarm_key = minute_key(self._config.alarm_time)
            if now_key != alarm_key:
                if self._fingerprint is not None:
                    logger.debug(f"Clock left alarm minute {self._fingerprint}; clearing trigger fingerprint.")
                    self._fingerprint = None
                return False
            if now_key == self._fingerprint:
                return False # Already fired this minute

            self._ringing = True
            self._fingerprint = now_key
            logger.info(f"--- ALARM RINGING: {format_alarm_time(self._config.alarm_time)} ---")
            self._generator.start()
            return True

    def stop(self):
        """Silences the alarm and disarms it. Safe to call in any phase."""
        with self._lock:
            previous_phase = self.phase
            self._ringing = False
            self._config.armed = False
            self._generator.stop() # no-op when nothing is sounding
            if previous_phase is AlarmPhase.RINGING:
                logger.info("Alarm stopped and disarmed.")
            elif previous_phase is AlarmPhase.ARMED:
                logger.info("Alarm disarmed by stop request.")
            else:
                logger.debug("Stop requested, but the alarm is already idle.")

    def snooze(self, delta_minutes: int = DEFAULT_SNOOZE_MINUTES) -> datetime.time | None:
        """
        Silences a ringing alarm and re-arms it delta_minutes after the previous alarm time.

        Returns:
            datetime.time | None: The new alarm time, or None if the alarm was not ringing.
        """
        with self._lock:
            if not self._ringing:
                logger.warning("Cannot snooze: the alarm is not ringing.")
                return None
            new_time = add_minutes(self._config.alarm_time, delta_minutes)
            self._config.alarm_time = new_time
            self._config.armed = True
            self._ringing = False
            self._generator.stop()
            logger.info(f"Alarm snoozed for {delta_minutes} minutes until {format_alarm_time(new_time)}.")
            return new_time
