import os
from dotenv import load_dotenv
import logging

logger = logging.getLogger(__name__)

# Load environment variables from a .env file if it exists
dotenv_path = os.path.join(os.path.dirname(__file__), '..', '.env') # .env in the project root
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path)
    logger.info(f"Loaded environment variables from {dotenv_path}")
else:
    # Fall back to a .env in the working directory (e.g. when running tests from elsewhere)
    if os.path.exists(".env"):
        load_dotenv()
        logger.info("Loaded environment variables from local .env")
    else:
        logger.info("No .env file found. Relying on system environment variables.")

class ConfigError(Exception):
    """Custom exception for configuration errors."""
    pass

# --- Application Logging Configuration ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
if LOG_LEVEL not in VALID_LOG_LEVELS:
    logger.warning(f"Invalid LOG_LEVEL '{LOG_LEVEL}' specified in environment. Defaulting to INFO.")
    LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# --- Alarm Configuration ---
# Initial alarm time shown before the user sets one (HH:MM, validated by the scheduler)
ALARM_DEFAULT_TIME = os.getenv("ALARM_DEFAULT_TIME", "07:00")
SNOOZE_MINUTES = int(os.getenv("SNOOZE_MINUTES", 5))
if SNOOZE_MINUTES <= 0:
    raise ConfigError(f"SNOOZE_MINUTES must be positive, got {SNOOZE_MINUTES}.")

# Clock sampling period. Must stay well below one minute or matches can be missed.
TICK_INTERVAL_SECONDS = int(os.getenv("TICK_INTERVAL_SECONDS", 1))
if not 0 < TICK_INTERVAL_SECONDS < 60:
    raise ConfigError(f"TICK_INTERVAL_SECONDS must be between 1 and 59, got {TICK_INTERVAL_SECONDS}.")

# --- Alert Tone Configuration ---
ALERT_SAMPLE_RATE = int(os.getenv("ALERT_SAMPLE_RATE", 44100))
ALERT_VOLUME = float(os.getenv("ALERT_VOLUME", 0.5))
if not 0.0 < ALERT_VOLUME <= 1.0:
    raise ConfigError(f"ALERT_VOLUME must be in (0, 1], got {ALERT_VOLUME}.")

SIREN_LOW_HZ = float(os.getenv("SIREN_LOW_HZ", 600))
SIREN_HIGH_HZ = float(os.getenv("SIREN_HIGH_HZ", 900))
if not 0 < SIREN_LOW_HZ < SIREN_HIGH_HZ:
    raise ConfigError(f"Siren band must satisfy 0 < low < high, got {SIREN_LOW_HZ}-{SIREN_HIGH_HZ} Hz.")
SIREN_SWEEP_SECONDS = float(os.getenv("SIREN_SWEEP_SECONDS", 1.0)) # one low -> high -> low cycle
SIREN_PULSE_HZ = float(os.getenv("SIREN_PULSE_HZ", 2.0))

# --- Web UI Configuration ---
WEB_UI_HOST = os.getenv("WEB_UI_HOST", "0.0.0.0")
WEB_UI_PORT = int(os.getenv("WEB_UI_PORT", 8000))

# --- Hardware Configuration (Raspberry Pi - GPIO pins) ---
# BCM numbering. A pin of 0 disables that button.
BUTTON_STOP_ALARM_PIN = int(os.getenv("BUTTON_STOP_ALARM_PIN", 17))
BUTTON_SNOOZE_PIN = int(os.getenv("BUTTON_SNOOZE_PIN", 0))


if __name__ == '__main__':
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    logger.info("--- Configuration Settings (as per config.py) ---")
    logger.info(f"Log Level: {LOG_LEVEL}")
    logger.info(f"Default Alarm Time: {ALARM_DEFAULT_TIME}")
    logger.info(f"Snooze Minutes: {SNOOZE_MINUTES}")
    logger.info(f"Tick Interval: {TICK_INTERVAL_SECONDS} seconds")
    logger.info(f"Alert Tone: {ALERT_SAMPLE_RATE} Hz sample rate, volume {ALERT_VOLUME}")
    logger.info(f"Siren: {SIREN_LOW_HZ}-{SIREN_HIGH_HZ} Hz every {SIREN_SWEEP_SECONDS}s, pulsing at {SIREN_PULSE_HZ} Hz")
    logger.info(f"Web UI: {WEB_UI_HOST}:{WEB_UI_PORT}")
    logger.info(f"Button Pins (Stop Alarm, Snooze): {BUTTON_STOP_ALARM_PIN}, {BUTTON_SNOOZE_PIN}")
    logger.info("-------------------------------------------------")
