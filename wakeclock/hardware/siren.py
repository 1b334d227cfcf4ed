"""
Synthesised siren used as the wake-up alert.

A square-wave oscillator sweeps between a low and a high frequency and back
once per sweep period, and its output is multiplied by a gain envelope that
pulses between near silence and the configured volume. Samples are rendered
block by block with numpy and streamed to the default output device through a
sounddevice callback, so no audio file or external player is needed.
"""
import logging

import numpy as np

from ..config import (
    ALERT_SAMPLE_RATE,
    ALERT_VOLUME,
    SIREN_LOW_HZ,
    SIREN_HIGH_HZ,
    SIREN_SWEEP_SECONDS,
    SIREN_PULSE_HZ,
)

logger = logging.getLogger(__name__)

GAIN_FLOOR = 0.02 # "near silent" trough of the pulse envelope
TWO_PI = 2.0 * np.pi


class AudioDeviceUnavailable(Exception):
    """The output device (or the audio backend itself) could not be opened or resumed."""
    pass


def siren_frequency(t: np.ndarray, low_hz: float, high_hz: float, sweep_seconds: float) -> np.ndarray:
    """Instantaneous oscillator frequency: linear low -> high -> low over each sweep period."""
    position = np.mod(t, sweep_seconds) / sweep_seconds
    triangle = 1.0 - np.abs(2.0 * position - 1.0) # 0 at cycle start, 1 at mid-cycle
    return low_hz + (high_hz - low_hz) * triangle


def pulse_gain(t: np.ndarray, volume: float, pulse_hz: float, floor: float = GAIN_FLOOR) -> np.ndarray:
    """Gain envelope pulsing between floor and volume, starting at the floor."""
    wave = 0.5 - 0.5 * np.cos(TWO_PI * pulse_hz * t)
    return floor + (volume - floor) * wave


class SirenSignal:
    """
    Block renderer for the siren.

    Keeps a running frame counter and phase accumulator, so consecutive calls
    to render() produce one continuous waveform regardless of block size.
    """
    def __init__(self, sample_rate: int = ALERT_SAMPLE_RATE, volume: float = ALERT_VOLUME,
                 low_hz: float = SIREN_LOW_HZ, high_hz: float = SIREN_HIGH_HZ,
                 sweep_seconds: float = SIREN_SWEEP_SECONDS, pulse_hz: float = SIREN_PULSE_HZ):
        self.sample_rate = sample_rate
        self.volume = volume
        self.low_hz = low_hz
        self.high_hz = high_hz
        self.sweep_seconds = sweep_seconds
        self.pulse_hz = pulse_hz
        self._frame = 0
        self._phase = 0.0

    @property
    def frames_rendered(self) -> int:
        return self._frame

    def render(self, frames: int) -> np.ndarray:
        t = (self._frame + np.arange(frames)) / self.sample_rate
        freq = siren_frequency(t, self.low_hz, self.high_hz, self.sweep_seconds)
        phases = self._phase + np.cumsum(TWO_PI * freq / self.sample_rate)
        if frames > 0:
            self._phase = float(phases[-1] % TWO_PI)
        self._frame += frames

        square = np.where(np.sin(phases) >= 0.0, 1.0, -1.0)
        return (square * pulse_gain(t, self.volume, self.pulse_hz)).astype(np.float32)


def _open_output_stream(sample_rate: int, callback):
    """Opens a mono float32 output stream on the default device (not started)."""
    try:
        # Imported here: sounddevice raises OSError at import time when the PortAudio library is missing.
        import sounddevice as sd
    except (ImportError, OSError) as e:
        raise AudioDeviceUnavailable(f"audio backend unavailable ({e})") from e

    try:
        return sd.OutputStream(samplerate=sample_rate, channels=1, dtype="float32", callback=callback)
    except (sd.PortAudioError, ValueError) as e:
        raise AudioDeviceUnavailable(f"could not open output device ({e})") from e


class AudioSession:
    """One open output stream fed by one SirenSignal."""
    def __init__(self, signal: SirenSignal):
        self.signal = signal
        self.stream = _open_output_stream(signal.sample_rate, self._callback)

    def _callback(self, outdata, frames, time_info, status):
        # Runs on the audio backend's thread.
        if status:
            logger.debug(f"AudioSession: stream status {status}")
        outdata[:] = self.signal.render(frames).reshape(-1, 1)

    def resume(self):
        """Starts the stream if the device is not already running (e.g. after it went idle)."""
        if self.stream.active:
            return
        try:
            self.stream.start()
        except Exception as e:
            raise AudioDeviceUnavailable(f"could not resume output device ({e})") from e

    def close(self):
        try:
            self.stream.stop()
        except Exception as e:
            logger.debug(f"AudioSession: stream stop raised {e}; continuing teardown.")
        try:
            self.stream.close()
        except Exception as e:
            logger.debug(f"AudioSession: stream close raised {e}.")


class AlertSignalGenerator:
    """
    Owns the single audio session used while the alarm rings.

    start() and stop() are fire-and-forget: device problems are logged and
    never raised, so a missing speaker never keeps the alarm from ringing.
    """
    def __init__(self, sample_rate: int = ALERT_SAMPLE_RATE, volume: float = ALERT_VOLUME,
                 low_hz: float = SIREN_LOW_HZ, high_hz: float = SIREN_HIGH_HZ,
                 sweep_seconds: float = SIREN_SWEEP_SECONDS, pulse_hz: float = SIREN_PULSE_HZ):
        self.sample_rate = sample_rate
        self.volume = volume
        self.low_hz = low_hz
        self.high_hz = high_hz
        self.sweep_seconds = sweep_seconds
        self.pulse_hz = pulse_hz
        self._session = None

    @property
    def is_sounding(self) -> bool:
        return self._session is not None

    def start(self) -> bool:
        """Starts the siren. Returns True if sound is playing, False if the device was unavailable."""
        if self._session is not None:
            logger.warning("AlertSignalGenerator: start() called while already sounding. Stopping the previous session first.")
            self.stop()

        signal = SirenSignal(self.sample_rate, self.volume, self.low_hz, self.high_hz,
                             self.sweep_seconds, self.pulse_hz)
        try:
            session = AudioSession(signal)
        except AudioDeviceUnavailable as e:
            logger.error(f"AlertSignalGenerator: {e}. Alarm will ring without sound.", exc_info=True)
            return False

        try:
            session.resume()
        except AudioDeviceUnavailable as e:
            logger.error(f"AlertSignalGenerator: {e}. Alarm will ring without sound.", exc_info=True)
            session.close()
            return False

        self._session = session
        logger.info(f"AlertSignalGenerator: Siren started ({self.low_hz:.0f}-{self.high_hz:.0f} Hz, volume {self.volume}).")
        return True

    def stop(self):
        session, self._session = self._session, None
        if session is None:
            logger.debug("AlertSignalGenerator: No active siren to stop.")
            return
        session.close()
        logger.info(f"AlertSignalGenerator: Siren stopped after {session.signal.frames_rendered} frames.")
