import unittest
import logging
from unittest.mock import MagicMock, patch

import numpy as np

from wakeclock.hardware.siren import (
    AlertSignalGenerator,
    AudioDeviceUnavailable,
    AudioSession,
    GAIN_FLOOR,
    SirenSignal,
    pulse_gain,
    siren_frequency,
)


class TestSirenSignal(unittest.TestCase):
    """Tests for the siren waveform maths."""

    def test_sweep_hits_band_edges(self):
        t = np.array([0.0, 0.25, 0.5, 0.75, 1.0])
        freq = siren_frequency(t, 600.0, 900.0, 1.0)
        np.testing.assert_allclose(freq, [600.0, 750.0, 900.0, 750.0, 600.0])

    def test_sweep_stays_within_band(self):
        t = np.linspace(0, 10, 10001)
        freq = siren_frequency(t, 600.0, 900.0, 1.0)
        self.assertGreaterEqual(freq.min(), 600.0)
        self.assertLessEqual(freq.max(), 900.0)

    def test_gain_pulses_between_floor_and_volume(self):
        t = np.array([0.0, 0.25, 0.5])
        gain = pulse_gain(t, volume=0.5, pulse_hz=2.0)
        np.testing.assert_allclose(gain, [GAIN_FLOOR, 0.5, GAIN_FLOOR], atol=1e-9)

    def test_render_is_bounded_float32(self):
        signal = SirenSignal(sample_rate=8000, volume=0.4)
        block = signal.render(8000)
        self.assertEqual(block.dtype, np.float32)
        self.assertEqual(block.shape, (8000,))
        self.assertLessEqual(float(np.max(np.abs(block))), 0.4 + 1e-6)
        # Pulsing envelope: the loudest part is much louder than the quietest
        self.assertGreater(float(np.max(np.abs(block))), 10 * GAIN_FLOOR)

    def test_render_blocks_are_continuous(self):
        whole = SirenSignal(sample_rate=8000).render(1024)
        split = SirenSignal(sample_rate=8000)
        parts = np.concatenate([split.render(300), split.render(0), split.render(724)])
        np.testing.assert_allclose(parts, whole, atol=1e-6)
        self.assertEqual(split.frames_rendered, 1024)


class TestAudioSession(unittest.TestCase):

    def setUp(self):
        logging.disable(logging.CRITICAL)

    def tearDown(self):
        logging.disable(logging.NOTSET)

    @patch('wakeclock.hardware.siren._open_output_stream')
    def test_callback_fills_output_buffer(self, mock_open_stream):
        session = AudioSession(SirenSignal(sample_rate=8000))
        outdata = np.zeros((256, 1), dtype=np.float32)
        session._callback(outdata, 256, None, None)
        self.assertTrue(np.any(outdata != 0.0))
        mock_open_stream.assert_called_once_with(8000, session._callback)

    @patch('wakeclock.hardware.siren._open_output_stream')
    def test_resume_skips_already_active_stream(self, mock_open_stream):
        stream = MagicMock()
        stream.active = True
        mock_open_stream.return_value = stream
        AudioSession(SirenSignal()).resume()
        stream.start.assert_not_called()

    @patch('wakeclock.hardware.siren._open_output_stream')
    def test_close_tolerates_stopped_device(self, mock_open_stream):
        stream = MagicMock()
        stream.stop.side_effect = RuntimeError("stream already stopped")
        mock_open_stream.return_value = stream
        AudioSession(SirenSignal()).close() # Must not raise
        stream.close.assert_called_once()


class TestAlertSignalGenerator(unittest.TestCase):
    """Tests for the siren session lifecycle with a mocked output stream."""

    def setUp(self):
        logging.disable(logging.CRITICAL)
        patcher = patch('wakeclock.hardware.siren._open_output_stream')
        self.mock_open_stream = patcher.start()
        self.addCleanup(patcher.stop)
        self.streams = []

        def make_stream(sample_rate, callback):
            stream = MagicMock()
            stream.active = False
            self.streams.append(stream)
            return stream
        self.mock_open_stream.side_effect = make_stream
        self.generator = AlertSignalGenerator(sample_rate=8000)

    def tearDown(self):
        logging.disable(logging.NOTSET)

    def test_start_then_stop_leaves_no_session(self):
        self.assertTrue(self.generator.start())
        self.assertTrue(self.generator.is_sounding)
        self.streams[0].start.assert_called_once() # resumed before sounding

        self.generator.stop()
        self.assertFalse(self.generator.is_sounding)
        self.streams[0].stop.assert_called_once()
        self.streams[0].close.assert_called_once()

    def test_stop_without_session_is_noop(self):
        self.generator.stop()
        self.generator.stop()
        self.assertFalse(self.generator.is_sounding)
        self.mock_open_stream.assert_not_called()

    def test_double_start_tears_down_previous_session(self):
        self.generator.start()
        self.generator.start()
        self.assertEqual(len(self.streams), 2)
        self.streams[0].close.assert_called_once()
        self.streams[1].close.assert_not_called()
        self.assertTrue(self.generator.is_sounding)

    def test_unavailable_device_fails_soft(self):
        self.mock_open_stream.side_effect = AudioDeviceUnavailable("audio backend unavailable")
        self.assertFalse(self.generator.start())
        self.assertFalse(self.generator.is_sounding)
        self.generator.stop() # still safe

    def test_resume_failure_closes_stream(self):
        self.assertTrue(self.generator.start())
        self.generator.stop()

        stream = MagicMock()
        stream.active = False
        stream.start.side_effect = RuntimeError("device suspended")
        self.mock_open_stream.side_effect = None
        self.mock_open_stream.return_value = stream

        self.assertFalse(self.generator.start())
        self.assertFalse(self.generator.is_sounding)
        stream.close.assert_called_once()


if __name__ == '__main__':
    unittest.main()
