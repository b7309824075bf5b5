import unittest

import numpy as np

from pitch_tuner.audio.pitch_detector import PitchDetector
from pitch_tuner.errors import ConfigurationError
from pitch_tuner.note_types import NO_PITCH_FREQUENCY

from synth import sine


class TestNoiseGate(unittest.TestCase):
    def setUp(self):
        self.detector = PitchDetector()

    def test_threshold_bounds(self):
        self.assertAlmostEqual(self.detector.gate_threshold(1.0), 0.0001)
        self.assertAlmostEqual(self.detector.gate_threshold(0.0), 0.01)
        self.assertAlmostEqual(self.detector.gate_threshold(0.5), 0.00505)

    def test_threshold_never_rises_with_sensitivity(self):
        thresholds = [self.detector.gate_threshold(s) for s in np.linspace(0.01, 1.0, 100)]
        for lower, higher in zip(thresholds, thresholds[1:]):
            self.assertLessEqual(higher, lower)

    def test_silence_is_never_pitched(self):
        silence = np.zeros(2048)
        for sensitivity in (0.01, 0.5, 1.0):
            result = self.detector.detect(silence, 44100, sensitivity)
            self.assertFalse(result.has_pitch)
            self.assertEqual(result.frequency, NO_PITCH_FREQUENCY)
            self.assertEqual(result.clarity, 0.0)
            self.assertEqual(result.volume, 0.0)

    def test_quiet_signal_depends_on_sensitivity(self):
        quiet = sine(440, amplitude=0.005)  # rms ~0.0035
        self.assertFalse(self.detector.detect(quiet, 44100, 0.5).has_pitch)

        result = self.detector.detect(quiet, 44100, 1.0)
        self.assertTrue(result.has_pitch)
        self.assertAlmostEqual(result.frequency, 440, delta=4.4)

    def test_gated_result_reports_volume(self):
        quiet = sine(440, amplitude=0.005)
        result = self.detector.detect(quiet, 44100, 0.5)
        self.assertAlmostEqual(result.volume, 0.005 / np.sqrt(2), delta=1e-4)

    def test_invalid_gate_bounds(self):
        with self.assertRaises(ConfigurationError):
            PitchDetector(min_floor=0.0)
        with self.assertRaises(ConfigurationError):
            PitchDetector(min_floor=0.1, max_ceiling=0.01)
        with self.assertRaises(ConfigurationError):
            PitchDetector(trim_threshold=0)


class TestPeriodEstimation(unittest.TestCase):
    def setUp(self):
        self.detector = PitchDetector()

    def test_sine_a4(self):
        result = self.detector.detect(sine(440), 44100, 0.5)
        self.assertTrue(result.has_pitch)
        self.assertAlmostEqual(result.frequency, 440, delta=4.4)
        self.assertGreaterEqual(result.clarity, 0.9)

    def test_sine_e4_loud(self):
        result = self.detector.detect(sine(329.63, amplitude=0.8), 44100, 0.5)
        self.assertAlmostEqual(result.frequency, 329.63, delta=3.3)
        self.assertGreaterEqual(result.clarity, 0.9)

    def test_sine_at_48k(self):
        result = self.detector.detect(sine(440, sample_rate=48000), 48000, 0.5)
        self.assertAlmostEqual(result.frequency, 440, delta=4.4)
        self.assertGreaterEqual(result.clarity, 0.9)

    def test_low_strings(self):
        for frequency in (82.41, 110.0, 196.0):
            result = self.detector.detect(sine(frequency), 44100, 0.5)
            self.assertTrue(result.has_pitch, frequency)
            self.assertAlmostEqual(result.frequency, frequency, delta=frequency * 0.01)

    def test_refinement_gives_fractional_period(self):
        result = self.detector.detect(sine(440), 44100, 0.5)
        period = 44100 / result.frequency
        self.assertNotAlmostEqual(period, round(period), places=3)

    def test_constant_signal_has_no_trough(self):
        result = self.detector.detect(np.full(2048, 0.5), 44100, 0.5)
        self.assertFalse(result.has_pitch)
        self.assertAlmostEqual(result.volume, 0.5)

    def test_trimmed_region_too_short(self):
        frame = np.full(2048, 0.5)
        frame[1023] = 0.0
        frame[1025] = 0.0
        result = self.detector.detect(frame, 44100, 0.5)
        self.assertFalse(result.has_pitch)
        self.assertEqual(result.clarity, 0.0)

    def test_tiny_frames(self):
        for frame in (np.array([]), np.array([0.5]), np.array([0.5, -0.5]), np.array([0.5, 0.1, -0.5])):
            result = self.detector.detect(frame, 44100, 1.0)
            self.assertFalse(result.has_pitch, frame)

    def test_peak_at_last_lag(self):
        # Trims to [0.1, -0.5, 0.9], correlation [1.07, -0.5, 0.09] peaks at lag 2
        result = self.detector.detect(np.array([0.1, -0.5, 0.9, 0.1]), 44100, 1.0)
        self.assertFalse(result.has_pitch)
        self.assertEqual(result.frequency, NO_PITCH_FREQUENCY)
        self.assertEqual(result.clarity, 0.0)

    def test_noise_clarity_is_bounded(self):
        rng = np.random.default_rng(1234)
        for _ in range(5):
            result = self.detector.detect(rng.uniform(-0.5, 0.5, 2048), 44100, 0.5)
            self.assertGreaterEqual(result.clarity, 0.0)
            self.assertLessEqual(result.clarity, 1.0)
            if result.has_pitch:
                self.assertGreater(result.frequency, 0)

    def test_frame_is_not_modified(self):
        frame = sine(440).astype(np.float32)
        before = frame.copy()
        self.detector.detect(frame, 44100, 0.5)
        np.testing.assert_array_equal(frame, before)

    def test_multichannel_uses_first_channel(self):
        stereo = np.column_stack((sine(440), np.zeros(2048)))
        result = self.detector.detect(stereo, 44100, 0.5)
        self.assertAlmostEqual(result.frequency, 440, delta=4.4)

    def test_same_frame_same_result(self):
        frame = sine(196)
        self.assertEqual(
            self.detector.detect(frame, 44100, 0.5), self.detector.detect(frame, 44100, 0.5)
        )


if __name__ == "__main__":
    unittest.main()
