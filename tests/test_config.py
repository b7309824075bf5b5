import json
import os
import tempfile
import unittest

from pitch_tuner.audio.frame_loop import FrameLoop
from pitch_tuner.audio.pitch_detector import PitchDetector
from pitch_tuner.audio.sources import ArrayAudioInput
from pitch_tuner.core.config import ConfigManager, TunerSettings
from pitch_tuner.core.factory import ComponentFactory
from pitch_tuner.errors import ConfigurationError


class TestTunerSettings(unittest.TestCase):
    def test_defaults(self):
        settings = TunerSettings()
        self.assertEqual(settings.sensitivity, 0.5)
        self.assertEqual(settings.a4_reference, 440.0)

    def test_range_limits(self):
        TunerSettings(sensitivity=1.0, a4_reference=415.0)
        TunerSettings(sensitivity=0.01, a4_reference=466.0)
        for kwargs in (
            {"sensitivity": 0.0},
            {"sensitivity": -0.1},
            {"sensitivity": 1.01},
            {"sensitivity": float("nan")},
            {"a4_reference": 414.9},
            {"a4_reference": 466.1},
        ):
            with self.assertRaises(ConfigurationError, msg=str(kwargs)):
                TunerSettings(**kwargs)

    def test_updated(self):
        settings = TunerSettings().updated(sensitivity=0.8, a4_reference=None)
        self.assertEqual(settings, TunerSettings(sensitivity=0.8, a4_reference=440.0))


class TestConfigManager(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.temp_dir.cleanup()

    def write_config(self, content):
        path = os.path.join(self.temp_dir.name, "tuner.json")
        with open(path, "w") as f:
            f.write(content)
        return path

    def test_defaults_are_copied(self):
        config = ConfigManager()
        detector = config.get_config("detector")
        detector["sensitivity"] = 0.9
        self.assertEqual(config.get_config("detector")["sensitivity"], 0.5)
        self.assertEqual(ConfigManager.DEFAULT_CONFIGS["detector"]["sensitivity"], 0.5)

    def test_load_file(self):
        path = self.write_config(
            json.dumps({"detector": {"a4_reference": 442.0}, "audio_input": {"frame_size": 4096}})
        )
        config = ConfigManager(path)
        self.assertEqual(config.tuner_settings(), TunerSettings(a4_reference=442.0))
        self.assertEqual(config.get_config("audio_input")["frame_size"], 4096)
        self.assertEqual(config.get_config("audio_input")["sample_rate"], 44100)

    def test_bad_files(self):
        for content in ("{not json", "[1, 2]", '{"ui": {}}', '{"detector": {"volume": 1}}'):
            with self.assertRaises(ConfigurationError, msg=content):
                ConfigManager(self.write_config(content))
        with self.assertRaises(ConfigurationError):
            ConfigManager(os.path.join(self.temp_dir.name, "missing.json"))

    def test_invalid_values_fail_on_use(self):
        config = ConfigManager()
        config.update_config("detector", {"sensitivity": 3})
        with self.assertRaises(ConfigurationError):
            config.tuner_settings()
        config.reset_config("detector")
        self.assertEqual(config.tuner_settings(), TunerSettings())

    def test_unknown_section(self):
        config = ConfigManager()
        with self.assertRaises(ConfigurationError):
            config.get_config("ui")
        with self.assertRaises(ConfigurationError):
            config.reset_config("ui")


class TestComponentFactory(unittest.TestCase):
    def test_create_detector(self):
        config = ConfigManager()
        config.update_config("detector", {"min_floor": 0.001, "max_ceiling": 0.02})
        detector = ComponentFactory(config).create_detector()
        self.assertIsInstance(detector, PitchDetector)
        self.assertAlmostEqual(detector.gate_threshold(1.0), 0.001)
        self.assertAlmostEqual(detector.gate_threshold(0.0), 0.02)

    def test_create_frame_loop(self):
        config = ConfigManager()
        config.update_config("detector", {"sensitivity": 0.7, "a4_reference": 442.0})
        loop = ComponentFactory(config).create_frame_loop(ArrayAudioInput([], 44100))
        self.assertIsInstance(loop, FrameLoop)
        self.assertEqual(loop.settings, TunerSettings(sensitivity=0.7, a4_reference=442.0))

    def test_unknown_audio_input(self):
        with self.assertRaises(ConfigurationError):
            ComponentFactory().create_audio_input("jack")

    def test_bad_frame_size(self):
        with self.assertRaises(ConfigurationError):
            ComponentFactory().create_file_input("unused.wav", frame_size=2)


if __name__ == "__main__":
    unittest.main()
