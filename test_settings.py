#!/usr/bin/env python
"""
Test script for the settings layer.
Tests SettingsManager typed storage, the converter defaults and YAML config lookup.
"""
import sys
import os
import tempfile
import unittest

# Add the project root directory to Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from PyQt6.QtCore import QSettings

from qt_base_app.models.settings_manager import SettingsManager, SettingType
from media_converter.models.settings_defs import (
    MEDIA_CONVERTER_DEFAULTS,
    OUTPUT_FORMAT_KEY,
    PROBE_TIMEOUT_MS_KEY,
    OUTPUT_DIR_KEY,
)


class TestSettingsManager(unittest.TestCase):
    """SettingsManager backed by a throwaway INI file."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        ini_path = os.path.join(self.temp_dir.name, "settings.ini")
        self.settings = SettingsManager(QSettings(ini_path, QSettings.Format.IniFormat))

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_defaults_are_written_once(self):
        self.settings.set(OUTPUT_FORMAT_KEY, "mkv", SettingType.STRING)
        self.settings.set_defaults(MEDIA_CONVERTER_DEFAULTS)

        # Existing values win over defaults
        self.assertEqual(self.settings.get(OUTPUT_FORMAT_KEY, "mp4", SettingType.STRING), "mkv")
        self.assertEqual(self.settings.get(PROBE_TIMEOUT_MS_KEY, 0, SettingType.INT), 30000)
        self.assertEqual(self.settings.get(OUTPUT_DIR_KEY, None, SettingType.STRING), "")
        self.assertEqual(self.settings.get_setting_type(PROBE_TIMEOUT_MS_KEY), SettingType.INT)

    def test_reset_to_defaults(self):
        self.settings.set_defaults(MEDIA_CONVERTER_DEFAULTS)
        self.settings.set(OUTPUT_FORMAT_KEY, "webm", SettingType.STRING)
        self.settings.reset_to_defaults()
        self.assertEqual(self.settings.get(OUTPUT_FORMAT_KEY, None, SettingType.STRING), "mp4")

    def test_typed_round_trips(self):
        self.settings.set("test/flag", True, SettingType.BOOL)
        self.settings.set("test/list", ["mp4", "mkv"], SettingType.LIST)
        self.settings.set("test/dict", {"audio_bitrate_kbps": 192}, SettingType.DICT)

        self.assertTrue(self.settings.get("test/flag", False, SettingType.BOOL))
        self.assertEqual(self.settings.get("test/list", [], SettingType.LIST), ["mp4", "mkv"])
        self.assertEqual(self.settings.get("test/dict", {}, SettingType.DICT), {"audio_bitrate_kbps": 192})

    def test_invalid_value_raises(self):
        with self.assertRaises(ValueError):
            self.settings.set("test/number", "not a number", SettingType.INT)

    def test_missing_key_returns_default(self):
        self.assertEqual(self.settings.get("test/missing", 5, SettingType.INT), 5)
        self.assertFalse(self.settings.contains("test/missing"))

    def test_path_setting_requires_existing_directory(self):
        self.settings.set("test/dir", self.temp_dir.name, SettingType.STRING)
        self.settings.set("test/gone", os.path.join(self.temp_dir.name, "nope"), SettingType.STRING)
        self.assertEqual(str(self.settings.get("test/dir", None, SettingType.PATH)), self.temp_dir.name)
        self.assertIsNone(self.settings.get("test/gone", None, SettingType.PATH))


class TestYamlConfig(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.settings = SettingsManager(QSettings(os.path.join(self.temp_dir.name, "s.ini"),
                                                  QSettings.Format.IniFormat))

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_dot_path_lookup(self):
        config_path = os.path.join(self.temp_dir.name, "config.yaml")
        with open(config_path, "w", encoding="utf-8") as f:
            f.write("app:\n  title: Media Converter\n  window:\n    width: 900\nlogging:\n  level: DEBUG\n")
        self.settings.load_yaml_config(config_path)

        self.assertEqual(self.settings.get_yaml_config("app.title"), "Media Converter")
        self.assertEqual(self.settings.get_yaml_config("app.window.width"), 900)
        self.assertEqual(self.settings.get_yaml_config("logging.level"), "DEBUG")
        self.assertEqual(self.settings.get_yaml_config("app.window.height", 600), 600)
        self.assertEqual(self.settings.get_yaml_config("app.title.nested", "x"), "x")

    def test_missing_or_broken_file_gives_empty_config(self):
        self.settings.load_yaml_config(os.path.join(self.temp_dir.name, "absent.yaml"))
        self.assertIsNone(self.settings.get_yaml_config("app.title"))

        broken = os.path.join(self.temp_dir.name, "broken.yaml")
        with open(broken, "w", encoding="utf-8") as f:
            f.write("app: [unclosed\n")
        self.settings.load_yaml_config(broken)
        self.assertEqual(self.settings.get_yaml_config("logging", {}), {})


if __name__ == '__main__':
    unittest.main()
