#!/usr/bin/env python
"""
Tests for the FFmpeg command builders and output parsers.
"""
import sys
import os
import subprocess
import unittest
from unittest.mock import patch

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from media_converter.models.conversion_parameters import ConversionParameters
from media_converter.models.ffmpeg_utils import (
    build_conversion_command,
    build_probe_command,
    check_ffmpeg_tools,
    parse_duration,
    parse_ffmpeg_error,
    parse_progress_line,
    split_duration,
)


class TestDurationParsing(unittest.TestCase):

    def test_plain_seconds(self):
        self.assertAlmostEqual(parse_duration("3725.500000\n"), 3725.5)

    def test_missing_values(self):
        for text in (None, "", "   \n", "N/A\n", "abc", "-4.0"):
            with self.subTest(text=text):
                self.assertIsNone(parse_duration(text))

    def test_zero_is_a_valid_duration(self):
        self.assertEqual(parse_duration("0.000000"), 0.0)

    def test_split_duration(self):
        hours, minutes, seconds = split_duration(3725.5)
        self.assertEqual((hours, minutes), (1, 2))
        self.assertAlmostEqual(seconds, 5.5)
        self.assertEqual(split_duration(59.0), (0, 0, 59.0))

    def test_probe_command_ends_with_input(self):
        command = build_probe_command("/media/a b.mov", "/opt/ffprobe")
        self.assertEqual(command[0], "/opt/ffprobe")
        self.assertEqual(command[-1], "/media/a b.mov")
        self.assertIn("format=duration", command)


class TestConversionCommand(unittest.TestCase):

    def test_minimal_command(self):
        params = ConversionParameters("/in/a.mov", "/out/a.mp4")
        command = build_conversion_command(params, "ffmpeg")
        self.assertEqual(command[:3], ["ffmpeg", "-i", "/in/a.mov"])
        self.assertEqual(command[-1], "/out/a.mp4")
        self.assertIn("-progress", command)
        self.assertEqual(command[command.index("-progress") + 1], "pipe:1")
        self.assertNotIn("-b:a", command)

    def test_encoder_options(self):
        params = ConversionParameters("/in/a.mov", "/out/a.mkv", {
            "video_codec": "libx264",
            "video_bitrate_kbps": 2500,
            "audio_codec": "aac",
            "audio_bitrate_kbps": 192.0,
            "extra_args": ["-preset", "fast"],
        })
        command = build_conversion_command(params)
        self.assertEqual(command[command.index("-c:v") + 1], "libx264")
        self.assertEqual(command[command.index("-b:v") + 1], "2500k")
        self.assertEqual(command[command.index("-c:a") + 1], "aac")
        self.assertEqual(command[command.index("-b:a") + 1], "192k")
        self.assertEqual(command[-3:], ["-preset", "fast", "/out/a.mkv"])

    def test_disable_streams_override_codecs(self):
        params = ConversionParameters("/in/a.mov", "/out/a.mp3", {
            "disable_video": True,
            "video_codec": "libx264",
            "audio_bitrate_kbps": 320,
        })
        command = build_conversion_command(params)
        self.assertIn("-vn", command)
        self.assertNotIn("-c:v", command)
        self.assertIn("-b:a", command)

        params = ConversionParameters("/in/a.mov", "/out/a.mp4", {"disable_audio": True, "audio_codec": "aac"})
        command = build_conversion_command(params)
        self.assertIn("-an", command)
        self.assertNotIn("-c:a", command)


class TestProgressParsing(unittest.TestCase):

    def test_out_time_is_microseconds(self):
        self.assertEqual(parse_progress_line("out_time_ms=5000000\n", 10000.0), 50)
        self.assertEqual(parse_progress_line("out_time_us=2500000", 10000.0), 25)

    def test_clamped(self):
        self.assertEqual(parse_progress_line("out_time_ms=20000000", 10000.0), 100)
        self.assertEqual(parse_progress_line("out_time_ms=-100", 10000.0), 0)

    def test_end_marker(self):
        self.assertEqual(parse_progress_line("progress=end", 10000.0), 100)
        self.assertIsNone(parse_progress_line("progress=continue", 10000.0))

    def test_unknown_duration(self):
        self.assertIsNone(parse_progress_line("out_time_ms=5000000", None))
        self.assertIsNone(parse_progress_line("progress=end", 0))

    def test_other_keys_ignored(self):
        self.assertIsNone(parse_progress_line("frame=120", 10000.0))
        self.assertIsNone(parse_progress_line("out_time=00:00:05.000000", 10000.0))


class TestErrorsAndTools(unittest.TestCase):

    def test_known_pattern(self):
        message = parse_ffmpeg_error("x.mov: No such file or directory", 1)
        self.assertIn("Input file not found", message)
        self.assertIn("1", message)

    def test_last_line_fallback(self):
        message = parse_ffmpeg_error("first\nsomething odd happened\n\n", 69)
        self.assertIn("something odd happened", message)

    def test_empty_stderr(self):
        self.assertEqual(parse_ffmpeg_error("", 2), "FFmpeg exited with code 2")

    @patch('media_converter.models.ffmpeg_utils.subprocess.run')
    def test_check_tools(self, mock_run):
        def fake_run(command, **kwargs):
            if command[0] == "missing-ffprobe":
                raise FileNotFoundError(command[0])
            return subprocess.CompletedProcess(command, 0, "version", "")

        mock_run.side_effect = fake_run
        status = check_ffmpeg_tools("ffmpeg", "missing-ffprobe")
        self.assertTrue(status["ffmpeg"])
        self.assertFalse(status["ffprobe"])
        self.assertEqual(status["ffprobe_path"], "missing-ffprobe")


if __name__ == '__main__':
    unittest.main()
