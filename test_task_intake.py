#!/usr/bin/env python
"""
Tests for turning selected or dropped paths into conversion parameters.
"""
import sys
import os
import tempfile
import unittest

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from PyQt6.QtCore import QUrl

from media_converter.models.task_intake import build_conversion_parameters, paths_from_urls


class TestTaskIntake(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = self.temp_dir.name
        self.movie = os.path.join(self.root, "holiday.MOV")
        self.song = os.path.join(self.root, "song.mp3")
        for path in (self.movie, self.song):
            with open(path, "wb") as f:
                f.write(b"\0")
        self.sub_dir = os.path.join(self.root, "folder")
        os.mkdir(self.sub_dir)

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_destination_next_to_source(self):
        params = build_conversion_parameters([self.movie], ".MP4")
        self.assertEqual(len(params), 1)
        self.assertEqual(params[0].source, self.movie)
        self.assertEqual(params[0].destination, os.path.join(self.root, "holiday.mp4"))

    def test_output_directory_and_options(self):
        out_dir = os.path.join(self.root, "converted")
        params = build_conversion_parameters([self.movie, self.song], "mkv", out_dir, {"audio_bitrate_kbps": 256})
        self.assertEqual([p.destination for p in params],
                         [os.path.join(out_dir, "holiday.mkv"), os.path.join(out_dir, "song.mkv")])
        self.assertEqual(params[1].option("audio_bitrate_kbps"), 256)

    def test_directories_and_missing_files_are_skipped(self):
        missing = os.path.join(self.root, "gone.avi")
        params = build_conversion_parameters([self.sub_dir, missing, self.song], "wav")
        self.assertEqual([p.source for p in params], [self.song])

    def test_source_is_never_its_own_destination(self):
        params = build_conversion_parameters([self.song, self.movie], "mp3")
        self.assertEqual([p.source for p in params], [self.movie])

    def test_paths_from_urls_keeps_local_files(self):
        urls = [QUrl.fromLocalFile(self.movie), QUrl("https://example.com/clip.mp4")]
        self.assertEqual(paths_from_urls(urls), [QUrl.fromLocalFile(self.movie).toLocalFile()])


if __name__ == '__main__':
    unittest.main()
