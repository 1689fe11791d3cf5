#!/usr/bin/env python
"""
Tests for ConvertListView acting as the controller's row presenter.
Runs on the offscreen Qt platform.
"""
import sys
import os
import unittest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from PyQt6.QtCore import Qt
from PyQt6.QtTest import QTest
from PyQt6.QtWidgets import QApplication, QProgressBar

from media_converter.models.conversion_task import TaskStatus
from media_converter.models.convert_list import ConvertListController
from media_converter.ui.convert_list_view import ConvertListView

from test_convert_list import FakeConverter, FakeProbe, make_params


class TestConvertListView(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.app = QApplication.instance() or QApplication(sys.argv)

    def setUp(self):
        self.probe = FakeProbe({"/media/a.mov": 3725.0, "/media/b.mov": 59.6})
        self.converter = FakeConverter()
        self.controller = ConvertListController(self.probe, self.converter)
        self.view = ConvertListView()
        self.view.set_controller(self.controller)

    def tearDown(self):
        self.view.deleteLater()

    def test_rows_follow_admitted_tasks(self):
        rejected = []
        self.view.files_rejected.connect(rejected.append)
        queued = self.view.add_parameters([make_params("a"), make_params("missing"), make_params("b")])

        self.assertEqual(queued, 2)
        self.assertEqual(rejected, [["/media/missing.mov"]])
        self.assertEqual(self.view.topLevelItemCount(), 2)
        first = self.view.topLevelItem(0)
        self.assertEqual(first.text(ConvertListView.COLUMN_INPUT), "a.mov")
        self.assertEqual(first.text(ConvertListView.COLUMN_OUTPUT), "a.mp4")
        self.assertEqual(first.text(ConvertListView.COLUMN_DURATION), "01:02:05")
        self.assertEqual(self.view.topLevelItem(1).text(ConvertListView.COLUMN_DURATION), "00:01:00")
        self.assertIs(self.controller.task(0).row_handle, first)
        self.assertIsInstance(self.view.progress_bar(first), QProgressBar)

    def test_progress_and_failure_are_shown(self):
        self.view.add_parameters([make_params("a")])
        item = self.view.topLevelItem(0)
        self.controller.start()
        self.converter.progress_refreshed.emit(64)
        self.assertEqual(self.view.progress_bar(item).value(), 64)

        self.converter.finished.emit(1)
        self.assertEqual(self.view.progress_bar(item).value(), 0)
        self.assertEqual(item.text(ConvertListView.COLUMN_PROGRESS), "Failed")

    def test_delete_key_removes_selected_rows_except_running(self):
        self.view.add_parameters([make_params("a"), make_params("b")])
        self.controller.start()
        for row in range(self.view.topLevelItemCount()):
            self.view.topLevelItem(row).setSelected(True)

        QTest.keyClick(self.view, Qt.Key.Key_Delete)

        self.assertEqual(self.controller.count(), 1)
        self.assertEqual(self.view.topLevelItemCount(), 1)
        self.assertEqual(self.controller.task(0).status, TaskStatus.RUNNING)
        self.assertIs(self.view.topLevelItem(0), self.controller.task(0).row_handle)


if __name__ == '__main__':
    unittest.main()
