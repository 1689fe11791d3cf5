"""
Main window of the Media Converter application.
"""
import os
from typing import List

from PyQt6.QtCore import QSize
from PyQt6.QtGui import QAction
from PyQt6.QtWidgets import QFileDialog, QMessageBox, QToolBar
import qtawesome as qta

from qt_base_app.models.settings_manager import SettingType
from qt_base_app.window.base_window import BaseWindow

from media_converter.models.conversion_parameters import ConversionParameters
from media_converter.models.convert_list import ConvertListController
from media_converter.models.ffmpeg_utils import OPTION_AUDIO_BITRATE, check_ffmpeg_tools
from media_converter.models.media_converter import FFmpegMediaConverter
from media_converter.models.media_probe import FFprobeMediaProbe
from media_converter.models.settings_defs import (
    AUDIO_BITRATE_KEY, DEFAULT_AUDIO_BITRATE,
    FFMPEG_PATH_KEY, DEFAULT_FFMPEG_PATH,
    FFPROBE_PATH_KEY, DEFAULT_FFPROBE_PATH,
    LAST_INPUT_DIR_KEY, DEFAULT_LAST_INPUT_DIR,
    OUTPUT_DIR_KEY, DEFAULT_OUTPUT_DIR,
    OUTPUT_FORMAT_KEY, DEFAULT_OUTPUT_FORMAT,
    PROBE_TIMEOUT_MS_KEY, DEFAULT_PROBE_TIMEOUT_MS,
)
from media_converter.models.task_intake import build_conversion_parameters
from media_converter.ui.convert_list_view import ConvertListView


class ConverterWindow(BaseWindow):
    """
    Conversion queue window: a task list plus Add / Remove / Start / Stop.
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._check_tools()

    def _create_content_widgets(self):
        ffmpeg_path = self.settings.get(FFMPEG_PATH_KEY, DEFAULT_FFMPEG_PATH, SettingType.STRING)
        ffprobe_path = self.settings.get(FFPROBE_PATH_KEY, DEFAULT_FFPROBE_PATH, SettingType.STRING)
        probe_timeout_ms = self.settings.get(PROBE_TIMEOUT_MS_KEY, DEFAULT_PROBE_TIMEOUT_MS, SettingType.INT)

        self.converter = FFmpegMediaConverter(self, ffmpeg_path=ffmpeg_path, ffprobe_path=ffprobe_path)
        self.probe = FFprobeMediaProbe(ffprobe_path)

        self.list_view = ConvertListView(self)
        self.controller = ConvertListController(self.probe, self.converter,
                                                presenter=self.list_view,
                                                probe_timeout_ms=probe_timeout_ms,
                                                parent=self)
        self.list_view.set_controller(self.controller)
        self.list_view.set_task_intake(self.build_parameters)
        self.main_layout.addWidget(self.list_view)

        self._create_toolbar()
        self._connect_signals()
        self._update_actions()
        self.statusBar().showMessage(self.tr("Drop media files here or use Add Files."))

    def _create_toolbar(self):
        toolbar = QToolBar(self.tr("Tasks"), self)
        toolbar.setMovable(False)
        toolbar.setIconSize(QSize(18, 18))
        self.addToolBar(toolbar)

        self.add_action = QAction(qta.icon('fa5s.plus'), self.tr("Add Files"), self)
        self.remove_action = QAction(qta.icon('fa5s.trash-alt'), self.tr("Remove"), self)
        self.start_action = QAction(qta.icon('fa5s.play'), self.tr("Start"), self)
        self.stop_action = QAction(qta.icon('fa5s.stop'), self.tr("Stop"), self)

        for action in (self.add_action, self.remove_action, self.start_action, self.stop_action):
            toolbar.addAction(action)

    def _connect_signals(self):
        self.add_action.triggered.connect(self._on_add_files)
        self.remove_action.triggered.connect(self.list_view.remove_selected)
        self.start_action.triggered.connect(self.controller.start)
        self.stop_action.triggered.connect(self._on_stop)

        self.controller.conversion_started.connect(self._on_conversion_started)
        self.controller.task_finished.connect(self._on_task_finished)
        self.controller.all_tasks_finished.connect(self._on_all_tasks_finished)
        self.controller.task_added.connect(lambda index, task: self._update_actions())
        self.controller.task_removed.connect(lambda index: self._update_actions())
        self.list_view.files_rejected.connect(self._on_files_rejected)

    def build_parameters(self, paths: List[str]) -> List[ConversionParameters]:
        """Task intake: map paths to parameters using the saved output settings."""
        output_format = self.settings.get(OUTPUT_FORMAT_KEY, DEFAULT_OUTPUT_FORMAT, SettingType.STRING)
        output_dir = self.settings.get(OUTPUT_DIR_KEY, DEFAULT_OUTPUT_DIR, SettingType.STRING)
        bitrate = self.settings.get(AUDIO_BITRATE_KEY, DEFAULT_AUDIO_BITRATE, SettingType.INT)
        return build_conversion_parameters(paths, output_format, output_dir or None,
                                           {OPTION_AUDIO_BITRATE: bitrate})

    def _check_tools(self):
        status = check_ffmpeg_tools(self.converter.ffmpeg_path, self.converter.ffprobe_path)
        missing = [status[f"{name}_path"] for name in ("ffmpeg", "ffprobe") if not status[name]]
        if missing:
            self.logger.warning(self.__class__.__name__, f"Missing tools: {', '.join(missing)}")
            self.statusBar().showMessage(self.tr("Not found: ") + ", ".join(missing))

    def _update_actions(self):
        busy = self.controller.is_busy()
        self.start_action.setEnabled(not busy and not self.controller.is_empty())
        self.stop_action.setEnabled(busy)
        self.remove_action.setEnabled(not self.controller.is_empty())

    # --- Slots ---

    def _on_add_files(self):
        start_dir = self.settings.get(LAST_INPUT_DIR_KEY, DEFAULT_LAST_INPUT_DIR, SettingType.STRING)
        files, _ = QFileDialog.getOpenFileNames(self, self.tr("Select Media Files"), start_dir or os.path.expanduser("~"))
        if not files:
            return
        self.settings.set(LAST_INPUT_DIR_KEY, os.path.dirname(files[0]), SettingType.STRING)
        self.list_view.add_parameters(self.build_parameters(files))

    def _on_stop(self):
        self.controller.stop()
        self.statusBar().showMessage(self.tr("Stopped."))
        self._update_actions()

    def _on_conversion_started(self, index: int, params: ConversionParameters):
        self.statusBar().showMessage(self.tr("Converting ") + params.source_name)
        self._update_actions()

    def _on_task_finished(self, exit_code: int):
        if exit_code != 0:
            self.statusBar().showMessage(self.tr("Conversion failed (exit code %d)") % exit_code)
        self._update_actions()

    def _on_all_tasks_finished(self):
        self.statusBar().showMessage(self.tr("All tasks finished."))
        self._update_actions()

    def _on_files_rejected(self, sources: list):
        names = "\n".join(os.path.basename(source) for source in sources)
        QMessageBox.warning(self, self.tr("Converter"),
                            self.tr("Could not read media information from:") + "\n" + names)

    def closeEvent(self, event):
        """Stop the running conversion before closing."""
        if self.controller.is_busy():
            answer = QMessageBox.question(self, self.tr("Converter"),
                                          self.tr("A conversion is in progress. Stop it and quit?"))
            if answer != QMessageBox.StandardButton.Yes:
                event.ignore()
                return
            self.controller.stop()
            self.converter.wait_for_done(10000)
        super().closeEvent(event)
