"""
Tree view listing conversion tasks with a progress bar per row.
"""
from typing import Callable, List, Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import QAbstractItemView, QProgressBar, QTreeWidget, QTreeWidgetItem

from qt_base_app.models.logger import Logger

from media_converter.models.conversion_parameters import ConversionParameters
from media_converter.models.conversion_task import ConversionTask
from media_converter.models.convert_list import ConvertListController
from media_converter.models.task_intake import paths_from_urls
from media_converter.models.task_row_presenter import TaskRowPresenter

TaskIntake = Callable[[List[str]], List[ConversionParameters]]


class ConvertListView(QTreeWidget, TaskRowPresenter):
    """
    Presenter for ConvertListController.

    Each task is a top-level QTreeWidgetItem; that item is the row handle
    returned to the controller. The Delete key removes the selected rows and
    dropped files go through the task intake before being queued.
    """
    COLUMN_INPUT = 0
    COLUMN_OUTPUT = 1
    COLUMN_DURATION = 2
    COLUMN_PROGRESS = 3

    files_rejected = pyqtSignal(list)  # source paths that could not be queued

    def __init__(self, parent=None):
        super().__init__(parent)
        self.logger = Logger.instance()
        self._controller: Optional[ConvertListController] = None
        self._task_intake: Optional[TaskIntake] = None

        self._init_tree()
        self.setAcceptDrops(True)
        self.setSelectionMode(QAbstractItemView.SelectionMode.ExtendedSelection)

    def _init_tree(self):
        self.setColumnCount(4)
        self.setHeaderLabels([self.tr("Input"), self.tr("Output"), self.tr("Duration"), self.tr("Progress")])
        self.setRootIsDecorated(False)
        self.setUniformRowHeights(True)

    def set_controller(self, controller: ConvertListController):
        self._controller = controller
        controller.set_presenter(self)

    def set_task_intake(self, task_intake: Optional[TaskIntake]):
        self._task_intake = task_intake

    def add_parameters(self, params_list: List[ConversionParameters]) -> int:
        """Queue every parameter set, reporting the rejected ones. Returns the number queued."""
        if self._controller is None:
            return 0
        rejected = [params.source for params in params_list if not self._controller.add_task(params)]
        if rejected:
            self.files_rejected.emit(rejected)
        return len(params_list) - len(rejected)

    def remove_selected(self):
        """Remove every selected row. Rows of the running task stay."""
        if self._controller is None:
            return
        for item in self.selectedItems():
            index = self.indexOfTopLevelItem(item)
            if index >= 0:
                self._controller.remove_task(index)

    # --- TaskRowPresenter ---

    def create_row(self, task: ConversionTask) -> QTreeWidgetItem:
        params = task.parameters
        item = QTreeWidgetItem([
            params.source_name,
            params.destination_name,
            task.duration.format(),
            "",
        ])
        self.addTopLevelItem(item)

        progress_bar = QProgressBar()
        progress_bar.setRange(0, 100)
        progress_bar.setValue(task.progress)
        self.setItemWidget(item, self.COLUMN_PROGRESS, progress_bar)
        progress_bar.adjustSize()

        item.setToolTip(self.COLUMN_INPUT, params.source)
        item.setToolTip(self.COLUMN_OUTPUT, params.destination)
        return item

    def remove_row(self, handle: QTreeWidgetItem):
        index = self.indexOfTopLevelItem(handle)
        if index >= 0:
            self.takeTopLevelItem(index)

    def set_row_progress(self, handle: QTreeWidgetItem, percent: int):
        progress_bar = self.progress_bar(handle)
        if progress_bar is not None:
            progress_bar.setValue(percent)

    def set_row_status(self, handle: QTreeWidgetItem, text: str):
        handle.setText(self.COLUMN_PROGRESS, text)
        progress_bar = self.progress_bar(handle)
        if progress_bar is not None:
            progress_bar.setFormat(text)

    def progress_bar(self, item: QTreeWidgetItem) -> Optional[QProgressBar]:
        widget = self.itemWidget(item, self.COLUMN_PROGRESS)
        return widget if isinstance(widget, QProgressBar) else None

    # --- Events ---

    def keyPressEvent(self, event):
        """Handle key press events, specifically the Delete key."""
        if event.key() == Qt.Key.Key_Delete:
            self.remove_selected()
            event.accept()
            return
        super().keyPressEvent(event)

    def dragEnterEvent(self, event):
        if event.mimeData().hasUrls():
            event.acceptProposedAction()
        else:
            event.ignore()

    def dragMoveEvent(self, event):
        if event.mimeData().hasUrls():
            event.acceptProposedAction()
        else:
            event.ignore()

    def dragLeaveEvent(self, event):
        event.accept()

    def dropEvent(self, event):
        """Queue the dropped files through the task intake."""
        if not event.mimeData().hasUrls():
            event.ignore()
            return
        event.acceptProposedAction()

        paths = paths_from_urls(event.mimeData().urls())
        if not paths or self._task_intake is None:
            return
        params_list = self._task_intake(paths)
        self.logger.debug(self.__class__.__name__, f"Dropped {len(paths)} file(s), {len(params_list)} to queue")
        self.add_parameters(params_list)
