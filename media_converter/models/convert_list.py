"""
Queue controller for media conversion tasks.

Owns the ordered task list, runs at most one conversion at a time through a
MediaConverter and advances to the next queued task whenever one ends.
"""
from typing import Iterable, List, Optional, Tuple

from PyQt6.QtCore import QObject, pyqtSignal

from qt_base_app.models.logger import Logger

from .conversion_parameters import ConversionParameters
from .conversion_task import ConversionTask, DurationHint, TaskStatus
from .media_converter import EXIT_LAUNCH_FAILED, MediaConverter
from .media_probe import DEFAULT_PROBE_TIMEOUT_MS, MediaProbe
from .task_row_presenter import FAILED_STATUS_TEXT, NullRowPresenter, TaskRowPresenter


class ConvertListController(QObject):
    """
    Controller for the conversion queue.

    Task lifecycle: QUEUED -> RUNNING -> FINISHED | FAILED, plus RUNNING ->
    QUEUED when stop() is called. FINISHED and FAILED are terminal. Tasks run
    in insertion order; start() always takes the first QUEUED task.

    Error contract:
    - add_task() returns False when the probe fails or times out; nothing is added.
    - A non-zero converter exit marks the task FAILED and the queue moves on.
    - remove_task() on the RUNNING task is refused: it returns False and
      changes nothing. Call stop() first to remove it.
    - Progress or finished events arriving while no task is current are ignored.

    All methods and converter callbacks must be delivered on the thread that
    owns this object. Converter signals emitted from worker threads are queued
    onto it by Qt's automatic connection.
    """

    # Outward events for the presentation layer
    conversion_started = pyqtSignal(int, object)  # task index, ConversionParameters
    progress_updated = pyqtSignal(int, int)  # task index, percentage
    task_finished = pyqtSignal(int)  # exit code
    all_tasks_finished = pyqtSignal()
    task_added = pyqtSignal(int, object)  # task index, ConversionTask
    task_removed = pyqtSignal(int)  # former task index

    def __init__(self, probe: MediaProbe, converter: MediaConverter,
                 presenter: Optional[TaskRowPresenter] = None,
                 probe_timeout_ms: int = DEFAULT_PROBE_TIMEOUT_MS, parent=None):
        super().__init__(parent)
        self.logger = Logger.instance()
        self._probe = probe
        self._converter = converter
        self._presenter = presenter or NullRowPresenter()
        self.probe_timeout_ms = probe_timeout_ms

        self._tasks: List[ConversionTask] = []
        self._prev_id = 0
        self._current_task: Optional[ConversionTask] = None
        self._is_busy = False

        # Queue advancement state, see _advance_queue()
        self._advance_pending = False
        self._draining = False
        # Bumped on every start() and stop(); detects a listener re-entering from conversion_started
        self._run_serial = 0

        self._converter.progress_refreshed.connect(self.on_progress)
        self._converter.finished.connect(self.on_finished)

    def set_presenter(self, presenter: Optional[TaskRowPresenter]):
        """Replace the presenter. Existing tasks keep the handles of the old one."""
        self._presenter = presenter or NullRowPresenter()

    # --- Commands ---

    def add_task(self, params: ConversionParameters) -> bool:
        """
        Probe the source and append a new QUEUED task on success.

        Args:
            params: Conversion parameters of the new task

        Returns:
            bool: True if the task was admitted, False if the source could not be probed
        """
        handle = self._probe.start(params.source)
        if not self._probe.wait(handle, self.probe_timeout_ms) or self._probe.error(handle):
            self.logger.warning(self.__class__.__name__, f"Rejected {params.source}: media information unavailable")
            return False

        self._prev_id += 1
        task = ConversionTask(
            task_id=self._prev_id,
            parameters=params,
            status=TaskStatus.QUEUED,
            duration=DurationHint(
                hours=self._probe.hours(handle),
                minutes=self._probe.minutes(handle),
                seconds=self._probe.seconds(handle),
            ),
        )
        self._tasks.append(task)
        task.row_handle = self._presenter.create_row(task)

        index = len(self._tasks) - 1
        self.logger.info(self.__class__.__name__, f"Queued task {task.task_id} at {index}: {params.source} -> {params.destination}")
        self.task_added.emit(index, task)
        return True

    def add_tasks(self, params_list: Iterable[ConversionParameters]) -> int:
        """Add every parameter set in order. Returns how many were admitted."""
        return sum(1 for params in params_list if self.add_task(params))

    def remove_task(self, index: int) -> bool:
        """
        Remove the task at index unless it is running.

        Indices of later tasks shift down by one.

        Args:
            index: Position of the task, 0 <= index < count()

        Returns:
            bool: True if removed, False if the task is RUNNING and was kept

        Raises:
            IndexError: If index is out of range
        """
        task = self._task_at(index)
        if task.status == TaskStatus.RUNNING:
            self.logger.warning(self.__class__.__name__, f"Cannot remove task {task.task_id} while it is in progress.")
            return False

        del self._tasks[index]
        self._presenter.remove_row(task.row_handle)
        self.logger.info(self.__class__.__name__, f"Removed task {task.task_id} from {index}")
        self.task_removed.emit(index)
        return True

    def start(self):
        """Run the first QUEUED task. Does nothing while a task is running."""
        if self._is_busy:
            return

        if not self._tasks:
            self.stop()
            return

        for index, task in enumerate(self._tasks):
            if task.status != TaskStatus.QUEUED:
                continue

            self._is_busy = True
            self._run_serial += 1
            serial = self._run_serial
            task.status = TaskStatus.RUNNING
            self._current_task = task
            self.logger.info(self.__class__.__name__, f"Starting task {task.task_id} at {index}: {task.parameters.source_name}")
            self.conversion_started.emit(index, task.parameters)
            if serial != self._run_serial:
                # A listener stopped or restarted the queue from conversion_started
                self.logger.info(self.__class__.__name__, f"Task {task.task_id} was stopped before the converter started.")
                return
            try:
                self._converter.start(task.parameters)
            except Exception as e:
                self.logger.error(self.__class__.__name__, f"Converter failed to start task {task.task_id}: {e}", exc_info=True)
                self.on_finished(EXIT_LAUNCH_FAILED)
            return

        self.stop()
        self.logger.info(self.__class__.__name__, "All tasks finished.")
        self.all_tasks_finished.emit()

    def stop(self):
        """Halt the running task and put it back in the queue."""
        if self._current_task is not None:
            task = self._current_task
            self._show_progress(task, 0)
            task.status = TaskStatus.QUEUED
            self._current_task = None
            self.logger.info(self.__class__.__name__, f"Stopped task {task.task_id}; re-queued.")
        self._is_busy = False
        self._run_serial += 1
        self._converter.stop()

    # --- Queries ---

    def is_busy(self) -> bool:
        return self._is_busy

    def is_empty(self) -> bool:
        return not self._tasks

    def count(self) -> int:
        return len(self._tasks)

    def task(self, index: int) -> ConversionTask:
        return self._task_at(index)

    def tasks(self) -> Tuple[ConversionTask, ...]:
        return tuple(self._tasks)

    def current_task(self) -> Optional[ConversionTask]:
        return self._current_task

    def index_of(self, task: ConversionTask) -> int:
        """Position of task in the list, or -1 if it is not queued here."""
        for index, candidate in enumerate(self._tasks):
            if candidate is task:
                return index
        return -1

    # --- Converter callbacks ---

    def on_progress(self, percentage: int):
        if self._current_task is None:
            self.logger.debug(self.__class__.__name__, f"Ignoring progress {percentage}% with no current task")
            return
        self.logger.debug(self.__class__.__name__, f"Progress refreshed: {percentage}%")
        self._show_progress(self._current_task, percentage)

    def on_finished(self, exit_code: int):
        task = self._current_task
        if task is None:
            self.logger.debug(self.__class__.__name__, f"Ignoring finish (code {exit_code}) with no current task")
            return

        if exit_code == 0:
            task.status = TaskStatus.FINISHED
            self.logger.info(self.__class__.__name__, f"Task {task.task_id} finished: {task.parameters.destination}")
        else:
            task.status = TaskStatus.FAILED
            self._show_progress(task, 0)
            self._presenter.set_row_status(task.row_handle, FAILED_STATUS_TEXT)
            self.logger.warning(self.__class__.__name__, f"Task {task.task_id} failed with exit code {exit_code}: {task.parameters.source}")

        self._current_task = None
        self._is_busy = False
        self.task_finished.emit(exit_code)
        self._advance_queue()

    # --- Internals ---

    def _advance_queue(self):
        """
        Start the next queued task.

        Runs as a loop instead of recursing into start(): if the converter
        finishes synchronously inside start(), the nested on_finished() only
        flags another round for the outer loop.
        """
        self._advance_pending = True
        if self._draining:
            return
        self._draining = True
        try:
            while self._advance_pending:
                self._advance_pending = False
                self.start()
        finally:
            self._draining = False

    def _show_progress(self, task: ConversionTask, percentage: int):
        task.progress = percentage
        self._presenter.set_row_progress(task.row_handle, percentage)
        index = self.index_of(task)
        if index >= 0:
            self.progress_updated.emit(index, percentage)

    def _task_at(self, index: int) -> ConversionTask:
        if index < 0 or index >= len(self._tasks):
            raise IndexError(f"Task index {index} out of range (count={len(self._tasks)})")
        return self._tasks[index]
