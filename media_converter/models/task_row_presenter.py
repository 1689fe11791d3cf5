"""
Interface through which the conversion queue asks the presentation layer to
show its tasks.
"""
from typing import Any

from .conversion_task import ConversionTask

FAILED_STATUS_TEXT = "Failed"


class TaskRowPresenter:
    """
    Receives row requests from the conversion queue.

    create_row() returns an opaque handle; the queue stores it on the task and
    passes it back for every later request without ever looking inside it.
    """

    def create_row(self, task: ConversionTask) -> Any:
        raise NotImplementedError

    def remove_row(self, handle: Any):
        raise NotImplementedError

    def set_row_progress(self, handle: Any, percent: int):
        raise NotImplementedError

    def set_row_status(self, handle: Any, text: str):
        raise NotImplementedError


class NullRowPresenter(TaskRowPresenter):
    """Presenter for headless use: the handle is the task id, updates are ignored."""

    def create_row(self, task: ConversionTask) -> Any:
        return task.task_id

    def remove_row(self, handle: Any):
        pass

    def set_row_progress(self, handle: Any, percent: int):
        pass

    def set_row_status(self, handle: Any, text: str):
        pass
