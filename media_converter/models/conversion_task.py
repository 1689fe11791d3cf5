"""
Data structure for queued conversion tasks.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .conversion_parameters import ConversionParameters


class TaskStatus(Enum):
    """Lifecycle state of a conversion task."""
    QUEUED = "queued"
    RUNNING = "running"
    FINISHED = "finished"
    FAILED = "failed"


@dataclass(frozen=True)
class DurationHint:
    """Media duration as reported by the probe, kept for display."""
    hours: int = 0
    minutes: int = 0
    seconds: float = 0.0

    def format(self) -> str:
        """
        Render the duration as HH:MM:SS.

        Returns:
            str: Zero-padded duration with seconds rounded to a whole number
        """
        hours, remainder = divmod(int(round(self.total_seconds())), 3600)
        minutes, seconds = divmod(remainder, 60)
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"

    def total_seconds(self) -> float:
        return self.hours * 3600 + self.minutes * 60 + self.seconds


@dataclass(eq=False)
class ConversionTask:
    """
    One entry of the conversion queue.

    The controller owns the status; the row handle belongs to the presenter
    and is only ever passed back to it.
    """
    task_id: int
    parameters: ConversionParameters
    status: TaskStatus = TaskStatus.QUEUED
    duration: DurationHint = field(default_factory=DurationHint)
    row_handle: Optional[Any] = None
    progress: int = 0

    def __str__(self) -> str:
        return f"ConversionTask(id={self.task_id}, file={self.parameters.source_name}, status={self.status.value})"
