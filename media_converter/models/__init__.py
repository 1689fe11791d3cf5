"""
Domain models and business logic for the Media Converter application.

- ConvertListController: the conversion queue. Admits probed files, runs one
  conversion at a time and advances automatically.
- MediaProbe / FFprobeMediaProbe: synchronous duration lookup.
- MediaConverter / FFmpegMediaConverter: asynchronous conversion with
  progress and exit-code signals.
"""
from .conversion_parameters import ConversionParameters
from .conversion_task import ConversionTask, DurationHint, TaskStatus
from .media_probe import MediaProbe, FFprobeMediaProbe, ProbeHandle
from .media_converter import MediaConverter, FFmpegMediaConverter
from .task_row_presenter import TaskRowPresenter, NullRowPresenter
from .convert_list import ConvertListController

__all__ = [
    'ConversionParameters',
    'ConversionTask',
    'DurationHint',
    'TaskStatus',
    'MediaProbe',
    'FFprobeMediaProbe',
    'ProbeHandle',
    'MediaConverter',
    'FFmpegMediaConverter',
    'TaskRowPresenter',
    'NullRowPresenter',
    'ConvertListController',
]
