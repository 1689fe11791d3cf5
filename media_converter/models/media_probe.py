"""
Synchronous media inspection used to admit files into the conversion queue.
"""
import subprocess
from abc import ABC, abstractmethod
from typing import Optional

from qt_base_app.models.logger import Logger

from .ffmpeg_utils import build_probe_command, parse_duration, split_duration, creation_flags

DEFAULT_PROBE_TIMEOUT_MS = 30000


class ProbeHandle:
    """State of one probe request, returned by MediaProbe.start()."""

    def __init__(self, path: str):
        self.path = str(path)
        self.process: Optional[subprocess.Popen] = None
        self.completed = False
        self.failed = False
        self.error_message = ""
        self.hours = 0
        self.minutes = 0
        self.seconds = 0.0

    def set_duration(self, total_seconds: float):
        self.hours, self.minutes, self.seconds = split_duration(total_seconds)

    def fail(self, message: str):
        self.failed = True
        self.error_message = message


class MediaProbe(ABC):
    """
    Looks up the duration and validity of a media file.

    Usage follows start -> wait -> error -> hours/minutes/seconds. wait()
    blocks for at most timeout_ms and returns False when the probe did not
    complete in time.
    """

    @abstractmethod
    def start(self, path: str) -> ProbeHandle:
        """Begin probing path and return a handle for the request."""
        pass

    @abstractmethod
    def wait(self, handle: ProbeHandle, timeout_ms: int = DEFAULT_PROBE_TIMEOUT_MS) -> bool:
        """Block until the probe completes. Returns False on timeout."""
        pass

    def error(self, handle: ProbeHandle) -> bool:
        return handle.failed

    def hours(self, handle: ProbeHandle) -> int:
        return handle.hours

    def minutes(self, handle: ProbeHandle) -> int:
        return handle.minutes

    def seconds(self, handle: ProbeHandle) -> float:
        return handle.seconds


class FFprobeMediaProbe(MediaProbe):
    """MediaProbe backed by the ffprobe executable."""

    def __init__(self, ffprobe_path: str = "ffprobe"):
        self.ffprobe_path = ffprobe_path
        self.logger = Logger.instance()

    def start(self, path: str) -> ProbeHandle:
        handle = ProbeHandle(path)
        command = build_probe_command(handle.path, self.ffprobe_path)
        self.logger.debug(self.__class__.__name__, f"Probing with command: {' '.join(command)}")
        try:
            handle.process = subprocess.Popen(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding='utf-8', errors='replace',
                creationflags=creation_flags()
            )
        except FileNotFoundError:
            handle.fail(f"{self.ffprobe_path} not found. Ensure it is in PATH.")
            handle.completed = True
            self.logger.error(self.__class__.__name__, handle.error_message)
        except OSError as e:
            handle.fail(f"Failed to launch {self.ffprobe_path}: {e}")
            handle.completed = True
            self.logger.error(self.__class__.__name__, handle.error_message)
        return handle

    def wait(self, handle: ProbeHandle, timeout_ms: int = DEFAULT_PROBE_TIMEOUT_MS) -> bool:
        if handle.completed:
            return True
        if handle.process is None:
            return False

        try:
            stdout, stderr = handle.process.communicate(timeout=timeout_ms / 1000.0)
        except subprocess.TimeoutExpired:
            self.logger.warning(self.__class__.__name__, f"ffprobe timed out after {timeout_ms} ms for {handle.path}")
            handle.process.kill()
            handle.process.communicate()
            handle.fail("ffprobe timed out")
            return False

        handle.completed = True
        if handle.process.returncode != 0:
            handle.fail(f"ffprobe failed (code {handle.process.returncode}): {(stderr or '').strip()}")
            self.logger.warning(self.__class__.__name__, f"{handle.error_message} [{handle.path}]")
            return True

        duration = parse_duration(stdout)
        if duration is None:
            handle.fail(f"ffprobe returned no usable duration: '{(stdout or '').strip()}'")
            self.logger.warning(self.__class__.__name__, f"{handle.error_message} [{handle.path}]")
            return True

        handle.set_duration(duration)
        self.logger.debug(self.__class__.__name__, f"Duration for {handle.path}: {duration:.2f}s")
        return True
