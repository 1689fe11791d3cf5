"""
Runs media conversions with FFmpeg in a background thread, one at a time.
"""
import os
import subprocess
import threading
from pathlib import Path
from typing import Dict, List, Optional

from PyQt6.QtCore import QObject, QRunnable, QThreadPool, pyqtSignal

from qt_base_app.models.logger import Logger

from .conversion_parameters import ConversionParameters
from .ffmpeg_utils import (
    build_conversion_command,
    build_probe_command,
    creation_flags,
    parse_duration,
    parse_ffmpeg_error,
    parse_progress_line,
)

EXIT_LAUNCH_FAILED = -1
EXIT_CANCELLED = -2


class MediaConverter(QObject):
    """
    Converter interface consumed by the conversion queue.

    After start() it emits progress_refreshed zero or more times and then
    exactly one finished(exit_code), 0 meaning success. stop() requests a
    halt without waiting for it; a finished signal may or may not follow.
    """
    progress_refreshed = pyqtSignal(int)  # percentage 0..100
    finished = pyqtSignal(int)  # exit code

    def start(self, params: ConversionParameters):
        raise NotImplementedError

    def stop(self):
        raise NotImplementedError


class ConversionWorkerSignals(QObject):
    """Signals emitted by the ConversionWorker."""
    worker_progress = pyqtSignal(int, int)  # token, percentage
    worker_finished = pyqtSignal(int, int)  # token, exit_code


class ConversionWorker(QRunnable):
    """Worker to perform a single FFmpeg conversion in a separate thread."""

    def __init__(self, token: int, params: ConversionParameters,
                 ffmpeg_path: str = "ffmpeg", ffprobe_path: str = "ffprobe"):
        super().__init__()
        self.token = token
        self.params = params
        self.ffmpeg_path = ffmpeg_path
        self.ffprobe_path = ffprobe_path
        self.signals = ConversionWorkerSignals()
        self.process: Optional[subprocess.Popen] = None
        self.is_cancelled = False
        self.total_duration_ms: Optional[float] = None
        self.last_progress = -1
        self._stderr_lines: List[str] = []
        self._finish_emitted = False

    def run(self):
        """Execute the FFmpeg conversion process."""
        try:
            exit_code = self._convert()
        except Exception as e:
            Logger.instance().error(caller="ConversionWorker",
                                    msg=f"Critical execution error for {self.params.source_name}: {e}", exc_info=True)
            exit_code = EXIT_LAUNCH_FAILED
        finally:
            self._terminate_process()
        self._emit_finished(exit_code)

    def cancel(self):
        """Request cancellation and terminate the running FFmpeg process."""
        Logger.instance().debug(caller="ConversionWorker", msg=f"Cancel requested for {self.params.source_name}")
        self.is_cancelled = True
        self._terminate_process()

    def _convert(self) -> int:
        if self.is_cancelled:
            return EXIT_CANCELLED
        self.total_duration_ms = self._get_media_duration_ms()
        if self.is_cancelled:
            return EXIT_CANCELLED

        try:
            Path(self.params.destination).parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            Logger.instance().error(caller="ConversionWorker", msg=f"Cannot create output directory for {self.params.destination}: {e}")
            return EXIT_LAUNCH_FAILED

        command = build_conversion_command(self.params, self.ffmpeg_path)
        Logger.instance().debug(caller="ConversionWorker", msg=f"Starting FFmpeg: {' '.join(command)}")
        try:
            self.process = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding='utf-8', errors='replace',
                bufsize=1,
                creationflags=creation_flags()
            )
        except OSError as e:
            Logger.instance().error(caller="ConversionWorker", msg=f"Failed to launch {self.ffmpeg_path}: {e}")
            return EXIT_LAUNCH_FAILED

        if self.is_cancelled:
            self._terminate_process()

        stderr_thread = threading.Thread(target=self._read_stderr, args=(self.process.stderr,), daemon=True)
        stderr_thread.start()

        for line in iter(self.process.stdout.readline, ''):
            if self.is_cancelled:
                break
            percent = parse_progress_line(line, self.total_duration_ms)
            if percent is not None and percent != self.last_progress:
                self.last_progress = percent
                self.signals.worker_progress.emit(self.token, percent)

        if self.is_cancelled:
            self._terminate_process()

        return_code = self.process.wait()
        stderr_thread.join(timeout=5)

        if self.is_cancelled:
            Logger.instance().info(caller="ConversionWorker", msg=f"Conversion cancelled: {self.params.source_name}")
            return EXIT_CANCELLED
        if return_code != 0:
            error_msg = parse_ffmpeg_error("\n".join(self._stderr_lines), return_code)
            Logger.instance().warning(caller="ConversionWorker", msg=f"{self.params.source_name}: {error_msg}")
        return return_code

    def _get_media_duration_ms(self) -> Optional[float]:
        """Uses ffprobe to get the media duration in milliseconds."""
        command = build_probe_command(self.params.source, self.ffprobe_path)
        try:
            result = subprocess.run(command, capture_output=True, text=True, timeout=15,
                                    encoding='utf-8', errors='replace', creationflags=creation_flags())
        except (subprocess.TimeoutExpired, OSError) as e:
            Logger.instance().warning(caller="ConversionWorker", msg=f"Could not determine duration of {self.params.source_name}: {e}")
            return None
        if result.returncode != 0:
            return None
        duration = parse_duration(result.stdout)
        return duration * 1000 if duration else None

    def _read_stderr(self, pipe):
        """Collects stderr lines so a failure can be explained in the log."""
        try:
            for line in iter(pipe.readline, ''):
                stripped = line.strip()
                if stripped:
                    self._stderr_lines.append(stripped)
                    del self._stderr_lines[:-50]
        except (OSError, ValueError) as e:
            Logger.instance().debug(caller="ConversionWorker", msg=f"stderr reader stopped: {e}")

    def _terminate_process(self):
        process = self.process
        if process is None or process.poll() is not None:
            return
        try:
            process.terminate()
            try:
                process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                process.kill()
        except OSError as e:
            Logger.instance().warning(caller="ConversionWorker", msg=f"Error terminating FFmpeg: {e}")

    def _emit_finished(self, exit_code: int):
        if self._finish_emitted:
            return
        self._finish_emitted = True
        self.signals.worker_finished.emit(self.token, exit_code)


class FFmpegMediaConverter(MediaConverter):
    """
    MediaConverter running each conversion as a ConversionWorker on a
    single-thread pool.

    Every start() gets a new token. Signals from a worker whose token is no
    longer active (stopped or superseded) are dropped, so a cancelled job
    never reports into the task that replaced it.
    """

    def __init__(self, parent=None, ffmpeg_path: str = "ffmpeg", ffprobe_path: str = "ffprobe"):
        super().__init__(parent)
        self.ffmpeg_path = ffmpeg_path
        self.ffprobe_path = ffprobe_path
        self.thread_pool = QThreadPool()
        self.thread_pool.setMaxThreadCount(1)
        self._next_token = 0
        self._active_token: Optional[int] = None
        self._workers: Dict[int, ConversionWorker] = {}
        self.logger = Logger.instance()

    def start(self, params: ConversionParameters):
        if self._active_token is not None:
            self.logger.warning(self.__class__.__name__, "Conversion already running; stopping it before starting a new one.")
            self.stop()

        self._next_token += 1
        token = self._next_token
        worker = ConversionWorker(token, params, self.ffmpeg_path, self.ffprobe_path)
        worker.signals.worker_progress.connect(self._on_worker_progress)
        worker.signals.worker_finished.connect(self._on_worker_finished)

        self._workers[token] = worker
        self._active_token = token
        self.logger.info(self.__class__.__name__, f"Starting conversion #{token}: {params.source} -> {params.destination}")
        self.thread_pool.start(worker)

    def stop(self):
        token = self._active_token
        self._active_token = None
        if token is None:
            return
        worker = self._workers.get(token)
        if worker is not None:
            self.logger.info(self.__class__.__name__, f"Stopping conversion #{token}")
            # cancel() may block on process teardown; keep it off the caller's thread
            threading.Thread(target=worker.cancel, daemon=True).start()

    def is_running(self) -> bool:
        return self._active_token is not None

    def wait_for_done(self, timeout_ms: int = -1) -> bool:
        """Blocks until all workers have returned. Used on shutdown."""
        return self.thread_pool.waitForDone(timeout_ms)

    def _on_worker_progress(self, token: int, percent: int):
        if token != self._active_token:
            return
        self.progress_refreshed.emit(percent)

    def _on_worker_finished(self, token: int, exit_code: int):
        self._workers.pop(token, None)
        if token != self._active_token:
            self.logger.debug(self.__class__.__name__, f"Dropping finish of stale conversion #{token} (code {exit_code})")
            return
        self._active_token = None
        self.finished.emit(exit_code)
