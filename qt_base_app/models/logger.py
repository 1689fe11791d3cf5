import logging
import sys
import re
from pathlib import Path
from typing import Optional

_fallback_logger = logging.getLogger("QtBaseAppFallback")
if not _fallback_logger.handlers:
    _fallback_handler = logging.StreamHandler(sys.stderr)
    _fallback_handler.setFormatter(logging.Formatter("[%(levelname)-5s][fallback]%(message)s"))
    _fallback_logger.addHandler(_fallback_handler)
_fallback_logger.setLevel(logging.INFO)


def _sanitize_filename(name: str) -> str:
    """Removes invalid characters for filenames."""
    sanitized = re.sub(r'[\\/*?:"<>|]', "", name)
    sanitized = sanitized.strip(". ")
    if not sanitized:
        sanitized = "app"
    return sanitized


class Logger:
    """
    Singleton class for application-wide logging.

    Reads configuration from the YAML file loaded via SettingsManager:
    - logging.level: Logging level (DEBUG, INFO, WARN, ERROR). Default: INFO.
    - logging.log_to_file: Boolean, whether to log to a file. Default: True.
    - logging.log_to_console: Boolean, whether to print logs to stdout. Default: True.
    - logging.clear_on_startup: Boolean, whether to clear the log file on app start. Default: True.
    - app.title: Used for the log filename. Default: 'Application'.

    Until configure() is called every message goes to a stderr fallback
    logger, so models can log from tests and scripts without any setup.
    """
    _instance: Optional['Logger'] = None
    _logger: Optional[logging.Logger] = None

    _log_levels = {
        'DEBUG': logging.DEBUG,
        'INFO': logging.INFO,
        'WARN': logging.WARNING,
        'WARNING': logging.WARNING,
        'ERROR': logging.ERROR
    }

    @classmethod
    def instance(cls) -> 'Logger':
        """Get the singleton instance of Logger. Configuration must be called separately."""
        if cls._instance is None:
            cls._instance = cls.__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if Logger._instance is not None and Logger._instance._initialized:
            raise RuntimeError("Use Logger.instance() to get the logger, configuration already done.")

    def configure(self):
        """Configures the logger by fetching settings from SettingsManager."""
        if self._initialized:
            return
        self._configure()
        self._initialized = True

    def _configure(self):
        """Internal method to configure logger using SettingsManager."""
        if self._logger is not None:
            return
        # Imported lazily to avoid circular imports.
        from .settings_manager import SettingsManager

        logging_config = {}
        app_config = {}
        if SettingsManager.is_initialized():
            settings = SettingsManager.instance()
            logging_config = settings.get_yaml_config('logging', default={}) or {}
            app_config = settings.get_yaml_config('app', default={}) or {}

        log_level_str = str(logging_config.get('level', 'INFO')).upper()
        log_to_file = logging_config.get('log_to_file', True)
        log_to_console = logging_config.get('log_to_console', True)
        clear_on_startup = logging_config.get('clear_on_startup', True)
        app_title = app_config.get('title', 'Application')

        log_level = self._log_levels.get(log_level_str, logging.INFO)

        logger_instance = logging.getLogger(app_title)
        logger_instance.setLevel(log_level)
        logger_instance.propagate = False

        for handler in logger_instance.handlers[:]:
            logger_instance.removeHandler(handler)

        file_formatter = logging.Formatter('[%(asctime)s-%(levelname)-5s][%(caller)s]%(message)s',
                                           datefmt='%Y-%m-%d %H:%M:%S')
        console_formatter = logging.Formatter('[%(levelname)-5s][%(caller)s]%(message)s')

        if log_to_file:
            if getattr(sys, 'frozen', False):
                log_dir = Path(sys.executable).parent
            else:
                log_dir = Path.cwd()
            log_file_path = log_dir / f"{_sanitize_filename(app_title)}.log"
            try:
                file_handler = logging.FileHandler(log_file_path, mode='w' if clear_on_startup else 'a', encoding='utf-8')
                file_handler.setLevel(log_level)
                file_handler.setFormatter(file_formatter)
                logger_instance.addHandler(file_handler)
                logger_instance.info(f"Logging to file: {log_file_path}", extra={'caller': 'logger'})
            except OSError as e:
                _fallback_logger.error(f"Error setting up file logger: {e}")

        if log_to_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(log_level)
            console_handler.setFormatter(console_formatter)
            logger_instance.addHandler(console_handler)

        self._logger = logger_instance

    # --- Public Logging Methods ---

    def debug(self, caller: str, msg: str, *args, **kwargs):
        """Logs a DEBUG message, prepended with the caller name."""
        if not self._initialized or self._logger is None:
            _fallback_logger.debug(f"[{caller}] {msg}", *args, **kwargs)
            return
        self._logger.debug(msg, *args, extra={'caller': caller}, **kwargs)

    def info(self, caller: str, msg: str, *args, **kwargs):
        """Logs an INFO message, prepended with the caller name."""
        if not self._initialized or self._logger is None:
            _fallback_logger.info(f"[{caller}] {msg}", *args, **kwargs)
            return
        self._logger.info(msg, *args, extra={'caller': caller}, **kwargs)

    def warning(self, caller: str, msg: str, *args, **kwargs):
        """Logs a WARNING message (as WARN), prepended with the caller name."""
        if not self._initialized or self._logger is None:
            _fallback_logger.warning(f"[{caller}] {msg}", *args, **kwargs)
            return
        self._logger.warning(msg, *args, extra={'caller': caller}, **kwargs)

    def error(self, caller: str, msg: str, *args, exc_info=False, **kwargs):
        """Logs an ERROR message, prepended with the caller name."""
        if not self._initialized or self._logger is None:
            _fallback_logger.error(f"[{caller}] {msg}", *args, exc_info=exc_info, **kwargs)
            return
        self._logger.error(msg, *args, exc_info=exc_info, extra={'caller': caller}, **kwargs)
