"""
Base window implementation for Qt applications.
"""
import os
from PyQt6.QtWidgets import QMainWindow, QWidget, QVBoxLayout
from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtGui import QIcon
import qtawesome as qta

from ..models.settings_manager import SettingsManager
from ..models.logger import Logger


class BaseWindow(QMainWindow):
    """
    Base window class with title, size and icon taken from the YAML config and
    window geometry remembered between runs.
    Subclasses build their content in _create_content_widgets().
    """
    def __init__(self, **kwargs):
        super().__init__()
        self.settings = SettingsManager.instance()
        self.logger = Logger.instance()

        # --- Timer for debouncing geometry saves ---
        self.geometry_save_timer = QTimer(self)
        self.geometry_save_timer.setSingleShot(True)
        self.geometry_save_timer.setInterval(500) # Wait 500ms after last resize/move
        self.geometry_save_timer.timeout.connect(self._debounce_save_geometry)
        # -------------------------------------------

        self._setup_window()
        self._setup_ui()
        self._restore_geometry()

    def _setup_window(self):
        """Set up window properties."""
        self.setWindowTitle(self.settings.get_yaml_config('app.title', 'Qt Application'))

        window_config = self.settings.get_yaml_config('app.window', {})
        self.resize(
            window_config.get('width', 900),
            window_config.get('height', 500)
        )
        self.setMinimumSize(
            window_config.get('min_width', 600),
            window_config.get('min_height', 300)
        )

        self._setup_window_icon()

    def _setup_window_icon(self):
        """Set up the window icon from file or qtawesome."""
        app_config = self.settings.get_yaml_config('app', {})
        icon_path = app_config.get('icon_path')

        if icon_path and os.path.exists(icon_path):
            self.setWindowIcon(QIcon(icon_path))
        else:
            icon_name = app_config.get('icon', 'fa5s.window-maximize')
            self.setWindowIcon(qta.icon(icon_name))

    def _setup_ui(self):
        """Create the central widget and let subclasses fill it."""
        self.central_widget = QWidget()
        self.main_layout = QVBoxLayout(self.central_widget)
        self.main_layout.setContentsMargins(6, 6, 6, 6)

        self._create_content_widgets()

        self.setCentralWidget(self.central_widget)

    def _create_content_widgets(self):
        """Override to add widgets to self.main_layout."""
        pass

    def _restore_geometry(self):
        """Restores window size and position from settings."""
        geometry_data = self.settings.get('window/geometry') # QSettings handles QByteArray
        if geometry_data:
            try:
                restored = self.restoreGeometry(geometry_data)
                if not restored:
                    self.logger.warning("BaseWindow", "Failed to restore window geometry from QByteArray.")
                else:
                    self.logger.debug("BaseWindow", "Restored window geometry.")
            except (TypeError, ValueError) as e:
                self.logger.error("BaseWindow", f"Error restoring window geometry: {e}", exc_info=True)
        else:
            self.logger.debug("BaseWindow", "No previous window geometry found in settings.")

    def _debounce_save_geometry(self):
        """Saves the window geometry after the debounce timer times out."""
        self.logger.debug("BaseWindow", "Debounce timer timed out, saving geometry...")
        self.settings.set('window/geometry', self.saveGeometry())
        self.settings.sync()

    def resizeEvent(self, event):
        """Restart debounce timer on resize."""
        super().resizeEvent(event)
        self.geometry_save_timer.start()

    def moveEvent(self, event):
        """Restart debounce timer on move."""
        super().moveEvent(event)
        if self.windowState() == Qt.WindowState.WindowNoState:
            self.geometry_save_timer.start()

    def closeEvent(self, event):
        """Ensure any pending geometry save is cancelled on close."""
        if self.geometry_save_timer.isActive():
            self.geometry_save_timer.stop()
            self.logger.debug("BaseWindow", "Stopped pending geometry save on close.")
        super().closeEvent(event)
