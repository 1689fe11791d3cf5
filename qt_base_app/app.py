"""
Main entry point for Qt base applications.
"""
import sys
from typing import Dict, Optional, Type, Tuple

from PyQt6.QtWidgets import QApplication, QWidget

from .window.base_window import BaseWindow
from .models.resource_locator import ResourceLocator
from .models.settings_manager import SettingsManager
from .models.logger import Logger


def create_application(
    window_class: Type[QWidget] = BaseWindow,
    organization_name: str = "QtBaseApp",
    application_name: str = "QtBaseApp",
    config_path: Optional[str] = None,
    defaults: Optional[Dict[str, tuple]] = None,
    **window_kwargs
) -> Tuple[QApplication, QWidget]:
    """
    Create and configure the application and main window.

    Order matters: settings and the YAML config are loaded first so the
    logger and the window can read them.

    Args:
        window_class: Class to instantiate for the main window (default: BaseWindow)
        organization_name: Organization name for QSettings
        application_name: Application name for QSettings
        config_path: Optional path to the YAML configuration file, relative to the app root
        defaults: Persistent setting defaults, key -> (value, SettingType)
        **window_kwargs: Additional keyword arguments to pass to window_class constructor

    Returns:
        tuple: (QApplication instance, window instance)
    """
    app = QApplication.instance() or QApplication(sys.argv)
    app.setOrganizationName(organization_name)
    app.setApplicationName(application_name)

    SettingsManager.initialize(organization_name, application_name)
    settings = SettingsManager.instance()

    if config_path:
        settings.load_yaml_config(ResourceLocator.get_path(config_path))

    Logger.instance().configure()

    if defaults:
        try:
            settings.set_defaults(defaults)
        except ValueError as e:
            Logger.instance().error("app", f"Failed to set application defaults: {e}")

    window = window_class(**window_kwargs)
    app.setWindowIcon(window.windowIcon())

    return app, window


def run_application(app: QApplication, window: QWidget) -> int:
    """
    Run the application.

    Args:
        app: QApplication instance
        window: Main window instance

    Returns:
        int: Application exit code
    """
    window.show()
    return app.exec()
