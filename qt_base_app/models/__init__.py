"""
Models package for qt_base_app framework.
"""
from .settings_manager import SettingsManager, SettingType
from .resource_locator import ResourceLocator
from .logger import Logger

__all__ = [
    'SettingsManager',
    'SettingType',
    'ResourceLocator',
    'Logger'
]
