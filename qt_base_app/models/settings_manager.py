"""
Settings manager module for handling application settings.

Wraps QSettings to provide:
- Type-safe storage and retrieval
- Default values registered by the application
- Support for lists, dicts, datetimes and paths
- Read-only access to a YAML configuration file
- Singleton access
"""

from typing import Any, Dict, Optional, Union, Type
from enum import Enum
import json
import yaml
from datetime import datetime
from pathlib import Path
from PyQt6.QtCore import QSettings
import sys


class SettingType(Enum):
    """Enumeration of supported setting types"""
    STRING = str
    INT = int
    FLOAT = float
    BOOL = bool
    LIST = list
    DICT = dict
    DATETIME = datetime
    PATH = Path


class SettingsManager:
    """
    A singleton class to manage application settings with type safety.

    Persistent settings live in QSettings; static configuration (window
    size, logging) comes from a YAML file loaded with load_yaml_config().

    Example usage:
        SettingsManager.initialize('MediaConverter', 'MediaConverter')
        settings = SettingsManager.instance()

        settings.set('converter/output_format', 'mkv', SettingType.STRING)
        timeout = settings.get('converter/probe_timeout_ms', 30000, SettingType.INT)
        level = settings.get_yaml_config('logging.level', 'INFO')
    """

    _instance = None
    _organization_name = None
    _application_name = None

    @classmethod
    def initialize(cls, organization_name: str, application_name: str):
        """Initialize the SettingsManager singleton with application-specific names."""
        if cls._instance is not None:
            print("[SettingsManager WARN] Already initialized.", file=sys.stderr)
            return

        if not organization_name or not application_name:
            raise ValueError("Organization and Application names must be provided for SettingsManager initialization.")

        cls._organization_name = organization_name
        cls._application_name = application_name
        cls._instance = cls(QSettings(organization_name, application_name))
        print(f"[SettingsManager] Initialized for Org: '{organization_name}', App: '{application_name}'")

    @classmethod
    def instance(cls) -> 'SettingsManager':
        """Get the singleton instance of SettingsManager. Must call initialize() first."""
        if cls._instance is None:
            raise RuntimeError("SettingsManager must be initialized using initialize(org, app) before accessing the instance.")
        return cls._instance

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._instance is not None

    def __init__(self, qsettings: QSettings):
        """Use initialize() and instance() instead of constructing directly."""
        self._settings = qsettings
        self._yaml_config: Dict[str, Any] = {}
        self._defaults: Dict[str, tuple] = {}

        self._type_converters = {
            SettingType.STRING: str,
            SettingType.INT: int,
            SettingType.FLOAT: float,
            SettingType.BOOL: bool,
            SettingType.LIST: self._convert_list,
            SettingType.DICT: self._convert_dict,
            SettingType.DATETIME: self._convert_datetime,
            SettingType.PATH: Path
        }

    def set_defaults(self, defaults: Dict[str, tuple]):
        """
        Register default values, writing those not yet stored.

        Args:
            defaults: Mapping of key -> (default value, SettingType)
        """
        self._defaults.update(defaults)
        for key, (default_value, setting_type) in defaults.items():
            if not self.contains(key):
                self.set(key, default_value, setting_type)

    def reset_to_defaults(self):
        """Reset all registered settings to their default values."""
        for key, (default_value, setting_type) in self._defaults.items():
            self.set(key, default_value, setting_type)

    def _get_setting_type_enum(self, setting_type: Union[SettingType, Type, None]) -> Optional[SettingType]:
        """Helper to get the SettingType enum from various inputs."""
        if setting_type is None or isinstance(setting_type, SettingType):
            return setting_type
        try:
            return SettingType(setting_type)
        except ValueError:
            return None

    def get_setting_type(self, key: str) -> Optional[SettingType]:
        """Get the registered type of a setting by its key"""
        return self._get_setting_type_enum(self._defaults.get(key, (None, None))[1])

    def set(self, key: str, value: Any, setting_type: Optional[Union[SettingType, Type]] = None) -> None:
        """
        Set a persistent setting value with type validation.

        Args:
            key: The setting key (can be hierarchical, e.g., 'converter/output_format')
            value: The value to store
            setting_type: Optional type validation (SettingType enum or Python type)

        Raises:
            ValueError: If value cannot be converted to setting_type
        """
        st_enum = self._get_setting_type_enum(setting_type)
        if st_enum:
            try:
                value = self._type_converters[st_enum](value)
            except (ValueError, TypeError) as e:
                raise ValueError(f"Invalid value type for {key}. Expected {st_enum}, got {type(value)}") from e

        if isinstance(value, (list, dict, datetime, Path)):
            value = self._serialize_value(value)

        # Booleans are stored as ints for consistent round-trips across backends
        if isinstance(value, bool):
            value = 1 if value else 0

        self._settings.setValue(key, value)

    def get(self, key: str, default: Any = None, setting_type: Optional[Union[SettingType, Type]] = None) -> Any:
        """
        Get a persistent setting value with type conversion.

        Args:
            key: The setting key
            default: Default value if setting doesn't exist
            setting_type: Optional type to convert the value to

        Returns:
            The setting value converted to the specified type, or the default value
        """
        st_enum = self._get_setting_type_enum(setting_type)
        value = self._settings.value(key, default)

        if value is None:
            return default

        if st_enum == SettingType.BOOL:
            if isinstance(value, str):
                return value.lower() in ('true', '1', 'yes', 'y', 'on')
            return bool(value)

        if st_enum == SettingType.PATH:
            path_obj = Path(value)
            if not path_obj.is_dir():
                print(f"[SettingsManager WARNING] Path setting '{key}' is not an existing directory: {path_obj}", file=sys.stderr)
                return None
            return path_obj

        if st_enum is None:
            return value

        if isinstance(value, str) and st_enum in (SettingType.LIST, SettingType.DICT, SettingType.DATETIME):
            try:
                value = self._deserialize_value(value, st_enum)
            except (json.JSONDecodeError, ValueError) as e:
                print(f"[SettingsManager WARN] Error deserializing setting '{key}' for type {st_enum}: {e}", file=sys.stderr)
                return default

        try:
            return self._type_converters[st_enum](value)
        except (ValueError, TypeError) as e:
            print(f"[SettingsManager WARN] Error converting setting '{key}' to type {st_enum}: {e}", file=sys.stderr)
            return default

    def contains(self, key: str) -> bool:
        """Check if a setting exists"""
        return self._settings.contains(key)

    def sync(self) -> None:
        """Sync settings to storage"""
        self._settings.sync()

    def _serialize_value(self, value: Any) -> str:
        """Serialize complex types to string"""
        if isinstance(value, (list, dict)):
            return json.dumps(value)
        elif isinstance(value, datetime):
            return value.isoformat()
        elif isinstance(value, Path):
            return str(value)
        return value

    def _deserialize_value(self, value: str, setting_type: SettingType) -> Any:
        """Deserialize string to complex type"""
        if setting_type in (SettingType.LIST, SettingType.DICT):
            return json.loads(value)
        elif setting_type == SettingType.DATETIME:
            return datetime.fromisoformat(value)
        return value

    def _convert_list(self, value: Union[str, list]) -> list:
        if isinstance(value, str):
            return json.loads(value)
        return list(value)

    def _convert_dict(self, value: Union[str, dict]) -> dict:
        if isinstance(value, str):
            return json.loads(value)
        return dict(value)

    def _convert_datetime(self, value: Union[str, datetime]) -> datetime:
        if isinstance(value, str):
            return datetime.fromisoformat(value)
        return value

    # --- YAML config loading and access ---
    def load_yaml_config(self, config_path: Union[str, Path]):
        """Loads configuration from a YAML file into the manager."""
        config_path = Path(config_path)
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                self._yaml_config = yaml.safe_load(f) or {}
                print(f"[SettingsManager] Loaded YAML config from: {config_path}")
        except FileNotFoundError:
            print(f"[SettingsManager WARN] YAML config file not found at {config_path}. Using empty config.", file=sys.stderr)
            self._yaml_config = {}
        except yaml.YAMLError as e:
            print(f"[SettingsManager ERROR] Error parsing YAML config file {config_path}: {e}", file=sys.stderr)
            self._yaml_config = {}
        except OSError as e:
            print(f"[SettingsManager ERROR] Error loading YAML config {config_path}: {e}", file=sys.stderr)
            self._yaml_config = {}

    def get_yaml_config(self, key_path: str, default: Any = None) -> Any:
        """
        Retrieves a value from the loaded YAML configuration using a dot-separated key path.

        Args:
            key_path: Dot-separated path (e.g., 'app.window.width', 'logging.level').
            default: Default value to return if the key path is not found.

        Returns:
            The value found at the key path, or the default value.
        """
        value = self._yaml_config
        for key in key_path.split('.'):
            if not isinstance(value, dict) or key not in value:
                return default
            value = value[key]
        return value
