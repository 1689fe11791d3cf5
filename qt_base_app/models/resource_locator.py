# qt_base_app/models/resource_locator.py
import sys
import os

from .logger import Logger


class ResourceLocator:
    """
    Locates resource files both when running from source and when running
    as a bundled application (PyInstaller).
    """

    @staticmethod
    def get_path(relative_path: str) -> str:
        """
        Get the absolute path to a resource file.

        Args:
            relative_path: The path to the resource relative to the
                           application root (source) or the bundle root (_MEIPASS).

        Returns:
            The absolute path to the resource.
        """
        base_path = getattr(sys, '_MEIPASS', None)
        if base_path is None:
            # Running from source: resources are relative to the launching script
            base_path = os.path.abspath(os.path.dirname(sys.argv[0])) if sys.argv and sys.argv[0] else ""
            if not os.path.isdir(base_path):
                base_path = os.path.abspath(".")

        resource_abs_path = os.path.normpath(os.path.join(base_path, relative_path))
        Logger.instance().debug("ResourceLocator", f"Resolved '{relative_path}' to: {resource_abs_path}")
        return resource_abs_path
