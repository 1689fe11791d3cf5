#!/usr/bin/env python
"""
Entry point script to run the Media Converter application.
"""
import sys
import os

# --- Add project root to path ---
project_root = os.path.abspath(os.path.dirname(__file__))
if project_root not in sys.path:
    sys.path.insert(0, project_root)
# --------------------------------

from qt_base_app.app import create_application, run_application
from media_converter.ui.converter_window import ConverterWindow
from media_converter.models.settings_defs import MEDIA_CONVERTER_DEFAULTS

# --- Define Application Info ---
ORG_NAME = "MediaConverter"
APP_NAME = "MediaConverter"


def main():
    """Main entry point for the Media Converter application."""
    config_path = os.path.join("media_converter", "resources", "media_converter_config.yaml")

    app, window = create_application(
        window_class=ConverterWindow,
        organization_name=ORG_NAME,
        application_name=APP_NAME,
        config_path=config_path,
        defaults=MEDIA_CONVERTER_DEFAULTS,
    )

    # Files passed on the command line are queued right away
    if len(sys.argv) > 1:
        window.list_view.add_parameters(window.build_parameters(sys.argv[1:]))

    return run_application(app, window)


if __name__ == "__main__":
    sys.exit(main())
