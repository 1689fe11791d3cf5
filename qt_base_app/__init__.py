"""
Reusable PyQt6 application shell: settings, logging, resources and a base window.
"""
