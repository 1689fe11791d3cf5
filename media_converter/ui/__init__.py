"""
Widgets of the Media Converter application.
"""
from .convert_list_view import ConvertListView
from .converter_window import ConverterWindow

__all__ = [
    'ConvertListView',
    'ConverterWindow',
]
