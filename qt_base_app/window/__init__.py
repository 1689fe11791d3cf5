from .base_window import BaseWindow

__all__ = ['BaseWindow']
