"""
Media Converter: a queue of FFmpeg conversion jobs run one at a time.
"""
__version__ = "0.1.0"
