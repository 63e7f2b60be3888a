"""Utility functions module."""

from .files import resolve_output_path, to_upload_part, url_basename
from .logging import get_logger, setup_logging
from .polling import poll

__all__ = [
    "get_logger",
    "poll",
    "resolve_output_path",
    "setup_logging",
    "to_upload_part",
    "url_basename",
]
