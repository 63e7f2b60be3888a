"""Package manifest parsers."""

from .manifest import ManifestInfo, ManifestParser

__all__ = [
    "ManifestInfo",
    "ManifestParser",
]
