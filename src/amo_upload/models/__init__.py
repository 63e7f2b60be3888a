"""Data models module."""

from .lookup import Found, LookupFailed, NotFound, VersionLookup
from .version import (
    Channel,
    Compatibility,
    FileRecord,
    FileStatus,
    UploadHandle,
    Version,
    VersionFilter,
    VersionListPage,
)

__all__ = [
    "Channel",
    "Compatibility",
    "FileRecord",
    "FileStatus",
    "Found",
    "LookupFailed",
    "NotFound",
    "UploadHandle",
    "Version",
    "VersionFilter",
    "VersionListPage",
    "VersionLookup",
]
