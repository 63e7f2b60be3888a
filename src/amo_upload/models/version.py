"""AMO version data models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

# Either a list of applications or a mapping of application to min/max range
Compatibility = Union[list[str], dict[str, Any]]


class Channel(str, Enum):
    """Distribution channel of a version."""

    LISTED = "listed"
    UNLISTED = "unlisted"


class FileStatus(str, Enum):
    """Review status of a version file."""

    PUBLIC = "public"
    DISABLED = "disabled"
    UNREVIEWED = "unreviewed"
    DELETED = "deleted"
    NOMINATED = "nominated"
    INCOMPLETE = "incomplete"


class VersionFilter(str, Enum):
    """Filter for the version list endpoint."""

    WITHOUT_UNLISTED = "all_without_unlisted"
    WITH_UNLISTED = "all_with_unlisted"
    WITH_DELETED = "all_with_deleted"


@dataclass
class UploadHandle:
    """Validation record of an uploaded package."""

    uuid: str
    channel: Optional[Channel] = None
    processed: bool = False
    valid: bool = False
    version: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UploadHandle":
        """Create UploadHandle from an upload API response."""
        channel = data.get("channel")
        return cls(
            uuid=data["uuid"],
            channel=Channel(channel) if channel else None,
            processed=bool(data.get("processed")),
            valid=bool(data.get("valid")),
            version=data.get("version"),
        )


@dataclass
class FileRecord:
    """File attached to a version."""

    status: FileStatus
    url: str
    id: Optional[int] = None
    hash: Optional[str] = None

    @property
    def is_signed(self) -> bool:
        return self.status is FileStatus.PUBLIC

    @property
    def filename(self) -> str:
        """Trailing path segment of the download URL."""
        return self.url.rstrip("/").rsplit("/", 1)[-1] if self.url else ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FileRecord":
        """Create FileRecord from the ``file`` object of a version."""
        return cls(
            status=FileStatus(data["status"]),
            url=data.get("url") or "",
            id=data.get("id"),
            hash=data.get("hash"),
        )


@dataclass
class Version:
    """A version of an addon on AMO."""

    id: int
    version: str
    channel: Channel
    file: Optional[FileRecord] = None
    source_present: bool = False
    approval_notes: Optional[str] = None
    release_notes: Optional[dict[str, str]] = None
    compatibility: Compatibility = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Version":
        """Create Version from a version API response.

        The API returns the source as a URL, or null when none was uploaded.
        """
        file_data = data.get("file")
        return cls(
            id=data["id"],
            version=data["version"],
            channel=Channel(data["channel"]),
            file=FileRecord.from_dict(file_data) if file_data else None,
            source_present=bool(data.get("source")),
            approval_notes=data.get("approval_notes"),
            release_notes=data.get("release_notes"),
            compatibility=data.get("compatibility") or {},
        )


@dataclass
class VersionListPage:
    """One page of the version list."""

    items: list[Version]
    total_count: int
    next_page: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VersionListPage":
        """Create VersionListPage from a paginated list response."""
        results = data.get("results") or []
        return cls(
            items=[Version.from_dict(item) for item in results],
            total_count=data.get("count", len(results)),
            next_page=data.get("next"),
        )

    def find(self, version: str) -> Optional[Version]:
        """Find a version on this page by its version string."""
        for item in self.items:
            if item.version == version:
                return item
        return None
