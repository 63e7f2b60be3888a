"""Result of looking up a version by its version string."""

from dataclasses import dataclass
from typing import Union

from ..exceptions import AMOUploadError
from .version import Version


@dataclass(frozen=True)
class Found:
    version: Version


@dataclass(frozen=True)
class NotFound:
    pass


@dataclass(frozen=True)
class LookupFailed:
    """Any failure other than the version being absent."""

    error: AMOUploadError


VersionLookup = Union[Found, NotFound, LookupFailed]
