"""Submit addon versions to addons.mozilla.org for signing."""

__version__ = "0.1.0"

from .clients.amo import AMOClient
from .config.settings import Credentials, SignParams
from .exceptions import (
    AMOUploadError,
    FatalError,
    RemoteError,
    UserInputError,
)
from .models.version import Channel, VersionFilter
from .services.signer import sign_addon

__all__ = [
    "AMOClient",
    "AMOUploadError",
    "Channel",
    "Credentials",
    "FatalError",
    "RemoteError",
    "SignParams",
    "UserInputError",
    "VersionFilter",
    "sign_addon",
]
