"""HTTP clients module."""

from .amo import AMOClient
from .auth import AMOTransport, AuthToken, create_token
from .base import BaseHTTPClient

__all__ = [
    "AMOClient",
    "AMOTransport",
    "AuthToken",
    "BaseHTTPClient",
    "create_token",
]
