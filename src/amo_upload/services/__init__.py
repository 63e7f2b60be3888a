"""Business services module."""

from .signer import SignerService, sign_addon

__all__ = [
    "SignerService",
    "sign_addon",
]
