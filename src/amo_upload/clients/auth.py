"""JWT authenticated transport for the AMO API."""

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import jwt
import requests

from ..config.constants import Defaults
from ..config.settings import Credentials
from ..exceptions import HTTPError
from .base import BaseHTTPClient


@dataclass(frozen=True)
class AuthToken:
    """A signed bearer token and its nominal expiry (epoch seconds)."""

    value: str = field(repr=False)
    expires_at: float

    def is_expired(
        self, now: float, margin: float = Defaults.TOKEN_EXPIRY_MARGIN
    ) -> bool:
        """Treat the token as expired ``margin`` seconds early."""
        return now >= self.expires_at - margin


def create_token(
    credentials: Credentials, ttl: int = Defaults.TOKEN_TTL, now: Optional[float] = None
) -> AuthToken:
    """Sign a short-lived JWT for the AMO API.

    Args:
        credentials: API key (issuer) and secret (HMAC key).
        ttl: Token lifetime in seconds.
        now: Current epoch time (default: ``time.time()``).

    Returns:
        AuthToken with the encoded JWT.
    """
    issued_at = int(now if now is not None else time.time())
    payload = {
        "iss": credentials.key,
        "jti": uuid.uuid4().hex,
        "iat": issued_at,
        "exp": issued_at + ttl,
    }
    value = jwt.encode(payload, credentials.secret, algorithm="HS256")
    return AuthToken(value=value, expires_at=issued_at + ttl)


class AMOTransport(BaseHTTPClient):
    """Sends requests to the AMO API with a JWT Authorization header.

    The token and header map belong to this instance; use one transport
    per concurrent workflow.
    """

    def __init__(
        self,
        credentials: Credentials,
        timeout: int = Defaults.REQUEST_TIMEOUT,
        max_retries: int = 0,
        token_ttl: int = Defaults.TOKEN_TTL,
        clock: Callable[[], float] = time.time,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize the transport.

        Args:
            credentials: API credentials and prefix.
            timeout: Request timeout in seconds.
            max_retries: Transport level retries, off by default.
            token_ttl: Lifetime of each signed token in seconds.
            clock: Time source, replaceable in tests.
            logger: Optional logger.
        """
        super().__init__(timeout=timeout, max_retries=max_retries, logger=logger)
        self.credentials = credentials
        self.token_ttl = token_ttl
        self._clock = clock
        self._token: Optional[AuthToken] = None
        self._headers: dict[str, str] = {}

    @property
    def api_prefix(self) -> str:
        return self.credentials.api_prefix

    def refresh_token(self, force: bool = False) -> AuthToken:
        """Sign a new token if the current one is expired or on demand."""
        now = self._clock()
        if force or self._token is None or self._token.is_expired(now):
            self._token = create_token(self.credentials, self.token_ttl, now)
            self._headers["Authorization"] = f"JWT {self._token.value}"
            self.logger.debug("Signed new API token")
        return self._token

    def _authorized(self, headers: Optional[dict[str, str]] = None) -> dict[str, str]:
        self.refresh_token()
        return {**self._headers, **(headers or {})}

    def request(
        self,
        path: str,
        method: str = "GET",
        headers: Optional[dict[str, str]] = None,
        **kwargs: Any,
    ) -> Any:
        """Call an API path and decode its JSON body.

        Args:
            path: Path relative to the API prefix.
            method: HTTP method.
            headers: Extra headers.
            **kwargs: Passed to requests (``json=``, ``files=``, ``params=``).

        Returns:
            Decoded JSON body, or None for an empty body.

        Raises:
            RemoteError: On a non-success status, with the decoded body.
            HTTPError: On transport failures or an undecodable body.
        """
        url = self.api_prefix + path
        response = self._request(
            method, url, headers=self._authorized(headers), **kwargs
        )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise HTTPError(f"Invalid JSON response from {url}") from e

    def stream(self, url: str, timeout: Optional[int] = None) -> requests.Response:
        """Open an authenticated streaming GET on an absolute URL.

        The caller must close the returned response.
        """
        return self._request(
            "GET",
            url,
            headers=self._authorized(),
            stream=True,
            timeout=timeout or Defaults.DOWNLOAD_TIMEOUT,
        )
