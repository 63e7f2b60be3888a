"""Base HTTP client with timeout support and error wrapping."""

import logging
from abc import ABC
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..exceptions import HTTPError, RemoteError
from ..utils.logging import get_logger


class BaseHTTPClient(ABC):
    """Base HTTP client owning one requests session."""

    def __init__(
        self,
        timeout: int = 30,
        max_retries: int = 0,
        backoff_factor: float = 0.5,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize HTTP client.

        Args:
            timeout: Request timeout in seconds.
            max_retries: Retries for idempotent requests on 429/5xx.
                Zero leaves all retrying to the caller.
            backoff_factor: Backoff factor for retry delays.
            logger: Optional logger (default: ``amo_upload.clients``).
        """
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self.logger = logger or get_logger("clients")
        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        """Create a session with retry strategy."""
        session = requests.Session()

        retry_strategy = Retry(
            total=self.max_retries,
            backoff_factor=self.backoff_factor,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["HEAD", "GET"],
            raise_on_status=False,
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        return session

    def _request(
        self,
        method: str,
        url: str,
        headers: Optional[dict[str, str]] = None,
        **kwargs: Any,
    ) -> requests.Response:
        """Execute HTTP request with error handling.

        Args:
            method: HTTP method (GET, POST, PATCH, etc.).
            url: Request URL.
            headers: Optional request headers.
            **kwargs: Additional arguments passed to requests.

        Returns:
            Response object with a 2xx status.

        Raises:
            RemoteError: If the server answers with a non-success status.
            HTTPError: If the request cannot be completed.
        """
        kwargs.setdefault("timeout", self.timeout)
        try:
            response = self.session.request(
                method=method,
                url=url,
                headers=headers,
                **kwargs,
            )
        except requests.exceptions.Timeout:
            self.logger.error(f"Request timeout: {method} {url}")
            raise HTTPError(f"Request timeout: {url}") from None
        except requests.exceptions.ConnectionError as e:
            self.logger.error(f"Connection error: {method} {url} - {e}")
            raise HTTPError(f"Connection error: {url}") from e
        except requests.exceptions.RequestException as e:
            self.logger.error(f"Request failed: {method} {url} - {e}")
            raise HTTPError(f"Request failed: {url}") from e

        if not response.ok:
            error = RemoteError(
                response.status_code, self._decode_error_body(response), response
            )
            # 404 is an expected answer for version lookups
            level = logging.DEBUG if error.is_not_found else logging.ERROR
            self.logger.log(level, f"HTTP {error.status}: {method} {url}")
            if kwargs.get("stream"):
                response.close()
            raise error

        return response

    @staticmethod
    def _decode_error_body(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None

    def close(self) -> None:
        """Close the session."""
        self.session.close()

    def __enter__(self) -> "BaseHTTPClient":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
