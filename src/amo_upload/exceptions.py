"""Custom exceptions for the AMO upload client."""

from typing import Any, Optional


class AMOUploadError(Exception):
    """Base exception for all amo-upload errors."""

    pass


class ConfigError(AMOUploadError):
    """Configuration error."""

    pass


class UserInputError(AMOUploadError):
    """Required input is missing or unusable."""

    pass


class HTTPError(AMOUploadError):
    """HTTP request error."""

    pass


class RemoteError(HTTPError):
    """The AMO server answered with a non-success status.

    Attributes:
        status: HTTP status code.
        body: Decoded JSON body, or None if the body was not JSON.
        response: The raw response object.
    """

    def __init__(self, status: int, body: Any = None, response: Any = None):
        self.status = status
        self.body = body
        self.response = response
        url = getattr(response, "url", None) or "unknown url"
        super().__init__(f"HTTP {status} from {url}: {body!r}")

    @property
    def is_not_found(self) -> bool:
        return self.status == 404


class FatalError(AMOUploadError):
    """Non-retryable failure, polling stops on the first one."""

    pass


class ProcessingError(AMOUploadError):
    """The uploaded file is still being processed by the validator."""

    pass


class NotSignedError(AMOUploadError):
    """The version file has not been signed yet."""

    pass


class PollingSkippedError(AMOUploadError):
    """Polling was requested with no attempts."""

    pass


class DownloadError(AMOUploadError):
    """File download error."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class ManifestError(AMOUploadError):
    """Package manifest parsing error."""

    pass
