"""Constants and API endpoints for amo-upload."""

from urllib.parse import quote


class AMOAPI:
    """AMO API v5 endpoints, relative to the API prefix."""

    DEFAULT_PREFIX = "https://addons.mozilla.org"
    VERSION = "v5"

    @staticmethod
    def upload() -> str:
        """Get package upload endpoint."""
        return f"/api/{AMOAPI.VERSION}/addons/upload/"

    @staticmethod
    def upload_detail(uuid: str) -> str:
        """Get upload status endpoint."""
        return f"{AMOAPI.upload()}{quote(uuid, safe='')}/"

    @staticmethod
    def versions(addon_id: str) -> str:
        """Get version list/create endpoint."""
        return f"/api/{AMOAPI.VERSION}/addons/addon/{quote(addon_id, safe='')}/versions/"

    @staticmethod
    def version_detail(addon_id: str, version: str) -> str:
        """Get version detail endpoint, by version id or version string."""
        return f"{AMOAPI.versions(addon_id)}{quote(str(version), safe='')}/"


class Defaults:
    """Default tuning values."""

    TOKEN_TTL = 60
    # Tokens are refreshed this many seconds before they really expire
    TOKEN_EXPIRY_MARGIN = 10

    REQUEST_TIMEOUT = 30
    DOWNLOAD_TIMEOUT = 120
    CHUNK_SIZE = 8192

    UPLOAD_POLL_INTERVAL = 5
    UPLOAD_POLL_RETRY = 24

    POLL_INTERVAL = 30
    POLL_RETRY = 4
    POLL_RETRY_EXISTING = 1

    PAGE = 1
    PAGE_SIZE = 25

    RELEASE_NOTES_LOCALE = "en-US"
    FALLBACK_FILENAME = "noname"


class EnvVars:
    """Environment variables read by the command line."""

    API_KEY = "AMO_KEY"
    API_SECRET = "AMO_SECRET"
    API_PREFIX = "AMO_URL_PREFIX"
    ADDON_ID = "AMO_ADDON_ID"
