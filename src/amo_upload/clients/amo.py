"""AMO add-on version client."""

import logging
from pathlib import Path
from typing import Any, Callable, Optional, Union

from ..config.constants import AMOAPI, Defaults
from ..config.settings import Credentials
from ..exceptions import (
    AMOUploadError,
    DownloadError,
    FatalError,
    NotSignedError,
    ProcessingError,
    RemoteError,
)
from ..models.lookup import Found, LookupFailed, NotFound, VersionLookup
from ..models.version import (
    Channel,
    Compatibility,
    FileRecord,
    UploadHandle,
    Version,
    VersionFilter,
    VersionListPage,
)
from ..utils.files import resolve_output_path, to_upload_part
from ..utils.logging import get_logger
from ..utils.polling import poll
from .auth import AMOTransport

PathLike = Union[str, Path]


class AMOClient:
    """Client for creating, updating and fetching versions of an addon."""

    def __init__(
        self,
        transport: AMOTransport,
        sleep: Optional[Callable[[float], None]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize AMO client.

        Args:
            transport: Authenticated transport, not shared with other clients.
            sleep: Sleep function used while polling (default: time.sleep).
            logger: Optional logger (default: ``amo_upload.clients.amo``).
        """
        self.transport = transport
        self.logger = logger or get_logger("clients.amo")
        self._poll_kwargs: dict[str, Any] = {"logger": self.logger}
        if sleep is not None:
            self._poll_kwargs["sleep"] = sleep

    @classmethod
    def from_credentials(
        cls,
        api_key: str,
        api_secret: str,
        api_prefix: Optional[str] = None,
        **kwargs: Any,
    ) -> "AMOClient":
        """Build a client with its own transport.

        Raises:
            ConfigError: If the key or secret is empty.
        """
        credentials = Credentials(
            key=api_key,
            secret=api_secret,
            api_prefix=api_prefix or AMOAPI.DEFAULT_PREFIX,
        )
        logger = kwargs.get("logger")
        return cls(AMOTransport(credentials, logger=logger), **kwargs)

    def upload_file(self, dist_file: PathLike, channel: Channel) -> str:
        """Upload a package and wait until the validator accepts it.

        Args:
            dist_file: Package to upload.
            channel: Target channel.

        Returns:
            The upload uuid, to be referenced when creating the version.

        Raises:
            FatalError: If the package is rejected, or is still unprocessed
                once the poll budget is spent. An upload cannot be resumed
                later, so both cases are terminal.
        """
        self.logger.info(f"Uploading {dist_file} to the {channel.value} channel")
        data = self.transport.request(
            AMOAPI.upload(),
            method="POST",
            files={"upload": to_upload_part(dist_file)},
            data={"channel": channel.value},
        )
        uuid = UploadHandle.from_dict(data).uuid

        def check(attempt: int) -> UploadHandle:
            handle = UploadHandle.from_dict(
                self.transport.request(AMOAPI.upload_detail(uuid))
            )
            if not handle.processed:
                raise ProcessingError(
                    "The uploaded file is still being processed by the validator"
                )
            if not handle.valid:
                raise FatalError(
                    "The uploaded file is not valid and rejected by the validator"
                )
            return handle

        self.logger.info("Waiting for the validation result")
        try:
            poll(
                check,
                Defaults.UPLOAD_POLL_INTERVAL,
                Defaults.UPLOAD_POLL_RETRY,
                **self._poll_kwargs,
            )
        except ProcessingError as e:
            raise FatalError(str(e)) from e

        self.logger.info(f"Upload {uuid} validated")
        return uuid

    def create_version(
        self,
        addon_id: str,
        channel: Channel,
        dist_file: PathLike,
        source_file: Optional[PathLike] = None,
        approval_notes: Optional[str] = None,
        release_notes: Optional[dict[str, str]] = None,
        compatibility: Optional[Compatibility] = None,
    ) -> Version:
        """Upload a package and create a new version from it."""
        upload_uuid = self.upload_file(dist_file, channel)

        payload: dict[str, Any] = {"upload": upload_uuid}
        if approval_notes is not None:
            payload["approval_notes"] = approval_notes
        if release_notes is not None:
            payload["release_notes"] = release_notes
        if compatibility is not None:
            payload["compatibility"] = compatibility

        self.logger.info(f"Creating version of {addon_id}")
        version = Version.from_dict(
            self.transport.request(
                AMOAPI.versions(addon_id), method="POST", json=payload
            )
        )
        self.logger.info(f"Created version {version.version} (id {version.id})")

        if source_file:
            version = self.attach_source(addon_id, version, source_file)
        return version

    def attach_source(
        self, addon_id: str, version: Version, source_file: PathLike
    ) -> Version:
        """Upload the source archive unless the version already has one."""
        if version.source_present:
            self.logger.info("Source is already uploaded, skipping")
            return version

        self.logger.info(f"Uploading source {source_file}")
        version = Version.from_dict(
            self.transport.request(
                AMOAPI.version_detail(addon_id, str(version.id)),
                method="PATCH",
                files={"source": to_upload_part(source_file)},
            )
        )
        self.logger.info("Source uploaded")
        return version

    def patch_version(
        self,
        addon_id: str,
        version: Version,
        approval_notes: Optional[str] = None,
        release_notes: Optional[dict[str, str]] = None,
        source_file: Optional[PathLike] = None,
        allow_override: bool = False,
    ) -> Version:
        """Update notes and source of an existing version.

        Notes are only sent when given, different from the current value
        and ``allow_override`` is set. Nothing is sent when no field changes.
        """
        updates: dict[str, Any] = {}
        if (
            allow_override
            and approval_notes is not None
            and approval_notes != version.approval_notes
        ):
            updates["approval_notes"] = approval_notes
        if (
            allow_override
            and release_notes is not None
            and release_notes != version.release_notes
        ):
            updates["release_notes"] = release_notes

        if not updates:
            self.logger.info("No update found, skipping patch")
        else:
            self.logger.info(
                f"Updating {', '.join(sorted(updates))} of version {version.id}"
            )
            version = Version.from_dict(
                self.transport.request(
                    AMOAPI.version_detail(addon_id, str(version.id)),
                    method="PATCH",
                    json=updates,
                )
            )

        if source_file:
            version = self.attach_source(addon_id, version, source_file)
        return version

    def get_version(self, addon_id: str, version: str) -> Version:
        """Fetch a version by its version string.

        Raises:
            RemoteError: With status 404 if the version does not exist.
        """
        return Version.from_dict(
            self.transport.request(AMOAPI.version_detail(addon_id, version))
        )

    def lookup_version(self, addon_id: str, version: str) -> VersionLookup:
        """Fetch a version, reporting absence as a value."""
        try:
            return Found(self.get_version(addon_id, version))
        except RemoteError as e:
            if e.is_not_found:
                return NotFound()
            return LookupFailed(e)
        except AMOUploadError as e:
            return LookupFailed(e)

    def list_versions(
        self,
        addon_id: str,
        page: int = Defaults.PAGE,
        page_size: int = Defaults.PAGE_SIZE,
        filter: Optional[VersionFilter] = None,
    ) -> VersionListPage:
        """List versions of an addon, one page at a time."""
        params: dict[str, Any] = {"page": page, "page_size": page_size}
        if filter is not None:
            params["filter"] = filter.value
        return VersionListPage.from_dict(
            self.transport.request(AMOAPI.versions(addon_id), params=params)
        )

    def get_signed_file(self, addon_id: str, version: str) -> FileRecord:
        """Fetch the signed file of a version.

        Raises:
            NotSignedError: If the file is missing or not public yet.
        """
        file = self.get_version(addon_id, version).file
        if file is None or not file.is_signed:
            raise NotSignedError("The file has not been signed yet")
        return file

    def download_file(self, url: str, output: Optional[PathLike] = None) -> Path:
        """Stream a signed file to disk.

        Args:
            url: Absolute download URL.
            output: Target file or directory (default: current directory).

        Returns:
            Path of the written file.

        Raises:
            DownloadError: If the transfer fails; no partial file is left.
        """
        target = resolve_output_path(url, output)
        self.logger.info(f"Downloading {url} to {target}")
        try:
            response = self.transport.stream(url)
        except AMOUploadError as e:
            raise DownloadError(f"Download failed: {url}", url=url) from e

        try:
            with open(target, "wb") as f:
                for chunk in response.iter_content(chunk_size=Defaults.CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
        except Exception as e:
            # Clean up partial file
            if target.exists():
                target.unlink()
            raise DownloadError(f"Download failed: {url}", url=url) from e
        finally:
            response.close()

        self.logger.info(f"Downloaded: {target}")
        return target

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> "AMOClient":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
