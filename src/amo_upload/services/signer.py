"""Signing workflow: create or update a version, wait, download."""

import time
from typing import Callable, Optional

from ..clients.amo import AMOClient
from ..clients.auth import AMOTransport
from ..config.settings import SignParams
from ..exceptions import AMOUploadError, UserInputError
from ..models.lookup import Found, LookupFailed
from ..models.version import Channel, FileRecord, Version
from ..utils.logging import get_logger
from ..utils.polling import poll

logger = get_logger("services.signer")


class SignerService:
    """Reconciles the requested version with the one on AMO.

    Running the same request twice is safe: an existing version is patched
    instead of recreated, and its source is never uploaded twice.
    """

    def __init__(
        self,
        client: AMOClient,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize signer service.

        Args:
            client: AMO client, owned by this workflow.
            sleep: Sleep function used between signed file checks.
        """
        self.client = client
        self.sleep = sleep

    def sign(self, params: SignParams) -> str:
        """Run the workflow for one addon version.

        Returns:
            The download identifier for a listed version when no output is
            requested, otherwise the local path of the signed file.

        Raises:
            UserInputError: If the version does not exist and no dist file
                was given.
            RemoteError: If the version lookup fails for a reason other than
                the version being absent.
            FatalError: If the package was rejected by the validator.
        """
        version, is_new_version = self._create_or_update(params)

        if params.output is None and params.channel is Channel.LISTED:
            if version.file is None:
                raise AMOUploadError(f"Version {version.version} has no file")
            return version.file.filename

        signed_file = self.wait_for_signed_file(params, is_new_version)
        return str(self.client.download_file(signed_file.url, params.output))

    def _create_or_update(self, params: SignParams) -> tuple[Version, bool]:
        lookup = self.client.lookup_version(params.addon_id, params.addon_version)
        if isinstance(lookup, LookupFailed):
            raise lookup.error

        if isinstance(lookup, Found):
            logger.info(f"Version {params.addon_version} exists, updating it")
            version = self.client.patch_version(
                params.addon_id,
                lookup.version,
                approval_notes=params.approval_notes,
                release_notes=params.release_notes,
                source_file=params.source_file,
                allow_override=params.override,
            )
            return version, False

        if not params.dist_file:
            raise UserInputError("Version not found, please provide dist_file")
        logger.info(f"Version {params.addon_version} not found, creating it")
        version = self.client.create_version(
            params.addon_id,
            params.channel,
            params.dist_file,
            source_file=params.source_file,
            approval_notes=params.approval_notes,
            release_notes=params.release_notes,
            compatibility=params.compatibility,
        )
        return version, True

    def wait_for_signed_file(
        self, params: SignParams, is_new_version: bool
    ) -> FileRecord:
        """Poll until the version file is signed.

        An existing version is likely processed already, so it is checked
        right away and with a smaller attempt budget.
        """
        poll_config = params.poll
        logger.info("Waiting for the signed file")
        return poll(
            lambda attempt: self.client.get_signed_file(
                params.addon_id, params.addon_version
            ),
            poll_config.interval,
            poll_config.attempts(is_new_version),
            immediate=not is_new_version,
            sleep=self.sleep,
            logger=logger,
        )


def sign_addon(
    params: SignParams,
    client: Optional[AMOClient] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """Sign an addon version and return its download identifier or path.

    Args:
        params: Signing parameters.
        client: Optional client; by default a fresh one is built from the
            credentials in ``params`` and closed afterwards.
        sleep: Sleep function used while polling.

    Returns:
        Download identifier or local file path.
    """
    if client is not None:
        return SignerService(client, sleep=sleep).sign(params)

    with AMOClient(AMOTransport(params.credentials), sleep=sleep) as own_client:
        return SignerService(own_client, sleep=sleep).sign(params)
