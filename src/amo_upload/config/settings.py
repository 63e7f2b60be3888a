"""Configuration settings for amo-upload."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from ..exceptions import ConfigError, UserInputError
from ..models.version import Channel, Compatibility, VersionFilter
from .constants import AMOAPI, Defaults, EnvVars


@dataclass(frozen=True)
class Credentials:
    """AMO API credentials.

    The secret is kept out of ``repr`` so it never ends up in logs.
    """

    key: str
    secret: str = field(repr=False)
    api_prefix: str = AMOAPI.DEFAULT_PREFIX

    def __post_init__(self) -> None:
        if not self.key or not self.secret:
            raise ConfigError("api_key and api_secret are required")
        prefix = (self.api_prefix or AMOAPI.DEFAULT_PREFIX).rstrip("/")
        object.__setattr__(self, "api_prefix", prefix)


@dataclass(frozen=True)
class PollConfig:
    """Polling configuration for the signed file."""

    interval: float = Defaults.POLL_INTERVAL
    retry: int = Defaults.POLL_RETRY
    retry_existing: int = Defaults.POLL_RETRY_EXISTING

    def attempts(self, is_new_version: bool) -> int:
        """Attempt budget for a new or an already existing version."""
        return self.retry if is_new_version else self.retry_existing


@dataclass(frozen=True)
class SignParams:
    """Everything needed to sign one version of an addon."""

    api_key: str
    api_secret: str = field(repr=False)
    addon_id: str
    addon_version: str
    api_prefix: Optional[str] = None
    channel: Channel = Channel.LISTED
    dist_file: Optional[Path] = None
    source_file: Optional[Path] = None
    approval_notes: Optional[str] = None
    release_notes: Optional[dict[str, str]] = None
    compatibility: Optional[Compatibility] = None
    override: bool = False
    output: Optional[Path] = None
    poll_interval: float = Defaults.POLL_INTERVAL
    poll_retry: int = Defaults.POLL_RETRY
    poll_retry_existing: int = Defaults.POLL_RETRY_EXISTING

    def __post_init__(self) -> None:
        object.__setattr__(self, "channel", parse_channel(self.channel))

    @property
    def credentials(self) -> Credentials:
        return Credentials(
            key=self.api_key,
            secret=self.api_secret,
            api_prefix=self.api_prefix or AMOAPI.DEFAULT_PREFIX,
        )

    @property
    def poll(self) -> PollConfig:
        return PollConfig(
            interval=self.poll_interval,
            retry=self.poll_retry,
            retry_existing=self.poll_retry_existing,
        )


@dataclass(frozen=True)
class CliConfig:
    """Options shared by all commands, after environment fallbacks.

    Explicit command line flags always win over environment variables.
    """

    api_key: Optional[str] = None
    api_secret: Optional[str] = field(default=None, repr=False)
    api_prefix: Optional[str] = None
    addon_id: Optional[str] = None

    @classmethod
    def from_args(
        cls, args: Any, environ: Optional[Mapping[str, str]] = None
    ) -> "CliConfig":
        """Create configuration from argparse namespace and environment.

        Args:
            args: Parsed command line arguments.
            environ: Environment mapping (default: os.environ).

        Returns:
            CliConfig instance.
        """
        if environ is None:
            environ = os.environ
        return cls(
            api_key=args.api_key or environ.get(EnvVars.API_KEY),
            api_secret=args.api_secret or environ.get(EnvVars.API_SECRET),
            api_prefix=args.api_url_prefix or environ.get(EnvVars.API_PREFIX),
            addon_id=args.addon_id or environ.get(EnvVars.ADDON_ID),
        )

    def require(self, *names: str, **extra: Any) -> None:
        """Fail with every missing option named at once.

        Args:
            *names: Attribute names of this config that must be set.
            **extra: Additional values that must be set, by option name.

        Raises:
            UserInputError: If any value is missing.
        """
        values = {name: getattr(self, name) for name in names}
        values.update(extra)
        missing = [name for name, value in values.items() if not value]
        if missing:
            raise UserInputError(
                "The following options are missing but required: "
                + ", ".join(missing)
            )

    @property
    def credentials(self) -> Credentials:
        self.require("api_key", "api_secret")
        return Credentials(
            key=self.api_key or "",
            secret=self.api_secret or "",
            api_prefix=self.api_prefix or AMOAPI.DEFAULT_PREFIX,
        )


def parse_channel(value: Union[str, Channel]) -> Channel:
    """Parse a channel name, raising UserInputError on unknown values."""
    try:
        return Channel(value)
    except ValueError:
        raise UserInputError(
            f'Invalid channel "{value}", expected "listed" or "unlisted"'
        ) from None


def parse_filter(value: Optional[str]) -> Optional[VersionFilter]:
    """Parse a version list filter."""
    if not value:
        return None
    try:
        return VersionFilter(value)
    except ValueError:
        choices = ", ".join(f.value for f in VersionFilter)
        raise UserInputError(
            f'Invalid filter "{value}", expected one of: {choices}'
        ) from None


def parse_compatibility(value: Optional[str]) -> Optional[Compatibility]:
    """Parse compatibility info given as a JSON string.

    Accepts either a list of applications, e.g. ``["android","firefox"]``,
    or a mapping of application to ``{"min": ..., "max": ...}``.
    """
    if not value:
        return None
    try:
        data = json.loads(value)
    except ValueError as e:
        raise UserInputError(f"Invalid compatibility JSON: {e}") from e
    if not isinstance(data, (list, dict)):
        raise UserInputError("Compatibility must be a JSON list or object")
    return data
