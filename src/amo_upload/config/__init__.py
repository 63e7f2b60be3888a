"""Configuration module."""

from .constants import AMOAPI, Defaults, EnvVars
from .settings import CliConfig, Credentials, PollConfig, SignParams

__all__ = [
    "AMOAPI",
    "Defaults",
    "EnvVars",
    "CliConfig",
    "Credentials",
    "PollConfig",
    "SignParams",
]
