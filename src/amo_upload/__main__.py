"""Command-line interface for amo-upload."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .clients.amo import AMOClient
from .clients.auth import AMOTransport
from .config.constants import Defaults, EnvVars
from .config.settings import (
    CliConfig,
    SignParams,
    parse_channel,
    parse_compatibility,
    parse_filter,
)
from .exceptions import AMOUploadError
from .parsers.manifest import ManifestParser
from .reporting import print_versions
from .services.signer import sign_addon
from .utils.logging import setup_logging

logger = logging.getLogger("amo_upload")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="amo-upload",
        description="CLI to communicate with AMO server",
    )
    parser.add_argument("--version", action="version", version=__version__)

    # Global options
    parser.add_argument(
        "--api-key",
        type=str,
        default=None,
        help=f"API key from AMO (env: {EnvVars.API_KEY})",
    )
    parser.add_argument(
        "--api-secret",
        type=str,
        default=None,
        help=f"API secret from AMO (env: {EnvVars.API_SECRET})",
    )
    parser.add_argument(
        "--api-url-prefix",
        type=str,
        default=None,
        help="The API URL prefix, https://addons.mozilla.org if unspecified "
        f"(env: {EnvVars.API_PREFIX})",
    )
    parser.add_argument(
        "--addon-id",
        type=str,
        default=None,
        help=f"Addon UUID which can be found in AMO (env: {EnvVars.ADDON_ID})",
    )
    parser.add_argument(
        "--log_level",
        "--log-level",
        dest="log_level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    sign = subparsers.add_parser(
        "sign",
        help="Upload a new version for signing and download the signed file",
        description="Upload a new version for signing, check the status and "
        "download the signed file. This command could be run multiple times "
        "to check the status, and the version will not be uploaded repeatedly.",
    )
    sign.add_argument(
        "--addon-version",
        type=str,
        default=None,
        help="The version to create or query (default: read from --dist-file)",
    )
    sign.add_argument(
        "--channel",
        type=str,
        default="listed",
        help='The version channel, either "listed" or "unlisted" (default: listed)',
    )
    sign.add_argument(
        "--dist-file",
        type=Path,
        default=None,
        help="The dist file to upload, should be a zip file",
    )
    sign.add_argument(
        "--source-file",
        type=Path,
        default=None,
        help="The source file to upload, should be a zip file",
    )
    sign.add_argument(
        "--approval-notes",
        type=str,
        default=None,
        help="The information for Mozilla reviewers",
    )
    sign.add_argument(
        "--release-notes",
        type=str,
        default=None,
        help="The release notes for this version",
    )
    sign.add_argument(
        "--compatibility",
        type=str,
        default=None,
        help='The compatibility info as a JSON string, e.g. \'["android","firefox"]\'',
    )
    sign.add_argument(
        "--override",
        action="store_true",
        help="Replace the notes of an existing version if they differ",
    )
    sign.add_argument(
        "--output",
        type=Path,
        default=None,
        help="The file path or directory to save the signed XPI file",
    )
    sign.add_argument(
        "--poll-interval",
        type=float,
        default=Defaults.POLL_INTERVAL,
        help=f"Seconds between signed file checks (default: {Defaults.POLL_INTERVAL})",
    )
    sign.add_argument(
        "--poll-retry",
        type=int,
        default=Defaults.POLL_RETRY,
        help=f"Checks for a new version (default: {Defaults.POLL_RETRY})",
    )
    sign.add_argument(
        "--poll-retry-existing",
        type=int,
        default=Defaults.POLL_RETRY_EXISTING,
        help="Checks for an existing version "
        f"(default: {Defaults.POLL_RETRY_EXISTING})",
    )
    sign.set_defaults(handler=run_sign)

    listing = subparsers.add_parser("list", help="List remote versions")
    listing.add_argument(
        "--filter",
        type=str,
        default=None,
        help="One of all_without_unlisted, all_with_unlisted and all_with_deleted",
    )
    listing.add_argument(
        "-p",
        "--page",
        type=int,
        default=Defaults.PAGE,
        help=f"Page number to query (default: {Defaults.PAGE})",
    )
    listing.add_argument(
        "--page-size",
        type=int,
        default=Defaults.PAGE_SIZE,
        help=f"Page size to query (default: {Defaults.PAGE_SIZE})",
    )
    listing.set_defaults(handler=run_list)

    return parser.parse_args(argv)


def build_sign_params(args: argparse.Namespace, config: CliConfig) -> SignParams:
    """Turn the sign command options into signing parameters.

    The addon id and version fall back to the dist file's manifest.
    """
    addon_id = config.addon_id
    addon_version = args.addon_version
    if (not addon_id or not addon_version) and args.dist_file:
        info = ManifestParser().read(args.dist_file)
        addon_id = addon_id or info.id
        addon_version = addon_version or info.version

    config.require(
        "api_key", "api_secret", addon_id=addon_id, addon_version=addon_version
    )

    release_notes = None
    if args.release_notes:
        release_notes = {Defaults.RELEASE_NOTES_LOCALE: args.release_notes}

    return SignParams(
        api_key=config.api_key or "",
        api_secret=config.api_secret or "",
        api_prefix=config.api_prefix,
        addon_id=addon_id or "",
        addon_version=addon_version or "",
        channel=parse_channel(args.channel),
        dist_file=args.dist_file,
        source_file=args.source_file,
        approval_notes=args.approval_notes,
        release_notes=release_notes,
        compatibility=parse_compatibility(args.compatibility),
        override=args.override,
        output=args.output,
        poll_interval=args.poll_interval,
        poll_retry=args.poll_retry,
        poll_retry_existing=args.poll_retry_existing,
    )


def run_sign(args: argparse.Namespace) -> int:
    """Handle the sign command."""
    params = build_sign_params(args, CliConfig.from_args(args))
    print(sign_addon(params))
    return 0


def run_list(args: argparse.Namespace) -> int:
    """Handle the list command."""
    config = CliConfig.from_args(args)
    config.require("api_key", "api_secret", "addon_id")
    version_filter = parse_filter(args.filter)

    with AMOClient(AMOTransport(config.credentials)) as client:
        page = client.list_versions(
            config.addon_id or "",
            page=args.page,
            page_size=args.page_size,
            filter=version_filter,
        )
    print_versions(page, args.page, args.page_size)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    log_level = getattr(logging, args.log_level.upper())
    setup_logging(level=log_level)

    try:
        return args.handler(args)
    except AMOUploadError as e:
        logger.error(str(e))
        return 1
    except Exception:
        logger.exception("Unexpected error")
        return 1


if __name__ == "__main__":
    sys.exit(main())
