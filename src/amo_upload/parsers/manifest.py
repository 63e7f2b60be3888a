"""manifest.json reader for WebExtension packages."""

import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

import commentjson as json

from ..exceptions import ManifestError
from ..utils.logging import get_logger

logger = get_logger("parsers.manifest")

MANIFEST_NAME = "manifest.json"


@dataclass
class ManifestInfo:
    """Identity of a packaged addon."""

    id: Optional[str] = None
    version: Optional[str] = None
    name: Optional[str] = None


class ManifestParser:
    """Reads manifest.json from a packaged addon or an unpacked directory.

    Manifests may contain comments, so they are decoded with commentjson.
    """

    def parse(self, addon_path: Union[str, Path]) -> dict[str, Any]:
        """Load the raw manifest.

        Args:
            addon_path: Path to a zip/XPI package or a directory.

        Returns:
            Manifest data.

        Raises:
            ManifestError: If the manifest is missing or malformed.
        """
        addon_path = Path(addon_path)

        try:
            if zipfile.is_zipfile(addon_path):
                with zipfile.ZipFile(addon_path, "r") as zf:
                    if MANIFEST_NAME not in zf.namelist():
                        raise ManifestError(f"No {MANIFEST_NAME} in {addon_path}")
                    content = zf.read(MANIFEST_NAME).decode("utf-8")
            elif addon_path.is_dir():
                manifest_path = addon_path / MANIFEST_NAME
                if not manifest_path.exists():
                    raise ManifestError(f"No {MANIFEST_NAME} in {addon_path}")
                content = manifest_path.read_text(encoding="utf-8")
            else:
                raise ManifestError(f"Not a package or directory: {addon_path}")
            data = json.loads(content)
        except ManifestError:
            raise
        except Exception as e:
            raise ManifestError(
                f"Failed to parse {MANIFEST_NAME} from {addon_path}: {e}"
            ) from e

        if not isinstance(data, dict):
            raise ManifestError(f"Invalid {MANIFEST_NAME} in {addon_path}")
        return data

    def extract_info(self, manifest: dict[str, Any]) -> ManifestInfo:
        """Pick the addon id, version and name out of a manifest."""
        info = ManifestInfo(
            version=manifest.get("version"),
            name=manifest.get("name"),
        )
        for location in ("browser_specific_settings", "applications"):
            try:
                info.id = manifest[location]["gecko"]["id"]
                break
            except (KeyError, TypeError):
                continue
        return info

    def read(self, addon_path: Union[str, Path]) -> ManifestInfo:
        """Parse a package and return its identity."""
        info = self.extract_info(self.parse(addon_path))
        logger.debug(f"Read manifest of {addon_path}: {info}")
        return info
