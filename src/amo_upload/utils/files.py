"""Local file helpers for uploads and downloads."""

from pathlib import Path
from typing import Optional, Union
from urllib.parse import unquote, urlsplit

from ..config.constants import Defaults
from ..exceptions import UserInputError


def to_upload_part(path: Union[str, Path]) -> tuple[str, bytes]:
    """Read a file into a multipart part named after its base name.

    The whole file is read into memory; AMO limits package size anyway.

    Args:
        path: Local file path.

    Returns:
        ``(filename, content)`` tuple as accepted by requests ``files=``.

    Raises:
        UserInputError: If the file cannot be read.
    """
    path = Path(path)
    try:
        return path.name, path.read_bytes()
    except OSError as e:
        raise UserInputError(f"Cannot read file {path}: {e}") from e


def url_basename(url: str) -> str:
    """Last path segment of a URL, or a fallback name."""
    name = unquote(urlsplit(url).path.rsplit("/", 1)[-1])
    return name or Defaults.FALLBACK_FILENAME


def resolve_output_path(
    url: str, output: Optional[Union[str, Path]] = None
) -> Path:
    """Resolve where a downloaded file should be written.

    Args:
        url: Download URL.
        output: Target file or existing directory. Defaults to the URL's
            base name in the current directory.

    Returns:
        Destination path.
    """
    filename = url_basename(url)
    if output is None or str(output) == "":
        return Path(filename)
    output = Path(output)
    if output.is_dir():
        return output / filename
    return output
