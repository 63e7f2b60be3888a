"""Pytest fixtures for amo-upload tests."""

import copy
import json
import logging
import tempfile
import zipfile
from pathlib import Path
from typing import Any, Callable, Optional

import pytest

from amo_upload.clients.amo import AMOClient
from amo_upload.config.constants import AMOAPI
from amo_upload.config.settings import Credentials
from amo_upload.exceptions import RemoteError
from amo_upload.utils.logging import ROOT_LOGGER

ADDON_ID = "addon@example.com"
UPLOAD_UUID = "5b1e9a3c0f2d4e7a"


def make_version_data(
    version: str = "1.0.0",
    id: int = 100,
    channel: str = "listed",
    status: str = "unreviewed",
    source: Optional[str] = None,
    approval_notes: str = "",
    release_notes: Optional[dict[str, str]] = None,
    compatibility: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Build a version payload as returned by the AMO API."""
    return {
        "id": id,
        "version": version,
        "channel": channel,
        "source": source,
        "approval_notes": approval_notes,
        "release_notes": release_notes or {},
        "compatibility": compatibility
        if compatibility is not None
        else {"firefox": {"min": "109.0", "max": "*"}},
        "file": {
            "id": id * 10,
            "status": status,
            "url": f"https://addons.example.com/firefox/downloads/file/{id * 10}/addon-{version}.xpi",
            "hash": "sha256:abc",
        },
    }


class FakeResponse:
    """Streaming response stand-in."""

    def __init__(self, chunks: list[Any]):
        self._chunks = chunks
        self.closed = False

    def iter_content(self, chunk_size: int = 8192):
        for chunk in self._chunks:
            if isinstance(chunk, Exception):
                raise chunk
            yield chunk

    def close(self) -> None:
        self.closed = True


class FakeTransport:
    """In-memory AMO server behind the transport interface.

    Attributes:
        versions: Version payloads by version string.
        upload_statuses: Successive answers of the upload status endpoint;
            the last one repeats.
        upload_version: Version string of the package being uploaded.
        sign_after_gets: Number of version GETs after which the file of
            that version turns public, or None to never sign it.
        lookup_error: Error raised by every version GET, if set.
        calls: Every request as ``(method, path, kwargs)``.
    """

    def __init__(self):
        self.versions: dict[str, dict[str, Any]] = {}
        self.upload_statuses: list[dict[str, Any]] = [
            {"uuid": UPLOAD_UUID, "processed": True, "valid": True}
        ]
        self.upload_version = "1.0.0"
        self.sign_after_gets: Optional[int] = None
        self.lookup_error: Optional[Exception] = None
        self.download_chunks: list[Any] = [b"signed-", b"content"]
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self.streamed: list[str] = []
        self._gets: dict[str, int] = {}
        self._next_id = 100
        self.closed = False

    def add_version(self, **kwargs: Any) -> dict[str, Any]:
        data = make_version_data(**kwargs)
        self.versions[data["version"]] = data
        return data

    def calls_for(self, method: str, path: Optional[str] = None) -> list[dict[str, Any]]:
        return [
            kwargs
            for call_method, call_path, kwargs in self.calls
            if call_method == method and (path is None or call_path == path)
        ]

    def request(self, path: str, method: str = "GET", headers=None, **kwargs: Any) -> Any:
        self.calls.append((method, path, kwargs))
        versions_path = AMOAPI.versions(ADDON_ID)

        if path == AMOAPI.upload():
            return {
                "uuid": UPLOAD_UUID,
                "channel": kwargs["data"]["channel"],
                "processed": False,
                "valid": False,
            }
        if path == AMOAPI.upload_detail(UPLOAD_UUID):
            status = (
                self.upload_statuses.pop(0)
                if len(self.upload_statuses) > 1
                else self.upload_statuses[0]
            )
            return {"uuid": UPLOAD_UUID, **status}
        if path == versions_path and method == "POST":
            return self._create(kwargs["json"])
        if path == versions_path:
            results = list(self.versions.values())
            return {"count": len(results), "next": None, "results": results}
        if path.startswith(versions_path):
            key = path[len(versions_path):].strip("/")
            if method == "GET":
                return self._get(key)
            if method == "PATCH":
                return self._patch(key, kwargs)
        raise AssertionError(f"Unexpected request {method} {path}")

    def stream(self, url: str, timeout=None) -> FakeResponse:
        self.streamed.append(url)
        return FakeResponse(self.download_chunks)

    def close(self) -> None:
        self.closed = True

    def _create(self, payload: dict[str, Any]) -> dict[str, Any]:
        self._next_id += 1
        data = make_version_data(
            version=self.upload_version,
            id=self._next_id,
            approval_notes=payload.get("approval_notes", ""),
            release_notes=payload.get("release_notes"),
        )
        self.versions[data["version"]] = data
        return copy.deepcopy(data)

    def _get(self, version: str) -> dict[str, Any]:
        if self.lookup_error is not None:
            raise self.lookup_error
        if version not in self.versions:
            raise RemoteError(404, {"detail": "Not found."})
        count = self._gets[version] = self._gets.get(version, 0) + 1
        data = self.versions[version]
        if self.sign_after_gets is not None and count >= self.sign_after_gets:
            data["file"]["status"] = "public"
        return copy.deepcopy(data)

    def _patch(self, version_id: str, kwargs: dict[str, Any]) -> dict[str, Any]:
        data = next(v for v in self.versions.values() if str(v["id"]) == version_id)
        data.update(kwargs.get("json") or {})
        if "source" in (kwargs.get("files") or {}):
            filename = kwargs["files"]["source"][0]
            data["source"] = f"https://addons.example.com/source/{filename}"
        return copy.deepcopy(data)


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers installed by setup_logging during a test."""
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(
        key="user:12345:67",
        secret="3f1c6e0b9a8d47f2b5c4e1d0a9f8e7c6b5a4d3c2e1f0a9b8c7d6e5f4a3b2c1d0",
        api_prefix="https://addons.example.com",
    )


@pytest.fixture
def sample_manifest_json() -> dict[str, Any]:
    """Return sample manifest.json data."""
    return {
        "manifest_version": 2,
        "name": "Test Addon",
        "version": "1.0.0",
        "browser_specific_settings": {
            "gecko": {"id": ADDON_ID, "strict_min_version": "109.0"}
        },
    }


@pytest.fixture
def dist_file(temp_dir, sample_manifest_json) -> Path:
    """A packaged addon with a manifest.json."""
    path = temp_dir / "addon-1.0.0.zip"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("manifest.json", json.dumps(sample_manifest_json))
        zf.writestr("background.js", "console.log('hello');")
    return path


@pytest.fixture
def source_file(temp_dir) -> Path:
    path = temp_dir / "source.zip"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("src/background.ts", "console.log('hello');")
    return path


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def sleeps() -> list[float]:
    """Recorded sleep durations."""
    return []


@pytest.fixture
def client(transport, sleeps) -> AMOClient:
    return AMOClient(transport, sleep=sleeps.append)


@pytest.fixture
def version_data() -> Callable[..., dict[str, Any]]:
    return make_version_data
