"""Pytest configuration and shared fixtures for autoupdater tests."""

import io

import pytest
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from autoupdater.updater.exceptions import BackendError
from autoupdater.updater.release import Release, ReleaseAsset


# Test constants
TEST_OWNER = "example-org"
TEST_REPO = "example-tool"
TEST_ASSET = "example-tool-linux"


class StubBackend:
    """Release backend serving fixed pages and recording requests."""

    def __init__(
        self,
        pages: Sequence[List[Release]],
        fail_on_page: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.pages = list(pages)
        self.fail_on_page = fail_on_page
        self.headers = headers or {}
        self.requests: List[tuple] = []

    def fetch_page(self, page: int, per_page: int) -> List[Release]:
        self.requests.append((page, per_page))
        if page == self.fail_on_page:
            raise BackendError(f"page {page} failed")
        if page - 1 < len(self.pages):
            return list(self.pages[page - 1])
        return []

    def auth_headers(self) -> Dict[str, str]:
        return dict(self.headers)


def build_release(
    tag: str,
    branch: str = "main",
    prerelease: bool = False,
    assets: Sequence[str] = (TEST_ASSET,),
    name: Optional[str] = None,
) -> Release:
    """Create a Release with assets named after the given strings."""
    return Release(
        tag=tag,
        branch=branch,
        display_name=name if name is not None else f"Release {tag}",
        is_prerelease=prerelease,
        assets=tuple(
            ReleaseAsset(
                name=asset,
                download_url=f"https://api.github.com/repos/{TEST_OWNER}/{TEST_REPO}/releases/assets/{i}",
            )
            for i, asset in enumerate(assets)
        ),
        body=f"Notes for {tag}",
    )


@pytest.fixture
def make_release() -> Callable[..., Release]:
    """Factory for Release objects."""
    return build_release


@pytest.fixture
def stub_backend() -> Callable[..., StubBackend]:
    """Factory for StubBackend instances."""
    return StubBackend


@pytest.fixture
def fake_executable(tmp_path: Path) -> Path:
    """Create a mock installed executable for replacement tests."""
    exe_dir = tmp_path / "bin"
    exe_dir.mkdir()
    exe = exe_dir / "example-tool"
    exe.write_bytes(b"#!old binary\n" + b"\x00" * 64)
    exe.chmod(0o755)
    return exe


@pytest.fixture
def downloaded_binary(tmp_path: Path) -> Path:
    """Create a mock downloaded binary without execute permission."""
    dl_dir = tmp_path / f"{TEST_ASSET}_dlabc123"
    dl_dir.mkdir()
    binary = dl_dir / TEST_ASSET
    binary.write_bytes(b"#!new binary\n" + b"\x01" * 128)
    binary.chmod(0o644)
    return binary


@pytest.fixture
def temp_settings_file(tmp_path: Path) -> Path:
    """Provide a temporary settings file path for testing."""
    return tmp_path / "settings.json"


class RecordingAdapter(BaseAdapter):
    """Transport adapter answering every request with a fixed body.

    Records the keyword arguments requests hands to the transport so
    tests can check the merged TLS settings.
    """

    def __init__(self, body: bytes = b"payload"):
        super().__init__()
        self.body = body
        self.sent: List[dict] = []

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        self.sent.append({"url": request.url, "verify": verify, "stream": stream})
        response = requests.Response()
        response.status_code = 200
        response.headers = CaseInsensitiveDict({"content-length": str(len(self.body))})
        response.raw = io.BytesIO(self.body)
        response.url = request.url
        response.request = request
        return response

    def close(self):
        pass


@pytest.fixture
def mount_recorder() -> Callable[[requests.Session], RecordingAdapter]:
    """Factory mounting a RecordingAdapter on a real requests session."""
    def mount(session: requests.Session) -> RecordingAdapter:
        adapter = RecordingAdapter()
        # Keep REQUESTS_CA_BUNDLE and friends out of the merged settings
        session.trust_env = False
        session.mount("https://", adapter)
        return adapter
    return mount
