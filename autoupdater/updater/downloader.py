"""Asset downloader for autoupdater.

Streams a release asset into a fresh temporary directory, reporting
fractional progress as chunks arrive.
"""

import shutil
import tempfile
from pathlib import Path
from typing import Callable, Dict, Optional

import requests
from requests.structures import CaseInsensitiveDict

from autoupdater.updater.exceptions import (
    DownloadError,
    FilesystemError,
    HttpStatusError,
)
from autoupdater.updater.release import ReleaseAsset
from autoupdater.utils.logging import get_logger

logger = get_logger("downloader")


USER_AGENT = "python-requests/autoupdater"
CHUNK_SIZE = 8192

# Request timeout in seconds
REQUEST_TIMEOUT = 30

# Progress callback type, receives a fraction in [0.0, 1.0]
ProgressCallback = Callable[[float], None]


def progress_fraction(downloaded: int, total_size: int) -> float:
    """Fraction of the download completed, 0.0 when the size is unknown."""
    if total_size <= 0:
        return 0.0
    return min(downloaded / total_size, 1.0)


class AssetDownloader:
    """Downloads release assets to temporary files."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: int = REQUEST_TIMEOUT,
        ca_bundle: Optional[str] = None,
    ):
        """
        Initialize the downloader.

        Args:
            session: HTTP session to reuse (a new one is created otherwise)
            timeout: Connect/read timeout in seconds
            ca_bundle: Optional CA bundle for TLS verification. Without one
                the session's own verify setting applies.
        """
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._timeout = timeout
        self._verify = ca_bundle or None

    def _build_headers(self, headers: Optional[Dict[str, str]]) -> CaseInsensitiveDict:
        """Caller headers first, then the fixed headers which always win."""
        merged = CaseInsensitiveDict(headers or {})
        merged["User-Agent"] = USER_AGENT
        merged["Accept"] = "application/octet-stream"
        return merged

    def download(
        self,
        asset: ReleaseAsset,
        headers: Optional[Dict[str, str]] = None,
        progress_callback: Optional[ProgressCallback] = None
    ) -> Path:
        """
        Download an asset to a new temporary directory.

        Args:
            asset: Asset to download
            headers: Extra request headers, e.g. authorization
            progress_callback: Optional callback receiving the completed
                fraction after every chunk, and a final 1.0

        Returns:
            Path of the downloaded file. The caller owns the file and its
            temporary directory.

        Raises:
            HttpStatusError: If the response status is not 200
            DownloadError: On network/transport errors
            FilesystemError: If the temporary file cannot be written
        """
        logger.info(f"Downloading asset: {asset.name}")

        try:
            tmp_dir = Path(tempfile.mkdtemp(prefix=f"{asset.name}_dl"))
        except OSError as e:
            raise FilesystemError("create temporary directory", None, e)

        target = tmp_dir / asset.name
        try:
            self._stream_to_file(asset, target, headers, progress_callback)
        except Exception as e:
            # Clean up partial download
            logger.error(f"Download failed: {e}")
            shutil.rmtree(tmp_dir, ignore_errors=True)
            raise

        logger.info(f"Downloaded {asset.name} to {target}")
        return target

    def _stream_to_file(
        self,
        asset: ReleaseAsset,
        target: Path,
        headers: Optional[Dict[str, str]],
        progress_callback: Optional[ProgressCallback]
    ) -> None:
        try:
            response = self._session.get(
                asset.download_url,
                headers=self._build_headers(headers),
                stream=True,
                timeout=self._timeout,
                verify=self._verify,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Download request failed: {e}")
            raise DownloadError(asset.name, e)

        with response:
            if response.status_code != 200:
                logger.error(
                    f"Download of {asset.name} failed with HTTP {response.status_code}"
                )
                raise HttpStatusError(response.status_code, asset.download_url)

            try:
                total_size = int(response.headers.get("content-length", 0))
            except (TypeError, ValueError):
                total_size = 0

            downloaded = 0
            try:
                with open(target, "wb") as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if not chunk:
                            continue
                        f.write(chunk)
                        downloaded += len(chunk)
                        if progress_callback:
                            progress_callback(progress_fraction(downloaded, total_size))
            except requests.exceptions.RequestException as e:
                logger.error(f"Download of {asset.name} interrupted: {e}")
                raise DownloadError(asset.name, e)
            except OSError as e:
                raise FilesystemError("write download", target, e)

        if progress_callback:
            progress_callback(1.0)

        logger.debug(f"Wrote {downloaded} bytes (expected {total_size or 'unknown'})")

    def close(self) -> None:
        """Close the HTTP session if this downloader created it."""
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "AssetDownloader":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
