"""Streaming download of the remote bundle archive."""

import http.client
import logging
from pathlib import Path
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from bundlestrap import __version__, console
from bundlestrap.errors import NetworkError
from bundlestrap.models import BootstrapConfig
from bundlestrap.progress import DownloadIndicator

log = logging.getLogger(__name__)

USER_AGENT = f"bundlestrap/{__version__}"


class ArchiveFetcher:
    """Download an archive into the staging directory without buffering it in memory."""

    def __init__(self, config: BootstrapConfig, indicator: DownloadIndicator | None = None) -> None:
        self._config = config
        self._indicator = indicator

    def fetch(self, url: str | None = None) -> Path:
        """Stream ``url`` (default: the configured URL) to the archive path.

        Only ``fetch_retries`` extra attempts are made, and only when
        configured; the default is a single attempt.
        """
        url = url or self._config.download_url
        destination = self._config.archive_path
        attempts = self._config.fetch_retries + 1

        console.info("Connecting to server...")
        attempt = 1
        while True:
            try:
                written = self._fetch_once(url, destination)
                break
            except NetworkError as e:
                if attempt >= attempts:
                    raise
                log.warning("download attempt %d/%d failed: %s", attempt, attempts, e)
                attempt += 1
        console.success("Download complete.")
        log.debug("wrote %d bytes from %s to %s", written, url, destination)
        return destination

    def _fetch_once(self, url: str, destination: Path) -> int:
        request = Request(url, headers={"User-Agent": USER_AGENT})
        try:
            response = urlopen(request, timeout=self._config.fetch_timeout)
        except HTTPError as e:
            e.close()
            raise NetworkError(f"Server returned HTTP {e.code} for {url}") from e
        except URLError as e:
            raise NetworkError(f"Unable to reach {url}: {e.reason}") from e
        except (TimeoutError, OSError, http.client.HTTPException) as e:
            raise NetworkError(f"Unable to reach {url}: {e}") from e

        with response:
            status = response.status
            if status < 200 or status >= 300:
                raise NetworkError(f"Server returned HTTP {status} for {url}")
            return self._stream_to_file(response, url, destination)

    def _stream_to_file(self, response, url: str, destination: Path) -> int:
        indicator = self._indicator if self._indicator is not None else DownloadIndicator()
        written = 0
        try:
            with indicator, open(destination, "wb") as f:
                while True:
                    chunk: bytes = response.read(self._config.chunk_size)
                    if len(chunk) == 0:
                        break
                    f.write(chunk)
                    written += len(chunk)
                    indicator.advance(len(chunk))
        except (OSError, http.client.HTTPException) as e:
            raise NetworkError(f"Download of {url} failed after {written} bytes: {e}") from e
        return written
