"""HTTP fetcher for crate archives.

Downloads ``{base_url}/{name}/{name}-{version}.crate`` (the static.crates.io
layout) into a spooled temporary file and hands it back rewound, so the
extractor can read it as an ordinary seekable stream.
"""

from __future__ import annotations

import logging
import tempfile
from typing import BinaryIO

import httpx

from cratevault.transport.base import TransportError

logger = logging.getLogger(__name__)

DEFAULT_DOWNLOAD_URL = "https://static.crates.io/crates"
DEFAULT_USER_AGENT = "cratevault (+https://crates.io/policies)"

# Archives larger than this spill from memory to disk.
_SPOOL_MAX_BYTES = 8 * 1024 * 1024


class HttpFetcher:
    """Fetches crate archives over HTTP(S) with httpx.

    Parameters
    ----------
    base_url:
        Root of the download tree.  Defaults to static.crates.io.
    timeout:
        Per-request timeout in seconds.
    user_agent:
        ``User-Agent`` header sent with every request.
    client:
        Optional pre-built ``httpx.Client`` (tests inject one backed by
        ``httpx.MockTransport``).  When omitted a client is created and
        owned by this fetcher.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_DOWNLOAD_URL,
        *,
        timeout: float = 60.0,
        user_agent: str = DEFAULT_USER_AGENT,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.Client(
            follow_redirects=True,
            timeout=timeout,
            headers={"User-Agent": user_agent},
        )

    def url_for(self, name: str, version: str) -> str:
        return f"{self._base_url}/{name}/{name}-{version}.crate"

    def fetch(self, name: str, version: str) -> BinaryIO:
        """Download the archive for *name* at *version*.

        Raises
        ------
        TransportError
            On any network failure, non-success HTTP status, or a URL
            httpx refuses to build.
        """
        url = self.url_for(name, version)
        buffer = tempfile.SpooledTemporaryFile(max_size=_SPOOL_MAX_BYTES)
        try:
            with self._client.stream("GET", url) as response:
                response.raise_for_status()
                downloaded = 0
                for chunk in response.iter_bytes():
                    buffer.write(chunk)
                    downloaded += len(chunk)
        except httpx.HTTPStatusError as exc:
            buffer.close()
            raise TransportError(
                f"GET {url} returned HTTP {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError) as exc:
            buffer.close()
            raise TransportError(f"GET {url!r} failed: {exc}") from exc

        logger.debug("Fetched %s (%d bytes)", url, downloaded)
        buffer.seek(0)
        return buffer

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpFetcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
