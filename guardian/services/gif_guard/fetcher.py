"""
GIF Guard Image Fetcher
=======================

HEAD probing and bounded downloads of image URLs.

DESIGN:
    Probing is permissive: anything that is not clearly an accessible
    image is skipped. Downloading is strict: a download that cannot
    complete within its time and byte limits raises ImageFetchError,
    which the service treats as a dangerous image.
"""

import asyncio
import re
from dataclasses import dataclass
from typing import List, Optional

import aiohttp

from guardian.core import constants as C
from guardian.core.logger import logger


URL_PATTERN = re.compile(r"https?://[^\s<>\"']+", re.IGNORECASE)
CHUNK_SIZE = 64 * 1024


class ImageFetchError(Exception):
    """Raised when an image cannot be downloaded within limits."""

    pass


@dataclass
class ImageProbe:
    """Metadata from a HEAD request."""
    url: str
    content_type: str
    size: Optional[int]

    @property
    def is_gif(self) -> bool:
        return self.content_type == "image/gif"


def extract_urls(text: str) -> List[str]:
    """Unique http(s) URLs in message text, in order of appearance."""
    urls = [u.rstrip(").,>") for u in URL_PATTERN.findall(text or "")]
    return list(dict.fromkeys(urls))


class ImageFetcher:
    """Probes and downloads remote images through one shared session."""

    def __init__(
        self,
        probe_timeout: float = C.GIF_PROBE_TIMEOUT,
        download_timeout: float = C.GIF_DOWNLOAD_TIMEOUT,
        download_cap: int = C.GIF_DOWNLOAD_CAP_BYTES,
    ) -> None:
        self.probe_timeout = probe_timeout
        self.download_timeout = download_timeout
        self.download_cap = download_cap
        self._session: Optional[aiohttp.ClientSession] = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    # =========================================================================
    # Probe
    # =========================================================================

    async def probe(self, url: str) -> Optional[ImageProbe]:
        """
        HEAD a URL and return its image metadata.

        Returns:
            None for non-image, inaccessible or rate-limited URLs.
        """
        try:
            async with self._get_session().head(
                url,
                allow_redirects=True,
                timeout=aiohttp.ClientTimeout(total=self.probe_timeout),
            ) as resp:
                if resp.status == 429:
                    logger.debug("Image Probe Rate Limited", [("URL", url[:80])])
                    return None
                if resp.status >= 400:
                    return None
                content_type = (resp.headers.get("Content-Type") or "").split(";")[0].strip().lower()
                if not content_type.startswith("image/"):
                    return None
                length = resp.headers.get("Content-Length")
                size = int(length) if length and length.isdigit() else None
                return ImageProbe(url, content_type, size)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.debug("Image Probe Failed", [("URL", url[:80]), ("Error", type(e).__name__)])
            return None

    # =========================================================================
    # Download
    # =========================================================================

    async def download(self, url: str) -> bytes:
        """
        Download a URL, streaming at most `download_cap` bytes.

        Raises:
            ImageFetchError: On HTTP errors, timeouts or exceeding the cap.
        """
        try:
            async with self._get_session().get(
                url,
                timeout=aiohttp.ClientTimeout(total=self.download_timeout),
            ) as resp:
                if resp.status != 200:
                    raise ImageFetchError(f"HTTP {resp.status}")
                if resp.content_length is not None and resp.content_length > self.download_cap:
                    raise ImageFetchError(f"Content-Length {resp.content_length} exceeds cap")

                data = bytearray()
                async for chunk in resp.content.iter_chunked(CHUNK_SIZE):
                    data.extend(chunk)
                    if len(data) > self.download_cap:
                        raise ImageFetchError(f"download exceeds {self.download_cap} bytes")
                return bytes(data)
        except asyncio.TimeoutError as e:
            raise ImageFetchError(f"timed out after {self.download_timeout}s") from e
        except aiohttp.ClientError as e:
            raise ImageFetchError(f"{type(e).__name__}: {str(e)[:100]}") from e


__all__ = ["ImageFetchError", "ImageFetcher", "ImageProbe", "extract_urls"]
