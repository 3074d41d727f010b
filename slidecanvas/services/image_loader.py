"""
Image Loader
============

Resolves image sources (data URIs, http(s) URLs, local paths) to bytes
and reads their natural pixel size with Pillow.
"""

import base64
import binascii
import io
import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

import httpx
from PIL import Image, UnidentifiedImageError

from ..exceptions import ImageLoadError

logger = logging.getLogger(__name__)


def is_data_uri(source: str) -> bool:
    return source.startswith("data:")


def is_remote(source: str) -> bool:
    return source.startswith("http://") or source.startswith("https://")


def decode_data_uri(uri: str) -> bytes:
    """
    Decode a base64 data URI.

    Raises:
        ImageLoadError: not a base64 data URI, or bad payload
    """
    header, sep, payload = uri.partition(",")
    if not sep or not header.startswith("data:") or ";base64" not in header:
        raise ImageLoadError("Expected a base64 data URI")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageLoadError("Invalid base64 image payload", cause=e)


def image_size(data: bytes) -> Tuple[int, int]:
    """Natural (width, height) in pixels."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            return image.size
    except (UnidentifiedImageError, OSError) as e:
        raise ImageLoadError("Unrecognized image data", cause=e)


class ImageLoader:
    """
    Loads image bytes for the writer.

    Remote fetches are cached per loader, so a background image shared by
    every slide is downloaded once per export.
    """

    def __init__(self, timeout: float = 30.0, client: Optional[httpx.Client] = None):
        self.timeout = timeout
        self._client = client
        self._cache: Dict[str, bytes] = {}

    def load(self, source: str) -> bytes:
        """
        Resolve a source to raw bytes.

        Raises:
            ImageLoadError: decode, fetch, or read failure
        """
        if source in self._cache:
            return self._cache[source]

        if is_data_uri(source):
            data = decode_data_uri(source)
        elif is_remote(source):
            data = self._fetch(source)
        else:
            try:
                data = Path(source).read_bytes()
            except OSError as e:
                raise ImageLoadError(f"Cannot read image file '{source}'", cause=e)

        self._cache[source] = data
        return data

    def _fetch(self, url: str) -> bytes:
        logger.debug(f"[IMAGE-LOADER] Fetching {url}")
        try:
            if self._client is not None:
                response = self._client.get(url)
            else:
                with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
                    response = client.get(url)
        except httpx.TimeoutException as e:
            raise ImageLoadError(f"Timeout fetching image '{url}'", cause=e)
        except httpx.RequestError as e:
            raise ImageLoadError(f"Network error fetching image '{url}'", cause=e)

        if response.status_code != 200:
            raise ImageLoadError(f"Image fetch failed: HTTP {response.status_code}", context={"url": url})
        return response.content

    def probe(self, source: str) -> Tuple[int, int]:
        """Natural size of the image behind a source."""
        return image_size(self.load(source))
