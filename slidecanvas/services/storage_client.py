"""
Storage Client
==============

Uploads finished presentation files to the storage service, keyed by the
owner's email.
"""

import logging
import ssl
from pathlib import Path
from typing import Optional

import aiohttp
import certifi
from pydantic import BaseModel

from ..config import get_settings
from .pptx_writer import PPTX_MEDIA_TYPE

logger = logging.getLogger(__name__)


class StorageResponse(BaseModel):
    """Response from a storage upload."""
    success: bool
    url: Optional[str] = None
    error: Optional[str] = None


class StorageClient:
    """Client for the presentation storage service."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        settings = get_settings()
        self.base_url = (base_url or settings.storage_url or "").rstrip("/")
        self.timeout = timeout or settings.http_timeout
        self._session = None
        logger.info(f"[STORAGE-CLIENT] Initialized with timeout={self.timeout}, url={self.base_url or '(disabled)'}")

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            ssl_context = ssl.create_default_context(cafile=certifi.where())
            connector = aiohttp.TCPConnector(ssl=ssl_context)
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                connector=connector
            )
        return self._session

    async def close(self):
        """Close the client session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def store_presentation(self, file_path: Path, owner_email: str) -> StorageResponse:
        """
        Upload a presentation file.

        Args:
            file_path: Local .pptx file
            owner_email: Account the file is stored under

        Returns:
            StorageResponse; failures are reported, never raised
        """
        if not self.enabled:
            return StorageResponse(success=False, error="Storage service not configured")

        file_path = Path(file_path)
        try:
            data = file_path.read_bytes()
        except OSError as e:
            logger.error(f"[STORAGE-CLIENT] Cannot read {file_path}: {e}")
            return StorageResponse(success=False, error=f"Cannot read file: {e}")

        form = aiohttp.FormData()
        form.add_field("email", owner_email)
        form.add_field("file", data, filename=file_path.name, content_type=PPTX_MEDIA_TYPE)

        try:
            session = await self._get_session()
            async with session.post(f"{self.base_url}/presentations", data=form) as resp:
                if resp.status in (200, 201):
                    payload = await resp.json()
                    url = payload.get("url") or payload.get("file_url")
                    logger.info(f"[STORAGE-CLIENT] Stored {file_path.name} for {owner_email}")
                    return StorageResponse(success=True, url=url)

                error_text = await resp.text()
                logger.error(f"[STORAGE-CLIENT] Upload failed: {resp.status} - {error_text}")
                return StorageResponse(success=False, error=f"Storage error: {resp.status} - {error_text}")
        except aiohttp.ClientError as e:
            logger.error(f"[STORAGE-CLIENT] Connection error: {e}")
            return StorageResponse(success=False, error=f"Connection error: {str(e)}")
        except Exception as e:
            logger.error(f"[STORAGE-CLIENT] Unexpected error: {e}")
            return StorageResponse(success=False, error=f"Unexpected error: {str(e)}")


# Singleton instance
_client = None


def get_storage_client() -> StorageClient:
    """Get singleton StorageClient instance."""
    global _client
    if _client is None:
        _client = StorageClient()
    return _client
