"""
Product Image Storage

Thin async client for the backend's object storage REST API, limited to the
calls the dashboard makes against the product image bucket:

- upload an object with an explicit content type
- resolve the public URL of an object
- remove objects by key
"""

import re
from typing import List, Optional
from urllib.parse import urlparse

import httpx
import structlog

from src.config import get_settings

logger = structlog.get_logger(__name__)

PUBLIC_OBJECT_PREFIX = "/storage/v1/object/public/"


class StorageError(Exception):
    """Raised when the storage API rejects a request"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ProductImageStorage:
    """
    Client for one storage bucket.

    Example:
        storage = ProductImageStorage.from_settings()
        await storage.upload("products/a.png", data, "image/png")
        url = storage.get_public_url("products/a.png")
    """

    def __init__(
        self,
        base_url: str,
        service_key: str,
        bucket: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.bucket = bucket
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {service_key}",
                "apikey": service_key,
            },
            timeout=timeout,
        )
        self._path_pattern = re.compile(
            re.escape(f"{PUBLIC_OBJECT_PREFIX}{bucket}/") + r"(.+)"
        )

    @classmethod
    def from_settings(cls) -> "ProductImageStorage":
        settings = get_settings().storage
        return cls(
            base_url=settings.base_url,
            service_key=settings.service_key.get_secret_value(),
            bucket=settings.bucket,
            timeout=settings.timeout_seconds,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def upload(self, key: str, data: bytes, content_type: str) -> None:
        """Store ``data`` under ``key``. Existing objects are not overwritten."""
        try:
            response = await self._client.post(
                f"/storage/v1/object/{self.bucket}/{key}",
                content=data,
                headers={"Content-Type": content_type, "x-upsert": "false"},
            )
        except httpx.HTTPError as e:
            logger.error("Storage unreachable", action="upload", key=key, error=str(e))
            raise StorageError(f"Storage upload failed: {e}") from e
        self._raise_for_status(response, "upload", key=key)
        logger.debug("Object uploaded", bucket=self.bucket, key=key, size=len(data))

    async def remove(self, keys: List[str]) -> None:
        """Remove the objects stored under ``keys``"""
        try:
            response = await self._client.request(
                "DELETE",
                f"/storage/v1/object/{self.bucket}",
                json={"prefixes": keys},
            )
        except httpx.HTTPError as e:
            logger.error("Storage unreachable", action="remove", keys=keys, error=str(e))
            raise StorageError(f"Storage remove failed: {e}") from e
        self._raise_for_status(response, "remove", keys=keys)
        logger.debug("Objects removed", bucket=self.bucket, keys=keys)

    def get_public_url(self, key: str) -> str:
        return f"{self.base_url}{PUBLIC_OBJECT_PREFIX}{self.bucket}/{key}"

    def extract_object_path(self, url: str) -> Optional[str]:
        """
        Object key of a public URL of this bucket, or None when the URL
        does not point into it.
        """
        match = self._path_pattern.search(urlparse(url).path)
        return match.group(1) if match else None

    def _raise_for_status(self, response: httpx.Response, action: str, **context) -> None:
        if response.is_success:
            return
        try:
            body = response.json()
        except ValueError:
            body = None
        message = (body.get("message") if isinstance(body, dict) else None) or response.text
        logger.error(
            "Storage request failed",
            action=action,
            bucket=self.bucket,
            status_code=response.status_code,
            message=message,
            **context,
        )
        raise StorageError(f"Storage {action} failed: {message}", status_code=response.status_code)


_storage: Optional[ProductImageStorage] = None


def init_storage() -> ProductImageStorage:
    """Create the shared storage client"""
    global _storage

    if _storage is None:
        _storage = ProductImageStorage.from_settings()
        logger.info("Storage client initialized", bucket=_storage.bucket)
    return _storage


async def close_storage() -> None:
    global _storage

    if _storage is not None:
        await _storage.aclose()
        _storage = None
        logger.info("Storage client closed")


def get_storage() -> ProductImageStorage:
    if _storage is None:
        raise RuntimeError("Storage not initialized. Call init_storage() first.")
    return _storage
