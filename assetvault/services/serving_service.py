"""Decide how to deliver a stored image once tenant access has been granted.

Remote-backed artifacts are answered with a redirect so the bytes come from
the object store / CDN. Everything else is read through the storage
provider and returned as a buffered body.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..storage import Locator, Outcome, StorageProvider

logger = logging.getLogger(__name__)

THUMB_CONTENT_TYPE = "image/jpeg"
ORIGINAL_CACHE_CONTROL = "private, max-age=3600"
THUMB_CACHE_CONTROL = "private, max-age=86400"


@dataclass(frozen=True)
class ImageResponse:
    status: int
    body: bytes = b""
    headers: dict = field(default_factory=dict)
    redirect_url: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_redirect(self) -> bool:
        return self.redirect_url is not None


def _redirect(url: str) -> ImageResponse:
    return ImageResponse(status=302, redirect_url=url)


def _buffered(storage: StorageProvider, locator: Optional[Locator], content_type: str, cache_control: str) -> ImageResponse:
    if locator is None:
        return ImageResponse(status=404, error="File not found")

    result = storage.fetch(locator)
    if result.outcome is Outcome.NOT_FOUND:
        return ImageResponse(status=404, error="File not found")
    if result.outcome is Outcome.UNAVAILABLE:
        logger.warning(f"Storage unavailable for {locator.value}: {result.detail}")
        return ImageResponse(status=503, error="Storage temporarily unavailable")

    return ImageResponse(
        status=200,
        body=result.data,
        headers={
            "Content-Type": content_type,
            "Content-Length": str(len(result.data)),
            "Cache-Control": cache_control,
        },
    )


def resolve_original(image, storage: StorageProvider) -> ImageResponse:
    if image.blob_url:
        return _redirect(image.blob_url)
    locator = Locator.path(image.file_path) if image.file_path else None
    return _buffered(storage, locator, image.mime_type, ORIGINAL_CACHE_CONTROL)


def resolve_thumbnail(image, storage: StorageProvider) -> ImageResponse:
    # Remote thumbnail wins even when a local thumb_path is also recorded
    if image.thumb_blob_url:
        return _redirect(image.thumb_blob_url)
    # No cheaper derivative exists, so send the client to the original blob
    if image.blob_url and not image.thumb_path:
        return _redirect(image.blob_url)

    if image.thumb_path:
        return _buffered(storage, Locator.path(image.thumb_path), THUMB_CONTENT_TYPE, THUMB_CACHE_CONTROL)
    locator = Locator.path(image.file_path) if image.file_path else None
    return _buffered(storage, locator, image.mime_type, THUMB_CACHE_CONTROL)
