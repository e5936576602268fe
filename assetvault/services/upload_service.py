import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from ..config import IMAGE_CONFIG, ImageConfig
from ..errors import AssetImageError, ImageLimitReached, ImageTooLarge, UnsupportedImageType
from ..storage import Locator, Outcome, StorageProvider, build_asset_image_path, generate_file_name, is_allowed_mime_type
from .image_service import create_thumbnail

logger = logging.getLogger(__name__)

THUMB_CONTENT_TYPE = "image/jpeg"


@dataclass(frozen=True)
class StoredImage:
    """Both artifacts of one upload plus the fields for the AssetImage row."""

    original: Locator
    thumbnail: Locator
    file_name: str
    mime_type: str
    size: int
    is_primary: bool
    sort_order: int

    @property
    def locators(self) -> list[Locator]:
        return [self.original, self.thumbnail]

    def record_fields(self) -> dict:
        fields = {
            "file_name": self.file_name,
            "mime_type": self.mime_type,
            "size": self.size,
            "is_primary": self.is_primary,
            "sort_order": self.sort_order,
            "file_path": None,
            "thumb_path": None,
            "blob_url": None,
            "thumb_blob_url": None,
        }
        if self.original.is_url:
            fields["blob_url"] = self.original.value
        else:
            fields["file_path"] = self.original.value
        if self.thumbnail.is_url:
            fields["thumb_blob_url"] = self.thumbnail.value
        else:
            fields["thumb_path"] = self.thumbnail.value
        return fields


def validate_upload(image_count: int, mime_type: str, size: int, limits: ImageConfig = IMAGE_CONFIG) -> None:
    if image_count >= limits.max_images_per_asset:
        raise ImageLimitReached(f"Maximum {limits.max_images_per_asset} images per asset")
    if not is_allowed_mime_type(mime_type, limits.allowed_mime_types):
        raise UnsupportedImageType()
    if size > limits.max_file_size:
        max_mb = limits.max_file_size / (1024 * 1024)
        raise ImageTooLarge(f"File too large. Maximum size: {max_mb:g}MB")


def store_asset_image(
    storage: StorageProvider,
    tenant_id,
    asset_id,
    image_count: int,
    file_name: str,
    mime_type: str,
    data: bytes,
    limits: ImageConfig = IMAGE_CONFIG,
) -> StoredImage:
    """Validate an upload, derive its thumbnail and write both artifacts.

    All validation happens before the first storage call. The thumbnail is
    written first; if the original then fails, the thumbnail is deleted
    again before the error propagates. A crash between the two writes can
    still leave the thumbnail behind.
    """
    validate_upload(image_count, mime_type, len(data), limits)

    original_name = generate_file_name(file_name, "original-")
    thumb_name = generate_file_name(file_name, "thumb-").rsplit(".", 1)[0] + ".jpg"
    original_path = build_asset_image_path(tenant_id, asset_id, original_name)
    thumb_path = build_asset_image_path(tenant_id, asset_id, thumb_name)

    thumb_data = create_thumbnail(
        data,
        width=limits.thumb_width,
        height=limits.thumb_height,
        quality=limits.thumb_quality,
    )

    thumbnail = storage.upload(thumb_data, thumb_path, content_type=THUMB_CONTENT_TYPE)
    try:
        original = storage.upload(data, original_path, content_type=mime_type.lower())
    except Exception:
        logger.warning(f"Original upload failed for {original_path}, removing thumbnail {thumbnail.value}")
        discard_artifacts(storage, [thumbnail])
        raise

    logger.info(f"Stored image for asset {asset_id} of tenant {tenant_id}: {original.value}")
    return StoredImage(
        original=original,
        thumbnail=thumbnail,
        file_name=file_name,
        mime_type=mime_type,
        size=len(data),
        is_primary=image_count == 0,
        sort_order=image_count,
    )


def discard_artifacts(storage: StorageProvider, locators: Iterable[Optional[Locator]]) -> None:
    """Best-effort delete; the owning record is already gone or never existed."""
    for locator in locators:
        if locator is None:
            continue
        try:
            outcome = storage.delete(locator)
        except AssetImageError as e:
            logger.warning(f"Failed to delete {locator.value}: {e}")
            continue
        if outcome is Outcome.UNAVAILABLE:
            logger.warning(f"Left orphaned object {locator.value}")
