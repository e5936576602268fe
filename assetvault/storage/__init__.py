"""Storage backends for asset images.

The provider is built once by the application factory and kept on
``app.extensions["storage"]``; request code reaches it through
``get_storage()``. Tests pass their own provider to ``create_app``.
"""

import logging

from flask import current_app

from .base import FetchResult, Locator, LocatorKind, Outcome, StorageProvider
from .local import LocalStorageProvider
from .paths import build_asset_image_path, generate_file_name, is_allowed_mime_type

logger = logging.getLogger(__name__)

EXTENSION_KEY = "storage"


def build_storage(config) -> StorageProvider:
    backend = (config.get("STORAGE_BACKEND") or "local").lower()
    if backend == "local":
        provider = LocalStorageProvider(config.get("STORAGE_ROOT", "./storage/uploads"))
    elif backend == "s3":
        # boto3 is only imported when the remote backend is selected
        from .s3 import S3StorageProvider

        provider = S3StorageProvider(
            bucket=config.get("S3_BUCKET"),
            public_base_url=config.get("S3_PUBLIC_BASE_URL"),
            region=config.get("S3_REGION"),
            endpoint_url=config.get("S3_ENDPOINT_URL"),
            access_key_id=config.get("S3_ACCESS_KEY_ID"),
            secret_access_key=config.get("S3_SECRET_ACCESS_KEY"),
            fetch_timeout=config.get("S3_FETCH_TIMEOUT", 10.0),
        )
    else:
        raise ValueError(f"Unknown storage backend: {backend}")
    logger.info(f"Using {provider.name} storage backend")
    return provider


def get_storage() -> StorageProvider:
    return current_app.extensions[EXTENSION_KEY]


__all__ = [
    "EXTENSION_KEY",
    "FetchResult",
    "LocalStorageProvider",
    "Locator",
    "LocatorKind",
    "Outcome",
    "StorageProvider",
    "build_asset_image_path",
    "build_storage",
    "generate_file_name",
    "get_storage",
    "is_allowed_mime_type",
]
