import logging
import mimetypes
import os
from urllib.parse import quote, unquote

import boto3
import requests
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import StorageFailure
from .base import FetchResult, Locator, Outcome, StorageProvider

logger = logging.getLogger(__name__)

_MISSING_CODES = {"404", "NoSuchKey", "NotFound"}

# Allowed upload types map directly; anything else goes through mimetypes
_CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".gif": "image/gif",
}


def _guess_content_type(key: str) -> str:
    ext = os.path.splitext(key)[1].lower()
    return _CONTENT_TYPES.get(ext) or mimetypes.guess_type(key)[0] or "application/octet-stream"


class S3StorageProvider(StorageProvider):
    """S3-compatible object storage.

    Objects are written with key == storage path (no random suffix), so the
    returned URL is reproducible from the path and a second upload to the
    same path overwrites the first. Reads go through the public URL so that
    they hit the same origin/CDN that redirects send clients to.
    """

    name = "s3"

    def __init__(
        self,
        bucket: str,
        public_base_url: str | None = None,
        client=None,
        region: str | None = None,
        endpoint_url: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        fetch_timeout: float = 10.0,
    ):
        if not bucket:
            raise ValueError("S3 storage requires a bucket name")
        self.bucket = bucket
        self.client = client or boto3.client(
            "s3",
            region_name=region,
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
        )
        if not public_base_url:
            if endpoint_url:
                public_base_url = f"{endpoint_url.rstrip('/')}/{bucket}"
            else:
                public_base_url = f"https://{bucket}.s3.amazonaws.com"
        self.public_base_url = public_base_url.rstrip("/")
        self.fetch_timeout = fetch_timeout

    def url_for(self, key: str) -> str:
        return f"{self.public_base_url}/{quote(key)}"

    def key_for(self, locator: Locator) -> str | None:
        """Object key for a locator, or None for URLs outside this bucket."""
        if not locator.is_url:
            return locator.value
        prefix = self.public_base_url + "/"
        if locator.value.startswith(prefix):
            return unquote(locator.value[len(prefix):])
        return None

    def upload(self, data: bytes, storage_path: str, content_type: str | None = None) -> Locator:
        content_type = content_type or _guess_content_type(storage_path)
        try:
            self.client.put_object(Bucket=self.bucket, Key=storage_path, Body=data, ContentType=content_type)
        except (BotoCoreError, ClientError) as e:
            raise StorageFailure(f"Failed to upload {storage_path} to bucket {self.bucket}: {e}") from e
        logger.debug(f"Uploaded {len(data)} bytes to s3://{self.bucket}/{storage_path}")
        return Locator.url(self.url_for(storage_path))

    def delete(self, locator: Locator) -> Outcome:
        # The owning record is usually gone already, so failures only leave an orphan behind
        key = self.key_for(locator)
        if key is None:
            logger.warning(f"Blob delete skipped, {locator.value} is not in bucket {self.bucket}")
            return Outcome.UNAVAILABLE
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            logger.warning(f"Blob delete warning for {key}: {e}")
            return Outcome.UNAVAILABLE
        return Outcome.OK

    def fetch(self, locator: Locator) -> FetchResult:
        url = locator.value if locator.is_url else self.url_for(locator.value)
        try:
            response = requests.get(url, timeout=self.fetch_timeout)
        except requests.RequestException as e:
            logger.error(f"Error fetching blob {url}: {e}")
            return FetchResult.unavailable(str(e))
        if response.status_code in (404, 410):
            return FetchResult.not_found()
        if not response.ok:
            logger.warning(f"Blob fetch for {url} returned HTTP {response.status_code}")
            return FetchResult.unavailable(f"HTTP {response.status_code}")
        return FetchResult.found(response.content)

    def exists(self, locator: Locator) -> bool:
        key = self.key_for(locator)
        if key is None:
            return self.fetch(locator).ok
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            if code not in _MISSING_CODES:
                logger.warning(f"Blob head failed for {key}: {e}")
            return False
        except BotoCoreError as e:
            logger.warning(f"Blob head failed for {key}: {e}")
            return False
        return True
