import re
import secrets
import string
import time

from ..config import IMAGE_CONFIG
from ..errors import InvalidStoragePath


_BASE36 = string.digits + string.ascii_lowercase
_SEGMENT_RE = re.compile(r"^[A-Za-z0-9_-][A-Za-z0-9_.-]*$")


def _extension(original_name: str) -> str:
    name = (original_name or "").rsplit("/", 1)[-1]
    ext = name.rsplit(".", 1)[-1].lower() if "." in name else ""
    return ext if ext.isalnum() and ext.isascii() else "jpg"


def _random_suffix(length: int = 6) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def generate_file_name(original_name: str, prefix: str = "") -> str:
    """`{prefix}{epoch_ms}-{rand6}.{ext}`; ext falls back to jpg."""
    timestamp = time.time_ns() // 1_000_000
    return f"{prefix}{timestamp}-{_random_suffix()}.{_extension(original_name)}"


def _check_segment(value, label: str) -> str:
    segment = str(value)
    if not segment or ".." in segment or not _SEGMENT_RE.match(segment):
        raise InvalidStoragePath(f"Invalid {label} for storage path: {segment!r}")
    return segment


def build_asset_image_path(tenant_id, asset_id, file_name: str) -> str:
    tenant = _check_segment(tenant_id, "tenant id")
    asset = _check_segment(asset_id, "asset id")
    name = _check_segment(file_name, "file name")
    return f"{tenant}/assets/{asset}/{name}"


def is_allowed_mime_type(mime_type: str | None, allowed=None) -> bool:
    allowed = IMAGE_CONFIG.allowed_mime_types if allowed is None else allowed
    return (mime_type or "").lower() in allowed
