import io
from dataclasses import dataclass
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from ..config import IMAGE_CONFIG
from ..errors import InvalidImage


@dataclass(frozen=True)
class ImageMetadata:
    width: Optional[int] = None
    height: Optional[int] = None
    format: Optional[str] = None


def _open(data: bytes) -> Image.Image:
    try:
        return Image.open(io.BytesIO(data))
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidImage(f"Unreadable image: {e}") from e


def _to_rgb(img: Image.Image) -> Image.Image:
    if img.mode == "RGB":
        return img
    if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
        rgba = img.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    return img.convert("RGB")


def create_thumbnail(
    data: bytes,
    width: int = IMAGE_CONFIG.thumb_width,
    height: int = IMAGE_CONFIG.thumb_height,
    quality: int = IMAGE_CONFIG.thumb_quality,
) -> bytes:
    """Cover-fit the image into exactly width x height and encode as JPEG.

    The source is scaled until it covers the box and the overflow is cropped
    evenly from both sides, so there is never letterboxing.
    """
    img = _open(data)
    try:
        img.seek(0)
        img.load()
    except (OSError, EOFError) as e:
        raise InvalidImage(f"Unreadable image: {e}") from e

    thumb = ImageOps.fit(_to_rgb(img), (width, height), method=Image.LANCZOS, centering=(0.5, 0.5))
    out = io.BytesIO()
    thumb.save(out, format="JPEG", quality=quality)
    return out.getvalue()


def get_image_metadata(data: bytes) -> ImageMetadata:
    """Width, height and lowercase format name; any of them may be None.

    Raises InvalidImage when the input is not recognised as an image at all.
    """
    img = _open(data)
    width, height = img.size if img.size else (None, None)
    fmt = img.format.lower() if img.format else None
    return ImageMetadata(width=width or None, height=height or None, format=fmt)


def optimize_image(data: bytes, max_width: int = IMAGE_CONFIG.optimize_max_width) -> bytes:
    """Downsize to max_width keeping the aspect ratio. Never upsizes.

    Images already within max_width are returned as-is, not re-encoded.
    """
    img = _open(data)
    w, h = img.size
    if not w or w <= max_width:
        return data

    new_h = max(1, round(h * (max_width / w)))
    fmt = img.format or "JPEG"
    resized = img.resize((max_width, new_h), Image.LANCZOS)
    if fmt == "JPEG":
        resized = _to_rgb(resized)
    out = io.BytesIO()
    resized.save(out, format=fmt)
    return out.getvalue()
