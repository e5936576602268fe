"""Error taxonomy shared by the storage layer, the image services and the API.

Validation errors are raised before any storage or pipeline I/O. Storage
failures wrap OS / network errors other than "object missing", which is
reported through the storage outcome types instead of an exception.
"""


class AssetImageError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.__class__.__doc__ or self.code)
        self.message = message or self.__class__.__doc__ or self.code

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class ValidationError(AssetImageError, ValueError):
    """Invalid request"""

    status_code = 400
    code = "BAD_REQUEST"


class ImageLimitReached(ValidationError):
    """Maximum number of images reached for this asset"""


class UnsupportedImageType(ValidationError):
    """Invalid file type. Allowed: JPEG, PNG, WebP, GIF"""


class ImageTooLarge(ValidationError):
    """File too large"""


class InvalidImage(ValidationError):
    """File is not a readable image"""


class InvalidStoragePath(ValidationError):
    """Invalid storage path"""


class NotFoundError(AssetImageError):
    """Not found"""

    status_code = 404
    code = "NOT_FOUND"


class StorageFailure(AssetImageError):
    """Storage operation failed"""

    status_code = 500
    code = "STORAGE_FAILURE"
