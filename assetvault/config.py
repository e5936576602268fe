import os
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ImageConfig:
    """Fixed limits for asset photographs. Not read from the environment."""

    max_file_size: int = 5 * 1024 * 1024
    max_images_per_asset: int = 10
    allowed_mime_types: frozenset = field(
        default_factory=lambda: frozenset({"image/jpeg", "image/png", "image/webp", "image/gif"})
    )
    thumb_width: int = 300
    thumb_height: int = 300
    thumb_quality: int = 80
    optimize_max_width: int = 2000


IMAGE_CONFIG = ImageConfig()


class Config:
    """
    Base configuration object.

    Reads from environment at *instance* creation time so that values
    loaded via python-dotenv in create_app() are honored.
    """

    def __init__(self):
        # Environment / mode
        self.ENV = os.getenv("FLASK_ENV", os.getenv("ENV", "development"))
        self.DEBUG = bool(int(os.getenv("FLASK_DEBUG", "0"))) if os.getenv("FLASK_DEBUG") is not None else self.ENV != "production"

        # Secret key: always from the environment in production
        self.SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")

        # Database: production never falls back to SQLite
        uri = os.getenv("SQLALCHEMY_DATABASE_URI")
        if uri:
            self.SQLALCHEMY_DATABASE_URI = uri
        else:
            if self.ENV == "production":
                raise RuntimeError("SQLALCHEMY_DATABASE_URI must be set in production")
            self.SQLALCHEMY_DATABASE_URI = "sqlite:///dev.db"

        self.SQLALCHEMY_TRACK_MODIFICATIONS = False

        self.WTF_CSRF_TIME_LIMIT = None

        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

        # Storage backend. S3 is picked automatically once a bucket is configured.
        self.S3_BUCKET = os.getenv("S3_BUCKET") or None
        self.STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "s3" if self.S3_BUCKET else "local").lower()
        # Private directory, never served as static content
        self.STORAGE_ROOT = os.getenv("STORAGE_ROOT", os.path.join(".", "storage", "uploads"))
        self.S3_REGION = os.getenv("S3_REGION") or None
        self.S3_ENDPOINT_URL = os.getenv("S3_ENDPOINT_URL") or None
        self.S3_ACCESS_KEY_ID = os.getenv("S3_ACCESS_KEY_ID") or None
        self.S3_SECRET_ACCESS_KEY = os.getenv("S3_SECRET_ACCESS_KEY") or None
        self.S3_PUBLIC_BASE_URL = os.getenv("S3_PUBLIC_BASE_URL") or None
        self.S3_FETCH_TIMEOUT = float(os.getenv("S3_FETCH_TIMEOUT", "10"))

        # Werkzeug rejects bodies far above the per-file ceiling before buffering them
        self.MAX_CONTENT_LENGTH = IMAGE_CONFIG.max_file_size + 512 * 1024

        self.RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", "100 per minute")
        self.UPLOAD_RATELIMIT = os.getenv("UPLOAD_RATELIMIT", "30 per minute")

        if self.ENV == "production":
            self.SESSION_COOKIE_SECURE = True
            self.REMEMBER_COOKIE_SECURE = True
            self.SESSION_COOKIE_HTTPONLY = True
            self.REMEMBER_COOKIE_HTTPONLY = True

    def __call__(self):
        # Allows Config() to be passed to app.config.from_object
        return self
