import logging
from pathlib import Path

from ..errors import InvalidStoragePath, StorageFailure
from .base import FetchResult, Locator, Outcome, StorageProvider

logger = logging.getLogger(__name__)


class LocalStorageProvider(StorageProvider):
    """Files under a private root directory (not web-accessible).

    Locators are the relative storage paths; the root is joined on access.
    URL locators left over from a remote backend never name a local file,
    so they read as absent.
    """

    name = "local"

    def __init__(self, root):
        self.root = Path(root).resolve()

    def _absolute(self, storage_path: str) -> Path:
        path = (self.root / storage_path).resolve()
        if self.root not in path.parents:
            raise InvalidStoragePath(f"Storage path escapes storage root: {storage_path!r}")
        return path

    def upload(self, data: bytes, storage_path: str, content_type: str | None = None) -> Locator:
        path = self._absolute(storage_path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise StorageFailure(f"Failed to write {storage_path}: {e}") from e
        logger.debug(f"Stored {len(data)} bytes at {storage_path}")
        return Locator.path(storage_path)

    def delete(self, locator: Locator) -> Outcome:
        if locator.is_url:
            logger.debug(f"Nothing to delete locally for {locator.value}")
            return Outcome.NOT_FOUND
        path = self._absolute(locator.value)
        try:
            path.unlink()
        except FileNotFoundError:
            return Outcome.NOT_FOUND
        except OSError as e:
            raise StorageFailure(f"Failed to delete {locator.value}: {e}") from e
        return Outcome.OK

    def fetch(self, locator: Locator) -> FetchResult:
        if locator.is_url:
            return FetchResult.not_found()
        path = self._absolute(locator.value)
        try:
            return FetchResult.found(path.read_bytes())
        except FileNotFoundError:
            return FetchResult.not_found()
        except OSError as e:
            raise StorageFailure(f"Failed to read {locator.value}: {e}") from e

    def exists(self, locator: Locator) -> bool:
        if locator.is_url:
            return False
        return self._absolute(locator.value).is_file()
