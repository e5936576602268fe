"""Storage provider contract.

Backends differ in what a write hands back: the local backend returns the
relative path it was given, the remote backend returns an absolute URL it
chose itself. Both are wrapped in a ``Locator`` so callers branch on
``kind`` instead of guessing from the string.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class LocatorKind(str, Enum):
    PATH = "path"
    URL = "url"


@dataclass(frozen=True)
class Locator:
    kind: LocatorKind
    value: str

    @classmethod
    def path(cls, value: str) -> "Locator":
        return cls(LocatorKind.PATH, value)

    @classmethod
    def url(cls, value: str) -> "Locator":
        return cls(LocatorKind.URL, value)

    @property
    def is_url(self) -> bool:
        return self.kind is LocatorKind.URL

    def __str__(self) -> str:
        return self.value


class Outcome(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class FetchResult:
    outcome: Outcome
    data: Optional[bytes] = None
    detail: Optional[str] = None

    @classmethod
    def found(cls, data: bytes) -> "FetchResult":
        return cls(Outcome.OK, data)

    @classmethod
    def not_found(cls) -> "FetchResult":
        return cls(Outcome.NOT_FOUND)

    @classmethod
    def unavailable(cls, detail: str) -> "FetchResult":
        return cls(Outcome.UNAVAILABLE, detail=detail)

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.OK


class StorageProvider(ABC):
    """Capability interface implemented by every storage backend."""

    name = "abstract"

    @abstractmethod
    def upload(self, data: bytes, storage_path: str, content_type: Optional[str] = None) -> Locator:
        """Write ``data`` at ``storage_path`` and return the locator to persist.

        ``content_type`` is the validated MIME type; backends that record one
        fall back to guessing from the extension when it is omitted.
        """

    @abstractmethod
    def delete(self, locator: Locator) -> Outcome:
        """Remove the object. Deleting a missing object is not an error."""

    @abstractmethod
    def fetch(self, locator: Locator) -> FetchResult:
        """Read the whole object, reporting found / not found / unavailable."""

    @abstractmethod
    def exists(self, locator: Locator) -> bool:
        ...

    def get_buffer(self, locator: Locator) -> Optional[bytes]:
        """Object bytes, or ``None`` when the object cannot be read."""
        result = self.fetch(locator)
        return result.data if result.ok else None
