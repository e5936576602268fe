"""Shared fixtures for assetvault tests."""

import io
from typing import Iterable, Optional

import pytest
from PIL import Image

from assetvault import create_app
from assetvault.extensions import db
from assetvault.models import Asset, Membership, Tenant, User
from assetvault.errors import StorageFailure
from assetvault.storage import FetchResult, Locator, Outcome, StorageProvider


# ---------------------------------------------------------------------------
# In-memory storage provider
# ---------------------------------------------------------------------------
class MemoryStorageProvider(StorageProvider):
    """Dict-backed provider. With ``url_base`` set it hands out URL locators
    like the remote backend does; ``fail_on`` makes uploads to paths
    containing any of the given fragments raise StorageFailure."""

    name = "memory"

    def __init__(self, url_base: Optional[str] = None, fail_on: Iterable[str] = ()):
        self.url_base = url_base
        self.fail_on = set(fail_on)
        self.objects: dict[str, bytes] = {}
        self.uploads: list[str] = []
        self.content_types: dict[str, Optional[str]] = {}
        self.deletes: list[str] = []
        self.unavailable: set[str] = set()

    def _key(self, locator: Locator) -> str:
        if locator.is_url:
            return locator.value[len(self.url_base) + 1:]
        return locator.value

    def upload(self, data: bytes, storage_path: str, content_type: Optional[str] = None) -> Locator:
        self.uploads.append(storage_path)
        self.content_types[storage_path] = content_type
        if any(fragment in storage_path for fragment in self.fail_on):
            raise StorageFailure(f"simulated failure writing {storage_path}")
        self.objects[storage_path] = bytes(data)
        if self.url_base:
            return Locator.url(f"{self.url_base}/{storage_path}")
        return Locator.path(storage_path)

    def delete(self, locator: Locator) -> Outcome:
        key = self._key(locator)
        self.deletes.append(key)
        if self.objects.pop(key, None) is None:
            return Outcome.NOT_FOUND
        return Outcome.OK

    def fetch(self, locator: Locator) -> FetchResult:
        key = self._key(locator)
        if key in self.unavailable:
            return FetchResult.unavailable("simulated outage")
        if key not in self.objects:
            return FetchResult.not_found()
        return FetchResult.found(self.objects[key])

    def exists(self, locator: Locator) -> bool:
        return self._key(locator) in self.objects


@pytest.fixture
def memory_storage():
    return MemoryStorageProvider()


# ---------------------------------------------------------------------------
# Image fixtures
# ---------------------------------------------------------------------------
def make_image(width: int, height: int, fmt: str = "PNG", color=(200, 40, 40), mode: str = "RGB") -> bytes:
    img = Image.new(mode, (width, height), color)
    out = io.BytesIO()
    img.save(out, format=fmt)
    return out.getvalue()


@pytest.fixture
def png_bytes():
    return make_image(640, 480, "PNG")


@pytest.fixture
def jpeg_bytes():
    return make_image(800, 600, "JPEG")


# ---------------------------------------------------------------------------
# Flask app fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def app(memory_storage, tmp_path):
    app = create_app(
        test_config={
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
            "WTF_CSRF_ENABLED": False,
            "RATELIMIT_ENABLED": False,
            "SECRET_KEY": "test-secret",
            "STORAGE_ROOT": str(tmp_path / "uploads"),
        },
        storage=memory_storage,
    )
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def tenant(app):
    t = Tenant(slug="acme", name="Acme")
    db.session.add(t)
    db.session.commit()
    return t


@pytest.fixture
def other_tenant(app):
    t = Tenant(slug="globex", name="Globex")
    db.session.add(t)
    db.session.commit()
    return t


@pytest.fixture
def asset(tenant):
    a = Asset(tenant_id=tenant.id, name="Forklift")
    db.session.add(a)
    db.session.commit()
    return a


@pytest.fixture
def member(tenant):
    user = User(email="member@acme.test", name="Member")
    db.session.add(user)
    db.session.flush()
    db.session.add(Membership(user_id=user.id, tenant_id=tenant.id, role="user"))
    db.session.commit()
    return user


@pytest.fixture
def outsider(other_tenant):
    user = User(email="someone@globex.test", name="Outsider")
    db.session.add(user)
    db.session.flush()
    db.session.add(Membership(user_id=user.id, tenant_id=other_tenant.id, role="admin"))
    db.session.commit()
    return user


def login(client, user):
    with client.session_transaction() as sess:
        sess["_user_id"] = str(user.id)
        sess["_fresh"] = True


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def member_client(client, member):
    login(client, member)
    return client
