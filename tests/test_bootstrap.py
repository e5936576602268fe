"""Tests for the AUTO_MIGRATE schema bootstrap."""

from unittest.mock import patch

from assetvault import create_app
from assetvault.bootstrap import bootstrap_schema, run_auto_migrate, schema_missing
from assetvault.extensions import db
from conftest import MemoryStorageProvider


def _fresh_app(tmp_path):
    return create_app(
        test_config={"TESTING": True, "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'boot.db'}"},
        storage=MemoryStorageProvider(),
    )


def test_empty_database_is_created_and_stamped(tmp_path):
    app = _fresh_app(tmp_path)

    with patch("assetvault.bootstrap.stamp") as stamp, patch("assetvault.bootstrap.upgrade") as upgrade:
        run_auto_migrate(app)

    stamp.assert_called_once_with(revision="head")
    upgrade.assert_not_called()
    with app.app_context(), db.engine.connect() as conn:
        assert schema_missing(conn) is False


def test_existing_schema_runs_upgrade(tmp_path):
    app = _fresh_app(tmp_path)
    with app.app_context():
        db.create_all()

    with patch("assetvault.bootstrap.stamp") as stamp, patch("assetvault.bootstrap.upgrade") as upgrade:
        run_auto_migrate(app)

    upgrade.assert_called_once_with()
    stamp.assert_not_called()


def test_sentinel_is_the_asset_images_table(tmp_path):
    app = _fresh_app(tmp_path)
    with app.app_context():
        db.metadata.tables["tenants"].create(db.engine)
        with db.engine.connect() as conn:
            assert schema_missing(conn) is True
        with patch("assetvault.bootstrap.stamp"):
            assert bootstrap_schema(db.engine) is True
        with db.engine.connect() as conn:
            assert schema_missing(conn) is False
