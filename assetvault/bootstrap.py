"""AUTO_MIGRATE support for the WSGI entry point."""

import logging

from flask import Flask
from flask_migrate import stamp, upgrade
from sqlalchemy import inspect, text

from .extensions import db
from .models import AssetImage

logger = logging.getLogger(__name__)

# Serialises AUTO_MIGRATE across workers sharing one Postgres database
MIGRATION_LOCK_KEY = 982451653


def schema_missing(conn) -> bool:
    # asset_images is the last table the initial revision creates
    return not inspect(conn).has_table(AssetImage.__tablename__)


def bootstrap_schema(engine) -> bool:
    """Create every table on an empty database and stamp it at head."""
    with engine.begin() as conn:
        if not schema_missing(conn):
            return False
        db.metadata.create_all(bind=conn)
    stamp(revision="head")
    logger.info("Created asset image schema and stamped migrations at head")
    return True


def run_auto_migrate(app: Flask) -> None:
    with app.app_context():
        engine = db.engine
        if engine.dialect.name != "postgresql":
            if not bootstrap_schema(engine):
                upgrade()
            return

        with engine.connect() as lock_conn:
            got_lock = lock_conn.execute(text("SELECT pg_try_advisory_lock(:key)"), {"key": MIGRATION_LOCK_KEY}).scalar()
            if not got_lock:
                logger.info("Another worker holds the migration lock, skipping AUTO_MIGRATE")
                return
            try:
                if not bootstrap_schema(engine):
                    upgrade()
            finally:
                lock_conn.execute(text("SELECT pg_advisory_unlock(:key)"), {"key": MIGRATION_LOCK_KEY})
