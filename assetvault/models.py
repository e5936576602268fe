from datetime import datetime

from flask_login import UserMixin

from .extensions import db, login_manager
from .storage import Locator


class Tenant(db.Model):
    __tablename__ = "tenants"
    id = db.Column(db.Integer, primary_key=True)
    slug = db.Column(db.String(120), unique=True, nullable=False)
    name = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    assets = db.relationship("Asset", backref="tenant", lazy=True)


class User(db.Model, UserMixin):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    name = db.Column(db.String(120), nullable=True)
    is_super_admin = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    memberships = db.relationship("Membership", backref="user", lazy=True)


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))


class Membership(db.Model):
    __tablename__ = "memberships"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False)
    role = db.Column(db.String(50), default="user", nullable=False)

    tenant = db.relationship("Tenant", backref=db.backref("memberships", lazy=True))

    __table_args__ = (
        db.UniqueConstraint("user_id", "tenant_id", name="uq_memberships_user_tenant"),
        db.Index("ix_memberships_tenant_id", "tenant_id"),
    )


class Asset(db.Model):
    __tablename__ = "assets"
    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    images = db.relationship("AssetImage", backref="asset", lazy=True, cascade="all, delete-orphan")

    __table_args__ = (
        db.Index("ix_assets_tenant_id", "tenant_id"),
    )


class AssetImage(db.Model):
    __tablename__ = "asset_images"
    id = db.Column(db.Integer, primary_key=True)
    asset_id = db.Column(db.Integer, db.ForeignKey("assets.id", ondelete="CASCADE"), nullable=False)
    file_name = db.Column(db.String(255), nullable=False)
    # Local-backend paths and remote-backend URLs; any of them may be missing
    file_path = db.Column(db.String(1024), nullable=True)
    thumb_path = db.Column(db.String(1024), nullable=True)
    blob_url = db.Column(db.String(2048), nullable=True)
    thumb_blob_url = db.Column(db.String(2048), nullable=True)
    mime_type = db.Column(db.String(50), nullable=False)
    size = db.Column(db.Integer, nullable=False)
    is_primary = db.Column(db.Boolean, default=False, nullable=False)
    sort_order = db.Column(db.Integer, default=0, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.Index("ix_asset_images_asset_id", "asset_id"),
    )

    @property
    def original_locator(self) -> Locator | None:
        if self.blob_url:
            return Locator.url(self.blob_url)
        if self.file_path:
            return Locator.path(self.file_path)
        return None

    @property
    def thumb_locator(self) -> Locator | None:
        if self.thumb_blob_url:
            return Locator.url(self.thumb_blob_url)
        if self.thumb_path:
            return Locator.path(self.thumb_path)
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "assetId": self.asset_id,
            "fileName": self.file_name,
            "filePath": self.file_path,
            "thumbPath": self.thumb_path,
            "blobUrl": self.blob_url,
            "thumbBlobUrl": self.thumb_blob_url,
            "mimeType": self.mime_type,
            "size": self.size,
            "isPrimary": self.is_primary,
            "sortOrder": self.sort_order,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
