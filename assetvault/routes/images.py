import logging

from flask import Blueprint, Response, abort, current_app, jsonify, redirect, request
from flask_login import current_user
from flask_wtf.csrf import generate_csrf
from sqlalchemy.exc import SQLAlchemyError

from ..errors import NotFoundError, ValidationError
from ..extensions import db, limiter
from ..forms import ImageUploadForm
from ..models import Asset, AssetImage
from ..services.serving_service import ImageResponse, resolve_original, resolve_thumbnail
from ..services.upload_service import discard_artifacts, store_asset_image
from ..storage import get_storage
from ..utils.tenant_access import can_access_tenant, require_tenant_access

logger = logging.getLogger(__name__)

images_bp = Blueprint("images", __name__, url_prefix="/api")


def _upload_limit() -> str:
    return current_app.config.get("UPLOAD_RATELIMIT", "30 per minute")


def _get_asset_or_404(tenant, asset_id: int) -> Asset:
    asset = Asset.query.filter_by(id=asset_id, tenant_id=tenant.id).first()
    if not asset:
        raise NotFoundError("Asset not found")
    return asset


def _get_image_or_404(tenant, asset_id: int, image_id: int) -> AssetImage:
    image = db.session.get(AssetImage, image_id)
    if not image or image.asset_id != asset_id or image.asset.tenant_id != tenant.id:
        raise NotFoundError("Image not found")
    return image


def _get_servable_image(image_id: int) -> AssetImage:
    if not current_user.is_authenticated:
        abort(401)
    image = db.session.get(AssetImage, image_id)
    if not image:
        raise NotFoundError("Image not found")
    if not can_access_tenant(current_user, image.asset.tenant_id):
        abort(403, description="Access denied")
    return image


def _to_response(resolved: ImageResponse):
    if resolved.is_redirect:
        return redirect(resolved.redirect_url)
    if resolved.error:
        return jsonify({"error": resolved.error}), resolved.status
    return Response(resolved.body, status=resolved.status, headers=resolved.headers)


@images_bp.route("/csrf-token")
def csrf_token():
    return jsonify({"csrfToken": generate_csrf()})


@images_bp.route("/tenants/<slug>/assets/<int:asset_id>/images")
def list_images(slug: str, asset_id: int):
    tenant = require_tenant_access(slug)
    asset = _get_asset_or_404(tenant, asset_id)
    images = (
        AssetImage.query
        .filter_by(asset_id=asset.id)
        .order_by(AssetImage.is_primary.desc(), AssetImage.sort_order.asc(), AssetImage.created_at.desc())
        .all()
    )
    return jsonify({"images": [img.to_dict() for img in images]})


@images_bp.route("/tenants/<slug>/assets/<int:asset_id>/images", methods=["POST"])
@limiter.limit(_upload_limit, methods=["POST"])
def upload_image(slug: str, asset_id: int):
    tenant = require_tenant_access(slug)
    asset = _get_asset_or_404(tenant, asset_id)
    image_count = AssetImage.query.filter_by(asset_id=asset.id).count()

    form = ImageUploadForm()
    if not form.validate_on_submit():
        errors = [msg for msgs in form.errors.values() for msg in msgs]
        raise ValidationError(errors[0] if errors else "Invalid upload")

    file = form.file.data
    data = file.read()
    storage = get_storage()
    stored = store_asset_image(
        storage,
        tenant_id=tenant.id,
        asset_id=asset.id,
        image_count=image_count,
        file_name=(file.filename or "upload")[:255],
        mime_type=file.mimetype,
        data=data,
    )

    image = AssetImage(asset_id=asset.id, **stored.record_fields())
    db.session.add(image)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        discard_artifacts(storage, stored.locators)
        raise
    return jsonify({"image": image.to_dict(), "message": "Image uploaded successfully"}), 201


@images_bp.route("/tenants/<slug>/assets/<int:asset_id>/images/<int:image_id>", methods=["DELETE"])
def delete_image(slug: str, asset_id: int, image_id: int):
    tenant = require_tenant_access(slug)
    image = _get_image_or_404(tenant, asset_id, image_id)

    # Promote another image before the primary disappears
    if image.is_primary:
        next_image = (
            AssetImage.query
            .filter(AssetImage.asset_id == asset_id, AssetImage.id != image.id)
            .order_by(AssetImage.sort_order.asc())
            .first()
        )
        if next_image:
            next_image.is_primary = True

    locators = [image.original_locator, image.thumb_locator]
    db.session.delete(image)
    db.session.commit()

    # Record is gone; storage cleanup can only leave orphans behind
    discard_artifacts(get_storage(), locators)
    return jsonify({"message": "Image deleted successfully"})


@images_bp.route("/tenants/<slug>/assets/<int:asset_id>/images/<int:image_id>", methods=["PATCH"])
def update_image(slug: str, asset_id: int, image_id: int):
    tenant = require_tenant_access(slug)
    image = _get_image_or_404(tenant, asset_id, image_id)

    payload = request.get_json(silent=True) or {}
    is_primary = payload.get("isPrimary")
    if is_primary is not None and not isinstance(is_primary, bool):
        raise ValidationError("isPrimary must be a boolean")

    if is_primary is True:
        (
            AssetImage.query
            .filter(AssetImage.asset_id == asset_id, AssetImage.is_primary.is_(True), AssetImage.id != image.id)
            .update({"is_primary": False}, synchronize_session=False)
        )
    if is_primary is not None:
        image.is_primary = is_primary
    db.session.commit()
    return jsonify({"image": image.to_dict()})


@images_bp.route("/images/<int:image_id>")
def serve_image(image_id: int):
    image = _get_servable_image(image_id)
    return _to_response(resolve_original(image, get_storage()))


@images_bp.route("/images/<int:image_id>/thumb")
def serve_thumbnail(image_id: int):
    image = _get_servable_image(image_id)
    return _to_response(resolve_thumbnail(image, get_storage()))
