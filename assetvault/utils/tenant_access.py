from flask import abort
from flask_login import current_user

from ..errors import NotFoundError
from ..models import Membership, Tenant


def can_access_tenant(user, tenant_id: int) -> bool:
    if not user or not user.is_authenticated:
        return False
    if user.is_super_admin:
        return True
    return (
        Membership.query
        .filter(Membership.user_id == user.id, Membership.tenant_id == tenant_id)
        .first()
        is not None
    )


def require_tenant_access(slug: str) -> Tenant:
    if not current_user.is_authenticated:
        abort(401)
    tenant = Tenant.query.filter_by(slug=slug).first()
    if not tenant:
        raise NotFoundError("Tenant not found")
    if not can_access_tenant(current_user, tenant.id):
        abort(403, description="Access denied")
    return tenant
