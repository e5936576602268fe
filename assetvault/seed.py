from flask import Flask
from . import create_app
from .extensions import db
from .models import Asset, Membership, Tenant, User


def run_seed():
    app: Flask = create_app()
    with app.app_context():
        db.create_all()

        tenant = Tenant.query.filter_by(slug="acme").first()
        if not tenant:
            tenant = Tenant(slug="acme", name="Acme Facilities")
            db.session.add(tenant)
            db.session.flush()

        admin = User.query.filter_by(email="admin@acme.test").first()
        if not admin:
            admin = User(email="admin@acme.test", name="Acme Admin")
            db.session.add(admin)
            db.session.flush()
            db.session.add(Membership(user_id=admin.id, tenant_id=tenant.id, role="admin"))

        if not Asset.query.filter_by(tenant_id=tenant.id).first():
            db.session.add_all([
                Asset(tenant_id=tenant.id, name="Forklift FL-200"),
                Asset(tenant_id=tenant.id, name="Dell Latitude 7440"),
                Asset(tenant_id=tenant.id, name="Conference Projector"),
            ])

        db.session.commit()
        print(f"Seeded tenant '{tenant.slug}' (id={tenant.id}) with admin {admin.email}")


if __name__ == "__main__":
    run_seed()
