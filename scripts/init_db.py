"""
Create tables and seed permissions / admin role / admin user.

Idempotent: existing tables are left alone and an existing admin user's
password is never overwritten.

Usage:
  python scripts/init_db.py
"""
import os
import sys
from pathlib import Path

from sqlalchemy.orm import Session
from werkzeug.security import generate_password_hash

# Ensure repo root is on sys.path when running as a script (Windows-friendly).
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.billing import create_app  # noqa: E402
from app.billing.constants import PERMISSIONS  # noqa: E402
from app.billing.db import close_db, session_scope  # noqa: E402
from app.billing.models import Base, Permission, Role, User  # noqa: E402


def seed(s: Session, *, admin_email: str, admin_password: str) -> User:
    def ensure_perm(key: str, name: str) -> Permission:
        p = s.query(Permission).filter(Permission.key == key).one_or_none()
        if not p:
            p = Permission(key=key, name=name)
            s.add(p)
        return p

    perms = [ensure_perm(key, name) for key, name in PERMISSIONS]

    role_admin = s.query(Role).filter(Role.key == "admin").one_or_none()
    if not role_admin:
        role_admin = Role(key="admin", name="Administrator")
        s.add(role_admin)
    for p in perms:
        if p not in role_admin.permissions:
            role_admin.permissions.append(p)

    user = s.query(User).filter(User.email == admin_email).one_or_none()
    if not user:
        user = User(email=admin_email, password_hash=generate_password_hash(admin_password), is_active=True)
        s.add(user)
    if role_admin not in user.roles:
        user.roles.append(role_admin)
    return user


def init_db(*, database_url: str | None = None) -> None:
    admin_email = (os.environ.get("ADMIN_EMAIL") or "admin@example.com").strip().lower()
    admin_password = os.environ.get("ADMIN_PASSWORD") or "change-me"

    app = create_app({"DATABASE_URL": database_url} if database_url else None)
    try:
        Base.metadata.create_all(bind=app.extensions["sqlalchemy_engine"])
        with session_scope(app) as s:
            seed(s, admin_email=admin_email, admin_password=admin_password)
    finally:
        close_db(app)

    print("Initialized database.")
    print(f"Admin email: {admin_email}")
    print("Admin password: (from ADMIN_PASSWORD)")


def main() -> None:
    init_db(database_url=None)


if __name__ == "__main__":
    main()
