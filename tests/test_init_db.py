from app.billing import create_app
from app.billing.constants import PERMISSIONS
from app.billing.db import session_scope
from app.billing.models import Permission, Role, User
from scripts.init_db import init_db


def test_init_db_is_idempotent(tmp_path, monkeypatch):
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("ADMIN_EMAIL", "Owner@Example.com")
    monkeypatch.setenv("ADMIN_PASSWORD", "secret")
    db_url = f"sqlite:///{tmp_path/'init.db'}"

    init_db(database_url=db_url)
    init_db(database_url=db_url)

    app = create_app({"DATABASE_URL": db_url})
    with session_scope(app) as s:
        assert s.query(Permission).count() == len(PERMISSIONS)
        assert s.query(Role).count() == 1
        (user,) = s.query(User).all()
        assert user.email == "owner@example.com"
        assert {p.key for p in user.roles[0].permissions} == {key for key, _ in PERMISSIONS}
