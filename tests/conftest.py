import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from app.billing import create_app
from app.billing.db import session_scope
from app.billing.models import Base
from app.billing.storage import LocalStorage
from scripts.init_db import seed

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "pw"


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("STORAGE_BACKEND", "local")
    monkeypatch.setenv("ASSET_ROOT", str(tmp_path / "public"))
    for k in ("S3_ENDPOINT", "S3_REGION", "S3_BUCKET", "S3_ACCESS_KEY_ID", "S3_SECRET_ACCESS_KEY", "REPORT_INVOICE_AMOUNT_CENTS"):
        monkeypatch.delenv(k, raising=False)

    app = create_app()
    engine = app.extensions["sqlalchemy_engine"]
    Base.metadata.create_all(bind=engine)

    with session_scope(app) as s:
        seed(s, admin_email=ADMIN_EMAIL, admin_password=ADMIN_PASSWORD)

    return app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def logged_in(client):
    r = client.post("/auth/login", data={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}, follow_redirects=False)
    assert r.status_code == 302
    return client


@pytest.fixture()
def db(tmp_path):
    """Plain session on a throwaway sqlite file, for service/repository tests."""
    engine = create_engine(f"sqlite:///{tmp_path/'unit.db'}", future=True)
    Base.metadata.create_all(bind=engine)
    sm = sessionmaker(bind=engine, class_=Session, autoflush=False, expire_on_commit=False, future=True)
    s = sm()
    try:
        yield s
    finally:
        s.close()
        engine.dispose()


@pytest.fixture()
def storage(tmp_path):
    return LocalStorage(root=tmp_path / "assets")


@pytest.fixture()
def invalidated():
    """Records every path a mutation invalidates."""
    return []
