import pytest

from app.cms import create_app
from app.cms.auth import _login_attempts
from app.cms.db import session_scope
from app.cms.models import Base, User
from app.cms.security import hash_password

PASSWORD = "password123"
USERS = {
    "super_admin": ("Admin User", "admin@example.com"),
    "editor": ("Edna Editor", "editor@example.com"),
    "viewer": ("Vic Viewer", "viewer@example.com"),
}


def _configure_env(tmp_path, monkeypatch, *, csrf: bool = False) -> None:
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("STORAGE_BACKEND", "local")
    monkeypatch.setenv("UPLOAD_ROOT", str(tmp_path / "uploads"))
    monkeypatch.setenv("CSRF_ENABLED", "true" if csrf else "false")
    monkeypatch.setenv("RATELIMIT_ENABLED", "false")
    for k in ("S3_ENDPOINT", "S3_REGION", "S3_BUCKET", "S3_ACCESS_KEY_ID", "S3_SECRET_ACCESS_KEY", "JWT_SECRET"):
        monkeypatch.delenv(k, raising=False)


def _build_app():
    app = create_app()
    app.config["TESTING"] = True
    engine = app.extensions["sqlalchemy_engine"]
    Base.metadata.create_all(bind=engine)

    with session_scope(app) as s:
        for role, (name, email) in USERS.items():
            s.add(User(name=name, email=email, password_hash=hash_password(PASSWORD), role=role, is_active=True))
    _login_attempts.clear()
    return app


@pytest.fixture()
def app(tmp_path, monkeypatch):
    _configure_env(tmp_path, monkeypatch)
    return _build_app()


@pytest.fixture()
def csrf_app(tmp_path, monkeypatch):
    _configure_env(tmp_path, monkeypatch, csrf=True)
    return _build_app()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def login():
    def _login(client, role: str = "super_admin"):
        r = client.post("/api/auth/login", json={"email": USERS[role][1], "password": PASSWORD})
        assert r.status_code == 200, r.json
        return r

    return _login
