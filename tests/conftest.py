from datetime import datetime

import pytest
from werkzeug.security import generate_password_hash

from app.savishkar import create_app
from app.savishkar import auth as auth_module
from app.savishkar.db import session_scope
from app.savishkar.models import Base, Profile, User
from app.savishkar.modules.applications.models import Application

PASSWORD = "pw-123456"
CSRF = "test-csrf-token"


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("EVENT_MANAGER_TERM_DAYS", "30")
    auth_module._login_attempts.clear()

    app = create_app()
    engine = app.extensions["sqlalchemy_engine"]
    Base.metadata.create_all(bind=engine)
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def make_member(app):
    """Create a user + profile directly; returns the profile id."""
    counter = {"n": 0}

    def _make(email, role="MEMBER", prant=None, district=None, region=None, **extra):
        counter["n"] += 1
        with session_scope(app) as s:
            u = User(email=email, password_hash=generate_password_hash(PASSWORD), is_active=True)
            s.add(u)
            s.flush()
            p = Profile(
                user_id=u.id,
                full_name=extra.pop("full_name", email.split("@")[0].title()),
                email=email,
                prant=prant,
                district=district,
                region=region,
                role=role,
                membership_id=extra.pop("membership_id", f"SAV-TST-2026-{counter['n']:04d}"),
                is_active=True,
                created_at=datetime.utcnow(),
                updated_at=datetime.utcnow(),
                **extra,
            )
            s.add(p)
            s.flush()
            return p.id

    return _make


@pytest.fixture()
def login(client):
    def _login(email, password=PASSWORD):
        r = client.post("/auth/login", data={"email": email, "password": password}, follow_redirects=False)
        with client.session_transaction() as sess:
            sess["csrf_token"] = CSRF
        return r

    return _login


@pytest.fixture()
def post(client):
    """POST with the session CSRF token attached."""

    def _post(url, data=None, **kwargs):
        with client.session_transaction() as sess:
            sess["csrf_token"] = CSRF
        headers = kwargs.pop("headers", {})
        headers["X-CSRF-Token"] = CSRF
        return client.post(url, data=data or {}, headers=headers, **kwargs)

    return _post


@pytest.fixture()
def make_application(app):
    """Create an application row directly; returns its id."""

    def _make(email, prant, designation="MEMBER", status="pending", full_name=None):
        with session_scope(app) as s:
            a = Application(
                full_name=full_name or email.split("@")[0].title(),
                email=email,
                phone="9000000000",
                prant=prant,
                designation=designation,
                status=status,
                applied_at=datetime.utcnow(),
            )
            s.add(a)
            s.flush()
            return a.id

    return _make
