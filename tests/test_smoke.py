from app.savishkar.db import session_scope
from app.savishkar.models import AuditEvent, Profile


def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json["ok"] is True
    assert client.get("/healthz").data == b"ok"


def test_public_pages_render(client):
    assert client.get("/").status_code == 200
    assert client.get("/join").status_code == 200
    assert client.get("/verify").status_code == 200
    assert client.get("/auth/login").status_code == 200


def test_login_and_admin_access(client, make_member, login):
    make_member("admin@example.com", role="SUPER_CONTROLLER")

    # Anonymous is redirected to login
    r = client.get("/admin/")
    assert r.status_code == 302
    assert "/auth/login" in r.headers["Location"]

    r = login("admin@example.com")
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/admin/")

    r = client.get("/admin/")
    assert r.status_code == 200
    assert b"Approvals" in r.data
    assert b"Audit trail" in r.data


def test_member_is_forbidden_from_admin(client, make_member, login):
    make_member("m@example.com", role="MEMBER", prant="Kerala Prant")
    r = login("m@example.com")
    assert r.headers["Location"].endswith("/dashboard")
    r = client.get("/admin/")
    assert r.status_code == 403


def test_unknown_role_is_forbidden_from_admin(client, make_member, login):
    make_member("weird@example.com", role="ROOT", prant="Kerala Prant")
    login("weird@example.com")
    assert client.get("/admin/").status_code == 403
    assert client.get("/admin/members").status_code == 403


def test_national_convener_admin_is_view_only(client, make_member, login):
    make_member("nat@example.com", role="NATIONAL_CONVENER")
    login("nat@example.com")
    r = client.get("/admin/")
    assert r.status_code == 200
    assert b"View only" in r.data
    assert b"Approvals" not in r.data


def test_login_failure_is_audited(app, client, make_member):
    make_member("a@example.com")
    r = client.post("/auth/login", data={"email": "a@example.com", "password": "wrong"})
    assert r.status_code == 302
    with session_scope(app) as s:
        assert s.query(AuditEvent).filter(AuditEvent.action == "auth.login_failed").count() == 1


def test_login_rate_limit(client, make_member):
    make_member("a@example.com")
    for _ in range(5):
        client.post("/auth/login", data={"email": "a@example.com", "password": "wrong"})
    r = client.post("/auth/login", data={"email": "a@example.com", "password": "pw-123456"}, follow_redirects=True)
    assert b"Too many login attempts" in r.data


def test_post_without_csrf_is_rejected(client, make_member, login):
    make_member("admin@example.com", role="ADMIN")
    login("admin@example.com")
    r = client.post("/admin/announcements", data={"title": "t", "content": "c"})
    assert r.status_code == 400


def test_verify_membership(app, client, make_member):
    make_member("v@example.com", prant="Gujarat Prant", membership_id="SAV-GUJ-2026-0042", full_name="Asha Patel")
    r = client.get("/verify/sav-guj-2026-0042")
    assert r.status_code == 200
    assert b"Asha Patel" in r.data
    assert client.get("/verify/SAV-GUJ-2026-9999").status_code == 404
    r = client.get("/verify?membership_id=SAV-GUJ-2026-0042")
    assert r.status_code == 302


def test_admin_login_shortcut(client):
    r = client.get("/admin/login")
    assert r.status_code == 302
    assert "/auth/login" in r.headers["Location"]


def test_logout(client, make_member, login):
    make_member("m@example.com")
    login("m@example.com")
    r = client.get("/auth/logout")
    assert r.status_code == 302
    assert client.get("/dashboard").status_code == 302


def test_missing_tables_render_schema_page(app, client, make_member, login):
    make_member("admin@example.com", role="ADMIN")
    login("admin@example.com")
    engine = app.extensions["sqlalchemy_engine"]
    Profile.metadata.tables["event_delegates"].drop(bind=engine)
    r = client.get("/admin/")
    assert r.status_code == 500
    assert b"event_delegates" in r.data
