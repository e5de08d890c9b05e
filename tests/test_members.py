"""Member registry, profile editor and regional overview."""
from app.savishkar.db import session_scope
from app.savishkar.models import AuditEvent, Profile


def _seed_people(make_member):
    ids = {}
    ids["k1"] = make_member("k1@example.com", prant="Kerala Prant", full_name="Kerala One")
    ids["k2"] = make_member("k2@example.com", prant="Kerala Prant", full_name="Kerala Two")
    ids["g1"] = make_member("g1@example.com", prant="Gujarat Prant", full_name="Gujarat One")
    ids["t1"] = make_member("t1@example.com", prant="South Tamil Nadu Prant", full_name="Tamil One")
    return ids


def test_state_convener_sees_own_prant_members(client, make_member, login):
    _seed_people(make_member)
    make_member("sc@example.com", role="STATE_CONVENER", prant="Kerala Prant", full_name="State Lead")
    login("sc@example.com")
    r = client.get("/admin/members")
    assert r.status_code == 200
    assert b"Kerala One" in r.data and b"Kerala Two" in r.data
    assert b"Gujarat One" not in r.data
    assert b"Tamil One" not in r.data


def test_national_convener_sees_everyone(client, make_member, login):
    _seed_people(make_member)
    make_member("nc@example.com", role="NATIONAL_CONVENER")
    login("nc@example.com")
    r = client.get("/admin/members")
    for name in (b"Kerala One", b"Gujarat One", b"Tamil One"):
        assert name in r.data
    # View-only: no export link
    assert b"Export CSV" not in r.data
    assert client.get("/admin/members/export.csv").status_code == 403


def test_members_filters(client, make_member, login):
    _seed_people(make_member)
    make_member("admin@example.com", role="ADMIN")
    login("admin@example.com")
    r = client.get("/admin/members?prant=Gujarat+Prant")
    assert b"Gujarat One" in r.data and b"Kerala One" not in r.data
    r = client.get("/admin/members?q=tamil")
    assert b"Tamil One" in r.data and b"Gujarat One" not in r.data


def test_export_csv_is_scoped(client, make_member, login):
    _seed_people(make_member)
    make_member("sc@example.com", role="STATE_CONVENER", prant="Gujarat Prant")
    login("sc@example.com")
    r = client.get("/admin/members/export.csv")
    assert r.status_code == 200
    assert r.mimetype == "text/csv"
    body = r.data.decode()
    assert body.splitlines()[0].startswith("membership_id,full_name")
    assert "Gujarat One" in body
    assert "Kerala One" not in body


def test_out_of_scope_detail_is_404(client, make_member, login):
    ids = _seed_people(make_member)
    make_member("sc@example.com", role="STATE_CONVENER", prant="Kerala Prant")
    login("sc@example.com")
    assert client.get(f"/admin/members/{ids['k1']}").status_code == 200
    assert client.get(f"/admin/members/{ids['g1']}").status_code == 404
    assert client.get("/admin/members/99999").status_code == 404


def test_admin_updates_scope(app, client, post, make_member, login):
    ids = _seed_people(make_member)
    make_member("admin@example.com", role="ADMIN")
    login("admin@example.com")
    r = post(
        f"/admin/members/{ids['k1']}/scope",
        data={"prant": "Gujarat Prant", "district": "Surat", "region": "", "is_active": "1"},
    )
    assert r.status_code == 302
    with session_scope(app) as s:
        p = s.get(Profile, ids["k1"])
        assert p.prant == "Gujarat Prant"
        assert p.district == "Surat"
        assert s.query(AuditEvent).filter(AuditEvent.action == "profile.update_scope").count() == 1


def test_admin_cannot_deactivate_super_controller(app, client, post, make_member, login):
    sc_id = make_member("root@example.com", role="SUPER_CONTROLLER", full_name="Root Controller")
    make_member("admin@example.com", role="ADMIN")
    login("admin@example.com")

    r = client.get(f"/admin/members/{sc_id}")
    assert r.status_code == 200
    assert b"/scope" not in r.data

    r = post(f"/admin/members/{sc_id}/scope", data={"prant": "Kerala Prant"}, follow_redirects=True)
    assert b"You may not edit a Super Controller" in r.data
    with session_scope(app) as s:
        p = s.get(Profile, sc_id)
        assert p.is_active is True
        assert p.user.is_active is True
        assert p.prant is None
        assert s.query(AuditEvent).filter(AuditEvent.action == "profile.update_scope").count() == 0


def test_admin_cannot_rescope_peer_admin(app, client, post, make_member, login):
    peer_id = make_member("peer@example.com", role="ADMIN")
    make_member("admin@example.com", role="ADMIN")
    login("admin@example.com")
    post(f"/admin/members/{peer_id}/scope", data={"prant": "Gujarat Prant", "is_active": "1"})
    with session_scope(app) as s:
        assert s.get(Profile, peer_id).prant is None


def test_super_controller_can_edit_admin(app, client, post, make_member, login):
    admin_id = make_member("admin@example.com", role="ADMIN")
    make_member("root@example.com", role="SUPER_CONTROLLER")
    login("root@example.com")
    post(f"/admin/members/{admin_id}/scope", data={"prant": "Kerala Prant"})
    with session_scope(app) as s:
        p = s.get(Profile, admin_id)
        assert p.prant == "Kerala Prant"
        assert p.is_active is False


def test_scope_update_rejects_unknown_prant(app, client, post, make_member, login):
    ids = _seed_people(make_member)
    make_member("admin@example.com", role="ADMIN")
    login("admin@example.com")
    r = post(f"/admin/members/{ids['k1']}/scope", data={"prant": "Narnia Prant", "is_active": "1"}, follow_redirects=True)
    assert b"Unknown prant" in r.data
    with session_scope(app) as s:
        assert s.get(Profile, ids["k1"]).prant == "Kerala Prant"


def test_deactivating_member_blocks_login(app, client, post, make_member, login):
    ids = _seed_people(make_member)
    make_member("admin@example.com", role="ADMIN")
    login("admin@example.com")
    post(f"/admin/members/{ids['g1']}/scope", data={"prant": "Gujarat Prant"})
    with session_scope(app) as s:
        p = s.get(Profile, ids["g1"])
        assert p.is_active is False
        assert p.user.is_active is False


def test_state_convener_cannot_edit_profiles(client, post, make_member, login):
    ids = _seed_people(make_member)
    make_member("sc@example.com", role="STATE_CONVENER", prant="Kerala Prant")
    login("sc@example.com")
    r = post(f"/admin/members/{ids['k1']}/scope", data={"prant": "Kerala Prant", "is_active": "1"})
    assert r.status_code == 403


def test_admin_changes_role(app, client, post, make_member, login):
    ids = _seed_people(make_member)
    make_member("admin@example.com", role="ADMIN")
    login("admin@example.com")
    r = post(f"/admin/members/{ids['k1']}/role", data={"role": "STATE_CONVENER", "reason": "Elected"})
    assert r.status_code == 302
    with session_scope(app) as s:
        assert s.get(Profile, ids["k1"]).role == "STATE_CONVENER"
        ev = s.query(AuditEvent).filter(AuditEvent.action == "profile.change_role").one()
        assert ev.reason == "Elected"


def test_admin_cannot_grant_admin_or_change_self(app, client, post, make_member, login):
    ids = _seed_people(make_member)
    admin_id = make_member("admin@example.com", role="ADMIN")
    login("admin@example.com")

    r = post(f"/admin/members/{ids['k1']}/role", data={"role": "SUPER_CONTROLLER"}, follow_redirects=True)
    assert b"You may not assign" in r.data

    r = post(f"/admin/members/{admin_id}/role", data={"role": "MEMBER"}, follow_redirects=True)
    assert b"cannot change your own role" in r.data

    with session_scope(app) as s:
        assert s.get(Profile, ids["k1"]).role == "MEMBER"
        assert s.get(Profile, admin_id).role == "ADMIN"


def test_regional_role_requires_region(app, client, post, make_member, login):
    ids = _seed_people(make_member)
    make_member("sup@example.com", role="SUPER_CONTROLLER")
    login("sup@example.com")
    r = post(f"/admin/members/{ids['k1']}/role", data={"role": "REGIONAL_CONVENER"}, follow_redirects=True)
    assert b"Regional roles require a region" in r.data
    with session_scope(app) as s:
        assert s.get(Profile, ids["k1"]).role == "MEMBER"


def test_regions_overview_counts(client, make_member, make_application, login):
    _seed_people(make_member)
    make_application("p@example.com", "Kerala Prant")
    make_member("rc@example.com", role="REGIONAL_CONVENER", region="Southern Region")
    login("rc@example.com")
    r = client.get("/admin/regions")
    assert r.status_code == 200
    body = r.data.decode()
    assert "Kerala Prant" in body
    assert "North Tamil Nadu Prant" in body
    assert "Gujarat Prant" not in body
