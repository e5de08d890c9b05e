"""Approval center: scoped listing and decisions."""
import re

from app.savishkar.audit import event_metadata
from app.savishkar.db import session_scope
from app.savishkar.models import AuditEvent, Profile, User
from app.savishkar.modules.applications.models import Application


def test_join_form_creates_pending_application(app, client, post):
    r = post(
        "/join",
        data={
            "full_name": "Meera Nair",
            "email": "Meera@Example.com",
            "phone": "9876543210",
            "prant": "Kerala Prant",
            "district": "Thrissur",
            "designation": "STUDENT_LEADER",
            "date_of_birth": "2004-05-01",
        },
    )
    assert r.status_code == 302
    with session_scope(app) as s:
        a = s.query(Application).one()
        assert a.status == "pending"
        assert a.email == "meera@example.com"
        assert a.designation == "STUDENT_LEADER"
        assert s.query(AuditEvent).filter(AuditEvent.action == "application.submit").count() == 1


def test_join_form_validation(client, post):
    r = post("/join", data={"full_name": "", "email": "x", "phone": "", "prant": "Narnia Prant", "designation": "ADMIN"})
    assert r.status_code == 400
    assert b"Full name is required" in r.data
    assert b"Unknown prant" in r.data
    assert b"Invalid designation" in r.data


def test_state_convener_lists_only_own_prant(client, make_member, make_application, login):
    make_member("sc@example.com", role="STATE_CONVENER", prant="Kerala Prant")
    make_application("kerala@example.com", "Kerala Prant", full_name="Kerala Applicant")
    make_application("gujarat@example.com", "Gujarat Prant", full_name="Gujarat Applicant")
    login("sc@example.com")

    r = client.get("/admin/approvals")
    assert r.status_code == 200
    assert b"Kerala Applicant" in r.data
    assert b"Gujarat Applicant" not in r.data


def test_regional_convener_lists_region(client, make_member, make_application, login):
    make_member("rc@example.com", role="REGIONAL_CONVENER", region="Southern Region")
    make_application("a@example.com", "South Tamil Nadu Prant", full_name="Tamil Applicant")
    make_application("b@example.com", "Punjab Prant", full_name="Punjab Applicant")
    login("rc@example.com")

    r = client.get("/admin/approvals")
    assert b"Tamil Applicant" in r.data
    assert b"Punjab Applicant" not in r.data


def test_regional_convener_with_bad_region_is_denied(client, make_member, make_application, login):
    make_member("rc@example.com", role="REGIONAL_CONVENER", region="Southern Regoin")
    make_application("a@example.com", "Kerala Prant")
    login("rc@example.com")
    assert client.get("/admin/approvals").status_code == 403


def test_approve_creates_member(app, client, post, make_member, make_application, login):
    make_member("sc@example.com", role="STATE_CONVENER", prant="Kerala Prant")
    app_id = make_application("new@example.com", "Kerala Prant", designation="DISTRICT_CONVENER")
    login("sc@example.com")

    r = post(f"/admin/approvals/{app_id}/approve", follow_redirects=True)
    assert r.status_code == 200
    assert b"Temporary password" in r.data

    with session_scope(app) as s:
        a = s.get(Application, app_id)
        assert a.status == "approved"
        assert a.reviewed_at is not None
        p = s.get(Profile, a.profile_id)
        assert p.role == "DISTRICT_CONVENER"
        assert re.fullmatch(r"SAV-KER-\d{4}-\d{4}", p.membership_id)
        u = s.get(User, p.user_id)
        assert u.must_change_password is True
        ev = s.query(AuditEvent).filter(AuditEvent.action == "application.approve").one()
        assert event_metadata(ev)["actor_role"] == "STATE_CONVENER"


def test_approve_grants_member_when_reviewer_does_not_outrank(app, client, post, make_member, make_application, login):
    make_member("sc@example.com", role="STATE_CO_CONVENER", prant="Kerala Prant")
    app_id = make_application("peer@example.com", "Kerala Prant", designation="STATE_CONVENER")
    login("sc@example.com")
    post(f"/admin/approvals/{app_id}/approve")
    with session_scope(app) as s:
        p = s.query(Profile).filter(Profile.email == "peer@example.com").one()
        assert p.role == "MEMBER"


def test_out_of_scope_application_is_404(app, client, post, make_member, make_application, login):
    make_member("sc@example.com", role="STATE_CONVENER", prant="Kerala Prant")
    app_id = make_application("g@example.com", "Gujarat Prant")
    login("sc@example.com")
    r = post(f"/admin/approvals/{app_id}/approve")
    assert r.status_code == 404
    with session_scope(app) as s:
        assert s.get(Application, app_id).status == "pending"


def test_reject_requires_reason(app, client, post, make_member, make_application, login):
    make_member("admin@example.com", role="ADMIN")
    app_id = make_application("r@example.com", "Kerala Prant")
    login("admin@example.com")

    r = post(f"/admin/approvals/{app_id}/reject", data={"reason": "  "}, follow_redirects=True)
    assert b"A reason is required" in r.data
    with session_scope(app) as s:
        assert s.get(Application, app_id).status == "pending"

    post(f"/admin/approvals/{app_id}/reject", data={"reason": "Incomplete details"})
    with session_scope(app) as s:
        a = s.get(Application, app_id)
        assert a.status == "rejected"
        assert a.rejection_reason == "Incomplete details"


def test_only_pending_can_be_decided(app, client, post, make_member, make_application, login):
    make_member("admin@example.com", role="ADMIN")
    app_id = make_application("done@example.com", "Kerala Prant", status="rejected")
    login("admin@example.com")
    r = post(f"/admin/approvals/{app_id}/approve", follow_redirects=True)
    assert b"already rejected" in r.data
    with session_scope(app) as s:
        assert s.query(Profile).filter(Profile.email == "done@example.com").count() == 0


def test_existing_email_blocks_approval(app, client, post, make_member, make_application, login):
    make_member("admin@example.com", role="ADMIN")
    make_member("dup@example.com")
    app_id = make_application("dup@example.com", "Kerala Prant")
    login("admin@example.com")
    r = post(f"/admin/approvals/{app_id}/approve", follow_redirects=True)
    assert b"already exists" in r.data


def test_state_incharge_cannot_approve(client, make_member, login):
    make_member("si@example.com", role="STATE_INCHARGE", prant="Kerala Prant")
    login("si@example.com")
    assert client.get("/admin/approvals").status_code == 403


def test_approvals_status_filter(client, make_member, make_application, login):
    make_member("admin@example.com", role="ADMIN")
    make_application("p@example.com", "Kerala Prant", full_name="Pending Person")
    make_application("r@example.com", "Kerala Prant", status="rejected", full_name="Rejected Person")
    login("admin@example.com")

    r = client.get("/admin/approvals?status=rejected")
    assert b"Rejected Person" in r.data and b"Pending Person" not in r.data
    # Unknown statuses fall back to the pending queue.
    r = client.get("/admin/approvals?status=archived")
    assert b"Pending Person" in r.data and b"Rejected Person" not in r.data
