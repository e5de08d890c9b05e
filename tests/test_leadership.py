"""Leadership roster and the public leadership page."""
from app.savishkar.db import session_scope
from app.savishkar.models import AuditEvent, Profile
from app.savishkar.modules.leadership.service import leadership_tier, roster
from app.savishkar.roles import Role


def _seed_leaders(make_member):
    return {
        "dc": make_member("dc@example.com", role="DISTRICT_CONVENER", prant="Kerala Prant", district="Kochi", full_name="Kochi Convener"),
        "si": make_member("si@example.com", role="STATE_INCHARGE", prant="Kerala Prant", full_name="Kerala Incharge"),
        "gj": make_member("gj@example.com", role="STATE_CONVENER", prant="Gujarat Prant", full_name="Gujarat Convener"),
        "m": make_member("m@example.com", prant="Kerala Prant", full_name="Plain Member"),
    }


def test_leadership_tier():
    assert leadership_tier(Role.NATIONAL_CO_CONVENER) == "National"
    assert leadership_tier("STATE_INCHARGE") == "State"
    assert leadership_tier(Role.DISTRICT_CO_INCHARGE) == "District"
    assert leadership_tier(Role.REGIONAL_CONVENER) is None
    assert leadership_tier("MEMBER") is None


def test_roster_orders_by_rank_then_name():
    people = [
        Profile(id=1, full_name="Zed", role="DISTRICT_CONVENER", prant="Kerala Prant"),
        Profile(id=2, full_name="Amy", role="DISTRICT_CONVENER", prant="Gujarat Prant"),
        Profile(id=3, full_name="Bob", role="NATIONAL_CONVENER", prant=None),
    ]
    rows = roster(people)
    assert [r.profile.full_name for r in rows] == ["Bob", "Amy", "Zed"]
    assert rows[2].region == "Southern Region"
    assert rows[0].region is None
    assert [r.profile.full_name for r in roster(people, "National")] == ["Bob"]


def test_state_convener_sees_leaders_in_own_prant(client, make_member, login):
    _seed_leaders(make_member)
    make_member("sc@example.com", role="STATE_CONVENER", prant="Kerala Prant", full_name="Kerala Convener")
    login("sc@example.com")

    r = client.get("/admin/leadership")
    assert r.status_code == 200
    assert b"Kochi Convener" in r.data
    assert b"Kerala Incharge" in r.data
    assert b"Southern Region" in r.data
    assert b"Gujarat Convener" not in r.data
    assert b"Plain Member" not in r.data

    r = client.get("/admin/leadership?tier=District")
    assert b"Kochi Convener" in r.data
    assert b"Kerala Incharge" not in r.data


def test_featuring_puts_member_on_public_page(app, client, post, make_member, login):
    ids = _seed_leaders(make_member)
    make_member("sc@example.com", role="STATE_CONVENER", prant="Kerala Prant")
    login("sc@example.com")

    assert b"Plain Member" not in client.get("/leadership").data

    r = post(f"/admin/leadership/{ids['m']}/feature", data={"featured": "1"}, follow_redirects=True)
    assert b"is now shown on the leadership page" in r.data
    # Featured members join the roster even without a leader role.
    assert b"Plain Member" in r.data

    with session_scope(app) as s:
        assert s.get(Profile, ids["m"]).is_leadership is True
        assert s.query(AuditEvent).filter(AuditEvent.action == "leadership.feature").count() == 1

    assert b"Plain Member" in client.get("/leadership").data

    post(f"/admin/leadership/{ids['m']}/feature", data={"featured": "0"})
    assert b"Plain Member" not in client.get("/leadership").data


def test_cannot_feature_senior_or_out_of_scope(app, client, post, make_member, login):
    ids = _seed_leaders(make_member)
    senior = make_member("sc@example.com", role="STATE_CONVENER", prant="Kerala Prant")
    make_member("co@example.com", role="STATE_CO_CONVENER", prant="Kerala Prant")
    login("co@example.com")

    r = post(f"/admin/leadership/{senior}/feature", data={"featured": "1"}, follow_redirects=True)
    assert b"You may not feature a State Convener" in r.data
    assert post(f"/admin/leadership/{ids['gj']}/feature", data={"featured": "1"}).status_code == 404

    with session_scope(app) as s:
        assert s.get(Profile, senior).is_leadership is False
        assert s.get(Profile, ids["gj"]).is_leadership is False


def test_state_incharge_cannot_manage_leadership(client, make_member, login):
    make_member("si@example.com", role="STATE_INCHARGE", prant="Kerala Prant")
    login("si@example.com")
    assert client.get("/admin/leadership").status_code == 403
