"""Request-side glue: principals from stored profiles and Scope -> SQL."""
from datetime import datetime, timedelta

from app.savishkar.access import ANONYMOUS, Principal, resolve_scope
from app.savishkar.db import session_scope
from app.savishkar.models import Profile
from app.savishkar.rbac import apply_scope, principal_for_profile, record_from_profile, scoped
from app.savishkar.roles import Role


def _profile(**kw):
    defaults = dict(user_id=7, full_name="X", email="x@example.com", role="MEMBER", is_active=True)
    defaults.update(kw)
    return Profile(**defaults)


def test_principal_uses_region_for_regional_roles():
    p = principal_for_profile(_profile(role="REGIONAL_CONVENER", prant="Kerala Prant", region="Southern Region"))
    assert p == Principal(Role.REGIONAL_CONVENER, "Southern Region", None, "7")


def test_principal_uses_prant_for_other_roles():
    p = principal_for_profile(_profile(role="STATE_CONVENER", prant="Kerala Prant", district="Kochi", region="Southern Region"))
    assert p.scope_state == "Kerala Prant"
    assert p.scope_district == "Kochi"
    assert p.owner_id == "7"


def test_inactive_profile_is_anonymous():
    assert principal_for_profile(_profile(is_active=False, role="ADMIN")) == ANONYMOUS
    assert principal_for_profile(None) == ANONYMOUS


def test_lapsed_event_manager_is_member():
    now = datetime(2026, 3, 1)
    active = _profile(role="EVENT_MANAGER", event_manager_expiry=now + timedelta(hours=1))
    lapsed = _profile(role="EVENT_MANAGER", event_manager_expiry=now - timedelta(hours=1))
    assert principal_for_profile(active, now).role is Role.EVENT_MANAGER
    assert principal_for_profile(lapsed, now).role is Role.MEMBER


def test_record_from_profile():
    r = record_from_profile(_profile(prant="Gujarat Prant", district="Surat"))
    assert (r.scope_state, r.scope_district, r.owner_id) == ("Gujarat Prant", "Surat", "7")


def test_sql_scope_matches_in_memory_scope(app, make_member):
    ids = {
        "k": make_member("k@example.com", prant="Kerala Prant"),
        "t": make_member("t@example.com", prant="North Tamil Nadu Prant"),
        "g": make_member("g@example.com", prant="Gujarat Prant"),
        "n": make_member("n@example.com", prant=None),
    }
    principals = [
        Principal.build(Role.ADMIN),
        Principal.build(Role.NATIONAL_CO_CONVENER),
        Principal.build(Role.REGIONAL_CONVENER, "Southern Region"),
        Principal.build(Role.REGIONAL_CONVENER, "Nowhere"),
        Principal.build(Role.STATE_CO_INCHARGE, "Gujarat Prant"),
        Principal.build(Role.MEMBER),
        Principal.build("BOGUS", "Kerala Prant"),
    ]
    with session_scope(app) as s:
        rows = s.query(Profile).order_by(Profile.id).all()
        # Owner scope keyed on the "k" member's user id
        owner = Principal.build(Role.MEMBER, owner_id=s.get(Profile, ids["k"]).user_id)
        for principal in principals + [owner]:
            scope = resolve_scope(principal)
            expected = [p.id for p in rows if scope.admits(record_from_profile(p))]
            q = apply_scope(s.query(Profile), scope, state_column=Profile.prant, owner_column=Profile.user_id)
            assert [p.id for p in q.order_by(Profile.id)] == expected, principal


def test_scoped_without_owner_column_denies_owner_scope(app, make_member):
    make_member("k@example.com", prant="Kerala Prant")
    with session_scope(app) as s:
        uid = s.query(Profile).one().user_id
        q = scoped(s.query(Profile), Principal.build(Role.MEMBER, owner_id=uid), state_column=Profile.prant)
        assert q.count() == 0
