from __future__ import annotations

from flask import Blueprint, abort, flash, g, redirect, render_template, request, url_for

from app.savishkar.access import MANAGE_LEADERSHIP
from app.savishkar.db import db_session
from app.savishkar.models import Profile, User
from app.savishkar.modules.leadership.service import TIERS, leaders_query, roster, set_featured
from app.savishkar.rbac import current_principal, ensure_in_scope, record_from_profile, require_capability, scoped
from app.savishkar.roles import role_label

bp = Blueprint("leadership", __name__)


def _current_user() -> User:
    u = getattr(g, "current_user", None)
    if not u:
        raise RuntimeError("No current user")
    return u


@bp.get("/leadership")
@require_capability(MANAGE_LEADERSHIP)
def leadership_list():
    s = db_session()
    q = scoped(leaders_query(s), current_principal(), state_column=Profile.prant, include_own=False)
    tier = (request.args.get("tier") or "").strip()
    if tier not in {name for name, _roles in TIERS}:
        tier = ""
    return render_template(
        "admin/leadership/list.html",
        rows=roster(q.all(), tier or None),
        tier=tier,
        tiers=[name for name, _roles in TIERS],
        role_label=role_label,
    )


@bp.post("/leadership/<int:profile_id>/feature")
@require_capability(MANAGE_LEADERSHIP)
def leadership_feature(profile_id: int):
    s = db_session()
    profile = s.get(Profile, profile_id)
    if not profile:
        abort(404)
    ensure_in_scope(record_from_profile(profile), include_own=False)

    featured = request.form.get("featured") == "1"
    try:
        set_featured(s, profile, featured, _current_user(), current_principal().role)
    except ValueError as e:
        s.rollback()
        flash(str(e), "danger")
        return redirect(url_for("leadership.leadership_list"))
    s.commit()
    if featured:
        flash(f"{profile.full_name} is now shown on the leadership page.", "success")
    else:
        flash(f"{profile.full_name} is no longer shown on the leadership page.", "success")
    return redirect(url_for("leadership.leadership_list"))
