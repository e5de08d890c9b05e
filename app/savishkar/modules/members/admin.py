from __future__ import annotations

from datetime import date

from flask import Blueprint, Response, abort, flash, g, redirect, render_template, request, url_for
from sqlalchemy import func

from app.savishkar.access import CHANGE_ROLES, EDIT_PROFILES, EXPORT_MEMBERS, VIEW_MEMBERS, VIEW_REPORTS, resolve_scope
from app.savishkar.constants import PRANT_LIST, REGION_NAMES
from app.savishkar.db import db_session
from app.savishkar.models import Profile, User
from app.savishkar.modules.applications.models import Application
from app.savishkar.modules.members.service import (
    change_role,
    counts_by_prant,
    export_profiles_csv,
    outranks_target,
    update_profile_scope,
    validate_scope_payload,
)
from app.savishkar.rbac import (
    current_principal,
    ensure_in_scope,
    record_from_profile,
    require_capability,
    scoped,
    user_can,
)
from app.savishkar.roles import ROLE_HIERARCHY, assignable_roles, parse_role, role_label

bp = Blueprint("members", __name__)


def _current_user() -> User:
    u = getattr(g, "current_user", None)
    if not u:
        raise RuntimeError("No current user")
    return u


def _scoped_profiles():
    s = db_session()
    q = s.query(Profile)
    q = scoped(q, current_principal(), state_column=Profile.prant, owner_column=Profile.user_id)

    search = (request.args.get("q") or "").strip()
    prant_filter = (request.args.get("prant") or "").strip()
    role_filter = (request.args.get("role") or "").strip()

    if search:
        like = f"%{search}%"
        q = q.filter(
            (Profile.full_name.ilike(like))
            | (Profile.email.ilike(like))
            | (Profile.membership_id.ilike(like))
        )
    if prant_filter:
        q = q.filter(Profile.prant == prant_filter)
    if role_filter:
        q = q.filter(Profile.role == role_filter)

    return q.order_by(Profile.full_name.asc(), Profile.id.asc()), search, prant_filter, role_filter


def _get_in_scope(profile_id: int) -> Profile:
    s = db_session()
    profile = s.get(Profile, profile_id)
    if not profile:
        abort(404)
    ensure_in_scope(record_from_profile(profile))
    return profile


# ---------- List ----------
@bp.get("/members")
@require_capability(VIEW_MEMBERS)
def members_list():
    q, search, prant_filter, role_filter = _scoped_profiles()
    profiles = q.all()
    return render_template(
        "admin/members/list.html",
        profiles=profiles,
        by_prant=counts_by_prant(profiles),
        search=search,
        prant_filter=prant_filter,
        role_filter=role_filter,
        prants=PRANT_LIST,
        roles=ROLE_HIERARCHY,
        role_label=role_label,
        can_export=user_can(EXPORT_MEMBERS),
    )


@bp.get("/members/export.csv")
@require_capability(EXPORT_MEMBERS)
def members_export():
    q, _search, _prant, _role = _scoped_profiles()
    body = export_profiles_csv(q.all())
    filename = f"members-{date.today().isoformat()}.csv"
    return Response(
        body,
        mimetype="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ---------- Detail ----------
@bp.get("/members/<int:profile_id>")
@require_capability(VIEW_MEMBERS)
def member_detail(profile_id: int):
    profile = _get_in_scope(profile_id)
    principal = current_principal()
    senior = outranks_target(principal.role, profile) and profile.user_id != _current_user().id
    return render_template(
        "admin/members/detail.html",
        profile=profile,
        prants=PRANT_LIST,
        regions=REGION_NAMES,
        assignable=assignable_roles(principal.role) if user_can(CHANGE_ROLES) and senior else [],
        can_edit=user_can(EDIT_PROFILES) and senior,
        role_label=role_label,
    )


@bp.post("/members/<int:profile_id>/scope")
@require_capability(EDIT_PROFILES)
def member_update_scope(profile_id: int):
    s = db_session()
    u = _current_user()
    profile = _get_in_scope(profile_id)

    if profile.user_id == u.id:
        flash("You cannot modify your own profile from this page.", "danger")
        return redirect(url_for("members.member_detail", profile_id=profile_id))

    payload = {
        "prant": request.form.get("prant"),
        "district": request.form.get("district"),
        "region": request.form.get("region"),
        "is_active": request.form.get("is_active") == "1",
    }
    errors = validate_scope_payload(payload, parse_role(profile.role))
    if errors:
        for e in errors:
            flash(e, "danger")
        return redirect(url_for("members.member_detail", profile_id=profile_id))

    try:
        update_profile_scope(s, profile, payload, u, current_principal().role)
    except ValueError as e:
        s.rollback()
        flash(str(e), "danger")
        return redirect(url_for("members.member_detail", profile_id=profile_id))
    s.commit()
    flash(f"Profile updated for {profile.full_name}.", "success")
    return redirect(url_for("members.member_detail", profile_id=profile_id))


@bp.post("/members/<int:profile_id>/role")
@require_capability(CHANGE_ROLES)
def member_change_role(profile_id: int):
    s = db_session()
    u = _current_user()
    profile = _get_in_scope(profile_id)
    new_role = (request.form.get("role") or "").strip()

    errors = validate_scope_payload(
        {"prant": profile.prant, "region": profile.region}, parse_role(new_role)
    )
    if errors:
        for e in errors:
            flash(e, "danger")
        return redirect(url_for("members.member_detail", profile_id=profile_id))

    try:
        change_role(s, profile, new_role, u, current_principal().role, reason=(request.form.get("reason") or "").strip() or None)
    except ValueError as e:
        s.rollback()
        flash(str(e), "danger")
        return redirect(url_for("members.member_detail", profile_id=profile_id))
    s.commit()
    flash(f"{profile.full_name} is now {role_label(profile.role)}.", "success")
    return redirect(url_for("members.member_detail", profile_id=profile_id))


# ---------- Regional overview ----------
@bp.get("/regions")
@require_capability(VIEW_REPORTS)
def regions_overview():
    """Members and pending applications per prant, limited to the principal's scope."""
    s = db_session()
    principal = current_principal()

    member_q = s.query(Profile.prant, func.count(Profile.id)).filter(Profile.is_active.is_(True))
    member_q = scoped(member_q, principal, state_column=Profile.prant, include_own=False)
    members = dict(member_q.group_by(Profile.prant).all())

    pending_q = s.query(Application.prant, func.count(Application.id)).filter(Application.status == "pending")
    pending_q = scoped(pending_q, principal, state_column=Application.prant, include_own=False)
    pending = dict(pending_q.group_by(Application.prant).all())

    scope = resolve_scope(principal, include_own=False)
    prants = sorted(scope.states) if scope.states else sorted(p for p in set(members) | set(pending) if p)
    rows = [(p, members.get(p, 0), pending.get(p, 0)) for p in prants]

    return render_template(
        "admin/regions.html",
        rows=rows,
        total_members=sum(r[1] for r in rows),
        total_pending=sum(r[2] for r in rows),
        scope_label=principal.scope_state or "All prants",
    )
