from __future__ import annotations

from datetime import datetime

from flask import Blueprint, abort, current_app, flash, g, redirect, render_template, request, url_for

from app.savishkar.access import ASSIGN_EVENT_MANAGER, MANAGE_EVENT_DELEGATES
from app.savishkar.constants import PRANT_LIST
from app.savishkar.db import db_session
from app.savishkar.models import Profile, User
from app.savishkar.modules.events.models import EventDelegate
from app.savishkar.modules.events.service import (
    add_delegate,
    assign_event_manager,
    is_term_active,
    remove_delegate,
    revoke_event_manager,
    validate_delegate_payload,
)
from app.savishkar.rbac import current_principal, ensure_in_scope, record_from_delegate, require_capability, scoped
from app.savishkar.roles import Role

bp = Blueprint("events", __name__)


def _current_user() -> User:
    u = getattr(g, "current_user", None)
    if not u:
        raise RuntimeError("No current user")
    return u


# ---------- Delegates ----------
@bp.get("/events")
@require_capability(MANAGE_EVENT_DELEGATES)
def events_list():
    s = db_session()
    q = s.query(EventDelegate)
    q = scoped(q, current_principal(), state_column=EventDelegate.prant, owner_column=EventDelegate.manager_user_id)
    event_filter = (request.args.get("event") or "").strip()
    if event_filter:
        q = q.filter(EventDelegate.event_name == event_filter)
    delegates = q.order_by(EventDelegate.created_at.desc(), EventDelegate.id.desc()).all()
    return render_template(
        "admin/events/list.html",
        delegates=delegates,
        event_filter=event_filter,
        prants=PRANT_LIST,
    )


@bp.post("/events")
@require_capability(MANAGE_EVENT_DELEGATES)
def events_register():
    s = db_session()
    payload = {k: request.form.get(k) for k in ("event_name", "name", "email", "phone", "prant")}
    errors = validate_delegate_payload(payload)
    if errors:
        for e in errors:
            flash(e, "danger")
        return redirect(url_for("events.events_list"))

    add_delegate(s, payload, _current_user())
    s.commit()
    flash("Delegate registered.", "success")
    return redirect(url_for("events.events_list"))


@bp.post("/events/<int:delegate_id>/delete")
@require_capability(MANAGE_EVENT_DELEGATES)
def events_remove(delegate_id: int):
    s = db_session()
    row = s.get(EventDelegate, delegate_id)
    if not row:
        abort(404)
    ensure_in_scope(record_from_delegate(row))
    remove_delegate(s, row, _current_user())
    s.commit()
    flash("Delegate removed.", "success")
    return redirect(url_for("events.events_list"))


# ---------- Event managers ----------
@bp.get("/event-managers")
@require_capability(ASSIGN_EVENT_MANAGER)
def event_managers_list():
    s = db_session()
    managers = (
        s.query(Profile)
        .filter(Profile.role == Role.EVENT_MANAGER.value)
        .order_by(Profile.event_manager_expiry.asc(), Profile.full_name.asc())
        .all()
    )
    now = datetime.utcnow()
    return render_template(
        "admin/events/managers.html",
        managers=[(p, is_term_active(p, now)) for p in managers],
        term_days=current_app.config["EVENT_MANAGER_TERM_DAYS"],
    )


@bp.post("/event-managers")
@require_capability(ASSIGN_EVENT_MANAGER)
def event_managers_assign():
    s = db_session()
    key = (request.form.get("member") or "").strip()
    if not key:
        flash("Email or membership ID is required.", "danger")
        return redirect(url_for("events.event_managers_list"))

    profile = (
        s.query(Profile)
        .filter((Profile.email == key.lower()) | (Profile.membership_id == key.upper()))
        .one_or_none()
    )
    if not profile:
        flash("No member found with that email or membership ID.", "danger")
        return redirect(url_for("events.event_managers_list"))

    try:
        assign_event_manager(s, profile, _current_user(), term_days=current_app.config["EVENT_MANAGER_TERM_DAYS"])
    except ValueError as e:
        flash(str(e), "danger")
        return redirect(url_for("events.event_managers_list"))

    s.commit()
    flash(f"{profile.full_name} is an event manager until {profile.event_manager_expiry:%Y-%m-%d}.", "success")
    return redirect(url_for("events.event_managers_list"))


@bp.post("/event-managers/<int:profile_id>/revoke")
@require_capability(ASSIGN_EVENT_MANAGER)
def event_managers_revoke(profile_id: int):
    s = db_session()
    profile = s.get(Profile, profile_id)
    if not profile:
        abort(404)
    try:
        revoke_event_manager(s, profile, _current_user())
    except ValueError as e:
        flash(str(e), "danger")
        return redirect(url_for("events.event_managers_list"))
    s.commit()
    flash("Event manager role revoked.", "success")
    return redirect(url_for("events.event_managers_list"))
