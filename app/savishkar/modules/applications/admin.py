from __future__ import annotations

from flask import Blueprint, abort, current_app, flash, g, redirect, render_template, request, url_for

from app.savishkar.access import APPROVE_APPLICATION
from app.savishkar.constants import APPLICATION_STATUSES
from app.savishkar.db import db_session
from app.savishkar.models import User
from app.savishkar.modules.applications.models import Application
from app.savishkar.modules.applications.service import approve_application, reject_application
from app.savishkar.rbac import (
    current_principal,
    ensure_in_scope,
    record_from_application,
    require_capability,
    scoped,
)
from app.savishkar.roles import role_label

bp = Blueprint("applications", __name__)


def _current_user() -> User:
    u = getattr(g, "current_user", None)
    if not u:
        raise RuntimeError("No current user")
    return u


def _get_in_scope(application_id: int) -> Application:
    s = db_session()
    application = s.get(Application, application_id)
    if not application:
        abort(404)
    ensure_in_scope(record_from_application(application), include_own=False)
    return application


# ---------- List ----------
@bp.get("/approvals")
@require_capability(APPROVE_APPLICATION)
def approvals_list():
    s = db_session()
    status = (request.args.get("status") or "pending").strip()
    if status not in APPLICATION_STATUSES:
        status = "pending"

    q = s.query(Application).filter(Application.status == status)
    q = scoped(q, current_principal(), state_column=Application.prant, include_own=False)
    applications = q.order_by(Application.applied_at.desc(), Application.id.desc()).all()

    return render_template(
        "admin/approvals/list.html",
        applications=applications,
        status=status,
        statuses=APPLICATION_STATUSES,
        role_label=role_label,
    )


# ---------- Decide ----------
@bp.post("/approvals/<int:application_id>/approve")
@require_capability(APPROVE_APPLICATION)
def approval_approve(application_id: int):
    s = db_session()
    u = _current_user()
    application = _get_in_scope(application_id)

    try:
        profile, temp_password = approve_application(s, application, u, current_principal().role)
    except ValueError as e:
        s.rollback()
        flash(str(e), "danger")
        return redirect(url_for("applications.approvals_list"))
    s.commit()

    current_app.logger.info(
        "Application %s approved by user %s (membership_id=%s)", application.id, u.id, profile.membership_id
    )
    flash(
        f"{profile.full_name} approved with ID {profile.membership_id}. Temporary password: {temp_password}",
        "success",
    )
    return redirect(url_for("applications.approvals_list"))


@bp.post("/approvals/<int:application_id>/reject")
@require_capability(APPROVE_APPLICATION)
def approval_reject(application_id: int):
    s = db_session()
    u = _current_user()
    application = _get_in_scope(application_id)

    try:
        reject_application(s, application, u, request.form.get("reason") or "")
    except ValueError as e:
        s.rollback()
        flash(str(e), "danger")
        return redirect(url_for("applications.approvals_list"))
    s.commit()

    flash(f"Application from {application.full_name} rejected.", "success")
    return redirect(url_for("applications.approvals_list"))
