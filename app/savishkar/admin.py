from datetime import date, datetime, time, timedelta

from flask import Blueprint, flash, g, redirect, render_template, request, url_for
from sqlalchemy import text

from app.savishkar.access import (
    APPROVE_APPLICATION,
    ASSIGN_EVENT_MANAGER,
    MANAGE_ANNOUNCEMENTS,
    MANAGE_DISTRICTS,
    MANAGE_EVENT_DELEGATES,
    MANAGE_LEADERSHIP,
    MANAGE_PROGRAMS,
    SCOPE_ALL,
    SCOPE_OWNER,
    VIEW_ADMIN,
    VIEW_AUDIT,
    VIEW_MEMBERS,
    VIEW_REPORTS,
    can,
    capabilities_for,
    is_view_only,
    resolve_scope,
)
from app.savishkar.audit import event_metadata
from app.savishkar.db import db_session
from app.savishkar.models import AuditEvent
from app.savishkar.modules.applications.models import Application
from app.savishkar.rbac import current_principal, require_capability, scoped
from app.savishkar.roles import role_label

bp = Blueprint("admin", __name__)

# (endpoint, label, capability)
NAV_ITEMS = (
    ("applications.approvals_list", "Approvals", APPROVE_APPLICATION),
    ("members.members_list", "Members", VIEW_MEMBERS),
    ("members.regions_overview", "Regional overview", VIEW_REPORTS),
    ("districts.districts_list", "Districts", MANAGE_DISTRICTS),
    ("leadership.leadership_list", "Leadership", MANAGE_LEADERSHIP),
    ("programs.programs_list", "Programs", MANAGE_PROGRAMS),
    ("announcements.announcements_list", "Announcements", MANAGE_ANNOUNCEMENTS),
    ("events.events_list", "Event delegates", MANAGE_EVENT_DELEGATES),
    ("events.event_managers_list", "Event managers", ASSIGN_EVENT_MANAGER),
    ("admin.audit_list", "Audit trail", VIEW_AUDIT),
)


def _parse_date(s: str) -> date | None:
    s = (s or "").strip()
    if not s:
        return None
    try:
        return date.fromisoformat(s)
    except ValueError:
        return None


def _scope_summary() -> str:
    scope = resolve_scope(current_principal(), include_own=False)
    if scope.kind == SCOPE_ALL:
        return "All prants"
    if scope.states:
        return ", ".join(sorted(scope.states))
    if scope.kind == SCOPE_OWNER:
        return "Own records"
    return "None"


@bp.get("/")
@require_capability(VIEW_ADMIN)
def index():
    s = db_session()
    principal = current_principal()
    status = {"db_connected": False, "db_error": None, "pending_in_scope": None}

    # DB connectivity (lightweight)
    try:
        s.execute(text("SELECT 1"))
        status["db_connected"] = True
    except Exception as e:
        status["db_error"] = str(e)

    if can(principal, APPROVE_APPLICATION):
        q = s.query(Application).filter(Application.status == "pending")
        status["pending_in_scope"] = scoped(q, principal, state_column=Application.prant, include_own=False).count()

    nav = [(endpoint, label) for endpoint, label, action in NAV_ITEMS if can(principal, action)]
    return render_template(
        "admin/index.html",
        system_status=status,
        nav=nav,
        view_only=is_view_only(principal),
        scope_summary=_scope_summary(),
        role_label=role_label(principal.role),
    )


@bp.get("/me")
@require_capability(VIEW_ADMIN)
def me():
    """Show the current user's role, scope and capabilities (useful when a 403 is unexpected)."""
    principal = current_principal()
    user = getattr(g, "current_user", None)
    return render_template(
        "admin/me.html",
        user=user,
        profile=user.profile if user else None,
        role_label=role_label(principal.role),
        scope_summary=_scope_summary(),
        capabilities=sorted(capabilities_for(principal)),
    )


@bp.get("/audit")
@require_capability(VIEW_AUDIT)
def audit_list():
    """
    Minimal audit trail UI (last 200 events) with simple filters:
    - action (contains)
    - actor_email (contains)
    - date range (YYYY-MM-DD)
    """
    s = db_session()
    action = (request.args.get("action") or "").strip()
    actor_email = (request.args.get("actor_email") or "").strip()
    date_from = _parse_date(request.args.get("date_from") or "")
    date_to = _parse_date(request.args.get("date_to") or "")

    if (request.args.get("date_from") or "").strip() and not date_from:
        flash("date_from must be YYYY-MM-DD", "danger")
    if (request.args.get("date_to") or "").strip() and not date_to:
        flash("date_to must be YYYY-MM-DD", "danger")

    q = s.query(AuditEvent)
    if action:
        q = q.filter(AuditEvent.action.like(f"%{action}%"))
    if actor_email:
        q = q.filter(AuditEvent.actor_user_email.like(f"%{actor_email.lower()}%"))
    if date_from:
        q = q.filter(AuditEvent.created_at >= datetime.combine(date_from, time.min))
    if date_to:
        # inclusive end-date (treat as whole day)
        q = q.filter(AuditEvent.created_at < datetime.combine(date_to + timedelta(days=1), time.min))

    events = q.order_by(AuditEvent.created_at.desc(), AuditEvent.id.desc()).limit(200).all()
    return render_template(
        "admin/audit/list.html",
        events=[(e, event_metadata(e)) for e in events],
        role_label=role_label,
        action=action,
        actor_email=actor_email,
        date_from=(request.args.get("date_from") or "").strip(),
        date_to=(request.args.get("date_to") or "").strip(),
    )


@bp.get("/login")
def login_redirect():
    return redirect(url_for("auth.login_get", next=url_for("admin.index")))
