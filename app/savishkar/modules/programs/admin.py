from __future__ import annotations

from flask import Blueprint, abort, flash, g, redirect, render_template, request, url_for

from app.savishkar.access import MANAGE_PROGRAMS, SCOPE_ALL, resolve_scope
from app.savishkar.constants import PRANT_LIST, PROGRAM_TYPES
from app.savishkar.db import db_session
from app.savishkar.models import User
from app.savishkar.modules.programs.models import Program
from app.savishkar.modules.programs.service import (
    PENDING,
    approve_program,
    create_program,
    delete_program,
    set_program_published,
    validate_program_payload,
)
from app.savishkar.rbac import (
    current_principal,
    ensure_in_scope,
    manageable_prants,
    record_from_program,
    require_capability,
    scoped,
)
from app.savishkar.roles import ADMIN_ROLES

bp = Blueprint("programs", __name__)


def _current_user() -> User:
    u = getattr(g, "current_user", None)
    if not u:
        raise RuntimeError("No current user")
    return u


def _get_in_scope(program_id: int) -> Program:
    s = db_session()
    row = s.get(Program, program_id)
    if not row:
        abort(404)
    ensure_in_scope(record_from_program(row), include_own=False)
    return row


@bp.get("/programs")
@require_capability(MANAGE_PROGRAMS)
def programs_list():
    s = db_session()
    principal = current_principal()
    q = scoped(s.query(Program), principal, state_column=Program.prant, include_own=False)
    rows = q.order_by(Program.event_date.desc(), Program.id.desc()).all()
    return render_template(
        "admin/programs/list.html",
        programs=rows,
        program_types=PROGRAM_TYPES,
        prants=manageable_prants(principal),
        all_prants=PRANT_LIST,
        national_allowed=resolve_scope(principal, include_own=False).kind == SCOPE_ALL,
        can_approve=principal.role in ADMIN_ROLES,
        pending=PENDING,
    )


@bp.post("/programs")
@require_capability(MANAGE_PROGRAMS)
def programs_create():
    s = db_session()
    principal = current_principal()
    payload = {
        "title": request.form.get("title"),
        "description": request.form.get("description"),
        "program_type": request.form.get("program_type"),
        "event_date": request.form.get("event_date"),
        "location": request.form.get("location"),
        "prant": (request.form.get("prant") or "").strip(),
        "is_joint_initiative": request.form.get("is_joint_initiative") == "1",
        "collab_prants": request.form.getlist("collab_prants"),
    }
    errors = validate_program_payload(payload)

    # Below admin level a program always belongs to one of the actor's prants.
    if payload["prant"]:
        if payload["prant"] not in manageable_prants(principal):
            errors.append(f"You cannot create programs for {payload['prant']}.")
    elif resolve_scope(principal, include_own=False).kind != SCOPE_ALL:
        errors.append("Prant is required.")

    if errors:
        for e in errors:
            flash(e, "danger")
        return redirect(url_for("programs.programs_list"))

    row = create_program(s, payload, _current_user(), principal.role)
    s.commit()
    if row.approval_status == PENDING:
        flash("Program submitted for approval (joint initiative).", "success")
    else:
        flash("Program created.", "success")
    return redirect(url_for("programs.programs_list"))


@bp.post("/programs/<int:program_id>/publish")
@require_capability(MANAGE_PROGRAMS)
def programs_publish(program_id: int):
    s = db_session()
    row = _get_in_scope(program_id)
    try:
        set_program_published(s, row, request.form.get("is_published") == "1", _current_user())
    except ValueError as e:
        flash(str(e), "danger")
        return redirect(url_for("programs.programs_list"))
    s.commit()
    return redirect(url_for("programs.programs_list"))


@bp.post("/programs/<int:program_id>/approve")
@require_capability(MANAGE_PROGRAMS)
def programs_approve(program_id: int):
    s = db_session()
    row = _get_in_scope(program_id)
    try:
        approve_program(s, row, _current_user(), current_principal().role)
    except ValueError as e:
        flash(str(e), "danger")
        return redirect(url_for("programs.programs_list"))
    s.commit()
    flash(f"Approved: {row.title}", "success")
    return redirect(url_for("programs.programs_list"))


@bp.post("/programs/<int:program_id>/delete")
@require_capability(MANAGE_PROGRAMS)
def programs_delete(program_id: int):
    s = db_session()
    row = _get_in_scope(program_id)
    delete_program(s, row, _current_user())
    s.commit()
    flash("Program deleted.", "success")
    return redirect(url_for("programs.programs_list"))
