from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

from app.savishkar.audit import record_event
from app.savishkar.constants import PROGRAM_TYPES, is_known_prant
from app.savishkar.roles import ADMIN_ROLES, parse_role

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.savishkar.models import User
    from app.savishkar.modules.programs.models import Program

APPROVED = "approved"
PENDING = "pending"


def _parse_date(raw: str | None) -> date | None:
    raw = (raw or "").strip()
    if not raw:
        return None
    return date.fromisoformat(raw)


def _collab_list(payload: dict) -> list[str]:
    raw = payload.get("collab_prants") or []
    if isinstance(raw, str):
        raw = raw.splitlines()
    seen: list[str] = []
    for p in raw:
        p = (p or "").strip()
        if p and p not in seen:
            seen.append(p)
    return seen


def validate_program_payload(payload: dict) -> list[str]:
    errors = []
    if not (payload.get("title") or "").strip():
        errors.append("Title is required.")
    program_type = (payload.get("program_type") or "").strip()
    if program_type not in PROGRAM_TYPES:
        errors.append(f"Unknown program type: {program_type or '(blank)'}")
    try:
        _parse_date(payload.get("event_date"))
    except ValueError:
        errors.append("Date must be YYYY-MM-DD.")
    prant = (payload.get("prant") or "").strip()
    if prant and not is_known_prant(prant):
        errors.append(f"Unknown prant: {prant}")
    collab = _collab_list(payload)
    for p in collab:
        if not is_known_prant(p):
            errors.append(f"Unknown prant: {p}")
    if payload.get("is_joint_initiative") and not collab:
        errors.append("A joint initiative needs at least one collaborating prant.")
    return errors


def create_program(s: "Session", payload: dict, user: "User", actor_role: object) -> "Program":
    """
    Create a program. Joint initiatives proposed below admin level wait for
    approval. Caller validates and commits.
    """
    from app.savishkar.modules.programs.models import Program

    joint = bool(payload.get("is_joint_initiative"))
    status = PENDING if joint and parse_role(actor_role) not in ADMIN_ROLES else APPROVED
    now = datetime.utcnow()
    row = Program(
        title=(payload.get("title") or "").strip(),
        description=(payload.get("description") or "").strip() or None,
        program_type=(payload.get("program_type") or "").strip(),
        event_date=_parse_date(payload.get("event_date")),
        location=(payload.get("location") or "").strip() or None,
        prant=(payload.get("prant") or "").strip() or None,
        is_joint_initiative=joint,
        collab_prants="\n".join(_collab_list(payload)) or None,
        approval_status=status,
        is_published=False,
        created_by_user_id=user.id,
        created_at=now,
        updated_at=now,
    )
    s.add(row)
    s.flush()
    record_event(
        s,
        actor=user,
        action="program.create",
        entity_type="Program",
        entity_id=str(row.id),
        metadata={"title": row.title, "prant": row.prant, "approval_status": status},
    )
    return row


def set_program_published(s: "Session", row: "Program", published: bool, user: "User") -> "Program":
    if published and row.approval_status != APPROVED:
        raise ValueError("Pending programs cannot be published. Approve them first.")
    if row.is_published == published:
        return row
    row.is_published = published
    row.updated_at = datetime.utcnow()
    record_event(
        s,
        actor=user,
        action="program.publish" if published else "program.unpublish",
        entity_type="Program",
        entity_id=str(row.id),
    )
    return row


def approve_program(s: "Session", row: "Program", user: "User", actor_role: object) -> "Program":
    if parse_role(actor_role) not in ADMIN_ROLES:
        raise ValueError("Only administrators can approve joint initiatives.")
    if row.approval_status != PENDING:
        raise ValueError("Program is not awaiting approval.")
    row.approval_status = APPROVED
    row.updated_at = datetime.utcnow()
    record_event(
        s,
        actor=user,
        action="program.approve",
        entity_type="Program",
        entity_id=str(row.id),
        metadata={"title": row.title, "collab_prants": row.collaborators},
    )
    return row


def delete_program(s: "Session", row: "Program", user: "User") -> None:
    record_event(
        s,
        actor=user,
        action="program.delete",
        entity_type="Program",
        entity_id=str(row.id),
        metadata={"title": row.title, "prant": row.prant},
    )
    s.delete(row)


def published_programs(s: "Session") -> list["Program"]:
    from app.savishkar.modules.programs.models import Program

    rows = (
        s.query(Program)
        .filter(Program.is_published.is_(True), Program.approval_status == APPROVED)
        .all()
    )
    # Dated programs newest first, undated last.
    return sorted(rows, key=lambda p: (p.event_date is None, -(p.event_date.toordinal() if p.event_date else 0), p.id))
