from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from app.savishkar.audit import record_event
from app.savishkar.constants import is_known_prant
from app.savishkar.modules.members.service import is_valid_email
from app.savishkar.roles import Role, parse_role

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.savishkar.models import Profile, User
    from app.savishkar.modules.events.models import EventDelegate


def validate_delegate_payload(payload: dict) -> list[str]:
    errors = []
    if not (payload.get("event_name") or "").strip():
        errors.append("Event name is required.")
    if not (payload.get("name") or "").strip():
        errors.append("Delegate name is required.")
    email = (payload.get("email") or "").strip()
    if email and not is_valid_email(email):
        errors.append("Delegate email is invalid.")
    prant = (payload.get("prant") or "").strip()
    if prant and not is_known_prant(prant):
        errors.append(f"Unknown prant: {prant}")
    return errors


def add_delegate(s: "Session", payload: dict, manager: "User") -> "EventDelegate":
    """Register a delegate owned by `manager`. Caller commits."""
    from app.savishkar.modules.events.models import EventDelegate

    row = EventDelegate(
        event_name=(payload.get("event_name") or "").strip(),
        name=(payload.get("name") or "").strip(),
        email=(payload.get("email") or "").strip().lower() or None,
        phone=(payload.get("phone") or "").strip() or None,
        prant=(payload.get("prant") or "").strip() or None,
        manager_user_id=manager.id,
        created_at=datetime.utcnow(),
    )
    s.add(row)
    s.flush()
    record_event(
        s,
        actor=manager,
        action="event.delegate_register",
        entity_type="EventDelegate",
        entity_id=str(row.id),
        metadata={"event_name": row.event_name, "name": row.name, "prant": row.prant},
    )
    return row


def remove_delegate(s: "Session", row: "EventDelegate", actor: "User") -> None:
    record_event(
        s,
        actor=actor,
        action="event.delegate_remove",
        entity_type="EventDelegate",
        entity_id=str(row.id),
        metadata={"event_name": row.event_name, "name": row.name, "manager_user_id": row.manager_user_id},
    )
    s.delete(row)


def assign_event_manager(
    s: "Session",
    profile: "Profile",
    actor: "User",
    *,
    term_days: int,
    now: datetime | None = None,
) -> "Profile":
    """
    Grant EVENT_MANAGER to `profile` until now + term_days.

    Only plain members (or current event managers, to extend a term) can be
    assigned; leadership roles are changed through the member editor.
    """
    if profile.user_id == actor.id:
        raise ValueError("You cannot assign a role to yourself.")
    if term_days <= 0:
        raise ValueError("Term must be at least one day.")
    previous = profile.role
    current = parse_role(previous)
    if current not in (Role.MEMBER, Role.EVENT_MANAGER):
        raise ValueError("Only members can be made event managers.")

    started = now or datetime.utcnow()
    profile.role = Role.EVENT_MANAGER.value
    profile.event_manager_expiry = started + timedelta(days=term_days)
    profile.updated_at = started
    record_event(
        s,
        actor=actor,
        action="event.manager_assign",
        entity_type="Profile",
        entity_id=str(profile.id),
        metadata={"from": previous, "expires": profile.event_manager_expiry},
    )
    return profile


def revoke_event_manager(s: "Session", profile: "Profile", actor: "User") -> "Profile":
    if parse_role(profile.role) is not Role.EVENT_MANAGER:
        raise ValueError("Profile is not an event manager.")
    profile.role = Role.MEMBER.value
    profile.event_manager_expiry = None
    profile.updated_at = datetime.utcnow()
    record_event(
        s,
        actor=actor,
        action="event.manager_revoke",
        entity_type="Profile",
        entity_id=str(profile.id),
    )
    return profile


def is_term_active(profile: "Profile", now: datetime | None = None) -> bool:
    if parse_role(profile.role) is not Role.EVENT_MANAGER:
        return False
    if profile.event_manager_expiry is None:
        return True
    return profile.event_manager_expiry >= (now or datetime.utcnow())

