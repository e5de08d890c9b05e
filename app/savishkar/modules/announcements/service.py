from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from app.savishkar.access import VIEW_DESIGNATORY_ANNOUNCEMENTS, Principal, can
from app.savishkar.audit import record_event
from app.savishkar.constants import ANNOUNCEMENT_AUDIENCES

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.savishkar.models import User
    from app.savishkar.modules.announcements.models import Announcement


def validate_announcement_payload(payload: dict) -> list[str]:
    errors = []
    if not (payload.get("title") or "").strip():
        errors.append("Title is required.")
    if not (payload.get("content") or "").strip():
        errors.append("Content is required.")
    audience = (payload.get("target_audience") or "ALL").strip()
    if audience not in ANNOUNCEMENT_AUDIENCES:
        errors.append(f"Invalid audience. Must be one of: {', '.join(ANNOUNCEMENT_AUDIENCES)}")
    return errors


def create_announcement(s: "Session", payload: dict, user: "User") -> "Announcement":
    from app.savishkar.modules.announcements.models import Announcement

    row = Announcement(
        title=(payload.get("title") or "").strip(),
        content=(payload.get("content") or "").strip(),
        target_audience=(payload.get("target_audience") or "ALL").strip(),
        is_active=True,
        created_at=datetime.utcnow(),
        created_by_user_id=user.id,
    )
    s.add(row)
    s.flush()
    record_event(
        s,
        actor=user,
        action="announcement.create",
        entity_type="Announcement",
        entity_id=str(row.id),
        metadata={"title": row.title, "target_audience": row.target_audience},
    )
    return row


def set_announcement_active(s: "Session", row: "Announcement", active: bool, user: "User") -> "Announcement":
    if row.is_active == active:
        return row
    row.is_active = active
    record_event(
        s,
        actor=user,
        action="announcement.activate" if active else "announcement.deactivate",
        entity_type="Announcement",
        entity_id=str(row.id),
        metadata={"title": row.title},
    )
    return row


def audience_visible(principal: Principal, audience: str | None) -> bool:
    """ALL (or unset) is public to members; DESIGNATORY needs the capability; anything else is hidden."""
    if not audience or audience == "ALL":
        return True
    if audience == "DESIGNATORY":
        return can(principal, VIEW_DESIGNATORY_ANNOUNCEMENTS)
    return False


def announcements_for(s: "Session", principal: Principal, limit: int = 5) -> list["Announcement"]:
    from app.savishkar.modules.announcements.models import Announcement

    rows = (
        s.query(Announcement)
        .filter(Announcement.is_active.is_(True))
        .order_by(Announcement.created_at.desc(), Announcement.id.desc())
        .all()
    )
    return [a for a in rows if audience_visible(principal, a.target_audience)][:limit]
