from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, NamedTuple

from sqlalchemy import or_

from app.savishkar.audit import record_event
from app.savishkar.constants import region_of
from app.savishkar.modules.members.service import outranks_target
from app.savishkar.roles import DISTRICT_ROLES, LEADER_ROLES, NATIONAL_ROLES, STATE_ROLES, parse_role, rank, role_label

if TYPE_CHECKING:
    from sqlalchemy.orm import Query, Session
    from app.savishkar.models import Profile, User


TIERS = (
    ("National", NATIONAL_ROLES),
    ("State", STATE_ROLES),
    ("District", DISTRICT_ROLES),
)


class LeaderRow(NamedTuple):
    profile: "Profile"
    tier: str | None
    region: str | None


def leadership_tier(role: object) -> str | None:
    r = parse_role(role)
    for name, roles in TIERS:
        if r in roles:
            return name
    return None


def leaders_query(s: "Session") -> "Query":
    """Active profiles holding a leader role or featured on the leadership page."""
    from app.savishkar.models import Profile

    return s.query(Profile).filter(
        Profile.is_active.is_(True),
        or_(Profile.role.in_(sorted(r.value for r in LEADER_ROLES)), Profile.is_leadership.is_(True)),
    )


def _by_rank(profiles: list["Profile"]) -> list["Profile"]:
    return sorted(profiles, key=lambda p: (-rank(p.role), p.full_name.lower(), p.id))


def roster(profiles: list["Profile"], tier: str | None = None) -> list[LeaderRow]:
    rows = [LeaderRow(p, leadership_tier(p.role), region_of(p.prant)) for p in _by_rank(profiles)]
    if tier:
        rows = [r for r in rows if r.tier == tier]
    return rows


def set_featured(s: "Session", profile: "Profile", featured: bool, actor: "User", actor_role: object) -> "Profile":
    """Show or hide `profile` on the public leadership page. Caller commits."""
    if not outranks_target(actor_role, profile):
        raise ValueError(f"You may not feature a {role_label(profile.role)}.")
    if not profile.is_active:
        raise ValueError("Inactive members cannot be featured.")
    if profile.is_leadership == featured:
        return profile

    profile.is_leadership = featured
    profile.updated_at = datetime.utcnow()
    record_event(
        s,
        actor=actor,
        action="leadership.feature" if featured else "leadership.unfeature",
        entity_type="Profile",
        entity_id=str(profile.id),
        metadata={"membership_id": profile.membership_id, "role": profile.role},
    )
    return profile


def featured_leaders(s: "Session") -> list["Profile"]:
    from app.savishkar.models import Profile

    rows = s.query(Profile).filter(Profile.is_active.is_(True), Profile.is_leadership.is_(True)).all()
    return _by_rank(rows)
