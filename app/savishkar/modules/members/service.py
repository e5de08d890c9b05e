from __future__ import annotations

import csv
import io
import re
from datetime import datetime
from typing import TYPE_CHECKING

from werkzeug.security import generate_password_hash

from app.savishkar.audit import record_event
from app.savishkar.constants import REGIONS, is_known_prant
from app.savishkar.membership import generate_membership_id
from app.savishkar.roles import REGIONAL_ROLES, Role, assignable_roles, parse_role, role_label

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.savishkar.models import Profile, User


EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

CSV_COLUMNS = ("membership_id", "full_name", "email", "phone", "prant", "district", "role", "is_active", "created_at")


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email or ""))


def email_taken(s: "Session", email: str) -> bool:
    from app.savishkar.models import User

    return s.query(User).filter(User.email == email.strip().lower()).one_or_none() is not None


_MEMBERSHIP_ID_ATTEMPTS = 25


def unique_membership_id(s: "Session", prant: str | None) -> str:
    from app.savishkar.models import Profile

    for _ in range(_MEMBERSHIP_ID_ATTEMPTS):
        candidate = generate_membership_id(prant)
        if s.query(Profile.id).filter(Profile.membership_id == candidate).first() is None:
            return candidate
    raise RuntimeError("Could not allocate a unique membership id")


def provision_member(
    s: "Session",
    *,
    email: str,
    password: str,
    full_name: str,
    role: Role = Role.MEMBER,
    prant: str | None = None,
    district: str | None = None,
    phone: str | None = None,
    institution: str | None = None,
    designation: str | None = None,
    must_change_password: bool = False,
    direct_signup: bool = False,
) -> "Profile":
    """
    Create one User and its Profile with a fresh membership id. Caller commits.

    Direct sign-ups get the MBR code regardless of the prant they pick.
    """
    from app.savishkar.models import Profile, User

    now = datetime.utcnow()
    user = User(
        email=email.strip().lower(),
        password_hash=generate_password_hash(password),
        is_active=True,
        must_change_password=must_change_password,
        created_at=now,
    )
    s.add(user)
    s.flush()

    profile = Profile(
        user_id=user.id,
        full_name=full_name.strip(),
        email=user.email,
        phone=(phone or "").strip() or None,
        institution=(institution or "").strip() or None,
        prant=(prant or "").strip() or None,
        district=(district or "").strip() or None,
        role=role.value,
        membership_id=unique_membership_id(s, None if direct_signup else prant),
        designation=designation or role.value,
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    s.add(profile)
    s.flush()
    return profile


def validate_scope_payload(payload: dict, role: Role | None) -> list[str]:
    errors = []
    prant = (payload.get("prant") or "").strip()
    if prant and not is_known_prant(prant):
        errors.append(f"Unknown prant: {prant}")
    region = (payload.get("region") or "").strip()
    if region and region not in REGIONS:
        errors.append(f"Unknown region: {region}")
    if role in REGIONAL_ROLES and not region:
        errors.append("Regional roles require a region.")
    return errors


def outranks_target(actor_role: object, profile: "Profile") -> bool:
    """Whether `actor_role` sits above `profile` in the hierarchy (unknown target roles count as lowest)."""
    target = parse_role(profile.role)
    return target is None or target in assignable_roles(actor_role)


def update_profile_scope(s: "Session", profile: "Profile", payload: dict, actor: "User", actor_role: object) -> "Profile":
    """
    Update prant/district/region and the active flag.

    Raises ValueError when the actor does not outrank the member.
    """
    if not outranks_target(actor_role, profile):
        raise ValueError(f"You may not edit a {role_label(profile.role)}.")

    changes = {}
    for field in ("prant", "district", "region"):
        new = (payload.get(field) or "").strip() or None
        old = getattr(profile, field)
        if new != old:
            changes[field] = {"old": old, "new": new}
            setattr(profile, field, new)

    if "is_active" in payload:
        new_active = bool(payload["is_active"])
        if new_active != profile.is_active:
            changes["is_active"] = {"old": profile.is_active, "new": new_active}
            profile.is_active = new_active
            profile.user.is_active = new_active

    if changes:
        profile.updated_at = datetime.utcnow()
        record_event(
            s,
            actor=actor,
            action="profile.update_scope",
            entity_type="Profile",
            entity_id=str(profile.id),
            metadata={"membership_id": profile.membership_id, "changes": changes},
        )
    return profile


def change_role(s: "Session", profile: "Profile", new_role: str, actor: "User", actor_role: object, reason: str | None = None) -> "Profile":
    """
    Assign `new_role` to `profile`.

    Raises ValueError for unknown roles, for roles the actor does not outrank,
    and for attempts to change the actor's own role.
    """
    role = parse_role(new_role)
    if role is None:
        raise ValueError(f"Unknown role: {new_role}")
    if profile.user_id == actor.id:
        raise ValueError("You cannot change your own role.")
    allowed = assignable_roles(actor_role)
    if role not in allowed or not outranks_target(actor_role, profile):
        raise ValueError(f"You may not assign {role_label(role)} to this member.")

    old = profile.role
    if old == role.value:
        return profile
    profile.role = role.value
    if role is not Role.EVENT_MANAGER:
        profile.event_manager_expiry = None
    profile.updated_at = datetime.utcnow()
    record_event(
        s,
        actor=actor,
        action="profile.change_role",
        entity_type="Profile",
        entity_id=str(profile.id),
        reason=reason,
        metadata={"membership_id": profile.membership_id, "old": old, "new": role.value},
    )
    return profile


def counts_by_prant(profiles: list["Profile"]) -> list[tuple[str, int]]:
    counts: dict[str, int] = {}
    for p in profiles:
        if p.prant:
            counts[p.prant] = counts.get(p.prant, 0) + 1
    return sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))


def export_profiles_csv(profiles: list["Profile"]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(CSV_COLUMNS)
    for p in profiles:
        writer.writerow(
            [
                p.membership_id or "",
                p.full_name,
                p.email,
                p.phone or "",
                p.prant or "",
                p.district or "",
                p.role,
                "yes" if p.is_active else "no",
                p.created_at.strftime("%Y-%m-%d") if p.created_at else "",
            ]
        )
    return buf.getvalue()
