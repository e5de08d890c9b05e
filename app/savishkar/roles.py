"""
Role taxonomy: the fixed, totally ordered role hierarchy and its groupings.

Role values arrive as plain strings from the database and from forms. They are
parsed with `parse_role()`; anything unrecognised becomes `None`, which every
caller treats as minimum privilege.
"""
from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    SUPER_CONTROLLER = "SUPER_CONTROLLER"
    ADMIN = "ADMIN"
    NATIONAL_CONVENER = "NATIONAL_CONVENER"
    NATIONAL_CO_CONVENER = "NATIONAL_CO_CONVENER"
    REGIONAL_CONVENER = "REGIONAL_CONVENER"
    REGIONAL_CO_CONVENER = "REGIONAL_CO_CONVENER"
    STATE_CONVENER = "STATE_CONVENER"
    STATE_CO_CONVENER = "STATE_CO_CONVENER"
    STATE_INCHARGE = "STATE_INCHARGE"
    STATE_CO_INCHARGE = "STATE_CO_INCHARGE"
    DISTRICT_CONVENER = "DISTRICT_CONVENER"
    DISTRICT_CO_CONVENER = "DISTRICT_CO_CONVENER"
    DISTRICT_INCHARGE = "DISTRICT_INCHARGE"
    DISTRICT_CO_INCHARGE = "DISTRICT_CO_INCHARGE"
    EVENT_MANAGER = "EVENT_MANAGER"
    DESIGNATORY = "DESIGNATORY"
    STUDENT_LEADER = "STUDENT_LEADER"
    MEMBER = "MEMBER"


# Highest first. Enum definition order is the hierarchy.
ROLE_HIERARCHY: tuple[Role, ...] = tuple(Role)

ROLE_LABELS: dict[Role, str] = {
    Role.SUPER_CONTROLLER: "Super Controller",
    Role.ADMIN: "Administrator",
    Role.NATIONAL_CONVENER: "National Convener",
    Role.NATIONAL_CO_CONVENER: "National Co-Convener",
    Role.REGIONAL_CONVENER: "Regional Convener",
    Role.REGIONAL_CO_CONVENER: "Regional Co-Convener",
    Role.STATE_CONVENER: "State Convener",
    Role.STATE_CO_CONVENER: "State Co-Convener",
    Role.STATE_INCHARGE: "State Incharge",
    Role.STATE_CO_INCHARGE: "State Co-Incharge",
    Role.DISTRICT_CONVENER: "District Convener",
    Role.DISTRICT_CO_CONVENER: "District Co-Convener",
    Role.DISTRICT_INCHARGE: "District Incharge",
    Role.DISTRICT_CO_INCHARGE: "District Co-Incharge",
    Role.EVENT_MANAGER: "Event Manager",
    Role.DESIGNATORY: "Designatory",
    Role.STUDENT_LEADER: "Student Leader",
    Role.MEMBER: "Member",
}

ADMIN_ROLES = frozenset({Role.SUPER_CONTROLLER, Role.ADMIN})
NATIONAL_ROLES = frozenset({Role.NATIONAL_CONVENER, Role.NATIONAL_CO_CONVENER})
REGIONAL_ROLES = frozenset({Role.REGIONAL_CONVENER, Role.REGIONAL_CO_CONVENER})
STATE_ROLES = frozenset(
    {Role.STATE_CONVENER, Role.STATE_CO_CONVENER, Role.STATE_INCHARGE, Role.STATE_CO_INCHARGE}
)
DISTRICT_ROLES = frozenset(
    {Role.DISTRICT_CONVENER, Role.DISTRICT_CO_CONVENER, Role.DISTRICT_INCHARGE, Role.DISTRICT_CO_INCHARGE}
)
LEADER_ROLES = NATIONAL_ROLES | STATE_ROLES | DISTRICT_ROLES

# Designations an applicant may request on the public join form.
APPLICATION_DESIGNATIONS: tuple[Role, ...] = (
    Role.MEMBER,
    Role.STUDENT_LEADER,
    Role.STATE_INCHARGE,
    Role.STATE_CO_INCHARGE,
    Role.DISTRICT_INCHARGE,
    Role.DISTRICT_CO_INCHARGE,
    Role.DISTRICT_CONVENER,
    Role.DISTRICT_CO_CONVENER,
    Role.STATE_CONVENER,
    Role.STATE_CO_CONVENER,
)

_RANKS: dict[Role, int] = {role: len(ROLE_HIERARCHY) - i for i, role in enumerate(ROLE_HIERARCHY)}


def parse_role(value: object) -> Role | None:
    """Return the Role for exactly `value`, or None for anything else (never raises)."""
    if isinstance(value, Role):
        return value
    if not isinstance(value, str):
        return None
    try:
        return Role(value)
    except ValueError:
        return None


def rank(role: object) -> int:
    """Seniority rank; MEMBER is 1, unknown roles are 0."""
    r = parse_role(role)
    if r is None:
        return 0
    return _RANKS[r]


def outranks(a: object, b: object) -> bool:
    return rank(a) > rank(b)


def role_label(role: object) -> str:
    r = parse_role(role)
    if r is None:
        return "Unknown"
    return ROLE_LABELS[r]


def assignable_roles(actor_role: object) -> list[Role]:
    """Roles `actor_role` may hand out: everything strictly below it, or everything for SUPER_CONTROLLER."""
    actor = parse_role(actor_role)
    if actor is None:
        return []
    if actor is Role.SUPER_CONTROLLER:
        return list(ROLE_HIERARCHY)
    return [r for r in ROLE_HIERARCHY if outranks(actor, r)]
