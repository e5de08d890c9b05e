"""
Access scope resolution.

Pure decision functions shared by every request handler:

- `resolve_scope()` turns a Principal into a row `Scope` (which prants, or which
  owner, the principal may see).
- `filter_visible()` applies that scope to an in-memory candidate list.
- `can()` answers whether a role may perform a named action.

Nothing here performs I/O or raises on bad data. Unknown roles, unresolvable
regions and unknown actions all fold into the most restrictive answer.
Translating a Scope into SQL lives in `app.savishkar.rbac.apply_scope`.
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from app.savishkar.constants import REGIONS, region_prants
from app.savishkar.roles import (
    ADMIN_ROLES,
    NATIONAL_ROLES,
    REGIONAL_ROLES,
    STATE_ROLES,
    Role,
    parse_role,
)

# ---------- Actions ----------
VIEW_ADMIN = "view_admin"
VIEW_MEMBERS = "view_members"
VIEW_REPORTS = "view_reports"
VIEW_AUDIT = "view_audit"
VIEW_DESIGNATORY_ANNOUNCEMENTS = "view_designatory_announcements"

APPROVE_APPLICATION = "approve_application"
EDIT_PROFILES = "edit_profiles"
CHANGE_ROLES = "change_roles"
EXPORT_MEMBERS = "export_members"
MANAGE_PROGRAMS = "manage_programs"
MANAGE_ANNOUNCEMENTS = "manage_announcements"
MANAGE_LEADERSHIP = "manage_leadership"
MANAGE_DISTRICTS = "manage_districts"
MANAGE_CMS = "manage_cms"
MANAGE_SETTINGS = "manage_settings"
ASSIGN_EVENT_MANAGER = "assign_event_manager"
MANAGE_EVENT_DELEGATES = "manage_event_delegates"

VIEW_ACTIONS = frozenset({VIEW_ADMIN, VIEW_MEMBERS, VIEW_REPORTS, VIEW_AUDIT, VIEW_DESIGNATORY_ANNOUNCEMENTS})
MUTATION_ACTIONS = frozenset(
    {
        APPROVE_APPLICATION,
        EDIT_PROFILES,
        CHANGE_ROLES,
        EXPORT_MEMBERS,
        MANAGE_PROGRAMS,
        MANAGE_ANNOUNCEMENTS,
        MANAGE_LEADERSHIP,
        MANAGE_DISTRICTS,
        MANAGE_CMS,
        MANAGE_SETTINGS,
        ASSIGN_EVENT_MANAGER,
        MANAGE_EVENT_DELEGATES,
    }
)
ALL_ACTIONS = VIEW_ACTIONS | MUTATION_ACTIONS

_STATE_LEAD = frozenset(
    {
        VIEW_ADMIN,
        VIEW_MEMBERS,
        VIEW_REPORTS,
        VIEW_DESIGNATORY_ANNOUNCEMENTS,
        APPROVE_APPLICATION,
        MANAGE_PROGRAMS,
        MANAGE_ANNOUNCEMENTS,
        MANAGE_LEADERSHIP,
        MANAGE_DISTRICTS,
        EXPORT_MEMBERS,
    }
)
_STATE_INCHARGE = frozenset(
    {VIEW_ADMIN, VIEW_MEMBERS, VIEW_REPORTS, VIEW_DESIGNATORY_ANNOUNCEMENTS, MANAGE_DISTRICTS}
)
_REGIONAL = frozenset(
    {VIEW_ADMIN, VIEW_MEMBERS, VIEW_REPORTS, VIEW_DESIGNATORY_ANNOUNCEMENTS, APPROVE_APPLICATION}
)
_NATIONAL = frozenset({VIEW_ADMIN, VIEW_MEMBERS, VIEW_REPORTS, VIEW_DESIGNATORY_ANNOUNCEMENTS})
_DESIGNATED = frozenset({VIEW_DESIGNATORY_ANNOUNCEMENTS})

CAPABILITIES: dict[Role, frozenset[str]] = {
    Role.SUPER_CONTROLLER: ALL_ACTIONS,
    Role.ADMIN: ALL_ACTIONS,
    Role.NATIONAL_CONVENER: _NATIONAL,
    Role.NATIONAL_CO_CONVENER: _NATIONAL,
    Role.REGIONAL_CONVENER: _REGIONAL,
    Role.REGIONAL_CO_CONVENER: _REGIONAL,
    Role.STATE_CONVENER: _STATE_LEAD,
    Role.STATE_CO_CONVENER: _STATE_LEAD,
    Role.STATE_INCHARGE: _STATE_INCHARGE,
    Role.STATE_CO_INCHARGE: _STATE_INCHARGE,
    Role.DISTRICT_CONVENER: _DESIGNATED,
    Role.DISTRICT_CO_CONVENER: _DESIGNATED,
    Role.DISTRICT_INCHARGE: _DESIGNATED,
    Role.DISTRICT_CO_INCHARGE: _DESIGNATED,
    Role.EVENT_MANAGER: frozenset({VIEW_ADMIN, MANAGE_EVENT_DELEGATES, VIEW_DESIGNATORY_ANNOUNCEMENTS}),
    Role.DESIGNATORY: _DESIGNATED,
    Role.STUDENT_LEADER: _DESIGNATED,
    Role.MEMBER: frozenset(),
}


# ---------- Principal / records ----------
@dataclass(frozen=True)
class Principal:
    """
    The acting user as the resolver sees it.

    For regional roles `scope_state` holds the assigned region name; for every
    other role it holds the prant.
    """

    role: Role | None
    scope_state: str | None = None
    scope_district: str | None = None
    owner_id: str | None = None

    @classmethod
    def build(
        cls,
        role: object,
        scope_state: str | None = None,
        scope_district: str | None = None,
        owner_id: object = None,
    ) -> "Principal":
        return cls(
            role=parse_role(role),
            scope_state=scope_state or None,
            scope_district=scope_district or None,
            owner_id=str(owner_id) if owner_id not in (None, "") else None,
        )


ANONYMOUS = Principal(role=None)


@dataclass(frozen=True)
class ScopedRecord:
    """Minimal shape of anything filtered by scope; `payload` carries the original row."""

    scope_state: str | None
    scope_district: str | None = None
    owner_id: str | None = None
    payload: Any = field(default=None, compare=False)


# ---------- Row scope ----------
SCOPE_ALL = "all"
SCOPE_STATES = "states"
SCOPE_OWNER = "owner"
SCOPE_NONE = "none"


@dataclass(frozen=True)
class Scope:
    kind: str
    states: frozenset[str] = frozenset()
    owner_id: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.kind == SCOPE_NONE

    def admits(self, record: ScopedRecord) -> bool:
        if self.kind == SCOPE_ALL:
            return True
        if self.kind == SCOPE_STATES:
            return record.scope_state is not None and record.scope_state in self.states
        if self.kind == SCOPE_OWNER:
            return self.owner_id is not None and record.owner_id == self.owner_id
        return False


NO_SCOPE = Scope(SCOPE_NONE)
FULL_SCOPE = Scope(SCOPE_ALL)


def _owner_scope(owner_id: str | None) -> Scope:
    if not owner_id:
        return NO_SCOPE
    return Scope(SCOPE_OWNER, owner_id=owner_id)


def resolve_scope(
    principal: Principal | None,
    *,
    include_own: bool = True,
    reference: dict[str, tuple[str, ...]] | None = None,
) -> Scope:
    """
    Row scope for `principal`; first matching rule wins.

    `include_own` says whether the collection being filtered is one where a
    principal without geographic standing may still see its own record.
    """
    if principal is None:
        return NO_SCOPE
    role = principal.role
    if role in ADMIN_ROLES:
        return FULL_SCOPE
    if role in STATE_ROLES:
        if not principal.scope_state:
            return NO_SCOPE
        return Scope(SCOPE_STATES, states=frozenset({principal.scope_state}))
    if role in REGIONAL_ROLES:
        prants = region_prants(principal.scope_state, REGIONS if reference is None else reference)
        if not prants:
            return NO_SCOPE
        return Scope(SCOPE_STATES, states=frozenset(prants))
    if role in NATIONAL_ROLES:
        return FULL_SCOPE
    if role is Role.EVENT_MANAGER:
        return _owner_scope(principal.owner_id)
    if include_own:
        return _owner_scope(principal.owner_id)
    return NO_SCOPE


def filter_visible(
    principal: Principal | None,
    records: Iterable[ScopedRecord],
    *,
    include_own: bool = True,
    reference: dict[str, tuple[str, ...]] | None = None,
) -> list[ScopedRecord]:
    scope = resolve_scope(principal, include_own=include_own, reference=reference)
    return [r for r in records if scope.admits(r)]


def in_scope(principal: Principal | None, record: ScopedRecord, *, include_own: bool = True) -> bool:
    return resolve_scope(principal, include_own=include_own).admits(record)


# ---------- Capability gate ----------
# Roles whose capabilities are only meaningful with a resolvable scope.
_SCOPE_BOUND_ROLES = STATE_ROLES | REGIONAL_ROLES | {Role.EVENT_MANAGER}


def _role_of(subject: object) -> Role | None:
    if isinstance(subject, Principal):
        return subject.role
    return parse_role(subject)


def capabilities_for(subject: object) -> frozenset[str]:
    """
    Actions granted to a Principal or bare role.

    A state, regional or event-manager Principal whose scope does not resolve
    gets nothing.
    """
    role = _role_of(subject)
    if role is None:
        return frozenset()
    if isinstance(subject, Principal) and role in _SCOPE_BOUND_ROLES:
        if resolve_scope(subject).is_empty:
            return frozenset()
    return CAPABILITIES.get(role, frozenset())


def can(subject: object, action: str) -> bool:
    """Deny unless `action` is explicitly granted to the subject's role."""
    if action not in ALL_ACTIONS:
        return False
    return action in capabilities_for(subject)


def is_view_only(subject: object) -> bool:
    caps = capabilities_for(subject)
    return bool(caps) and not (caps & MUTATION_ACTIONS)
