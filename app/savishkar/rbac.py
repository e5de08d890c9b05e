"""
Flask-side glue around `app.savishkar.access`: building the request principal,
adapting rows to ScopedRecord, translating a Scope into SQL, and the
`require_capability` view decorator.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from functools import wraps
from typing import TYPE_CHECKING, Any

from flask import abort, g, redirect, request, url_for
from sqlalchemy import false

from app.savishkar.access import (
    ANONYMOUS,
    SCOPE_ALL,
    SCOPE_OWNER,
    SCOPE_STATES,
    Principal,
    Scope,
    ScopedRecord,
    can,
    resolve_scope,
)
from app.savishkar.constants import PRANT_LIST
from app.savishkar.roles import REGIONAL_ROLES, Role, parse_role

if TYPE_CHECKING:
    from app.savishkar.models import Profile, User
    from app.savishkar.modules.applications.models import Application
    from app.savishkar.modules.events.models import EventDelegate
    from app.savishkar.modules.programs.models import Program

logger = logging.getLogger(__name__)


# ---------- Principal ----------
def principal_for_profile(profile: "Profile | None", now: datetime | None = None) -> Principal:
    """
    Build the Principal for a stored profile.

    Inactive profiles and lapsed event-manager terms resolve to minimum privilege.
    """
    if profile is None or not profile.is_active:
        return ANONYMOUS
    role = parse_role(profile.role)
    if role is Role.EVENT_MANAGER and profile.event_manager_expiry is not None:
        if profile.event_manager_expiry < (now or datetime.utcnow()):
            role = Role.MEMBER
    scope_state = profile.region if role in REGIONAL_ROLES else profile.prant
    return Principal.build(role, scope_state, profile.district, profile.user_id)


def principal_for_user(user: "User | None", now: datetime | None = None) -> Principal:
    if user is None or not user.is_active:
        return ANONYMOUS
    return principal_for_profile(user.profile, now)


def current_principal() -> Principal:
    p = getattr(g, "current_principal", None)
    return p if isinstance(p, Principal) else ANONYMOUS


# ---------- Record adapters ----------
def record_from_profile(profile: "Profile") -> ScopedRecord:
    return ScopedRecord(
        scope_state=profile.prant,
        scope_district=profile.district,
        owner_id=str(profile.user_id),
        payload=profile,
    )


def record_from_application(application: "Application") -> ScopedRecord:
    # Applications belong to nobody until approved.
    return ScopedRecord(scope_state=application.prant, scope_district=application.district, payload=application)


def record_from_delegate(delegate: "EventDelegate") -> ScopedRecord:
    return ScopedRecord(
        scope_state=delegate.prant,
        scope_district=None,
        owner_id=str(delegate.manager_user_id) if delegate.manager_user_id is not None else None,
        payload=delegate,
    )


def record_from_program(program: "Program") -> ScopedRecord:
    return ScopedRecord(scope_state=program.prant, payload=program)


def manageable_prants(principal: Principal) -> list[str]:
    """Prants the principal administers, in display order (empty when it administers none)."""
    scope = resolve_scope(principal, include_own=False)
    if scope.kind == SCOPE_ALL:
        return list(PRANT_LIST)
    return [p for p in PRANT_LIST if scope.admits(ScopedRecord(scope_state=p))]


# ---------- SQL ----------
def _coerce_owner(column: Any, owner_id: str) -> Any:
    try:
        return column.type.python_type(owner_id)
    except (NotImplementedError, TypeError, ValueError):
        return None


def apply_scope(query: Any, scope: Scope, *, state_column: Any, owner_column: Any = None) -> Any:
    """Restrict a SQLAlchemy query (or select) to the rows `scope` admits."""
    if scope.kind == SCOPE_ALL:
        return query
    if scope.kind == SCOPE_STATES and scope.states:
        return query.filter(state_column.in_(sorted(scope.states)))
    if scope.kind == SCOPE_OWNER and scope.owner_id and owner_column is not None:
        owner = _coerce_owner(owner_column, scope.owner_id)
        if owner is not None:
            return query.filter(owner_column == owner)
    return query.filter(false())


def scoped(query: Any, principal: Principal, *, state_column: Any, owner_column: Any = None, include_own: bool = True) -> Any:
    return apply_scope(
        query,
        resolve_scope(principal, include_own=include_own),
        state_column=state_column,
        owner_column=owner_column,
    )


# ---------- Views ----------
def user_can(action: str) -> bool:
    return can(current_principal(), action)


def require_capability(action: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(fn)
        def wrapped(*args: Any, **kwargs: Any):
            user: "User | None" = getattr(g, "current_user", None)
            # Unauthenticated → redirect to login (UX + reduces confusion).
            if not user or not user.is_active:
                nxt = request.full_path or request.path
                # Avoid trailing '?' from full_path when there is no query string.
                if nxt.endswith("?"):
                    nxt = nxt[:-1]
                return redirect(url_for("auth.login_get", next=nxt))
            # Authenticated but unauthorized → 403
            if not can(current_principal(), action):
                g.missing_capability = action
                abort(403)
            return fn(*args, **kwargs)

        return wrapped

    return decorator


def ensure_in_scope(record: ScopedRecord, *, include_own: bool = True) -> None:
    """404 for rows outside the principal's scope; existence is not disclosed."""
    if not resolve_scope(current_principal(), include_own=include_own).admits(record):
        logger.info("Out-of-scope access blocked (request_id=%s)", getattr(g, "request_id", None))
        abort(404)
