import json
from typing import Any

from flask import g, has_request_context, request
from sqlalchemy.orm import Session

from app.savishkar.models import AuditEvent, User


def _acting_role() -> str | None:
    principal = getattr(g, "current_principal", None)
    role = getattr(principal, "role", None)
    return role.value if role is not None else None


def record_event(
    s: Session,
    *,
    actor: User | None,
    action: str,
    entity_type: str | None = None,
    entity_id: str | None = None,
    reason: str | None = None,
    metadata: dict[str, Any] | None = None,
    request_id: str | None = None,
) -> AuditEvent:
    """
    Append an audit event; the caller commits.

    Inside a request the event also carries the request id, client IP and the
    role the actor was acting under (roles change, the log must not).
    Scripts pass `actor=None`.
    """
    meta = dict(metadata or {})
    in_request = has_request_context()
    if in_request and actor is not None:
        acting = _acting_role()
        if acting:
            meta.setdefault("actor_role", acting)

    ev = AuditEvent(
        request_id=request_id or (getattr(g, "request_id", None) if in_request else None),
        actor_user_id=actor.id if actor else None,
        actor_user_email=actor.email if actor else None,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        reason=reason,
        metadata_json=json.dumps(meta, sort_keys=True, default=str) if meta else None,
        client_ip=request.remote_addr if in_request else None,
    )
    s.add(ev)
    return ev


def event_metadata(ev: AuditEvent) -> dict[str, Any]:
    if not ev.metadata_json:
        return {}
    try:
        data = json.loads(ev.metadata_json)
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
