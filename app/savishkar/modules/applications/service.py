from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

from app.savishkar.audit import record_event
from app.savishkar.constants import is_known_prant
from app.savishkar.modules.members.service import email_taken, is_valid_email, provision_member
from app.savishkar.roles import APPLICATION_DESIGNATIONS, Role, outranks, parse_role
from app.savishkar.security import generate_temporary_password

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.savishkar.models import Profile, User
    from app.savishkar.modules.applications.models import Application


def parse_date(s: str | None) -> date | None:
    """Parse YYYY-MM-DD date string."""
    if not s:
        return None
    s = s.strip()
    if not s:
        return None
    return date.fromisoformat(s)


def validate_application_payload(payload: dict) -> list[str]:
    """Validate a join-form payload. Returns list of errors."""
    errors = []
    if not (payload.get("full_name") or "").strip():
        errors.append("Full name is required.")
    email = (payload.get("email") or "").strip().lower()
    if not email:
        errors.append("Email is required.")
    elif not is_valid_email(email):
        errors.append("Invalid email format.")
    if not (payload.get("phone") or "").strip():
        errors.append("Phone is required.")
    prant = (payload.get("prant") or "").strip()
    if not prant:
        errors.append("Prant is required.")
    elif not is_known_prant(prant):
        errors.append(f"Unknown prant: {prant}")
    designation = (payload.get("designation") or "").strip()
    if designation and parse_role(designation) not in APPLICATION_DESIGNATIONS:
        errors.append("Invalid designation.")
    dob = (payload.get("date_of_birth") or "").strip()
    if dob:
        try:
            parse_date(dob)
        except ValueError:
            errors.append("Date of birth must be YYYY-MM-DD.")
    return errors


def submit_application(s: "Session", payload: dict) -> "Application":
    from app.savishkar.modules.applications.models import Application

    app_row = Application(
        full_name=(payload.get("full_name") or "").strip(),
        email=(payload.get("email") or "").strip().lower(),
        phone=(payload.get("phone") or "").strip(),
        date_of_birth=parse_date(payload.get("date_of_birth")),
        institution=(payload.get("institution") or "").strip() or None,
        motivation=(payload.get("motivation") or "").strip() or None,
        designation=(payload.get("designation") or "").strip() or Role.MEMBER.value,
        prant=(payload.get("prant") or "").strip(),
        district=(payload.get("district") or "").strip() or None,
        status="pending",
        applied_at=datetime.utcnow(),
    )
    s.add(app_row)
    s.flush()
    record_event(
        s,
        actor=None,
        action="application.submit",
        entity_type="Application",
        entity_id=str(app_row.id),
        metadata={"email": app_row.email, "prant": app_row.prant},
    )
    return app_row


def granted_role(application: "Application", reviewer_role: object) -> Role:
    """The requested designation if the reviewer outranks it, else MEMBER."""
    requested = parse_role(application.designation)
    if requested in APPLICATION_DESIGNATIONS and outranks(reviewer_role, requested):
        return requested
    return Role.MEMBER


def approve_application(
    s: "Session",
    application: "Application",
    reviewer: "User",
    reviewer_role: object,
) -> tuple["Profile", str]:
    """
    Provision the member for a pending application.

    Returns (profile, temporary_password). Raises ValueError when the
    application is not pending or the email already has an account.
    """
    if application.status != "pending":
        raise ValueError(f"Application is already {application.status}.")
    if email_taken(s, application.email):
        raise ValueError(f"An account with email {application.email} already exists.")

    temp_password = generate_temporary_password()
    role = granted_role(application, reviewer_role)
    profile = provision_member(
        s,
        email=application.email,
        password=temp_password,
        full_name=application.full_name,
        role=role,
        prant=application.prant,
        district=application.district,
        phone=application.phone,
        institution=application.institution,
        designation=application.designation,
        must_change_password=True,
    )

    application.status = "approved"
    application.reviewed_at = datetime.utcnow()
    application.reviewed_by_user_id = reviewer.id
    application.profile_id = profile.id

    record_event(
        s,
        actor=reviewer,
        action="application.approve",
        entity_type="Application",
        entity_id=str(application.id),
        metadata={
            "email": application.email,
            "prant": application.prant,
            "membership_id": profile.membership_id,
            "role": profile.role,
        },
    )
    return profile, temp_password


def reject_application(s: "Session", application: "Application", reviewer: "User", reason: str) -> "Application":
    if application.status != "pending":
        raise ValueError(f"Application is already {application.status}.")
    reason = (reason or "").strip()
    if not reason:
        raise ValueError("A reason is required to reject an application.")

    application.status = "rejected"
    application.rejection_reason = reason
    application.reviewed_at = datetime.utcnow()
    application.reviewed_by_user_id = reviewer.id

    record_event(
        s,
        actor=reviewer,
        action="application.reject",
        entity_type="Application",
        entity_id=str(application.id),
        reason=reason,
        metadata={"email": application.email, "prant": application.prant},
    )
    return application
