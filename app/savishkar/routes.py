from flask import Blueprint, flash, g, redirect, render_template, request, url_for

from app.savishkar.constants import PRANT_LIST
from app.savishkar.db import db_session
from app.savishkar.models import Profile
from app.savishkar.modules.announcements.service import announcements_for
from app.savishkar.modules.applications.service import submit_application, validate_application_payload
from app.savishkar.modules.leadership.service import featured_leaders, leadership_tier
from app.savishkar.modules.programs.service import published_programs
from app.savishkar.rbac import current_principal
from app.savishkar.roles import APPLICATION_DESIGNATIONS, ROLE_HIERARCHY, role_label

bp = Blueprint("routes", __name__)

_JOIN_FIELDS = (
    "full_name",
    "email",
    "phone",
    "date_of_birth",
    "institution",
    "motivation",
    "designation",
    "prant",
    "district",
)


@bp.get("/")
def index():
    return render_template("public/index.html")


@bp.get("/health")
def health():
    """Health check endpoint. Returns JSON."""
    return {"ok": True}


@bp.get("/healthz")
def healthz():
    """
    Fast liveness check for the load balancer. No DB access, minimal overhead.
    """
    return "ok", 200


# ---------- Public listings ----------
@bp.get("/leadership")
def leadership():
    s = db_session()
    return render_template(
        "public/leadership.html",
        leaders=featured_leaders(s),
        tier_of=leadership_tier,
        role_label=role_label,
    )


@bp.get("/programs")
def programs():
    s = db_session()
    return render_template("public/programs.html", programs=published_programs(s))


# ---------- Membership application ----------
def _designations() -> list:
    return [r for r in ROLE_HIERARCHY if r in APPLICATION_DESIGNATIONS]


@bp.get("/join")
def join_get():
    return render_template("public/join.html", prants=PRANT_LIST, designations=_designations(), role_label=role_label, form={})


@bp.post("/join")
def join_post():
    payload = {k: (request.form.get(k) or "").strip() for k in _JOIN_FIELDS}
    errors = validate_application_payload(payload)
    if errors:
        for e in errors:
            flash(e, "danger")
        return (
            render_template(
                "public/join.html",
                prants=PRANT_LIST,
                designations=_designations(),
                role_label=role_label,
                form=payload,
            ),
            400,
        )

    s = db_session()
    submit_application(s, payload)
    s.commit()
    flash("Application received. You will hear from your prant team once it is reviewed.", "success")
    return redirect(url_for("routes.index"))


# ---------- Verification ----------
@bp.get("/verify")
def verify_lookup():
    membership_id = (request.args.get("membership_id") or "").strip()
    if membership_id:
        return redirect(url_for("routes.verify", membership_id=membership_id))
    return render_template("public/verify.html", membership_id=None, profile=None, role_label=role_label)


@bp.get("/verify/<membership_id>")
def verify(membership_id: str):
    s = db_session()
    key = membership_id.strip().upper()
    profile = s.query(Profile).filter(Profile.membership_id == key).one_or_none()
    status = 200 if profile else 404
    return render_template("public/verify.html", membership_id=key, profile=profile, role_label=role_label), status


# ---------- Member dashboard ----------
@bp.get("/dashboard")
def dashboard():
    user = getattr(g, "current_user", None)
    if not user:
        return redirect(url_for("auth.login_get", next=request.path))
    s = db_session()
    principal = current_principal()
    return render_template(
        "dashboard.html",
        profile=user.profile,
        principal=principal,
        announcements=announcements_for(s, principal),
        role_label=role_label,
    )
