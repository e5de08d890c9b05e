from __future__ import annotations

import uuid
from collections import defaultdict
from datetime import datetime, timedelta

from flask import Blueprint, current_app, flash, g, redirect, render_template, request, session, url_for
from werkzeug.security import check_password_hash, generate_password_hash

from app.savishkar.access import VIEW_ADMIN, can
from app.savishkar.audit import record_event
from app.savishkar.constants import PRANT_LIST
from app.savishkar.db import db_session
from app.savishkar.models import User
from app.savishkar.modules.members.service import email_taken, is_valid_email, provision_member
from app.savishkar.rbac import principal_for_user
from app.savishkar.roles import Role

bp = Blueprint("auth", __name__)
_login_attempts: dict[str, list[datetime]] = defaultdict(list)
_LOGIN_RATE_WINDOW = 300  # seconds
_MIN_PASSWORD_LENGTH = 8


def _rate_limit() -> int:
    return int(current_app.config.get("LOGIN_RATE_LIMIT") or 5)


def _check_rate_limit(ip: str) -> bool:
    now = datetime.utcnow()
    cutoff = now - timedelta(seconds=_LOGIN_RATE_WINDOW)
    _login_attempts[ip] = [t for t in _login_attempts[ip] if t > cutoff]
    return len(_login_attempts[ip]) >= _rate_limit()


def _record_attempt(ip: str) -> None:
    _login_attempts[ip].append(datetime.utcnow())


def _safe_next(nxt: str) -> str | None:
    # Only allow local paths to avoid open redirects.
    if nxt.startswith("/") and not nxt.startswith("//"):
        return nxt
    return None


def _landing_for(user: User) -> str:
    if can(principal_for_user(user), VIEW_ADMIN):
        return url_for("admin.index")
    return url_for("routes.dashboard")


def load_current_user() -> None:
    """
    Loads g.current_user (and the resolver Principal) from the signed session cookie.
    Also assigns a simple per-request request_id (for audit/log correlation).
    """
    if not getattr(g, "request_id", None):
        g.request_id = uuid.uuid4().hex
    g.current_user = None
    g.current_principal = principal_for_user(None)
    if request.path.startswith(("/static/", "/health", "/healthz")):
        return

    user_id = session.get("user_id")
    if not user_id:
        return

    try:
        s = db_session()
        user = s.get(User, int(user_id))
        if not user or not user.is_active:
            session.pop("user_id", None)
            return
        g.current_user = user
        g.current_principal = principal_for_user(user)
    except Exception as e:
        current_app.logger.error("load_current_user DB error (clearing session): %s", e)
        session.pop("user_id", None)
        g.current_user = None


def password_change_guard():
    """Members holding a temporary password may only reach the change-password page."""
    user = getattr(g, "current_user", None)
    if not user or not user.must_change_password:
        return None
    endpoint = request.endpoint or ""
    if endpoint in ("auth.change_password_get", "auth.change_password_post", "auth.logout", "static"):
        return None
    if endpoint.startswith("routes.") and endpoint not in ("routes.dashboard",):
        return None
    return redirect(url_for("auth.change_password_get"))


# ---------- Login ----------
@bp.get("/login")
def login_get():
    nxt = (request.args.get("next") or "").strip()
    return render_template("auth/login.html", next=nxt)


@bp.post("/login")
def login_post():
    email = (request.form.get("email") or "").strip().lower()
    password = request.form.get("password") or ""
    nxt = (request.form.get("next") or "").strip()
    ip = request.remote_addr or "unknown"

    if _check_rate_limit(ip):
        flash("Too many login attempts. Please wait 5 minutes.", "danger")
        return redirect(url_for("auth.login_get"))

    _record_attempt(ip)

    try:
        s = db_session()
        user = s.query(User).filter(User.email == email).one_or_none()
        if not user or not user.is_active or not check_password_hash(user.password_hash, password):
            record_event(
                s,
                actor=None,
                action="auth.login_failed",
                entity_type="User",
                entity_id=email,
                reason="Invalid credentials",
                metadata={"email": email},
            )
            s.commit()
            flash("Invalid credentials.", "danger")
            return redirect(url_for("auth.login_get"))

        session["user_id"] = user.id
        _login_attempts[ip].clear()
        user.last_login_at = datetime.utcnow()
        record_event(s, actor=user, action="auth.login", entity_type="User", entity_id=str(user.id))
        s.commit()

        if user.must_change_password:
            flash("Please choose a new password before continuing.", "warning")
            return redirect(url_for("auth.change_password_get"))
        return redirect(_safe_next(nxt) or _landing_for(user))
    except Exception:
        current_app.logger.exception("Login POST crashed (email=%s request_id=%s)", email, getattr(g, "request_id", None))
        raise


@bp.get("/logout")
def logout():
    s = db_session()
    user = getattr(g, "current_user", None)
    if user:
        record_event(s, actor=user, action="auth.logout", entity_type="User", entity_id=str(user.id))
        s.commit()
    session.pop("user_id", None)
    return redirect(url_for("routes.index"))


# ---------- Sign-up ----------
@bp.get("/signup")
def signup_get():
    return render_template("auth/signup.html", prants=PRANT_LIST, form={})


@bp.post("/signup")
def signup_post():
    form = {k: (request.form.get(k) or "").strip() for k in ("full_name", "email", "phone", "prant", "district", "institution")}
    password = request.form.get("password") or ""
    confirm = request.form.get("confirm_password") or ""

    errors = []
    if not form["full_name"]:
        errors.append("Full name is required.")
    if not is_valid_email(form["email"]):
        errors.append("A valid email is required.")
    if len(password) < _MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {_MIN_PASSWORD_LENGTH} characters.")
    if password != confirm:
        errors.append("Passwords do not match.")
    if form["prant"] and form["prant"] not in PRANT_LIST:
        errors.append(f"Unknown prant: {form['prant']}")

    s = db_session()
    if not errors and email_taken(s, form["email"]):
        errors.append("An account with this email already exists.")
    if errors:
        for e in errors:
            flash(e, "danger")
        return render_template("auth/signup.html", prants=PRANT_LIST, form=form), 400

    profile = provision_member(
        s,
        email=form["email"],
        password=password,
        full_name=form["full_name"],
        role=Role.MEMBER,
        prant=form["prant"],
        district=form["district"],
        phone=form["phone"],
        institution=form["institution"],
        direct_signup=True,
    )
    record_event(
        s,
        actor=s.get(User, profile.user_id),
        action="user.signup",
        entity_type="Profile",
        entity_id=str(profile.id),
        metadata={"membership_id": profile.membership_id, "prant": profile.prant},
    )
    s.commit()

    session["user_id"] = profile.user_id
    flash(f"Welcome! Your membership ID is {profile.membership_id}.", "success")
    return redirect(url_for("routes.dashboard"))


# ---------- Password ----------
@bp.get("/change-password")
def change_password_get():
    if not getattr(g, "current_user", None):
        return redirect(url_for("auth.login_get", next=request.path))
    return render_template("auth/change_password.html")


@bp.post("/change-password")
def change_password_post():
    user: User | None = getattr(g, "current_user", None)
    if not user:
        return redirect(url_for("auth.login_get", next=request.path))

    current = request.form.get("current_password") or ""
    new = request.form.get("new_password") or ""
    confirm = request.form.get("confirm_password") or ""

    if not check_password_hash(user.password_hash, current):
        flash("Current password is incorrect.", "danger")
        return redirect(url_for("auth.change_password_get"))
    if len(new) < _MIN_PASSWORD_LENGTH:
        flash(f"Password must be at least {_MIN_PASSWORD_LENGTH} characters.", "danger")
        return redirect(url_for("auth.change_password_get"))
    if new != confirm:
        flash("Passwords do not match.", "danger")
        return redirect(url_for("auth.change_password_get"))
    if new == current:
        flash("New password must differ from the current one.", "danger")
        return redirect(url_for("auth.change_password_get"))

    s = db_session()
    user.password_hash = generate_password_hash(new)
    user.must_change_password = False
    record_event(s, actor=user, action="auth.password_change", entity_type="User", entity_id=str(user.id))
    s.commit()
    flash("Password updated.", "success")
    return redirect(_landing_for(user))
