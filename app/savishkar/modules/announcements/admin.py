from __future__ import annotations

from flask import Blueprint, abort, flash, g, redirect, render_template, request, url_for

from app.savishkar.access import MANAGE_ANNOUNCEMENTS
from app.savishkar.constants import ANNOUNCEMENT_AUDIENCES
from app.savishkar.db import db_session
from app.savishkar.models import User
from app.savishkar.modules.announcements.models import Announcement
from app.savishkar.modules.announcements.service import (
    create_announcement,
    set_announcement_active,
    validate_announcement_payload,
)
from app.savishkar.rbac import require_capability

bp = Blueprint("announcements", __name__)


def _current_user() -> User:
    u = getattr(g, "current_user", None)
    if not u:
        raise RuntimeError("No current user")
    return u


@bp.get("/announcements")
@require_capability(MANAGE_ANNOUNCEMENTS)
def announcements_list():
    s = db_session()
    rows = s.query(Announcement).order_by(Announcement.created_at.desc(), Announcement.id.desc()).all()
    return render_template("admin/announcements/list.html", announcements=rows, audiences=ANNOUNCEMENT_AUDIENCES)


@bp.post("/announcements")
@require_capability(MANAGE_ANNOUNCEMENTS)
def announcements_create():
    s = db_session()
    payload = {
        "title": request.form.get("title"),
        "content": request.form.get("content"),
        "target_audience": request.form.get("target_audience"),
    }
    errors = validate_announcement_payload(payload)
    if errors:
        for e in errors:
            flash(e, "danger")
        return redirect(url_for("announcements.announcements_list"))

    create_announcement(s, payload, _current_user())
    s.commit()
    flash("Announcement published.", "success")
    return redirect(url_for("announcements.announcements_list"))


@bp.post("/announcements/<int:announcement_id>/active")
@require_capability(MANAGE_ANNOUNCEMENTS)
def announcements_set_active(announcement_id: int):
    s = db_session()
    row = s.get(Announcement, announcement_id)
    if not row:
        abort(404)
    set_announcement_active(s, row, request.form.get("is_active") == "1", _current_user())
    s.commit()
    return redirect(url_for("announcements.announcements_list"))
