from __future__ import annotations

from flask import Blueprint, abort, flash, g, redirect, render_template, request, url_for

from app.savishkar.access import MANAGE_DISTRICTS
from app.savishkar.db import db_session
from app.savishkar.models import User
from app.savishkar.modules.districts.models import PrantDistrict
from app.savishkar.modules.districts.service import add_districts, delete_district, list_districts, toggle_district
from app.savishkar.rbac import current_principal, manageable_prants, require_capability

bp = Blueprint("districts", __name__)


def _current_user() -> User:
    u = getattr(g, "current_user", None)
    if not u:
        raise RuntimeError("No current user")
    return u


def _manageable_prants() -> list[str]:
    return manageable_prants(current_principal())


def _selected_prant(raw: str | None) -> str:
    prants = _manageable_prants()
    if not prants:
        abort(403)
    prant = (raw or "").strip() or prants[0]
    if prant not in prants:
        abort(403)
    return prant


def _get_district(district_id: int) -> PrantDistrict:
    s = db_session()
    district = s.get(PrantDistrict, district_id)
    if not district:
        abort(404)
    if district.prant not in _manageable_prants():
        abort(404)
    return district


@bp.get("/districts")
@require_capability(MANAGE_DISTRICTS)
def districts_list():
    s = db_session()
    prant = _selected_prant(request.args.get("prant"))
    return render_template(
        "admin/districts/list.html",
        prant=prant,
        prants=_manageable_prants(),
        districts=list_districts(s, prant),
    )


@bp.post("/districts")
@require_capability(MANAGE_DISTRICTS)
def districts_add():
    s = db_session()
    u = _current_user()
    prant = _selected_prant(request.form.get("prant"))

    # One district per line for bulk add.
    names = (request.form.get("districts") or "").splitlines()
    created, skipped = add_districts(s, prant, names, u)
    s.commit()

    if created:
        flash(f"{len(created)} district(s) added to {prant}.", "success")
    if skipped:
        flash(f"Already present: {', '.join(skipped)}", "warning")
    if not created and not skipped:
        flash("No districts to add.", "danger")
    return redirect(url_for("districts.districts_list", prant=prant))


@bp.post("/districts/<int:district_id>/toggle")
@require_capability(MANAGE_DISTRICTS)
def districts_toggle(district_id: int):
    s = db_session()
    district = _get_district(district_id)
    toggle_district(s, district, _current_user())
    s.commit()
    return redirect(url_for("districts.districts_list", prant=district.prant))


@bp.post("/districts/<int:district_id>/delete")
@require_capability(MANAGE_DISTRICTS)
def districts_delete(district_id: int):
    s = db_session()
    district = _get_district(district_id)
    prant = district.prant
    delete_district(s, district, _current_user())
    s.commit()
    flash("District deleted.", "success")
    return redirect(url_for("districts.districts_list", prant=prant))
