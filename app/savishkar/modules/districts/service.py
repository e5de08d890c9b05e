from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func

from app.savishkar.audit import record_event
from app.savishkar.constants import is_known_prant

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.savishkar.models import User
    from app.savishkar.modules.districts.models import PrantDistrict


def list_districts(s: "Session", prant: str, *, active_only: bool = False) -> list["PrantDistrict"]:
    from app.savishkar.modules.districts.models import PrantDistrict

    q = s.query(PrantDistrict).filter(PrantDistrict.prant == prant)
    if active_only:
        q = q.filter(PrantDistrict.is_active.is_(True))
    return q.order_by(PrantDistrict.display_order.asc(), PrantDistrict.district.asc()).all()


def _next_order(s: "Session", prant: str) -> int:
    from app.savishkar.modules.districts.models import PrantDistrict

    current = s.query(func.max(PrantDistrict.display_order)).filter(PrantDistrict.prant == prant).scalar()
    return (current or 0) + 1


def add_districts(s: "Session", prant: str, names: list[str], user: "User") -> tuple[list["PrantDistrict"], list[str]]:
    """
    Add one or more districts to `prant`.

    Returns (created, skipped); blank names are ignored, duplicates (existing
    or repeated in `names`) are skipped. Raises ValueError for unknown prants.
    """
    from app.savishkar.modules.districts.models import PrantDistrict

    if not is_known_prant(prant):
        raise ValueError(f"Unknown prant: {prant}")

    existing = {d.district for d in list_districts(s, prant)}
    order = _next_order(s, prant)
    created: list[PrantDistrict] = []
    skipped: list[str] = []
    for raw in names:
        name = (raw or "").strip()
        if not name:
            continue
        if name in existing:
            skipped.append(name)
            continue
        row = PrantDistrict(prant=prant, district=name, display_order=order, is_active=True)
        s.add(row)
        created.append(row)
        existing.add(name)
        order += 1
    s.flush()

    if created:
        record_event(
            s,
            actor=user,
            action="district.create",
            entity_type="PrantDistrict",
            entity_id=",".join(str(d.id) for d in created),
            metadata={"prant": prant, "districts": [d.district for d in created]},
        )
    return created, skipped


def toggle_district(s: "Session", district: "PrantDistrict", user: "User") -> "PrantDistrict":
    district.is_active = not district.is_active
    record_event(
        s,
        actor=user,
        action="district.toggle",
        entity_type="PrantDistrict",
        entity_id=str(district.id),
        metadata={"prant": district.prant, "district": district.district, "is_active": district.is_active},
    )
    return district


def delete_district(s: "Session", district: "PrantDistrict", user: "User") -> None:
    record_event(
        s,
        actor=user,
        action="district.delete",
        entity_type="PrantDistrict",
        entity_id=str(district.id),
        metadata={"prant": district.prant, "district": district.district},
    )
    s.delete(district)
