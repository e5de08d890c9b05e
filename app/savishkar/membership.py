from __future__ import annotations

import random
from datetime import date

from app.savishkar.constants import ORG_CODE, PRANT_CODES

DIRECT_SIGNUP_CODE = "MBR"

_sysrand = random.SystemRandom()


def scope_code(prant: str | None, state: str | None = None) -> str:
    """Three-letter code: known prant code, else first letters of prant, else state, else MBR."""
    prant = (prant or "").strip()
    if prant:
        return PRANT_CODES.get(prant) or prant[:3].upper()
    state = (state or "").strip()
    if state:
        return state[:3].upper()
    return DIRECT_SIGNUP_CODE


def generate_membership_id(
    prant: str | None,
    state: str | None = None,
    *,
    year: int | None = None,
    rng: random.Random | None = None,
) -> str:
    """
    Build `SAV-<CODE>-<YEAR>-<NNNN>`.

    Uniqueness is enforced by the unique constraint on profiles.membership_id,
    not here.
    """
    y = year if year is not None else date.today().year
    n = (rng or _sysrand).randint(0, 9999)
    return f"{ORG_CODE}-{scope_code(prant, state)}-{y:04d}-{n:04d}"
