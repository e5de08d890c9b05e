import random
import re
from datetime import date

from app.savishkar.membership import DIRECT_SIGNUP_CODE, generate_membership_id, scope_code


def test_membership_id_format_for_known_prant():
    mid = generate_membership_id("Gujarat Prant")
    assert re.fullmatch(rf"SAV-GUJ-{date.today().year}-\d{{4}}", mid)


def test_direct_signup_uses_mbr_code():
    assert scope_code(None) == DIRECT_SIGNUP_CODE == "MBR"
    assert generate_membership_id(None, year=2025).startswith("SAV-MBR-2025-")


def test_unknown_prant_and_state_fallbacks():
    assert scope_code("Atlantis Prant") == "ATL"
    assert scope_code(None, "Kerala") == "KER"
    assert scope_code("  ", "  ") == "MBR"


def test_seeded_rng_is_deterministic_and_zero_padded():
    a = generate_membership_id("Kerala Prant", year=2024, rng=random.Random(3))
    b = generate_membership_id("Kerala Prant", year=2024, rng=random.Random(3))
    assert a == b
    assert re.fullmatch(r"SAV-KER-2024-\d{4}", a)
