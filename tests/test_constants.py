from app.savishkar.constants import PRANT_CODES, PRANT_LIST, REGIONS, is_known_prant, region_of, region_prants


def test_prant_list_has_no_duplicates():
    assert len(PRANT_LIST) == len(set(PRANT_LIST)) == 46


def test_every_prant_has_a_three_letter_code():
    assert set(PRANT_CODES) == set(PRANT_LIST)
    for code in PRANT_CODES.values():
        assert len(code) == 3 and code.isupper()
    assert len(set(PRANT_CODES.values())) == len(PRANT_CODES)


def test_every_prant_belongs_to_exactly_one_region():
    seen = [p for prants in REGIONS.values() for p in prants]
    assert sorted(seen) == sorted(PRANT_LIST)
    for prant in PRANT_LIST:
        assert region_of(prant) is not None


def test_southern_region():
    assert set(region_prants("Southern Region")) == {"Kerala Prant", "North Tamil Nadu Prant", "South Tamil Nadu Prant"}


def test_region_lookup_fails_closed():
    assert region_prants("Nowhere") == ()
    assert region_prants(None) == ()
    assert region_prants("") == ()
    assert region_of("Atlantis Prant") is None


def test_is_known_prant():
    assert is_known_prant("Gujarat Prant")
    assert not is_known_prant("gujarat prant")
    assert not is_known_prant(None)
