"""
Central reference data: prants, prant codes and the region -> prant mapping.
"""
from __future__ import annotations

ORG_CODE = "SAV"

# Official organizational divisions.
PRANT_LIST: tuple[str, ...] = (
    "Gujarat Prant",
    "Meerut Prant",
    "Jodhpur Prant",
    "Telangana Prant",
    "North Tamil Nadu Prant",
    "Punjab Prant",
    "Jammu & Kashmir Prant",
    "Chittor Prant",
    "Jaipur Prant",
    "Bangalore Prant",
    "Paschim Maharashtra Prant",
    "Jharkhand Prant",
    "Kashi Prant",
    "Awadh Prant",
    "Konkan Prant",
    "Chhattisgarh Prant",
    "South Bengal Prant",
    "Malwa Prant",
    "Himachal Prant",
    "Kerala Prant",
    "Madhya Bharat Prant",
    "Vidarbha Prant",
    "Haryana Prant",
    "Kanpur Prant",
    "Delhi Prant",
    "South Tamil Nadu Prant",
    "Andhra Pradesh Prant",
    "South Karnataka Prant",
    "North Karnataka Prant",
    "Deogiri Prant",
    "Mahakaushal Prant",
    "Orissa East Prant",
    "Orissa West Prant",
    "North Bengal Prant",
    "Sikkim - Darjeeling Prant",
    "Assam Prant",
    "Arunachal Pradesh Prant",
    "Nagaland Prant",
    "Manipur Prant",
    "Mizoram Prant",
    "Meghalaya Prant",
    "South Bihar Prant",
    "North Bihar Prant",
    "Goraksha Prant",
    "Braj Prant",
    "Uttarakhand Prant",
)

# Prant -> code used in membership identifiers
PRANT_CODES: dict[str, str] = {
    "Gujarat Prant": "GUJ",
    "Meerut Prant": "MRT",
    "Jodhpur Prant": "JDH",
    "Telangana Prant": "TLG",
    "North Tamil Nadu Prant": "NTN",
    "Punjab Prant": "PNJ",
    "Jammu & Kashmir Prant": "JNK",
    "Chittor Prant": "CHT",
    "Jaipur Prant": "JPR",
    "Bangalore Prant": "BLR",
    "Paschim Maharashtra Prant": "PMH",
    "Jharkhand Prant": "JHK",
    "Kashi Prant": "KSH",
    "Awadh Prant": "AWD",
    "Konkan Prant": "KNK",
    "Chhattisgarh Prant": "CHG",
    "South Bengal Prant": "SBG",
    "Malwa Prant": "MLW",
    "Himachal Prant": "HIM",
    "Kerala Prant": "KER",
    "Madhya Bharat Prant": "MBH",
    "Vidarbha Prant": "VID",
    "Haryana Prant": "HRY",
    "Kanpur Prant": "KNP",
    "Delhi Prant": "DEL",
    "South Tamil Nadu Prant": "STN",
    "Andhra Pradesh Prant": "APR",
    "South Karnataka Prant": "SKT",
    "North Karnataka Prant": "NKT",
    "Deogiri Prant": "DGR",
    "Mahakaushal Prant": "MKL",
    "Orissa East Prant": "ORE",
    "Orissa West Prant": "ORW",
    "North Bengal Prant": "NBG",
    "Sikkim - Darjeeling Prant": "SDK",
    "Assam Prant": "ASM",
    "Arunachal Pradesh Prant": "ARP",
    "Nagaland Prant": "NGL",
    "Manipur Prant": "MNP",
    "Mizoram Prant": "MZR",
    "Meghalaya Prant": "MGY",
    "South Bihar Prant": "SBH",
    "North Bihar Prant": "NBH",
    "Goraksha Prant": "GRK",
    "Braj Prant": "BRJ",
    "Uttarakhand Prant": "UTK",
}

# Region -> prants. Each prant belongs to exactly one region.
REGIONS: dict[str, tuple[str, ...]] = {
    "Southern Region": (
        "Kerala Prant",
        "North Tamil Nadu Prant",
        "South Tamil Nadu Prant",
    ),
    "South Central Region": (
        "Telangana Prant",
        "Andhra Pradesh Prant",
        "Bangalore Prant",
        "South Karnataka Prant",
        "North Karnataka Prant",
    ),
    "Western Region": (
        "Gujarat Prant",
        "Konkan Prant",
        "Paschim Maharashtra Prant",
        "Deogiri Prant",
        "Vidarbha Prant",
    ),
    "Central Region": (
        "Malwa Prant",
        "Madhya Bharat Prant",
        "Mahakaushal Prant",
        "Chhattisgarh Prant",
    ),
    "Rajasthan Region": (
        "Jodhpur Prant",
        "Jaipur Prant",
        "Chittor Prant",
    ),
    "Northern Region": (
        "Delhi Prant",
        "Haryana Prant",
        "Punjab Prant",
        "Himachal Prant",
        "Jammu & Kashmir Prant",
    ),
    "Western Uttar Pradesh Region": (
        "Meerut Prant",
        "Braj Prant",
        "Uttarakhand Prant",
    ),
    "Eastern Uttar Pradesh Region": (
        "Kashi Prant",
        "Awadh Prant",
        "Kanpur Prant",
        "Goraksha Prant",
    ),
    "Eastern Region": (
        "South Bengal Prant",
        "North Bengal Prant",
        "Sikkim - Darjeeling Prant",
        "Orissa East Prant",
        "Orissa West Prant",
    ),
    "Bihar Jharkhand Region": (
        "South Bihar Prant",
        "North Bihar Prant",
        "Jharkhand Prant",
    ),
    "North Eastern Region": (
        "Assam Prant",
        "Arunachal Pradesh Prant",
        "Nagaland Prant",
        "Manipur Prant",
        "Mizoram Prant",
        "Meghalaya Prant",
    ),
}

REGION_NAMES: tuple[str, ...] = tuple(REGIONS)

ANNOUNCEMENT_AUDIENCES = ("ALL", "DESIGNATORY")

APPLICATION_STATUSES = ("pending", "approved", "rejected")

PROGRAM_TYPES = ("Workshop", "Seminar", "Competition", "Conference", "Camp", "Other")


def is_known_prant(name: str | None) -> bool:
    return name in PRANT_CODES


def region_prants(region: str | None, reference: dict[str, tuple[str, ...]] | None = None) -> tuple[str, ...]:
    """Prants of `region`; an empty tuple when the region does not resolve."""
    table = REGIONS if reference is None else reference
    if not region:
        return ()
    return tuple(table.get(region, ()))


def region_of(prant: str | None) -> str | None:
    for region, prants in REGIONS.items():
        if prant in prants:
            return region
    return None
