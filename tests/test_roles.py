import pytest

from app.savishkar.roles import (
    APPLICATION_DESIGNATIONS,
    ROLE_HIERARCHY,
    ROLE_LABELS,
    Role,
    assignable_roles,
    outranks,
    parse_role,
    rank,
    role_label,
)


def test_hierarchy_lists_every_role_once():
    assert len(ROLE_HIERARCHY) == len(set(ROLE_HIERARCHY)) == len(Role) == 18
    assert ROLE_HIERARCHY[0] is Role.SUPER_CONTROLLER
    assert ROLE_HIERARCHY[-1] is Role.MEMBER
    assert set(ROLE_LABELS) == set(Role)


def test_hierarchy_is_totally_ordered():
    for higher, lower in zip(ROLE_HIERARCHY, ROLE_HIERARCHY[1:]):
        assert outranks(higher, lower)
        assert not outranks(lower, higher)
    assert rank(Role.MEMBER) == 1


@pytest.mark.parametrize("value", ["", "  ", "root", "member", None, 3, object()])
def test_parse_role_never_raises(value):
    assert parse_role(value) is None
    assert rank(value) == 0
    assert role_label(value) == "Unknown"


def test_parse_role_accepts_strings_and_members():
    assert parse_role("STATE_CONVENER") is Role.STATE_CONVENER
    assert parse_role(Role.EVENT_MANAGER) is Role.EVENT_MANAGER


@pytest.mark.parametrize("value", [" ADMIN ", "ADMIN\n", "\tSTATE_CONVENER", "Admin"])
def test_parse_role_requires_exact_value(value):
    assert parse_role(value) is None


def test_assignable_roles():
    assert assignable_roles(Role.SUPER_CONTROLLER) == list(ROLE_HIERARCHY)
    admin = assignable_roles(Role.ADMIN)
    assert Role.ADMIN not in admin and Role.SUPER_CONTROLLER not in admin
    assert Role.NATIONAL_CONVENER in admin
    assert assignable_roles(Role.MEMBER) == []
    assert assignable_roles("nonsense") == []
    state = assignable_roles(Role.STATE_CONVENER)
    assert Role.STATE_CO_CONVENER in state
    assert Role.REGIONAL_CONVENER not in state


def test_application_designations_are_below_admin():
    for r in APPLICATION_DESIGNATIONS:
        assert outranks(Role.NATIONAL_CO_CONVENER, r)
