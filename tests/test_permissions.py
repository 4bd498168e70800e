"""
Permission table and authorization gate.
"""

import itertools

import pytest

from caselab.apps.access.permissions import (
    PERMISSION_TABLE,
    Role,
    SensitiveOperation,
    has_all,
    has_any,
    has_executive_privileges,
    is_authorized,
    is_chief_of_cyber,
    permissions_for,
)

ALL_OPS = list(SensitiveOperation)


def test_table_is_total_over_roles():
    assert set(PERMISSION_TABLE) == set(Role)


def test_table_is_read_only():
    with pytest.raises(TypeError):
        PERMISSION_TABLE[Role.INVESTIGATOR] = frozenset(ALL_OPS)  # type: ignore[index]


@pytest.mark.parametrize("role", [None, "", "desk_sergeant", "superuser", "CHIEF OF CYBER"])
def test_unknown_roles_have_no_permissions(role):
    assert permissions_for(role) == frozenset()
    for op in ALL_OPS:
        assert is_authorized(role, op) is False


@pytest.mark.parametrize("role,op", list(itertools.product(list(Role), ALL_OPS)))
def test_is_authorized_matches_table(role, op):
    assert is_authorized(role, op) is (op in PERMISSION_TABLE[role])


@pytest.mark.parametrize("variant", [" chief_of_cyber ", "Chief_Of_Cyber", "CHIEF_OF_CYBER", "chief_of_cyber\n"])
def test_role_strings_match_exactly(variant):
    assert Role.coerce(variant) is None
    assert permissions_for(variant) == frozenset()
    assert not is_chief_of_cyber(variant)


def test_exact_raw_string_is_authorized():
    assert permissions_for("chief_of_cyber") == frozenset(ALL_OPS)
    assert is_authorized("commanding_officer", SensitiveOperation.APPROVE_FINAL_REPORTS)


def test_chief_of_cyber_has_every_operation():
    assert permissions_for(Role.CHIEF_OF_CYBER) == frozenset(ALL_OPS)


def test_officer_commanding_unit_only_approves_reports():
    assert permissions_for("officer_commanding_unit") == {SensitiveOperation.APPROVE_FINAL_REPORTS}
    assert not is_authorized("officer_commanding_unit", SensitiveOperation.MANAGE_ALL_USERS)


def test_admin_and_administrator_are_separate_entries():
    assert Role.ADMIN is not Role.ADMINISTRATOR
    assert Role.ADMIN in PERMISSION_TABLE and Role.ADMINISTRATOR in PERMISSION_TABLE
    assert SensitiveOperation.APPROVE_FINAL_REPORTS not in permissions_for(Role.ADMIN)


@pytest.mark.parametrize("role", list(Role) + ["unknown", None])
def test_has_any_and_has_all_agree_with_is_authorized(role):
    for size in range(0, 3):
        for ops in itertools.combinations(ALL_OPS, size):
            expected_all = all(is_authorized(role, op) for op in ops)
            expected_any = any(is_authorized(role, op) for op in ops)
            assert has_all(role, ops) is expected_all
            assert has_any(role, ops) is expected_any


def test_empty_operation_lists():
    assert has_any(Role.CHIEF_OF_CYBER, []) is False
    assert has_all(Role.INVESTIGATOR, []) is True


def test_executive_helpers():
    assert is_chief_of_cyber("chief_of_cyber")
    assert not is_chief_of_cyber(Role.ADMIN)
    assert has_executive_privileges(Role.ADMIN)
    assert has_executive_privileges("administrator")
    assert not has_executive_privileges(Role.COMMANDING_OFFICER)
    assert not has_executive_privileges(None)
