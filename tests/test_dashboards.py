import pytest

from caselab.apps.access.dashboards import DashboardVariant, select_dashboard
from caselab.apps.access.permissions import Role


@pytest.mark.parametrize(
    "role,expected",
    [
        (Role.ANALYST, DashboardVariant.ANALYST),
        (Role.FORENSIC_ANALYST, DashboardVariant.ANALYST),
        (Role.EXHIBIT_OFFICER, DashboardVariant.EXHIBIT_OFFICER),
        (Role.COMMANDING_OFFICER, DashboardVariant.COMMANDING_OFFICER),
        (Role.OFFICER_COMMANDING_UNIT, DashboardVariant.OFFICER_COMMANDING_UNIT),
        (Role.CHIEF_OF_CYBER, DashboardVariant.CHIEF_OF_CYBER),
        (Role.ADMIN, DashboardVariant.ADMINISTRATOR),
        (Role.ADMINISTRATOR, DashboardVariant.ADMINISTRATOR),
        (Role.INVESTIGATOR, DashboardVariant.DEFAULT),
        (Role.SUPERVISOR, DashboardVariant.DEFAULT),
        (Role.CASE_OFFICER, DashboardVariant.DEFAULT),
    ],
)
def test_select_dashboard(role, expected):
    assert select_dashboard(role) is expected
    assert select_dashboard(role.value) is expected


@pytest.mark.parametrize("role", [None, "", "janitor", "chief-of-cyber", 42])
def test_unrecognized_roles_get_default(role):
    assert select_dashboard(role) is DashboardVariant.DEFAULT


def test_selection_is_deterministic():
    for role in list(Role) + ["nobody", None]:
        assert select_dashboard(role) is select_dashboard(role)
