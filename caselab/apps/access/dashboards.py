"""
Dashboard selection.

Total function from role to dashboard variant. Roles without a dedicated
dashboard, unknown role strings and None all land on DEFAULT.
"""

from enum import Enum
from types import MappingProxyType

from caselab.apps.access.permissions import Role, RoleLike


class DashboardVariant(str, Enum):
    ANALYST = "analyst"
    EXHIBIT_OFFICER = "exhibit_officer"
    COMMANDING_OFFICER = "commanding_officer"
    OFFICER_COMMANDING_UNIT = "officer_commanding_unit"
    CHIEF_OF_CYBER = "chief_of_cyber"
    ADMINISTRATOR = "administrator"
    DEFAULT = "default"


DASHBOARDS = MappingProxyType({
    Role.ANALYST: DashboardVariant.ANALYST,
    Role.FORENSIC_ANALYST: DashboardVariant.ANALYST,
    Role.EXHIBIT_OFFICER: DashboardVariant.EXHIBIT_OFFICER,
    Role.COMMANDING_OFFICER: DashboardVariant.COMMANDING_OFFICER,
    Role.OFFICER_COMMANDING_UNIT: DashboardVariant.OFFICER_COMMANDING_UNIT,
    Role.CHIEF_OF_CYBER: DashboardVariant.CHIEF_OF_CYBER,
    Role.ADMIN: DashboardVariant.ADMINISTRATOR,
    Role.ADMINISTRATOR: DashboardVariant.ADMINISTRATOR,
})


def select_dashboard(role: RoleLike) -> DashboardVariant:
    resolved = Role.coerce(role)
    if resolved is None:
        return DashboardVariant.DEFAULT
    return DASHBOARDS.get(resolved, DashboardVariant.DEFAULT)
