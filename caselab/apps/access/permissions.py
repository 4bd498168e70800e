"""
Roles, sensitive operations, and the static permission table.

The table is total over `Role`: every role has an explicit entry, possibly
empty. It is built once at import and never mutated.

The gate functions accept a `Role`, a raw role string as stored in the
database, or None. Anything that is not a known role has no permissions.
"""

from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Union


class Role(str, Enum):
    """Organizational positions known to the unit."""

    INVESTIGATOR = "investigator"
    FORENSIC_ANALYST = "forensic_analyst"
    SUPERVISOR = "supervisor"
    ADMINISTRATOR = "administrator"
    CASE_OFFICER = "case_officer"
    ADMIN = "admin"
    EXHIBIT_OFFICER = "exhibit_officer"
    COMMANDING_OFFICER = "commanding_officer"
    ANALYST = "analyst"
    OFFICER_COMMANDING_UNIT = "officer_commanding_unit"
    CHIEF_OF_CYBER = "chief_of_cyber"

    @classmethod
    def coerce(cls, value: Union["Role", str, None]) -> Optional["Role"]:
        """Map a stored role string to a Role by exact value, or None if it is not one."""
        if value is None or isinstance(value, Role):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class SensitiveOperation(str, Enum):
    """Capabilities gated by role."""

    VIEW_AUDIT_LOGS = "view_audit_logs"
    APPROVE_FINAL_REPORTS = "approve_final_reports"
    MANAGE_ALL_USERS = "manage_all_users"
    VIEW_SYSTEM_ANALYTICS = "view_system_analytics"
    EXECUTE_STRATEGIC_DECISIONS = "execute_strategic_decisions"
    MANAGE_DEPARTMENT_BUDGET = "manage_department_budget"
    OVERRIDE_POLICIES = "override_policies"


RoleLike = Union[Role, str, None]

_NO_PERMISSIONS: frozenset[SensitiveOperation] = frozenset()

# admin and administrator are configured independently on purpose; do not
# collapse them into one entry.
_TABLE: dict[Role, frozenset[SensitiveOperation]] = {
    Role.CHIEF_OF_CYBER: frozenset(SensitiveOperation),
    Role.ADMIN: frozenset({
        SensitiveOperation.VIEW_AUDIT_LOGS,
        SensitiveOperation.MANAGE_ALL_USERS,
        SensitiveOperation.VIEW_SYSTEM_ANALYTICS,
    }),
    Role.ADMINISTRATOR: frozenset({
        SensitiveOperation.VIEW_AUDIT_LOGS,
        SensitiveOperation.MANAGE_ALL_USERS,
        SensitiveOperation.VIEW_SYSTEM_ANALYTICS,
    }),
    Role.COMMANDING_OFFICER: frozenset({
        SensitiveOperation.APPROVE_FINAL_REPORTS,
        SensitiveOperation.VIEW_SYSTEM_ANALYTICS,
    }),
    Role.OFFICER_COMMANDING_UNIT: frozenset({
        SensitiveOperation.APPROVE_FINAL_REPORTS,
    }),
    Role.INVESTIGATOR: _NO_PERMISSIONS,
    Role.FORENSIC_ANALYST: _NO_PERMISSIONS,
    Role.SUPERVISOR: _NO_PERMISSIONS,
    Role.CASE_OFFICER: _NO_PERMISSIONS,
    Role.EXHIBIT_OFFICER: _NO_PERMISSIONS,
    Role.ANALYST: _NO_PERMISSIONS,
}

_missing = set(Role) - set(_TABLE)
if _missing:
    raise RuntimeError(f"Permission table has no entry for: {sorted(r.value for r in _missing)}")

PERMISSION_TABLE: Mapping[Role, frozenset[SensitiveOperation]] = MappingProxyType(_TABLE)


def permissions_for(role: RoleLike) -> frozenset[SensitiveOperation]:
    """Operations configured for `role`. Unknown or missing roles get the empty set."""
    resolved = Role.coerce(role)
    if resolved is None:
        return _NO_PERMISSIONS
    return PERMISSION_TABLE[resolved]


def is_authorized(role: RoleLike, operation: SensitiveOperation) -> bool:
    return operation in permissions_for(role)


def has_any(role: RoleLike, operations: Iterable[SensitiveOperation]) -> bool:
    """True if at least one of `operations` is authorized. Empty input is False."""
    granted = permissions_for(role)
    return any(op in granted for op in operations)


def has_all(role: RoleLike, operations: Iterable[SensitiveOperation]) -> bool:
    """True only if every one of `operations` is authorized. Empty input is True."""
    granted = permissions_for(role)
    return all(op in granted for op in operations)


def is_chief_of_cyber(role: RoleLike) -> bool:
    return Role.coerce(role) is Role.CHIEF_OF_CYBER


def has_executive_privileges(role: RoleLike) -> bool:
    """Chief of Cyber or either administrator role."""
    return Role.coerce(role) in (Role.CHIEF_OF_CYBER, Role.ADMIN, Role.ADMINISTRATOR)
