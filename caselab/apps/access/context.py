"""
Access context.

The resolved identity/role for one request, passed
explicitly to whatever needs to make an authorization decision.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from caselab.apps.access.dashboards import DashboardVariant, select_dashboard
from caselab.apps.access.permissions import (
    Role,
    SensitiveOperation,
    has_all,
    has_any,
    has_executive_privileges,
    is_authorized,
    is_chief_of_cyber,
    permissions_for,
)


@dataclass(frozen=True)
class AccessContext:
    user_id: Optional[str]
    role: Optional[Role]
    permissions: frozenset[SensitiveOperation] = field(default_factory=frozenset)
    dashboard: DashboardVariant = DashboardVariant.DEFAULT

    @classmethod
    def for_role(cls, user_id: Optional[str], role: Optional[Role]) -> "AccessContext":
        return cls(
            user_id=user_id,
            role=role,
            permissions=permissions_for(role),
            dashboard=select_dashboard(role),
        )

    @classmethod
    def anonymous(cls, user_id: Optional[str] = None) -> "AccessContext":
        """No role, no permissions. Used before resolution and after failing closed."""
        return cls.for_role(user_id, None)

    def can(self, operation: SensitiveOperation) -> bool:
        return is_authorized(self.role, operation)

    def can_any(self, operations: Iterable[SensitiveOperation]) -> bool:
        return has_any(self.role, operations)

    def can_all(self, operations: Iterable[SensitiveOperation]) -> bool:
        return has_all(self.role, operations)

    def as_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "role": self.role.value if self.role else None,
            "permissions": sorted(op.value for op in self.permissions),
            "dashboard": self.dashboard.value,
            "is_chief_of_cyber": is_chief_of_cyber(self.role),
            "executive": has_executive_privileges(self.role),
        }
