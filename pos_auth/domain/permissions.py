"""
Role-based permissions and access control.

The permission table is the single source of truth for what each role may
do. It is an immutable value handed to ``AuthorizationEngine`` so that
alternate role schemes can be substituted in tests.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional

from pos_auth.domain.entities.enums import UserRole

ALL = "all"


@dataclass(frozen=True)
class RolePermissions:
    can_create: FrozenSet[str] = frozenset()
    can_approve: FrozenSet[str] = frozenset()
    can_access: tuple = ()
    auto_approve: FrozenSet[str] = frozenset()
    can_manage: FrozenSet[str] = frozenset()
    can_view: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class PermissionTable:
    roles: Mapping[str, RolePermissions]
    hierarchy: Mapping[str, int]
    route_access: Mapping[str, FrozenSet[str]] = field(
        default_factory=lambda: MappingProxyType({})
    )


DEFAULT_PERMISSION_TABLE = PermissionTable(
    roles=MappingProxyType(
        {
            UserRole.superadmin.value: RolePermissions(
                can_create=frozenset({"manager", "cashier"}),
                can_approve=frozenset({"manager", "cashier"}),
                can_access=("/superadmin", "/dashboard", "/pos"),
                auto_approve=frozenset({"manager", "cashier"}),
                can_manage=frozenset({ALL}),
                can_view=frozenset({ALL}),
            ),
            UserRole.manager.value: RolePermissions(
                can_create=frozenset({"cashier"}),
                can_approve=frozenset({"cashier"}),
                can_access=("/dashboard", "/pos"),
                auto_approve=frozenset({"cashier"}),
                can_manage=frozenset({"cashier"}),
                can_view=frozenset({"cashier", "products", "transactions"}),
            ),
            UserRole.cashier.value: RolePermissions(
                can_access=("/pos",),
                can_view=frozenset({"own_transactions"}),
            ),
        }
    ),
    hierarchy=MappingProxyType(
        {
            UserRole.superadmin.value: 3,
            UserRole.manager.value: 2,
            UserRole.cashier.value: 1,
        }
    ),
    route_access=MappingProxyType(
        {
            "/superadmin": frozenset({"superadmin"}),
            "/dashboard": frozenset({"superadmin", "manager"}),
            "/pos": frozenset({"superadmin", "manager", "cashier"}),
            "/login": frozenset({ALL}),
        }
    ),
)


def _role_key(role) -> str:
    return role.value if isinstance(role, UserRole) else str(role)


class AuthorizationEngine:
    """Pure predicates over a ``PermissionTable``."""

    def __init__(self, table: PermissionTable = DEFAULT_PERMISSION_TABLE):
        self.table = table

    def _permissions(self, role) -> RolePermissions:
        return self.table.roles.get(_role_key(role), RolePermissions())

    def has_permission(self, role, action: str, target: Optional[str] = None) -> bool:
        """
        Answer "can ``role`` perform ``action`` on ``target``".

        ``access`` is always granted here; route guards decide it.
        Unknown actions and a missing target are denied.
        """
        permissions = self._permissions(role)

        if action == "access":
            return True
        if action not in ("create", "approve", "manage", "view"):
            return False
        if not target:
            return False

        target = _role_key(target)
        if action == "create":
            return target in permissions.can_create
        if action == "approve":
            return target in permissions.can_approve
        if action == "manage":
            return target in permissions.can_manage or ALL in permissions.can_manage
        return target in permissions.can_view or ALL in permissions.can_view

    def can_access_route(self, role, route_path: str) -> bool:
        return any(
            route_path.startswith(prefix) for prefix in self._permissions(role).can_access
        )

    def can_access_route_by_role(self, role, route: str) -> bool:
        allowed = self.table.route_access.get(route)
        if not allowed:
            return False
        return ALL in allowed or _role_key(role) in allowed

    def should_auto_approve(self, creator_role, target_role) -> bool:
        return _role_key(target_role) in self._permissions(creator_role).auto_approve

    def has_higher_authority(self, role_a, role_b) -> bool:
        hierarchy = self.table.hierarchy
        return hierarchy.get(_role_key(role_a), 0) > hierarchy.get(_role_key(role_b), 0)
