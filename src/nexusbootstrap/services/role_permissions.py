"""Default role permission grants derived from the endpoint catalog."""

import uuid
from typing import Any, Dict, List, Optional

from nexusbootstrap.catalogs import EndpointCategory, PlatformRole
from nexusbootstrap.models import Endpoint, RolePermission, utc_now

SUPPORT_CATEGORIES = (
    EndpointCategory.TENANT_MANAGEMENT,
    EndpointCategory.USER_MANAGEMENT,
    EndpointCategory.SUPPORT,
)
CONTENT_CATEGORIES = (
    EndpointCategory.COMPANY_INFO_MANAGEMENT,
    EndpointCategory.PRODUCT_MANAGEMENT,
    EndpointCategory.INDUSTRY_MANAGEMENT,
    EndpointCategory.EMAIL_CONFIG_MANAGEMENT,
)


def _is_removal(endpoint: Endpoint) -> bool:
    return endpoint.method == "DELETE" or "remove" in endpoint.action_name


def default_grant(role: str, endpoint: Endpoint) -> Optional[RolePermission]:
    """Return the default grant for a role on an endpoint, or None when the role gets nothing."""
    if role == PlatformRole.SUPER_ADMIN:
        return RolePermission(role, endpoint.id, can_read=True, can_write=True, can_delete=True)

    if role == PlatformRole.PLATFORM_ADMIN:
        if endpoint.category == EndpointCategory.SYSTEM_INITIALIZATION:
            return None
        return RolePermission(role, endpoint.id, can_write=not _is_removal(endpoint))

    if role == PlatformRole.SUPPORT_AGENT:
        readable = endpoint.category in SUPPORT_CATEGORIES or (
            endpoint.method == "GET" and "remove" not in endpoint.action_name
        )
        return RolePermission(role, endpoint.id) if readable else None

    if role == PlatformRole.CONTENT_MANAGER:
        if endpoint.category not in CONTENT_CATEGORIES:
            return None
        return RolePermission(role, endpoint.id, can_write=not _is_removal(endpoint))

    return None


class RolePermissionSeeder:
    ROLES = (
        PlatformRole.SUPER_ADMIN,
        PlatformRole.PLATFORM_ADMIN,
        PlatformRole.SUPPORT_AGENT,
        PlatformRole.CONTENT_MANAGER,
    )

    def __init__(self, database, endpoint_seeder, logger, console):
        self.database = database
        self.endpoint_seeder = endpoint_seeder
        self.logger = logger
        self.console = console

    def seed_default_permissions(self) -> Dict[str, Any]:
        """Grant missing (role, endpoint) pairs. Existing grants keep their flags."""
        self.console.print("[yellow]Provisioning default role permissions...[/yellow]")
        endpoints = self.endpoint_seeder.list_endpoints()
        if not endpoints:
            self.logger.warning("Endpoint catalog is empty; no role permissions were granted.")

        created: Dict[str, int] = {role: 0 for role in self.ROLES}
        existing = 0
        now = utc_now()

        with self.database.transaction() as conn:
            for role in self.ROLES:
                for endpoint in endpoints:
                    grant = default_grant(role, endpoint)
                    if grant is None:
                        continue
                    row = conn.execute(
                        "SELECT id FROM role_permissions WHERE role = ? AND endpoint_id = ?",
                        (role, endpoint.id),
                    ).fetchone()
                    if row is not None:
                        existing += 1
                        continue
                    conn.execute(
                        """
                        INSERT INTO role_permissions (
                            id, role, endpoint_id, can_read, can_write, can_delete,
                            is_active, notes, created_at, updated_at
                        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                        """,
                        (
                            str(uuid.uuid4()),
                            grant.role,
                            grant.endpoint_id,
                            int(grant.can_read),
                            int(grant.can_write),
                            int(grant.can_delete),
                            int(grant.is_active),
                            grant.notes,
                            now,
                            now,
                        ),
                    )
                    created[role] += 1

        self.logger.info(
            "Role permissions: %s created, %s already present.",
            sum(created.values()),
            existing,
        )
        return {"created": created, "existing": existing}

    def list_permissions(self, role: Optional[str] = None) -> List[RolePermission]:
        query = "SELECT * FROM role_permissions"
        params: List[Any] = []
        if role:
            query += " WHERE role = ?"
            params.append(role)
        with self.database.transaction() as conn:
            rows = conn.execute(query + " ORDER BY role, endpoint_id", params).fetchall()
        return [
            RolePermission(
                role=row["role"],
                endpoint_id=row["endpoint_id"],
                can_read=bool(row["can_read"]),
                can_write=bool(row["can_write"]),
                can_delete=bool(row["can_delete"]),
                is_active=bool(row["is_active"]),
                notes=row["notes"],
                id=row["id"],
            )
            for row in rows
        ]
