"""Endpoint catalog provisioning."""

import uuid
from typing import Any, Dict, Iterable, List

from nexusbootstrap.catalogs import ENDPOINTS
from nexusbootstrap.models import Endpoint, utc_now


class EndpointCatalogSeeder:
    """Inserts catalog endpoints keyed by (path, method)."""

    def __init__(self, database, logger, console, endpoints: Iterable[Endpoint] = ENDPOINTS):
        self.database = database
        self.logger = logger
        self.console = console
        self.endpoints = tuple(endpoints)

    def seed_endpoints(self) -> Dict[str, Any]:
        self.console.print("[yellow]Provisioning endpoint catalog...[/yellow]")
        created = 0
        existing = 0
        now = utc_now()

        with self.database.transaction() as conn:
            for endpoint in self.endpoints:
                row = conn.execute(
                    "SELECT id FROM endpoints WHERE path = ? AND method = ?",
                    (endpoint.path, endpoint.method),
                ).fetchone()
                if row is not None:
                    existing += 1
                    continue
                conn.execute(
                    """
                    INSERT INTO endpoints (
                        id, path, method, controller_name, action_name, description, category,
                        is_active, requires_auth, is_tenant_specific, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        str(uuid.uuid4()),
                        endpoint.path,
                        endpoint.method,
                        endpoint.controller_name,
                        endpoint.action_name,
                        endpoint.description,
                        endpoint.category,
                        int(endpoint.is_active),
                        int(endpoint.requires_auth),
                        int(endpoint.is_tenant_specific),
                        now,
                        now,
                    ),
                )
                created += 1

        self.logger.info("Endpoint catalog: %s created, %s already present.", created, existing)
        return {"created": created, "existing": existing, "total": len(self.endpoints)}

    def list_endpoints(self) -> List[Endpoint]:
        with self.database.transaction() as conn:
            rows = conn.execute("SELECT * FROM endpoints ORDER BY category, path, method").fetchall()
        return [
            Endpoint(
                path=row["path"],
                method=row["method"],
                controller_name=row["controller_name"],
                action_name=row["action_name"],
                description=row["description"],
                category=row["category"],
                requires_auth=bool(row["requires_auth"]),
                is_active=bool(row["is_active"]),
                is_tenant_specific=bool(row["is_tenant_specific"]),
                id=row["id"],
            )
            for row in rows
        ]
