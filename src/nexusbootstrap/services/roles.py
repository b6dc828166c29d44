"""Realm and client role provisioning in the identity provider."""

from typing import Any, Dict, Iterable, List, Optional

from nexusbootstrap.catalogs import PORTAL_ROLES, PRIVILEGED_ROLES
from nexusbootstrap.errors import ConfigurationError, NotFound
from nexusbootstrap.models import PortalRole


class RolesSeeder:
    """Creates missing portal roles. Existing roles are left untouched."""

    def __init__(self, identity_provider, logger, console, roles: Iterable[PortalRole] = PORTAL_ROLES):
        self.identity_provider = identity_provider
        self.logger = logger
        self.console = console
        self.roles = tuple(roles)

    def seed_roles(self) -> Dict[str, Any]:
        self.console.print("[yellow]Provisioning realm and client roles...[/yellow]")
        self.identity_provider.authenticate()

        details: Dict[str, Any] = {"created": [], "existing": [], "failed": []}
        realm_roles = {role.get("name") for role in self.identity_provider.list_realm_roles()}

        for role in self.roles:
            if role.client_id:
                self._seed_client_role(role, details)
            else:
                self._seed_realm_role(role, realm_roles, details)

        self.logger.info(
            "Role provisioning done: %s created, %s existing, %s failed.",
            len(details["created"]),
            len(details["existing"]),
            len(details["failed"]),
        )
        return details

    def _seed_realm_role(self, role: PortalRole, realm_roles, details: Dict[str, Any]):
        if role.name in realm_roles:
            self.logger.debug("Realm role %s already exists.", role.name)
            details["existing"].append(role.name)
            return
        try:
            self.identity_provider.create_realm_role(role.name, role.description)
        except Exception as exc:
            self.logger.warning("Could not create realm role %s: %s", role.name, exc)
            details["failed"].append(role.name)
            return
        self.logger.info("Created realm role %s.", role.name)
        details["created"].append(role.name)

    def _seed_client_role(self, role: PortalRole, details: Dict[str, Any]):
        label = f"{role.client_id}/{role.name}"
        try:
            client = self.identity_provider.find_client_by_client_id(role.client_id)
            if not client:
                self.logger.warning("Client %s not found, skipping role %s.", role.client_id, role.name)
                details["failed"].append(label)
                return

            existing = {item.get("name") for item in self.identity_provider.list_client_roles(client["id"])}
            if role.name in existing:
                details["existing"].append(label)
                return

            self.identity_provider.create_client_role(client["id"], role.name, role.description)
        except Exception as exc:
            self.logger.warning("Could not create client role %s: %s", label, exc)
            details["failed"].append(label)
            return
        self.logger.info("Created client role %s.", label)
        details["created"].append(label)

    def assign_roles_to_user(self, user_id: Optional[str], role_names: Iterable[str] = PRIVILEGED_ROLES) -> Dict[str, Any]:
        """Grant realm roles to an existing user. All names must exist in the realm."""
        if not user_id:
            raise ConfigurationError("SUPER_ADMIN_KEYCLOAK_ID is not configured.")

        self.identity_provider.authenticate()
        wanted = list(role_names)
        realm_roles = {role.get("name"): role for role in self.identity_provider.list_realm_roles()}

        found: List[Dict[str, Any]] = []
        missing: List[str] = []
        for name in wanted:
            role = realm_roles.get(name)
            if role is None:
                missing.append(name)
            else:
                found.append({"id": role.get("id"), "name": name})

        if missing:
            raise NotFound(f"Realm roles not found for assignment: {', '.join(missing)}")

        self.identity_provider.add_realm_role_mappings(user_id, found)
        self.logger.info(
            "Assigned roles %s to user %s.",
            ", ".join(role["name"] for role in found),
            user_id,
        )
        return {"user_id": user_id, "assigned": [role["name"] for role in found]}
