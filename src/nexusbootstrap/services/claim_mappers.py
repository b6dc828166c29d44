"""Token claim mapper provisioning on the portal client."""

from typing import Any, Callable, Dict, Iterable, Optional

from nexusbootstrap.catalogs import claim_mappers
from nexusbootstrap.errors import ConfigurationError, NotFound
from nexusbootstrap.errors_catalog import actionable_error
from nexusbootstrap.models import ProtocolMapperDefinition


class ClaimMapperSeeder:
    def __init__(
        self,
        identity_provider,
        client_id: Optional[str],
        logger,
        console,
        mapper_factory: Callable[[Optional[str]], Iterable[ProtocolMapperDefinition]] = claim_mappers,
    ):
        self.identity_provider = identity_provider
        self.client_id = client_id
        self.logger = logger
        self.console = console
        self.mapper_factory = mapper_factory

    def seed_client_mappers(self) -> Dict[str, Any]:
        """Add each missing mapper by name; a single failed mapper does not stop the rest."""
        if not self.client_id:
            raise ConfigurationError("KEYCLOAK_CLIENT_ID is not configured.")

        self.console.print(f"[yellow]Provisioning token claim mappers on {self.client_id}...[/yellow]")
        self.identity_provider.authenticate()

        client = self.identity_provider.find_client_by_client_id(self.client_id)
        if not client:
            raise NotFound(
                actionable_error(
                    "client_not_found",
                    client_id=self.client_id,
                    realm=self.identity_provider.realm,
                )
            )

        existing = {mapper.get("name") for mapper in self.identity_provider.list_protocol_mappers(client["id"])}
        details: Dict[str, Any] = {"created": [], "existing": [], "failed": []}

        for definition in self.mapper_factory(self.client_id):
            if definition.name in existing:
                details["existing"].append(definition.name)
                continue
            try:
                self.identity_provider.add_protocol_mapper(client["id"], definition.to_representation())
            except Exception as exc:
                self.logger.warning("Could not add claim mapper %s: %s", definition.name, exc)
                details["failed"].append(definition.name)
                continue
            self.logger.info("Added claim mapper %s.", definition.name)
            details["created"].append(definition.name)

        return details
