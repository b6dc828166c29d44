"""Identity provider (Keycloak) admin REST client."""

from typing import Any, Dict, List, Optional

import requests

from nexusbootstrap.errors import ConfigurationError, IdentityProviderError


class IdentityProviderClient:
    """Thin admin API wrapper. No retries; every call is bounded by a timeout."""

    ADMIN_REALM = "master"
    ADMIN_CLIENT_ID = "admin-cli"

    def __init__(
        self,
        base_url: Optional[str],
        realm: str,
        admin_username: Optional[str],
        admin_password: Optional[str],
        logger,
        timeout_seconds: float = 10.0,
        requests_module=requests,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.realm = realm
        self.admin_username = admin_username
        self.admin_password = admin_password
        self.logger = logger
        self.timeout_seconds = timeout_seconds
        self.requests = requests_module
        self._access_token: Optional[str] = None

    def authenticate(self):
        if not self.base_url:
            raise ConfigurationError("KEYCLOAK_URL is not configured.")

        token_url = f"{self.base_url}/realms/{self.ADMIN_REALM}/protocol/openid-connect/token"
        payload = self._send(
            "POST",
            token_url,
            data={
                "grant_type": "password",
                "client_id": self.ADMIN_CLIENT_ID,
                "username": self.admin_username or "",
                "password": self.admin_password or "",
            },
            authenticated=False,
        )
        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            raise IdentityProviderError("Identity provider returned no access token.")
        self._access_token = token
        self.logger.debug("Identity provider admin authentication succeeded.")

    def find_client_by_client_id(self, client_id: str) -> Optional[Dict[str, Any]]:
        clients = self._send("GET", self._admin_url("clients"), params={"clientId": client_id}) or []
        self.logger.debug("Found %s client(s) for clientId=%s in realm %s", len(clients), client_id, self.realm)
        return clients[0] if clients else None

    def list_protocol_mappers(self, client_uuid: str) -> List[Dict[str, Any]]:
        return self._send("GET", self._admin_url(f"clients/{client_uuid}/protocol-mappers/models")) or []

    def add_protocol_mapper(self, client_uuid: str, mapper: Dict[str, Any]):
        self._send("POST", self._admin_url(f"clients/{client_uuid}/protocol-mappers/models"), json=mapper)

    def list_realm_roles(self) -> List[Dict[str, Any]]:
        return self._send("GET", self._admin_url("roles")) or []

    def create_realm_role(self, name: str, description: str):
        self._send("POST", self._admin_url("roles"), json={"name": name, "description": description})

    def list_client_roles(self, client_uuid: str) -> List[Dict[str, Any]]:
        return self._send("GET", self._admin_url(f"clients/{client_uuid}/roles")) or []

    def create_client_role(self, client_uuid: str, name: str, description: str):
        self._send(
            "POST",
            self._admin_url(f"clients/{client_uuid}/roles"),
            json={"name": name, "description": description},
        )

    def add_realm_role_mappings(self, user_id: str, roles: List[Dict[str, Any]]):
        self._send("POST", self._admin_url(f"users/{user_id}/role-mappings/realm"), json=roles)

    def _admin_url(self, path: str) -> str:
        return f"{self.base_url}/admin/realms/{self.realm}/{path}"

    def _send(self, method: str, url: str, authenticated: bool = True, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        if authenticated:
            if not self._access_token:
                raise IdentityProviderError("Identity provider client is not authenticated.")
            headers["Authorization"] = f"Bearer {self._access_token}"

        try:
            response = self.requests.request(
                method,
                url,
                headers=headers,
                timeout=self.timeout_seconds,
                **kwargs,
            )
            response.raise_for_status()
        except self.requests.Timeout as exc:
            raise IdentityProviderError(
                f"{method} {url} timed out after {self.timeout_seconds}s"
            ) from exc
        except self.requests.RequestException as exc:
            raise IdentityProviderError(f"{method} {url} failed: {exc}") from exc

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise IdentityProviderError(f"{method} {url} returned invalid JSON.") from exc
