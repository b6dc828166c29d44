"""Configuration loading for nexus-bootstrap."""

import os
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

import yaml

from nexusbootstrap.errors import ConfigurationError
from nexusbootstrap.models import (
    DEFAULT_DATABASE_PATH,
    DEFAULT_ENCRYPTION_IV,
    DEFAULT_ENCRYPTION_KEY,
    DEFAULT_REALM,
    BootstrapSettings,
)

DEFAULT_CONFIG_FILE = ".nexusbootstrap.yml"

ENV_VARS: Dict[str, str] = {
    "keycloak_url": "KEYCLOAK_URL",
    "keycloak_realm": "KEYCLOAK_REALM",
    "keycloak_client_id": "KEYCLOAK_CLIENT_ID",
    "keycloak_admin_username": "KEYCLOAK_ADMIN_USERNAME",
    "keycloak_admin_password": "KEYCLOAK_ADMIN_PASSWORD",
    "super_admin_id": "SUPER_ADMIN_KEYCLOAK_ID",
    "encryption_key": "ENCRYPTION_KEY",
    "encryption_iv": "ENCRYPTION_IV",
    "database_path": "NEXUS_DATABASE_PATH",
}


class ConfigLoader:
    """Loads YAML configuration files for CLI defaults."""

    SUPPORTED_KEYS = {
        "keycloak_url",
        "keycloak_realm",
        "keycloak_client_id",
        "keycloak_admin_username",
        "keycloak_admin_password",
        "super_admin_id",
        "database_path",
        "encryption_key",
        "encryption_iv",
        "readiness_max_attempts",
        "readiness_delay_seconds",
        "request_timeout_seconds",
        "strict_startup",
        "verbose",
        "log_file",
    }

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise ConfigurationError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise ConfigurationError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")

        return parsed

    def find_default(self, cwd: Optional[str] = None) -> Optional[str]:
        candidate = os.path.join(cwd or os.getcwd(), DEFAULT_CONFIG_FILE)
        return candidate if os.path.exists(candidate) else None


def read_env(name: str, environ: Mapping[str, str]) -> Optional[str]:
    """Read NAME, or the contents of the file named by NAME_FILE."""
    file_path = environ.get(f"{name}_FILE")
    if file_path:
        try:
            return Path(file_path).read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigurationError(f"Could not read {name}_FILE at '{file_path}': {exc}") from exc
    value = environ.get(name)
    return value or None


def _resolve(
    key: str,
    cli_values: Mapping[str, Any],
    config_values: Mapping[str, Any],
    environ: Mapping[str, str],
    default=None,
    cast: Callable[[Any], Any] = lambda value: value,
):
    if cli_values.get(key) is not None:
        return cast(cli_values[key])
    if key in ENV_VARS:
        env_value = read_env(ENV_VARS[key], environ)
        if env_value is not None:
            return cast(env_value)
    if config_values.get(key) is not None:
        return cast(config_values[key])
    return default


def _to_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def resolve_settings(
    cli_values: Optional[Mapping[str, Any]] = None,
    config_values: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
    logger=None,
) -> BootstrapSettings:
    """Build settings with precedence CLI flag, environment, YAML value, default."""
    cli_values = cli_values or {}
    config_values = config_values or {}
    environ = os.environ if environ is None else environ

    def resolve(key, default=None, cast=lambda value: value):
        return _resolve(key, cli_values, config_values, environ, default=default, cast=cast)

    encryption_key = resolve("encryption_key")
    encryption_iv = resolve("encryption_iv")
    if not encryption_key or not encryption_iv:
        if logger is not None:
            logger.warning(
                "ENCRYPTION_KEY/ENCRYPTION_IV not set; using the development default key material."
            )
        encryption_key = encryption_key or DEFAULT_ENCRYPTION_KEY
        encryption_iv = encryption_iv or DEFAULT_ENCRYPTION_IV

    try:
        return BootstrapSettings(
            keycloak_url=resolve("keycloak_url"),
            keycloak_realm=resolve("keycloak_realm", default=DEFAULT_REALM),
            keycloak_client_id=resolve("keycloak_client_id"),
            keycloak_admin_username=resolve("keycloak_admin_username"),
            keycloak_admin_password=resolve("keycloak_admin_password"),
            super_admin_id=resolve("super_admin_id"),
            database_path=resolve("database_path", default=DEFAULT_DATABASE_PATH),
            encryption_key=encryption_key,
            encryption_iv=encryption_iv,
            readiness_max_attempts=resolve("readiness_max_attempts", default=10, cast=int),
            readiness_delay_seconds=resolve("readiness_delay_seconds", default=3.0, cast=float),
            request_timeout_seconds=resolve("request_timeout_seconds", default=10.0, cast=float),
            strict_startup=resolve("strict_startup", default=False, cast=_to_bool),
        )
    except ValueError as exc:
        raise ConfigurationError(f"Invalid configuration value: {exc}") from exc
