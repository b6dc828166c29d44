"""Shared domain models for nexus-bootstrap."""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

DEFAULT_REALM = "nexus-portal"
DEFAULT_DATABASE_PATH = "nexus-bootstrap.db"

# Development fallback key material, kept for rows written before
# ENCRYPTION_KEY/ENCRYPTION_IV were set.
DEFAULT_ENCRYPTION_KEY = "0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"
DEFAULT_ENCRYPTION_IV = "0123456789abcdef0123456789abcdef"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class BootstrapSettings:
    """Resolved runtime configuration for one process."""

    keycloak_url: Optional[str] = None
    keycloak_realm: str = DEFAULT_REALM
    keycloak_client_id: Optional[str] = None
    keycloak_admin_username: Optional[str] = None
    keycloak_admin_password: Optional[str] = None
    super_admin_id: Optional[str] = None
    database_path: str = DEFAULT_DATABASE_PATH
    encryption_key: str = DEFAULT_ENCRYPTION_KEY
    encryption_iv: str = DEFAULT_ENCRYPTION_IV
    readiness_max_attempts: int = 10
    readiness_delay_seconds: float = 3.0
    request_timeout_seconds: float = 10.0
    strict_startup: bool = False

    @property
    def identity_provider_configured(self) -> bool:
        return bool(self.keycloak_url)


class StepStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


class BootstrapState(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    COMPLETED_WITH_WARNINGS = "completed_with_warnings"


@dataclass
class StepResult:
    name: str
    status: StepStatus
    error: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)
    started_at: Optional[str] = None
    finished_at: Optional[str] = None
    duration_seconds: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass
class BootstrapOutcome:
    """Ordered record of one orchestration run. Never persisted."""

    state: BootstrapState = BootstrapState.NOT_STARTED
    steps: List[StepResult] = field(default_factory=list)
    started_at: Optional[str] = None
    finished_at: Optional[str] = None

    def step_started(self, name: str) -> StepResult:
        result = StepResult(name=name, status=StepStatus.FAILED, started_at=utc_now())
        self.steps.append(result)
        return result

    def step_finished(
        self,
        result: StepResult,
        status: StepStatus,
        details: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
    ):
        result.status = status
        result.error = error
        result.finished_at = utc_now()
        if details:
            result.details.update(details)
        if result.started_at:
            started_at = datetime.fromisoformat(result.started_at)
            finished_at = datetime.fromisoformat(result.finished_at)
            result.duration_seconds = (finished_at - started_at).total_seconds()

    def skip(self, name: str, reason: str):
        self.steps.append(StepResult(name=name, status=StepStatus.SKIPPED, error=reason))

    def get(self, name: str) -> Optional[StepResult]:
        for step in reversed(self.steps):
            if step.name == name:
                return step
        return None

    @property
    def ok(self) -> bool:
        return all(step.status != StepStatus.FAILED for step in self.steps)

    @property
    def first_failure(self) -> Optional[StepResult]:
        for step in self.steps:
            if step.status == StepStatus.FAILED:
                return step
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "steps": [step.to_dict() for step in self.steps],
        }


@dataclass(frozen=True)
class ReadinessState:
    attempts: int
    max_attempts: int
    delay_seconds: float
    ready: bool = True


@dataclass(frozen=True)
class SeedingStep:
    """A named, independently re-runnable provisioning callback."""

    name: str
    callback: Callable[[], Dict[str, Any]]
    critical: bool = True
    requires_identity_provider: bool = False


@dataclass(frozen=True)
class PortalRole:
    name: str
    description: str
    client_id: Optional[str] = None


@dataclass(frozen=True)
class ProtocolMapperDefinition:
    name: str
    protocol_mapper: str
    config: Dict[str, str]
    protocol: str = "openid-connect"

    def to_representation(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "protocol": self.protocol,
            "protocolMapper": self.protocol_mapper,
            "config": dict(self.config),
        }


@dataclass(frozen=True)
class Endpoint:
    path: str
    method: str
    controller_name: str
    action_name: str
    description: str
    category: str
    requires_auth: bool = True
    is_active: bool = True
    is_tenant_specific: bool = False
    id: Optional[str] = None


@dataclass(frozen=True)
class RolePermission:
    role: str
    endpoint_id: str
    can_read: bool = True
    can_write: bool = False
    can_delete: bool = False
    is_active: bool = True
    notes: Optional[str] = None
    id: Optional[str] = None


@dataclass(frozen=True)
class StaticPage:
    page_type: str
    title: str
    content: str
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    is_active: bool = True
    id: Optional[str] = None


@dataclass(frozen=True)
class InstallmentOption:
    count: int
    min_amount: float
    max_amount: float

    def covers(self, amount: float) -> bool:
        return self.min_amount <= amount <= self.max_amount


@dataclass(frozen=True)
class CredentialRecord:
    """One payment-provider configuration with decrypted secrets."""

    id: str
    name: str
    api_key: str
    secret_key: str
    base_url: str = "https://sandbox-api.iyzipay.com"
    installment: int = 1
    is_test_mode: bool = True
    currency: str = "TRY"
    is_active: bool = True
    installment_options: List[InstallmentOption] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self, mask_secrets: bool = False) -> Dict[str, Any]:
        data = asdict(self)
        if mask_secrets:
            data["api_key"] = _mask(self.api_key)
            data["secret_key"] = _mask(self.secret_key)
        return data


def _mask(value: str) -> str:
    if not value:
        return value
    visible = value[-4:] if len(value) > 8 else ""
    return f"****{visible}"
