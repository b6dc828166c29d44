import logging
import threading
from typing import Dict, List, Optional

import requests
from rich.console import Console

from .errors import DependencyUnavailable, NotFound, StepFailure
from .errors_catalog import actionable_error
from .models import (
    BootstrapOutcome,
    BootstrapSettings,
    BootstrapState,
    SeedingStep,
    StepResult,
    StepStatus,
    utc_now,
)
from .services.claim_mappers import ClaimMapperSeeder
from .services.database import Database
from .services.endpoints import EndpointCatalogSeeder
from .services.identity_provider import IdentityProviderClient
from .services.readiness import ReadinessProbe
from .services.role_permissions import RolePermissionSeeder
from .services.roles import RolesSeeder
from .services.static_pages import StaticPageSeeder

console = Console()
logger = logging.getLogger("nexusbootstrap")


class BootstrapOrchestrator:
    """Runs the portal's provisioning steps in order, once per process start."""

    READINESS_STEP = "readiness"
    PRIVILEGED_ROLES_STEP = "privileged_roles"

    def __init__(
        self,
        settings: BootstrapSettings,
        roles_seeder,
        claim_mapper_seeder,
        endpoint_seeder,
        role_permission_seeder,
        static_page_seeder,
        readiness_probe,
        logger=logger,
        console=console,
    ):
        self.settings = settings
        self.roles_seeder = roles_seeder
        self.claim_mapper_seeder = claim_mapper_seeder
        self.endpoint_seeder = endpoint_seeder
        self.role_permission_seeder = role_permission_seeder
        self.static_page_seeder = static_page_seeder
        self.readiness_probe = readiness_probe
        self.logger = logger
        self.console = console

        self.state = BootstrapState.NOT_STARTED
        self.outcome: Optional[BootstrapOutcome] = None
        self._steps = self._build_steps()
        self._step_locks: Dict[str, threading.Lock] = {step.name: threading.Lock() for step in self._steps}

    @classmethod
    def from_settings(cls, settings: BootstrapSettings, requests_module=requests) -> "BootstrapOrchestrator":
        database = Database(settings.database_path, logger=logger)
        identity_provider = IdentityProviderClient(
            base_url=settings.keycloak_url,
            realm=settings.keycloak_realm,
            admin_username=settings.keycloak_admin_username,
            admin_password=settings.keycloak_admin_password,
            logger=logger,
            timeout_seconds=settings.request_timeout_seconds,
            requests_module=requests_module,
        )
        endpoint_seeder = EndpointCatalogSeeder(database=database, logger=logger, console=console)
        return cls(
            settings=settings,
            roles_seeder=RolesSeeder(identity_provider=identity_provider, logger=logger, console=console),
            claim_mapper_seeder=ClaimMapperSeeder(
                identity_provider=identity_provider,
                client_id=settings.keycloak_client_id,
                logger=logger,
                console=console,
            ),
            endpoint_seeder=endpoint_seeder,
            role_permission_seeder=RolePermissionSeeder(
                database=database,
                endpoint_seeder=endpoint_seeder,
                logger=logger,
                console=console,
            ),
            static_page_seeder=StaticPageSeeder(database=database, logger=logger, console=console),
            readiness_probe=ReadinessProbe(logger=logger, console=console),
        )

    def _build_steps(self) -> List[SeedingStep]:
        return [
            SeedingStep("roles", self.roles_seeder.seed_roles, requires_identity_provider=True),
            SeedingStep(
                "claim_mappers",
                self.claim_mapper_seeder.seed_client_mappers,
                requires_identity_provider=True,
            ),
            SeedingStep(
                self.PRIVILEGED_ROLES_STEP,
                self._assign_privileged_roles,
                critical=False,
                requires_identity_provider=True,
            ),
            SeedingStep("endpoints", self.endpoint_seeder.seed_endpoints),
            SeedingStep("role_permissions", self.role_permission_seeder.seed_default_permissions),
            SeedingStep("static_pages", self.static_page_seeder.initialize_default_pages),
        ]

    def step_names(self) -> List[str]:
        return [step.name for step in self._steps]

    def _assign_privileged_roles(self):
        return self.roles_seeder.assign_roles_to_user(self.settings.super_admin_id)

    def _skip_reason(self, step: SeedingStep) -> Optional[str]:
        if step.requires_identity_provider and not self.settings.identity_provider_configured:
            return "KEYCLOAK_URL is not configured."
        if step.name == self.PRIVILEGED_ROLES_STEP and not self.settings.super_admin_id:
            return "SUPER_ADMIN_KEYCLOAK_ID is not configured."
        return None

    def _run_step(self, outcome: BootstrapOutcome, step: SeedingStep) -> StepResult:
        with self._step_locks[step.name]:
            result = outcome.step_started(step.name)
            self.logger.info("Running step: %s", step.name)
            try:
                details = step.callback()
            except Exception as exc:
                outcome.step_finished(result, StepStatus.FAILED, error=str(exc))
                raise StepFailure(step.name, exc) from exc

            outcome.step_finished(
                result,
                StepStatus.SUCCEEDED,
                details=details if isinstance(details, dict) else None,
            )
            return result

    def _wait_for_identity_provider(self, outcome: BootstrapOutcome):
        result = outcome.step_started(self.READINESS_STEP)
        try:
            with self._step_locks["roles"]:
                readiness = self.readiness_probe.wait_until_ready(
                    self.roles_seeder.seed_roles,
                    max_attempts=self.settings.readiness_max_attempts,
                    delay_seconds=self.settings.readiness_delay_seconds,
                )
        except DependencyUnavailable as exc:
            outcome.step_finished(result, StepStatus.FAILED, error=str(exc), details={"attempts": exc.attempts})
            raise
        outcome.step_finished(result, StepStatus.SUCCEEDED, details={"attempts": readiness.attempts})

    def run(self) -> BootstrapOutcome:
        outcome = BootstrapOutcome(state=BootstrapState.RUNNING, started_at=utc_now())
        self.outcome = outcome
        self.state = BootstrapState.RUNNING
        pending = list(self._steps)
        error: Optional[Exception] = None

        self.console.print("[bold blue]Starting portal bootstrap...[/bold blue]")
        self.logger.info("Starting portal bootstrap...")

        try:
            if self.settings.identity_provider_configured:
                self._wait_for_identity_provider(outcome)
            else:
                self.logger.warning("KEYCLOAK_URL is not configured; identity provider steps are skipped.")
                outcome.skip(self.READINESS_STEP, "KEYCLOAK_URL is not configured.")

            while pending:
                step = pending.pop(0)
                reason = self._skip_reason(step)
                if reason:
                    self.logger.warning("Skipping step %s: %s", step.name, reason)
                    outcome.skip(step.name, reason)
                    continue

                try:
                    self._run_step(outcome, step)
                except StepFailure as exc:
                    if step.critical:
                        raise
                    self.logger.warning("Non-critical step failed, continuing: %s", exc)
        except (DependencyUnavailable, StepFailure) as exc:
            error = exc
            self.logger.error("Portal bootstrap stopped early: %s", exc)
            if isinstance(exc, StepFailure):
                self.logger.error(actionable_error("step_failed", step=exc.step_name))
            for step in pending:
                outcome.skip(step.name, "Not run because an earlier step failed.")

        outcome.finished_at = utc_now()
        outcome.state = BootstrapState.COMPLETED if outcome.ok else BootstrapState.COMPLETED_WITH_WARNINGS
        self.state = outcome.state

        if outcome.state == BootstrapState.COMPLETED:
            self.console.print("[bold green]Portal bootstrap completed.[/bold green]")
        else:
            self.console.print("[bold yellow]Portal bootstrap completed with warnings.[/bold yellow]")
        self.logger.info("Portal bootstrap finished with state: %s", outcome.state.value)

        if error is not None and self.settings.strict_startup:
            error.outcome = outcome
            raise error
        return outcome

    def run_step(self, name: str) -> StepResult:
        """Execute one named step on its own. The readiness probe is not run."""
        step = next((candidate for candidate in self._steps if candidate.name == name), None)
        if step is None:
            raise NotFound(actionable_error("unknown_step", step=name, choices=", ".join(self.step_names())))

        outcome = BootstrapOutcome(state=BootstrapState.RUNNING, started_at=utc_now())
        result = self._run_step(outcome, step)
        outcome.finished_at = utc_now()
        self.logger.info("Step %s finished with status: %s", name, result.status.value)
        return result
