"""Bounded readiness polling for external dependencies."""

import time
from typing import Any, Callable, Optional

from nexusbootstrap.errors import DependencyUnavailable
from nexusbootstrap.errors_catalog import actionable_error
from nexusbootstrap.models import ReadinessState


class ReadinessProbe:
    """Polls a probe callable with a fixed delay until it succeeds."""

    DEFAULT_MAX_ATTEMPTS = 10
    DEFAULT_DELAY_SECONDS = 3.0

    def __init__(self, logger, console, sleep: Callable[[float], None] = time.sleep):
        self.logger = logger
        self.console = console
        self.sleep = sleep

    def wait_until_ready(
        self,
        probe_fn: Callable[[], Any],
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        delay_seconds: float = DEFAULT_DELAY_SECONDS,
        description: str = "identity provider",
    ) -> ReadinessState:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.console.print(f"[yellow]Waiting for {description} to be ready...[/yellow]")
        last_error: Optional[BaseException] = None

        for attempt in range(1, max_attempts + 1):
            try:
                probe_fn()
            except Exception as exc:
                last_error = exc
                self.logger.warning(
                    "Readiness check for %s failed on attempt %s/%s: %s",
                    description,
                    attempt,
                    max_attempts,
                    exc,
                )
                if attempt < max_attempts:
                    self.sleep(delay_seconds)
                continue

            self.console.print(f"[green]{description.capitalize()} is ready.[/green]")
            self.logger.info("%s ready after %s attempt(s).", description.capitalize(), attempt)
            return ReadinessState(
                attempts=attempt,
                max_attempts=max_attempts,
                delay_seconds=delay_seconds,
            )

        raise DependencyUnavailable(
            actionable_error("identity_provider_unavailable", attempts=str(max_attempts)),
            attempts=max_attempts,
            last_error=last_error,
        ) from last_error
