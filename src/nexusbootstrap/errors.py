"""Domain errors for nexus-bootstrap."""

from typing import Optional


class BootstrapError(RuntimeError):
    """Raised when a bootstrap operation cannot continue safely."""


class ConfigurationError(BootstrapError):
    """Raised when settings or key material are missing or malformed."""


class ValidationError(BootstrapError):
    """Raised when an administrative payload is incomplete or unknown."""


class NotFound(BootstrapError):
    """Raised when a credential, step or reference entity lookup misses."""


class DecryptFailure(BootstrapError):
    """Raised when a stored value cannot be decrypted."""


class IdentityProviderError(BootstrapError):
    """Raised when a call to the identity provider admin API fails."""


class DependencyUnavailable(BootstrapError):
    """Raised when the readiness probe exhausted its attempts."""

    def __init__(self, message: str, attempts: int, last_error: Optional[BaseException] = None):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


class StepFailure(BootstrapError):
    """Raised when a seeding step's underlying call fails."""

    def __init__(self, step_name: str, cause: BaseException):
        super().__init__(f"Step '{step_name}' failed: {cause}")
        self.step_name = step_name
        self.cause = cause
