"""Administrative re-trigger surface over the bootstrap orchestrator."""

from typing import Any, Dict, Optional


class AdminTriggerService:
    """Maps admin actions to orchestrator calls and reports structured results.

    Failures are returned as ``{"success": False, "message": ..., "error": ...}``
    and never raised to the caller.
    """

    def __init__(self, orchestrator, logger):
        self.orchestrator = orchestrator
        self.logger = logger

    @staticmethod
    def _response(success: bool, message: str, error: Optional[str] = None) -> Dict[str, Any]:
        response: Dict[str, Any] = {"success": success, "message": message}
        if error is not None:
            response["error"] = error
        return response

    def reinitialize(self) -> Dict[str, Any]:
        try:
            outcome = self.orchestrator.run()
        except Exception as exc:
            self.logger.error("Portal re-initialization failed: %s", exc)
            return self._response(False, "Portal re-initialization failed.", str(exc))

        failure = outcome.first_failure
        if failure is not None:
            return self._response(
                False,
                f"Portal re-initialization finished with errors in step '{failure.name}'.",
                failure.error,
            )
        return self._response(True, "Portal re-initialization completed successfully.")

    def _reinitialize_step(self, name: str, label: str) -> Dict[str, Any]:
        try:
            self.orchestrator.run_step(name)
        except Exception as exc:
            self.logger.error("Re-initialization of %s failed: %s", label, exc)
            return self._response(False, f"{label.capitalize()} re-initialization failed.", str(exc))
        return self._response(True, f"{label.capitalize()} re-initialized successfully.")

    def reinitialize_roles(self) -> Dict[str, Any]:
        return self._reinitialize_step("roles", "roles")

    def reinitialize_client_mappers(self) -> Dict[str, Any]:
        return self._reinitialize_step("claim_mappers", "client mappers")

    def reinitialize_endpoints(self) -> Dict[str, Any]:
        return self._reinitialize_step("endpoints", "endpoints")

    def reinitialize_role_permissions(self) -> Dict[str, Any]:
        return self._reinitialize_step("role_permissions", "role permissions")

    def reinitialize_static_pages(self) -> Dict[str, Any]:
        return self._reinitialize_step("static_pages", "static pages")

    def reinitialize_step(self, name: str) -> Dict[str, Any]:
        return self._reinitialize_step(name, name.replace("_", " "))
