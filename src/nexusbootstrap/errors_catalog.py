"""Actionable error catalog for nexus-bootstrap."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "identity_provider_unavailable": {
        "what": "Identity provider did not respond after {attempts} attempt(s).",
        "next": "Check KEYCLOAK_URL and the admin credentials, then re-run with `nexus-bootstrap run`.",
    },
    "step_failed": {
        "what": "Bootstrap step '{step}' failed.",
        "next": "Inspect the logs and re-run it with `nexus-bootstrap run-step {step}`.",
    },
    "unknown_step": {
        "what": "Unknown bootstrap step: {step}",
        "next": "Use one of: {choices}.",
    },
    "credential_not_found": {
        "what": "Payment credential not found: {credential_id}",
        "next": "List credentials with `nexus-bootstrap credentials list` and retry with a valid id.",
    },
    "no_active_credential": {
        "what": "No active payment credential is configured.",
        "next": "Activate one with `nexus-bootstrap credentials set-active <id>`.",
    },
    "client_not_found": {
        "what": "Identity provider client not found: {client_id}",
        "next": "Create the client in realm '{realm}' or fix KEYCLOAK_CLIENT_ID.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
