import json
import logging

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .core import BootstrapOrchestrator
from .errors import BootstrapError
from .services.admin import AdminTriggerService
from .services.config_loader import ConfigLoader, resolve_settings
from .services.credential_store import CredentialStore
from .services.database import Database
from .services.field_crypto import AesCipher, FieldCrypto

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


def _configure_logging(verbose: bool, log_file):
    logger = logging.getLogger("nexusbootstrap")
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)
    return logger


def _print_json(payload):
    console.print_json(json.dumps(payload, default=str))


def _settings(ctx: click.Context, **overrides):
    cli_values = dict(ctx.obj["cli_values"])
    cli_values.update({key: value for key, value in overrides.items() if value is not None})
    return resolve_settings(
        cli_values=cli_values,
        config_values=ctx.obj["config_values"],
        logger=ctx.obj["logger"],
    )


def _credential_store(ctx: click.Context) -> CredentialStore:
    settings = _settings(ctx)
    logger = ctx.obj["logger"]
    field_crypto = FieldCrypto(AesCipher.from_hex(settings.encryption_key, settings.encryption_iv), logger)
    return CredentialStore(Database(settings.database_path, logger=logger), field_crypto, logger)


@click.group()
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help="Path to a YAML configuration file. Defaults to .nexusbootstrap.yml if present.",
)
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
@click.option("--database", "database_path", type=click.Path(), help="Path to the SQLite database file.")
@click.pass_context
def main(ctx, config, verbose, log_file, database_path):
    """Provision the portal's identity provider and reference data."""
    try:
        config_loader = ConfigLoader()
        config_values = config_loader.load(config or config_loader.find_default())
    except BootstrapError as exc:
        raise click.ClickException(str(exc)) from exc

    verbose = bool(verbose if verbose is not None else config_values.get("verbose", False))
    log_file = log_file or config_values.get("log_file")

    ctx.ensure_object(dict)
    ctx.obj["config_values"] = config_values
    ctx.obj["cli_values"] = {"database_path": database_path}
    ctx.obj["logger"] = _configure_logging(verbose, log_file)


@main.command("run")
@click.option("--strict", is_flag=True, default=None, help="Exit non-zero when a bootstrap step fails.")
@click.pass_context
def run_command(ctx, strict):
    """Run every bootstrap step in order."""
    try:
        orchestrator = BootstrapOrchestrator.from_settings(_settings(ctx, strict_startup=strict))
        outcome = orchestrator.run()
    except BootstrapError as exc:
        outcome = getattr(exc, "outcome", None)
        if outcome is not None:
            _print_json(outcome.to_dict())
        raise click.ClickException(str(exc)) from exc

    _print_json(outcome.to_dict())


@main.command("run-step")
@click.argument("name")
@click.pass_context
def run_step_command(ctx, name):
    """Re-run a single bootstrap step by name."""
    try:
        orchestrator = BootstrapOrchestrator.from_settings(_settings(ctx))
    except BootstrapError as exc:
        raise click.ClickException(str(exc)) from exc

    response = AdminTriggerService(orchestrator, ctx.obj["logger"]).reinitialize_step(name)
    _print_json(response)
    if not response["success"]:
        ctx.exit(1)


@main.group()
def credentials():
    """Manage payment-provider credentials."""


def _credential_table(records) -> Table:
    table = Table(title="Payment credentials")
    for column in ("id", "name", "api_key", "base_url", "currency", "test mode", "active"):
        table.add_column(column)
    for record in records:
        data = record.to_dict(mask_secrets=True)
        table.add_row(
            data["id"],
            data["name"],
            data["api_key"],
            data["base_url"],
            data["currency"],
            "yes" if data["is_test_mode"] else "no",
            "[green]yes[/green]" if data["is_active"] else "no",
        )
    return table


@credentials.command("list")
@click.pass_context
def list_credentials(ctx):
    try:
        records = _credential_store(ctx).list()
    except BootstrapError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print(_credential_table(records))


@credentials.command("active")
@click.option("--show-secrets", is_flag=True, help="Print decrypted secret values.")
@click.pass_context
def active_credential(ctx, show_secrets):
    try:
        record = _credential_store(ctx).get_active()
    except BootstrapError as exc:
        raise click.ClickException(str(exc)) from exc
    _print_json(record.to_dict(mask_secrets=not show_secrets))


@credentials.command("show")
@click.argument("credential_id")
@click.option("--show-secrets", is_flag=True, help="Print decrypted secret values.")
@click.pass_context
def show_credential(ctx, credential_id, show_secrets):
    try:
        record = _credential_store(ctx).get_by_id(credential_id)
    except BootstrapError as exc:
        raise click.ClickException(str(exc)) from exc
    _print_json(record.to_dict(mask_secrets=not show_secrets))


@credentials.command("create")
@click.option("--name", required=True)
@click.option("--api-key", required=True)
@click.option("--secret-key", required=True)
@click.option("--base-url", default=None)
@click.option("--currency", default=None)
@click.option("--installment", type=int, default=None)
@click.option("--test-mode/--live", "is_test_mode", default=None)
@click.option("--inactive", is_flag=True, help="Store without activating.")
@click.pass_context
def create_credential(ctx, name, api_key, secret_key, base_url, currency, installment, is_test_mode, inactive):
    payload = {
        "name": name,
        "api_key": api_key,
        "secret_key": secret_key,
        "base_url": base_url,
        "currency": currency,
        "installment": installment,
        "is_test_mode": is_test_mode,
        "is_active": not inactive,
    }
    try:
        record = _credential_store(ctx).create({key: value for key, value in payload.items() if value is not None})
    except BootstrapError as exc:
        raise click.ClickException(str(exc)) from exc
    _print_json(record.to_dict(mask_secrets=True))


@credentials.command("set-active")
@click.argument("credential_id")
@click.pass_context
def set_active_credential(ctx, credential_id):
    try:
        record = _credential_store(ctx).set_active(credential_id)
    except BootstrapError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print(f"[green]Credential '{record.name}' ({record.id}) is now active.[/green]")


@credentials.command("delete")
@click.argument("credential_id")
@click.pass_context
def delete_credential(ctx, credential_id):
    try:
        _credential_store(ctx).delete(credential_id)
    except BootstrapError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print(f"[green]Credential {credential_id} deleted.[/green]")


if __name__ == "__main__":
    main()
