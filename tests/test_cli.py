import pytest
from click.testing import CliRunner

import nexusbootstrap.cli as cli_module
from nexusbootstrap.errors import StepFailure
from nexusbootstrap.models import BootstrapOutcome, BootstrapState, StepResult, StepStatus
from nexusbootstrap.services.config_loader import ENV_VARS


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    for name in ENV_VARS.values():
        monkeypatch.delenv(name, raising=False)
        monkeypatch.delenv(f"{name}_FILE", raising=False)
    monkeypatch.chdir(tmp_path)


class FakeOrchestrator:
    captured = {}
    run_error = None
    failing_steps = set()

    def __init__(self, settings):
        self.settings = settings

    @classmethod
    def from_settings(cls, settings):
        cls.captured["settings"] = settings
        return cls(settings)

    def run(self):
        outcome = BootstrapOutcome(state=BootstrapState.COMPLETED)
        outcome.steps.append(StepResult(name="endpoints", status=StepStatus.SUCCEEDED))
        if self.run_error is not None:
            self.run_error.outcome = outcome
            raise self.run_error
        return outcome

    def run_step(self, name):
        self.captured.setdefault("steps", []).append(name)
        if name in self.failing_steps:
            raise StepFailure(name, RuntimeError("boom"))
        return StepResult(name=name, status=StepStatus.SUCCEEDED)


@pytest.fixture
def fake_orchestrator(monkeypatch):
    FakeOrchestrator.captured = {}
    FakeOrchestrator.run_error = None
    FakeOrchestrator.failing_steps = set()
    monkeypatch.setattr(cli_module, "BootstrapOrchestrator", FakeOrchestrator)
    return FakeOrchestrator


def test_run_uses_config_file_and_cli_override(tmp_path, fake_orchestrator):
    config_file = tmp_path / "bootstrap.yml"
    config_file.write_text(
        "keycloak_url: https://sso.example.com\n" "readiness_max_attempts: 4\n" "database_path: from-config.db\n",
        encoding="utf-8",
    )

    result = CliRunner().invoke(
        cli_module.main,
        ["--config", str(config_file), "--database", "from-cli.db", "run", "--strict"],
    )

    assert result.exit_code == 0, result.output
    settings = fake_orchestrator.captured["settings"]
    assert settings.keycloak_url == "https://sso.example.com"
    assert settings.readiness_max_attempts == 4
    assert settings.database_path == "from-cli.db"
    assert settings.strict_startup is True
    assert "succeeded" in result.output


def test_run_uses_default_config_file_and_environment(tmp_path, monkeypatch, fake_orchestrator):
    (tmp_path / ".nexusbootstrap.yml").write_text("keycloak_client_id: yaml-client\n", encoding="utf-8")
    monkeypatch.setenv("KEYCLOAK_CLIENT_ID", "env-client")
    monkeypatch.setenv("SUPER_ADMIN_KEYCLOAK_ID", "user-1")

    result = CliRunner().invoke(cli_module.main, ["run"])

    assert result.exit_code == 0, result.output
    settings = fake_orchestrator.captured["settings"]
    assert settings.keycloak_client_id == "env-client"
    assert settings.super_admin_id == "user-1"
    assert settings.strict_startup is False


def test_run_strict_failure_exits_non_zero(fake_orchestrator):
    fake_orchestrator.run_error = StepFailure("endpoints", RuntimeError("table locked"))

    result = CliRunner().invoke(cli_module.main, ["run", "--strict"])

    assert result.exit_code == 1
    assert "table locked" in result.output


def test_run_rejects_invalid_config(tmp_path, fake_orchestrator):
    config_file = tmp_path / "bootstrap.yml"
    config_file.write_text("not_a_setting: 1\n", encoding="utf-8")

    result = CliRunner().invoke(cli_module.main, ["--config", str(config_file), "run"])

    assert result.exit_code == 1
    assert "Unknown configuration keys" in result.output
    assert "settings" not in fake_orchestrator.captured


def test_run_step_reports_structured_response(fake_orchestrator):
    result = CliRunner().invoke(cli_module.main, ["run-step", "role_permissions"])

    assert result.exit_code == 0, result.output
    assert fake_orchestrator.captured["steps"] == ["role_permissions"]
    assert "re-initialized successfully" in result.output


def test_run_step_failure_exits_non_zero(fake_orchestrator):
    fake_orchestrator.failing_steps = {"endpoints"}

    result = CliRunner().invoke(cli_module.main, ["run-step", "endpoints"])

    assert result.exit_code == 1
    assert "boom" in result.output


def test_credentials_lifecycle(tmp_path):
    runner = CliRunner()
    database = str(tmp_path / "credentials.db")

    created = runner.invoke(
        cli_module.main,
        ["--database", database, "credentials", "create", "--name", "Primary", "--api-key", "key-1234567890", "--secret-key", "secret-1"],
    )
    assert created.exit_code == 0, created.output
    assert "key-1234567890" not in created.output

    listed = runner.invoke(cli_module.main, ["--database", database, "credentials", "list"])
    assert listed.exit_code == 0, listed.output
    assert "Payment credentials" in listed.output

    active = runner.invoke(cli_module.main, ["--database", database, "credentials", "active", "--show-secrets"])
    assert active.exit_code == 0, active.output
    assert "key-1234567890" in active.output


def test_credentials_set_active_unknown_id_fails(tmp_path):
    result = CliRunner().invoke(
        cli_module.main,
        ["--database", str(tmp_path / "credentials.db"), "credentials", "set-active", "missing"],
    )

    assert result.exit_code == 1
    assert "Payment credential not found" in result.output
