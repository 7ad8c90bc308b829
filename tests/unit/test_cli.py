"""Tests for the Typer CLI commands."""

import json
import re

import pytest
from typer.testing import CliRunner

from deployer_api.catalog import load_catalog
from deployer_api.models.state import TokenRefreshStatus
from deployer_cli.main import app, main

runner = CliRunner()


@pytest.fixture
def cli_orchestrator(orchestrator, monkeypatch):
    """Route every CLI command to the fixture orchestrator."""
    for module in ("deployer_cli.commands.deploy", "deployer_cli.commands.status"):
        monkeypatch.setattr(f"{module}.build_orchestrator", lambda: orchestrator)
    return orchestrator


@pytest.mark.fast
class TestCli:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "Demo Deployer v" in result.stdout

    def test_catalog(self, cli_orchestrator):
        result = runner.invoke(app, ["catalog"])
        assert result.exit_code == 0
        assert "beta-ns" in result.stdout
        assert "Pair" in result.stdout

    def test_status(self, cli_orchestrator):
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 0
        assert "not-deployed" in result.stdout

    def test_configure_masks_output(self, cli_orchestrator):
        result = runner.invoke(
            app, ["configure", "--token", "new-token", "--secret", "extra=value"]
        )
        assert result.exit_code == 0
        assert "new-token" not in result.stdout
        raw = cli_orchestrator.store.get_raw_config()
        assert raw.ocp_token == "new-token"
        assert raw.secrets["extra"] == "value"

    def test_configure_rejects_malformed_secret(self, cli_orchestrator):
        result = runner.invoke(app, ["configure", "--secret", "novalue"])
        assert result.exit_code != 0

    def test_deploy_streams_output(self, cli_orchestrator, fake_runner):
        fake_runner.script("deploy-alpha.yml", output="TASK [build image]\n")
        result = runner.invoke(app, ["deploy", "alpha"])
        assert result.exit_code == 0
        assert "TASK [build image]" in result.stdout

    def test_deploy_failure_exit_code(self, cli_orchestrator, fake_runner):
        fake_runner.script("deploy-alpha.yml", success=False)
        result = runner.invoke(app, ["deploy", "alpha"])
        assert result.exit_code == 1

    def test_deploy_unknown_component(self, cli_orchestrator):
        result = runner.invoke(app, ["deploy", "nope"])
        assert result.exit_code == 1
        assert "Unknown component" in result.stdout

    def test_deploy_offer(self, cli_orchestrator, fake_runner):
        result = runner.invoke(app, ["deploy-offer", "pair"])
        assert result.exit_code == 0
        assert "deploy-gamma.yml" not in fake_runner.actions

    def test_cleanup_offer(self, cli_orchestrator, fake_runner):
        result = runner.invoke(app, ["cleanup", "pair", "--offer"])
        assert result.exit_code == 0
        assert "Cleanup complete" in result.stdout

    def test_configure_writes_snapshot_before_exit(self, cli_orchestrator, state_file):
        result = runner.invoke(app, ["configure", "--api-url", "https://api.new:6443"])
        assert result.exit_code == 0
        saved = json.loads(state_file.read_text())
        assert saved["config"]["ocp_api_url"] == "https://api.new:6443"

    def test_refresh_tokens(self, cli_orchestrator, fake_prober):
        fake_prober.env_results["gamma"] = TokenRefreshStatus.UPDATED
        result = runner.invoke(app, ["refresh-tokens"])
        assert result.exit_code == 0
        assert "gamma" in result.stdout
        assert "updated" in result.stdout

    def test_refresh_tokens_failure_exit_code(self, cli_orchestrator, fake_prober):
        fake_prober.env_results["gamma"] = TokenRefreshStatus.FAILED
        result = runner.invoke(app, ["refresh-tokens"])
        assert result.exit_code == 1


@pytest.mark.fast
def test_help_examples_name_bundled_components():
    catalog = load_catalog()
    examples = main.__doc__
    component_ids = re.findall(r"deployer deploy (\S+)", examples)
    offer_ids = re.findall(r"deployer deploy-offer (\S+)", examples)

    assert component_ids and offer_ids
    assert all(catalog.get_component(c) is not None for c in component_ids)
    assert all(catalog.get_offer(o) is not None for o in offer_ids)
