"""Tests for cluster status probing."""

from typing import Dict, List
from unittest.mock import AsyncMock

import pytest

from deployer_api.constants import PODS_FAILING_MESSAGE
from deployer_api.models.state import ComponentStatus, GlobalConfig, TokenRefreshStatus
from deployer_api.services.deploy.cluster_probe import (
    ClusterProber,
    OcClusterProber,
    classify_pod_phases,
)
from deployer_api.services.deploy.step_runner import StepResult


def ok(output: str = "") -> StepResult:
    return StepResult(success=True, output=output, exit_code=0)


def fail() -> StepResult:
    return StepResult(success=False, output="Error from server (NotFound)", exit_code=1)


def scripted_oc(responses: Dict[str, StepResult]) -> AsyncMock:
    """run_oc replacement answering by the resource type queried."""

    async def run_oc(args: List[str]) -> StepResult:
        return responses.get(args[1], ok())

    return AsyncMock(side_effect=run_oc)


@pytest.mark.fast
class TestClassifyPodPhases:
    @pytest.mark.parametrize(
        "phases,expected",
        [
            (["Running"], ComponentStatus.DEPLOYED),
            (["Pending", "Running"], ComponentStatus.DEPLOYED),
            (["CrashLoopBackOff"], ComponentStatus.FAILED),
            (["Error", "Failed"], ComponentStatus.FAILED),
            (["Pending"], ComponentStatus.DEPLOYING),
            (["Succeeded", "Error"], ComponentStatus.DEPLOYING),
            ([], ComponentStatus.DEPLOYING),
        ],
    )
    def test_classification(self, phases, expected):
        assert classify_pod_phases(phases) is expected


@pytest.mark.fast
class TestOcClusterProber:
    def test_satisfies_protocol(self):
        assert isinstance(OcClusterProber(), ClusterProber)

    @pytest.mark.asyncio
    async def test_missing_project_is_not_deployed(self, sample_catalog):
        prober = OcClusterProber()
        prober.run_oc = scripted_oc({"project": fail()})

        result = await prober.probe(sample_catalog.get_component("alpha"), GlobalConfig())

        assert result.status is ComponentStatus.NOT_DEPLOYED
        assert result.namespace is None

    @pytest.mark.asyncio
    async def test_empty_project_is_not_deployed(self, sample_catalog):
        prober = OcClusterProber()
        prober.run_oc = scripted_oc({"project": ok("project/alpha"), "deploy,dc,buildconfig": ok("")})

        result = await prober.probe(sample_catalog.get_component("alpha"), GlobalConfig())

        assert result.status is ComponentStatus.NOT_DEPLOYED
        assert result.namespace == "alpha"

    @pytest.mark.asyncio
    async def test_running_with_route(self, sample_catalog):
        prober = OcClusterProber()
        prober.run_oc = scripted_oc(
            {
                "project": ok("project/beta-ns"),
                "deploy,dc,buildconfig": ok("deployment.apps/beta\n"),
                "pods": ok("Running Running"),
                "route": ok("beta-beta-ns.apps.example.com"),
            }
        )

        result = await prober.probe(sample_catalog.get_component("beta"), GlobalConfig())

        assert result.status is ComponentStatus.DEPLOYED
        assert result.route == "https://beta-beta-ns.apps.example.com"
        assert result.namespace == "beta-ns"
        assert result.error is None

    @pytest.mark.asyncio
    async def test_failing_pods(self, sample_catalog):
        prober = OcClusterProber()
        prober.run_oc = scripted_oc(
            {
                "project": ok("project/alpha"),
                "deploy,dc,buildconfig": ok("deployment.apps/alpha\n"),
                "pods": ok("CrashLoopBackOff"),
                "route": fail(),
            }
        )

        result = await prober.probe(sample_catalog.get_component("alpha"), GlobalConfig())

        assert result.status is ComponentStatus.FAILED
        assert result.error == PODS_FAILING_MESSAGE
        assert result.route is None

    @pytest.mark.asyncio
    async def test_login_passes_token(self):
        prober = OcClusterProber()
        prober.run_oc = AsyncMock(return_value=ok())

        assert await prober.login(GlobalConfig(ocp_api_url="https://api", ocp_token="tok"))

        args = prober.run_oc.call_args.args[0]
        assert args[:2] == ["login", "https://api"]
        assert "--token=tok" in args

    @pytest.mark.asyncio
    async def test_missing_oc_binary(self):
        prober = OcClusterProber(executable="/nonexistent/oc")
        result = await prober.run_oc(["version"])
        assert not result.success
        assert result.exit_code == -1


@pytest.mark.fast
class TestSetWorkloadEnv:
    @pytest.mark.asyncio
    async def test_updates_first_workload(self, sample_catalog):
        prober = OcClusterProber()
        prober.run_oc = AsyncMock(
            side_effect=[ok("deployment.apps/gamma\ndeploymentconfig.apps.openshift.io/gamma\n"), ok()]
        )

        status = await prober.set_workload_env(
            sample_catalog.get_component("gamma"),
            {"K8S_BEARER_TOKEN": "sa-1", "K8S_API_URL": "https://api"},
        )

        assert status is TokenRefreshStatus.UPDATED
        lookup, update = [c.args[0] for c in prober.run_oc.await_args_list]
        assert lookup == ["get", "deploy,dc", "gamma", "-n", "gamma", "-o", "name"]
        assert update == [
            "set",
            "env",
            "deployment.apps/gamma",
            "K8S_BEARER_TOKEN=sa-1",
            "K8S_API_URL=https://api",
            "-n",
            "gamma",
        ]

    @pytest.mark.asyncio
    async def test_missing_workload_is_skipped(self, sample_catalog):
        prober = OcClusterProber()
        prober.run_oc = AsyncMock(return_value=fail())

        status = await prober.set_workload_env(sample_catalog.get_component("gamma"), {"A": "b"})

        assert status is TokenRefreshStatus.SKIPPED
        assert prober.run_oc.await_count == 1

    @pytest.mark.asyncio
    async def test_rejected_update_is_failed(self, sample_catalog):
        prober = OcClusterProber()
        prober.run_oc = AsyncMock(side_effect=[ok("deployment.apps/gamma\n"), fail()])

        status = await prober.set_workload_env(sample_catalog.get_component("gamma"), {"A": "b"})

        assert status is TokenRefreshStatus.FAILED
