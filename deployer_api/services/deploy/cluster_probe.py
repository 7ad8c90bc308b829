"""Cluster access through the ``oc`` CLI: status probes and workload env updates."""

import logging
import os
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Sequence, runtime_checkable

from ...constants import FAILED_POD_PHASES, PODS_FAILING_MESSAGE
from ...models.catalog import ComponentDefinition
from ...models.state import ComponentStatus, GlobalConfig, TokenRefreshStatus
from .step_runner import StepResult
from .subprocess_utils import create_subprocess, stop_subprocess, wait_subprocess

logger = logging.getLogger(__name__)


@dataclass
class ProbeResult:
    """Observed state of one component in the cluster."""

    status: ComponentStatus
    route: Optional[str] = None
    namespace: Optional[str] = None
    error: Optional[str] = None


@runtime_checkable
class ClusterProber(Protocol):
    async def login(self, config: GlobalConfig) -> bool:
        ...

    async def probe(
        self, component: ComponentDefinition, config: GlobalConfig
    ) -> ProbeResult:
        ...

    async def set_workload_env(
        self, component: ComponentDefinition, env: Dict[str, str]
    ) -> TokenRefreshStatus:
        ...


def classify_pod_phases(phases: Sequence[str]) -> ComponentStatus:
    """Map the pod phases of a namespace to a component status.

    Any running pod means deployed; pods that all report a failing phase
    mean failed; anything else (pending, building, no pods yet) is still
    deploying.
    """
    if any(p == "Running" for p in phases):
        return ComponentStatus.DEPLOYED
    if phases and all(p in FAILED_POD_PHASES for p in phases):
        return ComponentStatus.FAILED
    return ComponentStatus.DEPLOYING


class OcClusterProber:
    """Probes component workloads with the ``oc`` CLI."""

    def __init__(
        self,
        executable: str = "oc",
        kubeconfig: str = "/tmp/deployer-kubeconfig",
    ):
        self.executable = executable
        self.kubeconfig = kubeconfig

    async def run_oc(self, args: List[str]) -> StepResult:
        """Run one ``oc`` command and capture its merged output."""
        env = {**os.environ, "KUBECONFIG": self.kubeconfig}
        process = None
        exit_code = None
        try:
            process, line_iterator = await create_subprocess(
                cmd=[self.executable, *args], env=env
            )
            output = "".join([line async for line in line_iterator])
            exit_code = await wait_subprocess(process)
        except Exception as e:
            logger.error(f"Failed to run {self.executable} {args[0]}: {e}")
            return StepResult(success=False, output=str(e), exit_code=-1)
        finally:
            if process is not None and exit_code is None:
                await stop_subprocess(process)
        return StepResult(success=exit_code == 0, output=output, exit_code=exit_code)

    async def login(self, config: GlobalConfig) -> bool:
        result = await self.run_oc(
            [
                "login",
                config.ocp_api_url,
                f"--token={config.ocp_token}",
                "--insecure-skip-tls-verify=true",
            ]
        )
        if not result.success:
            logger.warning(f"oc login failed (exit code {result.exit_code})")
        return result.success

    async def probe(
        self, component: ComponentDefinition, config: GlobalConfig
    ) -> ProbeResult:
        ns = component.target_namespace
        app_name = component.id

        ns_check = await self.run_oc(["get", "project", ns, "-o", "name"])
        if not ns_check.success:
            return ProbeResult(status=ComponentStatus.NOT_DEPLOYED)

        workloads = await self.run_oc(
            ["get", "deploy,dc,buildconfig", "-n", ns, "-o", "name"]
        )
        if not workloads.success or not workloads.output.strip():
            return ProbeResult(status=ComponentStatus.NOT_DEPLOYED, namespace=ns)

        pods = await self.run_oc(
            ["get", "pods", "-n", ns, "-o", "jsonpath={.items[*].status.phase}"]
        )
        phases = pods.output.split() if pods.success else []
        status = classify_pod_phases(phases)

        route = None
        route_check = await self.run_oc(
            ["get", "route", app_name, "-n", ns, "-o", "jsonpath={.spec.host}"]
        )
        if route_check.success and route_check.output.strip():
            route = f"https://{route_check.output.strip()}"

        return ProbeResult(
            status=status,
            route=route,
            namespace=ns,
            error=PODS_FAILING_MESSAGE if status is ComponentStatus.FAILED else None,
        )

    async def set_workload_env(
        self, component: ComponentDefinition, env: Dict[str, str]
    ) -> TokenRefreshStatus:
        """Set ``env`` on the component's deployment, if it has one.

        Changing the environment rolls the pods, so the new values are live
        once the rollout finishes.
        """
        ns = component.target_namespace
        found = await self.run_oc(["get", "deploy,dc", component.id, "-n", ns, "-o", "name"])
        if not found.success or not found.output.strip():
            return TokenRefreshStatus.SKIPPED

        resource = found.output.strip().splitlines()[0]
        assignments = [f"{key}={value}" for key, value in env.items()]
        result = await self.run_oc(["set", "env", resource, *assignments, "-n", ns])
        if not result.success:
            logger.warning(
                f"Could not update env of {resource} in {ns} (exit code {result.exit_code})"
            )
            return TokenRefreshStatus.FAILED
        return TokenRefreshStatus.UPDATED
