"""Pipeline executor: runs the ordered steps of one component."""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from ...constants import DEFAULT_SERVICE_PORTS, PIPELINE_FAILED_MESSAGE
from ...models.catalog import ComponentDefinition, StepDefinition
from ...models.events import EventType
from ...models.state import ComponentStatus, GlobalConfig
from ..events import EventBroadcaster
from ..job_tracker import JobTracker
from ..state_store import StateStore
from ..variable_resolver import resolve_env_vars
from .output_parser import StepOutputDecoder
from .step_runner import OutputCallback, StepRunner

logger = logging.getLogger(__name__)


class PipelineExecutor:
    """Executes a component's steps against the step runner.

    Failure policy: a failing auxiliary step is reported as a warning and
    the pipeline continues; a failing primary step fails the pipeline and no
    further step runs. Any unexpected exception fails the pipeline too, so a
    component never stays ``deploying`` once its job has ended.
    """

    def __init__(
        self,
        store: StateStore,
        jobs: JobTracker,
        broadcaster: EventBroadcaster,
        runner: StepRunner,
        decoder: Optional[StepOutputDecoder] = None,
    ):
        self.store = store
        self.jobs = jobs
        self.broadcaster = broadcaster
        self.runner = runner
        self.decoder = decoder or StepOutputDecoder()

    async def run(self, job_id: str, component: ComponentDefinition) -> bool:
        """Run every step of ``component`` for job ``job_id``.

        Returns True when the pipeline succeeded. Never raises.
        """
        logger.info(f"Pipeline started: component={component.id}, job={job_id}")

        try:
            config = self.store.get_raw_config()
            namespace = component.target_namespace
            on_output = self._output_handler(job_id, component.id)

            success = True
            route: Optional[str] = None

            for step in component.steps:
                on_output(f"\n=== Step: {step.name} ===\n")

                parameters = self.build_parameters(component, step, config)
                result = await self.runner.run(step.playbook, parameters, on_output)

                scraped = self.decoder.decode(result.output)
                if step.is_access_control and scraped.token:
                    logger.info(f"Harvested service-account token from step {step.id}")
                    self.store.set_derived_token(scraped.token)
                    config = config.model_copy(update={"sa_token": scraped.token})
                if scraped.route:
                    route = scraped.route

                if result.success:
                    on_output(f'Step "{step.name}" completed\n')
                    continue

                if step.primary:
                    success = False
                    on_output(
                        f'\nStep "{step.name}" failed '
                        f"(exit code {result.exit_code})\n"
                    )
                    break

                logger.warning(
                    f"Non-critical step {step.id} of {component.id} failed "
                    f"(exit code {result.exit_code}), continuing"
                )
                on_output(
                    f'\nWARNING: step "{step.name}" failed '
                    f"(non-critical, continuing)\n"
                )

            self.store.update_component(
                component.id,
                status=ComponentStatus.DEPLOYED if success else ComponentStatus.FAILED,
                route=route,
                namespace=namespace,
                finished_at=datetime.now(),
                error=None if success else PIPELINE_FAILED_MESSAGE,
            )
            self.jobs.finish(job_id, success)
            self.broadcaster.emit(
                EventType.JOB_COMPLETE,
                {"job_id": job_id, "component_id": component.id, "success": success},
            )
            logger.info(
                f"Pipeline finished: component={component.id}, job={job_id}, "
                f"success={success}"
            )
            return success

        except Exception as e:
            logger.exception(f"Pipeline for {component.id} (job {job_id}) crashed")
            self.store.update_component(
                component.id,
                status=ComponentStatus.FAILED,
                finished_at=datetime.now(),
                error=str(e),
            )
            self.jobs.finish(job_id, False)
            self.broadcaster.emit(
                EventType.JOB_ERROR,
                {"job_id": job_id, "component_id": component.id, "error": str(e)},
            )
            return False

    @staticmethod
    def build_parameters(
        component: ComponentDefinition,
        step: StepDefinition,
        config: GlobalConfig,
    ) -> Dict[str, Any]:
        """Runner parameters for one step.

        Connection values first, then the step's fixed ``extra_vars``; the
        primary step also receives the build context and resolved env vars.
        """
        parameters: Dict[str, Any] = {
            "ocp_api_url": config.ocp_api_url,
            "ocp_token": config.ocp_token,
            "namespace": component.target_namespace,
            **step.extra_vars,
        }

        if step.primary:
            parameters["app_name"] = component.id
            parameters["git_repo_url"] = config.git_repo_url
            if step.context_dir:
                parameters["context_dir"] = step.context_dir
            if component.env_vars:
                parameters["env_vars"] = resolve_env_vars(component.env_vars, config)
            if component.port and component.port not in DEFAULT_SERVICE_PORTS:
                parameters["service_port"] = component.port

        return parameters

    def _output_handler(self, job_id: str, component_id: str) -> OutputCallback:
        def on_output(chunk: str) -> None:
            self.jobs.append_output(job_id, chunk)
            self.store.append_component_logs(component_id, chunk)
            self.broadcaster.emit(
                EventType.JOB_OUTPUT,
                {"job_id": job_id, "component_id": component_id, "data": chunk},
            )

        return on_output
