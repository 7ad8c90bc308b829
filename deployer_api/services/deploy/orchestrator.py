"""Deploy orchestrator – the entry point used by transport and CLI code."""

import asyncio
import logging
import threading
from datetime import datetime
from typing import Any, Coroutine, Dict, List, Optional, Sequence, Set

from ...catalog import load_catalog
from ...config import DeployerSettings
from ...constants import API_URL_ENV, BEARER_TOKEN_ENV, CLEANUP_ACTION
from ...models.catalog import Catalog, ComponentDefinition, OfferDefinition
from ...models.events import EventType
from ...models.state import (
    BatchStarted,
    CleanupResult,
    ComponentDetail,
    ComponentStatus,
    DeployStarted,
    FullState,
    GlobalConfig,
    Job,
    NamespaceCleanup,
    TokenRefreshEntry,
    TokenRefreshResult,
    TokenRefreshStatus,
)
from ...storage.snapshot_store import JsonSnapshotStore
from ..events import EventBroadcaster, EventHandler
from ..job_tracker import JobTracker
from ..state_store import StateStore
from .batch import BatchEntry, BatchOrchestrator
from .cluster_probe import ClusterProber, OcClusterProber
from .errors import (
    ComponentBusyError,
    MissingConfigurationError,
    UnknownComponentError,
    UnknownOfferError,
)
from .pipeline import PipelineExecutor
from .step_runner import AnsibleStepRunner, StepRunner

logger = logging.getLogger(__name__)


class DeployOrchestrator:
    """Owns the deploy state and runs pipelines as background tasks.

    Starting a deploy validates preconditions synchronously, creates the job
    and returns immediately; the pipeline then runs as an ``asyncio`` task.
    At most one pipeline runs per component at a time.
    """

    def __init__(
        self,
        catalog: Catalog,
        store: StateStore,
        jobs: JobTracker,
        broadcaster: EventBroadcaster,
        runner: StepRunner,
        prober: Optional[ClusterProber] = None,
        poll_interval: float = 1.0,
    ):
        self.catalog = catalog
        self.store = store
        self.jobs = jobs
        self.broadcaster = broadcaster
        self.runner = runner
        self.prober = prober or OcClusterProber()
        self.pipeline = PipelineExecutor(store, jobs, broadcaster, runner)
        self.batch = BatchOrchestrator(
            self.start_deploy, jobs, broadcaster, poll_interval=poll_interval
        )

        self._inflight: Dict[str, str] = {}
        self._cleaning: Set[str] = set()
        self._tasks: Set[asyncio.Task] = set()
        self._lock = threading.Lock()

    @classmethod
    def from_settings(
        cls,
        settings: DeployerSettings,
        catalog: Optional[Catalog] = None,
        runner: Optional[StepRunner] = None,
        prober: Optional[ClusterProber] = None,
    ) -> "DeployOrchestrator":
        """Build an orchestrator restored from the snapshot in ``data_dir``."""
        catalog = catalog or load_catalog(settings.catalog_path)
        broadcaster = EventBroadcaster()
        store = StateStore(
            catalog,
            broadcaster,
            JsonSnapshotStore(settings.state_file),
            defaults=GlobalConfig(
                namespace=settings.default_namespace,
                git_repo_url=settings.default_git_repo_url,
            ),
        )
        return cls(
            catalog=catalog,
            store=store,
            jobs=JobTracker(),
            broadcaster=broadcaster,
            runner=runner or AnsibleStepRunner(settings.ansible_dir),
            prober=prober,
            poll_interval=settings.batch_poll_interval_seconds,
        )

    # ------------------------------------------------------------------
    # Preconditions
    # ------------------------------------------------------------------

    def _require_component(self, component_id: str) -> ComponentDefinition:
        component = self.catalog.get_component(component_id)
        if component is None:
            raise UnknownComponentError(component_id)
        return component

    def _require_offer(self, offer_id: str) -> OfferDefinition:
        offer = self.catalog.get_offer(offer_id)
        if offer is None:
            raise UnknownOfferError(offer_id)
        return offer

    def _require_config(self) -> GlobalConfig:
        config = self.store.get_raw_config()
        if not config.is_configured:
            raise MissingConfigurationError()
        return config

    def is_deploying(self, component_id: str) -> bool:
        with self._lock:
            return component_id in self._inflight

    def is_busy(self, component_id: str) -> bool:
        """True while a deploy or a cleanup of the component is running."""
        with self._lock:
            return component_id in self._inflight or component_id in self._cleaning

    # ------------------------------------------------------------------
    # Background tasks
    # ------------------------------------------------------------------

    def _spawn(self, coro: Coroutine[Any, Any, Any], name: str) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait_idle(self) -> None:
        """Wait until every pipeline and batch task has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ------------------------------------------------------------------
    # Deploy
    # ------------------------------------------------------------------

    def start_deploy(self, component_id: str) -> DeployStarted:
        """Start the pipeline of one component and return its job handle.

        Raises:
            UnknownComponentError: If the component is not in the catalog
            MissingConfigurationError: If endpoint or token is not set
            ComponentBusyError: If the component is deploying or being cleaned up
        """
        # Fails outside an event loop before any state changes
        asyncio.get_running_loop()
        component = self._require_component(component_id)
        self._require_config()

        with self._lock:
            running_job = self._inflight.get(component_id)
            if running_job is not None:
                raise ComponentBusyError(component_id, running_job)
            if component_id in self._cleaning:
                raise ComponentBusyError(component_id)
            job = self.jobs.create(component_id)
            self._inflight[component_id] = job.id

        try:
            self.store.update_component(
                component_id,
                status=ComponentStatus.DEPLOYING,
                logs="",
                started_at=datetime.now(),
                finished_at=None,
                error=None,
            )
            self.broadcaster.emit(
                EventType.JOB_START, {"job_id": job.id, "component_id": component_id}
            )
            self._spawn(self._run_pipeline(job.id, component), name=f"deploy-{job.id}")
        except Exception as e:
            logger.exception(f"Could not start deploy of {component_id}")
            self.jobs.finish(job.id, False)
            self._release(component_id, job.id)
            try:
                self.store.update_component(
                    component_id,
                    status=ComponentStatus.FAILED,
                    finished_at=datetime.now(),
                    error=str(e),
                )
            finally:
                self.broadcaster.emit(
                    EventType.JOB_ERROR,
                    {"job_id": job.id, "component_id": component_id, "error": str(e)},
                )
            raise

        logger.info(f"Deploy started: component={component_id}, job={job.id}")
        return DeployStarted(job_id=job.id, component_id=component_id)

    async def _run_pipeline(self, job_id: str, component: ComponentDefinition) -> bool:
        try:
            return await self.pipeline.run(job_id, component)
        finally:
            self._release(component.id, job_id)

    def _release(self, component_id: str, job_id: str) -> None:
        with self._lock:
            if self._inflight.get(component_id) == job_id:
                del self._inflight[component_id]

    def start_deploy_all(self) -> BatchStarted:
        """Schedule every catalog component in ``order``."""
        asyncio.get_running_loop()
        self._require_config()
        schedule = self.catalog.schedule()
        self._spawn(self.batch.run(schedule), name="deploy-all")
        return BatchStarted(component_ids=[c.id for c in schedule])

    def start_deploy_offer(self, offer_id: str) -> BatchStarted:
        """Schedule the components of one offer in ``order``."""
        asyncio.get_running_loop()
        offer = self._require_offer(offer_id)
        self._require_config()
        schedule = self.catalog.schedule(offer.component_ids)
        self._spawn(self.batch.run(schedule, offer_id=offer_id), name=f"offer-{offer_id}")
        return BatchStarted(offer_id=offer_id, component_ids=[c.id for c in schedule])

    async def deploy_all(self) -> List[BatchEntry]:
        """Deploy every component and wait for the batch to finish."""
        self._require_config()
        return await self.batch.run(self.catalog.schedule())

    async def deploy_offer(self, offer_id: str) -> List[BatchEntry]:
        """Deploy one offer and wait for the batch to finish."""
        offer = self._require_offer(offer_id)
        self._require_config()
        return await self.batch.run(
            self.catalog.schedule(offer.component_ids), offer_id=offer_id
        )

    # ------------------------------------------------------------------
    # Cleanup / refresh
    # ------------------------------------------------------------------

    async def cleanup_component(self, component_id: str) -> CleanupResult:
        return await self._cleanup([self._require_component(component_id)])

    async def cleanup_all(self) -> CleanupResult:
        return await self._cleanup(list(self.catalog.components))

    async def cleanup_offer(self, offer_id: str) -> CleanupResult:
        offer = self._require_offer(offer_id)
        return await self._cleanup(self.catalog.schedule(offer.component_ids))

    async def _cleanup(self, components: Sequence[ComponentDefinition]) -> CleanupResult:
        """Delete the namespaces of ``components`` and reset their state.

        The components stay reserved until the cleanup returns, so no deploy
        of them can start while their namespaces are being deleted.
        """
        config = self._require_config()
        component_ids = [c.id for c in components]
        with self._lock:
            for component_id in component_ids:
                running_job = self._inflight.get(component_id)
                if running_job is not None:
                    raise ComponentBusyError(component_id, running_job)
                if component_id in self._cleaning:
                    raise ComponentBusyError(component_id)
            self._cleaning.update(component_ids)

        try:
            return await self._delete_namespaces(components, config)
        finally:
            with self._lock:
                self._cleaning.difference_update(component_ids)

    async def _delete_namespaces(
        self, components: Sequence[ComponentDefinition], config: GlobalConfig
    ) -> CleanupResult:
        namespaces = list(dict.fromkeys(c.target_namespace for c in components))
        output: List[str] = []

        def on_output(chunk: str) -> None:
            output.append(chunk)
            self.broadcaster.emit(EventType.CLEANUP_OUTPUT, {"data": chunk})

        on_output(f"\nStarting cleanup of {len(namespaces)} namespaces...\n")

        details: List[NamespaceCleanup] = []
        for ns in namespaces:
            on_output(f"\n=== Deleting namespace: {ns} ===\n")
            result = await self.runner.run(
                CLEANUP_ACTION,
                {
                    "ocp_api_url": config.ocp_api_url,
                    "ocp_token": config.ocp_token,
                    "namespace": ns,
                },
                on_output,
            )
            details.append(
                NamespaceCleanup(
                    namespace=ns, success=result.success, exit_code=result.exit_code
                )
            )
            if result.success:
                on_output(f'Namespace "{ns}" deleted\n')
            else:
                on_output(
                    f'WARNING: failed to delete namespace "{ns}" '
                    f"(exit code {result.exit_code})\n"
                )

        for component in components:
            self.store.reset_component(component.id)

        # The service account lived in a namespace that was just deleted
        if any(c.has_access_control_step for c in components):
            self.store.clear_derived_token()

        failed = [d.namespace for d in details if not d.success]
        if failed:
            summary = (
                f"Partial cleanup: {len(details) - len(failed)}/{len(details)} "
                f"namespaces deleted. Failed: {', '.join(failed)}"
            )
        else:
            summary = (
                f"Cleanup complete: {len(namespaces)} namespaces deleted: "
                f"{', '.join(namespaces)}"
            )
        on_output(f"\n{summary}\n")
        logger.info(summary)

        cleanup = CleanupResult(success=not failed, output=summary, details=details)
        self.broadcaster.emit(
            EventType.CLEANUP_COMPLETE,
            {"success": cleanup.success, "summary": summary},
        )
        return cleanup

    async def refresh_status(self) -> Dict[str, ComponentStatus]:
        """Re-read every idle component's status from the cluster."""
        config = self._require_config()
        await self.prober.login(config)

        statuses: Dict[str, ComponentStatus] = {}
        for component in self.catalog.components:
            if self.is_busy(component.id):
                logger.debug(f"Skipping refresh of {component.id}: deploy or cleanup running")
                continue
            probed = await self.prober.probe(component, config)
            self.store.update_component(
                component.id,
                status=probed.status,
                route=probed.route,
                namespace=probed.namespace,
                error=probed.error,
            )
            statuses[component.id] = probed.status

        self.broadcaster.emit(EventType.REFRESH_COMPLETE)
        return statuses

    async def refresh_tokens(self) -> TokenRefreshResult:
        """Push the current credential into every workload that reads it.

        Components deployed before the service-account token was harvested
        still run with the primary token. This rewrites the token and API URL
        env vars on each deployed workload that declares the token variable.
        """
        config = self._require_config()
        await self.prober.login(config)
        env = {
            BEARER_TOKEN_ENV: config.sa_token or config.ocp_token,
            API_URL_ENV: config.ocp_api_url,
        }

        entries: List[TokenRefreshEntry] = []
        for component in self.catalog.components:
            if not any(var.key == BEARER_TOKEN_ENV for var in component.env_vars):
                continue
            namespace = component.target_namespace
            if self.is_busy(component.id):
                entries.append(
                    TokenRefreshEntry(
                        component_id=component.id,
                        namespace=namespace,
                        status=TokenRefreshStatus.SKIPPED,
                        reason="deploy or cleanup running",
                    )
                )
                continue

            status = await self.prober.set_workload_env(component, env)
            entries.append(
                TokenRefreshEntry(
                    component_id=component.id,
                    namespace=namespace,
                    status=status,
                    reason="not deployed" if status is TokenRefreshStatus.SKIPPED else None,
                )
            )

        updated = sum(1 for e in entries if e.status is TokenRefreshStatus.UPDATED)
        logger.info(f"Token refresh: {updated}/{len(entries)} workloads updated")
        return TokenRefreshResult(
            success=all(e.status is not TokenRefreshStatus.FAILED for e in entries),
            results=entries,
        )

    # ------------------------------------------------------------------
    # Queries / subscriptions
    # ------------------------------------------------------------------

    def get_state(self) -> FullState:
        return FullState(
            config=self.store.get_config(),
            components=self.store.list_components(),
            definitions=list(self.catalog.components),
            offers=list(self.catalog.offers),
        )

    def get_component(self, component_id: str) -> ComponentDetail:
        component = self._require_component(component_id)
        return ComponentDetail(
            definition=component, state=self.store.get_component(component_id)
        )

    def get_job(self, job_id: str) -> Optional[Job]:
        return self.jobs.get(job_id)

    def subscribe(self, handler: EventHandler) -> None:
        self.broadcaster.subscribe(handler)

    def unsubscribe(self, handler: EventHandler) -> None:
        self.broadcaster.unsubscribe(handler)
