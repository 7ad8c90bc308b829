"""Batch orchestrator: deploys a schedule of components one at a time."""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from ...models.catalog import ComponentDefinition
from ...models.events import EventType
from ...models.state import DeployStarted, JobStatus
from ..events import EventBroadcaster
from ..job_tracker import JobTracker
from .errors import DeployError

logger = logging.getLogger(__name__)

StartDeploy = Callable[[str], DeployStarted]


@dataclass
class BatchEntry:
    """Outcome of one scheduled component."""

    component_id: str
    job_id: Optional[str]
    status: JobStatus
    error: Optional[str] = None


class BatchOrchestrator:
    """Runs pipelines sequentially, waiting for each job to finish.

    A failed component marked ``required`` stops the schedule; any other
    failure is recorded and the next component starts.
    """

    def __init__(
        self,
        start_deploy: StartDeploy,
        jobs: JobTracker,
        broadcaster: EventBroadcaster,
        poll_interval: float = 1.0,
    ):
        self.start_deploy = start_deploy
        self.jobs = jobs
        self.broadcaster = broadcaster
        self.poll_interval = poll_interval

    async def run(
        self,
        schedule: List[ComponentDefinition],
        offer_id: Optional[str] = None,
    ) -> List[BatchEntry]:
        """Deploy ``schedule`` in order. Returns one entry per attempted component."""
        logger.info(
            f"Batch started (offer={offer_id}): {[c.id for c in schedule]}"
        )
        self.broadcaster.emit(
            EventType.BATCH_START,
            {"offer_id": offer_id, "component_ids": [c.id for c in schedule]},
        )

        results: List[BatchEntry] = []
        for index, component in enumerate(schedule, start=1):
            logger.info(f"  Starting component {index}/{len(schedule)}: {component.id}")
            entry = await self._deploy_one(component)
            results.append(entry)

            if entry.status is JobStatus.FAILED and component.required:
                reason = f"Required component failed: {component.name}"
                logger.warning(f"Batch stopped: {reason}")
                self.broadcaster.emit(
                    EventType.BATCH_STOPPED,
                    {
                        "offer_id": offer_id,
                        "component_id": component.id,
                        "component_name": component.name,
                        "reason": reason,
                    },
                )
                return results

        logger.info(f"Batch complete: {len(results)} components attempted")
        self.broadcaster.emit(
            EventType.BATCH_COMPLETE, {"offer_id": offer_id, "total": len(results)}
        )
        return results

    async def _deploy_one(self, component: ComponentDefinition) -> BatchEntry:
        try:
            started = self.start_deploy(component.id)
        except DeployError as e:
            logger.error(f"  Could not start {component.id}: {e}")
            return BatchEntry(
                component_id=component.id,
                job_id=None,
                status=JobStatus.FAILED,
                error=str(e),
            )

        job = await self.jobs.wait_for(started.job_id, self.poll_interval)
        logger.info(f"  {component.id} finished: {job.status.value}")
        return BatchEntry(component_id=component.id, job_id=job.id, status=job.status)
