"""In-memory registry of pipeline runs."""

import asyncio
import logging
import threading
import uuid
from datetime import datetime
from typing import Dict, List, Optional

from ..models.state import Job, JobStatus

logger = logging.getLogger(__name__)


class JobTracker:
    """Holds one :class:`Job` per pipeline run for the process lifetime.

    Jobs are never persisted. Completion is signalled through an
    ``asyncio.Event`` per job so waiters do not depend on polling alone.
    """

    def __init__(self):
        self._jobs: Dict[str, Job] = {}
        self._done: Dict[str, asyncio.Event] = {}
        self._lock = threading.Lock()

    def create(self, component_id: str) -> Job:
        """Allocate a new running job for ``component_id``."""
        job = Job(id=str(uuid.uuid4()), component_id=component_id)
        with self._lock:
            self._jobs[job.id] = job
            self._done[job.id] = asyncio.Event()
        logger.debug(f"Created job {job.id} for {component_id}")
        return job.model_copy()

    def get(self, job_id: str) -> Optional[Job]:
        with self._lock:
            job = self._jobs.get(job_id)
            return job.model_copy() if job else None

    def list(self, component_id: Optional[str] = None) -> List[Job]:
        with self._lock:
            return [
                job.model_copy()
                for job in self._jobs.values()
                if component_id is None or job.component_id == component_id
            ]

    def append_output(self, job_id: str, chunk: str) -> None:
        with self._lock:
            self._jobs[job_id].logs += chunk

    def finish(self, job_id: str, success: bool) -> Job:
        """Move a running job to its terminal status.

        A job that already finished keeps its first terminal status.
        """
        with self._lock:
            job = self._jobs[job_id]
            if job.status is JobStatus.RUNNING:
                job.status = JobStatus.COMPLETED if success else JobStatus.FAILED
                job.finished_at = datetime.now()
            else:
                logger.warning(
                    f"Job {job_id} already {job.status.value}, ignoring finish"
                )
            done = self._done[job_id]
            result = job.model_copy()
        done.set()
        return result

    async def wait_for(self, job_id: str, poll_interval: float = 1.0) -> Job:
        """Block until ``job_id`` reaches a terminal status.

        Wakes on the completion event, re-checking the job status at least
        every ``poll_interval`` seconds.

        Raises:
            KeyError: If the job is unknown
        """
        done = self._done[job_id]
        while True:
            job = self.get(job_id)
            if job.status.is_terminal:
                return job
            try:
                await asyncio.wait_for(done.wait(), timeout=poll_interval)
            except asyncio.TimeoutError:
                pass
