"""Orchestration services for the deployer API."""

from .events import EventBroadcaster
from .job_tracker import JobTracker
from .state_store import StateStore, mask_secret
from .variable_resolver import resolve, resolve_env_vars

__all__ = [
    "EventBroadcaster",
    "JobTracker",
    "StateStore",
    "mask_secret",
    "resolve",
    "resolve_env_vars",
]
