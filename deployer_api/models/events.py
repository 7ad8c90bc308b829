"""Broadcast event models."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """Type tags of events published by the orchestrator."""

    COMPONENT_UPDATE = "component-update"
    CONFIG_UPDATE = "config-update"
    JOB_START = "job-start"
    JOB_OUTPUT = "job-output"
    JOB_COMPLETE = "job-complete"
    JOB_ERROR = "job-error"
    BATCH_START = "batch-start"
    BATCH_STOPPED = "batch-stopped"
    BATCH_COMPLETE = "batch-complete"
    CLEANUP_OUTPUT = "cleanup-output"
    CLEANUP_COMPLETE = "cleanup-complete"
    REFRESH_COMPLETE = "refresh-complete"


class DeployEvent(BaseModel):
    """A state transition fanned out to observers."""

    type: EventType = Field(..., description="Event type tag")
    payload: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=datetime.now)

    def to_message(self) -> Dict[str, Any]:
        """Flat JSON-ready message: ``{"type": ..., **payload, "timestamp": ...}``."""
        return {
            "type": self.type.value,
            **self.payload,
            "timestamp": self.timestamp.isoformat(),
        }
