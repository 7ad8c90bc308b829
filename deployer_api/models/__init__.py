"""Pydantic models for the deployer API."""

from .catalog import (
    Catalog,
    Category,
    ComponentDefinition,
    EnvVarTemplate,
    OfferDefinition,
    StepDefinition,
)
from .events import DeployEvent, EventType
from .state import (
    BatchStarted,
    CleanupResult,
    ComponentDetail,
    ComponentState,
    ComponentStatus,
    ConfigUpdate,
    DeployStarted,
    FullState,
    GlobalConfig,
    Job,
    JobStatus,
    NamespaceCleanup,
    StateSnapshot,
    TokenRefreshEntry,
    TokenRefreshResult,
    TokenRefreshStatus,
)

__all__ = [
    # Catalog
    "Catalog",
    "Category",
    "ComponentDefinition",
    "EnvVarTemplate",
    "OfferDefinition",
    "StepDefinition",
    # Events
    "DeployEvent",
    "EventType",
    # State
    "BatchStarted",
    "CleanupResult",
    "ComponentDetail",
    "ComponentState",
    "ComponentStatus",
    "ConfigUpdate",
    "DeployStarted",
    "FullState",
    "GlobalConfig",
    "Job",
    "JobStatus",
    "NamespaceCleanup",
    "StateSnapshot",
    "TokenRefreshEntry",
    "TokenRefreshResult",
    "TokenRefreshStatus",
]
