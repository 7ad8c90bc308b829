"""Orchestrator state models: components, jobs and cluster configuration."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .catalog import ComponentDefinition, OfferDefinition


class ComponentStatus(str, Enum):
    """Lifecycle status of a component."""

    NOT_DEPLOYED = "not-deployed"
    DEPLOYING = "deploying"
    DEPLOYED = "deployed"
    FAILED = "failed"


class JobStatus(str, Enum):
    """Status of one pipeline run."""

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not JobStatus.RUNNING


class ComponentState(BaseModel):
    """Mutable lifecycle state of one catalog component."""

    status: ComponentStatus = Field(default=ComponentStatus.NOT_DEPLOYED)
    route: Optional[str] = Field(None, description="Resolved external route URL")
    logs: str = Field(default="", description="Output of the current/last run")
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    error: Optional[str] = None
    namespace: Optional[str] = Field(None, description="Last known namespace")


class Job(BaseModel):
    """One execution of a component pipeline."""

    id: str = Field(..., description="Unique job ID")
    component_id: str = Field(..., description="Component being deployed")
    status: JobStatus = Field(default=JobStatus.RUNNING)
    logs: str = Field(default="")
    started_at: datetime = Field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None


class GlobalConfig(BaseModel):
    """Cluster connection settings and secrets used by every pipeline."""

    ocp_api_url: str = Field(default="", description="Cluster API endpoint")
    ocp_token: str = Field(default="", description="Primary credential")
    sa_token: str = Field(
        default="", description="Service-account token harvested from a pipeline"
    )
    secrets: Dict[str, str] = Field(
        default_factory=dict, description="Other declared secrets by placeholder name"
    )
    namespace: str = Field(default="", description="Default namespace")
    git_repo_url: str = Field(default="", description="Source repository URL")

    @property
    def is_configured(self) -> bool:
        return bool(self.ocp_api_url and self.ocp_token)


class ConfigUpdate(BaseModel):
    """User-writable subset of :class:`GlobalConfig`."""

    ocp_api_url: Optional[str] = None
    ocp_token: Optional[str] = None
    secrets: Optional[Dict[str, str]] = None
    namespace: Optional[str] = None
    git_repo_url: Optional[str] = None


class StateSnapshot(BaseModel):
    """Durable snapshot: configuration plus component states without logs."""

    config: GlobalConfig = Field(default_factory=GlobalConfig)
    components: Dict[str, ComponentState] = Field(default_factory=dict)


class DeployStarted(BaseModel):
    """Handle returned when a single-component deploy is started."""

    job_id: str
    component_id: str


class BatchStarted(BaseModel):
    """Acknowledgment returned when a batch deploy is scheduled."""

    offer_id: Optional[str] = None
    component_ids: List[str] = Field(default_factory=list)


class NamespaceCleanup(BaseModel):
    """Outcome of deleting one namespace."""

    namespace: str
    success: bool
    exit_code: int


class CleanupResult(BaseModel):
    """Summary of a cleanup operation."""

    success: bool
    output: str
    details: List[NamespaceCleanup] = Field(default_factory=list)


class ComponentDetail(BaseModel):
    """Definition and current state of one component."""

    definition: ComponentDefinition
    state: ComponentState


class FullState(BaseModel):
    """Everything a newly connected observer needs to render the UI."""

    config: Dict[str, Any]
    components: Dict[str, ComponentState]
    definitions: List[ComponentDefinition]
    offers: List[OfferDefinition] = Field(default_factory=list)


class TokenRefreshStatus(str, Enum):
    """Outcome of pushing the credential into one component's workload."""

    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


class TokenRefreshEntry(BaseModel):
    component_id: str
    namespace: Optional[str] = None
    status: TokenRefreshStatus
    reason: Optional[str] = None


class TokenRefreshResult(BaseModel):
    """Summary of a token refresh across every token-consuming component."""

    success: bool
    results: List[TokenRefreshEntry] = Field(default_factory=list)
