"""
Deploy package for the demo deployer.

Provides the pipeline executor, batch orchestrator and the orchestrator
facade that runs them as background tasks.
"""

from .subprocess_utils import (
    IS_WINDOWS,
    create_subprocess,
    stop_subprocess,
    wait_subprocess,
)
from .errors import (
    ComponentBusyError,
    DeployError,
    MissingConfigurationError,
    UnknownComponentError,
    UnknownOfferError,
)
from .output_parser import ScrapedValues, StepOutputDecoder
from .step_runner import AnsibleStepRunner, StepResult, StepRunner
from .cluster_probe import ClusterProber, OcClusterProber, ProbeResult, classify_pod_phases
from .pipeline import PipelineExecutor
from .batch import BatchEntry, BatchOrchestrator
from .orchestrator import DeployOrchestrator

__all__ = [
    # Utilities
    "IS_WINDOWS",
    "create_subprocess",
    "stop_subprocess",
    "wait_subprocess",
    # Errors
    "ComponentBusyError",
    "DeployError",
    "MissingConfigurationError",
    "UnknownComponentError",
    "UnknownOfferError",
    # Step execution
    "ScrapedValues",
    "StepOutputDecoder",
    "AnsibleStepRunner",
    "StepResult",
    "StepRunner",
    "ClusterProber",
    "OcClusterProber",
    "ProbeResult",
    "classify_pod_phases",
    # Orchestration
    "PipelineExecutor",
    "BatchEntry",
    "BatchOrchestrator",
    "DeployOrchestrator",
]
