"""Precondition errors raised before any job is created."""

from typing import Optional


class DeployError(Exception):
    """Base class for errors reported synchronously to the caller."""


class UnknownComponentError(DeployError):
    def __init__(self, component_id: str):
        super().__init__(f"Unknown component: {component_id}")
        self.component_id = component_id


class UnknownOfferError(DeployError):
    def __init__(self, offer_id: str):
        super().__init__(f"Unknown offer: {offer_id}")
        self.offer_id = offer_id


class MissingConfigurationError(DeployError):
    def __init__(self, message: str = "Configure the OCP API URL and token first"):
        super().__init__(message)


class ComponentBusyError(DeployError):
    """A pipeline or a cleanup is already running for the component."""

    def __init__(self, component_id: str, job_id: Optional[str] = None):
        if job_id is None:
            message = f"Component {component_id} is being cleaned up"
        else:
            message = f"Component {component_id} is already deploying (job {job_id})"
        super().__init__(message)
        self.component_id = component_id
        self.job_id = job_id
