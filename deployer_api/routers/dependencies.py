"""Shared router dependencies."""

from fastapi import HTTPException, Request, status

from ..services.deploy.errors import (
    ComponentBusyError,
    DeployError,
    MissingConfigurationError,
    UnknownComponentError,
    UnknownOfferError,
)
from ..services.deploy.orchestrator import DeployOrchestrator


def get_orchestrator(request: Request) -> DeployOrchestrator:
    """Dependency to get the orchestrator owned by the application."""
    return request.app.state.orchestrator


def to_http_exception(error: DeployError) -> HTTPException:
    """Translate a precondition error into an HTTP error response."""
    if isinstance(error, (UnknownComponentError, UnknownOfferError)):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, ComponentBusyError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(error, MissingConfigurationError):
        code = status.HTTP_400_BAD_REQUEST
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=str(error))
