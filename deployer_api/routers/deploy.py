"""Deploy, cleanup and refresh endpoints."""

import logging
from typing import Dict

from fastapi import APIRouter, Depends

from ..models.state import (
    BatchStarted,
    CleanupResult,
    ComponentStatus,
    DeployStarted,
    TokenRefreshResult,
)
from ..services.deploy.errors import DeployError
from ..services.deploy.orchestrator import DeployOrchestrator
from .dependencies import get_orchestrator, to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/deploy/{component_id}", response_model=DeployStarted)
async def deploy_component(
    component_id: str,
    orchestrator: DeployOrchestrator = Depends(get_orchestrator),
) -> DeployStarted:
    """
    Start deploying one component.

    The pipeline runs in the background. Use the job endpoint or the
    WebSocket stream to follow its progress.
    """
    try:
        return orchestrator.start_deploy(component_id)
    except DeployError as e:
        raise to_http_exception(e)


@router.post("/deploy-all", response_model=BatchStarted)
async def deploy_all(
    orchestrator: DeployOrchestrator = Depends(get_orchestrator),
) -> BatchStarted:
    """Deploy every component in catalog order, one at a time."""
    try:
        return orchestrator.start_deploy_all()
    except DeployError as e:
        raise to_http_exception(e)


@router.post("/offers/{offer_id}/deploy", response_model=BatchStarted)
async def deploy_offer(
    offer_id: str,
    orchestrator: DeployOrchestrator = Depends(get_orchestrator),
) -> BatchStarted:
    """Deploy the components of one offer, one at a time."""
    try:
        return orchestrator.start_deploy_offer(offer_id)
    except DeployError as e:
        raise to_http_exception(e)


@router.post("/cleanup", response_model=CleanupResult)
async def cleanup_all(
    orchestrator: DeployOrchestrator = Depends(get_orchestrator),
) -> CleanupResult:
    """Delete every component namespace and reset all component states."""
    try:
        return await orchestrator.cleanup_all()
    except DeployError as e:
        raise to_http_exception(e)


@router.post("/cleanup/{component_id}", response_model=CleanupResult)
async def cleanup_component(
    component_id: str,
    orchestrator: DeployOrchestrator = Depends(get_orchestrator),
) -> CleanupResult:
    try:
        return await orchestrator.cleanup_component(component_id)
    except DeployError as e:
        raise to_http_exception(e)


@router.post("/offers/{offer_id}/cleanup", response_model=CleanupResult)
async def cleanup_offer(
    offer_id: str,
    orchestrator: DeployOrchestrator = Depends(get_orchestrator),
) -> CleanupResult:
    try:
        return await orchestrator.cleanup_offer(offer_id)
    except DeployError as e:
        raise to_http_exception(e)


@router.post("/refresh", response_model=Dict[str, ComponentStatus])
async def refresh_status(
    orchestrator: DeployOrchestrator = Depends(get_orchestrator),
) -> Dict[str, ComponentStatus]:
    """Re-read component status from the cluster."""
    try:
        return await orchestrator.refresh_status()
    except DeployError as e:
        raise to_http_exception(e)


@router.post("/refresh-tokens", response_model=TokenRefreshResult)
async def refresh_tokens(
    orchestrator: DeployOrchestrator = Depends(get_orchestrator),
) -> TokenRefreshResult:
    """Push the current cluster token into every deployed workload that reads it."""
    try:
        return await orchestrator.refresh_tokens()
    except DeployError as e:
        raise to_http_exception(e)
