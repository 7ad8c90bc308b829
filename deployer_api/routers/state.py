"""State, configuration and job query endpoints."""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, status

from .. import __version__
from ..models.catalog import OfferDefinition
from ..models.state import ComponentDetail, ComponentState, ConfigUpdate, FullState, Job
from ..services.deploy.errors import DeployError
from ..services.deploy.orchestrator import DeployOrchestrator
from .dependencies import get_orchestrator, to_http_exception

router = APIRouter()


@router.get("/health")
async def health() -> Dict[str, str]:
    """Liveness probe."""
    return {"status": "ok", "version": __version__}


@router.get("/state", response_model=FullState)
async def get_state(
    orchestrator: DeployOrchestrator = Depends(get_orchestrator),
) -> FullState:
    """Full snapshot: masked config, component states and the catalog."""
    return orchestrator.get_state()


@router.get("/config")
async def get_config(
    orchestrator: DeployOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """Cluster configuration with secrets masked."""
    return orchestrator.store.get_config()


@router.put("/config")
async def update_config(
    update: ConfigUpdate,
    orchestrator: DeployOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """
    Update the cluster configuration.

    Secrets sent back masked (``***``) are left unchanged.
    """
    return orchestrator.store.update_config(update)


@router.get("/components", response_model=Dict[str, ComponentState])
async def list_components(
    orchestrator: DeployOrchestrator = Depends(get_orchestrator),
) -> Dict[str, ComponentState]:
    return orchestrator.store.list_components()


@router.get("/components/{component_id}", response_model=ComponentDetail)
async def get_component(
    component_id: str,
    orchestrator: DeployOrchestrator = Depends(get_orchestrator),
) -> ComponentDetail:
    """Definition and current state of one component."""
    try:
        return orchestrator.get_component(component_id)
    except DeployError as e:
        raise to_http_exception(e)


@router.get("/offers", response_model=List[OfferDefinition])
async def list_offers(
    orchestrator: DeployOrchestrator = Depends(get_orchestrator),
) -> List[OfferDefinition]:
    return list(orchestrator.catalog.offers)


@router.get("/jobs/{job_id}", response_model=Job)
async def get_job(
    job_id: str,
    orchestrator: DeployOrchestrator = Depends(get_orchestrator),
) -> Job:
    """Status and accumulated output of one pipeline run."""
    job = orchestrator.get_job(job_id)
    if job is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Job {job_id} not found",
        )
    return job
