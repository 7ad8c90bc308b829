"""API routers."""

from .deploy import router as deploy_router
from .state import router as state_router

__all__ = ["deploy_router", "state_router"]
