"""
Shared Test Fixtures for the Demo Deployer

This package contains reusable test fixtures organized by category:
- catalog.py: Small catalogs exercising every step and batch rule
- fakes.py: Scripted step runner and cluster prober
- services.py: Broadcaster, state store and orchestrator wiring
"""

from .catalog import (
    sample_catalog,
    sample_catalog_data,
)
from .fakes import (
    FakeClusterProber,
    FakeStepRunner,
    fake_prober,
    fake_runner,
)
from .services import (
    broadcaster,
    configured_store,
    orchestrator,
    recorded_events,
    state_file,
    store,
)

__all__ = [
    # Catalog fixtures
    "sample_catalog",
    "sample_catalog_data",

    # Fakes
    "FakeClusterProber",
    "FakeStepRunner",
    "fake_prober",
    "fake_runner",

    # Service fixtures
    "broadcaster",
    "configured_store",
    "orchestrator",
    "recorded_events",
    "state_file",
    "store",
]
