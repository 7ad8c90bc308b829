"""Broadcaster, state store and orchestrator fixtures."""

from pathlib import Path
from typing import List

import pytest

from deployer_api.models.events import DeployEvent
from deployer_api.models.state import ConfigUpdate, GlobalConfig
from deployer_api.services.deploy.orchestrator import DeployOrchestrator
from deployer_api.services.events import EventBroadcaster
from deployer_api.services.job_tracker import JobTracker
from deployer_api.services.state_store import StateStore
from deployer_api.storage.snapshot_store import JsonSnapshotStore


@pytest.fixture
def state_file(tmp_path) -> Path:
    return tmp_path / "data" / "state.json"


@pytest.fixture
def broadcaster() -> EventBroadcaster:
    return EventBroadcaster()


@pytest.fixture
def recorded_events(broadcaster) -> List[DeployEvent]:
    """Every event published on ``broadcaster`` after this fixture is created."""
    events: List[DeployEvent] = []
    broadcaster.subscribe(events.append)
    return events


@pytest.fixture
def store(sample_catalog, broadcaster, state_file) -> StateStore:
    """State store persisting to a temporary snapshot file."""
    return StateStore(
        sample_catalog,
        broadcaster,
        JsonSnapshotStore(state_file),
        defaults=GlobalConfig(namespace="demo", git_repo_url="https://git.example/repo.git"),
    )


@pytest.fixture
def configured_store(store) -> StateStore:
    """State store with endpoint, token and one declared secret set."""
    store.update_config(
        ConfigUpdate(
            ocp_api_url="https://api.cluster.example:6443",
            ocp_token="sha256~primary",
            secrets={"api_key": "sk-test"},
        )
    )
    return store


@pytest.fixture
def orchestrator(
    sample_catalog, configured_store, broadcaster, fake_runner, fake_prober
) -> DeployOrchestrator:
    """
    Orchestrator wired to the fake runner and prober.

    Usage:
        @pytest.mark.asyncio
        async def test_deploy(orchestrator, fake_runner):
            started = orchestrator.start_deploy("alpha")
            await orchestrator.wait_idle()
    """
    return DeployOrchestrator(
        catalog=sample_catalog,
        store=configured_store,
        jobs=JobTracker(),
        broadcaster=broadcaster,
        runner=fake_runner,
        prober=fake_prober,
        poll_interval=0.01,
    )
