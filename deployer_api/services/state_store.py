"""In-memory component and configuration state with durable snapshots."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..constants import MASKED_SECRET
from ..models.catalog import Catalog
from ..models.events import EventType
from ..models.state import (
    ComponentState,
    ConfigUpdate,
    GlobalConfig,
    StateSnapshot,
)
from ..storage.snapshot_store import JsonSnapshotStore
from .events import EventBroadcaster

logger = logging.getLogger(__name__)


def mask_secret(value: Optional[str]) -> str:
    """Return the fixed placeholder for a non-empty secret, else ``""``."""
    return MASKED_SECRET if value else ""


def _is_unchanged_secret(value: Optional[str]) -> bool:
    return value is None or value == MASKED_SECRET


class StateStore:
    """Owner of :class:`GlobalConfig` and every :class:`ComponentState`.

    Each mutation updates memory, publishes an event describing the change
    and queues the durable snapshot, all under one lock. Snapshots are
    written by a single background thread in the order they were taken, so
    the file never ends up older than memory and the event loop never
    blocks on disk.
    """

    def __init__(
        self,
        catalog: Catalog,
        broadcaster: EventBroadcaster,
        snapshot_store: Optional[JsonSnapshotStore] = None,
        defaults: Optional[GlobalConfig] = None,
    ):
        self.catalog = catalog
        self.broadcaster = broadcaster
        self.snapshot_store = snapshot_store
        self._lock = threading.RLock()
        self._writer = ThreadPoolExecutor(max_workers=1, thread_name_prefix="state_writer")
        self._last_write: Optional[Future] = None

        self._config = (defaults or GlobalConfig()).model_copy(deep=True)
        self._components: Dict[str, ComponentState] = {
            c.id: ComponentState() for c in catalog.components
        }

        if snapshot_store is not None:
            saved = snapshot_store.load()
            if saved:
                self._restore(saved)

    # ------------------------------------------------------------------
    # Restore / persist
    # ------------------------------------------------------------------

    def _restore(self, saved: Dict[str, Any]) -> None:
        """Merge a stored snapshot into the freshly initialised defaults."""
        saved_config = saved.get("config")
        if isinstance(saved_config, dict):
            merged = self._config.model_dump()
            merged.update(
                {k: v for k, v in saved_config.items() if k in GlobalConfig.model_fields}
            )
            try:
                self._config = GlobalConfig.model_validate(merged)
            except ValidationError as e:
                logger.error(f"Ignoring stored config: {e}")

        saved_components = saved.get("components")
        if not isinstance(saved_components, dict):
            return

        for component_id, fields in saved_components.items():
            if component_id not in self._components or not isinstance(fields, dict):
                logger.debug(f"Skipping stored state for {component_id}")
                continue
            merged = self._components[component_id].model_dump()
            merged.update(
                {k: v for k, v in fields.items() if k in ComponentState.model_fields}
            )
            merged["logs"] = ""
            try:
                self._components[component_id] = ComponentState.model_validate(merged)
            except ValidationError as e:
                logger.error(f"Ignoring stored state for {component_id}: {e}")

    def snapshot(self) -> StateSnapshot:
        """Durable view of the state: config plus components without logs."""
        with self._lock:
            return StateSnapshot(
                config=self._config.model_copy(deep=True),
                components={
                    cid: state.model_copy(update={"logs": ""})
                    for cid, state in self._components.items()
                },
            )

    def _queue_snapshot(self) -> None:
        # Caller holds the lock, so snapshots are queued in mutation order
        if self.snapshot_store is None:
            return
        data = self.snapshot().model_dump(mode="json")
        self._last_write = self._writer.submit(self.snapshot_store.save, data)

    def flush(self) -> None:
        """Block until every queued snapshot write has reached the disk."""
        pending = self._last_write
        if pending is not None:
            pending.result()

    def persist(self) -> None:
        """Write the current snapshot and wait for it."""
        with self._lock:
            self._queue_snapshot()
        self.flush()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def get_config(self) -> Dict[str, Any]:
        """Configuration as shown to external readers, secrets masked."""
        with self._lock:
            data = self._config.model_dump()
        data["ocp_token"] = mask_secret(data["ocp_token"])
        data["sa_token"] = mask_secret(data["sa_token"])
        data["secrets"] = {k: mask_secret(v) for k, v in data["secrets"].items()}
        return data

    def get_raw_config(self) -> GlobalConfig:
        """Unmasked copy for the orchestration core."""
        with self._lock:
            return self._config.model_copy(deep=True)

    def update_config(self, update: ConfigUpdate) -> Dict[str, Any]:
        """Apply a configuration update and return the masked result.

        A masked placeholder (or an empty primary credential) received back
        from a reader leaves the stored secret untouched.
        """
        with self._lock:
            changes: Dict[str, Any] = {}
            for field in ("ocp_api_url", "namespace", "git_repo_url"):
                value = getattr(update, field)
                if value is not None:
                    changes[field] = value.strip()

            if not _is_unchanged_secret(update.ocp_token) and update.ocp_token:
                changes["ocp_token"] = update.ocp_token.strip()

            if update.secrets is not None:
                secrets = dict(self._config.secrets)
                for name, value in update.secrets.items():
                    if _is_unchanged_secret(value):
                        continue
                    if value:
                        secrets[name] = value
                    else:
                        secrets.pop(name, None)
                changes["secrets"] = secrets

            self._config = self._config.model_copy(update=changes)
            masked = self.get_config()
            self.broadcaster.emit(EventType.CONFIG_UPDATE, {"data": masked})
            self._queue_snapshot()
            return masked

    def set_derived_token(self, token: str) -> None:
        """Store a service-account token harvested from step output."""
        with self._lock:
            self._config = self._config.model_copy(update={"sa_token": token})
            self.broadcaster.emit(EventType.CONFIG_UPDATE, {"data": self.get_config()})
            self._queue_snapshot()

    def clear_derived_token(self) -> None:
        with self._lock:
            if not self._config.sa_token:
                return
            self._config = self._config.model_copy(update={"sa_token": ""})
            self.broadcaster.emit(EventType.CONFIG_UPDATE, {"data": self.get_config()})
            self._queue_snapshot()

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    def get_component(self, component_id: str) -> Optional[ComponentState]:
        with self._lock:
            state = self._components.get(component_id)
            return state.model_copy(deep=True) if state else None

    def list_components(self) -> Dict[str, ComponentState]:
        with self._lock:
            return {
                cid: state.model_copy(deep=True)
                for cid, state in self._components.items()
            }

    def update_component(self, component_id: str, **changes: Any) -> ComponentState:
        """Apply ``changes`` to one component, broadcast and persist.

        Raises:
            KeyError: If ``component_id`` is not in the catalog
            ValueError: If a change names an unknown field
        """
        unknown = set(changes) - set(ComponentState.model_fields)
        if unknown:
            raise ValueError(f"Unknown component state fields: {sorted(unknown)}")

        with self._lock:
            current = self._components[component_id]
            updated = ComponentState.model_validate({**current.model_dump(), **changes})
            self._components[component_id] = updated
            self.broadcaster.emit(
                EventType.COMPONENT_UPDATE,
                {"component_id": component_id, "data": updated.model_dump(mode="json")},
            )
            self._queue_snapshot()
            return updated.model_copy(deep=True)

    def append_component_logs(self, component_id: str, chunk: str) -> None:
        """Append live output; not broadcast or persisted on its own."""
        with self._lock:
            state = self._components[component_id]
            state.logs += chunk

    def reset_component(self, component_id: str) -> ComponentState:
        """Return a component to its initial ``not-deployed`` state."""
        return self.update_component(component_id, **ComponentState().model_dump())
