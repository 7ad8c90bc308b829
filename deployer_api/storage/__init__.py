"""Durable storage for orchestrator state."""

from .snapshot_store import JsonSnapshotStore

__all__ = ["JsonSnapshotStore"]
