"""Tests for event models and the broadcaster."""

from datetime import datetime
from unittest.mock import MagicMock

import pytest

from deployer_api.models.events import DeployEvent, EventType
from deployer_api.services.events import EventBroadcaster


@pytest.mark.fast
class TestDeployEvent:
    def test_to_message_is_flat(self):
        event = DeployEvent(
            type=EventType.JOB_OUTPUT,
            payload={"job_id": "j1", "data": "line\n"},
            timestamp=datetime(2025, 1, 15, 10, 30),
        )
        assert event.to_message() == {
            "type": "job-output",
            "job_id": "j1",
            "data": "line\n",
            "timestamp": "2025-01-15T10:30:00",
        }


@pytest.mark.fast
class TestEventBroadcaster:
    def test_delivers_in_subscription_order(self):
        broadcaster = EventBroadcaster()
        seen = []
        broadcaster.subscribe(lambda e: seen.append(("first", e.type)))
        broadcaster.subscribe(lambda e: seen.append(("second", e.type)))

        broadcaster.emit(EventType.REFRESH_COMPLETE)

        assert seen == [
            ("first", EventType.REFRESH_COMPLETE),
            ("second", EventType.REFRESH_COMPLETE),
        ]

    def test_failing_handler_does_not_block_others(self):
        """One broken observer never stops delivery to the rest."""
        broadcaster = EventBroadcaster()
        broken = MagicMock(side_effect=RuntimeError("socket closed"))
        healthy = MagicMock()
        broadcaster.subscribe(broken)
        broadcaster.subscribe(healthy)

        event = broadcaster.emit(EventType.JOB_START, {"job_id": "j1"})

        broken.assert_called_once_with(event)
        healthy.assert_called_once_with(event)

    def test_unsubscribe_stops_delivery(self):
        broadcaster = EventBroadcaster()
        handler = MagicMock()
        broadcaster.subscribe(handler)
        broadcaster.unsubscribe(handler)
        broadcaster.unsubscribe(handler)

        broadcaster.emit(EventType.REFRESH_COMPLETE)

        handler.assert_not_called()
        assert broadcaster.subscriber_count == 0

    def test_no_backlog_for_late_subscribers(self):
        broadcaster = EventBroadcaster()
        broadcaster.emit(EventType.REFRESH_COMPLETE)
        handler = MagicMock()
        broadcaster.subscribe(handler)
        handler.assert_not_called()
