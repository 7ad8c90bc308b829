"""
Root conftest for the demo deployer test suite.

Fixtures are defined under tests/fixtures/ and re-exported here so every
test module can request them by name.
"""

import warnings

import pytest

from tests.fixtures import *  # noqa: F401,F403

# (substring of the node id, markers applied when it matches)
_AREA_MARKERS = [
    ("events", ("events",)),
    ("orchestrator", ("orchestrator",)),
    ("/deploy/", ("orchestrator",)),
    ("cli", ("cli",)),
    ("concurrent", ("threading",)),
    ("config", ("config",)),
]


def pytest_collection_modifyitems(config, items):
    """Tag tests by directory (unit/integration) and by feature area."""
    for item in items:
        node_id = item.nodeid.lower()
        if "/unit/" in node_id:
            item.add_marker(pytest.mark.unit)
            item.add_marker(pytest.mark.fast)
        elif "/integration/" in node_id:
            item.add_marker(pytest.mark.integration)
            item.add_marker(pytest.mark.slow)

        applied = set()
        for needle, names in _AREA_MARKERS:
            if needle in node_id:
                applied.update(names)
        for name in sorted(applied):
            item.add_marker(getattr(pytest.mark, name))


def pytest_runtest_setup(item):
    warnings.filterwarnings("ignore", category=DeprecationWarning)
