"""Filesystem storage for the durable orchestrator snapshot."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class JsonSnapshotStore:
    """Reads and overwrites a single JSON snapshot file.

    Durability is best effort: read and write failures are logged and never
    raised, so a broken disk cannot take down live orchestration state.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Optional[Dict[str, Any]]:
        """Return the stored snapshot, or None if absent or unreadable."""
        if not self.path.exists():
            return None

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load state from {self.path}: {e}")
            return None

        if not isinstance(data, dict):
            logger.error(f"Ignoring state file {self.path}: not a JSON object")
            return None

        logger.info(f"Loaded state from {self.path}")
        return data

    def save(self, snapshot: Dict[str, Any]) -> bool:
        """Overwrite the snapshot file. Returns False if the write failed."""
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=".state-", suffix=".json"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(snapshot, f, indent=2, default=str)
            os.replace(tmp_path, self.path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save state to {self.path}: {e}")
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            return False
