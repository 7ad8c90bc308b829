"""Loader for the static component catalog."""

import logging
from pathlib import Path
from typing import Optional

import yaml

from ..models.catalog import Catalog

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent / "components.yaml"


def load_catalog(path: Optional[Path] = None) -> Catalog:
    """Load and validate a catalog YAML file (the bundled one by default)."""
    catalog_path = Path(path) if path else DEFAULT_CATALOG_PATH
    with open(catalog_path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    catalog = Catalog.model_validate(data)
    logger.info(
        f"Loaded catalog from {catalog_path}: "
        f"{len(catalog.components)} components, {len(catalog.offers)} offers"
    )
    return catalog


__all__ = ["DEFAULT_CATALOG_PATH", "load_catalog"]
