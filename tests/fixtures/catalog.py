"""Small catalogs covering single-step, multi-step and required components."""

import copy
from typing import Any, Dict

import pytest

from deployer_api.models.catalog import Catalog

SAMPLE_CATALOG: Dict[str, Any] = {
    "categories": {"core": {"label": "Core", "color": "#4CAF50"}},
    "components": [
        {
            "id": "alpha",
            "name": "Alpha",
            "order": 1,
            "playbook": "deploy-alpha.yml",
            "context_dir": "alpha",
            "port": 8080,
        },
        {
            # Runs first in a full schedule despite being listed second
            "id": "beta",
            "name": "Beta",
            "order": 0,
            "namespace": "beta-ns",
            "port": 9000,
            "env_vars": [
                {"key": "API_URL", "value": "{{ocp_api_url}}"},
                {"key": "BEARER", "value": "{{sa_token}}"},
                {"key": "API_KEY", "value": "{{api_key}}"},
            ],
            "sub_steps": [
                {"id": "prep", "name": "Prep", "playbook": "prep.yml"},
                {
                    "id": "rbac",
                    "name": "RBAC",
                    "playbook": "rbac.yml",
                    "purpose": "access-control",
                    "extra_vars": {"sa_name": "beta-sa"},
                },
                {
                    "id": "app",
                    "name": "Beta App",
                    "playbook": "deploy-beta.yml",
                    "context_dir": "beta",
                },
            ],
        },
        {
            "id": "gamma",
            "name": "Gamma",
            "order": 2,
            "playbook": "deploy-gamma.yml",
            "context_dir": "gamma",
            "required": True,
            "env_vars": [
                {"key": "K8S_API_URL", "value": "{{ocp_api_url}}"},
                {"key": "K8S_BEARER_TOKEN", "value": "{{sa_token}}"},
            ],
        },
    ],
    "offers": [
        {
            "id": "pair",
            "name": "Pair",
            "component_ids": ["alpha", "beta"],
        }
    ],
}


@pytest.fixture
def sample_catalog_data() -> Dict[str, Any]:
    """Raw catalog dict; tests may mutate their own copy."""
    return copy.deepcopy(SAMPLE_CATALOG)


@pytest.fixture
def sample_catalog(sample_catalog_data) -> Catalog:
    """
    Validated three-component catalog.

    - alpha: single primary step, default port
    - beta: aux step, access-control step, primary step with env vars
    - gamma: single step, required (stops batches on failure), reads the
      cluster token from K8S_BEARER_TOKEN
    """
    return Catalog.model_validate(sample_catalog_data)
