"""Placeholder expansion for component configuration templates.

Values such as ``"{{ocp_api_url}}"`` or ``"Bearer {{sa_token}}"`` are
expanded against the current :class:`GlobalConfig`. Placeholders that cannot
be resolved are left untouched so a partially configured deployment still
runs and the literal token shows up in the workload for diagnosis.
"""

import re
from typing import Dict, Iterable, List, Optional

from ..models.catalog import EnvVarTemplate
from ..models.state import GlobalConfig

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")


def _lookup(name: str, config: GlobalConfig) -> Optional[str]:
    builtin = {
        "ocp_api_url": config.ocp_api_url,
        "ocp_token": config.ocp_token,
        "sa_token": config.sa_token or config.ocp_token,
        "git_repo_url": config.git_repo_url,
        "namespace": config.namespace,
    }
    value = builtin.get(name)
    if value is None:
        value = config.secrets.get(name)
    return value or None


def resolve(value: str, config: GlobalConfig) -> str:
    """Substitute every recognised placeholder in ``value``."""

    def _replace(match: "re.Match[str]") -> str:
        resolved = _lookup(match.group(1), config)
        return resolved if resolved is not None else match.group(0)

    return PLACEHOLDER_PATTERN.sub(_replace, value)


def resolve_env_vars(
    templates: Iterable[EnvVarTemplate], config: GlobalConfig
) -> List[Dict[str, str]]:
    """Resolve a component's env var templates into runner parameters."""
    return [{"key": t.key, "value": resolve(t.value, config)} for t in templates]
