"""Extract values embedded in free-text step output.

Provisioning playbooks print JSON-ish debug output. Two fragments are
recognised, each a double-quoted key followed by a double-quoted value::

    "token": "eyJhbGciOi..."
    "route": "https://app-ns.apps.cluster.example.com"

Whitespace around the colon is ignored and the value may not contain a
double quote. When a fragment appears more than once the last occurrence
wins, matching the order in which the playbook reports it.
"""

import re
from dataclasses import dataclass
from typing import Optional

TOKEN_PATTERN = re.compile(r'"token"\s*:\s*"([^"]+)"')
ROUTE_PATTERN = re.compile(r'"route"\s*:\s*"([^"]+)"')

ERROR_KEYWORDS = ("error", "fatal:", "failed!", "traceback")
WARNING_KEYWORDS = ("warning", "[warn")


@dataclass(frozen=True)
class ScrapedValues:
    """Values found in one step's output."""

    token: Optional[str] = None
    route: Optional[str] = None


class StepOutputDecoder:
    """Stateless decoder for step output fragments."""

    @staticmethod
    def _last_match(pattern: "re.Pattern[str]", output: str) -> Optional[str]:
        matches = pattern.findall(output or "")
        return matches[-1] if matches else None

    @classmethod
    def extract_token(cls, output: str) -> Optional[str]:
        return cls._last_match(TOKEN_PATTERN, output)

    @classmethod
    def extract_route(cls, output: str) -> Optional[str]:
        return cls._last_match(ROUTE_PATTERN, output)

    @classmethod
    def decode(cls, output: str) -> ScrapedValues:
        """Return the token and route fragments found in ``output``."""
        return ScrapedValues(
            token=cls.extract_token(output),
            route=cls.extract_route(output),
        )

    @staticmethod
    def classify_line(line_text: str) -> str:
        """Return ``'error'``, ``'warning'``, or ``'debug'`` for log routing."""
        lower = line_text.lower()
        if any(kw in lower for kw in ERROR_KEYWORDS):
            return "error"
        if any(kw in lower for kw in WARNING_KEYWORDS):
            return "warning"
        return "debug"
