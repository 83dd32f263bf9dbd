# =============================================================================
# core/models.py  -  Data Models (the "nouns" of the system)
# =============================================================================
#
# Two things flow through this system:
#
#   Endpoint    - which openFDA dataset a call targets.  A closed set of
#                 seven; anything else is rejected before a URL is built.
#   FdaRequest  - one validated call: endpoint + ordered query parameters.
#                 Built per tool invocation, consumed immediately, never kept.
#
# The API key is deliberately NOT part of FdaRequest.  It is process
# configuration (core/config.py), added when the URL is built.
# =============================================================================

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Endpoint(str, Enum):
    """The openFDA datasets this server can query."""

    DRUG_EVENT = "/drug/event"
    DRUG_LABEL = "/drug/label"
    DRUG_ENFORCEMENT = "/drug/enforcement"
    DEVICE_EVENT = "/device/event"
    DEVICE_ENFORCEMENT = "/device/enforcement"
    FOOD_EVENT = "/food/event"
    FOOD_ENFORCEMENT = "/food/enforcement"


# Every endpoint path is suffixed with this to form the URL path.
ENDPOINT_EXTENSION = ".json"


# -----------------------------------------------------------------------------
# Limit bounds
# -----------------------------------------------------------------------------
# openFDA caps search results at 100 per page and count buckets at 1000.
# We reject anything outside these before dispatch rather than letting the
# upstream clamp or error on it.
# -----------------------------------------------------------------------------
MIN_LIMIT = 1
MAX_SEARCH_LIMIT = 100
MAX_COUNT_LIMIT = 1000
MIN_SKIP = 0


@dataclass(frozen=True)
class FdaRequest:
    """A single validated openFDA call.

    params is an ordered tuple of (name, value) pairs.  A value of None means
    "leave this parameter out of the URL".  Ordering is preserved so the same
    request always produces the same URL.
    """

    endpoint: Endpoint
    params: tuple[tuple[str, Optional[str]], ...] = field(default_factory=tuple)

    def param(self, name: str) -> Optional[str]:
        """Return the value for a parameter name, or None if absent."""
        for key, value in self.params:
            if key == name:
                return value
        return None
