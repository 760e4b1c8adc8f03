"""
Integrations layer.
This package contains all code used to communicate with external systems:
- the upstream policy lookup API (list / details / validate / health)

Key rule:
- Services MUST NOT call external APIs directly.
- They go through a policy API client (under src/integrations/clients).
- We use the MOCK client during development and swap to the REAL_HTTP client when the API is available.

Switching implementations:
- The selection of mock vs real clients happens in ONE place (src/api/dependencies.py).
"""

from .contracts.claims import ClaimStatus, ClaimType, ClaimView
from .contracts.policies import (
    ACCESS_DENIED,
    API_ERROR,
    NOT_FOUND,
    PARSE_ERROR,
    VALIDATION_ERROR,
    PaginationMetadata,
    PolicyQueryResult,
    PolicyRecord,
)

__all__ = [
    # claims
    "ClaimStatus", "ClaimType", "ClaimView",
    # policies
    "PaginationMetadata", "PolicyQueryResult", "PolicyRecord",
    # error codes
    "ACCESS_DENIED", "API_ERROR", "NOT_FOUND", "PARSE_ERROR", "VALIDATION_ERROR",
]
