"""
Mock Policy API Client.

Purpose:
- Provides a fake upstream policy API for development/testing
- Does NOT make network calls
- Builds upstream-style JSON bodies (in the same mixed shapes the real API
  returns) and runs them through normalize_policy_response()

Swap:
Replace with clients/real_http/policy_api.py by setting INTEGRATIONS_MODE=real.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from src.integrations.contracts.policies import PolicyQueryResult, pagination_for
from src.integrations.policy.response_wrappers import normalize_policy_response, validate_access_response

logger = logging.getLogger(__name__)

# Raw upstream entries. Some backends send policyType/startDate/endDate.
SAMPLE_POLICIES: List[Dict[str, Any]] = [
    {
        "policyNumber": "POL-001",
        "customerId": "CUST-001",
        "customerName": "John Doe",
        "email": "john.doe@example.com",
        "productType": "AUTO",
        "status": "ACTIVE",
        "premiumAmount": 1200.0,
        "effectiveDate": "2025-01-01",
        "expirationDate": "2026-12-31",
        "createdDate": "2024-12-15",
    },
    {
        "policyNumber": "POL-002",
        "customerId": "CUST-002",
        "customerName": "Jane Smith",
        "email": "jane.smith@example.com",
        "policyType": "HOME",
        "status": "ACTIVE",
        "premiumAmount": 850.5,
        "startDate": "2025-03-01",
        "endDate": "2027-02-28",
    },
    {
        "policyNumber": "POL-003",
        "customerId": "CUST-003",
        "customerName": "Robert Brown",
        "email": "robert.brown@example.com",
        "productType": "HEALTH",
        "status": "ACTIVE",
        "premiumAmount": 3400,
        "effectiveDate": "2024-06-01",
        "expirationDate": "2026-05-31",
        "createdDate": "2024-05-20",
    },
    {
        "policyNumber": "POL-004",
        "customerId": "CUST-001",
        "customerName": "John Doe",
        "email": "john.doe@example.com",
        "productType": "TRAVEL",
        "status": "EXPIRED",
        "premiumAmount": 95.0,
        "effectiveDate": "2023-07-01",
        "expirationDate": "2023-07-21",
        "createdDate": "2023-06-25",
    },
]


class MockPolicyApiClient:
    """Same interface as PolicyApiClient, backed by an in-memory list of raw policies."""

    def __init__(self, policies: Optional[List[Dict[str, Any]]] = None, healthy: bool = True) -> None:
        self.policies = [dict(p) for p in (policies if policies is not None else SAMPLE_POLICIES)]
        self.healthy = healthy

    def __enter__(self) -> "MockPolicyApiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        return None

    def _respond(self, matches: List[Dict[str, Any]], page: Optional[int], size: Optional[int]) -> PolicyQueryResult:
        total = len(matches)
        pagination = pagination_for(page, size, total)
        if pagination is not None:
            matches = matches[page * size:(page + 1) * size]

        body = json.dumps({"success": True, "policies": matches, "totalNumberofPolicies": total})
        result = normalize_policy_response(200, body)
        if result.success:
            result.pagination = pagination
        return result

    def _matching(self, key: str, value: str) -> List[Dict[str, Any]]:
        wanted = value.lower()
        return [p for p in self.policies if str(p.get(key, "")).lower() == wanted]

    def get_policies_by_email(self, email: str, page: Optional[int] = None, size: Optional[int] = None) -> PolicyQueryResult:
        return self._respond(self._matching("email", email), page, size)

    def get_policies_by_customer_id(
        self, customer_id: str, page: Optional[int] = None, size: Optional[int] = None
    ) -> PolicyQueryResult:
        return self._respond(self._matching("customerId", customer_id), page, size)

    def search_policies(self, search_term: str, page: Optional[int] = None, size: Optional[int] = None) -> PolicyQueryResult:
        term = search_term.lower()
        matches = [
            p
            for p in self.policies
            if any(term in str(v).lower() for v in p.values() if isinstance(v, str))
        ]
        return self._respond(matches, page, size)

    def get_policies_by_status(self, status: str, page: Optional[int] = None, size: Optional[int] = None) -> PolicyQueryResult:
        return self._respond(self._matching("status", status), page, size)

    def get_active_policies(self, page: Optional[int] = None, size: Optional[int] = None) -> PolicyQueryResult:
        return self.get_policies_by_status("ACTIVE", page, size)

    def get_policy_by_number(self, policy_number: str) -> PolicyQueryResult:
        matches = self._matching("policyNumber", policy_number)
        if not matches:
            body = json.dumps({"message": f"Policy {policy_number} not found", "errorCode": "NOT_FOUND"})
            return normalize_policy_response(404, body)
        # the details endpoint returns the bare policy object
        return normalize_policy_response(200, json.dumps(matches[0]))

    def validate_policy_access(self, policy_number: str, customer_id: str) -> PolicyQueryResult:
        matches = self._matching("policyNumber", policy_number)
        if not matches:
            return validate_access_response(404)

        wanted = (customer_id or "").lower()
        policy = matches[0]
        if wanted in (str(policy.get("customerId", "")).lower(), str(policy.get("email", "")).lower()):
            return validate_access_response(200)
        logger.info(f"Mock access check denied for policy {policy_number}")
        return validate_access_response(403)

    def is_service_healthy(self) -> bool:
        return self.healthy
