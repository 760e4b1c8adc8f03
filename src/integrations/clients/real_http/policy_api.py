"""
Real Policy API HTTP Client.

Purpose:
- Calls the upstream policy lookup API (list, details, validate, health)
- Hands every response to normalize_policy_response() so callers only ever
  see PolicyQueryResult

Implementation notes:
- Synchronous httpx.Client; one request per call, no retries
- Every request carries a fresh X-Request-ID
- Any exception raised while calling becomes a failed result with API_ERROR

Important:
- Keep this client as the ONLY place where policy API HTTP calls are made.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional

import httpx

from src.integrations.contracts.policies import API_ERROR, PolicyQueryResult, pagination_for
from src.integrations.policy.response_wrappers import (
    REQUEST_ID_HEADER,
    normalize_policy_response,
    validate_access_response,
)
from src.utils.config_loader import PolicyApiConfig

logger = logging.getLogger(__name__)

USER_AGENT = "policy-lookup-client/1.0"

LIST_PATH = "/api/v1/policy/list"
DETAILS_PATH = "/api/v1/policy/details/{policy_number}"
VALIDATE_PATH = "/api/v1/policy/validate"
HEALTH_PATH = "/health/check"


class PolicyApiClient:
    def __init__(self, config: Optional[PolicyApiConfig] = None, http_client: Optional[httpx.Client] = None) -> None:
        self.config = config or PolicyApiConfig()
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(
            base_url=self.config.base_url,
            timeout=httpx.Timeout(
                self.config.read_timeout_ms / 1000.0,
                connect=self.config.connect_timeout_ms / 1000.0,
            ),
            verify=self.config.verify_ssl,
        )
        if not self.config.enable_logging:
            logger.setLevel(logging.WARNING)

    def __enter__(self) -> "PolicyApiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def default_headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
            "X-Client-ID": self.config.client_id,
        }
        if self.config.has_api_key():
            headers["X-API-Key"] = self.config.api_key
        if self.config.has_bearer_token():
            headers["Authorization"] = f"Bearer {self.config.bearer_token}"
        return headers

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        headers = self.default_headers()
        request_id = str(uuid.uuid4())
        headers[REQUEST_ID_HEADER] = request_id
        logger.debug(f"GET {path} params={params} request_id={request_id}")

        auth = None
        if self.config.has_basic_auth():
            auth = httpx.BasicAuth(self.config.username, self.config.password)

        return self._client.get(path, params=params, headers=headers, auth=auth)

    def _list(self, params: Dict[str, Any], page: Optional[int], size: Optional[int]) -> PolicyQueryResult:
        if page is not None:
            params["page"] = page
        if size is not None:
            params["size"] = size

        response = self._get(LIST_PATH, params=params)
        result = normalize_policy_response(
            response.status_code,
            response.content,
            request_id=response.headers.get(REQUEST_ID_HEADER),
        )
        if result.success and result.pagination is None:
            result.pagination = pagination_for(page, size, result.total_count)
        return result

    def get_policies_by_email(self, email: str, page: Optional[int] = None, size: Optional[int] = None) -> PolicyQueryResult:
        try:
            return self._list({"emailId": email}, page, size)
        except Exception as exc:
            logger.exception(f"Error fetching policies for email: {email}")
            return PolicyQueryResult.failure(f"Error fetching policies: {exc}", API_ERROR)

    def get_policies_by_customer_id(
        self, customer_id: str, page: Optional[int] = None, size: Optional[int] = None
    ) -> PolicyQueryResult:
        try:
            return self._list({"customerId": customer_id}, page, size)
        except Exception as exc:
            logger.exception(f"Error fetching policies for customer: {customer_id}")
            return PolicyQueryResult.failure(f"Error fetching policies: {exc}", API_ERROR)

    def search_policies(self, search_term: str, page: Optional[int] = None, size: Optional[int] = None) -> PolicyQueryResult:
        try:
            return self._list({"search": search_term}, page, size)
        except Exception as exc:
            logger.exception(f"Error searching policies with term: {search_term}")
            return PolicyQueryResult.failure(f"Error searching policies: {exc}", API_ERROR)

    def get_policies_by_status(self, status: str, page: Optional[int] = None, size: Optional[int] = None) -> PolicyQueryResult:
        try:
            return self._list({"status": status}, page, size)
        except Exception as exc:
            logger.exception(f"Error fetching policies by status: {status}")
            return PolicyQueryResult.failure(f"Error fetching policies: {exc}", API_ERROR)

    def get_active_policies(self, page: Optional[int] = None, size: Optional[int] = None) -> PolicyQueryResult:
        try:
            return self._list({"status": "ACTIVE"}, page, size)
        except Exception as exc:
            logger.exception("Error fetching active policies")
            return PolicyQueryResult.failure(f"Error fetching active policies: {exc}", API_ERROR)

    def get_policy_by_number(self, policy_number: str) -> PolicyQueryResult:
        try:
            response = self._get(DETAILS_PATH.format(policy_number=policy_number))
            return normalize_policy_response(
                response.status_code,
                response.content,
                request_id=response.headers.get(REQUEST_ID_HEADER),
            )
        except Exception as exc:
            logger.exception(f"Error fetching policy by number: {policy_number}")
            return PolicyQueryResult.failure(f"Error fetching policy: {exc}", API_ERROR)

    def validate_policy_access(self, policy_number: str, customer_id: str) -> PolicyQueryResult:
        try:
            response = self._get(VALIDATE_PATH, params={"policyNumber": policy_number, "customerId": customer_id})
            return validate_access_response(response.status_code)
        except Exception as exc:
            logger.exception(f"Error validating policy access - Policy: {policy_number}, Customer: {customer_id}")
            return PolicyQueryResult.failure(f"Error validating access: {exc}", API_ERROR)

    def is_service_healthy(self) -> bool:
        try:
            return self._get(HEALTH_PATH).status_code == 200
        except Exception:
            logger.exception("Health check failed")
            return False
