"""
Normalization of upstream policy API responses.

The upstream policy service sits behind an integration layer whose backends
do not agree on a payload shape. Observed variants:
- the canonical wrapper: {success, message, policies[], totalNumberofPolicies, ...}
- a wrapper whose policy entries use alternate field names
  (policyType / startDate / endDate instead of productType / effectiveDate / expirationDate)
- a legacy wrapper that only carries totalNumberofPolicies
- a bare policy object: {policyNumber, status, ...}

normalize_policy_response() turns any of these into a PolicyQueryResult.
Shape detection order is fixed: canonical wrapper, `policies` key,
`totalNumberofPolicies` key, `policyNumber` key, then empty.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import ValidationError

from src.integrations.contracts.policies import (
    ACCESS_DENIED,
    NOT_FOUND,
    PARSE_ERROR,
    VALIDATION_ERROR,
    PolicyQueryResult,
    PolicyRecord,
)

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

Body = Union[str, bytes, None]

# upstream key -> PolicyRecord attribute
_DIRECT_FIELDS = {
    "policyNumber": "policy_number",
    "customerId": "customer_id",
    "customerName": "customer_name",
    "email": "email",
    "status": "status",
    "createdDate": "created_date",
}

# PolicyRecord attribute -> upstream keys, most preferred first
_FALLBACK_FIELDS = {
    "product_type": ("productType", "policyType"),
    "effective_date": ("effectiveDate", "startDate"),
    "expiration_date": ("expirationDate", "endDate"),
}


class IntegrationResponseError(ValueError):
    def __init__(self, message: str, *, payload: Optional[Any] = None) -> None:
        super().__init__(message)
        self.payload = payload if payload is not None else {}


def normalize_policy_response(status_code: int, body: Body, request_id: Optional[str] = None) -> PolicyQueryResult:
    """
    Build a PolicyQueryResult from a raw upstream response.

    Never raises: bodies that cannot be interpreted produce a failed result
    with error code PARSE_ERROR.
    """
    logger.debug("Policy API response - status: %s, body: %s", status_code, body)

    try:
        if 200 <= status_code < 300:
            result = _parse_success_body(body)
            result.request_id = request_id
            return result
        return _parse_error_body(status_code, body)
    except Exception as exc:
        logger.error("Error parsing policy API response: %s", body, exc_info=True)
        return PolicyQueryResult.failure(f"Error parsing response: {exc}", PARSE_ERROR)


def validate_access_response(status_code: int) -> PolicyQueryResult:
    """Map the status of an access-validation call. The body is not consulted."""
    if status_code == 200:
        return PolicyQueryResult(success=True, message="Access validation successful")
    if status_code == 403:
        return PolicyQueryResult.failure("Access denied", ACCESS_DENIED)
    if status_code == 404:
        return PolicyQueryResult.failure("Policy not found", NOT_FOUND)
    return PolicyQueryResult.failure("Validation failed", VALIDATION_ERROR)


def _decode(body: Body) -> Any:
    if body is None:
        raise IntegrationResponseError("Response body is empty")
    if isinstance(body, bytes):
        body = body.decode("utf-8")
    return json.loads(body)


def _parse_success_body(body: Body) -> PolicyQueryResult:
    data = _decode(body)
    if not isinstance(data, dict):
        raise IntegrationResponseError(
            f"Expected a JSON object, got {type(data).__name__}",
            payload=data,
        )

    try:
        canonical = PolicyQueryResult.model_validate(data)
    except ValidationError as exc:
        logger.debug("Response is not in the canonical wrapper shape (%d errors)", exc.error_count())
        canonical = None

    if canonical is not None and canonical.policies is not None:
        return canonical

    return _parse_by_shape(data)


def _parse_by_shape(data: Dict[str, Any]) -> PolicyQueryResult:
    if "policies" in data:
        policies = _convert_policies(data.get("policies"))
        total = _read_total(data, default=len(policies))
        logger.debug("Parsed wrapper response with %d policies", len(policies))
    elif "totalNumberofPolicies" in data:
        policies = _convert_policies(data.get("policies"))
        total = _read_total(data, default=len(policies))
        logger.debug("Parsed legacy wrapper response (total=%d)", total)
    elif "policyNumber" in data:
        policies = [_to_policy_record(data)]
        total = 1
        logger.debug("Parsed single policy response")
    else:
        logger.warning("Unrecognised policy response shape; keys: %s", sorted(data.keys()))
        policies = []
        total = 0

    return PolicyQueryResult.ok(policies, total_count=total)


def _read_total(data: Dict[str, Any], default: int) -> int:
    value = data.get("totalNumberofPolicies")
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise IntegrationResponseError(f"totalNumberofPolicies must be an integer, got {value!r}", payload=data)
    return value


def _convert_policies(raw_policies: Any) -> List[PolicyRecord]:
    if not isinstance(raw_policies, list):
        return []

    policies: List[PolicyRecord] = []
    for raw in raw_policies:
        if not isinstance(raw, dict):
            raise IntegrationResponseError(f"Policy entry must be an object, got {type(raw).__name__}", payload=raw)
        policies.append(_to_policy_record(raw))
    return policies


def _to_policy_record(raw: Dict[str, Any]) -> PolicyRecord:
    fields: Dict[str, Any] = {}

    for key, attr in _DIRECT_FIELDS.items():
        if key in raw:
            fields[attr] = _as_optional_str(raw[key], key)

    for attr, keys in _FALLBACK_FIELDS.items():
        found, key, value = _first_present(raw, *keys)
        if found:
            fields[attr] = _as_optional_str(value, key)

    premium = raw.get("premiumAmount")
    if isinstance(premium, (int, float)) and not isinstance(premium, bool):
        if premium >= 0:
            fields["premium_amount"] = float(premium)
        else:
            logger.warning("Ignoring negative premiumAmount %s for policy %s", premium, raw.get("policyNumber"))

    return PolicyRecord(**fields)


def _first_present(data: Dict[str, Any], *keys: str) -> Tuple[bool, Optional[str], Any]:
    for key in keys:
        if key in data:
            return True, key, data[key]
    return False, None, None


def _as_optional_str(value: Any, key: str) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    raise IntegrationResponseError(f"Field '{key}' must be a string, got {type(value).__name__}")


def _parse_error_body(status_code: int, body: Body) -> PolicyQueryResult:
    message = f"API Error - Status: {status_code}"
    error_code = f"HTTP_{status_code}"

    try:
        data = _decode(body)
    except ValueError:
        logger.warning("Could not parse error response: %s", body)
        data = None

    if isinstance(data, dict):
        if isinstance(data.get("message"), str):
            message = data["message"]
        if isinstance(data.get("errorCode"), str):
            error_code = data["errorCode"]

    return PolicyQueryResult.failure(message, error_code)
