"""Backend validation for claim create/update payloads.

The API accepts claims as camelCase JSON objects. These validators check that
required fields are present and well-formed, and convert the payload to the
snake_case values the claims stores expect.

On validation failure, raise `FormValidationError` so the API can return HTTP 400
with structured `field_errors`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, Optional

from src.integrations.contracts.claims import ClaimStatus, ClaimType


@dataclass
class FormValidationError(Exception):
    """Exception raised for payload validation failures.

    Attributes:
        field_errors: mapping of field name -> human-readable error message.
        message: optional top-level message.
    """

    field_errors: Dict[str, str]
    message: str = "Validation failed"

    def __str__(self) -> str:  # pragma: no cover
        return self.message


def _as_str(v: Any) -> str:
    return "" if v is None else str(v)


def _strip(v: Any) -> str:
    return _as_str(v).strip()


def add_error(errors: Dict[str, str], field: str, message: str) -> None:
    if field not in errors:
        errors[field] = message


def require_str(payload: Dict[str, Any], field: str, errors: Dict[str, str], *, label: Optional[str] = None) -> str:
    value = _strip(payload.get(field))
    if not value:
        add_error(errors, field, f"{label or field} is required")
    return value


def optional_str(payload: Dict[str, Any], field: str) -> Optional[str]:
    value = _strip(payload.get(field))
    return value or None


def validate_length(value: Optional[str], errors: Dict[str, str], field: str, *, min_len: int = 0, max_len: int, message: str) -> None:
    if value is None:
        return
    if not (min_len <= len(value) <= max_len):
        add_error(errors, field, message)


_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_PHONE_RE = re.compile(r"^\+?[0-9\s-]{10,15}$")


def validate_email(value: Optional[str], errors: Dict[str, str], field: str = "claimantEmail") -> Optional[str]:
    if value is None:
        return None
    if not _EMAIL_RE.match(value):
        add_error(errors, field, "Email must be valid")
    return value


def validate_phone(value: Optional[str], errors: Dict[str, str], field: str = "claimantPhone") -> Optional[str]:
    if value is None:
        return None
    if not _PHONE_RE.match(value):
        add_error(errors, field, "Phone number must be valid")
    return value


def validate_date_iso(
    value: Any, errors: Dict[str, str], field: str, *, label: str, required: bool = True, not_future: bool = False
) -> Optional[date]:
    raw = _strip(value)
    if not raw:
        if required:
            add_error(errors, field, f"{label} is required")
        return None
    try:
        d = date.fromisoformat(raw)
    except ValueError:
        add_error(errors, field, f"{label} must be a valid date (YYYY-MM-DD)")
        return None
    if not_future and d > date.today():
        add_error(errors, field, f"{label} cannot be in the future")
    return d


def validate_in(value: Any, allowed: Iterable[str], errors: Dict[str, str], field: str, *, label: str, required: bool = True) -> Optional[str]:
    raw = _strip(value).upper()
    if not raw:
        if required:
            add_error(errors, field, f"{label} is required")
        return None
    if raw not in set(allowed):
        add_error(errors, field, f"Invalid {label.lower()}: {raw}")
        return None
    return raw


_MAX_AMOUNT = Decimal("99999999.99")


def parse_amount(payload: Dict[str, Any], field: str, errors: Dict[str, str]) -> Optional[Decimal]:
    """Optional non-negative money amount with at most two decimal places."""
    raw = payload.get(field)
    if raw is None or _strip(raw) == "":
        return None
    if isinstance(raw, bool):
        add_error(errors, field, "Estimated amount must be a number")
        return None
    try:
        val = Decimal(_strip(raw))
    except InvalidOperation:
        add_error(errors, field, "Estimated amount must be a number")
        return None
    if not val.is_finite():
        add_error(errors, field, "Estimated amount must be a number")
        return None
    if val < 0:
        add_error(errors, field, "Estimated amount must be positive or zero")
    elif val > _MAX_AMOUNT or val.as_tuple().exponent < -2:
        add_error(errors, field, "Estimated amount must have at most 8 digits and 2 decimal places")
    return val


def raise_if_errors(errors: Dict[str, str], message: str = "Validation failed") -> None:
    if errors:
        raise FormValidationError(field_errors=errors, message=message)


def validate_claim_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Validate a camelCase claim payload and return snake_case column values.

    `status` is optional (the service defaults it); unknown keys are ignored.
    """
    if not isinstance(payload, dict):
        raise FormValidationError(field_errors={"body": "Request body must be a JSON object"})

    errors: Dict[str, str] = {}

    claim_number = require_str(payload, "claimNumber", errors, label="Claim number")
    policy_number = require_str(payload, "policyNumber", errors, label="Policy number")
    incident_date = validate_date_iso(
        payload.get("incidentDate"), errors, "incidentDate", label="Incident date", not_future=True
    )

    description = require_str(payload, "description", errors, label="Description")
    if description:
        validate_length(
            description, errors, "description", min_len=10, max_len=500,
            message="Description must be between 10 and 500 characters",
        )

    estimated_amount = parse_amount(payload, "estimatedAmount", errors)
    claim_type = validate_in(payload.get("type"), [t.value for t in ClaimType], errors, "type", label="Claim type")
    status = validate_in(
        payload.get("status"), [s.value for s in ClaimStatus], errors, "status", label="Claim status", required=False
    )
    claimant_name = require_str(payload, "claimantName", errors, label="Claimant name")
    claimant_email = validate_email(optional_str(payload, "claimantEmail"), errors)
    claimant_phone = validate_phone(optional_str(payload, "claimantPhone"), errors)

    additional_details = optional_str(payload, "additionalDetails")
    validate_length(
        additional_details, errors, "additionalDetails", max_len=5000,
        message="Additional details must be at most 5000 characters",
    )

    raise_if_errors(errors)

    return {
        "claim_number": claim_number,
        "policy_number": policy_number,
        "incident_date": incident_date,
        "description": description,
        "estimated_amount": estimated_amount,
        "type": claim_type,
        "status": status,
        "claimant_name": claimant_name,
        "claimant_email": claimant_email,
        "claimant_phone": claimant_phone,
        "additional_details": additional_details,
        "assigned_adjuster": optional_str(payload, "assignedAdjuster"),
    }
