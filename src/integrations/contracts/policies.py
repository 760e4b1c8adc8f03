"""
Policy lookup contracts.

Canonical shapes for data coming back from the upstream policy API:
- PolicyRecord: one policy, as seen by callers of the lookup layer
- PolicyQueryResult: the result of one upstream call (success or failure)
- PaginationMetadata: page bookkeeping, also reused for claims listings

Wire names are camelCase (the upstream uses `policyNumber`,
`totalNumberofPolicies`, ...); Python attributes are snake_case.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator
from pydantic.alias_generators import to_camel

# Error codes produced by the lookup layer. Upstream services may supply
# their own codes, and non-2xx responses without one map to HTTP_<status>.
API_ERROR = "API_ERROR"
PARSE_ERROR = "PARSE_ERROR"
ACCESS_DENIED = "ACCESS_DENIED"
NOT_FOUND = "NOT_FOUND"
VALIDATION_ERROR = "VALIDATION_ERROR"

VALID_POLICY_STATUSES = ("ACTIVE", "EXPIRED", "CANCELLED", "PENDING", "SUSPENDED")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PolicyRecord(BaseModel):
    """A single policy. Dates are kept as the ISO strings the upstream sent."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    policy_number: Optional[str] = None
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    email: Optional[str] = None
    product_type: Optional[str] = None
    status: Optional[str] = None
    premium_amount: Optional[float] = Field(default=None, ge=0, strict=True)
    effective_date: Optional[str] = None
    expiration_date: Optional[str] = None
    created_date: Optional[str] = None

    def _status_is(self, value: str) -> bool:
        return (self.status or "").upper() == value

    @property
    def is_active(self) -> bool:
        return self._status_is("ACTIVE")

    @property
    def is_expired(self) -> bool:
        return self._status_is("EXPIRED")

    @property
    def is_cancelled(self) -> bool:
        return self._status_is("CANCELLED")

    @property
    def is_pending(self) -> bool:
        return self._status_is("PENDING")

    def has_valid_policy_number(self) -> bool:
        return bool(self.policy_number and self.policy_number.strip())

    def has_valid_email(self) -> bool:
        return bool(self.email) and "@" in self.email and "." in self.email

    def has_valid_premium_amount(self) -> bool:
        return self.premium_amount is not None and self.premium_amount > 0


class PaginationMetadata(BaseModel):
    """
    Page bookkeeping. Only page, size and total_elements are stored; the
    derived values are computed on access, so upstream-supplied totalPages /
    hasNext / hasPrevious are ignored.
    """

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
        validate_assignment=True,
    )

    page: int = Field(default=0, ge=0)
    size: int = Field(default=20, ge=1)
    total_elements: int = Field(default=0, ge=0)

    @computed_field(alias="totalPages")  # type: ignore[prop-decorator]
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_elements / self.size)

    @computed_field(alias="hasNext")  # type: ignore[prop-decorator]
    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages - 1

    @computed_field(alias="hasPrevious")  # type: ignore[prop-decorator]
    @property
    def has_previous(self) -> bool:
        return self.page > 0


def pagination_for(page: Optional[int], size: Optional[int], total_elements: int) -> Optional[PaginationMetadata]:
    """Pagination for a page the caller asked for; None when page/size are missing or out of range."""
    if page is None or size is None or page < 0 or size < 1:
        return None
    return PaginationMetadata(page=page, size=size, total_elements=total_elements)


class PolicyQueryResult(BaseModel):
    """
    Outcome of one call to the upstream policy API.

    This is also the canonical upstream wrapper shape, so unknown keys are
    rejected and `success` defaults to true when the upstream omits it.
    """

    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    success: bool = Field(default=True, strict=True)
    message: Optional[str] = None
    error_code: Optional[str] = None
    total_count: int = Field(default=0, ge=0, strict=True, alias="totalNumberofPolicies")
    policies: Optional[List[PolicyRecord]] = None
    pagination: Optional[PaginationMetadata] = None
    request_id: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def _check_consistency(self) -> "PolicyQueryResult":
        if self.success and self.error_code is not None:
            raise ValueError("a successful result cannot carry an error code")
        if self.policies is not None and "total_count" not in self.model_fields_set:
            self.total_count = len(self.policies)
        return self

    @classmethod
    def ok(cls, policies: List[PolicyRecord], total_count: Optional[int] = None) -> "PolicyQueryResult":
        if total_count is None:
            return cls(policies=policies, message="Policies retrieved successfully")
        return cls(policies=policies, total_count=total_count, message="Policies retrieved successfully")

    @classmethod
    def failure(cls, message: str, error_code: str) -> "PolicyQueryResult":
        return cls(success=False, message=message, error_code=error_code)

    @property
    def has_error(self) -> bool:
        return not self.success or self.error_code is not None

    @property
    def is_empty(self) -> bool:
        return not self.policies

    @property
    def policy_count(self) -> int:
        return len(self.policies) if self.policies is not None else 0

    @property
    def has_pagination(self) -> bool:
        return self.pagination is not None
