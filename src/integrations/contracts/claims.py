"""
Claims contracts.

ClaimType / ClaimStatus are the allowed values for the `type` and `status`
columns of insurance_claims. ClaimView is the JSON representation returned
by the claims API (camelCase keys).
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_serializer
from pydantic.alias_generators import to_camel


class ClaimType(str, Enum):
    AUTO = "AUTO"
    HOME = "HOME"
    HEALTH = "HEALTH"
    LIFE = "LIFE"
    TRAVEL = "TRAVEL"
    LIABILITY = "LIABILITY"
    BUSINESS = "BUSINESS"
    PROPERTY = "PROPERTY"
    OTHER = "OTHER"


class ClaimStatus(str, Enum):
    SUBMITTED = "SUBMITTED"
    UNDER_REVIEW = "UNDER_REVIEW"
    PENDING_DOCUMENTS = "PENDING_DOCUMENTS"
    APPROVED = "APPROVED"
    PARTIAL_APPROVED = "PARTIAL_APPROVED"
    REJECTED = "REJECTED"
    CLOSED = "CLOSED"
    APPEALED = "APPEALED"


class ClaimView(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    claim_number: str
    policy_number: str
    incident_date: date
    description: str
    estimated_amount: Optional[Decimal] = None
    type: ClaimType
    status: ClaimStatus
    claimant_name: str
    claimant_email: Optional[str] = None
    claimant_phone: Optional[str] = None
    additional_details: Optional[str] = None
    assigned_adjuster: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_serializer("estimated_amount")
    def _amount_as_float(self, value: Optional[Decimal]) -> Optional[float]:
        return float(value) if value is not None else None

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
