"""
Lightweight in-memory claims store for local development and tests.

Implements the same interface as src.database.postgres_real so the API can
run without a real database. It is NOT intended for production use.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional
import uuid


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Claim:
    id: str
    claim_number: str
    policy_number: str
    incident_date: date
    description: str
    type: str
    claimant_name: str
    estimated_amount: Optional[Decimal] = None
    status: str = "SUBMITTED"
    claimant_email: Optional[str] = None
    claimant_phone: Optional[str] = None
    additional_details: Optional[str] = None
    assigned_adjuster: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)


_IMMUTABLE = ("id", "created_at")
_CLAIM_FIELDS = {f.name for f in fields(Claim)}


class PostgresDB:
    """In-memory stand-in for the SQLAlchemy claims store. Insertion order is listing order."""

    def __init__(self) -> None:
        self._claims: Dict[str, Claim] = {}

    def create_tables(self) -> None:
        """No-op; kept so startup code can treat both stores alike."""
        return None

    def add_claim(self, data: Dict[str, Any]) -> Claim:
        values = {k: v for k, v in data.items() if k in _CLAIM_FIELDS and k not in _IMMUTABLE}
        claim = Claim(id=str(uuid.uuid4()), **values)
        self._claims[claim.id] = claim
        return claim

    def get_claim(self, claim_id: str) -> Optional[Claim]:
        return self._claims.get(claim_id)

    def get_claim_by_number(self, claim_number: str) -> Optional[Claim]:
        for claim in self._claims.values():
            if claim.claim_number == claim_number:
                return claim
        return None

    def list_claims(
        self,
        policy_number: Optional[str] = None,
        status: Optional[str] = None,
        claim_type: Optional[str] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[Claim]:
        claims = [
            c
            for c in self._claims.values()
            if (policy_number is None or c.policy_number == policy_number)
            and (status is None or c.status == status)
            and (claim_type is None or c.type == claim_type)
        ]
        end = None if limit is None else offset + limit
        return claims[offset:end]

    def count_claims(self, policy_number: Optional[str] = None) -> int:
        return len(self.list_claims(policy_number=policy_number))

    def update_claim(self, claim_id: str, data: Dict[str, Any]) -> Optional[Claim]:
        claim = self._claims.get(claim_id)
        if claim is None:
            return None
        for key, value in data.items():
            if key in _CLAIM_FIELDS and key not in _IMMUTABLE:
                setattr(claim, key, value)
        claim.updated_at = _utcnow()
        return claim

    def delete_claim(self, claim_id: str) -> bool:
        return self._claims.pop(claim_id, None) is not None
