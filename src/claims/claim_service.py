"""
Claims service.

CRUD over insurance claims on top of a claims store (in-memory or
SQLAlchemy, see src/database) with policy checks delegated to the policy
lookup facade.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from src.claims.exceptions import PolicyValidationError, ResourceNotFoundError
from src.claims.validation import validate_claim_payload
from src.integrations.contracts.claims import ClaimStatus, ClaimType
from src.integrations.contracts.policies import PaginationMetadata, PolicyRecord

logger = logging.getLogger(__name__)


class ClaimPage:
    """One page of claims plus its pagination metadata."""

    def __init__(self, items: List[Any], pagination: PaginationMetadata) -> None:
        self.items = items
        self.pagination = pagination


class ClaimService:
    def __init__(self, db, policy_service) -> None:
        self.db = db
        self.policy_service = policy_service

    def create_claim(self, payload: Dict[str, Any]):
        data = validate_claim_payload(payload)
        logger.info(f"Creating new claim with policy number: {data['policy_number']}")

        if not self.policy_service.validate_policy_access(data["policy_number"], data["claimant_email"]):
            logger.warning(f"Policy validation failed for claim {data['claim_number']}")
            raise PolicyValidationError("Invalid policy number or email")

        if data["status"] is None:
            data["status"] = ClaimStatus.SUBMITTED.value
        return self.db.add_claim(data)

    def update_claim(self, claim_id: str, payload: Dict[str, Any]):
        logger.info(f"Updating claim with ID: {claim_id}")
        data = validate_claim_payload(payload)
        # full replacement: an omitted status resets to SUBMITTED
        if data["status"] is None:
            data["status"] = ClaimStatus.SUBMITTED.value

        claim = self.db.update_claim(claim_id, data)
        if claim is None:
            raise ResourceNotFoundError(f"Claim not found with id: {claim_id}")
        return claim

    def get_claim(self, claim_id: str):
        logger.debug(f"Fetching claim with ID: {claim_id}")
        return self.db.get_claim(claim_id)

    def get_claim_by_number(self, claim_number: str):
        logger.debug(f"Fetching claim with number: {claim_number}")
        return self.db.get_claim_by_number(claim_number)

    def get_claims_by_policy_number(self, policy_number: str) -> List[Any]:
        logger.debug(f"Fetching claims for policy number: {policy_number}")
        return self.db.list_claims(policy_number=policy_number)

    def get_claims_by_policy_number_paged(self, policy_number: str, page: int, size: int) -> ClaimPage:
        items = self.db.list_claims(policy_number=policy_number, offset=page * size, limit=size)
        total = self.db.count_claims(policy_number=policy_number)
        return ClaimPage(items, PaginationMetadata(page=page, size=size, total_elements=total))

    def get_all_claims(self) -> List[Any]:
        logger.debug("Fetching all claims")
        return self.db.list_claims()

    def get_all_claims_paged(self, page: int, size: int) -> ClaimPage:
        items = self.db.list_claims(offset=page * size, limit=size)
        return ClaimPage(items, PaginationMetadata(page=page, size=size, total_elements=self.db.count_claims()))

    def get_claims_by_status(self, status: ClaimStatus) -> List[Any]:
        logger.debug(f"Fetching claims with status: {status.value}")
        return self.db.list_claims(status=status.value)

    def get_claims_by_type(self, claim_type: ClaimType) -> List[Any]:
        logger.debug(f"Fetching claims of type: {claim_type.value}")
        return self.db.list_claims(claim_type=claim_type.value)

    def delete_claim(self, claim_id: str) -> None:
        logger.info(f"Deleting claim with ID: {claim_id}")
        if not self.db.delete_claim(claim_id):
            raise ResourceNotFoundError(f"Claim not found with id: {claim_id}")

    def validate_policy(self, policy_number: str, email: str) -> bool:
        return self.policy_service.validate_policy_access(policy_number, email)

    def get_policy_details(self, policy_number: str, email: str) -> Optional[PolicyRecord]:
        logger.info(f"Fetching policy details for policy number: {policy_number} and email: {email}")
        return self.policy_service.get_policy_details(policy_number, email)
