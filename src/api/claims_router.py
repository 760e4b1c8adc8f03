"""
Claims API endpoints.

Every response uses the envelope from src.api.responses. Static paths are
registered before `/claims/{claim_id}` so they are not captured by it.
"""

import logging
from typing import Any, List

from fastapi import APIRouter, Body, Depends, Query

from src.api.dependencies import get_claim_service
from src.api.responses import created, error, ok
from src.claims.claim_service import ClaimPage, ClaimService
from src.claims.exceptions import ResourceNotFoundError
from src.integrations.contracts.claims import ClaimStatus, ClaimType, ClaimView

logger = logging.getLogger(__name__)

api = APIRouter(prefix="/claims", tags=["Claims"])

DEFAULT_CLAIMS_PAGE_SIZE = 10


def _view(claim) -> dict:
    return ClaimView.model_validate(claim).to_json()


def _views(claims: List[Any]) -> List[dict]:
    return [_view(c) for c in claims]


def _page(result: ClaimPage) -> dict:
    body = {"content": _views(result.items)}
    body.update(result.pagination.model_dump(by_alias=True))
    return body


@api.post("")
def create_claim(payload: Any = Body(...), service: ClaimService = Depends(get_claim_service)):
    logger.info(f"Request received to create claim for policy: {payload.get('policyNumber') if isinstance(payload, dict) else None}")
    claim = service.create_claim(payload)
    return created(_view(claim), "Claim created successfully")


@api.get("")
def get_all_claims(service: ClaimService = Depends(get_claim_service)):
    return ok(_views(service.get_all_claims()), "Claims retrieved successfully")


@api.get("/pageable")
def get_all_claims_paged(
    page: int = Query(0, ge=0),
    size: int = Query(DEFAULT_CLAIMS_PAGE_SIZE, ge=1, le=100),
    service: ClaimService = Depends(get_claim_service),
):
    return ok(_page(service.get_all_claims_paged(page, size)), "Claims retrieved successfully")


@api.get("/number/{claim_number}")
def get_claim_by_number(claim_number: str, service: ClaimService = Depends(get_claim_service)):
    claim = service.get_claim_by_number(claim_number)
    if claim is None:
        raise ResourceNotFoundError(f"Claim not found with number: {claim_number}")
    return ok(_view(claim), "Claim retrieved successfully")


@api.get("/policy/{policy_number}")
def get_claims_by_policy_number(policy_number: str, service: ClaimService = Depends(get_claim_service)):
    return ok(_views(service.get_claims_by_policy_number(policy_number)), "Claims retrieved successfully")


@api.get("/policy/{policy_number}/pageable")
def get_claims_by_policy_number_paged(
    policy_number: str,
    page: int = Query(0, ge=0),
    size: int = Query(DEFAULT_CLAIMS_PAGE_SIZE, ge=1, le=100),
    service: ClaimService = Depends(get_claim_service),
):
    result = service.get_claims_by_policy_number_paged(policy_number, page, size)
    return ok(_page(result), "Claims retrieved successfully")


@api.get("/status/{claim_status}")
def get_claims_by_status(claim_status: str, service: ClaimService = Depends(get_claim_service)):
    try:
        parsed = ClaimStatus(claim_status.upper())
    except ValueError:
        return error(400, f"Invalid claim status: {claim_status}")
    return ok(_views(service.get_claims_by_status(parsed)), "Claims retrieved successfully")


@api.get("/type/{claim_type}")
def get_claims_by_type(claim_type: str, service: ClaimService = Depends(get_claim_service)):
    try:
        parsed = ClaimType(claim_type.upper())
    except ValueError:
        return error(400, f"Invalid claim type: {claim_type}")
    return ok(_views(service.get_claims_by_type(parsed)), "Claims retrieved successfully")


@api.get("/policy-details/{policy_number}")
def get_policy_details(policy_number: str, email: str = Query(...), service: ClaimService = Depends(get_claim_service)):
    policy = service.get_policy_details(policy_number, email)
    if policy is None:
        raise ResourceNotFoundError(f"Policy not found with number: {policy_number}")
    return ok(policy.model_dump(by_alias=True), "Policy details retrieved successfully")


@api.get("/{claim_id}")
def get_claim(claim_id: str, service: ClaimService = Depends(get_claim_service)):
    claim = service.get_claim(claim_id)
    if claim is None:
        raise ResourceNotFoundError(f"Claim not found with id: {claim_id}")
    return ok(_view(claim), "Claim retrieved successfully")


@api.put("/{claim_id}")
def update_claim(claim_id: str, payload: Any = Body(...), service: ClaimService = Depends(get_claim_service)):
    claim = service.update_claim(claim_id, payload)
    return ok(_view(claim), "Claim updated successfully")


@api.delete("/{claim_id}")
def delete_claim(claim_id: str, service: ClaimService = Depends(get_claim_service)):
    service.delete_claim(claim_id)
    return ok(None, "Claim deleted successfully")
