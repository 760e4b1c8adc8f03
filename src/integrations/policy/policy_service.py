"""
Policy lookup service.

Facade over a policy API client (real or mock). Guards inputs, clamps
pagination and applies the client-side filters the upstream API has no
endpoint for (product type, date range, premium range, expiring soon).

Failures are logged and degrade to empty results: callers cannot tell
"no data" apart from "upstream failed".
"""

from __future__ import annotations

import logging
import threading
from datetime import date, timedelta
from typing import Callable, List, Optional

from src.integrations.contracts.policies import VALID_POLICY_STATUSES, PolicyQueryResult, PolicyRecord
from src.integrations.clients.real_http.policy_api import PolicyApiClient
from src.utils.config_loader import PolicyApiConfig

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _is_valid_email(email: str) -> bool:
    return "@" in email and "." in email


def _is_valid_status(status: str) -> bool:
    return status.strip().upper() in VALID_POLICY_STATUSES


def _parse_date(value: Optional[str]) -> Optional[date]:
    if _is_blank(value):
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        logger.warning(f"Invalid date format: {value}")
        return None


def clamp_pagination(page: int, size: int) -> tuple[int, int]:
    if page < 0:
        logger.warning(f"Invalid page number: {page}, using 0")
        page = 0
    if size <= 0 or size > MAX_PAGE_SIZE:
        logger.warning(f"Invalid page size: {size}, using default: {DEFAULT_PAGE_SIZE}")
        size = DEFAULT_PAGE_SIZE
    return page, size


class PolicyService:
    def __init__(self, client, config: Optional[PolicyApiConfig] = None) -> None:
        self.client = client
        self.config = config or getattr(client, "config", None) or PolicyApiConfig()
        logger.info(f"PolicyService initialized with environment: {self.config.environment}")

    def close(self) -> None:
        self.client.close()

    def _policies(self, call: Callable[[], PolicyQueryResult], description: str) -> List[PolicyRecord]:
        try:
            result = call()
        except Exception:
            logger.exception(f"Error fetching {description}")
            return []

        if result.success and not result.is_empty:
            logger.debug(f"Retrieved {result.policy_count} {description}")
            return list(result.policies)

        logger.warning(f"No {description} found - {result.message}")
        return []

    def _paged(self, page: Optional[int], size: Optional[int]) -> tuple[Optional[int], Optional[int]]:
        if page is None or size is None:
            return None, None
        return clamp_pagination(page, size)

    def get_policies_by_customer_id(
        self, customer_id: Optional[str], page: Optional[int] = None, size: Optional[int] = None
    ) -> List[PolicyRecord]:
        logger.info(f"Fetching policies for customer: {customer_id}, page: {page}, size: {size}")
        if _is_blank(customer_id):
            logger.warning("Customer ID is null or empty")
            return []

        page, size = self._paged(page, size)
        return self._policies(
            lambda: self.client.get_policies_by_customer_id(customer_id, page, size),
            f"policies for customer {customer_id}",
        )

    def get_policy_by_number(self, policy_number: Optional[str]) -> Optional[PolicyRecord]:
        logger.info(f"Fetching policy by number: {policy_number}")
        if _is_blank(policy_number):
            logger.warning("Policy number is null or empty")
            return None

        policies = self._policies(lambda: self.client.get_policy_by_number(policy_number), f"policy {policy_number}")
        return policies[0] if policies else None

    def get_policies_by_email(
        self, email: Optional[str], page: Optional[int] = None, size: Optional[int] = None
    ) -> List[PolicyRecord]:
        logger.info(f"Fetching policies for email: {email}, page: {page}, size: {size}")
        if _is_blank(email) or not _is_valid_email(email):
            logger.warning(f"Invalid email address: {email}")
            return []

        page, size = self._paged(page, size)
        return self._policies(
            lambda: self.client.get_policies_by_email(email, page, size),
            f"policies for email {email}",
        )

    def get_policies_by_status(self, status: Optional[str]) -> List[PolicyRecord]:
        logger.info(f"Fetching policies by status: {status}")
        if _is_blank(status):
            logger.warning("Status is null or empty")
            return []
        if not _is_valid_status(status):
            logger.warning(f"Invalid policy status: {status}")
            return []

        return self._policies(lambda: self.client.get_policies_by_status(status), f"policies with status {status}")

    def get_policies_by_product_type(self, product_type: Optional[str]) -> List[PolicyRecord]:
        logger.info(f"Fetching policies by product type: {product_type}")
        if _is_blank(product_type):
            logger.warning("Product type is null or empty")
            return []

        wanted = product_type.strip().lower()
        return [p for p in self.get_active_policies() if (p.product_type or "").lower() == wanted]

    def get_active_policies(self, page: Optional[int] = None, size: Optional[int] = None) -> List[PolicyRecord]:
        logger.info(f"Fetching active policies, page: {page}, size: {size}")
        page, size = self._paged(page, size)
        return self._policies(lambda: self.client.get_active_policies(page, size), "active policies")

    def search_policies(
        self, search_term: Optional[str], page: Optional[int] = None, size: Optional[int] = None
    ) -> List[PolicyRecord]:
        logger.info(f"Searching policies with term: {search_term}, page: {page}, size: {size}")
        if _is_blank(search_term):
            logger.warning("Search term is null or empty")
            return []

        page, size = self._paged(page, size)
        return self._policies(
            lambda: self.client.search_policies(search_term, page, size),
            f"policies matching '{search_term}'",
        )

    def get_policy_count_by_customer_id(self, customer_id: Optional[str]) -> int:
        if _is_blank(customer_id):
            logger.warning("Customer ID is null or empty")
            return 0
        return len(self.get_policies_by_customer_id(customer_id))

    def is_policy_active(self, policy_number: Optional[str]) -> bool:
        policy = self.get_policy_by_number(policy_number)
        if policy is None:
            logger.warning(f"Policy not found: {policy_number}")
            return False
        return policy.is_active

    def validate_policy_access(self, policy_number: Optional[str], customer_id: Optional[str]) -> bool:
        logger.info(f"Validating policy access - Policy: {policy_number}, Customer: {customer_id}")
        if _is_blank(policy_number) or _is_blank(customer_id):
            logger.warning("Policy number or customer ID is null or empty")
            return False

        try:
            result = self.client.validate_policy_access(policy_number, customer_id)
        except Exception:
            logger.exception(f"Error validating policy access - Policy: {policy_number}, Customer: {customer_id}")
            return False

        logger.debug(f"Customer {customer_id} has access to policy {policy_number}: {result.success}")
        return result.success

    def get_policy_details(self, policy_number: Optional[str], email: Optional[str]) -> Optional[PolicyRecord]:
        """Look up the caller's policies by email and pick the one with the given number."""
        if _is_blank(policy_number):
            return None
        for policy in self.get_policies_by_email(email):
            if policy.policy_number == policy_number:
                return policy
        return None

    def get_policies_by_date_range(self, start_date: Optional[str], end_date: Optional[str]) -> List[PolicyRecord]:
        """Inclusive range on the created date, or the effective date when no created date was sent."""
        logger.info(f"Fetching policies by date range: {start_date} to {end_date}")
        start = _parse_date(start_date)
        end = _parse_date(end_date)
        if start is None or end is None:
            logger.warning("Invalid date format. Expected YYYY-MM-DD")
            return []

        matches = []
        for policy in self.get_active_policies():
            created = _parse_date(policy.created_date or policy.effective_date)
            if created is not None and start <= created <= end:
                matches.append(policy)
        return matches

    def get_policies_by_premium_range(self, min_amount: float, max_amount: float) -> List[PolicyRecord]:
        logger.info(f"Fetching policies by premium range: {min_amount} to {max_amount}")
        if min_amount < 0 or max_amount < 0 or min_amount > max_amount:
            logger.warning(f"Invalid premium range: {min_amount} to {max_amount}")
            return []

        return [
            p
            for p in self.get_active_policies()
            if p.premium_amount is not None and min_amount <= p.premium_amount <= max_amount
        ]

    def get_expired_policies(self) -> List[PolicyRecord]:
        return self.get_policies_by_status("EXPIRED")

    def get_policies_expiring_soon(self, days: int, today: Optional[date] = None) -> List[PolicyRecord]:
        logger.info(f"Fetching policies expiring within {days} days")
        if days < 0:
            logger.warning(f"Invalid days parameter: {days}")
            return []

        cutoff = (today or date.today()) + timedelta(days=days)
        matches = []
        for policy in self.get_active_policies():
            expires = _parse_date(policy.expiration_date)
            if expires is not None and expires <= cutoff:
                matches.append(policy)
        return matches

    def is_service_healthy(self) -> bool:
        try:
            return self.client.is_service_healthy()
        except Exception:
            logger.exception("Health check failed")
            return False


class ServiceFactory:
    """Builds PolicyService instances around a default PolicyApiConfig."""

    def __init__(self, default_config: Optional[PolicyApiConfig] = None, client_factory=PolicyApiClient) -> None:
        self.default_config = default_config or PolicyApiConfig()
        self.client_factory = client_factory

    def create_policy_service(self, config: Optional[PolicyApiConfig] = None) -> PolicyService:
        config = config or self.default_config
        return PolicyService(self.client_factory(config), config)

    def for_environment(self, environment: str) -> PolicyService:
        return self.create_policy_service(PolicyApiConfig.for_environment(environment))

    def with_basic_auth(self, base_url: str, username: str, password: str) -> PolicyService:
        return self.create_policy_service(PolicyApiConfig.with_basic_auth(base_url, username, password))

    def with_api_key(self, base_url: str, api_key: str) -> PolicyService:
        return self.create_policy_service(PolicyApiConfig.with_api_key(base_url, api_key))

    def with_bearer_token(self, base_url: str, bearer_token: str) -> PolicyService:
        return self.create_policy_service(PolicyApiConfig.with_bearer_token(base_url, bearer_token))

    def set_default_configuration(self, config: PolicyApiConfig) -> None:
        self.default_config = config

    def reset(self) -> None:
        self.default_config = PolicyApiConfig()


_factory: Optional[ServiceFactory] = None
_factory_lock = threading.Lock()


def get_service_factory() -> ServiceFactory:
    global _factory
    if _factory is None:
        with _factory_lock:
            if _factory is None:
                _factory = ServiceFactory()
    return _factory
