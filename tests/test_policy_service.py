"""PolicyService facade: input guards, pagination clamping, client-side filters."""

from datetime import date

import pytest

from src.integrations.clients.mocks.policy_api import MockPolicyApiClient
from src.integrations.contracts.policies import PolicyQueryResult, PolicyRecord
from src.integrations.policy import policy_service as policy_service_mod
from src.integrations.policy.policy_service import PolicyService, ServiceFactory, get_service_factory
from src.utils.config_loader import PolicyApiConfig


class StubClient:
    """Records calls; returns `result` (or raises `error`) for every list call."""

    def __init__(self, policies=None, result=None, error=None, access=True, healthy=True):
        self.calls = []
        self.result = result if result is not None else PolicyQueryResult.ok(policies or [])
        self.error = error
        self.access = access
        self.healthy = healthy
        self.closed = False

    def _answer(self, name, *args):
        self.calls.append((name, args))
        if self.error is not None:
            raise self.error
        return self.result

    def get_policies_by_email(self, email, page=None, size=None):
        return self._answer("email", email, page, size)

    def get_policies_by_customer_id(self, customer_id, page=None, size=None):
        return self._answer("customer", customer_id, page, size)

    def search_policies(self, term, page=None, size=None):
        return self._answer("search", term, page, size)

    def get_policies_by_status(self, status, page=None, size=None):
        return self._answer("status", status, page, size)

    def get_active_policies(self, page=None, size=None):
        return self._answer("active", page, size)

    def get_policy_by_number(self, policy_number):
        return self._answer("number", policy_number)

    def validate_policy_access(self, policy_number, customer_id):
        self.calls.append(("validate", (policy_number, customer_id)))
        if self.error is not None:
            raise self.error
        if self.access:
            return PolicyQueryResult(success=True, message="Access validation successful")
        return PolicyQueryResult.failure("Access denied", "ACCESS_DENIED")

    def is_service_healthy(self):
        if self.error is not None:
            raise self.error
        return self.healthy

    def close(self):
        self.closed = True


def _service(**kwargs):
    client = StubClient(**kwargs)
    return PolicyService(client, PolicyApiConfig()), client


POLICIES = [
    PolicyRecord(policy_number="A", product_type="AUTO", premium_amount=100.0, created_date="2024-01-10", expiration_date="2026-10-20", status="ACTIVE"),
    PolicyRecord(policy_number="B", product_type="home", premium_amount=500.0, effective_date="2024-02-01", expiration_date="2026-12-31", status="ACTIVE"),
    PolicyRecord(policy_number="C", product_type="Auto", premium_amount=None, created_date="2024-03-01", expiration_date="not-a-date", status="ACTIVE"),
    PolicyRecord(policy_number="D", product_type="LIFE", premium_amount=1000.0, created_date="2023-12-31", status="ACTIVE"),
]


# --------------------------------------------------------------------------- #
# Input guards
# --------------------------------------------------------------------------- #
@pytest.mark.parametrize("blank", [None, "", "   "])
def test_blank_inputs_return_empty_without_calling_the_api(blank):
    service, client = _service(policies=POLICIES)

    assert service.get_policies_by_customer_id(blank) == []
    assert service.get_policies_by_email(blank) == []
    assert service.search_policies(blank) == []
    assert service.get_policy_by_number(blank) is None
    assert service.get_policies_by_status(blank) == []
    assert service.get_policies_by_product_type(blank) == []
    assert service.get_policy_count_by_customer_id(blank) == 0
    assert service.is_policy_active(blank) is False
    assert service.validate_policy_access(blank, "CUST-1") is False
    assert service.validate_policy_access("POL-1", blank) is False
    assert client.calls == []


@pytest.mark.parametrize("email", ["john.doe", "john@example", "plainaddress"])
def test_invalid_email_returns_empty(email):
    service, client = _service(policies=POLICIES)

    assert service.get_policies_by_email(email) == []
    assert client.calls == []


def test_loose_email_check_only_needs_at_and_dot():
    service, client = _service(policies=POLICIES)

    service.get_policies_by_email("a@b.c")

    assert client.calls == [("email", ("a@b.c", None, None))]


def test_invalid_status_returns_empty():
    service, client = _service(policies=POLICIES)

    assert service.get_policies_by_status("LAPSED") == []
    assert client.calls == []


@pytest.mark.parametrize("status", ["active", "Expired", "CANCELLED", "pending", "suspended"])
def test_valid_statuses_are_case_insensitive(status):
    service, client = _service(policies=POLICIES)

    assert service.get_policies_by_status(status) == POLICIES
    assert client.calls[0][0] == "status"


# --------------------------------------------------------------------------- #
# Pagination clamping
# --------------------------------------------------------------------------- #
@pytest.mark.parametrize(
    "page,size,expected",
    [
        (0, 0, (0, 20)),
        (0, 500, (0, 20)),
        (-1, 10, (0, 10)),
        (3, 100, (3, 100)),
        (1, -5, (1, 20)),
    ],
)
def test_pagination_is_clamped(page, size, expected):
    service, client = _service(policies=POLICIES)

    service.get_policies_by_customer_id("CUST-1", page, size)
    service.get_policies_by_email("a@b.com", page, size)
    service.search_policies("term", page, size)
    service.get_active_policies(page, size)

    for name, args in client.calls:
        assert args[-2:] == expected, name


def test_unpaged_calls_send_no_pagination():
    service, client = _service(policies=POLICIES)

    service.get_policies_by_customer_id("CUST-1")

    assert client.calls == [("customer", ("CUST-1", None, None))]


# --------------------------------------------------------------------------- #
# Failure == empty
# --------------------------------------------------------------------------- #
def test_failed_result_degrades_to_empty():
    service, _ = _service(result=PolicyQueryResult.failure("db down", "DB_DOWN"))

    assert service.get_policies_by_customer_id("CUST-1") == []
    assert service.get_policy_by_number("P1") is None
    assert service.get_active_policies() == []


def test_client_exceptions_never_escape():
    service, _ = _service(error=RuntimeError("boom"))

    assert service.get_policies_by_email("a@b.com") == []
    assert service.get_policy_by_number("P1") is None
    assert service.get_policies_by_product_type("AUTO") == []
    assert service.get_policies_expiring_soon(30) == []
    assert service.validate_policy_access("P1", "C1") is False
    assert service.is_service_healthy() is False


# --------------------------------------------------------------------------- #
# Derived lookups
# --------------------------------------------------------------------------- #
def test_get_policy_by_number_returns_first_record():
    service, _ = _service(policies=POLICIES[:2])

    assert service.get_policy_by_number("A").policy_number == "A"


def test_policy_count_by_customer_id():
    service, _ = _service(policies=POLICIES)

    assert service.get_policy_count_by_customer_id("CUST-1") == 4


def test_is_policy_active():
    active, _ = _service(policies=[PolicyRecord(policy_number="A", status="active")])
    expired, _ = _service(policies=[PolicyRecord(policy_number="A", status="EXPIRED")])
    missing, _ = _service(policies=[])

    assert active.is_policy_active("A") is True
    assert expired.is_policy_active("A") is False
    assert missing.is_policy_active("A") is False


def test_validate_policy_access_passes_through():
    allowed, client = _service(access=True)
    denied, _ = _service(access=False)

    assert allowed.validate_policy_access("POL-1", "john@example.com") is True
    assert client.calls == [("validate", ("POL-1", "john@example.com"))]
    assert denied.validate_policy_access("POL-1", "john@example.com") is False


def test_get_policy_details_matches_number_within_email_lookup():
    service, _ = _service(policies=POLICIES)

    assert service.get_policy_details("B", "a@b.com").policy_number == "B"
    assert service.get_policy_details("Z", "a@b.com") is None
    assert service.get_policy_details("B", "not-an-email") is None


def test_expired_policies_use_status_lookup():
    service, client = _service(policies=POLICIES)

    service.get_expired_policies()

    assert client.calls == [("status", ("EXPIRED", None, None))]


# --------------------------------------------------------------------------- #
# Client-side filters over the active set
# --------------------------------------------------------------------------- #
def test_product_type_filter_is_case_insensitive():
    service, client = _service(policies=POLICIES)

    result = service.get_policies_by_product_type("auto")

    assert [p.policy_number for p in result] == ["A", "C"]
    assert client.calls == [("active", (None, None))]


def test_date_range_is_inclusive_and_falls_back_to_effective_date():
    service, _ = _service(policies=POLICIES)

    result = service.get_policies_by_date_range("2024-01-10", "2024-02-01")

    assert [p.policy_number for p in result] == ["A", "B"]


@pytest.mark.parametrize("start,end", [("2024/01/01", "2024-12-31"), ("", "2024-12-31"), (None, None), ("2024-01-01", "soon")])
def test_date_range_rejects_invalid_dates(start, end):
    service, client = _service(policies=POLICIES)

    assert service.get_policies_by_date_range(start, end) == []
    assert client.calls == []


def test_premium_range_is_inclusive_and_skips_missing_premiums():
    service, _ = _service(policies=POLICIES)

    result = service.get_policies_by_premium_range(100.0, 500.0)

    assert [p.policy_number for p in result] == ["A", "B"]


@pytest.mark.parametrize("low,high", [(-1, 10), (10, -1), (500, 100)])
def test_premium_range_rejects_invalid_ranges(low, high):
    service, client = _service(policies=POLICIES)

    assert service.get_policies_by_premium_range(low, high) == []
    assert client.calls == []


def test_expiring_soon_includes_cutoff_and_skips_unparseable_dates():
    service, _ = _service(policies=POLICIES)

    result = service.get_policies_expiring_soon(1, today=date(2026, 10, 19))

    assert [p.policy_number for p in result] == ["A"]


def test_expiring_soon_rejects_negative_days():
    service, client = _service(policies=POLICIES)

    assert service.get_policies_expiring_soon(-1) == []
    assert client.calls == []


def test_health_and_close_delegate_to_client():
    service, client = _service(healthy=False)

    assert service.is_service_healthy() is False
    service.close()
    assert client.closed


# --------------------------------------------------------------------------- #
# Against the mock client
# --------------------------------------------------------------------------- #
def test_mock_client_end_to_end(policy_service):
    by_email = policy_service.get_policies_by_email("john.doe@example.com")
    assert {p.policy_number for p in by_email} == {"POL-001", "POL-004"}

    assert [p.policy_number for p in policy_service.get_policies_by_product_type("home")] == ["POL-002"]
    assert policy_service.get_policy_by_number("POL-002").effective_date == "2025-03-01"
    assert policy_service.get_policy_by_number("POL-404") is None
    assert [p.policy_number for p in policy_service.get_expired_policies()] == ["POL-004"]


def test_mock_client_access_validation(policy_service):
    assert policy_service.validate_policy_access("POL-001", "john.doe@example.com") is True
    assert policy_service.validate_policy_access("POL-001", "CUST-001") is True
    assert policy_service.validate_policy_access("POL-001", "jane.smith@example.com") is False
    assert policy_service.validate_policy_access("POL-999", "john.doe@example.com") is False


def test_mock_client_pagination():
    service = PolicyService(MockPolicyApiClient())

    page = service.get_active_policies(page=1, size=2)

    assert [p.policy_number for p in page] == ["POL-003"]


# --------------------------------------------------------------------------- #
# ServiceFactory
# --------------------------------------------------------------------------- #
def test_factory_builds_services_with_its_default_config():
    built = []

    def client_factory(config):
        built.append(config)
        return StubClient()

    default = PolicyApiConfig(base_url="https://default.test")
    factory = ServiceFactory(default, client_factory=client_factory)

    service = factory.create_policy_service()
    assert service.config is default

    factory.with_api_key("https://k.test", "key")
    factory.with_basic_auth("https://b.test", "u", "p")
    factory.with_bearer_token("https://t.test", "tok")
    factory.for_environment("staging")

    assert built[1].has_api_key()
    assert built[2].has_basic_auth()
    assert built[3].has_bearer_token()
    assert built[4].base_url == "https://staging-api.company.com"


def test_factory_default_configuration_can_be_replaced_and_reset():
    factory = ServiceFactory(client_factory=lambda config: StubClient())
    custom = PolicyApiConfig(environment="test")

    factory.set_default_configuration(custom)
    assert factory.create_policy_service().config is custom

    factory.reset()
    assert factory.default_config.environment == "local"


def test_get_service_factory_is_lazily_shared(monkeypatch):
    monkeypatch.setattr(policy_service_mod, "_factory", None)

    first = get_service_factory()

    assert get_service_factory() is first
