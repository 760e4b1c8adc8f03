from pathlib import Path

import pytest

from src.utils.config_loader import PolicyApiConfig, load_policy_api_config, normalize_environment


@pytest.fixture
def config_file(tmp_path) -> Path:
    path = tmp_path / "policy_api.yml"
    path.write_text(
        "policy_api:\n"
        "  environment: staging\n"
        "  client_id: claims-service\n"
        "  connect_timeout_ms: 2000\n"
        "  read_timeout_ms: 5000\n"
        "  base_urls:\n"
        "    local: http://localhost:9090\n"
        "    staging: https://staging.policy.test\n",
        encoding="utf-8",
    )
    return path


def test_missing_file_uses_defaults(tmp_path, caplog):
    config = load_policy_api_config(tmp_path / "missing.yml")

    assert config.environment == "local"
    assert config.base_url == "http://localhost:8080"
    assert config.connect_timeout_ms == 10000
    assert config.read_timeout_ms == 30000
    assert config.enable_logging is True
    assert config.verify_ssl is True
    assert "not found" in caplog.text


def test_file_values_and_base_url_from_environment_map(config_file):
    config = load_policy_api_config(config_file)

    assert config.environment == "staging"
    assert config.base_url == "https://staging.policy.test"
    assert config.client_id == "claims-service"
    assert config.connect_timeout_ms == 2000


def test_config_path_from_env(monkeypatch, config_file):
    monkeypatch.setenv("POLICY_API_CONFIG", str(config_file))

    assert load_policy_api_config().client_id == "claims-service"


def test_env_overrides_win(monkeypatch, config_file):
    monkeypatch.setenv("API_BASE_URL", "https://override.test")
    monkeypatch.setenv("API_USERNAME", "svc")
    monkeypatch.setenv("API_PASSWORD", "pw")
    monkeypatch.setenv("API_KEY", "key-1")
    monkeypatch.setenv("API_BEARER_TOKEN", "tok-1")

    config = load_policy_api_config(config_file)

    assert config.base_url == "https://override.test"
    assert config.has_basic_auth()
    assert config.has_api_key()
    assert config.has_bearer_token()
    assert config.api_key == "key-1"


def test_test_environment_variable_selects_environment(monkeypatch, config_file):
    monkeypatch.setenv("TEST_ENVIRONMENT", "local")

    config = load_policy_api_config(config_file)

    assert config.environment == "local"
    assert config.base_url == "http://localhost:9090"


def test_environment_aliases_are_normalized(monkeypatch, tmp_path):
    monkeypatch.setenv("TEST_ENVIRONMENT", "prod")

    config = load_policy_api_config(tmp_path / "missing.yml")

    assert config.environment == "production"
    assert config.is_production_environment()
    assert config.base_url == "https://api.company.com"


def test_secrets_are_not_in_repr():
    config = PolicyApiConfig(username="svc", password="hunter2", api_key="k-secret", bearer_token="t-secret")

    text = repr(config)
    assert "hunter2" not in text
    assert "k-secret" not in text
    assert "t-secret" not in text


def test_auth_helpers_need_both_basic_credentials():
    assert not PolicyApiConfig(username="svc").has_basic_auth()
    assert not PolicyApiConfig(api_key="   ").has_api_key()
    assert PolicyApiConfig.with_basic_auth("http://x", "u", "p").has_basic_auth()
    assert PolicyApiConfig.with_api_key("http://x", "k").has_api_key()
    assert PolicyApiConfig.with_bearer_token("http://x", "t").has_bearer_token()


def test_full_url_joins_single_slash():
    config = PolicyApiConfig(base_url="https://api.test/")

    assert config.full_url("/api/v1/policy/list") == "https://api.test/api/v1/policy/list"
    assert config.full_url("health/check") == "https://api.test/health/check"


@pytest.mark.parametrize(
    "name,environment,base_url",
    [
        ("local", "local", "http://localhost:8080"),
        ("dev", "development", "https://dev-api.company.com"),
        ("Testing", "test", "https://test-api.company.com"),
        ("stage", "staging", "https://staging-api.company.com"),
        ("PRODUCTION", "production", "https://api.company.com"),
        ("qa", "qa", "http://localhost:8080"),
    ],
)
def test_for_environment(name, environment, base_url):
    config = PolicyApiConfig.for_environment(name)

    assert config.environment == environment
    assert config.base_url == base_url


def test_environment_predicates():
    assert PolicyApiConfig().is_local_environment()
    assert PolicyApiConfig(environment="development").is_development_environment()
    assert PolicyApiConfig(environment="test").is_test_environment()
    assert normalize_environment(" Dev ") == "development"
