"""
Configuration loader for the upstream policy API client.

Values are layered:
1. built-in defaults (PolicyApiConfig field defaults)
2. config/policy_api.yml (or the file named by POLICY_API_CONFIG)
3. environment variables (API_BASE_URL, API_USERNAME, API_PASSWORD,
   API_KEY, API_BEARER_TOKEN, TEST_ENVIRONMENT), read after load_dotenv()
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "policy_api.yml"

DEFAULT_BASE_URLS: Dict[str, str] = {
    "local": "http://localhost:8080",
    "development": "https://dev-api.company.com",
    "test": "https://test-api.company.com",
    "staging": "https://staging-api.company.com",
    "production": "https://api.company.com",
}

_ENVIRONMENT_ALIASES = {
    "local": "local",
    "dev": "development",
    "development": "development",
    "test": "test",
    "testing": "test",
    "staging": "staging",
    "stage": "staging",
    "prod": "production",
    "production": "production",
}


def normalize_environment(environment: str) -> str:
    """Map an environment name or alias to its canonical name. Unknown names are returned lowercased."""
    key = (environment or "").strip().lower()
    return _ENVIRONMENT_ALIASES.get(key, key)


class PolicyApiConfig(BaseModel):
    """Connection settings for the upstream policy API."""

    base_url: str = "http://localhost:8080"
    environment: str = "local"
    username: Optional[str] = Field(default=None, repr=False)
    password: Optional[str] = Field(default=None, repr=False)
    api_key: Optional[str] = Field(default=None, repr=False)
    bearer_token: Optional[str] = Field(default=None, repr=False)
    client_id: str = "policy-lookup-client"
    connect_timeout_ms: int = Field(default=10000, ge=1)
    read_timeout_ms: int = Field(default=30000, ge=1)
    enable_logging: bool = True
    verify_ssl: bool = True
    base_urls: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_BASE_URLS))

    def has_basic_auth(self) -> bool:
        return bool(self.username) and bool(self.password)

    def has_api_key(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    def has_bearer_token(self) -> bool:
        return bool(self.bearer_token and self.bearer_token.strip())

    def full_url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    def is_local_environment(self) -> bool:
        return self.environment == "local"

    def is_development_environment(self) -> bool:
        return self.environment == "development"

    def is_test_environment(self) -> bool:
        return self.environment == "test"

    def is_production_environment(self) -> bool:
        return self.environment == "production"

    @classmethod
    def for_environment(cls, environment: str) -> "PolicyApiConfig":
        env = normalize_environment(environment)
        if env not in DEFAULT_BASE_URLS:
            logger.warning(f"Unknown environment '{environment}'; falling back to the local base URL")
        return cls(environment=env, base_url=DEFAULT_BASE_URLS.get(env, DEFAULT_BASE_URLS["local"]))

    @classmethod
    def with_basic_auth(cls, base_url: str, username: str, password: str) -> "PolicyApiConfig":
        return cls(base_url=base_url, username=username, password=password)

    @classmethod
    def with_api_key(cls, base_url: str, api_key: str) -> "PolicyApiConfig":
        return cls(base_url=base_url, api_key=api_key)

    @classmethod
    def with_bearer_token(cls, base_url: str, bearer_token: str) -> "PolicyApiConfig":
        return cls(base_url=base_url, bearer_token=bearer_token)


def _read_yaml(config_path: Path) -> Dict:
    if not config_path.exists():
        logger.warning(f"Policy API config file not found: {config_path}; using defaults")
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    # the file groups settings under a top-level `policy_api` key
    return data.get("policy_api", data)


def load_policy_api_config(config_path: Optional[Path] = None) -> PolicyApiConfig:
    """
    Load and validate the policy API configuration.

    Args:
        config_path: Path to config file. Defaults to $POLICY_API_CONFIG,
            then config/policy_api.yml

    Returns:
        Validated PolicyApiConfig with environment overrides applied

    Raises:
        ValidationError: If the file doesn't match the schema
    """
    load_dotenv()

    if config_path is None:
        env_path = os.getenv("POLICY_API_CONFIG")
        config_path = Path(env_path) if env_path else DEFAULT_CONFIG_PATH

    data = _read_yaml(Path(config_path))

    env_override = os.getenv("TEST_ENVIRONMENT")
    if env_override:
        data["environment"] = env_override
    if "environment" in data:
        data["environment"] = normalize_environment(data["environment"])

    try:
        config = PolicyApiConfig(**data)
    except ValidationError as e:
        logger.error(f"Policy API config validation failed: {e}")
        raise

    updates: Dict[str, object] = {}
    base_url_override = os.getenv("API_BASE_URL")
    if base_url_override:
        updates["base_url"] = base_url_override
    elif config.environment in config.base_urls:
        updates["base_url"] = config.base_urls[config.environment]

    for env_name, field in (
        ("API_USERNAME", "username"),
        ("API_PASSWORD", "password"),
        ("API_KEY", "api_key"),
        ("API_BEARER_TOKEN", "bearer_token"),
    ):
        value = os.getenv(env_name)
        if value:
            updates[field] = value

    if updates:
        config = config.model_copy(update=updates)

    logger.info(f"Loaded policy API config (environment={config.environment}, base_url={config.base_url})")
    return config
