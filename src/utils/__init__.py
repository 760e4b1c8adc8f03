"""
Utility modules
"""
from .config_loader import PolicyApiConfig, load_policy_api_config

__all__ = [
    'PolicyApiConfig',
    'load_policy_api_config',
]
