"""
Configuration management for MultiSign Python SDK
"""

from .settings import (
    CanonicalizationConfig,
    ContentConfig,
    LoggingConfig,
    MultiSignConfig,
    SigningConfig,
    StorageConfig,
    VerificationConfig,
    apply_env_overrides,
    create_store,
    load_config,
    load_default_config,
)
from .log_setup import JsonLineFormatter, configure_logging

__all__ = [
    'CanonicalizationConfig',
    'ContentConfig',
    'LoggingConfig',
    'MultiSignConfig',
    'SigningConfig',
    'StorageConfig',
    'VerificationConfig',
    'apply_env_overrides',
    'create_store',
    'load_config',
    'load_default_config',
    'JsonLineFormatter',
    'configure_logging',
]
