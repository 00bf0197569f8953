"""
Configuration management for MultiSign Python SDK

Settings are grouped in dataclass sections, loaded from JSON (string, file or
dict) and then overridden from MULTISIGN_* environment variables.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from ..exceptions import ConfigError

logger = logging.getLogger(__name__)

STORAGE_BACKENDS = ('memory', 'file', 'http')
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

ENV_LOG_LEVEL = 'MULTISIGN_LOG_LEVEL'
ENV_STORAGE_BACKEND = 'MULTISIGN_STORAGE_BACKEND'
ENV_STORAGE_PATH = 'MULTISIGN_STORAGE_PATH'
ENV_STORAGE_URL = 'MULTISIGN_STORAGE_URL'
ENV_SIGNING_TIMEOUT = 'MULTISIGN_SIGNING_TIMEOUT'
ENV_MAX_DEPTH = 'MULTISIGN_MAX_DEPTH'


@dataclass
class CanonicalizationConfig:
    """Canonicalization configuration"""
    max_depth: Optional[int] = 10


@dataclass
class ContentConfig:
    """Content validation configuration"""
    max_binary_size_mb: float = 10
    allowed_binary_mime_types: List[str] = field(default_factory=lambda: ['application/pdf'])

    @property
    def max_binary_size_bytes(self) -> int:
        return int(self.max_binary_size_mb * 1024 * 1024)


@dataclass
class SigningConfig:
    """Signing configuration"""
    timeout_seconds: Optional[float] = None


@dataclass
class VerificationConfig:
    """Verification configuration"""
    max_workers: int = 1


@dataclass
class StorageConfig:
    """Storage configuration"""
    backend: str = 'memory'
    path: Optional[str] = None
    base_url: Optional[str] = None
    timeout: float = 30.0


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = 'INFO'
    structured: bool = False


@dataclass
class MultiSignConfig:
    """Complete configuration structure"""
    canonicalization: CanonicalizationConfig = field(default_factory=CanonicalizationConfig)
    content: ContentConfig = field(default_factory=ContentConfig)
    signing: SigningConfig = field(default_factory=SigningConfig)
    verification: VerificationConfig = field(default_factory=VerificationConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MultiSignConfig':
        """
        Build a configuration from a (possibly partial) dictionary.

        Raises:
            ConfigError: If a section is malformed or invalid
        """
        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a JSON object", "INVALID_FORMAT")

        sections = {
            'canonicalization': CanonicalizationConfig,
            'content': ContentConfig,
            'signing': SigningConfig,
            'verification': VerificationConfig,
            'storage': StorageConfig,
            'logging': LoggingConfig,
        }

        unknown = set(data) - set(sections)
        if unknown:
            raise ConfigError(f"Unknown configuration sections: {', '.join(sorted(unknown))}", "INVALID_FORMAT")

        try:
            config = cls(**{name: section(**data.get(name, {})) for name, section in sections.items()})
        except TypeError as e:
            raise ConfigError(f"Invalid configuration format: {e}", "INVALID_FORMAT")

        config.validate()
        return config

    @classmethod
    def from_json(cls, json_string: str) -> 'MultiSignConfig':
        """Load configuration from JSON string"""
        try:
            data = json.loads(json_string)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Failed to parse configuration JSON: {e}", "PARSE_ERROR")
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> 'MultiSignConfig':
        """Load configuration from file"""
        try:
            with open(Path(file_path), 'r', encoding='utf-8') as f:
                json_string = f.read()
        except OSError as e:
            raise ConfigError(f"Failed to read configuration file: {e}", "FILE_ERROR")
        return cls.from_json(json_string)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def validate(self) -> None:
        """
        Validate the configuration.

        Raises:
            ConfigError: On the first invalid setting
        """
        max_depth = self.canonicalization.max_depth
        if max_depth is not None and (not isinstance(max_depth, int) or max_depth < 0):
            raise ConfigError("canonicalization.max_depth must be a non-negative integer or null", "INVALID_CANONICALIZATION_CONFIG")

        if self.content.max_binary_size_mb <= 0:
            raise ConfigError("content.max_binary_size_mb must be positive", "INVALID_CONTENT_CONFIG")

        if self.signing.timeout_seconds is not None and self.signing.timeout_seconds <= 0:
            raise ConfigError("signing.timeout_seconds must be positive or null", "INVALID_SIGNING_CONFIG")

        if not isinstance(self.verification.max_workers, int) or self.verification.max_workers < 1:
            raise ConfigError("verification.max_workers must be at least 1", "INVALID_VERIFICATION_CONFIG")

        if self.storage.backend not in STORAGE_BACKENDS:
            raise ConfigError(
                f"storage.backend must be one of {', '.join(STORAGE_BACKENDS)}, got '{self.storage.backend}'",
                "INVALID_STORAGE_CONFIG"
            )
        if self.storage.backend == 'file' and not self.storage.path:
            raise ConfigError("storage.path is required for the file backend", "INVALID_STORAGE_CONFIG")
        if self.storage.backend == 'http' and not self.storage.base_url:
            raise ConfigError("storage.base_url is required for the http backend", "INVALID_STORAGE_CONFIG")
        if self.storage.timeout <= 0:
            raise ConfigError("storage.timeout must be positive", "INVALID_STORAGE_CONFIG")

        if self.logging.level.upper() not in LOG_LEVELS:
            raise ConfigError(f"Unknown log level '{self.logging.level}'", "INVALID_LOGGING_CONFIG")


def apply_env_overrides(config: MultiSignConfig, environ: Optional[Mapping[str, str]] = None) -> MultiSignConfig:
    """
    Apply MULTISIGN_* environment variables on top of a configuration.

    Args:
        config: Configuration to update in place
        environ: Variables to read; os.environ when omitted

    Returns:
        MultiSignConfig: The updated, revalidated configuration

    Raises:
        ConfigError: If a variable holds an invalid value
    """
    env = os.environ if environ is None else environ

    if env.get(ENV_LOG_LEVEL):
        config.logging.level = env[ENV_LOG_LEVEL].upper()
    if env.get(ENV_STORAGE_BACKEND):
        config.storage.backend = env[ENV_STORAGE_BACKEND].lower()
    if env.get(ENV_STORAGE_PATH):
        config.storage.path = env[ENV_STORAGE_PATH]
    if env.get(ENV_STORAGE_URL):
        config.storage.base_url = env[ENV_STORAGE_URL]

    if env.get(ENV_SIGNING_TIMEOUT):
        config.signing.timeout_seconds = _parse_number(env[ENV_SIGNING_TIMEOUT], ENV_SIGNING_TIMEOUT, float)

    if env.get(ENV_MAX_DEPTH):
        raw = env[ENV_MAX_DEPTH]
        config.canonicalization.max_depth = None if raw.lower() in ('none', 'off') else _parse_number(raw, ENV_MAX_DEPTH, int)

    config.validate()
    return config


def _parse_number(raw: str, name: str, kind):
    try:
        return kind(raw)
    except ValueError:
        raise ConfigError(f"Environment variable {name} must be a number, got '{raw}'", "INVALID_ENVIRONMENT")


def load_config(file_path: Optional[Union[str, Path]] = None,
                environ: Optional[Mapping[str, str]] = None) -> MultiSignConfig:
    """
    Load configuration from a file (or defaults) plus environment overrides.

    Args:
        file_path: JSON configuration file; defaults are used when omitted
        environ: Environment mapping; os.environ when omitted
    """
    config = MultiSignConfig.from_file(file_path) if file_path else MultiSignConfig()
    return apply_env_overrides(config, environ)


def load_default_config(environ: Optional[Mapping[str, str]] = None) -> MultiSignConfig:
    """Load configuration from the first default location found, else defaults"""
    default_paths = [
        Path("multisign.json"),
        Path("config/multisign.json"),
        Path.home() / ".multisign" / "config.json",
    ]

    for path in default_paths:
        if path.exists():
            logger.debug(f"Loading configuration from {path}")
            return load_config(path, environ)

    return load_config(None, environ)


def create_store(config: MultiSignConfig):
    """
    Build the document store selected by the storage section.

    Returns:
        DocumentStore: In-memory, JSON file or HTTP store
    """
    from ..storage import HttpDocumentStore, HttpStoreConfig, InMemoryDocumentStore, JsonFileDocumentStore

    storage = config.storage
    if storage.backend == 'file':
        return JsonFileDocumentStore(storage.path)
    if storage.backend == 'http':
        return HttpDocumentStore(HttpStoreConfig(base_url=storage.base_url, timeout=storage.timeout))
    return InMemoryDocumentStore()
