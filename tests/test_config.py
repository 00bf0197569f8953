"""
Unit tests for configuration loading
"""

import json
import logging

import pytest

from multisign_sdk.config import (
    JsonLineFormatter,
    LoggingConfig,
    MultiSignConfig,
    apply_env_overrides,
    configure_logging,
    create_store,
    load_config,
)
from multisign_sdk.exceptions import ConfigError
from multisign_sdk.storage import HttpDocumentStore, InMemoryDocumentStore, JsonFileDocumentStore


class TestMultiSignConfig:
    """Test configuration parsing and validation"""

    def test_defaults(self):
        config = MultiSignConfig()
        assert config.canonicalization.max_depth == 10
        assert config.content.max_binary_size_bytes == 10 * 1024 * 1024
        assert config.content.allowed_binary_mime_types == ['application/pdf']
        assert config.signing.timeout_seconds is None
        assert config.storage.backend == 'memory'

    def test_partial_json(self):
        config = MultiSignConfig.from_json('{"signing": {"timeout_seconds": 30}, "logging": {"level": "DEBUG"}}')
        assert config.signing.timeout_seconds == 30
        assert config.logging.level == 'DEBUG'
        assert config.verification.max_workers == 1

    def test_from_file(self, tmp_path):
        path = tmp_path / "multisign.json"
        path.write_text(json.dumps({'storage': {'backend': 'file', 'path': str(tmp_path / 'docs.json')}}))
        assert MultiSignConfig.from_file(path).storage.backend == 'file'

    def test_round_trip_dict(self):
        config = MultiSignConfig.from_dict({'verification': {'max_workers': 4}})
        assert MultiSignConfig.from_dict(config.to_dict()).verification.max_workers == 4

    @pytest.mark.parametrize("data,code", [
        ({'unknown': {}}, 'INVALID_FORMAT'),
        ({'signing': {'bogus': 1}}, 'INVALID_FORMAT'),
        ({'signing': {'timeout_seconds': 0}}, 'INVALID_SIGNING_CONFIG'),
        ({'canonicalization': {'max_depth': -1}}, 'INVALID_CANONICALIZATION_CONFIG'),
        ({'verification': {'max_workers': 0}}, 'INVALID_VERIFICATION_CONFIG'),
        ({'storage': {'backend': 'ftp'}}, 'INVALID_STORAGE_CONFIG'),
        ({'storage': {'backend': 'file'}}, 'INVALID_STORAGE_CONFIG'),
        ({'storage': {'backend': 'http'}}, 'INVALID_STORAGE_CONFIG'),
        ({'logging': {'level': 'LOUD'}}, 'INVALID_LOGGING_CONFIG'),
    ])
    def test_invalid(self, data, code):
        with pytest.raises(ConfigError) as exc_info:
            MultiSignConfig.from_dict(data)
        assert exc_info.value.code == code

    def test_bad_json(self):
        with pytest.raises(ConfigError) as exc_info:
            MultiSignConfig.from_json("{")
        assert exc_info.value.code == 'PARSE_ERROR'

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            MultiSignConfig.from_file(tmp_path / "absent.json")
        assert exc_info.value.code == 'FILE_ERROR'


class TestEnvironmentOverrides:
    """Test MULTISIGN_* environment variables"""

    def test_overrides(self, tmp_path):
        env = {
            'MULTISIGN_LOG_LEVEL': 'warning',
            'MULTISIGN_STORAGE_BACKEND': 'FILE',
            'MULTISIGN_STORAGE_PATH': str(tmp_path / 'docs.json'),
            'MULTISIGN_SIGNING_TIMEOUT': '2.5',
            'MULTISIGN_MAX_DEPTH': '4',
        }
        config = apply_env_overrides(MultiSignConfig(), env)
        assert config.logging.level == 'WARNING'
        assert config.storage.backend == 'file'
        assert config.signing.timeout_seconds == 2.5
        assert config.canonicalization.max_depth == 4

    def test_depth_guard_disabled(self):
        assert apply_env_overrides(MultiSignConfig(), {'MULTISIGN_MAX_DEPTH': 'none'}).canonicalization.max_depth is None

    def test_invalid_number(self):
        with pytest.raises(ConfigError):
            apply_env_overrides(MultiSignConfig(), {'MULTISIGN_SIGNING_TIMEOUT': 'soon'})

    def test_load_config_file_then_env(self, tmp_path):
        path = tmp_path / "multisign.json"
        path.write_text('{"logging": {"level": "DEBUG"}}')
        config = load_config(path, {'MULTISIGN_LOG_LEVEL': 'ERROR'})
        assert config.logging.level == 'ERROR'


class TestCreateStore:
    """Test store construction from configuration"""

    def test_memory(self):
        assert isinstance(create_store(MultiSignConfig()), InMemoryDocumentStore)

    def test_file(self, tmp_path):
        config = MultiSignConfig.from_dict({'storage': {'backend': 'file', 'path': str(tmp_path / 'd.json')}})
        store = create_store(config)
        assert isinstance(store, JsonFileDocumentStore)
        assert store.path == tmp_path / 'd.json'

    def test_http(self):
        config = MultiSignConfig.from_dict({'storage': {'backend': 'http', 'base_url': 'https://x.example.com'}})
        store = create_store(config)
        assert isinstance(store, HttpDocumentStore)
        assert store.config.base_url == 'https://x.example.com/'


class TestConfigureLogging:
    """Test logging setup"""

    def test_level_and_single_handler(self):
        logger = configure_logging(LoggingConfig(level='debug'), logger_name='multisign_sdk.test_logging')
        configure_logging(LoggingConfig(level='WARNING'), logger_name='multisign_sdk.test_logging')
        assert logger.level == logging.WARNING
        assert len([h for h in logger.handlers if getattr(h, '_multisign_handler', False)]) == 1

    def test_structured_formatter(self):
        logger = configure_logging(LoggingConfig(structured=True), logger_name='multisign_sdk.test_structured')
        assert isinstance(logger.handlers[-1].formatter, JsonLineFormatter)

        record = logging.LogRecord('x', logging.INFO, __file__, 1, 'hello %s', ('world',), None)
        entry = json.loads(JsonLineFormatter().format(record))
        assert entry['message'] == 'hello world'
        assert entry['level'] == 'INFO'
