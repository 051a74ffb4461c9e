"""
Tests for RestBridge configuration

Tests EngineConfig defaults, dictionary normalization and YAML loading.
"""

import pytest
import yaml

from restbridge.common.config import (
    CONFIG_ENV_VAR,
    DEFAULT_API_KEY_HEADERS,
    DEFAULT_API_KEY_QUERY_PARAMS,
    EngineConfig,
)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / 'restbridge.yaml'
    path.write_text(
        """
api_key_header_names:
  - X-Custom-Key
timeout: 10
verify_ssl: false
max_retries: 1
log_level: debug
""",
        encoding='utf-8'
    )
    return path


class TestEngineConfig:
    """Test config construction."""

    def test_defaults(self):
        config = EngineConfig()

        assert config.api_key_header_names == DEFAULT_API_KEY_HEADERS
        assert config.api_key_query_names == DEFAULT_API_KEY_QUERY_PARAMS
        assert config.timeout == 30.0
        assert config.verify_ssl is True
        assert config.max_retries == 3
        assert config.follow_redirects is True
        assert config.log_level == 'WARNING'

    def test_defaults_not_shared(self):
        config = EngineConfig()
        config.api_key_header_names.append('x-extra')
        assert 'x-extra' not in EngineConfig().api_key_header_names

    def test_from_dict_normalizes(self):
        config = EngineConfig.from_dict({
            'api_key_header_names': ['X-Key'],
            'api_key_query_names': ['Sig'],
            'timeout': '2.5',
            'log_level': 'info',
            'unknown': 'ignored'
        })

        assert config.api_key_header_names == ['x-key']
        assert config.api_key_query_names == ['sig']
        assert config.timeout == 2.5
        assert config.log_level == 'INFO'

    def test_from_empty_dict(self):
        assert EngineConfig.from_dict(None) == EngineConfig()


class TestYamlLoading:
    """Test YAML config files."""

    def test_from_yaml(self, config_file):
        config = EngineConfig.from_yaml(str(config_file))

        assert config.api_key_header_names == ['x-custom-key']
        assert config.api_key_query_names == DEFAULT_API_KEY_QUERY_PARAMS
        assert config.timeout == 10.0
        assert config.verify_ssl is False
        assert config.max_retries == 1
        assert config.log_level == 'DEBUG'

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            EngineConfig.from_yaml(str(tmp_path / 'missing.yaml'))

    def test_empty_file(self, tmp_path):
        path = tmp_path / 'empty.yaml'
        path.write_text('', encoding='utf-8')
        assert EngineConfig.from_yaml(str(path)) == EngineConfig()

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / 'list.yaml'
        path.write_text('- a\n- b\n', encoding='utf-8')

        with pytest.raises(ValueError, match='expected a mapping'):
            EngineConfig.from_yaml(str(path))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / 'bad.yaml'
        path.write_text('timeout: [1, 2\n', encoding='utf-8')

        with pytest.raises(ValueError, match='Invalid YAML'):
            EngineConfig.from_yaml(str(path))

    def test_load_from_environment(self, config_file, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))
        assert EngineConfig.load().timeout == 10.0

    def test_load_explicit_path_wins(self, config_file, tmp_path, monkeypatch):
        other = tmp_path / 'other.yaml'
        other.write_text('timeout: 99\n', encoding='utf-8')
        monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))

        assert EngineConfig.load(str(other)).timeout == 99.0

    def test_load_defaults(self, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        assert EngineConfig.load() == EngineConfig()

    def test_save_round_trip(self, tmp_path):
        path = tmp_path / 'saved.yaml'
        config = EngineConfig(timeout=12.0, max_retries=0, api_key_query_names=['sig'])

        config.save(str(path))

        with open(path, encoding='utf-8') as f:
            assert yaml.safe_load(f)['timeout'] == 12.0
        assert EngineConfig.from_yaml(str(path)) == config
