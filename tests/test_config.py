"""Unit tests for Config."""
import pytest

from config import DEFAULT_SOURCE_URL, Config
from errors import ConfigError


@pytest.fixture
def base_env():
    return {
        'STORE_ENDPOINT_URL': 'https://dynamodb.eu-central-1.amazonaws.com',
        'STORE_ACCESS_KEY': 'AKIDEXAMPLE:s3cr3t',
    }


def test_from_env_defaults(base_env):
    """Test that optional settings take their defaults."""
    config = Config.from_env(base_env)

    assert config.store_endpoint_url == 'https://dynamodb.eu-central-1.amazonaws.com'
    assert config.access_key_id == 'AKIDEXAMPLE'
    assert config.secret_access_key == 's3cr3t'
    assert config.region == 'eu-central-1'
    assert config.table_name == 'events'
    assert config.source_url == DEFAULT_SOURCE_URL
    assert config.request_timeout is None
    assert config.log_level == 'INFO'


def test_from_env_overrides(base_env):
    """Test that optional settings are read when present."""
    base_env.update({
        'STORE_REGION': 'us-east-1',
        'TABLE_NAME': 'events-staging',
        'SOURCE_URL': 'https://example.com/list/',
        'REQUEST_TIMEOUT': '12.5',
        'LOG_LEVEL': 'DEBUG',
    })

    config = Config.from_env(base_env)

    assert config.region == 'us-east-1'
    assert config.table_name == 'events-staging'
    assert config.source_url == 'https://example.com/list/'
    assert config.request_timeout == 12.5
    assert config.log_level == 'DEBUG'


def test_secret_may_contain_colons(base_env):
    """Test that only the first colon separates key id and secret."""
    base_env['STORE_ACCESS_KEY'] = 'key:abc:def'

    config = Config.from_env(base_env)

    assert config.access_key_id == 'key'
    assert config.secret_access_key == 'abc:def'


@pytest.mark.parametrize('missing, expected', [
    (('STORE_ENDPOINT_URL',), 'STORE_ENDPOINT_URL'),
    (('STORE_ACCESS_KEY',), 'STORE_ACCESS_KEY'),
    (('STORE_ENDPOINT_URL', 'STORE_ACCESS_KEY'),
     'STORE_ENDPOINT_URL, STORE_ACCESS_KEY'),
])
def test_missing_required_settings(base_env, missing, expected):
    """Test that every missing required setting is named."""
    for name in missing:
        del base_env[name]

    with pytest.raises(ConfigError, match=expected):
        Config.from_env(base_env)


def test_blank_required_setting_counts_as_missing(base_env):
    base_env['STORE_ACCESS_KEY'] = '   '

    with pytest.raises(ConfigError, match='STORE_ACCESS_KEY'):
        Config.from_env(base_env)


@pytest.mark.parametrize('credential', ['no-separator', ':secret', 'key:'])
def test_malformed_credential(base_env, credential):
    """Test that a credential without both parts is rejected."""
    base_env['STORE_ACCESS_KEY'] = credential

    with pytest.raises(ConfigError, match='<key-id>:<secret>'):
        Config.from_env(base_env)


@pytest.mark.parametrize('timeout', ['soon', '0', '-3'])
def test_invalid_timeout(base_env, timeout):
    base_env['REQUEST_TIMEOUT'] = timeout

    with pytest.raises(ConfigError, match='REQUEST_TIMEOUT'):
        Config.from_env(base_env)
