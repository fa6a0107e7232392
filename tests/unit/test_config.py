import aws_cdk as core
import pytest

from config import get_config
from stacks.errors import ConfigurationError


@pytest.fixture
def test_env(monkeypatch):
    monkeypatch.setenv("TEST_ACCOUNT", "123456789012")
    monkeypatch.setenv("TEST_REGION", "eu-west-1")
    for key in ("TEST_HITS_READ_CAPACITY", "GITHUB_USERNAME", "GITHUB_REPOSITORY", "GITHUB_CONNECTION_ARN"):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def make_app():
    return core.App(context={"env": "test"})


def test_config_from_environment(test_env):
    config = get_config(make_app())

    assert config.name == "test"
    assert config.account == "123456789012"
    assert config.region == "eu-west-1"
    assert config.read_capacity is None
    assert not config.has_pipeline


def test_missing_required_variable(test_env):
    test_env.delenv("TEST_REGION")

    with pytest.raises(RuntimeError, match="TEST_REGION"):
        get_config(make_app())


def test_read_capacity_parsed(test_env):
    test_env.setenv("TEST_HITS_READ_CAPACITY", "15")

    assert get_config(make_app()).read_capacity == 15


def test_read_capacity_not_a_number(test_env):
    test_env.setenv("TEST_HITS_READ_CAPACITY", "lots")

    with pytest.raises(ConfigurationError) as excinfo:
        get_config(make_app())
    assert excinfo.value.field == "TEST_HITS_READ_CAPACITY"


def test_read_capacity_out_of_range(test_env):
    test_env.setenv("TEST_HITS_READ_CAPACITY", "25")

    with pytest.raises(ConfigurationError) as excinfo:
        get_config(make_app())
    assert excinfo.value.field == "read_capacity"
    assert excinfo.value.value == 25


def test_pipeline_enabled_with_full_github_config(test_env):
    test_env.setenv("GITHUB_USERNAME", "octocat")
    test_env.setenv("GITHUB_REPOSITORY", "hit-counter")
    test_env.setenv("GITHUB_CONNECTION_ARN", "arn:aws:codestar-connections:eu-west-1:123456789012:connection/abc")

    assert get_config(make_app()).has_pipeline
