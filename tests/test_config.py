import pytest

from fewsats_l402 import (
    ClientConfig,
    ClientParameters,
    ConfigError,
    FewsatsClient,
    RequestsTransport,
    build_environment,
    create_client,
    load_client_config,
)


def test_missing_api_key_fails_immediately(tmp_path):
    with pytest.raises(ConfigError, match="FEWSATS_API_KEY"):
        load_client_config(env_file=str(tmp_path / "missing.env"), base={})


def test_blank_api_key_fails():
    with pytest.raises(ConfigError):
        ClientConfig(api_key="   ")


def test_defaults_from_environment():
    config = load_client_config(env_file=None, base={"FEWSATS_API_KEY": "env-key"})
    assert config.api_key == "env-key"
    assert config.base_url == "https://api.fewsats.com"
    assert config.timeout_seconds == 10.0
    assert config.payment_timeout_seconds == 30.0


def test_precedence(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# comment\n"
        "FEWSATS_API_KEY=file-key\n"
        "export FEWSATS_BASE_URL='http://localhost:8000/'\n"
        "FEWSATS_TIMEOUT_SECONDS=5\n",
        encoding="utf-8",
    )

    config = load_client_config(
        env_file=str(env_file),
        base={"FEWSATS_TIMEOUT_SECONDS": "7"},
        overrides={"FEWSATS_PAYMENT_TIMEOUT_SECONDS": "45"},
        api_key="explicit-key",
    )

    assert config.api_key == "explicit-key"
    assert config.base_url == "http://localhost:8000"
    assert config.timeout_seconds == 7.0
    assert config.payment_timeout_seconds == 45.0


def test_parameters_bundle():
    config = load_client_config(
        env_file=None,
        base={},
        parameters=ClientParameters(api_key="p-key", timeout_seconds=3),
    )
    assert config.api_key == "p-key"
    assert config.timeout_seconds == 3.0


@pytest.mark.parametrize("raw", ["abc", "0", "-2"])
def test_invalid_timeout(raw):
    with pytest.raises(ConfigError):
        load_client_config(
            env_file=None, base={"FEWSATS_API_KEY": "k", "FEWSATS_TIMEOUT_SECONDS": raw}
        )


def test_repr_hides_api_key():
    assert "secret" not in repr(ClientConfig(api_key="secret"))


def test_build_environment_overrides_win():
    environment = build_environment(env_file=None, base={"A": "1"}, overrides={"A": "2"})
    assert environment.get("A") == "2"
    assert environment.get("B", "fallback") == "fallback"


def test_create_client_builds_requests_transport():
    client = create_client(env_file=None, base={}, api_key="k", base_url="http://localhost:8000")
    assert isinstance(client, FewsatsClient)
    assert isinstance(client.transport, RequestsTransport)
    assert client.transport.base_url == "http://localhost:8000"


def test_create_client_rejects_config_and_parameters():
    with pytest.raises(ValueError):
        create_client(config=ClientConfig(api_key="k"), api_key="other")
