from __future__ import annotations

import httpx
import pytest

from linkwire_client.connection import ConnectionSettings

DEFAULTS = {
    "resolve_connect_timeout": 120,
    "resolve_write_timeout": 60,
    "resolve_read_timeout": 300,
    "resolve_connection_idle_timeout": 300,
    "resolve_connection_pool_size": 32,
    "resolve_maximum_async_requests": 32,
    "resolve_maximum_async_requests_per_host": 32,
    "resolve_proxy_port": 443,
}

ENV_NAMES = {
    "resolve_connect_timeout": "CONNECTION_TIMEOUT",
    "resolve_write_timeout": "WRITE_TIMEOUT",
    "resolve_read_timeout": "READ_TIMEOUT",
    "resolve_connection_idle_timeout": "CONNECTION_IDLE_TIME",
    "resolve_connection_pool_size": "CONNECTION_POOL_SIZE",
    "resolve_maximum_async_requests": "MAXIMUM_ASYNC_REQUESTS",
    "resolve_maximum_async_requests_per_host": "MAXIMUM_ASYNC_REQUESTS_PER_HOST",
    "resolve_proxy_port": "PROXY_PORT",
}


@pytest.mark.parametrize("accessor", sorted(DEFAULTS))
def test_defaults_without_env(accessor) -> None:
    settings = ConnectionSettings(env={})
    assert getattr(settings, accessor)() == DEFAULTS[accessor]


@pytest.mark.parametrize("accessor", sorted(ENV_NAMES))
def test_env_value_used_when_not_set(accessor) -> None:
    settings = ConnectionSettings(env={ENV_NAMES[accessor]: "7"})
    assert getattr(settings, accessor)() == 7


@pytest.mark.parametrize("accessor", sorted(ENV_NAMES))
@pytest.mark.parametrize("raw", ["abc", "", "1.5", "1_000", "0x10", "-1"])
def test_malformed_env_falls_back_to_default(accessor, raw) -> None:
    settings = ConnectionSettings(env={ENV_NAMES[accessor]: raw})
    assert getattr(settings, accessor)() == DEFAULTS[accessor]


def test_explicit_value_wins_over_env() -> None:
    env = {name: "7" for name in ENV_NAMES.values()}
    settings = ConnectionSettings(
        connect_timeout=1,
        write_timeout=2,
        read_timeout=3,
        connection_idle_timeout=4,
        connection_pool_size=5,
        maximum_async_requests=6,
        maximum_async_requests_per_host=8,
        proxy_port=9,
        env=env,
    )
    assert settings.resolve_connect_timeout() == 1
    assert settings.resolve_write_timeout() == 2
    assert settings.resolve_read_timeout() == 3
    assert settings.resolve_connection_idle_timeout() == 4
    assert settings.resolve_connection_pool_size() == 5
    assert settings.resolve_maximum_async_requests() == 6
    assert settings.resolve_maximum_async_requests_per_host() == 8
    assert settings.resolve_proxy_port() == 9


def test_explicit_zero_is_not_treated_as_absent() -> None:
    settings = ConnectionSettings(connection_pool_size=0, env={"CONNECTION_POOL_SIZE": "64"})
    assert settings.resolve_connection_pool_size() == 0


def test_env_value_with_surrounding_whitespace_is_accepted() -> None:
    assert ConnectionSettings(env={"CONNECTION_POOL_SIZE": " 64 "}).resolve_connection_pool_size() == 64


@pytest.mark.parametrize(
    "accessor",
    ["resolve_maximum_async_requests", "resolve_maximum_async_requests_per_host", "resolve_proxy_port"],
)
def test_zero_env_count_falls_back_to_default(accessor) -> None:
    settings = ConnectionSettings(env={ENV_NAMES[accessor]: "0"})
    assert getattr(settings, accessor)() == DEFAULTS[accessor]


def test_pool_size_examples() -> None:
    assert ConnectionSettings(env={"CONNECTION_POOL_SIZE": "64"}).resolve_connection_pool_size() == 64
    assert ConnectionSettings(env={"CONNECTION_POOL_SIZE": "abc"}).resolve_connection_pool_size() == 32


def test_accessors_re_resolve_after_override_changes() -> None:
    settings = ConnectionSettings(env={"READ_TIMEOUT": "10"})
    assert settings.resolve_read_timeout() == 10
    settings.read_timeout = 20
    assert settings.resolve_read_timeout() == 20


def test_env_prefix_applies_to_every_variable() -> None:
    settings = ConnectionSettings(
        env={"LINKWIRE_WRITE_TIMEOUT": "5", "WRITE_TIMEOUT": "9"},
        env_prefix="LINKWIRE_",
    )
    assert settings.env_var("write_timeout") == "LINKWIRE_WRITE_TIMEOUT"
    assert settings.resolve_write_timeout() == 5


def test_from_env_snapshots_process_environment(monkeypatch) -> None:
    monkeypatch.setenv("CONNECTION_TIMEOUT", "42")
    settings = ConnectionSettings.from_env()
    monkeypatch.setenv("CONNECTION_TIMEOUT", "43")
    assert settings.resolve_connect_timeout() == 42


def test_from_env_uses_given_mapping(monkeypatch) -> None:
    monkeypatch.setenv("MAXIMUM_ASYNC_REQUESTS", "99")
    settings = ConnectionSettings.from_env({"MAXIMUM_ASYNC_REQUESTS": "3"})
    assert settings.resolve_maximum_async_requests() == 3


def test_proxy_absent_without_host() -> None:
    settings = ConnectionSettings(env={"PROXY_PORT": "8080"})
    assert settings.resolve_proxy_host() is None
    assert settings.proxy() is None


def test_proxy_blank_host_is_absent() -> None:
    assert ConnectionSettings(env={"PROXY_HOST": "  "}).proxy() is None
    assert ConnectionSettings(proxy_host="", env={}).proxy() is None


def test_proxy_from_env_host_uses_default_port() -> None:
    proxy = ConnectionSettings(env={"PROXY_HOST": "proxy.internal"}).proxy()
    assert isinstance(proxy, httpx.Proxy)
    assert proxy.url == httpx.URL("http://proxy.internal:443")


def test_proxy_malformed_port_falls_back_to_default() -> None:
    proxy = ConnectionSettings(env={"PROXY_HOST": "proxy.internal", "PROXY_PORT": "nope"}).proxy()
    assert proxy is not None
    assert proxy.url.port == 443


def test_proxy_explicit_host_and_port_with_auth() -> None:
    settings = ConnectionSettings(
        proxy_host="10.0.0.5",
        proxy_port=3128,
        proxy_auth=("user", "secret"),
        env={"PROXY_HOST": "ignored.example"},
    )
    proxy = settings.proxy()
    assert proxy is not None
    assert proxy.url.host == "10.0.0.5"
    assert proxy.url.port == 3128
    assert proxy.auth == ("user", "secret")


def test_resolved_reports_sources() -> None:
    settings = ConnectionSettings(
        read_timeout=12,
        env={"WRITE_TIMEOUT": "30", "CONNECTION_POOL_SIZE": "x"},
    )
    resolved = settings.resolved()
    assert resolved.read_timeout == 12
    assert resolved.write_timeout == 30
    assert resolved.connection_pool_size == 32
    assert resolved.sources["read_timeout"] == "explicit"
    assert resolved.sources["write_timeout"] == "env"
    assert resolved.sources["connection_pool_size"] == "default"
    assert resolved.sources["proxy_host"] == "default"
    assert resolved.proxy is None


def test_resolved_maps_to_httpx_timeout_and_limits() -> None:
    resolved = ConnectionSettings(
        connection_pool_size=4,
        maximum_async_requests=10,
        env={"CONNECTION_IDLE_TIME": "15"},
    ).resolved()

    timeout = resolved.timeout()
    assert timeout.connect == 120
    assert timeout.read == 300
    assert timeout.write == 60
    assert timeout.pool == 120

    limits = resolved.limits()
    assert limits.max_connections == 10
    assert limits.max_keepalive_connections == 4
    assert limits.keepalive_expiry == 15


def test_proxy_ipv6_host_is_bracketed() -> None:
    proxy = ConnectionSettings(env={"PROXY_HOST": "::1", "PROXY_PORT": "3128"}).proxy()
    assert proxy is not None
    assert proxy.url == httpx.URL("http://[::1]:3128")
    assert proxy.url.host == "::1"


def test_proxy_bracketed_ipv6_host_kept() -> None:
    proxy = ConnectionSettings(proxy_host="[2001:db8::5]", env={}).proxy()
    assert proxy is not None
    assert proxy.url.port == 443
    assert proxy.url.host == "2001:db8::5"


def test_proxy_unparseable_host_means_no_proxy() -> None:
    settings = ConnectionSettings(env={"PROXY_HOST": "[::1"})
    assert settings.proxy() is None
    resolved = settings.resolved()
    assert resolved.proxy_host == "[::1"
    assert resolved.proxy is None
