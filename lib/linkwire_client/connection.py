from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import Any, Mapping

import httpx

PROXY_HOST_ENV = "PROXY_HOST"
PROXY_PORT_ENV = "PROXY_PORT"
CONNECTION_POOL_SIZE_ENV = "CONNECTION_POOL_SIZE"
CONNECTION_IDLE_TIMEOUT_ENV = "CONNECTION_IDLE_TIME"
MAXIMUM_ASYNC_REQUESTS_ENV = "MAXIMUM_ASYNC_REQUESTS"
MAXIMUM_ASYNC_REQUESTS_PER_HOST_ENV = "MAXIMUM_ASYNC_REQUESTS_PER_HOST"
WRITE_TIMEOUT_ENV = "WRITE_TIMEOUT"
READ_TIMEOUT_ENV = "READ_TIMEOUT"
CONNECTION_TIMEOUT_ENV = "CONNECTION_TIMEOUT"

DEFAULT_CONNECT_TIMEOUT_S = 120
DEFAULT_WRITE_TIMEOUT_S = 60
DEFAULT_READ_TIMEOUT_S = 300
DEFAULT_CONNECTION_IDLE_TIMEOUT_S = 300
DEFAULT_CONNECTION_POOL_SIZE = 32
DEFAULT_MAXIMUM_ASYNC_REQUESTS = 32
DEFAULT_MAXIMUM_ASYNC_REQUESTS_PER_HOST = 32
DEFAULT_PROXY_PORT = 443

SOURCE_EXPLICIT = "explicit"
SOURCE_ENV = "env"
SOURCE_DEFAULT = "default"

# attribute name -> (env var, default)
SETTINGS: dict[str, tuple[str, Any]] = {
    "connect_timeout": (CONNECTION_TIMEOUT_ENV, DEFAULT_CONNECT_TIMEOUT_S),
    "write_timeout": (WRITE_TIMEOUT_ENV, DEFAULT_WRITE_TIMEOUT_S),
    "read_timeout": (READ_TIMEOUT_ENV, DEFAULT_READ_TIMEOUT_S),
    "connection_idle_timeout": (CONNECTION_IDLE_TIMEOUT_ENV, DEFAULT_CONNECTION_IDLE_TIMEOUT_S),
    "connection_pool_size": (CONNECTION_POOL_SIZE_ENV, DEFAULT_CONNECTION_POOL_SIZE),
    "maximum_async_requests": (MAXIMUM_ASYNC_REQUESTS_ENV, DEFAULT_MAXIMUM_ASYNC_REQUESTS),
    "maximum_async_requests_per_host": (
        MAXIMUM_ASYNC_REQUESTS_PER_HOST_ENV,
        DEFAULT_MAXIMUM_ASYNC_REQUESTS_PER_HOST,
    ),
    "proxy_host": (PROXY_HOST_ENV, None),
    "proxy_port": (PROXY_PORT_ENV, DEFAULT_PROXY_PORT),
}


_INT_RE = re.compile(r"\s*[+-]?\d+\s*")

# env values below these are treated as malformed
MINIMUMS: dict[str, int] = {
    "connect_timeout": 0,
    "write_timeout": 0,
    "read_timeout": 0,
    "connection_idle_timeout": 0,
    "connection_pool_size": 0,
    "maximum_async_requests": 1,
    "maximum_async_requests_per_host": 1,
    "proxy_port": 1,
}


def _parse_int(raw: str | None, minimum: int = 0) -> int | None:
    if raw is None or not _INT_RE.fullmatch(raw):
        return None
    value = int(raw)
    return value if value >= minimum else None


def _format_host(host: str) -> str:
    if ":" in host and not host.startswith("["):
        return f"[{host}]"
    return host


@dataclass(frozen=True)
class ResolvedConnection:
    """Point-in-time view of every resolved connection setting."""

    connect_timeout: float
    write_timeout: float
    read_timeout: float
    connection_idle_timeout: float
    connection_pool_size: int
    maximum_async_requests: int
    maximum_async_requests_per_host: int
    proxy_host: str | None
    proxy_port: int
    proxy: httpx.Proxy | None = None
    sources: Mapping[str, str] = field(default_factory=dict)

    def timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            connect=self.connect_timeout,
            read=self.read_timeout,
            write=self.write_timeout,
            pool=self.connect_timeout,
        )

    def limits(self) -> httpx.Limits:
        return httpx.Limits(
            max_connections=self.maximum_async_requests,
            max_keepalive_connections=self.connection_pool_size,
            keepalive_expiry=self.connection_idle_timeout,
        )

    def as_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in SETTINGS}


@dataclass
class ConnectionSettings:
    """
    Connection tuning for the HTTP transport.

    Each setting resolves as: value set on this object, then the integer in
    its environment variable, then the compiled-in default. Missing and
    malformed environment values both fall through to the default.

    ``env`` is a snapshot of the process environment taken at construction;
    pass a mapping explicitly to resolve against something else.
    """

    connect_timeout: float | None = None
    write_timeout: float | None = None
    read_timeout: float | None = None
    connection_idle_timeout: float | None = None
    connection_pool_size: int | None = None
    maximum_async_requests: int | None = None
    maximum_async_requests_per_host: int | None = None
    proxy_host: str | None = None
    proxy_port: int | None = None
    proxy_auth: tuple[str, str] | None = None
    env: Mapping[str, str] = field(default_factory=lambda: dict(os.environ), repr=False)
    env_prefix: str = ""

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None, *, prefix: str = "") -> "ConnectionSettings":
        snapshot = dict(os.environ if env is None else env)
        return cls(env=snapshot, env_prefix=prefix)

    def env_var(self, name: str) -> str:
        env_name, _ = SETTINGS[name]
        return f"{self.env_prefix}{env_name}"

    def _resolve_int(self, name: str) -> tuple[Any, str]:
        explicit = getattr(self, name)
        if explicit is not None:
            return explicit, SOURCE_EXPLICIT
        parsed = _parse_int(self.env.get(self.env_var(name)), MINIMUMS.get(name, 0))
        if parsed is not None:
            return parsed, SOURCE_ENV
        _, default = SETTINGS[name]
        return default, SOURCE_DEFAULT

    def _resolve_proxy_host(self) -> tuple[str | None, str]:
        if self.proxy_host is not None:
            host, source = self.proxy_host, SOURCE_EXPLICIT
        else:
            host, source = self.env.get(self.env_var("proxy_host")), SOURCE_ENV
        if host is None or not host.strip():
            return None, SOURCE_DEFAULT
        return host.strip(), source

    def resolve_connect_timeout(self) -> float:
        return self._resolve_int("connect_timeout")[0]

    def resolve_write_timeout(self) -> float:
        return self._resolve_int("write_timeout")[0]

    def resolve_read_timeout(self) -> float:
        return self._resolve_int("read_timeout")[0]

    def resolve_connection_idle_timeout(self) -> float:
        return self._resolve_int("connection_idle_timeout")[0]

    def resolve_connection_pool_size(self) -> int:
        return self._resolve_int("connection_pool_size")[0]

    def resolve_maximum_async_requests(self) -> int:
        return self._resolve_int("maximum_async_requests")[0]

    def resolve_maximum_async_requests_per_host(self) -> int:
        return self._resolve_int("maximum_async_requests_per_host")[0]

    def resolve_proxy_host(self) -> str | None:
        return self._resolve_proxy_host()[0]

    def resolve_proxy_port(self) -> int:
        return self._resolve_int("proxy_port")[0]

    def proxy(self) -> httpx.Proxy | None:
        host = self.resolve_proxy_host()
        if not host:
            return None
        url = f"http://{_format_host(host)}:{self.resolve_proxy_port()}"
        try:
            if self.proxy_auth:
                return httpx.Proxy(url, auth=self.proxy_auth)
            return httpx.Proxy(url)
        except httpx.InvalidURL:
            return None

    def resolved(self) -> ResolvedConnection:
        values: dict[str, Any] = {}
        sources: dict[str, str] = {}
        for name in SETTINGS:
            if name == "proxy_host":
                values[name], sources[name] = self._resolve_proxy_host()
            else:
                values[name], sources[name] = self._resolve_int(name)
        return ResolvedConnection(proxy=self.proxy(), sources=sources, **values)
