from __future__ import annotations

import asyncio
import dataclasses
import json
import logging
from contextlib import asynccontextmanager
from typing import Any

import httpx

from .config_types import ClientConfig
from .connection import ResolvedConnection
from .errors import ApiError, AuthError, LinkwireClientError, NetworkError
from .serialization import to_dict

logger = logging.getLogger(__name__)


def _headers(cfg: ClientConfig) -> dict[str, str]:
    headers = {"User-Agent": cfg.user_agent}
    if cfg.token:
        headers["Authorization"] = f"Bearer {cfg.token}"
    return headers


def _client_kwargs(cfg: ClientConfig, conn: ResolvedConnection) -> dict[str, Any]:
    logger.debug(
        "transport for %s: timeout=%s limits=%s proxy=%s",
        cfg.base_url,
        conn.timeout(),
        conn.limits(),
        conn.proxy.url if conn.proxy else None,
    )
    return {
        "base_url": cfg.base_url.rstrip("/"),
        "timeout": conn.timeout(),
        "limits": conn.limits(),
        "proxy": conn.proxy,
        "headers": _headers(cfg),
        "follow_redirects": True,
    }


def _body(json_body: Any) -> Any:
    if dataclasses.is_dataclass(json_body) and not isinstance(json_body, type):
        return to_dict(json_body)
    return json_body


def _handle_response(method: str, path: str, r: httpx.Response) -> Any:
    # Try parse body as json for better errors / output
    data: Any = None
    text = None
    try:
        data = r.json()
    except ValueError:
        text = r.text

    if r.status_code >= 400:
        msg = f"{method} {path} failed with {r.status_code}"
        details = None

        if isinstance(data, dict) and "detail" in data:
            details = json.dumps(data, ensure_ascii=False)
            msg = str(data.get("detail") or msg)
        elif text:
            details = text[:1000]

        if r.status_code in (401, 403):
            raise AuthError(r.status_code, msg, details)
        raise ApiError(r.status_code, msg, details)

    return data if data is not None else r.text


class Transport:
    def __init__(self, cfg: ClientConfig, *, transport: httpx.BaseTransport | None = None):
        self._cfg = cfg
        self._conn = cfg.connection.resolved()
        self._client = httpx.Client(transport=transport, **_client_kwargs(cfg, self._conn))

    @property
    def connection(self) -> ResolvedConnection:
        return self._conn

    def close(self) -> None:
        self._client.close()

    def request(self, method: str, path: str, *, json_body: Any | None = None) -> Any:
        try:
            r = self._client.request(method, path, json=_body(json_body))
        except httpx.RequestError as e:
            raise NetworkError(str(e)) from e
        return _handle_response(method, path, r)


class _HostSlots:
    def __init__(self, limit: int):
        self.semaphore = asyncio.Semaphore(limit)
        self.users = 0


class AsyncTransport:
    """
    Async counterpart of :class:`Transport`.

    ``maximum_async_requests`` caps requests in flight across all hosts and
    ``maximum_async_requests_per_host`` caps them per target host. A request
    takes its host slot before a global one.
    """

    def __init__(self, cfg: ClientConfig, *, transport: httpx.AsyncBaseTransport | None = None):
        self._cfg = cfg
        self._conn = cfg.connection.resolved()
        for name in ("maximum_async_requests", "maximum_async_requests_per_host"):
            limit = getattr(self._conn, name)
            if limit < 1:
                raise LinkwireClientError(f"{name} must be at least 1, got {limit}")
        self._client = httpx.AsyncClient(transport=transport, **_client_kwargs(cfg, self._conn))
        self._global_slots = asyncio.Semaphore(self._conn.maximum_async_requests)
        self._host_slots: dict[str, _HostSlots] = {}

    @property
    def connection(self) -> ResolvedConnection:
        return self._conn

    @asynccontextmanager
    async def _host_slot(self, host: str):
        slots = self._host_slots.get(host)
        if slots is None:
            slots = _HostSlots(self._conn.maximum_async_requests_per_host)
            self._host_slots[host] = slots
        slots.users += 1
        try:
            async with slots.semaphore:
                yield
        finally:
            slots.users -= 1
            # drop idle hosts
            if slots.users == 0:
                del self._host_slots[host]

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(self, method: str, path: str, *, json_body: Any | None = None) -> Any:
        req = self._client.build_request(method, path, json=_body(json_body))
        async with self._host_slot(req.url.host), self._global_slots:
            try:
                r = await self._client.send(req)
            except httpx.RequestError as e:
                raise NetworkError(str(e)) from e
        return _handle_response(method, path, r)
