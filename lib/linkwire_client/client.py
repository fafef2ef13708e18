from __future__ import annotations

from typing import Any

import httpx

from .config_types import ClientConfig
from .connection import ResolvedConnection
from .transport import AsyncTransport, Transport


def _as_json_dict(data: Any) -> dict[str, Any]:
    if isinstance(data, dict):
        return data
    if isinstance(data, list):
        return {"items": data}
    return {"raw": data}


class LinkwireClient:
    def __init__(self, cfg: ClientConfig, *, transport: httpx.BaseTransport | None = None):
        self._t = Transport(cfg, transport=transport)

    def __enter__(self) -> "LinkwireClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def connection(self) -> ResolvedConnection:
        return self._t.connection

    def request_json(self, method: str, path: str, *, json_body: Any | None = None) -> dict[str, Any]:
        """Internal helper for endpoints that should return JSON."""
        return _as_json_dict(self._t.request(method, path, json_body=json_body))

    def get(self, path: str) -> dict[str, Any]:
        return self.request_json("GET", path)

    def post(self, path: str, body: Any | None = None) -> dict[str, Any]:
        return self.request_json("POST", path, json_body=body if body is not None else {})

    def close(self) -> None:
        self._t.close()


class AsyncLinkwireClient:
    def __init__(self, cfg: ClientConfig, *, transport: httpx.AsyncBaseTransport | None = None):
        self._t = AsyncTransport(cfg, transport=transport)

    async def __aenter__(self) -> "AsyncLinkwireClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    @property
    def connection(self) -> ResolvedConnection:
        return self._t.connection

    async def request_json(self, method: str, path: str, *, json_body: Any | None = None) -> dict[str, Any]:
        return _as_json_dict(await self._t.request(method, path, json_body=json_body))

    async def get(self, path: str) -> dict[str, Any]:
        return await self.request_json("GET", path)

    async def post(self, path: str, body: Any | None = None) -> dict[str, Any]:
        return await self.request_json("POST", path, json_body=body if body is not None else {})

    async def close(self) -> None:
        await self._t.aclose()
