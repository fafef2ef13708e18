from __future__ import annotations

from linkwire_client import LinkwireClient
from linkwire_client.config_types import ClientConfig
from linkwire_client.connection import ConnectionSettings


def normalize_base_url(raw: str | None) -> str:
    value = (raw or "").strip()
    if not value:
        return ""
    value = value.rstrip("/")
    lowered = value.lower()
    if lowered.startswith("http://") or lowered.startswith("https://"):
        return value

    host = value.split("/", 1)[0]
    host = host.split(":", 1)[0].lower()
    if host in {"localhost", "127.0.0.1", "0.0.0.0"}:
        return f"http://{value}"
    return f"https://{value}"


def make_client(*, base_url: str, token: str | None, env_prefix: str = "") -> LinkwireClient:
    return LinkwireClient(
        ClientConfig(
            base_url=normalize_base_url(base_url),
            token=token or None,
            connection=ConnectionSettings.from_env(prefix=env_prefix),
        )
    )
