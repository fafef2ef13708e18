from __future__ import annotations
from dataclasses import dataclass, field

from .connection import ConnectionSettings


@dataclass(frozen=True)
class ClientConfig:
    base_url: str
    token: str | None = None
    user_agent: str = "linkwire-client/0.1.0"
    connection: ConnectionSettings = field(default_factory=ConnectionSettings)
