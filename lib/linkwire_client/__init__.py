from .client import AsyncLinkwireClient, LinkwireClient
from .config_types import ClientConfig
from .connection import ConnectionSettings, ResolvedConnection
from .errors import ApiError, AuthError, LinkwireClientError, NetworkError
from .serialization import AnnotationExclusionStrategy, excluded

__all__ = [
    "LinkwireClient",
    "AsyncLinkwireClient",
    "ClientConfig",
    "ConnectionSettings",
    "ResolvedConnection",
    "AnnotationExclusionStrategy",
    "excluded",
    "LinkwireClientError",
    "ApiError",
    "AuthError",
    "NetworkError",
]
