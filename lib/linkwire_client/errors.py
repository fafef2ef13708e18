from __future__ import annotations

import json


class LinkwireClientError(Exception):
    """Base client error."""


class NetworkError(LinkwireClientError):
    """Transport/network layer error."""


class ApiError(LinkwireClientError):
    def __init__(self, status_code: int, message: str, details: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class AuthError(ApiError):
    """Auth-related API error."""


def parse_api_error_detail(details: str | None) -> dict | None:
    if not details:
        return None
    try:
        data = json.loads(details)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None
