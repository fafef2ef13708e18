from __future__ import annotations

import httpx
import typer

from linkwire_client.errors import ApiError, LinkwireClientError

from .. import console
from ..http import make_client


def get(
        path: str = typer.Argument(..., help="Request path, e.g. /health."),
        base_url: str = typer.Option(..., "--base-url", envvar="LINKWIRE_BASE_URL", help="API base URL."),
        token: str | None = typer.Option(None, "--token", envvar="LINKWIRE_TOKEN", help="Bearer token."),
        prefix: str = typer.Option("", "--prefix", help="Environment variable prefix for connection settings."),
):
    """GET a path through the client and print the JSON response."""
    try:
        with make_client(base_url=base_url, token=token, env_prefix=prefix) as client:
            data = client.get(path)
    except ApiError as e:
        console.err(f"{e} (status {e.status_code})")
        raise typer.Exit(code=2)
    except LinkwireClientError as e:
        console.err(str(e))
        raise typer.Exit(code=2)
    except httpx.InvalidURL as e:
        console.err(f"Invalid URL: {e}")
        raise typer.Exit(code=2)
    console.print_json(data)
