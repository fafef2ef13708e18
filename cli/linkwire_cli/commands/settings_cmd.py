from __future__ import annotations

import typer
from rich.table import Table

from linkwire_client.connection import SETTINGS, ConnectionSettings

from .. import console

app = typer.Typer(help="Inspect connection settings resolved from the environment.")


def _display(value) -> str:
    return "-" if value is None else str(value)


@app.command("show")
def show_settings(
        as_json: bool = typer.Option(False, "--json", help="Print as JSON."),
        prefix: str = typer.Option("", "--prefix", help="Environment variable prefix, e.g. LINKWIRE_."),
):
    settings = ConnectionSettings.from_env(prefix=prefix)
    resolved = settings.resolved()

    if as_json:
        console.print_json(
            {
                name: {"value": value, "source": resolved.sources[name], "env": settings.env_var(name)}
                for name, value in resolved.as_dict().items()
            }
        )
        return

    table = Table(title="Connection settings")
    table.add_column("setting")
    table.add_column("value", justify="right")
    table.add_column("source")
    table.add_column("env")
    for name, value in resolved.as_dict().items():
        table.add_row(name, _display(value), resolved.sources[name], settings.env_var(name))
    console.print(table)
    proxy = resolved.proxy
    if resolved.proxy_host and proxy is None:
        console.warn(f"proxy host {resolved.proxy_host!r} is not a valid address, no proxy will be used")
        return
    console.info(f"proxy: {proxy.url if proxy else 'none'}")


@app.command("env")
def list_env(
        prefix: str = typer.Option("", "--prefix", help="Environment variable prefix, e.g. LINKWIRE_."),
):
    for name, (env_name, default) in SETTINGS.items():
        console.console.print(f"{prefix}{env_name}={_display(default)}  # {name}", markup=False)
