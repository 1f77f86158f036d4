"""Thin CLI wrapper over :class:`sengled_cloud.SengledApi`."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import typer

from sengled_cloud.client import Device, SengledApi
from sengled_cloud.errors import SengledError

app = typer.Typer(help="Control Sengled Wi-Fi bulbs.", invoke_without_command=True)

RED = (255, 0, 0)
BLUE = (0, 0, 255)


@dataclass
class _Credentials:
    user: str
    password: str


@app.callback()
def main(
    ctx: typer.Context,
    user: str | None = typer.Option(None, envvar="SENGLED_USER", help="Sengled account email"),
    password: str | None = typer.Option(
        None, envvar="SENGLED_PASS", help="Sengled account password"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log HTTP and MQTT traffic"),
) -> None:
    """Control Sengled Wi-Fi bulbs."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    ctx.obj = _Credentials(user or "", password or "")
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)


def _run(ctx: typer.Context, action: Callable[[SengledApi], Awaitable[None]]) -> None:
    """Log in, run *action* against the session, and report errors."""
    creds: _Credentials = ctx.obj
    if not creds.user or not creds.password:
        typer.echo("Set SENGLED_USER and SENGLED_PASS, or pass --user and --password.", err=True)
        raise typer.Exit(1)

    async def run() -> None:
        async with await SengledApi.login(creds.user, creds.password) as api:
            await action(api)

    try:
        asyncio.run(run())
    except (SengledError, LookupError, ValueError) as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1) from None


async def _find_device(api: SengledApi, name: str) -> Device:
    """Return the first device called *name*."""
    for device in await api.list_devices():
        if device.name == name:
            return device
    raise LookupError(f"No device named '{name}'. Run `sengled devices` to list them.")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def devices(ctx: typer.Context) -> None:
    """List the devices registered to the account."""

    async def action(api: SengledApi) -> None:
        found = await api.list_devices()
        if not found:
            typer.echo("No devices found.", err=True)
            raise typer.Exit(1)
        for i, device in enumerate(found):
            typer.echo(f"  [{i}] {device.name}  {device.mac}")

    _run(ctx, action)


@app.command()
def on(ctx: typer.Context, name: str = typer.Argument(..., help="Device name")) -> None:
    """Turn a device on."""

    async def action(api: SengledApi) -> None:
        await api.turn_on(await _find_device(api, name))
        typer.echo(f"Turned on {name}.")

    _run(ctx, action)


@app.command()
def off(ctx: typer.Context, name: str = typer.Argument(..., help="Device name")) -> None:
    """Turn a device off."""

    async def action(api: SengledApi) -> None:
        await api.turn_off(await _find_device(api, name))
        typer.echo(f"Turned off {name}.")

    _run(ctx, action)


@app.command()
def brightness(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Device name"),
    level: int = typer.Argument(..., min=0, max=255, help="Brightness, 0-255"),
) -> None:
    """Set device brightness (0-255, sent to the bulb as a percentage)."""

    async def action(api: SengledApi) -> None:
        await api.set_brightness(await _find_device(api, name), level)
        typer.echo(f"Brightness of {name} set to {level}.")

    _run(ctx, action)


@app.command()
def color(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Device name"),
    red: int = typer.Argument(..., min=0, max=255),
    green: int = typer.Argument(..., min=0, max=255),
    blue: int = typer.Argument(..., min=0, max=255),
) -> None:
    """Set device colour from red, green and blue channels (0-255 each)."""

    async def action(api: SengledApi) -> None:
        await api.set_color(await _find_device(api, name), (red, green, blue))
        typer.echo(f"Colour of {name} set to {red}:{green}:{blue}.")

    _run(ctx, action)


@app.command()
def cycle(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Device name"),
    interval: float = typer.Option(0.2, "--interval", "-i", help="Seconds between changes"),
) -> None:
    """Alternate a device between red and blue until Ctrl+C."""

    async def action(api: SengledApi) -> None:
        device = await _find_device(api, name)
        typer.echo(f"Cycling {name} red/blue... (Ctrl+C to stop)")
        while True:
            for rgb in (RED, BLUE):
                await api.set_color(device, rgb)
                await asyncio.sleep(interval)

    with contextlib.suppress(KeyboardInterrupt):
        _run(ctx, action)
