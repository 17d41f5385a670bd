"""
eth_sdk.cli.main
================

`eth-sdk`: call logical Ethereum operations and watch subscriptions from the
shell, through the same registry and formatters the library uses.

Examples
--------
    $ eth-sdk methods
    $ eth-sdk call getBlockNumber
    $ eth-sdk call getBalance '"0x407d73d8a49eeb85d32cf465507dd71d507100c1"' null
    $ eth-sdk call getBlock '"latest"' false
    $ eth-sdk --ws ws://127.0.0.1:8546 subscribe newBlockHeaders --limit 3

Arguments after NAME are JSON literals; `null` means "use the default" for
parameters that have one (e.g. the default block).

Configuration
-------------
- RPC URL    : `--rpc` or env `ETH_SDK_RPC_URL` (default: http://127.0.0.1:8545)
- WS URL     : `--ws` or env `ETH_SDK_WS_URL` (default: derived from the RPC URL)
- Timeout    : `--timeout` or env `ETH_SDK_TIMEOUT` seconds (default: 10.0)
- Log level  : `--log-level` or env `ETH_SDK_LOG_LEVEL` (default: WARNING)
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any, List, Optional

import click
import typer

from ..config import SDKConfig
from ..errors import EthSdkError
from ..eth import Eth
from ..methods import REGISTRY
from ..rpc.http import HttpTransport
from ..rpc.ws import WsTransport
from ..subscriptions import EVENTS, SUBSCRIPTIONS
from ..version import __version__ as SDK_VERSION

app = typer.Typer(
    name="eth-sdk",
    help="Ethereum JSON-RPC client: logical calls and subscriptions.",
    no_args_is_help=True,
    add_completion=False,
)

__all__ = ["app", "main", "run"]


def _print_json(obj: Any) -> None:
    typer.echo(json.dumps(obj, indent=2, ensure_ascii=False, default=str))


def _parse_args(raw: Optional[List[str]]) -> List[Any]:
    out: List[Any] = []
    for i, item in enumerate(raw or []):
        try:
            out.append(json.loads(item))
        except ValueError as e:
            raise typer.BadParameter(f"argument {i} is not a JSON literal: {item!r}") from e
    return out


@app.callback()
def _root(
    ctx: typer.Context,
    rpc: Optional[str] = typer.Option(None, "--rpc", help="Node HTTP JSON-RPC URL."),
    ws: Optional[str] = typer.Option(None, "--ws", help="Node WebSocket URL (subscriptions)."),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Request timeout in seconds."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level name."),
) -> None:
    """
    Resolve the effective configuration: flags override ETH_SDK_* env vars.
    """
    cfg = SDKConfig.with_overrides(
        SDKConfig.from_env(),
        rpc_url=rpc,
        ws_url=ws,
        request_timeout=timeout,
        log_level=log_level.upper() if log_level else None,
    )
    logging.basicConfig(level=cfg.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    ctx.obj = cfg


@app.command("version")
def version() -> None:
    """Print the SDK CLI version."""
    typer.echo(f"eth-sdk {SDK_VERSION}")


@app.command("methods")
def methods() -> None:
    """List logical operations and subscriptions."""
    for name in sorted(REGISTRY):
        desc = REGISTRY[name]
        typer.echo(f"{name:28} {'/'.join(desc.wire_names):50} arity={desc.arity}")
    for name in sorted(SUBSCRIPTIONS):
        desc = SUBSCRIPTIONS[name]
        typer.echo(f"{name:28} {'subscribe:' + desc.wire_name:50} arity={desc.arity}")


async def _call(cfg: SDKConfig, name: str, args: List[Any]) -> Any:
    async with HttpTransport.from_config(cfg) as transport:
        eth = Eth(transport, config=cfg)
        return await eth.invoke(name, *args)


@app.command("call")
def call(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Logical operation, e.g. getBalance"),
    args: Optional[List[str]] = typer.Argument(None, help="Arguments as JSON literals"),
) -> None:
    """Invoke a logical operation over HTTP and print the decoded result."""
    cfg: SDKConfig = ctx.obj
    _print_json(asyncio.run(_call(cfg, name, _parse_args(args))))


async def _watch(cfg: SDKConfig, name: str, args: List[Any], limit: int) -> None:
    done = asyncio.Event()
    seen = 0

    def printer(event: str):
        def on_event(payload: Any) -> None:
            nonlocal seen
            if isinstance(payload, BaseException):
                payload = str(payload)
            _print_json({"event": event, "payload": payload})
            seen += 1
            if limit and seen >= limit:
                done.set()

        return on_event

    async with WsTransport.from_config(cfg) as transport:
        eth = Eth(transport, config=cfg)
        sub = await eth.subscribe(name, *args, listeners={event: printer(event) for event in EVENTS})
        try:
            await done.wait()
        finally:
            await sub.unsubscribe()


@app.command("subscribe")
def subscribe(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Subscription, e.g. newBlockHeaders"),
    args: Optional[List[str]] = typer.Argument(None, help="Arguments as JSON literals"),
    limit: int = typer.Option(0, "--limit", "-n", help="Stop after N events (0 = run until Ctrl+C)."),
) -> None:
    """Subscribe over WebSocket and print each event."""
    cfg: SDKConfig = ctx.obj
    typer.echo(f"Connecting to {cfg.effective_ws_url} … (Ctrl+C to exit)", err=True)
    try:
        asyncio.run(_watch(cfg, name, _parse_args(args), limit))
    except KeyboardInterrupt:
        typer.echo("bye", err=True)


def main(argv: Optional[list[str]] = None) -> int:
    """
    Run the CLI. Returns an integer exit code.
    """
    try:
        app(prog_name="eth-sdk", standalone_mode=False, args=argv)
        return 0
    except typer.Exit as e:
        return int(e.exit_code)
    except click.ClickException as e:
        e.show()
        return e.exit_code
    except (EthSdkError, ValueError) as e:
        typer.echo(f"error: {e}", err=True)
        return 1


def run(argv: Optional[list[str]] = None) -> int:
    """Alias for :func:`main`."""
    return main(argv)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
