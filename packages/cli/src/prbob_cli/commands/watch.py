"""watch command: follow sign-ins and sign-outs made by other prbob sessions."""

from __future__ import annotations

import asyncio

import click
from rich.console import Console

from prbob_cli.render import describe_session
from prbob_cli.runtime import check_session, open_runtime

console = Console()


@click.command("watch")
@click.option("--interval", default=2.0, show_default=True, help="Seconds between store polls.")
@click.option("--polls", type=int, default=None, hidden=True, help="Stop after this many polls.")
@click.pass_context
def watch_cmd(ctx, interval: float, polls: int | None):
    """Keep a session open and mirror sign-in changes from other sessions.

    Signing in or out with another prbob process on the same profile is
    reflected here within one poll interval. Press Ctrl+C to stop.
    """

    async def _run():
        async with open_runtime(ctx.obj["config"], ctx.obj["store"]) as runtime:
            controller = runtime.controller
            console.print(describe_session(await check_session(runtime, console)))
            controller.subscribe(lambda session: console.print(describe_session(session)))

            remaining = polls
            while remaining is None or remaining > 0:
                await asyncio.sleep(interval)
                await controller.sync()
                if remaining is not None:
                    remaining -= 1

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        console.print("[dim]Stopped watching.[/dim]")
