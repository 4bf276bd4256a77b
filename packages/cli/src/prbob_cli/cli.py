"""CLI entry point for prbob.

Commands:
  review    - run AI review on a pull request URL
  login     - connect GitHub (OAuth with PKCE, or a personal access token)
  callback  - finish an OAuth sign-in from the redirect URL
  logout    - forget the stored GitHub token
  whoami    - show the signed-in GitHub account
  watch     - mirror sign-in changes made by other sessions
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from prbob_cli.commands.review import review_cmd
from prbob_cli.commands.session import callback_cmd, login_cmd, logout_cmd, whoami_cmd
from prbob_cli.commands.watch import watch_cmd

console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with rich handler."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _build_store(config: dict):
    """Instantiate the configured profile store from .prbob.yml settings.

    Store selection:
      store: sqlite → SQLiteStore (store_path, default ~/.prbob/profile.db)
      store: memory → MemoryStore (nothing persisted past this process)

    This factory lives in cli.py so prbob_core never chooses a backend.
    """
    store_type = config.get("store", "sqlite")

    if store_type == "memory":
        from prbob_store.memory import MemoryStore

        return MemoryStore()

    if store_type != "sqlite":
        console.print(f"[yellow]Unknown store {store_type!r}. Falling back to sqlite.[/yellow]")

    from prbob_store.sqlite import SQLiteStore

    return SQLiteStore(db_path=config.get("store_path") or "~/.prbob/profile.db")


@click.group()
@click.version_option(
    version=importlib.metadata.version("prbob"),
    prog_name="prbob",
)
@click.option(
    "--config",
    "config_path",
    default=".prbob.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRBOB_CONFIG",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """AI-powered GitHub pull request reviewer."""
    from prbob_core.config import load_config

    setup_logging(verbose)
    ctx.ensure_object(dict)

    config = load_config(config_path)
    store = _build_store(config)
    ctx.obj["store"] = store
    ctx.obj["config"] = config
    ctx.call_on_close(store.close)


main.add_command(review_cmd)
main.add_command(login_cmd)
main.add_command(callback_cmd)
main.add_command(logout_cmd)
main.add_command(whoami_cmd)
main.add_command(watch_cmd)
