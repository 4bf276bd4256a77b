"""Wiring shared by every command: HTTP client, session controller, startup check."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx
from rich.console import Console

from prbob_core.auth.credentials import CredentialStore
from prbob_core.auth.oauth import OAuthClient
from prbob_core.auth.session import Session, SessionController
from prbob_core.gh.user import TokenVerifier

if TYPE_CHECKING:
    from prbob_store.base import BaseStore


@dataclass
class Runtime:
    config: dict
    http: httpx.AsyncClient
    oauth: OAuthClient
    controller: SessionController


def build_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(headers={"User-Agent": "prbob"})


@asynccontextmanager
async def open_runtime(config: dict, store: BaseStore) -> AsyncIterator[Runtime]:
    async with build_http_client() as http:
        oauth = OAuthClient.from_config(config, store, http)
        controller = SessionController(
            credentials=CredentialStore(store),
            verifier=TokenVerifier(http, api_url=config["github_api_url"]),
            oauth=oauth,
        )
        yield Runtime(config=config, http=http, oauth=oauth, controller=controller)


async def check_session(runtime: Runtime, console: Console, location: str | None = None) -> Session:
    """Run the startup check behind a spinner; nothing else happens until it settles."""
    message = "Authenticating with GitHub..." if location else "Checking GitHub session..."
    with console.status(message):
        return await runtime.controller.start(location)
