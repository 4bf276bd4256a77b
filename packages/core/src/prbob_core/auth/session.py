"""Session controller: the single source of truth for "who is signed in".

Three token sources feed it:
  - the OAuth redirect (start() with a location carrying ``code``)
  - the profile store (start() without a code, manual token entry)
  - other sessions writing the same store (handle_storage_event / sync)

The current Session is an immutable value replaced wholesale on every
transition and pushed to subscribers. Every operation that awaits a network
call takes a ticket first; if any newer transition happened while it was
suspended, its result is discarded. A token removal always wins.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

import httpx

from prbob_core.auth.credentials import TOKEN_KEY
from prbob_core.auth.oauth import extract_code, strip_code_param
from prbob_core.errors import PRBobError, TokenRejected

if TYPE_CHECKING:
    from prbob_core.auth.credentials import CredentialStore
    from prbob_core.auth.oauth import OAuthClient
    from prbob_core.gh.user import TokenVerifier
    from prbob_core.models import GitHubUser
    from prbob_store.models import StorageEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignedOut:
    error: str | None = None  # set only when a user-initiated sign-in failed


@dataclass(frozen=True)
class Authenticating:
    reason: str  # "startup" | "oauth-callback" | "stored-token" | "manual-token"


@dataclass(frozen=True)
class SignedIn:
    token: str
    user: GitHubUser

    def __repr__(self) -> str:
        return f"SignedIn(user={self.user.login!r})"


Session = Union[SignedOut, Authenticating, SignedIn]
Listener = Callable[[Session], None]


class SessionController:
    def __init__(self, credentials: CredentialStore, verifier: TokenVerifier, oauth: OAuthClient):
        self._credentials = credentials
        self._verifier = verifier
        self._oauth = oauth
        self._session: Session = Authenticating("startup")
        self._listeners: list[Listener] = []
        self._ticket = 0
        self.prompt_open = False
        self.location: str | None = None

    # ------------------------------------------------------------------ #
    # State access                                                         #
    # ------------------------------------------------------------------ #

    @property
    def session(self) -> Session:
        return self._session

    @property
    def token(self) -> str | None:
        return self._session.token if isinstance(self._session, SignedIn) else None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a callback for every session change; returns an unsubscribe function."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def open_prompt(self) -> None:
        self.prompt_open = True

    def close_prompt(self) -> None:
        self.prompt_open = False

    # ------------------------------------------------------------------ #
    # Transitions                                                          #
    # ------------------------------------------------------------------ #

    async def start(self, location: str | None = None) -> Session:
        """Resolve the startup state, consuming an OAuth ``code`` if the location carries one."""
        code = extract_code(location)
        if code:
            # The code is single-use; forget it before anything can fail.
            self.location = strip_code_param(location)
            return await self._complete_oauth(code)

        self.location = location
        token = self._credentials.load()
        if not token:
            return self._set(SignedOut())

        ticket = self._begin(Authenticating("stored-token"))
        user = await self._verifier.verify(token)
        if not self._is_current(ticket):
            return self._session
        if user is None:
            # Expired credentials from an earlier session are not worth an error.
            logger.info("Stored GitHub token is no longer valid; signing out.")
            self._credentials.discard(token)
            return self._set(SignedOut())
        return self._set(SignedIn(token=token, user=user))

    async def login_with_token(self, token: str) -> Session:
        """Sign in with a token supplied by the user. Raises TokenRejected if GitHub refuses it."""
        ticket = self._begin(Authenticating("manual-token"))
        self._credentials.save(token)
        user = await self._verifier.verify(token)
        if not self._is_current(ticket):
            return self._session
        if user is None:
            self._credentials.discard(token)
            error = TokenRejected()
            self._set(SignedOut(error=str(error)))
            raise error
        self.close_prompt()
        return self._set(SignedIn(token=token, user=user))

    def logout(self) -> Session:
        self._credentials.clear()
        self._ticket += 1
        return self._set(SignedOut())

    async def handle_storage_event(self, event: StorageEvent) -> Session:
        """Apply a token change made by another session."""
        if event.key != TOKEN_KEY:
            return self._session

        self._ticket += 1
        if event.new_value is None:
            # Removal anywhere is authoritative, whatever this session believes.
            logger.info("GitHub token removed by another session; signing out.")
            return self._set(SignedOut())

        ticket = self._ticket
        user = await self._verifier.verify(event.new_value)
        if not self._is_current(ticket):
            return self._session
        if user is None:
            if self._credentials.discard(event.new_value):
                logger.info("Token written by another session failed verification; cleared it.")
            else:
                logger.debug("Rejected token was already replaced in the store; leaving it.")
            return self._set(SignedOut())
        self.close_prompt()
        return self._set(SignedIn(token=event.new_value, user=user))

    async def sync(self) -> Session:
        """Drain pending changes from other sessions, oldest first."""
        for event in self._credentials.changes():
            await self.handle_storage_event(event)
        return self._session

    # ------------------------------------------------------------------ #
    # Internals                                                            #
    # ------------------------------------------------------------------ #

    async def _complete_oauth(self, code: str) -> Session:
        self.close_prompt()
        ticket = self._begin(Authenticating("oauth-callback"))
        try:
            token = await self._oauth.exchange(code)
        except (PRBobError, httpx.HTTPError, httpx.InvalidURL) as e:
            return self._fail_oauth(ticket, e)
        user = await self._verifier.verify(token)
        if not self._is_current(ticket):
            return self._session
        if user is None:
            return self._fail_oauth(ticket, TokenRejected())
        self._credentials.save(token)
        return self._set(SignedIn(token=token, user=user))

    def _fail_oauth(self, ticket: int, error: Exception) -> Session:
        logger.warning("GitHub sign-in failed: %s", error)
        if not self._is_current(ticket):
            return self._session
        return self._set(SignedOut(error=f"Failed to authenticate with GitHub: {error} Please try again."))

    def _begin(self, pending: Authenticating) -> int:
        self._ticket += 1
        self._set(pending)
        return self._ticket

    def _is_current(self, ticket: int) -> bool:
        if ticket != self._ticket:
            logger.debug("Discarding superseded verification result.")
            return False
        return True

    def _set(self, session: Session) -> Session:
        self._session = session
        for listener in list(self._listeners):
            listener(session)
        return session
