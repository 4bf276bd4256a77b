"""GitHub OAuth sign-in with PKCE.

prbob is a public client and holds no client secret. Instead:
  1. build_authorization_url() stashes a random verifier in the profile store
     and sends its SHA-256 challenge to GitHub.
  2. GitHub redirects back to ``redirect_uri`` with a one-time ``code``.
  3. exchange() posts the code and the verifier to a trusted backend that
     owns the secret and returns an access token.

The verifier is single-use: exchange() deletes it before making any request,
so a failed exchange cannot be replayed.
"""

from __future__ import annotations

import base64
import hashlib
import logging
import secrets
from typing import TYPE_CHECKING
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import httpx

from prbob_core.errors import ConfigurationError, ExchangeFailed, MalformedResponse, SessionExpired

if TYPE_CHECKING:
    from prbob_store.base import BaseStore

logger = logging.getLogger(__name__)

VERIFIER_KEY = "github_code_verifier"
GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"


def _b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def generate_code_verifier() -> str:
    return _b64url(secrets.token_bytes(32))


def code_challenge(verifier: str) -> str:
    return _b64url(hashlib.sha256(verifier.encode("ascii")).digest())


def extract_code(location: str | None) -> str | None:
    """Return the ``code`` query parameter of a redirect URL, if any."""
    if not location:
        return None
    return dict(parse_qsl(urlsplit(location).query)).get("code") or None


def strip_code_param(location: str) -> str:
    """Drop ``code`` from a redirect URL so it cannot be replayed."""
    parts = urlsplit(location)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != "code"]
    return urlunsplit(parts._replace(query=urlencode(query)))


class OAuthClient:
    def __init__(
        self,
        store: BaseStore,
        http: httpx.AsyncClient,
        client_id: str | None,
        redirect_uri: str,
        backend_url: str,
        scope: str = "repo read:user",
        authorize_url: str = GITHUB_AUTHORIZE_URL,
    ):
        self._store = store
        self._http = http
        self.client_id = client_id
        self.redirect_uri = redirect_uri
        self.backend_url = backend_url
        self.scope = scope
        self.authorize_url = authorize_url

    @classmethod
    def from_config(cls, config: dict, store: BaseStore, http: httpx.AsyncClient) -> OAuthClient:
        return cls(
            store=store,
            http=http,
            client_id=config.get("github_client_id"),
            redirect_uri=config["redirect_uri"],
            backend_url=config["auth_backend_url"],
            scope=config.get("oauth_scope", "repo read:user"),
            authorize_url=config.get("github_authorize_url", GITHUB_AUTHORIZE_URL),
        )

    def build_authorization_url(self) -> str:
        """Start a handshake and return the URL the user must open.

        Overwrites any verifier left by an earlier, unfinished handshake.
        """
        if not self.client_id:
            raise ConfigurationError()

        verifier = generate_code_verifier()
        self._store.set(VERIFIER_KEY, verifier)
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": self.scope,
            "response_type": "code",
            "code_challenge": code_challenge(verifier),
            "code_challenge_method": "S256",
        }
        return f"{self.authorize_url}?{urlencode(params)}"

    async def exchange(self, code: str) -> str:
        """Trade a one-time authorization code for an access token."""
        verifier = self._store.get(VERIFIER_KEY)
        self._store.remove(VERIFIER_KEY)
        if not verifier:
            raise SessionExpired()

        response = await self._http.post(
            self.backend_url,
            json={"code": code, "verifier": verifier, "redirect_uri": self.redirect_uri},
        )
        if not response.is_success:
            logger.warning("Token exchange failed with status %d.", response.status_code)
            raise ExchangeFailed(response.status_code)

        try:
            data = response.json()
        except ValueError:
            raise MalformedResponse()
        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            logger.warning("Token exchange response carried no access token.")
            raise MalformedResponse()
        return token
