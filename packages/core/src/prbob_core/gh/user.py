from __future__ import annotations

import logging

import httpx

from prbob_core.gh.pull_request import GITHUB_API_URL, auth_headers
from prbob_core.models import GitHubUser

logger = logging.getLogger(__name__)


class TokenVerifier:
    """Asks GitHub who a bearer token belongs to.

    Rejection is a normal outcome here, not an exception: verify() returns
    None for any non-2xx status, transport failure or unexpected body.
    Nothing is cached: tokens can be revoked on github.com at any time.
    """

    def __init__(self, http: httpx.AsyncClient, api_url: str = GITHUB_API_URL):
        self._http = http
        self._api_url = api_url.rstrip("/")

    async def verify(self, token: str) -> GitHubUser | None:
        try:
            response = await self._http.get(f"{self._api_url}/user", headers=auth_headers(token))
            if not response.is_success:
                logger.info("Token verification rejected by GitHub (status %d).", response.status_code)
                return None
            return GitHubUser.from_dict(response.json())
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            logger.info("Token verification failed (%s): %s", type(e).__name__, e)
            return None
