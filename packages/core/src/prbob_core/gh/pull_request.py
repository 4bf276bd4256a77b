from __future__ import annotations

import logging

import httpx

from prbob_core.errors import AuthorizationFailed, NotFoundOrPrivate, UpstreamError, UpstreamUnreachable
from prbob_core.models import PRReference

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
DIFF_MEDIA_TYPE = "application/vnd.github.v3.diff"


def auth_headers(token: str | None) -> dict[str, str]:
    return {"Authorization": f"token {token}"} if token else {}


async def fetch_diff(
    http: httpx.AsyncClient,
    ref: PRReference,
    token: str | None = None,
    api_url: str = GITHUB_API_URL,
) -> str:
    """Return the unified diff of a pull request as raw text.

    The token is attached only when present so public repositories can be
    reviewed while signed out.
    """
    url = f"{api_url.rstrip('/')}/repos/{ref.owner}/{ref.repo}/pulls/{ref.pull_number}"
    headers = {"Accept": DIFF_MEDIA_TYPE, **auth_headers(token)}
    try:
        response = await http.get(url, headers=headers)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning("Diff request for %s failed: %s", ref.slug, e)
        raise UpstreamUnreachable(str(e) or type(e).__name__) from e

    status = response.status_code
    if status == 404:
        raise NotFoundOrPrivate(status)
    if status in (401, 403):
        raise AuthorizationFailed(status)
    if not response.is_success:
        raise UpstreamError(status)

    logger.debug("Fetched diff for %s (%d bytes).", ref.slug, len(response.content))
    return response.text
