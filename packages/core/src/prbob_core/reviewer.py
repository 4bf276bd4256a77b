"""Pull request review flow: URL → diff → review engine → ReviewResult.

Stateless. The only side effects are the GitHub diff request and the review
engine call, and the engine is never reached unless there is a diff to review.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from prbob_core.errors import EmptyChange, PRBobError, ReviewEngineError
from prbob_core.gh.pull_request import GITHUB_API_URL, fetch_diff
from prbob_core.models import PRReference
from prbob_core.providers.anthropic import AnthropicReviewer
from prbob_core.providers.openai import OpenAIReviewer

if TYPE_CHECKING:
    import httpx

    from prbob_core.models import ReviewResult
    from prbob_core.providers.base import BaseReviewer

logger = logging.getLogger(__name__)


def get_reviewer(config: dict) -> BaseReviewer:
    model = config["model"]
    if model == "anthropic":
        return AnthropicReviewer(api_key=config["anthropic_api_key"])
    if model == "openai":
        return OpenAIReviewer(api_key=config["openai_api_key"])
    raise ValueError(f"Unknown model provider: {model!r}. Choose 'anthropic' or 'openai'.")


async def review_pull_request(
    url_text: str,
    engine: BaseReviewer,
    http: httpx.AsyncClient,
    token: str | None = None,
    api_url: str = GITHUB_API_URL,
) -> ReviewResult:
    """Review the pull request behind ``url_text``.

    Raises InvalidInput before any network call for a URL that does not name
    a pull request, one of NotFoundOrPrivate / AuthorizationFailed /
    UpstreamError / UpstreamUnreachable for a failed diff fetch, EmptyChange
    for a diff with no content, and ReviewEngineError when the model fails.
    """
    ref = PRReference.parse(url_text)
    diff = await fetch_diff(http, ref, token=token, api_url=api_url)
    if not diff.strip():
        raise EmptyChange()

    logger.info("Reviewing %s (%d characters of diff).", ref.slug, len(diff))
    try:
        return await engine.review(diff)
    except PRBobError:
        raise
    except Exception as e:
        logger.error("Review engine failed for %s: %s", ref.slug, e)
        raise ReviewEngineError(str(e) or type(e).__name__) from e
