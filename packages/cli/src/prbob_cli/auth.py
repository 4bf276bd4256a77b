"""Discovery of a GitHub token that already exists on this machine.

Used by ``prbob login --from-env`` as a side-channel for manual token entry:
the discovered token goes through the same save-then-verify path as a pasted
personal access token.

Resolution order (stops at first success):
  1. GITHUB_TOKEN environment variable (CI / explicit override)
  2. `gh auth token` (GitHub CLI session, works after `gh auth login`)
"""

from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)


def discover_github_token() -> str | None:
    """Return a locally available GitHub token, or None.

    Never raises: callers should check for None and emit a UsageError.
    """
    token = os.environ.get("GITHUB_TOKEN")
    if token:
        logger.debug("Using GitHub token from GITHUB_TOKEN.")
        return token

    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        logger.debug("gh CLI unavailable; no token discovered.")
        return None

    if result.returncode == 0 and result.stdout.strip():
        logger.debug("Using GitHub token from the gh CLI session.")
        return result.stdout.strip()
    return None
