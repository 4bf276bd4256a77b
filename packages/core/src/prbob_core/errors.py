"""Error taxonomy.

Every failure prbob can report is a PRBobError whose message is fit to show
to the user as-is. Nothing here is fatal: callers turn these into a
displayable state rather than a crash.
"""

from __future__ import annotations


class PRBobError(Exception):
    """Base class for all user-facing prbob failures."""


# ---------------------------------------------------------------------------
# Input and configuration
# ---------------------------------------------------------------------------


class InvalidInput(PRBobError):
    def __init__(self, message: str = "Please enter a valid GitHub Pull Request URL."):
        super().__init__(message)


class ConfigurationError(PRBobError):
    """Raised when the GitHub OAuth app is not configured.

    Only the OAuth path is affected; personal access tokens keep working.
    """

    def __init__(self, message: str = "GitHub Client ID is not configured."):
        super().__init__(message)


# ---------------------------------------------------------------------------
# OAuth callback
# ---------------------------------------------------------------------------


class ExchangeFailed(PRBobError):
    def __init__(self, status: int):
        self.status = status
        super().__init__(f"GitHub authentication failed. Server responded with {status}")


class MalformedResponse(PRBobError):
    def __init__(self, message: str = "Access token not found. Try signing in again."):
        super().__init__(message)


class SessionExpired(PRBobError):
    def __init__(self, message: str = "Code verifier missing. Session might've expired."):
        super().__init__(message)


class TokenRejected(PRBobError):
    def __init__(self, message: str = "Verification failed. Please check your token and its permissions."):
        super().__init__(message)


# ---------------------------------------------------------------------------
# Review flow
# ---------------------------------------------------------------------------


class NotFoundOrPrivate(PRBobError):
    def __init__(self, status: int = 404):
        self.status = status
        super().__init__(
            "Could not find PR. If it's a private repository, please sign in with a valid "
            f"GitHub token. Status: {status}"
        )


class AuthorizationFailed(PRBobError):
    def __init__(self, status: int):
        self.status = status
        super().__init__(
            "GitHub authorization failed. Your token may be invalid or lack 'repo' permissions. "
            f"Status: {status}"
        )


class UpstreamError(PRBobError):
    def __init__(self, status: int):
        self.status = status
        super().__init__(f"Failed to fetch PR data from GitHub. Status: {status}")


class UpstreamUnreachable(PRBobError):
    """GitHub could not be reached at all: DNS, connection, timeout or a bad API URL."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Failed to fetch PR data from GitHub: {reason}")


class EmptyChange(PRBobError):
    def __init__(self, message: str = "The pull request seems to be empty or contains no code changes."):
        super().__init__(message)


class ReviewEngineError(PRBobError):
    """The review model failed or returned something that does not fit the schema."""
