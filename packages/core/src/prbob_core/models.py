"""Domain models shared by the review flow and the session controller."""

from __future__ import annotations

import re
from dataclasses import dataclass

from prbob_core.errors import InvalidInput, ReviewEngineError

PR_URL_RE = re.compile(r"github\.com/([^/]+)/([^/]+)/pull/(\d+)")

BREAKAGE_RISKS = ("Very Low", "Low", "Medium", "High", "Very High")

SEVERITY_LABELS = {
    1: "Critical",
    2: "High",
    3: "Medium",
    4: "Low",
    5: "Info",
}


@dataclass(frozen=True)
class GitHubUser:
    login: str
    avatar_url: str
    html_url: str

    @classmethod
    def from_dict(cls, data: dict) -> GitHubUser:
        """Build from a GitHub ``/user`` payload. Raises ValueError if a field is missing."""
        try:
            return cls(
                login=str(data["login"]),
                avatar_url=str(data.get("avatar_url") or ""),
                html_url=str(data.get("html_url") or ""),
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"Unexpected user payload: {e}") from e


@dataclass(frozen=True)
class PRReference:
    owner: str
    repo: str
    pull_number: int

    @classmethod
    def parse(cls, url_text: str) -> PRReference:
        """Extract owner/repo/number from a pull request URL or raise InvalidInput."""
        match = PR_URL_RE.search(url_text or "")
        if not match:
            raise InvalidInput()
        owner, repo, number = match.groups()
        return cls(owner=owner, repo=repo, pull_number=int(number))

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}#{self.pull_number}"


@dataclass(frozen=True)
class CodeIssue:
    severity: int  # 1 = Critical .. 5 = Informational
    file_path: str
    description: str
    suggestion: str

    @property
    def severity_label(self) -> str:
        return SEVERITY_LABELS.get(self.severity, "Unknown")


@dataclass(frozen=True)
class ReviewResult:
    summary: str
    overall_score: float
    breakage_risk: str
    issues: tuple[CodeIssue, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> ReviewResult:
        """Validate a model response against the review schema.

        Raises ReviewEngineError on any violation so a malformed answer is
        reported exactly like a failed call.
        """
        if not isinstance(data, dict):
            raise ReviewEngineError("Review response is not a JSON object.")
        missing = [k for k in ("summary", "overall_score", "breakage_risk", "issues") if k not in data]
        if missing:
            raise ReviewEngineError(f"Review response is missing field(s): {', '.join(missing)}")

        score = data["overall_score"]
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            raise ReviewEngineError("overall_score must be a number.")
        risk = data["breakage_risk"]
        if risk not in BREAKAGE_RISKS:
            raise ReviewEngineError(f"Unknown breakage_risk: {risk!r}")
        if not isinstance(data["issues"], list):
            raise ReviewEngineError("issues must be a list.")

        return cls(
            summary=str(data["summary"]),
            overall_score=min(max(score, 0), 100),
            breakage_risk=risk,
            issues=tuple(_issue_from_dict(item) for item in data["issues"]),
        )

    def sorted_issues(self) -> list[CodeIssue]:
        """Issues ordered from Critical to Informational; ties keep model order."""
        return sorted(self.issues, key=lambda issue: issue.severity)

    def to_dict(self) -> dict:
        return {
            "summary": self.summary,
            "overall_score": self.overall_score,
            "breakage_risk": self.breakage_risk,
            "issues": [
                {
                    "severity": i.severity,
                    "file_path": i.file_path,
                    "description": i.description,
                    "suggestion": i.suggestion,
                }
                for i in self.issues
            ],
        }


def _issue_from_dict(item) -> CodeIssue:
    if not isinstance(item, dict):
        raise ReviewEngineError("Each issue must be a JSON object.")
    severity = item.get("severity")
    if isinstance(severity, bool) or not isinstance(severity, int) or not 1 <= severity <= 5:
        raise ReviewEngineError(f"Issue severity must be an integer from 1 to 5, got {severity!r}")
    for key in ("file_path", "description", "suggestion"):
        if not isinstance(item.get(key), str):
            raise ReviewEngineError(f"Issue field {key!r} must be a string.")
    return CodeIssue(
        severity=severity,
        file_path=item["file_path"],
        description=item["description"],
        suggestion=item["suggestion"],
    )
