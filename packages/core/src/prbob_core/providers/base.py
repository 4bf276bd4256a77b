"""Base reviewer implementing the Template Method pattern.

All providers share the same review algorithm:
    review() → _build_system_prompt() + _build_user_prompt()
             → _call_with_retry() → _call_api()   ← only this differs per provider
             → _parse()

Subclasses implement two things only:
  - __init__: validate and store the async SDK client
  - _call_api: make one raw API call and return the text response

Everything else (prompt construction, JSON parsing, schema validation and
retry logic) lives here so it is defined once and inherited consistently by
every provider.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from abc import ABC, abstractmethod

from prbob_core.errors import ReviewEngineError
from prbob_core.models import BREAKAGE_RISKS, ReviewResult

logger = logging.getLogger(__name__)

# Shared defaults: subclasses may override as class attributes if needed.
_MAX_RETRIES = 3
_MAX_TOKENS = 8192

OVERLOADED_MESSAGE = "Failed to get review from AI. The model may be overloaded or the GitHub diff is invalid."
SAFETY_MESSAGE = (
    "The PR content could not be processed due to safety settings. "
    "Please ensure it does not contain any sensitive or harmful content."
)

SYSTEM_INSTRUCTION = """You are an expert enterprise-level software architect and a world-class security engineer. \
Your task is to review a GitHub Pull Request diff.
Your analysis must be comprehensive, focusing on:
- **Security Vulnerabilities**: SQL injection, XSS, insecure dependencies, secret leaks, etc. (Severity 1-2)
- **Code Quality & Best Practices**: Maintainability, readability, DRY principle, SOLID principles. (Severity 3-4)
- **Potential Bugs & Edge Cases**: Logical errors, null pointer exceptions, race conditions. (Severity 2-3)
- **Performance**: Inefficient algorithms, memory leaks, unnecessary database queries. (Severity 2-3)
- **Breaking Changes**: Assess the risk of the changes causing regressions in other parts of the system.

You must grade the PR on a scale of 0-100 and provide a list of issues with specific severity levels.
Severity Levels:
- 1 (Critical): Must be fixed before merge. Major security flaws or data corruption risks.
- 2 (High): Likely to cause production issues or significant bugs. Strongly recommend fixing.
- 3 (Medium): Violates best practices or introduces technical debt. Should be addressed.
- 4 (Low): Minor issues, style nits, or suggestions for slight improvements.
- 5 (Informational): A note or observation that isn't an issue but is worth mentioning.

Analyze the entire provided diff and structure your response *strictly* according to the provided JSON schema. \
If no issues are found, return an empty array for 'issues' and a score of 100."""

REVIEW_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "summary": {
            "type": "string",
            "description": "A high-level, 2-3 sentence summary of the code changes and the overall quality of the PR.",
        },
        "overall_score": {
            "type": "number",
            "description": "An overall quality score from 0 to 100, where 100 is a perfect, production-ready PR.",
        },
        "breakage_risk": {
            "type": "string",
            "enum": list(BREAKAGE_RISKS),
            "description": "The risk that this change could break existing functionality.",
        },
        "issues": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "severity": {"type": "integer", "minimum": 1, "maximum": 5},
                    "file_path": {
                        "type": "string",
                        "description": "The full path of the file as seen in the diff (e.g. 'a/path/to/file.js').",
                    },
                    "description": {"type": "string"},
                    "suggestion": {"type": "string"},
                },
                "required": ["severity", "file_path", "description", "suggestion"],
            },
        },
    },
    "required": ["summary", "overall_score", "breakage_risk", "issues"],
}


class BaseReviewer(ABC):
    MAX_RETRIES: int = _MAX_RETRIES
    MAX_TOKENS: int = _MAX_TOKENS
    TEMPERATURE: float = 0.2
    RETRY_BASE_DELAY: float = 1.0

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    async def review(self, diff: str) -> ReviewResult:
        """Review a whole PR diff and return the structured result.

        Raises ReviewEngineError when every attempt fails or the answer does
        not match REVIEW_SCHEMA.
        """
        raw = await self._call_with_retry(self._build_system_prompt(), self._build_user_prompt(diff))
        return self._parse(raw)

    # ------------------------------------------------------------------ #
    # Abstract: implement in each provider                               #
    # ------------------------------------------------------------------ #

    @abstractmethod
    async def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        """Make a single API call and return the raw text response.

        This is the only method subclasses must implement. It should raise
        on failure: _call_with_retry handles retries and logging.
        """

    # ------------------------------------------------------------------ #
    # Shared implementations                                               #
    # ------------------------------------------------------------------ #

    async def _call_with_retry(self, system_prompt: str, user_prompt: str) -> str:
        """Retry _call_api up to MAX_RETRIES times with exponential backoff."""
        for attempt in range(self.MAX_RETRIES):
            try:
                text = await self._call_api(system_prompt, user_prompt)
                if not text:
                    raise ValueError("No response text received from the model.")
                return text
            except Exception as e:
                if "safety" in str(e).lower():
                    logger.error("%s refused the diff: %s", self.__class__.__name__, e)
                    raise ReviewEngineError(SAFETY_MESSAGE) from e
                if attempt == self.MAX_RETRIES - 1:
                    logger.error(
                        "%s API failed after %d attempts: %s",
                        self.__class__.__name__,
                        self.MAX_RETRIES,
                        e,
                    )
                    raise ReviewEngineError(OVERLOADED_MESSAGE) from e
                delay = self.RETRY_BASE_DELAY * 2**attempt
                logger.warning(
                    "%s API error (attempt %d/%d): %s. Retrying in %.0fs...",
                    self.__class__.__name__,
                    attempt + 1,
                    self.MAX_RETRIES,
                    e,
                    delay,
                )
                await asyncio.sleep(delay)
        raise ReviewEngineError(OVERLOADED_MESSAGE)

    def _build_system_prompt(self) -> str:
        return SYSTEM_INSTRUCTION

    def _build_user_prompt(self, diff: str) -> str:
        """Embed the diff and the strict output schema.

        The schema lives in the user prompt because not every provider accepts
        a response schema natively.
        """
        return f"""Review the following git diff:

{diff}

### Output Format:
Respond with **only** a JSON object matching this JSON Schema:

{json.dumps(REVIEW_SCHEMA, indent=2)}

Do not return any text outside the JSON object."""

    def _parse(self, raw: str) -> ReviewResult:
        """Parse and validate the model's raw text response."""
        # Strip only the outer ```json ... ``` fence: NOT backticks inside
        # suggestion strings.
        cleaned = re.sub(r"^```(?:json)?\s*", "", raw.strip())
        cleaned = re.sub(r"\s*```$", "", cleaned.strip())
        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as e:
            logger.warning(
                "%s: failed to parse response as JSON: %s",
                self.__class__.__name__,
                raw[:200],
            )
            raise ReviewEngineError(OVERLOADED_MESSAGE) from e
        return ReviewResult.from_dict(data)
