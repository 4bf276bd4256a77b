"""Tests for AI provider implementations.

Shared behaviour (_parse, prompts, _call_with_retry) lives in BaseReviewer and
is tested once via a lightweight stub, not duplicated per provider.
Provider-specific tests cover only what differs between implementations: the
SDK client setup and _call_api.
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from prbob_core.errors import ReviewEngineError
from prbob_core.providers.anthropic import AnthropicReviewer
from prbob_core.providers.base import OVERLOADED_MESSAGE, SAFETY_MESSAGE, BaseReviewer
from prbob_core.providers.openai import OpenAIReviewer

VALID_JSON = json.dumps(
    {
        "summary": "Adds a login endpoint.",
        "overall_score": 72,
        "breakage_risk": "Medium",
        "issues": [
            {
                "severity": 2,
                "file_path": "a/auth/login.py",
                "description": "Missing error handling",
                "suggestion": "Wrap the call:\n```python\ntry:\n    login()\nexcept AuthError:\n    ...\n```",
            }
        ],
    }
)


class _StubReviewer(BaseReviewer):
    """Minimal concrete subclass used to test BaseReviewer shared methods."""

    RETRY_BASE_DELAY = 0

    def __init__(self, responses=None):
        # Each entry is either a string to return or an exception to raise.
        self.responses = list(responses or [VALID_JSON])
        self.calls = 0

    async def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        self.calls += 1
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


# ---------------------------------------------------------------------------
# Shared behaviour, tested once through the stub, not per provider
# ---------------------------------------------------------------------------


class TestBaseReviewerParse:
    def test_parses_valid_json(self):
        result = _StubReviewer()._parse(VALID_JSON)
        assert result.overall_score == 72
        assert result.breakage_risk == "Medium"
        assert result.issues[0].severity == 2

    def test_strips_markdown_code_fences(self):
        result = _StubReviewer()._parse(f"```json\n{VALID_JSON}\n```")
        assert result.summary == "Adds a login endpoint."

    def test_preserves_code_blocks_inside_suggestions(self):
        result = _StubReviewer()._parse(f"```json\n{VALID_JSON}\n```")
        assert "```python" in result.issues[0].suggestion

    def test_invalid_json_raises(self):
        with pytest.raises(ReviewEngineError, match="overloaded"):
            _StubReviewer()._parse("not json at all")

    def test_schema_violation_raises(self):
        with pytest.raises(ReviewEngineError):
            _StubReviewer()._parse(json.dumps({"summary": "x"}))


class TestBaseReviewerPrompts:
    def test_system_prompt_describes_severity_scale(self):
        prompt = _StubReviewer()._build_system_prompt()
        assert "1 (Critical)" in prompt
        assert "5 (Informational)" in prompt
        assert "score of 100" in prompt

    def test_user_prompt_contains_diff(self):
        prompt = _StubReviewer()._build_user_prompt("+added line")
        assert "+added line" in prompt

    def test_user_prompt_contains_schema(self):
        prompt = _StubReviewer()._build_user_prompt("+x")
        assert '"breakage_risk"' in prompt
        assert "Very High" in prompt


class TestBaseReviewerRetry:
    @pytest.mark.asyncio
    async def test_review_returns_result(self):
        reviewer = _StubReviewer()
        result = await reviewer.review("+x")
        assert result.summary == "Adds a login endpoint."
        assert reviewer.calls == 1

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self):
        reviewer = _StubReviewer([RuntimeError("overloaded"), VALID_JSON])
        result = await reviewer.review("+x")
        assert result.overall_score == 72
        assert reviewer.calls == 2

    @pytest.mark.asyncio
    async def test_empty_response_is_retried(self):
        reviewer = _StubReviewer(["", VALID_JSON])
        await reviewer.review("+x")
        assert reviewer.calls == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self):
        reviewer = _StubReviewer([RuntimeError("down")] * 3)
        with pytest.raises(ReviewEngineError) as exc_info:
            await reviewer.review("+x")
        assert str(exc_info.value) == OVERLOADED_MESSAGE
        assert reviewer.calls == 3

    @pytest.mark.asyncio
    async def test_safety_refusal_is_not_retried(self):
        reviewer = _StubReviewer([RuntimeError("Blocked: SAFETY"), VALID_JSON])
        with pytest.raises(ReviewEngineError) as exc_info:
            await reviewer.review("+x")
        assert str(exc_info.value) == SAFETY_MESSAGE
        assert reviewer.calls == 1


# ---------------------------------------------------------------------------
# Provider-specific: client setup and _call_api
# ---------------------------------------------------------------------------


class TestAnthropicReviewer:
    @pytest.mark.asyncio
    async def test_call_api_joins_text_blocks(self):
        from anthropic.types import TextBlock

        with patch("anthropic.AsyncAnthropic") as mock_cls:
            reviewer = AnthropicReviewer(api_key="test-key")
        mock_cls.assert_called_once_with(api_key="test-key")

        response = MagicMock()
        response.content = [TextBlock(type="text", text="  {\"a\": 1}  ")]
        reviewer.client = MagicMock()
        reviewer.client.messages.create = AsyncMock(return_value=response)

        text = await reviewer._call_api("system", "user")

        assert text == '{"a": 1}'
        kwargs = reviewer.client.messages.create.call_args.kwargs
        assert kwargs["system"] == "system"
        assert kwargs["messages"] == [{"role": "user", "content": "user"}]
        assert kwargs["temperature"] == 0.2


class TestOpenAIReviewer:
    @pytest.mark.asyncio
    async def test_call_api_requests_json_object(self):
        with patch("prbob_core.providers.openai._AsyncOpenAI") as mock_cls:
            reviewer = OpenAIReviewer(api_key="test-key")
        mock_cls.assert_called_once_with(api_key="test-key")

        response = MagicMock()
        response.choices = [MagicMock()]
        response.choices[0].message.content = VALID_JSON
        reviewer.client = MagicMock()
        reviewer.client.chat.completions.create = AsyncMock(return_value=response)

        result = await reviewer.review("+x")

        assert result.overall_score == 72
        kwargs = reviewer.client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"][0]["role"] == "system"

    def test_missing_package_raises_import_error(self):
        with patch("prbob_core.providers.openai._AsyncOpenAI", None):
            with pytest.raises(ImportError, match="openai"):
                OpenAIReviewer(api_key="test-key")
