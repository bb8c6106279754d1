from __future__ import annotations

from typing import Any, Protocol

from openai import OpenAI

from .config_schema import GeminiConfig
from .errors import ScoreError
from .llm_schema import SENTIMENT_JSON_SCHEMA, SENTIMENT_SCHEMA_NAME, SentimentOutput
from .post import SentimentResult


class _CompletionsAPI(Protocol):
    def create(self, **kwargs: Any) -> Any: ...


class _ChatAPI(Protocol):
    completions: _CompletionsAPI


class _OpenAIClient(Protocol):
    chat: _ChatAPI


_SYSTEM_INSTRUCTIONS = """\
You score the sentiment of a single social-media post.

Return a JSON object that matches the provided schema EXACTLY:
- score: overall polarity from -1.0 (very negative) through 0.0 (neutral) to 1.0 (very positive)
- confidence: how certain you are of the score, from 0.0 to 1.0

Judge only the text given. Sarcasm counts toward the polarity it actually expresses.
"""

_RESPONSE_FORMAT: dict[str, Any] = {
    "type": "json_schema",
    "json_schema": {
        "name": SENTIMENT_SCHEMA_NAME,
        "strict": True,
        "schema": SENTIMENT_JSON_SCHEMA,
    },
}


def _extract_message_text(response: Any) -> str:
    choices = getattr(response, "choices", None) or []
    for choice in choices:
        message = getattr(choice, "message", None)
        content = getattr(message, "content", None)
        if isinstance(content, str) and content.strip():
            return content.strip()

    raise ScoreError("Sentiment response did not include message content")


def _strip_code_fence(raw: str) -> str:
    # Some models wrap JSON in a ```json fence despite the response format.
    text = raw.strip()
    if not text.startswith("```"):
        return text
    text = text[3:]
    if text.lower().startswith("json"):
        text = text[4:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


class GeminiSentimentScorer:
    """
    One-post-per-call sentiment scoring through Gemini's OpenAI-compatible endpoint.

    Client-level retries are disabled; any failure surfaces as ScoreError.
    """

    def __init__(
        self,
        api_key: str,
        *,
        gemini_cfg: GeminiConfig,
        client: _OpenAIClient | None = None,
    ) -> None:
        key = (api_key or "").strip()
        if not key:
            raise ValueError("api_key must be a non-empty string")

        self._cfg = gemini_cfg
        self._client: _OpenAIClient = client or OpenAI(
            api_key=key,
            base_url=gemini_cfg.base_url,
            max_retries=0,
            timeout=gemini_cfg.timeout_seconds,
        )

    def _call_raw(self, text: str) -> str:
        model = self._cfg.model
        try:
            response = self._client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": _SYSTEM_INSTRUCTIONS},
                    {"role": "user", "content": text},
                ],
                response_format=_RESPONSE_FORMAT,
                max_tokens=self._cfg.max_output_tokens,
            )
        except Exception as e:
            raise ScoreError(f"Sentiment call failed ({model}): {e}") from e

        return _extract_message_text(response)

    def _parse(self, raw: str) -> SentimentOutput:
        try:
            return SentimentOutput.model_validate_json(_strip_code_fence(raw))
        except Exception as e:
            raise ScoreError(f"Failed to parse sentiment output ({self._cfg.model}): {e}") from e

    def score(self, text: str) -> SentimentResult:
        return self._parse(self._call_raw(text)).to_result()
