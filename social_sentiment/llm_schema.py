from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .post import SentimentResult

SENTIMENT_SCHEMA_NAME = "post_sentiment"

# Hand-authored to stay within the JSON Schema subset accepted by structured outputs.
SENTIMENT_JSON_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "score": {"type": "number"},
        "confidence": {"type": "number"},
    },
    "required": ["score", "confidence"],
}


class SentimentOutput(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    score: float = Field(ge=-1.0, le=1.0)
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)

    def to_result(self) -> SentimentResult:
        return SentimentResult(score=self.score, confidence=self.confidence)
