from __future__ import annotations

from typing import Literal

SentimentLabel = Literal["positive", "neutral", "negative"]

SENTIMENT_THRESHOLD = 0.3


def classify(score: float) -> SentimentLabel:
    """
    Bucket a sentiment score using fixed, strict thresholds.

    Boundary values (exactly +/-0.3) are neutral. Out-of-range scores are not clamped.
    """
    if score > SENTIMENT_THRESHOLD:
        return "positive"
    if score < -SENTIMENT_THRESHOLD:
        return "negative"
    return "neutral"


def overall_label(score: float) -> str:
    return classify(score).capitalize()
