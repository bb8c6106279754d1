from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from .classify import classify
from .errors import EmptyInputError, MisalignedInputError
from .keywords import KeywordCount, extract_top_keywords
from .post import Post, SentimentResult
from .relative_time import relative_label

DEFAULT_CONFIDENCE = 1.0


@dataclass(frozen=True)
class TimePoint:
    label: str
    value: float


@dataclass(frozen=True)
class Distribution:
    positive: int = 0
    neutral: int = 0
    negative: int = 0

    @property
    def total(self) -> int:
        return self.positive + self.neutral + self.negative


@dataclass(frozen=True)
class AggregateResult:
    overall_score: float
    sentiment_over_time: tuple[TimePoint, ...]
    distribution: Distribution
    confidence_scores: tuple[float, ...]
    top_keywords: tuple[KeywordCount, ...]


def count_distribution(sentiments: Sequence[SentimentResult]) -> Distribution:
    counts = {"positive": 0, "neutral": 0, "negative": 0}
    for s in sentiments:
        counts[classify(s.score)] += 1
    return Distribution(**counts)


def aggregate(
    posts: Sequence[Post],
    sentiments: Sequence[SentimentResult],
    *,
    now: datetime,
) -> AggregateResult:
    """
    Combine fetched posts and their index-aligned sentiment results.

    Pure: the only time source is `now`. Raises EmptyInputError when there is nothing
    to average, and MisalignedInputError when the two sequences differ in length.
    """
    if len(posts) != len(sentiments):
        raise MisalignedInputError(
            f"Expected one sentiment result per post (posts={len(posts)}, sentiments={len(sentiments)})"
        )
    if not sentiments:
        raise EmptyInputError("Cannot aggregate an empty set of sentiment results")

    overall = sum(float(s.score) for s in sentiments) / len(sentiments)

    over_time = tuple(
        TimePoint(label=relative_label(post.created_at, now), value=float(s.score))
        for post, s in zip(posts, sentiments)
    )

    confidences = tuple(
        DEFAULT_CONFIDENCE if s.confidence is None else float(s.confidence) for s in sentiments
    )

    return AggregateResult(
        overall_score=overall,
        sentiment_over_time=over_time,
        distribution=count_distribution(sentiments),
        confidence_scores=confidences,
        top_keywords=extract_top_keywords(post.text for post in posts),
    )
