from __future__ import annotations

from datetime import datetime
from typing import Any, Sequence

from .aggregate import AggregateResult
from .classify import overall_label
from .post import Post
from .relative_time import relative_label


def recent_posts(posts: Sequence[Post], limit: int) -> list[Post]:
    return list(posts[: max(0, int(limit))])


def result_to_dict(
    result: AggregateResult,
    *,
    posts: Sequence[Post] = (),
    now: datetime | None = None,
    recent_limit: int = 5,
) -> dict[str, Any]:
    """JSON-ready view of an aggregate plus the recent-posts feed."""
    out: dict[str, Any] = {
        "overallScore": result.overall_score,
        "overallLabel": overall_label(result.overall_score),
        "sentimentOverTime": [{"label": p.label, "value": p.value} for p in result.sentiment_over_time],
        "distribution": {
            "positive": result.distribution.positive,
            "neutral": result.distribution.neutral,
            "negative": result.distribution.negative,
        },
        "confidenceScores": list(result.confidence_scores),
        "topKeywords": [{"keyword": k.keyword, "count": k.count} for k in result.top_keywords],
    }

    if now is not None:
        out["recentPosts"] = [
            {
                "id": post.id,
                "text": post.text,
                "createdAt": post.created_at.isoformat(),
                "age": relative_label(post.created_at, now),
            }
            for post in recent_posts(posts, recent_limit)
        ]

    return out


def render_text(
    result: AggregateResult,
    *,
    posts: Sequence[Post],
    now: datetime,
    recent_limit: int = 5,
) -> str:
    lines: list[str] = []

    lines.append("Overall Sentiment")
    lines.append(f"  {result.overall_score:.2f} ({overall_label(result.overall_score)})")
    lines.append("")

    d = result.distribution
    lines.append("Sentiment Distribution")
    lines.append(f"  Positive: {d.positive}")
    lines.append(f"  Neutral:  {d.neutral}")
    lines.append(f"  Negative: {d.negative}")
    lines.append("")

    lines.append("Sentiment Over Time")
    for point in result.sentiment_over_time:
        lines.append(f"  {point.value:+.2f}  {point.label}")
    lines.append("")

    lines.append("Top Keywords")
    if not result.top_keywords:
        lines.append("  (none)")
    for kw in result.top_keywords:
        lines.append(f"  {kw.count:>3}  {kw.keyword}")

    feed = recent_posts(posts, recent_limit)
    if feed:
        lines.append("")
        lines.append("Recent Posts")
        for post in feed:
            lines.append(f"  - {post.text}")
            lines.append(f"    {relative_label(post.created_at, now)}")

    return "\n".join(lines)
