from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Sequence

from .aggregate import AggregateResult
from .classify import overall_label
from .errors import ExportError
from .post import Post
from .relative_time import relative_label
from .render import recent_posts

_EXCEL_FORMULA_PREFIXES = ("=", "+", "-", "@")

SHEET_OVERVIEW = "overview"
SHEET_DISTRIBUTION = "distribution"
SHEET_OVER_TIME = "sentiment_over_time"
SHEET_KEYWORDS = "top_keywords"
SHEET_RECENT = "recent_posts"


def _safe_excel_text(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        return str(value)
    if value.startswith(_EXCEL_FORMULA_PREFIXES):
        return "'" + value
    return value


def _add_charts(wb: Any, *, points: int, keywords: int) -> None:
    from openpyxl.chart import BarChart, LineChart, PieChart, Reference

    ws = wb[SHEET_DISTRIBUTION]
    pie = PieChart()
    pie.title = "Sentiment Distribution"
    pie.add_data(Reference(ws, min_col=2, min_row=1, max_row=4), titles_from_data=True)
    pie.set_categories(Reference(ws, min_col=1, min_row=2, max_row=4))
    ws.add_chart(pie, "D2")

    if points > 0:
        ws = wb[SHEET_OVER_TIME]
        line = LineChart()
        line.title = "Sentiment Over Time"
        line.y_axis.title = "Sentiment Score"
        line.y_axis.scaling.min = -1
        line.y_axis.scaling.max = 1
        line.add_data(Reference(ws, min_col=2, min_row=1, max_row=points + 1), titles_from_data=True)
        line.set_categories(Reference(ws, min_col=1, min_row=2, max_row=points + 1))
        ws.add_chart(line, "E2")

    if keywords > 0:
        ws = wb[SHEET_KEYWORDS]
        bar = BarChart()
        bar.title = "Top Keywords"
        bar.y_axis.title = "Frequency"
        bar.add_data(Reference(ws, min_col=2, min_row=1, max_row=keywords + 1), titles_from_data=True)
        bar.set_categories(Reference(ws, min_col=1, min_row=2, max_row=keywords + 1))
        ws.add_chart(bar, "D2")


def export_dashboard_workbook(
    result: AggregateResult,
    out_path: str | Path,
    *,
    query: str,
    posts: Sequence[Post],
    now: datetime,
    recent_limit: int = 5,
) -> Path:
    """
    Write the dashboard as an Excel workbook: one sheet per panel, with native charts
    for the distribution, the score series and the keyword frequencies.
    """
    try:
        import pandas as pd  # type: ignore[import-not-found]
    except Exception as e:
        raise ExportError("pandas is required for Excel export") from e

    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)

    overview_rows: list[dict[str, Any]] = [
        {"key": "query", "value": _safe_excel_text(query)},
        {"key": "generated_at_utc", "value": now.isoformat()},
        {"key": "posts", "value": len(posts)},
        {"key": "overall_score", "value": round(result.overall_score, 4)},
        {"key": "overall_label", "value": overall_label(result.overall_score)},
    ]

    d = result.distribution
    distribution_rows = [
        {"label": "Positive", "count": d.positive},
        {"label": "Neutral", "count": d.neutral},
        {"label": "Negative", "count": d.negative},
    ]

    over_time_rows = [
        {"label": p.label, "score": p.value, "confidence": c}
        for p, c in zip(result.sentiment_over_time, result.confidence_scores)
    ]

    keyword_rows = [
        {"keyword": _safe_excel_text(k.keyword), "count": k.count} for k in result.top_keywords
    ]

    recent_rows = [
        {
            "id": _safe_excel_text(post.id),
            "text": _safe_excel_text(post.text),
            "created_at": post.created_at.isoformat(),
            "age": relative_label(post.created_at, now),
        }
        for post in recent_posts(posts, recent_limit)
    ]

    frames = {
        SHEET_OVERVIEW: pd.DataFrame(overview_rows, columns=["key", "value"]),
        SHEET_DISTRIBUTION: pd.DataFrame(distribution_rows, columns=["label", "count"]),
        SHEET_OVER_TIME: pd.DataFrame(over_time_rows, columns=["label", "score", "confidence"]),
        SHEET_KEYWORDS: pd.DataFrame(keyword_rows, columns=["keyword", "count"]),
        SHEET_RECENT: pd.DataFrame(recent_rows, columns=["id", "text", "created_at", "age"]),
    }

    try:
        with pd.ExcelWriter(out, engine="openpyxl") as writer:
            for name, df in frames.items():
                df.to_excel(writer, sheet_name=name, index=False)

            wb = writer.book
            for name in frames:
                wb[name].freeze_panes = "A2"

            _add_charts(wb, points=len(over_time_rows), keywords=len(keyword_rows))
    except Exception as e:
        raise ExportError(f"Failed to write workbook: {out}: {e}") from e

    return out
