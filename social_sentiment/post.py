from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Post:
    """A fetched post; order is whatever the search returned."""

    id: str
    text: str
    created_at: datetime


@dataclass(frozen=True)
class SentimentResult:
    """Score in [-1, 1] and an optional confidence in [0, 1]."""

    score: float
    confidence: float | None = None
