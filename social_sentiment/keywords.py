from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Iterator

STOP_WORDS = frozenset({"the", "be", "to", "of", "and", "a", "in", "that", "have"})
MIN_TOKEN_CHARS = 3
TOP_KEYWORDS_LIMIT = 10

# ECMAScript `\s`: includes U+FEFF, excludes the U+001C-U+001F separators str.split() honours.
_WHITESPACE_RE = re.compile(r"[\t\n\v\f\r \u00a0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000\ufeff]+")


@dataclass(frozen=True)
class KeywordCount:
    keyword: str
    count: int


def iter_keyword_tokens(text: str) -> Iterator[str]:
    # Whitespace-only split: punctuation stays attached to the token.
    for token in _WHITESPACE_RE.split((text or "").lower()):
        if token in STOP_WORDS:
            continue
        if len(token) < MIN_TOKEN_CHARS:
            continue
        yield token


def extract_top_keywords(
    texts: Iterable[str], *, limit: int = TOP_KEYWORDS_LIMIT
) -> tuple[KeywordCount, ...]:
    """
    Count content words pooled across all texts and return the most frequent.

    Ties keep first-seen order (Counter.most_common is stable for equal counts).
    """
    counts: Counter[str] = Counter()
    for text in texts:
        counts.update(iter_keyword_tokens(text))

    if limit <= 0:
        return ()

    return tuple(KeywordCount(keyword=k, count=int(n)) for k, n in counts.most_common(limit))
