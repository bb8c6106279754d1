from __future__ import annotations

from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import Protocol, Sequence

from .errors import FetchError, ScoreError
from .post import Post, SentimentResult


class PostFetcher(Protocol):
    def fetch(self, query: str) -> list[Post]: ...


class SentimentScorer(Protocol):
    def score(self, text: str) -> SentimentResult: ...


def fetch_posts(fetcher: PostFetcher, query: str) -> list[Post]:
    """Run the fetcher and wrap anything other than FetchError into one."""
    try:
        return list(fetcher.fetch(query))
    except FetchError:
        raise
    except Exception as e:
        raise FetchError(str(e) or "Failed to fetch posts") from e


def _first_failure(futures: Sequence[Future[SentimentResult]]) -> BaseException | None:
    # Lowest-index failure among finished calls.
    for fut in futures:
        if fut.done() and not fut.cancelled():
            exc = fut.exception()
            if exc is not None:
                return exc
    return None


def score_posts(
    scorer: SentimentScorer,
    posts: Sequence[Post],
    *,
    max_concurrency: int = 0,
) -> list[SentimentResult]:
    """
    Score every post concurrently and return results index-aligned with `posts`.

    All-or-nothing: on the first failure, calls that have not started are cancelled and
    a ScoreError is raised; no partial results are returned. `max_concurrency=0` uses
    one worker per post.
    """
    if max_concurrency < 0:
        raise ValueError("max_concurrency must be >= 0")
    if not posts:
        return []

    workers = len(posts) if max_concurrency == 0 else min(max_concurrency, len(posts))

    executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sentiment-score")
    try:
        futures = [executor.submit(scorer.score, post.text) for post in posts]
        done, _ = wait(futures, return_when=FIRST_EXCEPTION)

        exc = _first_failure([f for f in futures if f in done])
        if exc is not None:
            for fut in futures:
                fut.cancel()
            if isinstance(exc, ScoreError):
                raise exc
            raise ScoreError(str(exc) or "Sentiment analysis failed") from exc

        return [fut.result() for fut in futures]
    finally:
        # In-flight calls cannot be interrupted; do not block on them after a failure.
        executor.shutdown(wait=False, cancel_futures=True)
