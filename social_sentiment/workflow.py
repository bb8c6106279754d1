from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from threading import Lock
from typing import Callable, Literal

from .aggregate import AggregateResult, aggregate
from .errors import AggregationError, FetchError, ScoreError, ValidationError
from .post import Post
from .scoring import PostFetcher, SentimentScorer, fetch_posts, score_posts
from .session_log import SessionLog

EMPTY_QUERY_MESSAGE = "Please enter a search query"
GENERIC_ERROR_MESSAGE = "An error occurred"
SUCCESS_MESSAGE = "Analysis complete!"
NO_POSTS_MESSAGE = "No posts found"


class Phase(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    SCORING = "scoring"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class Notification:
    level: Literal["success", "info", "error"]
    message: str


@dataclass(frozen=True)
class AnalysisState:
    """Immutable snapshot of one analysis request, handed to the presentation layer."""

    phase: Phase = Phase.IDLE
    request: int = 0
    query: str = ""
    posts: tuple[Post, ...] = ()
    result: AggregateResult | None = None
    error: Exception | None = None
    notification: Notification | None = None

    @property
    def busy(self) -> bool:
        return self.phase in (Phase.FETCHING, Phase.SCORING)


StateListener = Callable[[AnalysisState], None]
Clock = Callable[[], datetime]


def error_message(exc: BaseException) -> str:
    msg = (str(exc) or "").strip()
    return msg or GENERIC_ERROR_MESSAGE


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AnalysisSession:
    """
    Drives one query at a time through fetch -> concurrent scoring -> aggregation.

    Phases: IDLE -> FETCHING -> SCORING -> DONE, or FAILED from fetching/scoring.
    Each submit starts a new request and discards the previous one's results; snapshots
    from a superseded request are never published.
    """

    def __init__(
        self,
        fetcher: PostFetcher,
        scorer: SentimentScorer,
        *,
        max_concurrency: int = 0,
        clock: Clock | None = None,
        logger: SessionLog | None = None,
        listener: StateListener | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._scorer = scorer
        self._max_concurrency = int(max_concurrency)
        self._clock = clock or _utc_now
        self._logger = logger
        self._listener = listener

        self._lock = Lock()
        self._generation = 0
        self._state = AnalysisState()

    @property
    def state(self) -> AnalysisState:
        with self._lock:
            return self._state

    def _is_current(self, request: int) -> bool:
        with self._lock:
            return request == self._generation

    def _publish(self, state: AnalysisState) -> bool:
        with self._lock:
            if state.request != self._generation:
                return False
            self._state = state

        if self._listener is not None:
            self._listener(state)
        return True

    def _log(self, level: str, event: str, *, request: int | None = None, **data: object) -> None:
        if self._logger is not None:
            self._logger.record(level, event, request=request, **data)

    def _fail(
        self,
        state: AnalysisState,
        exc: FetchError | ScoreError | AggregationError,
    ) -> AnalysisState:
        if self._logger is not None:
            self._logger.exception(
                "analysis_failed",
                exc=exc,
                request=state.request,
                phase=state.phase.value,
            )

        failed = replace(
            state,
            phase=Phase.FAILED,
            result=None,
            error=exc,
            notification=Notification("error", error_message(exc)),
        )
        self._publish(failed)
        return failed

    def submit(self, query: str) -> AnalysisState:
        """
        Run a full analysis for `query` and return the request's final snapshot.

        An empty or whitespace-only query is rejected without starting a request. When
        nothing is in flight the machine returns to IDLE and drops the previous result;
        a busy snapshot is kept and only gains the rejection.
        """
        q = (query or "").strip()
        if not q:
            exc = ValidationError(EMPTY_QUERY_MESSAGE)
            notice = Notification("error", EMPTY_QUERY_MESSAGE)
            with self._lock:
                current = self._state
            if current.busy:
                rejected = replace(current, error=exc, notification=notice)
            else:
                rejected = AnalysisState(request=current.request, error=exc, notification=notice)
            if self._logger is not None:
                self._logger.warning("query_rejected", request=rejected.request, phase=current.phase.value)
            self._publish(rejected)
            return rejected

        with self._lock:
            self._generation += 1
            request = self._generation

        state = AnalysisState(phase=Phase.FETCHING, request=request, query=q)
        self._log("INFO", "analysis_started", request=request, query=q)
        self._publish(state)

        try:
            posts = tuple(fetch_posts(self._fetcher, q))
        except FetchError as e:
            return self._fail(state, e)

        self._log("INFO", "fetch_completed", request=request, posts=len(posts))

        if not self._is_current(request):
            self._log("INFO", "analysis_superseded", request=request)
            return self.state

        if not posts:
            done = replace(
                state,
                phase=Phase.DONE,
                notification=Notification("info", NO_POSTS_MESSAGE),
            )
            self._log("INFO", "analysis_completed", request=request, posts=0)
            self._publish(done)
            return done

        state = replace(state, phase=Phase.SCORING, posts=posts)
        self._publish(state)

        try:
            sentiments = score_posts(
                self._scorer,
                posts,
                max_concurrency=self._max_concurrency,
            )
            self._log("INFO", "scoring_completed", request=request, scored=len(sentiments))
            result = aggregate(posts, sentiments, now=self._clock())
        except (ScoreError, AggregationError) as e:
            return self._fail(state, e)

        done = replace(
            state,
            phase=Phase.DONE,
            result=result,
            notification=Notification("success", SUCCESS_MESSAGE),
        )
        self._log(
            "INFO",
            "analysis_completed",
            request=request,
            posts=len(posts),
            overall_score=result.overall_score,
        )
        self._publish(done)
        return done
