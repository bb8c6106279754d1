"""Twitter API v2 recent-search client.

- Recent search: GET {base_url}/2/tweets/search/recent?query=...&tweet.fields=created_at
"""

from __future__ import annotations

from typing import Any

import httpx

from .config_schema import TwitterConfig
from .errors import FetchError
from .normalize import posts_from_items
from .post import Post

SEARCH_PATH = "/2/tweets/search/recent"


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in ("detail", "title", "message"):
            val = body.get(key)
            if isinstance(val, str) and val.strip():
                return val.strip()
        errors = body.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            msg = errors[0].get("message") or errors[0].get("detail")
            if isinstance(msg, str) and msg.strip():
                return msg.strip()

    text = (response.text or "").strip()
    return text[:500] if text else response.reason_phrase


class TwitterSearchFetcher:
    """
    Fetch recent posts for a query from the Twitter API v2.

    The base URL may point at a reverse proxy prefix instead of the upstream host.
    """

    def __init__(
        self,
        bearer_token: str,
        *,
        twitter_cfg: TwitterConfig,
        client: httpx.Client | None = None,
    ) -> None:
        token = (bearer_token or "").strip()
        if not token:
            raise ValueError("bearer_token must be a non-empty string")

        self._cfg = twitter_cfg
        self._client = client or httpx.Client(timeout=twitter_cfg.timeout_seconds)
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }

    def close(self) -> None:
        self._client.close()

    def _search_url(self) -> str:
        return self._cfg.base_url.rstrip("/") + SEARCH_PATH

    def fetch(self, query: str) -> list[Post]:
        q = (query or "").strip()
        if not q:
            raise FetchError("search query must be non-empty")

        params: dict[str, Any] = {
            "query": q,
            "max_results": self._cfg.max_results,
            "tweet.fields": "created_at",
        }

        try:
            response = self._client.get(self._search_url(), params=params, headers=self._headers)
        except httpx.HTTPError as e:
            raise FetchError(f"Failed to fetch posts: {e}") from e

        if response.status_code >= 400:
            raise FetchError(
                f"Failed to fetch posts (HTTP {response.status_code}): {_error_detail(response)}"
            )

        try:
            body = response.json()
        except ValueError as e:
            raise FetchError(f"Search response was not valid JSON: {e}") from e

        if not isinstance(body, dict):
            raise FetchError("Search response must be a JSON object")

        data = body.get("data")
        if data is None:
            # No matches: the API omits `data` and reports result_count=0.
            return []
        if not isinstance(data, list):
            raise FetchError("Search response field `data` must be a list")

        return posts_from_items(data)
