from __future__ import annotations

import unittest
from datetime import datetime, timezone
from typing import Any

from social_sentiment.apify_client import ApifyTweetFetcher
from social_sentiment.config_schema import ApifyConfig
from social_sentiment.errors import FetchError


class _FakeDatasetClient:
    def __init__(self, items: list[dict[str, Any]]) -> None:
        self._items = items
        self.calls: list[dict[str, Any]] = []

    def iterate_items(self, *, limit: int | None = None, clean: bool | None = None) -> Any:
        self.calls.append({"limit": limit, "clean": clean})
        n = len(self._items) if limit is None else min(limit, len(self._items))
        for i in range(n):
            yield self._items[i]


class _FakeActorClient:
    def __init__(self, run_result: dict[str, Any] | None, exc: Exception | None = None) -> None:
        self._run_result = run_result
        self._exc = exc
        self.calls: list[dict[str, Any]] = []

    def call(self, *, run_input: Any = None, timeout_secs: int | None = None) -> Any:
        self.calls.append({"run_input": run_input, "timeout_secs": timeout_secs})
        if self._exc is not None:
            raise self._exc
        return self._run_result


class _FakeApifyClient:
    def __init__(
        self,
        *,
        run_result: dict[str, Any] | None,
        items: list[dict[str, Any]],
        exc: Exception | None = None,
    ) -> None:
        self.actor_ids: list[str] = []
        self.dataset_ids: list[str] = []
        self._actor_client = _FakeActorClient(run_result, exc)
        self._dataset_client = _FakeDatasetClient(items)

    def actor(self, actor_id: str) -> _FakeActorClient:
        self.actor_ids.append(actor_id)
        return self._actor_client

    def dataset(self, dataset_id: str) -> _FakeDatasetClient:
        self.dataset_ids.append(dataset_id)
        return self._dataset_client


_ITEMS = [
    {"id": "111", "text": "shipping day", "createdAt": "Sat Jun 01 11:00:00 +0000 2024"},
    {"id": "112", "fullText": "long form thread", "createdAt": "2024-06-01T10:00:00.000Z"},
    {"noResults": True},
]


class TestApifyTweetFetcher(unittest.TestCase):
    def test_fetch_builds_expected_input(self) -> None:
        fake = _FakeApifyClient(
            run_result={"id": "run_1", "status": "SUCCEEDED", "defaultDatasetId": "ds_1"},
            items=_ITEMS,
        )
        cfg = ApifyConfig(actor="apidojo/tweet-scraper", max_items=3, sort="Latest", timeout_secs=60)
        fetcher = ApifyTweetFetcher("x", apify_cfg=cfg, client=fake)  # type: ignore[arg-type]

        posts = fetcher.fetch("  python  ")

        self.assertEqual([p.id for p in posts], ["111", "112"])
        self.assertEqual(posts[0].created_at, datetime(2024, 6, 1, 11, tzinfo=timezone.utc))
        self.assertEqual(posts[1].text, "long form thread")
        self.assertEqual(fake.actor_ids, ["apidojo/tweet-scraper"])
        self.assertEqual(fake.dataset_ids, ["ds_1"])

        call = fake._actor_client.calls[0]
        self.assertEqual(call["timeout_secs"], 60)
        self.assertEqual(
            call["run_input"],
            {"searchTerms": ["python"], "maxItems": 3, "sort": "Latest"},
        )
        self.assertEqual(fake._dataset_client.calls, [{"limit": 3, "clean": True}])

    def test_failed_run_raises(self) -> None:
        fake = _FakeApifyClient(run_result=None, items=[])
        fetcher = ApifyTweetFetcher("x", apify_cfg=ApifyConfig(), client=fake)  # type: ignore[arg-type]

        with self.assertRaises(FetchError):
            fetcher.fetch("python")

    def test_missing_dataset_id_raises(self) -> None:
        fake = _FakeApifyClient(run_result={"id": "run_1"}, items=[])
        fetcher = ApifyTweetFetcher("x", apify_cfg=ApifyConfig(), client=fake)  # type: ignore[arg-type]

        with self.assertRaises(FetchError):
            fetcher.fetch("python")

    def test_unfinished_run_raises(self) -> None:
        fake = _FakeApifyClient(
            run_result={"id": "run_1", "status": "TIMED-OUT", "defaultDatasetId": "ds_1"},
            items=_ITEMS,
        )
        fetcher = ApifyTweetFetcher("x", apify_cfg=ApifyConfig(), client=fake)  # type: ignore[arg-type]

        with self.assertRaises(FetchError) as ctx:
            fetcher.fetch("python")
        self.assertIn("TIMED-OUT", str(ctx.exception))
        self.assertEqual(fake.dataset_ids, [])

    def test_actor_exception_is_wrapped(self) -> None:
        fake = _FakeApifyClient(run_result=None, items=[], exc=ConnectionError("reset"))
        fetcher = ApifyTweetFetcher("x", apify_cfg=ApifyConfig(), client=fake)  # type: ignore[arg-type]

        with self.assertRaises(FetchError) as ctx:
            fetcher.fetch("python")
        self.assertIn("reset", str(ctx.exception))
        self.assertEqual(len(fake._actor_client.calls), 1)

    def test_blank_query_raises(self) -> None:
        fake = _FakeApifyClient(run_result=None, items=[])
        fetcher = ApifyTweetFetcher("x", apify_cfg=ApifyConfig(), client=fake)  # type: ignore[arg-type]

        with self.assertRaises(FetchError):
            fetcher.fetch("  ")
        self.assertEqual(fake.actor_ids, [])


if __name__ == "__main__":
    unittest.main()
