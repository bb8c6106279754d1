from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from apify_client import ApifyClient
from apify_client.errors import ApifyApiError

from .config_schema import ApifyConfig
from .errors import FetchError
from .normalize import posts_from_items
from .post import Post


@dataclass(frozen=True)
class ActorRunRef:
    actor_id: str
    run_id: str
    default_dataset_id: str


class ApifyTweetFetcher:
    """
    Thin wrapper around an Apify tweet scraper Actor.

    Runs the Actor once per query and reads its default dataset. No retries.
    """

    def __init__(
        self,
        token: str,
        *,
        apify_cfg: ApifyConfig,
        client: ApifyClient | None = None,
    ) -> None:
        self._cfg = apify_cfg

        if client is not None:
            self._client = client
        else:
            self._client = ApifyClient(token=token, max_retries=0)

    def run_once(self, query: str) -> ActorRunRef:
        q = (query or "").strip()
        if not q:
            raise FetchError("search query must be non-empty")

        actor_id = self._cfg.actor
        run_input: dict[str, Any] = {
            "searchTerms": [q],
            "maxItems": self._cfg.max_items,
            "sort": self._cfg.sort,
        }

        try:
            result = self._client.actor(actor_id).call(
                run_input=run_input,
                timeout_secs=self._cfg.timeout_secs,
            )
        except ApifyApiError as e:
            raise FetchError(f"Apify Actor call failed ({actor_id}): {e}") from e
        except Exception as e:
            raise FetchError(f"Unexpected error while calling Apify Actor ({actor_id}): {e}") from e

        if result is None:
            raise FetchError(f"Apify Actor run failed ({actor_id})")

        run_id = (result.get("id") or "").strip()
        status = (result.get("status") or "").strip()
        # call() also returns for TIMED-OUT and ABORTED runs.
        if status and status != "SUCCEEDED":
            raise FetchError(f"Apify Actor run {run_id or '?'} ended with status {status} ({actor_id})")

        dataset_id = (result.get("defaultDatasetId") or "").strip()
        if not run_id or not dataset_id:
            raise FetchError(f"Apify Actor run response missing run id or default dataset id: {result}")

        return ActorRunRef(actor_id=actor_id, run_id=run_id, default_dataset_id=dataset_id)

    def fetch_dataset_items(self, dataset_id: str) -> list[dict[str, Any]]:
        ds = (dataset_id or "").strip()
        if not ds:
            raise FetchError("dataset_id must be a non-empty string")

        try:
            return list(self._client.dataset(ds).iterate_items(limit=self._cfg.max_items, clean=True))
        except ApifyApiError as e:
            raise FetchError(f"Failed to read dataset items ({ds}): {e}") from e
        except Exception as e:
            raise FetchError(f"Unexpected error while reading dataset ({ds}): {e}") from e

    def fetch(self, query: str) -> list[Post]:
        run = self.run_once(query)
        return posts_from_items(self.fetch_dataset_items(run.default_dataset_id))
