from __future__ import annotations

import argparse
import json
import sys
from contextlib import ExitStack
from datetime import datetime, timezone
from typing import Sequence

from .apify_client import ApifyTweetFetcher
from .config import RuntimeSecrets, config_sha256, load_config, resolve_runtime_secrets
from .config_schema import AppConfig
from .errors import (
    AggregationError,
    ConfigError,
    ExportError,
    FetchError,
    ScoreError,
    ValidationError,
)
from .export_excel import export_dashboard_workbook
from .llm import GeminiSentimentScorer
from .render import render_text, result_to_dict
from .scoring import PostFetcher
from .session_log import SessionLog
from .twitter_client import TwitterSearchFetcher
from .workflow import AnalysisSession, error_message


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="social_sentiment")

    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser(
        "analyze",
        help="Search posts for a query, score their sentiment and print the dashboard.",
    )
    analyze.add_argument(
        "--config",
        required=True,
        help="Path to YAML config file.",
    )
    analyze.add_argument(
        "--json",
        action="store_true",
        help="Print the aggregate as JSON instead of text.",
    )
    analyze.add_argument(
        "--xlsx",
        default=None,
        help="Also write a chart workbook to this path.",
    )
    analyze.add_argument(
        "--log",
        default=None,
        help="Append JSONL diagnostics to this file.",
    )
    analyze.add_argument("query", help="Search query.")
    analyze.set_defaults(_handler=_cmd_analyze)

    return parser


def _eprint(message: str) -> None:
    print(message, file=sys.stderr)


def _build_fetcher(cfg: AppConfig, secrets: RuntimeSecrets) -> PostFetcher:
    if cfg.fetcher.backend == "apify":
        return ApifyTweetFetcher(secrets.apify_token or "", apify_cfg=cfg.apify)
    return TwitterSearchFetcher(secrets.twitter_bearer_token or "", twitter_cfg=cfg.twitter)


def _cmd_analyze(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    secrets = resolve_runtime_secrets(cfg)

    with ExitStack() as stack:
        log: SessionLog | None = None
        if args.log:
            log = stack.enter_context(SessionLog.open(args.log))
            log.info(
                "config_loaded",
                config_path=str(args.config),
                config_sha256=config_sha256(cfg),
                backend=cfg.fetcher.backend,
            )

        fetcher = _build_fetcher(cfg, secrets)
        if isinstance(fetcher, TwitterSearchFetcher):
            stack.callback(fetcher.close)

        scorer = GeminiSentimentScorer(secrets.gemini_api_key, gemini_cfg=cfg.gemini)

        now = datetime.now(timezone.utc)
        session = AnalysisSession(
            fetcher,
            scorer,
            max_concurrency=cfg.scoring.max_concurrency,
            clock=lambda: now,
            logger=log,
        )
        state = session.submit(args.query)

        if state.error is not None:
            raise state.error

        if state.result is None:
            if state.notification is not None:
                print(state.notification.message)
            return 0

        recent = cfg.dashboard.recent_posts
        if args.json:
            payload = result_to_dict(state.result, posts=state.posts, now=now, recent_limit=recent)
            print(json.dumps(payload, indent=2, ensure_ascii=False))
        else:
            print(render_text(state.result, posts=state.posts, now=now, recent_limit=recent))

        if args.xlsx:
            path = export_dashboard_workbook(
                state.result,
                args.xlsx,
                query=state.query,
                posts=state.posts,
                now=now,
                recent_limit=recent,
            )
            _eprint(f"dashboard_xlsx={path}")

        if state.notification is not None:
            _eprint(state.notification.message)

    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        handler = getattr(args, "_handler")
        return int(handler(args))
    except ConfigError as e:
        _eprint(str(e))
        return 2
    except ValidationError as e:
        _eprint(error_message(e))
        return 2
    except (FetchError, ScoreError, AggregationError, ExportError) as e:
        _eprint(error_message(e))
        return 3
    except KeyboardInterrupt:
        _eprint("Interrupted")
        return 130
    except Exception as e:
        _eprint(f"Unexpected error: {e}")
        return 1
