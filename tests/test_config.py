from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from social_sentiment.config import config_sha256, load_config, parse_config, resolve_runtime_secrets
from social_sentiment.config_schema import AppConfig
from social_sentiment.errors import ConfigError


_VALID_YAML = """\
fetcher:
  backend: twitter_api

twitter:
  bearer_token_env: TWITTER_BEARER_TOKEN
  base_url: http://localhost:5173/api/twitter
  max_results: 25
  timeout_seconds: 10

apify:
  token_env: APIFY_TOKEN
  actor: apidojo/tweet-scraper
  max_items: 30
  sort: Latest

gemini:
  api_key_env: GEMINI_API_KEY
  base_url: http://localhost:5173/api/gemini/v1beta/openai/
  model: gemini-2.0-flash
  max_output_tokens: 128

scoring:
  max_concurrency: 4

dashboard:
  recent_posts: 3
"""


def _write(td: str, text: str) -> Path:
    path = Path(td) / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestConfig(unittest.TestCase):
    def test_load_config_ok(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            cfg = load_config(_write(td, _VALID_YAML))

        self.assertEqual(cfg.twitter.base_url, "http://localhost:5173/api/twitter")
        self.assertEqual(cfg.twitter.max_results, 25)
        self.assertEqual(cfg.twitter.timeout_seconds, 10.0)
        self.assertEqual(cfg.scoring.max_concurrency, 4)
        self.assertEqual(cfg.dashboard.recent_posts, 3)

    def test_empty_file_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            cfg = load_config(_write(td, ""))

        self.assertEqual(cfg, AppConfig())
        self.assertEqual(cfg.fetcher.backend, "twitter_api")
        self.assertEqual(cfg.scoring.max_concurrency, 0)
        self.assertIsNone(cfg.gemini.timeout_seconds)

    def test_missing_file(self) -> None:
        with self.assertRaises(ConfigError):
            load_config("/nonexistent/config.yaml")

    def test_rejects_unknown_keys_and_bad_values(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            with self.assertRaises(ConfigError) as ctx:
                load_config(_write(td, _VALID_YAML.replace("max_results: 25", "max_results: 5")))
            self.assertIn("twitter.max_results", str(ctx.exception))

            with self.assertRaises(ConfigError):
                load_config(_write(td, _VALID_YAML + "\nextra_section: {}\n"))

            with self.assertRaises(ConfigError):
                load_config(_write(td, "- just\n- a list\n"))

    def test_parse_config_names_source(self) -> None:
        with self.assertRaises(ConfigError) as ctx:
            parse_config("twitter: [unclosed", source="inline")
        self.assertIn("inline", str(ctx.exception))

        cfg = parse_config("dashboard:\n  recent_posts: 0\n")
        self.assertEqual(cfg.dashboard.recent_posts, 0)

    def test_secrets_for_twitter_backend(self) -> None:
        cfg = AppConfig()

        with self.assertRaises(ConfigError) as ctx:
            resolve_runtime_secrets(cfg, environ={"GEMINI_API_KEY": "g"})
        self.assertIn("TWITTER_BEARER_TOKEN", str(ctx.exception))

        secrets = resolve_runtime_secrets(
            cfg, environ={"GEMINI_API_KEY": " g ", "TWITTER_BEARER_TOKEN": "t"}
        )
        self.assertEqual(secrets.gemini_api_key, "g")
        self.assertEqual(secrets.twitter_bearer_token, "t")
        self.assertIsNone(secrets.apify_token)

    def test_secrets_for_apify_backend(self) -> None:
        cfg = AppConfig.model_validate({"fetcher": {"backend": "apify"}})

        with self.assertRaises(ConfigError):
            resolve_runtime_secrets(cfg, environ={"GEMINI_API_KEY": "g", "TWITTER_BEARER_TOKEN": "t"})

        secrets = resolve_runtime_secrets(cfg, environ={"GEMINI_API_KEY": "g", "APIFY_TOKEN": "a"})
        self.assertEqual(secrets.apify_token, "a")
        self.assertIsNone(secrets.twitter_bearer_token)

    def test_config_hash_is_stable(self) -> None:
        a = AppConfig()
        b = AppConfig.model_validate({})
        c = AppConfig.model_validate({"scoring": {"max_concurrency": 2}})

        self.assertEqual(config_sha256(a), config_sha256(b))
        self.assertNotEqual(config_sha256(a), config_sha256(c))


if __name__ == "__main__":
    unittest.main()
