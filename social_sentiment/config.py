from __future__ import annotations

import hashlib
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

import yaml
from pydantic import ValidationError as PydanticValidationError

from .config_schema import AppConfig
from .errors import ConfigError


@dataclass(frozen=True)
class RuntimeSecrets:
    gemini_api_key: str
    twitter_bearer_token: str | None = None
    apify_token: str | None = None


def parse_config(text: str, *, source: str = "<config>") -> AppConfig:
    """
    Validate YAML config text into an AppConfig.

    An empty document yields the defaults. Every failure is a ConfigError whose
    message names `source`.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML in {source}: {e}") from e

    if data is None:
        return AppConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Top-level YAML in {source} must be a mapping/object")

    try:
        return AppConfig.model_validate(data)
    except PydanticValidationError as e:
        problems = [
            f"- {'.'.join(str(part) for part in item.get('loc', ())) or '<root>'}: "
            f"{item.get('msg', 'invalid value')}"
            for item in e.errors()
        ]
        raise ConfigError("\n".join([f"Invalid configuration in {source}:", *problems])) from e


def load_config(path: str | Path) -> AppConfig:
    p = Path(path)
    if not p.is_file():
        raise ConfigError(f"Config file not found: {p}")
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Failed to read config file: {p}") from e
    return parse_config(text, source=str(p))


def _credential_env_names(config: AppConfig) -> dict[str, str]:
    names = {"gemini_api_key": config.gemini.api_key_env}
    if config.fetcher.backend == "apify":
        names["apify_token"] = config.apify.token_env
    else:
        names["twitter_bearer_token"] = config.twitter.bearer_token_env
    return names


def resolve_runtime_secrets(
    config: AppConfig, *, environ: Mapping[str, str] | None = None
) -> RuntimeSecrets:
    """
    Read the API credentials named in config from the environment.

    Only the fetcher backend selected in config needs its token; the other
    backend's variable is never read.
    """
    env = os.environ if environ is None else environ

    values: dict[str, str] = {}
    missing: list[str] = []
    for field_name, env_name in _credential_env_names(config).items():
        value = (env.get(env_name) or "").strip()
        if value:
            values[field_name] = value
        else:
            missing.append(env_name)

    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    return RuntimeSecrets(**values)


def config_sha256(config: AppConfig) -> str:
    """Stable hash of the effective config, logged alongside each session."""
    payload = json.dumps(
        config.model_dump(mode="json"),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
