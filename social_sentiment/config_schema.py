from __future__ import annotations

import re
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

_ENV_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _validate_env_var_name(value: str) -> str:
    name = (value or "").strip()
    if not _ENV_NAME_RE.fullmatch(name):
        raise ValueError("must be a valid environment variable name")
    return name


def _validate_base_url(value: str) -> str:
    url = (value or "").strip()
    if not url:
        raise ValueError("must be a non-empty URL or path prefix")
    return url


PositiveInt = Annotated[int, Field(ge=1)]
NonNegativeInt = Annotated[int, Field(ge=0)]
PositiveFloat = Annotated[float, Field(gt=0)]


class FetcherConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    backend: Literal["twitter_api", "apify"] = "twitter_api"


class TwitterConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    bearer_token_env: str = "TWITTER_BEARER_TOKEN"
    # A reverse-proxy prefix such as http://localhost:5173/api/twitter works too.
    base_url: str = "https://api.twitter.com"
    max_results: int = Field(10, ge=10, le=100)
    timeout_seconds: PositiveFloat | None = None

    @field_validator("bearer_token_env")
    @classmethod
    def _token_env_must_be_valid(cls, v: str) -> str:
        return _validate_env_var_name(v)

    @field_validator("base_url")
    @classmethod
    def _base_url_must_be_set(cls, v: str) -> str:
        return _validate_base_url(v)


class ApifyConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    token_env: str = "APIFY_TOKEN"
    actor: str = "apidojo/tweet-scraper"
    max_items: PositiveInt = 20
    sort: Literal["Latest", "Top"] = "Latest"
    timeout_secs: PositiveInt | None = None

    @field_validator("token_env")
    @classmethod
    def _token_env_must_be_valid(cls, v: str) -> str:
        return _validate_env_var_name(v)


class GeminiConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    api_key_env: str = "GEMINI_API_KEY"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    model: str = "gemini-2.0-flash"
    max_output_tokens: PositiveInt = 256
    timeout_seconds: PositiveFloat | None = None

    @field_validator("api_key_env")
    @classmethod
    def _api_key_env_must_be_valid(cls, v: str) -> str:
        return _validate_env_var_name(v)

    @field_validator("base_url")
    @classmethod
    def _base_url_must_be_set(cls, v: str) -> str:
        return _validate_base_url(v)

    @field_validator("model")
    @classmethod
    def _model_must_be_set(cls, v: str) -> str:
        model = (v or "").strip()
        if not model:
            raise ValueError("must be non-empty")
        return model


class ScoringConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    max_concurrency: NonNegativeInt = 0  # 0 means one worker per post


class DashboardConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    recent_posts: NonNegativeInt = 5


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    fetcher: FetcherConfig = Field(default_factory=FetcherConfig)
    twitter: TwitterConfig = Field(default_factory=TwitterConfig)
    apify: ApifyConfig = Field(default_factory=ApifyConfig)
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    dashboard: DashboardConfig = Field(default_factory=DashboardConfig)
