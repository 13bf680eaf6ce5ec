"""Configuration loader: reads .env and environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv

from loam_iiif.chat.base import DEFAULT_MAX_NEW_TOKENS
from loam_iiif.chat.bedrock import DEFAULT_MODEL_ID, DEFAULT_REGION
from loam_iiif.chat.openai_provider import DEFAULT_MODEL as DEFAULT_OPENAI_MODEL
from loam_iiif.iiif import DEFAULT_TIMEOUT


PROVIDERS = ("bedrock", "openai")


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings for the chat adapters and the HTTP layer.

    Attributes:
        chat_provider: "bedrock" or "openai"
        bedrock_region: AWS region for the Bedrock runtime
        bedrock_model: Bedrock model identifier
        aws_profile: Named AWS profile (None uses the default chain)
        openai_api_key: Key for the OpenAI provider
        openai_model: OpenAI model name
        max_new_tokens: Upper bound on reply length
        http_timeout: Seconds before a document fetch is abandoned
    """

    chat_provider: str = "bedrock"
    bedrock_region: str = DEFAULT_REGION
    bedrock_model: str = DEFAULT_MODEL_ID
    aws_profile: str | None = None
    openai_api_key: str | None = None
    openai_model: str = DEFAULT_OPENAI_MODEL
    max_new_tokens: int = DEFAULT_MAX_NEW_TOKENS
    http_timeout: float = DEFAULT_TIMEOUT

    def with_profile(self, profile: str | None) -> Settings:
        if not profile:
            return self
        return replace(self, aws_profile=profile)


def _load_env_file(env_path: str | None) -> None:
    if env_path:
        load_dotenv(env_path)
        return
    # Walk up to find .env
    cwd = Path.cwd()
    for d in [cwd, *cwd.parents]:
        candidate = d / ".env"
        if candidate.exists():
            load_dotenv(candidate)
            break


def _number(env: Mapping[str, str], key: str, default: float, cast: type) -> float:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise ValueError(f"{key} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{key} must be positive, got {raw!r}")
    return value


def settings_from_env(env: Mapping[str, str]) -> Settings:
    """
    Build settings from an environment mapping.

    Raises:
        ValueError: If a value is malformed (unknown provider, bad number)
    """
    provider = env.get("LOAM_CHAT_PROVIDER", "bedrock").strip().lower() or "bedrock"
    if provider not in PROVIDERS:
        raise ValueError(f"LOAM_CHAT_PROVIDER must be one of {', '.join(PROVIDERS)}, got {provider!r}")

    return Settings(
        chat_provider=provider,
        bedrock_region=env.get("LOAM_BEDROCK_REGION") or DEFAULT_REGION,
        bedrock_model=env.get("LOAM_BEDROCK_MODEL") or DEFAULT_MODEL_ID,
        aws_profile=env.get("AWS_PROFILE") or None,
        openai_api_key=env.get("OPENAI_API_KEY") or None,
        openai_model=env.get("LOAM_OPENAI_MODEL") or DEFAULT_OPENAI_MODEL,
        max_new_tokens=int(_number(env, "LOAM_MAX_NEW_TOKENS", DEFAULT_MAX_NEW_TOKENS, int)),
        http_timeout=float(_number(env, "LOAM_HTTP_TIMEOUT", DEFAULT_TIMEOUT, float)),
    )


def load_settings(env_path: str | None = None) -> Settings:
    """
    Load settings from a .env file (if any) and the process environment.

    Without ``env_path``, the first .env found in the working directory or
    one of its parents is used. Values already set in the environment win.
    """
    _load_env_file(env_path)
    return settings_from_env(os.environ)
