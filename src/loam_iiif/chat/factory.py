"""Choosing and building the configured chat service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import openai

from loam_iiif.errors import ChatServiceError

from .base import ChatService, UnavailableChatService
from .bedrock import BedrockChatService
from .openai_provider import OpenAIChatService

if TYPE_CHECKING:
    from loam_iiif.config import Settings


LOGGER = logging.getLogger(__name__)


def create_chat_service(settings: Settings) -> ChatService:
    """
    Build the chat service selected by ``settings.chat_provider``.

    Raises:
        ChatServiceError: If the provider cannot be set up (missing
            credentials, unknown AWS profile, ...)
    """
    if settings.chat_provider == "openai":
        if not settings.openai_api_key:
            raise ChatServiceError("OPENAI_API_KEY is not set")
        try:
            return OpenAIChatService(
                settings.openai_api_key,
                settings.openai_model,
                max_new_tokens=settings.max_new_tokens,
            )
        except openai.OpenAIError as e:
            raise ChatServiceError(str(e)) from e

    return BedrockChatService(
        region=settings.bedrock_region,
        model_id=settings.bedrock_model,
        profile=settings.aws_profile,
        max_new_tokens=settings.max_new_tokens,
    )


def create_chat_service_or_placeholder(settings: Settings) -> ChatService:
    """
    Like :func:`create_chat_service`, but never fails.

    The TUI must start even without chat credentials; in that case every
    chat request reports why the service is unavailable.
    """
    try:
        return create_chat_service(settings)
    except ChatServiceError as e:
        LOGGER.warning("Chat service unavailable", extra={"error": str(e)})
        return UnavailableChatService(str(e))
