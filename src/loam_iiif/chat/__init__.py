"""
Chat over the current listing.

``ChatService`` is the port to an external LLM; ``BedrockChatService`` and
``OpenAIChatService`` implement it. ``ChatOverlay`` holds the in-app
conversation state.
"""

from .base import (
    DEFAULT_MAX_NEW_TOKENS,
    ChatService,
    UnavailableChatService,
    compose_message,
)
from .bedrock import BedrockChatService, build_request, extract_reply
from .openai_provider import OpenAIChatService
from .factory import create_chat_service, create_chat_service_or_placeholder
from .overlay import COMPOSER_LIMIT, WELCOME, ChatOverlay, ChatRequest

__all__ = [
    # Service port
    "DEFAULT_MAX_NEW_TOKENS",
    "ChatService",
    "UnavailableChatService",
    "compose_message",
    # Adapters
    "BedrockChatService",
    "build_request",
    "extract_reply",
    "OpenAIChatService",
    "create_chat_service",
    "create_chat_service_or_placeholder",
    # Overlay
    "COMPOSER_LIMIT",
    "WELCOME",
    "ChatOverlay",
    "ChatRequest",
]
