"""Port for the outbound chat (LLM) service."""

from __future__ import annotations

import abc

from loam_iiif.errors import ChatServiceError


DEFAULT_MAX_NEW_TOKENS = 1000


def compose_message(prompt: str, context: str) -> str:
    """Text sent to the model: the listing context, a blank line, the question."""
    return f"{context}\n\n{prompt}"


class ChatService(abc.ABC):
    """Port: send a question about the current listing, get one reply."""

    @abc.abstractmethod
    def send(self, prompt: str, context: str) -> str:
        """
        Ask ``prompt`` with ``context`` prepended.

        Raises:
            ChatServiceError: If the request fails or the reply is unusable
        """
        ...

    @abc.abstractmethod
    def list_models(self) -> list[str]:
        ...


class UnavailableChatService(ChatService):
    """Stand-in used when the configured service could not be created."""

    def __init__(self, reason: str) -> None:
        self.reason = reason

    def send(self, prompt: str, context: str) -> str:
        raise ChatServiceError(f"chat service unavailable: {self.reason}")

    def list_models(self) -> list[str]:
        raise ChatServiceError(f"chat service unavailable: {self.reason}")
