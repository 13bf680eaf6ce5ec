"""OpenAI (or compatible endpoint) chat adapter."""

from __future__ import annotations

from typing import Any

import openai

from loam_iiif.errors import ChatServiceError

from .base import DEFAULT_MAX_NEW_TOKENS, ChatService, compose_message


DEFAULT_MODEL = "gpt-4o-mini"


class OpenAIChatService(ChatService):
    """Chat service backed by the OpenAI chat completions API."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        *,
        max_new_tokens: int = DEFAULT_MAX_NEW_TOKENS,
        client: Any = None,
    ) -> None:
        if client is None:
            client = openai.OpenAI(api_key=api_key)
        self._client = client
        self._model = model
        self.max_new_tokens = max_new_tokens

    def send(self, prompt: str, context: str) -> str:
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": compose_message(prompt, context)}],
                max_tokens=self.max_new_tokens,
            )
        except openai.OpenAIError as e:
            raise ChatServiceError(str(e)) from e
        if not response.choices or not response.choices[0].message.content:
            raise ChatServiceError("no assistant message found in the response")
        return response.choices[0].message.content

    def list_models(self) -> list[str]:
        try:
            return sorted(model.id for model in self._client.models.list())
        except openai.OpenAIError as e:
            raise ChatServiceError(str(e)) from e
