"""AWS Bedrock chat adapter."""

from __future__ import annotations

import json
import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from loam_iiif.errors import ChatServiceError

from .base import DEFAULT_MAX_NEW_TOKENS, ChatService, compose_message


LOGGER = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"
DEFAULT_MODEL_ID = "amazon.nova-lite-v1:0"


def build_request(prompt: str, context: str, *, max_new_tokens: int = DEFAULT_MAX_NEW_TOKENS) -> dict[str, Any]:
    """
    Build the Bedrock messages payload.

    The whole context and question travel as a single "user" message.

    Example:
        >>> build_request("Who?", "Title: A\\nURL: u\\n\\n")["messages"][0]["role"]
        'user'
    """
    return {
        "inferenceConfig": {"max_new_tokens": max_new_tokens},
        "messages": [
            {
                "role": "user",
                "content": [{"text": compose_message(prompt, context)}],
            }
        ],
    }


def extract_reply(payload: dict[str, Any]) -> str:
    """
    Pull the assistant text out of a Bedrock response body.

    Raises:
        ChatServiceError: If the body holds no assistant message
    """
    try:
        content = payload["output"]["message"]["content"]
        text = content[0]["text"]
    except (KeyError, IndexError, TypeError):
        raise ChatServiceError("no assistant message found in the response") from None
    if not isinstance(text, str):
        raise ChatServiceError("no assistant message found in the response")
    return text


class BedrockChatService(ChatService):
    """
    Chat service backed by the Bedrock runtime ``InvokeModel`` API.

    Credentials come from the usual AWS chain; ``profile`` selects a named
    profile from the shared config. Clients may be injected for tests.
    """

    def __init__(
        self,
        *,
        region: str = DEFAULT_REGION,
        model_id: str = DEFAULT_MODEL_ID,
        profile: str | None = None,
        max_new_tokens: int = DEFAULT_MAX_NEW_TOKENS,
        runtime_client: Any = None,
        models_client: Any = None,
    ) -> None:
        self.model_id = model_id
        self.max_new_tokens = max_new_tokens

        if runtime_client is None or models_client is None:
            try:
                session = boto3.Session(profile_name=profile or None, region_name=region)
                runtime_client = runtime_client or session.client("bedrock-runtime")
                models_client = models_client or session.client("bedrock")
            except BotoCoreError as e:
                raise ChatServiceError(str(e)) from e

        self._runtime = runtime_client
        self._models = models_client

    def send(self, prompt: str, context: str) -> str:
        body = build_request(prompt, context, max_new_tokens=self.max_new_tokens)
        LOGGER.info("Invoking Bedrock model", extra={"model_id": self.model_id})
        try:
            resp = self._runtime.invoke_model(
                modelId=self.model_id,
                contentType="application/json",
                accept="application/json",
                body=json.dumps(body),
            )
            payload = json.loads(resp["body"].read())
        except (BotoCoreError, ClientError) as e:
            raise ChatServiceError(str(e)) from e
        except ValueError as e:
            raise ChatServiceError(f"could not decode model response: {e}") from e
        return extract_reply(payload)

    def list_models(self) -> list[str]:
        try:
            resp = self._models.list_foundation_models()
        except (BotoCoreError, ClientError) as e:
            raise ChatServiceError(str(e)) from e
        return [summary["modelId"] for summary in resp.get("modelSummaries", [])]
