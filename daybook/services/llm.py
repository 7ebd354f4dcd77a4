"""
llm.py — Chat Completion Providers
====================================
One function, `complete_chat`, takes a linear list of {role, content}
messages (system prompt first) and returns the reply plus token usage.

Two providers:
- openai (default): messages go through as-is.
- anthropic: the Messages API wants the system prompt as a separate
  argument, so system messages are pulled out and joined.

Clients are built per call, not at import time, so a missing key shows
up as a RelayError the caller can report instead of a crash at startup.
No retries and no timeout beyond the SDK defaults.
"""

import logging
from typing import Optional

import anthropic
import openai
from anthropic import Anthropic
from openai import OpenAI
from pydantic import BaseModel

from daybook.config import settings
from daybook.exceptions import RelayError, UpstreamError

logger = logging.getLogger(__name__)


class ChatCompletion(BaseModel):
    content: str
    role: str = "assistant"
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


def get_openai_client(api_key: Optional[str] = None) -> OpenAI:
    key = api_key or settings.openai_api_key
    if not key:
        raise RelayError("OpenAI API key not configured")
    return OpenAI(api_key=key)


def get_anthropic_client() -> Anthropic:
    if not settings.anthropic_api_key:
        raise RelayError("Anthropic API key not configured")
    return Anthropic(api_key=settings.anthropic_api_key)


def _complete_with_openai(messages: list[dict]) -> ChatCompletion:
    client = get_openai_client()
    try:
        completion = client.chat.completions.create(
            model=settings.chat_model,
            messages=messages,
            temperature=settings.chat_temperature,
        )
    except openai.OpenAIError as e:
        raise UpstreamError(f"OpenAI API error: {e}") from e

    choice = completion.choices[0].message
    usage = completion.usage
    return ChatCompletion(
        content=choice.content or "",
        role=choice.role or "assistant",
        prompt_tokens=usage.prompt_tokens if usage else None,
        completion_tokens=usage.completion_tokens if usage else None,
        total_tokens=usage.total_tokens if usage else None,
    )


def _complete_with_anthropic(messages: list[dict]) -> ChatCompletion:
    client = get_anthropic_client()
    system = "\n\n".join(m["content"] for m in messages if m["role"] == "system")
    conversation = [m for m in messages if m["role"] != "system"]

    try:
        response = client.messages.create(
            model=settings.anthropic_chat_model,
            max_tokens=settings.chat_max_tokens,
            system=system,
            messages=conversation,
            temperature=settings.chat_temperature,
        )
    except anthropic.AnthropicError as e:
        raise UpstreamError(f"Anthropic API error: {e}") from e

    usage = response.usage
    return ChatCompletion(
        content=response.content[0].text.strip(),
        prompt_tokens=usage.input_tokens,
        completion_tokens=usage.output_tokens,
        total_tokens=usage.input_tokens + usage.output_tokens,
    )


def complete_chat(messages: list[dict]) -> ChatCompletion:
    provider = settings.chat_provider.lower()
    logger.info(f"Chat completion via {provider}: {len(messages)} messages")
    if provider == "openai":
        return _complete_with_openai(messages)
    if provider == "anthropic":
        return _complete_with_anthropic(messages)
    raise RelayError(f"Unknown chat provider: {settings.chat_provider}")
