"""OpenAI streaming backends for the completion connectors."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

from openai import AsyncOpenAI

from chorus.config import Settings
from chorus.connectors import ChatBackend, SingleTurnBackend
from chorus.errors import ApiKeyNotConfiguredError
from chorus.types import Message


def build_client(settings: Settings) -> AsyncOpenAI:
    """Build the async OpenAI client configured for chorus."""

    if not settings.api_key:
        raise ApiKeyNotConfiguredError("API key not configured. Set CHORUS_API_KEY.")
    return AsyncOpenAI(
        api_key=settings.api_key,
        base_url=settings.api_base,
        timeout=settings.timeout_seconds,
    )


def openai_chat_backend(client: AsyncOpenAI, *, model: str, max_tokens: int) -> ChatBackend:
    """Stream chat completion deltas for role-tagged messages."""

    async def stream(messages: list[Message], stop: str | None) -> AsyncIterator[str]:
        response = await client.chat.completions.create(
            model=model,
            messages=messages,  # type: ignore[arg-type]
            max_tokens=max_tokens,
            stream=True,
            **_stop_kwargs(stop),
        )
        try:
            async for chunk in response:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta.content
                if delta:
                    yield delta
        finally:
            await response.close()

    return stream


def openai_text_backend(client: AsyncOpenAI, *, model: str, max_tokens: int) -> SingleTurnBackend:
    """Stream legacy completion text for one flattened prompt."""

    async def stream(prompt: str, stop: str | None) -> AsyncIterator[str]:
        response = await client.completions.create(
            model=model,
            prompt=prompt,
            max_tokens=max_tokens,
            stream=True,
            **_stop_kwargs(stop),
        )
        try:
            async for chunk in response:
                if not chunk.choices:
                    continue
                text = chunk.choices[0].text
                if text:
                    yield text
        finally:
            await response.close()

    return stream


def _stop_kwargs(stop: str | None) -> dict[str, Any]:
    if stop is None:
        return {}
    return {"stop": stop}
