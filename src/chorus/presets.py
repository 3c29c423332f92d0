"""Ready-made run factories bound to OpenAI models from settings.

Settings and the client are resolved on the first generation call, so
importing this module never needs credentials.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from functools import cache

from openai import AsyncOpenAI

from chorus.config import Settings
from chorus.integrations.openai_client import build_client, openai_chat_backend, openai_text_backend
from chorus.llms import create_chat_completion, create_completion
from chorus.types import Message


@cache
def default_settings() -> Settings:
    # host applications own the loguru sinks
    return Settings()


@cache
def default_client() -> AsyncOpenAI:
    return build_client(default_settings())


def _chat_backend(model_of: Callable[[Settings], str]) -> Callable[[list[Message], str | None], AsyncIterator[str]]:
    def backend(messages: list[Message], stop: str | None) -> AsyncIterator[str]:
        settings = default_settings()
        stream = openai_chat_backend(default_client(), model=model_of(settings), max_tokens=settings.max_tokens)
        return stream(messages, stop)

    return backend


def _text_backend(prompt: str, stop: str | None) -> AsyncIterator[str]:
    settings = default_settings()
    stream = openai_text_backend(default_client(), model=settings.completion_model, max_tokens=settings.max_tokens)
    return stream(prompt, stop)


gpt3 = create_chat_completion(_chat_backend(lambda settings: settings.chat_model))
gpt4 = create_chat_completion(_chat_backend(lambda settings: settings.advanced_chat_model))
davinci = create_completion(_text_backend)
