"""Completion connectors: the one seam between runs and model backends."""

from __future__ import annotations

import codecs
import inspect
from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Callable
from typing import Any

from chorus.streaming import Streamed
from chorus.transcript import Transcript
from chorus.types import Message

type Chunk = str | bytes
type ChunkSource = AsyncIterable[Chunk] | Awaitable[AsyncIterable[Chunk]]
type Completion = str | Awaitable[str] | AsyncIterable[str]
type CompletionFn = Callable[[Transcript, str | None], Completion]
type StreamFunc = Callable[[Transcript, str | None], ChunkSource]
type SingleTurnBackend = Callable[[str, str | None], ChunkSource]
type ChatBackend = Callable[[list[Message], str | None], ChunkSource]


def create_model_completion(func: StreamFunc) -> CompletionFn:
    """Wrap a chunk-streaming backend call into a completion connector.

    The returned connector yields every chunk as soon as it arrives and
    resolves to the concatenation of all chunks.
    """

    def completion(transcript: Transcript, stop: str | None = None) -> Streamed[str, str]:
        chunks: list[str] = []
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

        async def generate() -> AsyncIterator[str]:
            stream = func(transcript, stop)
            if inspect.isawaitable(stream):
                stream = await stream
            try:
                async for chunk in stream:
                    text = decoder.decode(chunk) if isinstance(chunk, bytes) else str(chunk)
                    if not text:
                        continue
                    chunks.append(text)
                    yield text
                tail = decoder.decode(b"", final=True)
                if tail:
                    chunks.append(tail)
                    yield tail
            finally:
                await _close(stream)

        return Streamed(generate(), lambda: "".join(chunks))

    return completion


def single_turn_completion(backend: SingleTurnBackend) -> CompletionFn:
    """Connector for backends that take one flattened prompt."""

    return create_model_completion(lambda transcript, stop: backend(transcript.to_text(), stop))


def chat_completion(backend: ChatBackend) -> CompletionFn:
    """Connector for backends that take role-tagged messages."""

    return create_model_completion(lambda transcript, stop: backend(transcript.to_messages(), stop))


async def _close(stream: Any) -> None:
    close = getattr(stream, "aclose", None)
    if close is None:
        return
    result = close()
    if inspect.isawaitable(result):
        await result
