from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any

import pytest

from chorus.transcript import Transcript


@dataclass
class ScriptedCompletion:
    """Completion connector answering from a script of chunk lists."""

    replies: list[list[str]]
    calls: list[tuple[list[dict[str, str]], str, str | None]] = field(default_factory=list)
    closed: int = 0

    def __call__(self, transcript: Transcript, stop: str | None = None) -> AsyncIterator[str]:
        self.calls.append((transcript.to_messages(), transcript.to_text(), stop))
        if not self.replies:
            raise AssertionError("unexpected completion call")
        chunks = self.replies.pop(0)

        async def _iterator() -> AsyncIterator[str]:
            try:
                for chunk in chunks:
                    yield chunk
            finally:
                self.closed += 1

        return _iterator()


@pytest.fixture
def scripted() -> Any:
    def _build(*replies: str | list[str]) -> ScriptedCompletion:
        return ScriptedCompletion([[reply] if isinstance(reply, str) else list(reply) for reply in replies])

    return _build
