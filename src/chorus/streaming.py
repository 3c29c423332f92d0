"""Async iterators that can also be awaited for their final value."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Generator
from typing import Any


class Streamed[T, R]:
    """One lazy sequence consumed either step by step or as a whole.

    ``async for`` drives the source one item at a time. ``await`` drains what
    is left and returns ``finish()``. Both views share the same source, so
    nothing already produced is produced again.
    """

    def __init__(self, source: AsyncIterator[T], finish: Callable[[], R]) -> None:
        self._source = source
        self._finish = finish
        self._finished = False
        self._error: BaseException | None = None

    def __aiter__(self) -> Streamed[T, R]:
        return self

    async def __anext__(self) -> T:
        if self._error is not None:
            raise self._error
        if self._finished:
            raise StopAsyncIteration
        try:
            return await anext(self._source)
        except StopAsyncIteration:
            self._finished = True
            raise
        except Exception as exc:
            self._error = exc
            raise

    def __await__(self) -> Generator[Any, None, R]:
        return self.result().__await__()

    @property
    def finished(self) -> bool:
        return self._finished

    async def result(self) -> R:
        """Drain the remaining items and return the final value."""
        async for _ in self:
            pass
        return self._finish()

    async def aclose(self) -> None:
        """Stop the source early; later steps end immediately."""
        self._finished = True
        close = getattr(self._source, "aclose", None)
        if close is not None:
            await close()
