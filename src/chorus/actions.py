"""Template directives and the context they execute against.

A template is a tree of actions. Running an action against an
``ExecutionContext`` yields fragments lazily; generation and mapping
directives also write into the run's ``OutputMap`` as they resolve.
"""

from __future__ import annotations

import inspect
from collections.abc import AsyncIterable, AsyncIterator, Callable, Iterable, Sequence
from contextlib import aclosing
from dataclasses import dataclass, field, replace
from typing import Any, Protocol, runtime_checkable

from loguru import logger

from chorus.connectors import CompletionFn
from chorus.errors import CompletionResultError, TemplateError
from chorus.outputs import OutputMap, format_address
from chorus.state import RunState
from chorus.transcript import NO_ROLE, Fragment, FragmentKind, Transcript
from chorus.types import Address, Params

type Part = str | Action | Callable[[Params], Any]
type ItemSource = Sequence[Any] | Callable[[Params], Iterable[Any]]

_UNSET: Any = object()


@dataclass(frozen=True)
class Context:
    """Who is speaking and which output path the current subtree writes into."""

    role: str = NO_ROLE
    address: Address = ()


@dataclass(frozen=True)
class ExecutionContext:
    """Everything one directive needs; shared by reference down the tree."""

    completion: CompletionFn
    outputs: OutputMap
    params: Params
    transcript: Transcript
    state: RunState
    context: Context = field(default_factory=Context)
    log: Any = logger

    def derive(self, *, params: Any = _UNSET, **context: Any) -> ExecutionContext:
        changes: dict[str, Any] = {"context": replace(self.context, **context)}
        if params is not _UNSET:
            changes["params"] = params
        return replace(self, **changes)

    def fragment(self, kind: FragmentKind, text: str = "", address: Address = ()) -> Fragment:
        return Fragment(kind=kind, role=self.context.role, text=text, address=address)


@runtime_checkable
class Action(Protocol):
    def run(self, ctx: ExecutionContext) -> AsyncIterator[Fragment]: ...


@dataclass(frozen=True)
class Text:
    text: str

    async def run(self, ctx: ExecutionContext) -> AsyncIterator[Fragment]:
        if self.text:
            yield ctx.fragment("text", self.text)


@dataclass(frozen=True)
class Interpolation:
    """A callable of the current params rendered at run time."""

    func: Callable[[Params], Any]

    async def run(self, ctx: ExecutionContext) -> AsyncIterator[Fragment]:
        value = self.func(ctx.params)
        if isinstance(value, Action):
            async with aclosing(value.run(ctx)) as fragments:
                async for fragment in fragments:
                    yield fragment
            return
        text = "" if value is None else str(value)
        if text:
            yield ctx.fragment("text", text)


@dataclass(frozen=True)
class Template:
    parts: tuple[Action, ...] = ()

    async def run(self, ctx: ExecutionContext) -> AsyncIterator[Fragment]:
        for part in self.parts:
            async with aclosing(part.run(ctx)) as fragments:
                async for fragment in fragments:
                    yield fragment


@dataclass(frozen=True)
class Role:
    role: str
    body: Template

    async def run(self, ctx: ExecutionContext) -> AsyncIterator[Fragment]:
        scoped = ctx.derive(role=self.role)
        yield scoped.fragment("role")
        async with aclosing(self.body.run(scoped)) as fragments:
            async for fragment in fragments:
                yield fragment


@dataclass(frozen=True)
class Generate:
    """Fill ``name`` from queued input, or from the completion connector."""

    name: str
    stop: str | None = None

    async def run(self, ctx: ExecutionContext) -> AsyncIterator[Fragment]:
        path = (*ctx.context.address, self.name)
        queued = ctx.state.dequeue(self.name)
        if queued is not None:
            ctx.log.debug("run.generate name={} source=queue", format_address(path))
            ctx.outputs.set(path, queued.value)
            yield ctx.fragment("generation", render_value(queued.value), path)
            return

        ctx.log.debug("run.generate name={} source=completion stop={!r}", format_address(path), self.stop)
        result = ctx.completion(ctx.transcript, self.stop)
        if isinstance(result, AsyncIterable):
            chunks: list[str] = []
            try:
                async for chunk in result:
                    chunks.append(chunk)
                    yield ctx.fragment("generation", chunk, path)
            finally:
                close = getattr(result, "aclose", None)
                if close is not None:
                    await close()
            # a connector that is also awaitable resolves to the stored value
            text = await result if inspect.isawaitable(result) else "".join(chunks)
            ctx.outputs.set(path, text)
            return

        if isinstance(result, str):
            text = result
        elif inspect.isawaitable(result):
            text = await result
        else:
            raise CompletionResultError(f"Completion for '{self.name}' returned {type(result).__name__}")
        ctx.outputs.set(path, text)
        if text:
            yield ctx.fragment("generation", text, path)


@dataclass(frozen=True)
class MapOver:
    """Run ``body`` once per element, resuming where the loop last stopped.

    With ``over`` the elements come from params and each one gets a fresh
    result record appended to the list at the bound path. Without it the
    list at the bound path is itself the element source.
    """

    name: str
    body: Template
    over: ItemSource | None = None
    key: str | None = None

    async def run(self, ctx: ExecutionContext) -> AsyncIterator[Fragment]:
        path = (*ctx.context.address, self.name)
        loop_id = self.key or format_address(path)
        records = ctx.outputs.ensure_list(path)
        items = records if self.over is None else list(self._items(ctx.params))
        position = ctx.state.loop_position(loop_id)
        ctx.log.debug("run.map name={} loop={} start={} total={}", self.name, loop_id, position, len(items))

        while position < len(items):
            item = items[position]
            if self.over is None:
                index = position
            else:
                records.append({})
                index = len(records) - 1
            async with aclosing(self.body.run(ctx.derive(params=item, address=(*path, index)))) as fragments:
                async for fragment in fragments:
                    yield fragment
            position = ctx.state.advance_loop(loop_id)

    def _items(self, params: Params) -> Iterable[Any]:
        if callable(self.over):
            return self.over(params)
        return self.over or ()


def to_action(part: Part) -> Action:
    if isinstance(part, str):
        return Text(part)
    if isinstance(part, Action):
        return part
    if callable(part):
        return Interpolation(part)
    raise TemplateError(f"Unsupported template part: {part!r}")


def ai(*parts: Part) -> Template:
    """Compose literal text, param callables and directives in order."""
    return Template(tuple(to_action(part) for part in parts))


def role(name: str, *parts: Part) -> Role:
    return Role(name, ai(*parts))


def system(*parts: Part) -> Role:
    return role("system", *parts)


def user(*parts: Part) -> Role:
    return role("user", *parts)


def assistant(*parts: Part) -> Role:
    return role("assistant", *parts)


def gen(name: str, stop: str | None = None) -> Generate:
    return Generate(name, stop)


def map_over(name: str, *body: Part, over: ItemSource | None = None, key: str | None = None) -> MapOver:
    return MapOver(name, ai(*body), over=over, key=key)


async def run_actions(actions: Iterable[Action], ctx: ExecutionContext) -> AsyncIterator[Fragment]:
    """Run one batch depth-first, in order."""
    for action in actions:
        async with aclosing(action.run(ctx)) as fragments:
            async for fragment in fragments:
                yield fragment


def render_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return "\n".join(render_value(item) for item in value)
    return str(value)
