"""Run entry points: turn a template into a function of caller params."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from chorus.actions import Action, ai, gen, map_over
from chorus.connectors import (
    ChatBackend,
    CompletionFn,
    SingleTurnBackend,
    chat_completion,
    single_turn_completion,
)
from chorus.errors import TemplateError
from chorus.runner import Batch, ChatRun, Run
from chorus.types import Params


@dataclass(frozen=True)
class TemplateBindings:
    """What a template function receives when it is materialized."""

    ai: Callable[..., Action]
    params: Params
    gen: Callable[..., Action]
    map: Callable[..., Action]


type BatchItem = Action | Sequence[Any]
type PromptTemplate = Action | Callable[[TemplateBindings], Action]
type ChatTemplate = Sequence[BatchItem] | Callable[[TemplateBindings], Sequence[BatchItem]]


def bindings_for(params: Params) -> TemplateBindings:
    return TemplateBindings(ai=ai, params=params, gen=gen, map=map_over)


def materialize_batches(template: Any, params: Params, *, chat: bool) -> list[Batch]:
    """Resolve a static or function template into ordered batches.

    A template function is called exactly once, before any batch runs;
    whatever it raises propagates unchanged.
    """

    value = template(bindings_for(params)) if _is_template_function(template) else template
    if isinstance(value, Action):
        return [[value]]
    if chat and isinstance(value, Sequence) and not isinstance(value, str):
        return [_batch(item) for item in value]
    expected = "a list of message batches" if chat else "a single action"
    raise TemplateError(f"Template must produce {expected}, got {type(value).__name__}")


def _is_template_function(template: Any) -> bool:
    return callable(template) and not isinstance(template, Action)


def _batch(item: Any) -> Batch:
    if isinstance(item, Action):
        return [item]
    if isinstance(item, Sequence) and not isinstance(item, str):
        return [action for child in item for action in _batch(child)]
    raise TemplateError(f"Batch entries must be actions, got {type(item).__name__}")


def llm_factory(completion: CompletionFn) -> Callable[[PromptTemplate], Callable[..., Run]]:
    """Single-turn runs: one composed action over a flat prompt."""

    def llm(template: PromptTemplate) -> Callable[..., Run]:
        def start(params: Params = None) -> Run:
            batches = materialize_batches(template, params, chat=False)
            return Run(batches, completion=completion, params=params, chat=False)

        return start

    return llm


def chat_factory(completion: CompletionFn) -> Callable[[ChatTemplate], Callable[..., ChatRun]]:
    """Chat runs: ordered role-tagged batches, with queued input."""

    def chat(messages: ChatTemplate) -> Callable[..., ChatRun]:
        def start(params: Params = None) -> ChatRun:
            batches = materialize_batches(messages, params, chat=True)
            return ChatRun(batches, completion=completion, params=params, chat=True)

        return start

    return chat


def create_completion(backend: SingleTurnBackend) -> Callable[[PromptTemplate], Callable[..., Run]]:
    return llm_factory(single_turn_completion(backend))


def create_chat_completion(backend: ChatBackend) -> Callable[[ChatTemplate], Callable[..., ChatRun]]:
    return chat_factory(chat_completion(backend))
