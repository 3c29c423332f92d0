"""chorus - multi-role LLM conversations as composable templates."""

from .actions import ai, assistant, gen, map_over, role, system, user
from .llms import TemplateBindings, chat_factory, create_chat_completion, create_completion, llm_factory
from .runner import ChatRun, Run, RunResult, RunStatus, RunStep

__version__ = "0.1.0"

__all__ = [
    "ChatRun",
    "Run",
    "RunResult",
    "RunStatus",
    "RunStep",
    "TemplateBindings",
    "ai",
    "assistant",
    "chat_factory",
    "create_chat_completion",
    "create_completion",
    "gen",
    "llm_factory",
    "map_over",
    "role",
    "system",
    "user",
]
