"""Execution orchestrator: one run of a template against a completion connector."""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator, Sequence
from contextlib import aclosing
from dataclasses import dataclass
from enum import Enum
from typing import Any

from loguru import logger

from chorus.actions import Action, ExecutionContext, run_actions
from chorus.connectors import CompletionFn
from chorus.outputs import OutputMap
from chorus.state import RunState
from chorus.streaming import Streamed
from chorus.transcript import Fragment, Transcript
from chorus.types import Params

type Batch = Sequence[Action]


class RunStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class RunStep:
    """One fragment plus the live transcript and outputs it was appended to."""

    fragment: Fragment
    transcript: Transcript
    outputs: OutputMap


@dataclass(frozen=True)
class RunResult:
    """Final aggregate of a completed run."""

    transcript: Transcript
    outputs: OutputMap

    @property
    def text(self) -> str:
        return self.transcript.render()


class Run(Streamed[RunStep, RunResult]):
    """A single execution, consumed with ``async for`` or ``await``.

    Batches run strictly one after another. Every fragment is appended to the
    transcript before the consumer sees it, so the transcript order is the
    order the consumer observes.
    """

    def __init__(
        self,
        batches: Sequence[Batch],
        *,
        completion: CompletionFn,
        params: Params = None,
        chat: bool = True,
    ) -> None:
        self.id = uuid.uuid4().hex[:8]
        self.state = RunState()
        self.outputs = OutputMap()
        self.transcript = Transcript(chat=chat)
        self.params = params
        self._batches = list(batches)
        self._completion = completion
        self._status = RunStatus.IDLE
        self._log = logger.bind(run=self.id)
        super().__init__(self._execute(), self._aggregate)

    @property
    def status(self) -> RunStatus:
        return self._status

    async def _execute(self) -> AsyncIterator[RunStep]:
        self._status = RunStatus.RUNNING
        self._log.debug("run.start batches={} chat={}", len(self._batches), self.transcript.chat)
        try:
            for index, batch in enumerate(self._batches):
                self._log.debug("run.batch index={} actions={}", index, len(batch))
                async with aclosing(run_actions(batch, self._root_context())) as fragments:
                    async for fragment in fragments:
                        self.transcript.append(fragment)
                        yield RunStep(fragment=fragment, transcript=self.transcript, outputs=self.outputs)
        except GeneratorExit:
            self._status = RunStatus.CANCELLED
            self._log.debug("run.cancel fragments={}", len(self.transcript))
            raise
        except Exception:
            self._status = RunStatus.FAILED
            raise
        self._status = RunStatus.COMPLETED
        self._log.debug("run.complete fragments={}", len(self.transcript))

    def _root_context(self) -> ExecutionContext:
        return ExecutionContext(
            completion=self._completion,
            outputs=self.outputs,
            params=self.params,
            transcript=self.transcript,
            state=self.state,
            log=self._log,
        )

    def _aggregate(self) -> RunResult:
        return RunResult(transcript=self.transcript, outputs=self.outputs)


class ChatRun(Run):
    """Chat run that also accepts values queued from outside the run."""

    def input(self, name: str, value: Any) -> None:
        """Queue ``value`` for the next generation bound to ``name``."""
        self.state.enqueue(name, value)
        self._log.debug("run.input name={} pending={}", name, self.state.pending(name))
