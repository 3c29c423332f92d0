"""Multi-turn chat fed by queued input.

Every question is queued with ``run.input`` and consumed by the next
``question`` generation, so only the answers hit the model. Answers are
printed as they stream. Requires ``CHORUS_API_KEY``.
"""

from __future__ import annotations

import asyncio
import sys

from chorus import assistant, map_over, system, user
from chorus.presets import gpt3


def conversation(b):
    turns = map_over(
        "turns",
        user(b.gen("question")),
        assistant(b.gen("answer")),
        over=lambda params: params["questions"],
    )
    return [system("You are a terse assistant."), turns]


async def main(questions: list[str]) -> None:
    run = gpt3(conversation)({"questions": questions})
    for question in questions:
        run.input("question", question)

    async for step in run:
        fragment = step.fragment
        if fragment.kind == "generation" and fragment.address[-1] == "question":
            print(f"\n> {fragment.text}")
        elif fragment.kind == "generation":
            print(fragment.text, end="", flush=True)

    result = await run
    print(f"\n\n{len(result.outputs['turns'])} turns recorded.")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1:] or ["What is a transcript?", "Summarize that in five words."]))
