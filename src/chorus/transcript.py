"""Append-only conversation transcript."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Literal

from chorus.types import Address, Message

FragmentKind = Literal["role", "text", "generation"]
NO_ROLE = "none"
DEFAULT_CHAT_ROLE = "user"


@dataclass(frozen=True)
class Fragment:
    """One unit of produced content.

    ``role`` fragments only mark where a new message starts; ``generation``
    fragments carry the output path they contribute to.
    """

    kind: FragmentKind
    role: str = NO_ROLE
    text: str = ""
    address: Address = ()


class Transcript:
    """Ordered log of fragments for one run.

    The log is only ever extended. It renders either as one flat prompt for
    single-turn backends or as role-tagged messages for chat backends.
    """

    def __init__(self, *, chat: bool = True) -> None:
        self.chat = chat
        self._fragments: list[Fragment] = []

    def __iter__(self) -> Iterator[Fragment]:
        return iter(list(self._fragments))

    def __len__(self) -> int:
        return len(self._fragments)

    def __repr__(self) -> str:
        return f"Transcript(chat={self.chat}, fragments={len(self._fragments)})"

    @property
    def fragments(self) -> tuple[Fragment, ...]:
        return tuple(self._fragments)

    def append(self, fragment: Fragment) -> None:
        self._fragments.append(fragment)

    def to_text(self) -> str:
        return "".join(fragment.text for fragment in self._fragments if fragment.kind != "role")

    def to_messages(self) -> list[Message]:
        messages: list[Message] = []
        for fragment in self._fragments:
            role = fragment.role if fragment.role != NO_ROLE else DEFAULT_CHAT_ROLE
            if fragment.kind == "role":
                messages.append({"role": role, "content": ""})
                continue
            if not messages or messages[-1]["role"] != role:
                messages.append({"role": role, "content": ""})
            messages[-1]["content"] += fragment.text
        return [message for message in messages if message["content"]]

    def render(self) -> str:
        """Render the transcript the way its backend receives it."""
        if not self.chat:
            return self.to_text()
        return "\n\n".join(f"{message['role']}: {message['content']}" for message in self.to_messages())
