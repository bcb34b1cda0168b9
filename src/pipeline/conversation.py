# src/pipeline/conversation.py - v1
"""Append-only message history threaded through one pipeline run."""

from __future__ import annotations

from typing import Iterator

from codereview.llm.models import Message


class Conversation:
    """Ordered, append-only sequence of messages.

    Owned by a single run and discarded afterwards. Snapshots returned by
    ``messages`` are tuples, so a gateway can never mutate the history.
    """

    def __init__(self) -> None:
        self._messages: list[Message] = []

    def append(self, message: Message) -> None:
        self._messages.append(message)

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def last_assistant_text(self) -> str | None:
        """Content of the most recent assistant message, if any."""
        for message in reversed(self._messages):
            if message.role == "assistant":
                return message.content
        return None

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))
