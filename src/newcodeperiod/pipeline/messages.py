"""Analysis-scoped, append-only sink for user-visible task messages."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Message:
    """A warning shown to users on the analysis report."""

    text: str
    timestamp: int

    def __post_init__(self) -> None:
        """Reject empty message text."""
        if not self.text.strip():
            message = "Message text cannot be blank"
            raise ValueError(message)


class TaskMessages:
    """Collect messages for the current analysis; entries are never removed."""

    def __init__(self) -> None:
        self._messages: list[Message] = []

    def add(self, message: Message) -> None:
        """Append a message to the sink."""
        log.debug("Task message added: %s", message.text)
        self._messages.append(message)

    def append(self, text: str, timestamp: int) -> None:
        """Append a message built from its text and timestamp."""
        self.add(Message(text=text, timestamp=timestamp))

    @property
    def messages(self) -> tuple[Message, ...]:
        """Snapshot of every message appended so far."""
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))


__all__ = ["Message", "TaskMessages"]
