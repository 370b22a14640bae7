"""Concrete implementations for the transcript message store."""

import itertools
import logging
from abc import ABC, abstractmethod
from typing import Iterable, Iterator, List

from .models import NOTICE_ROLE, Message, Role

logger = logging.getLogger(__name__)

WELCOME_TEXT = (
    "NETWORK YOUR KNOWLEDGE\n"
    "Type a question about Computer Networks to begin."
)


class Store(ABC):
    """Interface for the ordered, append-only transcript."""

    @abstractmethod
    def append(self, role: Role, text: str) -> Message:
        """Appends a new entry and returns it.

        The store assigns ``id`` and ``sequence``; content is not validated.
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Discards every entry and appends a single welcome notice."""
        pass

    @abstractmethod
    def all(self) -> Iterable[Message]:
        """Returns a restartable view of the entries in sequence order."""
        pass


class TranscriptView:
    """Lazy view over the first ``length`` entries of a message list.

    Each ``iter()`` starts from the beginning, so the view can be walked any
    number of times. Entries appended after the view was taken are not part
    of it.
    """

    def __init__(self, messages: List[Message], length: int):
        self._messages = messages
        self._length = length

    def __iter__(self) -> Iterator[Message]:
        for index in range(min(self._length, len(self._messages))):
            yield self._messages[index]

    def __len__(self) -> int:
        return min(self._length, len(self._messages))


class InMemory(Store):
    """Keeps the transcript in a Python list for the life of the session."""

    def __init__(self, welcome_text: str = WELCOME_TEXT):
        self.welcome_text = welcome_text
        self._messages: List[Message] = []
        self._ids = itertools.count(1)

    def append(self, role: Role, text: str) -> Message:
        message = Message(
            id=next(self._ids),
            role=role,
            text=text,
            sequence=len(self._messages),
        )
        self._messages.append(message)
        return message

    def clear(self) -> None:
        logger.debug("Clearing transcript of %d message(s)", len(self._messages))
        # A fresh list keeps views taken before the clear pointing at the old entries.
        self._messages = []
        self.append(NOTICE_ROLE, self.welcome_text)

    def all(self) -> TranscriptView:
        return TranscriptView(self._messages, len(self._messages))

    def __len__(self) -> int:
        return len(self._messages)
