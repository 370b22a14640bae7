"""Presentation collaborators the engine reports to.

The engine never touches a rendering tree. It calls the ``Presenter``
interface, and each implementation decides what a "bubble" or a "typing
indicator" is.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, List, Optional, Tuple

from .models import ConnectionStatus, Role
from .sanitizer import SafeMarkup

logger = logging.getLogger(__name__)


class Presenter(ABC):
    """Interface for everything the engine displays."""

    @abstractmethod
    def render_message(self, markup: SafeMarkup, role: Role) -> None:
        """Appends a rendered message bubble to the transcript display."""
        pass

    @abstractmethod
    def clear_messages(self) -> None:
        """Removes every bubble from the transcript display."""
        pass

    @abstractmethod
    def show_typing(self) -> None:
        """Shows the transient activity indicator."""
        pass

    @abstractmethod
    def hide_typing(self) -> None:
        """Hides the transient activity indicator."""
        pass

    @abstractmethod
    def set_connection_status(self, status: ConnectionStatus, label: str) -> None:
        """Updates the connectivity display."""
        pass

    @abstractmethod
    def play_feedback_sound(self) -> None:
        """Plays the message-arrival sound. Best effort."""
        pass

    @abstractmethod
    def clear_input(self) -> None:
        """Empties the user's input field after an accepted submission."""
        pass


class Headless(Presenter):
    """Records every call instead of drawing anything.

    Useful for tests and for driving the engine from a script.
    """

    def __init__(self, sound_on: bool = True):
        self.sound_on = sound_on
        self.rendered: List[SafeMarkup] = []
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self.typing = False
        self.connection: Optional[Tuple[ConnectionStatus, str]] = None
        self.pings = 0

    def _record(self, name: str, *args: Any) -> None:
        logger.debug("presenter.%s%r", name, args)
        self.calls.append((name, args))

    def render_message(self, markup, role):
        self._record("render_message", markup, role)
        self.rendered.append(markup)

    def clear_messages(self):
        self._record("clear_messages")
        self.rendered = []

    def show_typing(self):
        self._record("show_typing")
        self.typing = True

    def hide_typing(self):
        self._record("hide_typing")
        self.typing = False

    def set_connection_status(self, status, label):
        self._record("set_connection_status", status, label)
        self.connection = (status, label)

    def play_feedback_sound(self):
        self._record("play_feedback_sound")
        if self.sound_on:
            self.pings += 1

    def clear_input(self):
        self._record("clear_input")


@dataclass
class ViewSnapshot:
    """A copy of ``WebView`` state handed to the page."""

    entries: List[SafeMarkup] = field(default_factory=list)
    typing: bool = False
    status: ConnectionStatus = "connecting"
    label: str = "Connecting..."
    sound_on: bool = True
    ping_count: int = 0
    revision: int = 0


class WebView(Presenter):
    """View state the browser page polls.

    The engine and the HTTP routes share one event loop, so updates and
    snapshots never interleave. Every change bumps ``revision`` so the page
    can skip redrawing when nothing moved.
    """

    def __init__(self, sound_on: bool = True):
        self._state = ViewSnapshot(sound_on=sound_on)

    def _update(self, **changes: Any) -> None:
        for name, value in changes.items():
            setattr(self._state, name, value)
        self._state.revision += 1

    def snapshot(self) -> ViewSnapshot:
        return replace(self._state, entries=list(self._state.entries))

    @property
    def revision(self) -> int:
        return self._state.revision

    @property
    def sound_on(self) -> bool:
        return self._state.sound_on

    def toggle_sound(self) -> bool:
        """Flips the sound setting and returns the new value."""
        self._update(sound_on=not self._state.sound_on)
        return self._state.sound_on

    def render_message(self, markup, role):
        self._update(entries=self._state.entries + [markup])

    def clear_messages(self):
        self._update(entries=[])

    def show_typing(self):
        self._update(typing=True)

    def hide_typing(self):
        self._update(typing=False)

    def set_connection_status(self, status, label):
        self._update(status=status, label=label)

    def play_feedback_sound(self):
        # The page plays the sound when it sees the counter move.
        if self._state.sound_on:
            self._update(ping_count=self._state.ping_count + 1)

    def clear_input(self):
        # The page empties the textarea once the server accepts the text.
        pass
