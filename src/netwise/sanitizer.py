"""Concrete implementations for turning message text into display-safe markup."""

import html
import re
from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict

from .models import USER_ROLE, Role

GLYPH = '<span class="bubble-glyph">⚡</span>'
LINE_BREAK = "<br>"

_NEWLINES = re.compile(r"\r\n|\r|\n")


class SafeMarkup(BaseModel):
    """Display-ready message content.

    When ``is_markup`` is False, ``content`` is plain text and must be
    inserted as a text node, never parsed as markup.
    """

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str
    is_markup: bool


class Sanitizer(ABC):
    """Interface for converting raw message text into ``SafeMarkup``."""

    @abstractmethod
    def render(self, text: str, role: Role) -> SafeMarkup:
        """Converts ``text`` into markup that is safe to display for ``role``.

        Parameters
        ----------
        text : str
            Raw, untrusted message content.
        role : Role
            The role of the message the text belongs to.

        Returns
        -------
        SafeMarkup
            Content that cannot inject markup into the presentation layer.
        """
        pass


class HTML(Sanitizer):
    """Escapes HTML-significant characters and keeps line breaks visible."""

    def __init__(self, glyph: str = GLYPH):
        self.glyph = glyph

    def render(self, text: str, role: Role) -> SafeMarkup:
        if role == USER_ROLE:
            return SafeMarkup(role=role, content=str(text), is_markup=False)

        escaped = html.escape(str(text), quote=True)
        body = _NEWLINES.sub(LINE_BREAK, escaped)
        return SafeMarkup(role=role, content=f"{self.glyph}{body}", is_markup=True)
