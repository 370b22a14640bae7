"""Validation of raw user submissions before they reach the engine."""

import logging
from typing import Optional

from .engine import Engine

logger = logging.getLogger(__name__)


class InputDispatcher:
    """Normalizes raw input and forwards accepted text to the engine."""

    def __init__(self, engine: Engine):
        self.engine = engine

    @staticmethod
    def normalize(raw: Optional[str]) -> Optional[str]:
        """Returns the trimmed text, or None if nothing is left."""
        if raw is None:
            return None
        text = raw.strip()
        return text or None

    async def accept(self, raw: Optional[str]) -> Optional[str]:
        """Submits ``raw`` if it holds any non-whitespace text.

        Rejected input has no side effects at all. Accepted input clears the
        presenter's input field and is awaited through ``Engine.submit``.

        Returns
        -------
        Optional[str]
            The text that was forwarded, or None if the input was rejected.
        """
        text = self.normalize(raw)
        if text is None:
            logger.debug("Rejected empty submission")
            return None

        self.engine.presenter.clear_input()
        await self.engine.submit(text)
        return text
