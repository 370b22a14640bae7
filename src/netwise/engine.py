"""
Request lifecycle management.

The engine owns the conversation state machine: it appends messages to the
store, talks to the backend, drives the status indicator and reports every
visible change to the presenter. It runs on a single asyncio event loop and
the backend call is its only suspension point.
"""

import asyncio
import logging
import uuid
from abc import ABC, abstractmethod
from typing import Optional, Tuple

from .config import Settings
from .errors import EmptyResponseError, MalformedResponseError, TransportError
from .llm import LLM
from .models import (
    ASSISTANT_ROLE,
    AWAITING_RESPONSE,
    NOTICE_ROLE,
    USER_ROLE,
    ConversationState,
    Message,
    Role,
)
from .presenter import Presenter
from .sanitizer import HTML, Sanitizer
from .status import TRANSPORT_FAILED, TRANSPORT_SUCCEEDED, StatusIndicator
from .store import Store

logger = logging.getLogger(__name__)

BANNER_TEXT = "Connection established. Ask a CN question."
NO_RESPONSE_TEMPLATE = (
    "No response from AI (Reason: {reason}). "
    "Try rephrasing or asking a networking question."
)


class Engine(ABC):
    """Abstract base for request lifecycle managers.

    Holds the collaborators and the ``ConversationState``. Subclasses decide
    how submissions are scheduled against the backend.
    """

    def __init__(
        self,
        store: Store,
        llm: LLM,
        presenter: Presenter,
        status: Optional[StatusIndicator] = None,
        sanitizer: Optional[Sanitizer] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or Settings()
        self.store = store
        self.llm = llm
        self.presenter = presenter
        self.status = status or StatusIndicator(
            presenter, startup_delay=self.settings.startup_delay
        )
        self.sanitizer = sanitizer or HTML()
        self._state = ConversationState()

    @property
    def state(self) -> ConversationState:
        return self._state

    @abstractmethod
    async def submit(self, text: str) -> Optional[Message]:
        """Sends ``text`` to the backend and records the outcome.

        Parameters
        ----------
        text : str
            Already-validated user input.

        Returns
        -------
        Optional[Message]
            The reply entry (assistant or system-notice), or None when the
            submission was not processed.
        """
        pass

    async def start(self) -> None:
        """Runs the startup sequence and posts the connection banner."""
        await self.status.start()
        await asyncio.sleep(self.settings.banner_delay)
        self.record(NOTICE_ROLE, BANNER_TEXT)

    def record(self, role: Role, text: str) -> Message:
        """Appends a message to the store and renders it."""
        message = self.store.append(role, text)
        self._render(message)
        if role != USER_ROLE:
            self._play_feedback_sound()
        return message

    def clear_transcript(self) -> None:
        """Replaces the transcript with the welcome notice.

        Safe while a request is pending: the conversation state is untouched
        and the reply will land after the welcome entry.
        """
        self.store.clear()
        self.presenter.clear_messages()
        for message in self.store.all():
            self._render(message)

    def _render(self, message: Message) -> None:
        markup = self.sanitizer.render(message.text, message.role)
        self.presenter.render_message(markup, message.role)

    def _play_feedback_sound(self) -> None:
        try:
            self.presenter.play_feedback_sound()
        except Exception:
            logger.debug("Feedback sound failed", exc_info=True)


class Serialized(Engine):
    """Allows at most one outstanding backend request.

    A submission made while a request is pending is dropped, not queued, and
    the pending request is not cancelled.
    """

    async def submit(self, text):
        if self._state.is_busy:
            logger.info(
                "Dropping submission while request %s is pending",
                self._state.pending_request_id,
            )
            return None

        self.record(USER_ROLE, text)
        request_id = uuid.uuid4().hex
        self._state = ConversationState(
            phase=AWAITING_RESPONSE, pending_request_id=request_id
        )
        logger.info("Request %s dispatched (%d chars)", request_id, len(text))

        try:
            self.presenter.show_typing()
            role, reply, event = await self._exchange(request_id, text)
            self.presenter.hide_typing()
            self.status.handle(event)
            return self.record(role, reply)
        except asyncio.CancelledError:
            logger.info("Request %s cancelled", request_id)
            self.presenter.hide_typing()
            raise
        finally:
            self._state = ConversationState()

    async def _exchange(self, request_id: str, text: str) -> Tuple[Role, str, str]:
        """Performs the backend call and maps its outcome to a transcript entry."""
        try:
            response = await self.llm.generate_response(
                text, self.settings.system_instruction
            )
            content = self.llm.extract_content(response)
        except TransportError as e:
            logger.warning("Request %s failed: %s", request_id, e.describe())
            return NOTICE_ROLE, e.describe(), TRANSPORT_FAILED
        except MalformedResponseError as e:
            logger.warning("Request %s got a malformed response: %s", request_id, e.detail)
            return (
                NOTICE_ROLE,
                NO_RESPONSE_TEMPLATE.format(reason=e.finish_reason),
                TRANSPORT_SUCCEEDED,
            )
        except EmptyResponseError as e:
            logger.warning("Request %s produced no text: %s", request_id, e.finish_reason)
            return (
                NOTICE_ROLE,
                NO_RESPONSE_TEMPLATE.format(reason=e.finish_reason),
                TRANSPORT_SUCCEEDED,
            )
        except Exception as e:
            logger.exception("Request %s raised an unexpected error", request_id)
            return NOTICE_ROLE, f"Network/Fetch error: {e}", TRANSPORT_FAILED

        logger.info("Request %s answered (%d chars)", request_id, len(content))
        return ASSISTANT_ROLE, content, TRANSPORT_SUCCEEDED
