"""
Defines the core Pydantic data models for the application.

These models are the validated data contract shared by the store, the engine,
the status indicator and the presentation layer.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, model_validator

# --- Constants ---
USER_ROLE = "user"
ASSISTANT_ROLE = "assistant"
NOTICE_ROLE = "system-notice"
Role = Literal["user", "assistant", "system-notice"]

IDLE = "idle"
AWAITING_RESPONSE = "awaiting-response"
ERRORED = "errored"
Phase = Literal["idle", "awaiting-response", "errored"]

CONNECTING = "connecting"
CONNECTED = "connected"
CONNECTION_ERROR = "error"
ConnectionStatus = Literal["connecting", "connected", "error"]


# --- Models ---
class Message(BaseModel):
    """Represents a single transcript entry."""

    model_config = ConfigDict(frozen=True)

    id: int
    role: Role
    text: str
    sequence: int


class ConversationState(BaseModel):
    """Controller-wide request status.

    Instances are immutable; the engine replaces the whole state on every
    transition so ``phase`` and ``pending_request_id`` always change together.
    """

    model_config = ConfigDict(frozen=True)

    phase: Phase = IDLE
    pending_request_id: Optional[str] = None

    @model_validator(mode="after")
    def _pending_iff_awaiting(self) -> "ConversationState":
        awaiting = self.phase == AWAITING_RESPONSE
        if awaiting != (self.pending_request_id is not None):
            raise ValueError(
                "pending_request_id must be set exactly when phase is "
                f"'{AWAITING_RESPONSE}'"
            )
        return self

    @property
    def is_busy(self) -> bool:
        return self.phase == AWAITING_RESPONSE
