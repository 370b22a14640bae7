"""Exceptions raised by the backend client and handled by the engine."""

from typing import Optional


class NetWiseError(Exception):
    """Base class for all NetWise errors."""


class TransportError(NetWiseError):
    """The request never produced a successful HTTP response.

    Covers both network failures (``status_code`` is None) and non-2xx
    responses, in which case the status, reason phrase and raw body are kept
    for the transcript notice.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        reason: str = "",
        body: str = "",
    ):
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason
        self.body = body

    def describe(self) -> str:
        if self.status_code is None:
            return f"Network/Fetch error: {self}"
        return f"API Error: {self.status_code} {self.reason} - {self.body}"


class EmptyResponseError(NetWiseError):
    """The backend answered successfully but produced no usable text."""

    def __init__(self, finish_reason: Optional[str] = None):
        self.finish_reason = finish_reason or "Unknown"
        super().__init__(f"No generated text (finish reason: {self.finish_reason})")


class MalformedResponseError(EmptyResponseError):
    """The response body is not the JSON shape the backend documents."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__("Malformed response")
