"""Concrete implementations for text-generation backends."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from .config import Settings
from .errors import EmptyResponseError, MalformedResponseError, TransportError

logger = logging.getLogger(__name__)


class LLM(ABC):
    """Abstract Base Class for all text-generation backends."""

    @abstractmethod
    async def generate_response(self, prompt: str, system_instruction: str) -> Any:
        """Sends one stateless request to the backend.

        Parameters
        ----------
        prompt : str
            The user's text, sent as the only conversational turn.
        system_instruction : str
            The fixed persona and topic restriction sent with every request.

        Returns
        -------
        Any
            The backend's decoded response body.

        Raises
        ------
        TransportError
            On network failure or a non-success HTTP status.
        MalformedResponseError
            If the body cannot be decoded.
        """
        pass

    @abstractmethod
    def extract_content(self, response: Any) -> str:
        """Extracts the generated text from a decoded response.

        Raises
        ------
        EmptyResponseError
            If the response carries no usable text.
        MalformedResponseError
            If the response does not have the expected shape.
        """
        pass

    async def aclose(self) -> None:
        """Releases network resources held by the backend, if any."""
        pass


def _first(value: Any) -> Any:
    if isinstance(value, list) and value:
        return value[0]
    return None


def _get(value: Any, key: str) -> Any:
    if isinstance(value, dict):
        return value.get(key)
    return None


def extract_text(response: Any) -> str:
    """Returns ``candidates[0].content.parts[0].text`` from a Gemini response.

    A blocked or empty answer raises ``EmptyResponseError`` carrying the
    candidate's ``finishReason`` (or the prompt's ``blockReason`` when no
    candidate came back at all).
    """
    if not isinstance(response, dict):
        raise MalformedResponseError(
            f"Expected a JSON object, got {type(response).__name__}"
        )

    candidate = _first(response.get("candidates"))
    part = _first(_get(_get(candidate, "content"), "parts"))
    text = _get(part, "text")
    if isinstance(text, str) and text.strip():
        return text

    reason = _get(candidate, "finishReason") or _get(
        response.get("promptFeedback"), "blockReason"
    )
    raise EmptyResponseError(reason)


class Gemini(LLM):
    """Google Gemini ``generateContent`` over plain HTTPS.

    The model name is a path segment and the API key travels as the ``key``
    query parameter.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or Settings()
        self._client = client or httpx.AsyncClient(
            timeout=self.settings.request_timeout
        )

    @property
    def endpoint(self) -> str:
        base_url = self.settings.base_url.rstrip("/")
        return f"{base_url}/models/{self.settings.model}:generateContent"

    @staticmethod
    def build_request_body(prompt: str, system_instruction: str) -> Dict[str, Any]:
        return {
            "systemInstruction": {"parts": [{"text": system_instruction}]},
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        }

    async def generate_response(self, prompt, system_instruction):
        body = self.build_request_body(prompt, system_instruction)
        try:
            response = await self._client.post(
                self.endpoint,
                params={"key": self.settings.api_key},
                json=body,
            )
        except httpx.HTTPError as e:
            raise TransportError(str(e) or e.__class__.__name__) from e

        if not response.is_success:
            raise TransportError(
                f"HTTP {response.status_code}",
                status_code=response.status_code,
                reason=response.reason_phrase,
                body=response.text,
            )

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Response is not JSON: {e}") from e

    def extract_content(self, response):
        return extract_text(response)

    async def aclose(self):
        await self._client.aclose()


class Echo(LLM):
    """Offline backend that answers with the prompt, in Gemini's response shape."""

    def __init__(self, delay: float = 0.8):
        self.delay = delay

    async def generate_response(self, prompt, system_instruction):
        await asyncio.sleep(self.delay)
        content = f"Echo LLM - static response for testing\n\nYour prompt:\n{prompt}"
        return {
            "candidates": [
                {"content": {"parts": [{"text": content}]}, "finishReason": "STOP"}
            ]
        }

    def extract_content(self, response):
        return extract_text(response)
