"""
Core pytest configuration and fixtures for NetWise testing.

Backends are faked at the HTTP layer with ``httpx.MockTransport`` or with
small in-process ``LLM`` subclasses, so no test touches the network.
"""

import asyncio
import json
from typing import Any, Callable, Dict, List

import httpx
import pytest
from netwise.config import Settings
from netwise.engine import Serialized
from netwise.llm import LLM, Gemini
from netwise.presenter import Headless
from netwise.status import START, STARTUP_ELAPSED
from netwise.store import InMemory

# ===== TEST DATA FIXTURES =====


def gemini_reply(text: str, finish_reason: str = "STOP") -> Dict[str, Any]:
    """Builds a successful generateContent body."""
    return {
        "candidates": [
            {
                "content": {"role": "model", "parts": [{"text": text}]},
                "finishReason": finish_reason,
            }
        ]
    }


@pytest.fixture
def settings() -> Settings:
    """Settings with no startup delays and a fake key."""
    return Settings(api_key="test-key", startup_delay=0, banner_delay=0)


@pytest.fixture
def tcp_reply() -> Dict[str, Any]:
    return gemini_reply("TCP is...")


# ===== FAKE BACKENDS =====


class GatedLLM(LLM):
    """Backend whose answer is held until the test opens the gate."""

    def __init__(self, reply: str = "Done."):
        self.reply = reply
        self.started = asyncio.Event()
        self.gate = asyncio.Event()
        self.prompts: List[str] = []

    async def generate_response(self, prompt, system_instruction):
        self.prompts.append(prompt)
        self.started.set()
        await self.gate.wait()
        return gemini_reply(self.reply)

    def extract_content(self, response):
        return response["candidates"][0]["content"]["parts"][0]["text"]


class HangingLLM(LLM):
    """Backend that never answers."""

    def __init__(self):
        self.started = asyncio.Event()

    async def generate_response(self, prompt, system_instruction):
        self.started.set()
        await asyncio.Event().wait()

    def extract_content(self, response):
        return response


@pytest.fixture
def gated_llm() -> GatedLLM:
    return GatedLLM()


@pytest.fixture
def hanging_llm() -> HangingLLM:
    return HangingLLM()


@pytest.fixture
def reply_body() -> Callable[..., Dict[str, Any]]:
    return gemini_reply


@pytest.fixture
def json_response():
    """Factory for MockTransport handlers answering with a fixed status and body."""
    return json_handler


@pytest.fixture
def mock_transport_factory() -> Callable[..., Gemini]:
    """Returns a factory building a Gemini client over a MockTransport.

    The factory records every request it serves in ``client.requests``.
    """

    def factory(handler, settings: Settings = None) -> Gemini:
        requests: List[httpx.Request] = []

        def recording_handler(request: httpx.Request):
            requests.append(request)
            return handler(request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
        gemini = Gemini(
            settings or Settings(api_key="test-key", startup_delay=0, banner_delay=0),
            client=client,
        )
        gemini.requests = requests
        return gemini

    return factory


def json_handler(status_code: int, body: Any) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request):
        if isinstance(body, str):
            return httpx.Response(status_code, text=body)
        return httpx.Response(status_code, content=json.dumps(body).encode())

    return handler


# ===== ENGINE FIXTURES =====


@pytest.fixture
def presenter() -> Headless:
    return Headless()


@pytest.fixture
def make_engine(presenter, settings):
    """Builds a Serialized engine around ``llm`` with a connected status."""

    def factory(llm: LLM, connected: bool = True) -> Serialized:
        engine = Serialized(
            store=InMemory(), llm=llm, presenter=presenter, settings=settings
        )
        if connected:
            engine.status.handle(START)
            engine.status.handle(STARTUP_ELAPSED)
        return engine

    return factory


# ===== CONFIGURATION =====


def pytest_configure(config):
    """Pytest configuration."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on location."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
