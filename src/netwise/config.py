"""Application settings.

The engine and backend client receive a ``Settings`` instance; only
``Settings.from_env`` looks at the process environment.
"""

import os
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

SYSTEM_INSTRUCTION = """
You are NetWise - an AI that ONLY answers Computer Networking questions:
OSI layers, TCP/IP, routing, switching, DNS, DHCP, ARP, network security, IoT protocols.
Politely refuse non-networking questions.
You may greet when user says hi or hello.
Tone: short, technical, helpful.
"""

SUGGESTED_TOPICS = [
    "TCP",
    "Routing",
    "DNS",
    "Congestion Control",
    "Socket programming",
    "ARP",
    "DHCP",
]


class Settings(BaseModel):
    """Validated configuration for a NetWise session."""

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(default="", repr=False)
    model: str = "gemini-2.5-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    system_instruction: str = SYSTEM_INSTRUCTION
    startup_delay: float = Field(default=1.5, ge=0)
    banner_delay: float = Field(default=0.2, ge=0)
    request_timeout: Optional[float] = Field(default=None, gt=0)
    suggested_topics: List[str] = Field(default_factory=lambda: list(SUGGESTED_TOPICS))
    poll_interval_ms: int = Field(default=500, gt=0)

    @classmethod
    def from_env(cls, **overrides) -> "Settings":
        """Builds settings from environment variables, then applies ``overrides``.

        Reads ``GEMINI_API_KEY``, ``NETWISE_MODEL``, ``NETWISE_BASE_URL`` and
        ``NETWISE_REQUEST_TIMEOUT``. Unset variables keep the defaults.
        """
        values = {}
        env_map = {
            "api_key": "GEMINI_API_KEY",
            "model": "NETWISE_MODEL",
            "base_url": "NETWISE_BASE_URL",
            "request_timeout": "NETWISE_REQUEST_TIMEOUT",
        }
        for name, variable in env_map.items():
            value = os.environ.get(variable)
            if value:
                values[name] = value
        values.update(overrides)
        return cls(**values)
