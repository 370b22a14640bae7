"""Layout builders for the NetWise browser page."""

import html
from abc import ABC, abstractmethod
from html.parser import HTMLParser
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import SUGGESTED_TOPICS
from .models import (
    CONNECTED,
    CONNECTING,
    CONNECTION_ERROR,
    NOTICE_ROLE,
    ConnectionStatus,
)
from .sanitizer import HTML, SafeMarkup, Sanitizer
from .store import WELCOME_TEXT

STATIC_DIR = Path(__file__).parent / "static"

BOOTSTRAP_CSS = "https://cdn.jsdelivr.net/npm/bootswatch@5.3.3/dist/darkly/bootstrap.min.css"

REQUIRED_IDS = [
    "conn_dot",
    "conn_text",
    "chat_area",
    "messages_container",
    "typing_indicator",
    "topic_chips",
    "input_textarea",
    "submit_button",
    "clear_button",
    "sound_button",
]

DOT_CLASSES = {
    CONNECTED: "conn-dot conn-connected",
    CONNECTING: "conn-dot conn-connecting",
    CONNECTION_ERROR: "conn-dot conn-error",
}

PAGE_STYLE = """
.conn-dot { display: inline-block; width: 12px; height: 12px; border-radius: 50%; }
.conn-connected { background-color: #22c55e; box-shadow: 0 0 6px #22c55e80; }
.conn-connecting { background-color: #facc15; box-shadow: 0 0 6px #facc154d; }
.conn-error { background-color: #ef4444; box-shadow: 0 0 6px #ef444480; }
.bubble-user, .bubble-bot {
  padding: 8px 16px; border-radius: 16px; margin-bottom: 10px;
  max-width: 80%; width: fit-content; overflow-wrap: break-word;
}
.bubble-user { margin-left: auto; background-color: #0369a1; white-space: pre-wrap; }
.bubble-bot { margin-right: auto; background-color: #1e293b; }
.bubble-glyph { margin-right: 6px; }
"""


def dot_class(status: ConnectionStatus) -> str:
    return DOT_CLASSES.get(status, DOT_CLASSES[CONNECTION_ERROR])


def sound_icon(sound_on: bool) -> str:
    return "🔔" if sound_on else "🔕"


class _IdCollector(HTMLParser):
    def __init__(self):
        super().__init__()
        self.ids = set()

    def handle_starttag(self, tag, attrs):
        for name, value in attrs:
            if name == "id" and value:
                self.ids.add(value)


def find_missing_ids(page: str) -> List[str]:
    """Returns the entries of ``REQUIRED_IDS`` absent from an HTML page."""
    collector = _IdCollector()
    collector.feed(page)
    collector.close()
    return [element_id for element_id in REQUIRED_IDS if element_id not in collector.ids]


class Layout(ABC):
    """Interface for building the NetWise page."""

    @abstractmethod
    def build_page(self) -> str:
        """Constructs and returns the complete HTML document for the UI."""
        pass

    @abstractmethod
    def build_messages(self, entries: List[SafeMarkup]) -> List[Dict[str, Any]]:
        """Converts sanitized transcript entries into bubbles for the page.

        An empty list tells the page to show its welcome block.
        """
        pass

    def get_external_stylesheets(self) -> List[str]:
        return []

    def get_external_scripts(self) -> List[str]:
        return []


class Bootstrap(Layout):
    """Builds the standard NetWise page styled with Bootstrap."""

    def __init__(
        self,
        topics: Optional[List[str]] = None,
        poll_interval_ms: int = 500,
        sanitizer: Optional[Sanitizer] = None,
    ):
        self.topics = list(SUGGESTED_TOPICS if topics is None else topics)
        self.poll_interval_ms = poll_interval_ms
        sanitizer = sanitizer or HTML()
        self.welcome_markup = sanitizer.render(WELCOME_TEXT, NOTICE_ROLE).content

    def get_external_stylesheets(self) -> List[str]:
        return [BOOTSTRAP_CSS]

    def build_page(self) -> str:
        """Constructs the whole document, including the page script."""
        stylesheets = "".join(
            f'<link rel="stylesheet" href="{html.escape(url)}">'
            for url in self.get_external_stylesheets()
        )
        scripts = "".join(
            f'<script src="{html.escape(url)}"></script>'
            for url in self.get_external_scripts()
        )
        script = (STATIC_DIR / "netwise.js").read_text(encoding="utf-8")
        return (
            "<!DOCTYPE html>"
            '<html lang="en" data-bs-theme="dark">'
            "<head>"
            '<meta charset="utf-8">'
            '<meta name="viewport" content="width=device-width, initial-scale=1">'
            "<title>NetWise</title>"
            f"{stylesheets}<style>{PAGE_STYLE}</style>"
            "</head>"
            f'<body class="d-flex flex-column vh-100" data-poll-interval="{self.poll_interval_ms}">'
            f"{self.build_header()}{self.build_chat_area()}{self.build_input_area()}"
            f"{scripts}<script>{script}</script>"
            "</body></html>"
        )

    def build_header(self) -> str:
        """Builds the header with the connection indicator and controls."""
        return (
            '<header class="p-2 border-bottom">'
            '<div class="container-fluid"><div class="row align-items-center">'
            '<div class="col"><h4 class="m-0">NetWise</h4></div>'
            '<div class="col-auto">'
            f'<span id="conn_dot" class="{dot_class(CONNECTING)}"></span>'
            '<span id="conn_text" class="ms-2 small">Connecting...</span>'
            "</div>"
            '<div class="col-auto">'
            '<button id="sound_button" type="button" class="btn btn-secondary btn-sm me-2">'
            f"{sound_icon(True)}</button>"
            '<button id="clear_button" type="button" class="btn btn-secondary btn-sm">'
            "Clear</button>"
            "</div>"
            "</div></div>"
            "</header>"
        )

    def build_chat_area(self) -> str:
        """Builds the scrolling transcript and the typing indicator."""
        return (
            '<main id="chat_area" class="flex-grow-1 p-3" style="overflow-y: auto">'
            f'<div id="messages_container">{self.build_welcome()}</div>'
            '<div id="typing_indicator" class="small text-info" hidden>'
            "NetWise is typing…</div>"
            "</main>"
        )

    def build_welcome(self) -> str:
        return (
            '<div class="text-center pt-5">'
            '<div class="h3 text-info">NETWORK YOUR KNOWLEDGE</div>'
            "<div>Type a question about Computer Networks to begin.</div>"
            "</div>"
        )

    def build_input_area(self) -> str:
        """Builds the topic chips and the user input area."""
        chips = "".join(
            '<button type="button" class="btn btn-dark btn-sm me-1 mb-1 rounded-pill"'
            f' data-topic="{html.escape(topic)}">{html.escape(topic)}</button>'
            for topic in self.topics
        )
        return (
            '<footer class="p-3 border-top">'
            f'<div id="topic_chips" class="mb-2">{chips}</div>'
            '<div class="input-group">'
            '<textarea id="input_textarea" class="form-control" rows="2"'
            ' placeholder="Ask about Computer Networks..."></textarea>'
            '<button id="submit_button" type="button" class="btn btn-primary">Send</button>'
            "</div>"
            "</footer>"
        )

    def is_welcome(self, entries: List[SafeMarkup]) -> bool:
        """True when the transcript holds nothing but the welcome notice."""
        if not entries:
            return True
        return (
            len(entries) == 1
            and entries[0].role == NOTICE_ROLE
            and entries[0].content == self.welcome_markup
        )

    def build_messages(self, entries: List[SafeMarkup]) -> List[Dict[str, Any]]:
        if self.is_welcome(entries):
            return []
        return [self.build_message(entry) for entry in entries]

    def build_message(self, entry: SafeMarkup) -> Dict[str, Any]:
        """Formats a single transcript entry for the page script.

        The script assigns ``content`` with ``textContent`` unless
        ``is_markup`` is set, so user text never meets the HTML parser.
        """
        return {
            "role": entry.role,
            "content": entry.content,
            "is_markup": entry.is_markup,
            "class_name": "bubble-bot" if entry.is_markup else "bubble-user",
        }
