"""
Tests for the Layout pillar implementations.

These tests focus on interface compliance, required element IDs and how
sanitized entries become bubbles for the page script.
"""

from html.parser import HTMLParser

import pytest
from netwise.layout import (
    REQUIRED_IDS,
    STATIC_DIR,
    Bootstrap,
    Layout,
    dot_class,
    find_missing_ids,
    sound_icon,
)
from netwise.models import ASSISTANT_ROLE, CONNECTED, NOTICE_ROLE, USER_ROLE
from netwise.sanitizer import HTML
from netwise.store import WELCOME_TEXT


class TagCollector(HTMLParser):
    def __init__(self):
        super().__init__()
        self.tags = []
        self.text = []

    def handle_starttag(self, tag, attrs):
        self.tags.append((tag, dict(attrs)))

    def handle_data(self, data):
        self.text.append(data)


def parse(fragment):
    collector = TagCollector()
    collector.feed(fragment)
    collector.close()
    return collector


class TestLayoutInterface:
    def test_layout_is_abstract(self):
        with pytest.raises(TypeError) as exc_info:
            Layout()
        assert "abstract" in str(exc_info.value).lower()

    def test_layout_requires_build_messages(self):
        class IncompleteLayout(Layout):
            def build_page(self):
                return "<html></html>"

        with pytest.raises(TypeError) as exc_info:
            IncompleteLayout()
        assert "build_messages" in str(exc_info.value)


class TestBootstrapLayout:
    @pytest.fixture
    def layout(self):
        return Bootstrap()

    def test_page_has_all_required_ids(self, layout):
        assert find_missing_ids(layout.build_page()) == []

    def test_missing_ids_are_reported(self):
        page = '<div id="messages_container"></div><button id="submit_button"></button>'
        missing = find_missing_ids(page)
        assert "messages_container" not in missing
        assert "conn_dot" in missing
        assert len(missing) == len(REQUIRED_IDS) - 2

    def test_page_includes_script_and_stylesheet(self, layout):
        page = layout.build_page()
        assert "/api/view" in page
        assert layout.get_external_stylesheets()[0] in page

    def test_topic_chips(self):
        chips = parse(Bootstrap(topics=["TCP", "BGP"]).build_input_area())
        topics = [attrs["data-topic"] for tag, attrs in chips.tags if "data-topic" in attrs]
        assert topics == ["TCP", "BGP"]

    def test_topic_chips_are_escaped(self):
        footer = Bootstrap(topics=['<b>"x"</b>']).build_input_area()
        assert "<b>" not in footer

    def test_empty_transcript_shows_welcome(self, layout):
        assert layout.build_messages([]) == []
        assert "NETWORK YOUR KNOWLEDGE" in layout.build_chat_area()

    def test_lone_welcome_notice_shows_welcome_block(self, layout):
        welcome = HTML().render(WELCOME_TEXT, NOTICE_ROLE)
        assert layout.build_messages([welcome]) == []

    def test_welcome_notice_with_a_reply_is_drawn_as_bubbles(self, layout):
        sanitizer = HTML()
        entries = [
            sanitizer.render(WELCOME_TEXT, NOTICE_ROLE),
            sanitizer.render("late reply", ASSISTANT_ROLE),
        ]
        assert [b["role"] for b in layout.build_messages(entries)] == [
            NOTICE_ROLE,
            ASSISTANT_ROLE,
        ]

    def test_other_lone_notice_is_a_bubble(self, layout):
        notice = HTML().render("Connection established.", NOTICE_ROLE)
        assert len(layout.build_messages([notice])) == 1

    def test_user_entry_is_plain_text(self, layout):
        entry = HTML().render("<script>alert(1)</script>", USER_ROLE)
        (bubble,) = layout.build_messages([entry])

        assert bubble == {
            "role": USER_ROLE,
            "content": "<script>alert(1)</script>",
            "is_markup": False,
            "class_name": "bubble-user",
        }

    @pytest.mark.parametrize("role", [ASSISTANT_ROLE, NOTICE_ROLE])
    def test_reply_entry_keeps_escaped_markup(self, layout, role):
        entry = HTML().render("<b>x</b>\ny", role)
        (bubble,) = layout.build_messages([entry])

        assert bubble["is_markup"] is True
        assert bubble["class_name"] == "bubble-bot"
        assert bubble["content"] == entry.content
        tags = [tag for tag, _ in parse(bubble["content"]).tags]
        assert "br" in tags
        assert "b" not in tags

    def test_entries_keep_their_order(self, layout):
        sanitizer = HTML()
        entries = [
            sanitizer.render("q", USER_ROLE),
            sanitizer.render("a", ASSISTANT_ROLE),
        ]
        classes = [bubble["class_name"] for bubble in layout.build_messages(entries)]
        assert classes == ["bubble-user", "bubble-bot"]

    def test_page_script_sets_user_text_as_text(self):
        script = (STATIC_DIR / "netwise.js").read_text(encoding="utf-8")
        assert "bubble.textContent = entry.content" in script
        assert "if (entry.is_markup)" in script

    def test_poll_interval(self):
        page = Bootstrap(poll_interval_ms=250).build_page()
        body = [attrs for tag, attrs in parse(page).tags if tag == "body"][0]
        assert body["data-poll-interval"] == "250"


class TestHelpers:
    def test_dot_class(self):
        assert dot_class(CONNECTED) == "conn-dot conn-connected"
        assert dot_class("error") == "conn-dot conn-error"
        assert dot_class("unknown") == "conn-dot conn-error"

    def test_sound_icon(self):
        assert sound_icon(True) == "🔔"
        assert sound_icon(False) == "🔕"
