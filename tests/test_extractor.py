"""End-to-end tests for an extraction pass and the dispatch boundary."""

import pytest

from talk_exporter import extractor
from talk_exporter.events import DateMarker, Message, SystemNotice
from talk_exporter.extractor import extract, handle_request, parse_html, run_extraction

from tests.pages import build_page, date_item, other_item, self_item


def extract_page(items_html, options, title="Alex"):
    return extract(parse_html(build_page(items_html, title=title)), options=options)


class TestExtract:
    def test_one_to_one_switch_from_self(self, options):
        events = extract_page(
            date_item("2024-01-01") + self_item("hi", time="09:00") + other_item("hey"),
            options,
        )
        assert events == [
            DateMarker("2024-01-01"),
            Message("Me", True, "09:00", "hi"),
            Message("Alex", False, "", "hey"),
        ]

    def test_group_run_and_reset_after_self(self, options):
        events = extract_page(
            other_item("a", name="Bob")
            + other_item("b")
            + '<div class="inform_msg">Carol joined the room.</div>'
            + other_item("c")
            + self_item("ok")
            + other_item("d"),
            options,
            title="Team",
        )
        speakers = [(e.speaker if isinstance(e, Message) else None) for e in events]
        assert speakers == ["Bob", "Bob", None, "Bob", "Me", "Team"]
        assert events[2] == SystemNotice("Carol joined the room.")

    def test_default_title(self, options):
        events = extract_page(other_item("hey"), options, title=None)
        assert events[0].speaker == "counterpart"

    def test_empty_and_hidden_items_dropped(self, options):
        events = extract_page(
            '<div class="msg_wrap msg_lft"></div>'
            + '<div class="msg_wrap msg_lft" style="display:none"><p class="msg">secret</p></div>'
            + '<div class="inform_date"></div>'
            + '<div class="unread_line">new</div>'
            + other_item("kept", name="Bob"),
            options,
        )
        assert events == [Message("Bob", False, "", "kept")]

    def test_date_marker_without_label_node(self, options):
        events = extract_page('<div class="inform_date">Monday</div>', options)
        assert events == [DateMarker("Monday")]

    def test_date_label_trimmed(self, options):
        events = extract_page('<div class="inform_date"><span class="date">  2024-01-01 (Mon)  </span></div>', options)
        assert events == [DateMarker("2024-01-01 (Mon)")]

    def test_quoted_reply(self, options):
        html = (
            '<div class="msg_wrap msg_lft"><dl><dt><span class="name">Bob</span></dt></dl>'
            '<div class="msg_box"><div class="msg">'
            '<div class="reply_area"><dl><dt><span class="name">Carol</span></dt></dl><p>original</p></div>'
            'answer</div></div></div>'
        )
        events = extract_page(html, options)
        assert events == [Message("Bob", False, "", "answer")]

    def test_file_attachment(self, options):
        html = '<div class="msg_wrap msg_lft"><div class="file_box"><span class="file_name">report.pdf</span></div></div>'
        assert extract_page(html, options)[0].body == "(file: report.pdf)"

    def test_viewport_width_from_document(self, options):
        html = (
            '<html data-viewport-width="600"><body><div class="chat_view">'
            '<div class="msg_wrap"><div class="msg_box" data-rect="300,0,200,40"><p class="msg">x</p></div></div>'
            '</div></body></html>'
        )
        events = extract(parse_html(html), options=options)
        assert events[0].is_self
        assert events[0].speaker == "Me"

    def test_no_container(self, options):
        assert extract(parse_html("<div><p>loading</p></div>"), options=options) == []

    def test_source_not_modified(self, options):
        html = build_page(
            '<div class="msg_wrap msg_lft"><div class="msg"><div class="quote_area">q</div>a</div></div>'
        )
        root = parse_html(html)
        before = str(root.tag)
        extract(root, options=options)
        assert str(root.tag) == before


class TestDispatch:
    def test_success(self, options):
        html = build_page(date_item("2024-01-01") + self_item("hi", time="09:00"))
        result = handle_request({"action": "extractTalk"}, html, options=options)
        assert result["success"] is True
        assert result["count"] == 2
        assert result["events"][1] == {"type": "message", "speaker": "Me", "isSelf": True, "time": "09:00", "message": "hi"}
        assert "Me (09:00):\n「hi」" in result["formattedText"]

    def test_not_found_is_success(self):
        result = handle_request({"action": "extractTalk"}, "<p>nothing</p>")
        assert result["success"] is True
        assert result["count"] == 0
        assert result["events"] == []

    def test_fault_is_reported(self, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(extractor, "find_container", boom)
        result = handle_request({"action": "extractTalk"}, build_page(self_item("hi")))
        assert result == {"success": False, "error": "boom"}

    def test_unknown_action(self):
        result = handle_request({"action": "ping"}, "")
        assert result["success"] is False
        assert "ping" in result["error"]

    def test_result_title(self, options):
        result = run_extraction(build_page(self_item("hi"), title="Alex"), options=options)
        assert result.title == "Alex"
        assert result.count == 1


@pytest.mark.parametrize("title", ["Alex", "相手"])
def test_title_used_for_unlabelled_other_party(title, options):
    events = extract_page(self_item("hi") + other_item("hey"), options, title=title)
    assert events[1].speaker == title
