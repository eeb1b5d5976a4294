"""Tests for message body extraction."""

from talk_exporter.body import extract_body
from talk_exporter.config import ExtractOptions


def body_of(item, profile, html, speaker="Bob", time="", options=None):
    return extract_body(item(html), speaker, time, profile, options or ExtractOptions())


class TestExtractBody:
    def test_plain_text(self, item, profile):
        assert body_of(item, profile, '<div class="msg_wrap"><p class="msg">hello <b>there</b></p></div>') == "hello there"

    def test_multiline_text(self, item, profile):
        html = '<div class="msg_wrap"><div class="msg">line one<br>line two</div></div>'
        assert body_of(item, profile, html) == "line one\nline two"

    def test_quoted_content_removed(self, item, profile):
        html = (
            '<div class="msg_wrap"><div class="msg">'
            '<div class="reply_area"><span class="name">Carol</span><p>original text</p></div>'
            '<div class="forward-header">Forwarded</div>'
            'my reply</div></div>'
        )
        body = body_of(item, profile, html)
        assert body == "my reply"
        assert "original text" not in body
        assert "Carol" not in body

    def test_reply_regions_removed(self, item, profile):
        html = (
            '<div class="msg_wrap msg_lft"><dl><dt><span class="name">Bob</span></dt></dl>'
            '<div class="msg"><div class="reply_box"><span class="name">Carol</span><p>original text</p></div>'
            '<div class="reply_msg">earlier line</div>answer</div></div>'
        )
        assert body_of(item, profile, html) == "answer"

    def test_link_card_removed(self, item, profile):
        html = '<div class="msg_wrap"><div class="msg">see https://example.com<div class="connect"><div class="desc">Example Domain</div></div></div></div>'
        assert body_of(item, profile, html) == "see https://example.com"

    def test_source_tree_untouched(self, item, profile):
        node = item('<div class="msg_wrap"><div class="msg"><div class="quote_area">q</div>a</div></div>')
        extract_body(node, "Bob", "", profile, ExtractOptions())
        assert node.select_one(".quote_area") is not None

    def test_text_node_inside_quote_is_not_the_body(self, item, profile):
        html = (
            '<div class="msg_wrap"><div class="reply_box"><p class="msg">quoted msg</p></div>'
            '<p class="msg">actual</p></div>'
        )
        assert body_of(item, profile, html) == "actual"

    def test_sticker(self, item, profile):
        html = '<div class="msg_wrap"><div class="sticker_box"><img src="s.png"></div></div>'
        assert body_of(item, profile, html) == "(sticker)"

    def test_file(self, item, profile):
        html = '<div class="msg_wrap"><div class="file"><span class="file_name">report.pdf</span><span class="size">1MB</span></div></div>'
        assert body_of(item, profile, html) == "(file: report.pdf)"

    def test_media(self, item, profile):
        html = '<div class="msg_wrap"><div class="thmb"><img src="photo.jpg"></div></div>'
        assert body_of(item, profile, html) == "(image/media)"

    def test_custom_placeholders(self, item, profile):
        options = ExtractOptions(sticker_placeholder="(スタンプ)", file_template="(ファイル: {name})")
        assert body_of(item, profile, '<div class="msg_wrap"><div class="sticker_box"></div></div>', options=options) == "(スタンプ)"
        assert body_of(item, profile, '<div class="msg_wrap"><div class="file_name">a.xlsx</div></div>', options=options) == "(ファイル: a.xlsx)"

    def test_fallback_strips_speaker_and_time(self, item, profile):
        html = (
            '<div class="msg_wrap msg_lft"><dl><dt><span class="name">Bob</span></dt></dl>'
            '<span class="date">10:00</span><div class="other">plain words</div></div>'
        )
        assert body_of(item, profile, html, speaker="Bob", time="10:00") == "plain words"

    def test_empty_text_node_falls_back_to_attachment(self, item, profile):
        html = '<div class="msg_wrap"><p class="msg"> </p><div class="sticker_box"></div></div>'
        assert body_of(item, profile, html) == "(sticker)"

    def test_no_content(self, item, profile):
        assert body_of(item, profile, '<div class="msg_wrap msg_lft"></div>') is None
        html = '<div class="msg_wrap msg_lft"><dl><dt><span class="name">Bob</span></dt></dl><span class="date">10:00</span></div>'
        assert body_of(item, profile, html, speaker="Bob", time="10:00") is None
