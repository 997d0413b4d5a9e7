"""
Tests for tulip_browser.document.

Covers:
  - header fields escaped, body markup inserted as-is
  - mail link and ID badge only when present
  - theme palette and font size in the page style
"""

from tulip_browser.document import DARK_PALETTE, LIGHT_PALETTE, palette_for, render_document, render_entry, render_message
from tulip_browser.models import Settings
from tulip_browser.viewmodels import response_entry

from .conftest import make_response


class TestRenderEntry:
    def test_header_is_escaped_body_is_not(self):
        entry = response_entry(make_response(3, author="<b>name</b>", content='line<br><img src="https://i.imgur.com/a.png">'))
        markup = render_entry(entry)
        assert "&lt;b&gt;name&lt;/b&gt;" in markup
        assert 'line<br><img src="https://i.imgur.com/a.png">' in markup
        assert '<span class="response-number">3</span>' in markup

    def test_mail_link(self):
        markup = render_entry(response_entry(make_response(mail="sage")))
        assert '<a class="response-mail" href="mailto:sage">' in markup

    def test_no_mail_no_link(self):
        markup = render_entry(response_entry(make_response()))
        assert "response-mail" not in markup

    def test_badge_only_for_repeated_ids(self):
        repeated = render_entry(response_entry(make_response(user_id="abc", occurrence=2, total=3)))
        single = render_entry(response_entry(make_response(user_id="abc", occurrence=1, total=1)))
        assert '<span class="id-badge">' in repeated
        assert "[2/3]" in repeated
        assert "id-badge" not in single

    def test_content_override(self):
        entry = response_entry(make_response(content='<img src="x">'))
        markup = render_entry(entry, content='<img src="data:image/png;base64,AA">')
        assert "data:image/png;base64,AA" in markup
        assert 'src="x"' not in markup


class TestRenderDocument:
    def test_message_escaped_with_line_breaks(self):
        assert render_message("Failed to load responses.\n<timeout>") == (
            '<li class="response-message">Failed to load responses.<br>&lt;timeout&gt;</li>'
        )

    def test_dark_theme_and_font_size(self):
        page = render_document(["<li>a</li>"], Settings(theme="dark", font_size=18))
        assert DARK_PALETTE.background in page
        assert "font-size: 18px" in page
        assert '<ul id="response-list"><li>a</li></ul>' in page

    def test_defaults_to_light(self):
        page = render_document([])
        assert LIGHT_PALETTE.background in page
        assert "font-size: 14px" in page

    def test_palette_for_unknown_theme(self):
        assert palette_for("sepia") is LIGHT_PALETTE
