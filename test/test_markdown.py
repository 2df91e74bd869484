"""
Tests for markdown rendering and HTML sanitization
"""

from devfolio.utils.markdown import render_markdown
from devfolio.utils.sanitize import sanitize_html, sanitize_plain_text


class TestRenderMarkdown:
    def test_basic_markdown(self):
        """Test headings and emphasis are rendered"""
        html = render_markdown("# Title\n\nSome *text*")

        assert '<h1 id="title">Title</h1>' in html
        assert "<em>text</em>" in html

    def test_fenced_code_keeps_language(self):
        """Test the language class survives sanitization"""
        html = render_markdown("```python\nprint('hi')\n```")

        assert 'class="language-python"' in html

    def test_tables(self):
        html = render_markdown("| a | b |\n|---|---|\n| 1 | 2 |")

        assert "<table>" in html
        assert "<td>1</td>" in html

    def test_external_links_open_in_new_tab(self):
        """Test absolute links get target and rel"""
        html = render_markdown("[site](https://example.com)")

        assert 'target="_blank"' in html
        assert 'rel="noopener noreferrer"' in html

    def test_links_to_own_site_stay_in_tab(self):
        """Test links to the configured site host are not treated as external"""
        html = render_markdown(
            "[home](https://Folio.example/blog) and [other](https://elsewhere.example)",
            site_host="folio.example",
        )

        assert '<a href="https://Folio.example/blog">home</a>' in html
        assert html.count('target="_blank"') == 1

    def test_relative_links_unchanged(self):
        html = render_markdown("[about](/about)")

        assert "target" not in html

    def test_script_removed(self):
        """Test raw script tags in the source do not survive"""
        html = render_markdown("hello\n\n<script>alert(1)</script>")

        assert "<script" not in html

    def test_empty(self):
        assert render_markdown("") == ""
        assert render_markdown(None) == ""


class TestSanitize:
    def test_sanitize_html_strips_disallowed_tags(self):
        assert sanitize_html("<p>ok</p><iframe src='x'></iframe>") == "<p>ok</p>"

    def test_sanitize_html_drops_unsafe_protocols(self):
        assert sanitize_html('<a href="javascript:alert(1)">x</a>') == "<a>x</a>"

    def test_sanitize_html_strip_mode(self):
        assert sanitize_html("<p>ok</p>", strip=True) == "ok"

    def test_plain_text_normalizes_whitespace(self):
        assert sanitize_plain_text("  <b>a</b>    b  ") == "a b"

    def test_plain_text_none(self):
        assert sanitize_plain_text(None) == ""
