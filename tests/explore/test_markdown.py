"""Tests for restricted Markdown rendering."""

from explore.markdown import insert_markdown, render_markdown


class TestRenderMarkdown:
    """Tests for render_markdown."""

    def test_headings(self):
        """Test the three heading levels."""
        assert render_markdown("# Title") == "<h1>Title</h1>"
        assert render_markdown("## Section") == "<h2>Section</h2>"
        assert render_markdown("### Detail") == "<h3>Detail</h3>"

    def test_emphasis(self):
        """Test bold and italic inside a paragraph."""
        assert render_markdown("**bold** and *it*") == (
            "<p><strong>bold</strong> and <em>it</em></p>"
        )

    def test_strikethrough(self):
        """Test strikethrough."""
        assert render_markdown("~~old~~") == "<p><del>old</del></p>"

    def test_bullet_list(self):
        """Test adjacent bullet items share one list."""
        assert render_markdown("- a\n- b") == "<ul><li>a</li><li>b</li></ul>"

    def test_numbered_list(self):
        """Test numbered items become list items."""
        assert render_markdown("1. one\n2. two") == "<ul><li>one</li><li>two</li></ul>"

    def test_single_line_break_joins_paragraph(self):
        """Test a single newline stays inside the paragraph."""
        assert render_markdown("line one\nline two") == "<p>line one line two</p>"

    def test_blank_line_splits_paragraphs(self):
        """Test a blank line starts a new paragraph."""
        assert render_markdown("para1\n\npara2") == "<p>para1</p><p>para2</p>"

    def test_heading_then_text(self):
        """Test a heading followed by text on the next line."""
        assert render_markdown("# T\ntext") == "<h1>T</h1><p>text</p>"

    def test_fenced_code(self):
        """Test fenced code becomes a pre block."""
        assert render_markdown("```\nx = 1\n```") == "<pre><code>x = 1</code></pre>"

    def test_fenced_code_is_not_formatted(self):
        """Test emphasis markers inside fenced code stay literal."""
        assert render_markdown("```\n**x**\n```") == "<pre><code>**x**</code></pre>"

    def test_inline_code_is_not_formatted(self):
        """Test emphasis markers inside inline code stay literal."""
        assert render_markdown("`**x**`") == "<p><code>**x**</code></p>"

    def test_blockquote(self):
        """Test blockquotes."""
        assert render_markdown("> quoted") == "<blockquote>quoted</blockquote>"

    def test_link(self):
        """Test links open in a new tab without referrer."""
        assert render_markdown("[docs](https://example.com)") == (
            '<p><a href="https://example.com" target="_blank" '
            'rel="noopener noreferrer">docs</a></p>'
        )

    def test_script_tags_are_escaped(self):
        """Test raw HTML in the source is escaped."""
        out = render_markdown("<script>alert(1)</script>")
        assert "<script>" not in out
        assert "&lt;script&gt;" in out

    def test_javascript_link_neutralized(self):
        """Test script URLs never reach an href."""
        out = render_markdown("[x](javascript:alert(1))")
        assert 'href="#"' in out
        assert "javascript" not in out

    def test_empty_input(self):
        """Test empty input renders nothing."""
        assert render_markdown("") == ""
        assert render_markdown(None) == ""

    def test_crlf_input(self):
        """Test Windows line endings behave like plain newlines."""
        assert render_markdown("para1\r\n\r\npara2") == "<p>para1</p><p>para2</p>"


class TestInsertMarkdown:
    """Tests for insert_markdown."""

    def test_wraps_selection(self):
        """Test the selection is wrapped and the caret follows the closing marker."""
        assert insert_markdown("make bold", 5, 9, "**", "**") == ("make **bold**", 13)

    def test_empty_selection(self):
        """Test markers are inserted at the caret when nothing is selected."""
        assert insert_markdown("ab", 1, 1, "*", "*") == ("a**b", 3)

    def test_out_of_range_offsets_are_clamped(self):
        """Test offsets beyond the text are clamped."""
        assert insert_markdown("abc", 1, 99, "~~", "~~") == ("a~~bc~~", 7)
