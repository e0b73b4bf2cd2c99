"""Unit tests for the HTML to Markdown converter used by project summaries."""

from sqlagent.utils.html_markdown import html_to_markdown


def test_empty_input_has_placeholder():
    assert html_to_markdown("") == "No content available."
    assert html_to_markdown(None) == "No content available."


def test_headings_and_paragraphs():
    markdown = html_to_markdown("<h2>Overview</h2><p>Building a new parser.</p>")

    assert "## Overview" in markdown
    assert "Building a new parser." in markdown
    assert "<" not in markdown


def test_lists_become_bullets():
    markdown = html_to_markdown("<ul><li>First</li><li>Second</li></ul>")

    assert "• First" in markdown
    assert "• Second" in markdown


def test_inline_formatting_and_links():
    markdown = html_to_markdown(
        '<p><strong>Bold</strong> and <em>italic</em> see <a href="https://example.com">docs</a></p>'
    )

    assert "**Bold**" in markdown
    assert "*italic*" in markdown
    assert "[docs](https://example.com)" in markdown


def test_known_section_headings_are_decorated():
    markdown = html_to_markdown("<h3>Milestones</h3><p>Q1 prototype</p>")

    assert "🎯 **Milestones**" in markdown
    assert "### Milestones" not in markdown


def test_unknown_tags_are_stripped_and_blank_lines_collapsed():
    markdown = html_to_markdown("<div><span>Text</span></div>\n\n\n\n<p>More</p>")

    assert "Text" in markdown
    assert "\n\n\n" not in markdown
    assert "<span>" not in markdown
