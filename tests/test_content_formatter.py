import pytest

from study_companion.content_formatter import (
    Bold,
    BulletList,
    Heading,
    Paragraph,
    Plain,
    format_content,
    render_html,
    spans_to_text,
    split_inline,
    to_markdown,
)


def _shape(nodes):
    shape = []
    for node in nodes:
        if isinstance(node, Heading):
            shape.append(("heading", node.level, spans_to_text(node.spans)))
        elif isinstance(node, BulletList):
            shape.append(("list", tuple(spans_to_text(item) for item in node.items)))
        else:
            shape.append(("paragraph", spans_to_text(node.spans)))
    return shape


def test_plain_lines_become_one_paragraph():
    nodes = format_content("  first line \nsecond line\n   third")

    assert nodes == [Paragraph((Plain("first line second line third"),))]


def test_empty_string_has_no_structure():
    assert format_content("") is None
    assert format_content("\n\n  \n") is None
    assert render_html("") == '<div class="whitespace-pre-wrap"></div>'


def test_heading_then_body():
    nodes = format_content("## Title\nBody text")

    assert nodes == [Heading(2, (Plain("Title"),)), Paragraph((Plain("Body text"),))]


def test_subheading_level_three():
    nodes = format_content("### Details")

    assert nodes == [Heading(3, (Plain("Details"),))]


def test_list_then_paragraph():
    nodes = format_content("* a\n* b\n\nPara")

    assert nodes == [BulletList(((Plain("a"),), (Plain("b"),))), Paragraph((Plain("Para"),))]


def test_dash_items_join_the_same_list():
    nodes = format_content("* a\n- b")

    assert _shape(nodes) == [("list", ("a", "b"))]


def test_inline_bold_spans():
    nodes = format_content("Bold **word** here")

    assert nodes == [Paragraph((Plain("Bold "), Bold("word"), Plain(" here")))]


def test_unmatched_bold_delimiter_degrades_gracefully():
    spans = split_inline("open **never closed")

    assert spans == (Plain("open "), Bold("never closed"))


def test_heading_closes_open_paragraph_and_list():
    nodes = format_content("intro\n## Next\n* item\n### Sub")

    assert _shape(nodes) == [
        ("paragraph", "intro"),
        ("heading", 2, "Next"),
        ("list", ("item",)),
        ("heading", 3, "Sub"),
    ]


def test_bare_hash_without_space_is_text():
    nodes = format_content("##NoSpace")

    assert _shape(nodes) == [("paragraph", "##NoSpace")]


@pytest.mark.parametrize(
    "source",
    [
        "## Title\nBody text",
        "* a\n* b\n\nPara",
        "## Key **ideas**\nSome **bold** text\nacross lines\n\n* one\n* **two**\n### Wrap up\nDone",
    ],
)
def test_formatting_its_own_markdown_is_stable(source):
    first = format_content(source)

    second = format_content(to_markdown(first))

    assert second == first


def test_render_html_escapes_and_structures():
    out = render_html("## A <b>\n* **x** & y")

    assert out == "<div><h2><span>A &lt;b&gt;</span></h2><ul><li><span></span><strong>x</strong><span> &amp; y</span></li></ul></div>"


def test_render_html_fallback_keeps_raw_text():
    assert render_html(None) == '<div class="whitespace-pre-wrap"></div>'
