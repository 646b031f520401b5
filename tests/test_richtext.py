from blogsite.models import RichTextBlock
from blogsite.richtext import as_html, as_text


def _blocks(*payloads: dict) -> list[RichTextBlock]:
    return [RichTextBlock.model_validate(payload) for payload in payloads]


def test_as_text_joins_blocks_with_space():
    blocks = _blocks(
        {"type": "paragraph", "text": "First block."},
        {"type": "image", "url": "https://images.test/a.png"},
        {"type": "paragraph", "text": "Second block."},
    )
    assert as_text(blocks) == "First block. Second block."


def test_paragraph_text_is_escaped():
    html = as_html(_blocks({"type": "paragraph", "text": "<script>x</script> & more"}))
    assert html == "<p>&lt;script&gt;x&lt;/script&gt; &amp; more</p>"


def test_spans_wrap_slices_of_text():
    html = as_html(
        _blocks(
            {
                "type": "paragraph",
                "text": "Read the docs now",
                "spans": [
                    {"start": 0, "end": 4, "type": "strong"},
                    {
                        "start": 9,
                        "end": 13,
                        "type": "hyperlink",
                        "data": {"link_type": "Web", "url": "https://docs.test"},
                    },
                ],
            }
        )
    )
    assert html == '<p><strong>Read</strong> the <a href="https://docs.test">docs</a> now</p>'


def test_nested_spans():
    html = as_html(
        _blocks(
            {
                "type": "paragraph",
                "text": "bold italic",
                "spans": [
                    {"start": 0, "end": 11, "type": "strong"},
                    {"start": 5, "end": 11, "type": "em"},
                ],
            }
        )
    )
    assert html == "<p><strong>bold </strong><strong><em>italic</em></strong></p>"


def test_list_items_are_grouped():
    html = as_html(
        _blocks(
            {"type": "list-item", "text": "one"},
            {"type": "list-item", "text": "two"},
            {"type": "o-list-item", "text": "first"},
            {"type": "paragraph", "text": "after"},
        )
    )
    assert html == "<ul><li>one</li><li>two</li></ul><ol><li>first</li></ol><p>after</p>"


def test_headings_preformatted_and_images():
    html = as_html(
        _blocks(
            {"type": "heading2", "text": "Title"},
            {"type": "preformatted", "text": "a < b"},
            {"type": "image", "url": "https://images.test/a.png", "alt": "A"},
        )
    )
    assert "<h2>Title</h2>" in html
    assert "<pre>a &lt; b</pre>" in html
    assert '<img src="https://images.test/a.png" alt="A" />' in html


def test_unknown_blocks_are_skipped():
    assert as_html(_blocks({"type": "mystery", "text": "?"})) == ""
