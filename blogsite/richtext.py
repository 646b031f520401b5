"""Plain-text and HTML serialization of CMS rich text fields."""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from markupsafe import Markup, escape

from .models import RichTextBlock, RichTextSpan

logger = logging.getLogger(__name__)

_SPAN_TAGS = {"strong": "strong", "em": "em"}
_LIST_TAGS = {"list-item": "ul", "o-list-item": "ol"}


def as_text(blocks: Iterable[RichTextBlock], join: str = " ") -> str:
    """Concatenate the text of every block, separated by ``join``."""

    return join.join(block.text for block in blocks if block.text)


def _open_tag(span: RichTextSpan) -> str:
    if span.type == "hyperlink":
        data = span.data or {}
        href = data.get("url")
        if not href and data.get("uid"):
            href = f"../{data['uid']}/"
        attrs = f' href="{escape(href or "#")}"'
        if data.get("target"):
            attrs += f' target="{escape(data["target"])}" rel="noopener noreferrer"'
        return f"<a{attrs}>"
    if span.type == "label":
        label = (span.data or {}).get("label", "")
        return f'<span class="{escape(label)}">'
    return f"<{_SPAN_TAGS.get(span.type, 'span')}>"


def _close_tag(span: RichTextSpan) -> str:
    if span.type == "hyperlink":
        return "</a>"
    if span.type in _SPAN_TAGS:
        return f"</{_SPAN_TAGS[span.type]}>"
    return "</span>"


def _render_inline(text: str, spans: Sequence[RichTextSpan]) -> str:
    """Escape ``text`` and wrap the slices covered by ``spans``."""

    if not spans:
        return str(escape(text)).replace("\n", "<br />")

    length = len(text)
    boundaries = {0, length}
    for span in spans:
        boundaries.add(max(0, min(span.start, length)))
        boundaries.add(max(0, min(span.end, length)))
    points = sorted(boundaries)
    ordered = sorted(spans, key=lambda s: (s.start, -s.end))

    parts: List[str] = []
    for start, end in zip(points, points[1:]):
        active = [s for s in ordered if s.start <= start and s.end >= end]
        chunk = str(escape(text[start:end])).replace("\n", "<br />")
        opening = "".join(_open_tag(s) for s in active)
        closing = "".join(_close_tag(s) for s in reversed(active))
        parts.append(f"{opening}{chunk}{closing}")
    return "".join(parts)


def _render_block(block: RichTextBlock) -> str:
    btype = block.type
    if btype == "paragraph":
        return f"<p>{_render_inline(block.text, block.spans)}</p>"
    if btype.startswith("heading") and btype[len("heading"):].isdigit():
        level = min(max(int(btype[len("heading"):]), 1), 6)
        return f"<h{level}>{_render_inline(block.text, block.spans)}</h{level}>"
    if btype == "preformatted":
        return f"<pre>{escape(block.text)}</pre>"
    if btype in _LIST_TAGS:
        return f"<li>{_render_inline(block.text, block.spans)}</li>"
    if btype == "image":
        if not block.url:
            return ""
        return (
            f'<figure class="block-img"><img src="{escape(block.url)}" '
            f'alt="{escape(block.alt or "")}" /></figure>'
        )
    if btype == "embed":
        oembed = getattr(block, "oembed", None) or {}
        embed_url = oembed.get("embed_url", "")
        # oEmbed markup comes from the CMS and is inserted as-is.
        return f'<div data-oembed="{escape(embed_url)}">{oembed.get("html") or ""}</div>'
    logger.debug("Skipping unsupported rich text block type %r", btype)
    return ""


def as_html(blocks: Iterable[RichTextBlock]) -> Markup:
    """Render rich text blocks to HTML, grouping list items into lists."""

    parts: List[str] = []
    open_list: str | None = None
    for block in blocks:
        list_tag = _LIST_TAGS.get(block.type)
        if list_tag != open_list:
            if open_list:
                parts.append(f"</{open_list}>")
            if list_tag:
                parts.append(f"<{list_tag}>")
            open_list = list_tag
        parts.append(_render_block(block))
    if open_list:
        parts.append(f"</{open_list}>")
    return Markup("".join(parts))


__all__ = ["as_html", "as_text"]
