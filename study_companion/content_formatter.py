"""Render the small markdown subset produced by the summary prompt.

Supported blocks are ``## `` and ``### `` headings, ``* ``/``- `` bullet items
and paragraphs separated by blank lines. Inline ``**`` toggles bold.
"""

from __future__ import annotations

import enum
import html
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

BOLD_DELIMITER = '**'


@dataclass(frozen=True)
class Plain:
    text: str


@dataclass(frozen=True)
class Bold:
    text: str


InlineSpan = Union[Plain, Bold]
Spans = Tuple[InlineSpan, ...]


@dataclass(frozen=True)
class Heading:
    level: int
    spans: Spans


@dataclass(frozen=True)
class Paragraph:
    spans: Spans


@dataclass(frozen=True)
class BulletList:
    items: Tuple[Spans, ...]


RenderNode = Union[Heading, Paragraph, BulletList]


class BlockState(enum.Enum):
    NONE = 'none'
    IN_LIST = 'in_list'
    IN_PARAGRAPH = 'in_paragraph'


def split_inline(text: str) -> Spans:
    # Splitting is positional; an unmatched trailing ** simply bolds to the end.
    parts = text.split(BOLD_DELIMITER)
    return tuple(Bold(part) if index % 2 == 1 else Plain(part) for index, part in enumerate(parts))


def flush(state: BlockState, buffer: List[str]) -> Optional[RenderNode]:
    if not buffer:
        return None
    if state is BlockState.IN_LIST:
        return BulletList(tuple(split_inline(item) for item in buffer))
    if state is BlockState.IN_PARAGRAPH:
        return Paragraph(split_inline(' '.join(buffer)))
    return None


def _classify(line: str):
    if line.startswith('## '):
        return 'heading', 2, line[3:]
    if line.startswith('### '):
        return 'heading', 3, line[4:]
    if line.startswith('* ') or line.startswith('- '):
        return 'item', 0, line[2:]
    if line:
        return 'text', 0, line
    return 'blank', 0, ''


def format_content(content: str) -> Optional[List[RenderNode]]:
    """Return the block nodes for ``content``, or None when nothing was recognised.

    None tells the caller to show the raw text verbatim.
    """
    nodes: List[RenderNode] = []
    state = BlockState.NONE
    buffer: List[str] = []

    def close():
        nonlocal state, buffer
        node = flush(state, buffer)
        if node is not None:
            nodes.append(node)
        state = BlockState.NONE
        buffer = []

    for raw_line in str(content or '').split('\n'):
        kind, level, text = _classify(raw_line.strip())
        if kind == 'heading':
            close()
            nodes.append(Heading(level, split_inline(text)))
        elif kind == 'item':
            if state is not BlockState.IN_LIST:
                close()
                state = BlockState.IN_LIST
            buffer.append(text)
        elif kind == 'text':
            if state is not BlockState.IN_PARAGRAPH:
                close()
                state = BlockState.IN_PARAGRAPH
            buffer.append(text)
        else:
            close()
    close()

    return nodes or None


def spans_to_text(spans: Spans) -> str:
    return ''.join(span.text for span in spans)


def _spans_to_markdown(spans: Spans) -> str:
    return BOLD_DELIMITER.join(span.text for span in spans)


def to_markdown(nodes: List[RenderNode]) -> str:
    """Flatten nodes back into the authoring convention."""
    blocks = []
    for node in nodes:
        if isinstance(node, Heading):
            blocks.append(('#' * node.level) + ' ' + _spans_to_markdown(node.spans))
        elif isinstance(node, BulletList):
            blocks.append('\n'.join('* ' + _spans_to_markdown(item) for item in node.items))
        else:
            blocks.append(_spans_to_markdown(node.spans))
    return '\n\n'.join(blocks)


def _spans_to_html(spans: Spans) -> str:
    parts = []
    for span in spans:
        escaped = html.escape(span.text)
        parts.append(f'<strong>{escaped}</strong>' if isinstance(span, Bold) else f'<span>{escaped}</span>')
    return ''.join(parts)


def render_html(content: str) -> str:
    nodes = format_content(content)
    if nodes is None:
        return f'<div class="whitespace-pre-wrap">{html.escape(str(content or ""))}</div>'
    out = []
    for node in nodes:
        if isinstance(node, Heading):
            out.append(f'<h{node.level}>{_spans_to_html(node.spans)}</h{node.level}>')
        elif isinstance(node, BulletList):
            items = ''.join(f'<li>{_spans_to_html(item)}</li>' for item in node.items)
            out.append(f'<ul>{items}</ul>')
        else:
            out.append(f'<p>{_spans_to_html(node.spans)}</p>')
    return '<div>' + ''.join(out) + '</div>'
