"""DOCX export of stored summaries."""

import io

from docx import Document
from docx.shared import Pt

from study_companion.content_formatter import Bold, BulletList, Heading, format_content


def add_spans(paragraph, spans):
    for span in spans:
        if not span.text:
            continue
        run = paragraph.add_run(span.text)
        if isinstance(span, Bold):
            run.bold = True


def summary_to_docx(summary_text, title='Summary'):
    doc = Document()
    style = doc.styles['Normal']
    style.font.name = 'Calibri'
    style.font.size = Pt(11)
    doc.add_heading(str(title or 'Summary'), level=1)

    nodes = format_content(summary_text)
    if nodes is None:
        # Unstructured text keeps its line breaks.
        for line in str(summary_text or '').split('\n'):
            doc.add_paragraph(line)
        return doc

    for node in nodes:
        if isinstance(node, Heading):
            add_spans(doc.add_heading(level=node.level), node.spans)
        elif isinstance(node, BulletList):
            for item in node.items:
                add_spans(doc.add_paragraph(style='List Bullet'), item)
        else:
            add_spans(doc.add_paragraph(), node.spans)
    return doc


def summary_to_docx_bytes(summary_text, title='Summary'):
    buffer = io.BytesIO()
    summary_to_docx(summary_text, title).save(buffer)
    buffer.seek(0)
    return buffer
