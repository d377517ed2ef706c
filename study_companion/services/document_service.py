"""Document classification and text extraction for uploaded lecture files."""

import io
import zipfile

from openpyxl import load_workbook
from pptx import Presentation
from pypdf import PdfReader

from study_companion.errors import DocumentExtractionError, UnsupportedInput

KIND_TEXT = 'txt'
KIND_PDF = 'pdf'
KIND_SPREADSHEET = 'xlsx'
KIND_SLIDES = 'pptx'

MIME_TYPES = {
    KIND_TEXT: 'text/plain',
    KIND_PDF: 'application/pdf',
    KIND_SPREADSHEET: 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    KIND_SLIDES: 'application/vnd.openxmlformats-officedocument.presentationml.presentation',
}
# Order matters: a file is classified by the first kind whose evidence matches.
KIND_ORDER = (KIND_TEXT, KIND_PDF, KIND_SPREADSHEET, KIND_SLIDES)


def allowed_file(filename, allowed_extensions):
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in allowed_extensions


def classify_document(filename, mimetype):
    """Return the document kind, trusting either the extension or the content type."""
    name = str(filename or '').lower()
    declared = str(mimetype or '').split(';', 1)[0].strip().lower()
    for kind in KIND_ORDER:
        if declared == MIME_TYPES[kind] or allowed_file(name, {kind}):
            return kind
    return ''


def get_mime_type(filename):
    parts = str(filename or '').rsplit('.', 1)
    ext = parts[1].lower() if len(parts) > 1 else ''
    return MIME_TYPES.get(ext, 'application/octet-stream')


def has_pdf_signature(data):
    return data[:5] == b'%PDF-'


def has_ooxml_signature(data, required_member):
    if data[:4] != b'PK\x03\x04':
        return False
    try:
        with zipfile.ZipFile(io.BytesIO(data), 'r') as archive:
            members = set(archive.namelist())
    except zipfile.BadZipFile:
        return False
    return '[Content_Types].xml' in members and required_member in members


def extract_plain_text(data):
    return data.decode('utf-8', errors='replace')


def extract_pdf_text(data):
    if not has_pdf_signature(data):
        raise DocumentExtractionError('Uploaded PDF file is invalid.')
    try:
        reader = PdfReader(io.BytesIO(data))
        parts = []
        for page in reader.pages:
            parts.append((page.extract_text() or '').strip())
            parts.append('\n\n')
        return ''.join(parts)
    except Exception as exc:
        raise DocumentExtractionError(f'Could not read PDF ({str(exc)[:180]}).') from exc


def extract_spreadsheet_text(data):
    if not has_ooxml_signature(data, 'xl/workbook.xml'):
        raise DocumentExtractionError('Uploaded spreadsheet is invalid.')
    try:
        workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except Exception as exc:
        raise DocumentExtractionError(f'Could not read spreadsheet ({str(exc)[:180]}).') from exc
    parts = []
    try:
        for sheet in workbook.worksheets:
            parts.append(f'Sheet: {sheet.title}\n\n')
            for row in sheet.iter_rows(values_only=True):
                parts.append('\t'.join('' if cell is None else str(cell) for cell in row) + '\n')
            parts.append('\n')
    finally:
        workbook.close()
    return ''.join(parts)


def extract_slides_text(data):
    if not has_ooxml_signature(data, 'ppt/presentation.xml'):
        raise DocumentExtractionError('Uploaded PPTX file is invalid.')
    try:
        presentation = Presentation(io.BytesIO(data))
    except Exception as exc:
        raise DocumentExtractionError(f'Could not read PPTX ({str(exc)[:180]}).') from exc
    parts = []
    for index, slide in enumerate(presentation.slides, start=1):
        parts.append(f'--- Slide {index} ---\n')
        for shape in slide.shapes:
            if not shape.has_text_frame:
                continue
            for paragraph in shape.text_frame.paragraphs:
                for run in paragraph.runs:
                    parts.append(run.text + ' ')
        parts.append('\n\n')
    return ''.join(parts)


EXTRACTORS = {
    KIND_TEXT: extract_plain_text,
    KIND_PDF: extract_pdf_text,
    KIND_SPREADSHEET: extract_spreadsheet_text,
    KIND_SLIDES: extract_slides_text,
}


def extract_text(filename, mimetype, data):
    kind = classify_document(filename, mimetype)
    if not kind:
        raise UnsupportedInput('Unsupported file type.')
    return kind, EXTRACTORS[kind](data)


def extract_uploaded_document(uploaded_file, *, max_bytes, secure_filename_fn):
    """Read a werkzeug upload and return the extraction payload.

    The kind comes from the client's filename; ``secure_filename`` drops
    non-ASCII characters and can swallow the extension, so it only shapes the
    echoed name.
    """
    if not uploaded_file or not uploaded_file.filename:
        raise DocumentExtractionError('File is required')
    raw_name = str(uploaded_file.filename)
    mimetype = str(uploaded_file.mimetype or '').lower()
    kind = classify_document(raw_name, mimetype)
    if not kind:
        raise UnsupportedInput('Unsupported file type.')
    safe_name = secure_filename_fn(raw_name) or 'document'
    data = uploaded_file.read(max_bytes + 1)
    if not data:
        raise DocumentExtractionError('Uploaded file is empty.')
    if len(data) > max_bytes:
        raise DocumentExtractionError('Uploaded file exceeds the server limit.')
    return {
        'text': EXTRACTORS[kind](data),
        'kind': kind,
        'filename': safe_name,
        'mimetype': mimetype or MIME_TYPES[kind],
        'size': len(data),
    }
