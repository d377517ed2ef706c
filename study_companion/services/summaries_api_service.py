"""Business logic handlers for summary APIs."""

import json

MAX_SUMMARIES_PER_USER = 500
MAX_TITLE_LEN = 200
MAX_TEXT_LEN = 900000


def _original_content(document_data):
    content_json = document_data.get('content_json')
    if not content_json:
        return ''
    if isinstance(content_json, dict) and isinstance(content_json.get('text'), str):
        return content_json['text']
    return json.dumps(content_json)


def serialize_note(note_id, note, document_data=None):
    document_data = document_data or {}
    original = note.get('original_content', '') or _original_content(document_data)
    return {
        'id': note_id,
        'title': note.get('title') or document_data.get('filename') or 'Untitled',
        'summaryContent': note.get('sum_notes', ''),
        'originalContent': original,
        'createdAt': note.get('created_at', ''),
    }


def serialize_document(doc_id, document_data):
    return {
        'id': doc_id,
        'userId': document_data.get('user_id', ''),
        'filename': document_data.get('filename', ''),
        'mimetype': document_data.get('mimetype', ''),
        'size': document_data.get('size', 0),
        'contentJson': document_data.get('content_json'),
        'createdAt': document_data.get('created_at', ''),
    }


def list_summaries(app_ctx, request):
    db = app_ctx.require_db()
    if db is None:
        return app_ctx.jsonify({'error': 'Database unavailable'}), 503
    user_id = app_ctx.resolve_user_id(request)
    try:
        note_docs = app_ctx.summaries_repo.list_notes_by_user(db, user_id, MAX_SUMMARIES_PER_USER)
        rows = []
        for doc in note_docs:
            note = doc.to_dict() or {}
            document_data = {}
            doc_id = note.get('doc_id', '')
            if doc_id:
                try:
                    source_doc = app_ctx.summaries_repo.get_document_doc(db, doc_id)
                    if source_doc.exists:
                        document_data = source_doc.to_dict() or {}
                except Exception as join_error:
                    app_ctx.logger.warning(f"Could not load source document {doc_id}: {join_error}")
            rows.append((note.get('created_ts', 0), serialize_note(doc.id, note, document_data)))
        rows.sort(key=lambda row: row[0], reverse=True)
        return app_ctx.jsonify({'items': [row[1] for row in rows]})
    except Exception as e:
        app_ctx.logger.error(f"Error fetching summaries for {user_id}: {e}")
        return app_ctx.jsonify({'error': 'Could not load summaries'}), 500


def create_summary(app_ctx, request):
    db = app_ctx.require_db()
    if db is None:
        return app_ctx.jsonify({'error': 'Database unavailable'}), 503
    user_id = app_ctx.resolve_user_id(request)
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return app_ctx.jsonify({'error': 'Invalid payload'}), 400
    title = str(payload.get('title', '') or '').strip()[:MAX_TITLE_LEN]
    content = str(payload.get('content') or payload.get('summaryContent') or '').strip()[:MAX_TEXT_LEN]
    if not title or not content:
        return app_ctx.jsonify({'error': 'title and content are required'}), 400

    try:
        doc_ref = app_ctx.summaries_repo.create_note_doc_ref(db)
        note = {
            'user_id': user_id,
            'doc_id': '',
            'title': title,
            'sum_notes': content,
            'original_content': str(payload.get('originalContent', '') or '')[:MAX_TEXT_LEN],
            'created_at': app_ctx.utc_now_iso(),
            'created_ts': app_ctx.time.time(),
        }
        doc_ref.set(note)
        return app_ctx.jsonify({'item': serialize_note(doc_ref.id, note)}), 201
    except Exception as e:
        app_ctx.logger.error(f"Error creating summary for {user_id}: {e}")
        return app_ctx.jsonify({'error': 'Could not create summary'}), 500


def save_summary_artifact(app_ctx, request):
    db = app_ctx.require_db()
    if db is None:
        return app_ctx.jsonify({'error': 'Database unavailable'}), 503
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return app_ctx.jsonify({'error': 'Invalid payload'}), 400
    user_id = app_ctx.resolve_user_id(request, body=payload)
    sum_notes = str(payload.get('sum_notes', '') or '').strip()[:MAX_TEXT_LEN]
    if not sum_notes:
        return app_ctx.jsonify({'error': 'sum_notes is required'}), 400

    try:
        size = int(payload.get('size', 0) or 0)
    except (TypeError, ValueError):
        size = 0
    now_iso = app_ctx.utc_now_iso()
    now_ts = app_ctx.time.time()
    document_data = {
        'user_id': user_id,
        'filename': str(payload.get('filename', '') or '')[:255],
        'mimetype': str(payload.get('mimetype', '') or '')[:120],
        'size': max(0, size),
        'content_json': payload.get('contentJson'),
        'created_at': now_iso,
    }
    document_ref = app_ctx.summaries_repo.create_document_doc_ref(db)
    try:
        document_ref.set(document_data)
    except Exception as e:
        app_ctx.logger.error(f"Error saving source document for {user_id}: {e}")
        return app_ctx.jsonify({'error': 'Failed to save summary and document'}), 500

    note = {
        'user_id': user_id,
        'doc_id': document_ref.id,
        'title': str(payload.get('title', '') or '').strip()[:MAX_TITLE_LEN],
        'sum_notes': sum_notes,
        'created_at': now_iso,
        'created_ts': now_ts,
    }
    note_ref = app_ctx.summaries_repo.create_note_doc_ref(db)
    try:
        note_ref.set(note)
    except Exception as e:
        app_ctx.logger.error(f"Error saving summarised note for {user_id}: {e}")
        try:
            app_ctx.summaries_repo.delete_document_doc(db, document_ref.id)
        except Exception as cleanup_error:
            app_ctx.logger.warning(f"Could not remove orphaned document {document_ref.id}: {cleanup_error}")
        return app_ctx.jsonify({'error': 'Failed to save summary and document'}), 500

    app_ctx.log_event(app_ctx.logging.INFO, 'summary_saved', user_id=user_id, doc_id=document_ref.id, note_id=note_ref.id)
    return app_ctx.jsonify({
        'doc': serialize_document(document_ref.id, document_data),
        'note': serialize_note(note_ref.id, note, document_data),
    }), 201


def export_summary_docx(app_ctx, request, note_id):
    db = app_ctx.require_db()
    if db is None:
        return app_ctx.jsonify({'error': 'Database unavailable'}), 503
    user_id = app_ctx.resolve_user_id(request)
    try:
        note_doc = app_ctx.summaries_repo.get_note_doc(db, note_id)
        if not note_doc.exists:
            return app_ctx.jsonify({'error': 'Summary not found'}), 404
        note = note_doc.to_dict() or {}
        if note.get('user_id', '') != user_id:
            return app_ctx.jsonify({'error': 'Forbidden'}), 403
        title = note.get('title') or 'Summary'
        buffer = app_ctx.export_service.summary_to_docx_bytes(note.get('sum_notes', ''), title)
        return app_ctx.send_file(
            buffer,
            mimetype='application/vnd.openxmlformats-officedocument.wordprocessingml.document',
            as_attachment=True,
            download_name=f"summary-{note_id}.docx",
        )
    except Exception as e:
        app_ctx.logger.error(f"Error exporting summary {note_id}: {e}")
        return app_ctx.jsonify({'error': 'Could not export summary'}), 500
