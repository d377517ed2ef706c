"""Business logic handlers for quiz history APIs."""

from study_companion.models import compute_percentage, round_half_up

MAX_HISTORY_PER_USER = 1000


def _number(value):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def serialize_entry(entry_id, entry):
    return {
        'id': entry_id,
        'summaryTitle': entry.get('topic') or '',
        'score': entry.get('score', 0),
        'totalQuestions': entry.get('total', 0),
        'percentage': entry.get('percentage', 0),
        'createdAt': entry.get('created_at', ''),
    }


def list_history(app_ctx, request):
    db = app_ctx.require_db()
    if db is None:
        return app_ctx.jsonify({'error': 'Database unavailable'}), 503
    user_id = app_ctx.resolve_user_id(request)
    try:
        docs = app_ctx.quiz_repo.list_latest_entries_by_user(db, user_id, MAX_HISTORY_PER_USER)
        rows = []
        for doc in docs:
            entry = doc.to_dict() or {}
            rows.append((entry.get('created_ts', 0), serialize_entry(doc.id, entry)))
        rows.sort(key=lambda row: row[0])
        return app_ctx.jsonify({'items': [row[1] for row in rows]})
    except Exception as e:
        app_ctx.logger.error(f"Error fetching quiz history for {user_id}: {e}")
        return app_ctx.jsonify({'error': 'Could not load quiz history'}), 500


def add_history(app_ctx, request):
    db = app_ctx.require_db()
    if db is None:
        return app_ctx.jsonify({'error': 'Database unavailable'}), 503
    user_id = app_ctx.resolve_user_id(request)
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return app_ctx.jsonify({'error': 'Invalid payload'}), 400

    # Older clients send total/topic, newer ones totalQuestions/summaryTitle.
    score = _number(payload.get('score'))
    total = _number(payload.get('total'))
    if total is None:
        total = _number(payload.get('totalQuestions'))
    if score is None or total is None or total == 0:
        return app_ctx.jsonify({'error': 'score and total (or totalQuestions) must be valid numbers'}), 400
    percentage = _number(payload.get('percentage'))
    if percentage is None:
        percentage = compute_percentage(score, total)
    else:
        percentage = round_half_up(percentage)
    topic = str(payload.get('topic') or payload.get('summaryTitle') or '').strip()[:200]

    entry = {
        'user_id': user_id,
        'score': score,
        'total': total,
        'percentage': percentage,
        'topic': topic or None,
        'created_at': app_ctx.utc_now_iso(),
        'created_ts': app_ctx.time.time(),
    }
    try:
        doc_ref = app_ctx.quiz_repo.create_entry_doc_ref(db)
        doc_ref.set(entry)
    except Exception as e:
        app_ctx.logger.error(f"Error saving quiz history for {user_id}: {e}")
        return app_ctx.jsonify({'error': 'Could not save quiz result'}), 500
    return app_ctx.jsonify({'item': serialize_entry(doc_ref.id, entry)}), 201
