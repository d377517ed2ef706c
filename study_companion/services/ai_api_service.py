"""Business logic handlers for the AI endpoints."""

from study_companion.errors import MalformedResponse, RemoteUnavailable
from study_companion.services import ai_service

MAX_QUESTION_LEN = 4000


def _guard(app_ctx, request):
    if app_ctx.client is None:
        return app_ctx.jsonify({'error': 'AI service is not configured'}), 503
    actor = app_ctx.resolve_user_id(request)
    allowed, retry_after = app_ctx.check_rate_limit(
        key=f"ai:{app_ctx.normalize_rate_limit_key_part(actor)}:{app_ctx.client_address(request)}",
        limit=app_ctx.CONFIG.ai_rate_limit_max_requests,
        window_seconds=app_ctx.CONFIG.ai_rate_limit_window_seconds,
    )
    if not allowed:
        return app_ctx.build_rate_limited_response('Too many AI requests. Please wait and try again.', retry_after)
    return None


def _failure(app_ctx, action, error):
    app_ctx.log_event(app_ctx.logging.WARNING, 'ai_request_failed', action=action, error_type=type(error).__name__)
    return app_ctx.jsonify({'error': error.message}), 502


def generate_summary(app_ctx, request):
    blocked = _guard(app_ctx, request)
    if blocked is not None:
        return blocked
    payload = request.get_json(silent=True) or {}
    text = str(payload.get('text', '') or '').strip() if isinstance(payload, dict) else ''
    if not text:
        return app_ctx.jsonify({'error': 'text is required'}), 400
    try:
        summary = ai_service.generate_summary(text, client=app_ctx.client, model=app_ctx.CONFIG.gemini_model, logger=app_ctx.logger)
    except (RemoteUnavailable, MalformedResponse) as e:
        return _failure(app_ctx, 'summary', e)
    return app_ctx.jsonify({'summary': summary})


def generate_quiz(app_ctx, request):
    blocked = _guard(app_ctx, request)
    if blocked is not None:
        return blocked
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return app_ctx.jsonify({'error': 'Invalid payload'}), 400
    summary_content = str(payload.get('summaryContent', '') or '').strip()
    original_content = str(payload.get('originalContent', '') or '').strip()
    if not summary_content and not original_content:
        return app_ctx.jsonify({'error': 'summaryContent or originalContent is required'}), 400
    try:
        questions = ai_service.generate_quiz(
            summary_content,
            original_content,
            client=app_ctx.client,
            model=app_ctx.CONFIG.gemini_model,
            logger=app_ctx.logger,
        )
    except (RemoteUnavailable, MalformedResponse) as e:
        return _failure(app_ctx, 'quiz', e)
    return app_ctx.jsonify({'items': questions})


def answer_question(app_ctx, request):
    blocked = _guard(app_ctx, request)
    if blocked is not None:
        return blocked
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return app_ctx.jsonify({'error': 'Invalid payload'}), 400
    question = str(payload.get('question', '') or '').strip()[:MAX_QUESTION_LEN]
    if not question:
        return app_ctx.jsonify({'error': 'question is required'}), 400
    summary_content = str(payload.get('summaryContent', '') or '')
    original_content = str(payload.get('originalContent', '') or '')
    try:
        if summary_content.strip() or original_content.strip():
            answer = ai_service.answer_question_from_notes(
                question,
                summary_content,
                original_content,
                client=app_ctx.client,
                model=app_ctx.CONFIG.gemini_model,
                logger=app_ctx.logger,
            )
        else:
            answer = ai_service.chat_with_assistant(question, client=app_ctx.client, model=app_ctx.CONFIG.gemini_model, logger=app_ctx.logger)
    except (RemoteUnavailable, MalformedResponse) as e:
        return _failure(app_ctx, 'answer', e)
    return app_ctx.jsonify({'answer': answer})
