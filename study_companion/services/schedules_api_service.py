"""Business logic handlers for study schedule APIs."""

MAX_TASKS_PER_SCHEDULE = 500
MAX_TEXT_LEN = 200


def clean_task(item):
    """Return (task, error) for one submitted task; hours must be a positive number."""
    if not isinstance(item, dict):
        return None, 'must be an object'
    task_id = str(item.get('id', '') or '').strip()[:MAX_TEXT_LEN]
    if not task_id:
        return None, 'id is required'
    raw_hours = item.get('hours')
    try:
        hours = float(raw_hours)
    except (TypeError, ValueError):
        hours = 0
    if isinstance(raw_hours, bool) or not hours > 0:
        return None, 'hours must be a positive number'
    return {
        'id': task_id,
        'summaryId': str(item.get('summaryId', '') or '').strip()[:MAX_TEXT_LEN],
        'summaryTitle': str(item.get('summaryTitle', '') or '').strip()[:MAX_TEXT_LEN],
        'hours': hours,
        'isCompleted': bool(item.get('isCompleted', False)),
    }, None


def validate_tasks(items):
    """Return (tasks, error); a write is rejected as a whole when any task is invalid."""
    if not isinstance(items, list):
        return None, 'tasks must be a list'
    if len(items) > MAX_TASKS_PER_SCHEDULE:
        return None, f'at most {MAX_TASKS_PER_SCHEDULE} tasks are allowed'
    tasks = []
    for index, item in enumerate(items):
        task, error = clean_task(item)
        if error:
            return None, f'tasks[{index}]: {error}'
        tasks.append(task)
    return tasks, None


def sanitize_tasks(items):
    """Stored tasks that still pass validation, for reads."""
    if not isinstance(items, list):
        return []
    return [task for task, error in map(clean_task, items[:MAX_TASKS_PER_SCHEDULE]) if not error]


def get_schedule(app_ctx, request):
    db = app_ctx.require_db()
    if db is None:
        return app_ctx.jsonify({'error': 'Database unavailable'}), 503
    user_id = app_ctx.resolve_user_id(request)
    try:
        schedule_doc = app_ctx.schedules_repo.get_schedule_doc(db, user_id)
        data = schedule_doc.to_dict() if schedule_doc.exists else {}
        return app_ctx.jsonify({'items': sanitize_tasks((data or {}).get('tasks', []))})
    except Exception as e:
        app_ctx.logger.error(f"Error fetching schedule for {user_id}: {e}")
        return app_ctx.jsonify({'error': 'Could not load schedule'}), 500


def save_schedule(app_ctx, request):
    db = app_ctx.require_db()
    if db is None:
        return app_ctx.jsonify({'error': 'Database unavailable'}), 503
    user_id = app_ctx.resolve_user_id(request)
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return app_ctx.jsonify({'error': 'Invalid payload'}), 400
    date = str(payload.get('date', '') or '').strip()[:64]
    if not date:
        return app_ctx.jsonify({'error': 'date is required'}), 400
    tasks, error = validate_tasks(payload.get('tasks', []))
    if error:
        return app_ctx.jsonify({'error': error}), 400

    item = {
        'userId': user_id,
        'date': date,
        'tasks': tasks,
        'createdAt': app_ctx.utc_now_iso(),
    }
    try:
        app_ctx.schedules_repo.set_schedule_doc(db, user_id, {
            'user_id': user_id,
            'date': date,
            'tasks': item['tasks'],
            'updated_at': app_ctx.time.time(),
        })
    except Exception as e:
        app_ctx.logger.error(f"Error saving schedule for {user_id}: {e}")
        return app_ctx.jsonify({'error': 'Could not save schedule'}), 500
    return app_ctx.jsonify({'item': item}), 201
