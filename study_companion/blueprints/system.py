import time

from flask import Blueprint, jsonify

from study_companion.services.prompt_registry import get_prompt_metadata

system_bp = Blueprint('system_api', __name__)


@system_bp.route('/api/health', methods=['GET'])
def health():
    from study_companion import server

    return jsonify({
        'ok': True,
        'service': 'backend',
        'time': server.utc_now_iso(),
        'uptime_seconds': max(0, round(time.time() - server.APP_BOOT_TS, 1)),
        'prompts': get_prompt_metadata(),
    })


@system_bp.route('/api/db', methods=['GET'])
def db_status():
    from study_companion import server

    db = server.require_db()
    if db is None:
        return jsonify({'connected': False, 'collections': [], 'error': server.firebase_init_error or 'Database unavailable'})
    try:
        collections = sorted(collection.id for collection in db.collections())
    except Exception as e:
        server.logger.warning(f"Could not list Firestore collections: {e}")
        return jsonify({'connected': False, 'collections': [], 'error': 'Could not reach database'})
    return jsonify({'connected': True, 'collections': collections})
